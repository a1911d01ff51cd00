"""LocalBlobStore tests: objects, path validation, multipart staging."""

import hashlib

import pytest

from pastebin.infrastructure.blob.local_store import LocalBlobStore
from pastebin.infrastructure.blob.protocol import UploadedPart
from pastebin.infrastructure.exceptions import (
    InvalidMultipartPartError,
    MultipartUploadNotFoundError,
    StoragePermissionError,
)


@pytest.fixture
def store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(str(tmp_path))


async def read_body(obj) -> bytes:
    return b"".join([chunk async for chunk in obj.body])


@pytest.mark.asyncio
async def test_put_get_delete(store) -> None:
    stored = await store.put("abcd", b"hello")
    assert stored.size == 5
    assert stored.etag == hashlib.md5(b"hello").hexdigest()

    obj = await store.get("abcd")
    assert obj.size == 5
    assert obj.etag == stored.etag
    assert await read_body(obj) == b"hello"

    await store.delete(["abcd", "never-existed"])
    assert await store.get("abcd") is None


@pytest.mark.asyncio
async def test_put_replaces_object(store) -> None:
    await store.put("abcd", b"one")
    await store.put("abcd", b"two two")
    obj = await store.get("abcd")
    assert await read_body(obj) == b"two two"


@pytest.mark.asyncio
async def test_large_body_is_streamed_in_chunks(store) -> None:
    data = b"q" * (LocalBlobStore.CHUNK_SIZE * 2 + 10)
    await store.put("big", data)
    obj = await store.get("big")
    chunks = [chunk async for chunk in obj.body]
    assert len(chunks) == 3
    assert b"".join(chunks) == data


@pytest.mark.asyncio
async def test_path_traversal_is_rejected(store) -> None:
    with pytest.raises(StoragePermissionError):
        await store.put("../escape", b"x")
    with pytest.raises(StoragePermissionError):
        await store.get("../../etc/passwd")


@pytest.mark.asyncio
async def test_multipart_orders_parts_by_number(store) -> None:
    ref = await store.create_multipart_upload("~upload")
    upload = store.resume_multipart_upload(ref.key, ref.upload_id)
    p3 = await upload.upload_part(3, b"ccc")
    p1 = await upload.upload_part(1, b"a")
    p2 = await upload.upload_part(2, b"bb")

    stored = await upload.complete([p3, p1, p2])

    assert stored.size == 6
    assert stored.etag.endswith("-3")
    obj = await store.get("~upload")
    assert await read_body(obj) == b"abbccc"


@pytest.mark.asyncio
async def test_multipart_accepts_quoted_etags(store) -> None:
    ref = await store.create_multipart_upload("abcd")
    upload = store.resume_multipart_upload(ref.key, ref.upload_id)
    part = await upload.upload_part(1, b"data")
    stored = await upload.complete([UploadedPart(part_number=1, etag=f'"{part.etag}"')])
    assert stored.size == 4


@pytest.mark.asyncio
async def test_multipart_rejects_bad_part_lists(store) -> None:
    ref = await store.create_multipart_upload("abcd")
    upload = store.resume_multipart_upload(ref.key, ref.upload_id)
    part = await upload.upload_part(1, b"data")

    with pytest.raises(InvalidMultipartPartError):
        await upload.complete([UploadedPart(part_number=1, etag="0" * 32)])
    with pytest.raises(InvalidMultipartPartError):
        await upload.complete([part, UploadedPart(part_number=2, etag=part.etag)])
    with pytest.raises(InvalidMultipartPartError):
        await upload.complete([part, part])
    with pytest.raises(InvalidMultipartPartError):
        await upload.upload_part(10_001, b"x")


@pytest.mark.asyncio
async def test_session_is_bound_to_its_key(store) -> None:
    ref = await store.create_multipart_upload("abcd")
    other = store.resume_multipart_upload("wxyz", ref.upload_id)
    with pytest.raises(MultipartUploadNotFoundError):
        await other.upload_part(1, b"x")
