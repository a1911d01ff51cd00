"""TieredPasteWriter tests: write ordering across the two stores."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from pastebin.application.services.tiered_writer import TieredPasteWriter
from pastebin.domain.enums import PasteLocation
from pastebin.domain.exceptions import InvariantViolationException
from pastebin.infrastructure.exceptions import StorageUploadError
from pastebin.schemas.paste_metadata import PasteMetadata


def make_metadata(location: PasteLocation) -> PasteMetadata:
    return PasteMetadata(
        location=location,
        passwd="password123",
        last_modified_at_unix=10,
        created_at_unix=10,
        will_expire_at_unix=20,
        size_bytes=4,
    )


@pytest.fixture
def stores():
    """Mock stores sharing one parent so call order across them is visible."""
    parent = MagicMock()
    parent.kv.put = AsyncMock()
    parent.kv.delete = AsyncMock()
    parent.blob.put = AsyncMock()
    parent.blob.delete = AsyncMock()
    return parent


@pytest.mark.asyncio
async def test_large_commit_writes_body_before_metadata(stores) -> None:
    writer = TieredPasteWriter(stores.kv, stores.blob)
    meta = make_metadata(PasteLocation.LARGE_STORE)

    await writer.commit("abcd", meta, body=b"data", expire_at=99)

    names = [c[0] for c in stores.mock_calls]
    assert names == ["blob.put", "kv.put"]
    stores.blob.put.assert_awaited_once_with("abcd", b"data")
    stores.kv.put.assert_awaited_once_with(
        "abcd", b"", metadata=meta.to_storage(), expire_at=99
    )


@pytest.mark.asyncio
async def test_failed_body_write_commits_no_metadata(stores) -> None:
    stores.blob.put = AsyncMock(side_effect=StorageUploadError("abcd", "disk full"))
    writer = TieredPasteWriter(stores.kv, stores.blob)

    with pytest.raises(StorageUploadError):
        await writer.commit("abcd", make_metadata(PasteLocation.LARGE_STORE), body=b"d", expire_at=99)
    stores.kv.put.assert_not_called()


@pytest.mark.asyncio
async def test_multipart_commit_skips_body(stores) -> None:
    writer = TieredPasteWriter(stores.kv, stores.blob)
    await writer.commit("abcd", make_metadata(PasteLocation.LARGE_STORE), body=None, expire_at=99)
    stores.blob.put.assert_not_called()
    stores.kv.put.assert_awaited_once()


@pytest.mark.asyncio
async def test_small_commit_keeps_body_in_kv(stores) -> None:
    writer = TieredPasteWriter(stores.kv, stores.blob)
    meta = make_metadata(PasteLocation.SMALL_STORE)
    await writer.commit("abcd", meta, body=b"data", expire_at=99)
    stores.blob.put.assert_not_called()
    stores.kv.put.assert_awaited_once_with("abcd", b"data", metadata=meta.to_storage(), expire_at=99)


@pytest.mark.asyncio
async def test_small_commit_without_body_is_invariant_violation(stores) -> None:
    writer = TieredPasteWriter(stores.kv, stores.blob)
    with pytest.raises(InvariantViolationException):
        await writer.commit("abcd", make_metadata(PasteLocation.SMALL_STORE), body=None, expire_at=99)


@pytest.mark.asyncio
async def test_remove_deletes_metadata_first(stores) -> None:
    writer = TieredPasteWriter(stores.kv, stores.blob)
    await writer.remove("abcd", make_metadata(PasteLocation.LARGE_STORE))
    assert [c[0] for c in stores.mock_calls] == ["kv.delete", "blob.delete"]
    stores.blob.delete.assert_awaited_once_with(["abcd"])


@pytest.mark.asyncio
async def test_remove_small_paste_leaves_large_store_alone(stores) -> None:
    writer = TieredPasteWriter(stores.kv, stores.blob)
    await writer.remove("abcd", make_metadata(PasteLocation.SMALL_STORE))
    stores.blob.delete.assert_not_called()


def test_migrate_without_metadata_is_invariant_violation() -> None:
    with pytest.raises(InvariantViolationException) as exc_info:
        TieredPasteWriter.migrate("abcd", None)
    assert exc_info.value.details == {"name": "abcd"}


@pytest.mark.asyncio
async def test_small_commit_over_expired_large_record_drops_old_object(stores) -> None:
    writer = TieredPasteWriter(stores.kv, stores.blob)
    meta = make_metadata(PasteLocation.SMALL_STORE)

    await writer.commit(
        "abcd",
        meta,
        body=b"data",
        expire_at=99,
        replaces=make_metadata(PasteLocation.LARGE_STORE),
    )

    assert [c[0] for c in stores.mock_calls] == ["blob.delete", "kv.put"]
    stores.blob.delete.assert_awaited_once_with(["abcd"])


@pytest.mark.asyncio
async def test_commit_over_expired_small_record_leaves_large_store_alone(stores) -> None:
    writer = TieredPasteWriter(stores.kv, stores.blob)
    await writer.commit(
        "abcd",
        make_metadata(PasteLocation.SMALL_STORE),
        body=b"data",
        expire_at=99,
        replaces=make_metadata(PasteLocation.SMALL_STORE),
    )
    stores.blob.delete.assert_not_called()
