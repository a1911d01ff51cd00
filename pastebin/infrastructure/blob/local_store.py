"""Local filesystem large-object store with path validation and atomic writes."""

from __future__ import annotations

import asyncio
import hashlib
import json
import os
import shutil
import tempfile
import uuid
from collections.abc import AsyncIterator, Sequence
from pathlib import Path
from typing import Any, cast

import aiofiles
import aiofiles.os

from pastebin.infrastructure.blob.protocol import (
    BlobObject,
    MultipartUploadRef,
    StoredObject,
    UploadedPart,
)
from pastebin.infrastructure.exceptions import (
    InvalidMultipartPartError,
    MultipartUploadNotFoundError,
    StorageDeleteError,
    StorageDownloadError,
    StoragePermissionError,
    StorageUploadError,
)
from pastebin.shared.utils.datetime import utc_now

MAX_PART_NUMBER = 10_000


def _strip_etag(etag: str) -> str:
    return etag.strip().strip('"')


class LocalBlobStore:
    """Filesystem store: objects under objects/, multipart sessions under multipart/.

    Keys are validated against the root. Writes use temp file + rename.
    Size and etag are kept in a .meta.json sidecar. Each multipart session
    is a directory named by its upload id holding the target key and one
    file per part.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(self, root: str) -> None:
        """Initialize local storage.

        Args:
            root: Base directory for objects and multipart staging.
        """
        self.root = Path(root).resolve()
        self.objects_root = self.root / "objects"
        self.multipart_root = self.root / "multipart"
        self.objects_root.mkdir(parents=True, exist_ok=True, mode=0o750)
        self.multipart_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, key: str, base: Path | None = None) -> Path:
        """Resolve and validate path under base. Raises StoragePermissionError if traversal."""
        base = base or self.objects_root
        full_path = (base / key).resolve()
        try:
            full_path.relative_to(base)
        except ValueError as e:
            raise StoragePermissionError(key, "path_validation") from e
        if full_path == base:
            raise StoragePermissionError(key, "path_validation")
        return full_path

    @staticmethod
    def _meta_path(file_path: Path) -> Path:
        return file_path.with_name(file_path.name + ".meta.json")

    async def _write_metadata(self, file_path: Path, metadata: dict[str, Any]) -> None:
        """Write JSON sidecar."""
        async with aiofiles.open(self._meta_path(file_path), "w") as f:
            await f.write(json.dumps(metadata, indent=2))

    async def _read_metadata(self, file_path: Path) -> dict[str, Any]:
        """Read JSON sidecar or empty dict."""
        meta_path = self._meta_path(file_path)
        if not meta_path.exists():
            return {}
        async with aiofiles.open(meta_path, "r") as f:
            result = json.loads(await f.read())
            return cast(dict[str, Any], result) if isinstance(result, dict) else {}

    async def _atomic_write(self, target_path: Path, chunks: Sequence[Path] | bytes) -> tuple[int, str]:
        """Write bytes (or the concatenation of files) to target via temp + rename.

        Returns:
            (size, md5 hex) of what was written.
        """
        target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
        temp_fd, temp_path = tempfile.mkstemp(dir=target_path.parent, prefix=".tmp_")
        os.close(temp_fd)
        md5 = hashlib.md5()
        size = 0
        try:
            async with aiofiles.open(temp_path, "wb") as out:
                if isinstance(chunks, bytes):
                    await out.write(chunks)
                    md5.update(chunks)
                    size = len(chunks)
                else:
                    for part_path in chunks:
                        async with aiofiles.open(part_path, "rb") as src:
                            while True:
                                chunk = await src.read(self.CHUNK_SIZE)
                                if not chunk:
                                    break
                                await out.write(chunk)
                                md5.update(chunk)
                                size += len(chunk)
            await aiofiles.os.rename(temp_path, target_path)
        finally:
            if Path(temp_path).exists():
                os.unlink(temp_path)
        return size, md5.hexdigest()

    async def _stream(self, file_path: Path, key: str) -> AsyncIterator[bytes]:
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while True:
                    chunk = await f.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk
        except OSError as e:
            raise StorageDownloadError(key, str(e)) from e

    async def get(self, key: str) -> BlobObject | None:
        """Return the object with a streaming body, or None if absent."""
        file_path = self._get_full_path(key)
        if not file_path.exists():
            return None
        meta = await self._read_metadata(file_path)
        return BlobObject(
            key=key,
            size=int(meta.get("size", file_path.stat().st_size)),
            etag=str(meta.get("etag", "")),
            body=self._stream(file_path, key),
        )

    async def put(self, key: str, data: bytes) -> StoredObject:
        """Create or replace an object atomically."""
        target_path = self._get_full_path(key)
        try:
            size, etag = await self._atomic_write(target_path, bytes(data))
            await self._write_metadata(
                target_path,
                {"key": key, "size": size, "etag": etag, "uploaded_at": utc_now().isoformat()},
            )
        except OSError as e:
            raise StorageUploadError(key, str(e)) from e
        return StoredObject(key=key, size=size, etag=etag)

    async def delete(self, keys: str | Sequence[str]) -> None:
        """Delete objects and their sidecars; absent keys are ignored."""
        key_list = [keys] if isinstance(keys, str) else list(keys)
        try:
            for key in key_list:
                file_path = self._get_full_path(key)
                for path in (file_path, self._meta_path(file_path)):
                    if path.exists():
                        await aiofiles.os.remove(path)
        except OSError as e:
            raise StorageDeleteError(key_list, str(e)) from e

    async def create_multipart_upload(self, key: str) -> MultipartUploadRef:
        """Create a staging directory recording the target key."""
        self._get_full_path(key)
        upload_id = uuid.uuid4().hex
        staging = self.multipart_root / upload_id
        try:
            await aiofiles.os.makedirs(staging, exist_ok=False)
            async with aiofiles.open(staging / "key", "w") as f:
                await f.write(key)
        except OSError as e:
            raise StorageUploadError(key, str(e)) from e
        return MultipartUploadRef(key=key, upload_id=upload_id)

    def resume_multipart_upload(self, key: str, upload_id: str) -> LocalMultipartUpload:
        """Handle for a session created by create_multipart_upload."""
        return LocalMultipartUpload(self, key, upload_id)


class LocalMultipartUpload:
    """One multipart session of LocalBlobStore."""

    def __init__(self, store: LocalBlobStore, key: str, upload_id: str) -> None:
        self.store = store
        self.key = key
        self.upload_id = upload_id

    async def _staging_dir(self) -> Path:
        """Staging directory, verified to belong to self.key."""
        try:
            staging = self.store._get_full_path(self.upload_id, self.store.multipart_root)
        except StoragePermissionError as e:
            raise MultipartUploadNotFoundError(self.key, self.upload_id) from e
        key_file = staging / "key"
        if not key_file.exists():
            raise MultipartUploadNotFoundError(self.key, self.upload_id)
        async with aiofiles.open(key_file, "r") as f:
            if await f.read() != self.key:
                raise MultipartUploadNotFoundError(self.key, self.upload_id)
        return staging

    async def upload_part(self, part_number: int, data: bytes) -> UploadedPart:
        """Store one part and return its MD5 etag."""
        if not 1 <= part_number <= MAX_PART_NUMBER:
            raise InvalidMultipartPartError(
                self.upload_id, part_number, f"part number must be within 1..{MAX_PART_NUMBER}"
            )
        staging = await self._staging_dir()
        try:
            _, etag = await self.store._atomic_write(staging / f"{part_number}.part", bytes(data))
            async with aiofiles.open(staging / f"{part_number}.etag", "w") as f:
                await f.write(etag)
        except OSError as e:
            raise StorageUploadError(self.key, str(e)) from e
        return UploadedPart(part_number=part_number, etag=etag)

    async def complete(self, parts: Sequence[UploadedPart]) -> StoredObject:
        """Concatenate the listed parts in part_number order into the object."""
        staging = await self._staging_dir()
        if not parts:
            raise InvalidMultipartPartError(self.upload_id, 0, "no parts to complete")
        ordered = sorted(parts, key=lambda p: p.part_number)
        part_paths: list[Path] = []
        digests = b""
        seen: set[int] = set()
        for part in ordered:
            if part.part_number in seen:
                raise InvalidMultipartPartError(self.upload_id, part.part_number, "duplicate part")
            seen.add(part.part_number)
            part_path = staging / f"{part.part_number}.part"
            etag_path = staging / f"{part.part_number}.etag"
            if not part_path.exists() or not etag_path.exists():
                raise InvalidMultipartPartError(self.upload_id, part.part_number, "part not uploaded")
            async with aiofiles.open(etag_path, "r") as f:
                stored_etag = await f.read()
            if stored_etag != _strip_etag(part.etag):
                raise InvalidMultipartPartError(self.upload_id, part.part_number, "etag mismatch")
            part_paths.append(part_path)
            digests += bytes.fromhex(stored_etag)

        target_path = self.store._get_full_path(self.key)
        try:
            size, _ = await self.store._atomic_write(target_path, part_paths)
            etag = f"{hashlib.md5(digests).hexdigest()}-{len(part_paths)}"
            await self.store._write_metadata(
                target_path,
                {"key": self.key, "size": size, "etag": etag, "uploaded_at": utc_now().isoformat()},
            )
        except OSError as e:
            raise StorageUploadError(self.key, str(e)) from e
        await asyncio.to_thread(shutil.rmtree, staging, True)
        return StoredObject(key=self.key, size=size, etag=etag)
