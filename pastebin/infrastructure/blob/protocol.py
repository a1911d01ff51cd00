"""Large-object store protocol (DIP). Implementations: LocalBlobStore, S3BlobStore.

Holds bodies of pastes above the tiering threshold. Supports direct
put/get/delete and a three-phase multipart upload whose session state lives
entirely inside the store (the engine keeps no session table).
"""

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class UploadedPart:
    """Receipt for one uploaded part; the caller sends the list back at completion."""

    part_number: int
    etag: str


@dataclass(frozen=True)
class StoredObject:
    """Key, size and etag of an object after put or multipart completion."""

    key: str
    size: int
    etag: str


@dataclass(frozen=True)
class BlobObject:
    """A stored object with a lazily read body."""

    key: str
    size: int
    etag: str
    body: AsyncIterator[bytes]


@dataclass(frozen=True)
class MultipartUploadRef:
    """Identifies a multipart upload session."""

    key: str
    upload_id: str


class MultipartUploadProtocol(Protocol):
    """A resumed multipart upload session (no I/O until a method is awaited)."""

    key: str
    upload_id: str

    async def upload_part(self, part_number: int, data: bytes) -> UploadedPart:
        """Store one part (1-indexed); re-uploading a number replaces it."""
        ...

    async def complete(self, parts: Sequence[UploadedPart]) -> StoredObject:
        """Assemble parts ordered by part_number into the final object."""
        ...


class BlobStoreProtocol(Protocol):
    """Protocol for large-object store backends."""

    async def get(self, key: str) -> BlobObject | None:
        """Return the object, or None if absent."""
        ...

    async def put(self, key: str, data: bytes) -> StoredObject:
        """Create or replace an object."""
        ...

    async def delete(self, keys: str | Sequence[str]) -> None:
        """Delete one or many objects. Absent keys are ignored."""
        ...

    async def create_multipart_upload(self, key: str) -> MultipartUploadRef:
        """Open a multipart session for key."""
        ...

    def resume_multipart_upload(self, key: str, upload_id: str) -> MultipartUploadProtocol:
        """Handle for an existing session; validity is checked on use."""
        ...
