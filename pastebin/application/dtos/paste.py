"""DTOs for engine operations (no dependency on any store)."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

from pastebin.schemas.paste_metadata import PasteMetadata


@dataclass(frozen=True)
class WriteOptions:
    """Caller-decoded fields of a create or update request.

    expiration_seconds is already resolved and clamped (see
    ExpirationCoordinator.resolve_expiration). custom_name and is_private
    only apply to creates.
    """

    expiration_seconds: int
    passwd: str | None = None
    filename: str | None = None
    highlight_language: str | None = None
    encryption_scheme: str | None = None
    custom_name: str | None = None
    is_private: bool = False


@dataclass(frozen=True)
class PasteWriteResult:
    """Outcome of a create/update: the name and password that manage the paste."""

    name: str
    passwd: str
    metadata: PasteMetadata
    etag: str | None = None


@dataclass(frozen=True)
class PasteWithMetadata:
    """Paste content (bytes when small, byte stream when large) and its metadata."""

    paste: bytes | AsyncIterator[bytes]
    metadata: PasteMetadata


@dataclass(frozen=True)
class MultipartSession:
    """Values the client carries between multipart phases."""

    name: str
    key: str
    upload_id: str


@dataclass(frozen=True)
class SweepResult:
    """Totals of one sweep over the metadata store."""

    scanned: int
    cleaned: int
    failed_batches: int
