"""Infrastructure exceptions for the small-object and large-object stores.

Storage errors extend PastebinException so callers can map them to
responses the same way as engine errors.
"""

from pastebin.domain.exceptions import PastebinException


class StorageException(PastebinException):
    """Base exception for backing-store operations."""


class StorageUploadError(StorageException):
    """Object upload failed."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to upload object: {key}",
            "STORAGE_UPLOAD_ERROR",
            {"key": key, "reason": reason},
        )


class StorageDownloadError(StorageException):
    """Object download failed."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to download object: {key}",
            "STORAGE_DOWNLOAD_ERROR",
            {"key": key, "reason": reason},
        )


class StorageDeleteError(StorageException):
    """Object deletion failed."""

    def __init__(self, keys: list[str], reason: str) -> None:
        super().__init__(
            f"Failed to delete {len(keys)} object(s)",
            "STORAGE_DELETE_ERROR",
            {"keys": keys, "reason": reason},
        )


class StoragePermissionError(StorageException):
    """Key resolves outside the store root."""

    status_code = 400

    def __init__(self, key: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {key}",
            "STORAGE_PERMISSION_ERROR",
            {"key": key, "operation": operation},
        )


class MultipartUploadNotFoundError(StorageException):
    """Unknown (or already completed) multipart upload for this key."""

    status_code = 404

    def __init__(self, key: str, upload_id: str) -> None:
        super().__init__(
            f"Multipart upload not found: {upload_id} for {key}",
            "MULTIPART_UPLOAD_NOT_FOUND",
            {"key": key, "upload_id": upload_id},
        )


class InvalidMultipartPartError(StorageException):
    """A part listed at completion is missing or its etag does not match."""

    status_code = 400

    def __init__(self, upload_id: str, part_number: int, reason: str) -> None:
        super().__init__(
            f"Invalid part {part_number} for upload {upload_id}: {reason}",
            "MULTIPART_INVALID_PART",
            {"upload_id": upload_id, "part_number": part_number, "reason": reason},
        )


class KVStoreError(StorageException):
    """Small-object store operation failed."""

    def __init__(self, key: str, operation: str, reason: str) -> None:
        super().__init__(
            f"Metadata store {operation} failed for {key}",
            "KV_STORE_ERROR",
            {"key": key, "operation": operation, "reason": reason},
        )


class StoreRateLimitedError(StorageException):
    """Write rejected by the small-object store's rate limit."""

    status_code = 429

    def __init__(self, key: str) -> None:
        super().__init__(
            f"Too many writes to {key}",
            "STORE_RATE_LIMITED",
            {"key": key},
        )
