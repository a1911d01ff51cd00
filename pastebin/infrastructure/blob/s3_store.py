"""S3-compatible large-object store (AWS S3, R2, MinIO, etc.) with multipart upload."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

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
    StorageUploadError,
)

# DeleteObjects accepts at most this many keys per request.
DELETE_BATCH_LIMIT = 1000

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})

# Service errors and transport errors (connection, timeout) from botocore.
_S3_ERRORS = (ClientError, BotoCoreError)


def _error_code(e: Exception) -> str:
    if not isinstance(e, ClientError):
        return ""
    return str(e.response.get("Error", {}).get("Code", ""))


class S3BlobStore:
    """S3-compatible object store.

    Uses boto3 (sync) via asyncio.to_thread for the async API. Multipart
    session state lives in the bucket; nothing is tracked in process.
    """

    CHUNK_SIZE = 256 * 1024

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            bucket: Bucket name.
            region: AWS region.
            endpoint_url: Custom endpoint (R2/MinIO).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            client: Pre-built boto3 client (tests, custom sessions).
        """
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        if client is not None:
            self._client = client
        else:
            extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            self._client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                **extra,
            )

    async def get(self, key: str) -> BlobObject | None:
        """Fetch the object; None if the key does not exist."""
        def _get() -> dict[str, Any] | None:
            try:
                resp = self._client.get_object(Bucket=self.bucket, Key=key)
            except _S3_ERRORS as e:
                if _error_code(e) in _NOT_FOUND_CODES:
                    return None
                raise StorageDownloadError(key, str(e)) from e
            return resp

        resp = await asyncio.to_thread(_get)
        if resp is None:
            return None
        return BlobObject(
            key=key,
            size=resp["ContentLength"],
            etag=resp.get("ETag", ""),
            body=self._chunks(key, resp["Body"]),
        )

    async def _chunks(self, key: str, body: Any) -> AsyncIterator[bytes]:
        """Read the response stream off the event loop, one chunk per thread hop."""
        try:
            while True:
                try:
                    chunk = await asyncio.to_thread(body.read, self.CHUNK_SIZE)
                except (OSError, ClientError, BotoCoreError) as e:
                    raise StorageDownloadError(key, str(e)) from e
                if not chunk:
                    break
                yield chunk
        finally:
            body.close()

    async def put(self, key: str, data: bytes) -> StoredObject:
        """Create or replace an object."""
        def _put() -> StoredObject:
            try:
                resp = self._client.put_object(Bucket=self.bucket, Key=key, Body=data)
            except _S3_ERRORS as e:
                raise StorageUploadError(key, str(e)) from e
            return StoredObject(key=key, size=len(data), etag=resp.get("ETag", ""))

        return await asyncio.to_thread(_put)

    async def delete(self, keys: str | Sequence[str]) -> None:
        """Delete objects in batches of DELETE_BATCH_LIMIT; absent keys are ignored."""
        key_list = [keys] if isinstance(keys, str) else list(keys)

        def _delete(batch: list[str]) -> None:
            try:
                resp = self._client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )
            except _S3_ERRORS as e:
                raise StorageDeleteError(batch, str(e)) from e
            errors = resp.get("Errors") or []
            if errors:
                raise StorageDeleteError(
                    [err.get("Key", "") for err in errors],
                    "; ".join(err.get("Message", "") for err in errors),
                )

        for start in range(0, len(key_list), DELETE_BATCH_LIMIT):
            await asyncio.to_thread(_delete, key_list[start : start + DELETE_BATCH_LIMIT])

    async def create_multipart_upload(self, key: str) -> MultipartUploadRef:
        """Start a multipart upload."""
        def _create() -> MultipartUploadRef:
            try:
                resp = self._client.create_multipart_upload(Bucket=self.bucket, Key=key)
            except _S3_ERRORS as e:
                raise StorageUploadError(key, str(e)) from e
            return MultipartUploadRef(key=resp["Key"], upload_id=resp["UploadId"])

        return await asyncio.to_thread(_create)

    def resume_multipart_upload(self, key: str, upload_id: str) -> S3MultipartUpload:
        """Handle for an existing upload; S3 validates it on each call."""
        return S3MultipartUpload(self, key, upload_id)


class S3MultipartUpload:
    """One S3 multipart upload. Parts other than the last must be at least 5MiB on AWS."""

    def __init__(self, store: S3BlobStore, key: str, upload_id: str) -> None:
        self.store = store
        self.key = key
        self.upload_id = upload_id

    def _raise_for(self, e: Exception, part_number: int = 0) -> None:
        code = _error_code(e)
        if code == "NoSuchUpload":
            raise MultipartUploadNotFoundError(self.key, self.upload_id) from e
        if code in ("InvalidPart", "InvalidPartOrder", "EntityTooSmall"):
            raise InvalidMultipartPartError(self.upload_id, part_number, str(e)) from e
        raise StorageUploadError(self.key, str(e)) from e

    async def upload_part(self, part_number: int, data: bytes) -> UploadedPart:
        """Upload one part and return its etag."""
        def _upload() -> UploadedPart:
            try:
                resp = self.store._client.upload_part(
                    Bucket=self.store.bucket,
                    Key=self.key,
                    UploadId=self.upload_id,
                    PartNumber=part_number,
                    Body=data,
                )
            except _S3_ERRORS as e:
                self._raise_for(e, part_number)
                raise
            return UploadedPart(part_number=part_number, etag=resp["ETag"])

        return await asyncio.to_thread(_upload)

    async def complete(self, parts: Sequence[UploadedPart]) -> StoredObject:
        """Complete the upload (parts ordered by number) and read back its size."""
        ordered = sorted(parts, key=lambda p: p.part_number)

        def _complete() -> StoredObject:
            try:
                resp = self.store._client.complete_multipart_upload(
                    Bucket=self.store.bucket,
                    Key=self.key,
                    UploadId=self.upload_id,
                    MultipartUpload={
                        "Parts": [
                            {"PartNumber": p.part_number, "ETag": p.etag} for p in ordered
                        ]
                    },
                )
            except _S3_ERRORS as e:
                self._raise_for(e)
                raise
            try:
                head = self.store._client.head_object(Bucket=self.store.bucket, Key=self.key)
            except _S3_ERRORS as e:
                raise StorageDownloadError(self.key, str(e)) from e
            return StoredObject(
                key=self.key,
                size=head["ContentLength"],
                etag=resp.get("ETag", head.get("ETag", "")),
            )

        return await asyncio.to_thread(_complete)
