"""Large-object store: local filesystem and S3-compatible backends.

Implementations are loaded lazily inside BlobStoreFactory.create_blob_store()
so the local backend only requires aiofiles and S3 only loads boto3 when used.
"""

from pastebin.infrastructure.blob.factory import BlobStoreFactory
from pastebin.infrastructure.blob.protocol import (
    BlobObject,
    BlobStoreProtocol,
    MultipartUploadProtocol,
    MultipartUploadRef,
    StoredObject,
    UploadedPart,
)

__all__ = [
    "BlobObject",
    "BlobStoreFactory",
    "BlobStoreProtocol",
    "MultipartUploadProtocol",
    "MultipartUploadRef",
    "StoredObject",
    "UploadedPart",
]
