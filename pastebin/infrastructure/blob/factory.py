"""Large-object store factory: creates local or S3 backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pastebin.infrastructure.blob.protocol import BlobStoreProtocol

if TYPE_CHECKING:
    from pastebin.core.config import Settings


class BlobStoreFactory:
    """Factory for large-object store instances based on configuration."""

    @staticmethod
    def create_blob_store(settings: "Settings | None" = None) -> BlobStoreProtocol:
        """Create the large-object store from settings.

        Args:
            settings: Engine settings; if None, uses get_settings().

        Returns:
            LocalBlobStore or S3BlobStore.

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from pastebin.core.config import get_settings

        s = settings or get_settings()
        backend = s.blob_backend.lower()

        if backend == "local":
            from pastebin.infrastructure.blob.local_store import LocalBlobStore

            if not s.blob_root:
                raise ValueError("BLOB_ROOT required for local backend")
            return LocalBlobStore(root=s.blob_root)
        if backend == "s3":
            if not s.s3_bucket:
                raise ValueError("S3_BUCKET required for s3 backend")
            try:
                from pastebin.infrastructure.blob.s3_store import S3BlobStore
            except ImportError as e:
                raise ValueError(
                    "S3 backend requires boto3. Install with: pip install 'pastebin[storage]'"
                ) from e
            return S3BlobStore(
                bucket=s.s3_bucket,
                region=s.s3_region,
                endpoint_url=s.s3_endpoint_url,
                access_key=s.s3_access_key,
                secret_key=s.s3_secret_key.get_secret_value() if s.s3_secret_key else None,
            )
        raise ValueError(
            f"Unknown blob backend: {backend}. Supported: 'local', 's3'"
        )
