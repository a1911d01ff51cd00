"""Two-phase access to one logical paste spread over two stores.

The small-object store is the authority for existence and metadata; the
large-object store only holds bytes of tiered pastes under the same name.
Writes put the body first and commit metadata last. Deletes drop the
metadata first and the body after.
"""

from __future__ import annotations

import logging
from typing import Any

from pastebin.domain.exceptions import InvariantViolationException
from pastebin.infrastructure.blob.protocol import BlobObject, BlobStoreProtocol
from pastebin.infrastructure.kv.protocol import KVStoreProtocol
from pastebin.schemas.paste_metadata import PasteMetadata, migrate_paste_metadata

logger = logging.getLogger(__name__)


class TieredPasteWriter:
    """Orders every cross-store operation on a paste."""

    def __init__(self, kv_store: KVStoreProtocol, blob_store: BlobStoreProtocol) -> None:
        self.kv_store = kv_store
        self.blob_store = blob_store

    @staticmethod
    def migrate(name: str, metadata: dict[str, Any] | None) -> PasteMetadata:
        """Migrate raw metadata of name; missing metadata is a corrupt store."""
        if metadata is None:
            raise InvariantViolationException(
                f"paste of name '{name}' has no metadata", {"name": name}
            )
        return migrate_paste_metadata(metadata)

    async def read(self, name: str) -> tuple[bytes, PasteMetadata] | None:
        """Small-store value and migrated metadata, or None if absent.

        The value is empty for large-store pastes. Logical expiry is not
        checked here.
        """
        entry = await self.kv_store.get_with_metadata(name)
        if entry is None:
            return None
        return entry.value, self.migrate(name, entry.metadata)

    async def fetch_large_body(self, name: str) -> BlobObject | None:
        return await self.blob_store.get(name)

    async def commit(
        self,
        name: str,
        metadata: PasteMetadata,
        *,
        body: bytes | None,
        expire_at: int,
        replaces: PasteMetadata | None = None,
    ) -> None:
        """Write body to its tier, then commit metadata.

        body is None when the large object already exists (multipart
        completion). replaces is an expired record under the same name; if
        it held a large object and the new paste is small, that object is
        deleted first.
        The metadata write is the last step: once it lands the paste exists.
        """
        if replaces is not None and replaces.in_large_store and not metadata.in_large_store:
            await self.blob_store.delete([name])
            logger.info("Dropped large object of expired paste %s before reusing its name", name)
        if metadata.in_large_store:
            if body is not None:
                await self.blob_store.put(name, body)
            kv_value = b""
        else:
            if body is None:
                raise InvariantViolationException(
                    f"no body for small-store paste '{name}'", {"name": name}
                )
            kv_value = body
        await self.kv_store.put(
            name, kv_value, metadata=metadata.to_storage(), expire_at=expire_at
        )
        logger.debug(
            "Committed paste %s (location: %s, size: %s)",
            name,
            metadata.location.value,
            metadata.size_bytes,
        )

    async def rewrite_metadata(
        self, name: str, value: bytes, metadata: PasteMetadata, *, expire_at: int
    ) -> None:
        """Replace metadata keeping the small-store value as read."""
        await self.kv_store.put(
            name, value, metadata=metadata.to_storage(), expire_at=expire_at
        )

    async def remove(self, name: str, metadata: PasteMetadata) -> None:
        """Delete metadata, then the large object if the paste was tiered."""
        await self.kv_store.delete(name)
        if metadata.in_large_store:
            await self.blob_store.delete([name])
        logger.info("Deleted paste %s (location: %s)", name, metadata.location.value)
