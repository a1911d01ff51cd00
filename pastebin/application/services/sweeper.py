"""Scheduled sweep of large objects whose pastes have logically expired.

Pages through every metadata record; a record in the large-object store
whose logical expiry has passed gets its large object deleted, in batches.
The metadata record itself is left for the small-object store's own TTL,
which outlives the logical expiry by the large-store grace period.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pastebin.application.dtos.paste import SweepResult
from pastebin.domain.exceptions import PastebinException
from pastebin.infrastructure.blob.protocol import BlobStoreProtocol
from pastebin.infrastructure.kv.protocol import KVStoreProtocol
from pastebin.schemas.paste_metadata import migrate_paste_metadata
from pastebin.shared.telemetry.tracing import add_span_attributes, traced
from pastebin.shared.utils.datetime import to_unix

logger = logging.getLogger(__name__)


class LargeStoreSweeper:
    """Idempotent reconciliation of the large-object store against metadata."""

    def __init__(
        self,
        kv_store: KVStoreProtocol,
        blob_store: BlobStoreProtocol,
        batch_size: int = 1000,
    ) -> None:
        self.kv_store = kv_store
        self.blob_store = blob_store
        self.batch_size = batch_size

    async def _flush(self, names: list[str]) -> bool:
        """Delete one batch; a failure is logged and reported, not raised."""
        try:
            await self.blob_store.delete(list(names))
        except PastebinException:
            logger.exception("Failed to delete %s expired large object(s)", len(names))
            return False
        return True

    @traced("pastebin.sweep")
    async def run(self, now: datetime) -> SweepResult:
        """Sweep with now as the logical time of this tick."""
        now_unix = to_unix(now)
        scanned = cleaned = failed_batches = 0
        pending: list[str] = []

        async def flush() -> None:
            nonlocal cleaned, failed_batches
            if not pending:
                return
            if await self._flush(pending):
                cleaned += len(pending)
            else:
                failed_batches += 1
            pending.clear()

        cursor: str | None = None
        while True:
            listed = await self.kv_store.list(cursor=cursor, limit=self.batch_size)
            for key in listed.keys:
                scanned += 1
                if key.metadata is None:
                    logger.warning("Sweep skipped %s: no metadata", key.name)
                    continue
                try:
                    metadata = migrate_paste_metadata(key.metadata)
                except PastebinException:
                    logger.warning("Sweep skipped %s: unreadable metadata", key.name)
                    continue
                if metadata.in_large_store and metadata.is_expired(now_unix):
                    pending.append(key.name)
                    if len(pending) >= self.batch_size:
                        await flush()
            if listed.list_complete:
                break
            cursor = listed.cursor
        await flush()

        add_span_attributes(scanned=scanned, cleaned=cleaned, failed_batches=failed_batches)
        logger.info(
            "Sweep done: %s record(s) scanned, %s large object(s) cleaned, %s failed batch(es)",
            scanned,
            cleaned,
            failed_batches,
        )
        return SweepResult(scanned=scanned, cleaned=cleaned, failed_batches=failed_batches)
