"""In-process small-object store with clock-driven expiry.

For local development and tests. Metadata is JSON round-tripped on write
so it behaves like a serializing store (no aliasing with caller objects).
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pastebin.infrastructure.exceptions import StoreRateLimitedError
from pastebin.infrastructure.kv.protocol import KVEntry, KVListKey, KVListResult
from pastebin.shared.utils.datetime import utc_now


@dataclass
class _Item:
    value: bytes
    metadata: str
    expire_at: int | None


class MemoryKVStore:
    """Dict-backed KV store honouring expire_at against an injectable clock.

    write_interval_seconds emulates hosted KV stores that reject more than
    one write per key within a short interval (raises StoreRateLimitedError).
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        write_interval_seconds: float | None = None,
    ) -> None:
        self._clock = clock
        self._items: dict[str, _Item] = {}
        self._last_write: dict[str, float] = {}
        self.write_interval_seconds = write_interval_seconds

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    def _now(self) -> float:
        return self._clock().timestamp()

    def _live(self, key: str) -> _Item | None:
        item = self._items.get(key)
        if item is None:
            return None
        if item.expire_at is not None and item.expire_at <= self._now():
            del self._items[key]
            return None
        return item

    async def get_with_metadata(self, key: str) -> KVEntry | None:
        """Return value and metadata, or None if absent or expired."""
        item = self._live(key)
        if item is None:
            return None
        metadata = json.loads(item.metadata) if item.metadata else None
        return KVEntry(value=item.value, metadata=metadata)

    async def put(
        self,
        key: str,
        value: bytes,
        *,
        metadata: dict[str, Any],
        expire_at: int | None = None,
    ) -> None:
        """Store value and metadata until expire_at."""
        now = self._now()
        if self.write_interval_seconds is not None:
            last = self._last_write.get(key)
            if last is not None and now - last < self.write_interval_seconds:
                raise StoreRateLimitedError(key)
        self._last_write[key] = now
        self._items[key] = _Item(
            value=bytes(value),
            metadata=json.dumps(metadata),
            expire_at=expire_at,
        )

    async def delete(self, key: str) -> None:
        """Remove key if present."""
        self._items.pop(key, None)

    async def list(self, *, cursor: str | None = None, limit: int = 1000) -> KVListResult:
        """Page through live keys in sorted order; cursor is the next offset."""
        names = sorted(k for k in list(self._items) if self._live(k) is not None)
        start = int(cursor) if cursor else 0
        page = names[start : start + limit]
        keys = [
            KVListKey(
                name=name,
                metadata=json.loads(self._items[name].metadata)
                if self._items[name].metadata
                else None,
            )
            for name in page
        ]
        end = start + len(page)
        complete = end >= len(names)
        return KVListResult(
            keys=keys,
            cursor=None if complete else str(end),
            list_complete=complete,
        )

    def put_raw(
        self,
        key: str,
        value: bytes,
        metadata: dict[str, Any] | None,
        expire_at: int | None = None,
    ) -> None:
        """Seed a record verbatim (legacy shapes, missing metadata)."""
        self._items[key] = _Item(
            value=value,
            metadata=json.dumps(metadata) if metadata is not None else "",
            expire_at=expire_at,
        )

    def expire_at_of(self, key: str) -> int | None:
        """Physical expiry of a live key (None if absent or no expiry)."""
        item = self._live(key)
        return item.expire_at if item else None
