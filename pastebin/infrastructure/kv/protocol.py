"""Small-object store protocol (DIP). Implementations: MemoryKVStore, RedisKVStore.

A key/value store holding paste bytes plus an attached JSON metadata dict,
with native per-key expiry and cursor-based listing.
"""

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class KVEntry:
    """Value and attached metadata of one key (metadata None means corrupt)."""

    value: bytes
    metadata: dict[str, Any] | None


@dataclass(frozen=True)
class KVListKey:
    """One listed key with its metadata (values are never listed)."""

    name: str
    metadata: dict[str, Any] | None


@dataclass(frozen=True)
class KVListResult:
    """One page of a listing; pass cursor back until list_complete."""

    keys: list[KVListKey]
    cursor: str | None
    list_complete: bool


class KVStoreProtocol(Protocol):
    """Protocol for small-object store backends."""

    async def connect(self) -> None:
        """Open connections; called once at startup."""
        ...

    async def disconnect(self) -> None:
        """Release connections; called once at shutdown."""
        ...

    async def get_with_metadata(self, key: str) -> KVEntry | None:
        """Return value and metadata, or None if the key is absent or expired."""
        ...

    async def put(
        self,
        key: str,
        value: bytes,
        *,
        metadata: dict[str, Any],
        expire_at: int | None = None,
    ) -> None:
        """Store value and metadata; the key disappears at unix time expire_at."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key. No error if absent."""
        ...

    async def list(self, *, cursor: str | None = None, limit: int = 1000) -> KVListResult:
        """Return one page of keys with their metadata."""
        ...
