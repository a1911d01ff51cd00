"""Small-object store factory: creates memory or Redis backend from settings."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from pastebin.infrastructure.kv.protocol import KVStoreProtocol
from pastebin.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from pastebin.core.config import Settings


class KVStoreFactory:
    """Factory for small-object store instances based on configuration."""

    @staticmethod
    def create_kv_store(
        settings: "Settings | None" = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> KVStoreProtocol:
        """Create the small-object store from settings.

        Args:
            settings: Engine settings; if None, uses get_settings().
            clock: Clock for the memory backend's expiry checks.

        Returns:
            MemoryKVStore or RedisKVStore (not yet connected).

        Raises:
            ValueError: Unknown backend.
        """
        from pastebin.core.config import get_settings

        s = settings or get_settings()
        backend = s.kv_backend.lower()

        if backend == "memory":
            from pastebin.infrastructure.kv.memory_store import MemoryKVStore

            return MemoryKVStore(clock=clock)
        if backend == "redis":
            from pastebin.infrastructure.kv.redis_store import RedisKVStore

            return RedisKVStore(
                host=s.redis_host,
                port=s.redis_port,
                db=s.redis_db,
                password=s.redis_password.get_secret_value() if s.redis_password else None,
                key_prefix=s.redis_key_prefix,
            )
        raise ValueError(
            f"Unknown kv backend: {backend}. Supported: 'memory', 'redis'"
        )
