"""Small-object store: holds metadata for every paste and bytes of small ones.

Backends are loaded lazily by KVStoreFactory.create_kv_store() so the
memory backend never imports redis.
"""

from pastebin.infrastructure.kv.factory import KVStoreFactory
from pastebin.infrastructure.kv.protocol import (
    KVEntry,
    KVListKey,
    KVListResult,
    KVStoreProtocol,
)

__all__ = [
    "KVEntry",
    "KVListKey",
    "KVListResult",
    "KVStoreFactory",
    "KVStoreProtocol",
]
