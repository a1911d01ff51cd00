"""Redis-backed small-object store.

Each paste is one Redis hash under "<prefix>:<name>" with two fields:
"value" (raw bytes) and "metadata" (JSON). Expiry uses EXPIREAT, listing
uses SCAN so it never blocks the server.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis

from pastebin.core.constants import KV_KEY_SEP
from pastebin.infrastructure.exceptions import KVStoreError
from pastebin.infrastructure.kv.protocol import KVEntry, KVListKey, KVListResult

logger = logging.getLogger(__name__)

_VALUE_FIELD = "value"
_METADATA_FIELD = "metadata"


class RedisKVStore:
    """Async Redis small-object store.

    Unlike a cache, this store is the source of truth for paste existence,
    so Redis errors are raised (as KVStoreError), never swallowed. Call
    connect() at startup and disconnect() at shutdown.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        *,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
        key_prefix: str = "paste",
    ) -> None:
        """Initialize the store.

        Args:
            redis_client: Optional Redis client for testing or DI.
            host, port, db, password: Connection settings used by connect().
            key_prefix: Namespace for paste keys.
        """
        self.redis = redis_client
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self.key_prefix = key_prefix

    async def connect(self) -> None:
        """Establish the Redis connection. Call on startup."""
        if self.redis is None:
            self.redis = redis.Redis(
                host=self.host,
                port=self.port,
                db=self.db,
                password=self.password,
                decode_responses=False,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
        try:
            await self.redis.ping()
        except redis.RedisError as e:
            raise KVStoreError(f"{self.host}:{self.port}", "connect", str(e)) from e
        logger.info("Redis metadata store connected: %s:%s", self.host, self.port)

    async def disconnect(self) -> None:
        """Close the Redis connection. Call on shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            logger.info("Redis metadata store disconnected")

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise KVStoreError(self.key_prefix, "connect", "store is not connected")
        return self.redis

    def _full_key(self, key: str) -> str:
        return f"{self.key_prefix}{KV_KEY_SEP}{key}"

    def _strip_prefix(self, full_key: bytes | str) -> str:
        text = full_key.decode() if isinstance(full_key, bytes) else full_key
        return text[len(self.key_prefix) + len(KV_KEY_SEP) :]

    @staticmethod
    def _decode_metadata(raw: bytes | None) -> dict[str, Any] | None:
        if not raw:
            return None
        return json.loads(raw)

    async def get_with_metadata(self, key: str) -> KVEntry | None:
        """Return value and metadata, or None if the hash is absent."""
        client = self._client()
        try:
            value, metadata = await client.hmget(
                self._full_key(key), [_VALUE_FIELD, _METADATA_FIELD]
            )
        except redis.RedisError as e:
            raise KVStoreError(key, "get", str(e)) from e
        if value is None:
            return None
        return KVEntry(value=value, metadata=self._decode_metadata(metadata))

    async def put(
        self,
        key: str,
        value: bytes,
        *,
        metadata: dict[str, Any],
        expire_at: int | None = None,
    ) -> None:
        """Replace the hash atomically and set its absolute expiry."""
        client = self._client()
        full_key = self._full_key(key)
        try:
            async with client.pipeline(transaction=True) as pipe:
                pipe.delete(full_key)
                pipe.hset(
                    full_key,
                    mapping={_VALUE_FIELD: value, _METADATA_FIELD: json.dumps(metadata)},
                )
                if expire_at is not None:
                    pipe.expireat(full_key, expire_at)
                await pipe.execute()
        except redis.RedisError as e:
            raise KVStoreError(key, "put", str(e)) from e
        logger.debug("KV PUT: %s (expire_at: %s)", key, expire_at)

    async def delete(self, key: str) -> None:
        """Remove the hash if present."""
        client = self._client()
        try:
            await client.unlink(self._full_key(key))
        except redis.RedisError as e:
            raise KVStoreError(key, "delete", str(e)) from e
        logger.debug("KV DELETE: %s", key)

    async def list(self, *, cursor: str | None = None, limit: int = 1000) -> KVListResult:
        """One SCAN step over the prefix, with metadata fetched in a pipeline.

        SCAN may return a key more than once across pages; callers must be
        idempotent per key.
        """
        client = self._client()
        try:
            next_cursor, full_keys = await client.scan(
                cursor=int(cursor or 0),
                match=f"{self.key_prefix}{KV_KEY_SEP}*",
                count=limit,
            )
            async with client.pipeline(transaction=False) as pipe:
                for full_key in full_keys:
                    pipe.hget(full_key, _METADATA_FIELD)
                metadatas = await pipe.execute() if full_keys else []
        except redis.RedisError as e:
            raise KVStoreError(self.key_prefix, "list", str(e)) from e
        keys = [
            KVListKey(name=self._strip_prefix(full_key), metadata=self._decode_metadata(meta))
            for full_key, meta in zip(full_keys, metadatas)
        ]
        complete = int(next_cursor) == 0
        return KVListResult(
            keys=keys,
            cursor=None if complete else str(next_cursor),
            list_complete=complete,
        )
