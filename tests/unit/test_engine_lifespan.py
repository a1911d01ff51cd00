"""Factories and engine lifespan wiring."""

from unittest.mock import AsyncMock

import pytest

from pastebin.application.dtos import WriteOptions
from pastebin.application.services.paste_storage import PasteStorage
from pastebin.core.config import Settings
from pastebin.core.lifespan import create_engine_lifespan
from pastebin.infrastructure.blob.factory import BlobStoreFactory
from pastebin.infrastructure.blob.local_store import LocalBlobStore
from pastebin.infrastructure.kv.factory import KVStoreFactory
from pastebin.infrastructure.kv.memory_store import MemoryKVStore
from pastebin.infrastructure.kv.redis_store import RedisKVStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, blob_root=str(tmp_path))


def test_factories_build_default_backends(settings) -> None:
    assert isinstance(KVStoreFactory.create_kv_store(settings), MemoryKVStore)
    assert isinstance(BlobStoreFactory.create_blob_store(settings), LocalBlobStore)


def test_redis_backend_is_not_connected_on_creation(settings) -> None:
    redis_settings = settings.model_copy(update={"kv_backend": "redis", "redis_key_prefix": "t"})
    store = KVStoreFactory.create_kv_store(redis_settings)
    assert isinstance(store, RedisKVStore)
    assert store.redis is None
    assert store.key_prefix == "t"


def test_unknown_backend_raises(settings) -> None:
    with pytest.raises(ValueError):
        KVStoreFactory.create_kv_store(settings.model_copy(update={"kv_backend": "etcd"}))
    with pytest.raises(ValueError):
        BlobStoreFactory.create_blob_store(settings.model_copy(update={"blob_backend": "ftp"}))


@pytest.mark.asyncio
async def test_lifespan_yields_working_engine(settings) -> None:
    async with create_engine_lifespan(settings) as storage:
        assert isinstance(storage, PasteStorage)
        created = await storage.create_paste(b"hi", WriteOptions(expiration_seconds=60))
        await storage.get_paste(created.name)
    # Background work spawned by the read was drained on exit.
    assert storage.background.pending == 0


@pytest.mark.asyncio
async def test_lifespan_connects_and_disconnects_small_store(settings, monkeypatch) -> None:
    kv_store = MemoryKVStore()
    kv_store.connect = AsyncMock()
    kv_store.disconnect = AsyncMock()
    monkeypatch.setattr(KVStoreFactory, "create_kv_store", staticmethod(lambda _settings: kv_store))

    async with create_engine_lifespan(settings):
        kv_store.connect.assert_awaited_once()
        kv_store.disconnect.assert_not_awaited()
    kv_store.disconnect.assert_awaited_once()
