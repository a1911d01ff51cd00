"""MemoryKVStore tests: expiry, listing, write rate limit."""

from datetime import UTC, datetime, timedelta

import pytest

from pastebin.infrastructure.exceptions import StoreRateLimitedError
from pastebin.infrastructure.kv.memory_store import MemoryKVStore

START = datetime(2024, 1, 1, tzinfo=UTC)
START_UNIX = int(START.timestamp())


class Clock:
    def __init__(self) -> None:
        self.now = START

    def __call__(self) -> datetime:
        return self.now


@pytest.mark.asyncio
async def test_put_and_get_with_metadata() -> None:
    store = MemoryKVStore(clock=Clock())
    await store.put("abcd", b"value", metadata={"a": 1})
    entry = await store.get_with_metadata("abcd")
    assert entry.value == b"value"
    assert entry.metadata == {"a": 1}
    assert await store.get_with_metadata("none") is None


@pytest.mark.asyncio
async def test_metadata_is_not_aliased() -> None:
    store = MemoryKVStore(clock=Clock())
    metadata = {"a": 1}
    await store.put("abcd", b"", metadata=metadata)
    metadata["a"] = 2
    assert (await store.get_with_metadata("abcd")).metadata == {"a": 1}


@pytest.mark.asyncio
async def test_entry_disappears_at_expire_at() -> None:
    clock = Clock()
    store = MemoryKVStore(clock=clock)
    await store.put("abcd", b"v", metadata={}, expire_at=START_UNIX + 70)

    clock.now = START + timedelta(seconds=69)
    assert await store.get_with_metadata("abcd") is not None
    clock.now = START + timedelta(seconds=70)
    assert await store.get_with_metadata("abcd") is None


@pytest.mark.asyncio
async def test_list_pages_with_cursor() -> None:
    store = MemoryKVStore(clock=Clock())
    for name in ("c", "a", "e", "b", "d"):
        await store.put(name, b"", metadata={"n": name})

    seen = []
    cursor = None
    pages = 0
    while True:
        result = await store.list(cursor=cursor, limit=2)
        pages += 1
        seen.extend((k.name, k.metadata["n"]) for k in result.keys)
        if result.list_complete:
            assert result.cursor is None
            break
        cursor = result.cursor

    assert pages == 3
    assert [name for name, _ in seen] == ["a", "b", "c", "d", "e"]
    assert all(name == n for name, n in seen)


@pytest.mark.asyncio
async def test_write_rate_limit() -> None:
    clock = Clock()
    store = MemoryKVStore(clock=clock, write_interval_seconds=1)
    await store.put("abcd", b"1", metadata={})
    with pytest.raises(StoreRateLimitedError):
        await store.put("abcd", b"2", metadata={})
    await store.put("other", b"1", metadata={})

    clock.now = START + timedelta(seconds=1)
    await store.put("abcd", b"3", metadata={})
    assert (await store.get_with_metadata("abcd")).value == b"3"


@pytest.mark.asyncio
async def test_delete_is_idempotent() -> None:
    store = MemoryKVStore(clock=Clock())
    await store.put("abcd", b"v", metadata={})
    await store.delete("abcd")
    await store.delete("abcd")
    assert await store.get_with_metadata("abcd") is None


@pytest.mark.asyncio
async def test_connect_and_disconnect_keep_data() -> None:
    store = MemoryKVStore(clock=Clock())
    await store.connect()
    await store.put("abcd", b"v", metadata={})
    await store.disconnect()
    assert (await store.get_with_metadata("abcd")).value == b"v"
