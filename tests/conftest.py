"""Pytest configuration and fixtures for the paste storage engine.

Stores are real in-process adapters: MemoryKVStore driven by a controllable
clock and LocalBlobStore under tmp_path. No Redis or S3 is needed.
"""

from datetime import UTC, datetime, timedelta

import pytest

from pastebin.application.services.paste_storage import PasteStorage
from pastebin.core.background import BackgroundTaskRunner
from pastebin.core.config import Settings
from pastebin.infrastructure.blob.local_store import LocalBlobStore
from pastebin.infrastructure.kv.memory_store import MemoryKVStore

START = datetime(2024, 1, 1, tzinfo=UTC)

# Small limits so tiering and size checks are cheap to hit.
THRESHOLD = 64
MAX_ALLOWED = 1024


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at 2024-01-01T00:00:00Z."""
    return FakeClock()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with memory/local backends and tiny size limits."""
    return Settings(
        kv_backend="memory",
        blob_backend="local",
        blob_root=str(tmp_path / "blobs"),
        large_store_threshold=THRESHOLD,
        large_store_max_allowed=MAX_ALLOWED,
    )


@pytest.fixture
def kv_store(clock) -> MemoryKVStore:
    return MemoryKVStore(clock=clock)


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(str(tmp_path / "blobs"))


@pytest.fixture
async def background():
    """Runner drained at teardown so no task outlives the test loop."""
    runner = BackgroundTaskRunner()
    yield runner
    await runner.drain()


@pytest.fixture
def storage(kv_store, blob_store, settings, background, clock) -> PasteStorage:
    """Engine over the in-process stores; access accounting never fires."""
    return PasteStorage(
        kv_store,
        blob_store,
        settings,
        background=background,
        clock=clock,
        random_source=lambda: 1.0,
    )


async def _read_all(paste) -> bytes:
    if isinstance(paste, bytes):
        return paste
    return b"".join([chunk async for chunk in paste])


@pytest.fixture
def read_content():
    """Collects paste content whether it is bytes or an async byte stream."""
    return _read_all
