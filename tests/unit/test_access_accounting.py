"""AccessAccounting tests: sampling, unchanged TTL, swallowed rate limits."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from pastebin.application.services.access_accounting import AccessAccounting
from pastebin.domain.enums import PasteLocation
from pastebin.infrastructure.exceptions import KVStoreError, StoreRateLimitedError
from pastebin.schemas.paste_metadata import PasteMetadata

META = PasteMetadata(
    location=PasteLocation.SMALL_STORE,
    passwd="password123",
    last_modified_at_unix=1000,
    created_at_unix=1000,
    will_expire_at_unix=2000,
    access_counter=4,
)


@pytest.fixture
def writer():
    """Mock tiered writer."""
    mock = AsyncMock()
    mock.rewrite_metadata = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def expiration():
    """Mock expiration coordinator returning a fixed physical expiry."""
    mock = MagicMock()
    mock.physical_expire_at = MagicMock(return_value=5555)
    return mock


@pytest.mark.asyncio
async def test_unsampled_read_writes_nothing(writer, expiration) -> None:
    accounting = AccessAccounting(writer, expiration, 0.01, random_source=lambda: 0.5)
    assert await accounting.record_hit("abcd", b"body", META) is False
    writer.rewrite_metadata.assert_not_called()


@pytest.mark.asyncio
async def test_sampled_read_increments_counter_with_same_ttl(writer, expiration) -> None:
    accounting = AccessAccounting(writer, expiration, 0.01, random_source=lambda: 0.001)

    assert await accounting.record_hit("abcd", b"body", META) is True

    writer.rewrite_metadata.assert_awaited_once()
    args, kwargs = writer.rewrite_metadata.call_args
    assert args[0] == "abcd"
    assert args[1] == b"body"
    assert args[2].access_counter == 5
    assert args[2].will_expire_at_unix == META.will_expire_at_unix
    assert kwargs["expire_at"] == 5555
    expiration.physical_expire_at.assert_called_once_with(META)


@pytest.mark.asyncio
async def test_rate_limited_write_is_swallowed(writer, expiration) -> None:
    writer.rewrite_metadata = AsyncMock(side_effect=StoreRateLimitedError("abcd"))
    accounting = AccessAccounting(writer, expiration, 1.0, random_source=lambda: 0.0)
    assert await accounting.record_hit("abcd", b"body", META) is False


@pytest.mark.asyncio
async def test_other_store_errors_propagate(writer, expiration) -> None:
    """Only rate limiting is expected; anything else goes to the background error channel."""
    writer.rewrite_metadata = AsyncMock(side_effect=KVStoreError("abcd", "put", "boom"))
    accounting = AccessAccounting(writer, expiration, 1.0, random_source=lambda: 0.0)
    with pytest.raises(KVStoreError):
        await accounting.record_hit("abcd", b"body", META)
