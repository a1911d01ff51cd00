"""Sampled access counter.

Counting every read would cost one metadata write per read. Instead a
read bumps the counter with a small fixed probability, so access_counter
times 1/probability estimates the real hit count.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import TYPE_CHECKING

from pastebin.infrastructure.exceptions import StoreRateLimitedError
from pastebin.schemas.paste_metadata import PasteMetadata

if TYPE_CHECKING:
    from pastebin.application.services.expiration import ExpirationCoordinator
    from pastebin.application.services.tiered_writer import TieredPasteWriter

logger = logging.getLogger(__name__)


class AccessAccounting:
    """Best-effort, probabilistic access_counter maintenance."""

    def __init__(
        self,
        writer: TieredPasteWriter,
        expiration: ExpirationCoordinator,
        probability: float,
        random_source: Callable[[], float] = random.random,
    ) -> None:
        self._writer = writer
        self._expiration = expiration
        self.probability = probability
        self._random = random_source

    async def record_hit(self, name: str, value: bytes, metadata: PasteMetadata) -> bool:
        """Maybe increment the counter; returns True if the record was rewritten.

        The record keeps its bytes and its physical expiry. A rate-limited
        write is dropped silently.
        """
        if self._random() >= self.probability:
            return False
        updated = metadata.model_copy(
            update={"access_counter": metadata.access_counter + 1}
        )
        try:
            await self._writer.rewrite_metadata(
                name,
                value,
                updated,
                expire_at=self._expiration.physical_expire_at(metadata),
            )
        except StoreRateLimitedError:
            logger.debug("Access counter update for %s rate limited; skipped", name)
            return False
        return True
