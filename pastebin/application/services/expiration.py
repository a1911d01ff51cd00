"""Expiration coordinator: logical vs physical lifetimes and lazy deletion.

Logical expiry (will_expire_at_unix) is what clients see and what every read
checks. Physical expiry is the small-object store's own TTL; it is never
shorter than the store's TTL floor and, for large-store pastes, extends past
the logical expiry by a grace period so the sweep still finds the metadata
it needs to delete the large object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pastebin.domain.enums import PasteLocation
from pastebin.domain.exceptions import ValidationException
from pastebin.schemas.paste_metadata import PasteMetadata
from pastebin.shared.parsers import parse_expiration
from pastebin.shared.telemetry.tracing import add_span_event

if TYPE_CHECKING:
    from pastebin.application.services.tiered_writer import TieredPasteWriter
    from pastebin.core.background import BackgroundTaskRunner
    from pastebin.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PasteLifetime:
    """Logical and physical expiry of one write, in unix seconds."""

    will_expire_at_unix: int
    physical_expire_at_unix: int


class ExpirationCoordinator:
    """Computes lifetimes and lazily deletes expired pastes found on read."""

    def __init__(
        self,
        writer: TieredPasteWriter,
        background: BackgroundTaskRunner,
        *,
        default_expiration: int,
        max_expiration: int,
        min_physical_ttl: int,
        large_store_grace: int,
    ) -> None:
        self._writer = writer
        self._background = background
        self.default_expiration = default_expiration
        self.max_expiration = max_expiration
        self.min_physical_ttl = min_physical_ttl
        self.large_store_grace = large_store_grace

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        writer: TieredPasteWriter,
        background: BackgroundTaskRunner,
    ) -> ExpirationCoordinator:
        return cls(
            writer,
            background,
            default_expiration=settings.default_expiration,
            max_expiration=settings.max_expiration,
            min_physical_ttl=settings.min_physical_ttl_seconds,
            large_store_grace=settings.large_store_grace_seconds,
        )

    def resolve_expiration(self, expiration: str | None) -> int:
        """Seconds for an expiration string, defaulted and clamped to the maximum.

        Raises:
            ValidationException: malformed expiration string.
        """
        if not expiration:
            seconds = self.default_expiration
        else:
            parsed = parse_expiration(expiration)
            if parsed is None:
                raise ValidationException(
                    f"'{expiration}' is not a valid expiration specification",
                    field="expiration",
                )
            seconds = parsed
        return min(seconds, self.max_expiration)

    def compute(
        self, now_unix: int, expiration_seconds: int, location: PasteLocation
    ) -> PasteLifetime:
        """Lifetimes of a write made at now_unix."""
        physical = now_unix + max(expiration_seconds, self.min_physical_ttl)
        if location is PasteLocation.LARGE_STORE:
            physical += self.large_store_grace
        return PasteLifetime(
            will_expire_at_unix=now_unix + expiration_seconds,
            physical_expire_at_unix=physical,
        )

    def physical_expire_at(self, metadata: PasteMetadata) -> int:
        """Physical expiry the record was last written with, recomputed from metadata."""
        expiration_seconds = metadata.will_expire_at_unix - metadata.last_modified_at_unix
        return self.compute(
            metadata.last_modified_at_unix, expiration_seconds, metadata.location
        ).physical_expire_at_unix

    def check_on_read(self, name: str, metadata: PasteMetadata, now_unix: float) -> bool:
        """Return True if the paste is logically expired.

        An expired paste is deleted from both stores in the background; the
        caller answers not-found without waiting for it.
        """
        if not metadata.is_expired(now_unix):
            return False
        logger.info(
            "Paste %s expired at %s; scheduling lazy delete",
            name,
            metadata.will_expire_at_unix,
        )
        add_span_event("paste.lazy_delete", {"name": name})
        self._background.spawn(
            self._writer.remove(name, metadata), name=f"lazy-delete:{name}"
        )
        return True
