"""Versioned paste metadata record and its read-boundary migration.

Records are stored as camelCase JSON next to the small-store entry. Older
records may lack fields added later (location, accessCounter, sizeBytes) or
use legacy location names; migrate_paste_metadata upgrades them so the rest
of the engine only ever sees the current shape.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from pastebin.core.constants import PASTE_SCHEMA_VERSION
from pastebin.domain.enums import PasteLocation
from pastebin.domain.exceptions import InvariantViolationException

# Location names written by the first generation of the service.
_LEGACY_LOCATIONS = {
    "KV": PasteLocation.SMALL_STORE,
    "R2": PasteLocation.LARGE_STORE,
}


class StoredPasteMetadata(BaseModel):
    """Any metadata shape that may be found in the small-object store."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    schema_version: int = 0
    location: str | None = None
    passwd: str

    last_modified_at_unix: int
    created_at_unix: int
    will_expire_at_unix: int

    access_counter: int | None = None
    size_bytes: int | None = None
    filename: str | None = None
    highlight_language: str | None = None
    encryption_scheme: str | None = None


class PasteMetadata(BaseModel):
    """Current-schema metadata of a paste.

    passwd is kept in plaintext; see DESIGN.md.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    schema_version: int = PASTE_SCHEMA_VERSION
    location: PasteLocation
    passwd: str

    last_modified_at_unix: int
    created_at_unix: int
    will_expire_at_unix: int

    access_counter: int = 0
    size_bytes: int = 0
    filename: str | None = None
    highlight_language: str | None = None
    encryption_scheme: str | None = None

    @property
    def in_large_store(self) -> bool:
        return self.location is PasteLocation.LARGE_STORE

    def is_expired(self, now_unix: float) -> bool:
        """True once the logical lifetime has passed."""
        return self.will_expire_at_unix < now_unix

    def to_storage(self) -> dict[str, Any]:
        """camelCase JSON-safe dict, always at the current schema version."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def _migrate_location(value: str | None) -> PasteLocation:
    if value is None:
        return PasteLocation.SMALL_STORE
    if value in _LEGACY_LOCATIONS:
        return _LEGACY_LOCATIONS[value]
    if value not in PasteLocation.values():
        raise ValueError(f"unknown location '{value}', expected one of {PasteLocation.values()}")
    return PasteLocation(value)


def migrate_paste_metadata(raw: Mapping[str, Any]) -> PasteMetadata:
    """Upgrade a stored record of any known schema version to PasteMetadata.

    Pure: never touches a store. Missing fields default to location
    SMALL_STORE, access_counter 0 and size_bytes 0.

    Raises:
        InvariantViolationException: record lacks required fields or has an
            unknown location.
    """
    try:
        stored = StoredPasteMetadata.model_validate(raw)
        location = _migrate_location(stored.location)
    except (ValidationError, ValueError) as e:
        raise InvariantViolationException(
            f"unreadable paste metadata: {e}", {"raw_keys": sorted(raw)}
        ) from e
    return PasteMetadata(
        schema_version=PASTE_SCHEMA_VERSION,
        location=location,
        passwd=stored.passwd,
        last_modified_at_unix=stored.last_modified_at_unix,
        created_at_unix=stored.created_at_unix,
        will_expire_at_unix=stored.will_expire_at_unix,
        access_counter=stored.access_counter or 0,
        size_bytes=stored.size_bytes or 0,
        filename=stored.filename,
        highlight_language=stored.highlight_language,
        encryption_scheme=stored.encryption_scheme,
    )
