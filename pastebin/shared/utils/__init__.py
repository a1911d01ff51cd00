"""Shared utilities: datetime and generators."""

from pastebin.shared.utils.datetime import (
    from_timestamp_utc,
    to_unix,
    utc_now,
)
from pastebin.shared.utils.generators import generate_random_string

__all__ = [
    "generate_random_string",
    "utc_now",
    "from_timestamp_utc",
    "to_unix",
]
