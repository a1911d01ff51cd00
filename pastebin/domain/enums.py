"""Domain enumerations for the paste storage engine."""

from enum import Enum


class PasteLocation(str, Enum):
    """Which store holds the bytes of a paste.

    The metadata record always lives in the small-object store.
    """

    SMALL_STORE = "small"
    LARGE_STORE = "large"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid location values as strings."""
        return [location.value for location in cls]
