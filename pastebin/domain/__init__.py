"""Domain layer: enums and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from pastebin.domain.enums import PasteLocation
from pastebin.domain.exceptions import (
    IncorrectPasswordException,
    InvariantViolationException,
    PastebinException,
    PasteNameConflictException,
    PasteNotFoundException,
    PayloadTooLargeException,
    ValidationException,
)

__all__ = [
    # Enums
    "PasteLocation",
    # Exceptions
    "IncorrectPasswordException",
    "InvariantViolationException",
    "PastebinException",
    "PasteNameConflictException",
    "PasteNotFoundException",
    "PayloadTooLargeException",
    "ValidationException",
]
