"""Domain exceptions for the paste storage engine.

Every engine error carries a human-readable message, a machine-readable
error_code, optional details and a status_code that transport layers map
to their own responses. Errors propagate by raising to the caller.
"""

from typing import Any


class PastebinException(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. name, limits).
        status_code: HTTP-like status the caller should respond with.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for transport layers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PastebinException):
    """Raised when caller input is malformed (name, password, expiration, part list)."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class PasteNotFoundException(PastebinException):
    """Raised when a paste is absent or logically expired."""

    status_code = 404

    def __init__(self, name: str) -> None:
        super().__init__(
            f"paste of name '{name}' not found",
            "PASTE_NOT_FOUND",
            {"name": name},
        )


class IncorrectPasswordException(PastebinException):
    """Raised when the password does not match on update or delete."""

    status_code = 403

    def __init__(self, name: str) -> None:
        super().__init__(
            f"incorrect password for paste '{name}'",
            "INCORRECT_PASSWORD",
            {"name": name},
        )


class PasteNameConflictException(PastebinException):
    """Raised when a caller-chosen name is already in use."""

    status_code = 409

    def __init__(self, name: str) -> None:
        super().__init__(
            f"name '{name}' is already used",
            "PASTE_NAME_CONFLICT",
            {"name": name},
        )


class PayloadTooLargeException(PastebinException):
    """Raised when the declared or realized size is over the configured maximum."""

    status_code = 413

    def __init__(self, size: int, max_allowed: int) -> None:
        super().__init__(
            f"payload too large (max {max_allowed} bytes allowed)",
            "PAYLOAD_TOO_LARGE",
            {"size": size, "max_allowed": max_allowed},
        )


class InvariantViolationException(PastebinException):
    """Raised when stored state is corrupt (e.g. a small-store entry without metadata).

    Fatal; callers must not retry.
    """

    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"Assertion failed: {message}",
            "INVARIANT_VIOLATION",
            details,
        )
