"""Spans for engine operations (OpenTelemetry API; a no-op until an SDK is installed).

Errors a caller is expected to handle (not-found, wrong password, size
limits) are recorded on the span but do not mark it failed; only server
side errors (status_code >= 500 or non-engine exceptions) do.
"""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from pastebin.domain.exceptions import PastebinException

_tracer = trace.get_tracer("pastebin")

# Only these argument names are recorded; passwords and bodies never reach a span.
_RECORDED_ARGS = frozenset({
    "name", "key", "upload_id", "part_number", "is_update", "is_private",
    "custom_name", "now",
})


def _record_arguments(span: trace.Span, arguments: dict[str, Any]) -> None:
    for arg, value in arguments.items():
        if arg in _RECORDED_ARGS and value is not None:
            span.set_attribute(f"paste.{arg}", str(value))


def _record_failure(span: trace.Span, exc: Exception) -> None:
    span.record_exception(exc)
    if isinstance(exc, PastebinException):
        span.set_attribute("paste.error_code", exc.error_code)
        span.set_attribute("paste.status_code", exc.status_code)
        if exc.status_code < 500:
            return
    span.set_status(Status(StatusCode.ERROR, str(exc)))


def traced(
    operation_name: str | None = None,
    attributes: dict[str, str | int | float | bool] | None = None,
) -> Callable:
    """Wrap an async engine operation in a span.

    Args:
        operation_name: Span name (defaults to module.qualname).
        attributes: Static attributes set on every span.
    """

    def decorator(func: Callable) -> Callable:
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with _tracer.start_as_current_span(
                span_name,
                attributes=attributes,
                record_exception=False,
                set_status_on_exception=False,
            ) as span:
                _record_arguments(span, signature.bind_partial(*args, **kwargs).arguments)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _record_failure(span, e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(attributes)


def add_span_event(name: str, attributes: dict | None = None) -> None:
    """Add an event to the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=attributes or {})
