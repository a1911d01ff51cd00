"""Shared helpers: parsers, utilities, telemetry."""
