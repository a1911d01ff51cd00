"""Pastebin: tiered storage engine for short-lived pastes."""

__version__ = "1.0.0"
