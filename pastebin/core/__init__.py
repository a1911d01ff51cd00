"""Core: config, constants, background work and engine bootstrap."""

from pastebin.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
