"""Parsers for human-readable sizes ("20M") and expirations ("7d")."""

import re

_SIZE_RE = re.compile(r"^([\d.]+)\s*([KMG]?)$")
_EXPIRATION_RE = re.compile(r"^([\d.]+)\s*([smhd]?)$")

_SIZE_UNITS = {"": 1, "K": 1024, "M": 1024 * 1024, "G": 1024 * 1024 * 1024}
_EXPIRATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 24 * 3600}


def _parse_number(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def parse_size(size_str: str) -> int | None:
    """Parse a size like '512', '100K', '20M' or '1.5G' into bytes.

    Returns:
        Size in bytes (floored), or None if the string is malformed.
    """
    match = _SIZE_RE.match(size_str.strip())
    if match is None:
        return None
    number = _parse_number(match.group(1))
    if number is None:
        return None
    return int(number * _SIZE_UNITS[match.group(2)])


def parse_expiration(expiration_str: str) -> int | None:
    """Parse an expiration like '300', '30m', '12h' or '7d' into seconds.

    Returns:
        Seconds (floored), or None if the string is malformed.
    """
    match = _EXPIRATION_RE.match(expiration_str.strip())
    if match is None:
        return None
    number = _parse_number(match.group(1))
    if number is None:
        return None
    return int(number * _EXPIRATION_UNITS[match.group(2)])
