"""Logging setup for processes that run the engine (sweep script, host services)."""

import logging
import sys

from pastebin.core.config import get_settings

# Client libraries that log every request at DEBUG/INFO.
_CHATTY_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3")


def setup_logging(level: int | None = None) -> None:
    """Configure root logging to stdout.

    Args:
        level: Explicit level; defaults to DEBUG when settings.debug, else INFO.
            Store client libraries stay at WARNING unless running at DEBUG.
    """
    if level is None:
        level = logging.DEBUG if get_settings().debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    if level > logging.DEBUG:
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
