"""Application services: tiering, expiration, accounting, sweep, multipart, engine."""

from pastebin.application.services.access_accounting import AccessAccounting
from pastebin.application.services.expiration import ExpirationCoordinator, PasteLifetime
from pastebin.application.services.multipart import MultipartUploadManager
from pastebin.application.services.paste_storage import PasteStorage
from pastebin.application.services.sweeper import LargeStoreSweeper
from pastebin.application.services.tiered_writer import TieredPasteWriter
from pastebin.application.services.tiering import TieringPolicy

__all__ = [
    "AccessAccounting",
    "ExpirationCoordinator",
    "LargeStoreSweeper",
    "MultipartUploadManager",
    "PasteLifetime",
    "PasteStorage",
    "TieredPasteWriter",
    "TieringPolicy",
]
