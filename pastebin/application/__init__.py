"""Application layer: engine services and DTOs.

Depends only on domain types and store protocols. Infrastructure provides
the store implementations.
"""

from pastebin.application.dtos import (
    MultipartSession,
    PasteWithMetadata,
    PasteWriteResult,
    SweepResult,
    WriteOptions,
)
from pastebin.application.services.paste_storage import PasteStorage

__all__ = [
    "MultipartSession",
    "PasteStorage",
    "PasteWithMetadata",
    "PasteWriteResult",
    "SweepResult",
    "WriteOptions",
]
