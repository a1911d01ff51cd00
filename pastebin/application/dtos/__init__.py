"""Application DTOs."""

from pastebin.application.dtos.paste import (
    MultipartSession,
    PasteWithMetadata,
    PasteWriteResult,
    SweepResult,
    WriteOptions,
)
from pastebin.infrastructure.blob.protocol import UploadedPart

__all__ = [
    "MultipartSession",
    "PasteWithMetadata",
    "PasteWriteResult",
    "SweepResult",
    "UploadedPart",
    "WriteOptions",
]
