"""Stored record and wire schemas."""

from pastebin.schemas.multipart import UploadedPartIn, parse_uploaded_parts
from pastebin.schemas.paste_metadata import (
    PasteMetadata,
    StoredPasteMetadata,
    migrate_paste_metadata,
)

__all__ = [
    "PasteMetadata",
    "StoredPasteMetadata",
    "UploadedPartIn",
    "migrate_paste_metadata",
    "parse_uploaded_parts",
]
