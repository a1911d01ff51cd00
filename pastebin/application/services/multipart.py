"""Large-object side of the resumable multipart upload protocol.

Create, resume and complete are independent calls keyed only by values
the client carries (key, upload_id, part receipts). No session table is
kept in process, so any instance can serve any phase.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pastebin.application.dtos.paste import MultipartSession
from pastebin.domain.exceptions import PayloadTooLargeException, ValidationException
from pastebin.infrastructure.blob.protocol import (
    BlobStoreProtocol,
    StoredObject,
    UploadedPart,
)
from pastebin.shared.telemetry.tracing import add_span_event

logger = logging.getLogger(__name__)


class MultipartUploadManager:
    """Opens, feeds and completes multipart sessions on the large-object store."""

    def __init__(self, blob_store: BlobStoreProtocol, max_allowed: int) -> None:
        self.blob_store = blob_store
        self.max_allowed = max_allowed

    async def open_session(self, name: str) -> MultipartSession:
        """Open a session whose object key is the paste name."""
        ref = await self.blob_store.create_multipart_upload(name)
        logger.info("Multipart upload opened for %s (upload_id: %s)", name, ref.upload_id)
        return MultipartSession(name=name, key=ref.key, upload_id=ref.upload_id)

    async def upload_part(
        self, key: str, upload_id: str, part_number: int, data: bytes
    ) -> UploadedPart:
        """Forward one request body as one part."""
        if part_number < 1:
            raise ValidationException(
                f"part number must be positive, got {part_number}", field="part_number"
            )
        upload = self.blob_store.resume_multipart_upload(key, upload_id)
        return await upload.upload_part(part_number, data)

    async def complete(
        self,
        name: str,
        key: str,
        upload_id: str,
        parts: Sequence[UploadedPart],
    ) -> StoredObject:
        """Complete the session and enforce the size limit on the realized object.

        Raises:
            ValidationException: name differs from the session key.
            PayloadTooLargeException: the object is over the maximum; it is
                deleted before raising.
        """
        if name != key:
            raise ValidationException(
                f"name '{name}' is not consistent with the originally specified name",
                field="name",
            )
        if not parts:
            raise ValidationException("multipart part list is empty", field="parts")
        upload = self.blob_store.resume_multipart_upload(key, upload_id)
        stored = await upload.complete(parts)
        if stored.size > self.max_allowed:
            await self.blob_store.delete([stored.key])
            add_span_event(
                "multipart.rejected_oversize",
                {"upload_id": upload_id, "size": stored.size},
            )
            logger.warning(
                "Multipart upload %s for %s rejected: %s bytes over limit %s",
                upload_id,
                name,
                stored.size,
                self.max_allowed,
            )
            raise PayloadTooLargeException(stored.size, self.max_allowed)
        return stored
