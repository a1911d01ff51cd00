"""Tiered paste storage engine: the operations exposed to request handlers.

Callers decode requests and authenticate users; this engine decides where
bytes live, keeps metadata consistent across both stores, enforces logical
expiry, passwords and size limits, and drives the multipart protocol.
"""

from __future__ import annotations

import logging
import random
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import replace
from datetime import datetime

from pastebin.application.dtos.paste import (
    MultipartSession,
    PasteWithMetadata,
    PasteWriteResult,
    SweepResult,
    WriteOptions,
)
from pastebin.application.services.access_accounting import AccessAccounting
from pastebin.application.services.expiration import ExpirationCoordinator
from pastebin.application.services.multipart import MultipartUploadManager
from pastebin.application.services.sweeper import LargeStoreSweeper
from pastebin.application.services.tiered_writer import TieredPasteWriter
from pastebin.application.services.tiering import TieringPolicy
from pastebin.core.background import BackgroundTaskRunner
from pastebin.core.config import Settings, get_settings
from pastebin.core.constants import (
    CUSTOM_NAME_PREFIX,
    DEFAULT_PASSWD_LEN,
    MAX_PASSWD_LEN,
    MIN_PASSWD_LEN,
    NAME_REGEX,
    PASTE_NAME_LEN,
    PRIVATE_PASTE_NAME_LEN,
)
from pastebin.domain.exceptions import (
    IncorrectPasswordException,
    PasteNameConflictException,
    PasteNotFoundException,
    PayloadTooLargeException,
    ValidationException,
)
from pastebin.infrastructure.blob.protocol import BlobStoreProtocol, UploadedPart
from pastebin.infrastructure.kv.protocol import KVStoreProtocol
from pastebin.schemas.paste_metadata import PasteMetadata
from pastebin.shared.telemetry.tracing import traced
from pastebin.shared.utils.datetime import to_unix, utc_now
from pastebin.shared.utils.generators import generate_random_string

logger = logging.getLogger(__name__)

# Random names are re-drawn when taken; short names can collide.
_NAME_ATTEMPTS = 8


class PasteStorage:
    """Engine facade wiring tiering, expiration, accounting, sweep and multipart.

    Stores, clock, randomness and the background runner are injected so the
    engine holds no global state and every collaborator can be replaced.
    """

    def __init__(
        self,
        kv_store: KVStoreProtocol,
        blob_store: BlobStoreProtocol,
        settings: Settings | None = None,
        *,
        background: BackgroundTaskRunner | None = None,
        clock: Callable[[], datetime] = utc_now,
        random_source: Callable[[], float] = random.random,
    ) -> None:
        self.settings = settings or get_settings()
        self.background = background or BackgroundTaskRunner()
        self._clock = clock

        self.writer = TieredPasteWriter(kv_store, blob_store)
        self.tiering = TieringPolicy(self.settings.large_store_threshold)
        self.expiration = ExpirationCoordinator.from_settings(
            self.settings, self.writer, self.background
        )
        self.accounting = AccessAccounting(
            self.writer,
            self.expiration,
            self.settings.access_count_probability,
            random_source=random_source,
        )
        self.sweeper = LargeStoreSweeper(
            kv_store, blob_store, batch_size=self.settings.sweep_batch_size
        )
        self.multipart = MultipartUploadManager(
            blob_store, self.settings.large_store_max_allowed
        )

    def _now_unix(self) -> int:
        return to_unix(self._clock())

    # ---- Policy helpers ----

    @staticmethod
    def _validate_password(passwd: str | None) -> None:
        if passwd is None:
            return
        if len(passwd) > MAX_PASSWD_LEN:
            raise ValidationException(
                f"password too long ({len(passwd)} > {MAX_PASSWD_LEN})", field="passwd"
            )
        if len(passwd) < MIN_PASSWD_LEN:
            raise ValidationException(
                f"password too short ({len(passwd)} < {MIN_PASSWD_LEN})", field="passwd"
            )
        if "\n" in passwd:
            raise ValidationException("password should not contain newline", field="passwd")

    def _check_size(self, size: int) -> None:
        if size > self.settings.large_store_max_allowed:
            raise PayloadTooLargeException(size, self.settings.large_store_max_allowed)

    async def _name_status(self, name: str) -> tuple[bool, PasteMetadata | None]:
        """Whether name is free, and the expired record still holding it if any."""
        record = await self.writer.read(name)
        if record is None:
            return True, None
        metadata = record[1]
        if metadata.is_expired(self._now_unix()):
            return True, metadata
        return False, None

    async def _allocate_name(
        self, custom_name: str | None, is_private: bool
    ) -> tuple[str, PasteMetadata | None]:
        """Stored name for a new paste: '~' + custom name, or a random free name.

        Also returns the expired record the name was reclaimed from, if any.
        """
        if custom_name is not None:
            if not NAME_REGEX.match(custom_name):
                raise ValidationException(
                    f"Name {custom_name} not satisfying regexp {NAME_REGEX.pattern}",
                    field="name",
                )
            name = CUSTOM_NAME_PREFIX + custom_name
            available, stale = await self._name_status(name)
            if not available:
                raise PasteNameConflictException(name)
            return name, stale
        length = PRIVATE_PASTE_NAME_LEN if is_private else PASTE_NAME_LEN
        for _ in range(_NAME_ATTEMPTS):
            name = generate_random_string(length)
            available, stale = await self._name_status(name)
            if available:
                return name, stale
        raise PasteNameConflictException(name)

    async def _read_live(self, name: str) -> tuple[bytes, PasteMetadata]:
        """Record of a paste that logically exists; lazily deletes expired ones."""
        record = await self.writer.read(name)
        if record is None:
            raise PasteNotFoundException(name)
        if self.expiration.check_on_read(name, record[1], self._now_unix()):
            raise PasteNotFoundException(name)
        return record

    async def _authorize(self, name: str, password: str | None) -> PasteMetadata:
        _, metadata = await self._read_live(name)
        if password is None or password != metadata.passwd:
            raise IncorrectPasswordException(name)
        return metadata

    async def _write(
        self,
        name: str,
        body: bytes | None,
        size: int,
        options: WriteOptions,
        original: PasteMetadata | None,
        *,
        is_multipart: bool = False,
        stale: PasteMetadata | None = None,
    ) -> PasteWriteResult:
        """Build the current-schema record and commit it through the writer.

        stale is the expired record a new paste reclaims its name from.
        """
        now = self._now_unix()
        location = self.tiering.choose_location(
            size,
            current=original.location if original else None,
            is_multipart=is_multipart,
        )
        lifetime = self.expiration.compute(now, options.expiration_seconds, location)
        if options.passwd:
            passwd = options.passwd
        elif original is not None:
            passwd = original.passwd
        else:
            passwd = generate_random_string(DEFAULT_PASSWD_LEN)
        metadata = PasteMetadata(
            location=location,
            passwd=passwd,
            last_modified_at_unix=now,
            created_at_unix=original.created_at_unix if original else now,
            will_expire_at_unix=lifetime.will_expire_at_unix,
            access_counter=original.access_counter if original else 0,
            size_bytes=size,
            filename=options.filename,
            highlight_language=options.highlight_language,
            encryption_scheme=options.encryption_scheme,
        )
        await self.writer.commit(
            name,
            metadata,
            body=None if is_multipart else body,
            expire_at=lifetime.physical_expire_at_unix,
            replaces=stale,
        )
        return PasteWriteResult(name=name, passwd=passwd, metadata=metadata)

    # ---- Reads ----

    @traced("pastebin.paste_name_available")
    async def paste_name_available(self, name: str) -> bool:
        """True if no paste with this stored name logically exists."""
        available, _ = await self._name_status(name)
        return available

    @traced("pastebin.get_paste_metadata")
    async def get_paste_metadata(self, name: str) -> PasteMetadata:
        """Metadata of a live paste without touching its bytes or its counter.

        Raises:
            PasteNotFoundException: absent or logically expired.
        """
        _, metadata = await self._read_live(name)
        return metadata

    @traced("pastebin.get_paste")
    async def get_paste(self, name: str) -> PasteWithMetadata:
        """Content and metadata of a live paste.

        Large-store content is returned as an async byte stream. A served read
        may bump the access counter in the background.

        Raises:
            PasteNotFoundException: absent, logically expired, or its large
                object is gone.
        """
        value, metadata = await self._read_live(name)
        if metadata.in_large_store:
            blob = await self.writer.fetch_large_body(name)
            if blob is None:
                raise PasteNotFoundException(name)
            paste: bytes | AsyncIterator[bytes] = blob.body
        else:
            paste = value
        self.background.spawn(
            self.accounting.record_hit(name, value, metadata),
            name=f"access-count:{name}",
        )
        return PasteWithMetadata(paste=paste, metadata=metadata)

    # ---- Writes ----

    @traced("pastebin.create_paste")
    async def create_paste(self, content: bytes, options: WriteOptions) -> PasteWriteResult:
        """Create a paste under a random or caller-chosen name.

        Raises:
            ValidationException: bad name or password.
            PasteNameConflictException: custom name in use.
            PayloadTooLargeException: content over the maximum.
        """
        self._check_size(len(content))
        self._validate_password(options.passwd)
        name, stale = await self._allocate_name(options.custom_name, options.is_private)
        result = await self._write(name, content, len(content), options, None, stale=stale)
        logger.info(
            "Created paste %s (%s bytes, location: %s)",
            name,
            len(content),
            result.metadata.location.value,
        )
        return result

    @traced("pastebin.update_paste")
    async def update_paste(
        self,
        name: str,
        password: str | None,
        content: bytes,
        options: WriteOptions,
    ) -> PasteWriteResult:
        """Replace content and descriptive fields of an existing paste.

        name and created_at are kept; the password is kept unless
        options.passwd sets a new one.

        Raises:
            PasteNotFoundException, IncorrectPasswordException,
            ValidationException, PayloadTooLargeException.
        """
        if options.custom_name is not None:
            raise ValidationException("Cannot set name for an update", field="name")
        self._check_size(len(content))
        self._validate_password(options.passwd)
        original = await self._authorize(name, password)
        result = await self._write(name, content, len(content), options, original)
        logger.info(
            "Updated paste %s (%s bytes, location: %s)",
            name,
            len(content),
            result.metadata.location.value,
        )
        return result

    @traced("pastebin.delete_paste")
    async def delete_paste(self, name: str, password: str | None) -> None:
        """Delete a paste from both stores.

        Raises:
            PasteNotFoundException, IncorrectPasswordException.
        """
        metadata = await self._authorize(name, password)
        await self.writer.remove(name, metadata)

    # ---- Sweep ----

    async def clean_expired_in_large_store(self, now: datetime | None = None) -> SweepResult:
        """Run one sweep tick at now (defaults to the engine clock)."""
        return await self.sweeper.run(now or self._clock())

    # ---- Multipart upload ----

    @traced("pastebin.mpu_create")
    async def mpu_create(
        self, custom_name: str | None = None, is_private: bool = False
    ) -> MultipartSession:
        """Allocate a name like a create and open a session. No metadata is written."""
        # The session overwrites any stale large object under the same key.
        name, _ = await self._allocate_name(custom_name, is_private)
        return await self.multipart.open_session(name)

    @traced("pastebin.mpu_create_update")
    async def mpu_create_update(self, name: str, password: str | None) -> MultipartSession:
        """Open a session that will replace an existing paste's content."""
        await self._authorize(name, password)
        return await self.multipart.open_session(name)

    @traced("pastebin.mpu_resume")
    async def mpu_resume(
        self, key: str, upload_id: str, part_number: int, data: bytes
    ) -> UploadedPart:
        """Upload one part; the caller keeps the returned receipt."""
        return await self.multipart.upload_part(key, upload_id, part_number, data)

    @traced("pastebin.mpu_complete")
    async def mpu_complete(
        self,
        name: str,
        key: str,
        upload_id: str,
        parts: Sequence[UploadedPart],
        options: WriteOptions,
        *,
        is_update: bool = False,
    ) -> PasteWriteResult:
        """Complete a session and write metadata with location forced to large.

        The password of an update was checked when its session was opened.

        Raises:
            PasteNotFoundException: update target no longer exists.
            PasteNameConflictException: create target was taken meanwhile.
            ValidationException: name/key mismatch, bad part list or password.
            PayloadTooLargeException: realized object over the maximum.
        """
        self._validate_password(options.passwd)
        original: PasteMetadata | None = None
        if is_update:
            _, original = await self._read_live(name)
        elif not await self.paste_name_available(name):
            raise PasteNameConflictException(name)
        stored = await self.multipart.complete(name, key, upload_id, parts)
        result = await self._write(
            name, None, stored.size, options, original, is_multipart=True
        )
        logger.info(
            "Multipart upload %s completed as paste %s (%s bytes, %s parts)",
            upload_id,
            name,
            stored.size,
            len(parts),
        )
        return replace(result, etag=stored.etag)
