"""Engine lifespan: startup and shutdown.

Wiring only: builds both stores from settings, connects the small-object
store, and on exit waits for background work before closing stores.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from pastebin.application.services.paste_storage import PasteStorage
from pastebin.core.background import BackgroundTaskRunner
from pastebin.core.config import Settings, get_settings
from pastebin.infrastructure.blob.factory import BlobStoreFactory
from pastebin.infrastructure.kv.factory import KVStoreFactory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_engine_lifespan(settings: Settings | None = None) -> AsyncIterator[PasteStorage]:
    """Yield a ready PasteStorage; on exit drain background tasks and disconnect.

    Startup order: small-object store connect, large-object store.
    Shutdown order: background drain, small-object store disconnect.
    """
    settings = settings or get_settings()

    # ---- Startup ----
    kv_store = KVStoreFactory.create_kv_store(settings)
    await kv_store.connect()
    blob_store = BlobStoreFactory.create_blob_store(settings)
    background = BackgroundTaskRunner()
    storage = PasteStorage(kv_store, blob_store, settings, background=background)
    logger.info(
        "Paste storage ready (kv: %s, blob: %s)",
        settings.kv_backend,
        settings.blob_backend,
    )

    try:
        yield storage
    finally:
        # ---- Shutdown ----
        await background.drain()
        if background.failures:
            logger.warning("%s background task(s) failed", len(background.failures))
        await kv_store.disconnect()
        logger.info("Small-object store disconnected")
