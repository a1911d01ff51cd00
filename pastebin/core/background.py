"""Detached background work (lazy deletes, access counter bumps).

Tasks run after the caller already has its result. Failures are logged and
kept in a bounded deque; they never reach the request that spawned them.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Coroutine
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pastebin.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackgroundFailure:
    """A background task that raised."""

    name: str
    error: BaseException
    failed_at: datetime


class BackgroundTaskRunner:
    """Spawns fire-and-forget asyncio tasks with their own error channel."""

    def __init__(self, max_failures: int = 100) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self.failures: deque[BackgroundFailure] = deque(maxlen=max_failures)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Schedule coro on the running loop and return immediately."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Background task cancelled: %s", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background task failed: %s",
                task.get_name(),
                exc_info=(type(exc), exc, exc.__traceback__),
            )
            self.failures.append(
                BackgroundFailure(name=task.get_name(), error=exc, failed_at=utc_now())
            )

    @property
    def pending(self) -> int:
        """Number of tasks not finished yet."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every spawned task (including ones spawned meanwhile) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
