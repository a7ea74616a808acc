"""Asyncio message loop around the application state owner."""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional, Set

from andromeda.app.error import AppError
from andromeda.app.messages import AppErrorRaised, InitClient
from andromeda.app.state import App
from andromeda.logging import LoggerFactory
from andromeda.storage.exceptions import StorageError

log = LoggerFactory.for_app()


class AppController:
    """Feed messages to ``App`` one at a time and run its effects concurrently.

    Effects are independent tasks; there is no ordering between them and no
    cancellation. Whatever message they produce is queued for the state owner.
    """

    def __init__(self, app: App):
        self.app = app
        self._queue: Optional[asyncio.Queue] = None
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, message) -> None:
        if self._queue is None:
            raise RuntimeError("Controller is not running")
        self._queue.put_nowait(message)

    async def _run_effect(self, effect) -> None:
        try:
            message = await effect
        except StorageError as error:
            message = AppErrorRaised(AppError.from_exception(error))
        except Exception as error:
            log.exception(f"Unexpected error in background task: {error}")
            message = AppErrorRaised(AppError(str(error), recoverable=False))
        self._queue.put_nowait(message)

    def _busy(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def run(self, initial: Iterable = (InitClient(),), *, until_idle: bool = False) -> App:
        """Process messages until ``Quit`` (or, with ``until_idle``, until no work is left)."""
        self._queue = asyncio.Queue()
        for message in initial:
            self._queue.put_nowait(message)

        while self.app.running:
            if until_idle and self._queue.empty() and not self._busy():
                break
            message = await self._queue.get()
            log.trace(f"Message: {type(message).__name__}")
            for effect in self.app.update(message):
                task = asyncio.create_task(self._run_effect(effect))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
        return self.app
