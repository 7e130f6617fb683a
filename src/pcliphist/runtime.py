#!/usr/bin/env python3
"""Persistent asyncio runtime hosting the clipboard watcher.

A ClipboardRuntime owns one event loop running on a dedicated thread for the
lifetime of the process. The watcher task is scheduled on it once; the
façade is used from any other thread and never needs a loop of its own.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import suppress
from typing import TYPE_CHECKING

from pcliphist.errors import ClipboardInitError
from pcliphist.facade import ClipboardFacade
from pcliphist.watcher import ClipboardWatcher

if TYPE_CHECKING:
    from pcliphist.capabilities import Clipboard, ImageStore, Notifier
    from pcliphist.history import HistoryStore

logger = logging.getLogger(__name__)


class ClipboardRuntime:
    """Wire the watcher and façade around one shared HistoryStore.

    Attributes:
        store: The shared history.
        watcher: The watcher scheduled by start().
        facade: Command surface for callers.
    """

    def __init__(
        self,
        clipboard: Clipboard,
        store: HistoryStore,
        image_store: ImageStore,
        notifier: Notifier,
    ) -> None:
        self._clipboard = clipboard
        self.store = store
        self.watcher = ClipboardWatcher(clipboard, store, image_store, notifier)
        self.facade = ClipboardFacade(store, clipboard, image_store)
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop, name="pcliphist-runtime", daemon=True
        )
        self._task: asyncio.Task | None = None
        self._done = threading.Event()

    @property
    def watching(self) -> bool:
        """True while the watcher task is running."""
        return self._task is not None and not self._done.is_set()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    async def _spawn_watcher(self) -> None:
        self._task = asyncio.create_task(self.watcher.run())
        self._task.add_done_callback(self._on_watcher_done)

    def _on_watcher_done(self, task: asyncio.Task) -> None:
        self._done.set()
        if task.cancelled():
            logger.debug("Clipboard watcher cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Clipboard watcher stopped unexpectedly: %s", exc)

    def start(self) -> bool:
        """Subscribe to clipboard changes and start the watcher.

        Called once at setup. A ClipboardInitError is logged and leaves the
        watcher off; the façade stays usable.

        Returns:
            True if the watcher is running.
        """
        if self._task is not None:
            return self.watching
        try:
            self._clipboard.start_watching()
        except ClipboardInitError as e:
            logger.error("Failed to start clipboard watcher: %s", e)
            return False

        self._thread.start()
        asyncio.run_coroutine_threadsafe(self._spawn_watcher(), self._loop).result()
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the watcher finishes or timeout elapses.

        Returns:
            True if the watcher has finished.
        """
        if self._task is None:
            return True
        return self._done.wait(timeout)

    async def _cancel_watcher(self) -> None:
        if self._task is None or self._task.done():
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task

    def stop(self) -> None:
        """Cancel the watcher, stop the loop and join the runtime thread."""
        if not self._thread.is_alive():
            return
        asyncio.run_coroutine_threadsafe(self._cancel_watcher(), self._loop).result()
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        # The change wait may still be running in an executor thread.
        self._loop.run_until_complete(self._loop.shutdown_default_executor())
        self._loop.close()
