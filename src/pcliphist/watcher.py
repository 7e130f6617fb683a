#!/usr/bin/env python3
"""Clipboard watcher loop.

The watcher runs for the lifetime of the process. Each OS change signal
drives one cycle:

    IDLE -> CAPTURING -> DEDUPING -> COMMITTING -> IDLE

Classification and fingerprinting happen before the history lock is taken.
The notification is emitted after it is released, so observers reading
history while handling the notification never race the insertion.

A cycle is atomic: the entry is either committed or nothing changed.
Errors inside one cycle are logged and the watcher returns to IDLE.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import TYPE_CHECKING

from pcliphist.capabilities import CLIPBOARD_CHANGED
from pcliphist.classifier import classify
from pcliphist.constants import WAIT_ERROR_DELAY, WATCH_POLL_TIMEOUT
from pcliphist.errors import ClipboardError, NotificationError
from pcliphist.hashing import fingerprint

if TYPE_CHECKING:
    from pcliphist.capabilities import Clipboard, ImageStore, Notifier
    from pcliphist.entry import ClipboardEntry
    from pcliphist.history import HistoryStore

logger = logging.getLogger(__name__)


class WatcherState(enum.Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    DEDUPING = "deduping"
    COMMITTING = "committing"


class ClipboardWatcher:
    """Turn clipboard change signals into history entries.

    Attributes:
        state: Current phase of the watch cycle.
    """

    def __init__(
        self,
        clipboard: Clipboard,
        store: HistoryStore,
        image_store: ImageStore,
        notifier: Notifier,
        poll_timeout: float = WATCH_POLL_TIMEOUT,
    ) -> None:
        self._clipboard = clipboard
        self._store = store
        self._image_store = image_store
        self._notifier = notifier
        self._poll_timeout = poll_timeout
        self.state = WatcherState.IDLE

    async def run(self) -> None:
        """Wait for clipboard changes and handle each one, forever.

        The clipboard must already be subscribed via start_watching().
        Only cancellation ends the loop.
        """
        logger.info("Clipboard watcher started")
        while True:
            self.state = WatcherState.IDLE
            try:
                changed = await asyncio.to_thread(
                    self._clipboard.wait_for_change, self._poll_timeout
                )
            except ClipboardError as e:
                logger.error("Waiting for clipboard change failed: %s", e)
                await asyncio.sleep(WAIT_ERROR_DELAY)
                continue
            except Exception:
                logger.exception("Unexpected error while waiting for clipboard change")
                await asyncio.sleep(WAIT_ERROR_DELAY)
                continue
            if not changed:
                continue
            try:
                await self.handle_change()
            except ClipboardError as e:
                logger.error("Failed to process clipboard update: %s", e)
            except Exception:
                logger.exception("Unexpected error while processing clipboard update")

    async def handle_change(self) -> ClipboardEntry | None:
        """Run one capture cycle.

        Returns:
            The newly stored entry, or None if the content repeats the most
            recent entry.

        Raises:
            ClipboardError: Only from collaborators that violate the
                degrade-to-placeholder contract; notification failures are
                logged here.
        """
        self.state = WatcherState.CAPTURING
        candidate = await asyncio.to_thread(classify, self._clipboard, self._image_store)

        self.state = WatcherState.DEDUPING
        entry_fingerprint = fingerprint(candidate)
        stored = self._store.insert_if_changed(candidate, entry_fingerprint)
        if stored is None:
            logger.debug("Clipboard changed but content repeats last entry, ignored")
            self.state = WatcherState.IDLE
            return None

        self.state = WatcherState.COMMITTING
        try:
            self._notifier.emit(CLIPBOARD_CHANGED, stored)
        except NotificationError as e:
            logger.error("Failed to emit %s for entry %d: %s", CLIPBOARD_CHANGED, stored.id, e)
        else:
            logger.debug("Stored clipboard entry %d (%s)", stored.id, stored.kind.value)
        self.state = WatcherState.IDLE
        return stored
