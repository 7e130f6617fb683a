#!/usr/bin/env python3
"""Synchronous query and command operations.

The façade is what a UI command layer calls. Each operation is independent,
completes quickly and either returns its result or raises a ClipboardError
subclass with a descriptive message. History operations go through the
shared HistoryStore; clipboard operations go straight to the clipboard
capability and bypass the watcher.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pcliphist.classifier import classify
from pcliphist.errors import ClipboardWriteError

if TYPE_CHECKING:
    from pcliphist.capabilities import Clipboard, ImageStore
    from pcliphist.entry import ClipboardEntry
    from pcliphist.history import HistoryStore

logger = logging.getLogger(__name__)


class ClipboardFacade:
    """Command surface over the history store and the live clipboard."""

    def __init__(
        self, store: HistoryStore, clipboard: Clipboard, image_store: ImageStore
    ) -> None:
        self._store = store
        self._clipboard = clipboard
        self._image_store = image_store

    def read_history(self) -> list[ClipboardEntry]:
        """Return the history, oldest first."""
        return self._store.snapshot()

    def read_current(self) -> ClipboardEntry:
        """Classify the live clipboard without storing anything.

        Images are reported with a placeholder and are not persisted.

        Returns:
            A fresh entry carrying EPHEMERAL_ID.
        """
        return classify(self._clipboard)

    def write(
        self, text: str, html: str | None = None, rich_text: str | None = None
    ) -> None:
        """Put text on the clipboard, with optional HTML and RTF variants.

        Secondary formats are best effort: once the text is written, a
        failure to add HTML or RTF is logged and not raised.

        Args:
            text: Plain text to write.
            html: Optional HTML variant.
            rich_text: Optional RTF variant.

        Raises:
            ClipboardWriteError: If the plain text cannot be written.
        """
        self._clipboard.set_text(text)

        if html is not None:
            try:
                self._clipboard.set_html(html)
            except ClipboardWriteError as e:
                logger.warning("Failed to set HTML content: %s", e)

        if rich_text is not None:
            try:
                self._clipboard.set_rich_text(rich_text)
            except ClipboardWriteError as e:
                logger.warning("Failed to set rich text content: %s", e)

    def clear_history(self) -> None:
        self._store.clear()

    def set_capacity(self, capacity: int) -> None:
        """Change the history capacity.

        Raises:
            ValueError: If capacity is negative.
        """
        self._store.resize(capacity)

    def read_image(self, handle: str) -> bytes:
        """Return the bytes of a stored image.

        Raises:
            ImageNotFoundError: If handle does not resolve to a stored image.
            StorageError: If the image cannot be read.
        """
        return self._image_store.load(handle)
