#!/usr/bin/env python3
"""Collaborator protocols consumed by the history engine.

The engine never talks to a windowing system, filesystem or UI directly.
It consumes three capabilities:

- Clipboard: format probing, reads, writes and change notification
- ImageStore: persistence of image payloads behind opaque handles
- Notifier: delivery of change notifications to a UI collaborator

Implementations report failures with the ClipboardError subclasses from
pcliphist.errors.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pcliphist.entry import ClipboardEntry

# Topic of the notification emitted for every committed entry.
CLIPBOARD_CHANGED: str = "clipboard-changed"


class ContentFormat(enum.Enum):
    """Clipboard formats the classifier probes for."""

    TEXT = "text"
    RICH_TEXT = "rtf"
    HTML = "html"
    IMAGE = "image"
    FILES = "files"


class Clipboard(Protocol):
    """Native clipboard read, write and change-notification primitives."""

    def has(self, fmt: ContentFormat) -> bool:
        """Return True if the clipboard currently offers fmt.

        Raises:
            ClipboardReadError: If the available formats cannot be queried.
        """
        ...

    def get_text(self) -> str: ...

    def get_html(self) -> str: ...

    def get_rich_text(self) -> str: ...

    def get_image(self) -> bytes:
        """Return the clipboard image encoded as PNG."""
        ...

    def get_files(self) -> list[str]: ...

    def set_text(self, text: str) -> None:
        """Replace the clipboard content with text.

        Raises:
            ClipboardWriteError: If the clipboard cannot be written.
        """
        ...

    def set_html(self, html: str) -> None:
        """Offer html alongside the content set by the last set_text()."""
        ...

    def set_rich_text(self, rtf: str) -> None:
        """Offer rtf alongside the content set by the last set_text()."""
        ...

    def start_watching(self) -> None:
        """Subscribe to clipboard change notification.

        Raises:
            ClipboardInitError: If change notification is unavailable.
        """
        ...

    def wait_for_change(self, timeout: float | None = None) -> bool:
        """Block until the clipboard changes or timeout seconds elapse.

        Returns:
            True if a change was observed, False on timeout.
        """
        ...


class ImageStore(Protocol):
    """Persistence for clipboard images."""

    def store(self, data: bytes) -> str:
        """Persist PNG bytes and return an opaque handle.

        Raises:
            StorageError: If the image cannot be written.
        """
        ...

    def load(self, handle: str) -> bytes:
        """Return the bytes stored under handle.

        Raises:
            ImageNotFoundError: If handle does not resolve to a stored image.
            StorageError: If the image cannot be read.
        """
        ...


class Notifier(Protocol):
    """Sink for change notifications."""

    def emit(self, topic: str, entry: ClipboardEntry) -> None:
        """Deliver entry under topic.

        Raises:
            NotificationError: If delivery fails.
        """
        ...
