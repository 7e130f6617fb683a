#!/usr/bin/env python3
"""
Exceptions raised by the clipboard history engine and its collaborators.

Every failure surfaced by a clipboard backend, the image store or a
notification sink is a ClipboardError subclass. The watcher catches these
per cycle; the façade lets them propagate to its caller.
"""


class ClipboardError(Exception):
    """Base class for clipboard history errors."""

    pass


class ClipboardInitError(ClipboardError):
    """
    Raised when a clipboard capability cannot be set up.

    Fatal to the watcher's setup only: the runtime logs it and keeps the
    process running without change detection.
    """

    pass


class ClipboardReadError(ClipboardError):
    """Raised when a single clipboard read fails."""

    pass


class ClipboardWriteError(ClipboardError):
    """Raised when a single clipboard write fails."""

    pass


class StorageError(ClipboardError):
    """Raised when an image cannot be persisted or loaded."""

    pass


class ImageNotFoundError(StorageError):
    """Raised when an image handle does not resolve to a stored image."""

    pass


class NotificationError(ClipboardError):
    """Raised when a change notification cannot be delivered."""

    pass
