#!/usr/bin/env python3
"""Change notification sinks.

The watcher hands every committed entry to a notifier under the
"clipboard-changed" topic. Two sinks are provided:

- CallbackNotifier: forwards to a Python callable (UI bindings, tests)
- JsonLinesNotifier: writes one JSON object per line to a text stream
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Callable, TextIO

from pcliphist.errors import NotificationError

if TYPE_CHECKING:
    from pcliphist.entry import ClipboardEntry

logger = logging.getLogger(__name__)


class CallbackNotifier:
    """Deliver notifications by calling callback(topic, entry)."""

    def __init__(self, callback: Callable[[str, ClipboardEntry], None]) -> None:
        self._callback = callback

    def emit(self, topic: str, entry: ClipboardEntry) -> None:
        """
        Invoke the callback.

        Raises:
            NotificationError: If the callback raises.
        """
        try:
            self._callback(topic, entry)
        except Exception as e:
            raise NotificationError(f"Notification callback failed: {e}") from e


class JsonLinesNotifier:
    """Write {"topic": ..., "payload": ...} lines to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def emit(self, topic: str, entry: ClipboardEntry) -> None:
        """
        Serialize entry and flush it to the stream.

        Raises:
            NotificationError: If the stream cannot be written.
        """
        line = json.dumps({"topic": topic, "payload": entry.to_dict()}, ensure_ascii=False)
        try:
            self._stream.write(line + "\n")
            self._stream.flush()
        except (OSError, ValueError) as e:
            raise NotificationError(f"Failed to write notification: {e}") from e
        logger.debug("Emitted %s for entry %d", topic, entry.id)
