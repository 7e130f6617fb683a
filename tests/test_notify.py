#!/usr/bin/env python3
"""Tests for the notification sinks."""
import io
import json
from unittest.mock import MagicMock

import pytest

from conftest import text_entry
from pcliphist.capabilities import CLIPBOARD_CHANGED
from pcliphist.errors import NotificationError
from pcliphist.notify import CallbackNotifier, JsonLinesNotifier


class TestCallbackNotifier:
    """Tests for CallbackNotifier."""

    def test_forwards_topic_and_entry(self) -> None:
        callback = MagicMock()
        entry = text_entry("hello").with_id(3)
        CallbackNotifier(callback).emit(CLIPBOARD_CHANGED, entry)
        callback.assert_called_once_with(CLIPBOARD_CHANGED, entry)

    def test_wraps_callback_failure(self) -> None:
        callback = MagicMock(side_effect=RuntimeError("window closed"))
        with pytest.raises(NotificationError, match="window closed"):
            CallbackNotifier(callback).emit(CLIPBOARD_CHANGED, text_entry("x"))


class TestJsonLinesNotifier:
    """Tests for JsonLinesNotifier."""

    def test_writes_one_json_object_per_line(self) -> None:
        stream = io.StringIO()
        notifier = JsonLinesNotifier(stream)
        notifier.emit(CLIPBOARD_CHANGED, text_entry("first").with_id(0))
        notifier.emit(CLIPBOARD_CHANGED, text_entry("second").with_id(1))

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        message = json.loads(lines[1])
        assert message["topic"] == "clipboard-changed"
        assert message["payload"]["id"] == 1
        assert message["payload"]["content"] == "second"
        assert message["payload"]["contentType"] == "text"

    def test_keeps_non_ascii_text(self) -> None:
        stream = io.StringIO()
        JsonLinesNotifier(stream).emit(CLIPBOARD_CHANGED, text_entry("héllo ✓").with_id(0))
        assert "héllo ✓" in stream.getvalue()

    def test_closed_stream_raises_notification_error(self) -> None:
        stream = io.StringIO()
        stream.close()
        with pytest.raises(NotificationError):
            JsonLinesNotifier(stream).emit(CLIPBOARD_CHANGED, text_entry("x").with_id(0))

    def test_broken_pipe_raises_notification_error(self) -> None:
        stream = MagicMock()
        stream.write.side_effect = BrokenPipeError("reader exited")
        with pytest.raises(NotificationError):
            JsonLinesNotifier(stream).emit(CLIPBOARD_CHANGED, text_entry("x").with_id(0))
