#!/usr/bin/env python3
"""Pytest fixtures for pcliphist tests.

Provides in-memory clipboard, image store and notifier collaborators,
a fresh history store, and a factory for plain text entries.
"""

import pytest

from conftest_fakes import FakeClipboard, MemoryImageStore, RecordingNotifier
from pcliphist.entry import EPHEMERAL_ID, ClipboardEntry, ContentKind
from pcliphist.history import HistoryStore


@pytest.fixture
def clipboard() -> FakeClipboard:
    """Create an empty fake clipboard."""
    return FakeClipboard()


@pytest.fixture
def image_store() -> MemoryImageStore:
    """Create an empty in-memory image store."""
    return MemoryImageStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Create a notifier that records emitted entries."""
    return RecordingNotifier()


@pytest.fixture
def store() -> HistoryStore:
    """Create a HistoryStore with the default capacity."""
    return HistoryStore()


def text_entry(text: str, captured_at: int = 1700000000) -> ClipboardEntry:
    """Build an unstored plain text entry."""
    return ClipboardEntry(
        id=EPHEMERAL_ID,
        display_text=text,
        kind=ContentKind.PLAIN_TEXT,
        captured_at=captured_at,
    )
