#!/usr/bin/env python3
"""Capacity-bounded clipboard history.

The HistoryStore is the single source of truth for captured entries. It is
shared by reference between the watcher (inserts) and the façade (reads,
clears, resizes). Every operation holds the same lock for its full duration,
so each one is atomic relative to every other.
"""

from __future__ import annotations

import logging
import threading
from collections import deque

from pcliphist.constants import DEFAULT_CAPACITY
from pcliphist.entry import ClipboardEntry
from pcliphist.hashing import FingerprintState, fingerprint

logger = logging.getLogger(__name__)


class HistoryStore:
    """Ordered, oldest-first history of clipboard entries.

    Ids are assigned at insertion from a counter that starts at 0 and is
    reset by clear(). Once the length exceeds the capacity, entries are
    evicted from the oldest end.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        _check_capacity(capacity)
        self._capacity = capacity
        self._entries: deque[ClipboardEntry] = deque()
        self._next_id = 0
        self._fingerprints = FingerprintState()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        with self._lock:
            return self._capacity

    @property
    def last_fingerprint(self) -> str | None:
        with self._lock:
            return self._fingerprints.last_fingerprint

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def insert(
        self, candidate: ClipboardEntry, entry_fingerprint: str | None = None
    ) -> ClipboardEntry:
        """Store candidate unconditionally.

        Args:
            candidate: A classified entry; its id is replaced.
            entry_fingerprint: Precomputed fingerprint of candidate, computed
                here when omitted.

        Returns:
            The stored entry carrying its assigned id.
        """
        if entry_fingerprint is None:
            entry_fingerprint = fingerprint(candidate)
        with self._lock:
            return self._append(candidate, entry_fingerprint)

    def insert_if_changed(
        self, candidate: ClipboardEntry, entry_fingerprint: str | None = None
    ) -> ClipboardEntry | None:
        """Store candidate unless it repeats the most recent entry.

        The comparison and the insertion happen under one lock acquisition.

        Args:
            candidate: A classified entry; its id is replaced.
            entry_fingerprint: Precomputed fingerprint of candidate, computed
                here when omitted.

        Returns:
            The stored entry, or None when candidate was a duplicate.
        """
        if entry_fingerprint is None:
            entry_fingerprint = fingerprint(candidate)
        with self._lock:
            if self._fingerprints.is_duplicate(entry_fingerprint):
                return None
            return self._append(candidate, entry_fingerprint)

    def snapshot(self) -> list[ClipboardEntry]:
        """Return a copy of the history, oldest first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        """Drop all entries, restart ids at 0 and forget the last fingerprint."""
        with self._lock:
            self._entries.clear()
            self._next_id = 0
            self._fingerprints.clear()
        logger.debug("History cleared")

    def resize(self, capacity: int) -> None:
        """Change the capacity, keeping the most recent entries.

        Args:
            capacity: New maximum number of entries; 0 disables retention.

        Raises:
            ValueError: If capacity is negative.
        """
        _check_capacity(capacity)
        with self._lock:
            self._capacity = capacity
            evicted = self._evict()
        logger.debug("History capacity set to %d, evicted %d", capacity, evicted)

    def _append(self, candidate: ClipboardEntry, entry_fingerprint: str) -> ClipboardEntry:
        # Caller holds the lock.
        entry = candidate.with_id(self._next_id)
        self._next_id += 1
        self._entries.append(entry)
        self._evict()
        self._fingerprints.record(entry_fingerprint)
        return entry

    def _evict(self) -> int:
        evicted = 0
        while len(self._entries) > self._capacity:
            self._entries.popleft()
            evicted += 1
        return evicted


def _check_capacity(capacity: int) -> None:
    if capacity < 0:
        raise ValueError(f"History capacity must be >= 0, got {capacity}")
