#!/usr/bin/env python3
"""
Fingerprint state for duplicate suppression.

Clipboard owners frequently re-announce unchanged content, and every
announcement reaches the watcher as a change. Tracking the fingerprint of
the last stored entry lets the watcher discard these no-op re-fires.

Only the most recent fingerprint is kept: content that reverts to an older
history entry is treated as new and stored again.
"""
from dataclasses import dataclass


@dataclass
class FingerprintState:
    """
    Track the fingerprint of the most recently stored entry.

    Attributes:
        last_fingerprint: SHA-256 hex digest of the last stored entry, or
            None when nothing has been stored since creation or the last
            clear.
    """

    last_fingerprint: str | None = None

    def is_duplicate(self, current: str) -> bool:
        """
        Check whether current matches the last stored fingerprint.

        Args:
            current: Fingerprint of a freshly classified entry.

        Returns:
            True if the entry repeats the last stored one, False otherwise.
        """
        return current == self.last_fingerprint

    def record(self, value: str) -> None:
        """
        Record the fingerprint of a newly stored entry.

        Args:
            value: Fingerprint of the stored entry.
        """
        self.last_fingerprint = value

    def clear(self) -> None:
        """
        Forget the last fingerprint.

        Used when history is cleared so that the next capture is stored
        unconditionally.
        """
        self.last_fingerprint = None
