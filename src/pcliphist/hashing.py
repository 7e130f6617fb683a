#!/usr/bin/env python3
"""
SHA-256 fingerprinting for duplicate detection.

The OS change signal fires for every ownership change, including an
application re-asserting the same content. Each freshly classified entry
is fingerprinted and compared with the fingerprint of the most recently
stored entry; a match means nothing actually changed.

This module provides:
- compute_hash(): SHA-256 hex digest of raw bytes
- fingerprint(): digest over an entry's normalized content
- FingerprintState: tracks the last stored fingerprint

The fingerprint covers display text and the secondary variant only. The
id, kind and capture time are left out so that re-capturing identical
content at a later time is still recognized as a duplicate.
"""
from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from pcliphist.fingerprint_state import FingerprintState

if TYPE_CHECKING:
    from pcliphist.entry import ClipboardEntry

__all__ = ["compute_hash", "fingerprint", "FingerprintState"]


def compute_hash(data: bytes) -> str:
    """
    Compute SHA-256 hash of raw content.

    Args:
        data: Bytes to hash.

    Returns:
        Hexadecimal string representation of the SHA-256 digest.
    """
    return hashlib.sha256(data).hexdigest()


def _frame(value: str | None) -> bytes:
    # Length-prefixed so that field boundaries cannot be shifted, with a
    # distinct marker for an absent field.
    if value is None:
        return b"-"
    encoded = value.encode("utf-8", "surrogatepass")
    return f"+{len(encoded)}:".encode("ascii") + encoded


def fingerprint(entry: ClipboardEntry) -> str:
    """
    Compute the duplicate-detection fingerprint of an entry.

    Args:
        entry: The classified clipboard entry.

    Returns:
        Hexadecimal SHA-256 digest of display text, HTML variant, rich
        text variant and image handle.
    """
    data = b"".join(
        _frame(value)
        for value in (
            entry.display_text,
            entry.html_variant,
            entry.rich_text_variant,
            entry.image_handle,
        )
    )
    return compute_hash(data)
