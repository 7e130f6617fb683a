#!/usr/bin/env python3
"""Clipboard content classification.

Formats are not mutually exclusive: a browser copy typically offers HTML
and plain text, an image editor an image and sometimes a file list. The
classifier probes formats in a fixed precedence and normalizes the first
match into a ClipboardEntry:

1. image        -> IMAGE, stored through the image store
2. rich text    -> RICH_TEXT, plain text used for display when available
3. HTML         -> HTML, plain text used for display when available
4. plain text   -> PLAIN_TEXT, verbatim (empty text is kept)
5. file list    -> FILE, one path per line
6. anything else -> UNKNOWN

Classification never fails. Read and storage errors are logged and turned
into placeholder text so that a broken capture is still visible in history.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from pcliphist.capabilities import ContentFormat
from pcliphist.entry import (
    EPHEMERAL_ID,
    FILE_LIST_PLACEHOLDER,
    HTML_PLACEHOLDER,
    IMAGE_PLACEHOLDER,
    IMAGE_READ_FAILED,
    IMAGE_SAVE_FAILED,
    READ_FAILED_PLACEHOLDER,
    RICH_TEXT_PLACEHOLDER,
    ClipboardEntry,
    ContentKind,
    HtmlPayload,
    ImagePayload,
    RichTextPayload,
)
from pcliphist.errors import ClipboardReadError, StorageError

if TYPE_CHECKING:
    from pcliphist.capabilities import Clipboard, ImageStore

logger = logging.getLogger(__name__)


def classify(
    clipboard: Clipboard,
    image_store: ImageStore | None = None,
    now: int | None = None,
) -> ClipboardEntry:
    """Classify the current clipboard content.

    Args:
        clipboard: The clipboard capability to read from.
        image_store: Where image payloads are persisted. When None, images
            are reported with a placeholder and not read at all.
        now: Capture time in seconds since the epoch; defaults to the
            current time.

    Returns:
        An entry carrying EPHEMERAL_ID; the history store assigns the id.
    """
    captured_at = int(time.time()) if now is None else now

    if _has(clipboard, ContentFormat.IMAGE):
        return _classify_image(clipboard, image_store, captured_at)

    if _has(clipboard, ContentFormat.RICH_TEXT):
        rtf = _read(clipboard.get_rich_text, "rich text")
        return ClipboardEntry(
            id=EPHEMERAL_ID,
            display_text=_display_text(clipboard, RICH_TEXT_PLACEHOLDER),
            kind=ContentKind.RICH_TEXT,
            payload=RichTextPayload(rtf) if rtf is not None else None,
            captured_at=captured_at,
        )

    if _has(clipboard, ContentFormat.HTML):
        html = _read(clipboard.get_html, "HTML")
        return ClipboardEntry(
            id=EPHEMERAL_ID,
            display_text=_display_text(clipboard, HTML_PLACEHOLDER),
            kind=ContentKind.HTML,
            payload=HtmlPayload(html) if html is not None else None,
            captured_at=captured_at,
        )

    if _has(clipboard, ContentFormat.TEXT):
        text = _read(clipboard.get_text, "text")
        if text is not None:
            return ClipboardEntry(
                id=EPHEMERAL_ID,
                display_text=text,
                kind=ContentKind.PLAIN_TEXT,
                captured_at=captured_at,
            )
    elif _has(clipboard, ContentFormat.FILES):
        files = _read(clipboard.get_files, "file list")
        return ClipboardEntry(
            id=EPHEMERAL_ID,
            display_text="\n".join(files) if files else FILE_LIST_PLACEHOLDER,
            kind=ContentKind.FILE,
            captured_at=captured_at,
        )

    return ClipboardEntry(
        id=EPHEMERAL_ID,
        display_text=READ_FAILED_PLACEHOLDER,
        kind=ContentKind.UNKNOWN,
        captured_at=captured_at,
    )


def _classify_image(
    clipboard: Clipboard, image_store: ImageStore | None, captured_at: int
) -> ClipboardEntry:
    """Build an IMAGE entry, persisting the image when a store is given."""
    if image_store is None:
        return ClipboardEntry(
            id=EPHEMERAL_ID,
            display_text=IMAGE_PLACEHOLDER,
            kind=ContentKind.IMAGE,
            captured_at=captured_at,
        )

    data = _read(clipboard.get_image, "image")
    if data is None:
        text, payload = IMAGE_READ_FAILED, None
    else:
        try:
            handle = image_store.store(data)
        except StorageError as e:
            logger.error("Failed to save clipboard image: %s", e)
            text, payload = IMAGE_SAVE_FAILED, None
        else:
            logger.debug("Clipboard image saved as %s", handle)
            text, payload = IMAGE_PLACEHOLDER, ImagePayload(handle)

    return ClipboardEntry(
        id=EPHEMERAL_ID,
        display_text=text,
        kind=ContentKind.IMAGE,
        payload=payload,
        captured_at=captured_at,
    )


def _has(clipboard: Clipboard, fmt: ContentFormat) -> bool:
    try:
        return clipboard.has(fmt)
    except ClipboardReadError as e:
        logger.error("Failed to query clipboard for %s: %s", fmt.value, e)
        return False


def _read(getter, what: str):
    """Call getter, returning None and logging on ClipboardReadError."""
    try:
        return getter()
    except ClipboardReadError as e:
        logger.error("Failed to read clipboard %s: %s", what, e)
        return None


def _display_text(clipboard: Clipboard, placeholder: str) -> str:
    text = _read(clipboard.get_text, "text")
    return placeholder if text is None else text
