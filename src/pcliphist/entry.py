#!/usr/bin/env python3
"""Clipboard history entry model.

A ClipboardEntry is one captured, classified clipboard state. The secondary
representation that accompanies the classification (raw HTML, raw RTF or a
stored image handle) is carried as a single tagged payload so an entry can
never hold more than one of them.
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any, Union

# Id carried by entries that were never stored in history.
EPHEMERAL_ID: int = -1

IMAGE_PLACEHOLDER: str = "[image content]"
IMAGE_READ_FAILED: str = "[image content - read failed]"
IMAGE_SAVE_FAILED: str = "[image content - save failed]"
RICH_TEXT_PLACEHOLDER: str = "[rich text content]"
HTML_PLACEHOLDER: str = "[HTML content]"
FILE_LIST_PLACEHOLDER: str = "[file list]"
READ_FAILED_PLACEHOLDER: str = "[read failed]"


class ContentKind(enum.Enum):
    """Dominant format found on the clipboard."""

    PLAIN_TEXT = "text"
    RICH_TEXT = "richText"
    HTML = "html"
    IMAGE = "image"
    FILE = "file"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class HtmlPayload:
    html: str


@dataclass(frozen=True)
class RichTextPayload:
    rtf: str


@dataclass(frozen=True)
class ImagePayload:
    handle: str


Payload = Union[HtmlPayload, RichTextPayload, ImagePayload]

_PAYLOAD_KIND: dict[type, ContentKind] = {
    HtmlPayload: ContentKind.HTML,
    RichTextPayload: ContentKind.RICH_TEXT,
    ImagePayload: ContentKind.IMAGE,
}


@dataclass(frozen=True)
class ClipboardEntry:
    """
    One captured clipboard state.

    Attributes:
        id: Position in the store's id sequence, or EPHEMERAL_ID when the
            entry was never stored.
        display_text: Human-readable text, or a placeholder when the
            primary payload is not text or could not be read.
        kind: Classification of the dominant clipboard format.
        payload: Secondary representation matching kind, or None when the
            kind has none or it could not be obtained.
        captured_at: Capture time in seconds since the epoch.
    """

    id: int
    display_text: str
    kind: ContentKind
    payload: Payload | None = None
    captured_at: int = 0

    def __post_init__(self) -> None:
        if self.payload is None:
            return
        expected = _PAYLOAD_KIND.get(type(self.payload))
        if expected is not self.kind:
            raise ValueError(
                f"{type(self.payload).__name__} cannot accompany {self.kind.name}"
            )

    @property
    def html_variant(self) -> str | None:
        if isinstance(self.payload, HtmlPayload):
            return self.payload.html
        return None

    @property
    def rich_text_variant(self) -> str | None:
        if isinstance(self.payload, RichTextPayload):
            return self.payload.rtf
        return None

    @property
    def image_handle(self) -> str | None:
        if isinstance(self.payload, ImagePayload):
            return self.payload.handle
        return None

    def with_id(self, entry_id: int) -> ClipboardEntry:
        """Return a copy of this entry carrying entry_id."""
        return dataclasses.replace(self, id=entry_id)

    def to_dict(self) -> dict[str, Any]:
        """
        Return the camelCase mapping delivered to UI collaborators.

        Returns:
            Dictionary with id, content, contentType, htmlContent,
            rtfContent, imagePath and timestamp keys.
        """
        return {
            "id": self.id,
            "content": self.display_text,
            "contentType": self.kind.value,
            "htmlContent": self.html_variant,
            "rtfContent": self.rich_text_variant,
            "imagePath": self.image_handle,
            "timestamp": self.captured_at,
        }
