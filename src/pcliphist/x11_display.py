"""X11 display setup for the clipboard backend.

This module provides functions for connecting to the X server and
preparing the objects the backend needs:
- Opening a display connection, retrying briefly while the server comes up
- Creating hidden windows to receive selection data and own the clipboard
- Registering for XFixes selection-owner notifications

XFixes provides true event-driven notification when clipboard ownership
changes, avoiding the need for polling.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from Xlib import X
from Xlib.error import DisplayConnectionError, DisplayNameError

from pcliphist.constants import (
    DISPLAY_CONNECT_ATTEMPTS,
    DISPLAY_CONNECT_MAX_WAIT,
    DISPLAY_CONNECT_MIN_WAIT,
)
from pcliphist.errors import ClipboardInitError

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.xobject.drawable import Window

logger = logging.getLogger(__name__)


@retry(
    wait=wait_exponential(min=DISPLAY_CONNECT_MIN_WAIT, max=DISPLAY_CONNECT_MAX_WAIT),
    retry=retry_if_exception_type(DisplayConnectionError),
    stop=stop_after_attempt(DISPLAY_CONNECT_ATTEMPTS),
)
def _connect(display_name: str) -> Display:
    """Open a connection to display_name, retried on connection failure."""
    from Xlib.display import Display as XDisplay

    logger.debug("Connecting to X display %s", display_name)
    return XDisplay(display_name)


def open_display(display_name: str | None = None) -> Display:
    """Open an X11 display connection.

    Args:
        display_name: Display to connect to; defaults to $DISPLAY.

    Returns:
        Display object for X11 operations.

    Raises:
        ClipboardInitError: If no display is configured, the name is
            invalid, or the connection keeps failing.
    """
    name = display_name or os.environ.get("DISPLAY")
    if not name:
        raise ClipboardInitError(
            "DISPLAY environment variable is not set; X11 is required for clipboard access"
        )
    try:
        return _connect(name)
    except DisplayNameError as e:
        raise ClipboardInitError(f"Invalid X11 display name {name!r}: {e}") from e
    except RetryError as e:
        cause = e.last_attempt.exception()
        raise ClipboardInitError(f"Failed to connect to X11 display {name}: {cause}") from cause


def create_hidden_window(display: Display) -> Window:
    """Create a 1x1 unmapped window for selection transfers.

    The window receives converted selection data as properties and owns
    the clipboard when content is written. PropertyChangeMask is selected
    so INCR transfers and server timestamp queries see PropertyNotify.

    Args:
        display: The X11 display connection.

    Returns:
        A Window object for selection transfers.
    """
    screen = display.screen()
    return screen.root.create_window(
        0, 0, 1, 1, 0, screen.root_depth, event_mask=X.PropertyChangeMask,
    )


def register_xfixes_events(display: Display, window: Window, selection_atom: int) -> None:
    """Register for XFixes selection-owner notifications on one selection.

    Args:
        display: The X11 display connection.
        window: The window to receive selection events.
        selection_atom: The selection to watch (normally CLIPBOARD).

    Raises:
        ClipboardInitError: If the server lacks the XFixes extension.
    """
    from Xlib.ext import xfixes

    if not display.has_extension("XFIXES"):
        raise ClipboardInitError("X server does not support the XFIXES extension")

    xfixes.query_version(display)
    mask = xfixes.XFixesSetSelectionOwnerNotifyMask
    xfixes.select_selection_input(display, window.id, selection_atom, mask)
    display.flush()
