"""X11 selection reads.

This module provides the blocking primitives used to read a selection from
its current owner:
- wait_for_event: poll a display for a matching event with a deadline
- convert_selection: request one target and return the transferred bytes
- get_server_timestamp: query the server time via a PropertyNotify round trip

Large transfers announced with the INCR type are reassembled from the
PropertyNotify chunks that follow.
"""

from __future__ import annotations

import logging
import select
import time
from typing import TYPE_CHECKING, Callable

from Xlib import X, Xatom

from pcliphist.constants import CLIPBOARD_TIMEOUT
from pcliphist.errors import ClipboardReadError

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.protocol.rq import Event
    from Xlib.xobject.drawable import Window

logger = logging.getLogger(__name__)


def window_id(window: Window | int) -> int:
    """Return the resource id of a Window object or a bare window id."""
    return getattr(window, "id", window)


def wait_for_event(
    display: Display,
    matches: Callable[[Event], bool],
    timeout: float | None,
    on_other: Callable[[Event], None] | None = None,
) -> Event | None:
    """Wait for an event accepted by matches.

    Events that do not match are passed to on_other (or dropped) so that
    SelectionRequests keep being answered while a read is in flight.

    Args:
        display: The X11 display connection.
        matches: Predicate selecting the awaited event.
        timeout: Seconds to wait, or None to wait indefinitely.
        on_other: Handler for non-matching events.

    Returns:
        The matching event, or None if timeout elapsed first.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        while display.pending_events() > 0:
            event = display.next_event()
            if matches(event):
                return event
            if on_other is not None:
                on_other(event)
        if deadline is None:
            remaining = None
        else:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
        select.select([display], [], [], remaining)


def convert_selection(
    display: Display,
    window: Window,
    selection_atom: int,
    target_atom: int,
    prop_atom: int,
    on_other: Callable[[Event], None] | None = None,
    timeout: float = CLIPBOARD_TIMEOUT,
) -> tuple[int, int, bytes | list[int]]:
    """Read one target of a selection from its owner.

    Args:
        display: The X11 display connection.
        window: The window receiving the converted data.
        selection_atom: The selection to read (normally CLIPBOARD).
        target_atom: The requested target, e.g. UTF8_STRING or TARGETS.
        prop_atom: Property on window used for the transfer.
        on_other: Handler for unrelated events arriving during the read.
        timeout: Seconds to wait for each step of the transfer.

    Returns:
        Tuple of (property type atom, format, value). Format 8 values are
        bytes; format 32 values are lists of integers.

    Raises:
        ClipboardReadError: If there is no owner, the owner refuses the
            target, or the transfer times out.
    """
    if window_id(display.get_selection_owner(selection_atom)) == X.NONE:
        raise ClipboardReadError("Clipboard has no owner")

    window.convert_selection(selection_atom, target_atom, prop_atom, X.CurrentTime)
    display.flush()

    notify = wait_for_event(
        display,
        lambda e: e.type == X.SelectionNotify and window_id(e.requestor) == window.id,
        timeout,
        on_other,
    )
    if notify is None:
        raise ClipboardReadError(f"Timed out after {timeout}s waiting for selection owner")
    if notify.property == X.NONE:
        raise ClipboardReadError(f"Selection owner refused target {target_atom}")

    prop = window.get_full_property(prop_atom, X.AnyPropertyType)
    window.delete_property(prop_atom)
    display.flush()
    if prop is None:
        raise ClipboardReadError("Selection property was empty")

    incr_atom = display.intern_atom("INCR")
    if prop.property_type == incr_atom:
        return _read_incr(display, window, prop_atom, on_other, timeout)

    return prop.property_type, prop.format, _property_value(prop)


def _read_incr(
    display: Display,
    window: Window,
    prop_atom: int,
    on_other: Callable[[Event], None] | None,
    timeout: float,
) -> tuple[int, int, bytes]:
    """Collect INCR chunks until the owner writes a zero-length property.

    Deleting the INCR property (done by the caller) signals the owner to
    start; each deletion of a chunk requests the next one.
    """
    chunks: list[bytes] = []
    prop_type = Xatom.STRING
    fmt = 8
    while True:
        event = wait_for_event(
            display,
            lambda e: (
                e.type == X.PropertyNotify
                and window_id(e.window) == window.id
                and e.atom == prop_atom
                and e.state == X.PropertyNewValue
            ),
            timeout,
            on_other,
        )
        if event is None:
            raise ClipboardReadError("Timed out during incremental selection transfer")

        prop = window.get_full_property(prop_atom, X.AnyPropertyType)
        window.delete_property(prop_atom)
        display.flush()
        if prop is None:
            raise ClipboardReadError("Incremental transfer chunk vanished")

        data = _property_value(prop)
        if not data:
            logger.debug("INCR transfer finished, %d chunks", len(chunks))
            return prop_type, fmt, b"".join(chunks)
        prop_type, fmt = prop.property_type, prop.format
        chunks.append(bytes(data))


def _property_value(prop) -> bytes | list[int]:
    data = prop.value
    if prop.format != 8:
        return list(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def get_server_timestamp(
    display: Display,
    window: Window,
    on_other: Callable[[Event], None] | None = None,
) -> int:
    """Query the X server's current timestamp.

    Changes a dummy property on window and waits for the PropertyNotify
    event, whose timestamp reflects the server's current time.

    Args:
        display: The X11 display connection.
        window: The window to change a property on.
        on_other: Handler for unrelated events arriving during the wait.

    Returns:
        The X server timestamp, or X.CurrentTime if no PropertyNotify
        arrived in time.
    """
    prop_atom = display.intern_atom("PCLIPHIST_TIMESTAMP")
    window.change_property(prop_atom, Xatom.INTEGER, 32, [0])
    display.flush()

    event = wait_for_event(
        display,
        lambda e: e.type == X.PropertyNotify and e.atom == prop_atom,
        CLIPBOARD_TIMEOUT,
        on_other,
    )
    if event is None:
        logger.debug("No PropertyNotify for timestamp query, using CurrentTime")
        return X.CurrentTime
    return event.time
