"""Selection request handling.

While the backend owns the clipboard, other applications ask it for
content with SelectionRequest events. This module answers them:
- TARGETS: the list of offered targets
- TIMESTAMP: the time ownership was acquired
- any offered target: the stored bytes
Anything else, and content too large for a single property, is refused
with property=None.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from Xlib import X, Xatom

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.protocol.event import SelectionRequest

logger = logging.getLogger(__name__)

# Fraction of the maximum request size usable for one property write.
MAX_PROPERTY_MARGIN: float = 0.9


def get_max_property_size(display: Display) -> int:
    """Return the largest property, in bytes, one change_property can carry.

    max_request_length is in 4-byte units.
    """
    return int(display.info.max_request_length * 4 * MAX_PROPERTY_MARGIN)


def handle_selection_request(
    display: Display,
    event: SelectionRequest,
    offered: dict[int, bytes],
    acquisition_time: int | None,
) -> None:
    """Respond to a SelectionRequest for the owned clipboard.

    Args:
        display: The X11 display connection.
        event: The SelectionRequest event.
        offered: Content bytes keyed by target atom.
        acquisition_time: The X server timestamp when ownership was
            acquired, or None if unknown.
    """
    targets_atom = display.intern_atom("TARGETS")
    timestamp_atom = display.intern_atom("TIMESTAMP")
    # Obsolete clients pass property None and expect the target name.
    prop = event.property if event.property != X.NONE else event.target

    if event.target == targets_atom:
        targets = [targets_atom, timestamp_atom, *offered]
        event.requestor.change_property(prop, Xatom.ATOM, 32, targets)
    elif event.target == timestamp_atom:
        if acquisition_time is not None:
            event.requestor.change_property(prop, Xatom.INTEGER, 32, [acquisition_time])
        else:
            logger.debug("Refused TIMESTAMP request, no acquisition_time")
            prop = X.NONE
    elif event.target in offered:
        content = offered[event.target]
        if len(content) > get_max_property_size(display):
            logger.warning(
                "Refused request for %d bytes, larger than a single property", len(content)
            )
            prop = X.NONE
        else:
            event.requestor.change_property(prop, event.target, 8, content)
    else:
        prop = X.NONE

    send_selection_notify(display, event, prop)


def send_selection_notify(display: Display, event: SelectionRequest, prop: int) -> None:
    """Send the SelectionNotify that completes a request."""
    from Xlib.protocol.event import SelectionNotify as SelectionNotifyEvent

    event.requestor.send_event(
        SelectionNotifyEvent(
            time=event.time,
            requestor=event.requestor.id,
            selection=event.selection,
            target=event.target,
            property=prop,
        ),
        event_mask=0,
    )
    display.flush()
