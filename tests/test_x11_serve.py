#!/usr/bin/env python3
"""Tests for selection request handling."""
from unittest.mock import MagicMock

import pytest
from Xlib import X, Xatom

from pcliphist.x11_serve import get_max_property_size, handle_selection_request

TARGETS = 100
UTF8_STRING = 101
TIMESTAMP = 102
TEXT_HTML = 103


@pytest.fixture
def mock_display() -> MagicMock:
    """Create a mock X11 display."""
    display = MagicMock()
    atom_map = {"TARGETS": TARGETS, "UTF8_STRING": UTF8_STRING, "TIMESTAMP": TIMESTAMP}
    display.intern_atom.side_effect = lambda name: atom_map.get(name, 999)
    display.info.max_request_length = 65536
    return display


@pytest.fixture
def mock_event() -> MagicMock:
    """Create a mock SelectionRequest event."""
    event = MagicMock()
    event.requestor = MagicMock()
    event.requestor.id = 12345
    event.property = 200
    event.selection = 300
    event.time = 987654321
    return event


def notified_property(event: MagicMock) -> int:
    """Return the property sent back in the SelectionNotify."""
    notify = event.requestor.send_event.call_args[0][0]
    return notify.property


def test_max_property_size(mock_display: MagicMock) -> None:
    """The limit is 90% of the request size in bytes."""
    assert get_max_property_size(mock_display) == int(65536 * 4 * 0.9)


def test_targets_lists_offered_atoms(mock_display: MagicMock, mock_event: MagicMock) -> None:
    """TARGETS reply holds TARGETS, TIMESTAMP and every offered target."""
    mock_event.target = TARGETS
    offered = {UTF8_STRING: b"hi", TEXT_HTML: b"<b>hi</b>"}

    handle_selection_request(mock_display, mock_event, offered, 1)

    prop, prop_type, fmt, data = mock_event.requestor.change_property.call_args[0]
    assert prop == 200
    assert prop_type == Xatom.ATOM
    assert fmt == 32
    assert data == [TARGETS, TIMESTAMP, UTF8_STRING, TEXT_HTML]
    assert notified_property(mock_event) == 200


def test_timestamp_request_returns_integer(
    mock_display: MagicMock, mock_event: MagicMock
) -> None:
    """TIMESTAMP is answered with the acquisition time."""
    mock_event.target = TIMESTAMP

    handle_selection_request(mock_display, mock_event, {}, 555666777)

    mock_event.requestor.change_property.assert_called_once_with(
        200, Xatom.INTEGER, 32, [555666777]
    )


def test_timestamp_refused_without_acquisition_time(
    mock_display: MagicMock, mock_event: MagicMock
) -> None:
    mock_event.target = TIMESTAMP

    handle_selection_request(mock_display, mock_event, {}, None)

    mock_event.requestor.change_property.assert_not_called()
    assert notified_property(mock_event) == X.NONE


def test_offered_target_returns_content(
    mock_display: MagicMock, mock_event: MagicMock
) -> None:
    mock_event.target = UTF8_STRING

    handle_selection_request(mock_display, mock_event, {UTF8_STRING: b"hello"}, 1)

    mock_event.requestor.change_property.assert_called_once_with(200, UTF8_STRING, 8, b"hello")
    assert notified_property(mock_event) == 200
    mock_display.flush.assert_called()


def test_oversized_content_is_refused(mock_display: MagicMock, mock_event: MagicMock) -> None:
    """Content beyond one property is refused rather than truncated."""
    mock_display.info.max_request_length = 16
    mock_event.target = UTF8_STRING

    handle_selection_request(mock_display, mock_event, {UTF8_STRING: b"x" * 1000}, 1)

    mock_event.requestor.change_property.assert_not_called()
    assert notified_property(mock_event) == X.NONE


def test_unknown_target_is_refused(mock_display: MagicMock, mock_event: MagicMock) -> None:
    mock_event.target = TEXT_HTML

    handle_selection_request(mock_display, mock_event, {UTF8_STRING: b"hi"}, 1)

    mock_event.requestor.change_property.assert_not_called()
    assert notified_property(mock_event) == X.NONE


def test_obsolete_client_property_none(mock_display: MagicMock, mock_event: MagicMock) -> None:
    """A requestor passing property None gets the data on the target atom."""
    mock_event.target = UTF8_STRING
    mock_event.property = X.NONE

    handle_selection_request(mock_display, mock_event, {UTF8_STRING: b"hi"}, 1)

    mock_event.requestor.change_property.assert_called_once_with(
        UTF8_STRING, UTF8_STRING, 8, b"hi"
    )
    assert notified_property(mock_event) == UTF8_STRING
