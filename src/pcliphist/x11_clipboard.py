"""X11 implementation of the clipboard capability.

X11Clipboard keeps two display connections:
- a watch connection receiving XFixes SetSelectionOwnerNotify events,
  used only by the watcher thread through wait_for_change()
- an I/O connection for reads and writes, guarded by a lock

Writing takes ownership of CLIPBOARD. X11 clipboard content lives in its
owner, so while content is owned a serving thread answers SelectionRequests
from other applications until another application takes over.
"""

from __future__ import annotations

import logging
import select
import threading
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

from Xlib import X
from Xlib.error import ConnectionClosedError, XError

from pcliphist.capabilities import ContentFormat
from pcliphist.errors import ClipboardReadError, ClipboardWriteError
from pcliphist.x11_display import create_hidden_window, open_display, register_xfixes_events
from pcliphist.x11_read import convert_selection, get_server_timestamp, wait_for_event, window_id
from pcliphist.x11_serve import handle_selection_request

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.protocol.rq import Event
    from Xlib.xobject.drawable import Window

logger = logging.getLogger(__name__)

# Seconds between checks for shutdown in the serving thread.
SERVE_POLL_INTERVAL: float = 0.5

# Selection targets probed for each format, in order of preference.
TARGET_NAMES: dict[ContentFormat, tuple[str, ...]] = {
    ContentFormat.IMAGE: ("image/png",),
    ContentFormat.RICH_TEXT: ("text/rtf", "application/rtf", "text/richtext"),
    ContentFormat.HTML: ("text/html",),
    ContentFormat.TEXT: ("UTF8_STRING", "text/plain;charset=utf-8", "STRING"),
    ContentFormat.FILES: ("text/uri-list",),
}

# Errors from python-xlib that mean a single operation failed.
X_ERRORS = (XError, ConnectionClosedError, OSError)


def decode_text(target: str, data: bytes) -> str:
    """Decode text content according to its selection target."""
    if target == "STRING":
        return data.decode("latin-1")
    return data.decode("utf-8", errors="replace")


def decode_html(data: bytes) -> str:
    """Decode HTML content, which some browsers send as UTF-16 with a BOM."""
    if data[:2] in (b"\xff\xfe", b"\xfe\xff"):
        return data.decode("utf-16", errors="replace")
    return data.decode("utf-8", errors="replace")


def parse_uri_list(data: bytes) -> list[str]:
    """Parse a text/uri-list payload into local paths or URIs.

    Comment lines are skipped; file:// URIs become local paths.
    """
    paths = []
    for line in data.decode("utf-8", errors="replace").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        uri = urlparse(line)
        paths.append(unquote(uri.path) if uri.scheme == "file" else line)
    return paths


class X11Clipboard:
    """Clipboard capability backed by the X11 CLIPBOARD selection."""

    def __init__(self, display_name: str | None = None) -> None:
        self._display_name = display_name
        self._lock = threading.RLock()
        self._display: Display | None = None
        self._window: Window | None = None
        self._clipboard_atom = 0
        self._prop_atom = 0
        self._watch_display: Display | None = None
        self._watch_window: Window | None = None
        self._owned: dict[str, bytes] = {}
        self._acquisition_time: int | None = None
        self._released = threading.Event()
        self._released.set()
        self._closed = threading.Event()
        self._server: threading.Thread | None = None

    # Connection management

    def _connection(self) -> tuple[Display, Window]:
        """Return the I/O connection, opening it on first use.

        Caller holds the lock.

        Raises:
            ClipboardInitError: If the display cannot be opened.
        """
        if self._display is None:
            display = open_display(self._display_name)
            self._window = create_hidden_window(display)
            self._clipboard_atom = display.intern_atom("CLIPBOARD")
            self._prop_atom = display.intern_atom("PCLIPHIST_SEL")
            self._display = display
        return self._display, self._window

    def close(self) -> None:
        """Stop serving owned content and close both connections."""
        self._closed.set()
        if self._server is not None:
            self._server.join()
        with self._lock:
            for display in (self._display, self._watch_display):
                if display is not None:
                    display.close()
            self._display = self._watch_display = None
            self._owned = {}
        self._released.set()

    # Change notification

    def start_watching(self) -> None:
        """Open the watch connection and subscribe to CLIPBOARD changes.

        Raises:
            ClipboardInitError: If the display or XFixes is unavailable.
        """
        if self._watch_display is not None:
            return
        display = open_display(self._display_name)
        window = create_hidden_window(display)
        register_xfixes_events(display, window, display.intern_atom("CLIPBOARD"))
        self._watch_display = display
        self._watch_window = window
        logger.debug("Watching CLIPBOARD for ownership changes")

    def wait_for_change(self, timeout: float | None = None) -> bool:
        """Block until CLIPBOARD gets a new owner or timeout elapses.

        Ownership dropping to None (the owner exited) is not a change of
        content and is skipped.

        Raises:
            ClipboardReadError: If not watching or the connection fails.
        """
        display = self._watch_display
        if display is None:
            raise ClipboardReadError("Clipboard change notification is not started")
        try:
            event = wait_for_event(
                display,
                lambda e: (
                    type(e).__name__ == "SetSelectionOwnerNotify"
                    and window_id(e.owner) != X.NONE
                ),
                timeout,
            )
        except X_ERRORS as e:
            raise ClipboardReadError(f"Lost clipboard change notification: {e}") from e
        return event is not None

    # Reads

    def _owns_clipboard(self) -> bool:
        # Caller holds the lock and has an open connection.
        if not self._owned:
            return False
        owner = self._display.get_selection_owner(self._clipboard_atom)
        return window_id(owner) == self._window.id

    def _convert(self, target: str) -> tuple[int, bytes | list[int]]:
        display, window = self._connection()
        _, fmt, value = convert_selection(
            display,
            window,
            self._clipboard_atom,
            display.intern_atom(target),
            self._prop_atom,
            on_other=self._dispatch,
        )
        return fmt, value

    def _targets(self) -> set[str]:
        # Caller holds the lock.
        if self._owns_clipboard():
            return set(self._owned)
        fmt, value = self._convert("TARGETS")
        if fmt != 32:
            raise ClipboardReadError("Malformed TARGETS reply from clipboard owner")
        display = self._display
        return {display.get_atom_name(atom) for atom in value if atom != X.NONE}

    def targets(self) -> set[str]:
        """Return the target names the clipboard currently offers.

        Raises:
            ClipboardReadError: If the owner cannot be queried.
        """
        with self._lock:
            self._connection()
            try:
                return self._targets()
            except X_ERRORS as e:
                raise ClipboardReadError(f"Failed to query clipboard targets: {e}") from e

    def has(self, fmt: ContentFormat) -> bool:
        offered = self.targets()
        return any(name in offered for name in TARGET_NAMES[fmt])

    def _read(self, fmt: ContentFormat) -> tuple[str, bytes]:
        """Read the first offered target for fmt.

        Returns:
            Tuple of (target name, raw bytes).

        Raises:
            ClipboardReadError: If no target for fmt could be read.
        """
        names = TARGET_NAMES[fmt]
        last_error: ClipboardReadError | None = None
        with self._lock:
            self._connection()
            try:
                if self._owns_clipboard():
                    for name in names:
                        if name in self._owned:
                            return name, self._owned[name]
                    raise ClipboardReadError(f"Clipboard does not hold {fmt.value} content")

                offered = self._targets()
                for name in names:
                    if name not in offered:
                        continue
                    try:
                        fmt_bits, value = self._convert(name)
                    except ClipboardReadError as e:
                        last_error = e
                        continue
                    if fmt_bits == 8:
                        return name, value
            except X_ERRORS as e:
                raise ClipboardReadError(f"Failed to read clipboard {fmt.value}: {e}") from e
        if last_error is not None:
            raise last_error
        raise ClipboardReadError(f"Clipboard does not offer {fmt.value} content")

    def get_text(self) -> str:
        return decode_text(*self._read(ContentFormat.TEXT))

    def get_html(self) -> str:
        _, data = self._read(ContentFormat.HTML)
        return decode_html(data)

    def get_rich_text(self) -> str:
        _, data = self._read(ContentFormat.RICH_TEXT)
        return data.decode("utf-8", errors="replace")

    def get_image(self) -> bytes:
        _, data = self._read(ContentFormat.IMAGE)
        return data

    def get_files(self) -> list[str]:
        _, data = self._read(ContentFormat.FILES)
        return parse_uri_list(data)

    # Writes

    def set_text(self, text: str) -> None:
        encoded = text.encode("utf-8")
        self._own(
            {
                "UTF8_STRING": encoded,
                "text/plain;charset=utf-8": encoded,
                "STRING": text.encode("latin-1", errors="replace"),
            },
            replace=True,
        )

    def set_html(self, html: str) -> None:
        self._own({"text/html": html.encode("utf-8")}, replace=False)

    def set_rich_text(self, rtf: str) -> None:
        encoded = rtf.encode("utf-8")
        self._own({"text/rtf": encoded, "application/rtf": encoded}, replace=False)

    def _own(self, targets: dict[str, bytes], replace: bool) -> None:
        """Offer targets on CLIPBOARD, taking ownership if needed.

        Args:
            targets: Content bytes keyed by target name.
            replace: Drop previously offered targets and re-acquire
                ownership; otherwise add to the current ownership.

        Raises:
            ClipboardWriteError: If ownership cannot be acquired.
        """
        with self._lock:
            display, window = self._connection()
            try:
                if not replace and self._owns_clipboard():
                    self._owned.update(targets)
                    return
                if not replace:
                    targets = {**self._owned, **targets}
                self._acquisition_time = get_server_timestamp(display, window, self._dispatch)
                window.set_selection_owner(self._clipboard_atom, self._acquisition_time)
                display.flush()
                owner = display.get_selection_owner(self._clipboard_atom)
            except X_ERRORS as e:
                raise ClipboardWriteError(f"Failed to set clipboard content: {e}") from e
            if window_id(owner) != window.id:
                self._owned = {}
                raise ClipboardWriteError("Failed to acquire clipboard ownership")
            self._owned = dict(targets)
            self._released.clear()
        self._start_server()
        logger.debug("Offering clipboard targets %s", sorted(targets))

    def wait_until_released(self, timeout: float | None = None) -> bool:
        """Block until another application takes the clipboard.

        Returns:
            True if ownership was lost, False on timeout.
        """
        return self._released.wait(timeout)

    # Serving

    def _dispatch(self, event: Event) -> None:
        """Handle an event on the I/O connection. Caller holds the lock."""
        if event.type == X.SelectionRequest:
            display = self._display
            offered = {display.intern_atom(name): data for name, data in self._owned.items()}
            handle_selection_request(display, event, offered, self._acquisition_time)
        elif event.type == X.SelectionClear and event.atom == self._clipboard_atom:
            logger.debug("Lost clipboard ownership")
            self._owned = {}
            self._acquisition_time = None
            self._released.set()

    def _start_server(self) -> None:
        if self._server is not None and self._server.is_alive():
            return
        self._server = threading.Thread(
            target=self._serve_requests, name="pcliphist-x11-serve", daemon=True
        )
        self._server.start()

    def _serve_requests(self) -> None:
        """Answer SelectionRequests for owned content until closed."""
        display = self._display
        while not self._closed.is_set():
            try:
                select.select([display], [], [], SERVE_POLL_INTERVAL)
            except (OSError, ValueError):
                break
            with self._lock:
                if self._closed.is_set():
                    break
                try:
                    while display.pending_events() > 0:
                        self._dispatch(display.next_event())
                except X_ERRORS as e:
                    logger.error("Clipboard serving stopped: %s", e)
                    self._owned = {}
                    self._server = None
                    self._released.set()
                    break
