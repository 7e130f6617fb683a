"""CLI handling for pcliphist.

This module provides the command-line interface for pcliphist, handling
argument parsing via click, logging configuration, and wiring the X11
clipboard, image store and history engine together.

Usage:
    pcliphist watch [--capacity N] [--image-dir DIR] [--verbose]
    pcliphist current [--verbose]
    pcliphist copy TEXT [--html HTML] [--rtf RTF] [--no-wait] [--verbose]
    pcliphist image HANDLE [--image-dir DIR]
"""

from __future__ import annotations

import json
import signal
import sys
import threading
from pathlib import Path

import click

from pcliphist.constants import DEFAULT_CAPACITY
from pcliphist.errors import ClipboardError
from pcliphist.main_logging import configure_logging

verbose_option = click.option(
    "--verbose",
    is_flag=True,
    help="Enable DEBUG-level logging",
)
display_option = click.option(
    "--display",
    "display_name",
    default=None,
    help="X11 display to use (default: $DISPLAY)",
)
image_dir_option = click.option(
    "--image-dir",
    envvar="PCLIPHIST_IMAGE_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for captured images (default: $XDG_DATA_HOME/pcliphist/clipboard_images)",
)


def _image_store(image_dir: Path | None):
    from pcliphist.image_store import DirectoryImageStore, default_image_dir

    return DirectoryImageStore(image_dir or default_image_dir())


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="pcliphist")
def main() -> None:
    """Watch the X11 clipboard and keep a bounded history of its content."""


@main.command()
@click.option(
    "--capacity",
    envvar="PCLIPHIST_CAPACITY",
    type=click.IntRange(min=0),
    default=DEFAULT_CAPACITY,
    show_default=True,
    help="Maximum number of history entries",
)
@image_dir_option
@display_option
@verbose_option
def watch(capacity: int, image_dir: Path | None, display_name: str | None, verbose: bool) -> None:
    """Record clipboard changes, printing one JSON line per new entry."""
    from pcliphist.history import HistoryStore
    from pcliphist.notify import JsonLinesNotifier
    from pcliphist.runtime import ClipboardRuntime
    from pcliphist.x11_clipboard import X11Clipboard

    configure_logging(verbose)

    clipboard = X11Clipboard(display_name)
    runtime = ClipboardRuntime(
        clipboard,
        HistoryStore(capacity),
        _image_store(image_dir),
        JsonLinesNotifier(click.get_text_stream("stdout")),
    )
    if not runtime.start():
        clipboard.close()
        _fail(ClipboardError("clipboard watcher could not be started"))

    shutdown_requested = threading.Event()
    signal.signal(signal.SIGINT, lambda signum, frame: shutdown_requested.set())
    signal.signal(signal.SIGTERM, lambda signum, frame: shutdown_requested.set())
    try:
        while not shutdown_requested.wait(0.5):
            if not runtime.watching:
                break
    finally:
        runtime.stop()
        clipboard.close()
    if not shutdown_requested.is_set():
        _fail(ClipboardError("clipboard watcher stopped unexpectedly"))


@main.command()
@display_option
@verbose_option
def current(display_name: str | None, verbose: bool) -> None:
    """Print the current clipboard content as JSON."""
    from pcliphist.facade import ClipboardFacade
    from pcliphist.history import HistoryStore
    from pcliphist.x11_clipboard import X11Clipboard

    configure_logging(verbose)

    clipboard = X11Clipboard(display_name)
    facade = ClipboardFacade(HistoryStore(), clipboard, _image_store(None))
    try:
        entry = facade.read_current()
    except ClipboardError as e:
        _fail(e)
    finally:
        clipboard.close()
    click.echo(json.dumps(entry.to_dict(), ensure_ascii=False))


@main.command()
@click.argument("text")
@click.option("--html", default=None, help="HTML variant to offer alongside TEXT")
@click.option("--rtf", default=None, help="RTF variant to offer alongside TEXT")
@click.option(
    "--wait/--no-wait",
    default=True,
    help="Keep serving the clipboard until another application takes it",
)
@display_option
@verbose_option
def copy(
    text: str,
    html: str | None,
    rtf: str | None,
    wait: bool,
    display_name: str | None,
    verbose: bool,
) -> None:
    """Put TEXT on the clipboard."""
    from pcliphist.facade import ClipboardFacade
    from pcliphist.history import HistoryStore
    from pcliphist.x11_clipboard import X11Clipboard

    configure_logging(verbose)

    clipboard = X11Clipboard(display_name)
    facade = ClipboardFacade(HistoryStore(), clipboard, _image_store(None))
    try:
        facade.write(text, html=html, rich_text=rtf)
        if wait:
            clipboard.wait_until_released()
    except ClipboardError as e:
        _fail(e)
    except KeyboardInterrupt:
        pass
    finally:
        clipboard.close()


@main.command()
@click.argument("handle")
@image_dir_option
def image(handle: str, image_dir: Path | None) -> None:
    """Write the stored image HANDLE to stdout."""
    try:
        data = _image_store(image_dir).load(handle)
    except ClipboardError as e:
        _fail(e)
    click.get_binary_stream("stdout").write(data)
