#!/usr/bin/env python3
"""Tests for CLI argument handling in main.py."""
import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest_fakes import FakeClipboard
from pcliphist.capabilities import ContentFormat
from pcliphist.errors import ClipboardInitError
from pcliphist.image_store import DirectoryImageStore
from pcliphist.main import main


class CliClipboard(FakeClipboard):
    """Fake clipboard with the X11 backend's lifecycle methods."""

    def __init__(self, display_name=None) -> None:
        super().__init__()
        self.display_name = display_name
        self.closed = False
        self.waited = False

    def close(self) -> None:
        self.closed = True

    def wait_until_released(self, timeout=None) -> bool:
        self.waited = True
        return True


@pytest.fixture
def fake_x11():
    """Patch the X11 backend with a single CliClipboard instance."""
    clipboard = CliClipboard()
    with patch("pcliphist.x11_clipboard.X11Clipboard", return_value=clipboard) as cls:
        yield clipboard, cls


class TestHelp:
    """Tests for help output."""

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("watch", "current", "copy", "image"):
            assert command in result.output

    def test_no_command_shows_usage(self) -> None:
        result = CliRunner().invoke(main, [])
        assert "Usage" in result.output

    def test_negative_capacity_is_usage_error(self) -> None:
        result = CliRunner().invoke(main, ["watch", "--capacity", "-1"])
        assert result.exit_code == 2


class TestCurrent:
    """Tests for the current command."""

    def test_prints_entry_as_json(self, fake_x11) -> None:
        clipboard, _ = fake_x11
        clipboard.copy(html="<b>hi</b>", text="hi")

        result = CliRunner().invoke(main, ["current"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["id"] == -1
        assert payload["content"] == "hi"
        assert payload["contentType"] == "html"
        assert payload["htmlContent"] == "<b>hi</b>"
        assert clipboard.closed

    def test_passes_display_name(self, fake_x11) -> None:
        _, cls = fake_x11
        CliRunner().invoke(main, ["current", "--display", ":7"])
        cls.assert_called_once_with(":7")


class TestCopy:
    """Tests for the copy command."""

    def test_writes_all_variants(self, fake_x11) -> None:
        clipboard, _ = fake_x11

        result = CliRunner().invoke(
            main, ["copy", "hi", "--html", "<b>hi</b>", "--rtf", "{\\rtf1 hi}"]
        )

        assert result.exit_code == 0
        assert clipboard.formats == {
            ContentFormat.TEXT: "hi",
            ContentFormat.HTML: "<b>hi</b>",
            ContentFormat.RICH_TEXT: "{\\rtf1 hi}",
        }
        assert clipboard.waited
        assert clipboard.closed

    def test_no_wait(self, fake_x11) -> None:
        clipboard, _ = fake_x11
        result = CliRunner().invoke(main, ["copy", "hi", "--no-wait"])
        assert result.exit_code == 0
        assert not clipboard.waited

    def test_write_failure_exits_1(self, fake_x11) -> None:
        clipboard, _ = fake_x11
        clipboard.write_failures.add(ContentFormat.TEXT)
        result = CliRunner().invoke(main, ["copy", "hi"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert clipboard.closed


class TestImage:
    """Tests for the image command."""

    def test_writes_image_bytes(self, tmp_path: Path) -> None:
        handle = DirectoryImageStore(tmp_path).store(b"\x89PNG data")
        result = CliRunner().invoke(main, ["image", handle, "--image-dir", str(tmp_path)])
        assert result.exit_code == 0
        assert result.stdout_bytes == b"\x89PNG data"

    def test_image_dir_from_environment(self, tmp_path: Path) -> None:
        handle = DirectoryImageStore(tmp_path).store(b"\x89PNG data")
        result = CliRunner().invoke(
            main, ["image", handle], env={"PCLIPHIST_IMAGE_DIR": str(tmp_path)}
        )
        assert result.exit_code == 0

    def test_does_not_open_clipboard(self, fake_x11, tmp_path: Path) -> None:
        """Reading a stored image needs no X11 connection."""
        _, cls = fake_x11
        handle = DirectoryImageStore(tmp_path).store(b"\x89PNG data")
        result = CliRunner().invoke(main, ["image", handle, "--image-dir", str(tmp_path)])
        assert result.exit_code == 0
        cls.assert_not_called()

    def test_unknown_handle_exits_1(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["image", "nope.png", "--image-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestWatch:
    """Tests for the watch command."""

    def test_start_failure_exits_1(self, fake_x11, tmp_path: Path) -> None:
        clipboard, _ = fake_x11
        clipboard.start_error = ClipboardInitError("DISPLAY environment variable is not set")
        result = CliRunner().invoke(main, ["watch", "--image-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "could not be started" in result.output

    def test_watcher_ending_on_its_own_exits_1(self, fake_x11, tmp_path: Path) -> None:
        """A watcher that stops without a shutdown request is an error."""
        clipboard, _ = fake_x11

        async def finished(self) -> None:
            return None

        with patch("pcliphist.watcher.ClipboardWatcher.run", finished), \
                patch("pcliphist.main.signal.signal"):
            result = CliRunner().invoke(main, ["watch", "--image-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "stopped unexpectedly" in result.output
        assert clipboard.closed
