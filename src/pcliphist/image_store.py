#!/usr/bin/env python3
"""Directory-backed storage for clipboard images.

Images are written as PNG files named after a prefix of the SHA-256 digest
of their bytes. Copying the same image twice therefore yields the same
handle, which lets the duplicate gate recognize it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pcliphist.constants import IMAGE_DIGEST_LENGTH, IMAGE_DIR_NAME, IMAGE_FILE_PREFIX
from pcliphist.errors import ImageNotFoundError, StorageError
from pcliphist.hashing import compute_hash

logger = logging.getLogger(__name__)


def default_image_dir() -> Path:
    """Return the default image directory under the XDG data home.

    Returns:
        $XDG_DATA_HOME/pcliphist/clipboard_images, falling back to
        ~/.local/share when XDG_DATA_HOME is unset or empty.
    """
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "pcliphist" / IMAGE_DIR_NAME


class DirectoryImageStore:
    """Store clipboard images as files in one directory.

    The directory is created on the first store() call.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def store(self, data: bytes) -> str:
        """Write data and return its handle.

        Args:
            data: PNG-encoded image bytes.

        Returns:
            File name of the stored image, used as its handle.

        Raises:
            StorageError: If the directory or file cannot be written.
        """
        name = f"{IMAGE_FILE_PREFIX}{compute_hash(data)[:IMAGE_DIGEST_LENGTH]}.png"
        path = self.root / name
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            if not path.exists():
                path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to save image to {path}: {e}") from e
        logger.debug("Stored %d image bytes at %s", len(data), path)
        return name

    def load(self, handle: str) -> bytes:
        """Read the image stored under handle.

        Args:
            handle: File name returned by store().

        Returns:
            The stored image bytes.

        Raises:
            ImageNotFoundError: If handle is not a plain file name or no
                such image exists.
            StorageError: If the file exists but cannot be read.
        """
        if not handle or Path(handle).name != handle or handle in (".", ".."):
            raise ImageNotFoundError(f"Image does not exist: {handle!r}")
        path = self.root / handle
        if not path.is_file():
            raise ImageNotFoundError(f"Image does not exist: {path}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read image file {path}: {e}") from e
