#!/usr/bin/env python3
"""Constants for history, watcher and X11 backend configuration.

Values here are defaults; the CLI exposes the user-facing ones as options
with environment variable fallbacks.
"""

# Number of entries kept in history until the capacity is changed.
DEFAULT_CAPACITY: int = 100

# Timeout in seconds for clipboard read operations to prevent hangs
# when the clipboard owner is unresponsive.
CLIPBOARD_TIMEOUT: float = 2.0

# Upper bound in seconds on a single blocking wait for a clipboard change.
# The watcher re-enters the wait after each timeout, which keeps
# cancellation of the watcher task prompt.
WATCH_POLL_TIMEOUT: float = 1.0

# Delay in seconds before waiting again after the change wait itself failed.
WAIT_ERROR_DELAY: float = 1.0

# Retry parameters for opening the X display at startup.
DISPLAY_CONNECT_ATTEMPTS: int = 3
DISPLAY_CONNECT_MIN_WAIT: float = 0.5
DISPLAY_CONNECT_MAX_WAIT: float = 4.0

# Image files are stored as <prefix><digest>.png under the image directory.
IMAGE_FILE_PREFIX: str = "clipboard_image_"
IMAGE_DIGEST_LENGTH: int = 16

# Directory name under the data home holding stored clipboard images.
IMAGE_DIR_NAME: str = "clipboard_images"
