"""Logging configuration for the pcliphist CLI."""
import logging

VERBOSE_FORMAT = "%(levelname)s %(name)s: %(message)s"
DEFAULT_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(verbose: bool) -> None:
    """Configure logging on stderr.

    Args:
        verbose: If True, log DEBUG and above with logger names; otherwise
            only warnings and errors.

    stdout is left to command output (JSON lines, image bytes).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=VERBOSE_FORMAT if verbose else DEFAULT_FORMAT,
        handlers=[logging.StreamHandler()],
    )
