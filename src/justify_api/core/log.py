"""Logging configuration for the Justify API."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO", *, debug: bool = False) -> None:
    """Install a single stdout handler on the root logger.

    Calling this more than once replaces the previous handler, so reloads do
    not duplicate output.
    """
    resolved = logging.DEBUG if debug else logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)


def mask_token(token: str) -> str:
    """Return a log-safe prefix of a bearer token."""
    return f"{token[:8]}..." if token else "<empty>"
