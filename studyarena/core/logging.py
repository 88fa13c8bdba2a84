"""Logging setup shared by the API and background callers."""

from __future__ import annotations

import logging

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Install a console handler on the ``studyarena`` logger tree.

    Calling it again only updates the level.
    """

    root = logging.getLogger("studyarena")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
        root.addHandler(handler)


__all__ = ["configure_logging"]
