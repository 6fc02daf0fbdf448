"""Logging setup shared by the API server and the terminal playtest."""

import logging

from dataentry.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the ``dataentry`` logger tree.

    Safe to call more than once; later calls only adjust the level.
    """
    root = logging.getLogger("dataentry")
    root.setLevel((level or settings.LOG_LEVEL).upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
