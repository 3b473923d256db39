"""Process-wide logging configuration, applied once at application startup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a stream handler on the root logger at *level*.

    Repeated calls only adjust the level.
    """
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    root.setLevel(level.upper())
    # Per-request HTTP client chatter drowns the pipeline's own messages.
    logging.getLogger("httpx").setLevel(logging.WARNING)
