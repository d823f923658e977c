"""Logging configuration for the kiosk."""

import logging
import sys

# Chatty third-party loggers kept at WARNING unless explicitly asked for
_NOISY = ("urllib3", "uvicorn.access", "websockets")


def setup_logging(level: int = logging.INFO, quiet: tuple[str, ...] = _NOISY) -> None:
    """Configure root logger for console."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )
    for name in quiet:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
