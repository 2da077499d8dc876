"""Logging setup: one stdout handler with a timestamped line format."""

import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """Send all log records to stdout as "time | level | logger | message"."""
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Library loggers stay at WARNING even in debug mode
    for name in ("PyQt6", "pykeepass"):
        logging.getLogger(name).setLevel(logging.WARNING)
