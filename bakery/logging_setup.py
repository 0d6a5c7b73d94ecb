"""Console logging for the app process."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)s | %(message)s"
ENV_LOG_LEVEL = "RISNA_LOG_LEVEL"


def setup_logging(level=None) -> logging.Logger:
    """Attach one console handler to the ``bakery`` logger (idempotent)."""
    logger = logging.getLogger("bakery")
    if logger.handlers:
        return logger

    level = level or os.environ.get(ENV_LOG_LEVEL, "INFO")
    logger.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
