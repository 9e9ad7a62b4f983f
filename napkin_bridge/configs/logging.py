"""
Napkin Bridge Logging

All gateway loggers live under the "napkin" namespace. The embedding editor
may configure that logger itself; setup_logging() is for hosts that want
the gateway's own log file. NAPKIN_DEBUG and NAPKIN_LOG_FILE override the
defaults.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from napkin_bridge.configs.paths import get_data_path

ROOT_LOGGER = "napkin"
LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(debug: Optional[bool] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Send gateway logs to a file, with warnings also echoed to stderr.

    Calling it again replaces the handlers installed by the previous call.
    """
    if debug is None:
        debug = os.environ.get("NAPKIN_DEBUG", "").lower() in ("true", "1", "yes")
    path = Path(log_file or os.environ.get("NAPKIN_LOG_FILE") or get_data_path() / "gateway.log")
    path.parent.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    for handler, handler_level in (
        (logging.StreamHandler(sys.stderr), logging.WARNING),
        (logging.FileHandler(path), level),
    ):
        handler.setFormatter(formatter)
        handler.setLevel(handler_level)
        logger.addHandler(handler)

    logger.debug(f"Gateway log file: {path}")
    return logger


def get_logger(component: str) -> logging.Logger:
    """Logger for one gateway component, e.g. get_logger("bridge") -> napkin.bridge."""
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")
