"""Logger setup for the slipscan CLI, server and scan workflow.

Every slipscan logger hangs off the "slipscan" logger, which gets one stderr
handler on first use. Modules obtain theirs with::

    from slipscan.runtime import get_logger
    logger = get_logger(__name__)

SLIPSCAN_LOG_LEVEL picks the starting level (DEBUG, INFO, WARNING/WARN or
ERROR); anything else falls back to INFO.
"""

import logging
import os
import sys

DEFAULT_LOG_LEVEL = logging.INFO

LOGGER_NAMESPACE = "slipscan"

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
# Debug output also names the source line
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_handler: logging.Handler | None = None


def _level_from_env() -> int:
    return LEVELS.get(os.environ.get("SLIPSCAN_LOG_LEVEL", "").strip().upper(), DEFAULT_LOG_LEVEL)


def _formatter_for(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | None = None) -> None:
    """Attach the stderr handler to the "slipscan" logger.

    Only the first call has an effect. With no explicit level the
    SLIPSCAN_LOG_LEVEL environment variable decides.
    """
    global _handler

    if _handler is not None:
        return

    if level is None:
        level = _level_from_env()

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(_formatter_for(level))

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(level)
    namespace.addHandler(_handler)
    namespace.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return the slipscan logger for ``name``, prefixing the namespace when missing."""
    configure_logging()

    if name != LOGGER_NAMESPACE and not name.startswith(LOGGER_NAMESPACE + "."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)


def set_log_level(level: int) -> None:
    """Switch the namespace level, and the line-number format with it."""
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(level)
    for handler in namespace.handlers:
        handler.setFormatter(_formatter_for(level))
