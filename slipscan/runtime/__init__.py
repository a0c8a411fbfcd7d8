"""Runtime infrastructure for slipscan.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Settings from the environment via ScanSettings.from_env()
- Rule loading via load_receipt_rules()

The HTTP collaborators (ocr_client, ai_client) and the FastAPI server are
imported from their modules directly.

Usage:
    from slipscan.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.receipt_rules)
"""

from slipscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from slipscan.runtime.paths import ProjectPaths, get_paths, reset_paths
from slipscan.runtime.receipt_rules import load_receipt_rules
from slipscan.runtime.settings import ScanSettings

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Rules
    "load_receipt_rules",
    # Settings
    "ScanSettings",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
]
