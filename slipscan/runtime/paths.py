"""Centralized path management for slipscan.

This module provides a single source of truth for project paths (rule
overrides, saved OCR text), resolved against SLIPSCAN_HOME or the current
working directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    """Determine the project root directory."""
    return Path(os.environ.get("SLIPSCAN_HOME") or Path.cwd())


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root, ensuring consistency
    across all modules regardless of where they are called from.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        # Ensure root is resolved to absolute path
        self.root = Path(self.root).expanduser().resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def receipt_rules(self) -> Path:
        """Project-level skip keyword / category rules TOML file."""
        return self.config / "receipt_rules.toml"

    # --- Receipt paths ---
    @property
    def receipts(self) -> Path:
        """Root receipts directory."""
        return self.root / "receipts"

    @property
    def receipts_ocr_text(self) -> Path:
        """Raw OCR text saved for debugging."""
        return self.receipts / "ocr_text"


# Module-level singleton
_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Forget the cached ProjectPaths (next get_paths() re-reads SLIPSCAN_HOME)."""
    global _paths
    _paths = None
