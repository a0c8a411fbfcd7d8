"""Shared pytest fixtures/options for slipscan tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from slipscan.runtime.paths import reset_paths
from slipscan.runtime.receipt_rules import load_receipt_rules


def pytest_addoption(parser):
    """Custom pytest option for receipt e2e tests."""
    parser.addoption(
        "--slipscan-e2e-mode",
        action="store",
        default="cached",
        choices=["cached", "live", "both"],
        help=(
            "Receipt E2E mode for slipscan/tests/test_e2e_receipts.py: "
            "cached (.txt OCR text), live (.jpg -> OCR service), or both."
        ),
    )


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point SLIPSCAN_HOME at an empty temp project and reset cached paths/rules."""
    monkeypatch.setenv("SLIPSCAN_HOME", str(tmp_path))
    reset_paths()
    load_receipt_rules.cache_clear()
    yield tmp_path
    reset_paths()
    load_receipt_rules.cache_clear()
