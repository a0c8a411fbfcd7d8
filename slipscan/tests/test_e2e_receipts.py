"""End-to-end tests for receipt processing in cached/live modes.

Each test case consists of files in tests/receipts_e2e/:
  - Optional JPG image: <name>.jpg
  - Optional OCR text: <name>.txt
  - Required expected results: <name>.expected.json
"""

from __future__ import annotations

import asyncio
import json
import os
import warnings
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from importlib.util import find_spec
from pathlib import Path
from typing import Any, cast

import pytest
from slipscan.domain.receipt import ExtractionResult
from slipscan.receipt.item_categories import get_default_rules
from slipscan.receipt.ocr_result_parser import parse_receipt_text
from slipscan.runtime.ocr_client import OCRServiceUnavailable, call_ocr_service
from slipscan.runtime.settings import ScanSettings

RECEIPTS_DIR = Path(__file__).parent / "receipts_e2e"
TODAY = date(2026, 1, 15)

HAS_PIL = find_spec("PIL") is not None


@dataclass(frozen=True)
class E2ECase:
    name: str
    expected_path: Path
    jpg_path: Path | None
    text_path: Path | None


def find_e2e_test_cases() -> list[E2ECase]:
    """Find test cases by <name>.expected.json and optional JPG/text artifacts."""
    test_cases: list[E2ECase] = []
    for expected_path in RECEIPTS_DIR.glob("*.expected.json"):
        name = expected_path.name.removesuffix(".expected.json")
        jpg_path = RECEIPTS_DIR / f"{name}.jpg"
        text_path = RECEIPTS_DIR / f"{name}.txt"
        test_cases.append(
            E2ECase(
                name=name,
                expected_path=expected_path,
                jpg_path=jpg_path if jpg_path.exists() else None,
                text_path=text_path if text_path.exists() else None,
            )
        )
    return sorted(test_cases, key=lambda c: c.name)


def load_expected(expected_path: Path) -> dict[str, Any]:
    with open(expected_path, encoding="utf-8") as f:
        return cast(dict[str, Any], json.load(f))


class TestE2EReceiptProcessing:
    @pytest.fixture
    def e2e_mode(self, request: pytest.FixtureRequest) -> str:
        return request.config.getoption("--slipscan-e2e-mode")

    @pytest.mark.parametrize(
        "test_case",
        find_e2e_test_cases(),
        ids=lambda c: c.name if isinstance(c, E2ECase) else str(c),
    )
    def test_receipt_extraction(self, e2e_mode: str, test_case: E2ECase) -> None:
        expected = load_expected(test_case.expected_path)
        ran_cached = False
        ran_live = False

        if e2e_mode in {"cached", "both"} and test_case.text_path is not None:
            raw_text = test_case.text_path.read_text(encoding="utf-8")
            self._verify_expected(parse_receipt_text(raw_text, get_default_rules(), today=TODAY), expected)
            ran_cached = True
        elif e2e_mode == "cached":
            pytest.skip(f"cached mode requires {test_case.name}.txt")

        if e2e_mode in {"live", "both"}:
            settings = ScanSettings.from_env()
            if test_case.jpg_path is None:
                if e2e_mode == "live":
                    pytest.skip(f"live mode requires {test_case.name}.jpg")
            elif not HAS_PIL:
                pytest.skip("PIL/Pillow not installed (required for live mode)")
            elif not os.environ.get("SLIPSCAN_OCR_API_KEY"):
                pytest.skip("SLIPSCAN_OCR_API_KEY not set for live mode")
            else:
                try:
                    raw_text = asyncio.run(call_ocr_service(test_case.jpg_path.read_bytes(), settings))
                except OCRServiceUnavailable as exc:
                    pytest.skip(f"OCR service not available for live mode: {exc}")
                self._verify_expected(parse_receipt_text(raw_text, get_default_rules(), today=TODAY), expected)
                ran_live = True

        assert ran_cached or ran_live, (
            f"No mode executed for case {test_case.name} with --slipscan-e2e-mode {e2e_mode}. "
            "Check available artifacts (.jpg/.txt)."
        )

    def _verify_expected(self, result: ExtractionResult, expected: dict[str, Any]) -> None:
        if "merchant" in expected:
            assert result.merchant == expected["merchant"], (
                f"Merchant mismatch: expected '{expected['merchant']}', got '{result.merchant}'"
            )

        expected_date = expected.get("date", TODAY.isoformat())
        assert result.date == expected_date, f"Date mismatch: expected '{expected_date}', got '{result.date}'"

        if "source" in expected:
            assert result.source == expected["source"], (
                f"Strategy mismatch: expected {expected['source']}, got {result.source}"
            )

        assert len(result.items) == expected["item_count"], (
            f"Item count mismatch: expected {expected['item_count']}, "
            f"got {[item.description for item in result.items]}"
        )
        assert result.no_items_detected == (expected["item_count"] == 0)

        if "critical_items" in expected:
            self._verify_critical_items(result, cast(list[dict[str, Any]], expected["critical_items"]))

    def _verify_critical_items(self, result: ExtractionResult, critical_items: list[dict[str, Any]]) -> None:
        by_description = {item.description.upper(): item for item in result.items}

        for critical in critical_items:
            item = by_description.get(critical["description"].upper())
            assert item is not None, (
                f"Critical item '{critical['description']}' not found in receipt. "
                f"Extracted items: {list(by_description)}"
            )

            expected_amount = Decimal(critical["amount"])
            assert item.amount == expected_amount, (
                f"Critical item '{critical['description']}' has wrong amount. "
                f"Expected {expected_amount}, found {item.amount}"
            )
            assert item.quantity == critical.get("quantity", 1)

            if "category" in critical:
                assert item.category == critical["category"], (
                    f"Critical item '{critical['description']}' has wrong category. "
                    f"Expected '{critical['category']}', found '{item.category}'"
                )


_test_cases = find_e2e_test_cases()
if not _test_cases:
    warnings.warn(
        f"No e2e test cases found. Add .expected.json files to {RECEIPTS_DIR} "
        "and optional matching .jpg/.txt files.",
        stacklevel=2,
    )
