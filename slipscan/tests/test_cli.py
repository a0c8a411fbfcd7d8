"""Tests for CLI command routing, output and exit codes."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from slipscan.application.receipts import scan
from slipscan.cli.main import main
from slipscan.runtime.settings import ScanSettings


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_no_command_prints_help_and_fails(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "parse <text_file>" in capsys.readouterr().out


def test_parse_prints_items(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    text_file = _write(project_root / "receipt.txt", "Corner Cafe\n12/03/2024\nCoffee 3.50\nTotal 3.50")

    assert main(["parse", str(text_file)]) == 0

    out = capsys.readouterr().out
    assert "Merchant: Corner Cafe" in out
    assert "Date: 2024-03-12" in out
    assert "1. Coffee - 3.50 [food]" in out


def test_parse_json_output(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    text_file = _write(project_root / "receipt.txt", "Shop\n2x Widget 10.00")

    assert main(["parse", str(text_file), "--json"]) == 0

    body = json.loads(capsys.readouterr().out)
    assert body["status"] == "parsed"
    assert body["source"] == "line_pattern"
    assert body["items"][0]["quantity"] == 2


def test_parse_no_items_exit_code(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    text_file = _write(project_root / "receipt.txt", "Thank you\nVisit again")

    assert main(["parse", str(text_file)]) == 2
    assert "No items detected" in capsys.readouterr().out


def test_parse_missing_file(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["parse", str(project_root / "missing.txt")]) == 1
    assert "Text file not found" in capsys.readouterr().out


def test_parse_with_rules_file(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rules = _write(project_root / "pets.toml", '[categories]\npets = ["kibble"]\n')
    text_file = _write(project_root / "receipt.txt", "Pet Shop\nKibble 2kg 24.00")

    assert main(["parse", str(text_file), "--json", "--rules", str(rules)]) == 0

    body = json.loads(capsys.readouterr().out)
    assert body["items"][0]["category"] == "pets"


def test_parse_with_invalid_rules_file(project_root: Path) -> None:
    rules = _write(project_root / "broken.toml", "[categories\n")
    text_file = _write(project_root / "receipt.txt", "Shop\nCoffee 3.50")

    assert main(["parse", str(text_file), "--rules", str(rules)]) == 1


def test_scan_missing_image(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["scan", str(project_root / "missing.jpg")]) == 1
    assert "Receipt file not found" in capsys.readouterr().out


def test_scan_prints_items(
    project_root: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    image = project_root / "receipt.jpg"
    image.write_bytes(b"image")

    async def fake_ocr(image_bytes: bytes, settings: ScanSettings) -> str:
        return "Store\nBread\nMilk\n2.50\n3.00\n45.00"

    monkeypatch.setattr(scan, "call_ocr_service", fake_ocr)

    assert main(["scan", str(image), "--no-ai", "--json"]) == 0

    body = json.loads(capsys.readouterr().out)
    assert body["source"] == "two_column"
    assert [item["amount"] for item in body["items"]] == ["2.50", "3.00"]


def test_scan_ocr_unavailable(
    project_root: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    image = project_root / "receipt.jpg"
    image.write_bytes(b"image")

    async def failing_ocr(image_bytes: bytes, settings: ScanSettings) -> str:
        raise scan.OCRServiceUnavailable("No text detected in image")

    monkeypatch.setattr(scan, "call_ocr_service", failing_ocr)

    assert main(["scan", str(image), "--no-ai"]) == 1
    assert "OCR service unavailable: No text detected in image" in capsys.readouterr().out
