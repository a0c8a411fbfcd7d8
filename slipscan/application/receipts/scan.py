"""Receipt scan workflow orchestration."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Literal, Protocol

from slipscan.domain.receipt import CandidateItem, ExtractionResult
from slipscan.receipt.ai_items import items_from_ai_payload
from slipscan.receipt.item_categories import ReceiptRules, categorize_item, categorize_items, category_for_ai_label
from slipscan.receipt.ocr_parser import extract_date, extract_merchant, segment_lines
from slipscan.receipt.ocr_result_parser import TraceHook, compose_result, parse_receipt_text
from slipscan.runtime.ai_client import HuggingFaceReceiptAI
from slipscan.runtime.logging import get_logger
from slipscan.runtime.ocr_client import OCRServiceUnavailable, call_ocr_service, save_ocr_text
from slipscan.runtime.receipt_rules import load_receipt_rules
from slipscan.runtime.settings import DEFAULT_AI_CONCURRENCY, ScanSettings

logger = get_logger(__name__)

AI_SOURCE = "ai"

ScanStatus = Literal[
    "file_not_found",
    "ocr_unavailable",
    "no_items",
    "parsed",
]


class ItemPreParser(Protocol):
    """Service that proposes an item list straight from OCR text."""

    async def parse_items(self, raw_text: str) -> Any: ...


class ItemClassifier(Protocol):
    """Service that picks a label for an item description."""

    async def classify(self, description: str, labels: Sequence[str]) -> tuple[str, float]: ...


async def _pre_parse(
    raw_text: str,
    pre_parser: ItemPreParser,
    rules: ReceiptRules,
) -> tuple[CandidateItem, ...]:
    try:
        payload = await pre_parser.parse_items(raw_text)
    except Exception as e:
        logger.warning("AI parsing failed, using strategy chain: %s", e)
        return tuple()
    items = items_from_ai_payload(payload, rules.skip_keywords)
    if not items:
        logger.info("AI parsing returned no usable items, using strategy chain")
    return items


async def _classify_item(
    item: CandidateItem,
    classifier: ItemClassifier,
    rules: ReceiptRules,
    semaphore: asyncio.Semaphore,
    timeout: float | None,
) -> CandidateItem:
    async with semaphore:
        try:
            label, confidence = await asyncio.wait_for(
                classifier.classify(item.description, rules.ai_label_vocabulary),
                timeout=timeout,
            )
        except Exception as e:
            logger.warning("AI categorization failed for item, using keywords: %s", e)
            return replace(item, category=categorize_item(item.description, rules), ai_suggested=False)
    return replace(
        item,
        category=category_for_ai_label(label, rules),
        confidence=confidence,
        ai_suggested=True,
    )


async def classify_items(
    items: Sequence[CandidateItem],
    classifier: ItemClassifier | None,
    rules: ReceiptRules,
    max_concurrency: int = DEFAULT_AI_CONCURRENCY,
    timeout: float | None = None,
) -> tuple[CandidateItem, ...]:
    """
    Categorize items, asking the classifier for each one concurrently.

    One item's failure or timeout only makes that item fall back to the
    keyword classifier.
    """
    if classifier is None or not rules.ai_labels:
        return categorize_items(items, rules)

    semaphore = asyncio.Semaphore(max(1, max_concurrency))
    classified = await asyncio.gather(
        *(_classify_item(item, classifier, rules, semaphore, timeout) for item in items)
    )
    return tuple(classified)


async def scan_receipt_text(
    raw_text: str,
    *,
    rules: ReceiptRules,
    pre_parser: ItemPreParser | None = None,
    classifier: ItemClassifier | None = None,
    max_concurrency: int = DEFAULT_AI_CONCURRENCY,
    timeout: float | None = None,
    today: date | None = None,
    trace: TraceHook | None = None,
) -> ExtractionResult:
    """
    Turn OCR text into an ExtractionResult, using AI collaborators when given.

    The pre-parser's items replace the strategy chain only when it returns
    at least one valid item; any failure falls back to the chain unchanged.
    Cancelling the task at any point is safe: nothing is written.
    """
    if pre_parser is not None:
        ai_items = await _pre_parse(raw_text, pre_parser, rules)
        if ai_items:
            lines = segment_lines(raw_text)
            result = compose_result(ai_items, extract_merchant(lines), extract_date(lines, today=today), AI_SOURCE)
        else:
            result = parse_receipt_text(raw_text, rules, today=today, trace=trace)
    else:
        result = parse_receipt_text(raw_text, rules, today=today, trace=trace)

    if classifier is None or not result.items:
        if result.source == AI_SOURCE:
            return replace(result, items=categorize_items(result.items, rules))
        return result

    items = await classify_items(result.items, classifier, rules, max_concurrency, timeout)
    return replace(result, items=items)


@dataclass(frozen=True)
class ReceiptScanRequest:
    """Inputs for running receipt scan workflow."""

    image_path: Path
    settings: ScanSettings
    use_ai: bool = True
    save_text: bool = False
    rules: ReceiptRules | None = None


@dataclass(frozen=True)
class ReceiptScanResult:
    """Outcome from receipt scan workflow."""

    status: ScanStatus
    result: ExtractionResult | None = None
    raw_text: str | None = None
    ocr_text_path: Path | None = None
    error: str | None = None


def build_ai_collaborators(settings: ScanSettings) -> HuggingFaceReceiptAI | None:
    """Return the AI client when an API key is configured, else None."""
    if not settings.ai_enabled:
        return None
    return HuggingFaceReceiptAI(settings)


def _status_for(result: ExtractionResult) -> ScanStatus:
    return "no_items" if result.no_items_detected else "parsed"


async def scan_image_bytes(
    image_bytes: bytes,
    settings: ScanSettings,
    *,
    rules: ReceiptRules,
    use_ai: bool = True,
) -> ReceiptScanResult:
    """Run OCR on image bytes and parse the text (shared by CLI and server)."""
    try:
        raw_text = await call_ocr_service(image_bytes, settings)
    except OCRServiceUnavailable as exc:
        return ReceiptScanResult(status="ocr_unavailable", error=str(exc))

    ai = build_ai_collaborators(settings) if use_ai else None
    if ai is None:
        result = await scan_receipt_text(raw_text, rules=rules)
    else:
        async with ai:
            result = await scan_receipt_text(
                raw_text,
                rules=rules,
                pre_parser=ai,
                classifier=ai,
                max_concurrency=settings.ai_concurrency,
                timeout=settings.ai_timeout,
            )
    return ReceiptScanResult(status=_status_for(result), result=result, raw_text=raw_text)


async def run_receipt_scan(request: ReceiptScanRequest) -> ReceiptScanResult:
    """Run scan flow: read image -> OCR -> AI pre-parse or strategy chain -> categorize."""
    if not request.image_path.exists():
        return ReceiptScanResult(
            status="file_not_found",
            error=f"Receipt file not found: {request.image_path}",
        )

    rules = request.rules or load_receipt_rules()
    outcome = await scan_image_bytes(
        request.image_path.read_bytes(),
        request.settings,
        rules=rules,
        use_ai=request.use_ai,
    )
    if request.save_text and outcome.raw_text is not None:
        return replace(outcome, ocr_text_path=save_ocr_text(outcome.raw_text, request.image_path))
    return outcome
