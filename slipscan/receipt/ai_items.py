"""Validation of item lists proposed by a generative pre-parse service."""

import json
import re
from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from slipscan.domain.receipt import CandidateItem

from .ocr_parser.common import build_item, is_exact_skip_keyword

JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def extract_json_array(generated_text: str) -> Any:
    """Return the first JSON array embedded in model output, or None."""
    match = JSON_ARRAY.search(generated_text or "")
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return None


def _to_decimal(raw: Any) -> Decimal | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        raw = str(raw)
    if not isinstance(raw, str):
        return None
    try:
        return Decimal(raw.strip().lstrip("$₹€£").strip())
    except InvalidOperation:
        return None


def _to_quantity(raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    return 1


def items_from_ai_payload(payload: Any, skip_keywords: Iterable[str] = ()) -> tuple[CandidateItem, ...]:
    """
    Turn a pre-parse payload into validated items.

    A payload that is not a list yields no items. Entries that are not
    ``{"description", "amount"}`` mappings, fail the item invariants, or are
    just a skip keyword ("Total", "Tax") are dropped.
    """
    if not isinstance(payload, list):
        return tuple()

    skip_keywords = tuple(skip_keywords)
    items: list[CandidateItem] = []
    for entry in payload:
        if not isinstance(entry, Mapping):
            continue
        description = entry.get("description")
        if not isinstance(description, str) or is_exact_skip_keyword(description, skip_keywords):
            continue
        amount = _to_decimal(entry.get("amount"))
        if amount is None or not amount.is_finite():
            continue
        item = build_item(description, amount, _to_quantity(entry.get("quantity", 1)))
        if item is not None:
            items.append(item)
    return tuple(items)
