"""Single-line pattern receipt item extraction."""

import re
from collections.abc import Iterable, Sequence
from decimal import Decimal, InvalidOperation

from slipscan.domain.receipt import CandidateItem, Line

from .common import MAX_LINE_LENGTH, build_item, clean_description, should_skip_line

_NUMBER = r"(\d+(?:\.\d{1,2})?)"
_CURRENCY = r"(?:rs\.?|inr|[$₹€£])"

# Pattern kinds decide which groups hold quantity, description and amount.
LINE_ITEM_PATTERNS = [
    # "2x Widget 10.00" / "2 x Widget 10"
    (re.compile(rf"^(\d+)\s*x\s+(.+?)\s+{_NUMBER}$", re.IGNORECASE), "quantity"),
    # "Sandwich 6.00" / "Sandwich 6"
    (re.compile(rf"^(.+?)\s+{_NUMBER}\s*$"), "trailing"),
    # "Tea Rs.10" / "Tea ₹10"
    (re.compile(rf"^(.+?)\s+{_CURRENCY}\s*{_NUMBER}", re.IGNORECASE), "trailing"),
    # "10.00 Tea" / "Rs.10 Tea"
    (re.compile(rf"^{_CURRENCY}?\s*{_NUMBER}\s+(.+)$", re.IGNORECASE), "leading"),
    # "Tea ........ 10.00"
    (re.compile(rf"^(.+?)\s*\.{{2,}}\s*{_NUMBER}$"), "trailing"),
]


def _item_from_match(match: re.Match[str], kind: str) -> CandidateItem | None:
    quantity = 1
    try:
        if kind == "quantity":
            quantity = int(match.group(1))
            description, amount = match.group(2), Decimal(match.group(3))
        elif kind == "leading":
            amount, description = Decimal(match.group(1)), match.group(2)
        else:
            description, amount = match.group(1), Decimal(match.group(2))
    except (InvalidOperation, ValueError):
        return None
    return build_item(clean_description(description), amount, quantity)


def parse_line_item(text: str) -> CandidateItem | None:
    """
    Parse one receipt line into an item.

    Patterns are tried in order; a pattern whose match fails validation
    (amount out of range, description too short or numeric) falls through
    to the next one. Lines longer than MAX_LINE_LENGTH are never items.
    """
    text = text.strip()
    if len(text) > MAX_LINE_LENGTH:
        return None
    for pattern, kind in LINE_ITEM_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        item = _item_from_match(match, kind)
        if item is not None:
            return item
    return None


def match_line_patterns(
    lines: Sequence[Line],
    *,
    skip_keywords: Iterable[str] = (),
) -> list[CandidateItem]:
    """Extract items from lines that carry both a description and a price."""
    skip_keywords = tuple(skip_keywords)
    items: list[CandidateItem] = []
    for line in lines:
        if should_skip_line(line.text, skip_keywords):
            continue
        item = parse_line_item(line.text)
        if item is not None:
            items.append(item)
    return items
