"""Last-resort extraction: a single item for the receipt total."""

import re
from collections.abc import Sequence

from slipscan.domain.receipt import CandidateItem, Line

from .common import build_item, parse_price, price_in_range

TOTAL_LABEL = re.compile(r"^(total|balance|grand total)$", re.IGNORECASE)
# How many lines below the label to look for its amount
TOTAL_LOOKAHEAD = 10


def match_total_only(lines: Sequence[Line], *, merchant: str = "") -> list[CandidateItem]:
    """Return one "Receipt from <merchant>" item for the total, or []."""
    for pos, line in enumerate(lines):
        if not TOTAL_LABEL.match(line.text):
            continue
        for candidate in lines[pos + 1 : pos + 1 + TOTAL_LOOKAHEAD]:
            value = parse_price(candidate.text)
            if price_in_range(value):
                item = build_item(f"Receipt from {merchant}", value)
                return [item] if item is not None else []
    return []
