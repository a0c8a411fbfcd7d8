"""Shared constants and helpers for OCR receipt parsing."""

import re
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from slipscan.domain.receipt import CandidateItem, Line

# Exclusive upper bound for any accepted item amount
MAX_ITEM_AMOUNT = Decimal("100000")
# Adjacent-line pairing uses a tighter bound (line items, never totals)
MAX_PAIRED_AMOUNT = Decimal("10000")

MIN_DESCRIPTION_LENGTH = 2
# Longer lines are OCR run-ons, never a single item row
MAX_LINE_LENGTH = 200

LINE_BREAKS = re.compile(r"[\r\n]+")

# "3.50", "$3.50", "₹ 120", "Rs.45", "2"
PRICE_LINE = re.compile(r"^(?:[$₹€£]|rs\.?)?\s*(\d+\.?\d*)$", re.IGNORECASE)
CURRENCY_LED = re.compile(r"^[$₹€£]\s*\d+")
DATE_LINE = re.compile(r"^\d{1,2}[-/]\d{1,2}[-/](?:\d{4}|\d{2})$")
BARE_INTEGER = re.compile(r"^\d+$")
NUMERIC_TEXT = re.compile(r"^[\d.,\s]+$")

# Header/footer lines that never carry an item
HEADER_FOOTER_PATTERNS = [
    re.compile(r"^(address|addr|tel|phone|email|website|www)", re.IGNORECASE),
    re.compile(r"^(cashier|server|table|order|ticket)", re.IGNORECASE),
    re.compile(r"^(open|close|time|date):", re.IGNORECASE),
    re.compile(r"^(thank you|thanks|welcome|visit)", re.IGNORECASE),
    re.compile(r"^(cash|credit|debit|card|payment method)", re.IGNORECASE),
    re.compile(r"^(change|tendered|received)", re.IGNORECASE),
]

# Digit-only lines up to this length may be quantities rather than noise
MAX_QUANTITY_DIGITS = 4

TRAILING_PUNCTUATION = re.compile(r"[\s.:,;$₹€£-]+$")


def segment_lines(raw_text: str | None) -> tuple[Line, ...]:
    """Split raw OCR text into trimmed, non-empty lines in reading order."""
    if not raw_text:
        return tuple()
    texts = (part.strip() for part in LINE_BREAKS.split(raw_text))
    return tuple(Line(index=i, text=text) for i, text in enumerate(t for t in texts if t))


def should_skip_line(text: str, skip_keywords: Iterable[str] = ()) -> bool:
    """Return True if a line is boilerplate (totals, tax, payment, contact info)."""
    if len(text) > MAX_LINE_LENGTH:
        return True

    lower = text.lower()
    for keyword in skip_keywords:
        if keyword and keyword.lower() in lower:
            return True

    for pattern in HEADER_FOOTER_PATTERNS:
        if pattern.match(text):
            return True

    if len(text) < 3 or not any(ch.isalnum() for ch in text):
        return True

    # Long digit runs are barcodes/reference numbers; short ones may be quantities.
    if BARE_INTEGER.match(text) and len(text) > MAX_QUANTITY_DIGITS:
        return True

    return False


def parse_price(text: str) -> Decimal | None:
    """Return the value of a price-shaped line, or None."""
    match = PRICE_LINE.match(text.strip())
    if not match:
        return None
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return None


def price_in_range(value: Decimal | None, upper: Decimal = MAX_ITEM_AMOUNT) -> bool:
    return value is not None and Decimal(0) < value < upper


def is_price_line(text: str) -> bool:
    return parse_price(text) is not None


def is_exact_skip_keyword(text: str, skip_keywords: Iterable[str]) -> bool:
    """Return True if the whole line is one of the skip keywords."""
    lower = text.strip().lower()
    return any(lower == keyword.lower() for keyword in skip_keywords)


def clean_description(description: str) -> str:
    """Strip trailing punctuation and currency marks from a description."""
    return TRAILING_PUNCTUATION.sub("", description.strip()).strip()


def build_item(description: str, amount: Decimal | None, quantity: int = 1) -> CandidateItem | None:
    """
    Build a CandidateItem if description, amount and quantity are valid.

    Invalid candidates are discarded (None), never raised.
    """
    if amount is None or not price_in_range(amount):
        return None
    description = description.strip()
    if len(description) < MIN_DESCRIPTION_LENGTH or NUMERIC_TEXT.match(description):
        return None
    if quantity < 1:
        return None
    return CandidateItem(description=description, amount=amount, quantity=quantity)
