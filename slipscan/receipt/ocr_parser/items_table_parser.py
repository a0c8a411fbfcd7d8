"""Table-structure receipt item extraction (QTY / DESCRIPTION / AMOUNT columns)."""

from collections.abc import Iterable, Sequence
from decimal import Decimal

from slipscan.domain.receipt import CandidateItem, Line

from .common import (
    BARE_INTEGER,
    DATE_LINE,
    build_item,
    is_exact_skip_keyword,
    is_price_line,
    parse_price,
    price_in_range,
)

QTY_MARKER = "qty"
DESCRIPTION_MARKER = "description"
AMOUNT_MARKER = "amount"

# Column headers and invoice metadata labels that are never item descriptions
TABLE_LABELS = frozenset(
    {
        "qty",
        "description",
        "amount",
        "unit price",
        "logo",
        "receipt",
        "total",
        "receipt #",
        "receipt date",
        "p.o.#",
        "due date",
        "bill to",
        "ship to",
    }
)


def _find_markers(lines: Sequence[Line]) -> tuple[int | None, int | None, int | None]:
    """Return positions of the qty, description and amount markers.

    The first amount marker ends the search; qty/description are the last
    occurrences before it.
    """
    qty_pos = desc_pos = amount_pos = None
    for pos, line in enumerate(lines):
        marker = line.text.lower()
        if marker == QTY_MARKER:
            qty_pos = pos
        elif marker == DESCRIPTION_MARKER:
            desc_pos = pos
        elif marker == AMOUNT_MARKER:
            amount_pos = pos
            break
    return qty_pos, desc_pos, amount_pos


def count_quantity_lines(lines: Sequence[Line], qty_pos: int | None, desc_pos: int) -> int:
    """Count bare-integer lines in the QTY column (between qty and description)."""
    if qty_pos is None or qty_pos >= desc_pos:
        return 0
    return sum(1 for line in lines[qty_pos + 1 : desc_pos] if BARE_INTEGER.match(line.text))


def _is_description_candidate(text: str, skip_keywords: Iterable[str]) -> bool:
    if text.lower() in TABLE_LABELS:
        return False
    if BARE_INTEGER.match(text) or DATE_LINE.match(text) or is_price_line(text):
        return False
    if len(text) <= 2:
        return False
    return not is_exact_skip_keyword(text, skip_keywords)


def _within_bound(collected: list, bound: int | None) -> bool:
    return bound is None or len(collected) < bound


def _collect_amounts(lines: Sequence[Line], start: int, bound: int | None) -> list[Decimal]:
    amounts: list[Decimal] = []
    for line in lines[start:]:
        if not _within_bound(amounts, bound):
            break
        value = parse_price(line.text)
        if price_in_range(value):
            amounts.append(value)  # type: ignore[arg-type]
    return amounts


def _has_later_rows(lines: Sequence[Line], amounts_start: int, skip_keywords: Sequence[str]) -> bool:
    """Return True if a description and then a price follow the first amount."""
    seen_description = False
    for line in lines[amounts_start + 1 :]:
        if _is_description_candidate(line.text, skip_keywords):
            seen_description = True
        elif seen_description and price_in_range(parse_price(line.text)):
            return True
    return False


def _match_rows(
    lines: Sequence[Line],
    start: int,
    skip_keywords: Sequence[str],
    bound: int | None,
) -> list[CandidateItem]:
    items: list[CandidateItem] = []
    pending: str | None = None
    for line in lines[start:]:
        if not _within_bound(items, bound):
            break
        if is_price_line(line.text):
            # A price with no pending description is a QTY cell.
            value = parse_price(line.text)
            if pending is not None and price_in_range(value):
                item = build_item(pending, value)
                if item is not None:
                    items.append(item)
                pending = None
        elif _is_description_candidate(line.text, skip_keywords):
            pending = line.text
    return items


def match_table_structure(
    lines: Sequence[Line],
    *,
    skip_keywords: Iterable[str] = (),
    expected_count: int | None = None,
) -> list[CandidateItem]:
    """
    Extract items from a receipt laid out as QTY / DESCRIPTION / AMOUNT columns.

    Three layouts are recognised:
    - split columns, where descriptions sit between the DESCRIPTION and
      AMOUNT markers and amounts follow the AMOUNT marker;
    - a header row, where the markers are adjacent and the description
      block and then the amount block follow it;
    - header-row rows, where OCR read the table row by row (QTY,
      DESCRIPTION, AMOUNT per row), so each description pairs with the
      next price below it.

    The expected item count bounds how many descriptions and amounts are
    collected. It is a best-effort clamp: a malformed QTY column can make
    it undercount or overcount.

    Args:
        lines: Segmented receipt lines
        skip_keywords: Lines equal to one of these are never descriptions
        expected_count: Explicit bound; when None it is derived from the
            number of integers in the QTY column (0 means unbounded)
    """
    skip_keywords = tuple(skip_keywords)
    qty_pos, desc_pos, amount_pos = _find_markers(lines)
    if desc_pos is None or amount_pos is None:
        return []

    if expected_count is None:
        expected_count = count_quantity_lines(lines, qty_pos, desc_pos)
    bound = expected_count if expected_count > 0 else None

    descriptions: list[str] = []
    if amount_pos > desc_pos + 1:
        for line in lines[desc_pos + 1 : amount_pos]:
            if not _within_bound(descriptions, bound):
                break
            if _is_description_candidate(line.text, skip_keywords):
                descriptions.append(line.text)
        amounts_start = amount_pos + 1
    else:
        amounts_start = None
        for pos in range(amount_pos + 1, len(lines)):
            text = lines[pos].text
            if is_price_line(text):
                # Leading numbers belong to the QTY column.
                if descriptions:
                    amounts_start = pos
                    break
                continue
            if _within_bound(descriptions, bound) and _is_description_candidate(text, skip_keywords):
                descriptions.append(text)
        if amounts_start is None:
            return []
        if _has_later_rows(lines, amounts_start, skip_keywords):
            return _match_rows(lines, amount_pos + 1, skip_keywords, bound)

    amounts = _collect_amounts(lines, amounts_start, bound)

    match_count = min(len(descriptions), len(amounts))
    if bound is not None:
        match_count = min(match_count, bound)

    items: list[CandidateItem] = []
    for description, amount in zip(descriptions[:match_count], amounts[:match_count]):
        item = build_item(description, amount)
        if item is not None:
            items.append(item)
    return items
