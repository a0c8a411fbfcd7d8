"""Positional receipt item extraction for layouts that split descriptions from prices."""

import re
from collections.abc import Iterable, Sequence
from decimal import Decimal

from slipscan.domain.receipt import CandidateItem, Line

from .common import (
    CURRENCY_LED,
    DATE_LINE,
    MAX_PAIRED_AMOUNT,
    build_item,
    is_price_line,
    parse_price,
    price_in_range,
    should_skip_line,
)

# Whole-line totals/payment words that are never item candidates
PAYMENT_OR_TOTAL_LINE = re.compile(
    r"^(total|sub-total|subtotal|sales tax|tax|balance|cash|change|tendered|payment|card|credit|debit)$",
    re.IGNORECASE,
)
DIGITS_OR_TIME = re.compile(r"^[\d:]+$")
TOTALS_SECTION = re.compile(r"subtotal|sub-total|sales tax|tax|total|balance", re.IGNORECASE)


def _is_item_candidate(text: str, skip_keywords: Sequence[str]) -> bool:
    if should_skip_line(text, skip_keywords) or len(text) <= 2:
        return False
    if DIGITS_OR_TIME.match(text) or DATE_LINE.match(text) or PAYMENT_OR_TOTAL_LINE.match(text):
        return False
    return not CURRENCY_LED.match(text)


def match_two_columns(
    lines: Sequence[Line],
    *,
    skip_keywords: Iterable[str] = (),
) -> list[CandidateItem]:
    """
    Pair a block of item lines with a later block of prices.

    Item prices are printed before subtotal/tax/total, so only as many
    leading prices as there are item candidates are used.
    """
    skip_keywords = tuple(skip_keywords)
    descriptions: list[str] = []
    prices: list[Decimal] = []
    for line in lines:
        value = parse_price(line.text)
        if value is not None:
            if price_in_range(value):
                prices.append(value)
        elif _is_item_candidate(line.text, skip_keywords):
            descriptions.append(line.text)

    if not descriptions or not prices:
        return []

    items: list[CandidateItem] = []
    for description, amount in zip(descriptions, prices):
        item = build_item(description, amount)
        if item is not None:
            items.append(item)
    return items


def match_adjacent_pairs(
    lines: Sequence[Line],
    *,
    skip_keywords: Iterable[str] = (),
) -> list[CandidateItem]:
    """
    Pair each description line with a price on the line right below it.

    The list is cut at the first description mentioning totals/tax/balance,
    in case the pairing ran into the summary section.
    """
    skip_keywords = tuple(skip_keywords)
    items: list[CandidateItem] = []
    pos = 0
    while pos < len(lines) - 1:
        current = lines[pos].text
        if (
            should_skip_line(current, skip_keywords)
            or is_price_line(current)
            or DATE_LINE.match(current)
            or len(current) <= 2
        ):
            pos += 1
            continue
        amount = parse_price(lines[pos + 1].text)
        if price_in_range(amount, MAX_PAIRED_AMOUNT):
            item = build_item(current, amount)
            if item is not None:
                items.append(item)
            pos += 2
            continue
        pos += 1

    for cut, item in enumerate(items):
        if TOTALS_SECTION.search(item.description):
            return items[:cut]
    return items
