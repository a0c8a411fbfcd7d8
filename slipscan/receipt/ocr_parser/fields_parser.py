"""Merchant/date extraction helpers."""

import re
from collections.abc import Sequence
from datetime import date

from slipscan.domain.receipt import Line

# DD/MM/YY, DD-MM-YYYY, ... (day-first; receipts from day-first locales)
DATE_PATTERN = re.compile(r"(?<!\d)(\d{1,2})[-/](\d{1,2})[-/](\d{4}|\d{2})(?!\d)")


def extract_merchant(lines: Sequence[Line]) -> str:
    """Return the first line: receipts conventionally print the business name first."""
    if not lines:
        return ""
    return lines[0].text


def _parse_day_first(day: str, month: str, year: str) -> date | None:
    year_value = int(year)
    if len(year) == 2:
        year_value += 2000
    try:
        return date(year_value, int(month), int(day))
    except ValueError:
        return None


def find_date(lines: Sequence[Line]) -> date | None:
    """Return the first valid day-first date found in the lines, or None."""
    for line in lines:
        for match in DATE_PATTERN.finditer(line.text):
            parsed = _parse_day_first(*match.groups())
            if parsed is not None:
                return parsed
    return None


def extract_date(lines: Sequence[Line], today: date | None = None) -> date:
    """
    Extract the transaction date, falling back to today.

    Month-first receipts are misread (or skipped when the day is > 12);
    there is no signal in the text to tell the two orders apart.

    Args:
        lines: Segmented receipt lines
        today: Fallback date; defaults to the current date at call time
    """
    found = find_date(lines)
    if found is not None:
        return found
    return today if today is not None else date.today()
