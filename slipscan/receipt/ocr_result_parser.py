"""Parse raw OCR text into a structured ExtractionResult."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Literal

from slipscan.domain.receipt import CandidateItem, ExtractionResult, Line

from .item_categories import ReceiptRules, categorize_items, get_default_rules
from .ocr_parser import (
    extract_date,
    extract_merchant,
    match_adjacent_pairs,
    match_line_patterns,
    match_table_structure,
    match_total_only,
    match_two_columns,
    segment_lines,
)

logger = logging.getLogger(__name__)

StrategyOutcome = Literal["accepted", "empty", "error"]


@dataclass(frozen=True)
class StrategyEvent:
    """Trace record for one strategy attempt."""

    strategy: str
    outcome: StrategyOutcome
    item_count: int = 0


TraceHook = Callable[[StrategyEvent], None]


@dataclass(frozen=True)
class ParseContext:
    """Per-scan inputs shared by all strategies."""

    lines: tuple[Line, ...]
    merchant: str
    rules: ReceiptRules


@dataclass(frozen=True)
class Strategy:
    """A named extraction strategy in the chain."""

    name: str
    run: Callable[[Sequence[Line], ParseContext], list[CandidateItem]]
    # Positional strategies pair by order, so the merchant line would shift every pair.
    skip_merchant_line: bool = False


def _log_event(event: StrategyEvent) -> None:
    logger.debug("Strategy %s: %s (%d items)", event.strategy, event.outcome, event.item_count)


STRATEGIES: tuple[Strategy, ...] = (
    Strategy("table", lambda lines, ctx: match_table_structure(lines, skip_keywords=ctx.rules.skip_keywords)),
    Strategy("line_pattern", lambda lines, ctx: match_line_patterns(lines, skip_keywords=ctx.rules.skip_keywords)),
    Strategy(
        "two_column",
        lambda lines, ctx: match_two_columns(lines, skip_keywords=ctx.rules.skip_keywords),
        skip_merchant_line=True,
    ),
    Strategy(
        "adjacent_pair",
        lambda lines, ctx: match_adjacent_pairs(lines, skip_keywords=ctx.rules.skip_keywords),
        skip_merchant_line=True,
    ),
    Strategy("total_only", lambda lines, ctx: match_total_only(lines, merchant=ctx.merchant)),
)


def extract_items(
    context: ParseContext,
    strategies: Sequence[Strategy] = STRATEGIES,
    trace: TraceHook | None = None,
) -> tuple[tuple[CandidateItem, ...], str | None]:
    """
    Run strategies in priority order; the first non-empty result wins.

    Returns:
        Tuple of (items, strategy name); ((), None) when every strategy fails.
    """
    emit = trace or _log_event
    for strategy in strategies:
        lines = context.lines[1:] if strategy.skip_merchant_line else context.lines
        try:
            items = strategy.run(lines, context)
        except Exception:
            logger.exception("Strategy %s raised; treating as empty", strategy.name)
            emit(StrategyEvent(strategy.name, "error"))
            continue
        if items:
            emit(StrategyEvent(strategy.name, "accepted", len(items)))
            return tuple(items), strategy.name
        emit(StrategyEvent(strategy.name, "empty"))
    return tuple(), None


def compose_result(
    items: Sequence[CandidateItem],
    merchant: str,
    receipt_date: date,
    source: str | None,
) -> ExtractionResult:
    """Assemble the final, immutable result."""
    return ExtractionResult(
        items=tuple(items),
        merchant=merchant,
        date=receipt_date.isoformat(),
        source=source if items else None,
    )


def parse_receipt_text(
    raw_text: str | None,
    rules: ReceiptRules | None = None,
    *,
    today: date | None = None,
    trace: TraceHook | None = None,
) -> ExtractionResult:
    """
    Parse raw OCR text into items, merchant and date.

    Deterministic for a fixed ``today``; never raises on malformed text.
    An empty ``items`` tuple is the "no items detected" outcome.

    Args:
        raw_text: Verbatim OCR output
        rules: Skip keywords and category map (bundled defaults when omitted)
        today: Fallback date when the receipt has none
        trace: Called with a StrategyEvent for every strategy attempt
    """
    rules = rules or get_default_rules()
    lines = segment_lines(raw_text)
    merchant = extract_merchant(lines)
    receipt_date = extract_date(lines, today=today)

    items, source = extract_items(ParseContext(lines=lines, merchant=merchant, rules=rules), trace=trace)
    return compose_result(categorize_items(items, rules), merchant, receipt_date, source)
