"""Composable OCR receipt parser components."""

from .common import build_item, parse_price, segment_lines, should_skip_line
from .fields_parser import extract_date, extract_merchant, find_date
from .items_positional_parser import match_adjacent_pairs, match_two_columns
from .items_table_parser import match_table_structure
from .items_text_parser import match_line_patterns, parse_line_item
from .items_total_parser import match_total_only

__all__ = [
    "build_item",
    "extract_date",
    "extract_merchant",
    "find_date",
    "match_adjacent_pairs",
    "match_line_patterns",
    "match_table_structure",
    "match_total_only",
    "match_two_columns",
    "parse_line_item",
    "parse_price",
    "segment_lines",
    "should_skip_line",
]
