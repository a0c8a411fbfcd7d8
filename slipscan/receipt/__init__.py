"""Pure receipt parsing: OCR text in, ExtractionResult out (no I/O beyond bundled rules)."""

from .item_categories import ReceiptRules, build_receipt_rules, categorize_item, get_default_rules
from .ocr_result_parser import StrategyEvent, parse_receipt_text

__all__ = [
    "ReceiptRules",
    "StrategyEvent",
    "build_receipt_rules",
    "categorize_item",
    "get_default_rules",
    "parse_receipt_text",
]
