"""Data models for receipt scanning."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

DEFAULT_CATEGORY = "other"


@dataclass(frozen=True)
class Line:
    """A trimmed, non-empty OCR line in reading order."""

    index: int
    text: str


@dataclass(frozen=True)
class CandidateItem:
    """A single line item inferred from receipt text."""

    description: str
    amount: Decimal
    quantity: int = 1
    category: str = DEFAULT_CATEGORY
    # Set when the category came from the AI classifier rather than keywords.
    confidence: float | None = None
    ai_suggested: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "amount": str(self.amount),
            "quantity": self.quantity,
            "category": self.category,
            "confidence": self.confidence,
            "ai_suggested": self.ai_suggested,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Parsed receipt: items plus merchant and ISO transaction date."""

    items: tuple[CandidateItem, ...]
    merchant: str
    date: str
    # Strategy (or "ai") that produced the items; None when nothing was found.
    source: str | None = None

    @property
    def no_items_detected(self) -> bool:
        return not self.items

    def to_dict(self) -> dict[str, Any]:
        return {
            "merchant": self.merchant,
            "date": self.date,
            "source": self.source,
            "items": [item.to_dict() for item in self.items],
        }
