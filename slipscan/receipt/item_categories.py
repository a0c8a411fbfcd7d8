"""Item categorization and skip-line rules for receipt line items.

Rules are plain in-memory values built from TOML-shaped dicts. Defaults
ship in slipscan/receipt/rules/default_rules.toml; project overrides are
loaded by slipscan.runtime.receipt_rules.

Categories are checked in declaration order and the first category with a
keyword contained in the (lowercased) description wins.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Any

from slipscan.domain.receipt import DEFAULT_CATEGORY, CandidateItem

from .rules import default_rules_config


@dataclass(frozen=True)
class ReceiptRules:
    """Skip keywords, category keyword map and AI label mapping."""

    skip_keywords: tuple[str, ...] = ()
    category_keywords: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    # AI classification label -> category id
    ai_labels: Mapping[str, str] = field(default_factory=dict)

    @property
    def ai_label_vocabulary(self) -> tuple[str, ...]:
        return tuple(self.ai_labels)


def _normalize_keywords(raw: Any) -> tuple[str, ...]:
    """Normalize a keywords value from TOML into a tuple of lowercase strings."""
    if isinstance(raw, str):
        value = raw.strip().lower()
        return (value,) if value else tuple()
    if isinstance(raw, list):
        return tuple(str(v).strip().lower() for v in raw if str(v).strip())
    return tuple()


def _append_unique(target: list[str], values: Iterable[str]) -> None:
    for value in values:
        if value not in target:
            target.append(value)


def build_receipt_rules(configs: Sequence[Mapping[str, Any]] | None = None) -> ReceiptRules:
    """Merge rule layers in order into one ReceiptRules value.

    Later layers append skip keywords, extend keyword lists of existing
    categories, add new categories after the existing ones, and override
    AI label mappings.
    """
    skip_keywords: list[str] = []
    categories: dict[str, list[str]] = {}
    ai_labels: dict[str, str] = {}

    for config in configs or ():
        _append_unique(skip_keywords, _normalize_keywords(config.get("skip_keywords", [])))

        raw_categories = config.get("categories", {})
        if isinstance(raw_categories, Mapping):
            for category, keywords in raw_categories.items():
                category_id = str(category).strip()
                if not category_id:
                    continue
                _append_unique(categories.setdefault(category_id, []), _normalize_keywords(keywords))

        raw_labels = config.get("ai_labels", {})
        if isinstance(raw_labels, Mapping):
            for label, category in raw_labels.items():
                label_str = str(label).strip()
                category_str = str(category).strip()
                if label_str and category_str:
                    ai_labels[label_str] = category_str

    return ReceiptRules(
        skip_keywords=tuple(skip_keywords),
        category_keywords={category: tuple(keywords) for category, keywords in categories.items()},
        ai_labels=ai_labels,
    )


@lru_cache(maxsize=1)
def get_default_rules() -> ReceiptRules:
    """Bundled default rules only (no project overrides)."""
    return build_receipt_rules((default_rules_config(),))


def categorize_item(description: str, rules: ReceiptRules | None = None) -> str:
    """
    Return the category id for an item description.

    Args:
        description: Item description (e.g., "Pizza Hut order")
        rules: Loaded rules; bundled defaults when omitted

    Returns:
        First category (in declaration order) with a matching keyword,
        or "other".
    """
    layers = rules or get_default_rules()
    search_text = (description or "").lower()
    for category, keywords in layers.category_keywords.items():
        if any(keyword in search_text for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def categorize_items(items: Iterable[CandidateItem], rules: ReceiptRules | None = None) -> tuple[CandidateItem, ...]:
    """Return copies of the items with keyword categories assigned."""
    return tuple(replace(item, category=categorize_item(item.description, rules)) for item in items)


def category_for_ai_label(label: str, rules: ReceiptRules | None = None) -> str:
    """Map an AI classification label to a category id ("other" if unknown)."""
    layers = rules or get_default_rules()
    return layers.ai_labels.get(label, DEFAULT_CATEGORY)
