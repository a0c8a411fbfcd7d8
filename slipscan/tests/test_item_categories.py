"""Tests for receipt item category matching and rule layering."""

from pathlib import Path

import pytest
from slipscan.receipt.item_categories import (
    ReceiptRules,
    build_receipt_rules,
    categorize_item,
    category_for_ai_label,
    get_default_rules,
)
from slipscan.runtime.receipt_rules import load_receipt_rules


@pytest.mark.parametrize(
    ("description", "category"),
    [
        ("Pizza Hut order", "food"),
        ("CAFE LATTE", "food"),
        ("Uber ride home", "transport"),
        ("Amazon order", "shopping"),
        ("PVR tickets", "entertainment"),
        ("Electricity bill", "bills"),
        ("Apollo Pharmacy", "health"),
        ("Widget", "other"),
        ("", "other"),
    ],
)
def test_default_keyword_categories(description: str, category: str) -> None:
    assert categorize_item(description, get_default_rules()) == category


def test_first_declared_category_wins() -> None:
    assert categorize_item("Coffee at the mall") == "food"


def test_empty_rules_map_everything_to_other() -> None:
    assert categorize_item("Pizza Hut order", ReceiptRules()) == "other"


def test_later_layers_extend_and_override() -> None:
    rules = build_receipt_rules(
        [
            {
                "skip_keywords": ["total", "Tax"],
                "categories": {"food": ["pizza"], "transport": ["taxi"]},
                "ai_labels": {"food and dining": "food"},
            },
            {
                "skip_keywords": ["TOTAL", "tip"],
                "categories": {"food": ["Dosa"], "pets": ["kibble"]},
                "ai_labels": {"food and dining": "dining", "pet supplies": "pets"},
            },
        ]
    )

    assert rules.skip_keywords == ("total", "tax", "tip")
    assert list(rules.category_keywords) == ["food", "transport", "pets"]
    assert rules.category_keywords["food"] == ("pizza", "dosa")
    assert rules.ai_labels == {"food and dining": "dining", "pet supplies": "pets"}
    assert rules.ai_label_vocabulary == ("food and dining", "pet supplies")
    assert categorize_item("Masala DOSA", rules) == "food"
    assert categorize_item("Dry kibble 2kg", rules) == "pets"


def test_malformed_layers_are_ignored() -> None:
    rules = build_receipt_rules([{"skip_keywords": 3, "categories": ["food"], "ai_labels": "x"}, {}])

    assert rules == ReceiptRules()


def test_ai_label_mapping() -> None:
    rules = get_default_rules()

    assert len(rules.ai_label_vocabulary) == 7
    assert category_for_ai_label("food and dining", rules) == "food"
    assert category_for_ai_label("other expenses", rules) == "other"
    assert category_for_ai_label("space travel", rules) == "other"


def test_rule_file_override(tmp_path: Path) -> None:
    rules_file = tmp_path / "receipt_rules.toml"
    rules_file.write_text(
        """
skip_keywords = ["loyalty points"]

[categories]
pets = ["kibble", "cat litter"]
""".strip()
    )

    rules = load_receipt_rules((str(rules_file),))

    assert "loyalty points" in rules.skip_keywords
    assert "total" in rules.skip_keywords
    assert categorize_item("CAT LITTER 10KG", rules) == "pets"
    assert categorize_item("Pizza Hut order", rules) == "food"


def test_project_rules_file_is_layered_on_defaults(project_root: Path) -> None:
    config_dir = project_root / "config"
    config_dir.mkdir()
    (config_dir / "receipt_rules.toml").write_text(
        """
[categories]
food = ["samosa"]
""".strip()
    )

    rules = load_receipt_rules()

    assert categorize_item("Samosa x2", rules) == "food"
    assert rules.skip_keywords == get_default_rules().skip_keywords


def test_missing_project_rules_file_uses_defaults(project_root: Path) -> None:
    assert load_receipt_rules() == get_default_rules()
