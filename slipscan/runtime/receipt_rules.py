"""Runtime loader for receipt skip-line and categorization rules."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from slipscan.receipt.item_categories import ReceiptRules, build_receipt_rules
from slipscan.receipt.rules import default_rules_config
from slipscan.runtime.logging import get_logger
from slipscan.runtime.paths import get_paths

logger = get_logger(__name__)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


@lru_cache(maxsize=8)
def load_receipt_rules(rule_paths: tuple[str, ...] | None = None) -> ReceiptRules:
    """Load bundled defaults plus project rule files into one in-memory ReceiptRules.

    Args:
        rule_paths: Override files layered on top of the bundled defaults.
            If None, uses the project's config/receipt_rules.toml.
    """
    if rule_paths is None:
        rule_files = [get_paths().receipt_rules]
    else:
        rule_files = [Path(path) for path in rule_paths]

    configs = [default_rules_config()]
    for path in rule_files:
        config = _load_toml(path)
        if config:
            logger.debug("Loaded receipt rules from %s", path)
        configs.append(config)
    return build_receipt_rules(configs)
