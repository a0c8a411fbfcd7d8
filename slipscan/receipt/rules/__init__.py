"""Bundled default rule file for receipt parsing."""

from functools import lru_cache
from importlib import resources
from typing import Any

DEFAULT_RULES_FILE = "default_rules.toml"


@lru_cache(maxsize=1)
def default_rules_config() -> dict[str, Any]:
    """Return the parsed bundled default_rules.toml."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    text = resources.files(__package__).joinpath(DEFAULT_RULES_FILE).read_text(encoding="utf-8")
    data = tomllib.loads(text)
    return data if isinstance(data, dict) else {}
