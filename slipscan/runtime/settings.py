"""Environment-driven settings for the OCR and AI collaborators."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_OCR_ENDPOINT = "https://api.ocr.space/parse/image"
DEFAULT_AI_PARSE_URL = "https://api-inference.huggingface.co/models/HuggingFaceH4/zephyr-7b-beta"
DEFAULT_AI_CLASSIFY_URL = "https://api-inference.huggingface.co/models/MoritzLaurer/mDeBERTa-v3-base-mnli-xnli"
DEFAULT_AI_CONCURRENCY = 4
DEFAULT_AI_TIMEOUT = 20.0
DEFAULT_OCR_TIMEOUT = 60.0


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        value = int(env.get(name, ""))
    except ValueError:
        return default
    return value if value > 0 else default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    try:
        value = float(env.get(name, ""))
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class ScanSettings:
    """Endpoints, credentials and limits for one scan process."""

    ocr_api_key: str = ""
    ocr_endpoint: str = DEFAULT_OCR_ENDPOINT
    ocr_timeout: float = DEFAULT_OCR_TIMEOUT
    ai_api_key: str = ""
    ai_parse_url: str = DEFAULT_AI_PARSE_URL
    ai_classify_url: str = DEFAULT_AI_CLASSIFY_URL
    ai_concurrency: int = DEFAULT_AI_CONCURRENCY
    ai_timeout: float = DEFAULT_AI_TIMEOUT

    @property
    def ai_enabled(self) -> bool:
        return bool(self.ai_api_key)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ScanSettings:
        """Read SLIPSCAN_* environment variables (unset values keep defaults)."""
        env = os.environ if env is None else env
        return cls(
            ocr_api_key=env.get("SLIPSCAN_OCR_API_KEY", ""),
            ocr_endpoint=env.get("SLIPSCAN_OCR_ENDPOINT") or DEFAULT_OCR_ENDPOINT,
            ocr_timeout=_env_float(env, "SLIPSCAN_OCR_TIMEOUT", DEFAULT_OCR_TIMEOUT),
            ai_api_key=env.get("SLIPSCAN_AI_API_KEY", ""),
            ai_parse_url=env.get("SLIPSCAN_AI_PARSE_URL") or DEFAULT_AI_PARSE_URL,
            ai_classify_url=env.get("SLIPSCAN_AI_CLASSIFY_URL") or DEFAULT_AI_CLASSIFY_URL,
            ai_concurrency=_env_int(env, "SLIPSCAN_AI_CONCURRENCY", DEFAULT_AI_CONCURRENCY),
            ai_timeout=_env_float(env, "SLIPSCAN_AI_TIMEOUT", DEFAULT_AI_TIMEOUT),
        )
