"""Optional AI collaborators (Hugging Face inference API): item pre-parse and classification."""

from __future__ import annotations

from collections.abc import Sequence
from types import TracebackType
from typing import Any

import httpx

from slipscan.receipt.ai_items import extract_json_array
from slipscan.runtime.logging import get_logger
from slipscan.runtime.settings import ScanSettings

logger = get_logger(__name__)

PARSE_PROMPT = """Analyze this receipt text and extract valid line items.

Rules:
1. Pair each product description with its correct price.
2. Handle different layouts:
   - Same line: "Coffee 5.00"
   - Two columns: Items listed first, then prices later. Match them by order.
   - Columnar Blocks: A block of descriptions followed by a block of prices.
   - Next line: Item on one line, price on next.
3. Ignore totals, subtotals, taxes, cash, change, and payment details.
4. Convert all prices to numbers.

Receipt text:
{receipt_text}

Return ONLY a valid JSON array of objects with 'description' and 'amount' fields. No other text.
Example: [{{"description": "Coffee", "amount": 5.00}}, {{"description": "Pizza", "amount": 12.50}}]"""


class AIServiceUnavailable(RuntimeError):
    """Raised when an AI endpoint fails or returns an unusable payload."""


def _top_label(result: Any) -> tuple[str, float]:
    """Read the best label from a zero-shot classification response."""
    # Classic shape: {"labels": [...], "scores": [...]} sorted by score.
    if isinstance(result, dict) and result.get("labels") and result.get("scores"):
        return str(result["labels"][0]), float(result["scores"][0])
    # Router shape: [{"label": ..., "score": ...}, ...]
    if isinstance(result, list) and result and all(isinstance(r, dict) and "label" in r for r in result):
        best = max(result, key=lambda r: float(r.get("score", 0.0)))
        return str(best["label"]), float(best.get("score", 0.0))
    raise AIServiceUnavailable("Unexpected classification payload")


class HuggingFaceReceiptAI:
    """HTTP client for the pre-parse (text generation) and classification (zero-shot) models.

    Use as an async context manager to share one connection pool across
    concurrent classification calls.
    """

    def __init__(self, settings: ScanSettings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = False

    async def __aenter__(self) -> HuggingFaceReceiptAI:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.ai_timeout)
            self._owns_client = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    async def _post(self, url: str, payload: dict[str, Any]) -> Any:
        headers = {"Authorization": f"Bearer {self.settings.ai_api_key}"}
        try:
            if self._client is None:
                async with httpx.AsyncClient(timeout=self.settings.ai_timeout) as client:
                    response = await client.post(url, json=payload, headers=headers)
            else:
                response = await self._client.post(url, json=payload, headers=headers)
        except httpx.RequestError as e:
            raise AIServiceUnavailable(f"AI request failed: {e}") from e

        if not response.is_success:
            raise AIServiceUnavailable(f"AI API error: {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise AIServiceUnavailable("AI API returned invalid JSON") from e

    async def parse_items(self, raw_text: str) -> Any:
        """Ask the text-generation model for a JSON item list; return the decoded array."""
        result = await self._post(
            self.settings.ai_parse_url,
            {
                "inputs": PARSE_PROMPT.format(receipt_text=raw_text),
                "parameters": {"max_new_tokens": 500, "temperature": 0.1, "return_full_text": False},
            },
        )
        generated_text = ""
        if isinstance(result, list) and result and isinstance(result[0], dict):
            generated_text = str(result[0].get("generated_text") or "")
        payload = extract_json_array(generated_text)
        if payload is None:
            raise AIServiceUnavailable("Could not parse AI response")
        logger.debug("AI pre-parse returned %d entries", len(payload))
        return payload

    async def classify(self, description: str, labels: Sequence[str]) -> tuple[str, float]:
        """Return (top label, confidence) for an item description."""
        result = await self._post(
            self.settings.ai_classify_url,
            {
                "inputs": description,
                "parameters": {"candidate_labels": list(labels), "multi_label": False},
            },
        )
        return _top_label(result)
