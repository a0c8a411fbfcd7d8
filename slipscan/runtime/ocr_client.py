"""OCR collaborator: compress a receipt photo and turn it into raw text (OCR.space)."""

from __future__ import annotations

import base64
import io
import time
from pathlib import Path
from typing import Any

import httpx

from slipscan.runtime.logging import get_logger
from slipscan.runtime.paths import get_paths
from slipscan.runtime.settings import ScanSettings

logger = get_logger(__name__)

MAX_IMAGE_WIDTH = 1024  # Downscale wider photos before upload
JPEG_QUALITY = 70


class OCRServiceUnavailable(RuntimeError):
    """Raised when the OCR service cannot be reached or returns no text."""


def compress_image_bytes(image_bytes: bytes, max_width: int = MAX_IMAGE_WIDTH, quality: int = JPEG_QUALITY) -> bytes:
    """
    Shrink a receipt photo for faster upload.

    Applies EXIF orientation, downscales to ``max_width`` keeping the aspect
    ratio, and re-encodes as JPEG. Images that cannot be decoded are
    returned unchanged.
    """
    from PIL import Image, ImageOps

    try:
        img = Image.open(io.BytesIO(image_bytes))
        img = ImageOps.exif_transpose(img)
    except (OSError, ValueError) as e:
        logger.warning("Image compression failed, using original: %s", e)
        return image_bytes

    width, height = img.size
    if width > max_width:
        new_height = max(1, int(height * (max_width / width)))
        img = img.resize((max_width, new_height), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    img.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def _ocr_form(image_bytes: bytes) -> dict[str, str]:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return {
        "base64Image": f"data:image/jpeg;base64,{encoded}",
        "language": "eng",
        "isOverlayRequired": "false",
        "detectOrientation": "true",
        "scale": "true",
        "OCREngine": "2",  # Engine 2 is more accurate on receipts
    }


def _parsed_text(result: Any) -> str:
    if not isinstance(result, dict):
        raise OCRServiceUnavailable("OCR service returned an unexpected payload")

    if result.get("IsErroredOnProcessing"):
        messages = result.get("ErrorMessage") or []
        if isinstance(messages, list) and messages:
            message = str(messages[0])
        else:
            message = str(messages or "OCR processing failed")
        raise OCRServiceUnavailable(message)

    parsed_results = result.get("ParsedResults") or []
    if parsed_results and isinstance(parsed_results[0], dict):
        text = parsed_results[0].get("ParsedText") or ""
        if text.strip():
            return text

    raise OCRServiceUnavailable("No text detected in image")


async def call_ocr_service(
    image_bytes: bytes,
    settings: ScanSettings,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Send a receipt image to the OCR service and return the recognized text.

    Args:
        image_bytes: Raw photo bytes (compressed before upload)
        settings: Endpoint, API key and timeout
        client: Optional shared client (tests pass one with a mock transport)

    Raises:
        OCRServiceUnavailable: network failure, HTTP error, processing error
            or empty text.
    """
    form = _ocr_form(compress_image_bytes(image_bytes))
    headers = {"apikey": settings.ocr_api_key}
    logger.info("Sending receipt to OCR service at %s...", settings.ocr_endpoint)

    start_time = time.time()
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.ocr_timeout) as owned_client:
                response = await owned_client.post(settings.ocr_endpoint, data=form, headers=headers)
        else:
            response = await client.post(settings.ocr_endpoint, data=form, headers=headers)
    except httpx.RequestError as e:
        logger.error("Failed to connect to OCR service: %s", e)
        raise OCRServiceUnavailable(f"Failed to connect to OCR service: {e}") from e
    logger.info("OCR service returned in %.2f seconds", time.time() - start_time)

    if response.status_code != 200:
        logger.error("OCR service error: %s", response.status_code)
        raise OCRServiceUnavailable(f"OCR service error: {response.status_code}")

    try:
        result = response.json()
    except ValueError as e:
        raise OCRServiceUnavailable("OCR service returned invalid JSON") from e
    return _parsed_text(result)


def save_ocr_text(text: str, image_path: Path) -> Path:
    """Save raw OCR text next to other scans for debugging."""
    ocr_text_dir = get_paths().receipts_ocr_text
    ocr_text_dir.mkdir(parents=True, exist_ok=True)
    ocr_text_path = ocr_text_dir / f"{image_path.stem}.txt"
    ocr_text_path.write_text(text, encoding="utf-8")
    logger.debug("OCR text saved to: %s", ocr_text_path)
    return ocr_text_path
