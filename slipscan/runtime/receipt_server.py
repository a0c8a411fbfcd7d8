"""FastAPI server for parsing receipt text and scanning uploaded receipt photos."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slipscan.application.receipts.scan import (
    build_ai_collaborators,
    scan_image_bytes,
    scan_receipt_text,
)
from slipscan.domain.receipt import ExtractionResult
from slipscan.runtime.logging import get_logger
from slipscan.runtime.receipt_rules import load_receipt_rules
from slipscan.runtime.settings import ScanSettings

logger = get_logger(__name__)

NO_ITEMS_MESSAGE = "No items detected. Retake the photo or enter the transaction manually."

app = FastAPI(title="Receipt Scanner")


def _result_payload(result: ExtractionResult) -> dict[str, Any]:
    if result.no_items_detected:
        return {"status": "no_items", "message": NO_ITEMS_MESSAGE, "result": result.to_dict()}
    return {"status": "parsed", "result": result.to_dict()}


@app.post("/parse")
async def parse_text(request: Request) -> JSONResponse:
    """Parse raw OCR text sent as {"text": "..."}."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"status": "error", "message": "Request body must be JSON"}, status_code=400)

    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str):
        return JSONResponse({"status": "error", "message": "Missing 'text' field"}, status_code=400)

    settings = ScanSettings.from_env()
    rules = load_receipt_rules()
    ai = build_ai_collaborators(settings) if body.get("use_ai", True) else None
    if ai is None:
        result = await scan_receipt_text(text, rules=rules)
    else:
        async with ai:
            result = await scan_receipt_text(
                text,
                rules=rules,
                pre_parser=ai,
                classifier=ai,
                max_concurrency=settings.ai_concurrency,
                timeout=settings.ai_timeout,
            )
    logger.info("Parsed text receipt: %d items (%s)", len(result.items), result.source)
    return JSONResponse(_result_payload(result))


@app.post("/scan")
async def scan_upload(request: Request) -> JSONResponse:
    """Receive a receipt photo (multipart upload), OCR it and parse the items."""
    form = await request.form()

    file = None
    for key, value in form.items():
        logger.debug("Form field: key=%r, type=%s", key, type(value))
        if hasattr(value, "read"):
            file = value
            break

    if file is None:
        return JSONResponse({"status": "error", "message": "No file found in request"}, status_code=400)

    contents = await file.read()
    outcome = await scan_image_bytes(contents, ScanSettings.from_env(), rules=load_receipt_rules())

    if outcome.status == "ocr_unavailable":
        logger.error("OCR service unavailable: %s", outcome.error)
        return JSONResponse(
            {"status": "ocr_unavailable", "message": outcome.error or "OCR service unavailable"},
            status_code=502,
        )

    if outcome.result is None:
        return JSONResponse({"status": "error", "message": "Receipt processing failed"}, status_code=500)

    logger.info("Scanned receipt upload: %d items (%s)", len(outcome.result.items), outcome.result.source)
    return JSONResponse(_result_payload(outcome.result))


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
