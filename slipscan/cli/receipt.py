"""Receipt command handlers used by the unified CLI."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from slipscan.domain.receipt import ExtractionResult
from slipscan.runtime import get_logger

logger = get_logger(__name__)

EXIT_NO_ITEMS = 2


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for parsing receipt text and photos."""
    import uvicorn

    from slipscan.runtime import receipt_server as server

    print(f"Starting receipt server on {args.host}:{args.port}")
    print(f"Endpoints: http://{args.host}:{args.port}/parse | /scan | /health")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)


def _rule_paths(args: argparse.Namespace) -> tuple[str, ...] | None:
    rules = getattr(args, "rules", None)
    if not rules:
        return None
    return tuple(rules)


def _print_result(result: ExtractionResult, as_json: bool) -> None:
    if as_json:
        status = "no_items" if result.no_items_detected else "parsed"
        print(json.dumps({"status": status, **result.to_dict()}, indent=2))
        return

    print("\n" + "=" * 60)
    print("PARSED RECEIPT")
    print("=" * 60)
    print(f"Merchant: {result.merchant or 'UNKNOWN'}")
    print(f"Date: {result.date}")
    if result.source:
        print(f"Source: {result.source}")
    print(f"\nItems ({len(result.items)}):")
    for i, item in enumerate(result.items, 1):
        qty_str = f" x{item.quantity}" if item.quantity > 1 else ""
        ai_str = " (ai)" if item.ai_suggested else ""
        print(f"  {i}. {item.description}{qty_str} - {item.amount:.2f} [{item.category}]{ai_str}")
    print("=" * 60)


def _finish(result: ExtractionResult, as_json: bool) -> None:
    _print_result(result, as_json)
    if result.no_items_detected:
        if not as_json:
            print("No items detected. Retake the photo or enter the transaction manually.")
        sys.exit(EXIT_NO_ITEMS)


def cmd_parse(args: argparse.Namespace) -> None:
    """Parse an OCR text file with the strategy chain (no network calls)."""
    from slipscan.receipt.ocr_result_parser import parse_receipt_text
    from slipscan.runtime.receipt_rules import load_receipt_rules

    text_path = Path(args.text_file)
    if not text_path.exists():
        logger.error("Text file not found: %s", text_path)
        print(f"Error: Text file not found: {text_path}")
        sys.exit(1)

    try:
        rules = load_receipt_rules(_rule_paths(args))
    except (OSError, ValueError) as exc:
        logger.error("Failed to load receipt rules: %s", exc)
        print(f"Error: failed to load receipt rules: {exc}")
        sys.exit(1)

    raw_text = text_path.read_text(encoding="utf-8", errors="replace")
    _finish(parse_receipt_text(raw_text, rules), args.json)


def cmd_scan(args: argparse.Namespace) -> None:
    """Scan a receipt image: OCR, optional AI parsing, then categorize items."""
    from slipscan.application.receipts.scan import ReceiptScanRequest, run_receipt_scan
    from slipscan.runtime.settings import ScanSettings

    receipt_path = Path(args.image)
    result = asyncio.run(
        run_receipt_scan(
            ReceiptScanRequest(
                image_path=receipt_path,
                settings=ScanSettings.from_env(),
                use_ai=not args.no_ai,
                save_text=args.save_text,
            )
        )
    )

    if result.status == "file_not_found":
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        sys.exit(1)

    if result.status == "ocr_unavailable":
        logger.error("%s", result.error)
        print(f"OCR service unavailable: {result.error}")
        print("Check SLIPSCAN_OCR_API_KEY and SLIPSCAN_OCR_ENDPOINT before scanning receipts.")
        sys.exit(1)

    if result.result is None:
        print("Scan failed: missing receipt output.")
        sys.exit(1)

    if result.ocr_text_path is not None and not args.json:
        print(f"OCR text saved to: {result.ocr_text_path}")

    _finish(result.result, args.json)
