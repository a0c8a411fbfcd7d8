"""Receipt workflows."""

from slipscan.application.receipts.scan import (
    ItemClassifier,
    ItemPreParser,
    ReceiptScanRequest,
    ReceiptScanResult,
    run_receipt_scan,
    scan_image_bytes,
    scan_receipt_text,
)

__all__ = [
    "ItemClassifier",
    "ItemPreParser",
    "ReceiptScanRequest",
    "ReceiptScanResult",
    "run_receipt_scan",
    "scan_image_bytes",
    "scan_receipt_text",
]
