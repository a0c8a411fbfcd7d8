"""slipscan: turn noisy receipt OCR text into categorized line items."""

__version__ = "0.1.0"
