"""Core domain models for slipscan.

Usage:
    from slipscan.domain import CandidateItem, ExtractionResult, Line
"""

from slipscan.domain.receipt import DEFAULT_CATEGORY, CandidateItem, ExtractionResult, Line

__all__ = [
    "DEFAULT_CATEGORY",
    "CandidateItem",
    "ExtractionResult",
    "Line",
]
