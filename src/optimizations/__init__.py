"""Consumers of the federal pipeline that compare what-if scenarios."""

from src.optimizations.filing_status import (
    FilingStatusRecommendation,
    analyze_filing_status,
    compare_filing_status,
)

__all__ = [
    "FilingStatusRecommendation",
    "analyze_filing_status",
    "compare_filing_status",
]
