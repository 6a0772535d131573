"""Net Investment Income Tax (Form 8960)."""

from __future__ import annotations

from decimal import Decimal

from src.tax.filing_status import FilingStatus
from src.tax.year_config import TaxYearConfig


def net_investment_income_tax(
    agi: Decimal,
    net_investment_income: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig,
) -> Decimal:
    """3.8% surtax on the lesser of net investment income and AGI over the threshold.

    The thresholds are statutory and not inflation-indexed.
    """
    threshold = config.niit_thresholds[filing_status]
    excess_agi = max(Decimal("0"), agi - threshold)
    taxable_nii = max(Decimal("0"), min(excess_agi, net_investment_income))
    return taxable_nii * config.niit_rate
