"""Preferential-rate tax on qualified dividends and long-term gains.

The 0%/15%/20% thresholds are defined on total taxable income, so the
preferential slice is stacked on top of ordinary taxable income. The schedule
is walked from the highest bracket down: each bracket whose threshold sits
below the top of the stack claims ``top - max(ordinary, threshold)``, limited
to the gains still unallocated. The top of the stack stays fixed at
``ordinary + preferential`` for the whole walk. Walking upward instead
mis-rates the first dollars of gain when ordinary income already sits inside a
higher bracket.
"""

from __future__ import annotations

from decimal import Decimal

from src.tax.filing_status import FilingStatus
from src.tax.year_config import BracketSchedule, TaxYearConfig


def stack_preferential_income(
    ordinary_taxable_income: Decimal,
    preferential_income: Decimal,
    schedule: BracketSchedule,
) -> Decimal:
    """Tax ``preferential_income`` stacked on ``ordinary_taxable_income``.

    Args:
        ordinary_taxable_income: Taxable income taxed at ordinary rates.
        preferential_income: Qualified dividends plus net long-term gain.
        schedule: Capital gains schedule for the filing status.

    Returns:
        Tax on the preferential slice, never negative.
    """
    if preferential_income <= Decimal("0"):
        return Decimal("0")

    # High-water mark: top of the whole stack.
    high_water = ordinary_taxable_income + preferential_income
    remaining = preferential_income
    tax = Decimal("0")

    for threshold, rate in reversed(schedule):
        if remaining <= Decimal("0"):
            break
        if high_water > threshold:
            taxed_here = min(remaining, high_water - max(ordinary_taxable_income, threshold))
            tax += taxed_here * rate
            remaining -= taxed_here

    return max(Decimal("0"), tax)


def stacked_gains_tax(
    ordinary_taxable_income: Decimal,
    preferential_income: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig,
) -> Decimal:
    """Capital gains tax for a filing status.

    Example:
        >>> stacked_gains_tax(Decimal("40000"), Decimal("20000"), FilingStatus.SINGLE, TAX_YEAR_2025)
        Decimal('1747.50')
    """
    return stack_preferential_income(
        ordinary_taxable_income,
        preferential_income,
        config.capital_gains_brackets[filing_status],
    )
