"""Qualified Business Income deduction (Section 199A), simplified.

Only the overall taxable-income limitation is modeled. The W-2 wage/UBIA
limitation and the SSTB phase-out above the income thresholds are not applied,
so high-income filers with service businesses get an overstated deduction.
"""

from __future__ import annotations

from decimal import Decimal

QBI_RATE = Decimal("0.20")


def qbi_deduction(
    eligible_qbi_income: Decimal,
    taxable_income_before_qbi: Decimal,
    net_capital_gain: Decimal,
    rate: Decimal = QBI_RATE,
) -> Decimal:
    """Compute the capped QBI deduction.

    Args:
        eligible_qbi_income: Qualified business income from all sources.
        taxable_income_before_qbi: AGI minus the standard or itemized deduction.
        net_capital_gain: Qualified dividends plus positive net long-term gain.
        rate: Deduction rate (20%).

    Returns:
        The lesser of ``rate`` times QBI and ``rate`` times taxable income in
        excess of net capital gain; never negative.

    Example:
        >>> qbi_deduction(Decimal("80000"), Decimal("100000"), Decimal("20000"))
        Decimal('16000.00')
    """
    tentative = rate * max(Decimal("0"), eligible_qbi_income)
    ceiling = rate * max(Decimal("0"), taxable_income_before_qbi - net_capital_gain)
    return min(tentative, max(Decimal("0"), ceiling))
