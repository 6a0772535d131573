"""Progressive marginal-rate tax."""

from __future__ import annotations

from decimal import Decimal

from src.tax.year_config import BracketSchedule


def bracket_tax(income: Decimal, schedule: BracketSchedule) -> Decimal:
    """Apply a marginal-rate schedule to an income amount.

    Each rate applies only to the slice of income between its threshold and
    the next bracket's threshold (or without limit for the top bracket).

    Args:
        income: Amount to tax. Zero or negative income yields zero tax.
        schedule: Ascending ``(threshold, rate)`` brackets starting at 0.

    Returns:
        Tax on ``income``, never negative.

    Example:
        >>> bracket_tax(Decimal("60000"), TAX_YEAR_2025.tax_brackets[FilingStatus.SINGLE])
        Decimal('8114.00')
    """
    if income <= Decimal("0"):
        return Decimal("0")

    tax = Decimal("0")
    for index, (lower, rate) in enumerate(schedule):
        upper = schedule[index + 1].threshold if index + 1 < len(schedule) else None
        if income <= lower:
            break
        top = income if upper is None else min(income, upper)
        tax += (top - lower) * rate
        if upper is None or income <= upper:
            break

    return max(Decimal("0"), tax)
