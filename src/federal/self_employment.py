"""Self-employment tax (Schedule SE)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from src.tax.filing_status import FilingStatus
from src.tax.year_config import TaxYearConfig


@dataclass(frozen=True)
class SelfEmploymentTax:
    """Schedule SE result.

    Attributes:
        tax: Total SE tax (Social Security + Medicare + Additional Medicare).
        deduction: Deductible employer-equivalent half of ``tax``.
        social_security: Social Security portion after the wage base.
        medicare: Uncapped Medicare portion.
        additional_medicare: 0.9% surtax above the status threshold.
    """

    tax: Decimal
    deduction: Decimal
    social_security: Decimal = Decimal("0")
    medicare: Decimal = Decimal("0")
    additional_medicare: Decimal = Decimal("0")


def self_employment_tax(
    net_se_income: Decimal,
    prior_wages: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig,
) -> SelfEmploymentTax:
    """Compute SE tax and its above-the-line deduction.

    W-2 wages on the same return use up the Social Security wage base first
    and lower the Additional Medicare threshold dollar for dollar.

    Args:
        net_se_income: Net profit from self-employment.
        prior_wages: Wages already subject to Social Security and Medicare.
        filing_status: Selects the Additional Medicare threshold.
        config: Tax year tables.

    Returns:
        SelfEmploymentTax; all zero when ``net_se_income`` is not positive.

    Example:
        >>> se = self_employment_tax(Decimal("50000"), Decimal("0"), FilingStatus.SINGLE, TAX_YEAR_2025)
        >>> se.tax
        Decimal('7064.7750000')
    """
    if net_se_income <= Decimal("0"):
        return SelfEmploymentTax(tax=Decimal("0"), deduction=Decimal("0"))

    wages = max(Decimal("0"), prior_wages)
    taxable_base = net_se_income * config.se_net_earnings_factor

    remaining_ss_base = max(Decimal("0"), config.ss_wage_base - min(config.ss_wage_base, wages))
    social_security = min(taxable_base, remaining_ss_base) * config.se_ss_rate

    medicare = taxable_base * config.se_medicare_rate

    threshold = config.additional_medicare_thresholds[filing_status]
    remaining_threshold = max(Decimal("0"), threshold - wages)
    additional_medicare = (
        max(Decimal("0"), taxable_base - remaining_threshold) * config.additional_medicare_rate
    )

    tax = social_security + medicare + additional_medicare
    return SelfEmploymentTax(
        tax=tax,
        deduction=tax * config.se_tax_deduction_rate,
        social_security=social_security,
        medicare=medicare,
        additional_medicare=additional_medicare,
    )
