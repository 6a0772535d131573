"""Law-version policy resolution.

The 2025 reconciliation act (OBBBA) raised the SALT cap and introduced
temporary above-the-line deductions for tips, overtime, auto-loan interest and
seniors. A single toggle selects between that law and prior law; this module
turns the toggle plus the year's tables into the concrete values the pipeline
consumes.

Example:
    >>> from src.tax.year_config import TAX_YEAR_2025
    >>> resolve_policy(TAX_YEAR_2025, FilingStatus.SINGLE, use_2025_law=False).salt_cap
    Decimal('10000')
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from src.tax.filing_status import FilingStatus
from src.tax.year_config import TaxYearConfig


@dataclass(frozen=True)
class PolicySettings:
    """Law-version dependent values for one computation.

    Attributes:
        use_2025_law: The toggle as supplied by the caller.
        salt_cap: State and local tax itemized deduction ceiling.
        new_deductions_enabled: Whether tip, overtime, auto-loan and senior
            deductions apply. False under prior law or in years without them.
        tip_deduction_cap: Maximum tip income deduction before phase-out.
        overtime_deduction_cap: Maximum overtime deduction before phase-out.
        auto_loan_interest_cap: Maximum auto-loan interest deduction.
        senior_bonus: Deduction per filer aged ``senior_age`` or older.
        senior_age: Age at year end that qualifies for the senior bonus.
        phaseout_start: Tentative MAGI where the phase-out begins.
        phaseout_end: Tentative MAGI where the deduction is fully phased out.
    """

    use_2025_law: bool
    salt_cap: Decimal
    new_deductions_enabled: bool
    tip_deduction_cap: Decimal
    overtime_deduction_cap: Decimal
    auto_loan_interest_cap: Decimal
    senior_bonus: Decimal
    senior_age: int
    phaseout_start: Decimal
    phaseout_end: Decimal

    def phaseout_factor(self, magi: Decimal) -> Decimal:
        """Linear phase-out factor: 1 at or below the start, 0 at or above the end."""
        if magi <= self.phaseout_start:
            return Decimal("1")
        if magi >= self.phaseout_end:
            return Decimal("0")
        span = self.phaseout_end - self.phaseout_start
        factor = Decimal("1") - (magi - self.phaseout_start) / span
        return min(Decimal("1"), max(Decimal("0"), factor))


def get_salt_cap(config: TaxYearConfig, filing_status: FilingStatus, use_2025_law: bool) -> Decimal:
    """SALT cap for a filing status under the selected law version."""
    married_separate = filing_status is FilingStatus.MARRIED_SEPARATE
    if use_2025_law and config.obbba_available:
        return config.obbba_salt_cap_mfs if married_separate else config.obbba_salt_cap
    return config.salt_cap_mfs if married_separate else config.salt_cap


def resolve_policy(
    config: TaxYearConfig,
    filing_status: FilingStatus,
    use_2025_law: bool = True,
) -> PolicySettings:
    """Resolve law-version dependent constants.

    Args:
        config: Tables for the tax year being computed.
        filing_status: Filing status selecting the MFS/MFJ variants.
        use_2025_law: True for the 2025 law, False for prior law.

    Returns:
        PolicySettings for the computation.
    """
    if filing_status is FilingStatus.MARRIED_JOINT:
        start = config.new_deduction_phaseout_start_mfj
        end = config.new_deduction_phaseout_end_mfj
    else:
        start = config.new_deduction_phaseout_start
        end = config.new_deduction_phaseout_end

    return PolicySettings(
        use_2025_law=use_2025_law,
        salt_cap=get_salt_cap(config, filing_status, use_2025_law),
        new_deductions_enabled=use_2025_law and config.obbba_available,
        tip_deduction_cap=config.tip_deduction_cap,
        overtime_deduction_cap=config.overtime_deduction_cap,
        auto_loan_interest_cap=config.auto_loan_interest_cap,
        senior_bonus=config.senior_bonus,
        senior_age=config.senior_age,
        phaseout_start=start,
        phaseout_end=end,
    )
