"""Tax year-specific constants and thresholds.

This module centralizes tax year-specific values like bracket schedules, wage
bases, deduction amounts and rate thresholds to avoid hardcoding values
throughout the codebase. Every per-status table is keyed by ``FilingStatus``
and must cover all statuses; the engine never falls back to a default row.

Example:
    >>> from src.tax.year_config import get_tax_year_config
    >>> config = get_tax_year_config(2025)
    >>> print(f"SS wage base: {config.ss_wage_base}")
    SS wage base: 176100
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import NamedTuple

from src.tax.filing_status import FilingStatus


class Bracket(NamedTuple):
    """One row of a marginal-rate schedule: ``rate`` applies above ``threshold``."""

    threshold: Decimal
    rate: Decimal


BracketSchedule = tuple[Bracket, ...]


def make_schedule(rows: Iterable[tuple[object, object]]) -> BracketSchedule:
    """Build a bracket schedule from ``(threshold, rate)`` pairs."""
    return tuple(Bracket(Decimal(str(threshold)), Decimal(str(rate))) for threshold, rate in rows)


def validate_schedule(schedule: BracketSchedule) -> None:
    """Check the invariants every bracket schedule must satisfy.

    Raises:
        ValueError: If the schedule is empty, does not start at 0, has
            non-increasing thresholds, or decreasing rates.
    """
    if not schedule:
        raise ValueError("Bracket schedule must have at least one bracket")
    if schedule[0].threshold != Decimal("0"):
        raise ValueError("First bracket threshold must be 0")
    for lower, upper in zip(schedule, schedule[1:]):
        if upper.threshold <= lower.threshold:
            raise ValueError(
                f"Bracket thresholds must be strictly increasing: "
                f"{lower.threshold} then {upper.threshold}"
            )
        if upper.rate < lower.rate:
            raise ValueError(
                f"Bracket rates must be non-decreasing: {lower.rate} then {upper.rate}"
            )


def _freeze_table(name: str, table: Mapping[FilingStatus, object]) -> Mapping[FilingStatus, object]:
    missing = [status.value for status in FilingStatus if status not in table]
    if missing:
        raise ValueError(f"{name} is missing filing statuses: {missing}")
    return MappingProxyType(dict(table))


@dataclass(frozen=True)
class TaxYearConfig:
    """Tax year-specific constants and thresholds.

    All monetary values are Decimal for precision in tax calculations.
    This dataclass is frozen and its tables are read-only mappings, so a
    config can be shared freely between concurrent computations.

    Attributes:
        tax_year: The tax year these values apply to.
        tax_brackets: Ordinary income schedule per filing status.
        standard_deductions: Standard deduction per filing status.
        capital_gains_brackets: 0%/15%/20% schedule per filing status, defined
            on total taxable income.
        additional_medicare_thresholds: Additional Medicare threshold per status.
        niit_thresholds: Net Investment Income Tax threshold per status.
        ss_wage_base: Social Security wage base limit.
        obbba_available: Whether the 2025 law's temporary deductions exist in
            this year at all.
    """

    tax_year: int
    tax_brackets: Mapping[FilingStatus, BracketSchedule]
    standard_deductions: Mapping[FilingStatus, Decimal]
    capital_gains_brackets: Mapping[FilingStatus, BracketSchedule]
    additional_medicare_thresholds: Mapping[FilingStatus, Decimal]
    niit_thresholds: Mapping[FilingStatus, Decimal]

    # Social Security / Medicare
    ss_wage_base: Decimal

    # Self-employment tax (combined employer + employee rates)
    se_ss_rate: Decimal = Decimal("0.124")  # 12.4% (6.2% x 2)
    se_medicare_rate: Decimal = Decimal("0.029")  # 2.9% (1.45% x 2)
    se_net_earnings_factor: Decimal = Decimal("0.9235")  # 92.35% of net SE income
    additional_medicare_rate: Decimal = Decimal("0.009")

    niit_rate: Decimal = Decimal("0.038")

    # Capital loss limit against ordinary income
    capital_loss_limit: Decimal = Decimal("3000")
    capital_loss_limit_mfs: Decimal = Decimal("1500")

    medical_floor_rate: Decimal = Decimal("0.075")
    qbi_rate: Decimal = Decimal("0.20")

    # Credit estimates when the caller supplies none
    child_tax_credit_per_child: Decimal = Decimal("2000")
    child_tax_credit_age_limit: int = 17
    other_dependent_credit: Decimal = Decimal("500")

    # SALT cap under prior law and under the 2025 law
    salt_cap: Decimal = Decimal("10000")
    salt_cap_mfs: Decimal = Decimal("5000")
    obbba_salt_cap: Decimal = Decimal("40000")
    obbba_salt_cap_mfs: Decimal = Decimal("20000")

    # 2025 law temporary above-the-line deductions
    obbba_available: bool = False
    tip_deduction_cap: Decimal = Decimal("25000")
    overtime_deduction_cap: Decimal = Decimal("12500")
    auto_loan_interest_cap: Decimal = Decimal("10000")
    senior_bonus: Decimal = Decimal("6000")
    senior_age: int = 65
    new_deduction_phaseout_start: Decimal = Decimal("150000")
    new_deduction_phaseout_end: Decimal = Decimal("400000")
    new_deduction_phaseout_start_mfj: Decimal = Decimal("300000")
    new_deduction_phaseout_end_mfj: Decimal = Decimal("550000")

    def __post_init__(self) -> None:
        for name in (
            "tax_brackets",
            "standard_deductions",
            "capital_gains_brackets",
            "additional_medicare_thresholds",
            "niit_thresholds",
        ):
            object.__setattr__(self, name, _freeze_table(name, getattr(self, name)))
        for table in (self.tax_brackets, self.capital_gains_brackets):
            for schedule in table.values():
                validate_schedule(schedule)

    @property
    def se_tax_deduction_rate(self) -> Decimal:
        """Deductible portion of SE tax (50%)."""
        return Decimal("0.5")

    def capital_loss_cap(self, filing_status: FilingStatus) -> Decimal:
        """Maximum net capital loss deductible against ordinary income."""
        if filing_status is FilingStatus.MARRIED_SEPARATE:
            return self.capital_loss_limit_mfs
        return self.capital_loss_limit


def _by_status(
    single: object,
    mfj: object,
    mfs: object,
    hoh: object,
    qss: object | None = None,
) -> dict[FilingStatus, object]:
    return {
        FilingStatus.SINGLE: single,
        FilingStatus.MARRIED_JOINT: mfj,
        FilingStatus.MARRIED_SEPARATE: mfs,
        FilingStatus.HEAD_OF_HOUSEHOLD: hoh,
        FilingStatus.SURVIVING_SPOUSE: mfj if qss is None else qss,
    }


# Not inflation-indexed; shared by Additional Medicare and NIIT.
_STATUTORY_SURTAX_THRESHOLDS = _by_status(
    single=Decimal("200000"),
    mfj=Decimal("250000"),
    mfs=Decimal("125000"),
    hoh=Decimal("200000"),
)


# 2024 Configuration - IRS published values
TAX_YEAR_2024 = TaxYearConfig(
    tax_year=2024,
    tax_brackets=_by_status(
        single=make_schedule(
            [(0, "0.10"), (11600, "0.12"), (47150, "0.22"), (100525, "0.24"),
             (191950, "0.32"), (243725, "0.35"), (609350, "0.37")]
        ),
        mfj=make_schedule(
            [(0, "0.10"), (23200, "0.12"), (94300, "0.22"), (201050, "0.24"),
             (383900, "0.32"), (487450, "0.35"), (731200, "0.37")]
        ),
        mfs=make_schedule(
            [(0, "0.10"), (11600, "0.12"), (47150, "0.22"), (100525, "0.24"),
             (191950, "0.32"), (243725, "0.35"), (365600, "0.37")]
        ),
        hoh=make_schedule(
            [(0, "0.10"), (16550, "0.12"), (63100, "0.22"), (100500, "0.24"),
             (191950, "0.32"), (243700, "0.35"), (609350, "0.37")]
        ),
    ),
    standard_deductions=_by_status(
        single=Decimal("14600"),
        mfj=Decimal("29200"),
        mfs=Decimal("14600"),
        hoh=Decimal("21900"),
    ),
    capital_gains_brackets=_by_status(
        single=make_schedule([(0, "0"), (47025, "0.15"), (518900, "0.20")]),
        mfj=make_schedule([(0, "0"), (94050, "0.15"), (583750, "0.20")]),
        mfs=make_schedule([(0, "0"), (47025, "0.15"), (291850, "0.20")]),
        hoh=make_schedule([(0, "0"), (63000, "0.15"), (551350, "0.20")]),
    ),
    additional_medicare_thresholds=_STATUTORY_SURTAX_THRESHOLDS,
    niit_thresholds=_STATUTORY_SURTAX_THRESHOLDS,
    ss_wage_base=Decimal("168600"),
)

# 2025 Configuration - includes the 2025 reconciliation act (OBBBA) provisions
TAX_YEAR_2025 = TaxYearConfig(
    tax_year=2025,
    tax_brackets=_by_status(
        single=make_schedule(
            [(0, "0.10"), (11925, "0.12"), (48475, "0.22"), (103350, "0.24"),
             (197300, "0.32"), (250525, "0.35"), (626350, "0.37")]
        ),
        mfj=make_schedule(
            [(0, "0.10"), (23850, "0.12"), (96950, "0.22"), (206700, "0.24"),
             (394600, "0.32"), (501050, "0.35"), (751600, "0.37")]
        ),
        # Top bracket starts lower than single
        mfs=make_schedule(
            [(0, "0.10"), (11925, "0.12"), (48475, "0.22"), (103350, "0.24"),
             (197300, "0.32"), (250525, "0.35"), (375800, "0.37")]
        ),
        hoh=make_schedule(
            [(0, "0.10"), (17000, "0.12"), (64850, "0.22"), (103350, "0.24"),
             (197300, "0.32"), (250500, "0.35"), (626350, "0.37")]
        ),
    ),
    standard_deductions=_by_status(
        single=Decimal("15700"),
        mfj=Decimal("31400"),
        mfs=Decimal("15700"),
        hoh=Decimal("23500"),
    ),
    capital_gains_brackets=_by_status(
        single=make_schedule([(0, "0"), (48350, "0.15"), (533400, "0.20")]),
        mfj=make_schedule([(0, "0"), (96700, "0.15"), (600050, "0.20")]),
        mfs=make_schedule([(0, "0"), (48350, "0.15"), (300025, "0.20")]),
        hoh=make_schedule([(0, "0"), (64750, "0.15"), (566700, "0.20")]),
    ),
    additional_medicare_thresholds=_STATUTORY_SURTAX_THRESHOLDS,
    niit_thresholds=_STATUTORY_SURTAX_THRESHOLDS,
    ss_wage_base=Decimal("176100"),
    obbba_available=True,
)

# Registry of available tax year configurations
TAX_YEAR_CONFIGS: Mapping[int, TaxYearConfig] = MappingProxyType(
    {
        2024: TAX_YEAR_2024,
        2025: TAX_YEAR_2025,
    }
)


def get_tax_year_config(year: int) -> TaxYearConfig:
    """Get configuration for a specific tax year.

    Args:
        year: The tax year (e.g., 2025).

    Returns:
        TaxYearConfig for the specified year.

    Raises:
        ValueError: If no configuration exists for the requested year.

    Example:
        >>> config = get_tax_year_config(2024)
        >>> print(config.ss_wage_base)
        168600
    """
    if year not in TAX_YEAR_CONFIGS:
        available = sorted(TAX_YEAR_CONFIGS.keys())
        raise ValueError(
            f"No tax configuration for year {year}. Available years: {available}"
        )
    return TAX_YEAR_CONFIGS[year]
