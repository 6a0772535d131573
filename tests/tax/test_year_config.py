"""Tests for tax year configuration tables."""

from dataclasses import FrozenInstanceError, replace
from decimal import Decimal

import pytest

from src.tax.filing_status import FilingStatus
from src.tax.year_config import (
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    TAX_YEAR_CONFIGS,
    Bracket,
    get_tax_year_config,
    make_schedule,
    validate_schedule,
)


class TestGetTaxYearConfig:
    """Tests for the year registry."""

    def test_registered_years(self) -> None:
        """2024 and 2025 are registered."""
        assert get_tax_year_config(2024) is TAX_YEAR_2024
        assert get_tax_year_config(2025) is TAX_YEAR_2025
        assert sorted(TAX_YEAR_CONFIGS) == [2024, 2025]

    def test_unknown_year_raises(self) -> None:
        """An unregistered year is a configuration error."""
        with pytest.raises(ValueError) as exc_info:
            get_tax_year_config(1999)

        assert "1999" in str(exc_info.value)

    def test_registry_is_read_only(self) -> None:
        """The registry cannot be modified at runtime."""
        with pytest.raises(TypeError):
            TAX_YEAR_CONFIGS[2026] = TAX_YEAR_2025  # type: ignore[index]


class Test2025Tables:
    """Spot checks of the 2025 values."""

    def test_standard_deductions(self) -> None:
        """2025 standard deductions by status."""
        deductions = TAX_YEAR_2025.standard_deductions
        assert deductions[FilingStatus.SINGLE] == Decimal("15700")
        assert deductions[FilingStatus.MARRIED_JOINT] == Decimal("31400")
        assert deductions[FilingStatus.MARRIED_SEPARATE] == Decimal("15700")
        assert deductions[FilingStatus.HEAD_OF_HOUSEHOLD] == Decimal("23500")
        assert deductions[FilingStatus.SURVIVING_SPOUSE] == Decimal("31400")

    def test_single_brackets(self) -> None:
        """Single schedule starts at 10% and tops out at 37% above $626,350."""
        schedule = TAX_YEAR_2025.tax_brackets[FilingStatus.SINGLE]
        assert schedule[0] == Bracket(Decimal("0"), Decimal("0.10"))
        assert schedule[-1] == Bracket(Decimal("626350"), Decimal("0.37"))
        assert len(schedule) == 7

    def test_capital_gains_brackets(self) -> None:
        """0% and 20% thresholds for single and joint filers."""
        single = TAX_YEAR_2025.capital_gains_brackets[FilingStatus.SINGLE]
        joint = TAX_YEAR_2025.capital_gains_brackets[FilingStatus.MARRIED_JOINT]
        assert [b.threshold for b in single] == [Decimal("0"), Decimal("48350"), Decimal("533400")]
        assert [b.threshold for b in joint] == [Decimal("0"), Decimal("96700"), Decimal("600050")]

    def test_surtax_thresholds_are_statutory(self) -> None:
        """Additional Medicare and NIIT thresholds are not indexed."""
        for config in (TAX_YEAR_2024, TAX_YEAR_2025):
            assert config.niit_thresholds[FilingStatus.SINGLE] == Decimal("200000")
            assert config.niit_thresholds[FilingStatus.MARRIED_JOINT] == Decimal("250000")
            assert config.additional_medicare_thresholds[FilingStatus.MARRIED_SEPARATE] == Decimal(
                "125000"
            )

    def test_wage_base(self) -> None:
        """Social Security wage base by year."""
        assert TAX_YEAR_2024.ss_wage_base == Decimal("168600")
        assert TAX_YEAR_2025.ss_wage_base == Decimal("176100")

    def test_temporary_deductions_only_in_2025(self) -> None:
        """The 2025 law deductions do not exist in 2024."""
        assert TAX_YEAR_2025.obbba_available is True
        assert TAX_YEAR_2024.obbba_available is False

    def test_capital_loss_cap(self) -> None:
        """Married filing separately gets half the loss limit."""
        assert TAX_YEAR_2025.capital_loss_cap(FilingStatus.SINGLE) == Decimal("3000")
        assert TAX_YEAR_2025.capital_loss_cap(FilingStatus.MARRIED_SEPARATE) == Decimal("1500")

    def test_se_tax_deduction_rate(self) -> None:
        """Half of SE tax is deductible."""
        assert TAX_YEAR_2025.se_tax_deduction_rate == Decimal("0.5")


class TestImmutability:
    """Configs can be shared between concurrent computations."""

    def test_config_is_frozen(self) -> None:
        """Attributes cannot be reassigned."""
        with pytest.raises(FrozenInstanceError):
            TAX_YEAR_2025.ss_wage_base = Decimal("1")  # type: ignore[misc]

    def test_tables_are_read_only(self) -> None:
        """Per-status tables cannot be modified."""
        with pytest.raises(TypeError):
            TAX_YEAR_2025.standard_deductions[FilingStatus.SINGLE] = Decimal("0")  # type: ignore[index]


class TestScheduleValidation:
    """Tests for bracket schedule invariants."""

    def test_valid_schedule(self) -> None:
        """A well-formed schedule passes."""
        validate_schedule(make_schedule([(0, "0.10"), (1000, "0.20")]))

    def test_empty_schedule(self) -> None:
        """At least one bracket is required."""
        with pytest.raises(ValueError, match="at least one"):
            validate_schedule(())

    def test_first_threshold_must_be_zero(self) -> None:
        """Schedules start at zero."""
        with pytest.raises(ValueError, match="must be 0"):
            validate_schedule(make_schedule([(100, "0.10")]))

    def test_thresholds_strictly_increasing(self) -> None:
        """Duplicate thresholds are rejected."""
        with pytest.raises(ValueError, match="strictly increasing"):
            validate_schedule(make_schedule([(0, "0.10"), (1000, "0.20"), (1000, "0.30")]))

    def test_rates_non_decreasing(self) -> None:
        """Regressive schedules are rejected."""
        with pytest.raises(ValueError, match="non-decreasing"):
            validate_schedule(make_schedule([(0, "0.20"), (1000, "0.10")]))

    def test_config_rejects_missing_status(self) -> None:
        """Every table must cover every filing status."""
        brackets = dict(TAX_YEAR_2025.tax_brackets)
        del brackets[FilingStatus.SURVIVING_SPOUSE]

        with pytest.raises(ValueError, match="survivingSpouse"):
            replace(TAX_YEAR_2025, tax_brackets=brackets)

    def test_config_rejects_bad_schedule(self) -> None:
        """Construction validates every schedule."""
        brackets = dict(TAX_YEAR_2025.tax_brackets)
        brackets[FilingStatus.SINGLE] = make_schedule([(10, "0.10")])

        with pytest.raises(ValueError):
            replace(TAX_YEAR_2025, tax_brackets=brackets)
