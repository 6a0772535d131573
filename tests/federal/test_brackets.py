"""Tests for the progressive bracket engine."""

from decimal import Decimal

import pytest

from src.federal.brackets import bracket_tax
from src.tax.filing_status import FilingStatus
from src.tax.year_config import TAX_YEAR_2025, make_schedule

SINGLE_2025 = TAX_YEAR_2025.tax_brackets[FilingStatus.SINGLE]


class TestBracketTax:
    """Tests for bracket_tax."""

    def test_single_60000(self) -> None:
        """$60,000 single: 1,192.50 + 4,386.00 + 2,535.50."""
        assert bracket_tax(Decimal("60000"), SINGLE_2025) == Decimal("8114.00")

    def test_first_bracket_only(self) -> None:
        """Income inside the first bracket is taxed at 10%."""
        assert bracket_tax(Decimal("10000"), SINGLE_2025) == Decimal("1000.00")

    def test_exactly_at_threshold(self) -> None:
        """Income at a threshold is fully taxed at the lower rate."""
        assert bracket_tax(Decimal("11925"), SINGLE_2025) == Decimal("1192.50")

    def test_top_bracket_is_unbounded(self) -> None:
        """Income above the last threshold is taxed at the top rate."""
        at_top = bracket_tax(Decimal("626350"), SINGLE_2025)
        above_top = bracket_tax(Decimal("726350"), SINGLE_2025)
        assert above_top - at_top == Decimal("37000.00")

    @pytest.mark.parametrize("income", [Decimal("0"), Decimal("-1"), Decimal("-250000")])
    def test_non_positive_income(self, income: Decimal) -> None:
        """Zero or negative income owes nothing."""
        assert bracket_tax(income, SINGLE_2025) == Decimal("0")

    def test_monotone(self) -> None:
        """More income never means less tax."""
        for status in FilingStatus:
            schedule = TAX_YEAR_2025.tax_brackets[status]
            previous = Decimal("0")
            for income in range(0, 900001, 5000):
                tax = bracket_tax(Decimal(income), schedule)
                assert tax >= previous
                previous = tax

    def test_continuous_at_thresholds(self) -> None:
        """One cent above a threshold adds at most one cent times the top rate."""
        for bracket in SINGLE_2025[1:]:
            at = bracket_tax(bracket.threshold, SINGLE_2025)
            above = bracket_tax(bracket.threshold + Decimal("0.01"), SINGLE_2025)
            assert Decimal("0") <= above - at <= Decimal("0.01") * bracket.rate

    def test_custom_schedule(self) -> None:
        """Works with any well-formed schedule."""
        schedule = make_schedule([(0, "0"), (100, "0.5")])
        assert bracket_tax(Decimal("300"), schedule) == Decimal("100.0")
