"""Tests for self-employment tax."""

from decimal import Decimal

import pytest

from src.federal.self_employment import self_employment_tax
from src.tax.filing_status import FilingStatus
from src.tax.year_config import TAX_YEAR_2025

SINGLE = FilingStatus.SINGLE


class TestSelfEmploymentTax:
    """Tests for self_employment_tax."""

    def test_no_wages(self) -> None:
        """$50,000 profit: 15.3% of 92.35%."""
        se = self_employment_tax(Decimal("50000"), Decimal("0"), SINGLE, TAX_YEAR_2025)

        assert se.social_security == Decimal("5725.70")
        assert se.medicare == Decimal("1339.075")
        assert se.additional_medicare == Decimal("0")
        assert se.tax == Decimal("7064.775")
        assert se.deduction == Decimal("3532.3875")

    @pytest.mark.parametrize("profit", [Decimal("0"), Decimal("-12000")])
    def test_non_positive_profit(self, profit: Decimal) -> None:
        """No profit, no SE tax and no deduction."""
        se = self_employment_tax(profit, Decimal("90000"), SINGLE, TAX_YEAR_2025)
        assert se.tax == Decimal("0")
        assert se.deduction == Decimal("0")

    def test_wages_exhaust_wage_base(self) -> None:
        """Wages above the wage base leave only Medicare and the surtax."""
        se = self_employment_tax(Decimal("50000"), Decimal("200000"), SINGLE, TAX_YEAR_2025)

        assert se.social_security == Decimal("0")
        # Threshold fully used by wages, so all 46,175 is subject to 0.9%
        assert se.additional_medicare == Decimal("415.575")
        assert se.tax == Decimal("1754.650")
        assert se.tax < Decimal("2000")

    def test_wages_partially_use_wage_base(self) -> None:
        """Only the remaining wage base is subject to Social Security."""
        se = self_employment_tax(Decimal("50000"), Decimal("166100"), SINGLE, TAX_YEAR_2025)
        assert se.social_security == Decimal("1240.000")

    def test_additional_medicare_above_threshold(self) -> None:
        """SE earnings above the threshold owe the 0.9% surtax."""
        se = self_employment_tax(Decimal("300000"), Decimal("0"), SINGLE, TAX_YEAR_2025)
        # 277,050 - 200,000 = 77,050 at 0.9%
        assert se.additional_medicare == Decimal("693.450")

    def test_joint_threshold_is_higher(self) -> None:
        """Joint filers start the surtax at $250,000."""
        single = self_employment_tax(Decimal("300000"), Decimal("0"), SINGLE, TAX_YEAR_2025)
        joint = self_employment_tax(
            Decimal("300000"), Decimal("0"), FilingStatus.MARRIED_JOINT, TAX_YEAR_2025
        )
        assert joint.additional_medicare < single.additional_medicare

    def test_deduction_is_half(self) -> None:
        """The deduction is exactly half the tax at every level."""
        for profit in (1000, 50000, 180000, 400000):
            for wages in (0, 100000, 250000):
                se = self_employment_tax(
                    Decimal(profit), Decimal(wages), SINGLE, TAX_YEAR_2025
                )
                assert se.deduction * 2 == se.tax

    def test_negative_wages_treated_as_zero(self) -> None:
        """Negative prior wages do not enlarge the wage base."""
        with_negative = self_employment_tax(Decimal("50000"), Decimal("-1000"), SINGLE, TAX_YEAR_2025)
        with_zero = self_employment_tax(Decimal("50000"), Decimal("0"), SINGLE, TAX_YEAR_2025)
        assert with_negative.tax == with_zero.tax
