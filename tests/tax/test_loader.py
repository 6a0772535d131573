"""Tests for the YAML tax table loader."""

from decimal import Decimal
from pathlib import Path

import pytest

from src.tax.filing_status import FilingStatus
from src.tax.loader import TaxTableLoadError, load_tax_year_config, load_tax_year_config_from_dict

VALID_TABLES = """
tax_year: 2026
ss_wage_base: 180000
obbba_available: true
tax_brackets:
  single: [[0, 0.10], [12000, 0.12], [50000, 0.22]]
  mfj: [[0, 0.10], [24000, 0.12], [100000, 0.22]]
  mfs: [[0, 0.10], [12000, 0.12], [50000, 0.22]]
  hoh: [[0, 0.10], [17000, 0.12], [65000, 0.22]]
standard_deductions:
  single: 16000
  marriedJoint: 32000
  marriedSeparate: 16000
  headOfHousehold: 24000
capital_gains_brackets:
  single: [[0, 0], [49000, 0.15], [540000, 0.20]]
  married: [[0, 0], [98000, 0.15], [610000, 0.20]]
  mfs: [[0, 0], [49000, 0.15], [305000, 0.20]]
  head: [[0, 0], [65500, 0.15], [575000, 0.20]]
overrides:
  salt_cap: 12000
  senior_age: 67
"""


def _valid_dict() -> dict:
    return {
        "tax_year": 2026,
        "ss_wage_base": 180000,
        "tax_brackets": {
            status: [[0, "0.10"], [12000, "0.12"]]
            for status in ("single", "mfj", "mfs", "hoh")
        },
        "standard_deductions": {"single": 1, "mfj": 2, "mfs": 1, "hoh": 1},
        "capital_gains_brackets": {
            status: [[0, "0"], [49000, "0.15"]] for status in ("single", "mfj", "mfs", "hoh")
        },
    }


class TestLoadTaxYearConfig:
    """Tests for load_tax_year_config."""

    def test_load_valid_file(self, tmp_path: Path) -> None:
        """A complete table file builds a TaxYearConfig."""
        tables = tmp_path / "tables.yaml"
        tables.write_text(VALID_TABLES)

        config = load_tax_year_config(tables)

        assert config.tax_year == 2026
        assert config.ss_wage_base == Decimal("180000")
        assert config.obbba_available is True
        assert config.standard_deductions[FilingStatus.HEAD_OF_HOUSEHOLD] == Decimal("24000")
        assert config.tax_brackets[FilingStatus.SINGLE][1].rate == Decimal("0.12")
        assert config.capital_gains_brackets[FilingStatus.MARRIED_JOINT][1].threshold == Decimal(
            "98000"
        )

    def test_surviving_spouse_copies_joint(self, tmp_path: Path) -> None:
        """Surviving spouse rows default to the joint rows."""
        tables = tmp_path / "tables.yaml"
        tables.write_text(VALID_TABLES)

        config = load_tax_year_config(tables)

        assert (
            config.tax_brackets[FilingStatus.SURVIVING_SPOUSE]
            == config.tax_brackets[FilingStatus.MARRIED_JOINT]
        )
        assert config.standard_deductions[FilingStatus.SURVIVING_SPOUSE] == Decimal("32000")

    def test_float_rates_become_exact_decimals(self, tmp_path: Path) -> None:
        """YAML floats are converted through their text, not binary."""
        tables = tmp_path / "tables.yaml"
        tables.write_text(VALID_TABLES)

        config = load_tax_year_config(tables)

        assert config.tax_brackets[FilingStatus.SINGLE][0].rate == Decimal("0.1")
        assert str(config.capital_gains_brackets[FilingStatus.SINGLE][1].rate) == "0.15"

    def test_overrides_applied(self, tmp_path: Path) -> None:
        """Scalar overrides replace defaults with the field's type."""
        tables = tmp_path / "tables.yaml"
        tables.write_text(VALID_TABLES)

        config = load_tax_year_config(tables)

        assert config.salt_cap == Decimal("12000")
        assert config.senior_age == 67
        assert isinstance(config.senior_age, int)

    def test_default_surtax_thresholds(self, tmp_path: Path) -> None:
        """Statutory surtax thresholds apply when the file omits them."""
        tables = tmp_path / "tables.yaml"
        tables.write_text(VALID_TABLES)

        config = load_tax_year_config(tables)

        assert config.niit_thresholds[FilingStatus.SINGLE] == Decimal("200000")
        assert config.additional_medicare_thresholds[FilingStatus.MARRIED_JOINT] == Decimal(
            "250000"
        )

    def test_file_not_found(self) -> None:
        """Missing file raises with the path."""
        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config("/nonexistent/path/tables.yaml")

        assert "not found" in str(exc_info.value).lower()
        assert exc_info.value.path == Path("/nonexistent/path/tables.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Malformed YAML raises."""
        tables = tmp_path / "bad.yaml"
        tables.write_text("{ invalid yaml : : : }")

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config(tables)

        assert exc_info.value.path == tables

    def test_empty_file(self, tmp_path: Path) -> None:
        """Empty file raises."""
        tables = tmp_path / "empty.yaml"
        tables.write_text("")

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config(tables)

        assert "empty" in str(exc_info.value).lower()

    def test_non_mapping(self, tmp_path: Path) -> None:
        """A top-level list is rejected."""
        tables = tmp_path / "list.yaml"
        tables.write_text("- 1\n- 2\n")

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config(tables)

        assert "mapping" in str(exc_info.value)


class TestLoadTaxYearConfigFromDict:
    """Tests for validation of parsed table documents."""

    def test_valid_dict(self) -> None:
        """A minimal complete document loads."""
        config = load_tax_year_config_from_dict(_valid_dict())
        assert config.tax_year == 2026
        assert config.obbba_available is False

    def test_missing_required_field(self) -> None:
        """Schema errors list every problem."""
        data = _valid_dict()
        del data["ss_wage_base"]

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config_from_dict(data)

        assert any("ss_wage_base" in error for error in exc_info.value.errors)

    def test_unknown_top_level_key(self) -> None:
        """Unexpected keys are rejected."""
        data = _valid_dict()
        data["surprise"] = 1

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config_from_dict(data)

        assert any("surprise" in error for error in exc_info.value.errors)

    def test_unknown_filing_status(self) -> None:
        """Table keys must be filing statuses."""
        data = _valid_dict()
        data["standard_deductions"]["divorced"] = 5

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config_from_dict(data)

        assert "standard_deductions: unknown filing status 'divorced'" in exc_info.value.errors

    def test_unknown_override(self) -> None:
        """Overrides may only name scalar config fields."""
        data = _valid_dict()
        data["overrides"] = {"tax_brackets": 1, "bogus_rate": "0.5"}

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config_from_dict(data)

        assert "overrides: unknown field 'bogus_rate'" in exc_info.value.errors
        assert "overrides: unknown field 'tax_brackets'" in exc_info.value.errors

    def test_incomplete_table(self) -> None:
        """A table missing a status fails when the config is built."""
        data = _valid_dict()
        del data["standard_deductions"]["hoh"]

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config_from_dict(data, path=Path("tables.yaml"))

        assert "headOfHousehold" in str(exc_info.value)
        assert exc_info.value.path == Path("tables.yaml")

    def test_malformed_schedule(self) -> None:
        """Schedules must start at zero."""
        data = _valid_dict()
        data["tax_brackets"]["single"] = [[100, "0.10"]]

        with pytest.raises(TaxTableLoadError) as exc_info:
            load_tax_year_config_from_dict(data)

        assert "must be 0" in str(exc_info.value)
