"""Tax table loader with YAML parsing and validation.

Tax tables are configuration data: the built-in years live in
``src.tax.year_config`` and additional or corrected years can be supplied as
YAML files. A table file looks like::

    tax_year: 2026
    ss_wage_base: 184500
    obbba_available: true
    tax_brackets:
      single: [[0, 0.10], [12400, 0.12], [50400, 0.22]]
      mfj: [[0, 0.10], [24800, 0.12], [100800, 0.22]]
      ...
    standard_deductions:
      single: 16100
      ...
    capital_gains_brackets:
      single: [[0, 0], [49450, 0.15], [545500, 0.20]]
      ...
    overrides:
      salt_cap: 10000

Status keys accept any spelling ``FilingStatus`` understands. A surviving
spouse row may be omitted, in which case the joint row is reused.
"""

from __future__ import annotations

import dataclasses
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError
from ruamel.yaml import YAML

from src.tax.filing_status import FilingStatus
from src.tax.year_config import TaxYearConfig, make_schedule


class TaxTableLoadError(Exception):
    """Exception raised when a tax table file cannot be loaded or validated."""

    def __init__(self, message: str, path: Path | None = None, errors: list[str] | None = None):
        """Initialize TaxTableLoadError.

        Args:
            message: Human-readable error message
            path: Path to the table file that failed to load
            errors: List of specific validation errors
        """
        self.path = path
        self.errors = errors or []
        super().__init__(message)


def _float_to_decimal(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    return value


YamlDecimal = Annotated[Decimal, BeforeValidator(_float_to_decimal)]
BracketRows = list[tuple[YamlDecimal, YamlDecimal]]

# Scalar TaxYearConfig fields a table file may override.
_TABLE_FIELDS = {
    "tax_year",
    "tax_brackets",
    "standard_deductions",
    "capital_gains_brackets",
    "additional_medicare_thresholds",
    "niit_thresholds",
    "ss_wage_base",
}
_OVERRIDABLE_FIELDS = {
    f.name: f.type for f in dataclasses.fields(TaxYearConfig) if f.name not in _TABLE_FIELDS
}

_DEFAULT_SURTAX_THRESHOLDS: dict[str, Decimal] = {
    "single": Decimal("200000"),
    "marriedJoint": Decimal("250000"),
    "marriedSeparate": Decimal("125000"),
    "headOfHousehold": Decimal("200000"),
    "survivingSpouse": Decimal("250000"),
}


class TaxTablesFile(BaseModel):
    """Schema of a YAML tax table file."""

    model_config = ConfigDict(extra="forbid")

    tax_year: int
    ss_wage_base: YamlDecimal
    obbba_available: bool = False
    tax_brackets: dict[str, BracketRows]
    standard_deductions: dict[str, YamlDecimal]
    capital_gains_brackets: dict[str, BracketRows]
    additional_medicare_thresholds: dict[str, YamlDecimal] | None = None
    niit_thresholds: dict[str, YamlDecimal] | None = None
    overrides: dict[str, YamlDecimal | int | bool] = {}


def _parse_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML file and return its contents as a dictionary.

    Raises:
        TaxTableLoadError: If the file cannot be read or parsed
    """
    yaml = YAML(typ="safe")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except FileNotFoundError:
        raise TaxTableLoadError(f"Tax table file not found: {path}", path=path)
    except Exception as e:
        raise TaxTableLoadError(f"Failed to parse YAML: {e}", path=path)

    if data is None:
        raise TaxTableLoadError("Empty tax table file", path=path)

    if not isinstance(data, dict):
        raise TaxTableLoadError(
            f"Tax table file must be a YAML mapping, got {type(data).__name__}",
            path=path,
        )

    return dict(data)


def _keyed_by_status(
    name: str, table: dict[str, Any], errors: list[str]
) -> dict[FilingStatus, Any]:
    keyed: dict[FilingStatus, Any] = {}
    for key, value in table.items():
        try:
            keyed[FilingStatus(key)] = value
        except ValueError:
            errors.append(f"{name}: unknown filing status '{key}'")
    if FilingStatus.SURVIVING_SPOUSE not in keyed and FilingStatus.MARRIED_JOINT in keyed:
        keyed[FilingStatus.SURVIVING_SPOUSE] = keyed[FilingStatus.MARRIED_JOINT]
    return keyed


def load_tax_year_config_from_dict(
    data: dict[str, Any], path: Path | None = None
) -> TaxYearConfig:
    """Build a TaxYearConfig from a parsed table document.

    Args:
        data: Dictionary containing table data
        path: Optional path for error reporting

    Returns:
        Validated TaxYearConfig

    Raises:
        TaxTableLoadError: If validation fails
    """
    try:
        tables = TaxTablesFile.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise TaxTableLoadError(
            f"Tax table validation failed: {errors[0]}",
            path=path,
            errors=errors,
        )

    errors: list[str] = []
    unknown = sorted(set(tables.overrides) - set(_OVERRIDABLE_FIELDS))
    errors.extend(f"overrides: unknown field '{name}'" for name in unknown)

    tax_brackets = {
        status: make_schedule(rows)
        for status, rows in _keyed_by_status("tax_brackets", tables.tax_brackets, errors).items()
    }
    capital_gains_brackets = {
        status: make_schedule(rows)
        for status, rows in _keyed_by_status(
            "capital_gains_brackets", tables.capital_gains_brackets, errors
        ).items()
    }
    standard_deductions = _keyed_by_status(
        "standard_deductions", tables.standard_deductions, errors
    )
    additional_medicare = _keyed_by_status(
        "additional_medicare_thresholds",
        tables.additional_medicare_thresholds or _DEFAULT_SURTAX_THRESHOLDS,
        errors,
    )
    niit = _keyed_by_status(
        "niit_thresholds", tables.niit_thresholds or _DEFAULT_SURTAX_THRESHOLDS, errors
    )

    if errors:
        raise TaxTableLoadError(f"Tax table validation failed: {errors[0]}", path=path, errors=errors)

    overrides: dict[str, Any] = {"obbba_available": tables.obbba_available}
    for name, value in tables.overrides.items():
        field_type = _OVERRIDABLE_FIELDS[name]
        type_name = getattr(field_type, "__name__", field_type)
        if type_name == "int":
            overrides[name] = int(value)
        elif type_name == "bool":
            overrides[name] = bool(value)
        else:
            overrides[name] = Decimal(str(value))

    try:
        return TaxYearConfig(
            tax_year=tables.tax_year,
            tax_brackets=tax_brackets,
            standard_deductions=standard_deductions,
            capital_gains_brackets=capital_gains_brackets,
            additional_medicare_thresholds=additional_medicare,
            niit_thresholds=niit,
            ss_wage_base=tables.ss_wage_base,
            **overrides,
        )
    except ValueError as e:
        raise TaxTableLoadError(f"Invalid tax tables: {e}", path=path, errors=[str(e)])


def load_tax_year_config(path: str | Path) -> TaxYearConfig:
    """Load a TaxYearConfig from a YAML file path.

    Args:
        path: Path to the YAML file

    Returns:
        Validated TaxYearConfig

    Raises:
        TaxTableLoadError: If the file cannot be loaded or validation fails
    """
    path = Path(path)
    data = _parse_yaml(path)
    return load_tax_year_config_from_dict(data, path=path)
