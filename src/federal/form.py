"""Typed tax form input.

``TaxForm`` is the read-only input to the federal pipeline. Callers usually hold
a flat mapping of camelCase keys (``totalWages``, ``scheduleC``...); the model
accepts those or the snake_case field names and ignores anything it does not
know.

Input handling is deliberately lenient: this is a best-effort estimator, not a
validator. Every monetary field coerces missing, null, boolean, empty,
non-numeric, non-finite or out-of-range values to zero instead of raising.
Malformed dates become ``None``, a malformed dependents list becomes empty and
an unknown filing status becomes single.

All monetary values use Decimal for precision.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.tax.filing_status import FilingStatus

_TRUE_STRINGS = {"true", "t", "yes", "y", "on", "1"}
_FALSE_STRINGS = {"false", "f", "no", "n", "off", "0", ""}

# Amounts of 10**MAX_MONEY_EXPONENT or more are treated as malformed.
MAX_MONEY_EXPONENT = 15


def coerce_money(value: Any) -> Decimal:
    """Coerce any input to a bounded finite Decimal, treating junk as zero.

    Example:
        >>> coerce_money("$1,250.50")
        Decimal('1250.50')
        >>> coerce_money("n/a")
        Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "").replace("$", "")
        try:
            result = Decimal(text)
        except InvalidOperation:
            return Decimal("0")
    else:
        return Decimal("0")

    if not result.is_finite() or result.adjusted() >= MAX_MONEY_EXPONENT:
        return Decimal("0")
    return result


def _coerce_optional_money(value: Any) -> Decimal | None:
    if value is None:
        return None
    return coerce_money(value)


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    return bool(value)


def _coerce_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def _coerce_age(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    amount = coerce_money(value)
    if amount < 0 or (amount == 0 and value not in (0, "0")):
        return None
    return int(amount)


def _coerce_tax_year(value: Any) -> int:
    year = int(coerce_money(value))
    return year if year > 0 else 2025


Money = Annotated[Decimal, BeforeValidator(coerce_money)]
OptionalMoney = Annotated[Decimal | None, BeforeValidator(_coerce_optional_money)]
Flag = Annotated[bool, BeforeValidator(_coerce_flag)]
LenientDate = Annotated[date | None, BeforeValidator(_coerce_date)]
Age = Annotated[int | None, BeforeValidator(_coerce_age)]


class DeductionType(str, Enum):
    """Deduction method chosen by the caller."""

    STANDARD = "standard"
    ITEMIZED = "itemized"

    @classmethod
    def _missing_(cls, value: object) -> DeductionType:
        if isinstance(value, str) and value.strip().lower() == "itemized":
            return cls.ITEMIZED
        return cls.STANDARD


def _coerce_deduction_type(value: Any) -> DeductionType:
    return DeductionType(value)


class _FormModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class ScheduleC(_FormModel):
    """Schedule C business profit. ``net_profit`` wins over receipts minus expenses."""

    net_profit: OptionalMoney = None
    gross_receipts: Money = Decimal("0")
    expenses: Money = Decimal("0")

    @property
    def profit(self) -> Decimal:
        if self.net_profit is not None:
            return self.net_profit
        return self.gross_receipts - self.expenses


class ScheduleD(_FormModel):
    """Schedule D capital gains and losses. Losses may be entered with either sign."""

    short_term_gain: Money = Decimal("0")
    short_term_loss: Money = Decimal("0")
    long_term_gain: Money = Decimal("0")
    long_term_loss: Money = Decimal("0")


class ScheduleE(_FormModel):
    """Schedule E rental income. ``net_income`` wins over income minus expenses."""

    net_income: OptionalMoney = None
    rental_income: Money = Decimal("0")
    rental_expenses: Money = Decimal("0")

    @property
    def net(self) -> Decimal:
        if self.net_income is not None:
            return self.net_income
        return self.rental_income - self.rental_expenses


class ScheduleK1(_FormModel):
    """Partnership or S-corp K-1 amounts that feed the QBI deduction."""

    ordinary_income: Money = Decimal("0")
    guaranteed_payments: Money = Decimal("0")


class Dependent(_FormModel):
    """A dependent claimed on the return.

    Attributes:
        qualifying_child: Meets the qualifying child tests.
        qualifying_relative: Meets the qualifying relative tests.
        age: Age at the end of the tax year, if known.
    """

    name: str | None = None
    qualifying_child: Flag = False
    qualifying_relative: Flag = False
    age: Age = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_as_text(cls, value: Any) -> str | None:
        return None if value is None else str(value)


def _coerce_schedule(model: type[_FormModel]):
    def coerce(value: Any) -> Any:
        if value is None or isinstance(value, model):
            return value
        if isinstance(value, Mapping):
            return value
        return None

    return coerce


def _coerce_dependents(value: Any) -> list[Any]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, (Mapping, Dependent))]


class TaxForm(_FormModel):
    """Form 1040 inputs for a single tax year.

    Treated as read-only: the pipeline never mutates a form, and what-if
    scenarios are built as new forms with specific fields replaced.
    """

    # Identity
    filing_status: Annotated[FilingStatus, BeforeValidator(FilingStatus.parse)] = (
        FilingStatus.SINGLE
    )
    tax_year: Annotated[int, BeforeValidator(_coerce_tax_year)] = 2025
    birth_date: LenientDate = None
    age: Age = None
    spouse_birth_date: LenientDate = None
    spouse_age: Age = None

    # Income (Form 1040 lines 1-8)
    total_wages: Money = Decimal("0")
    taxable_interest: Money = Decimal("0")
    ordinary_dividends: Money = Decimal("0")
    qualified_dividends: Money = Decimal("0")
    taxable_ira: Money = Decimal("0")
    taxable_pensions: Money = Decimal("0")
    taxable_social_security: Money = Decimal("0")
    capital_gain_loss: Money = Decimal("0")
    other_income: Money = Decimal("0")

    # Schedules
    has_schedule_c: Flag = False
    schedule_c: Annotated[ScheduleC | None, BeforeValidator(_coerce_schedule(ScheduleC))] = None
    has_schedule_d: Flag = False
    schedule_d: Annotated[ScheduleD | None, BeforeValidator(_coerce_schedule(ScheduleD))] = None
    has_schedule_e: Flag = False
    schedule_e: Annotated[ScheduleE | None, BeforeValidator(_coerce_schedule(ScheduleE))] = None
    schedule_k1: Annotated[ScheduleK1 | None, BeforeValidator(_coerce_schedule(ScheduleK1))] = (
        Field(default=None, alias="scheduleK1")
    )
    partnership_income: Money = Decimal("0")
    s_corp_income: Money = Field(default=Decimal("0"), alias="sCorpIncome")

    # Adjustments to income (Schedule 1 Part II)
    educator_expenses: Money = Decimal("0")
    hsa_deduction: Money = Decimal("0")
    self_employment_tax_deduction: Money = Decimal("0")
    self_employed_sep_simple: Money = Field(default=Decimal("0"), alias="selfEmployedSEPSimple")
    self_employed_health_insurance: Money = Decimal("0")
    penalty_early_withdrawal: Money = Decimal("0")
    alimony_paid: Money = Decimal("0")
    ira_deduction: Money = Decimal("0")
    student_loan_interest: Money = Decimal("0")

    # 2025 law temporary deductions
    tip_income: Money = Decimal("0")
    overtime_income: Money = Decimal("0")
    auto_loan_interest: Money = Decimal("0")

    # Itemized deductions (Schedule A)
    deduction_type: Annotated[DeductionType, BeforeValidator(_coerce_deduction_type)] = (
        DeductionType.STANDARD
    )
    medical_expenses: Money = Decimal("0")
    state_local_taxes: Money = Decimal("0")
    real_estate_taxes: Money = Decimal("0")
    mortgage_interest: Money = Decimal("0")
    charity_cash: Money = Decimal("0")
    charity_non_cash: Money = Decimal("0")
    casualty_losses: Money = Decimal("0")
    other_itemized: Money = Decimal("0")

    # Credits
    child_tax_credit: Money = Decimal("0")
    credit_other_dependents: Money = Decimal("0")
    education_credits: Money = Decimal("0")
    retirement_savers_credit: Money = Decimal("0")
    child_care_credit: Money = Decimal("0")
    earned_income_credit: Money = Decimal("0")
    other_credits: Money = Decimal("0")

    # Payments
    total_withholding: Money = Decimal("0")
    estimated_tax_payments: Money = Decimal("0")
    amount_applied_from_prior_year: Money = Decimal("0")

    # Policy toggle: True applies the 2025 law (OBBBA), False prior law
    use_obbba_2025: Flag = Field(default=True, alias="useObbba2025")

    dependents: Annotated[list[Dependent], BeforeValidator(_coerce_dependents)] = Field(
        default_factory=list
    )

    @property
    def active_schedule_c(self) -> ScheduleC | None:
        """Schedule C when supplied and switched on by ``has_schedule_c``."""
        if self.schedule_c is None or not self.has_schedule_c:
            return None
        return self.schedule_c

    @property
    def active_schedule_d(self) -> ScheduleD | None:
        """Schedule D when supplied and switched on by ``has_schedule_d``."""
        if self.schedule_d is None or not self.has_schedule_d:
            return None
        return self.schedule_d

    @property
    def active_schedule_e(self) -> ScheduleE | None:
        """Schedule E when supplied and switched on by ``has_schedule_e``."""
        if self.schedule_e is None or not self.has_schedule_e:
            return None
        return self.schedule_e


def _field_names_by_key() -> dict[str, str]:
    names: dict[str, str] = {}
    for name, info in TaxForm.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


def merge_overrides(form: TaxForm | Mapping[str, Any], overrides: Mapping[str, Any]) -> TaxForm:
    """Build a new form with ``overrides`` shallow-merged onto ``form``.

    Override keys may be field names or their camelCase aliases. Nested
    schedules are replaced whole, not merged. ``form`` is left untouched.
    """
    base = form if isinstance(form, TaxForm) else TaxForm.model_validate(form)
    names = _field_names_by_key()
    data: dict[str, Any] = {name: getattr(base, name) for name in TaxForm.model_fields}
    for key, value in overrides.items():
        name = names.get(key)
        if name is not None:
            data[name] = value
    return TaxForm.model_validate(data)


def as_tax_form(form: TaxForm | Mapping[str, Any]) -> TaxForm:
    """Return ``form`` as a TaxForm, validating mappings leniently."""
    if isinstance(form, TaxForm):
        return form
    return TaxForm.model_validate(dict(form))
