"""Federal income tax pipeline for a single return.

This module sequences the component calculators over one ``TaxForm`` in the
order of Form 1040:

- Income aggregation with the capital loss limitation
- Law-version policy resolution (SALT cap, temporary 2025 deductions)
- Phase-out of the temporary deductions on a tentative MAGI
- Adjustments to income, including the deductible half of SE tax
- Standard or itemized deduction (the caller chooses)
- QBI deduction and taxable income
- Ordinary and preferential-rate tax, SE tax, NIIT
- Nonrefundable and refundable credits, payments and the refund or balance due

Every stage is a pure function of the form and the year's tables. Results are
built fresh on each call, so any number of computations can run side by side.

All monetary values use Decimal for precision.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from src.core.config import settings
from src.core.logging import get_logger
from src.federal.brackets import bracket_tax
from src.federal.capital_gains import stacked_gains_tax
from src.federal.form import DeductionType, Dependent, TaxForm, as_tax_form, merge_overrides
from src.federal.niit import net_investment_income_tax
from src.federal.qbi import qbi_deduction
from src.federal.self_employment import self_employment_tax
from src.tax.filing_status import FilingStatus
from src.tax.policy import PolicySettings, resolve_policy
from src.tax.year_config import TAX_YEAR_2025, TAX_YEAR_CONFIGS, TaxYearConfig

logger = get_logger(__name__)

CENTS = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")

# Field metadata marking a ratio rather than a dollar amount.
_RATE = {"rate": True}


# =============================================================================
# Data Structures
# =============================================================================


@dataclass
class IncomeSummary:
    """Income lines that make up total income.

    Attributes:
        wages: W-2 wages, tips and compensation.
        interest: Taxable interest.
        ordinary_dividends: Ordinary dividends (includes qualified).
        qualified_dividends: Qualified dividends, taxed at capital gains rates.
        retirement: Taxable IRA distributions plus pensions and annuities.
        social_security: Taxable Social Security benefits.
        other_income: Other Schedule 1 income.
        schedule_c: Schedule C net profit (loss).
        schedule_e: Schedule E net income (loss).
        net_short_term: Net short-term capital gain (loss).
        net_long_term: Net long-term capital gain (loss).
        net_capital_gain: Net short-term plus net long-term.
        capital_gain_for_agi: Net capital gain, or the loss limited to the cap.
        total_income: Grand total (Form 1040 line 9).
    """

    wages: Decimal
    interest: Decimal
    ordinary_dividends: Decimal
    qualified_dividends: Decimal
    retirement: Decimal
    social_security: Decimal
    other_income: Decimal
    schedule_c: Decimal
    schedule_e: Decimal
    net_short_term: Decimal
    net_long_term: Decimal
    net_capital_gain: Decimal
    capital_gain_for_agi: Decimal
    total_income: Decimal


@dataclass
class NewDeductions:
    """Temporary 2025 law deductions after gating and phase-out.

    Attributes:
        tentative_magi: Income used for the phase-out, computed before these
            deductions.
        phaseout_factor: Share of the tip and overtime deductions allowed.
        tips: Tip income deduction.
        overtime: Overtime income deduction.
        auto_loan_interest: Auto-loan interest deduction.
        senior_bonus: Senior deduction for filers aged 65 or older.
    """

    tentative_magi: Decimal = field(default_factory=lambda: Decimal("0"))
    phaseout_factor: Decimal = field(default_factory=lambda: Decimal("1"), metadata=_RATE)
    tips: Decimal = field(default_factory=lambda: Decimal("0"))
    overtime: Decimal = field(default_factory=lambda: Decimal("0"))
    auto_loan_interest: Decimal = field(default_factory=lambda: Decimal("0"))
    senior_bonus: Decimal = field(default_factory=lambda: Decimal("0"))

    @property
    def total(self) -> Decimal:
        return self.tips + self.overtime + self.auto_loan_interest + self.senior_bonus


@dataclass
class ItemizedDeductionBreakdown:
    """Schedule A components after floors and caps.

    Attributes:
        medical: Medical expenses above the AGI floor.
        salt: State and local taxes limited to the SALT cap.
        salt_cap: SALT cap in effect.
        mortgage_interest: Home mortgage interest.
        charity_cash: Cash charitable contributions.
        charity_non_cash: Non-cash charitable contributions.
        casualty_losses: Casualty and theft losses.
        other: Other itemized deductions.
        total: Sum of all components.
    """

    medical: Decimal
    salt: Decimal
    salt_cap: Decimal
    mortgage_interest: Decimal
    charity_cash: Decimal
    charity_non_cash: Decimal
    casualty_losses: Decimal
    other: Decimal
    total: Decimal


@dataclass
class TaxResult:
    """Complete federal tax computation for one form.

    Tax, credit and deduction amounts are never negative. ``final_tax`` may be
    negative when refundable credits exceed tax, and ``refund_or_owed`` is
    negative when a balance is due.

    Attributes:
        filing_status: Filing status used.
        tax_year: Tax year whose tables were applied.
        total_income: Form 1040 line 9.
        total_adjustments: Schedule 1 adjustments, including new deductions.
        agi: Adjusted gross income.
        deduction_method: "standard" or "itemized", as chosen by the caller.
        deduction: Deduction applied.
        standard_deduction: Standard deduction for the status.
        itemized_deduction: Itemized total, reported even when not used.
        qbi_deduction: Qualified business income deduction.
        taxable_income: Form 1040 line 15.
        ordinary_taxable_income: Portion taxed at ordinary rates.
        preferential_income: Qualified dividends plus net long-term gain.
        regular_tax: Ordinary bracket tax.
        capital_gains_tax: Preferential-rate tax.
        se_tax: Self-employment tax.
        se_tax_deduction: Deductible half of SE tax used in adjustments.
        niit: Net investment income tax.
        total_tax_before_credits: Sum of all taxes.
        nonrefundable_credits: Credits limited to tax.
        refundable_credits: Credits that can produce a refund.
        total_credits: Nonrefundable plus refundable.
        final_tax: Tax after all credits.
        total_payments: Withholding, estimates and prior-year overpayment.
        refund_or_owed: Payments minus final tax; non-negative is a refund.
        is_refund: True when ``refund_or_owed`` is non-negative.
        effective_rate: Income tax divided by taxable income.
        itemized_breakdown: Schedule A detail.
        new_deductions: Temporary 2025 deduction detail.
    """

    filing_status: FilingStatus
    tax_year: int
    total_income: Decimal
    total_adjustments: Decimal
    agi: Decimal
    deduction_method: DeductionType
    deduction: Decimal
    standard_deduction: Decimal
    itemized_deduction: Decimal
    qbi_deduction: Decimal
    taxable_income: Decimal
    ordinary_taxable_income: Decimal
    preferential_income: Decimal
    regular_tax: Decimal
    capital_gains_tax: Decimal
    se_tax: Decimal
    se_tax_deduction: Decimal
    niit: Decimal
    total_tax_before_credits: Decimal
    nonrefundable_credits: Decimal
    refundable_credits: Decimal
    total_credits: Decimal
    final_tax: Decimal
    total_payments: Decimal
    refund_or_owed: Decimal
    is_refund: bool
    effective_rate: Decimal = field(metadata=_RATE)
    itemized_breakdown: ItemizedDeductionBreakdown
    new_deductions: NewDeductions


def _nonneg(value: Decimal) -> Decimal:
    return max(Decimal("0"), value)


def round_to_cents(record: Any) -> Any:
    """Copy a result dataclass with its amounts rounded for presentation.

    Dollar amounts are rounded half-up to cents and rates to four places,
    including those of nested result dataclasses. The pipeline itself keeps
    full precision; rounding is applied only where results leave the engine.

    Args:
        record: A ``TaxResult`` or any other dataclass of Decimal amounts.

    Returns:
        A new instance of the same type.
    """
    changes: dict[str, Any] = {}
    for record_field in fields(record):
        value = getattr(record, record_field.name)
        if isinstance(value, Decimal):
            places = RATE_PLACES if record_field.metadata.get("rate") else CENTS
            changes[record_field.name] = value.quantize(places, rounding=ROUND_HALF_UP)
        elif is_dataclass(value) and not isinstance(value, type):
            changes[record_field.name] = round_to_cents(value)
    return replace(record, **changes)


# =============================================================================
# Income Aggregation
# =============================================================================


def aggregate_income(form: TaxForm, config: TaxYearConfig) -> IncomeSummary:
    """Sum the income lines of a form into total income.

    Schedule D detail is used when present; otherwise ``capital_gain_loss`` is
    treated as a net long-term figure. A net capital loss reduces income by
    at most the annual limit ($3,000, $1,500 married filing separately). The
    excess is not carried forward.
    """
    schedule_c = form.active_schedule_c
    schedule_e = form.active_schedule_e
    schedule_d = form.active_schedule_d

    if schedule_d is not None:
        net_short_term = schedule_d.short_term_gain - abs(schedule_d.short_term_loss)
        net_long_term = schedule_d.long_term_gain - abs(schedule_d.long_term_loss)
    else:
        net_short_term = Decimal("0")
        net_long_term = form.capital_gain_loss

    net_capital_gain = net_short_term + net_long_term
    if net_capital_gain >= Decimal("0"):
        capital_gain_for_agi = net_capital_gain
    else:
        capital_gain_for_agi = -min(config.capital_loss_cap(form.filing_status), -net_capital_gain)

    summary = IncomeSummary(
        wages=form.total_wages,
        interest=form.taxable_interest,
        ordinary_dividends=form.ordinary_dividends,
        qualified_dividends=form.qualified_dividends,
        retirement=form.taxable_ira + form.taxable_pensions,
        social_security=form.taxable_social_security,
        other_income=form.other_income,
        schedule_c=schedule_c.profit if schedule_c is not None else Decimal("0"),
        schedule_e=schedule_e.net if schedule_e is not None else Decimal("0"),
        net_short_term=net_short_term,
        net_long_term=net_long_term,
        net_capital_gain=net_capital_gain,
        capital_gain_for_agi=capital_gain_for_agi,
        total_income=Decimal("0"),
    )
    summary.total_income = (
        summary.wages
        + summary.interest
        + summary.ordinary_dividends
        + summary.retirement
        + summary.social_security
        + summary.other_income
        + summary.schedule_c
        + summary.schedule_e
        + summary.capital_gain_for_agi
    )
    return summary


# =============================================================================
# Adjustments
# =============================================================================


def _ordinary_adjustments(form: TaxForm) -> Decimal:
    """Schedule 1 adjustments other than SE tax and the 2025 deductions."""
    return sum(
        (
            _nonneg(form.educator_expenses),
            _nonneg(form.hsa_deduction),
            _nonneg(form.self_employed_sep_simple),
            _nonneg(form.self_employed_health_insurance),
            _nonneg(form.penalty_early_withdrawal),
            _nonneg(form.alimony_paid),
            _nonneg(form.ira_deduction),
            _nonneg(form.student_loan_interest),
        ),
        Decimal("0"),
    )


def age_at_year_end(birth_date: date, tax_year: int) -> int:
    """Age for tax purposes on December 31 of ``tax_year``.

    A person born on January 1 is considered to reach that age on the
    preceding December 31.
    """
    age = tax_year - birth_date.year
    if (birth_date.month, birth_date.day) == (1, 1):
        age += 1
    return age


def _filer_age(age: int | None, birth_date: date | None, tax_year: int) -> int | None:
    if age is not None:
        return age
    if birth_date is not None:
        return age_at_year_end(birth_date, tax_year)
    return None


def compute_new_deductions(
    form: TaxForm,
    policy: PolicySettings,
    tentative_magi: Decimal,
    tax_year: int,
) -> NewDeductions:
    """Temporary 2025 law deductions after gating, caps and phase-out.

    Tip and overtime deductions phase out linearly over the policy range of
    ``tentative_magi``. Auto-loan interest and the senior bonus are capped but
    not phased out. Everything is zero when the policy disables them.
    """
    if not policy.new_deductions_enabled:
        return NewDeductions(tentative_magi=tentative_magi, phaseout_factor=Decimal("0"))

    factor = policy.phaseout_factor(tentative_magi)

    seniors = 0
    filer_age = _filer_age(form.age, form.birth_date, tax_year)
    if filer_age is not None and filer_age >= policy.senior_age:
        seniors += 1
    if form.filing_status is FilingStatus.MARRIED_JOINT:
        spouse_age = _filer_age(form.spouse_age, form.spouse_birth_date, tax_year)
        if spouse_age is not None and spouse_age >= policy.senior_age:
            seniors += 1

    return NewDeductions(
        tentative_magi=tentative_magi,
        phaseout_factor=factor,
        tips=min(_nonneg(form.tip_income), policy.tip_deduction_cap) * factor,
        overtime=min(_nonneg(form.overtime_income), policy.overtime_deduction_cap) * factor,
        auto_loan_interest=min(_nonneg(form.auto_loan_interest), policy.auto_loan_interest_cap),
        senior_bonus=policy.senior_bonus * seniors,
    )


# =============================================================================
# Deductions
# =============================================================================


def compute_itemized_deductions(
    form: TaxForm,
    agi: Decimal,
    salt_cap: Decimal,
    config: TaxYearConfig,
) -> ItemizedDeductionBreakdown:
    """Total Schedule A deductions.

    Medical expenses count only above 7.5% of AGI and state and local taxes
    are limited to ``salt_cap``. Other items are taken as entered.

    Example:
        >>> breakdown = compute_itemized_deductions(form, Decimal("100000"), Decimal("40000"), config)
        >>> breakdown.medical  # medical_expenses=10000
        Decimal('2500.000')
    """
    medical_floor = _nonneg(agi) * config.medical_floor_rate
    medical = _nonneg(_nonneg(form.medical_expenses) - medical_floor)
    salt = min(_nonneg(form.state_local_taxes) + _nonneg(form.real_estate_taxes), salt_cap)

    mortgage_interest = _nonneg(form.mortgage_interest)
    charity_cash = _nonneg(form.charity_cash)
    charity_non_cash = _nonneg(form.charity_non_cash)
    casualty_losses = _nonneg(form.casualty_losses)
    other = _nonneg(form.other_itemized)

    total = (
        medical
        + salt
        + mortgage_interest
        + charity_cash
        + charity_non_cash
        + casualty_losses
        + other
    )
    return ItemizedDeductionBreakdown(
        medical=medical,
        salt=salt,
        salt_cap=salt_cap,
        mortgage_interest=mortgage_interest,
        charity_cash=charity_cash,
        charity_non_cash=charity_non_cash,
        casualty_losses=casualty_losses,
        other=other,
        total=total,
    )


def _eligible_qbi_income(form: TaxForm, schedule_c_profit: Decimal) -> Decimal:
    k1 = form.schedule_k1
    guaranteed_payments = k1.guaranteed_payments if k1 is not None else Decimal("0")
    partnership_income = form.partnership_income
    if partnership_income == Decimal("0") and k1 is not None:
        partnership_income = k1.ordinary_income
    pass_through = partnership_income + form.s_corp_income - guaranteed_payments
    return _nonneg(schedule_c_profit) + _nonneg(pass_through)


# =============================================================================
# Credits
# =============================================================================


def estimate_dependent_credits(
    dependents: list[Dependent], config: TaxYearConfig
) -> tuple[Decimal, Decimal]:
    """Estimate the child tax credit and the credit for other dependents.

    Qualifying children under the age limit (or of unknown age) earn the
    child tax credit; every other qualifying child or qualifying relative
    earns the other-dependent credit. Income phase-outs are not applied.

    Returns:
        Tuple of (child_tax_credit, other_dependent_credit).
    """
    children = 0
    others = 0
    for dependent in dependents:
        under_age_limit = dependent.age is None or dependent.age < config.child_tax_credit_age_limit
        if dependent.qualifying_child and under_age_limit:
            children += 1
        elif dependent.qualifying_child or dependent.qualifying_relative:
            others += 1
    return (
        config.child_tax_credit_per_child * children,
        config.other_dependent_credit * others,
    )


# =============================================================================
# Pipeline
# =============================================================================


def _config_for_year(tax_year: int) -> TaxYearConfig:
    config = TAX_YEAR_CONFIGS.get(tax_year)
    if config is not None:
        return config
    fallback = TAX_YEAR_CONFIGS.get(settings.default_tax_year, TAX_YEAR_2025)
    logger.warning(
        "tax_year_not_configured",
        tax_year=tax_year,
        fallback_year=fallback.tax_year,
    )
    return fallback


def compute_tax(
    form: TaxForm | Mapping[str, Any],
    config: TaxYearConfig | None = None,
) -> TaxResult:
    """Compute total federal tax, credits and refund for one form.

    Args:
        form: A TaxForm, or a mapping of form fields validated leniently.
        config: Tables to apply. Defaults to the tables for the form's tax
            year, or the configured default year when that year is unknown.

    Returns:
        A freshly built TaxResult. The form is not modified.

    Example:
        >>> result = compute_tax({"filingStatus": "single", "totalWages": 50000})
        >>> result.taxable_income == Decimal("34300")
        True
    """
    tax_form = as_tax_form(form)
    year_config = config if config is not None else _config_for_year(tax_form.tax_year)
    status = tax_form.filing_status

    # Income
    income = aggregate_income(tax_form, year_config)

    # Policy and phase-out on income before the new deductions
    policy = resolve_policy(year_config, status, tax_form.use_obbba_2025)
    ordinary_adjustments = _ordinary_adjustments(tax_form)
    supplied_se_deduction = _nonneg(tax_form.self_employment_tax_deduction)
    tentative_magi = income.total_income - (ordinary_adjustments + supplied_se_deduction)
    new_deductions = compute_new_deductions(
        tax_form, policy, tentative_magi, year_config.tax_year
    )

    # Adjustments and AGI
    se = self_employment_tax(income.schedule_c, income.wages, status, year_config)
    se_tax_deduction = max(supplied_se_deduction, se.deduction)
    total_adjustments = ordinary_adjustments + se_tax_deduction + new_deductions.total
    agi = income.total_income - total_adjustments

    # Deduction, chosen by the caller
    standard_deduction = year_config.standard_deductions[status]
    itemized = compute_itemized_deductions(tax_form, agi, policy.salt_cap, year_config)
    if tax_form.deduction_type is DeductionType.ITEMIZED:
        deduction = itemized.total
    else:
        deduction = standard_deduction

    # QBI and taxable income
    preferential_income = _nonneg(tax_form.qualified_dividends) + _nonneg(income.net_long_term)
    taxable_before_qbi = _nonneg(agi - deduction)
    qbi = qbi_deduction(
        _eligible_qbi_income(tax_form, income.schedule_c),
        taxable_before_qbi,
        preferential_income,
        year_config.qbi_rate,
    )
    taxable_income = _nonneg(agi - deduction - qbi)

    # Income tax on the ordinary slice with preferential income stacked on top
    ordinary_taxable_income = _nonneg(taxable_income - preferential_income)
    regular_tax = bracket_tax(ordinary_taxable_income, year_config.tax_brackets[status])
    capital_gains_tax = stacked_gains_tax(
        ordinary_taxable_income, preferential_income, status, year_config
    )

    # Other taxes
    investment_income = (
        income.interest
        + income.ordinary_dividends
        + _nonneg(income.net_capital_gain)
        + income.schedule_e
    )
    niit = net_investment_income_tax(agi, investment_income, status, year_config)
    total_tax_before_credits = regular_tax + capital_gains_tax + se.tax + niit

    # Credits
    estimated_ctc, estimated_odc = estimate_dependent_credits(tax_form.dependents, year_config)
    nonrefundable_credits = (
        (_nonneg(tax_form.child_tax_credit) or estimated_ctc)
        + (_nonneg(tax_form.credit_other_dependents) or estimated_odc)
        + _nonneg(tax_form.education_credits)
        + _nonneg(tax_form.retirement_savers_credit)
        + _nonneg(tax_form.child_care_credit)
    )
    refundable_credits = _nonneg(tax_form.earned_income_credit) + _nonneg(tax_form.other_credits)
    tax_after_nonrefundable = _nonneg(total_tax_before_credits - nonrefundable_credits)
    final_tax = tax_after_nonrefundable - refundable_credits

    # Settlement
    total_payments = (
        _nonneg(tax_form.total_withholding)
        + _nonneg(tax_form.estimated_tax_payments)
        + _nonneg(tax_form.amount_applied_from_prior_year)
    )
    refund_or_owed = total_payments - final_tax

    income_tax = regular_tax + capital_gains_tax
    effective_rate = income_tax / taxable_income if taxable_income > 0 else Decimal("0")

    result = TaxResult(
        filing_status=status,
        tax_year=year_config.tax_year,
        total_income=income.total_income,
        total_adjustments=total_adjustments,
        agi=agi,
        deduction_method=tax_form.deduction_type,
        deduction=deduction,
        standard_deduction=standard_deduction,
        itemized_deduction=itemized.total,
        qbi_deduction=qbi,
        taxable_income=taxable_income,
        ordinary_taxable_income=ordinary_taxable_income,
        preferential_income=preferential_income,
        regular_tax=regular_tax,
        capital_gains_tax=capital_gains_tax,
        se_tax=se.tax,
        se_tax_deduction=se_tax_deduction,
        niit=niit,
        total_tax_before_credits=total_tax_before_credits,
        nonrefundable_credits=nonrefundable_credits,
        refundable_credits=refundable_credits,
        total_credits=nonrefundable_credits + refundable_credits,
        final_tax=final_tax,
        total_payments=total_payments,
        refund_or_owed=refund_or_owed,
        is_refund=refund_or_owed >= Decimal("0"),
        effective_rate=effective_rate,
        itemized_breakdown=itemized,
        new_deductions=new_deductions,
    )

    logger.debug(
        "federal_tax_computed",
        filing_status=status.value,
        tax_year=year_config.tax_year,
        agi=agi,
        taxable_income=taxable_income,
        final_tax=final_tax,
    )
    return result


def compute_tax_with_overrides(
    form: TaxForm | Mapping[str, Any],
    overrides: Mapping[str, Any],
    config: TaxYearConfig | None = None,
) -> TaxResult:
    """Compute tax for ``form`` with ``overrides`` shallow-merged on top.

    The original form is left untouched; the scenario is an independent form
    and an independent computation.

    Example:
        >>> base = TaxForm(filing_status="marriedJoint", total_wages=Decimal("180000"))
        >>> compute_tax_with_overrides(base, {"filingStatus": "marriedSeparate"}).filing_status
        <FilingStatus.MARRIED_SEPARATE: 'marriedSeparate'>
    """
    return compute_tax(merge_overrides(form, overrides), config)
