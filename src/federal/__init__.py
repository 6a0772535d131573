"""Federal income tax engine.

This package computes a filer's federal income tax for one year from a
``TaxForm``:

- Bracket engine: progressive marginal-rate tax
- Capital gains stacker: 0%/15%/20% tax on preferential income
- Self-employment tax with wage-base and Additional Medicare interactions
- Net Investment Income Tax
- QBI deduction limitation
- The pipeline combining them into a ``TaxResult``, plus a what-if variant
"""

from src.federal.brackets import bracket_tax
from src.federal.calculator import (
    IncomeSummary,
    ItemizedDeductionBreakdown,
    NewDeductions,
    TaxResult,
    aggregate_income,
    compute_itemized_deductions,
    compute_tax,
    compute_tax_with_overrides,
    estimate_dependent_credits,
    round_to_cents,
)
from src.federal.capital_gains import stack_preferential_income, stacked_gains_tax
from src.federal.form import (
    DeductionType,
    Dependent,
    ScheduleC,
    ScheduleD,
    ScheduleE,
    ScheduleK1,
    TaxForm,
    merge_overrides,
)
from src.federal.niit import net_investment_income_tax
from src.federal.qbi import qbi_deduction
from src.federal.self_employment import SelfEmploymentTax, self_employment_tax

__all__ = [
    # Input
    "TaxForm",
    "Dependent",
    "DeductionType",
    "ScheduleC",
    "ScheduleD",
    "ScheduleE",
    "ScheduleK1",
    "merge_overrides",
    # Results
    "IncomeSummary",
    "ItemizedDeductionBreakdown",
    "NewDeductions",
    "SelfEmploymentTax",
    "TaxResult",
    # Components
    "bracket_tax",
    "stack_preferential_income",
    "stacked_gains_tax",
    "self_employment_tax",
    "net_investment_income_tax",
    "qbi_deduction",
    # Pipeline
    "aggregate_income",
    "compute_itemized_deductions",
    "estimate_dependent_credits",
    "compute_tax",
    "compute_tax_with_overrides",
    "round_to_cents",
]
