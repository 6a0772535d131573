"""Filing status comparison.

Recomputes a return under alternative filing statuses and reports the ones
that lower the final tax. This is a pure consumer of the federal pipeline:
each alternative is an independent what-if run, and only ``TaxResult`` fields
are compared.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from src.core.logging import get_logger, scenario_ctx
from src.federal.calculator import TaxResult, compute_tax, compute_tax_with_overrides
from src.federal.form import TaxForm, as_tax_form
from src.tax.filing_status import FilingStatus
from src.tax.year_config import TaxYearConfig

logger = get_logger(__name__)

# Minimum savings before recommending a switch from separate to joint.
MFS_TO_MFJ_MIN_SAVINGS = Decimal("100")


@dataclass
class FilingStatusRecommendation:
    """A filing status that would lower the final tax.

    Attributes:
        current_status: Status on the form.
        recommended_status: Alternative status that was evaluated.
        current_tax: Final tax under the current status.
        alternative_tax: Final tax under the alternative status.
        savings: ``current_tax - alternative_tax``.
        considerations: Eligibility caveats the filer must confirm.
        form_overrides: Overrides that produce the alternative scenario.
    """

    current_status: FilingStatus
    recommended_status: FilingStatus
    current_tax: Decimal
    alternative_tax: Decimal
    savings: Decimal
    considerations: list[str] = field(default_factory=list)
    form_overrides: dict[str, Any] = field(default_factory=dict)


_CONSIDERATIONS: dict[tuple[FilingStatus, FilingStatus], list[str]] = {
    (FilingStatus.MARRIED_JOINT, FilingStatus.MARRIED_SEPARATE): [
        "Separate returns lose access to some credits (EITC, education credits)",
        "Both spouses must itemize or both take the standard deduction",
    ],
    (FilingStatus.MARRIED_SEPARATE, FilingStatus.MARRIED_JOINT): [
        "Both spouses must agree to file jointly",
        "Joint filers are jointly liable for the tax on the return",
    ],
    (FilingStatus.SINGLE, FilingStatus.HEAD_OF_HOUSEHOLD): [
        "Must be unmarried (or considered unmarried) on December 31",
        "Must have paid more than half the cost of keeping up a home",
        "A qualifying person must have lived with you for more than half the year",
    ],
}


def _candidates(form: TaxForm) -> list[tuple[FilingStatus, Decimal]]:
    """Alternative statuses worth evaluating, with the minimum savings required."""
    status = form.filing_status
    if status is FilingStatus.MARRIED_JOINT:
        return [(FilingStatus.MARRIED_SEPARATE, Decimal("0"))]
    if status is FilingStatus.MARRIED_SEPARATE:
        return [(FilingStatus.MARRIED_JOINT, MFS_TO_MFJ_MIN_SAVINGS)]
    if status is FilingStatus.SINGLE and any(
        d.qualifying_child or d.qualifying_relative for d in form.dependents
    ):
        return [(FilingStatus.HEAD_OF_HOUSEHOLD, Decimal("0"))]
    return []


def compare_filing_status(
    form: TaxForm | Mapping[str, Any],
    alternative: FilingStatus,
    config: TaxYearConfig | None = None,
) -> tuple[TaxResult, TaxResult]:
    """Compute the baseline and the alternative-status scenario side by side."""
    baseline = compute_tax(form, config)
    token = scenario_ctx.set(f"filing_status:{alternative.value}")
    try:
        scenario = compute_tax_with_overrides(form, {"filing_status": alternative}, config)
    finally:
        scenario_ctx.reset(token)
    return baseline, scenario


def analyze_filing_status(
    form: TaxForm | Mapping[str, Any],
    config: TaxYearConfig | None = None,
) -> list[FilingStatusRecommendation]:
    """Recommend filing statuses that lower the final tax.

    Married joint filers are compared against filing separately, separate
    filers against filing jointly (only when the savings exceed $100), and
    single filers with a qualifying dependent against head of household.

    Args:
        form: Return to analyze.
        config: Optional tax tables; defaults to the form's tax year.

    Returns:
        Recommendations sorted by savings, largest first. Empty when no
        alternative helps.
    """
    tax_form = as_tax_form(form)
    recommendations: list[FilingStatusRecommendation] = []

    for alternative, min_savings in _candidates(tax_form):
        baseline, scenario = compare_filing_status(tax_form, alternative, config)
        savings = baseline.final_tax - scenario.final_tax
        logger.debug(
            "filing_status_compared",
            current_status=tax_form.filing_status.value,
            alternative_status=alternative.value,
            savings=savings,
        )
        if savings <= min_savings:
            continue
        recommendations.append(
            FilingStatusRecommendation(
                current_status=tax_form.filing_status,
                recommended_status=alternative,
                current_tax=baseline.final_tax,
                alternative_tax=scenario.final_tax,
                savings=savings,
                considerations=list(
                    _CONSIDERATIONS.get((tax_form.filing_status, alternative), [])
                ),
                form_overrides={"filingStatus": alternative.value},
            )
        )

    recommendations.sort(key=lambda rec: rec.savings, reverse=True)
    return recommendations
