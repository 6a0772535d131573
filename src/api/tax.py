"""Tax computation endpoints.

Results are computed at full precision and rounded to cents on the way out.
"""

from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.api.deps import get_tax_config
from src.core.logging import get_logger
from src.federal.calculator import (
    TaxResult,
    compute_tax,
    compute_tax_with_overrides,
    round_to_cents,
)
from src.federal.form import TaxForm
from src.optimizations.filing_status import FilingStatusRecommendation, analyze_filing_status
from src.tax.year_config import TaxYearConfig

logger = get_logger(__name__)

router = APIRouter(prefix="/api/tax", tags=["tax"])

TaxConfig = Annotated[TaxYearConfig | None, Depends(get_tax_config)]


class WhatIfRequest(BaseModel):
    """A form plus the fields to replace for the scenario."""

    form: TaxForm
    overrides: dict[str, Any] = Field(default_factory=dict)


class WhatIfResponse(BaseModel):
    """Baseline and scenario results with the change in final tax."""

    baseline: TaxResult
    scenario: TaxResult
    final_tax_difference: Decimal


class FilingStatusResponse(BaseModel):
    """Current result and any filing status that would lower it."""

    current: TaxResult
    recommendations: list[FilingStatusRecommendation]


@router.post("/compute", response_model=TaxResult)
async def compute(form: TaxForm, config: TaxConfig) -> TaxResult:
    """Compute federal tax for a form.

    Returns:
        TaxResult with the full income to refund breakdown.
    """
    result = round_to_cents(compute_tax(form, config))
    logger.info(
        "tax_compute_request",
        filing_status=result.filing_status.value,
        tax_year=result.tax_year,
        is_refund=result.is_refund,
    )
    return result


@router.post("/what-if", response_model=WhatIfResponse)
async def what_if(request: WhatIfRequest, config: TaxConfig) -> WhatIfResponse:
    """Compare a form against the same form with overrides applied.

    Returns:
        WhatIfResponse; a negative difference means the scenario lowers tax.
    """
    baseline = round_to_cents(compute_tax(request.form, config))
    scenario = round_to_cents(
        compute_tax_with_overrides(request.form, request.overrides, config)
    )
    logger.info("tax_what_if_request", overridden_fields=sorted(request.overrides))
    return WhatIfResponse(
        baseline=baseline,
        scenario=scenario,
        final_tax_difference=scenario.final_tax - baseline.final_tax,
    )


@router.post("/filing-status", response_model=FilingStatusResponse)
async def filing_status(form: TaxForm, config: TaxConfig) -> FilingStatusResponse:
    """Recommend filing statuses that would lower the final tax."""
    return FilingStatusResponse(
        current=round_to_cents(compute_tax(form, config)),
        recommendations=[round_to_cents(rec) for rec in analyze_filing_status(form, config)],
    )
