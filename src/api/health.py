"""Health check endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from src.core.config import settings
from src.tax.year_config import TAX_YEAR_CONFIGS

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    tax_years: list[int]
    default_tax_year: int
    custom_tables: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report which tax years the engine can compute.

    Returns:
        HealthResponse listing built-in tax years and whether custom
        tables were loaded at startup.
    """
    custom = getattr(request.app.state, "tax_config", None)
    years = set(TAX_YEAR_CONFIGS)
    if custom is not None:
        years.add(custom.tax_year)

    return HealthResponse(
        status="ok",
        tax_years=sorted(years),
        default_tax_year=settings.default_tax_year,
        custom_tables=custom is not None,
    )
