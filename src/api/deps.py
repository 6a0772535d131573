"""FastAPI dependency injection for tax table access."""

from fastapi import Request

from src.tax.year_config import TaxYearConfig


async def get_tax_config(request: Request) -> TaxYearConfig | None:
    """Get the tax tables loaded at startup, if any.

    Args:
        request: FastAPI request containing app state.

    Returns:
        TaxYearConfig loaded from TAX_TABLES_PATH, or None to use the
        built-in tables for each form's tax year.
    """
    return getattr(request.app.state, "tax_config", None)
