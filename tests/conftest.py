"""Pytest configuration and shared fixtures for tests."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from src.federal.form import TaxForm
from src.main import app
from src.tax.year_config import TAX_YEAR_2025, TaxYearConfig


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests.

    Returns:
        Backend name string.
    """
    return "asyncio"


@pytest.fixture
def config_2025() -> TaxYearConfig:
    """2025 tax tables.

    Returns:
        The built-in 2025 TaxYearConfig.
    """
    return TAX_YEAR_2025


@pytest.fixture
def single_w2_form() -> TaxForm:
    """Single filer with $50,000 of wages and $6,000 withheld.

    Returns:
        TaxForm for a simple W-2 return.
    """
    return TaxForm(
        filing_status="single",
        total_wages=Decimal("50000"),
        total_withholding=Decimal("6000"),
    )


@pytest.fixture
def client() -> TestClient:
    """Create a test client for API testing.

    Returns:
        FastAPI TestClient instance.
    """
    return TestClient(app)
