"""API module exports."""

from src.api.deps import get_tax_config
from src.api.health import router as health_router
from src.api.tax import router as tax_router

__all__ = [
    "get_tax_config",
    "health_router",
    "tax_router",
]
