"""FastAPI application entry point with lifespan management."""

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.health import router as health_router
from src.api.middleware import RequestContextMiddleware
from src.api.tax import router as tax_router
from src.core.config import settings
from src.core.logging import configure_logging, get_logger
from src.tax.loader import TaxTableLoadError, load_tax_year_config

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle resources.

    Startup:
        - Configure structured logging
        - Load custom tax tables when TAX_TABLES_PATH is set
    """
    # Configure logging first
    configure_logging()
    logger.info("Starting application", environment=settings.environment)

    app.state.tax_config = None
    if settings.tax_tables_path:
        try:
            app.state.tax_config = load_tax_year_config(settings.tax_tables_path)
        except TaxTableLoadError as e:
            logger.error(
                "tax_tables_load_failed",
                path=str(e.path),
                errors=e.errors,
            )
            raise
        logger.info(
            "Tax tables loaded",
            path=settings.tax_tables_path,
            tax_year=app.state.tax_config.tax_year,
        )

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="Federal Tax Engine",
    description="US federal individual income tax computation",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware for browser clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request context middleware
app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health_router)
app.include_router(tax_router)
