"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config.settings import settings
from src.api.routes import router
from src.calculators.tax_data import DEFAULT_FISCAL_YEAR, RATE_TABLES

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: configure logging and report the loaded rate tables."""
    logging.basicConfig(level=settings.log_level)
    logger.info(
        "Starting up with fiscal years %s (default %s)",
        ", ".join(sorted(RATE_TABLES)),
        DEFAULT_FISCAL_YEAR,
    )

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Guyana Tax Calculators", lifespan=lifespan)
    app.include_router(router)
    return app
