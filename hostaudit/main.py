"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hostaudit import __version__
from hostaudit.api.v1 import router as v1_router
from hostaudit.config.settings import get_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log which data sources are configured at startup."""
    logger.info("Starting up Host Audit API...")

    config = get_config()
    logger.info(
        f"Data sources - PageSpeed key: {config.pagespeed_api_key is not None}, "
        f"DataForSEO: {config.has_dataforseo_credentials}, "
        f"SEMrush: {config.semrush_api_key is not None}"
    )

    try:
        yield
    finally:
        logger.info("Host Audit API shutdown complete")


app = FastAPI(
    title="Host Audit API",
    description="Direct-booking website audits combining HTML analysis, PageSpeed Insights and SEO providers",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(v1_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": "Host Audit API",
        "version": __version__,
        "docs": "/docs",
    }
