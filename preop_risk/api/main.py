"""Main FastAPI application for the pre-operative risk engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from preop_risk.api.middleware import setup_middleware
from preop_risk.api.routes import assessments, health, slots
from preop_risk.infrastructure.logging_config import setup_logging
from preop_risk.infrastructure.settings import APP_VERSION, settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    setup_logging(use_json=settings.json_logs, log_level=settings.log_level)
    logger.info(f"{settings.app_name} API starting up...")
    logger.info("API documentation available at /api/docs")
    logger.info(f"Slot catalog: {settings.slot_catalog_path or 'built-in reference catalog'}")
    yield
    logger.info(f"{settings.app_name} API shutting down...")


app = FastAPI(
    title="Preop-Risk API",
    description="Pre-operative risk scoring, resource planning and slot recommendation",
    version=APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

setup_middleware(app)

app.include_router(health.router)
app.include_router(slots.router)
app.include_router(assessments.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"{settings.app_name} API",
        "version": APP_VERSION,
        "docs": "/api/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "preop_risk.api.main:app",
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
