"""Health check endpoint."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from preop_risk.api.dependencies import get_slot_catalog
from preop_risk.api.models.health import HealthResponse
from preop_risk.domain.ports import AssessmentError
from preop_risk.infrastructure.settings import APP_VERSION

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Reports "degraded" when the configured slot catalog cannot be loaded;
    assessments still work, plans do not.
    """
    try:
        catalog_size = len(get_slot_catalog())
        status = "healthy" if catalog_size > 0 else "degraded"
    except AssessmentError as e:
        logger.warning(f"Slot catalog unavailable: {str(e)}")
        catalog_size = 0
        status = "degraded"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc),
        version=APP_VERSION,
        slot_catalog_size=catalog_size,
    )
