"""Service status and catalog response models."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from preop_risk.domain.scheduling import TimeSlot


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Overall service status
        timestamp: Current timestamp
        version: Application version
        slot_catalog_size: Number of slots in the configured catalog
    """
    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Current UTC timestamp")
    version: str = Field(..., description="Application version")
    slot_catalog_size: int = Field(..., ge=0, alias="slotCatalogSize")

    model_config = ConfigDict(populate_by_name=True)


class SlotCatalogResponse(BaseModel):
    """The configured operating room slot catalog."""
    count: int = Field(..., ge=0)
    slots: list[TimeSlot]
