"""Slot catalog endpoint."""

from fastapi import APIRouter

from preop_risk.api.dependencies import SlotCatalogDep
from preop_risk.api.models.health import SlotCatalogResponse

router = APIRouter(prefix="/api", tags=["slots"])


@router.get("/slots", response_model=SlotCatalogResponse)
async def list_slots(catalog: SlotCatalogDep) -> SlotCatalogResponse:
    """Return the configured operating room slot catalog."""
    return SlotCatalogResponse(count=len(catalog), slots=list(catalog))
