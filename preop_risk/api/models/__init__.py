"""Response models for the risk API."""

from preop_risk.api.models.health import HealthResponse, SlotCatalogResponse

__all__ = ["HealthResponse", "SlotCatalogResponse"]
