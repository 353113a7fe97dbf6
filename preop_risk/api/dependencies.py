"""Dependency injection for the risk API.

The slot catalog is loaded once per process and shared by every request;
tests replace it through ``app.dependency_overrides``.
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from preop_risk.domain.scheduling import TimeSlot
from preop_risk.infrastructure.settings import settings
from preop_risk.infrastructure.slot_catalog import load_slot_catalog

logger = logging.getLogger(__name__)


@lru_cache()
def get_slot_catalog() -> tuple[TimeSlot, ...]:
    """Get the configured slot catalog (cached).

    Raises:
        SourceNotFoundError: If ``PREOP_SLOT_CATALOG`` names a missing file
        ValidationError: If the catalog file is invalid
    """
    catalog = load_slot_catalog(settings.slot_catalog_path)
    logger.debug(f"Slot catalog ready with {len(catalog)} slots")
    return catalog


# Type alias for dependency injection
SlotCatalogDep = Annotated[tuple[TimeSlot, ...], Depends(get_slot_catalog)]
