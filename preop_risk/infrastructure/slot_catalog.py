"""Operating room slot catalog.

The catalog is reference data: a list of bookable slots in wire format. The
built-in reference catalog is used unless ``PREOP_SLOT_CATALOG`` points at a
JSON file with the same layout.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from preop_risk.domain.ports import SourceNotFoundError, ValidationError
from preop_risk.domain.scheduling import TimeSlot

logger = logging.getLogger(__name__)

DEFAULT_SLOT_CATALOG_DATA: list[dict[str, Any]] = [
    {"id": "1", "time": "07:30 AM", "date": "2024-01-15", "room": "OR-1", "team": "Team A"},
    {"id": "2", "time": "09:00 AM", "date": "2024-01-15", "room": "OR-2", "team": "Team B"},
    {"id": "3", "time": "11:30 AM", "date": "2024-01-15", "room": "OR-3", "team": "Team C"},
    {"id": "4", "time": "02:00 PM", "date": "2024-01-16", "room": "OR-1", "team": "Team A"},
]

_CATALOG_ADAPTER = TypeAdapter(tuple[TimeSlot, ...])


def parse_slot_catalog(data: Any, source: Optional[str] = None) -> tuple[TimeSlot, ...]:
    """Validate raw catalog data (a list of slot objects).

    Raises:
        ValidationError: If the data is not a list of valid slots, or slot
            ids repeat
    """
    if isinstance(data, dict) and isinstance(data.get("slots"), list):
        data = data["slots"]
    if not isinstance(data, list):
        raise ValidationError(
            f"Slot catalog must be a list of slots, got {type(data).__name__}",
            source=source
        )

    try:
        catalog = _CATALOG_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationError(
            f"Slot catalog failed validation ({len(errors)} error(s))",
            source=source,
            details={"errors": errors, "error_count": len(errors)}
        ) from e

    slot_ids = [slot.slot_id for slot in catalog]
    duplicates = sorted({slot_id for slot_id in slot_ids if slot_ids.count(slot_id) > 1})
    if duplicates:
        raise ValidationError(
            f"Slot catalog has duplicate slot ids: {', '.join(duplicates)}",
            source=source,
            details={"duplicate_ids": duplicates}
        )
    return catalog


DEFAULT_SLOT_CATALOG: tuple[TimeSlot, ...] = parse_slot_catalog(DEFAULT_SLOT_CATALOG_DATA)


def load_slot_catalog(path: Optional[Union[str, Path]] = None) -> tuple[TimeSlot, ...]:
    """Load the slot catalog from ``path``, or the reference catalog if None.

    Raises:
        SourceNotFoundError: If the file does not exist or cannot be read
        ValidationError: If the file is not valid JSON or not a valid catalog
    """
    if path is None:
        return DEFAULT_SLOT_CATALOG

    catalog_path = Path(path)
    source = str(catalog_path)
    if not catalog_path.exists():
        raise SourceNotFoundError(f"Slot catalog not found: {source}", source=source)

    try:
        with open(catalog_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Invalid JSON in slot catalog {source}: {str(e)}", source=source) from e
    except OSError as e:
        raise SourceNotFoundError(f"Cannot read slot catalog {source}: {str(e)}", source=source) from e

    catalog = parse_slot_catalog(data, source=source)
    logger.info(f"Loaded {len(catalog)} slots from {source}")
    return catalog
