"""Scheduling value objects derived from a risk assessment.

The slot catalog is reference data supplied by configuration; these models
only describe it and the annotations the slot recommender attaches to it.
"""

from datetime import date
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field

from preop_risk.domain.enums import SurgeryComplexity
from preop_risk.domain.risk_assessment import RiskAssessment

_VALUE_CONFIG = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)


class TimeSlot(BaseModel):
    """A bookable operating room slot.

    Parameters:
        slot_id: Catalog identifier
        start_time: Time of day label (e.g. "07:30 AM")
        scheduled_date: Calendar date of the slot
        operating_room: Operating room identifier (e.g. "OR-1")
        surgical_team: Surgical team identifier (e.g. "Team A")
    """

    slot_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("id", "slot_id"), serialization_alias="id"
    )
    start_time: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("time", "start_time"), serialization_alias="time"
    )
    scheduled_date: date = Field(
        ..., validation_alias=AliasChoices("date", "scheduled_date"), serialization_alias="date"
    )
    operating_room: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("room", "operating_room"), serialization_alias="room"
    )
    surgical_team: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("team", "surgical_team"), serialization_alias="team"
    )

    model_config = _VALUE_CONFIG


class AnnotatedSlot(BaseModel):
    """A catalog slot with the recommender's verdict attached."""

    slot: TimeSlot
    recommended: bool
    rationale: str

    model_config = _VALUE_CONFIG


class DurationEstimate(BaseModel):
    """Informational surgery duration estimate.

    Parameters:
        complexity: Procedure complexity the estimate is based on
        base_range: Duration range for the complexity (e.g. "2-4 hours")
        buffer_minutes: Extra time reserved for high-risk patients
        buffer_note: Text describing the buffer, if any
    """

    complexity: SurgeryComplexity
    base_range: str = Field(..., serialization_alias="baseRange")
    buffer_minutes: int = Field(default=0, ge=0, serialization_alias="bufferMinutes")
    buffer_note: Optional[str] = Field(default=None, serialization_alias="bufferNote")

    @computed_field
    @property
    def display(self) -> str:
        if self.buffer_note:
            return f"{self.base_range} {self.buffer_note}"
        return self.base_range

    model_config = _VALUE_CONFIG


class SurgicalPlan(BaseModel):
    """Everything derived for one patient: risk, resources, slots and timing."""

    assessment: RiskAssessment
    required_resources: tuple[str, ...] = Field(default=(), serialization_alias="requiredResources")
    slots: tuple[AnnotatedSlot, ...] = ()
    duration: DurationEstimate
    advisories: tuple[str, ...] = ()

    def recommended_slots(self) -> list[AnnotatedSlot]:
        return [s for s in self.slots if s.recommended]

    model_config = _VALUE_CONFIG
