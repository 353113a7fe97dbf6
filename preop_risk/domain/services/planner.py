"""Surgical planner - one call from patient record to full plan."""

from typing import Any, Mapping, Sequence, Union

from preop_risk.domain.patient_record import PatientRecord, validate_patient_record
from preop_risk.domain.scheduling import SurgicalPlan, TimeSlot
from preop_risk.domain.services.resource_advisor import derive_required_resources
from preop_risk.domain.services.risk_engine import assess_risk
from preop_risk.domain.services.slot_recommender import (
    estimate_duration,
    recommend_slots,
    scheduling_advisories,
)


def plan_surgery(
    record: Union[PatientRecord, Mapping[str, Any]],
    catalog: Sequence[TimeSlot],
) -> SurgicalPlan:
    """Assess a patient and derive resources, slots, duration and advisories.

    Raises:
        ValidationError: If ``record`` is not a structurally valid patient record
    """
    patient = validate_patient_record(record)
    assessment = assess_risk(patient)
    return SurgicalPlan(
        assessment=assessment,
        required_resources=derive_required_resources(assessment, patient),
        slots=recommend_slots(assessment, catalog),
        duration=estimate_duration(patient.surgery_complexity, assessment),
        advisories=scheduling_advisories(assessment),
    )
