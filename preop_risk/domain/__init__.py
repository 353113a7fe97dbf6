"""Domain layer for the pre-operative risk engine.

This package contains the patient and assessment schemas and the pure
scoring, resource and scheduling rules. Domain models depend on nothing
beyond Pydantic.
"""

from .enums import Comorbidity, Gender, RiskTier, SurgeryComplexity, SurgeryType
from .patient_record import (
    Demographics,
    LabPanel,
    PatientRecord,
    Vitals,
    reference_patient_record,
    validate_patient_record,
)
from .risk_assessment import RiskAssessment, RiskFactor
from .scheduling import AnnotatedSlot, DurationEstimate, SurgicalPlan, TimeSlot

__all__ = [
    "Comorbidity",
    "Gender",
    "RiskTier",
    "SurgeryComplexity",
    "SurgeryType",
    "Demographics",
    "LabPanel",
    "PatientRecord",
    "Vitals",
    "reference_patient_record",
    "validate_patient_record",
    "RiskAssessment",
    "RiskFactor",
    "AnnotatedSlot",
    "DurationEstimate",
    "SurgicalPlan",
    "TimeSlot",
]
