"""Patient record schema consumed by the risk engine.

This module defines the validated shape of pre-operative patient data. A
``PatientRecord`` is the only input the scoring core accepts; everything that
could make scoring fail (missing fields, non-finite numbers, values outside a
vocabulary) is rejected here, before a single rule is evaluated.

Architecture:
    - Pure domain models with no infrastructure dependencies
    - Models are immutable once constructed (frozen Pydantic V2 models)
    - Wire format keeps the camelCase keys of the intake form
      (``bodyMassIndex``, ``systolicBP``, ``surgeryComplexity`` ...) while
      Python code uses snake_case attribute names
"""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    ValidationError as PydanticValidationError,
)

from preop_risk.domain.enums import Comorbidity, Gender, SurgeryComplexity, SurgeryType
from preop_risk.domain.ports import ValidationError


def _wire(wire_name: str, *aliases: str, **kwargs: Any) -> Any:
    """Field accepting ``wire_name`` (plus aliases) and serialising as ``wire_name``."""
    return Field(
        validation_alias=AliasChoices(wire_name, *aliases),
        serialization_alias=wire_name,
        **kwargs,
    )


_RECORD_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    allow_inf_nan=False,
    str_strip_whitespace=True,
)


class _MeasurementSection(BaseModel):
    """Base for record sections whose values are numbers.

    Numeric strings are coerced (CSV cells arrive as text), but booleans are
    refused rather than read as 0 and 1.
    """

    @field_validator("*", mode="before")
    @classmethod
    def reject_booleans(cls, v):
        if isinstance(v, bool):
            raise ValueError("must be a number, not a boolean")
        return v


class Demographics(_MeasurementSection):
    """Patient demographics relevant to surgical risk.

    Parameters:
        age: Age in whole years
        gender: Gender (Male, Female or Other)
        body_mass_index: Body mass index in kg/m2
    """

    age: int = Field(..., ge=0, description="Age in years")
    gender: Gender = Field(..., description="Gender")
    body_mass_index: float = _wire(
        "bodyMassIndex", "body_mass_index", "bmi", gt=0, description="Body mass index (kg/m2)"
    )

    @field_validator("gender", mode="before")
    @classmethod
    def normalize_gender(cls, v):
        if v is None:
            return v
        return Gender.parse(v)

    model_config = _RECORD_CONFIG


class Vitals(_MeasurementSection):
    """Pre-operative vital signs."""

    systolic_bp: int = _wire("systolicBP", "systolic_bp", description="Systolic blood pressure (mmHg)")
    diastolic_bp: int = _wire("diastolicBP", "diastolic_bp", description="Diastolic blood pressure (mmHg)")
    heart_rate: int = _wire("heartRate", "heart_rate", description="Heart rate (bpm)")
    temperature: float = Field(..., description="Body temperature")
    oxygen_saturation: int = _wire(
        "oxygenSaturation", "oxygen_saturation", ge=0, le=100, description="SpO2 (percent)"
    )

    model_config = _RECORD_CONFIG


class LabPanel(_MeasurementSection):
    """Pre-operative laboratory results."""

    hemoglobin: float = Field(..., description="Hemoglobin (g/dL)")
    white_blood_cells: float = _wire(
        "whiteBloodCells", "white_blood_cells", description="White blood cells (x10^3/uL)"
    )
    platelets: int = Field(..., description="Platelets (x10^3/uL)")
    creatinine: float = Field(..., description="Creatinine (mg/dL)")
    glucose: int = Field(..., description="Glucose (mg/dL)")

    model_config = _RECORD_CONFIG


class PatientRecord(BaseModel):
    """Validated pre-operative patient record.

    Comorbidities are stored as a set: duplicates collapse and order carries
    no meaning. String input may list several conditions separated by
    ``;``, ``|`` or ``,``.

    Parameters:
        demographics: Age, gender and BMI
        vitals: Vital signs
        labs: Laboratory panel
        comorbidities: Known conditions from the fixed comorbidity vocabulary
        surgery_type: Surgical specialty
        surgery_complexity: Procedure complexity
    """

    demographics: Demographics
    vitals: Vitals
    labs: LabPanel
    comorbidities: frozenset[Comorbidity] = Field(
        default_factory=frozenset, description="Known comorbid conditions"
    )
    surgery_type: SurgeryType = _wire("surgeryType", "surgery_type", description="Surgical specialty")
    surgery_complexity: SurgeryComplexity = _wire(
        "surgeryComplexity", "surgery_complexity", description="Procedure complexity"
    )

    @field_validator("comorbidities", mode="before")
    @classmethod
    def parse_comorbidities(cls, v) -> frozenset[Comorbidity]:
        """Normalise comorbidity names and collapse duplicates.

        Raises:
            ValueError: If any name is outside the comorbidity vocabulary
        """
        if v is None:
            return frozenset()
        if isinstance(v, str):
            for separator in ("|", ","):
                v = v.replace(separator, ";")
            v = [part for part in v.split(";") if part.strip()]
        if not isinstance(v, (list, tuple, set, frozenset)):
            raise ValueError(f"comorbidities must be a list of condition names, got {type(v).__name__}")
        return frozenset(Comorbidity.parse(item) for item in v)

    @field_validator("surgery_type", mode="before")
    @classmethod
    def normalize_surgery_type(cls, v):
        if v is None:
            return v
        return SurgeryType.parse(v)

    @field_validator("surgery_complexity", mode="before")
    @classmethod
    def normalize_surgery_complexity(cls, v):
        if v is None:
            return v
        return SurgeryComplexity.parse(v)

    @field_serializer("comorbidities")
    def serialize_comorbidities(self, comorbidities: frozenset[Comorbidity]) -> list[str]:
        # Vocabulary order keeps serialised output stable
        return [c.value for c in Comorbidity if c in comorbidities]

    def has_comorbidity(self, condition: Comorbidity) -> bool:
        return condition in self.comorbidities

    model_config = _RECORD_CONFIG


def validate_patient_record(data: Any, source: Optional[str] = None) -> PatientRecord:
    """Validate raw input into a PatientRecord.

    Parameters:
        data: A PatientRecord (returned unchanged) or a mapping in wire format
        source: Optional source identifier attached to the error

    Returns:
        PatientRecord: The validated, immutable record

    Raises:
        ValidationError: If the data is not a mapping or fails schema validation
    """
    if isinstance(data, PatientRecord):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError(
            f"Patient record must be a mapping, got {type(data).__name__}",
            source=source,
            details={"errors": []},
        )

    try:
        return PatientRecord.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        summary = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in errors
        )
        raise ValidationError(
            f"Patient record failed validation ({len(errors)} error(s)): {summary}",
            source=source,
            details={"errors": errors, "error_count": len(errors)},
        ) from e


# Default values of the intake form
REFERENCE_PATIENT_DATA: dict = {
    "demographics": {"age": 45, "gender": "Female", "bodyMassIndex": 28.5},
    "vitals": {
        "systolicBP": 140,
        "diastolicBP": 90,
        "heartRate": 78,
        "temperature": 98.6,
        "oxygenSaturation": 98,
    },
    "labs": {
        "hemoglobin": 12.5,
        "whiteBloodCells": 7.2,
        "platelets": 250,
        "creatinine": 1.1,
        "glucose": 110,
    },
    "comorbidities": ["Hypertension"],
    "surgeryType": "Orthopedic",
    "surgeryComplexity": "Moderate",
}


def reference_patient_record() -> PatientRecord:
    """Return the intake form's default patient record."""
    return PatientRecord.model_validate(REFERENCE_PATIENT_DATA)
