"""Controlled vocabularies for pre-operative risk assessment.

Every enumerated value the risk engine depends on from its caller lives here.
Values are the canonical spellings used on the wire; ``parse`` accepts any
casing and surrounding whitespace and rejects everything else.
"""

from enum import Enum


class _Vocabulary(str, Enum):
    """Base for string vocabularies with case-insensitive lookup."""

    @classmethod
    def parse(cls, value):
        """Return the member matching ``value`` ignoring case.

        Raises:
            ValueError: If ``value`` is not part of the vocabulary
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        allowed = ", ".join(member.value for member in cls)
        raise ValueError(f"'{value}' is not a valid {cls.__name__}. Allowed: {allowed}")


class Gender(_Vocabulary):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Comorbidity(_Vocabulary):
    DIABETES = "Diabetes"
    HYPERTENSION = "Hypertension"
    HEART_DISEASE = "Heart Disease"
    COPD = "COPD"
    KIDNEY_DISEASE = "Kidney Disease"
    OBESITY = "Obesity"


class SurgeryType(_Vocabulary):
    ORTHOPEDIC = "Orthopedic"
    CARDIAC = "Cardiac"
    GENERAL = "General"
    NEUROLOGICAL = "Neurological"
    VASCULAR = "Vascular"


class SurgeryComplexity(_Vocabulary):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


class RiskTier(_Vocabulary):
    """Aggregated risk level of an assessment."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
