"""Tests for patient record validation and the controlled vocabularies."""

import math

import pytest

from preop_risk.domain.enums import Comorbidity, Gender, SurgeryComplexity, SurgeryType
from preop_risk.domain.patient_record import (
    PatientRecord,
    reference_patient_record,
    validate_patient_record,
)
from preop_risk.domain.ports import ValidationError


class TestVocabularies:
    """Test case-insensitive vocabulary parsing."""

    def test_parse_ignores_case_and_whitespace(self):
        assert Gender.parse("  female ") is Gender.FEMALE
        assert Comorbidity.parse("heart disease") is Comorbidity.HEART_DISEASE
        assert SurgeryComplexity.parse("HIGH") is SurgeryComplexity.HIGH

    def test_parse_returns_members_unchanged(self):
        assert SurgeryType.parse(SurgeryType.CARDIAC) is SurgeryType.CARDIAC

    def test_parse_rejects_unknown_values(self):
        with pytest.raises(ValueError, match="Allowed: Low, Moderate, High"):
            SurgeryComplexity.parse("Extreme")


class TestPatientRecordValidation:
    """Test PatientRecord construction from wire-format data."""

    def test_reference_record(self):
        record = reference_patient_record()

        assert record.demographics.age == 45
        assert record.demographics.gender is Gender.FEMALE
        assert record.demographics.body_mass_index == 28.5
        assert record.vitals.systolic_bp == 140
        assert record.labs.hemoglobin == 12.5
        assert record.comorbidities == frozenset({Comorbidity.HYPERTENSION})
        assert record.surgery_type is SurgeryType.ORTHOPEDIC
        assert record.surgery_complexity is SurgeryComplexity.MODERATE

    def test_snake_case_keys_are_accepted(self, reference_data):
        reference_data["demographics"] = {"age": 50, "gender": "Male", "bmi": 24.0}
        reference_data["surgery_type"] = reference_data.pop("surgeryType")

        record = validate_patient_record(reference_data)

        assert record.demographics.body_mass_index == 24.0
        assert record.surgery_type is SurgeryType.ORTHOPEDIC

    def test_comorbidities_collapse_duplicates(self, reference_data):
        reference_data["comorbidities"] = ["Diabetes", "diabetes", "COPD"]

        record = validate_patient_record(reference_data)

        assert record.comorbidities == frozenset({Comorbidity.DIABETES, Comorbidity.COPD})

    def test_comorbidities_from_delimited_string(self, reference_data):
        reference_data["comorbidities"] = "Diabetes; Kidney Disease|Obesity"

        record = validate_patient_record(reference_data)

        assert record.has_comorbidity(Comorbidity.KIDNEY_DISEASE)
        assert record.has_comorbidity(Comorbidity.OBESITY)
        assert len(record.comorbidities) == 3

    def test_comorbidities_default_to_empty(self, reference_data):
        del reference_data["comorbidities"]

        record = validate_patient_record(reference_data)

        assert record.comorbidities == frozenset()

    def test_record_is_immutable(self):
        record = reference_patient_record()

        with pytest.raises(Exception):
            record.surgery_complexity = SurgeryComplexity.HIGH

    def test_passes_existing_record_through(self):
        record = reference_patient_record()

        assert validate_patient_record(record) is record

    def test_serializes_to_wire_format(self):
        data = reference_patient_record().model_dump(mode="json", by_alias=True)

        assert data["demographics"]["bodyMassIndex"] == 28.5
        assert data["vitals"]["systolicBP"] == 140
        assert data["labs"]["whiteBloodCells"] == 7.2
        assert data["comorbidities"] == ["Hypertension"]
        assert data["surgeryComplexity"] == "Moderate"


class TestPatientRecordRejections:
    """Test that structurally invalid input never reaches scoring."""

    def test_missing_field(self, reference_data):
        del reference_data["labs"]["hemoglobin"]

        with pytest.raises(ValidationError) as exc_info:
            validate_patient_record(reference_data, source="form")

        assert "labs.hemoglobin" in str(exc_info.value)
        assert exc_info.value.source == "form"
        assert exc_info.value.details["error_count"] == 1

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_numbers(self, reference_data, value):
        reference_data["demographics"]["bodyMassIndex"] = value

        with pytest.raises(ValidationError):
            validate_patient_record(reference_data)

    def test_unknown_surgery_complexity(self, reference_data):
        reference_data["surgeryComplexity"] = "Extreme"

        with pytest.raises(ValidationError, match="surgeryComplexity"):
            validate_patient_record(reference_data)

    def test_unknown_comorbidity(self, reference_data):
        reference_data["comorbidities"] = ["Hypertension", "Gout"]

        with pytest.raises(ValidationError, match="Gout"):
            validate_patient_record(reference_data)

    def test_negative_age(self, reference_data):
        reference_data["demographics"]["age"] = -1

        with pytest.raises(ValidationError):
            validate_patient_record(reference_data)

    @pytest.mark.parametrize("section, key", [
        ("demographics", "age"),
        ("demographics", "bodyMassIndex"),
        ("vitals", "heartRate"),
        ("labs", "hemoglobin"),
    ])
    def test_boolean_measurements(self, reference_data, section, key):
        reference_data[section][key] = True

        with pytest.raises(ValidationError, match=f"{section}.{key}"):
            validate_patient_record(reference_data)

    def test_numeric_strings_are_coerced(self, reference_data):
        reference_data["demographics"]["age"] = "45"
        reference_data["labs"]["hemoglobin"] = "12.5"

        record = validate_patient_record(reference_data)

        assert record.demographics.age == 45
        assert record.labs.hemoglobin == 12.5

    def test_non_numeric_string(self, reference_data):
        reference_data["vitals"]["systolicBP"] = "high"

        with pytest.raises(ValidationError, match="vitals.systolicBP"):
            validate_patient_record(reference_data)

    def test_oxygen_saturation_above_100(self, reference_data):
        reference_data["vitals"]["oxygenSaturation"] = 101

        with pytest.raises(ValidationError):
            validate_patient_record(reference_data)

    def test_non_mapping_input(self):
        with pytest.raises(ValidationError, match="must be a mapping"):
            validate_patient_record(["not", "a", "record"])

    def test_collects_every_error(self, reference_data):
        del reference_data["vitals"]
        reference_data["surgeryType"] = "Dental"

        with pytest.raises(ValidationError) as exc_info:
            validate_patient_record(reference_data)

        assert exc_info.value.details["error_count"] == 2

    def test_model_validate_directly(self, reference_data):
        assert isinstance(PatientRecord.model_validate(reference_data), PatientRecord)
