"""Tests for the risk rule engine and the RiskAssessment model."""

import pytest

from preop_risk.domain.enums import RiskTier
from preop_risk.domain.patient_record import validate_patient_record
from preop_risk.domain.ports import ValidationError
from preop_risk.domain.risk_assessment import RiskAssessment, RiskFactor, tier_for_score
from preop_risk.domain.services import risk_engine
from preop_risk.domain.services.risk_engine import (
    BASE_SCORES,
    INFECTION,
    MORTALITY,
    RISK_RULES,
    RiskRule,
    assess_risk,
)

# Minimal record edits that make each rule fire
RULE_TRIGGERS = {
    "Advanced Age": lambda data: data["demographics"].update(age=72),
    "Obesity": lambda data: data["demographics"].update(bodyMassIndex=32),
    "Diabetes": lambda data: data["comorbidities"].append("Diabetes"),
    "Hypertension": lambda data: data["comorbidities"].append("Hypertension"),
    "Complex Surgery": lambda data: data.update(surgeryComplexity="High"),
    "Low Hemoglobin": lambda data: data["labs"].update(hemoglobin=8),
}


class TestBaselineScenario:
    """Test the intake form's default patient."""

    def test_scores(self, reference_data):
        assessment = assess_risk(reference_data)

        assert assessment.mortality_risk == pytest.approx(3.3)
        assert assessment.infection_risk == pytest.approx(8.0)
        assert assessment.bleeding_risk == pytest.approx(7.5)
        assert assessment.readmission_risk == pytest.approx(12.0)

    def test_tier_and_factors(self, reference_data):
        assessment = assess_risk(reference_data)

        assert assessment.overall_risk is RiskTier.MODERATE
        assert assessment.factor_names() == ["Hypertension"]
        assert assessment.risk_factors[0].impact == pytest.approx(0.5)
        assert assessment.risk_factors[0].explanation == (
            "Hypertension increases cardiovascular and bleeding risks"
        )

    def test_no_rules_gives_base_scores(self, low_risk_data):
        assessment = assess_risk(low_risk_data)

        assert assessment.risk_factors == ()
        assert assessment.mortality_risk == pytest.approx(BASE_SCORES["mortality"])
        assert assessment.readmission_risk == pytest.approx(BASE_SCORES["readmission"])
        # Readmission base of 12 is already above the Moderate threshold
        assert assessment.overall_risk is RiskTier.MODERATE


class TestAllRulesScenario:
    """Test a patient matching every rule in the table."""

    def test_factors_in_rule_order(self, all_rules_data):
        assessment = assess_risk(all_rules_data)

        assert assessment.factor_names() == [
            "Advanced Age",
            "Obesity",
            "Diabetes",
            "Hypertension",
            "Complex Surgery",
            "Low Hemoglobin",
        ]

    def test_scores_are_rule_sums(self, all_rules_data):
        assessment = assess_risk(all_rules_data)

        assert assessment.mortality_risk == pytest.approx(8.0)
        assert assessment.infection_risk == pytest.approx(20.0)
        assert assessment.bleeding_risk == pytest.approx(16.0)
        assert assessment.readmission_risk == pytest.approx(15.0)
        assert assessment.overall_risk is RiskTier.HIGH

    def test_literal_record(self):
        assessment = assess_risk({
            "demographics": {"age": 70, "gender": "Male", "bodyMassIndex": 32},
            "vitals": {
                "systolicBP": 150,
                "diastolicBP": 95,
                "heartRate": 88,
                "temperature": 99.1,
                "oxygenSaturation": 95,
            },
            "labs": {
                "hemoglobin": 8,
                "whiteBloodCells": 8.0,
                "platelets": 210,
                "creatinine": 1.4,
                "glucose": 180,
            },
            "comorbidities": ["Diabetes", "Hypertension"],
            "surgeryType": "Cardiac",
            "surgeryComplexity": "High",
        })

        assert len(assessment.risk_factors) == 6
        assert assessment.mortality_risk == pytest.approx(8.0)
        assert assessment.infection_risk == pytest.approx(20.0)
        assert assessment.bleeding_risk == pytest.approx(16.0)
        assert assessment.readmission_risk == pytest.approx(15.0)
        assert assessment.overall_risk is RiskTier.HIGH

    def test_each_factor_appears_once(self, all_rules_data):
        names = assess_risk(all_rules_data).factor_names()

        assert len(names) == len(set(names))


class TestRuleThresholds:
    """Test the strict comparisons of individual rules."""

    @pytest.mark.parametrize("age, fires", [(65, False), (66, True)])
    def test_advanced_age(self, low_risk_data, age, fires):
        low_risk_data["demographics"]["age"] = age

        assert ("Advanced Age" in assess_risk(low_risk_data).factor_names()) is fires

    @pytest.mark.parametrize("bmi, fires", [(30.0, False), (30.1, True)])
    def test_obesity(self, low_risk_data, bmi, fires):
        low_risk_data["demographics"]["bodyMassIndex"] = bmi

        assert ("Obesity" in assess_risk(low_risk_data).factor_names()) is fires

    @pytest.mark.parametrize("hemoglobin, fires", [(10.0, False), (9.9, True)])
    def test_low_hemoglobin(self, low_risk_data, hemoglobin, fires):
        low_risk_data["labs"]["hemoglobin"] = hemoglobin

        assert ("Low Hemoglobin" in assess_risk(low_risk_data).factor_names()) is fires

    def test_moderate_complexity_is_not_complex_surgery(self, low_risk_data):
        low_risk_data["surgeryComplexity"] = "Moderate"

        assert assess_risk(low_risk_data).risk_factors == ()

    def test_unscored_comorbidities_add_nothing(self, low_risk_data):
        baseline = assess_risk(low_risk_data)
        low_risk_data["comorbidities"] = ["COPD", "Heart Disease", "Kidney Disease", "Obesity"]

        assert assess_risk(low_risk_data) == baseline


class TestEngineProperties:
    """Test determinism, monotonicity, clamping and tier consistency."""

    def test_deterministic(self, all_rules_data):
        first = assess_risk(all_rules_data)
        second = assess_risk(validate_patient_record(all_rules_data))

        assert first == second
        assert first.model_dump() == second.model_dump()

    @pytest.mark.parametrize("factor", list(RULE_TRIGGERS))
    def test_adding_a_rule_never_lowers_scores(self, low_risk_data, factor):
        seed = "Diabetes" if factor == "Hypertension" else "Hypertension"
        RULE_TRIGGERS[seed](low_risk_data)
        before = assess_risk(low_risk_data)
        RULE_TRIGGERS[factor](low_risk_data)
        after = assess_risk(low_risk_data)

        for category, score in before.category_scores().items():
            assert after.category_scores()[category] >= score
        assert factor in after.factor_names()
        remaining = iter(after.factor_names())
        assert all(name in remaining for name in before.factor_names())

    def test_every_rule_has_a_trigger(self):
        assert list(RULE_TRIGGERS) == [rule.factor for rule in RISK_RULES]

    def test_rule_deltas_are_non_negative(self):
        for rule in RISK_RULES:
            assert all(delta >= 0 for delta in rule.deltas.values())
            assert 0.0 <= rule.impact <= 1.0

    def test_scores_are_clamped(self, monkeypatch, low_risk_data):
        huge = RiskRule(
            factor="Huge",
            predicate=lambda r: True,
            deltas={MORTALITY: 100.0, INFECTION: 100.0},
            impact=1.0,
            explanation="test rule",
        )
        monkeypatch.setattr(risk_engine, "RISK_RULES", (huge,))

        assessment = assess_risk(low_risk_data)

        assert assessment.mortality_risk == 25.0
        assert assessment.infection_risk == 30.0
        assert assessment.overall_risk is RiskTier.HIGH

    def test_invalid_input_raises_before_scoring(self, reference_data):
        reference_data["surgeryComplexity"] = "Extreme"

        with pytest.raises(ValidationError):
            assess_risk(reference_data)


class TestTierForScore:
    """Test the tier thresholds."""

    @pytest.mark.parametrize("score, tier", [
        (0.0, RiskTier.LOW),
        (8.0, RiskTier.LOW),
        (8.01, RiskTier.MODERATE),
        (15.0, RiskTier.MODERATE),
        (15.01, RiskTier.HIGH),
        (35.0, RiskTier.HIGH),
    ])
    def test_boundaries(self, score, tier):
        assert tier_for_score(score) is tier


class TestRiskAssessmentModel:
    """Test the RiskAssessment value object."""

    def _assessment(self, **overrides):
        values = dict(mortality_risk=3.0, infection_risk=7.0, bleeding_risk=5.0, readmission_risk=6.0)
        values.update(overrides)
        return RiskAssessment(**values)

    def test_low_tier(self):
        assessment = self._assessment()

        assert assessment.overall_risk is RiskTier.LOW
        assert assessment.highest_category() == "Infection"

    def test_overall_risk_cannot_be_supplied(self):
        with pytest.raises(Exception):
            self._assessment(overall_risk="Low")

    def test_scores_above_cap_are_rejected(self):
        with pytest.raises(Exception):
            self._assessment(mortality_risk=25.5)

    def test_serializes_camel_case(self):
        assessment = self._assessment(
            risk_factors=(RiskFactor(factor="Obesity", impact=0.6, explanation="BMI > 30"),)
        )

        data = assessment.model_dump(mode="json", by_alias=True)

        assert data["mortalityRisk"] == 3.0
        assert data["overallRisk"] == "Low"
        assert data["riskFactors"][0]["factor"] == "Obesity"
