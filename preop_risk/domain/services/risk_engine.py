"""Risk Rule Engine - PatientRecord to RiskAssessment.

Scoring starts every category at a fixed base value and walks an ordered
table of independent rules. A rule that matches adds its fixed increments to
one or more categories and contributes exactly one explainable risk factor.
Once every rule has been evaluated each category is clamped to its ceiling
and the overall tier is derived from the clamped scores.

The engine holds no state between calls and performs no I/O, so identical
input always yields an identical assessment and calls may run concurrently.

Example Usage:
    ```python
    assessment = assess_risk(record)
    assessment.overall_risk      # RiskTier.MODERATE
    assessment.factor_names()    # ["Hypertension"]
    ```
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union

from preop_risk.domain.enums import Comorbidity, SurgeryComplexity
from preop_risk.domain.patient_record import PatientRecord, validate_patient_record
from preop_risk.domain.risk_assessment import (
    BLEEDING_CAP,
    INFECTION_CAP,
    MORTALITY_CAP,
    READMISSION_CAP,
    RiskAssessment,
    RiskFactor,
)

logger = logging.getLogger(__name__)

MORTALITY = "mortality"
INFECTION = "infection"
BLEEDING = "bleeding"
READMISSION = "readmission"

BASE_SCORES: dict[str, float] = {
    MORTALITY: 2.5,
    INFECTION: 8.0,
    BLEEDING: 5.5,
    READMISSION: 12.0,
}

SCORE_CAPS: dict[str, float] = {
    MORTALITY: MORTALITY_CAP,
    INFECTION: INFECTION_CAP,
    BLEEDING: BLEEDING_CAP,
    READMISSION: READMISSION_CAP,
}


@dataclass(frozen=True)
class RiskRule:
    """One predicate -> effect entry of the rule table.

    Attributes:
        factor: Name of the risk factor contributed when the rule fires
        predicate: Total boolean test over a validated record
        deltas: Non-negative score increments keyed by category
        impact: Factor weight in [0, 1]
        explanation: Human-readable reason
    """
    factor: str
    predicate: Callable[[PatientRecord], bool]
    deltas: Mapping[str, float]
    impact: float
    explanation: str

    def applies_to(self, record: PatientRecord) -> bool:
        return bool(self.predicate(record))

    def to_factor(self) -> RiskFactor:
        return RiskFactor(factor=self.factor, impact=self.impact, explanation=self.explanation)


RISK_RULES: tuple[RiskRule, ...] = (
    RiskRule(
        factor="Advanced Age",
        predicate=lambda r: r.demographics.age > 65,
        deltas={MORTALITY: 1.5, INFECTION: 2.0},
        impact=0.8,
        explanation="Age > 65 increases mortality and infection risk",
    ),
    RiskRule(
        factor="Obesity",
        predicate=lambda r: r.demographics.body_mass_index > 30,
        deltas={INFECTION: 3.0, BLEEDING: 1.5},
        impact=0.6,
        explanation="BMI > 30 increases infection and bleeding complications",
    ),
    RiskRule(
        factor="Diabetes",
        predicate=lambda r: r.has_comorbidity(Comorbidity.DIABETES),
        deltas={INFECTION: 4.0, READMISSION: 3.0},
        impact=0.9,
        explanation="Diabetes significantly increases infection risk and healing complications",
    ),
    RiskRule(
        factor="Hypertension",
        predicate=lambda r: r.has_comorbidity(Comorbidity.HYPERTENSION),
        deltas={MORTALITY: 0.8, BLEEDING: 2.0},
        impact=0.5,
        explanation="Hypertension increases cardiovascular and bleeding risks",
    ),
    RiskRule(
        factor="Complex Surgery",
        predicate=lambda r: r.surgery_complexity == SurgeryComplexity.HIGH,
        deltas={MORTALITY: 2.0, INFECTION: 3.0, BLEEDING: 4.0},
        impact=0.7,
        explanation="High complexity surgery increases all risk categories",
    ),
    RiskRule(
        factor="Low Hemoglobin",
        predicate=lambda r: r.labs.hemoglobin < 10,
        deltas={MORTALITY: 1.2, BLEEDING: 3.0},
        impact=0.6,
        explanation="Anemia increases mortality and bleeding complications",
    ),
)


def assess_risk(record: Union[PatientRecord, Mapping[str, Any]]) -> RiskAssessment:
    """Compute the pre-operative risk assessment for one patient.

    Parameters:
        record: A PatientRecord, or a mapping in wire format that is
            validated into one first

    Returns:
        RiskAssessment: Clamped category scores, derived tier and the
        contributing factors in rule order

    Raises:
        ValidationError: If ``record`` is not a structurally valid patient
            record. Nothing is scored in that case.
    """
    patient = validate_patient_record(record)

    scores = dict(BASE_SCORES)
    factors: list[RiskFactor] = []
    for rule in RISK_RULES:
        if not rule.applies_to(patient):
            continue
        for category, delta in rule.deltas.items():
            scores[category] += delta
        factors.append(rule.to_factor())

    clamped = {category: min(score, SCORE_CAPS[category]) for category, score in scores.items()}

    assessment = RiskAssessment(
        mortality_risk=clamped[MORTALITY],
        infection_risk=clamped[INFECTION],
        bleeding_risk=clamped[BLEEDING],
        readmission_risk=clamped[READMISSION],
        risk_factors=tuple(factors),
    )
    logger.debug(
        f"Assessed patient: tier={assessment.overall_risk.value}, "
        f"factors={assessment.factor_names()}"
    )
    return assessment
