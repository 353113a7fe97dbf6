"""Risk assessment value objects produced by the risk engine.

A ``RiskAssessment`` is a pure derived view of exactly one ``PatientRecord``.
It has no identity or lifecycle of its own and is never persisted.

The overall risk tier is a computed field: it is derived from the clamped
category scores every time it is read and cannot be passed in by a caller,
so an assessment can never carry a tier that disagrees with its scores.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from preop_risk.domain.enums import RiskTier

# Per-category score ceilings
MORTALITY_CAP = 25.0
INFECTION_CAP = 30.0
BLEEDING_CAP = 25.0
READMISSION_CAP = 35.0

# Tier thresholds over the maximum clamped category score
HIGH_RISK_THRESHOLD = 15.0
MODERATE_RISK_THRESHOLD = 8.0


def tier_for_score(max_score: float) -> RiskTier:
    """Map the highest category score to a risk tier.

    Scores strictly above 15 are High, strictly above 8 (up to and including
    15) are Moderate, anything else is Low.
    """
    if max_score > HIGH_RISK_THRESHOLD:
        return RiskTier.HIGH
    if max_score > MODERATE_RISK_THRESHOLD:
        return RiskTier.MODERATE
    return RiskTier.LOW


class RiskFactor(BaseModel):
    """A single explainable contributor to the assessment.

    Parameters:
        factor: Short factor name (e.g. "Advanced Age")
        impact: Relative weight of the factor in [0, 1]
        explanation: Human-readable reason the factor raises risk
    """

    factor: str = Field(..., min_length=1)
    impact: float = Field(..., ge=0.0, le=1.0)
    explanation: str

    model_config = ConfigDict(frozen=True)


class RiskAssessment(BaseModel):
    """Per-category risk scores, derived tier and contributing factors.

    Parameters:
        mortality_risk: Mortality score, at most 25
        infection_risk: Infection score, at most 30
        bleeding_risk: Bleeding score, at most 25
        readmission_risk: Readmission score, at most 35
        risk_factors: Contributing factors in rule evaluation order
    """

    mortality_risk: float = Field(..., ge=0.0, le=MORTALITY_CAP, serialization_alias="mortalityRisk")
    infection_risk: float = Field(..., ge=0.0, le=INFECTION_CAP, serialization_alias="infectionRisk")
    bleeding_risk: float = Field(..., ge=0.0, le=BLEEDING_CAP, serialization_alias="bleedingRisk")
    readmission_risk: float = Field(..., ge=0.0, le=READMISSION_CAP, serialization_alias="readmissionRisk")
    risk_factors: tuple[RiskFactor, ...] = Field(default=(), serialization_alias="riskFactors")

    @computed_field(alias="overallRisk")
    @property
    def overall_risk(self) -> RiskTier:
        return tier_for_score(self.max_score)

    @property
    def max_score(self) -> float:
        return max(self.mortality_risk, self.infection_risk, self.bleeding_risk, self.readmission_risk)

    def category_scores(self) -> dict[str, float]:
        """Return category label -> score, in display order."""
        return {
            "Mortality": self.mortality_risk,
            "Infection": self.infection_risk,
            "Bleeding": self.bleeding_risk,
            "Readmission": self.readmission_risk,
        }

    def highest_category(self) -> str:
        """Name of the category with the highest score (first one on ties)."""
        scores = self.category_scores()
        return max(scores, key=scores.get)

    def factor_names(self) -> list[str]:
        return [rf.factor for rf in self.risk_factors]

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)
