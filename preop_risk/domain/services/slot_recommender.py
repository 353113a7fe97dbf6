"""Slot Recommender - annotate the slot catalog for a risk tier.

The recommender is a total function over whatever catalog it is handed: it
never drops, reorders or mutates slots, it only marks each one. Consumers
decide whether to hide slots that are not recommended.
"""

import logging
from typing import Sequence

from preop_risk.domain.enums import RiskTier, SurgeryComplexity
from preop_risk.domain.risk_assessment import RiskAssessment
from preop_risk.domain.scheduling import AnnotatedSlot, DurationEstimate, TimeSlot

logger = logging.getLogger(__name__)

HIGH_RISK_RATIONALE = "Early morning slot recommended for high-risk patients"
STANDARD_RATIONALE = "Standard scheduling available"

HIGH_RISK_PROTOCOL = "Schedule during peak staffing hours (7:30-11:30 AM) with senior surgical team"

DURATION_BY_COMPLEXITY: dict[SurgeryComplexity, str] = {
    SurgeryComplexity.LOW: "1-2 hours",
    SurgeryComplexity.MODERATE: "2-4 hours",
    SurgeryComplexity.HIGH: "4-6 hours",
}
HIGH_RISK_BUFFER_MINUTES = 30


def recommend_slots(assessment: RiskAssessment, catalog: Sequence[TimeSlot]) -> tuple[AnnotatedSlot, ...]:
    """Annotate every catalog slot with a recommendation and rationale.

    High-risk patients are steered to the first listed slot of the catalog
    (the early morning slot in the reference catalog); every other slot is
    marked not recommended. For Low and Moderate tiers every slot is
    recommended.

    Parameters:
        assessment: The patient's risk assessment
        catalog: Slots in catalog order

    Returns:
        tuple[AnnotatedSlot, ...]: One entry per catalog slot, same order
    """
    if assessment.overall_risk == RiskTier.HIGH:
        annotated = tuple(
            AnnotatedSlot(slot=slot, recommended=(index == 0), rationale=HIGH_RISK_RATIONALE)
            for index, slot in enumerate(catalog)
        )
    else:
        annotated = tuple(
            AnnotatedSlot(slot=slot, recommended=True, rationale=STANDARD_RATIONALE)
            for slot in catalog
        )

    logger.debug(
        f"Recommended {sum(1 for s in annotated if s.recommended)}/{len(annotated)} slots "
        f"for {assessment.overall_risk.value} risk"
    )
    return annotated


def estimate_duration(complexity: SurgeryComplexity, assessment: RiskAssessment) -> DurationEstimate:
    """Estimate surgery duration from complexity, with a high-risk buffer."""
    if assessment.overall_risk == RiskTier.HIGH:
        return DurationEstimate(
            complexity=complexity,
            base_range=DURATION_BY_COMPLEXITY[complexity],
            buffer_minutes=HIGH_RISK_BUFFER_MINUTES,
            buffer_note=f"(+ {HIGH_RISK_BUFFER_MINUTES} min buffer for high-risk)",
        )
    return DurationEstimate(complexity=complexity, base_range=DURATION_BY_COMPLEXITY[complexity])


def scheduling_advisories(assessment: RiskAssessment) -> tuple[str, ...]:
    """Scheduling protocol notes for the assessment's tier."""
    if assessment.overall_risk == RiskTier.HIGH:
        return (HIGH_RISK_PROTOCOL,)
    return ()
