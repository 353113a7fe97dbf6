"""Resource Advisor - resources to arrange before surgery.

Each resource rule is independent and contributes at most one entry. The
result keeps table order; an empty result means a standard surgical setup.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from preop_risk.domain.patient_record import PatientRecord
from preop_risk.domain.risk_assessment import RiskAssessment

STANDARD_SETUP = "Standard surgical setup required"


@dataclass(frozen=True)
class ResourceRule:
    """Resource to request when ``predicate(assessment, record)`` holds."""
    resource: str
    predicate: Callable[[RiskAssessment, PatientRecord], bool]


DEFAULT_RESOURCE_RULES: tuple[ResourceRule, ...] = (
    ResourceRule("ICU bed reserved", lambda a, r: a.mortality_risk > 5),
    ResourceRule("Blood bank notification", lambda a, r: a.bleeding_risk > 8),
    ResourceRule("Enhanced sterile setup", lambda a, r: a.infection_risk > 10),
    # Taken from the record, not the assessment
    ResourceRule("Bariatric equipment", lambda a, r: r.demographics.body_mass_index > 35),
)


def derive_required_resources(
    assessment: RiskAssessment,
    record: PatientRecord,
    rules: Sequence[ResourceRule] = DEFAULT_RESOURCE_RULES,
) -> tuple[str, ...]:
    """List the resources required for this patient, in rule order.

    Parameters:
        assessment: Output of ``assess_risk`` for ``record``
        record: The assessed patient record
        rules: Resource rule table (defaults to the clinical reference table)

    Returns:
        tuple[str, ...]: Resource names; empty when a standard setup suffices
    """
    return tuple(rule.resource for rule in rules if rule.predicate(assessment, record))


def describe_resources(resources: Sequence[str]) -> list[str]:
    """Display lines for a resource list, falling back to the standard setup."""
    return list(resources) if resources else [STANDARD_SETUP]
