"""Domain Services.

Pure scoring and scheduling logic: no I/O, no shared state.
"""

from preop_risk.domain.services.risk_engine import RISK_RULES, RiskRule, assess_risk
from preop_risk.domain.services.resource_advisor import (
    DEFAULT_RESOURCE_RULES,
    STANDARD_SETUP,
    ResourceRule,
    derive_required_resources,
)
from preop_risk.domain.services.slot_recommender import (
    estimate_duration,
    recommend_slots,
    scheduling_advisories,
)
from preop_risk.domain.services.planner import plan_surgery

__all__ = [
    "RISK_RULES",
    "RiskRule",
    "assess_risk",
    "DEFAULT_RESOURCE_RULES",
    "STANDARD_SETUP",
    "ResourceRule",
    "derive_required_resources",
    "estimate_duration",
    "recommend_slots",
    "scheduling_advisories",
    "plan_surgery",
]
