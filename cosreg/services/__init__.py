"""Rule evaluation services for formula compliance."""

from .eu_compliance_service import check_eu_compliance
from .group_limit_service import evaluate_group_limits
from .safety_service import SAFETY_RULES, evaluate_safety_warnings, get_unverified_ingredients
from .ifra_service import IFRAService
from .compliance_engine import ComplianceEngine

__all__ = [
    "check_eu_compliance",
    "evaluate_group_limits",
    "SAFETY_RULES",
    "evaluate_safety_warnings",
    "get_unverified_ingredients",
    "IFRAService",
    "ComplianceEngine",
]
