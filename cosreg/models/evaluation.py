"""Formula evaluation data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .regulatory import Applicability, ProductType, RestrictionTier


class Severity(Enum):
    """Severity of a category safety warning."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class ResolvedIngredient:
    """Formula ingredient after identifier canonicalization."""
    id: str
    name: str
    percentage: float
    inci_canonical: str = ""
    category: Optional[str] = None
    max_usage: Optional[float] = None  # Product-type specific cap, when known
    is_verified: Optional[bool] = None

    @property
    def lookup_key(self) -> str:
        """Case-folded canonical identifier used to join regulatory data."""
        return (self.inci_canonical or "").strip().lower()


@dataclass
class Finding:
    """A triggered EU annex block for one ingredient against one entry."""
    id: str
    tier: RestrictionTier
    inci_canonical: str
    ingredient_name: str
    ingredient_id: str
    applicability: Applicability
    max_percentage: Optional[float]
    actual_percentage: float
    reason: str
    conditions_text: Optional[str] = None
    reference_url: Optional[str] = None
    source: Optional[str] = None
    entry_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "annex": self.tier.value,
            "inci_canonical": self.inci_canonical,
            "ingredient_name": self.ingredient_name,
            "ingredient_id": self.ingredient_id,
            "product_type": self.applicability.value,
            "max_percentage": self.max_percentage,
            "actual_percentage": self.actual_percentage,
            "conditions_text": self.conditions_text,
            "reference_url": self.reference_url,
            "source": self.source,
            "entry_id": self.entry_id,
            "reason": self.reason,
        }


@dataclass
class GroupWarning:
    """Category total exceeding the strictest per-ingredient cap in it."""
    category: str
    total_percent: float
    limit_percent: float

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "total_percent": self.total_percent,
            "limit_percent": self.limit_percent,
        }


@dataclass
class SafetyWarning:
    """Per-ingredient category concentration warning."""
    id: str
    severity: Severity
    title: str
    message: str
    ingredient_id: str
    ingredient_name: str
    category: str
    threshold_percent: float
    actual_percent: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "ingredient_id": self.ingredient_id,
            "ingredient_name": self.ingredient_name,
            "category": self.category,
            "threshold_percent": self.threshold_percent,
            "actual_percent": self.actual_percent,
        }


@dataclass
class IfraNotice:
    """Informational IFRA standard match for an ingredient."""
    ingredient_id: str
    ingredient_name: str
    ifra_key: str
    standard_name: str
    standard_type: str
    amendment_number: int
    reference_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "ingredient_id": self.ingredient_id,
            "ingredient_name": self.ingredient_name,
            "ifra_key": self.ifra_key,
            "standard_name": self.standard_name,
            "ifra_standard_type": self.standard_type,
            "amendment_number": self.amendment_number,
            "reference_url": self.reference_url,
        }


@dataclass
class ComplianceReport:
    """Full EU compliance evaluation of a formula."""
    formula_name: str
    product_type: ProductType
    findings: list[Finding] = field(default_factory=list)
    group_warnings: list[GroupWarning] = field(default_factory=list)
    safety_warnings: list[SafetyWarning] = field(default_factory=list)
    ifra_notices: list[IfraNotice] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)  # Ingredients with no identifier
    unverified: list[str] = field(default_factory=list)  # Ingredients with no verified usage data
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_compliant(self) -> bool:
        """No annex block was triggered.

        Ingredients listed in ``unresolved`` had no regulatory data to check
        and are not known to be compliant.
        """
        return len(self.findings) == 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "formula_name": self.formula_name,
            "product_type": self.product_type.value,
            "is_compliant": self.is_compliant,
            "findings": [f.to_dict() for f in self.findings],
            "group_warnings": [w.to_dict() for w in self.group_warnings],
            "safety_warnings": [w.to_dict() for w in self.safety_warnings],
            "ifra_notices": [n.to_dict() for n in self.ifra_notices],
            "unresolved": list(self.unresolved),
            "unverified": list(self.unverified),
            "generated_at": self.generated_at.isoformat(),
        }
