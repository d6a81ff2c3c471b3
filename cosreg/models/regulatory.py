"""Core regulatory data models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class RestrictionTier(Enum):
    """EU Cosmetics Regulation annex an entry was ingested from."""
    PROHIBITED = "II"  # Annex II - prohibited substances
    RESTRICTED = "III"  # Annex III - restricted substances
    UV_FILTER = "VI"  # Annex VI - allowed UV filters with limits

    @property
    def is_numeric_cap(self) -> bool:
        """True for tiers whose entries are percentage-limited."""
        return self is not RestrictionTier.PROHIBITED

    @classmethod
    def from_label(cls, label: str) -> "RestrictionTier":
        """Parse an annex label ("II", "III", "VI") or tier name.

        Raises:
            ValueError: If the label does not name a known tier.
        """
        key = (label or "").strip().lower()
        tier = _TIER_LABELS.get(key)
        if tier is None:
            raise ValueError(f"Unknown restriction tier: {label!r}")
        return tier


_TIER_LABELS = {
    "ii": RestrictionTier.PROHIBITED,
    "iii": RestrictionTier.RESTRICTED,
    "vi": RestrictionTier.UV_FILTER,
    "prohibited": RestrictionTier.PROHIBITED,
    "restricted-a": RestrictionTier.RESTRICTED,
    "restricted-b": RestrictionTier.UV_FILTER,
}


class Applicability(Enum):
    """Which product types a regulatory entry applies to."""
    LEAVE_ON = "leave_on"
    RINSE_OFF = "rinse_off"
    BOTH = "both"


class ProductType(Enum):
    """Product type selector of a formula under evaluation."""
    LEAVE_ON = "leave-on"
    RINSE_OFF = "rinse-off"

    @property
    def applicability(self) -> Applicability:
        """Applicability value stored for entries of this product type."""
        if self is ProductType.LEAVE_ON:
            return Applicability.LEAVE_ON
        return Applicability.RINSE_OFF


@dataclass
class RegulatoryEntry:
    """One row of ingested EU annex reference data."""
    inci_canonical: str
    tier: RestrictionTier
    applicability: Applicability = Applicability.BOTH
    max_percentage: Optional[float] = None  # None: banned outright or no numeric cap
    conditions_text: Optional[str] = None
    reference_url: Optional[str] = None
    source: str = ""
    active_from: Optional[date] = None
    active_to: Optional[date] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        # Annex II entries never carry a cap
        if self.tier is RestrictionTier.PROHIBITED:
            self.max_percentage = None

    @property
    def duplicate_key(self) -> tuple:
        """Idempotency key: identifier, tier, applicability and cap."""
        return duplicate_key(
            self.inci_canonical,
            self.tier.value,
            self.applicability.value,
            self.max_percentage,
        )

    def applies_to(self, product_type: ProductType) -> bool:
        """Check whether this entry applies to a product type."""
        return self.applicability in (Applicability.BOTH, product_type.applicability)

    def is_active_on(self, day: date) -> bool:
        """Check whether the entry's active window includes a day."""
        if self.active_from is not None and self.active_from > day:
            return False
        if self.active_to is not None and self.active_to < day:
            return False
        return True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "inci_canonical": self.inci_canonical,
            "annex": self.tier.value,
            "product_type": self.applicability.value,
            "max_percentage": self.max_percentage,
            "conditions_text": self.conditions_text,
            "reference_url": self.reference_url,
            "source": self.source,
            "active_from": self.active_from.isoformat() if self.active_from else None,
            "active_to": self.active_to.isoformat() if self.active_to else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def duplicate_key(
    inci_canonical: str,
    annex: str,
    product_type: str,
    max_percentage: Optional[float],
) -> tuple:
    """Build the idempotency key for an entry, null cap as a sentinel."""
    cap = "null" if max_percentage is None else float(max_percentage)
    return (inci_canonical, annex, product_type, cap)


@dataclass
class IfraStandard:
    """IFRA standard listing (read-only reference, never blocks)."""
    ifra_key: str
    amendment_number: int
    standard_name: str
    standard_type: str
    cas_numbers: Optional[str] = None
    synonyms: Optional[str] = None
    source: str = ""
    reference_url: Optional[str] = None

    @property
    def match_names(self) -> list[str]:
        """Case-folded names this standard can be matched by."""
        names = [self.standard_name.strip().lower()]
        if self.synonyms:
            for synonym in self.synonyms.replace(";", ",").split(","):
                synonym = synonym.strip().lower()
                if synonym:
                    names.append(synonym)
        return names

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "ifra_key": self.ifra_key,
            "amendment_number": self.amendment_number,
            "standard_name": self.standard_name,
            "ifra_standard_type": self.standard_type,
            "cas_numbers": self.cas_numbers,
            "synonyms": self.synonyms,
            "source": self.source,
            "reference_url": self.reference_url,
        }


@dataclass
class IngestionRunReport:
    """Outcome of one ingestion run. Built incrementally, never persisted."""
    total_rows: int = 0
    skipped: int = 0
    inserted: int = 0
    duplicates: int = 0
    errors: int = 0  # Rows that failed to persist
    warnings: list[str] = field(default_factory=list)
    error_messages: list[str] = field(default_factory=list)
    preview: list = field(default_factory=list)  # Dry run only
    dry_run: bool = False
    aborted: bool = False  # Stopped by a configuration error before mapping rows

    @property
    def success(self) -> bool:
        """A run succeeds when no error was recorded."""
        return len(self.error_messages) == 0

    def fail(self, message: str) -> "IngestionRunReport":
        """Record a fatal error and return self."""
        self.error_messages.append(message)
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "dry_run": self.dry_run,
            "aborted": self.aborted,
            "stats": {
                "total_rows": self.total_rows,
                "skipped": self.skipped,
                "inserted": self.inserted,
                "duplicates": self.duplicates,
                "errors": self.errors,
            },
            "warnings": list(self.warnings),
            "errors": list(self.error_messages),
            "preview": [
                item.to_dict() if hasattr(item, "to_dict") else item
                for item in self.preview
            ],
        }
