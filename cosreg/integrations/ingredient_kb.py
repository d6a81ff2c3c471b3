"""Contracts for the ingredient knowledge base and synonym table.

Both are owned by the formula builder. This module defines what the
compliance core needs from them, plus in-memory implementations for
fixtures and offline use.
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Protocol

from ..models.regulatory import ProductType


@dataclass
class FormulaIngredientData:
    """Ingredient as supplied by the formula builder."""
    id: str
    name: str
    percentage: float
    inci: Optional[str] = None  # Declared INCI or trade name; falls back to name
    category: Optional[str] = None
    max_usage: Optional[float] = None
    max_usage_leave_on: Optional[float] = None
    max_usage_rinse_off: Optional[float] = None
    is_verified: Optional[bool] = None

    @property
    def identifier(self) -> str:
        """Raw identifier to resolve: declared INCI, else display name."""
        return (self.inci or self.name or "").strip()

    def max_usage_for(
        self, product_type: ProductType, preferred: Optional[float] = None
    ) -> Optional[float]:
        """Cap for the product type.

        Precedence: ``preferred`` (the knowledge base's product-type cap),
        then this ingredient's product-type cap, then its generic cap.
        """
        if product_type is ProductType.LEAVE_ON:
            specific = self.max_usage_leave_on
        else:
            specific = self.max_usage_rinse_off
        for cap in (preferred, specific, self.max_usage):
            if cap is not None:
                return cap
        return None


@dataclass
class FormulaData:
    """Formula as supplied by the formula builder."""
    name: str
    ingredients: list[FormulaIngredientData] = field(default_factory=list)


@dataclass
class KnowledgeBaseEntry:
    """Ingredient knowledge base row."""
    inci: str
    category: Optional[str] = None
    default_max_leave_on: Optional[float] = None
    default_max_rinse_off: Optional[float] = None
    notes: Optional[str] = None

    def max_usage_for(self, product_type: ProductType) -> Optional[float]:
        if product_type is ProductType.LEAVE_ON:
            return self.default_max_leave_on
        return self.default_max_rinse_off


class SynonymSource(Protocol):
    """Batched synonym lookup."""

    def lookup(self, keys: list[str]) -> dict[str, str]:
        """Resolve case-folded names to canonical INCI names.

        Args:
            keys: Trimmed, lower-cased names.

        Returns:
            Mapping of the keys that have a synonym to their canonical name.
            Keys without a synonym are absent.
        """
        ...


class KnowledgeBase(Protocol):
    """Batched ingredient knowledge base lookup."""

    def get_entries(self, inci_names: list[str]) -> dict[str, KnowledgeBaseEntry]:
        """Return entries keyed by case-folded INCI name."""
        ...


class StaticSynonymSource:
    """In-memory synonym table."""

    def __init__(self, synonyms: Optional[Mapping[str, str]] = None):
        """Initialize the source.

        Args:
            synonyms: Mapping of synonym to canonical INCI name.
        """
        self._synonyms = {
            key.strip().lower(): value
            for key, value in (synonyms or {}).items()
        }

    def add(self, synonym: str, canonical_inci: str) -> None:
        self._synonyms[synonym.strip().lower()] = canonical_inci

    def lookup(self, keys: list[str]) -> dict[str, str]:
        return {key: self._synonyms[key] for key in keys if key in self._synonyms}


class StaticKnowledgeBase:
    """In-memory ingredient knowledge base."""

    def __init__(self, entries: Iterable[KnowledgeBaseEntry] = ()):
        self._entries = {entry.inci.strip().lower(): entry for entry in entries}

    def get_entries(self, inci_names: list[str]) -> dict[str, KnowledgeBaseEntry]:
        keys = {name.strip().lower() for name in inci_names if name and name.strip()}
        return {key: self._entries[key] for key in keys if key in self._entries}
