"""Data models for regulatory reference data and formula evaluation."""

from .regulatory import (
    RestrictionTier,
    Applicability,
    ProductType,
    RegulatoryEntry,
    IfraStandard,
    IngestionRunReport,
    duplicate_key,
)
from .evaluation import (
    Severity,
    ResolvedIngredient,
    Finding,
    GroupWarning,
    SafetyWarning,
    IfraNotice,
    ComplianceReport,
)

__all__ = [
    "RestrictionTier",
    "Applicability",
    "ProductType",
    "RegulatoryEntry",
    "IfraStandard",
    "IngestionRunReport",
    "duplicate_key",
    "Severity",
    "ResolvedIngredient",
    "Finding",
    "GroupWarning",
    "SafetyWarning",
    "IfraNotice",
    "ComplianceReport",
]
