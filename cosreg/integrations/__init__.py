"""Contracts for collaborators owned by the formula builder."""

from .ingredient_kb import (
    FormulaData,
    FormulaIngredientData,
    KnowledgeBase,
    KnowledgeBaseEntry,
    StaticKnowledgeBase,
    StaticSynonymSource,
    SynonymSource,
)

__all__ = [
    "FormulaData",
    "FormulaIngredientData",
    "KnowledgeBase",
    "KnowledgeBaseEntry",
    "StaticKnowledgeBase",
    "StaticSynonymSource",
    "SynonymSource",
]
