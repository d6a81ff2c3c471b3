"""Main compliance engine orchestrating formula checks."""

import logging
from datetime import date
from typing import Optional

from ..data.repository import RegulatoryEntryRepository, SqlSynonymSource, get_repository
from ..ingestion.inci_normalizer import InciNormalizer, SynonymCache
from ..integrations.ingredient_kb import FormulaData, KnowledgeBase, SynonymSource
from ..models.evaluation import ComplianceReport, ResolvedIngredient
from ..models.regulatory import ProductType

from .eu_compliance_service import check_eu_compliance
from .group_limit_service import evaluate_group_limits
from .ifra_service import IFRAService
from .safety_service import evaluate_safety_warnings, get_unverified_ingredients

logger = logging.getLogger(__name__)


class ComplianceEngine:
    """Resolves a formula's identifiers and runs every rule evaluator."""

    def __init__(
        self,
        repository: Optional[RegulatoryEntryRepository] = None,
        synonym_source: Optional[SynonymSource] = None,
        knowledge_base: Optional[KnowledgeBase] = None,
        ifra_service: Optional[IFRAService] = None,
    ):
        """Initialize the compliance engine.

        Args:
            repository: Regulatory data repository. Uses the shared one if not provided.
            synonym_source: Synonym lookup. Uses the repository's database if not provided.
            knowledge_base: Ingredient knowledge base used to fill missing
                categories and caps. Optional.
            ifra_service: IFRA lookup service.
        """
        self.repository = repository or get_repository()
        self.normalizer = InciNormalizer(
            synonym_source or SqlSynonymSource(self.repository.session_factory)
        )
        self.knowledge_base = knowledge_base
        self.ifra_service = ifra_service or IFRAService(self.repository)

    def resolve_ingredients(
        self,
        formula: FormulaData,
        product_type: ProductType,
        cache: Optional[SynonymCache] = None,
    ) -> list[ResolvedIngredient]:
        """Canonicalize identifiers and attach category and cap data.

        Ingredients with no identifier keep an empty ``inci_canonical`` and
        are not matched against any regulatory data.

        Args:
            formula: Formula to resolve.
            product_type: Selects the product-type specific cap.
            cache: Synonym cache for this session.

        Returns:
            Resolved ingredients in formula order.
        """
        normalization = self.normalizer.normalize_batch(
            [ing.identifier for ing in formula.ingredients], cache
        )
        for warning in normalization.warnings:
            logger.warning("%s: %s", formula.name, warning)

        kb_entries = {}
        if self.knowledge_base is not None:
            kb_entries = self.knowledge_base.get_entries(list(normalization.mapping.values()))

        resolved = []
        for ingredient in formula.ingredients:
            identifier = ingredient.identifier
            canonical = normalization.canonical(identifier) if identifier else ""
            kb_entry = kb_entries.get(canonical.lower()) if canonical else None

            category = ingredient.category
            kb_cap = None
            if kb_entry is not None:
                category = category or kb_entry.category
                kb_cap = kb_entry.max_usage_for(product_type)
            max_usage = ingredient.max_usage_for(product_type, preferred=kb_cap)

            resolved.append(ResolvedIngredient(
                id=ingredient.id,
                name=ingredient.name,
                percentage=ingredient.percentage,
                inci_canonical=canonical,
                category=category,
                max_usage=max_usage,
                is_verified=ingredient.is_verified,
            ))
        return resolved

    def evaluate(
        self,
        formula: FormulaData,
        product_type: ProductType,
        on_date: Optional[date] = None,
        cache: Optional[SynonymCache] = None,
    ) -> ComplianceReport:
        """Run the EU annex, group limit, safety and IFRA checks.

        Args:
            formula: Formula to check.
            product_type: Leave-on or rinse-off.
            on_date: Day used to filter annex entries by active window.
            cache: Synonym cache for this session.

        Returns:
            ComplianceReport. Same inputs and stored data give the same report.
        """
        ingredients = self.resolve_ingredients(formula, product_type, cache)
        keys = [ing.inci_canonical for ing in ingredients if ing.lookup_key]

        compliance_map = self.repository.get_compliance_map(keys, on_date)
        ifra_map = self.ifra_service.lookup(ingredients)

        report = ComplianceReport(
            formula_name=formula.name,
            product_type=product_type,
            findings=check_eu_compliance(ingredients, product_type, compliance_map),
            group_warnings=evaluate_group_limits(ingredients),
            safety_warnings=evaluate_safety_warnings(ingredients, product_type),
            ifra_notices=self.ifra_service.get_notices(ingredients, ifra_map),
            unresolved=[ing.name or ing.id for ing in ingredients if not ing.lookup_key],
            unverified=[ing.name or ing.id for ing in get_unverified_ingredients(ingredients)],
        )
        logger.info(
            "Evaluated %s (%s): %d findings, %d group warnings",
            formula.name,
            product_type.value,
            len(report.findings),
            len(report.group_warnings),
        )
        return report
