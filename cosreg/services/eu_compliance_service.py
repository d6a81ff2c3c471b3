"""EU Annex II/III/VI compliance evaluation.

Rules:
- Annex II: any applicable match blocks, regardless of percentage.
- Annex III/VI: blocks when the entry has a cap and the ingredient
  percentage is strictly above it.

Every applicable entry is evaluated on its own; an ingredient matching
several entries can produce several findings.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional, Sequence

from ..models.evaluation import Finding, ResolvedIngredient
from ..models.regulatory import ProductType, RegulatoryEntry, RestrictionTier


def _format_cap(value: float) -> str:
    """Render a cap as JavaScript's number-to-string does.

    Shortest round-trip digits, positional between 1e-7 and 1e21,
    otherwise ``1e-7`` style exponents.
    """
    text = repr(float(value))
    mantissa, _, exponent = text.partition("e")
    if exponent and not -7 < int(exponent) < 21:
        exp = int(exponent)
        return f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"
    return format(Decimal(text).normalize(), "f")


def _format_percentage(value: float) -> str:
    """Two decimals, ties rounded away from zero on the exact binary value."""
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _finding_id(entry: RegulatoryEntry, ingredient: ResolvedIngredient) -> str:
    return f"eu-annex-{entry.tier.value.lower()}-{entry.id}-{ingredient.id}"


def evaluate_entry(
    ingredient: ResolvedIngredient,
    entry: RegulatoryEntry,
    product_type: ProductType,
) -> Optional[Finding]:
    """Evaluate one ingredient against one annex entry.

    Returns:
        A Finding if the entry blocks the ingredient, else None.
    """
    if not entry.applies_to(product_type):
        return None

    conditions = entry.conditions_text or ""

    if entry.tier is RestrictionTier.PROHIBITED:
        reason = f"Annex II: This ingredient is prohibited in cosmetic products. {conditions}"
        max_percentage = None
    elif entry.tier.is_numeric_cap:
        cap = entry.max_percentage
        if cap is None or ingredient.percentage <= cap:
            return None
        reason = (
            f"Annex {entry.tier.value}: Maximum allowed concentration is "
            f"{_format_cap(cap)}%, but formula contains "
            f"{_format_percentage(ingredient.percentage)}%. {conditions}"
        )
        max_percentage = cap
    else:
        return None

    return Finding(
        id=_finding_id(entry, ingredient),
        tier=entry.tier,
        inci_canonical=entry.inci_canonical,
        ingredient_name=ingredient.name,
        ingredient_id=ingredient.id,
        applicability=entry.applicability,
        max_percentage=max_percentage,
        actual_percentage=ingredient.percentage,
        reason=reason.strip(),
        conditions_text=entry.conditions_text,
        reference_url=entry.reference_url,
        source=entry.source or None,
        entry_id=entry.id,
    )


def check_eu_compliance(
    ingredients: Sequence[ResolvedIngredient],
    product_type: ProductType,
    compliance_map: Mapping[str, Sequence[RegulatoryEntry]],
) -> list[Finding]:
    """Check resolved ingredients against EU annex entries.

    Args:
        ingredients: Ingredients with canonical identifiers.
        product_type: Product type of the formula.
        compliance_map: Entries keyed by case-folded canonical identifier.

    Returns:
        Findings in ingredient order, then entry order.
    """
    findings: list[Finding] = []
    for ingredient in ingredients:
        key = ingredient.lookup_key
        if not key:
            continue
        for entry in compliance_map.get(key, ()):
            finding = evaluate_entry(ingredient, entry, product_type)
            if finding is not None:
                findings.append(finding)
    return findings
