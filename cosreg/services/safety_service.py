"""Category safety warnings for formula ingredients."""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..models.evaluation import ResolvedIngredient, SafetyWarning, Severity
from ..models.regulatory import ProductType


@dataclass(frozen=True)
class SafetyRule:
    """Concentration above which a category deserves a review."""
    category: str
    leave_on_warn_percent: Optional[float]
    rinse_off_warn_percent: Optional[float]
    severity: Severity
    title: str
    message: str

    def threshold_for(self, product_type: ProductType) -> Optional[float]:
        if product_type is ProductType.LEAVE_ON:
            return self.leave_on_warn_percent
        return self.rinse_off_warn_percent


SAFETY_RULES: list[SafetyRule] = [
    SafetyRule(
        "Fragrance", 0.3, 0.8, Severity.WARNING,
        "Fragrance Concentration",
        "Get supplier IFRA certificate + allergen declaration if applicable.",
    ),
    SafetyRule(
        "Essential Oils", 0.2, 0.5, Severity.WARNING,
        "Essential Oil Concentration",
        "Verify dermal limits for the specific essential oil.",
    ),
    SafetyRule(
        "Preservatives", 1.0, 1.0, Severity.CRITICAL,
        "Preservative Concentration",
        "Verify Annex V limits for the specific preservative system.",
    ),
    SafetyRule(
        "Surfactants", 8.0, 20.0, Severity.WARNING,
        "High Surfactant Load",
        "High surfactant load may increase irritation; consider product type and mildness.",
    ),
    SafetyRule(
        "pH Adjusters", 0.3, 0.5, Severity.WARNING,
        "pH Adjuster Concentration",
        "Check final product pH; extremes irritate skin/eyes.",
    ),
    SafetyRule(
        "UV Filters", 5.0, 3.0, Severity.WARNING,
        "UV Filter Concentration",
        "UV filters require Annex VI compliance; verify max % and conditions.",
    ),
    SafetyRule(
        "Colorants", 0.2, 0.5, Severity.WARNING,
        "Colorant Concentration",
        "Colorants require Annex IV compliance; verify allowed CI and restrictions.",
    ),
    SafetyRule(
        "Actives", 2.0, 5.0, Severity.WARNING,
        "Active Ingredient Concentration",
        "Actives may be restricted (Annex III) or need SCCS review; verify limits.",
    ),
    SafetyRule(
        "Extracts", 1.5, 3.0, Severity.WARNING,
        "Extract Concentration",
        "Botanical extracts may increase sensitization risk; verify allergens and target group.",
    ),
    SafetyRule(
        "Solubilizers", 2.5, 4.0, Severity.WARNING,
        "High Solubilizer Load",
        "High solubilizer load may irritate; keep as low as practical.",
    ),
    SafetyRule(
        "Emulsifiers", 4.0, 6.0, Severity.INFO,
        "High Emulsifier Load",
        "High emulsifier load may affect skin feel; review formula balance.",
    ),
    SafetyRule(
        "Humectants", 8.0, 4.0, Severity.INFO,
        "High Humectant Load",
        "High humectant load can feel tacky or affect stability.",
    ),
    SafetyRule(
        "Thickeners", 1.5, 2.5, Severity.INFO,
        "High Thickener Load",
        "High thickener load may cause clumping or poor aesthetics.",
    ),
    SafetyRule(
        "Oils & Butters", 25.0, 8.0, Severity.INFO,
        "High Oil/Butter Load",
        "High oil/butter load can be occlusive/comedogenic in leave-on facial products.",
    ),
]

RULES_BY_CATEGORY: dict[str, SafetyRule] = {rule.category: rule for rule in SAFETY_RULES}


def evaluate_safety_warnings(
    ingredients: Sequence[ResolvedIngredient],
    product_type: ProductType,
) -> list[SafetyWarning]:
    """Warn for each ingredient strictly above its category threshold.

    Categories are matched exactly. Ingredients without a category, or in a
    category without a rule, are ignored.
    """
    warnings = []
    for ingredient in ingredients:
        if not ingredient.category:
            continue
        rule = RULES_BY_CATEGORY.get(ingredient.category)
        if rule is None:
            continue
        threshold = rule.threshold_for(product_type)
        if threshold is None or ingredient.percentage <= threshold:
            continue
        warnings.append(SafetyWarning(
            id=f"{ingredient.category}:{ingredient.id}",
            severity=rule.severity,
            title=rule.title,
            message=rule.message,
            ingredient_id=ingredient.id,
            ingredient_name=ingredient.name,
            category=ingredient.category,
            threshold_percent=threshold,
            actual_percent=ingredient.percentage,
        ))
    return warnings


def get_unverified_ingredients(
    ingredients: Sequence[ResolvedIngredient],
) -> list[ResolvedIngredient]:
    """Ingredients marked unverified, or with no verification flag and no max usage."""
    return [
        ingredient for ingredient in ingredients
        if ingredient.is_verified is False
        or (ingredient.is_verified is None and ingredient.max_usage is None)
    ]
