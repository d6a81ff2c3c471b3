"""Category total checks against the strictest known cap in each category."""

from typing import Sequence

from ..models.evaluation import GroupWarning, ResolvedIngredient


def evaluate_group_limits(ingredients: Sequence[ResolvedIngredient]) -> list[GroupWarning]:
    """Warn when a category's summed percentage exceeds its tightest cap.

    Ingredients without a category are ignored. A category with no known
    ``max_usage`` among its members produces no warning.

    Args:
        ingredients: Ingredients with category and optional max usage.

    Returns:
        Warnings in order of each category's first appearance.
    """
    totals: dict[str, float] = {}
    limits: dict[str, float] = {}

    for ingredient in ingredients:
        category = ingredient.category
        if not category:
            continue
        totals[category] = totals.get(category, 0.0) + ingredient.percentage
        if ingredient.max_usage is not None:
            current = limits.get(category)
            if current is None or ingredient.max_usage < current:
                limits[category] = ingredient.max_usage

    warnings = []
    for category, total in totals.items():
        limit = limits.get(category)
        if limit is not None and total > limit:
            warnings.append(GroupWarning(
                category=category,
                total_percent=total,
                limit_percent=limit,
            ))
    return warnings
