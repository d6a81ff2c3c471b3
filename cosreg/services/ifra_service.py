"""IFRA standards lookup.

IFRA matches are informational only. They never block a formula and are
reported next to EU findings so the formulator can request the supplier
certificate.
"""

import logging
from typing import Mapping, Optional, Sequence

from ..data.repository import RegulatoryEntryRepository
from ..models.evaluation import IfraNotice, ResolvedIngredient
from ..models.regulatory import IfraStandard

logger = logging.getLogger(__name__)


class IFRAService:
    """Service for flagging ingredients listed in IFRA standards."""

    def __init__(self, repository: Optional[RegulatoryEntryRepository] = None):
        """Initialize the service.

        Args:
            repository: Repository holding IFRA standards. Only needed by
                ``lookup``; ``get_notices`` works on a given map.
        """
        self.repository = repository

    def lookup(self, ingredients: Sequence[ResolvedIngredient]) -> dict[str, list[IfraStandard]]:
        """Fetch IFRA standards for the ingredients' lookup keys."""
        if self.repository is None:
            return {}
        keys = [ingredient.lookup_key for ingredient in ingredients]
        return self.repository.get_ifra_map(keys)

    def get_notices(
        self,
        ingredients: Sequence[ResolvedIngredient],
        ifra_map: Mapping[str, Sequence[IfraStandard]],
    ) -> list[IfraNotice]:
        """Build notices for ingredients matching an IFRA standard.

        Args:
            ingredients: Resolved formula ingredients.
            ifra_map: Standards keyed by case-folded name or synonym.

        Returns:
            One notice per (ingredient, standard) pair.
        """
        notices = []
        for ingredient in ingredients:
            key = ingredient.lookup_key
            if not key:
                continue
            for standard in ifra_map.get(key, ()):
                notices.append(IfraNotice(
                    ingredient_id=ingredient.id,
                    ingredient_name=ingredient.name,
                    ifra_key=standard.ifra_key,
                    standard_name=standard.standard_name,
                    standard_type=standard.standard_type,
                    amendment_number=standard.amendment_number,
                    reference_url=standard.reference_url,
                ))
        if notices:
            logger.debug("Found %d IFRA notices", len(notices))
        return notices
