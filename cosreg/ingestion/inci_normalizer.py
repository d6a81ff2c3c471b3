"""INCI name normalization through the synonym table."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..integrations.ingredient_kb import SynonymSource

logger = logging.getLogger(__name__)


class SynonymCache:
    """Resolved synonyms keyed by case-folded name.

    One instance belongs to one ingestion run or one evaluation session.
    Not safe for concurrent use.
    """

    def __init__(self):
        self._entries: dict[str, str] = {}

    def get(self, name: str) -> Optional[str]:
        return self._entries.get(name.strip().lower())

    def put(self, name: str, canonical: str) -> None:
        self._entries[name.strip().lower()] = canonical

    def __contains__(self, name: str) -> bool:
        return name.strip().lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class NormalizationResult:
    """Raw (trimmed) name -> canonical name, plus lookup warnings."""
    mapping: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def canonical(self, name: str) -> str:
        """Canonical form of a name; the trimmed name itself when unknown."""
        trimmed = name.strip()
        return self.mapping.get(trimmed, trimmed)


class InciNormalizer:
    """Resolves raw ingredient identifiers to canonical INCI names."""

    def __init__(self, synonym_source: SynonymSource):
        """Initialize the normalizer.

        Args:
            synonym_source: Batched synonym lookup.
        """
        self.synonym_source = synonym_source

    def normalize_batch(
        self,
        names: Iterable[str],
        cache: Optional[SynonymCache] = None,
    ) -> NormalizationResult:
        """Normalize a batch of names with a single synonym lookup.

        Names already in the cache are served from it. A failed lookup does
        not abort the batch: every unresolved name becomes its own canonical
        form and a warning is returned.

        Args:
            names: Raw identifiers. Blank entries are ignored.
            cache: Cache to read and update. A throwaway one is used if omitted.

        Returns:
            NormalizationResult keyed by trimmed name.
        """
        cache = cache if cache is not None else SynonymCache()
        result = NormalizationResult()

        unique_names = list(dict.fromkeys(
            name.strip() for name in names if name and name.strip()
        ))

        uncached: list[str] = []
        for name in unique_names:
            cached = cache.get(name)
            if cached is not None:
                result.mapping[name] = cached
            else:
                uncached.append(name)

        if not uncached:
            return result

        keys = list(dict.fromkeys(name.lower() for name in uncached))
        resolved: dict[str, str] = {}
        lookup_ok = True
        try:
            resolved = self.synonym_source.lookup(keys) or {}
        except Exception as exc:  # noqa: BLE001 - any lookup failure degrades to identity
            lookup_ok = False
            message = f"Error resolving synonym batch: {exc}"
            logger.warning("%s - using names as canonical", message)
            result.warnings.append(message)

        for name in uncached:
            canonical = resolved.get(name.lower()) or name
            result.mapping[name] = canonical
            # Failed lookups are not cached so a later call can retry
            if lookup_ok:
                cache.put(name, canonical)

        logger.debug(
            "Normalized %d names (%d cached, %d looked up, %d resolved)",
            len(unique_names),
            len(unique_names) - len(uncached),
            len(uncached),
            len(resolved),
        )
        return result

    def normalize(self, name: str, cache: Optional[SynonymCache] = None) -> str:
        """Normalize a single name. Blank input gives ""."""
        if not name or not name.strip():
            return ""
        return self.normalize_batch([name], cache).canonical(name)
