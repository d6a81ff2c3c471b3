"""Column detection and row mapping for CosIng annex CSV exports.

CosIng exports do not share a fixed column order, so logical roles are
discovered from header keywords. Explicit overrides always win.
"""

import re
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Callable, Mapping, Optional, Sequence

from ..models.regulatory import Applicability, RegulatoryEntry, RestrictionTier


# Placeholder CosIng uses for "no value"
EMPTY_PLACEHOLDER = "-"


@dataclass(frozen=True)
class ColumnMapping:
    """Header names holding each logical role, None when not present."""
    inci: Optional[str] = None
    inci_fallback: Optional[str] = None
    applicability: Optional[str] = None
    max_percentage: Optional[str] = None
    conditions: Optional[str] = None
    active_from: Optional[str] = None
    active_to: Optional[str] = None

    @property
    def has_identifier(self) -> bool:
        """True when a primary or fallback identifier column is known."""
        return bool(self.inci or self.inci_fallback)

    def merged_with(self, overrides: Optional["ColumnMapping"]) -> "ColumnMapping":
        """Return a copy with every non-empty override applied."""
        if overrides is None:
            return self
        changes = {
            f.name: getattr(overrides, f.name)
            for f in fields(self)
            if getattr(overrides, f.name)
        }
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _contains_any(*words: str) -> Callable[[str], bool]:
    return lambda header: any(w in header for w in words)


# Role -> ordered rules; the first rule with a matching header wins
DETECTION_RULES: dict[str, tuple[Callable[[str], bool], ...]] = {
    "inci": (
        lambda h: "identified" in h and ("ingredient" in h or "substance" in h),
        lambda h: "inci" in h or ("name" in h and "ingredient" in h),
    ),
    "inci_fallback": (
        lambda h: ("chemical" in h and "name" in h) or "inn" in h,
    ),
    "applicability": (
        _contains_any("product", "type", "application"),
    ),
    "max_percentage": (
        _contains_any("max", "maximum", "limit", "percentage", "%"),
    ),
    "conditions": (
        _contains_any("condition", "restriction", "note", "remark"),
    ),
    "active_from": (
        lambda h: "active" in h and any(w in h for w in ("from", "start", "valid")),
    ),
    "active_to": (
        lambda h: "active" in h and any(w in h for w in ("to", "end", "expire")),
    ),
}


def detect_column_mappings(headers: Sequence[str]) -> ColumnMapping:
    """Detect column roles from header names.

    Args:
        headers: CSV header row.

    Returns:
        ColumnMapping with every role that could be detected.
    """
    lower_headers = [h.lower().strip() for h in headers]
    detected: dict[str, str] = {}

    for role, rules in DETECTION_RULES.items():
        for rule in rules:
            match = next(
                (headers[i] for i, h in enumerate(lower_headers) if rule(h)),
                None,
            )
            if match is not None:
                detected[role] = match
                break

    return ColumnMapping(**detected)


def resolve_column_mappings(
    headers: Sequence[str],
    overrides: Optional[ColumnMapping] = None,
) -> ColumnMapping:
    """Detect column roles and apply explicit overrides on top."""
    return detect_column_mappings(headers).merged_with(overrides)


def _clean(value: Optional[str]) -> str:
    if not value:
        return ""
    value = value.strip()
    return "" if value == EMPTY_PLACEHOLDER else value


def extract_inci_name(row: Mapping[str, str], mapping: ColumnMapping) -> str:
    """Read the identifier of a row, falling back to the secondary column.

    Empty, whitespace-only and "-" values count as missing.

    Returns:
        The trimmed identifier, or "" when neither column has one.
    """
    if mapping.inci:
        primary = _clean(row.get(mapping.inci))
        if primary:
            return primary

    if mapping.inci_fallback:
        fallback = _clean(row.get(mapping.inci_fallback))
        if fallback:
            return fallback

    return ""


# Explicit keyword -> applicability table, checked in order
APPLICABILITY_KEYWORDS: tuple[tuple[str, Applicability], ...] = (
    ("leave", Applicability.LEAVE_ON),
    ("rinse", Applicability.RINSE_OFF),
)


def parse_applicability(value: Optional[str]) -> Applicability:
    """Map free text to an applicability; unmatched text means BOTH."""
    text = (value or "").strip().lower()
    for keyword, applicability in APPLICABILITY_KEYWORDS:
        if keyword in text:
            return applicability
    return Applicability.BOTH


def parse_percentage(value: Optional[str]) -> Optional[float]:
    """Parse a cap like "2", "2.5 %" or "0,5"; None when absent or invalid."""
    text = (value or "").strip()
    if not text:
        return None
    text = text.replace("%", "").replace(",", ".").strip()
    match = re.match(r"^\d+(\.\d+)?|^\.\d+", text)
    if not match:
        return None
    return float(match.group(0))


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse ISO (YYYY-MM-DD) or day-first (DD/MM/YYYY, DD-MM-YYYY) dates."""
    text = (value or "").strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    parts = re.split(r"[/\-.]", text)
    if len(parts) == 3:
        try:
            day, month, year = (int(p) for p in parts)
            return date(year, month, day)
        except ValueError:
            return None
    return None


def map_row(
    row: Mapping[str, str],
    mapping: ColumnMapping,
    tier: RestrictionTier,
    inci_canonical: str,
    source: str,
    reference_url: Optional[str],
) -> Optional[RegulatoryEntry]:
    """Map a CSV row to a RegulatoryEntry.

    Args:
        row: CSV row data.
        mapping: Resolved column roles.
        tier: Restriction tier of the whole file.
        inci_canonical: Canonical identifier, already normalized.
        source: Source label stored on the entry.
        reference_url: Reference URL stored on the entry.

    Returns:
        The entry, or None if the row cannot produce a valid one.
    """
    if not inci_canonical or not inci_canonical.strip():
        return None

    def cell(column: Optional[str]) -> str:
        return (row.get(column) or "").strip() if column else ""

    max_percentage = None
    if tier.is_numeric_cap:
        max_percentage = parse_percentage(cell(mapping.max_percentage))

    return RegulatoryEntry(
        inci_canonical=inci_canonical.strip(),
        tier=tier,
        applicability=parse_applicability(cell(mapping.applicability)),
        max_percentage=max_percentage,
        conditions_text=cell(mapping.conditions) or None,
        reference_url=reference_url,
        source=source,
        active_from=parse_date(cell(mapping.active_from)),
        active_to=parse_date(cell(mapping.active_to)),
    )
