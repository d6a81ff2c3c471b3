"""Repository for regulatory data access."""

import logging
from datetime import date
from typing import Iterable, Mapping, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import sessionmaker

from ..integrations.ingredient_kb import KnowledgeBaseEntry
from ..models.regulatory import (
    Applicability,
    IfraStandard,
    RegulatoryEntry,
    RestrictionTier,
    duplicate_key,
)
from .database import get_engine, get_session_factory, init_db
from .tables import (
    EuAnnexEntryRecord,
    IfraEntryRecord,
    IngredientKbRecord,
    IngredientSynonymRecord,
)

logger = logging.getLogger(__name__)


def _unique_keys(names: Iterable[str]) -> list[str]:
    """Trimmed, case-folded, deduplicated, non-blank names in input order."""
    return list(dict.fromkeys(
        name.strip().lower() for name in names if name and name.strip()
    ))


def _to_entry(record: EuAnnexEntryRecord) -> RegulatoryEntry:
    return RegulatoryEntry(
        id=record.id,
        inci_canonical=record.inci_canonical,
        tier=RestrictionTier(record.annex),
        applicability=Applicability(record.product_type),
        max_percentage=record.max_percentage,
        conditions_text=record.conditions_text,
        reference_url=record.reference_url,
        source=record.source or "",
        active_from=record.active_from,
        active_to=record.active_to,
        created_at=record.created_at,
    )


def _to_record(entry: RegulatoryEntry) -> EuAnnexEntryRecord:
    record = EuAnnexEntryRecord(
        inci_canonical=entry.inci_canonical,
        inci_key=entry.inci_canonical.strip().lower(),
        annex=entry.tier.value,
        product_type=entry.applicability.value,
        max_percentage=entry.max_percentage,
        conditions_text=entry.conditions_text,
        reference_url=entry.reference_url,
        source=entry.source,
        active_from=entry.active_from,
        active_to=entry.active_to,
    )
    if entry.id:
        record.id = entry.id
    return record


def _to_ifra_standard(record: IfraEntryRecord) -> IfraStandard:
    return IfraStandard(
        ifra_key=record.ifra_key,
        amendment_number=record.amendment_number,
        standard_name=record.standard_name,
        standard_type=record.ifra_standard_type,
        cas_numbers=record.cas_numbers,
        synonyms=record.synonyms,
        source=record.source or "",
        reference_url=record.reference_url,
    )


class RegulatoryEntryRepository:
    """Repository for EU annex entries and IFRA standards.

    Storage errors surface as ``sqlalchemy.exc.SQLAlchemyError``; callers
    decide whether they are fatal.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        """Initialize the repository.

        Args:
            session_factory: Session factory. Uses the shared one if not provided.
        """
        self.session_factory = session_factory or get_session_factory()

    # EU annex entries
    def find_existing_keys(
        self,
        inci_names: Iterable[str],
        tier: RestrictionTier,
    ) -> set[tuple]:
        """Get duplicate keys already stored for these identifiers and tier.

        Args:
            inci_names: Canonical identifiers (exact match).
            tier: Restriction tier being ingested.

        Returns:
            Set of duplicate keys (see ``RegulatoryEntry.duplicate_key``).
        """
        names = list(dict.fromkeys(n for n in inci_names if n))
        if not names:
            return set()

        stmt = (
            select(
                EuAnnexEntryRecord.inci_canonical,
                EuAnnexEntryRecord.annex,
                EuAnnexEntryRecord.product_type,
                EuAnnexEntryRecord.max_percentage,
            )
            .where(EuAnnexEntryRecord.inci_canonical.in_(names))
            .where(EuAnnexEntryRecord.annex == tier.value)
        )
        with self.session_factory() as session:
            rows = session.execute(stmt).all()

        return {duplicate_key(*row) for row in rows}

    def insert_entries(self, entries: list[RegulatoryEntry]) -> int:
        """Insert entries in one transaction.

        Args:
            entries: Entries to insert.

        Returns:
            Number of inserted entries.

        Raises:
            SQLAlchemyError: If the insert fails; nothing from this call is kept.
        """
        if not entries:
            return 0
        with self.session_factory() as session, session.begin():
            session.add_all([_to_record(entry) for entry in entries])
        logger.debug("Inserted %d annex entries", len(entries))
        return len(entries)

    def get_compliance_map(
        self,
        inci_names: Iterable[str],
        on_date: Optional[date] = None,
    ) -> dict[str, list[RegulatoryEntry]]:
        """Get entries reachable by each canonical identifier.

        Entries outside their active window on ``on_date`` (default today)
        are left out.

        Args:
            inci_names: Canonical identifiers of a formula.
            on_date: Day to check active windows against.

        Returns:
            Mapping of case-folded identifier to its entries, oldest first
            (ties broken by annex, product type and cap).
        """
        keys = _unique_keys(inci_names)
        if not keys:
            return {}

        day = on_date or date.today()
        stmt = (
            select(EuAnnexEntryRecord)
            .where(EuAnnexEntryRecord.inci_key.in_(keys))
            .order_by(
                EuAnnexEntryRecord.created_at,
                EuAnnexEntryRecord.annex,
                EuAnnexEntryRecord.product_type,
                EuAnnexEntryRecord.max_percentage,
                EuAnnexEntryRecord.id,
            )
        )
        with self.session_factory() as session:
            records = session.scalars(stmt).all()

        compliance_map: dict[str, list[RegulatoryEntry]] = {}
        for record in records:
            entry = _to_entry(record)
            if not entry.is_active_on(day):
                continue
            compliance_map.setdefault(record.inci_key, []).append(entry)
        return compliance_map

    def count_entries(self, tier: Optional[RestrictionTier] = None) -> int:
        """Count stored annex entries, optionally for one tier."""
        stmt = select(func.count()).select_from(EuAnnexEntryRecord)
        if tier is not None:
            stmt = stmt.where(EuAnnexEntryRecord.annex == tier.value)
        with self.session_factory() as session:
            return session.scalar(stmt) or 0

    # IFRA standards
    def upsert_ifra_standards(self, standards: list[IfraStandard]) -> int:
        """Insert or update IFRA standards by IFRA key in one transaction.

        Raises:
            SQLAlchemyError: If the write fails.
        """
        if not standards:
            return 0
        with self.session_factory() as session, session.begin():
            for standard in standards:
                session.merge(IfraEntryRecord(
                    ifra_key=standard.ifra_key,
                    amendment_number=standard.amendment_number,
                    standard_name=standard.standard_name,
                    standard_name_key=standard.standard_name.strip().lower(),
                    cas_numbers=standard.cas_numbers,
                    synonyms=standard.synonyms,
                    ifra_standard_type=standard.standard_type,
                    source=standard.source,
                    reference_url=standard.reference_url,
                ))
        return len(standards)

    def get_ifra_map(self, inci_names: Iterable[str]) -> dict[str, list[IfraStandard]]:
        """Get IFRA standards matching each identifier by name or synonym.

        Returns:
            Mapping of case-folded identifier to matching standards.
        """
        keys = _unique_keys(inci_names)
        if not keys:
            return {}

        conditions = [IfraEntryRecord.standard_name_key.in_(keys)]
        conditions.extend(IfraEntryRecord.synonyms.ilike(f"%{key}%") for key in keys)
        stmt = (
            select(IfraEntryRecord)
            .where(or_(*conditions))
            .order_by(IfraEntryRecord.ifra_key)
        )
        with self.session_factory() as session:
            records = session.scalars(stmt).all()

        ifra_map: dict[str, list[IfraStandard]] = {}
        for record in records:
            standard = _to_ifra_standard(record)
            names = set(standard.match_names)
            for key in keys:
                if key in names:
                    ifra_map.setdefault(key, []).append(standard)
        return ifra_map


class SqlSynonymSource:
    """Synonym lookup backed by the ``ingredient_synonyms`` table."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or get_session_factory()

    def lookup(self, keys: list[str]) -> dict[str, str]:
        """Resolve case-folded names; see ``SynonymSource.lookup``."""
        if not keys:
            return {}
        stmt = select(
            IngredientSynonymRecord.synonym,
            IngredientSynonymRecord.canonical_inci,
        ).where(IngredientSynonymRecord.synonym.in_(keys))
        with self.session_factory() as session:
            rows = session.execute(stmt).all()
        return {synonym.strip().lower(): canonical for synonym, canonical in rows}

    def add_synonyms(self, synonyms: Mapping[str, str]) -> int:
        """Store synonym -> canonical INCI pairs, replacing existing ones."""
        with self.session_factory() as session, session.begin():
            for synonym, canonical in synonyms.items():
                key = synonym.strip().lower()
                existing = session.scalar(
                    select(IngredientSynonymRecord).where(IngredientSynonymRecord.synonym == key)
                )
                if existing is None:
                    session.add(IngredientSynonymRecord(synonym=key, canonical_inci=canonical))
                else:
                    existing.canonical_inci = canonical
        return len(synonyms)


class SqlKnowledgeBase:
    """Ingredient knowledge base backed by the ``ingredient_kb`` table."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or get_session_factory()

    def get_entries(self, inci_names: list[str]) -> dict[str, KnowledgeBaseEntry]:
        keys = _unique_keys(inci_names)
        if not keys:
            return {}
        stmt = select(IngredientKbRecord).where(IngredientKbRecord.inci_key.in_(keys))
        with self.session_factory() as session:
            records = session.scalars(stmt).all()
        return {
            record.inci_key: KnowledgeBaseEntry(
                inci=record.inci,
                category=record.category,
                default_max_leave_on=record.default_max_leave_on,
                default_max_rinse_off=record.default_max_rinse_off,
                notes=record.notes,
            )
            for record in records
        }

    def add_entries(self, entries: Iterable[KnowledgeBaseEntry]) -> None:
        """Store knowledge base rows, replacing existing ones."""
        with self.session_factory() as session, session.begin():
            for entry in entries:
                session.merge(IngredientKbRecord(
                    inci_key=entry.inci.strip().lower(),
                    inci=entry.inci,
                    category=entry.category,
                    default_max_leave_on=entry.default_max_leave_on,
                    default_max_rinse_off=entry.default_max_rinse_off,
                    notes=entry.notes,
                ))


# Singleton repository instance
_repository: Optional[RegulatoryEntryRepository] = None


def get_repository() -> RegulatoryEntryRepository:
    """Get or create the default repository.

    Creates missing tables on first use.

    Returns:
        The singleton repository instance.
    """
    global _repository
    if _repository is None:
        init_db(get_engine())
        _repository = RegulatoryEntryRepository(get_session_factory())
    return _repository
