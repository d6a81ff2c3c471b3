"""SQLAlchemy table definitions for regulatory reference data."""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Float, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all cosreg tables."""


class EuAnnexEntryRecord(Base):
    """One EU annex restriction, unique per (inci, annex, product type, cap)."""
    __tablename__ = "eu_annex_entries"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    inci_canonical: Mapped[str] = mapped_column(String(512), nullable=False)
    # Case-folded inci_canonical, the join key for formula lookups
    inci_key: Mapped[str] = mapped_column(String(512), nullable=False)
    annex: Mapped[str] = mapped_column(String(8), nullable=False, comment="II, III, VI")
    product_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="both",
        comment="leave_on, rinse_off, both",
    )
    max_percentage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    conditions_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reference_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    active_from: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    active_to: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_eu_annex_entries_inci_key", "inci_key"),
        Index("ix_eu_annex_entries_inci_canonical_annex", "inci_canonical", "annex"),
    )


class IngredientSynonymRecord(Base):
    """Synonym or trade name pointing at a canonical INCI name."""
    __tablename__ = "ingredient_synonyms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    synonym: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        unique=True,
        comment="Stored lower-cased and trimmed",
    )
    canonical_inci: Mapped[str] = mapped_column(String(512), nullable=False)


class IngredientKbRecord(Base):
    """Ingredient knowledge base row (category and default usage caps)."""
    __tablename__ = "ingredient_kb"

    inci_key: Mapped[str] = mapped_column(String(512), primary_key=True)
    inci: Mapped[str] = mapped_column(String(512), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    default_max_leave_on: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    default_max_rinse_off: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class IfraEntryRecord(Base):
    """IFRA standard listing, upserted by its IFRA key."""
    __tablename__ = "ifra_entries"

    ifra_key: Mapped[str] = mapped_column(String(64), primary_key=True)
    amendment_number: Mapped[int] = mapped_column(Integer, nullable=False)
    standard_name: Mapped[str] = mapped_column(String(512), nullable=False)
    standard_name_key: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    cas_numbers: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    synonyms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ifra_standard_type: Mapped[str] = mapped_column(String(64), nullable=False)
    source: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reference_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
