"""Shared fixtures: in-memory SQLite storage and sample annex data."""

import pytest

from cosreg.data.database import create_db_engine, create_session_factory, init_db
from cosreg.data.repository import RegulatoryEntryRepository, SqlSynonymSource


@pytest.fixture
def db_engine():
    """Create an isolated in-memory database with all tables."""
    engine = create_db_engine("sqlite://", echo=False)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the in-memory database."""
    return create_session_factory(db_engine)


@pytest.fixture
def repository(session_factory):
    """Repository backed by the in-memory database."""
    return RegulatoryEntryRepository(session_factory)


@pytest.fixture
def synonym_source(session_factory):
    """Synonym table backed by the in-memory database."""
    return SqlSynonymSource(session_factory)


@pytest.fixture
def annex_iii_csv():
    """Small Annex III export with a leave-on cap and a rinse-off cap."""
    return (
        "INCI Name,Product Type,Maximum %,Conditions\n"
        "Salicylic Acid,Leave-on,2,Not for children under 3\n"
        "Salicylic Acid,Rinse-off products,3,\n"
    )
