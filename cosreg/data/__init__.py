"""Data access layer for cosreg."""

from .database import (
    create_db_engine,
    create_session_factory,
    get_engine,
    get_session_factory,
    init_db,
)
from .repository import (
    RegulatoryEntryRepository,
    SqlKnowledgeBase,
    SqlSynonymSource,
    get_repository,
)

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "init_db",
    "RegulatoryEntryRepository",
    "SqlKnowledgeBase",
    "SqlSynonymSource",
    "get_repository",
]
