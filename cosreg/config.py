"""Environment-driven settings and logging setup."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


DEFAULT_DATABASE_URL = "sqlite:///cosreg.db"
DEFAULT_ANNEX_SOURCE = "CosIng CSV Import"
DEFAULT_ANNEX_REFERENCE_URL = "https://ec.europa.eu/growth/tools-databases/cosing/"
DEFAULT_IFRA_SOURCE = "IFRA Standards Overview"
DEFAULT_IFRA_REFERENCE_URL = "https://ifrafragrance.org/safe-use/standards"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _get_bool_env(name: str, default: bool) -> bool:
    """Read a boolean from the environment with safe fallback."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """Read a positive integer from the environment with safe fallback."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        value = int(raw_value)
    except ValueError:
        return default
    return value if value > 0 else default


def _get_str_env(name: str, default: str) -> str:
    raw_value = os.getenv(name, "").strip()
    return raw_value or default


@dataclass(frozen=True)
class Settings:
    """Runtime settings for ingestion and storage."""
    database_url: str
    sql_echo: bool
    ingest_batch_size: int
    default_source: str
    default_reference_url: str
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings read from the environment."""
    return Settings(
        database_url=_get_str_env("COSREG_DATABASE_URL", DEFAULT_DATABASE_URL),
        sql_echo=_get_bool_env("COSREG_SQL_ECHO", False),
        ingest_batch_size=_get_int_env("COSREG_INGEST_BATCH_SIZE", 100),
        default_source=_get_str_env("COSREG_DEFAULT_SOURCE", DEFAULT_ANNEX_SOURCE),
        default_reference_url=_get_str_env(
            "COSREG_DEFAULT_REFERENCE_URL", DEFAULT_ANNEX_REFERENCE_URL
        ),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for a CLI or API process."""
    log_level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=LOG_FORMAT,
    )
