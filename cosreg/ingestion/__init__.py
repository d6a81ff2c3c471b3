"""CSV ingestion for EU annex and IFRA reference data."""

from .errors import IngestionError, ColumnDetectionError
from .csv_parser import ParsedCsv, parse_csv, parse_csv_line, read_csv_file
from .column_mapper import (
    ColumnMapping,
    detect_column_mappings,
    resolve_column_mappings,
    extract_inci_name,
    map_row,
)
from .inci_normalizer import InciNormalizer, NormalizationResult, SynonymCache
from .annex_ingestion import (
    AnnexIngestionPipeline,
    DuplicateCheckResult,
    DuplicateCheckStatus,
    IngestionOptions,
)
from .ifra_ingestion import ingest_ifra_csv

__all__ = [
    "IngestionError",
    "ColumnDetectionError",
    "ParsedCsv",
    "parse_csv",
    "parse_csv_line",
    "read_csv_file",
    "ColumnMapping",
    "detect_column_mappings",
    "resolve_column_mappings",
    "extract_inci_name",
    "map_row",
    "InciNormalizer",
    "NormalizationResult",
    "SynonymCache",
    "AnnexIngestionPipeline",
    "DuplicateCheckResult",
    "DuplicateCheckStatus",
    "IngestionOptions",
    "ingest_ifra_csv",
]
