"""EU annex CSV ingestion pipeline.

Stages run in a fixed order with no back-edges:

    Parse -> DetectColumns -> ExtractAndNormalizeIdentifiers -> MapRows
          -> CheckDuplicates -> Persist -> Report

Row-level defects are skipped with a warning. A failing duplicate check
downgrades to a warning and the run continues without idempotency. A failing
insert batch is recorded as an error; later batches still run and earlier
ones stay persisted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..config import DEFAULT_ANNEX_REFERENCE_URL, DEFAULT_ANNEX_SOURCE
from ..data.repository import RegulatoryEntryRepository
from ..integrations.ingredient_kb import SynonymSource
from ..models.regulatory import IngestionRunReport, RegulatoryEntry, RestrictionTier
from .column_mapper import (
    ColumnMapping,
    extract_inci_name,
    map_row,
    resolve_column_mappings,
)
from .csv_parser import parse_csv
from .errors import ColumnDetectionError, IngestionError
from .inci_normalizer import InciNormalizer, SynonymCache

logger = logging.getLogger(__name__)

INSERT_BATCH_SIZE = 100
DRY_RUN_PREVIEW_LIMIT = 5


@dataclass
class IngestionOptions:
    """Parameters of one annex ingestion run."""
    tier: RestrictionTier
    source: str = DEFAULT_ANNEX_SOURCE
    reference_url: str = DEFAULT_ANNEX_REFERENCE_URL
    dry_run: bool = False
    column_overrides: Optional[ColumnMapping] = None
    skip_duplicates_check: bool = False


class DuplicateCheckStatus(Enum):
    CHECKED = "checked"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DuplicateCheckResult:
    """Outcome of the duplicate-key lookup."""
    status: DuplicateCheckStatus
    existing_keys: frozenset = frozenset()
    message: Optional[str] = None

    @classmethod
    def checked(cls, keys: set) -> "DuplicateCheckResult":
        return cls(DuplicateCheckStatus.CHECKED, frozenset(keys))

    @classmethod
    def failed(cls, message: str) -> "DuplicateCheckResult":
        return cls(DuplicateCheckStatus.FAILED, message=message)

    @classmethod
    def skipped(cls) -> "DuplicateCheckResult":
        return cls(DuplicateCheckStatus.SKIPPED)


class AnnexIngestionPipeline:
    """Ingests CosIng Annex II/III/VI CSV exports idempotently."""

    def __init__(
        self,
        repository: RegulatoryEntryRepository,
        synonym_source: SynonymSource,
        batch_size: int = INSERT_BATCH_SIZE,
    ):
        """Initialize the pipeline.

        Args:
            repository: Storage for annex entries.
            synonym_source: Synonym lookup used to canonicalize identifiers.
            batch_size: Rows per insert batch.
        """
        self.repository = repository
        self.normalizer = InciNormalizer(synonym_source)
        self.batch_size = max(1, batch_size)

    def ingest(
        self,
        csv_content: str,
        options: IngestionOptions,
        synonym_cache: Optional[SynonymCache] = None,
    ) -> IngestionRunReport:
        """Run the pipeline over CSV text.

        Args:
            csv_content: Raw CSV text.
            options: Run parameters.
            synonym_cache: Cache for this run. A fresh one is used if omitted.

        Returns:
            IngestionRunReport; ``success`` is True iff no error was recorded.
        """
        report = IngestionRunReport(dry_run=options.dry_run)
        cache = synonym_cache if synonym_cache is not None else SynonymCache()

        try:
            self._run(csv_content, options, cache, report)
        except IngestionError as exc:
            logger.error("Annex ingestion aborted: %s", exc)
            report.aborted = True
            report.fail(str(exc))
        except Exception as exc:  # noqa: BLE001 - reported as a fatal run error
            logger.exception("Annex ingestion failed")
            report.fail(f"Fatal error: {exc}")

        logger.info(
            "Annex %s ingestion finished success=%s total=%d inserted=%d "
            "duplicates=%d skipped=%d errors=%d",
            options.tier.value if options.tier else "?",
            report.success,
            report.total_rows,
            report.inserted,
            report.duplicates,
            report.skipped,
            report.errors,
        )
        return report

    def _run(
        self,
        csv_content: str,
        options: IngestionOptions,
        cache: SynonymCache,
        report: IngestionRunReport,
    ) -> None:
        if not isinstance(options.tier, RestrictionTier):
            raise IngestionError("Annex tier is required (II, III or VI)")

        # Parse
        logger.info("Parsing CSV...")
        parsed = parse_csv(csv_content)
        report.error_messages.extend(parsed.errors)
        if not parsed.rows:
            raise IngestionError("No data rows found in CSV")
        report.total_rows = len(parsed.rows)

        # DetectColumns
        mapping = resolve_column_mappings(parsed.headers, options.column_overrides)
        if not mapping.has_identifier:
            raise ColumnDetectionError(
                "Could not detect INCI column. Please provide an INCI column override"
            )
        logger.info("Column mappings: %s", mapping.to_dict())

        # ExtractAndNormalizeIdentifiers
        raw_names = [extract_inci_name(row, mapping) for row in parsed.rows]
        normalization = self.normalizer.normalize_batch(
            [name for name in raw_names if name], cache
        )
        report.warnings.extend(normalization.warnings)
        logger.info("Normalized %d INCI names", len(normalization.mapping))

        # MapRows
        entries = self._map_rows(parsed.rows, raw_names, normalization, mapping, options, report)
        logger.info("Mapped %d entries", len(entries))

        # CheckDuplicates
        check = self._check_duplicates(entries, options.tier, options.skip_duplicates_check)
        if check.status is DuplicateCheckStatus.FAILED:
            message = (
                f"Failed to check duplicates: {check.message} "
                "- proceeding without duplicate check"
            )
            logger.warning(message)
            report.warnings.append(message)
        elif check.status is DuplicateCheckStatus.SKIPPED:
            logger.info("Skipping duplicate check")

        to_insert: list[RegulatoryEntry] = []
        for entry in entries:
            if entry.duplicate_key in check.existing_keys:
                report.duplicates += 1
            else:
                to_insert.append(entry)
        logger.info(
            "Found %d duplicates, %d new entries to insert",
            report.duplicates,
            len(to_insert),
        )

        # Persist
        if options.dry_run:
            report.inserted = len(to_insert)
            report.preview = to_insert[:DRY_RUN_PREVIEW_LIMIT]
            logger.info("DRY RUN: would insert %d entries", len(to_insert))
            return

        self._persist(to_insert, report)

    def _map_rows(self, rows, raw_names, normalization, mapping, options, report) -> list[RegulatoryEntry]:
        entries: list[RegulatoryEntry] = []
        for index, (row, raw_name) in enumerate(zip(rows, raw_names)):
            row_number = index + 2  # header is line 1
            if not raw_name:
                report.skipped += 1
                report.warnings.append(
                    f"Row {row_number}: Missing INCI name (both primary and fallback columns empty)"
                )
                continue

            try:
                entry = map_row(
                    row,
                    mapping,
                    tier=options.tier,
                    inci_canonical=normalization.canonical(raw_name),
                    source=options.source,
                    reference_url=options.reference_url,
                )
            except ValueError as exc:
                logger.debug("Row %d could not be mapped: %s", row_number, exc)
                entry = None

            if entry is None:
                report.skipped += 1
                report.warnings.append(f"Row {row_number}: Failed to map entry")
                continue
            entries.append(entry)
        return entries

    def _check_duplicates(
        self,
        entries: list[RegulatoryEntry],
        tier: RestrictionTier,
        skip: bool,
    ) -> DuplicateCheckResult:
        """Look up keys already stored for the mapped entries."""
        if skip:
            return DuplicateCheckResult.skipped()
        logger.info("Checking for duplicates...")
        try:
            keys = self.repository.find_existing_keys(
                [entry.inci_canonical for entry in entries], tier
            )
        except SQLAlchemyError as exc:
            return DuplicateCheckResult.failed(str(exc))
        return DuplicateCheckResult.checked(keys)

    def _persist(self, entries: list[RegulatoryEntry], report: IngestionRunReport) -> None:
        logger.info("Inserting entries into database...")
        for batch_number, start in enumerate(range(0, len(entries), self.batch_size), start=1):
            batch = entries[start:start + self.batch_size]
            try:
                self.repository.insert_entries(batch)
            except SQLAlchemyError as exc:
                message = f"Error inserting batch {batch_number}: {exc}"
                logger.warning(message)
                report.error_messages.append(message)
                report.errors += len(batch)
                continue
            report.inserted += len(batch)
            logger.info(
                "Inserted batch %d (%d/%d)", batch_number, report.inserted, len(entries)
            )
