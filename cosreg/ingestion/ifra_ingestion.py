"""IFRA Standards overview ingestion.

IFRA listings are reference data only. Rows are upserted by IFRA key so a
re-import refreshes names, synonyms and amendment numbers in place.
"""

import logging
import math
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..config import DEFAULT_IFRA_REFERENCE_URL, DEFAULT_IFRA_SOURCE
from ..data.repository import RegulatoryEntryRepository
from ..models.regulatory import IfraStandard, IngestionRunReport
from .csv_parser import parse_csv

logger = logging.getLogger(__name__)

UPSERT_BATCH_SIZE = 200
DRY_RUN_PREVIEW_LIMIT = 3

KEY_COLUMN = "Key"
AMENDMENT_COLUMN = "Amendment number"
NAME_COLUMN = "Name of the IFRA Standard"
TYPE_COLUMN = "IFRA Standard type"
CAS_COLUMN = "CAS numbers"
SYNONYMS_COLUMN = "Synonyms"


def _parse_amendment(value: str) -> Optional[int]:
    try:
        number = float(value.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return int(number)


def validate_ifra_row(row: dict[str, str]) -> tuple[Optional[IfraStandard], list[str]]:
    """Validate one overview row.

    Returns:
        (standard, []) for a valid row, or (None, reasons) otherwise.
        Source and reference URL are left for the caller to fill.
    """
    reasons = []
    key = row.get(KEY_COLUMN, "").strip()
    if not key:
        reasons.append("missing or invalid Key")

    amendment_text = row.get(AMENDMENT_COLUMN, "").strip()
    amendment = None
    if not amendment_text:
        reasons.append("missing Amendment number")
    else:
        amendment = _parse_amendment(amendment_text)
        if amendment is None:
            reasons.append("Amendment number must be numeric")

    name = row.get(NAME_COLUMN, "").strip()
    if not name:
        reasons.append("missing or invalid Name of the IFRA Standard")

    standard_type = row.get(TYPE_COLUMN, "").strip()
    if not standard_type:
        reasons.append("missing or invalid IFRA Standard type")

    if reasons:
        return None, reasons

    return IfraStandard(
        ifra_key=key,
        amendment_number=amendment,
        standard_name=name,
        standard_type=standard_type,
        cas_numbers=row.get(CAS_COLUMN, "").strip() or None,
        synonyms=row.get(SYNONYMS_COLUMN, "").strip() or None,
    ), []


def ingest_ifra_csv(
    csv_content: str,
    repository: RegulatoryEntryRepository,
    source: str = DEFAULT_IFRA_SOURCE,
    reference_url: str = DEFAULT_IFRA_REFERENCE_URL,
    dry_run: bool = False,
    batch_size: int = UPSERT_BATCH_SIZE,
) -> IngestionRunReport:
    """Ingest an IFRA Standards overview CSV.

    Args:
        csv_content: Raw CSV text.
        repository: Storage for IFRA standards.
        source: Provenance label stored on every row.
        reference_url: Reference URL stored on every row.
        dry_run: Validate and preview without writing.
        batch_size: Rows per upsert batch.

    Returns:
        IngestionRunReport. ``inserted`` counts upserted rows.
    """
    report = IngestionRunReport(dry_run=dry_run)
    parsed = parse_csv(csv_content)
    report.error_messages.extend(parsed.errors)
    if not parsed.rows:
        return report.fail("No data rows found in CSV")
    report.total_rows = len(parsed.rows)

    valid: list[IfraStandard] = []
    for index, row in enumerate(parsed.rows):
        standard, reasons = validate_ifra_row(row)
        if standard is None:
            report.skipped += 1
            report.warnings.append(f"Row {index + 2}: {'; '.join(reasons)}")
            continue
        standard.source = source
        standard.reference_url = reference_url
        valid.append(standard)
    logger.info("Validated %d of %d IFRA rows", len(valid), report.total_rows)

    if dry_run:
        report.inserted = len(valid)
        report.preview = valid[:DRY_RUN_PREVIEW_LIMIT]
        return report

    batch_size = max(1, batch_size)
    total_batches = (len(valid) + batch_size - 1) // batch_size
    for batch_number, start in enumerate(range(0, len(valid), batch_size), start=1):
        batch = valid[start:start + batch_size]
        logger.info(
            "Processing batch %d/%d (%d records)", batch_number, total_batches, len(batch)
        )
        try:
            repository.upsert_ifra_standards(batch)
        except SQLAlchemyError as exc:
            message = f"Batch {batch_number}: {exc}"
            logger.warning(message)
            report.error_messages.append(message)
            report.errors += len(batch)
            continue
        report.inserted += len(batch)

    return report
