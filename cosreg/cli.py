"""
Command line entry points for reference data ingestion.
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from .config import DEFAULT_IFRA_REFERENCE_URL, DEFAULT_IFRA_SOURCE, configure_logging, get_settings
from .data.repository import SqlSynonymSource, get_repository
from .ingestion.annex_ingestion import AnnexIngestionPipeline, IngestionOptions
from .ingestion.column_mapper import ColumnMapping
from .ingestion.ifra_ingestion import ingest_ifra_csv
from .models.regulatory import IngestionRunReport, RestrictionTier

logger = logging.getLogger(__name__)

MAX_PRINTED_WARNINGS = 10


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8-sig")


def _tier_arg(value: str) -> RestrictionTier:
    try:
        return RestrictionTier.from_label(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid annex {value!r} (choose II, III or VI)")


def print_report(title: str, report: IngestionRunReport, inserted_label: str = "Inserted") -> None:
    """Print a run report: header block, counts, warnings and errors."""
    print()
    print("=" * 60)
    print(title)
    print("=" * 60)
    print(f"Status:     {'SUCCESS' if report.success else 'FAILED'}")
    print(f"Mode:       {'DRY RUN' if report.dry_run else 'LIVE'}")
    print(f"Total rows: {report.total_rows}")
    print(f"Skipped:    {report.skipped}")
    print(f"{inserted_label + ':':<12}{report.inserted}")
    print(f"Duplicates: {report.duplicates}")
    print(f"Errors:     {report.errors}")

    if report.warnings:
        shown = report.warnings[:MAX_PRINTED_WARNINGS]
        print(f"\nWarnings ({len(report.warnings)}, showing {len(shown)}):")
        for warning in shown:
            print(f"  - {warning}")

    if report.error_messages:
        print(f"\nErrors ({len(report.error_messages)}):")
        for error in report.error_messages:
            print(f"  - {error}")

    if report.dry_run and report.preview:
        print("\nPreview:")
        print(json.dumps(
            [item.to_dict() for item in report.preview],
            indent=2,
            default=str,
        ))


def build_annex_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cosreg-ingest-annex",
        description="Ingest a CosIng EU Annex II/III/VI CSV export.",
    )
    parser.add_argument("csv_file", help="Path to the CosIng CSV export.")
    parser.add_argument(
        "--annex",
        required=True,
        type=_tier_arg,
        help="Annex tier of the file: II, III or VI.",
    )
    parser.add_argument("--source", default=None, help="Provenance label stored on every entry.")
    parser.add_argument("--reference-url", default=None, help="Reference URL stored on every entry.")
    parser.add_argument("--dry-run", action="store_true", help="Map and preview without writing.")
    parser.add_argument("--inci-column", default=None, help="Header of the INCI column.")
    parser.add_argument("--inci-fallback-column", default=None, help="Header of the fallback identifier column.")
    parser.add_argument("--product-type-column", default=None, help="Header of the product type column.")
    parser.add_argument("--max-percentage-column", default=None, help="Header of the maximum concentration column.")
    parser.add_argument("--conditions-column", default=None, help="Header of the conditions column.")
    parser.add_argument(
        "--skip-duplicates-check",
        action="store_true",
        help="Insert every mapped row without looking up existing entries.",
    )
    return parser


def annex_main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_annex_parser().parse_args(argv)
    configure_logging()
    settings = get_settings()

    options = IngestionOptions(
        tier=args.annex,
        source=args.source or settings.default_source,
        reference_url=args.reference_url or settings.default_reference_url,
        dry_run=args.dry_run,
        column_overrides=ColumnMapping(
            inci=args.inci_column,
            inci_fallback=args.inci_fallback_column,
            applicability=args.product_type_column,
            max_percentage=args.max_percentage_column,
            conditions=args.conditions_column,
        ),
        skip_duplicates_check=args.skip_duplicates_check,
    )

    print("=" * 60)
    print("EU Annex CSV Ingestion")
    print("=" * 60)
    print(f"File:          {args.csv_file}")
    print(f"Annex:         {options.tier.value}")
    print(f"Source:        {options.source}")
    print(f"Reference URL: {options.reference_url}")
    print(f"Mode:          {'DRY RUN' if options.dry_run else 'LIVE'}")

    try:
        content = _read_text(args.csv_file)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to read file %s: %s", args.csv_file, exc)
        print(f"\nFailed to read file {args.csv_file}: {exc}")
        return 1

    repository = get_repository()
    pipeline = AnnexIngestionPipeline(
        repository,
        SqlSynonymSource(repository.session_factory),
        batch_size=settings.ingest_batch_size,
    )
    report = pipeline.ingest(content, options)
    print_report("Ingestion Result", report)
    return 0 if report.success else 1


def build_ifra_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cosreg-ingest-ifra",
        description="Ingest an IFRA Standards overview CSV.",
    )
    parser.add_argument("csv_file", help="Path to the IFRA overview CSV.")
    parser.add_argument("--source", default=DEFAULT_IFRA_SOURCE, help="Provenance label.")
    parser.add_argument("--reference-url", default=DEFAULT_IFRA_REFERENCE_URL, help="Reference URL.")
    parser.add_argument("--dry-run", action="store_true", help="Validate and preview without writing.")
    return parser


def ifra_main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_ifra_parser().parse_args(argv)
    configure_logging()

    try:
        content = _read_text(args.csv_file)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to read file %s: %s", args.csv_file, exc)
        print(f"Failed to read file {args.csv_file}: {exc}")
        return 1

    report = ingest_ifra_csv(
        content,
        get_repository(),
        source=args.source,
        reference_url=args.reference_url,
        dry_run=args.dry_run,
    )
    print_report("IFRA Import Result", report, inserted_label="Upserted")
    return 0 if report.success else 1


if __name__ == "__main__":
    raise SystemExit(annex_main())
