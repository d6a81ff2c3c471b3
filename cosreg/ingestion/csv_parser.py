"""CSV tokenizer for CosIng annex and IFRA exports.

Lines are tokenized one at a time so a malformed line costs only that line.
Quoted fields may contain commas and doubled quotes but not line breaks.
"""

import csv
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


_LINE_SPLIT = re.compile(r"\r?\n")


@dataclass
class ParsedCsv:
    """Headers, row maps and per-line errors of a parsed CSV document."""
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def parse_csv_line(line: str) -> list[str]:
    """Split one CSV line into raw field values.

    Raises:
        csv.Error: If the line is malformed (e.g. an unterminated quote).
    """
    reader = csv.reader([line], delimiter=",", quotechar='"', doublequote=True, strict=True)
    return next(reader, [])


def parse_csv(content: str) -> ParsedCsv:
    """Parse CSV text into headers and row maps.

    Args:
        content: Raw CSV text.

    Returns:
        ParsedCsv. A fatal problem (no lines, no header columns) yields empty
        headers and rows with a single error.
    """
    if content.startswith("\ufeff"):
        content = content[1:]
    lines = [line for line in _LINE_SPLIT.split(content) if line.strip()]

    if not lines:
        return ParsedCsv(errors=["CSV file is empty"])

    try:
        raw_headers = parse_csv_line(lines[0])
    except csv.Error as exc:
        return ParsedCsv(errors=[f"Error parsing line 1: {exc}"])

    if not raw_headers:
        return ParsedCsv(errors=["CSV file has no headers"])

    headers = [h.strip() or f"column_{i}" for i, h in enumerate(raw_headers)]
    parsed = ParsedCsv(headers=headers)

    for line_number, line in enumerate(lines[1:], start=2):
        try:
            values = parse_csv_line(line)
        except csv.Error as exc:
            parsed.errors.append(f"Error parsing line {line_number}: {exc}")
            continue

        parsed.rows.append({
            header: values[i].strip() if i < len(values) else ""
            for i, header in enumerate(headers)
        })

    return parsed


def read_csv_file(path: Union[str, Path]) -> ParsedCsv:
    """Read and parse a UTF-8 CSV file.

    Args:
        path: CSV file location.

    Returns:
        ParsedCsv; an unreadable file is reported as a single error.
    """
    try:
        content = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        return ParsedCsv(errors=[f"Failed to read file {path}: {exc}"])
    return parse_csv(content)
