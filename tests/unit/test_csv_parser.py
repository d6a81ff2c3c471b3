"""Tests for the CSV tokenizer."""

import csv

import pytest
from cosreg.ingestion.csv_parser import parse_csv, parse_csv_line, read_csv_file


class TestParseCsvLine:
    """Test cases for single-line tokenizing."""

    def test_quoted_field_with_comma(self):
        """Test that quoted commas stay inside the field."""
        assert parse_csv_line('a,"b, c",d') == ["a", "b, c", "d"]

    def test_doubled_quote(self):
        """Test that a doubled quote is an escaped quote."""
        assert parse_csv_line('"say ""hi""",x') == ['say "hi"', "x"]

    def test_unterminated_quote_raises(self):
        """Test that an unterminated quote is an error."""
        with pytest.raises(csv.Error):
            parse_csv_line('"open,field')


class TestParseCsv:
    """Test cases for whole-document parsing."""

    def test_headers_and_rows(self):
        """Test header trimming and row mapping."""
        parsed = parse_csv(" Name , Max \nA,1\nB,2\n")

        assert parsed.headers == ["Name", "Max"]
        assert parsed.rows == [{"Name": "A", "Max": "1"}, {"Name": "B", "Max": "2"}]
        assert parsed.errors == []

    def test_crlf_and_blank_lines(self):
        """Test that CRLF endings and blank lines are handled."""
        parsed = parse_csv("Name\r\n\r\nA\r\n   \r\nB\r\n")

        assert [row["Name"] for row in parsed.rows] == ["A", "B"]

    def test_short_row_padded(self):
        """Test that missing trailing values default to empty strings."""
        parsed = parse_csv("A,B,C\n1\n")

        assert parsed.rows == [{"A": "1", "B": "", "C": ""}]

    def test_blank_header_gets_placeholder(self):
        """Test that blank header cells get positional names."""
        parsed = parse_csv("Name,,Max\nA,x,1\n")

        assert parsed.headers == ["Name", "column_1", "Max"]

    def test_bom_stripped(self):
        """Test that a UTF-8 byte order mark is ignored."""
        parsed = parse_csv("\ufeffINCI Name\nAqua\n")

        assert parsed.headers == ["INCI Name"]

    def test_empty_content(self):
        """Test that empty input reports a single error."""
        parsed = parse_csv("\n\n")

        assert parsed.rows == []
        assert parsed.errors == ["CSV file is empty"]

    def test_all_blank_headers_get_placeholders(self):
        """Test that a header row of blanks still parses."""
        parsed = parse_csv(" , \nA,B\n")

        assert parsed.errors == []
        assert parsed.headers == ["column_0", "column_1"]
        assert parsed.rows == [{"column_0": "A", "column_1": "B"}]

    def test_bad_line_reported_and_skipped(self):
        """Test that a malformed line is reported with its line number."""
        parsed = parse_csv('Name,Max\nA,1\n"broken,2\nC,3\n')

        assert [row["Name"] for row in parsed.rows] == ["A", "C"]
        assert len(parsed.errors) == 1
        assert parsed.errors[0].startswith("Error parsing line 3:")


class TestReadCsvFile:
    """Test cases for reading CSV files from disk."""

    def test_reads_file(self, tmp_path):
        """Test reading a CSV file."""
        path = tmp_path / "annex.csv"
        path.write_text("INCI Name\nAqua\n", encoding="utf-8")

        parsed = read_csv_file(path)

        assert parsed.rows == [{"INCI Name": "Aqua"}]

    def test_missing_file(self, tmp_path):
        """Test that an unreadable file is reported, not raised."""
        parsed = read_csv_file(tmp_path / "missing.csv")

        assert parsed.rows == []
        assert parsed.errors[0].startswith("Failed to read file")
