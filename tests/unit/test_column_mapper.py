"""Tests for column detection and row mapping."""

from datetime import date

import pytest
from cosreg.ingestion.column_mapper import (
    ColumnMapping,
    detect_column_mappings,
    extract_inci_name,
    map_row,
    parse_applicability,
    parse_date,
    parse_percentage,
    resolve_column_mappings,
)
from cosreg.models.regulatory import Applicability, RestrictionTier


COSING_ANNEX_III_HEADERS = [
    "Reference Number",
    "Chemical name / INN",
    "Identified INGREDIENTS or substances e.g.",
    "CAS Number",
    "Product Type, body parts",
    "Maximum concentration in ready for use preparation",
    "Wording of conditions of use and warnings",
]


@pytest.fixture
def mapping():
    """Mapping for a simple annex export."""
    return ColumnMapping(
        inci="INCI Name",
        inci_fallback="Chemical name",
        applicability="Product Type",
        max_percentage="Max",
        conditions="Conditions",
    )


class TestDetectColumnMappings:
    """Test cases for header keyword detection."""

    def test_cosing_headers(self):
        """Test detection on CosIng export headers."""
        detected = detect_column_mappings(COSING_ANNEX_III_HEADERS)

        assert detected.inci == "Identified INGREDIENTS or substances e.g."
        assert detected.inci_fallback == "Chemical name / INN"
        assert detected.applicability == "Product Type, body parts"
        assert detected.max_percentage == "Maximum concentration in ready for use preparation"
        assert detected.conditions == "Wording of conditions of use and warnings"

    def test_inci_header(self):
        """Test that an INCI header is the primary identifier."""
        detected = detect_column_mappings(["INCI Name", "Max %"])

        assert detected.inci == "INCI Name"
        assert detected.max_percentage == "Max %"
        assert detected.has_identifier

    def test_detection_case_insensitive(self):
        """Test that matching ignores case."""
        detected = detect_column_mappings(["inci name", "CONDITIONS"])

        assert detected.inci == "inci name"
        assert detected.conditions == "CONDITIONS"

    def test_no_identifier(self):
        """Test that unrelated headers detect no identifier."""
        detected = detect_column_mappings(["Foo", "Bar"])

        assert detected.inci is None
        assert detected.inci_fallback is None
        assert not detected.has_identifier

    def test_overrides_win(self):
        """Test that explicit overrides replace detected columns."""
        resolved = resolve_column_mappings(
            ["INCI Name", "Limit", "Other"],
            ColumnMapping(max_percentage="Other"),
        )

        assert resolved.inci == "INCI Name"
        assert resolved.max_percentage == "Other"

    def test_blank_override_ignored(self):
        """Test that an empty override keeps the detected column."""
        resolved = resolve_column_mappings(["INCI Name"], ColumnMapping(inci=""))

        assert resolved.inci == "INCI Name"


class TestExtractInciName:
    """Test cases for identifier extraction."""

    def test_primary_column(self, mapping):
        """Test reading the primary identifier."""
        row = {"INCI Name": " Salicylic Acid ", "Chemical name": "2-Hydroxybenzoic acid"}
        assert extract_inci_name(row, mapping) == "Salicylic Acid"

    def test_fallback_on_blank(self, mapping):
        """Test falling back when the primary cell is blank."""
        row = {"INCI Name": "   ", "Chemical name": "2-Hydroxybenzoic acid"}
        assert extract_inci_name(row, mapping) == "2-Hydroxybenzoic acid"

    def test_dash_placeholder_is_empty(self, mapping):
        """Test that "-" counts as missing."""
        row = {"INCI Name": "-", "Chemical name": "Benzene"}
        assert extract_inci_name(row, mapping) == "Benzene"

    def test_both_missing(self, mapping):
        """Test that no identifier gives an empty string."""
        assert extract_inci_name({"INCI Name": "", "Chemical name": "-"}, mapping) == ""


class TestValueParsing:
    """Test cases for cell value parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("Leave-on products", Applicability.LEAVE_ON),
        ("RINSE-OFF", Applicability.RINSE_OFF),
        ("Hair products", Applicability.BOTH),
        ("", Applicability.BOTH),
        (None, Applicability.BOTH),
    ])
    def test_parse_applicability(self, text, expected):
        """Test applicability keyword mapping."""
        assert parse_applicability(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ("2", 2.0),
        ("2.5 %", 2.5),
        ("0,5%", 0.5),
        ("3 % (as acid)", 3.0),
        ("", None),
        ("see conditions", None),
    ])
    def test_parse_percentage(self, text, expected):
        """Test cap parsing."""
        assert parse_percentage(text) == expected

    def test_parse_date_formats(self):
        """Test ISO and day-first date parsing."""
        assert parse_date("2024-03-01") == date(2024, 3, 1)
        assert parse_date("01/03/2024") == date(2024, 3, 1)
        assert parse_date("01-03-2024") == date(2024, 3, 1)
        assert parse_date("not a date") is None
        assert parse_date("") is None


class TestMapRow:
    """Test cases for mapping rows to entries."""

    def test_numeric_cap_tier(self, mapping):
        """Test mapping an Annex III row."""
        row = {"INCI Name": "Salicylic Acid", "Product Type": "Leave-on", "Max": "2 %", "Conditions": "Not for children"}

        entry = map_row(row, mapping, RestrictionTier.RESTRICTED, "Salicylic Acid", "test", "https://example.com")

        assert entry.tier == RestrictionTier.RESTRICTED
        assert entry.applicability == Applicability.LEAVE_ON
        assert entry.max_percentage == 2.0
        assert entry.conditions_text == "Not for children"
        assert entry.source == "test"
        assert entry.reference_url == "https://example.com"

    def test_prohibited_tier_ignores_cap(self, mapping):
        """Test that Annex II rows never carry a cap."""
        row = {"INCI Name": "Benzene", "Max": "5"}

        entry = map_row(row, mapping, RestrictionTier.PROHIBITED, "Benzene", "test", None)

        assert entry.max_percentage is None
        assert entry.applicability == Applicability.BOTH

    def test_blank_conditions_is_none(self, mapping):
        """Test that empty conditions are stored as None."""
        entry = map_row({"INCI Name": "X"}, mapping, RestrictionTier.UV_FILTER, "X", "test", None)

        assert entry.conditions_text is None
        assert entry.max_percentage is None

    def test_blank_canonical_returns_none(self, mapping):
        """Test that a row without a canonical identifier is not mapped."""
        assert map_row({}, mapping, RestrictionTier.RESTRICTED, "  ", "test", None) is None
