"""Tests for EU annex rule evaluation."""

import pytest
from cosreg.models.evaluation import ResolvedIngredient
from cosreg.models.regulatory import (
    Applicability,
    ProductType,
    RegulatoryEntry,
    RestrictionTier,
)
from cosreg.services.eu_compliance_service import check_eu_compliance


def make_entry(entry_id, tier, applicability=Applicability.BOTH, cap=None, conditions=None, inci="test_inci"):
    return RegulatoryEntry(
        id=entry_id,
        inci_canonical=inci,
        tier=tier,
        applicability=applicability,
        max_percentage=cap,
        conditions_text=conditions,
        reference_url="https://example.com/annex",
        source="EU Regulation 1223/2009",
    )


def make_ingredient(percentage, inci="test_inci", ingredient_id="ing1"):
    return ResolvedIngredient(
        id=ingredient_id,
        name="Test Ingredient",
        percentage=percentage,
        inci_canonical=inci,
    )


class TestProhibitedTier:
    """Test cases for Annex II entries."""

    def test_blocks_at_any_percentage(self):
        """Test that a prohibited entry blocks even at 0.1%."""
        entry = make_entry("entry1", RestrictionTier.PROHIBITED, conditions="Prohibited in all cosmetic products")

        findings = check_eu_compliance(
            [make_ingredient(0.1)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        )

        assert len(findings) == 1
        finding = findings[0]
        assert finding.tier == RestrictionTier.PROHIBITED
        assert finding.max_percentage is None
        assert finding.actual_percentage == 0.1
        assert finding.id == "eu-annex-ii-entry1-ing1"
        assert finding.reason == (
            "Annex II: This ingredient is prohibited in cosmetic products. "
            "Prohibited in all cosmetic products"
        )

    def test_reason_trimmed_without_conditions(self):
        """Test that the reason has no trailing space when conditions are empty."""
        entry = make_entry("entry1", RestrictionTier.PROHIBITED, Applicability.LEAVE_ON)

        findings = check_eu_compliance(
            [make_ingredient(5.0)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        )

        assert findings[0].reason == "Annex II: This ingredient is prohibited in cosmetic products."

    def test_applicability_mismatch(self):
        """Test that a leave-on-only ban does not apply to rinse-off."""
        entry = make_entry("entry1", RestrictionTier.PROHIBITED, Applicability.LEAVE_ON)

        findings = check_eu_compliance(
            [make_ingredient(5.0)], ProductType.RINSE_OFF, {"test_inci": [entry]}
        )

        assert findings == []


class TestNumericCapTiers:
    """Test cases for Annex III and VI entries."""

    @pytest.mark.parametrize("tier", [RestrictionTier.RESTRICTED, RestrictionTier.UV_FILTER])
    def test_blocks_above_cap(self, tier):
        """Test that a percentage above the cap blocks."""
        entry = make_entry("entry2", tier, cap=2.0, conditions="Not for children")

        findings = check_eu_compliance(
            [make_ingredient(3.0)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        )

        assert len(findings) == 1
        assert findings[0].max_percentage == 2.0
        assert findings[0].id == f"eu-annex-{tier.value.lower()}-entry2-ing1"
        assert findings[0].reason == (
            f"Annex {tier.value}: Maximum allowed concentration is 2%, "
            "but formula contains 3.00%. Not for children"
        )

    def test_equal_to_cap_does_not_block(self):
        """Test that a percentage equal to the cap is allowed."""
        entry = make_entry("entry2", RestrictionTier.RESTRICTED, cap=2.0)

        findings = check_eu_compliance(
            [make_ingredient(2.0)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        )

        assert findings == []

    def test_below_cap_does_not_block(self):
        """Test that a percentage below the cap is allowed."""
        entry = make_entry("entry2", RestrictionTier.UV_FILTER, cap=10.0)

        assert check_eu_compliance(
            [make_ingredient(5.0)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        ) == []

    def test_null_cap_never_blocks(self):
        """Test that a capped tier without a cap never blocks."""
        entry = make_entry("entry2", RestrictionTier.RESTRICTED, cap=None)

        assert check_eu_compliance(
            [make_ingredient(10.0)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        ) == []

    def test_fractional_cap_in_reason(self):
        """Test that fractional caps are rendered as given."""
        entry = make_entry("entry2", RestrictionTier.RESTRICTED, cap=0.5)

        findings = check_eu_compliance(
            [make_ingredient(0.75)], ProductType.RINSE_OFF, {"test_inci": [entry]}
        )

        assert findings[0].reason == (
            "Annex III: Maximum allowed concentration is 0.5%, but formula contains 0.75%."
        )

    @pytest.mark.parametrize("percentage,expected", [
        (3.125, "3.13"),
        (0.375, "0.38"),
        (2.675, "2.67"),  # 2.675 is stored just below the tie
        (3.0, "3.00"),
    ])
    def test_percentage_rounds_ties_up(self, percentage, expected):
        """Test two-decimal rendering of the formula percentage."""
        entry = make_entry("entry3", RestrictionTier.RESTRICTED, cap=0.1)

        findings = check_eu_compliance(
            [make_ingredient(percentage)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        )

        assert f"but formula contains {expected}%." in findings[0].reason

    @pytest.mark.parametrize("cap,expected", [
        (1e-7, "1e-7"),
        (2.5e-8, "2.5e-8"),
        (0.00001, "0.00001"),
        (100.0, "100"),
    ])
    def test_cap_rendering(self, cap, expected):
        """Test cap rendering for tiny and whole-number caps."""
        entry = make_entry("entry4", RestrictionTier.RESTRICTED, cap=cap)

        findings = check_eu_compliance(
            [make_ingredient(150.0)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        )

        assert f"Maximum allowed concentration is {expected}%," in findings[0].reason

    def test_multiple_entries_evaluated_independently(self):
        """Test one finding per applicable, triggering entry."""
        entries = [
            make_entry("leave", RestrictionTier.RESTRICTED, Applicability.LEAVE_ON, cap=2.0),
            make_entry("rinse", RestrictionTier.RESTRICTED, Applicability.RINSE_OFF, cap=1.0),
            make_entry("both", RestrictionTier.RESTRICTED, Applicability.BOTH, cap=2.5),
        ]

        findings = check_eu_compliance(
            [make_ingredient(3.0)], ProductType.LEAVE_ON, {"test_inci": entries}
        )

        assert [f.entry_id for f in findings] == ["leave", "both"]

    def test_two_applicable_caps_two_findings(self):
        """Test that two applicable caps both report when exceeded."""
        entries = [
            make_entry("a", RestrictionTier.RESTRICTED, cap=1.0),
            make_entry("b", RestrictionTier.RESTRICTED, cap=2.0),
        ]

        findings = check_eu_compliance(
            [make_ingredient(3.0)], ProductType.RINSE_OFF, {"test_inci": entries}
        )

        assert len(findings) == 2


class TestLookup:
    """Test cases for identifier matching."""

    def test_lookup_is_case_insensitive(self):
        """Test that canonical identifiers are case-folded for lookup."""
        entry = make_entry("entry1", RestrictionTier.PROHIBITED, inci="Benzene")

        findings = check_eu_compliance(
            [make_ingredient(1.0, inci=" BENZENE ")], ProductType.LEAVE_ON, {"benzene": [entry]}
        )

        assert len(findings) == 1
        assert findings[0].inci_canonical == "Benzene"

    def test_empty_identifier_yields_nothing(self):
        """Test that ingredients without an identifier are skipped."""
        entry = make_entry("entry1", RestrictionTier.PROHIBITED)

        findings = check_eu_compliance(
            [make_ingredient(1.0, inci="")], ProductType.LEAVE_ON, {"": [entry], "test_inci": [entry]}
        )

        assert findings == []

    def test_unknown_identifier_yields_nothing(self):
        """Test that unmatched ingredients produce no findings."""
        assert check_eu_compliance(
            [make_ingredient(50.0, inci="Aqua")], ProductType.LEAVE_ON, {}
        ) == []

    def test_finding_to_dict(self):
        """Test finding serialization."""
        entry = make_entry("entry1", RestrictionTier.PROHIBITED)

        data = check_eu_compliance(
            [make_ingredient(1.0)], ProductType.LEAVE_ON, {"test_inci": [entry]}
        )[0].to_dict()

        assert data["annex"] == "II"
        assert data["product_type"] == "both"
        assert data["source"] == "EU Regulation 1223/2009"
