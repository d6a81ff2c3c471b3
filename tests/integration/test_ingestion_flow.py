"""End-to-end ingestion and evaluation against one database."""

import pytest
from cosreg.ingestion.annex_ingestion import AnnexIngestionPipeline, IngestionOptions
from cosreg.ingestion.inci_normalizer import SynonymCache
from cosreg.integrations.ingredient_kb import FormulaData, FormulaIngredientData
from cosreg.models.regulatory import ProductType, RestrictionTier
from cosreg.services.compliance_engine import ComplianceEngine


@pytest.fixture
def pipeline(repository, synonym_source):
    """Pipeline over the in-memory database and its synonym table."""
    synonym_source.add_synonyms({"Tretinoin (INN)": "Tretinoin"})
    return AnnexIngestionPipeline(repository, synonym_source)


class TestIngestionFlow:
    """Test cases for ingest-then-evaluate flows."""

    def test_two_row_file_ingest_and_rerun(self, pipeline):
        """Test first-run and re-run counts for a two-row export."""
        csv_text = (
            "Identified INGREDIENTS or substances e.g.,Chemical name / INN,"
            "\"Product Type, body parts\",Maximum concentration,Conditions\n"
            "Hydroquinone,,Leave-on,2,Professional use only\n"
            "-,Tretinoin (INN),,0.1,\n"
        )
        options = IngestionOptions(tier=RestrictionTier.RESTRICTED)

        first = pipeline.ingest(csv_text, options)
        second = pipeline.ingest(csv_text, options)

        assert (first.inserted, first.duplicates, first.errors) == (2, 0, 0)
        assert (second.inserted, second.duplicates) == (0, 2)

    def test_ingested_entries_block_formula(self, pipeline, repository, synonym_source):
        """Test that a prohibited and an over-cap ingredient both block."""
        pipeline.ingest(
            "INCI Name,Conditions\nHydroquinone,\n",
            IngestionOptions(tier=RestrictionTier.PROHIBITED),
        )
        pipeline.ingest(
            "INCI Name,Product Type,Maximum %\nSalicylic Acid,Leave-on,2\n",
            IngestionOptions(tier=RestrictionTier.RESTRICTED),
        )
        engine = ComplianceEngine(repository=repository, synonym_source=synonym_source)
        formula = FormulaData(
            name="Night Cream",
            ingredients=[
                FormulaIngredientData(id="a", name="Hydroquinone", percentage=0.1),
                FormulaIngredientData(id="b", name="Salicylic Acid", percentage=3.0),
                FormulaIngredientData(id="c", name="Tretinoin (INN)", percentage=0.05),
            ],
        )

        report = engine.evaluate(formula, ProductType.LEAVE_ON, cache=SynonymCache())

        assert [(f.ingredient_id, f.tier.value) for f in report.findings] == [("a", "II"), ("b", "III")]
        assert "formula contains 3.00%" in report.findings[1].reason
