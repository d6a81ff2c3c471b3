"""FastAPI application for cosmetic regulatory compliance API."""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from cosreg.config import configure_logging, get_settings
from cosreg.data.repository import (
    RegulatoryEntryRepository,
    SqlKnowledgeBase,
    SqlSynonymSource,
    get_repository,
)
from cosreg.ingestion.annex_ingestion import AnnexIngestionPipeline, IngestionOptions
from cosreg.ingestion.column_mapper import ColumnMapping
from cosreg.integrations.ingredient_kb import (
    FormulaData,
    FormulaIngredientData,
    KnowledgeBase,
    SynonymSource,
)
from cosreg.models.regulatory import ProductType, RestrictionTier
from cosreg.services.compliance_engine import ComplianceEngine

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Cosreg API",
    description="EU Cosmetics Regulatory Compliance API",
    version="0.1.0",
)


# Dependencies
def get_regulatory_repository() -> RegulatoryEntryRepository:
    return get_repository()


def get_synonym_source(
    repository: RegulatoryEntryRepository = Depends(get_regulatory_repository),
) -> SynonymSource:
    return SqlSynonymSource(repository.session_factory)


def get_knowledge_base(
    repository: RegulatoryEntryRepository = Depends(get_regulatory_repository),
) -> KnowledgeBase:
    return SqlKnowledgeBase(repository.session_factory)


# Request/Response Models
class IngredientInput(BaseModel):
    """Input model for a formula ingredient."""
    id: str
    name: str
    percentage: float = Field(ge=0, le=100)
    inci: Optional[str] = None
    category: Optional[str] = None
    max_usage: Optional[float] = Field(default=None, ge=0, le=100)
    max_usage_leave_on: Optional[float] = Field(default=None, ge=0, le=100)
    max_usage_rinse_off: Optional[float] = Field(default=None, ge=0, le=100)
    is_verified: Optional[bool] = None


class FormulaInput(BaseModel):
    """Input model for a formula."""
    name: str
    ingredients: list[IngredientInput]


class EUComplianceRequest(BaseModel):
    """Request model for EU compliance evaluation."""
    formula: FormulaInput
    product_type: str
    on_date: Optional[date] = None


class ColumnOverridesInput(BaseModel):
    """Explicit CSV column names; blank fields are auto-detected."""
    inci: Optional[str] = None
    inci_fallback: Optional[str] = None
    applicability: Optional[str] = None
    max_percentage: Optional[str] = None
    conditions: Optional[str] = None


class AnnexIngestionRequest(BaseModel):
    """Request model for an EU annex CSV ingestion run."""
    csv_content: str
    annex: str
    source: Optional[str] = None
    reference_url: Optional[str] = None
    dry_run: bool = False
    skip_duplicates_check: bool = False
    columns: Optional[ColumnOverridesInput] = None


# Helper functions
def _to_formula_data(formula_input: FormulaInput) -> FormulaData:
    """Convert FormulaInput to FormulaData."""
    return FormulaData(
        name=formula_input.name,
        ingredients=[
            FormulaIngredientData(**ing.model_dump())
            for ing in formula_input.ingredients
        ],
    )


def _parse_product_type(product_type_str: str) -> ProductType:
    """Parse product type string to ProductType enum."""
    try:
        return ProductType(product_type_str.lower().replace("_", "-"))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid product type: {product_type_str}")


def _parse_tier(annex_str: str) -> RestrictionTier:
    """Parse annex label to RestrictionTier enum."""
    try:
        return RestrictionTier.from_label(annex_str)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid annex: {annex_str}")


# Endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Cosreg API",
        "version": "0.1.0",
        "description": "EU Cosmetics Regulatory Compliance API",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.post("/api/compliance/eu")
def check_eu_compliance(
    request: EUComplianceRequest,
    repository: RegulatoryEntryRepository = Depends(get_regulatory_repository),
    synonym_source: SynonymSource = Depends(get_synonym_source),
    knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
):
    """Evaluate a formula against EU annex entries and category rules."""
    product_type = _parse_product_type(request.product_type)
    formula = _to_formula_data(request.formula)

    engine = ComplianceEngine(
        repository=repository,
        synonym_source=synonym_source,
        knowledge_base=knowledge_base,
    )
    report = engine.evaluate(formula, product_type, on_date=request.on_date)
    return report.to_dict()


@app.post("/api/ingestion/eu-annex")
def ingest_eu_annex(
    request: AnnexIngestionRequest,
    repository: RegulatoryEntryRepository = Depends(get_regulatory_repository),
    synonym_source: SynonymSource = Depends(get_synonym_source),
):
    """Ingest CosIng annex CSV text.

    Returns the run report. Runs stopped by a configuration error
    (no data rows, no identifier column) answer 422 with the same report body.
    """
    tier = _parse_tier(request.annex)
    settings = get_settings()
    overrides = ColumnMapping(**request.columns.model_dump()) if request.columns else None
    options = IngestionOptions(
        tier=tier,
        source=request.source or settings.default_source,
        reference_url=request.reference_url or settings.default_reference_url,
        dry_run=request.dry_run,
        column_overrides=overrides,
        skip_duplicates_check=request.skip_duplicates_check,
    )

    pipeline = AnnexIngestionPipeline(
        repository,
        synonym_source,
        batch_size=settings.ingest_batch_size,
    )
    report = pipeline.ingest(request.csv_content, options)

    if report.aborted:
        logger.warning("Annex ingestion rejected: %s", "; ".join(report.error_messages))
        return JSONResponse(status_code=422, content=report.to_dict())
    return report.to_dict()


# Reference data endpoints
@app.get("/api/reference/tiers")
async def get_tiers():
    """Get list of supported annex tiers."""
    return [
        {"value": t.value, "name": t.name, "numeric_cap": t.is_numeric_cap}
        for t in RestrictionTier
    ]


@app.get("/api/reference/product-types")
async def get_product_types():
    """Get list of supported product types."""
    return [{"value": pt.value, "name": pt.name} for pt in ProductType]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
