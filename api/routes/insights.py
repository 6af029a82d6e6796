"""
Market insight API Routes for AutoLead SA.

Search public buying-intent signals and convert verified insights into
CRM leads.
"""

import logging
import time
from typing import List, Dict, Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from distribution.ledger import DealerNotFoundError
from distribution.models import MAX_PHONE_LENGTH, CurrentUser, ExtractedContact, InsightSource, MarketInsight
from llm.prompt_templates import MarketSearchQuery
from llm.providers.gemini import MarketSearchError

from ..lead_service import (
    ContactOverwriteRequired, DuplicateLeadError, LeadService, get_lead_service,
)
from ..middleware.auth import get_current_user
from ..middleware.metrics import record_search_latency
from ..services import get_services
from .leads import LeadOut, to_lead_out

logger = logging.getLogger(__name__)

router = APIRouter()


class SearchRequest(BaseModel):
    """Market search request."""
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    trim: str = ""
    condition: str = "Used"
    fuel: Optional[str] = None
    transmission: Optional[str] = None
    mileage_min: Optional[str] = None
    mileage_max: Optional[str] = None


class SourceModel(BaseModel):
    title: str
    uri: str


class ContactModel(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=MAX_PHONE_LENGTH)
    email: Optional[str] = None


class InsightModel(BaseModel):
    """A market insight as returned by the search."""
    topic: str
    summary: str
    sentiment: Optional[str] = None
    source_platform: Optional[str] = None
    context_dealer: Optional[str] = None
    extracted_contact: Optional[ContactModel] = None
    sources: List[SourceModel] = []

    def to_domain(self) -> MarketInsight:
        contact = self.extracted_contact
        return MarketInsight(
            topic=self.topic,
            summary=self.summary,
            sentiment=self.sentiment,
            source_platform=self.source_platform,
            context_dealer=self.context_dealer,
            extracted_contact=ExtractedContact(**contact.model_dump()) if contact else None,
            sources=[InsightSource(title=s.title, uri=s.uri) for s in self.sources],
        )


class ScoredInsightModel(InsightModel):
    score: int
    score_breakdown: Dict[str, int] = {}


class SearchResponse(BaseModel):
    query: str
    region: str
    insights: List[ScoredInsightModel]
    processing_time_ms: float


class ConvertRequest(BaseModel):
    """Add an insight to the CRM."""
    insight: InsightModel
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    trim: str = ""
    contact: Optional[ContactModel] = None
    overwrite_contact: bool = False


class ConvertResponse(BaseModel):
    result: str  # created | updated
    lead: LeadOut


@router.post("/insights/search", response_model=SearchResponse, dependencies=[Depends(get_current_user)])
async def search_insights(request: SearchRequest):
    """
    Search for buying-intent signals and rank them by pre-CRM score.

    Insights are not persisted; convert the ones worth keeping.
    """
    services = get_services()
    if services.market_search is None:
        raise HTTPException(status_code=503, detail="Market search not configured")

    query = MarketSearchQuery(**request.model_dump())
    start = time.time()
    try:
        scored = await services.market_search.search(query)
    except MarketSearchError as e:
        logger.error(f"Market search failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    elapsed = time.time() - start
    record_search_latency(elapsed)

    return SearchResponse(
        query=query.vehicle(),
        region=query.region,
        insights=[ScoredInsightModel(**s.to_dict()) for s in scored],
        processing_time_ms=round(elapsed * 1000, 2),
    )


@router.post("/insights/convert", response_model=ConvertResponse)
async def convert_insight(
    request: ConvertRequest,
    service: LeadService = Depends(get_lead_service),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Create a lead from a verified insight.

    A second conversion of the same source link only updates contact
    details; replacing existing contact data needs overwrite_contact.
    """
    contact: Optional[Dict[str, Any]] = (
        request.contact.model_dump(exclude_unset=True) if request.contact else None
    )
    try:
        result, scored = await service.convert_insight(
            request.insight.to_domain(),
            brand=request.brand,
            model=request.model,
            region=request.region,
            trim=request.trim,
            contact=contact,
            overwrite=request.overwrite_contact,
            current_user=user,
        )
    except DuplicateLeadError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": "Lead already exists", "lead_id": e.lead.id},
        )
    except ContactOverwriteRequired as e:
        raise HTTPException(
            status_code=409,
            detail={
                "message": "Lead exists with different contact details",
                "lead_id": e.lead.id,
                "updates": e.updates,
            },
        )
    except DealerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ConvertResponse(result=result, lead=to_lead_out(scored))
