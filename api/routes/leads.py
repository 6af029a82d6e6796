"""
Lead Management API Routes for AutoLead SA.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from distribution.ledger import DealerNotFoundError
from distribution.models import MAX_PHONE_LENGTH, CurrentUser, Lead, LeadStatus, Sentiment, UserRole

from ..lead_service import LeadNotFoundError, LeadService, ScoredLead, get_lead_service
from ..middleware.auth import get_current_user, require_role

logger = logging.getLogger(__name__)

router = APIRouter()

admin_only = require_role(UserRole.ADMIN.value)


# Models
class LeadCreate(BaseModel):
    """Lead creation request."""
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    source: str = "Manual"
    intent_summary: str = ""
    date_detected: Optional[str] = None
    sentiment: Optional[Sentiment] = None
    potential_value: Optional[str] = None
    grounding_url: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = Field(None, max_length=MAX_PHONE_LENGTH)
    contact_email: Optional[str] = None
    context_dealer: Optional[str] = None
    notes: Optional[str] = None
    follow_up_date: Optional[str] = None


class LeadOut(BaseModel):
    """Lead with its live score."""
    id: str
    brand: str
    model: str
    source: str
    intent_summary: str
    date_detected: str
    region: str
    status: str
    sentiment: Optional[str] = None
    potential_value: Optional[str] = None
    grounding_url: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    context_dealer: Optional[str] = None
    notes: Optional[str] = None
    assigned_dealer_id: Optional[str] = None
    assigned_dealer_name: Optional[str] = None
    assignment_type: Optional[str] = None
    follow_up_date: Optional[str] = None
    score: int
    score_breakdown: Dict[str, int] = {}
    signals: List[str] = []


class LeadUpdate(BaseModel):
    """Lead update request."""
    status: Optional[LeadStatus] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = Field(None, max_length=MAX_PHONE_LENGTH)
    contact_email: Optional[str] = None
    notes: Optional[str] = None
    follow_up_date: Optional[str] = None


class AssignRequest(BaseModel):
    """Manual reassignment request."""
    dealer_id: str = Field(..., min_length=1)


class LeadStats(BaseModel):
    """Lead statistics."""
    total: int
    by_status: Dict[str, int]
    by_assignment_type: Dict[str, int]
    average_score: float


class LeadList(BaseModel):
    """Paginated lead list."""
    leads: List[LeadOut]
    total: int
    page: int
    page_size: int
    has_next: bool


def to_lead_out(scored: ScoredLead) -> LeadOut:
    return LeadOut(
        **scored.lead.to_dict(),
        assigned_dealer_name=scored.dealer.name if scored.dealer else None,
        score=scored.score.score,
        score_breakdown=scored.score.score_breakdown,
        signals=scored.score.signals,
    )


@router.post("/leads", response_model=LeadOut)
async def create_lead(
    request: LeadCreate,
    service: LeadService = Depends(get_lead_service),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Create a new lead.

    The lead is distributed exactly once: dealer users keep their own
    leads, everyone else goes through the tiered dealer search.
    """
    data = request.model_dump()
    data["sentiment"] = request.sentiment.value if request.sentiment else None
    data["date_detected"] = request.date_detected or datetime.now(timezone.utc).isoformat()

    try:
        scored, decision = await service.create_lead(Lead.create(**data), user)
    except DealerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logger.info(
        f"Created lead {scored.lead.id}: score={scored.score.score}, "
        f"dealer={scored.lead.assigned_dealer_id or 'none'}"
    )
    return to_lead_out(scored)


@router.get("/leads", response_model=LeadList)
async def list_leads(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[LeadStatus] = None,
    dealer_id: Optional[str] = None,
    min_score: Optional[int] = Query(None, ge=0, le=100),
    service: LeadService = Depends(get_lead_service),
    user: CurrentUser = Depends(get_current_user),
):
    """
    List leads with filtering and pagination.

    Leads are scored at request time and sorted best first. Dealer
    users only see their own dealership's leads.
    """
    if user.is_dealer_user and user.dealer_id:
        dealer_id = user.dealer_id

    scored = await service.list_leads(
        status=status.value if status else None,
        dealer_id=dealer_id,
        min_score=min_score,
    )

    total = len(scored)
    start = (page - 1) * page_size
    end = start + page_size

    return LeadList(
        leads=[to_lead_out(s) for s in scored[start:end]],
        total=total,
        page=page,
        page_size=page_size,
        has_next=end < total,
    )


@router.get(
    "/leads/stats/summary",
    response_model=LeadStats,
    dependencies=[Depends(get_current_user)],
)
async def get_lead_stats(service: LeadService = Depends(get_lead_service)):
    """Get lead statistics summary."""
    return LeadStats(**await service.stats())


async def load_visible_lead(lead_id: str, service: LeadService, user: CurrentUser) -> ScoredLead:
    """Fetch a lead; dealer users only see their own dealership's leads."""
    try:
        scored = await service.get_lead(lead_id)
    except LeadNotFoundError:
        raise HTTPException(status_code=404, detail="Lead not found")
    if user.is_dealer_user and user.dealer_id and scored.lead.assigned_dealer_id != user.dealer_id:
        raise HTTPException(status_code=404, detail="Lead not found")
    return scored


@router.get("/leads/{lead_id}", response_model=LeadOut)
async def get_lead(
    lead_id: str,
    service: LeadService = Depends(get_lead_service),
    user: CurrentUser = Depends(get_current_user),
):
    """Get a lead by ID."""
    return to_lead_out(await load_visible_lead(lead_id, service, user))


@router.patch("/leads/{lead_id}", response_model=LeadOut)
async def update_lead(
    lead_id: str,
    request: LeadUpdate,
    service: LeadService = Depends(get_lead_service),
    user: CurrentUser = Depends(get_current_user),
):
    """Update status, contact details, notes or follow-up date."""
    await load_visible_lead(lead_id, service, user)

    changes: Dict[str, Any] = request.model_dump(exclude_unset=True)
    status = changes.pop("status", None)
    if status is not None:
        changes["status"] = LeadStatus(status).value

    try:
        scored = await service.update_lead(lead_id, **changes)
    except LeadNotFoundError:
        raise HTTPException(status_code=404, detail="Lead not found")

    logger.info(f"Updated lead {lead_id} by {user.id}: {list(changes)}")
    return to_lead_out(scored)


@router.post("/leads/{lead_id}/assign", response_model=LeadOut)
async def assign_lead(
    lead_id: str,
    request: AssignRequest,
    service: LeadService = Depends(get_lead_service),
    user: CurrentUser = Depends(admin_only),
):
    """Manually reassign a lead to another dealer. Network admins only."""
    try:
        scored = await service.assign_lead(lead_id, request.dealer_id)
    except LeadNotFoundError:
        raise HTTPException(status_code=404, detail="Lead not found")
    except DealerNotFoundError:
        raise HTTPException(status_code=404, detail="Dealer not found")

    logger.info(f"Lead {lead_id} reassigned to {request.dealer_id} by {user.id}")
    return to_lead_out(scored)
