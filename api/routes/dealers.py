"""
Dealer network API Routes for AutoLead SA.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from distribution.dealer_ranker import has_capacity, plan_weight
from distribution.ledger import DealerNotFoundError
from distribution.models import MAX_PHONE_LENGTH, BillingPlan, DealerStatus, UserRole
from distribution.regions import is_known_region

from ..lead_service import LeadService, get_lead_service, new_dealer
from ..middleware.auth import get_current_user, require_role

logger = logging.getLogger(__name__)

router = APIRouter()

admin_only = require_role(UserRole.ADMIN.value)


class DealerCreate(BaseModel):
    """Dealer onboarding request."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    status: DealerStatus = DealerStatus.ACTIVE
    plan: BillingPlan = BillingPlan.STANDARD
    cost_per_lead: Optional[float] = Field(None, ge=0)
    max_leads_capacity: Optional[int] = Field(None, ge=0)
    detailed_aor: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=MAX_PHONE_LENGTH)
    email: Optional[str] = None
    address: Optional[str] = None


class BillingOut(BaseModel):
    plan: str
    cost_per_lead: float
    credits: float
    total_spent: float
    current_unbilled_amount: float
    last_billed_date: Optional[str] = None


class DealerOut(BaseModel):
    """Dealer with ledger counters."""
    id: str
    name: str
    brand: str
    region: str
    status: str
    leads_assigned: int
    max_leads_capacity: Optional[int] = None
    billing: BillingOut
    detailed_aor: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    priority: int = 0
    has_capacity: bool = True


class BillingClose(BaseModel):
    billed_on: Optional[date] = None


def to_dealer_out(dealer) -> DealerOut:
    return DealerOut(
        **dealer.to_dict(),
        priority=plan_weight(dealer),
        has_capacity=has_capacity(dealer),
    )


@router.get("/dealers", response_model=List[DealerOut], dependencies=[Depends(get_current_user)])
async def list_dealers(service: LeadService = Depends(get_lead_service)):
    """List all dealers in the network."""
    return [to_dealer_out(d) for d in await service.list_dealers()]


@router.post("/dealers", response_model=DealerOut, dependencies=[Depends(admin_only)])
async def create_dealer(request: DealerCreate, service: LeadService = Depends(get_lead_service)):
    """Onboard a dealer with a fresh billing profile for its plan."""
    if await service.dealers.get_by_id(request.id):
        raise HTTPException(status_code=409, detail=f"Dealer already exists: {request.id}")
    if not is_known_region(request.region):
        logger.warning(f"Dealer {request.id} has unknown region {request.region}")

    fields = request.model_dump(exclude={"plan", "cost_per_lead", "status"})
    dealer = new_dealer(
        request.plan.value,
        cost_per_lead=request.cost_per_lead,
        status=request.status.value,
        **fields,
    )
    created = await service.create_dealer(dealer)
    logger.info(f"Onboarded dealer {created.id} ({created.brand}, {created.region}, {created.billing.plan})")
    return to_dealer_out(created)


@router.get("/dealers/{dealer_id}", response_model=DealerOut, dependencies=[Depends(get_current_user)])
async def get_dealer(dealer_id: str, service: LeadService = Depends(get_lead_service)):
    """Get a dealer by ID."""
    try:
        return to_dealer_out(await service.get_dealer(dealer_id))
    except DealerNotFoundError:
        raise HTTPException(status_code=404, detail="Dealer not found")


@router.post(
    "/dealers/{dealer_id}/billing/close",
    response_model=DealerOut,
    dependencies=[Depends(admin_only)],
)
async def close_billing(
    dealer_id: str,
    request: Optional[BillingClose] = None,
    service: LeadService = Depends(get_lead_service),
):
    """Close the dealer's billing cycle: unbilled amount moves to total spent."""
    billed_on = request.billed_on if request else None
    try:
        return to_dealer_out(await service.close_billing_cycle(dealer_id, billed_on))
    except DealerNotFoundError:
        raise HTTPException(status_code=404, detail="Dealer not found")
