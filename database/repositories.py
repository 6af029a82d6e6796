"""
Repository classes for AutoLead SA data access layer.

Each repository encapsulates CRUD operations for a specific model and
converts rows to the domain dataclasses in distribution.models.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from distribution import models as domain
from distribution.ledger import DealerStore

from .models import Dealer, Lead, LeadEvent

logger = logging.getLogger(__name__)

_LEAD_FIELDS = (
    "id", "brand", "model", "source", "intent_summary", "date_detected",
    "region", "status", "sentiment", "potential_value", "grounding_url",
    "contact_name", "contact_phone", "contact_email", "context_dealer",
    "notes", "assigned_dealer_id", "assignment_type", "follow_up_date",
)

_DEALER_FIELDS = (
    "id", "name", "brand", "region", "status", "leads_assigned",
    "max_leads_capacity", "detailed_aor", "contact_person", "phone",
    "email", "address",
)

_BILLING_FIELDS = (
    "plan", "cost_per_lead", "credits", "total_spent",
    "current_unbilled_amount", "last_billed_date",
)


def dealer_to_domain(row: Dealer) -> domain.Dealer:
    billing = domain.BillingProfile(**{f: getattr(row, f) for f in _BILLING_FIELDS})
    data = {f: getattr(row, f) for f in _DEALER_FIELDS}
    data["leads_assigned"] = data["leads_assigned"] or 0
    return domain.Dealer(billing=billing, **data)


def lead_to_domain(row: Lead) -> domain.Lead:
    return domain.Lead(**{f: getattr(row, f) for f in _LEAD_FIELDS})


class DealerRepository(DealerStore):
    """Data access for dealers."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, dealer: domain.Dealer) -> domain.Dealer:
        row = Dealer(
            **{f: getattr(dealer, f) for f in _DEALER_FIELDS},
            **{f: getattr(dealer.billing, f) for f in _BILLING_FIELDS},
        )
        self.session.add(row)
        await self.session.flush()
        return dealer_to_domain(row)

    async def _get_row(self, dealer_id: str, for_update: bool = False) -> Optional[Dealer]:
        q = select(Dealer).where(Dealer.id == dealer_id)
        if for_update:
            q = q.with_for_update()
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def get_by_id(self, dealer_id: str) -> Optional[domain.Dealer]:
        row = await self._get_row(dealer_id)
        return dealer_to_domain(row) if row else None

    async def list_all(self) -> List[domain.Dealer]:
        result = await self.session.execute(select(Dealer).order_by(Dealer.name.asc()))
        return [dealer_to_domain(r) for r in result.scalars().all()]

    # DealerStore

    async def get_for_update(self, dealer_id: str) -> Optional[domain.Dealer]:
        row = await self._get_row(dealer_id, for_update=True)
        return dealer_to_domain(row) if row else None

    async def save_counters(self, dealer: domain.Dealer) -> None:
        row = await self._get_row(dealer.id)
        if row is None:
            logger.warning(f"Dealer vanished before counter update: {dealer.id}")
            return
        row.leads_assigned = dealer.leads_assigned
        for f in _BILLING_FIELDS:
            setattr(row, f, getattr(dealer.billing, f))
        await self.session.flush()


class LeadRepository:
    """Data access for leads and lead events."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, lead: domain.Lead, score: int = 0) -> domain.Lead:
        row = Lead(score=score, **{f: getattr(lead, f) for f in _LEAD_FIELDS})
        self.session.add(row)
        await self.session.flush()
        # Record creation event
        self.session.add(LeadEvent(
            lead_id=row.id,
            event_type="created",
            details_json={
                "score": score,
                "assigned_dealer_id": lead.assigned_dealer_id,
                "assignment_type": lead.assignment_type,
            },
        ))
        await self.session.flush()
        return lead_to_domain(row)

    async def update(self, lead_id: str, event_type: str = "updated", **kwargs) -> Optional[domain.Lead]:
        result = await self.session.execute(select(Lead).where(Lead.id == lead_id))
        row = result.scalar_one_or_none()
        if not row:
            return None
        for k, v in kwargs.items():
            if hasattr(row, k):
                setattr(row, k, v)
        # Record update event
        self.session.add(LeadEvent(
            lead_id=lead_id,
            event_type=event_type,
            details_json=kwargs,
        ))
        await self.session.flush()
        return lead_to_domain(row)

    async def get_by_id(self, lead_id: str) -> Optional[domain.Lead]:
        result = await self.session.execute(select(Lead).where(Lead.id == lead_id))
        row = result.scalar_one_or_none()
        return lead_to_domain(row) if row else None

    async def find_by_grounding_url(self, url: str) -> Optional[domain.Lead]:
        result = await self.session.execute(
            select(Lead).where(Lead.grounding_url == url).limit(1)
        )
        row = result.scalar_one_or_none()
        return lead_to_domain(row) if row else None

    async def list_leads(
        self,
        status: Optional[str] = None,
        dealer_id: Optional[str] = None,
    ) -> List[domain.Lead]:
        q = select(Lead).order_by(Lead.created_at.desc())
        if status:
            q = q.where(Lead.status == status)
        if dealer_id:
            q = q.where(Lead.assigned_dealer_id == dealer_id)
        result = await self.session.execute(q)
        return [lead_to_domain(r) for r in result.scalars().all()]

    async def count(self, status: Optional[str] = None) -> int:
        q = select(func.count(Lead.id))
        if status:
            q = q.where(Lead.status == status)
        result = await self.session.execute(q)
        return result.scalar() or 0

    async def stats(self) -> Dict[str, Any]:
        """Counts by status and assignment type, plus average score."""
        by_status = await self.session.execute(
            select(Lead.status, func.count(Lead.id)).group_by(Lead.status)
        )
        by_type = await self.session.execute(
            select(Lead.assignment_type, func.count(Lead.id)).group_by(Lead.assignment_type)
        )
        avg = await self.session.execute(select(func.avg(Lead.score)))
        avg_score = avg.scalar()
        return {
            "by_status": {s: c for s, c in by_status.all()},
            "by_assignment_type": {(t or "Unassigned"): c for t, c in by_type.all()},
            "average_score": round(float(avg_score), 2) if avg_score is not None else 0.0,
        }
