"""
Lead workflows for AutoLead SA.

Glue between the pure distribution/scoring core, the dealer ledger and
the repositories. One instance per request, bound to one session.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database.repositories import DealerRepository, LeadRepository
from database.session import get_db, is_initialized
from distribution.distributor import DistributionDecision
from distribution.intake import find_duplicate, insight_to_lead, merge_contact
from distribution.ledger import DealerLedger, DealerNotFoundError
from distribution.models import (
    AssignmentType, BillingProfile, CurrentUser, Dealer, Lead, MarketInsight,
)
from lead_scoring.scoring_model import LeadScore

from .middleware.metrics import record_distribution, record_lead_score
from .services import Services, get_services

logger = logging.getLogger(__name__)


class LeadNotFoundError(LookupError):
    def __init__(self, lead_id: str):
        super().__init__(f"Lead not found: {lead_id}")
        self.lead_id = lead_id


class DuplicateLeadError(Exception):
    """The insight was already converted and carries nothing new."""

    def __init__(self, lead: Lead):
        super().__init__(f"Lead already exists: {lead.id}")
        self.lead = lead


class ContactOverwriteRequired(Exception):
    """New contact data would replace contact data already on the lead."""

    def __init__(self, lead: Lead, updates: Dict[str, str]):
        super().__init__(f"Contact overwrite needs confirmation for lead {lead.id}")
        self.lead = lead
        self.updates = updates


@dataclass
class ScoredLead:
    lead: Lead
    score: LeadScore
    dealer: Optional[Dealer] = None


class LeadService:
    """Create, distribute, score and maintain leads."""

    def __init__(self, session: AsyncSession, services: Services):
        self.leads = LeadRepository(session)
        self.dealers = DealerRepository(session)
        self.ledger = DealerLedger(self.dealers, services.dealer_locks)
        self.distributor = services.distributor
        self.scorer = services.lead_scorer

    # ── Leads ────────────────────────────────────────────────

    async def _scored(self, lead: Lead, dealers: Optional[List[Dealer]] = None) -> ScoredLead:
        if dealers is None:
            dealers = await self.dealers.list_all()
        dealer = next((d for d in dealers if d.id == lead.assigned_dealer_id), None)
        return ScoredLead(lead=lead, score=self.scorer.explain_lead(lead, dealers), dealer=dealer)

    async def create_lead(
        self,
        lead: Lead,
        current_user: Optional[CurrentUser] = None,
    ) -> Tuple[ScoredLead, DistributionDecision]:
        """
        Distribute a new lead once, charge the dealer, score and store it.

        Raises:
            DealerNotFoundError: self-assignment to a dealer that does not exist
        """
        dealers = await self.dealers.list_all()
        decision = self.distributor.decide(lead, dealers, current_user)

        if decision.assigned:
            charged = await self.ledger.record_assignment(decision.lead.assigned_dealer_id)
            dealers = [charged if d.id == charged.id else d for d in dealers]

        scored = await self._scored(decision.lead, dealers)
        stored = await self.leads.create(decision.lead, score=scored.score.score)

        record_distribution(decision.assignment_type.value if decision.assigned else "Unassigned")
        record_lead_score(scored.score.score)
        return replace(scored, lead=stored), decision

    async def get_lead(self, lead_id: str) -> ScoredLead:
        lead = await self.leads.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(lead_id)
        return await self._scored(lead)

    async def list_leads(
        self,
        status: Optional[str] = None,
        dealer_id: Optional[str] = None,
        min_score: Optional[int] = None,
    ) -> List[ScoredLead]:
        """Leads scored at the current time, best first."""
        dealers = await self.dealers.list_all()
        leads = await self.leads.list_leads(status, dealer_id)
        scored = [await self._scored(lead, dealers) for lead in leads]
        if min_score is not None:
            scored = [s for s in scored if s.score.score >= min_score]
        scored.sort(key=lambda s: s.score.score, reverse=True)
        return scored

    async def update_lead(self, lead_id: str, **changes: Any) -> ScoredLead:
        """Apply status, contact, notes or follow-up changes and rescore."""
        lead = await self.leads.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(lead_id)
        if not changes:
            return await self._scored(lead)

        scored = await self._scored(replace(lead, **changes))
        updated = await self.leads.update(lead_id, score=scored.score.score, **changes)
        return replace(scored, lead=updated)

    async def assign_lead(self, lead_id: str, dealer_id: str) -> ScoredLead:
        """
        Manually (re)assign a lead, moving the ledger charge.

        Raises:
            LeadNotFoundError, DealerNotFoundError
        """
        lead = await self.leads.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(lead_id)
        if await self.dealers.get_by_id(dealer_id) is None:
            raise DealerNotFoundError(dealer_id)

        await self.ledger.record_reassignment(lead.assigned_dealer_id, dealer_id)
        changes = {"assigned_dealer_id": dealer_id, "assignment_type": AssignmentType.DIRECT.value}
        scored = await self._scored(replace(lead, **changes))
        updated = await self.leads.update(
            lead_id,
            event_type="reassigned",
            score=scored.score.score,
            **changes,
        )
        logger.info(f"Lead {lead_id} reassigned from {lead.assigned_dealer_id} to {dealer_id}")
        return replace(scored, lead=updated)

    async def convert_insight(
        self,
        insight: MarketInsight,
        brand: str,
        model: str,
        region: str,
        trim: str = "",
        contact: Optional[Dict[str, Optional[str]]] = None,
        overwrite: bool = False,
        current_user: Optional[CurrentUser] = None,
    ) -> Tuple[str, ScoredLead]:
        """
        Add a market insight to the CRM.

        Returns:
            ("created" | "updated", scored lead)

        Raises:
            DuplicateLeadError: same source link, nothing new
            ContactOverwriteRequired: new contact data and overwrite not confirmed
        """
        source = insight.primary_source
        existing = await self.leads.find_by_grounding_url(source.uri) if source else None
        existing = find_duplicate([existing] if existing else [], insight)

        if existing is not None:
            merge = merge_contact(existing, insight)
            if not merge.has_new_data:
                raise DuplicateLeadError(existing)
            if merge.requires_confirmation and not overwrite:
                raise ContactOverwriteRequired(existing, merge.updates)
            return "updated", await self.update_lead(existing.id, **merge.updates)

        lead = insight_to_lead(insight, brand, model, region, trim=trim, contact_overrides=contact)
        scored, _ = await self.create_lead(lead, current_user)
        return "created", scored

    async def stats(self) -> Dict[str, Any]:
        data = await self.leads.stats()
        data["total"] = await self.leads.count()
        return data

    # ── Dealers ──────────────────────────────────────────────

    async def create_dealer(self, dealer: Dealer) -> Dealer:
        return await self.dealers.create(dealer)

    async def get_dealer(self, dealer_id: str) -> Dealer:
        dealer = await self.dealers.get_by_id(dealer_id)
        if dealer is None:
            raise DealerNotFoundError(dealer_id)
        return dealer

    async def list_dealers(self) -> List[Dealer]:
        return await self.dealers.list_all()

    async def close_billing_cycle(self, dealer_id: str, billed_on: Optional[date] = None) -> Dealer:
        return await self.ledger.close_billing_cycle(dealer_id, billed_on)


def new_dealer(plan: str, cost_per_lead: Optional[float] = None, **fields: Any) -> Dealer:
    """Dealer with a fresh billing profile for its plan."""
    billing = BillingProfile.for_plan(plan)
    if cost_per_lead is not None:
        billing.cost_per_lead = cost_per_lead
    return Dealer(billing=billing, **fields)


def require_database():
    """Dependency that fails fast when no database is configured."""
    if not is_initialized():
        raise HTTPException(status_code=503, detail="Database not configured")


async def get_lead_service(
    _: None = Depends(require_database),
    session: AsyncSession = Depends(get_db),
) -> LeadService:
    """FastAPI dependency: a LeadService bound to the request session."""
    return LeadService(session, get_services())
