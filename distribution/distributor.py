"""
Lead Distributor for AutoLead SA.

Assigns an incoming lead to a dealer using a three-tier fallback:
exact brand+region, then neighboring regions in adjacency order, then
any dealer of the brand nationally.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from .dealer_ranker import pick_best
from .models import AssignmentType, CurrentUser, Dealer, Lead
from .regions import REGION_ADJACENCY, neighbors_of

logger = logging.getLogger(__name__)


@dataclass
class DistributionDecision:
    """Outcome of a distribution run."""
    lead: Lead
    dealer: Optional[Dealer] = None
    assignment_type: Optional[AssignmentType] = None
    matched_region: Optional[str] = None
    self_assigned: bool = False

    @property
    def assigned(self) -> bool:
        return self.lead.assigned_dealer_id is not None


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _brand_candidates(dealers: List[Dealer], brand: str) -> List[Dealer]:
    return [d for d in dealers if _norm(d.brand) == brand]


def _in_region(dealers: List[Dealer], region: str) -> List[Dealer]:
    return [d for d in dealers if _norm(d.region) == region]


def decide(
    lead: Lead,
    dealers: List[Dealer],
    adjacency: Optional[Dict[str, List[str]]] = None,
    current_user: Optional[CurrentUser] = None,
) -> DistributionDecision:
    """
    Run the tiered search and describe the outcome.

    Args:
        lead: Lead to distribute
        dealers: Snapshot of the dealer network
        adjacency: Region graph (defaults to REGION_ADJACENCY)
        current_user: Caller context for the self-assignment override

    Returns:
        DistributionDecision; decision.lead is a copy, the input is untouched
    """
    graph = REGION_ADJACENCY if adjacency is None else adjacency

    # Dealer staff entering a lead keep it for their own dealership
    if current_user and current_user.is_dealer_user and current_user.dealer_id:
        assigned = replace(
            lead,
            assigned_dealer_id=current_user.dealer_id,
            assignment_type=AssignmentType.DIRECT.value,
        )
        home = next((d for d in dealers if d.id == current_user.dealer_id), None)
        return DistributionDecision(
            lead=assigned,
            dealer=home,
            assignment_type=AssignmentType.DIRECT,
            matched_region=home.region if home else None,
            self_assigned=True,
        )

    brand = _norm(lead.brand)
    region = _norm(lead.region)
    same_brand = _brand_candidates(dealers, brand)

    # Tier 1: exact brand + region
    match = pick_best(_in_region(same_brand, region))
    assignment_type = AssignmentType.DIRECT
    matched_region = lead.region

    # Tier 2: first neighbor region (in adjacency order) that yields a dealer
    if match is None:
        assignment_type = AssignmentType.FALLBACK
        for neighbor in neighbors_of(lead.region, graph):
            match = pick_best(_in_region(same_brand, _norm(neighbor)))
            if match is not None:
                matched_region = neighbor
                break

    # Tier 3: national
    if match is None:
        assignment_type = AssignmentType.NATIONAL
        match = pick_best(same_brand)
        matched_region = match.region if match else None

    if match is None:
        return DistributionDecision(lead=lead)

    return DistributionDecision(
        lead=replace(
            lead,
            assigned_dealer_id=match.id,
            assignment_type=assignment_type.value,
        ),
        dealer=match,
        assignment_type=assignment_type,
        matched_region=matched_region,
    )


def distribute(
    lead: Lead,
    dealers: List[Dealer],
    adjacency: Optional[Dict[str, List[str]]] = None,
    current_user: Optional[CurrentUser] = None,
) -> Lead:
    """
    Assign a lead to a dealer.

    Returns a copy of the lead with assigned_dealer_id and assignment_type
    set, or the lead unchanged when no dealer of the brand is available
    anywhere. Never raises for a missing match.
    """
    return decide(lead, dealers, adjacency, current_user).lead


class LeadDistributor:
    """
    Distributes leads across the dealer network.

    Holds the region graph and logs every decision; the search itself is
    the stateless decide() function.
    """

    def __init__(self, adjacency: Optional[Dict[str, List[str]]] = None):
        """
        Initialize the distributor.

        Args:
            adjacency: Region graph override (defaults to REGION_ADJACENCY)
        """
        self.adjacency = REGION_ADJACENCY if adjacency is None else adjacency

    def decide(
        self,
        lead: Lead,
        dealers: List[Dealer],
        current_user: Optional[CurrentUser] = None,
    ) -> DistributionDecision:
        decision = decide(lead, dealers, self.adjacency, current_user)

        if decision.self_assigned:
            logger.info(
                f"Lead {lead.id} self-assigned to dealer {decision.lead.assigned_dealer_id}"
            )
        elif decision.assigned:
            logger.info(
                f"Lead {lead.id} ({lead.brand}/{lead.region}) -> dealer {decision.dealer.id} "
                f"[{decision.assignment_type.value}, {decision.matched_region}]"
            )
        else:
            logger.warning(f"No dealer available for lead {lead.id} ({lead.brand}/{lead.region})")

        return decision

    def distribute(
        self,
        lead: Lead,
        dealers: List[Dealer],
        current_user: Optional[CurrentUser] = None,
    ) -> Lead:
        return self.decide(lead, dealers, current_user).lead
