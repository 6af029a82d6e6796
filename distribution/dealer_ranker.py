"""
Dealer availability filtering and ranking.
"""

import logging
from typing import Dict, List, Optional

from .models import BillingPlan, Dealer, DealerStatus

logger = logging.getLogger(__name__)


# Higher weight wins; unknown plans rank last
PLAN_WEIGHTS: Dict[str, int] = {
    BillingPlan.ENTERPRISE.value: 3,
    BillingPlan.PRO.value: 2,
    BillingPlan.STANDARD.value: 1,
}


def plan_weight(dealer: Dealer) -> int:
    """Priority weight of a dealer's billing plan (0 when missing or unknown)."""
    billing = dealer.billing
    plan = billing.plan if billing else None
    return PLAN_WEIGHTS.get(plan, 0) if plan else 0


def _load(dealer: Dealer) -> int:
    return dealer.leads_assigned or 0


def has_capacity(dealer: Dealer) -> bool:
    """True when the dealer's lead cap is unset or not yet reached."""
    if not dealer.max_leads_capacity:
        return True
    return _load(dealer) < dealer.max_leads_capacity


def filter_available(dealers: List[Dealer]) -> List[Dealer]:
    """
    Keep active dealers that still have capacity.

    Args:
        dealers: Candidate dealers (already brand/region filtered)

    Returns:
        Available dealers in input order, possibly empty
    """
    return [
        d for d in dealers
        if d.status == DealerStatus.ACTIVE.value and has_capacity(d)
    ]


def rank_dealers(dealers: List[Dealer]) -> List[Dealer]:
    """
    Order available dealers: plan tier first, then fewest assigned leads.

    The sort is stable so remaining ties keep their input order.
    """
    return sorted(
        filter_available(dealers),
        key=lambda d: (-plan_weight(d), _load(d)),
    )


def pick_best(dealers: List[Dealer]) -> Optional[Dealer]:
    """
    Pick the best available dealer from a candidate set.

    Returns:
        Highest-priority, least-loaded dealer, or None if none is available
    """
    ranked = rank_dealers(dealers)
    return ranked[0] if ranked else None
