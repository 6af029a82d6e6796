"""
Lead Distribution Module for AutoLead SA.

This module routes leads across the dealer network:
- Region adjacency graph and brand catalog
- Dealer availability filter and plan/load ranking
- Three-tier distributor (Direct, Fallback, National)
- Dealer ledger for load and billing counters
- Insight-to-lead intake
"""

from .models import (
    AssignmentType,
    BillingPlan,
    BillingProfile,
    CurrentUser,
    Dealer,
    DealerStatus,
    ExtractedContact,
    InsightSource,
    Lead,
    LeadStatus,
    MarketInsight,
    Sentiment,
    UserRole,
)
from .regions import REGION_ADJACENCY, SA_REGIONS, NAAMSA_BRANDS, neighbors_of
from .dealer_ranker import filter_available, pick_best, plan_weight
from .distributor import LeadDistributor, DistributionDecision, distribute
from .ledger import DealerLedger, DealerStore, DealerNotFoundError

__all__ = [
    "AssignmentType",
    "BillingPlan",
    "BillingProfile",
    "CurrentUser",
    "Dealer",
    "DealerStatus",
    "ExtractedContact",
    "InsightSource",
    "Lead",
    "LeadStatus",
    "MarketInsight",
    "Sentiment",
    "UserRole",
    "REGION_ADJACENCY",
    "SA_REGIONS",
    "NAAMSA_BRANDS",
    "neighbors_of",
    "filter_available",
    "pick_best",
    "plan_weight",
    "LeadDistributor",
    "DistributionDecision",
    "distribute",
    "DealerLedger",
    "DealerStore",
    "DealerNotFoundError",
]
