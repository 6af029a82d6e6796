"""
Lead Scoring Module for AutoLead SA.

Computes 0-100 quality scores for CRM leads and for market insights
found by the search provider.
"""

from .scoring_model import LeadScorer, LeadScore, parse_timestamp
from .signals import INTENT_KEYWORD_TIERS, SOURCE_WEIGHTS, match_intent, match_source

__all__ = [
    "LeadScorer",
    "LeadScore",
    "parse_timestamp",
    "INTENT_KEYWORD_TIERS",
    "SOURCE_WEIGHTS",
    "match_intent",
    "match_source",
]
