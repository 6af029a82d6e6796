"""
Market search module for AutoLead SA.
"""

from .insight_parser import parse_insights
from .market_search import MarketSearchService, ScoredInsight
from .prompt_templates import MarketSearchQuery, build_market_search_prompt
from .providers import GeminiSearchProvider, MarketSearchError

__all__ = [
    "parse_insights",
    "MarketSearchService",
    "ScoredInsight",
    "MarketSearchQuery",
    "build_market_search_prompt",
    "GeminiSearchProvider",
    "MarketSearchError",
]
