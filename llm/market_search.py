"""
Market search service for AutoLead SA.

Runs a grounded search, parses the insights and ranks them by
pre-CRM score.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

from distribution.models import MarketInsight
from lead_scoring.scoring_model import LeadScore, LeadScorer

from .insight_parser import parse_insights
from .prompt_templates import MarketSearchQuery, build_market_search_prompt

logger = logging.getLogger(__name__)


class SearchProvider(Protocol):
    async def search(self, prompt: str) -> str:
        ...


@dataclass
class ScoredInsight:
    """An insight with its score."""
    insight: MarketInsight
    score: LeadScore

    def to_dict(self) -> Dict[str, Any]:
        data = self.insight.to_dict()
        data["score"] = self.score.score
        data["score_breakdown"] = self.score.score_breakdown
        return data


class MarketSearchService:
    """Search -> parse -> score -> rank."""

    def __init__(self, provider: SearchProvider, scorer: LeadScorer):
        self.provider = provider
        self.scorer = scorer

    async def search(self, query: MarketSearchQuery) -> List[ScoredInsight]:
        """
        Find buying-intent signals for a vehicle in a region.

        Raises:
            MarketSearchError: propagated from the provider
        """
        start = time.time()
        text = await self.provider.search(build_market_search_prompt(query))
        insights = parse_insights(text)

        scored = [
            ScoredInsight(insight=i, score=self.scorer.explain_insight(i, query.region))
            for i in insights
        ]
        scored.sort(key=lambda s: s.score.score, reverse=True)

        logger.info(
            f"Market search {query.vehicle()} in {query.region}: "
            f"{len(scored)} insights in {time.time() - start:.2f}s"
        )
        return scored
