"""
Service initialization and dependency injection for AutoLead SA API.

Creates and manages the long-lived service instances used by the API.
Per-request objects (repositories, ledger) are built around a session
in api.lead_service.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, Optional

from config.settings import get_settings, Settings
from distribution.distributor import LeadDistributor
from lead_scoring.scoring_model import LeadScorer
from llm.market_search import MarketSearchService
from llm.providers.gemini import GeminiSearchProvider

logger = logging.getLogger(__name__)


class Services:
    """Container for all application services."""

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.lead_scorer: Optional[LeadScorer] = None
        self.distributor: Optional[LeadDistributor] = None
        self.search_provider: Optional[GeminiSearchProvider] = None
        self.market_search: Optional[MarketSearchService] = None
        # Shared across requests so ledger updates serialise per dealer
        self.dealer_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._initialized = False

    def initialize(self):
        """Initialize all services."""
        if self._initialized:
            return

        self.settings = get_settings()
        logger.info(f"Initializing services for {self.settings.app_name}")

        self._init_lead_engine()
        self._init_market_search()
        self._initialized = True
        logger.info("All services initialized successfully")

    def _init_lead_engine(self):
        """Initialize distribution and scoring."""
        s = self.settings
        self.distributor = LeadDistributor()
        self.lead_scorer = LeadScorer(
            business_timezone=s.business_timezone,
            business_hours=(s.business_hours_start, s.business_hours_end),
        )
        logger.info("Lead distribution and scoring ready")

    def _init_market_search(self):
        """Initialize the market search provider."""
        s = self.settings

        if not s.search_enabled:
            logger.warning("GEMINI_API_KEY not set, market search disabled")
            return

        self.search_provider = GeminiSearchProvider(
            api_key=s.gemini_api_key,
            model_id=s.gemini_model,
            base_url=s.gemini_base_url,
            timeout=s.search_timeout_seconds,
        )
        self.market_search = MarketSearchService(self.search_provider, self.lead_scorer)
        logger.info("Market search ready")

    def reset(self):
        """Drop all instances; the next initialize() rebuilds them."""
        self.__init__()

    @property
    def is_ready(self) -> bool:
        return self._initialized and self.distributor is not None

    def health(self) -> dict:
        """Return health status of all services."""
        return {
            "initialized": self._initialized,
            "distribution": self.distributor is not None,
            "lead_scoring": self.lead_scorer is not None,
            "market_search": self.market_search is not None,
        }


# Singleton
_services = Services()


def get_services() -> Services:
    """Get the global services instance."""
    return _services


def initialize_services():
    """Initialize all services (called at startup)."""
    _services.initialize()
