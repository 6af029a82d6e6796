"""
Lead Scoring Model for AutoLead SA.

Additive point model over sentiment, contact completeness, source
quality, intent keywords, recency, time of day and dealer proximity.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from distribution.models import Dealer, Lead, MarketInsight, Sentiment
from distribution.regions import REGION_ADJACENCY, neighbors_of

from .signals import match_intent, match_source

logger = logging.getLogger(__name__)

MAX_SCORE = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date or timestamp; None if missing or malformed."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value!r}")
        return None


@dataclass
class LeadScore:
    """Score with per-signal breakdown."""
    score: int  # 0-100
    score_breakdown: Dict[str, int] = field(default_factory=dict)
    signals: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "score_breakdown": self.score_breakdown,
            "signals": self.signals,
        }


class LeadScorer:
    """
    Scores leads and market insights on a 0-100 scale.

    Scoring Rules:
    - Sentiment: HOT +25 (insight +30), Warm +15, other +5
    - Contact (lead): phone +30, else email +15, both +10 extra
    - Contact (insight): phone +35, email +15
    - Source quality: weight table, default +5
    - Intent keywords: high +10, else medium +5
    - Recency (lead): <12h +20, <24h +15, <48h +10, <7d +5
    - Business hours (lead): Mon-Fri 08:00-17:59 local +5
    - Dealer proximity (lead): same region +15, neighbor region +5
    - Insight region match baseline: +5
    """

    SCORING_RULES = {
        # Sentiment
        "sentiment_hot": 25,
        "sentiment_hot_insight": 30,
        "sentiment_warm": 15,
        "sentiment_other": 5,

        # Contact completeness
        "contact_phone": 30,
        "contact_email": 15,
        "contact_both": 10,
        "insight_phone": 35,
        "insight_email": 15,

        # Recency buckets
        "recency_12h": 20,
        "recency_24h": 15,
        "recency_48h": 10,
        "recency_week": 5,

        # Time of day and proximity
        "business_hours": 5,
        "region_exact": 15,
        "region_neighbor": 5,
        "insight_region_match": 5,
    }

    # (upper bound in hours, rule)
    RECENCY_BUCKETS = [
        (12, "recency_12h"),
        (24, "recency_24h"),
        (48, "recency_48h"),
        (168, "recency_week"),
    ]

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        business_timezone: str = "Africa/Johannesburg",
        business_hours: tuple = (8, 17),
        adjacency: Optional[Dict[str, List[str]]] = None,
        custom_rules: Optional[Dict[str, int]] = None,
    ):
        """
        Initialize the lead scorer.

        Args:
            clock: Wall clock used for recency
            business_timezone: Zone for the business-hours bonus
            business_hours: Inclusive (first hour, last hour)
            adjacency: Region graph for the proximity bonus
            custom_rules: Optional custom scoring rules to override defaults
        """
        self.clock = clock
        self.tz: tzinfo = ZoneInfo(business_timezone)
        self.business_hours = business_hours
        self.adjacency = REGION_ADJACENCY if adjacency is None else adjacency
        self.rules = self.SCORING_RULES.copy()
        if custom_rules:
            self.rules.update(custom_rules)

    # ── Public API ───────────────────────────────────────────

    def score_lead(self, lead: Lead, dealers: Optional[List[Dealer]] = None) -> int:
        """Score a stored lead (0-100)."""
        return self.explain_lead(lead, dealers).score

    def score_insight(self, insight: MarketInsight, search_region: str = "") -> int:
        """Score a market insight before it becomes a lead (0-100)."""
        return self.explain_insight(insight, search_region).score

    def explain_lead(self, lead: Lead, dealers: Optional[List[Dealer]] = None) -> LeadScore:
        """
        Score a lead and report how each signal contributed.

        Args:
            lead: Lead to score
            dealers: Dealer network, used to resolve the assigned dealer

        Returns:
            LeadScore with breakdown
        """
        breakdown: Dict[str, int] = {}
        signals: List[str] = []

        breakdown["sentiment"] = self._score_sentiment(lead.sentiment, insight=False)
        breakdown["contact"] = self._score_lead_contact(lead)
        breakdown["source"] = self._score_source(lead.source, signals)
        breakdown["intent"] = self._score_intent(lead.intent_summary, signals)

        detected = parse_timestamp(lead.date_detected)
        breakdown["recency"] = self._score_recency(detected, signals)
        breakdown["business_hours"] = self._score_business_hours(lead.date_detected, detected)
        breakdown["region"] = self._score_region(lead, dealers or [], signals)

        if lead.contact_phone:
            signals.append("Phone number available")
        elif lead.contact_email:
            signals.append("Email available")

        return self._finish(breakdown, signals)

    def explain_insight(self, insight: MarketInsight, search_region: str = "") -> LeadScore:
        """Score a market insight and report the breakdown."""
        breakdown: Dict[str, int] = {}
        signals: List[str] = []

        breakdown["sentiment"] = self._score_sentiment(insight.sentiment, insight=True)

        contact = insight.extracted_contact
        contact_points = 0
        if contact and contact.phone:
            contact_points += self.rules["insight_phone"]
            signals.append("Phone number extracted")
        if contact and contact.email:
            contact_points += self.rules["insight_email"]
            signals.append("Email extracted")
        breakdown["contact"] = contact_points

        source = insight.source_platform
        if not source and insight.primary_source:
            source = insight.primary_source.title
        breakdown["source"] = self._score_source(source, signals)
        breakdown["intent"] = self._score_intent(f"{insight.summary} {insight.topic}", signals)

        # Results come from a region-scoped search
        breakdown["region"] = self.rules["insight_region_match"]
        if search_region:
            signals.append(f"Found in {search_region} search")

        return self._finish(breakdown, signals)

    # ── Signal scoring ───────────────────────────────────────

    def _finish(self, breakdown: Dict[str, int], signals: List[str]) -> LeadScore:
        total = round(sum(breakdown.values()))
        return LeadScore(
            score=max(0, min(MAX_SCORE, total)),
            score_breakdown=breakdown,
            signals=signals,
        )

    def _score_sentiment(self, value: Optional[str], insight: bool) -> int:
        sentiment = Sentiment.parse(value)
        if sentiment == Sentiment.HOT:
            return self.rules["sentiment_hot_insight" if insight else "sentiment_hot"]
        if sentiment == Sentiment.WARM:
            return self.rules["sentiment_warm"]
        return self.rules["sentiment_other"]

    def _score_lead_contact(self, lead: Lead) -> int:
        points = 0
        if lead.contact_phone:
            points += self.rules["contact_phone"]
        elif lead.contact_email:
            points += self.rules["contact_email"]
        if lead.contact_phone and lead.contact_email:
            points += self.rules["contact_both"]
        return points

    def _score_source(self, source: Optional[str], signals: List[str]) -> int:
        key, points = match_source(source)
        if key:
            signals.append(f"Source: {key}")
        return points

    def _score_intent(self, text: Optional[str], signals: List[str]) -> int:
        tier, points = match_intent(text)
        if tier:
            signals.append(f"{tier.title()} intent keywords")
        return points

    def _localize(self, moment: datetime) -> datetime:
        # Naive timestamps are taken as business-local time
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment

    def _score_recency(self, detected: Optional[datetime], signals: List[str]) -> int:
        if detected is None:
            return 0
        now = self._localize(self.clock())
        age_hours = (now - self._localize(detected)).total_seconds() / 3600
        for limit, rule in self.RECENCY_BUCKETS:
            if age_hours < limit:
                signals.append(f"Detected {max(age_hours, 0):.0f}h ago")
                return self.rules[rule]
        return 0

    def _score_business_hours(self, raw: Optional[str], detected: Optional[datetime]) -> int:
        # Date-only values (at most YYYY-MM-DD) carry no time of day
        if detected is None or not raw or len(raw.strip()) <= 10:
            return 0
        local = self._localize(detected).astimezone(self.tz)
        first, last = self.business_hours
        if local.weekday() < 5 and first <= local.hour <= last:
            return self.rules["business_hours"]
        return 0

    def _score_region(self, lead: Lead, dealers: List[Dealer], signals: List[str]) -> int:
        if not lead.assigned_dealer_id:
            return 0
        dealer = next((d for d in dealers if d.id == lead.assigned_dealer_id), None)
        if dealer is None:
            return 0

        lead_region = (lead.region or "").strip().lower()
        if (dealer.region or "").strip().lower() == lead_region:
            signals.append("Assigned dealer in lead region")
            return self.rules["region_exact"]
        neighbors = [n.lower() for n in neighbors_of(dealer.region, self.adjacency)]
        if lead_region in neighbors:
            signals.append("Assigned dealer in neighboring region")
            return self.rules["region_neighbor"]
        return 0
