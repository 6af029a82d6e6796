"""Tests for Lead Scoring components."""

from datetime import timedelta

import pytest

from distribution.models import ExtractedContact, InsightSource, MarketInsight
from lead_scoring.scoring_model import LeadScorer, parse_timestamp
from lead_scoring.signals import DEFAULT_SOURCE_POINTS, match_intent, match_source

from conftest import NOW, make_dealer, make_lead


@pytest.fixture
def scorer(clock):
    return LeadScorer(clock=clock)


# ── Signal tables ─────────────────────────────────────

class TestSignals:
    def test_high_intent_wins_over_medium(self):
        assert match_intent("Cash buyer looking for a Hilux") == ("high", 10)

    def test_medium_intent(self):
        assert match_intent("Interested in a test drive") == ("medium", 5)

    def test_no_intent(self):
        assert match_intent("Nice weather today") == (None, 0)
        assert match_intent(None) == (None, 0)

    def test_source_first_match_wins(self):
        assert match_source("Website form, shared on Facebook Group") == ("website", 20)

    def test_source_case_insensitive(self):
        assert match_source("AutoTrader Listing") == ("autotrader", 15)

    def test_unknown_source_gets_default(self):
        assert match_source("Word of mouth") == (None, DEFAULT_SOURCE_POINTS)
        assert match_source(None) == (None, DEFAULT_SOURCE_POINTS)


# ── Lead scoring ──────────────────────────────────────

class TestLeadScorer:
    def test_hot_lead_with_phone_scores_high(self, scorer):
        lead = make_lead(sentiment="HOT", contact_phone="0821234567")
        result = scorer.explain_lead(lead)
        assert result.score >= 80
        assert result.score_breakdown["sentiment"] == 25
        assert result.score_breakdown["contact"] == 30
        assert result.score_breakdown["recency"] == 20
        assert result.score_breakdown["source"] == 5

    def test_empty_lead_within_bounds(self, scorer):
        lead = make_lead(source="", date_detected="", region="", brand="", model="")
        score = scorer.score_lead(lead)
        assert 0 <= score <= 100
        assert score == 10  # default sentiment + default source

    def test_score_capped_at_100(self, scorer):
        lead = make_lead(
            sentiment="hot",
            source="Website",
            intent_summary="Pre-approved, ready to buy",
            contact_phone="0821234567",
            contact_email="buyer@example.co.za",
            assigned_dealer_id="d1",
        )
        result = scorer.explain_lead(lead, [make_dealer("d1", region="Gauteng")])
        assert sum(result.score_breakdown.values()) > 100
        assert result.score == 100

    def test_sentiment_case_insensitive(self, scorer):
        assert scorer.explain_lead(make_lead(sentiment="warm")).score_breakdown["sentiment"] == 15
        assert scorer.explain_lead(make_lead(sentiment="Cold")).score_breakdown["sentiment"] == 5

    def test_contact_points(self, scorer):
        email = scorer.explain_lead(make_lead(contact_email="a@b.co.za"))
        both = scorer.explain_lead(make_lead(contact_email="a@b.co.za", contact_phone="082"))
        assert email.score_breakdown["contact"] == 15
        assert both.score_breakdown["contact"] == 40

    def test_adding_phone_never_lowers_score(self, scorer):
        for base in (make_lead(), make_lead(contact_email="a@b.co.za"), make_lead(sentiment="HOT")):
            with_phone = make_lead(**{**base.to_dict(), "contact_phone": "0821234567"})
            assert scorer.score_lead(with_phone) >= scorer.score_lead(base)

    @pytest.mark.parametrize("hours,points", [
        (1, 20), (11.9, 20), (12, 15), (30, 10), (100, 5), (168, 0), (240, 0),
    ])
    def test_recency_buckets(self, scorer, hours, points):
        detected = (NOW - timedelta(hours=hours)).isoformat()
        assert scorer.explain_lead(make_lead(date_detected=detected)).score_breakdown["recency"] == points

    def test_aging_never_raises_recency(self, scorer):
        previous = None
        for hours in range(1, 241, 6):
            detected = (NOW - timedelta(hours=hours)).isoformat()
            points = scorer.explain_lead(make_lead(date_detected=detected)).score_breakdown["recency"]
            if previous is not None:
                assert points <= previous
            previous = points

    def test_business_hours_bonus(self, scorer):
        # 10:00 SAST on a Wednesday
        assert scorer.explain_lead(make_lead()).score_breakdown["business_hours"] == 5

    def test_business_hours_last_hour_counts(self, scorer):
        lead = make_lead(date_detected="2024-05-15T17:30:00+02:00")
        assert scorer.explain_lead(lead).score_breakdown["business_hours"] == 5

    def test_space_separated_timestamp_counts_as_timed(self, scorer):
        lead = make_lead(date_detected="2024-05-15 10:00")
        assert scorer.explain_lead(lead).score_breakdown["business_hours"] == 5

    def test_after_hours_and_weekend(self, scorer):
        evening = make_lead(date_detected="2024-05-14T18:00:00+02:00")
        saturday = make_lead(date_detected="2024-05-11T10:00:00+02:00")
        assert scorer.explain_lead(evening).score_breakdown["business_hours"] == 0
        assert scorer.explain_lead(saturday).score_breakdown["business_hours"] == 0

    def test_date_only_gets_no_business_hours(self, scorer):
        result = scorer.explain_lead(make_lead(date_detected="2024-05-15"))
        assert result.score_breakdown["business_hours"] == 0
        # Midnight local, ten hours before the clock
        assert result.score_breakdown["recency"] == 20

    def test_malformed_date_scores_zero_time_signals(self, scorer):
        result = scorer.explain_lead(make_lead(date_detected="last Tuesday"))
        assert result.score_breakdown["recency"] == 0
        assert result.score_breakdown["business_hours"] == 0

    def test_region_proximity(self, scorer):
        dealers = [make_dealer("gp", region="Gauteng"), make_dealer("nw", region="North West"),
                   make_dealer("wc", region="Western Cape")]
        exact = scorer.explain_lead(make_lead(assigned_dealer_id="gp"), dealers)
        neighbor = scorer.explain_lead(make_lead(assigned_dealer_id="nw"), dealers)
        far = scorer.explain_lead(make_lead(assigned_dealer_id="wc"), dealers)
        assert exact.score_breakdown["region"] == 15
        assert neighbor.score_breakdown["region"] == 5
        assert far.score_breakdown["region"] == 0

    def test_unknown_assigned_dealer_scores_no_region(self, scorer):
        result = scorer.explain_lead(make_lead(assigned_dealer_id="ghost"), [])
        assert result.score_breakdown["region"] == 0

    def test_custom_rules_override(self, clock):
        scorer = LeadScorer(clock=clock, custom_rules={"sentiment_hot": 40})
        assert scorer.explain_lead(make_lead(sentiment="HOT")).score_breakdown["sentiment"] == 40


# ── Insight scoring ───────────────────────────────────

class TestInsightScoring:
    def test_strong_insight_capped(self, scorer):
        insight = MarketInsight(
            topic="Urgent: need a Fortuner",
            summary="Cash buyer, urgent",
            sentiment="HOT",
            source_platform="Facebook Marketplace",
            extracted_contact=ExtractedContact(phone="0821234567", email="x@y.co.za"),
        )
        result = scorer.explain_insight(insight, "Gauteng")
        assert result.score_breakdown["sentiment"] == 30
        assert result.score_breakdown["contact"] == 50
        assert result.score == 100

    def test_weak_insight_uses_source_title(self, scorer):
        insight = MarketInsight(
            topic="Corolla chat",
            summary="General discussion",
            sentiment="Cold",
            sources=[InsightSource(title="Gumtree", uri="https://gumtree.co.za/x")],
        )
        # 5 sentiment + 10 gumtree + 5 region baseline
        assert scorer.score_insight(insight, "Gauteng") == 20


class TestParseTimestamp:
    def test_zulu_suffix(self):
        assert parse_timestamp("2024-05-15T08:00:00Z") == NOW

    def test_invalid(self):
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp(None) is None
