"""Tests for converting market insights into leads."""

import pytest

from distribution.intake import find_duplicate, insight_source_label, insight_to_lead, merge_contact
from distribution.models import ExtractedContact, InsightSource, MarketInsight
from distribution.regions import brand_display_name

from conftest import NOW, make_lead


@pytest.fixture
def insight():
    return MarketInsight(
        topic="Looking for a Hilux Legend",
        summary="Wants a 2022 Hilux Legend, cash ready",
        sentiment="HOT",
        source_platform="Facebook Group",
        context_dealer="Sandton Toyota",
        extracted_contact=ExtractedContact(name="Thabo", phone="0821234567"),
        sources=[InsightSource(title="Facebook", uri="https://facebook.com/groups/x/1")],
    )


class TestInsightToLead:
    def test_builds_new_unassigned_lead(self, insight, clock):
        lead = insight_to_lead(insight, "toyota", "Hilux", "Gauteng", trim="Legend", clock=clock)
        assert lead.brand == "Toyota"
        assert lead.model == "Hilux Legend"
        assert lead.region == "Gauteng"
        assert lead.status == "NEW"
        assert lead.source == "Facebook Group"
        assert lead.sentiment == "HOT"
        assert lead.grounding_url == "https://facebook.com/groups/x/1"
        assert lead.contact_phone == "0821234567"
        assert lead.context_dealer == "Sandton Toyota"
        assert lead.date_detected == NOW.isoformat()
        assert lead.assigned_dealer_id is None
        assert lead.id

    def test_free_text_sentiment_not_stored(self, insight, clock):
        insight.sentiment = "Very HOT - cash buyer"
        lead = insight_to_lead(insight, "Toyota", "Hilux", "Gauteng", clock=clock)
        assert lead.sentiment is None

    def test_sentiment_label_normalised(self, insight, clock):
        insight.sentiment = " warm "
        lead = insight_to_lead(insight, "Toyota", "Hilux", "Gauteng", clock=clock)
        assert lead.sentiment == "Warm"

    def test_contact_overrides(self, insight, clock):
        lead = insight_to_lead(
            insight, "Toyota", "Hilux", "Gauteng",
            contact_overrides={"phone": "0830000000", "name": ""},
            clock=clock,
        )
        assert lead.contact_phone == "0830000000"
        assert lead.contact_name is None

    def test_source_label_falls_back_to_title(self, insight):
        insight.source_platform = None
        assert insight_source_label(insight) == "Facebook"
        insight.sources = []
        assert insight_source_label(insight) == "Unknown Source"

    def test_brand_display_name(self):
        assert brand_display_name("land-rover") == "Land Rover"
        assert brand_display_name("Toyota") == "Toyota"
        assert brand_display_name("Unknown Motors") == "Unknown Motors"


class TestDuplicates:
    def test_found_by_grounding_url(self, insight):
        existing = make_lead(grounding_url="https://facebook.com/groups/x/1")
        assert find_duplicate([make_lead(id="other"), existing], insight) is existing

    def test_placeholder_url_never_duplicates(self, insight):
        insight.sources = [InsightSource(title="Unknown Source", uri="#")]
        assert find_duplicate([make_lead(grounding_url="#")], insight) is None

    def test_merge_nothing_new(self, insight):
        existing = make_lead(contact_name="Thabo", contact_phone="0821234567")
        merge = merge_contact(existing, insight)
        assert not merge.has_new_data
        assert merge.updates == {}

    def test_merge_into_empty_contact_needs_no_confirmation(self, insight):
        merge = merge_contact(make_lead(), insight)
        assert merge.has_new_data
        assert not merge.requires_confirmation
        assert merge.updates == {"contact_name": "Thabo", "contact_phone": "0821234567"}

    def test_merge_over_existing_contact_needs_confirmation(self, insight):
        existing = make_lead(contact_name="Thabo", contact_phone="0711111111")
        merge = merge_contact(existing, insight)
        assert merge.requires_confirmation
        assert merge.updates == {"contact_phone": "0821234567"}
