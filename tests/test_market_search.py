"""Tests for market search: parsing, the Gemini client and ranking."""

import json

import httpx
import pytest

from lead_scoring.scoring_model import LeadScorer
from llm.insight_parser import extract_value, parse_insights
from llm.market_search import MarketSearchService
from llm.prompt_templates import LEAD_ITEM_SEPARATOR, MarketSearchQuery, build_market_search_prompt
from llm.providers.gemini import GeminiSearchProvider, MarketSearchError

SEARCH_OUTPUT = f"""Here is what I found.
{LEAD_ITEM_SEPARATOR}
Topic: Anyone selling a Fortuner?
Sentiment: Warm
Summary: Looking for a 2021 Fortuner 2.8 GD-6 around Pretoria
SourceTitle: 4x4Community
SourceURI: https://4x4community.co.za/forum/123
SourcePlatform: 4x4Community Forum
ContextDealer: N/A
ContactName: N/A
ContactPhone: N/A
ContactEmail: N/A
{LEAD_ITEM_SEPARATOR}
Topic: Cash buyer for Hilux
Sentiment: HOT
Summary: Cash buyer, urgent, wants a Hilux double cab
SourceTitle: Facebook
SourceURI: https://facebook.com/marketplace/item/9
SourcePlatform: Facebook Marketplace
ContextDealer: Sandton Toyota
ContactName: Sipho
ContactPhone: 082 123 4567
ContactEmail: N/A
{LEAD_ITEM_SEPARATOR}
Summary: item without a topic is dropped
"""


def gemini_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_provider(handler) -> GeminiSearchProvider:
    return GeminiSearchProvider(
        api_key="test-key",
        base_url="https://gemini.test/v1beta",
        transport=httpx.MockTransport(handler),
    )


class TestInsightParser:
    def test_parses_items_and_drops_topicless(self):
        insights = parse_insights(SEARCH_OUTPUT)
        assert [i.topic for i in insights] == ["Anyone selling a Fortuner?", "Cash buyer for Hilux"]

    def test_missing_values_become_none(self):
        first = parse_insights(SEARCH_OUTPUT)[0]
        assert first.extracted_contact is None
        assert first.context_dealer is None
        assert first.sources[0].uri == "https://4x4community.co.za/forum/123"

    def test_contact_extracted(self):
        second = parse_insights(SEARCH_OUTPUT)[1]
        assert second.extracted_contact.name == "Sipho"
        assert second.extracted_contact.phone == "082 123 4567"
        assert second.extracted_contact.email is None
        assert second.context_dealer == "Sandton Toyota"

    def test_overlong_phone_dropped(self):
        block = "Topic: Hilux wanted\nContactName: Sipho\nContactPhone: " + "0" * 60
        contact = parse_insights(block)[0].extracted_contact
        assert contact.name == "Sipho"
        assert contact.phone is None

    def test_source_defaults(self):
        insights = parse_insights("Topic: Bare item\nSummary: nothing else")
        assert insights[0].sources[0].title == "Unknown Source"
        assert insights[0].sources[0].uri == "#"

    def test_extract_value_does_not_cross_lines(self):
        assert extract_value("ContactName:\nContactPhone: 082", "ContactName") == ""

    def test_empty_text(self):
        assert parse_insights("") == []


class TestPrompt:
    def test_prompt_mentions_vehicle_region_and_separator(self):
        query = MarketSearchQuery(brand="Toyota", model="Hilux", region="Gauteng", trim="Legend",
                                  mileage_max="80000")
        prompt = build_market_search_prompt(query)
        assert "Used Toyota Hilux Legend" in prompt
        assert "Gauteng, South Africa" in prompt
        assert LEAD_ITEM_SEPARATOR in prompt
        assert "0km to 80000km" in prompt


class TestGeminiProvider:
    @pytest.mark.asyncio
    async def test_search_posts_grounded_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_response("hello"))

        text = await make_provider(handler).search("find leads")
        assert text == "hello"
        assert seen["url"] == "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent"
        assert seen["key"] == "test-key"
        assert seen["body"]["tools"] == [{"google_search": {}}]

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        provider = make_provider(lambda request: httpx.Response(429, text="quota"))
        with pytest.raises(MarketSearchError):
            await provider.search("find leads")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(MarketSearchError):
            await make_provider(handler).search("find leads")

    @pytest.mark.asyncio
    async def test_missing_key_raises(self):
        with pytest.raises(MarketSearchError):
            await GeminiSearchProvider(api_key=None).search("find leads")

    @pytest.mark.asyncio
    async def test_no_candidates_gives_empty_text(self):
        provider = make_provider(lambda request: httpx.Response(200, json={"candidates": []}))
        assert await provider.search("find leads") == ""


class TestMarketSearchService:
    @pytest.mark.asyncio
    async def test_results_ranked_by_score(self, clock):
        provider = make_provider(lambda request: httpx.Response(200, json=gemini_response(SEARCH_OUTPUT)))
        service = MarketSearchService(provider, LeadScorer(clock=clock))

        results = await service.search(MarketSearchQuery(brand="Toyota", model="Hilux", region="Gauteng"))

        assert [r.insight.topic for r in results] == ["Cash buyer for Hilux", "Anyone selling a Fortuner?"]
        assert results[0].score.score >= results[1].score.score
        data = results[0].to_dict()
        assert data["score"] == results[0].score.score
        assert "sentiment" in data["score_breakdown"]
