"""Tests for the discovery search pipeline."""

from unittest.mock import AsyncMock

import pytest

from conftest import fake_llm, make_product
from stylescout.agents.search_agent import SearchAgent
from stylescout.state.models import ProductType
from stylescout.tools.scraping.platforms import DEFAULT_PLATFORMS


@pytest.fixture
def agent(catalog_fetcher, trend_store):
    return SearchAgent(catalog_fetcher, trend_store)


class TestDiscoverySearch:
    """Tests for SearchAgent.discovery_search without an LLM."""

    @pytest.mark.asyncio
    async def test_dress_search_on_one_platform(self, agent):
        outcome = await agent.discovery_search("summer dress", platforms=["hm"])

        assert outcome.success
        assert outcome.intent.product_type == ProductType.DRESSES
        assert [p.id for p in outcome.products] == ["h4"]
        assert outcome.products[0].reasoning
        assert outcome.trend_method == "vector"

    @pytest.mark.asyncio
    async def test_platforms_from_query(self, agent):
        outcome = await agent.discovery_search("zara shirt")

        assert outcome.intent.platforms == ["zara"]
        assert outcome.intent.query == "shirt"
        assert [p.id for p in outcome.products] == ["z1", "z4"]

    @pytest.mark.asyncio
    async def test_price_filter_applied(self, agent):
        outcome = await agent.discovery_search("jeans under 1000", platforms=["flipkart", "jio"])

        assert outcome.products
        assert all(p.price_value <= 1000 for p in outcome.products)
        assert {p.id for p in outcome.products} == {"f1", "j2", "j7"}

    @pytest.mark.asyncio
    async def test_everything_filtered_returns_message(self, agent):
        """An empty result after filtering is a success with a message."""
        outcome = await agent.discovery_search("saree", platforms=["zara"])

        assert outcome.success
        assert outcome.products == []
        assert outcome.message == "No matching saree found. Try a different search."
        assert outcome.intent.category == "saree"

    @pytest.mark.asyncio
    async def test_message_without_category(self, agent, catalog_fetcher):
        catalog_fetcher.fetch_many = AsyncMock(return_value=[])

        outcome = await agent.discovery_search("something nice")

        assert outcome.message == "No matching products found. Try a different search."

    @pytest.mark.asyncio
    async def test_blank_query_browses_defaults(self, agent, catalog_fetcher):
        catalog_fetcher.fetch_many = AsyncMock(return_value=[
            make_product("a", "Linen Shirt"), make_product("b", "Wool Scarf"),
        ])

        outcome = await agent.discovery_search("   ")

        catalog_fetcher.fetch_many.assert_awaited_once_with(DEFAULT_PLATFORMS, "")
        assert outcome.intent is None
        assert len(outcome.products) == 2
        assert all(p.confidence_score == 50 for p in outcome.products)
        assert outcome.trend_method == "fallback"

    @pytest.mark.asyncio
    async def test_fetch_uses_interpreted_query(self, agent, catalog_fetcher):
        catalog_fetcher.fetch_many = AsyncMock(return_value=[make_product("x", "Black Blazer")])

        await agent.discovery_search("myntra blazer under 4000")

        catalog_fetcher.fetch_many.assert_awaited_once_with(["myntra"], "blazer")

    @pytest.mark.asyncio
    async def test_universal_search(self, agent):
        outcome = await agent.universal_search("kurta")

        assert outcome.intent.platforms == DEFAULT_PLATFORMS
        assert outcome.products
        assert {p.platform for p in outcome.products} <= set(DEFAULT_PLATFORMS)
        assert outcome.trend_method == "keyword"


class TestSearchAgentWithLLM:
    """Pipeline with an LLM for intent and analysis."""

    @pytest.mark.asyncio
    async def test_llm_intent_and_ranking(self, catalog_fetcher, trend_store):
        llm = fake_llm(
            {"query": "dress", "productType": "dresses", "platforms": ["hm", "zara"]},
            {"analysis": [
                {"id": "z6", "confidenceScore": 98, "reasoning": "Breezy midi.", "trendReference": "Coastal Grandmother"},
                {"id": "h4", "confidenceScore": 75, "reasoning": "Simple jersey.", "trendReference": None},
            ]},
        )
        agent = SearchAgent(catalog_fetcher, trend_store, llm)

        outcome = await agent.discovery_search("summer dress for the beach", preferences={"fit": "loose"})

        assert [p.id for p in outcome.products] == ["z6", "h4"]
        assert outcome.products[0].trend_confidence == "High"
        assert llm.chat.completions.create.await_count == 2

    @pytest.mark.asyncio
    async def test_llm_failures_degrade_to_rules_and_keywords(self, catalog_fetcher, trend_store):
        llm = fake_llm(ConnectionError("down"), ConnectionError("still down"))
        agent = SearchAgent(catalog_fetcher, trend_store, llm)

        outcome = await agent.discovery_search("summer dress", platforms=["hm"])

        assert outcome.success
        assert [p.id for p in outcome.products] == ["h4"]
        assert outcome.products[0].reasoning.startswith("Matches your search")


class TestStylingEntryPoints:
    @pytest.mark.asyncio
    async def test_suggest(self, agent):
        result = await agent.suggest("office wear")
        assert "structured blazer" in result.suggestion

    @pytest.mark.asyncio
    async def test_recommend_for_body_type(self, agent):
        result = await agent.recommend_for_body_type("rectangle")

        assert result.products
        assert result.style_guide.flattering[0] == "peplum tops"
