"""Discovery search pipeline.

interpret -> fetch -> hard category filter -> negative keywords -> price
-> trend-grounded ranking. Each stage degrades on its own; the pipeline as
a whole always returns a SearchOutcome.
"""

import time
from typing import Any, Optional

import structlog
from openai import AsyncOpenAI

from stylescout.agents.body_styling import BodyRecommendation, get_body_type_recommendations
from stylescout.agents.category_filter import (
    filter_by_price_range,
    filter_negative_keywords,
    hard_filter_by_category,
)
from stylescout.agents.query_interpreter import QueryInterpreter
from stylescout.agents.stylist import ProductAnalysis, StyleSuggestion, Stylist
from stylescout.agents.trend_analyzer import TrendAnalyzer
from stylescout.logging import log_search
from stylescout.state.models import SearchOutcome
from stylescout.tools.scraping.fetcher import ProductFetcher
from stylescout.tools.scraping.platforms import DEFAULT_PLATFORMS
from stylescout.trends.store import TrendStore

logger = structlog.get_logger()


class SearchAgent:
    """Wires the interpreter, fetcher, filters and analyzer together."""

    def __init__(
        self,
        fetcher: ProductFetcher,
        trend_store: TrendStore,
        llm: Optional[AsyncOpenAI] = None,
    ):
        """Initialize the agent.

        Args:
            fetcher: Product fetcher
            trend_store: Initialized trend store
            llm: Chat client shared by the LLM-backed stages, or None
        """
        self.fetcher = fetcher
        self.trend_store = trend_store
        self.llm = llm
        self.interpreter = QueryInterpreter(llm)
        self.analyzer = TrendAnalyzer(trend_store, llm)
        self.stylist = Stylist(llm)

    async def discovery_search(
        self,
        query: str,
        platforms: Optional[list[str]] = None,
        preferences: Optional[Any] = None,
    ) -> SearchOutcome:
        """Search one or more platforms and rank the results.

        Args:
            query: Free-text query; blank browses without filtering
            platforms: Platforms to fetch (defaults to the interpreted ones)
            preferences: Opaque user preference blob for ranking

        Returns:
            SearchOutcome. When the filters remove everything it carries
            no products and a message, and is still a success.
        """
        start = time.perf_counter()
        query = (query or "").strip()

        if not query:
            targets = platforms or list(DEFAULT_PLATFORMS)
            products = await self.fetcher.fetch_many(targets, "")
            ranked = await self.analyzer.rank(products, "", preferences)
            log_search("", len(ranked.products), targets, (time.perf_counter() - start) * 1000)
            return SearchOutcome(products=ranked.products, trend_method=ranked.retrieval.method)

        intent = await self.interpreter.interpret(query)
        targets = platforms or intent.platforms
        product_type = intent.product_type.value if intent.product_type else None

        products = await self.fetcher.fetch_many(targets, intent.query)
        fetched = len(products)
        products = hard_filter_by_category(products, intent)
        products = filter_negative_keywords(products, intent)
        products = filter_by_price_range(products, intent)

        if not products:
            message = f"No matching {intent.category or 'products'} found. Try a different search."
            logger.info("All products filtered out", query=query, fetched=fetched, product_type=product_type)
            log_search(query, 0, targets, (time.perf_counter() - start) * 1000,
                       product_type=product_type, message=message)
            return SearchOutcome(products=[], message=message, intent=intent)

        ranked = await self.analyzer.rank(products, query, preferences)

        log_search(query, len(ranked.products), targets, (time.perf_counter() - start) * 1000,
                   product_type=product_type)
        return SearchOutcome(
            products=ranked.products,
            intent=intent,
            trend_method=ranked.retrieval.method,
        )

    async def universal_search(self, query: str, preferences: Optional[Any] = None) -> SearchOutcome:
        """Search every platform the query interpretation selects."""
        return await self.discovery_search(query, None, preferences)

    async def suggest(self, query: str, preferences: Optional[dict] = None) -> StyleSuggestion:
        """Styling suggestion for a query."""
        return await self.stylist.suggest(query, preferences)

    async def analyze_product(self, product: dict, preferences: Optional[dict] = None) -> ProductAnalysis:
        """Styling advice for a single product."""
        return await self.stylist.analyze_product(product, preferences)

    async def recommend_for_body_type(
        self,
        body_type: str,
        height: str = "medium",
        style_preference: str = "any",
        preferences: Optional[Any] = None,
    ) -> BodyRecommendation:
        """Body-type recommendations using this agent's fetcher, trends and LLM."""
        return await get_body_type_recommendations(
            body_type,
            height,
            style_preference,
            preferences,
            fetcher=self.fetcher,
            trend_store=self.trend_store,
            llm=self.llm,
        )
