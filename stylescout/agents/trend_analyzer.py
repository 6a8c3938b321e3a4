"""Trend-grounded product ranking.

Trends are retrieved for the query first and only those trends are shown to
the LLM. Any trend name the LLM cites that was not retrieved is dropped.
When the LLM is unavailable or anything about its answer is off, every
product is ranked by keyword match instead; partial LLM results are never
mixed with that fallback.
"""

import json
from typing import Any, Optional

import structlog
from openai import AsyncOpenAI
from pydantic import BaseModel, Field, field_validator

from stylescout.agents.llm import complete_json
from stylescout.config.settings import settings
from stylescout.logging import log_analysis
from stylescout.state.models import Product, RetrievalOptions, RetrievalResult, Trend
from stylescout.tools.scraping.filters import keyword_match_score
from stylescout.trends.retrieval import (
    format_trends_for_llm,
    get_confidence_label,
    retrieve_trends_for_query,
)
from stylescout.trends.store import TrendStore

logger = structlog.get_logger()

NO_TRENDS_INSTRUCTION = (
    "\n\nIMPORTANT: No specific trends matched this query. Base your analysis on user "
    "comfort preferences only. Do NOT fabricate or invent trend names."
)

ANALYSIS_SYSTEM_PROMPT = """You are an expert fashion stylist AI using Retrieval-Augmented Generation (RAG).

YOUR CONTEXT (Retrieved from trend database):
{trend_context}

{prefs_context}

User Query: "{query}"
{fallback_instruction}

TASK: Analyze each product and generate:
1. "confidenceScore" (0-100): How well it matches the query, retrieved trends, and user preferences
2. "reasoning": A persuasive sentence explaining WHY it's recommended
3. "trendReference": The name of the matching trend (if any), or null

RULES:
- You may ONLY reference trends provided in YOUR CONTEXT above
- If no trends match, explain based on comfort preferences only
- Never invent or fabricate trend names
- Be specific about why each product fits

Output JSON format:
{{
    "analysis": [
        {{
            "id": "product_id",
            "confidenceScore": 85,
            "reasoning": "This aligns with the Relaxed Tailoring trend (high confidence) while prioritizing your comfort preference for loose fits.",
            "trendReference": "Relaxed Tailoring"
        }}
    ]
}}"""


class ProductAnalysis(BaseModel):
    """The LLM's verdict on one product."""

    id: str
    confidence_score: int = Field(alias="confidenceScore", ge=0, le=100)
    reasoning: str
    trend_reference: Optional[str] = Field(default=None, alias="trendReference")

    model_config = {"populate_by_name": True}

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("confidence_score", mode="before")
    @classmethod
    def round_score(cls, v):
        return round(v) if isinstance(v, float) else v


class AnalysisResponse(BaseModel):
    """Shape the LLM must return for a product analysis."""

    analysis: list[ProductAnalysis]


class AnalysisOutcome(BaseModel):
    """Ranked products plus the trend retrieval behind them."""

    products: list[Product]
    retrieval: RetrievalResult
    llm_used: bool = False


def _sort_by_score(products: list[Product]) -> list[Product]:
    return sorted(products, key=lambda p: p.confidence_score or 0, reverse=True)


def _keyword_scored(product: Product, query: str) -> Product:
    score, reasoning = keyword_match_score(product, query)
    return product.model_copy(update={
        "confidence_score": score,
        "comfort_score": score,
        "reasoning": reasoning,
        "trend_reference": None,
        "trend_confidence": None,
    })


def score_with_keywords(products: list[Product], query: str) -> list[Product]:
    """Rank products by keyword match alone, attaching score and reasoning."""
    return _sort_by_score([_keyword_scored(p, query) for p in products])


class TrendAnalyzer:
    """Rank products for a query using retrieved trends and user preferences."""

    def __init__(
        self,
        trend_store: TrendStore,
        llm: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        max_llm_products: Optional[int] = None,
    ):
        """Initialize the analyzer.

        Args:
            trend_store: Initialized trend store
            llm: Chat client, or None for keyword ranking only
            model: Model name (defaults to the configured analysis model)
            max_llm_products: Products sent to the LLM; the rest are keyword-scored
        """
        self.trend_store = trend_store
        self.llm = llm
        self.model = model or settings.llm_analysis_model
        self.max_llm_products = max_llm_products or settings.analyzer_max_llm_products

    async def analyze(
        self,
        products: list[Product],
        query: str,
        trends_hint: Optional[list[Any]] = None,
        user_preferences: Optional[Any] = None,
    ) -> list[Product]:
        """Rank products for a query, best first.

        ``trends_hint`` is accepted for older callers and ignored; trends
        always come from retrieval.
        """
        outcome = await self.rank(products, query, user_preferences)
        return outcome.products

    async def rank(
        self,
        products: list[Product],
        query: str,
        user_preferences: Optional[Any] = None,
    ) -> AnalysisOutcome:
        """Rank products and report which trends were used.

        Args:
            products: Products to rank (not modified)
            query: User search query
            user_preferences: Opaque comfort/fit preference blob

        Returns:
            AnalysisOutcome with products sorted by descending score
        """
        retrieval = retrieve_trends_for_query(
            self.trend_store,
            query,
            RetrievalOptions(
                min_confidence=settings.trend_min_confidence,
                top_k=settings.trend_top_k,
            ),
        )
        trends = retrieval.trends

        if self.llm is None or not products:
            log_analysis(query, len(products), 0, llm_used=False, trends_count=len(trends))
            return AnalysisOutcome(products=score_with_keywords(products, query), retrieval=retrieval)

        try:
            ranked, analyzed = await self._rank_with_llm(products, query, trends, user_preferences)
        except Exception as e:
            log_analysis(query, len(products), 0, llm_used=False, trends_count=len(trends), error=str(e))
            return AnalysisOutcome(products=score_with_keywords(products, query), retrieval=retrieval)

        log_analysis(query, len(products), analyzed, llm_used=True, trends_count=len(trends))
        return AnalysisOutcome(products=ranked, retrieval=retrieval, llm_used=True)

    def build_system_prompt(self, query: str, trends: list[Trend], user_preferences: Optional[Any]) -> str:
        """Build the analysis prompt from retrieved trends only."""
        prefs_context = (
            f"User Comfort Preferences: {json.dumps(user_preferences, default=str)}"
            if user_preferences
            else "No specific user preferences provided."
        )
        return ANALYSIS_SYSTEM_PROMPT.format(
            trend_context=format_trends_for_llm(trends),
            prefs_context=prefs_context,
            query=query,
            fallback_instruction="" if trends else NO_TRENDS_INSTRUCTION,
        )

    async def _rank_with_llm(
        self,
        products: list[Product],
        query: str,
        trends: list[Trend],
        user_preferences: Optional[Any],
    ) -> tuple[list[Product], int]:
        to_analyze = products[:self.max_llm_products]
        user_prompt = "Analyze these products:\n" + json.dumps([
            {"id": p.id, "title": p.title, "brand": p.brand, "price": p.price}
            for p in to_analyze
        ])

        data = await complete_json(
            self.llm,
            self.model,
            self.build_system_prompt(query, trends, user_preferences),
            user_prompt,
            temperature=0.4,
        )
        response = AnalysisResponse.model_validate(data)

        sent_ids = {p.id for p in to_analyze}
        analyses = {a.id: a for a in response.analysis if a.id in sent_ids}
        trends_by_name = {t.trend_name.lower(): t for t in trends}

        merged = []
        analyzed = 0
        for product in products:
            analysis = analyses.get(product.id)
            if analysis is None:
                merged.append(_keyword_scored(product, query))
                continue

            analyzed += 1
            trend_reference = analysis.trend_reference
            trend_confidence = None
            if trend_reference:
                trend = trends_by_name.get(trend_reference.strip().lower())
                if trend is None:
                    logger.warning(
                        "LLM referenced a trend that was not retrieved",
                        product_id=product.id,
                        trend_reference=trend_reference,
                    )
                    trend_reference = None
                else:
                    trend_reference = trend.trend_name
                    trend_confidence = get_confidence_label(trend.confidence_score)

            merged.append(product.model_copy(update={
                "confidence_score": analysis.confidence_score,
                "comfort_score": analysis.confidence_score,
                "reasoning": analysis.reasoning,
                "trend_reference": trend_reference,
                "trend_confidence": trend_confidence,
            }))

        return _sort_by_score(merged), analyzed
