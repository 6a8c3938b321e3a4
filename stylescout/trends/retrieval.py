"""Trend retrieval for grounding LLM product analysis.

The analyzer may only mention trends returned from here. Nothing else in
the prompt path is allowed to look trends up on its own.
"""

from typing import Optional

import structlog

from stylescout.logging import log_retrieval
from stylescout.state.models import RetrievalOptions, RetrievalResult, Trend, TrendConfidence
from stylescout.trends.store import TrendStore

logger = structlog.get_logger()

NO_TRENDS_MESSAGE = "No specific fashion trends matched for this query."


def retrieve_trends_for_query(
    store: TrendStore,
    query: str,
    options: Optional[RetrievalOptions] = None,
) -> RetrievalResult:
    """Retrieve the trends most relevant to a query.

    Vector search runs first over twice the requested number of candidates;
    keyword search takes over only when it finds nothing. Candidates are then
    filtered by confidence, expiry and category, and truncated.

    Args:
        store: Trend store to search
        query: User search query
        options: Retrieval thresholds (defaults: confidence 0.6, top 3)

    Returns:
        RetrievalResult. ``method`` is "fallback" when no trend survived.
    """
    opts = options or RetrievalOptions()
    store.initialize()

    method = "vector"
    try:
        candidates = store.search_by_vector(store.embed(query), opts.top_k * 2)
        if not candidates:
            method = "keyword"
            candidates = store.search_by_keyword(query)
    except Exception as e:
        logger.warning("Vector trend search failed, using keywords", query=query, error=str(e))
        method = "keyword"
        candidates = store.search_by_keyword(query)

    trends = [t for t in candidates if t.confidence_score >= opts.min_confidence]

    if not opts.include_expired:
        trends = [t for t in trends if not store.is_expired(t)]

    if opts.category:
        trends = [t for t in trends if t.category in (opts.category, "any")]

    trends = trends[:opts.top_k]

    if not trends:
        method = "fallback"

    log_retrieval(
        query=query,
        method=method,
        trend_names=[t.trend_name for t in trends],
        min_confidence=opts.min_confidence,
        top_k=opts.top_k,
    )
    return RetrievalResult(trends=trends, method=method, query=query)


def get_confidence_label(score: float) -> TrendConfidence:
    """Map a confidence score to its display label."""
    if score >= 0.8:
        return "High"
    if score >= 0.6:
        return "Medium"
    return "Low"


def format_trend_for_llm(trend: Trend) -> str:
    """One-line trend summary for prompt context."""
    label = get_confidence_label(trend.confidence_score)
    return f"[{trend.trend_name}] ({label} confidence, source: {trend.source}): {trend.description}"


def format_trends_for_llm(trends: list[Trend]) -> str:
    """Trend context block for a prompt."""
    if not trends:
        return NO_TRENDS_MESSAGE
    return "Current Fashion Trends:\n" + "\n".join(f"- {format_trend_for_llm(t)}" for t in trends)
