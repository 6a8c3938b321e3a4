"""Curated fashion trend corpus and retrieval."""

from .catalog import CURATED_TRENDS
from .retrieval import (
    format_trend_for_llm,
    format_trends_for_llm,
    get_confidence_label,
    retrieve_trends_for_query,
)
from .store import TrendStore, calculate_confidence_score, cosine_similarity

__all__ = [
    "CURATED_TRENDS",
    "TrendStore",
    "calculate_confidence_score",
    "cosine_similarity",
    "format_trend_for_llm",
    "format_trends_for_llm",
    "get_confidence_label",
    "retrieve_trends_for_query",
]
