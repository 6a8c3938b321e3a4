"""Agent exports."""

from stylescout.agents.body_styling import BODY_STYLE_MAP, get_body_type_recommendations
from stylescout.agents.category_filter import (
    filter_by_price_range,
    filter_negative_keywords,
    hard_filter_by_category,
)
from stylescout.agents.llm import LLMResponseError, get_llm_client
from stylescout.agents.query_interpreter import QueryInterpreter, interpret_with_rules
from stylescout.agents.search_agent import SearchAgent
from stylescout.agents.stylist import Stylist
from stylescout.agents.trend_analyzer import TrendAnalyzer

__all__ = [
    "BODY_STYLE_MAP",
    "LLMResponseError",
    "QueryInterpreter",
    "SearchAgent",
    "Stylist",
    "TrendAnalyzer",
    "filter_by_price_range",
    "filter_negative_keywords",
    "get_body_type_recommendations",
    "get_llm_client",
    "hard_filter_by_category",
    "interpret_with_rules",
]
