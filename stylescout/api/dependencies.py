"""Request dependencies resolved from application state."""

from fastapi import Request

from stylescout.agents.search_agent import SearchAgent
from stylescout.trends.store import TrendStore


def get_search_agent(request: Request) -> SearchAgent:
    """The SearchAgent built at startup."""
    return request.app.state.search_agent


def get_trend_store(request: Request) -> TrendStore:
    """The TrendStore initialized at startup."""
    return request.app.state.trend_store
