"""Pytest configuration and shared fixtures."""

import json
from datetime import datetime
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from stylescout.cache import FetchCache
from stylescout.state.models import Product
from stylescout.tools.scraping.fetcher import ProductFetcher
from stylescout.trends.store import TrendStore

# Every curated trend is more than 30 days old and none has expired
FIXED_NOW = datetime(2026, 10, 15, 12, 0, 0)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture(autouse=True)
def isolate_globals():
    """Run every test without credentials and with fresh singletons."""
    from stylescout.agents.llm import reset_llm_client
    from stylescout.cache import reset_fetch_cache
    from stylescout.config import settings as settings_module
    from stylescout.tools.scraping.fetcher import reset_product_fetcher

    settings = settings_module.settings
    original_groq = settings.groq_api_key
    original_bee = settings.scrapingbee_api_key
    settings.groq_api_key = None
    settings.scrapingbee_api_key = None

    reset_llm_client()
    reset_fetch_cache()
    reset_product_fetcher()
    yield
    reset_llm_client()
    reset_fetch_cache()
    reset_product_fetcher()

    settings.groq_api_key = original_groq
    settings.scrapingbee_api_key = original_bee


@pytest.fixture
def trend_store() -> TrendStore:
    """Curated trend store evaluated at a fixed point in time."""
    store = TrendStore(clock=fixed_clock)
    store.initialize()
    return store


@pytest.fixture
def fetch_cache() -> FetchCache:
    return FetchCache(ttl_seconds=600, check_period_seconds=120, clock=fixed_clock)


@pytest.fixture
def catalog_fetcher(fetch_cache) -> ProductFetcher:
    """Fetcher with no live backend, serving the bundled catalog."""
    return ProductFetcher(cache=fetch_cache, backend=None)


def make_product(
    id: str,
    title: str,
    price: str = "999",
    brand: str = "",
    platform: str = "myntra",
) -> Product:
    """Build a minimal product for tests."""
    return Product(id=id, title=title, price=price, brand=brand, platform=platform)


def fake_llm(*replies: Any) -> MagicMock:
    """Build a stand-in AsyncOpenAI client.

    Each reply is returned by one chat completion call, in order. Dicts and
    lists are sent as JSON text, exceptions are raised.
    """
    responses = []
    for reply in replies:
        if isinstance(reply, BaseException):
            responses.append(reply)
            continue
        content = reply if isinstance(reply, str) or reply is None else json.dumps(reply)
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = content
        responses.append(response)

    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=responses)
    return client


def sent_messages(client: MagicMock, call: int = 0) -> tuple[Optional[str], Optional[str]]:
    """(system, user) message contents of one recorded chat completion call."""
    messages = client.chat.completions.create.call_args_list[call].kwargs["messages"]
    return messages[0]["content"], messages[1]["content"]
