"""Cached platform fetcher with a static catalog fallback."""

import asyncio
import time
from typing import Optional

import structlog

from stylescout.cache import FetchCache, get_fetch_cache
from stylescout.logging import log_scrape
from stylescout.state.models import Product
from stylescout.tools.scraping.backend import RenderBackend, get_render_backend
from stylescout.tools.scraping.catalog import get_fallback_products
from stylescout.tools.scraping.extractors import ProductExtractor, get_product_extractor
from stylescout.tools.scraping.filters import filter_by_query
from stylescout.tools.scraping.platforms import get_platform_config

logger = structlog.get_logger()


class ProductFetcher:
    """Fetch product listings for a (platform, query) pair.

    Live results come from a render backend and are cached. Anything that
    goes wrong on the live path degrades to the bundled catalog, filtered
    by relevance. Fallback results are never cached so later calls retry
    the live path.
    """

    def __init__(
        self,
        cache: FetchCache,
        backend: Optional[RenderBackend] = None,
        extractor: Optional[ProductExtractor] = None,
        timeout: float = 30.0,
    ):
        """Initialize the fetcher.

        Args:
            cache: Fetch cache shared across requests
            backend: Render backend, or None to serve the catalog only
            extractor: Product extractor for rendered pages
            timeout: Upper bound for one live fetch in seconds
        """
        self.cache = cache
        self.backend = backend
        self.extractor = extractor or get_product_extractor()
        self.timeout = timeout

    async def fetch(self, platform: str, query: str) -> list[Product]:
        """Fetch products for a platform. Never raises.

        Args:
            platform: Platform name
            query: Search query

        Returns:
            Products from cache, live fetch, or the fallback catalog
        """
        platform = platform.lower()

        cached = self.cache.get(platform, query)
        if cached is not None:
            return cached

        config = get_platform_config(platform)
        if self.backend is None or config is None:
            return self.fallback(platform, query)

        url = config.build_search_url(query)
        start = time.perf_counter()
        try:
            page = await asyncio.wait_for(self.backend.render(config, query), timeout=self.timeout)
            products, stage = [], None
            if page is not None:
                products, stage = self.extractor.extract(
                    platform,
                    structured=page.structured,
                    network=page.network,
                    html=page.html,
                )
        except asyncio.TimeoutError:
            log_scrape(
                source=platform,
                url=url,
                success=False,
                duration_ms=(time.perf_counter() - start) * 1000,
                error=f"timed out after {self.timeout}s",
            )
            return self.fallback(platform, query)
        except Exception as e:
            log_scrape(
                source=platform,
                url=url,
                success=False,
                duration_ms=(time.perf_counter() - start) * 1000,
                error=str(e),
            )
            return self.fallback(platform, query)

        duration_ms = (time.perf_counter() - start) * 1000
        log_scrape(
            source=platform,
            url=url,
            success=bool(products),
            duration_ms=duration_ms,
            items_found=len(products),
            stage=stage,
        )

        if not products:
            return self.fallback(platform, query)

        self.cache.set(platform, query, products)
        return products

    async def fetch_many(self, platforms: list[str], query: str) -> list[Product]:
        """Fetch several platforms concurrently.

        Returns:
            All products flattened in platform order
        """
        results = await asyncio.gather(*(self.fetch(p, query) for p in platforms))
        return [product for batch in results for product in batch]

    def fallback(self, platform: str, query: str) -> list[Product]:
        """Serve the bundled catalog for a platform, filtered by relevance."""
        products = filter_by_query(get_fallback_products(platform), query)
        logger.debug("Serving fallback catalog", platform=platform, query=query, count=len(products))
        return products


# Global fetcher instance
_product_fetcher: Optional[ProductFetcher] = None


def get_product_fetcher() -> ProductFetcher:
    """Get or create the global product fetcher instance."""
    global _product_fetcher
    if _product_fetcher is None:
        from stylescout.config.settings import settings

        _product_fetcher = ProductFetcher(
            cache=get_fetch_cache(),
            backend=get_render_backend(),
            timeout=settings.scrape_timeout_seconds,
        )
    return _product_fetcher


def reset_product_fetcher() -> None:
    """Reset the global product fetcher (for testing)."""
    global _product_fetcher
    _product_fetcher = None
