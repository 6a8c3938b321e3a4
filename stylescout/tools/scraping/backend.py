"""Render backend interface for live platform fetches."""

from abc import ABC, abstractmethod
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field

from stylescout.tools.scraping.platforms import PlatformConfig

logger = structlog.get_logger()


class RenderedPage(BaseModel):
    """What a render backend captured for one search page."""

    url: str
    structured: list[dict] = Field(default_factory=list)  # extract-rule / selector output
    network: list[Any] = Field(default_factory=list)  # captured XHR/fetch bodies
    html: str = ""


class RenderBackend(ABC):
    """Abstract base class for JS-rendering fetch backends."""

    name: str = "base"

    @abstractmethod
    async def render(self, config: PlatformConfig, query: str) -> Optional[RenderedPage]:
        """Render a platform's search page for a query.

        Args:
            config: Platform to fetch from
            query: Search query

        Returns:
            RenderedPage on success, None on failure
        """
        pass


def get_render_backend() -> Optional[RenderBackend]:
    """Build the render backend selected in settings.

    Returns:
        A backend, or None when live fetching is not configured
    """
    from stylescout.config.settings import settings

    backend = settings.scraper_backend.lower()

    if backend == "scrapingbee":
        if not settings.scrapingbee_enabled:
            logger.info("ScrapingBee key not configured, live fetching disabled")
            return None
        from stylescout.tools.scraping.scrapingbee_client import ScrapingBeeBackend

        return ScrapingBeeBackend(
            api_key=settings.scrapingbee_api_key,
            timeout=settings.scrape_timeout_seconds,
            wait_ms=settings.scrape_render_wait_ms,
            country_code=settings.scrape_country_code,
        )

    if backend == "playwright":
        from stylescout.tools.scraping.playwright_client import PlaywrightBackend

        return PlaywrightBackend(
            timeout=settings.scrape_timeout_seconds,
            wait_ms=settings.scrape_render_wait_ms,
        )

    if backend != "none":
        logger.warning("Unknown scraper backend, live fetching disabled", backend=backend)
    return None
