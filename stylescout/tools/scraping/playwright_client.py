"""Playwright render backend for local headless fetching."""

from typing import Optional

import structlog
from playwright.async_api import Response, async_playwright

from stylescout.tools.scraping.backend import RenderBackend, RenderedPage
from stylescout.tools.scraping.extractors import get_product_extractor
from stylescout.tools.scraping.platforms import PlatformConfig

logger = structlog.get_logger()

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

# Only API-style responses are worth keeping
CAPTURED_RESOURCE_TYPES = {"xhr", "fetch"}
MAX_CAPTURED_RESPONSES = 30


class PlaywrightBackend(RenderBackend):
    """Render search pages in headless Chromium.

    Captures JSON XHR/fetch responses while the page loads and applies the
    platform's tile selectors to the final DOM.
    """

    name = "playwright"

    def __init__(self, timeout: float = 30.0, wait_ms: int = 5000, locale: str = "en-IN"):
        """Initialize the backend.

        Args:
            timeout: Navigation timeout in seconds
            wait_ms: Extra time for late JS after navigation
            locale: Browser locale
        """
        self.timeout = timeout
        self.wait_ms = wait_ms
        self.locale = locale

    async def render(self, config: PlatformConfig, query: str) -> Optional[RenderedPage]:
        """Render a platform's search page in a local browser."""
        url = config.build_search_url(query)
        captured: list[Response] = []

        def on_response(response: Response) -> None:
            if len(captured) >= MAX_CAPTURED_RESPONSES:
                return
            if response.request.resource_type not in CAPTURED_RESOURCE_TYPES:
                return
            if "json" in (response.headers.get("content-type") or ""):
                captured.append(response)

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            try:
                context = await browser.new_context(locale=self.locale, user_agent=USER_AGENT)
                page = await context.new_page()
                page.on("response", on_response)

                await page.goto(url, wait_until="domcontentloaded", timeout=self.timeout * 1000)

                if config.selectors.container:
                    try:
                        await page.wait_for_selector(config.selectors.container, timeout=self.wait_ms)
                    except Exception:
                        pass  # Continue even if tiles never appear
                else:
                    await page.wait_for_timeout(self.wait_ms)

                html = await page.content()

                network = []
                for response in captured:
                    try:
                        network.append({"url": response.url, "body": await response.text()})
                    except Exception as e:
                        logger.debug("Could not read captured response", url=response.url[:100], error=str(e))
            finally:
                await browser.close()

        structured = get_product_extractor().from_selectors(html, config.selectors)
        logger.debug(
            "Page rendered with Playwright",
            platform=config.name,
            size=len(html),
            tiles=len(structured),
            captured=len(network),
        )
        return RenderedPage(url=url, structured=structured, network=network, html=html)
