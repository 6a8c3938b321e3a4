"""ScrapingBee render backend over plain HTTP."""

import json
from typing import Any, Optional

import httpx
import structlog

from stylescout.tools.scraping.backend import RenderBackend, RenderedPage
from stylescout.tools.scraping.platforms import PlatformConfig

logger = structlog.get_logger()

SCRAPINGBEE_API_URL = "https://app.scrapingbee.com/api/v1/"


class ScrapingBeeBackend(RenderBackend):
    """Fetch JS-rendered pages through the ScrapingBee API.

    One attempt per call. Retries are left to the caller.
    """

    name = "scrapingbee"

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        wait_ms: int = 5000,
        country_code: str = "in",
        premium_proxy: bool = True,
    ):
        """Initialize the backend.

        Args:
            api_key: ScrapingBee API key
            timeout: Request timeout in seconds
            wait_ms: Time the page gets to render before capture
            country_code: Proxy country
            premium_proxy: Route through residential proxies
        """
        self.api_key = api_key
        self.timeout = timeout
        self.wait_ms = wait_ms
        self.country_code = country_code
        self.premium_proxy = premium_proxy

    def build_params(self, config: PlatformConfig, url: str) -> dict[str, str]:
        """Build the API query parameters for a page."""
        params = {
            "api_key": self.api_key,
            "url": url,
            "render_js": "true",
            "wait": str(self.wait_ms),
            "premium_proxy": "true" if self.premium_proxy else "false",
            "country_code": self.country_code,
            "json_response": "true",
        }
        if config.extract_rules:
            params["extract_rules"] = json.dumps(config.extract_rules)
        return params

    async def render(self, config: PlatformConfig, query: str) -> Optional[RenderedPage]:
        """Render a platform's search page through ScrapingBee.

        Returns None on non-200 responses. Transport errors propagate so the
        caller can log them and degrade.
        """
        url = config.build_search_url(query)
        params = self.build_params(config, url)

        # Render wait happens server-side, so allow for it on top of the timeout
        timeout = self.timeout + self.wait_ms / 1000
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(SCRAPINGBEE_API_URL, params=params)

        if response.status_code != 200:
            logger.warning(
                "ScrapingBee request failed",
                platform=config.name,
                status=response.status_code,
                body=response.text[:200],
            )
            return None

        return self.parse_response(url, response.text)

    def parse_response(self, url: str, text: str) -> RenderedPage:
        """Split a ScrapingBee JSON response into the page parts.

        Non-JSON responses are treated as raw HTML.
        """
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("ScrapingBee returned HTML instead of JSON", url=url[:100])
            return RenderedPage(url=url, html=text)

        if not isinstance(data, dict):
            return RenderedPage(url=url)

        body = data.get("body")
        structured = data.get("products")
        if structured is None and isinstance(body, dict):
            structured = body.get("products")

        xhr = data.get("xhr")
        return RenderedPage(
            url=url,
            structured=structured if isinstance(structured, list) else [],
            network=xhr if isinstance(xhr, list) else [],
            html=body if isinstance(body, str) else "",
        )
