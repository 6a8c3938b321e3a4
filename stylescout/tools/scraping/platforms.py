"""Supported e-commerce platforms and their scraping configuration."""

from typing import Any, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field


class ProductSelectors(BaseModel):
    """CSS selectors for product tiles on a search results page."""

    container: str = ""
    title: str = ""
    price: str = ""
    brand: str = ""
    image: str = ""
    link: str = ""


class PlatformConfig(BaseModel):
    """Configuration for one platform."""

    name: str
    display_name: str
    base_url: str
    search_path: str  # contains "{query}"
    selectors: ProductSelectors = Field(default_factory=ProductSelectors)
    extract_rules: Optional[dict[str, Any]] = None

    def build_search_url(self, query: str) -> str:
        """Build the search URL for a query."""
        return f"{self.base_url}{self.search_path.format(query=quote(query, safe=''))}"


def _list_rule(container: str, output: dict[str, Any]) -> dict[str, Any]:
    return {"products": {"selector": container, "type": "list", "output": output}}


PLATFORM_CONFIGS: dict[str, PlatformConfig] = {
    "myntra": PlatformConfig(
        name="myntra",
        display_name="Myntra",
        base_url="https://www.myntra.com",
        search_path="/{query}",
        selectors=ProductSelectors(
            container=".product-base",
            title=".product-product",
            price=".product-discountedPrice, .product-price",
            brand=".product-brand",
            image=".product-imageSliderContainer img",
            link="a",
        ),
        extract_rules=_list_rule(".product-base", {
            "name": ".product-product",
            "brand": ".product-brand",
            "price": ".product-discountedPrice, .product-price",
            "image": {"selector": "img", "output": "@src"},
            "url": {"selector": "a", "output": "@href"},
        }),
    ),
    "zara": PlatformConfig(
        name="zara",
        display_name="Zara",
        base_url="https://www.zara.com",
        search_path="/in/en/search?searchTerm={query}",
        selectors=ProductSelectors(
            container=".product-grid-product",
            title=".product-grid-product-info__name",
            price=".money-amount__main",
            image=".media-image__image",
            link="a.product-link",
        ),
        extract_rules=_list_rule("[data-qa-action='product-link']", {
            "name": ".product-link-title",
            "price": ".money-amount__main",
            "url": {"selector": "a", "output": "@href"},
        }),
    ),
    "hm": PlatformConfig(
        name="hm",
        display_name="H&M",
        base_url="https://www2.hm.com",
        search_path="/en_in/search-results.html?q={query}",
        selectors=ProductSelectors(
            container=".product-item",
            title=".item-heading a",
            price=".item-price span",
            image=".item-image img",
            link=".item-heading a",
        ),
        extract_rules=_list_rule(".product-item", {
            "name": ".item-heading a, .link",
            "price": ".item-price span, .price-value",
            "image": {"selector": "img", "output": "@src"},
            "url": {"selector": "a", "output": "@href"},
        }),
    ),
    "uniqlo": PlatformConfig(
        name="uniqlo",
        display_name="Uniqlo",
        base_url="https://www.uniqlo.com",
        search_path="/in/en/search?q={query}",
        selectors=ProductSelectors(
            container=".fr-ec-product-tile",
            title=".fr-ec-product-tile__name",
            price=".fr-ec-price-text",
            image=".fr-ec-product-tile__image img",
            link="a.fr-ec-product-tile__link",
        ),
        extract_rules=_list_rule(".fr-ec-product-tile, [data-test='product-tile']", {
            "name": ".fr-ec-product-tile__name, [data-test='product-tile-name']",
            "price": ".fr-ec-price-text, [data-test='product-tile-price']",
            "image": {"selector": "img", "output": "@src"},
            "url": {"selector": "a", "output": "@href"},
        }),
    ),
    # No stable tile markup; these rely on network payloads and page heuristics
    "amazon": PlatformConfig(
        name="amazon",
        display_name="Amazon",
        base_url="https://www.amazon.in",
        search_path="/s?k={query}",
    ),
    "flipkart": PlatformConfig(
        name="flipkart",
        display_name="Flipkart",
        base_url="https://www.flipkart.com",
        search_path="/search?q={query}",
    ),
    "jio": PlatformConfig(
        name="jio",
        display_name="JioMart",
        base_url="https://www.jiomart.com",
        search_path="/search/{query}",
    ),
}

# Access tiers. Tier enforcement belongs to the caller.
FREE_PLATFORMS = ["myntra", "ajio", "flipkart", "amazon", "jio"]
PREMIUM_PLATFORMS = ["zara", "hm", "uniqlo"]

# Free-tier platforms this service can actually fetch
DEFAULT_PLATFORMS = [p for p in FREE_PLATFORMS if p in PLATFORM_CONFIGS]


def get_platform_config(platform: str) -> Optional[PlatformConfig]:
    """Look up a platform configuration (case-insensitive)."""
    return PLATFORM_CONFIGS.get(platform.lower())


def get_supported_platforms() -> list[str]:
    """Get all supported platform names."""
    return list(PLATFORM_CONFIGS.keys())


def is_supported(platform: str) -> bool:
    """Check whether a platform has a configuration."""
    return platform.lower() in PLATFORM_CONFIGS


def default_brand(platform: str) -> str:
    """Brand used when a listing does not name one."""
    return platform[:1].upper() + platform[1:]
