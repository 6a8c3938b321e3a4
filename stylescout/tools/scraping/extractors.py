"""Multi-stage product extraction from rendered search pages."""

import json
import re
from typing import Any, Optional
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup

from stylescout.state.models import Product
from stylescout.tools.scraping.platforms import (
    ProductSelectors,
    default_brand,
    get_platform_config,
)

logger = structlog.get_logger()

UNKNOWN_TITLE = "Unknown Product"
MAX_PRODUCTS_PER_PAGE = 20
MIN_PAYLOAD_LENGTH = 100

# Embedded client-side state blobs used by React/Next storefronts
PRELOADED_STATE_PATTERNS = [
    re.compile(r"window\.__PRELOADED_STATE__\s*=\s*({.+?});?\s*</script", re.S),
    re.compile(r"window\.__myx\s*=\s*({.+?});?\s*</script", re.S),
    re.compile(r"__NEXT_DATA__[^>]*>([^<]+)<", re.S),
    re.compile(r'"searchData"\s*:\s*({[^}]+products[^}]+})', re.S),
]

# Where product arrays live inside state blobs and API payloads
PRODUCT_ARRAY_PATHS = [
    ("products",),
    ("searchData", "results", "products"),
    ("data", "results", "products"),
    ("props", "pageProps", "products"),
    ("initialState", "searchResults", "products"),
    ("styles",),
    ("response", "results"),
]

INR_PRICE_PATTERNS = [
    re.compile(r"₹\s*([\d,]+)"),
    re.compile(r"Rs\.?\s*([\d,]+)", re.I),
]


def normalize_price(value: Any) -> str:
    """Reduce a price value to its integer digits ("₹1,299.00" -> "1299")."""
    if value is None:
        return "0"
    text = str(value).replace(",", "")
    match = re.search(r"\d+(?:\.\d+)?", text)
    if not match:
        return "0"
    return match.group(0).split(".")[0]


def _dig(data: Any, path: tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def find_product_array(data: Any) -> list[dict]:
    """Locate the first non-empty product array in a decoded payload."""
    if not isinstance(data, dict):
        return []
    for path in PRODUCT_ARRAY_PATHS:
        found = _dig(data, path)
        if isinstance(found, list) and found:
            return [item for item in found if isinstance(item, dict)]
    return []


def iter_json_ld_blocks(data: Any):
    """Yield JSON-LD objects, unwrapping top-level arrays and @graph containers."""
    if isinstance(data, list):
        for entry in data:
            yield from iter_json_ld_blocks(entry)
    elif isinstance(data, dict):
        if isinstance(data.get("@graph"), list):
            yield from iter_json_ld_blocks(data["@graph"])
        else:
            yield data


def json_ld_types(block: dict) -> set[str]:
    """@type of a JSON-LD object as a set (it may be a string or a list)."""
    declared = block.get("@type")
    if isinstance(declared, str):
        return {declared}
    if isinstance(declared, list):
        return {t for t in declared if isinstance(t, str)}
    return set()


class ProductExtractor:
    """Extract products from a rendered page using multiple strategies.

    Stages are tried in order of reliability and the first stage yielding
    any product wins:
    1. Structured results from the render backend (extract rules / selectors)
    2. Captured network payloads (XHR/fetch JSON)
    3. HTML heuristics: JSON-LD, embedded state blobs, OpenGraph meta tags
    """

    def extract(
        self,
        platform: str,
        structured: Optional[list[dict]] = None,
        network: Optional[list[Any]] = None,
        html: Optional[str] = None,
    ) -> tuple[list[Product], Optional[str]]:
        """Run the extraction waterfall.

        Args:
            platform: Platform the page belongs to
            structured: Items produced by the backend's extraction rules
            network: Raw captured network response bodies
            html: Rendered page HTML

        Returns:
            Tuple of (products, name of the stage that produced them)
        """
        stages = [
            ("structured", lambda: self.from_structured(structured or [], platform)),
            ("network", lambda: self.from_network(network or [], platform)),
            ("html", lambda: self.from_html(html or "", platform)),
        ]

        for name, stage in stages:
            try:
                products = stage()
            except Exception as e:
                logger.debug("Extraction stage failed", stage=name, platform=platform, error=str(e))
                continue
            if products:
                logger.debug("Products extracted", stage=name, platform=platform, count=len(products))
                return products, name

        return [], None

    def from_structured(self, items: list[dict], platform: str) -> list[Product]:
        """Map extract-rule output onto products.

        Items with neither a title nor an image are dropped.
        """
        products = []
        for idx, item in enumerate(items):
            if not isinstance(item, dict):
                continue
            product = self._to_product(item, platform, idx)
            if product.title != UNKNOWN_TITLE or product.image_url:
                products.append(product)
        return products

    def from_network(self, payloads: list[Any], platform: str) -> list[Product]:
        """Find product arrays in captured JSON network responses."""
        for payload in payloads:
            data = self._decode_payload(payload)
            if data is None:
                continue
            found = find_product_array(data)
            if not found:
                continue
            products = [
                self._to_product(item, platform, idx)
                for idx, item in enumerate(found[:MAX_PRODUCTS_PER_PAGE])
            ]
            products = [p for p in products if p.title != UNKNOWN_TITLE]
            if products:
                return products
        return []

    def from_html(self, html: str, platform: str) -> list[Product]:
        """Last resort: heuristics over the page HTML."""
        if not html:
            return []

        soup = BeautifulSoup(html, "lxml")

        products = self._from_json_ld(soup, platform)
        if products:
            return products

        products = self._from_preloaded_state(html, platform)
        if products:
            return products

        return self._from_meta_tags(soup, html, platform)

    def from_selectors(self, html: str, selectors: ProductSelectors) -> list[dict]:
        """Apply CSS tile selectors to rendered HTML.

        Produces the same item shape as the extract-rule output so the result
        can feed the structured stage.
        """
        if not html or not selectors.container:
            return []

        soup = BeautifulSoup(html, "lxml")
        items = []
        for tile in soup.select(selectors.container)[:MAX_PRODUCTS_PER_PAGE]:
            item: dict[str, Any] = {}
            for field, selector in (
                ("name", selectors.title),
                ("price", selectors.price),
                ("brand", selectors.brand),
            ):
                if selector:
                    elem = tile.select_one(selector)
                    if elem:
                        item[field] = elem.get_text(strip=True)
            if selectors.image:
                img = tile.select_one(selectors.image)
                if img:
                    item["image"] = img.get("src") or img.get("data-src") or ""
            if selectors.link:
                link = tile.select_one(selectors.link)
                if link:
                    item["url"] = link.get("href") or ""
            if item:
                items.append(item)
        return items

    def _from_json_ld(self, soup: BeautifulSoup, platform: str) -> list[Product]:
        products: list[Product] = []
        for script in soup.find_all("script", {"type": "application/ld+json"}):
            try:
                data = json.loads(script.string or "")
            except json.JSONDecodeError:
                continue

            for block in iter_json_ld_blocks(data):
                if not json_ld_types(block) & {"Product", "ItemList"}:
                    continue
                for element in block.get("itemListElement") or [block]:
                    node = element.get("item", element) if isinstance(element, dict) else None
                    if not isinstance(node, dict) or not node.get("name") or not node.get("offers"):
                        continue
                    offers = node["offers"]
                    if isinstance(offers, list):
                        offers = offers[0] if offers else {}
                    brand = node.get("brand")
                    image = node.get("image")
                    products.append(self._to_product(
                        {
                            "name": node["name"],
                            "price": offers.get("price") or offers.get("lowPrice"),
                            "brand": brand.get("name") if isinstance(brand, dict) else brand,
                            "image": image[0] if isinstance(image, list) and image else image,
                            "url": node.get("url") or node.get("@id"),
                        },
                        platform,
                        len(products),
                    ))
        return products

    def _from_preloaded_state(self, html: str, platform: str) -> list[Product]:
        for pattern in PRELOADED_STATE_PATTERNS:
            match = pattern.search(html)
            if not match:
                continue
            raw = match.group(1).replace('\\"', '"').replace("\\n", "")
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                continue
            found = find_product_array(data)
            if found:
                logger.debug("Products found in preloaded state", platform=platform, count=len(found))
                return [
                    self._to_product(item, platform, idx)
                    for idx, item in enumerate(found[:MAX_PRODUCTS_PER_PAGE])
                ]
        return []

    def _from_meta_tags(self, soup: BeautifulSoup, html: str, platform: str) -> list[Product]:
        title = soup.find("meta", {"property": "og:title"})
        image = soup.find("meta", {"property": "og:image"})
        if not (title and title.get("content") and image and image.get("content")):
            return []

        url = soup.find("meta", {"property": "og:url"})
        price = "0"
        for pattern in INR_PRICE_PATTERNS:
            match = pattern.search(html)
            if match:
                price = normalize_price(match.group(1))
                break

        return [Product(
            id=f"{platform}_meta",
            title=title["content"],
            price=price,
            brand=default_brand(platform),
            image_url=image["content"],
            product_url=url["content"] if url and url.get("content") else "",
            platform=platform,
        )]

    def _decode_payload(self, payload: Any) -> Optional[Any]:
        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode("utf-8", errors="ignore")
        if isinstance(payload, dict):
            # Captured responses come wrapped as {"url": ..., "body": ...}
            if "body" not in payload:
                return payload
            payload = payload["body"]
            if isinstance(payload, (dict, list)):
                return payload
            if isinstance(payload, (bytes, bytearray)):
                payload = payload.decode("utf-8", errors="ignore")
        if not isinstance(payload, str) or len(payload) <= MIN_PAYLOAD_LENGTH:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            return None

    def _to_product(self, item: dict, platform: str, idx: int) -> Product:
        title = (
            item.get("productName") or item.get("name") or item.get("productDisplayName")
            or item.get("title") or UNKNOWN_TITLE
        )
        price = (
            item.get("price") or item.get("mrp") or item.get("discountedPrice")
            or item.get("salePrice")
        )
        brand = item.get("brand") or item.get("brandName")
        if isinstance(brand, dict):
            brand = brand.get("name")
        images = item.get("images")
        image = (
            item.get("searchImage") or item.get("image") or item.get("image_url")
            or item.get("defaultImage")
            or (images[0].get("src") if isinstance(images, list) and images and isinstance(images[0], dict) else None)
            or ""
        )
        url = (
            item.get("landingPageUrl") or item.get("productUrl") or item.get("product_url")
            or item.get("url") or item.get("link") or ""
        )

        config = get_platform_config(platform)
        if url and config and not str(url).startswith("http"):
            url = urljoin(config.base_url + "/", str(url).lstrip("/"))

        return Product(
            id=f"{platform}_{idx}",
            title=str(title).strip() or UNKNOWN_TITLE,
            price=normalize_price(price),
            brand=str(brand) if brand else default_brand(platform),
            image_url=str(image),
            product_url=str(url),
            platform=platform,
        )


# Global instance
_product_extractor: Optional[ProductExtractor] = None


def get_product_extractor() -> ProductExtractor:
    """Get or create the global product extractor instance."""
    global _product_extractor
    if _product_extractor is None:
        _product_extractor = ProductExtractor()
    return _product_extractor
