"""Turn free-text shopping queries into a structured SearchIntent.

The LLM path makes a single JSON-mode call. If anything goes wrong with it
(timeout, transport error, malformed or off-schema JSON) the rule-based
interpretation is used as a whole; LLM output is never partially merged.
"""

import re
from typing import Optional

import structlog
from openai import AsyncOpenAI
from pydantic import BaseModel, Field, field_validator

from stylescout.agents.llm import complete_json
from stylescout.config.settings import settings
from stylescout.state.models import PriceRange, ProductType, SearchIntent
from stylescout.tools.scraping.platforms import DEFAULT_PLATFORMS, get_supported_platforms, is_supported

logger = structlog.get_logger()

OCCASION_TERMS: dict[str, list[str]] = {
    "office": ["office", "formal", "work", "meeting", "interview"],
    "party": ["party", "club", "night out", "cocktail", "celebration"],
    "casual": ["casual", "daily", "everyday", "weekend"],
    "beach": ["beach", "vacation", "resort", "pool"],
    "wedding": ["wedding", "sangeet", "mehendi"],
}

# occasion -> (style, negative keywords)
OCCASION_PROFILES: dict[str, tuple[str, list[str]]] = {
    # Semi-formal: its own set, not the union of office and party
    "office party": ("smart casual", [
        "beach", "beachwear", "shorts", "flip flop", "slipper", "bikini", "swimwear",
        "torn", "ripped", "distressed", "crop top", "tank top", "sleeveless",
        "casual summer", "vacation", "resort", "boho",
    ]),
    "office": ("formal", [
        "shorts", "beach", "slipper", "casual", "party", "club", "bikini",
        "swimwear", "flip flop", "crop", "torn", "ripped", "vacation",
        "bohemian", "festival", "lounge", "sleep",
    ]),
    "party": ("party", [
        "formal", "office", "plain", "boring", "work", "meeting",
        "conservative", "interview", "business",
    ]),
    "beach": ("resort", ["formal", "suit", "blazer", "office", "work"]),
    "wedding": ("ethnic", ["casual", "daily", "torn", "ripped", "shorts", "jeans"]),
    "casual": ("casual", ["gown", "suit", "blazer", "formal", "cocktail"]),
}

# Checked top to bottom, first match wins. Order matters where patterns
# overlap ("kurta" is claimed by the shirt rule before the ethnic rules).
CATEGORY_PATTERNS: list[tuple[re.Pattern, str, ProductType]] = [
    (re.compile(r"\b(shirts?|kurtas?|kurti|tunic)\b", re.I), "shirt", ProductType.TOPWEAR),
    (re.compile(r"\b(t-?shirts?|tees?)\b", re.I), "tshirt", ProductType.TOPWEAR),
    (re.compile(r"\b(tops?|blouses?|cami|tank)\b", re.I), "top", ProductType.TOPWEAR),
    (re.compile(r"\b(sweaters?|hoodies?|sweatshirts?|cardigans?)\b", re.I), "sweater", ProductType.TOPWEAR),
    (re.compile(r"\b(dress|dresses|gown|gowns|maxi|midi)\b", re.I), "dress", ProductType.DRESSES),
    (re.compile(r"\b(jeans|denims?)\b", re.I), "jeans", ProductType.BOTTOMWEAR),
    (re.compile(r"\b(pants?|trousers?|chinos?|joggers?|cargo)\b", re.I), "pants", ProductType.BOTTOMWEAR),
    (re.compile(r"\b(shorts)\b", re.I), "shorts", ProductType.BOTTOMWEAR),
    (re.compile(r"\b(skirts?|leggings?|palazzos?|culottes)\b", re.I), "skirt", ProductType.BOTTOMWEAR),
    (re.compile(r"\b(shoes?|sneakers?|loafers?|boots?|heels?|sandals?|flats?)\b", re.I), "shoes", ProductType.FOOTWEAR),
    (re.compile(r"\b(blazers?|jackets?|coats?)\b", re.I), "blazer", ProductType.TOPWEAR),
    (re.compile(r"\b(bags?|handbags?|clutch|wallet|purse)\b", re.I), "bag", ProductType.ACCESSORIES),
    (re.compile(r"\b(watch|watches|earrings?|necklace|bracelet|ring|jewel)", re.I), "accessory", ProductType.ACCESSORIES),
    (re.compile(r"\b(sarees?|sari)\b", re.I), "saree", ProductType.ETHNIC),
    (re.compile(r"\b(lehengas?|anarkali|sharara|salwar|churidar)\b", re.I), "lehenga", ProductType.ETHNIC),
]

_AMOUNT = r"(?:₹|rs\.?|inr)?\s*(\d[\d,]*)"
PRICE_BETWEEN_RE = re.compile(rf"\bbetween\s*{_AMOUNT}\s*(?:and|to|-)\s*{_AMOUNT}", re.I)
PRICE_MAX_RE = re.compile(rf"\b(?:under|below|less than|up to|upto|within)\s*{_AMOUNT}", re.I)
PRICE_MIN_RE = re.compile(rf"\b(?:above|over|more than)\s*{_AMOUNT}", re.I)

PLATFORM_ALIASES: dict[str, str] = {
    "myntra": "myntra",
    "zara": "zara",
    "h&m": "hm",
    "hm": "hm",
    "uniqlo": "uniqlo",
    "amazon": "amazon",
    "flipkart": "flipkart",
    "jiomart": "jio",
    "jio": "jio",
}
PLATFORM_RE = re.compile(
    r"(?<![\w&])(" + "|".join(re.escape(a) for a in sorted(PLATFORM_ALIASES, key=len, reverse=True)) + r")(?![\w&])",
    re.I,
)

INTENT_SYSTEM_PROMPT = """You are a fashion search query interpreter. Parse the user's natural language query into a structured search intent.

Output ONLY valid JSON with these fields:
- query: the core search term (e.g., "cotton shirts", "summer dress")
- category: optional clothing category (shirts, dresses, jeans, kurtas, etc.)
- productType: optional, one of topwear, bottomwear, dresses, footwear, accessories, ethnic
- priceRange: optional object with min/max in INR
- style: optional style preference (casual, formal, sporty, ethnic)
- occasion: optional occasion (office, party, casual, wedding)
- negativeKeywords: array of terms to EXCLUDE based on occasion (e.g. if office -> exclude ["shorts", "beach", "slipper"])
- platforms: array of platforms to search ({platforms}) - empty if not specified

Examples:
"casual shirts under 1000" -> {{"query":"casual shirts","category":"shirts","productType":"topwear","priceRange":{{"max":1000}},"style":"casual","platforms":[]}}
"zara blazers for office" -> {{"query":"blazers","category":"blazers","productType":"topwear","occasion":"office","style":"formal","negativeKeywords":["party","casual","print"],"platforms":["zara"]}}"""


class IntentResponse(BaseModel):
    """Shape the LLM must return for a query interpretation."""

    query: Optional[str] = None
    category: Optional[str] = None
    product_type: Optional[ProductType] = Field(default=None, alias="productType")
    price_range: Optional[PriceRange] = Field(default=None, alias="priceRange")
    style: Optional[str] = None
    occasion: Optional[str] = None
    negative_keywords: list[str] = Field(default_factory=list, alias="negativeKeywords")
    platforms: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @field_validator("product_type", mode="before")
    @classmethod
    def normalize_product_type(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator("negative_keywords", "platforms", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return [] if v is None else v


def _to_amount(raw: str) -> float:
    return float(raw.replace(",", ""))


def parse_price_range(query: str) -> tuple[Optional[PriceRange], str]:
    """Extract price bounds from a query.

    Args:
        query: Raw query text

    Returns:
        Tuple of (price range or None, query with the price phrases removed)
    """
    low: Optional[float] = None
    high: Optional[float] = None
    cleaned = query

    match = PRICE_BETWEEN_RE.search(cleaned)
    if match:
        a, b = _to_amount(match.group(1)), _to_amount(match.group(2))
        low, high = min(a, b), max(a, b)
        cleaned = cleaned[:match.start()] + " " + cleaned[match.end():]
    else:
        match = PRICE_MAX_RE.search(cleaned)
        if match:
            high = _to_amount(match.group(1))
            cleaned = cleaned[:match.start()] + " " + cleaned[match.end():]
        match = PRICE_MIN_RE.search(cleaned)
        if match:
            low = _to_amount(match.group(1))
            cleaned = cleaned[:match.start()] + " " + cleaned[match.end():]

    if low is None and high is None:
        return None, query
    return PriceRange(min=low, max=high), " ".join(cleaned.split())


def detect_platforms(query: str) -> tuple[list[str], str]:
    """Find platforms the user named explicitly.

    Returns:
        Tuple of (supported platforms in mention order, query without them)
    """
    found: list[str] = []
    for match in PLATFORM_RE.finditer(query):
        platform = PLATFORM_ALIASES[match.group(1).lower()]
        if is_supported(platform) and platform not in found:
            found.append(platform)
    if not found:
        return [], query
    return found, " ".join(PLATFORM_RE.sub(" ", query).split())


def detect_occasion(query: str) -> Optional[str]:
    """Detect the occasion a query is shopping for.

    The office+party composite is checked before any single occasion.
    """
    q = query.lower()
    matched = {name for name, terms in OCCASION_TERMS.items() if any(t in q for t in terms)}

    if "office" in matched and "party" in matched:
        return "office party"
    for occasion in ("office", "party", "beach", "wedding", "casual"):
        if occasion in matched:
            return occasion
    return None


def detect_category(query: str) -> tuple[Optional[str], Optional[ProductType]]:
    """Map a query to (category, product type) using the first matching pattern."""
    for pattern, category, product_type in CATEGORY_PATTERNS:
        if pattern.search(query):
            return category, product_type
    return None, None


def interpret_with_rules(query: str) -> SearchIntent:
    """Deterministic interpretation used when the LLM is unavailable or fails."""
    price_range, cleaned = parse_price_range(query)
    platforms, cleaned = detect_platforms(cleaned)

    occasion = detect_occasion(query)
    style, negative_keywords = OCCASION_PROFILES.get(occasion, (None, []))
    category, product_type = detect_category(query)

    return SearchIntent(
        query=cleaned or query,
        category=category,
        product_type=product_type,
        price_range=price_range,
        style=style,
        occasion=occasion,
        negative_keywords=list(negative_keywords),
        platforms=platforms or list(DEFAULT_PLATFORMS),
    )


class QueryInterpreter:
    """Interpret shopping queries with an LLM and a rule-based fallback."""

    def __init__(self, llm: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        """Initialize the interpreter.

        Args:
            llm: Chat client, or None to always use rules
            model: Model name (defaults to the configured intent model)
        """
        self.llm = llm
        self.model = model or settings.llm_intent_model

    async def interpret(self, query: str) -> SearchIntent:
        """Interpret a query.

        Args:
            query: Free-text shopping query

        Returns:
            SearchIntent. Always has at least one platform.
        """
        if self.llm is None:
            intent = interpret_with_rules(query)
            logger.debug("Query interpreted with rules", query=query, occasion=intent.occasion,
                         product_type=intent.product_type)
            return intent

        try:
            intent = await self._interpret_with_llm(query)
        except Exception as e:
            logger.warning("LLM query interpretation failed, using rules", query=query, error=str(e))
            return interpret_with_rules(query)

        logger.debug("Query interpreted with LLM", query=query, occasion=intent.occasion,
                     product_type=intent.product_type)
        return intent

    async def _interpret_with_llm(self, query: str) -> SearchIntent:
        system_prompt = INTENT_SYSTEM_PROMPT.format(platforms=", ".join(get_supported_platforms()))
        data = await complete_json(
            self.llm,
            self.model,
            system_prompt,
            query,
            temperature=0.3,
        )
        result = IntentResponse.model_validate(data)

        platforms = []
        for name in result.platforms:
            name = PLATFORM_ALIASES.get(name.lower().strip(), name.lower().strip())
            if is_supported(name) and name not in platforms:
                platforms.append(name)

        return SearchIntent(
            query=(result.query or "").strip() or query,
            category=result.category,
            product_type=result.product_type,
            price_range=result.price_range,
            style=result.style,
            occasion=result.occasion,
            negative_keywords=result.negative_keywords,
            platforms=platforms or list(DEFAULT_PLATFORMS),
        )
