"""State models for the discovery pipeline."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


TrendConfidence = Literal["High", "Medium", "Low"]
RetrievalMethod = Literal["vector", "keyword", "fallback"]


class ProductType(str, Enum):
    """Closed set of product types the hard filter understands."""

    TOPWEAR = "topwear"
    BOTTOMWEAR = "bottomwear"
    DRESSES = "dresses"
    FOOTWEAR = "footwear"
    ACCESSORIES = "accessories"
    ETHNIC = "ethnic"


class Product(BaseModel):
    """A scraped or catalog product listing.

    Scoring stages only ever add fields; ``id`` is unique within one fetch.
    """

    id: str
    title: str
    price: str = "0"  # digits only
    brand: str = ""
    image_url: str = Field(default="", alias="imageUrl")
    product_url: str = Field(default="", alias="productUrl")
    platform: str
    comfort_score: Optional[int] = Field(default=None, alias="comfortScore")
    confidence_score: Optional[int] = Field(default=None, alias="confidenceScore")
    reasoning: Optional[str] = None
    trend_reference: Optional[str] = Field(default=None, alias="trendReference")
    trend_confidence: Optional[TrendConfidence] = Field(default=None, alias="trendConfidence")

    model_config = {"populate_by_name": True}

    @property
    def price_value(self) -> Optional[int]:
        """Numeric price, or None when the price string holds no digits."""
        digits = "".join(ch for ch in self.price if ch.isdigit())
        return int(digits) if digits else None


class PriceRange(BaseModel):
    """Optional price bounds in INR."""

    min: Optional[float] = None
    max: Optional[float] = None


class SearchIntent(BaseModel):
    """Structured interpretation of a free-text shopping query."""

    query: str
    category: Optional[str] = None
    product_type: Optional[ProductType] = Field(default=None, alias="productType")
    price_range: Optional[PriceRange] = Field(default=None, alias="priceRange")
    style: Optional[str] = None
    occasion: Optional[str] = None
    negative_keywords: list[str] = Field(default_factory=list, alias="negativeKeywords")
    platforms: list[str] = Field(min_length=1)

    model_config = {"populate_by_name": True, "frozen": True}


class Trend(BaseModel):
    """A curated fashion trend.

    ``confidence_score`` and ``embedding`` are derived by the trend store
    at initialization and are never taken from external input.
    """

    trend_id: str
    trend_name: str
    description: str
    source: str
    sources_count: int = Field(gt=0)
    category: str
    season: str
    keywords: list[str] = Field(default_factory=list)
    confidence_score: float = 0.0
    created_at: datetime
    expires_at: datetime
    embedding: Optional[list[float]] = None


class RetrievalOptions(BaseModel):
    """Options for trend retrieval."""

    min_confidence: float = Field(default=0.6, alias="minConfidence")
    top_k: int = Field(default=3, gt=0, alias="topK")
    category: Optional[str] = None
    include_expired: bool = Field(default=False, alias="includeExpired")

    model_config = {"populate_by_name": True}


class RetrievalResult(BaseModel):
    """Trends retrieved for a query and the path that produced them."""

    trends: list[Trend]
    method: RetrievalMethod
    query: str


class SearchOutcome(BaseModel):
    """Result of a discovery or universal search."""

    success: bool = True
    products: list[Product] = Field(default_factory=list)
    message: Optional[str] = None
    intent: Optional[SearchIntent] = None
    trend_method: Optional[RetrievalMethod] = Field(default=None, alias="trendMethod")

    model_config = {"populate_by_name": True}
