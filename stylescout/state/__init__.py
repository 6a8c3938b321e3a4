"""State model exports."""

from stylescout.state.models import (
    ProductType,
    Product,
    PriceRange,
    SearchIntent,
    Trend,
    TrendConfidence,
    RetrievalOptions,
    RetrievalResult,
    RetrievalMethod,
    SearchOutcome,
)

__all__ = [
    "ProductType",
    "Product",
    "PriceRange",
    "SearchIntent",
    "Trend",
    "TrendConfidence",
    "RetrievalOptions",
    "RetrievalResult",
    "RetrievalMethod",
    "SearchOutcome",
]
