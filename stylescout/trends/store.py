"""In-memory vector store over the curated trend corpus."""

import math
import re
from datetime import datetime
from typing import Callable, Optional

import structlog

from stylescout.state.models import Trend
from stylescout.trends.catalog import CURATED_TRENDS

logger = structlog.get_logger()

# Bag-of-words style vocabulary. Stand-in for a real embedding model, so the
# vector length is fixed and only cosine similarity matters to callers.
STYLE_VOCABULARY = [
    "relaxed", "formal", "casual", "party", "office", "summer", "winter",
    "elegant", "bold", "minimal", "colorful", "luxury", "comfort", "sporty",
    "traditional", "modern", "trendy", "vintage", "chic", "edgy", "feminine",
    "masculine", "neutral", "vibrant", "soft", "structured", "flowy", "fitted",
]

RECENCY_WINDOW_DAYS = 30
RECENCY_BOOST = 0.05

_WORD_RE = re.compile(r"[a-z]+")


def calculate_confidence_score(sources_count: int, created_at: datetime, now: datetime) -> float:
    """Compute a trend's confidence from how widely and how recently it was reported.

    Args:
        sources_count: Number of outlets reporting the trend
        created_at: When the trend was recorded
        now: Reference time for the recency boost

    Returns:
        Confidence in [0, 1]
    """
    if sources_count >= 5:
        score = 0.90
    elif sources_count >= 4:
        score = 0.85
    elif sources_count >= 3:
        score = 0.70
    elif sources_count >= 2:
        score = 0.60
    else:
        score = 0.40

    # Whole elapsed days, so the whole 30th day still counts as recent
    if (now - created_at).days <= RECENCY_WINDOW_DAYS:
        score += RECENCY_BOOST

    return min(round(score, 2), 1.0)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two vectors, 0.0 when either has zero norm."""
    if len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class TrendStore:
    """Curated trends with derived confidence and precomputed embeddings.

    Construct once at startup, call ``initialize()`` and pass the instance
    to whatever needs trends. Trends are read-only after initialization;
    expiry is checked per query rather than by deleting entries.
    """

    def __init__(
        self,
        raw_trends: Optional[list[dict]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the store.

        Args:
            raw_trends: Trend records without confidence or embedding
            clock: Source of the current time for recency and expiry
        """
        self._raw_trends = CURATED_TRENDS if raw_trends is None else raw_trends
        self._clock = clock
        self._trends: dict[str, Trend] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Load trends, scoring and embedding each once. Safe to call repeatedly."""
        if self._initialized:
            return

        now = self._clock()
        for raw in self._raw_trends:
            trend = Trend(**{k: v for k, v in raw.items() if k not in ("confidence_score", "embedding")})
            trend.confidence_score = calculate_confidence_score(trend.sources_count, trend.created_at, now)
            try:
                trend.embedding = self.embed(self.embedding_text(trend))
            except Exception as e:
                # Without an embedding the trend is only reachable by keyword
                logger.warning("Trend embedding failed", trend_id=trend.trend_id, error=str(e))
                trend.embedding = None
            self._trends[trend.trend_id] = trend

        self._initialized = True
        logger.info("Trend store initialized", trends=len(self._trends))

    @staticmethod
    def embedding_text(trend: Trend) -> str:
        """Text a trend is embedded from."""
        return " ".join([
            trend.trend_name,
            trend.description,
            trend.category,
            trend.season,
            " ".join(trend.keywords),
        ])

    def embed(self, text: str) -> list[float]:
        """Embed text as a binary indicator vector over the style vocabulary."""
        words = set(_WORD_RE.findall(text.lower()))
        return [1.0 if term in words else 0.0 for term in STYLE_VOCABULARY]

    def search_by_vector(self, vector: list[float], k: int) -> list[Trend]:
        """Find the k trends most similar to a query vector.

        Trends without an embedding and pairs with zero similarity are not
        ranked. Equal similarities keep corpus order.
        """
        scored = []
        for trend in self._trends.values():
            if trend.embedding is None:
                continue
            similarity = cosine_similarity(vector, trend.embedding)
            if similarity > 0:
                scored.append((similarity, trend))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [trend for _, trend in scored[:k]]

    def search_by_keyword(self, query: str) -> list[Trend]:
        """Find trends whose keywords, name or category occur in the query."""
        q = query.lower()
        results = []
        for trend in self._trends.values():
            if (
                any(k in q for k in trend.keywords)
                or trend.trend_name.lower() in q
                or (trend.category != "any" and trend.category in q)
            ):
                results.append(trend)
        return results

    def is_expired(self, trend: Trend) -> bool:
        return self._clock() > trend.expires_at

    def get_all(self) -> list[Trend]:
        """Get every trend, expired or not."""
        return list(self._trends.values())

    def all_active(self) -> list[Trend]:
        """Get trends that have not expired yet."""
        return [t for t in self._trends.values() if not self.is_expired(t)]

    def get_by_confidence(self, min_confidence: float) -> list[Trend]:
        """Get trends at or above a confidence threshold."""
        return [t for t in self._trends.values() if t.confidence_score >= min_confidence]
