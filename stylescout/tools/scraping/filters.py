"""Shared relevance scoring for product listings.

Two weightings exist. The scraper variant decides which fallback catalog
items are worth returning at all. The analyzer variant produces a ranked
score with a short explanation and stays below 96 so that LLM-graded
matches can always outrank it.
"""

from typing import Iterable

import structlog

from stylescout.state.models import Product

logger = structlog.get_logger()

# Scraper variant
EXACT_MATCH_BONUS = 50
KEYWORD_BONUS = 15
BRAND_BONUS = 10
RELEVANCE_THRESHOLD = 10
MIN_RELEVANT_RESULTS = 3
FALLBACK_TOP_N = 5

# Analyzer variant
ANALYZER_BASE_SCORE = 30
ANALYZER_EXACT_BONUS = 30
ANALYZER_KEYWORD_BONUS = 10
ANALYZER_KEYWORD_CAP = 30
ANALYZER_CATEGORY_BONUS = 15
ANALYZER_SCORE_CAP = 95
EMPTY_QUERY_SCORE = 50

# Checked in order, first bucket present in both query and title wins
CATEGORY_BUCKETS: list[tuple[str, list[str]]] = [
    ("shirt", ["shirt", "kurta", "blouse", "top", "polo"]),
    ("pants", ["pants", "jeans", "trousers", "chinos", "joggers"]),
    ("dress", ["dress", "gown", "frock", "maxi", "midi"]),
    ("shoes", ["shoes", "sneakers", "loafers", "heels", "sandals", "boots"]),
    ("formal", ["blazer", "suit", "formal", "office"]),
    ("casual", ["casual", "t-shirt", "tee", "hoodie", "sweatshirt"]),
]


def extract_keywords(query: str) -> list[str]:
    """Split a lowercased query into keywords longer than two characters."""
    return [k for k in query.lower().split() if len(k) > 2]


def relevance_score(product: Product, query: str) -> int:
    """Score a product against a query with the scraper weighting.

    Args:
        product: Product to score
        query: Raw search query

    Returns:
        Additive relevance score (0 when nothing matches)
    """
    search_query = query.lower().strip()
    keywords = extract_keywords(search_query)
    title = product.title.lower()
    brand = product.brand.lower()
    combined = f"{title} {brand}"

    score = 0
    if search_query and search_query in title:
        score += EXACT_MATCH_BONUS

    for keyword in keywords:
        if keyword in combined:
            score += KEYWORD_BONUS

    if any(k in brand for k in keywords):
        score += BRAND_BONUS

    return score


def filter_by_query(products: list[Product], query: str) -> list[Product]:
    """Filter and rank products by relevance to a query.

    Keeps products scoring above the relevance threshold, best first. When
    fewer than three clear it, returns the top five by raw score instead so
    the caller always has something to show.

    Args:
        products: Candidate products
        query: Raw search query (blank means no filtering)

    Returns:
        Relevant products sorted by descending score
    """
    if not query or not query.strip():
        return list(products)

    scored = [(relevance_score(p, query), p) for p in products]
    scored.sort(key=lambda item: item[0], reverse=True)

    relevant = [p for score, p in scored if score > RELEVANCE_THRESHOLD]
    if len(relevant) < MIN_RELEVANT_RESULTS:
        logger.debug(
            "Few relevant products, returning top by score",
            relevant=len(relevant),
            query=query,
        )
        return [p for _, p in scored[:FALLBACK_TOP_N]]

    logger.debug("Relevant products found", count=len(relevant), query=query)
    return relevant


def keyword_match_score(product: Product, query: str) -> tuple[int, str]:
    """Score a product with the analyzer weighting and explain the score.

    Args:
        product: Product to score
        query: Raw search query

    Returns:
        Tuple of (score capped at 95, human-readable reasoning)
    """
    if not query or not query.strip():
        return EMPTY_QUERY_SCORE, "General product recommendation."

    query_lower = query.lower().strip()
    keywords = extract_keywords(query_lower)
    title = product.title.lower()
    brand = product.brand.lower()
    combined = f"{title} {brand}"

    score = ANALYZER_BASE_SCORE
    matched: list[str] = []

    if query_lower in title:
        score += ANALYZER_EXACT_BONUS
        matched.append("exact match")

    keyword_bonus = 0
    for keyword in keywords:
        if keyword in combined:
            keyword_bonus += ANALYZER_KEYWORD_BONUS
            matched.append(keyword)
    score += min(keyword_bonus, ANALYZER_KEYWORD_CAP)

    if any(k in brand for k in keywords):
        score += BRAND_BONUS

    for bucket, terms in CATEGORY_BUCKETS:
        if any(t in query_lower for t in terms) and any(t in title for t in terms):
            score += ANALYZER_CATEGORY_BONUS
            matched.append(bucket)
            break

    score = min(score, ANALYZER_SCORE_CAP)

    if matched:
        unique = list(dict.fromkeys(matched))[:3]
        return score, f"Matches your search for {', '.join(unique)}."
    return score, "Browse option based on your search."


def matches_any_keyword(product: Product, keywords: Iterable[str]) -> bool:
    """Check whether a product title mentions any of the given style keywords."""
    title = product.title.lower()
    return any(k.lower() in title for k in keywords)
