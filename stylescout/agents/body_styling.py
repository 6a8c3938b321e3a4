"""Body-type style guides and product recommendations."""

import json
from typing import Any, Literal, Optional

import structlog
from openai import AsyncOpenAI
from pydantic import BaseModel, Field, field_validator

from stylescout.agents.llm import complete_json
from stylescout.agents.trend_analyzer import score_with_keywords
from stylescout.config.settings import settings
from stylescout.state.models import Product, RetrievalOptions
from stylescout.tools.scraping.fetcher import ProductFetcher
from stylescout.tools.scraping.filters import matches_any_keyword
from stylescout.trends.retrieval import format_trends_for_llm, retrieve_trends_for_query
from stylescout.trends.store import TrendStore

logger = structlog.get_logger()

BodyType = Literal["apple", "pear", "hourglass", "rectangle", "inverted-triangle"]
HeightRange = Literal["petite", "medium", "tall"]
StylePreference = Literal["casual", "formal", "trendy", "classic", "any"]

BODY_PLATFORMS = ["myntra", "zara", "hm"]
MIN_KEYWORD_MATCHES = 3
MAX_LLM_PRODUCTS = 6
MAX_RESULTS = 8
DEFAULT_LLM_SCORE = 70


class StyleGuide(BaseModel):
    """Styling rules for one body type."""

    flattering: list[str]
    avoid: list[str]
    keywords: list[str]
    description: str


BODY_STYLE_MAP: dict[str, StyleGuide] = {
    "apple": StyleGuide(
        flattering=["A-line dresses", "V-neck tops", "empire waist", "flowy tops", "structured blazers", "bootcut pants"],
        avoid=["tight waists", "clingy fabrics", "horizontal stripes on midsection"],
        keywords=["a-line", "v-neck", "empire", "flowy", "structured", "bootcut", "wrap"],
        description="Apple body types look best in styles that elongate the torso and define the waist from above.",
    ),
    "pear": StyleGuide(
        flattering=["boat neck", "structured shoulders", "A-line skirts", "wide-leg pants", "statement tops", "fit-and-flare dresses"],
        avoid=["skinny jeans", "pencil skirts", "hip-hugging styles"],
        keywords=["boat neck", "structured", "a-line", "wide-leg", "flare", "statement"],
        description="Pear body types look stunning with styles that balance the shoulders with the hips.",
    ),
    "hourglass": StyleGuide(
        flattering=["fitted waists", "wrap dresses", "high-waisted bottoms", "belted styles", "bodycon", "pencil skirts"],
        avoid=["boxy shapes", "oversized everything", "shapeless dresses"],
        keywords=["fitted", "wrap", "high-waisted", "belted", "bodycon", "pencil", "defined waist"],
        description="Hourglass figures look amazing in styles that highlight the natural waist and balanced proportions.",
    ),
    "rectangle": StyleGuide(
        flattering=["peplum tops", "belted styles", "layered looks", "ruffles", "textured fabrics", "asymmetric cuts"],
        avoid=["straight shapeless dresses", "column silhouettes"],
        keywords=["peplum", "belted", "layered", "ruffle", "textured", "asymmetric", "tiered"],
        description="Rectangle body types look great with styles that create curves and add dimension.",
    ),
    "inverted-triangle": StyleGuide(
        flattering=["wide-leg pants", "V-necks", "A-line skirts", "flared bottoms", "wrap tops", "darker tops"],
        avoid=["shoulder pads", "boat necks", "horizontal stripes on top"],
        keywords=["wide-leg", "v-neck", "a-line", "flared", "wrap", "soft shoulders"],
        description="Inverted triangle body types look balanced with styles that add volume to the lower half.",
    ),
}

BODY_SYSTEM_PROMPT = """You are a fashion stylist specializing in body-type styling.

Body Type: {body_type}
Style Guide: {description}
Flattering styles: {flattering}
Styles to avoid: {avoid}
Height: {height}
Style Preference: {style_preference}
{prefs_context}

{trend_context}

Analyze each product and rate how well it suits this body type (0-100).
Output JSON: {{ "analysis": [{{ "id": "...", "score": 85, "reason": "..." }}] }}"""


class BodyProductScore(BaseModel):
    id: str
    score: int = Field(ge=0, le=100)
    reason: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("score", mode="before")
    @classmethod
    def round_score(cls, v):
        return round(v) if isinstance(v, float) else v


class BodyAnalysisResponse(BaseModel):
    """Shape the LLM must return when rating products for a body type."""

    analysis: list[BodyProductScore]


class BodyRecommendation(BaseModel):
    """Products and guidance for a body type."""

    products: list[Product] = Field(default_factory=list)
    reasoning: str
    style_guide: StyleGuide
    matched_trends: list[str] = Field(default_factory=list)


def build_body_query(style_guide: StyleGuide, style_preference: str = "any") -> str:
    """Search query built from a style guide's leading keywords."""
    prefix = f"{style_preference} " if style_preference != "any" else ""
    return f"{prefix}{' '.join(style_guide.keywords[:3])} clothing"


def build_body_reasoning(style_guide: StyleGuide, matched_trends: list[str]) -> str:
    trends_part = f" like {' and '.join(matched_trends)}" if matched_trends else ""
    return (
        f"{style_guide.description} Based on current trends{trends_part}, "
        f"we recommend styles that {' and '.join(style_guide.flattering[:2])}."
    )


async def _score_with_llm(
    llm: AsyncOpenAI,
    products: list[Product],
    body_type: str,
    height: str,
    style_preference: str,
    style_guide: StyleGuide,
    trend_context: str,
    preferences: Optional[Any],
) -> list[Product]:
    to_analyze = products[:MAX_LLM_PRODUCTS]
    system_prompt = BODY_SYSTEM_PROMPT.format(
        body_type=body_type.upper(),
        description=style_guide.description,
        flattering=", ".join(style_guide.flattering),
        avoid=", ".join(style_guide.avoid),
        height=height,
        style_preference=style_preference,
        prefs_context=f"User preferences: {json.dumps(preferences, default=str)}" if preferences else "",
        trend_context=trend_context,
    )
    user_prompt = f"Rate these products for {body_type} body type:\n" + json.dumps([
        {"id": p.id, "title": p.title, "brand": p.brand} for p in to_analyze
    ])

    data = await complete_json(
        llm,
        settings.llm_suggestion_model,
        system_prompt,
        user_prompt,
        temperature=0.4,
    )
    response = BodyAnalysisResponse.model_validate(data)
    scores = {a.id: a for a in response.analysis}

    scored = []
    for product in products:
        analysis = scores.get(product.id)
        scored.append(product.model_copy(update={
            "confidence_score": analysis.score if analysis else DEFAULT_LLM_SCORE,
            "reasoning": analysis.reason if analysis else f"Great choice for {body_type} body type.",
        }))
    return sorted(scored, key=lambda p: p.confidence_score or 0, reverse=True)


async def get_body_type_recommendations(
    body_type: str,
    height: str = "medium",
    style_preference: str = "any",
    preferences: Optional[Any] = None,
    *,
    fetcher: ProductFetcher,
    trend_store: TrendStore,
    llm: Optional[AsyncOpenAI] = None,
) -> BodyRecommendation:
    """Recommend products that flatter a body type.

    Args:
        body_type: One of apple, pear, hourglass, rectangle, inverted-triangle
        height: petite, medium or tall
        style_preference: casual, formal, trendy, classic or any
        preferences: Opaque user preference blob passed to the LLM
        fetcher: Product fetcher
        trend_store: Initialized trend store
        llm: Chat client, or None for keyword scoring

    Returns:
        BodyRecommendation with at most eight products
    """
    style_guide = BODY_STYLE_MAP.get(body_type)
    if style_guide is None:
        return BodyRecommendation(
            reasoning="Invalid body type selected.",
            style_guide=BODY_STYLE_MAP["rectangle"],
        )

    search_query = build_body_query(style_guide, style_preference)

    retrieval = retrieve_trends_for_query(
        trend_store,
        search_query,
        RetrievalOptions(min_confidence=0.5, top_k=2),
    )
    matched_trends = [t.trend_name for t in retrieval.trends]

    all_products = await fetcher.fetch_many(BODY_PLATFORMS, search_query)

    products = [p for p in all_products if matches_any_keyword(p, style_guide.keywords)]
    if len(products) < MIN_KEYWORD_MATCHES:
        products = all_products

    ranked: Optional[list[Product]] = None
    if llm is not None and products:
        try:
            ranked = await _score_with_llm(
                llm,
                products,
                body_type,
                height,
                style_preference,
                style_guide,
                format_trends_for_llm(retrieval.trends),
                preferences,
            )
        except Exception as e:
            logger.warning("Body-type LLM scoring failed, using keywords", body_type=body_type, error=str(e))

    if ranked is None:
        ranked = score_with_keywords(products, search_query)

    logger.info(
        "Body-type recommendations built",
        body_type=body_type,
        query=search_query,
        candidates=len(all_products),
        returned=min(len(ranked), MAX_RESULTS),
        trends=matched_trends,
    )
    return BodyRecommendation(
        products=ranked[:MAX_RESULTS],
        reasoning=build_body_reasoning(style_guide, matched_trends),
        style_guide=style_guide,
        matched_trends=matched_trends,
    )
