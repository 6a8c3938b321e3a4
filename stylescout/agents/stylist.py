"""Short personalized styling suggestions and per-product styling advice."""

import json
from typing import Any, Optional

import structlog
from openai import AsyncOpenAI
from pydantic import BaseModel, Field, ValidationError

from stylescout.agents.llm import LLMResponseError, complete_json, complete_text
from stylescout.config.settings import settings

logger = structlog.get_logger()

STYLIST_SYSTEM_PROMPT = """You are a personalized fashion stylist. Give a direct, helpful styling suggestion (max 50 words) based on the USER'S SPECIFIC QUERY. Do NOT mention specific product names or brands, just styles/colors/pairings.

IMPORTANT: Your response MUST directly address what the user asked for. If they ask about "summer dress", suggest summer dress styles. If they ask about "office wear", suggest office appropriate clothing."""

# (trigger terms, suggestion template), checked in order
FALLBACK_SUGGESTIONS: list[tuple[list[str], str]] = [
    (["office", "formal", "work"],
     "For {query}, try a structured blazer with tailored trousers. Neutral colors like navy, grey, or beige work well for a polished professional look."),
    (["summer", "beach", "vacation"],
     "For {query}, opt for lightweight, breathable fabrics like linen or cotton. Light colors and flowy silhouettes will keep you cool and stylish."),
    (["party", "night", "date"],
     "For {query}, consider something elegant with a bit of sparkle or bold color. A well-fitted dress or smart casual combo can make you stand out."),
    (["casual", "everyday", "daily"],
     "For {query}, comfortable yet stylish basics work best. Try well-fitted jeans with a quality t-shirt or casual blouse and clean sneakers."),
    (["gym", "sport", "yoga", "workout"],
     "For {query}, prioritize moisture-wicking fabrics and comfortable fits. Athletic wear in dark colors tends to be versatile and practical."),
]
DEFAULT_SUGGESTION = (
    'For "{query}": Consider pieces that balance comfort with style. '
    "Focus on versatile neutrals that you can mix and match for different occasions."
)

PRODUCT_ANALYSIS_SYSTEM_PROMPT = (
    "You are a fashion stylist. For the product you are given, provide: "
    "1) the occasion it suits best, 2) pairing advice, 3) a pro styling tip. "
    'Respond with JSON only: {"occasion": "...", "pairing": "...", "tips": "..."}'
)


class StyleSuggestion(BaseModel):
    suggestion: str
    llm_used: bool = False


class ProductAnalysis(BaseModel):
    """Styling advice for a single product."""

    occasion: str
    pairing: str
    tips: str
    llm_used: bool = False


class ProductAnalysisResponse(BaseModel):
    occasion: str = Field(min_length=1)
    pairing: str = Field(min_length=1)
    tips: str = Field(min_length=1)


# Used when no LLM is configured or the call fails
FALLBACK_ANALYSIS = ProductAnalysis(
    occasion="Casual Brunch",
    pairing="White sneakers and denim jacket",
    tips="Roll up sleeves for a relaxed look.",
)


def fallback_suggestion(query: str) -> str:
    """Deterministic suggestion keyed on the occasion words in the query."""
    q = query.lower()
    for terms, template in FALLBACK_SUGGESTIONS:
        if any(t in q for t in terms):
            return template.format(query=query)
    return DEFAULT_SUGGESTION.format(query=query)


def describe_profile(preferences: dict[str, Any]) -> str:
    """Render a preference blob as a one-line user profile for the prompt."""
    fit = preferences.get("preferred_fit") or preferences.get("fit") or "regular"
    comfort = preferences.get("comfort_priority") or preferences.get("comfort") or "balanced"
    fabric = preferences.get("fabric_preference") or preferences.get("fabric") or "no preference"
    body_type = preferences.get("body_type") or "not specified"
    occasion = preferences.get("occasion_focus") or "mixed"
    gender = preferences.get("gender") or "not specified"

    if comfort == "comfort":
        focus = "comfort-focused"
    elif comfort == "trends":
        focus = "trend-focused"
    else:
        focus = "balanced"

    return (
        f"User profile: Gender: {gender}. Prefers {fit} fit, {focus} style. "
        f"Body type: {body_type}. Fabric: {fabric}. Usually shops for: {occasion} wear."
    )


class Stylist:
    """Generate styling suggestions with an LLM, falling back to canned advice."""

    def __init__(self, llm: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self.llm = llm
        self.model = model or settings.llm_suggestion_model

    async def suggest(self, query: str, preferences: Optional[dict[str, Any]] = None) -> StyleSuggestion:
        """Suggest what to wear for a query.

        Args:
            query: What the user is dressing for
            preferences: Optional preference blob (fit, comfort, fabric, ...)

        Returns:
            StyleSuggestion; ``llm_used`` is False when the canned advice was used
        """
        if self.llm is not None:
            system_prompt = STYLIST_SYSTEM_PROMPT
            if isinstance(preferences, dict) and preferences:
                system_prompt += "\n\n" + describe_profile(preferences)
            try:
                text = await complete_text(
                    self.llm,
                    self.model,
                    system_prompt,
                    f"What should I wear for: {query}",
                    temperature=0.8,
                    max_tokens=150,
                )
                return StyleSuggestion(suggestion=text, llm_used=True)
            except Exception as e:
                logger.warning("Style suggestion LLM call failed, using fallback", query=query, error=str(e))

        return StyleSuggestion(suggestion=fallback_suggestion(query))

    async def analyze_product(
        self,
        product: dict[str, Any],
        preferences: Optional[dict[str, Any]] = None,
    ) -> ProductAnalysis:
        """Occasion, pairing advice and a styling tip for one product.

        Args:
            product: Product details as sent by the client (title, brand, price, ...)
            preferences: Optional preference blob used to tailor the advice

        Returns:
            ProductAnalysis; the canned advice when the LLM is unavailable or fails
        """
        if self.llm is None:
            return FALLBACK_ANALYSIS.model_copy()

        system_prompt = PRODUCT_ANALYSIS_SYSTEM_PROMPT
        if isinstance(preferences, dict) and preferences:
            system_prompt += (
                "\n\n" + describe_profile(preferences)
                + " Tailor your advice to match their style preferences and body type."
            )

        try:
            data = await complete_json(
                self.llm,
                self.model,
                system_prompt,
                f"Analyze this product: {json.dumps(product, ensure_ascii=False)}",
                temperature=0.7,
                max_tokens=300,
            )
            parsed = ProductAnalysisResponse.model_validate(data)
        except (LLMResponseError, ValidationError) as e:
            logger.warning("Product analysis reply unusable, using fallback", error=str(e))
            return FALLBACK_ANALYSIS.model_copy()
        except Exception as e:
            logger.warning("Product analysis LLM call failed, using fallback", error=str(e))
            return FALLBACK_ANALYSIS.model_copy()

        return ProductAnalysis(**parsed.model_dump(), llm_used=True)
