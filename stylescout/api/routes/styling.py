"""Styling suggestion and body-type recommendation routes."""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from stylescout.agents.body_styling import BODY_STYLE_MAP
from stylescout.agents.search_agent import SearchAgent
from stylescout.api.dependencies import get_search_agent
from stylescout.logging import set_request_context

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["styling"])


class SuggestRequest(BaseModel):
    user_id: str = Field(alias="userId", min_length=1)
    query: str = ""
    preferences: Optional[dict[str, Any]] = None

    model_config = {"populate_by_name": True}


class AnalyzeRequest(BaseModel):
    user_id: str = Field(alias="userId", min_length=1)
    product: dict[str, Any]
    url: Optional[str] = None
    preferences: Optional[dict[str, Any]] = None

    model_config = {"populate_by_name": True}


class BodyRecommendRequest(BaseModel):
    user_id: str = Field(alias="userId", min_length=1)
    body_type: str = Field(alias="bodyType")
    height: str = "medium"
    style_preference: str = Field(default="any", alias="stylePreference")
    preferences: Optional[dict[str, Any]] = None

    model_config = {"populate_by_name": True}


@router.post("/suggest")
async def suggest(
    request: SuggestRequest,
    agent: SearchAgent = Depends(get_search_agent),
):
    """Short styling suggestion for what the user is dressing for."""
    set_request_context(user_id=request.user_id)
    if not request.query.strip():
        return JSONResponse(status_code=400, content={"success": False, "message": "Please enter a query."})

    try:
        result = await agent.suggest(request.query.strip(), request.preferences)
    except Exception as e:
        logger.error("Suggestion failed", query=request.query, error=str(e))
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Unable to generate suggestion. Please try again."},
        )

    return {"success": True, "suggestion": result.suggestion, "llmUsed": result.llm_used}


@router.post("/analyze")
async def analyze_product(
    request: AnalyzeRequest,
    agent: SearchAgent = Depends(get_search_agent),
):
    """Occasion, pairing advice and a styling tip for one product."""
    set_request_context(user_id=request.user_id)
    try:
        analysis = await agent.analyze_product(request.product, request.preferences)
    except Exception as e:
        logger.error("Product analysis failed", url=request.url, error=str(e))
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed"})

    return {
        "success": True,
        "analysis": analysis.model_dump(include={"occasion", "pairing", "tips"}),
        "llmUsed": analysis.llm_used,
    }


@router.post("/body-recommend")
async def body_recommend(
    request: BodyRecommendRequest,
    agent: SearchAgent = Depends(get_search_agent),
):
    """Products and style guidance for a body type."""
    set_request_context(user_id=request.user_id)
    if request.body_type not in BODY_STYLE_MAP:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": f"Invalid body type. Must be one of: {', '.join(BODY_STYLE_MAP)}",
            },
        )

    try:
        result = await agent.recommend_for_body_type(
            request.body_type,
            request.height or "medium",
            request.style_preference or "any",
            request.preferences,
        )
    except Exception as e:
        logger.error("Body recommendation failed", body_type=request.body_type, error=str(e))
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to get recommendations"})

    return {
        "success": True,
        "bodyType": request.body_type,
        "products": [p.model_dump(by_alias=True) for p in result.products],
        "reasoning": result.reasoning,
        "styleGuide": {
            "flattering": result.style_guide.flattering,
            "avoid": result.style_guide.avoid,
        },
        "matchedTrends": result.matched_trends,
    }
