"""Product discovery search routes."""

import traceback
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from stylescout.agents.search_agent import SearchAgent
from stylescout.api.dependencies import get_search_agent
from stylescout.logging import log_error, set_request_context
from stylescout.state.models import SearchOutcome

router = APIRouter(prefix="/api", tags=["discovery"])


class DiscoverySearchRequest(BaseModel):
    """Search one platform or a set of platforms."""
    user_id: str = Field(alias="userId", min_length=1)
    query: str = ""
    platform: Optional[str] = None
    platforms: Optional[list[str]] = None
    preferences: Optional[dict[str, Any]] = None

    model_config = {"populate_by_name": True}

    def target_platforms(self) -> Optional[list[str]]:
        if self.platforms:
            return [p.lower() for p in self.platforms]
        if self.platform:
            return [self.platform.lower()]
        return None


class UniversalSearchRequest(BaseModel):
    """Search every platform the query calls for."""
    user_id: str = Field(alias="userId", min_length=1)
    query: str = Field(min_length=1)
    preferences: Optional[dict[str, Any]] = None

    model_config = {"populate_by_name": True}


def outcome_to_response(outcome: SearchOutcome) -> dict:
    """Serialize a search outcome with camelCase product fields."""
    body: dict[str, Any] = {
        "success": outcome.success,
        "products": [p.model_dump(by_alias=True) for p in outcome.products],
    }
    if outcome.message:
        body["message"] = outcome.message
    if outcome.intent is not None:
        body["intent"] = outcome.intent.model_dump(by_alias=True, mode="json", exclude_none=True)
    if outcome.trend_method:
        body["trendMethod"] = outcome.trend_method
    return body


@router.post("/discovery/search")
async def discovery_search(
    request: DiscoverySearchRequest,
    agent: SearchAgent = Depends(get_search_agent),
):
    """Search platforms and return trend-ranked products."""
    set_request_context(user_id=request.user_id)
    try:
        outcome = await agent.discovery_search(
            request.query,
            platforms=request.target_platforms(),
            preferences=request.preferences,
        )
    except Exception as e:
        log_error(type(e).__name__, str(e), traceback.format_exc(), {"route": "discovery", "query": request.query})
        return JSONResponse(status_code=500, content={"success": False, "error": "Search failed"})

    return outcome_to_response(outcome)


@router.post("/universal/search")
async def universal_search(
    request: UniversalSearchRequest,
    agent: SearchAgent = Depends(get_search_agent),
):
    """Search across all platforms selected by query interpretation."""
    set_request_context(user_id=request.user_id)
    try:
        outcome = await agent.universal_search(request.query, preferences=request.preferences)
    except Exception as e:
        log_error(type(e).__name__, str(e), traceback.format_exc(), {"route": "universal", "query": request.query})
        return JSONResponse(status_code=500, content={"success": False, "error": "Search failed"})

    return outcome_to_response(outcome)
