"""Trend corpus routes."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from stylescout.api.dependencies import get_trend_store
from stylescout.state.models import RetrievalOptions, Trend
from stylescout.trends.retrieval import get_confidence_label, retrieve_trends_for_query
from stylescout.trends.store import TrendStore

router = APIRouter(prefix="/api/trends", tags=["trends"])


class RetrieveTrendsRequest(BaseModel):
    query: str
    min_confidence: float = Field(default=0.6, alias="minConfidence", ge=0, le=1)
    top_k: int = Field(default=3, alias="topK", gt=0, le=12)
    category: Optional[str] = None
    include_expired: bool = Field(default=False, alias="includeExpired")

    model_config = {"populate_by_name": True}


def trend_to_dict(trend: Trend) -> dict:
    """Public view of a trend (no embedding)."""
    data = trend.model_dump(mode="json", exclude={"embedding"})
    data["confidence_label"] = get_confidence_label(trend.confidence_score)
    return data


@router.get("")
async def list_trends(store: TrendStore = Depends(get_trend_store)):
    """List trends that have not expired."""
    trends = store.all_active()
    return {"count": len(trends), "trends": [trend_to_dict(t) for t in trends]}


@router.post("/retrieve")
async def retrieve_trends(
    request: RetrieveTrendsRequest,
    store: TrendStore = Depends(get_trend_store),
):
    """Run trend retrieval for a query."""
    result = retrieve_trends_for_query(
        store,
        request.query,
        RetrievalOptions(
            min_confidence=request.min_confidence,
            top_k=request.top_k,
            category=request.category,
            include_expired=request.include_expired,
        ),
    )
    return {
        "query": result.query,
        "method": result.method,
        "trends": [trend_to_dict(t) for t in result.trends],
    }
