"""Main entry point for the fashion discovery API."""

from dotenv import load_dotenv
load_dotenv()  # Load .env into environment variables

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stylescout.agents.llm import get_llm_client
from stylescout.agents.search_agent import SearchAgent
from stylescout.api.middleware import RequestLoggingMiddleware
from stylescout.api.routes.discovery import router as discovery_router
from stylescout.api.routes.styling import router as styling_router
from stylescout.api.routes.trends import router as trends_router
from stylescout.cache import get_fetch_cache
from stylescout.config.settings import settings
from stylescout.logging import LogTimer, configure_logging
from stylescout.tools.scraping.fetcher import get_product_fetcher
from stylescout.trends.store import TrendStore

configure_logging()

logger = structlog.get_logger()

app = FastAPI(title="StyleScout Discovery API")

app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(discovery_router)
app.include_router(styling_router)
app.include_router(trends_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    store = getattr(app.state, "trend_store", None)
    return {
        "status": "healthy",
        "trends_loaded": len(store.get_all()) if store is not None else 0,
        "llm_enabled": settings.llm_enabled,
        "cache": get_fetch_cache().get_stats().model_dump(),
    }


@app.on_event("startup")
async def startup_event():
    """Build the trend store and search agent, start the cache sweeper."""
    trend_store = TrendStore()
    with LogTimer("trend_store_initialize"):
        trend_store.initialize()

    fetcher = get_product_fetcher()
    app.state.trend_store = trend_store
    app.state.search_agent = SearchAgent(fetcher, trend_store, get_llm_client())

    fetcher.cache.start_sweeper()

    logger.info(
        "Discovery service started",
        trends=len(trend_store.get_all()),
        llm_enabled=settings.llm_enabled,
        live_fetch=fetcher.backend.name if fetcher.backend else None,
        environment=settings.environment,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Stop background work."""
    await get_fetch_cache().stop_sweeper()
    logger.info("Discovery service stopped")


def run():
    """Run the API server."""
    log_level = "info" if settings.environment == "production" else "warning"
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=log_level)


if __name__ == "__main__":
    run()
