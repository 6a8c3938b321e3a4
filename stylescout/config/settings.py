"""Configuration settings for the fashion discovery service."""

from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field

# Values shipped in sample .env files that mean "not configured"
PLACEHOLDER_KEYS = {"", "dummy_key", "your_scrapingbee_key_here", "your_groq_key_here"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM (any OpenAI-compatible chat endpoint, Groq by default)
    groq_api_key: Optional[str] = Field(
        default=None,
        description="Groq API key (LLM features fall back to rules when unset)",
    )
    llm_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="Base URL of the OpenAI-compatible chat completions API",
    )
    llm_intent_model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Model used to interpret search queries",
    )
    llm_analysis_model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Model used for trend-augmented product analysis",
    )
    llm_suggestion_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Model used for styling suggestions and body-type scoring",
    )
    llm_timeout_seconds: float = Field(
        default=20.0, description="Upper bound for a single LLM call"
    )

    # Scraping backend
    scrapingbee_api_key: Optional[str] = Field(
        default=None,
        description="ScrapingBee API key for live JS-rendered scraping",
    )
    scraper_backend: str = Field(
        default="scrapingbee",
        description="Render backend: 'scrapingbee', 'playwright' or 'none'",
    )
    scrape_timeout_seconds: float = Field(
        default=30.0, description="Upper bound for a single live fetch"
    )
    scrape_render_wait_ms: int = Field(
        default=5000, description="Milliseconds to let JS render before capture"
    )
    scrape_country_code: str = Field(
        default="in", description="Proxy country for the scraping backend"
    )

    # Fetch cache
    fetch_cache_ttl_seconds: int = Field(
        default=600, description="TTL for cached platform fetches"
    )
    fetch_cache_check_period_seconds: int = Field(
        default=120, description="Interval of the expired-entry sweep"
    )

    # Trend retrieval and analysis
    trend_min_confidence: float = Field(
        default=0.6, description="Minimum trend confidence passed to the analyzer"
    )
    trend_top_k: int = Field(default=3, description="Max trends passed to the analyzer")
    analyzer_max_llm_products: int = Field(
        default=8, description="Max products sent to the LLM for scoring"
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    environment: str = Field(
        default="development",
        description="Environment: 'development' or 'production'",
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def llm_enabled(self) -> bool:
        """Whether a usable LLM credential is configured."""
        return bool(self.groq_api_key) and self.groq_api_key.strip() not in PLACEHOLDER_KEYS

    @property
    def scrapingbee_enabled(self) -> bool:
        """Whether a usable ScrapingBee credential is configured."""
        return (
            bool(self.scrapingbee_api_key)
            and self.scrapingbee_api_key.strip() not in PLACEHOLDER_KEYS
        )


settings = Settings()
