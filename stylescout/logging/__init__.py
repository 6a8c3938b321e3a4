"""Structured logging for the discovery service.

Provides structured logging for:
- Search requests (queries, platforms, result counts)
- Pipeline operations (scraping, trend retrieval, LLM analysis)
- Performance metrics (latency, cache hits)
- Errors and degraded fallback paths

Supports:
- Console logging (development)
- File logging with rotation (opt-in via LOG_TO_FILE)
"""

import logging
import os
import sys
import time
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
from contextvars import ContextVar

import structlog

# Request context for correlating logs
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


class EventCategory(str, Enum):
    """Categories of logged events."""
    SEARCH = "search"
    SCRAPING = "scraping"
    RETRIEVAL = "retrieval"
    ANALYSIS = "analysis"
    SYSTEM = "system"
    ERROR = "error"
    PERFORMANCE = "performance"


class LogConfig:
    """Logging configuration from environment variables."""

    # Environment: development, staging, production
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Log level: DEBUG, INFO, WARNING, ERROR
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Log format: json or text
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json" if ENVIRONMENT == "production" else "text")

    # File logging
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "false").lower() == "true"
    LOG_DIR: Path = Path(os.getenv("LOG_DIR", "logs"))
    LOG_FILE_MAX_BYTES: int = int(os.getenv("LOG_FILE_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    LOG_FILE_BACKUP_COUNT: int = int(os.getenv("LOG_FILE_BACKUP_COUNT", 5))


def setup_file_logging() -> Optional[logging.Handler]:
    """Set up file-based logging with rotation."""
    if not LogConfig.LOG_TO_FILE:
        return None

    LogConfig.LOG_DIR.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        LogConfig.LOG_DIR / "app.log",
        maxBytes=LogConfig.LOG_FILE_MAX_BYTES,
        backupCount=LogConfig.LOG_FILE_BACKUP_COUNT,
    )
    handler.setFormatter(logging.Formatter('%(message)s'))
    handler.setLevel(getattr(logging, LogConfig.LOG_LEVEL))

    return handler


def setup_error_file_logging() -> Optional[logging.Handler]:
    """Set up separate error log file."""
    if not LogConfig.LOG_TO_FILE:
        return None

    LogConfig.LOG_DIR.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        LogConfig.LOG_DIR / "error.log",
        maxBytes=LogConfig.LOG_FILE_MAX_BYTES,
        backupCount=LogConfig.LOG_FILE_BACKUP_COUNT,
    )
    handler.setFormatter(logging.Formatter('%(message)s'))
    handler.setLevel(logging.ERROR)

    return handler


def configure_logging():
    """Configure structured logging for all environments."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, LogConfig.LOG_LEVEL))

    # Clear existing handlers
    root_logger.handlers = []

    # Console handler (always enabled)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, LogConfig.LOG_LEVEL))
    root_logger.addHandler(console_handler)

    file_handler = setup_file_logging()
    if file_handler:
        root_logger.addHandler(file_handler)

    error_handler = setup_error_file_logging()
    if error_handler:
        root_logger.addHandler(error_handler)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_request_context,
        add_environment_context,
    ]

    # JSON renderer for production, colored console for dev
    if LogConfig.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger(__name__)
    logger.info(
        "logging_configured",
        environment=LogConfig.ENVIRONMENT,
        log_level=LogConfig.LOG_LEVEL,
        log_format=LogConfig.LOG_FORMAT,
        file_logging=LogConfig.LOG_TO_FILE,
        log_dir=str(LogConfig.LOG_DIR) if LogConfig.LOG_TO_FILE else None,
    )


def add_request_context(logger, method_name, event_dict):
    """Add request context to log events."""
    request_id = _request_id.get()
    user_id = _user_id.get()

    if request_id:
        event_dict["request_id"] = request_id
    if user_id:
        event_dict["user_id"] = user_id

    return event_dict


def add_environment_context(logger, method_name, event_dict):
    """Add environment info to log events."""
    event_dict["env"] = LogConfig.ENVIRONMENT
    return event_dict


def set_request_context(
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
):
    """Set request context for correlation."""
    if request_id:
        _request_id.set(request_id)
    if user_id:
        _user_id.set(user_id)


def clear_request_context():
    """Clear request context."""
    _request_id.set(None)
    _user_id.set(None)


logger = structlog.get_logger(__name__)


# High-level logging functions

def log_search(
    query: str,
    results_count: int,
    platforms: list[str],
    duration_ms: float,
    product_type: Optional[str] = None,
    message: Optional[str] = None,
):
    """Log a completed search.

    Args:
        query: Raw search query
        results_count: Number of products returned
        platforms: Platforms that were fetched
        duration_ms: End-to-end duration in milliseconds
        product_type: Detected product type, if any
        message: User-facing message when nothing matched
    """
    logger.info(
        "search",
        category=EventCategory.SEARCH.value,
        query=query,
        results_count=results_count,
        platforms=platforms,
        duration_ms=duration_ms,
        product_type=product_type,
        message=message,
    )


def log_scrape(
    source: str,
    url: str,
    success: bool,
    duration_ms: float,
    items_found: int = 0,
    stage: Optional[str] = None,
    error: Optional[str] = None,
):
    """Log a live scraping attempt.

    Args:
        source: Platform name (myntra, zara, etc.)
        url: URL scraped
        success: Whether any products were extracted
        duration_ms: Scrape duration in milliseconds
        items_found: Number of products extracted
        stage: Extraction stage that produced the products
        error: Error message if failed
    """
    level = "info" if success else "warning"
    getattr(logger, level)(
        "scrape",
        category=EventCategory.SCRAPING.value,
        source=source,
        url=url[:100],  # Truncate long URLs
        success=success,
        duration_ms=duration_ms,
        items_found=items_found,
        stage=stage,
        error=error,
    )


def log_retrieval(
    query: str,
    method: str,
    trend_names: list[str],
    min_confidence: float,
    top_k: int,
):
    """Log a trend retrieval.

    Args:
        query: Query the trends were retrieved for
        method: Retrieval path (vector, keyword, fallback)
        trend_names: Names of the retrieved trends
        min_confidence: Confidence threshold applied
        top_k: Maximum trends requested
    """
    logger.info(
        "trend_retrieval",
        category=EventCategory.RETRIEVAL.value,
        query=query,
        method=method,
        count=len(trend_names),
        trends=trend_names,
        min_confidence=min_confidence,
        top_k=top_k,
    )


def log_analysis(
    query: str,
    products_count: int,
    analyzed_count: int,
    llm_used: bool,
    trends_count: int,
    error: Optional[str] = None,
):
    """Log a product analysis pass.

    Args:
        query: Query the products were ranked for
        products_count: Number of products ranked
        analyzed_count: Number of products scored by the LLM
        llm_used: Whether the LLM path produced the ranking
        trends_count: Number of trends given to the LLM
        error: Error that forced the keyword fallback, if any
    """
    level = "info" if error is None else "warning"
    getattr(logger, level)(
        "product_analysis",
        category=EventCategory.ANALYSIS.value,
        query=query,
        products_count=products_count,
        analyzed_count=analyzed_count,
        llm_used=llm_used,
        trends_count=trends_count,
        error=error,
    )


def log_api_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    user_agent: Optional[str] = None,
    error: Optional[str] = None,
):
    """Log API request.

    Args:
        method: HTTP method
        path: Request path
        status_code: Response status code
        duration_ms: Request duration
        user_agent: Client user agent
        error: Error message if failed
    """
    level = "info" if status_code < 400 else "warning" if status_code < 500 else "error"
    getattr(logger, level)(
        "api_request",
        category=EventCategory.SYSTEM.value,
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
        user_agent=user_agent[:100] if user_agent else None,
        error=error,
    )


def log_cache_operation(
    operation: str,  # "hit", "miss", "set", "clear", "sweep"
    key: str,
    hit_rate: Optional[float] = None,
    items: Optional[int] = None,
):
    """Log cache operation.

    Args:
        operation: Type of cache operation
        key: Cache key (or key prefix)
        hit_rate: Current cache hit rate
        items: Number of items affected
    """
    logger.debug(
        "cache_operation",
        category=EventCategory.PERFORMANCE.value,
        operation=operation,
        key=key[:80],
        hit_rate=hit_rate,
        items=items,
    )


def log_error(
    error_type: str,
    message: str,
    stack_trace: Optional[str] = None,
    context: Optional[dict] = None,
):
    """Log an error.

    Args:
        error_type: Type/class of error
        message: Error message
        stack_trace: Full stack trace
        context: Additional context
    """
    logger.error(
        "error",
        category=EventCategory.ERROR.value,
        error_type=error_type,
        message=message,
        stack_trace=stack_trace,
        context=context or {},
    )


class LogTimer:
    """Context manager for timing and logging operations."""

    def __init__(
        self,
        operation: str,
        category: EventCategory = EventCategory.PERFORMANCE,
        **extra_fields,
    ):
        self.operation = operation
        self.category = category
        self.extra_fields = extra_fields
        self.start_time: float = 0
        self.duration_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type is not None:
            logger.error(
                self.operation,
                category=self.category.value,
                duration_ms=self.duration_ms,
                success=False,
                error=str(exc_val),
                **self.extra_fields,
            )
        else:
            logger.info(
                self.operation,
                category=self.category.value,
                duration_ms=self.duration_ms,
                success=True,
                **self.extra_fields,
            )

        return False  # Don't suppress exceptions
