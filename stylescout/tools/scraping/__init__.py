"""Product fetching from fashion e-commerce platforms."""

from .backend import RenderBackend, RenderedPage, get_render_backend
from .extractors import ProductExtractor, get_product_extractor
from .fetcher import ProductFetcher, get_product_fetcher, reset_product_fetcher
from .platforms import (
    DEFAULT_PLATFORMS,
    FREE_PLATFORMS,
    PREMIUM_PLATFORMS,
    PlatformConfig,
    get_platform_config,
    get_supported_platforms,
)

__all__ = [
    "DEFAULT_PLATFORMS",
    "FREE_PLATFORMS",
    "PREMIUM_PLATFORMS",
    "PlatformConfig",
    "ProductExtractor",
    "ProductFetcher",
    "RenderBackend",
    "RenderedPage",
    "get_platform_config",
    "get_product_extractor",
    "get_product_fetcher",
    "get_render_backend",
    "get_supported_platforms",
    "reset_product_fetcher",
]
