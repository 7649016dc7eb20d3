"""Tools module for the interview assistant: fetching, conversion, throttling, input checks."""
from .converters import ToolRegistry, build_default_registry
from .fetcher import DocumentFetcher, resolve_share_link
from .normalizer import ContentNormalizer, normalize
from .rate_limiter import RequestThrottle
from .security import sanitize_message, validate_message, validate_url

__all__ = [
    "ToolRegistry",
    "build_default_registry",
    "DocumentFetcher",
    "resolve_share_link",
    "ContentNormalizer",
    "normalize",
    "RequestThrottle",
    "sanitize_message",
    "validate_message",
    "validate_url",
]
