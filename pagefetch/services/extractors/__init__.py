"""Page fetch and content extraction pipeline.

This package turns URLs into uniform FetchResult records:
1. BrowserFetcher (primary) - Playwright page in a shared browser
2. HttpFetcher (secondary) - httpx + trafilatura/newspaper4k
3. ManagedExtractionFetcher (tertiary) - Crawl4AI-compatible service

FallbackChain tries the backends in that order for one URL and
BatchFetcher runs the chain over many URLs in bounded windows. No public
operation raises; failures come back classified into ErrorKind.

Usage:
    from pagefetch.services.page_service import PageFetchService

    async with PageFetchService.from_settings() as service:
        result = await service.fetch_page("https://example.com")
        print(result.content if result.success else result.error_kind)

Note: Playwright browsers must be installed separately:
    playwright install chromium
"""

from pagefetch.services.extractors.base import (
    BatchResult,
    ErrorKind,
    ExtractedPage,
    ExtractionBackend,
    ExtractionConfig,
    FetchResult,
)
from pagefetch.services.extractors.batch import BatchFetcher, count_failures_by_kind
from pagefetch.services.extractors.browser_fetcher import BrowserFetcher
from pagefetch.services.extractors.browser_pool import BrowserSessionPool
from pagefetch.services.extractors.classifier import (
    ClassifiedError,
    FailureStage,
    classify_error,
)
from pagefetch.services.extractors.exceptions import (
    BlockedError,
    BrowserLaunchError,
    ContentTooLargeError,
    ContentTypeError,
    ExtractionError,
    HttpStatusError,
    NetworkError,
    RateLimitError,
)
from pagefetch.services.extractors.fallback import ExtractionAttempt, FallbackChain
from pagefetch.services.extractors.http_fetcher import HttpFetcher
from pagefetch.services.extractors.managed_fetcher import ManagedExtractionFetcher
from pagefetch.services.extractors.sanitizer import is_valid_content, sanitize_text
from pagefetch.services.extractors.strategist import ExtractionStrategist
from pagefetch.services.extractors.urls import canonicalize_url, validate_url

__all__ = [
    # Data model
    "BatchResult",
    "ErrorKind",
    "ExtractedPage",
    "ExtractionBackend",
    "ExtractionConfig",
    "FetchResult",
    # Pipeline components
    "canonicalize_url",
    "validate_url",
    "ExtractionStrategist",
    "sanitize_text",
    "is_valid_content",
    "ClassifiedError",
    "FailureStage",
    "classify_error",
    # Backends and orchestration
    "BrowserSessionPool",
    "BrowserFetcher",
    "HttpFetcher",
    "ManagedExtractionFetcher",
    "ExtractionAttempt",
    "FallbackChain",
    "BatchFetcher",
    "count_failures_by_kind",
    # Exceptions
    "ExtractionError",
    "NetworkError",
    "HttpStatusError",
    "ContentTypeError",
    "RateLimitError",
    "BlockedError",
    "ContentTooLargeError",
    "BrowserLaunchError",
]
