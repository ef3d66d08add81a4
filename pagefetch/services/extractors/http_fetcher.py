"""Secondary backend: plain HTTP fetch with article-extraction libraries.

No browser is involved, so pages that only render client-side usually fail
here; pages that block headless browsers but serve plain clients often
succeed. Text is taken from trafilatura, then newspaper4k, then the DOM
strategist, whichever first passes content validation.
"""

from __future__ import annotations

import logging
from typing import Callable

import httpx
import trafilatura
from newspaper import Article

from pagefetch.services.extractors.base import (
    ErrorKind,
    ExtractionConfig,
    FetchResult,
)
from pagefetch.services.extractors.classifier import classify_error
from pagefetch.services.extractors.detection import (
    classify_http_status,
    describe_http_status,
    detect_anti_bot,
    is_html_content,
)
from pagefetch.services.extractors.exceptions import (
    BlockedError,
    ContentTooLargeError,
    ContentTypeError,
    HttpStatusError,
    NetworkError,
    RateLimitError,
)
from pagefetch.services.extractors.sanitizer import (
    content_rejection_reason,
    sanitize_text,
)
from pagefetch.services.extractors.strategist import ExtractionStrategist
from pagefetch.services.extractors.urls import canonicalize_url, validate_url

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Fetch a URL over HTTP and extract readable text from the HTML."""

    name = "http"

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        strategist: ExtractionStrategist | None = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.strategist = strategist or ExtractionStrategist(
            self.config.min_selector_text_length
        )

    async def fetch(self, url: str) -> FetchResult:
        url = canonicalize_url(url)
        if not validate_url(url):
            return self._failure(url, ErrorKind.CONTENT_ERROR, "Invalid URL format")

        logger.info("HTTP fetch: %s", url)
        try:
            html = await self._fetch_html(url)
            return self._build_result(url, html)
        except (RateLimitError, BlockedError) as e:
            return self._failure(url, ErrorKind.BLOCKED, str(e))
        except HttpStatusError as e:
            # Error statuses are NETWORK whatever their reason phrase says
            return self._failure(url, ErrorKind.NETWORK, str(e))
        except (ContentTypeError, ContentTooLargeError) as e:
            return self._failure(url, ErrorKind.CONTENT_ERROR, str(e))
        except NetworkError as e:
            return self._failure(url, classify_error(e).error_kind, str(e))
        except Exception as e:
            classified = classify_error(e)
            return self._failure(url, classified.error_kind, classified.error_details)

    async def _fetch_html(self, url: str) -> str:
        """Fetch URL content with error handling.

        Raises:
            NetworkError: If the request fails or times out
            HttpStatusError: If the response has an error status
            RateLimitError: If HTTP 429 is received
            ContentTooLargeError: If content exceeds size limits
            ContentTypeError: If the response is not HTML
            BlockedError: If the page is an anti-bot challenge
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.config.http_timeout_seconds,
                follow_redirects=True,
            ) as client:
                response = await client.get(
                    url,
                    headers={"User-Agent": self.config.user_agent},
                )
        except httpx.TimeoutException as e:
            raise NetworkError(f"Timeout fetching {url}: {e}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Connection error fetching {url}: {e}") from e

        status = response.status_code
        kind = classify_http_status(status)
        if kind is ErrorKind.BLOCKED:
            raise RateLimitError(f"Rate limited by {url}: {describe_http_status(status)}")
        if kind is not None:
            raise HttpStatusError(describe_http_status(status))

        content_length = len(response.content)
        max_bytes = self.config.max_content_size_mb * 1024 * 1024
        if content_length > max_bytes:
            raise ContentTooLargeError(
                f"Content size {content_length} exceeds maximum {max_bytes}"
            )

        content_type = response.headers.get("content-type", "")
        if not is_html_content(content_type):
            raise ContentTypeError(
                f"Unexpected content type: {content_type or 'unknown'}"
            )
        indicator = detect_anti_bot(response.text)
        if indicator:
            raise BlockedError(indicator)
        return response.text

    def _build_result(self, url: str, html: str) -> FetchResult:
        extracted = self.strategist.extract(html)
        strategies: tuple[tuple[str, Callable[[], str | None]], ...] = (
            ("trafilatura", lambda: self._try_trafilatura(html, url)),
            ("newspaper4k", lambda: self._try_newspaper4k(html, url)),
            ("dom", lambda: extracted.main_text),
        )

        reasons: list[str] = []
        for method, strategy in strategies:
            content = sanitize_text(strategy(), keep_newlines=method != "dom")
            reason = content_rejection_reason(
                content,
                min_length=self.config.min_content_length,
                min_meaningful_chars=self.config.min_meaningful_chars,
            )
            if reason is None:
                logger.info(
                    "HTTP fetch successful: %s (%d chars, method=%s)",
                    url,
                    len(content),
                    method,
                )
                return FetchResult.succeeded(
                    url,
                    content,
                    title=extracted.title,
                    headings=extracted.headings,
                    meta_description=extracted.meta_description,
                    backend=self.name,
                )
            reasons.append(f"{method}: {reason}")

        return self._failure(
            url,
            ErrorKind.CONTENT_ERROR,
            "No meaningful content found (" + "; ".join(reasons) + ")",
        )

    def _try_trafilatura(self, html: str, url: str) -> str | None:
        """Extract using trafilatura with markdown output."""
        try:
            return trafilatura.extract(
                html,
                url=url,
                output_format="markdown",
                include_links=False,
                include_images=False,
                include_tables=True,
                favor_precision=True,
            )
        except Exception as e:
            logger.warning("trafilatura extraction failed: %s", e)
            return None

    def _try_newspaper4k(self, html: str, url: str) -> str | None:
        """Extract using newspaper4k as fallback."""
        try:
            article = Article(url)
            article.set_html(html)
            article.parse()
            return article.text
        except Exception as e:
            logger.warning("newspaper4k extraction failed: %s", e)
            return None

    def _failure(self, url: str, kind: ErrorKind, details: str) -> FetchResult:
        logger.warning("HTTP fetch failed: %s [%s] - %s", url, kind.value, details)
        return FetchResult.failed(url, kind, details, backend=self.name)
