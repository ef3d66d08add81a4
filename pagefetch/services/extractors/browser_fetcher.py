"""Primary backend: fetch one URL in a real browser page.

Each step that can fail returns a failed FetchResult instead of raising;
exceptions from Playwright itself are classified at the step that raised
them. ``fetch()`` therefore never raises.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pagefetch.services.extractors.base import (
    ErrorKind,
    ExtractionConfig,
    FetchResult,
)
from pagefetch.services.extractors.browser_pool import BrowserSessionPool
from pagefetch.services.extractors.classifier import (
    STAGE_DEFAULT_KINDS,
    FailureStage,
    classify_error,
)
from pagefetch.services.extractors.detection import (
    classify_http_status,
    describe_http_status,
    detect_anti_bot,
    is_html_content,
)
from pagefetch.services.extractors.sanitizer import (
    content_rejection_reason,
    sanitize_text,
)
from pagefetch.services.extractors.strategist import (
    CONTENT_SELECTORS,
    ExtractionStrategist,
)
from pagefetch.services.extractors.urls import canonicalize_url, validate_url

if TYPE_CHECKING:
    from playwright.async_api import Page, Response

logger = logging.getLogger(__name__)

# Selectors whose presence means the page has something worth reading
WAIT_SELECTORS = CONTENT_SELECTORS + ("body",)


class BrowserFetcher:
    """Fetch pages through the shared browser session pool."""

    name = "browser"

    def __init__(
        self,
        pool: BrowserSessionPool,
        config: ExtractionConfig | None = None,
        strategist: ExtractionStrategist | None = None,
    ) -> None:
        self.pool = pool
        self.config = config or pool.config
        self.strategist = strategist or ExtractionStrategist(
            self.config.min_selector_text_length
        )

    async def fetch(self, url: str) -> FetchResult:
        """Fetch ``url`` and return a success or classified failure record."""
        url = canonicalize_url(url)
        if not validate_url(url):
            return self._failure(url, ErrorKind.CONTENT_ERROR, "Invalid URL format")

        logger.info("Browser fetch: %s", url)
        try:
            async with self.pool.new_page() as page:
                return await self._fetch_in_page(page, url)
        except Exception as e:
            # Launch failures, page creation and anything escaping the steps
            classified = classify_error(e)
            return self._failure(url, classified.error_kind, classified.error_details)

    async def _fetch_in_page(self, page: Page, url: str) -> FetchResult:
        page.set_default_timeout(self.config.navigation_timeout_seconds * 1000)

        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.config.navigation_timeout_seconds * 1000,
            )
        except Exception as e:
            classified = classify_error(e, stage=FailureStage.NAVIGATION)
            return self._failure(
                url, classified.error_kind, f"Navigation failed: {classified.error_details}"
            )

        failure = self._check_response(url, response)
        if failure is not None:
            return failure

        selector = await self._wait_for_meaningful_content(page)
        if selector is None:
            return self._failure(
                url,
                STAGE_DEFAULT_KINDS[FailureStage.SELECTOR_NOT_FOUND],
                "No meaningful content selectors found",
            )

        html = await page.content()
        indicator = detect_anti_bot(html)
        if indicator:
            return self._failure(url, ErrorKind.BLOCKED, indicator)

        extracted = self.strategist.extract(html)
        content = sanitize_text(extracted.main_text)
        reason = content_rejection_reason(
            content,
            min_length=self.config.min_content_length,
            min_meaningful_chars=self.config.min_meaningful_chars,
        )
        if reason:
            return self._failure(
                url, ErrorKind.CONTENT_ERROR, f"No meaningful content found ({reason})"
            )

        title = (await page.title()).strip() or extracted.title
        logger.info(
            "Browser fetch successful: %s (%d chars, region=%s)",
            url,
            len(content),
            extracted.matched_selector or "body",
        )
        return FetchResult.succeeded(
            url,
            content,
            title=title,
            headings=extracted.headings,
            meta_description=extracted.meta_description,
            backend=self.name,
        )

    def _check_response(self, url: str, response: Response | None) -> FetchResult | None:
        # goto() returns None for same-document navigations; nothing to check
        if response is None:
            return None

        status = response.status
        kind = classify_http_status(status)
        if kind is not None:
            return self._failure(url, kind, describe_http_status(status))

        content_type = response.headers.get("content-type", "")
        if not is_html_content(content_type):
            return self._failure(
                url,
                ErrorKind.CONTENT_ERROR,
                f"Unexpected content type: {content_type or 'unknown'}",
            )
        return None

    async def _wait_for_meaningful_content(self, page: Page) -> str | None:
        """Return the first content selector present, or None within budget.

        Already-rendered pages are answered by an immediate presence check;
        only pages still building their DOM pay for the per-selector waits.
        """
        for selector in WAIT_SELECTORS:
            if await page.query_selector(selector) is not None:
                return selector

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.content_wait_budget_seconds
        for selector in WAIT_SELECTORS:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            timeout = min(self.config.selector_timeout_seconds, remaining)
            try:
                await page.wait_for_selector(
                    selector, state="attached", timeout=timeout * 1000
                )
                return selector
            except Exception as e:
                logger.debug("Selector %s not found: %s", selector, e)
        return None

    def _failure(self, url: str, kind: ErrorKind, details: str) -> FetchResult:
        logger.warning("Browser fetch failed: %s [%s] - %s", url, kind.value, details)
        return FetchResult.failed(url, kind, details, backend=self.name)
