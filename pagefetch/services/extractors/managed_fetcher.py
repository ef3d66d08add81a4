"""Tertiary backend: a Crawl4AI-compatible managed extraction service.

The service renders the page itself and answers with markdown in several
flavours plus the HTML it saw; the strategist picks the most structured
non-trivial field.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from pagefetch.services.extractors.base import (
    ErrorKind,
    ExtractionConfig,
    FetchResult,
)
from pagefetch.services.extractors.classifier import classify_error
from pagefetch.services.extractors.detection import detect_anti_bot
from pagefetch.services.extractors.sanitizer import (
    content_rejection_reason,
    sanitize_text,
)
from pagefetch.services.extractors.strategist import (
    ExtractionStrategist,
    markdown_headings,
)
from pagefetch.services.extractors.urls import canonicalize_url, validate_url

logger = logging.getLogger(__name__)

CRAWL_PRIORITY = 10


class ManagedExtractionFetcher:
    """Delegate fetching and rendering to an external extraction service."""

    name = "managed"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        config: ExtractionConfig | None = None,
        strategist: ExtractionStrategist | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.config = config or ExtractionConfig()
        self.strategist = strategist or ExtractionStrategist(
            self.config.min_selector_text_length
        )

    async def fetch(self, url: str) -> FetchResult:
        url = canonicalize_url(url)
        if not validate_url(url):
            return self._failure(url, ErrorKind.CONTENT_ERROR, "Invalid URL format")

        logger.info("Managed extraction fetch: %s", url)
        try:
            crawl_result = await self._crawl(url)
        except httpx.HTTPStatusError as e:
            # The extraction service itself failed, not the target page
            return self._failure(
                url,
                ErrorKind.NETWORK,
                f"Extraction service returned HTTP {e.response.status_code}",
            )
        except Exception as e:
            classified = classify_error(e)
            return self._failure(url, classified.error_kind, classified.error_details)

        if not crawl_result:
            return self._failure(
                url, ErrorKind.CONTENT_ERROR, "Extraction service returned no results"
            )
        if not crawl_result.get("success"):
            message = crawl_result.get("error_message") or "Crawl reported failure"
            classified = classify_error(message)
            return self._failure(url, classified.error_kind, message)

        return self._build_result(url, crawl_result)

    async def _crawl(self, url: str) -> dict[str, Any] | None:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(
            timeout=self.config.managed_backend_timeout_seconds,
        ) as client:
            response = await client.post(
                f"{self.base_url}/crawl",
                json={"urls": [url], "priority": CRAWL_PRIORITY},
                headers=headers,
            )
            response.raise_for_status()
            payload = response.json()

        results = payload.get("results") if isinstance(payload, dict) else None
        if not results or not isinstance(results[0], dict):
            return None
        return results[0]

    def _build_result(self, url: str, crawl_result: dict[str, Any]) -> FetchResult:
        html = crawl_result.get("html")
        if isinstance(html, str) and html:
            indicator = detect_anti_bot(html)
            if indicator:
                return self._failure(url, ErrorKind.BLOCKED, indicator)

        raw_text = self.strategist.extract_from_payload(crawl_result)
        content = sanitize_text(raw_text, keep_newlines=True)
        reason = content_rejection_reason(
            content,
            min_length=self.config.min_content_length,
            min_meaningful_chars=self.config.min_meaningful_chars,
        )
        if reason:
            return self._failure(
                url, ErrorKind.CONTENT_ERROR, f"No meaningful content found ({reason})"
            )

        metadata = crawl_result.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        logger.info("Managed extraction successful: %s (%d chars)", url, len(content))
        return FetchResult.succeeded(
            url,
            content,
            title=metadata.get("title") or None,
            headings=markdown_headings(content),
            meta_description=metadata.get("description") or None,
            backend=self.name,
        )

    def _failure(self, url: str, kind: ErrorKind, details: str) -> FetchResult:
        logger.warning(
            "Managed extraction failed: %s [%s] - %s", url, kind.value, details
        )
        return FetchResult.failed(url, kind, details, backend=self.name)
