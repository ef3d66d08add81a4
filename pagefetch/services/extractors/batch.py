"""Windowed batch fetching with per-URL failure isolation."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Sequence

from pagefetch.services.extractors.base import BatchResult, ErrorKind, FetchResult
from pagefetch.services.extractors.urls import canonicalize_url

logger = logging.getLogger(__name__)

FetchOne = Callable[[str], Awaitable[FetchResult]]


def count_failures_by_kind(results: Sequence[FetchResult]) -> dict[ErrorKind, int]:
    """Failure counts per ErrorKind, for logging and monitoring."""
    return dict(Counter(r.error_kind for r in results if r.error_kind is not None))


class BatchFetcher:
    """Run a single-URL fetch over many URLs, a fixed-size window at a time.

    Every URL in a window is dispatched concurrently; the next window starts
    only after the whole window settles, which caps the number of pages open
    against the shared browser at ``window_size``.
    """

    def __init__(
        self,
        fetch_one: FetchOne,
        window_size: int = 3,
        pause_seconds: float = 1.0,
    ) -> None:
        if window_size < 1:
            raise ValueError("window_size must be >= 1")
        self.fetch_one = fetch_one
        self.window_size = window_size
        self.pause_seconds = pause_seconds

    async def fetch_all(self, urls: Sequence[str]) -> BatchResult:
        """Fetch every URL; the result has one entry per input, in input order."""
        urls = list(urls)
        results: list[FetchResult | None] = [None] * len(urls)
        logger.info(
            "Batch fetching %d pages (window=%d)", len(urls), self.window_size
        )

        for start in range(0, len(urls), self.window_size):
            window = urls[start : start + self.window_size]
            outcomes = await asyncio.gather(
                *(self._run(url) for url in window), return_exceptions=True
            )
            for offset, (url, outcome) in enumerate(zip(window, outcomes)):
                results[start + offset] = self._settle(url, outcome)

            if start + self.window_size < len(urls):
                await asyncio.sleep(self.pause_seconds)

        final = [r for r in results if r is not None]
        successful = sum(1 for r in final if r.success)
        failures = count_failures_by_kind(final)
        logger.info(
            "Batch fetching completed: %d/%d pages successful %s",
            successful,
            len(urls),
            {kind.value: count for kind, count in failures.items()},
        )
        return final

    async def _run(self, url: str) -> FetchResult:
        return await self.fetch_one(url)

    @staticmethod
    def _settle(url: str, outcome: object) -> FetchResult:
        if isinstance(outcome, FetchResult):
            return outcome
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            # Cancellation and interpreter exits propagate
            raise outcome
        logger.warning("Fetch for %s did not produce a result: %r", url, outcome)
        return FetchResult.failed(
            canonicalize_url(url),
            ErrorKind.CONTENT_ERROR,
            f"Batch fetch failed: {type(outcome).__name__}: {outcome}",
        )
