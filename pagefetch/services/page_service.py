"""Public entry point: fetch one page or a batch of pages.

Callers (queue workers, HTTP controllers) only need ``fetch_page`` and
``fetch_pages``. Neither raises; check ``FetchResult.success`` and, on
failure, ``error_kind`` / ``retryable``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pagefetch.core.config import Settings, settings as default_settings
from pagefetch.services.extractors import (
    BatchFetcher,
    BatchResult,
    BrowserFetcher,
    BrowserSessionPool,
    ExtractionBackend,
    ExtractionConfig,
    FallbackChain,
    FetchResult,
    HttpFetcher,
    ManagedExtractionFetcher,
)

logger = logging.getLogger(__name__)


class PageFetchService:
    """Wire the fetch pipeline together and own its browser pool."""

    def __init__(
        self,
        chain: FallbackChain,
        pool: BrowserSessionPool | None = None,
        window_size: int = 3,
        pause_seconds: float = 1.0,
    ) -> None:
        self.chain = chain
        self.pool = pool
        self.batch_fetcher = BatchFetcher(
            self.chain.fetch_with_fallback,
            window_size=window_size,
            pause_seconds=pause_seconds,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        pool: BrowserSessionPool | None = None,
    ) -> PageFetchService:
        """Build the service from environment configuration.

        Args:
            settings: Settings to use (default: module-level settings)
            pool: Browser pool to share (default: a new pool owned by the service)
        """
        settings = settings or default_settings
        config = ExtractionConfig.from_settings(settings)
        pool = pool or BrowserSessionPool(config)

        backends: list[ExtractionBackend] = [BrowserFetcher(pool, config)]
        if settings.enable_http_backend:
            backends.append(HttpFetcher(config))
        if config.managed_backend_base_url:
            backends.append(
                ManagedExtractionFetcher(
                    config.managed_backend_base_url,
                    api_key=config.managed_backend_api_key,
                    config=config,
                )
            )

        logger.info(
            "Page fetch service configured with backends: %s",
            ", ".join(backend.name for backend in backends),
        )
        return cls(
            FallbackChain(backends),
            pool=pool,
            window_size=config.batch_window_size,
            pause_seconds=config.batch_pause_seconds,
        )

    async def fetch_page(self, url: str) -> FetchResult:
        """Fetch and extract one URL, falling back across backends."""
        return await self.chain.fetch_with_fallback(url)

    async def fetch_pages(self, urls: Sequence[str]) -> BatchResult:
        """Fetch many URLs; one result per URL, in input order."""
        return await self.batch_fetcher.fetch_all(urls)

    def install_signal_handlers(self) -> None:
        """Shut the browser down on SIGINT/SIGTERM. Call inside the event loop."""
        if self.pool is not None:
            self.pool.install_signal_handlers()

    async def close(self) -> None:
        """Release the browser, if one was started."""
        if self.pool is not None:
            await self.pool.shutdown()

    async def __aenter__(self) -> PageFetchService:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - ensures cleanup."""
        await self.close()
