"""Shared Playwright browser for all page fetches in a process.

Launching Chromium takes seconds while opening a page takes milliseconds,
so one browser is started lazily and every fetch gets its own page in it.
The browser is shut down once, on ``shutdown()`` or a termination signal.

Usage:
    async with BrowserSessionPool(config) as pool:
        async with pool.new_page() as page:
            await page.goto("https://example.com")

Note: Playwright browsers must be installed separately:
    playwright install chromium
"""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from pagefetch.services.extractors.base import ExtractionConfig
from pagefetch.services.extractors.exceptions import BrowserLaunchError

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright

logger = logging.getLogger(__name__)


class BrowserSessionPool:
    """Own one long-lived browser and hand out isolated pages.

    Attributes:
        config: Extraction configuration (headless mode, user agent, etc.)
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()
        self._browser: Browser | None = None
        self._playwright: Playwright | None = None
        self._lock = asyncio.Lock()
        self._shutdown_task: asyncio.Task | None = None

    @property
    def is_started(self) -> bool:
        return self._browser is not None

    async def acquire(self) -> Browser:
        """Return the shared browser, launching it on first use.

        Raises:
            BrowserLaunchError: If the browser fails to launch.
        """
        if self._browser is not None:
            return self._browser

        async with self._lock:
            # Another task may have launched it while we waited
            if self._browser is not None:
                return self._browser
            try:
                # Import here to avoid loading Playwright until needed
                from playwright.async_api import async_playwright

                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.playwright_headless,
                    args=list(self.config.browser_args),
                    handle_sigint=False,
                    handle_sigterm=False,
                    handle_sighup=False,
                )
                logger.info(
                    "Playwright browser launched (headless=%s)",
                    self.config.playwright_headless,
                )
            except Exception as e:
                logger.error("Failed to launch Playwright browser: %s", e)
                await self._stop_playwright()
                raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

        return self._browser

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[Page]:
        """Open an isolated page in the shared browser, closing it on exit."""
        browser = await self.acquire()
        page = await browser.new_page(user_agent=self.config.user_agent)
        try:
            yield page
        finally:
            try:
                await page.close()
            except Exception as e:
                logger.warning("Failed to close page: %s", e)

    async def shutdown(self) -> None:
        """Close browser and stop Playwright. Safe to call multiple times."""
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                    logger.info("Playwright browser closed")
                except Exception as e:
                    logger.warning("Error closing browser: %s", e)
                self._browser = None
            await self._stop_playwright()

    async def _stop_playwright(self) -> None:
        if self._playwright is not None:
            try:
                await self._playwright.stop()
                logger.debug("Playwright stopped")
            except Exception as e:
                logger.warning("Error stopping Playwright: %s", e)
            self._playwright = None

    def install_signal_handlers(
        self, signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)
    ) -> None:
        """Shut the browser down when the process receives a termination signal.

        Must be called from within the running event loop. Platforms without
        ``loop.add_signal_handler`` support are skipped with a warning.
        """
        loop = asyncio.get_running_loop()
        for sig in signals:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError) as e:
                logger.warning("Cannot install handler for %s: %s", sig.name, e)

    def _on_signal(self, sig: signal.Signals) -> None:
        if self._shutdown_task is not None:
            return
        logger.info("%s received, shutting down browser", sig.name)
        self._shutdown_task = asyncio.get_running_loop().create_task(self.shutdown())

    async def __aenter__(self) -> BrowserSessionPool:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - ensures cleanup."""
        await self.shutdown()
