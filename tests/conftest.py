"""Shared pytest fixtures for the fetch pipeline tests.

The browser fakes below stand in for Playwright so the browser backend and
the service can be exercised without a Chromium binary. Pages are routed by
URL; an unrouted URL fails navigation the way an unresolvable host does.

Usage in test files:
    async def test_something(make_pool, fast_config):
        pool = make_pool({"https://example.com/": {"html": ARTICLE_HTML}})
        fetcher = BrowserFetcher(pool, fast_config)
        ...
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable

import pytest
from bs4 import BeautifulSoup

from pagefetch.services.extractors.base import ExtractionConfig


ARTICLE_HTML = """
<!DOCTYPE html>
<html>
<head>
<title>Test Article</title>
<meta name="description" content="A short summary of the test article.">
</head>
<body>
<header><h1>Site Banner</h1></header>
<nav>Navigation menu that should be ignored</nav>
<main>
<h2>Main Heading</h2>
<p>This is a substantial test article with enough content to pass the minimum length requirement.</p>
<p>Second paragraph with more content for thorough testing of the extraction pipeline.</p>
<p>Third paragraph adds even more text so that any reasonable threshold is exceeded.</p>
</main>
<footer>Footer content that should also be ignored</footer>
</body>
</html>
"""


# ------------------------------------------------------------------
# Playwright fakes
# ------------------------------------------------------------------


class FakeResponse:
    """Navigation response exposing the two fields the fetcher reads."""

    def __init__(
        self, status: int = 200, content_type: str | None = "text/html; charset=utf-8"
    ) -> None:
        self.status = status
        self.headers = {"content-type": content_type} if content_type else {}


class FakePage:
    """Page whose document is chosen by the URL it navigates to.

    Route options:
        html: document served after navigation
        title: value of ``page.title()`` (default: empty)
        status / content_type: navigation response fields
        no_response: ``goto`` returns None
        error: exception raised by ``goto``
        late_render: content is only found by ``wait_for_selector``
    """

    def __init__(self, pool: FakeBrowserPool) -> None:
        self.pool = pool
        self.route: dict[str, Any] = {}
        self.default_timeout: float | None = None
        self.goto_kwargs: dict[str, Any] = {}
        self.closed = False

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    async def goto(self, url: str, **kwargs: Any) -> FakeResponse | None:
        self.pool.navigations.append(url)
        self.goto_kwargs = kwargs
        if url not in self.pool.routes:
            raise Exception(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.route = self.pool.routes[url]
        if "error" in self.route:
            raise self.route["error"]
        if self.route.get("no_response"):
            return None
        return FakeResponse(
            self.route.get("status", 200),
            self.route.get("content_type", "text/html; charset=utf-8"),
        )

    def _has(self, selector: str) -> bool:
        soup = BeautifulSoup(self.route.get("html", ""), "lxml")
        return soup.select_one(selector) is not None

    async def query_selector(self, selector: str) -> object | None:
        if self.route.get("late_render"):
            return None
        return object() if self._has(selector) else None

    async def wait_for_selector(self, selector: str, **kwargs: Any) -> object:
        if self._has(selector):
            return object()
        raise TimeoutError(f"Timeout {kwargs.get('timeout')}ms exceeded waiting for {selector}")

    async def content(self) -> str:
        return self.route.get("html", "")

    async def title(self) -> str:
        return self.route.get("title", "")

    async def close(self) -> None:
        self.closed = True


class FakeBrowserPool:
    """Drop-in for BrowserSessionPool that records pages and navigations."""

    def __init__(
        self,
        routes: dict[str, dict[str, Any]] | None = None,
        config: ExtractionConfig | None = None,
        launch_error: Exception | None = None,
    ) -> None:
        self.routes = routes or {}
        self.config = config or ExtractionConfig()
        self.launch_error = launch_error
        self.pages: list[FakePage] = []
        self.navigations: list[str] = []
        self.shutdown_calls = 0

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[FakePage]:
        if self.launch_error is not None:
            raise self.launch_error
        page = FakePage(self)
        self.pages.append(page)
        try:
            yield page
        finally:
            await page.close()

    def install_signal_handlers(self) -> None:
        pass

    async def shutdown(self) -> None:
        self.shutdown_calls += 1


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture()
def fast_config() -> ExtractionConfig:
    """Config with waits short enough for unit tests."""
    return ExtractionConfig(
        navigation_timeout_seconds=5.0,
        selector_timeout_seconds=0.01,
        content_wait_budget_seconds=0.1,
        batch_pause_seconds=0.0,
    )


@pytest.fixture()
def make_pool(fast_config: ExtractionConfig) -> Callable[..., FakeBrowserPool]:
    """Return a factory for FakeBrowserPool instances."""

    def _make(
        routes: dict[str, dict[str, Any]] | None = None,
        launch_error: Exception | None = None,
    ) -> FakeBrowserPool:
        return FakeBrowserPool(routes, fast_config, launch_error)

    return _make


@pytest.fixture()
def article_html() -> str:
    return ARTICLE_HTML
