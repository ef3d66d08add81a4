"""Base types shared by every extraction backend."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pagefetch.core.config import Settings


class ErrorKind(str, enum.Enum):
    """Closed taxonomy of fetch failures."""

    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    BLOCKED = "BLOCKED"
    CONTENT_ERROR = "CONTENT_ERROR"

    @property
    def retryable(self) -> bool:
        """Whether resubmitting the same URL is likely to help."""
        return _RETRYABLE[self]

    @property
    def suggested_action(self) -> str:
        """Remediation hint for operators."""
        return _SUGGESTED_ACTIONS[self]


_RETRYABLE: dict[ErrorKind, bool] = {
    ErrorKind.NETWORK: True,
    ErrorKind.TIMEOUT: True,
    ErrorKind.BLOCKED: False,
    ErrorKind.CONTENT_ERROR: False,
}

_SUGGESTED_ACTIONS: dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "Check that the URL is valid and the site is reachable",
    ErrorKind.TIMEOUT: "Increase the timeout or check network connectivity",
    ErrorKind.BLOCKED: "The site blocks automated access; review the page manually",
    ErrorKind.CONTENT_ERROR: (
        "The page returned unexpected or unusable content; "
        "its structure may have changed"
    ),
}


@dataclass(frozen=True)
class FetchResult:
    """Uniform, immutable outcome of one fetch attempt.

    Exactly one of ``content`` and ``error_kind`` is populated. Use the
    ``succeeded`` / ``failed`` factories rather than the constructor.
    """

    url: str
    success: bool
    content: str | None = None
    title: str | None = None
    headings: tuple[str, ...] = ()
    meta_description: str | None = None
    error_kind: ErrorKind | None = None
    error_details: str | None = None
    backend: str | None = None

    def __post_init__(self) -> None:
        has_content = self.content is not None
        has_error = self.error_kind is not None
        if has_content == has_error:
            raise ValueError(
                "FetchResult requires exactly one of content or error_kind"
            )
        if self.success != has_content:
            raise ValueError("FetchResult.success must match content presence")
        if not isinstance(self.headings, tuple):
            object.__setattr__(self, "headings", tuple(self.headings))

    @classmethod
    def succeeded(
        cls,
        url: str,
        content: str,
        *,
        title: str | None = None,
        headings: tuple[str, ...] | list[str] = (),
        meta_description: str | None = None,
        backend: str | None = None,
    ) -> FetchResult:
        return cls(
            url=url,
            success=True,
            content=content,
            title=title,
            headings=tuple(headings),
            meta_description=meta_description,
            backend=backend,
        )

    @classmethod
    def failed(
        cls,
        url: str,
        error_kind: ErrorKind,
        error_details: str | None = None,
        *,
        backend: str | None = None,
    ) -> FetchResult:
        return cls(
            url=url,
            success=False,
            error_kind=error_kind,
            error_details=error_details,
            backend=backend,
        )

    @property
    def retryable(self) -> bool:
        return self.error_kind.retryable if self.error_kind else False

    @property
    def suggested_action(self) -> str | None:
        return self.error_kind.suggested_action if self.error_kind else None

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping for callers that persist or serialize results."""
        data = asdict(self)
        data["headings"] = list(self.headings)
        data["error_kind"] = self.error_kind.value if self.error_kind else None
        data["retryable"] = self.retryable
        return data


BatchResult = list[FetchResult]


@dataclass(frozen=True)
class ExtractedPage:
    """Text and structural metadata pulled out of one document."""

    main_text: str
    title: str | None = None
    headings: tuple[str, ...] = ()
    meta_description: str | None = None
    matched_selector: str | None = None  # None when the whole document was used


@dataclass(frozen=True)
class ExtractionConfig:
    """Configuration shared by the fetch pipeline components."""

    navigation_timeout_seconds: float = 45.0
    selector_timeout_seconds: float = 2.0
    content_wait_budget_seconds: float = 10.0
    http_timeout_seconds: float = 30.0
    max_content_size_mb: int = 20
    min_content_length: int = 100  # Minimum chars for valid extraction
    min_selector_text_length: int = 100  # Minimum chars for a content region to win
    min_meaningful_chars: int = 50
    playwright_headless: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    browser_args: tuple[str, ...] = (
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-accelerated-2d-canvas",
        "--no-first-run",
        "--no-zygote",
        "--disable-gpu",
    )
    batch_window_size: int = 3
    batch_pause_seconds: float = 1.0
    managed_backend_base_url: str | None = None
    managed_backend_api_key: str | None = None
    managed_backend_timeout_seconds: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings) -> ExtractionConfig:
        """Snapshot the relevant settings into an immutable config."""
        return cls(
            navigation_timeout_seconds=settings.navigation_timeout_seconds,
            selector_timeout_seconds=settings.selector_timeout_seconds,
            content_wait_budget_seconds=settings.content_wait_budget_seconds,
            http_timeout_seconds=settings.http_timeout_seconds,
            max_content_size_mb=settings.max_content_size_mb,
            min_content_length=settings.min_content_length,
            min_meaningful_chars=settings.min_meaningful_chars,
            playwright_headless=settings.playwright_headless,
            user_agent=settings.user_agent,
            batch_window_size=settings.batch_window_size,
            batch_pause_seconds=settings.batch_pause_seconds,
            managed_backend_base_url=settings.managed_backend_base_url,
            managed_backend_api_key=settings.managed_backend_api_key,
            managed_backend_timeout_seconds=settings.managed_backend_timeout_seconds,
        )


class ExtractionBackend(Protocol):
    """Protocol for one strategy that turns a URL into a FetchResult."""

    name: str

    async def fetch(self, url: str) -> FetchResult:
        """Fetch and extract a single URL.

        Implementations must not raise; every failure is returned as a
        FetchResult with ``success=False``.
        """
        ...
