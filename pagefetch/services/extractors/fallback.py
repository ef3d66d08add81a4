"""Backend fallback chain orchestrating extraction across backends."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from pagefetch.services.extractors.base import (
    ErrorKind,
    ExtractionBackend,
    FetchResult,
)
from pagefetch.services.extractors.classifier import classify_error
from pagefetch.services.extractors.urls import canonicalize_url, validate_url

logger = logging.getLogger(__name__)

BACKEND_TIERS = ("primary", "secondary", "tertiary")


@dataclass(frozen=True)
class ExtractionAttempt:
    """One backend's try at one URL."""

    backend: str
    url: str
    outcome: FetchResult


class FallbackChain:
    """Try backends in priority order until one succeeds.

    Typical order:
    1. Browser automation (Playwright)
    2. Plain HTTP with trafilatura / newspaper4k
    3. Managed extraction service

    When every backend fails the last failure is returned, since later
    backends tend to give the most specific diagnostic.
    """

    def __init__(self, backends: Sequence[ExtractionBackend]) -> None:
        if not backends:
            raise ValueError("FallbackChain needs at least one backend")
        if len(backends) > len(BACKEND_TIERS):
            raise ValueError(
                f"FallbackChain supports at most {len(BACKEND_TIERS)} backends"
            )
        self.backends = tuple(backends)

    async def fetch_with_fallback(self, url: str) -> FetchResult:
        """Fetch ``url`` from the first backend that succeeds. Never raises."""
        canonical = canonicalize_url(url)
        if not validate_url(canonical):
            # Every backend would reject it the same way; skip the round trip
            logger.warning("Rejected invalid URL without fetching: %r", url)
            return FetchResult.failed(
                canonical, ErrorKind.CONTENT_ERROR, "Invalid URL format"
            )

        failures: list[ExtractionAttempt] = []
        for tier, backend in zip(BACKEND_TIERS, self.backends):
            attempt = ExtractionAttempt(
                backend=tier,
                url=canonical,
                outcome=await self._attempt(backend, canonical),
            )
            if attempt.outcome.success:
                if tier != BACKEND_TIERS[0]:
                    logger.info(
                        "Fallback succeeded for %s via %s backend (%s)",
                        canonical,
                        tier,
                        getattr(backend, "name", type(backend).__name__),
                    )
                return attempt.outcome
            logger.info(
                "%s backend failed for %s [%s]",
                tier.capitalize(),
                canonical,
                attempt.outcome.error_kind.value,
            )
            failures.append(attempt)

        # The constructor guarantees at least one backend, hence one failure
        last_failure = failures[-1].outcome
        logger.warning(
            "All %d backends failed for %s; errors: %s",
            len(failures),
            canonical,
            "; ".join(
                f"{f.backend}={f.outcome.error_kind.value}" for f in failures
            ),
        )
        return last_failure

    async def _attempt(self, backend: ExtractionBackend, url: str) -> FetchResult:
        name = getattr(backend, "name", type(backend).__name__)
        try:
            return await backend.fetch(url)
        except Exception as e:
            classified = classify_error(e)
            logger.error("Backend %s raised for %s: %s", name, url, classified.error_details)
            return FetchResult.failed(
                url, classified.error_kind, classified.error_details, backend=name
            )
