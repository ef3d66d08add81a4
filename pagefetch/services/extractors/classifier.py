"""Map raised failures onto the closed ErrorKind taxonomy.

Decision order, first match wins:

0. HttpStatusError (an error status, e.g. "HTTP 504: Gateway Timeout") -> NETWORK
1. timeout by exception type, or "timeout" in the message -> TIMEOUT
2. BlockedError / RateLimitError -> BLOCKED
3. network exception types, or low-level network markers
   (net::ERR_, connection, DNS, SSL) -> NETWORK
4. block markers (blocked, forbidden, captcha, rate limit) -> BLOCKED
5. anything else -> the default kind of the fetch stage that failed
   (NAVIGATION -> NETWORK, SELECTOR_NOT_FOUND -> CONTENT_ERROR),
   CONTENT_ERROR when no stage is given
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass

import httpx

from pagefetch.services.extractors.base import ErrorKind
from pagefetch.services.extractors.exceptions import (
    BlockedError,
    BrowserLaunchError,
    HttpStatusError,
    NetworkError,
    RateLimitError,
)

NETWORK_MARKERS = ("net::err_", "connection", "dns", "ssl")
BLOCKED_MARKERS = ("blocked", "forbidden", "captcha", "rate limit")

_TIMEOUT_TYPES = (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)
_NETWORK_TYPES = (NetworkError, BrowserLaunchError, httpx.TransportError)
_BLOCKED_TYPES = (BlockedError, RateLimitError)


class FailureStage(str, enum.Enum):
    """Browser fetch step a failure was raised in."""

    NAVIGATION = "NAVIGATION"
    SELECTOR_NOT_FOUND = "SELECTOR_NOT_FOUND"


# Kind for a failure nothing else recognizes, by the stage it came from
STAGE_DEFAULT_KINDS: dict[FailureStage, ErrorKind] = {
    FailureStage.NAVIGATION: ErrorKind.NETWORK,
    FailureStage.SELECTOR_NOT_FOUND: ErrorKind.CONTENT_ERROR,
}


@dataclass(frozen=True)
class ClassifiedError:
    error_kind: ErrorKind
    error_details: str


def _message_of(error: object) -> str:
    try:
        message = str(error)
    except Exception:
        message = ""
    return message or type(error).__name__


def _is_timeout_type(error: object) -> bool:
    # Playwright's TimeoutError does not subclass the builtin one
    return isinstance(error, _TIMEOUT_TYPES) or any(
        cls.__name__ == "TimeoutError" for cls in type(error).__mro__
    )


def classify_error(
    error: object, stage: FailureStage | None = None
) -> ClassifiedError:
    """Classify ``error`` (usually an exception). Never raises.

    Args:
        error: Exception or message to classify
        stage: Fetch stage the error was raised in, if known
    """
    message = _message_of(error)
    lowered = message.lower()
    details = f"{type(error).__name__}: {message}"

    if isinstance(error, HttpStatusError):
        kind = ErrorKind.NETWORK
    elif _is_timeout_type(error) or "timeout" in lowered:
        kind = ErrorKind.TIMEOUT
    elif isinstance(error, _BLOCKED_TYPES):
        kind = ErrorKind.BLOCKED
    elif isinstance(error, _NETWORK_TYPES) or any(m in lowered for m in NETWORK_MARKERS):
        kind = ErrorKind.NETWORK
    elif any(m in lowered for m in BLOCKED_MARKERS):
        kind = ErrorKind.BLOCKED
    else:
        kind = STAGE_DEFAULT_KINDS.get(stage, ErrorKind.CONTENT_ERROR)

    return ClassifiedError(error_kind=kind, error_details=details)
