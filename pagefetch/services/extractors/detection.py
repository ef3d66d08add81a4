"""Response and DOM checks for non-HTML payloads and anti-bot walls."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from pagefetch.services.extractors.base import ErrorKind

logger = logging.getLogger(__name__)

HTTP_STATUS_REASONS: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    408: "Request Timeout",
    410: "Gone",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}

# Ordered (selector, description) pairs. Sites change their challenge pages
# faster than this list, so a miss here is expected now and then.
ANTI_BOT_INDICATORS: tuple[tuple[str, str], ...] = (
    # Cloudflare
    (".cf-browser-verification", "Cloudflare browser verification detected"),
    ("#cf-content", "Cloudflare protection detected"),
    ("#challenge-form", "Cloudflare challenge form detected"),
    ("#cf-challenge-running", "Cloudflare challenge detected"),
    # CAPTCHA widgets
    (".g-recaptcha", "reCAPTCHA detected"),
    (".h-captcha", "hCaptcha detected"),
    ("[data-sitekey]", "CAPTCHA detected"),
    # Bot-management vendors
    ("#px-captcha", "PerimeterX challenge detected"),
    ('iframe[src*="captcha-delivery.com"]', "DataDome challenge detected"),
)


def is_html_content(content_type: str | None) -> bool:
    """Check if a Content-Type header value indicates HTML."""
    ct_lower = (content_type or "").lower()
    return "text/html" in ct_lower or "application/xhtml" in ct_lower


def http_status_reason(status: int) -> str:
    return HTTP_STATUS_REASONS.get(status, "Unknown Error")


def classify_http_status(status: int | None) -> ErrorKind | None:
    """Map an HTTP status to a failure kind, or None when it is not an error."""
    if status is None or status < 400:
        return None
    if status == 429:
        return ErrorKind.BLOCKED
    return ErrorKind.NETWORK


def describe_http_status(status: int) -> str:
    return f"HTTP {status}: {http_status_reason(status)}"


def detect_anti_bot(document: BeautifulSoup | str) -> str | None:
    """Return the description of the first anti-bot indicator present."""
    soup = (
        document
        if isinstance(document, BeautifulSoup)
        else BeautifulSoup(document or "", "lxml")
    )
    for selector, description in ANTI_BOT_INDICATORS:
        if soup.select_one(selector) is not None:
            logger.debug("Anti-bot indicator matched: %s", selector)
            return description
    return None
