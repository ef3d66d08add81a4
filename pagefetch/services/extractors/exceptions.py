"""Exception hierarchy for content extraction.

These are raised inside backends only. Every backend converts them into a
failed FetchResult before returning, so none of them crosses the public
fetch operations.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base exception for all extraction errors."""

    pass


class NetworkError(ExtractionError):
    """Raised for network-related failures (connection, DNS, timeouts)."""

    pass


class HttpStatusError(NetworkError):
    """Raised when the server answers with an error status (>= 400, except 429)."""

    pass


class ContentTypeError(ExtractionError):
    """Raised when the response is not an HTML document."""

    pass


class RateLimitError(ExtractionError):
    """Raised when HTTP 429 is received."""

    pass


class BlockedError(ExtractionError):
    """Raised when a page shows a CAPTCHA or verification wall."""

    pass


class ContentTooLargeError(ExtractionError):
    """Raised when content exceeds size limits."""

    pass


class BrowserLaunchError(ExtractionError):
    """Raised when the shared browser process cannot be started."""

    pass
