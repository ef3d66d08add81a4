"""Whitespace normalization and garbage-content rejection."""

from __future__ import annotations

import re

# Pages whose text contains any of these are treated as error pages,
# whatever their length. Known to miss localized and redesigned error pages.
ERROR_PAGE_FINGERPRINTS = (
    "page not found",
    "404 error",
    "access denied",
    "forbidden",
    "internal server error",
)

_WHITESPACE_RUN = re.compile(r"\s+")
_HORIZONTAL_WHITESPACE_RUN = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE = re.compile(r" *\n *")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
# Everything that is neither ASCII alphanumeric nor a CJK ideograph
_NOT_MEANINGFUL = re.compile(r"[^a-zA-Z0-9\u4e00-\u9fa5]")


def sanitize_text(text: str | None, *, keep_newlines: bool = False) -> str:
    """Collapse whitespace runs and trim.

    With ``keep_newlines`` (markdown input) only horizontal whitespace is
    collapsed; line breaks survive, with runs of 3+ reduced to 2.
    """
    if not text:
        return ""
    if keep_newlines:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = _HORIZONTAL_WHITESPACE_RUN.sub(" ", text)
        text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    else:
        text = _WHITESPACE_RUN.sub(" ", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


def content_rejection_reason(
    text: str | None,
    *,
    min_length: int = 100,
    min_meaningful_chars: int = 50,
) -> str | None:
    """Return why ``text`` is not usable content, or None if it is."""
    if not text:
        return "no content extracted"
    if len(text) < min_length:
        return f"content too short: {len(text)} chars (minimum: {min_length})"

    meaningful = _NOT_MEANINGFUL.sub("", text)
    if len(meaningful) < min_meaningful_chars:
        return (
            f"too little meaningful text: {len(meaningful)} chars "
            f"(minimum: {min_meaningful_chars})"
        )

    lowered = text.lower()
    for fingerprint in ERROR_PAGE_FINGERPRINTS:
        if fingerprint in lowered:
            return f"error page fingerprint matched: '{fingerprint}'"
    return None


def is_valid_content(
    text: str | None,
    *,
    min_length: int = 100,
    min_meaningful_chars: int = 50,
) -> bool:
    return (
        content_rejection_reason(
            text, min_length=min_length, min_meaningful_chars=min_meaningful_chars
        )
        is None
    )
