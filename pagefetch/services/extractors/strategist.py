"""Main-content selection for DOM documents and markdown payloads."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from bs4 import BeautifulSoup

from pagefetch.services.extractors.base import ExtractedPage

logger = logging.getLogger(__name__)

# Semantic containers first; body text on real sites is mostly boilerplate.
CONTENT_SELECTORS = (
    "main",
    "article",
    '[role="main"]',
    ".content",
    "#content",
    ".post-content",
    ".entry-content",
)

NOISE_SELECTORS = (
    "script",
    "style",
    "noscript",
    "template",
    "svg",
    "iframe",
    "nav",
    "header",
    "footer",
    "aside",
    ".advertisement",
    ".ads",
    ".social-share",
)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

# Markdown-shaped payload fields, most structured first
MARKDOWN_FIELDS = ("fit_markdown", "raw_markdown", "markdown_with_citations")
MIN_PAYLOAD_TEXT_LENGTH = 10

_MARKDOWN_HEADING = re.compile(
    r"^[ ]{0,3}#{1,6}[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$", re.MULTILINE
)


class ExtractionStrategist:
    """Pick the most trustworthy text region of a document."""

    def __init__(self, min_selector_text_length: int = 100) -> None:
        self.min_selector_text_length = min_selector_text_length

    def extract(self, html: str) -> ExtractedPage:
        """Extract main text plus title, headings and meta description.

        Headings are collected before noise removal, so headings inside
        ``<header>`` or ``<nav>`` are still reported.
        """
        soup = BeautifulSoup(html or "", "lxml")

        title = self._title(soup)
        meta_description = self._meta_description(soup)
        headings = tuple(
            text
            for text in (
                el.get_text(" ", strip=True) for el in soup.find_all(HEADING_TAGS)
            )
            if text
        )

        main_text, matched = self._main_text(soup)
        return ExtractedPage(
            main_text=main_text,
            title=title,
            headings=headings,
            meta_description=meta_description,
            matched_selector=matched,
        )

    def html_to_text(self, html: str) -> str:
        """Main-content text of an HTML fragment or document."""
        text, _ = self._main_text(BeautifulSoup(html or "", "lxml"))
        return text

    def extract_from_payload(self, payload: Mapping[str, Any]) -> str | None:
        """Take the first non-trivial text field of a markdown-shaped payload."""
        for label, candidate in self._payload_candidates(payload):
            if candidate and len(candidate.strip()) > MIN_PAYLOAD_TEXT_LENGTH:
                logger.debug("Payload text taken from %s", label)
                return candidate
        return None

    def _payload_candidates(
        self, payload: Mapping[str, Any]
    ) -> Iterator[tuple[str, str | None]]:
        # Generator so the HTML conversions only run when needed
        markdown = payload.get("markdown")
        if isinstance(markdown, Mapping):
            for name in MARKDOWN_FIELDS:
                value = markdown.get(name)
                yield f"markdown.{name}", value if isinstance(value, str) else None
        elif isinstance(markdown, str):
            yield "markdown", markdown

        extracted = payload.get("extracted_content")
        yield "extracted_content", extracted if isinstance(extracted, str) else None

        for name in ("cleaned_html", "html"):
            value = payload.get(name)
            if isinstance(value, str) and value.strip():
                yield name, self.html_to_text(value)

    def _main_text(self, soup: BeautifulSoup) -> tuple[str, str | None]:
        for noise in soup.select(", ".join(NOISE_SELECTORS)):
            noise.decompose()

        for selector in CONTENT_SELECTORS:
            elements = soup.select(selector)
            if not elements:
                continue
            text = " ".join(el.get_text(" ", strip=True) for el in elements).strip()
            if len(text) > self.min_selector_text_length:
                return text, selector

        root = soup.body or soup
        return root.get_text(" ", strip=True), None

    @staticmethod
    def _title(soup: BeautifulSoup) -> str | None:
        if soup.title is None:
            return None
        return soup.title.get_text(strip=True) or None

    @staticmethod
    def _meta_description(soup: BeautifulSoup) -> str | None:
        tag = soup.find(
            "meta", attrs={"name": re.compile(r"^description$", re.IGNORECASE)}
        )
        if tag is None:
            return None
        content = tag.get("content")
        if isinstance(content, list):
            content = " ".join(content)
        return content.strip() if content and content.strip() else None


def markdown_headings(markdown: str | None) -> tuple[str, ...]:
    """ATX heading texts of a markdown document, in order."""
    if not markdown:
        return ()
    return tuple(match.group(1) for match in _MARKDOWN_HEADING.finditer(markdown))
