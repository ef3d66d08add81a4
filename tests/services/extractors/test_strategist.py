"""Tests for main-content selection."""

from __future__ import annotations

from pagefetch.services.extractors.strategist import (
    ExtractionStrategist,
    markdown_headings,
)


LONG_PARAGRAPH = (
    "This paragraph is long enough to count as real article content, "
    "well beyond the one hundred character threshold used for content regions."
)

ARTICLE_PAGE = f"""
<html>
<head>
<title> Article Title </title>
<meta name="Description" content=" Page summary ">
</head>
<body>
<header><h1>Site Name</h1></header>
<nav><a href="/">Home</a> <a href="/about">About</a></nav>
<article>
<h2>Story Heading</h2>
<p>{LONG_PARAGRAPH}</p>
<script>var tracking = "should not appear";</script>
</article>
<aside>Related links sidebar</aside>
<footer>Copyright footer</footer>
</body>
</html>
"""

SHORT_MAIN_PAGE = f"""
<html><body>
<main><p>Tiny teaser</p></main>
<div class="content"><p>{LONG_PARAGRAPH}</p></div>
</body></html>
"""

NO_REGION_PAGE = """
<html><body>
<nav>Menu</nav>
<div><p>Plain body text without any semantic container.</p></div>
</body></html>
"""


class TestExtract:
    """Test suite for ExtractionStrategist.extract."""

    def test_prefers_semantic_region(self) -> None:
        """Test that article text wins and noise is removed."""
        page = ExtractionStrategist().extract(ARTICLE_PAGE)

        assert page.matched_selector == "article"
        assert LONG_PARAGRAPH in page.main_text
        assert "Story Heading" in page.main_text
        assert "tracking" not in page.main_text
        assert "Copyright" not in page.main_text
        assert "Home" not in page.main_text

    def test_metadata(self) -> None:
        """Test that title, meta description and headings are collected."""
        page = ExtractionStrategist().extract(ARTICLE_PAGE)

        assert page.title == "Article Title"
        assert page.meta_description == "Page summary"
        assert page.headings == ("Site Name", "Story Heading")

    def test_skips_region_below_threshold(self) -> None:
        """Test that a too-short region yields to the next selector."""
        page = ExtractionStrategist().extract(SHORT_MAIN_PAGE)

        assert page.matched_selector == ".content"
        assert page.main_text == LONG_PARAGRAPH

    def test_falls_back_to_body(self) -> None:
        """Test that body text is used when no region qualifies."""
        page = ExtractionStrategist().extract(NO_REGION_PAGE)

        assert page.matched_selector is None
        assert page.main_text == "Plain body text without any semantic container."

    def test_joins_multiple_matches(self) -> None:
        """Test that every element matching the winning selector contributes."""
        html = f"<html><body><article><p>{LONG_PARAGRAPH}</p></article><article><p>Second story.</p></article></body></html>"

        page = ExtractionStrategist().extract(html)

        assert page.main_text == f"{LONG_PARAGRAPH} Second story."

    def test_threshold_is_configurable(self) -> None:
        """Test that a lower threshold lets short regions win."""
        page = ExtractionStrategist(min_selector_text_length=5).extract(SHORT_MAIN_PAGE)

        assert page.matched_selector == "main"
        assert page.main_text == "Tiny teaser"

    def test_empty_document(self) -> None:
        """Test that an empty document yields empty text and no metadata."""
        page = ExtractionStrategist().extract("")

        assert page.main_text == ""
        assert page.title is None
        assert page.meta_description is None
        assert page.headings == ()


class TestExtractFromPayload:
    """Test suite for ExtractionStrategist.extract_from_payload."""

    def test_prefers_fit_markdown(self) -> None:
        """Test that the most structured markdown flavour wins."""
        payload = {
            "markdown": {
                "fit_markdown": "# Fit\n\nFocused content here",
                "raw_markdown": "# Raw\n\nEverything including menus",
            },
            "html": "<p>ignored</p>",
        }

        assert ExtractionStrategist().extract_from_payload(payload) == "# Fit\n\nFocused content here"

    def test_skips_trivial_fields(self) -> None:
        """Test that fields of 10 characters or fewer are skipped."""
        payload = {
            "markdown": {"fit_markdown": "  short   ", "raw_markdown": "Raw markdown body text"},
        }

        assert ExtractionStrategist().extract_from_payload(payload) == "Raw markdown body text"

    def test_markdown_as_plain_string(self) -> None:
        """Test that a markdown string payload is accepted."""
        payload = {"markdown": "Plain markdown string content"}

        assert ExtractionStrategist().extract_from_payload(payload) == "Plain markdown string content"

    def test_extracted_content_before_html(self) -> None:
        """Test that extracted content is used before converting HTML."""
        payload = {"extracted_content": "Structured extraction output", "html": "<p>x</p>"}

        assert ExtractionStrategist().extract_from_payload(payload) == "Structured extraction output"

    def test_falls_back_to_html(self) -> None:
        """Test that cleaned HTML is converted to text as a last resort."""
        payload = {
            "markdown": {"fit_markdown": ""},
            "cleaned_html": "<div><nav>menu</nav><p>Converted from cleaned html</p></div>",
        }

        assert ExtractionStrategist().extract_from_payload(payload) == "Converted from cleaned html"

    def test_nothing_usable(self) -> None:
        """Test that None is returned when every field is trivial."""
        payload = {"markdown": {"fit_markdown": "tiny"}, "html": "   "}

        assert ExtractionStrategist().extract_from_payload(payload) is None


class TestMarkdownHeadings:
    """Test suite for markdown_headings."""

    def test_atx_headings(self) -> None:
        """Test that ATX headings are found in order, closing hashes removed."""
        markdown = "# Title\n\nText\n\n## Section ##\n   ### Deep\n#NotAHeading\n    # code"

        assert markdown_headings(markdown) == ("Title", "Section", "Deep")

    def test_empty(self) -> None:
        """Test that empty input yields no headings."""
        assert markdown_headings(None) == ()
        assert markdown_headings("") == ()
