"""Tests for base extraction types."""

from __future__ import annotations

import dataclasses

import pytest

from pagefetch.core.config import Settings
from pagefetch.services.extractors.base import (
    ErrorKind,
    ExtractionConfig,
    FetchResult,
)


class TestErrorKind:
    """Test suite for the ErrorKind taxonomy."""

    def test_closed_set_of_kinds(self) -> None:
        """Test that exactly four kinds exist."""
        assert {kind.value for kind in ErrorKind} == {
            "NETWORK",
            "TIMEOUT",
            "BLOCKED",
            "CONTENT_ERROR",
        }

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ErrorKind.NETWORK, True),
            (ErrorKind.TIMEOUT, True),
            (ErrorKind.BLOCKED, False),
            (ErrorKind.CONTENT_ERROR, False),
        ],
    )
    def test_retryable(self, kind: ErrorKind, expected: bool) -> None:
        """Test that only transient kinds are retryable."""
        assert kind.retryable is expected

    def test_every_kind_has_suggested_action(self) -> None:
        """Test that every kind carries a non-empty remediation hint."""
        for kind in ErrorKind:
            assert kind.suggested_action


class TestFetchResult:
    """Test suite for the FetchResult record."""

    def test_succeeded_factory(self) -> None:
        """Test that a success carries content and no error."""
        result = FetchResult.succeeded(
            "https://example.com/",
            "Body text",
            title="Title",
            headings=["One", "Two"],
            backend="browser",
        )

        assert result.success is True
        assert result.content == "Body text"
        assert result.error_kind is None
        assert result.headings == ("One", "Two")
        assert result.retryable is False
        assert result.suggested_action is None

    def test_failed_factory(self) -> None:
        """Test that a failure carries an error kind and no content."""
        result = FetchResult.failed(
            "https://example.com/", ErrorKind.TIMEOUT, "TimeoutError: slow"
        )

        assert result.success is False
        assert result.content is None
        assert result.error_kind is ErrorKind.TIMEOUT
        assert result.error_details == "TimeoutError: slow"
        assert result.retryable is True
        assert result.suggested_action == ErrorKind.TIMEOUT.suggested_action

    def test_rejects_both_content_and_error(self) -> None:
        """Test that content and error_kind cannot both be set."""
        with pytest.raises(ValueError):
            FetchResult(
                url="https://example.com/",
                success=True,
                content="text",
                error_kind=ErrorKind.NETWORK,
            )

    def test_rejects_neither_content_nor_error(self) -> None:
        """Test that one of content or error_kind is required."""
        with pytest.raises(ValueError):
            FetchResult(url="https://example.com/", success=False)

    def test_rejects_success_flag_mismatch(self) -> None:
        """Test that success must agree with content presence."""
        with pytest.raises(ValueError):
            FetchResult(url="https://example.com/", success=False, content="text")

    def test_is_frozen(self) -> None:
        """Test that results are immutable."""
        result = FetchResult.succeeded("https://example.com/", "text")

        with pytest.raises(dataclasses.FrozenInstanceError):
            result.content = "changed"  # type: ignore[misc]

    def test_to_dict(self) -> None:
        """Test that to_dict produces plain serializable values."""
        result = FetchResult.failed(
            "https://example.com/", ErrorKind.BLOCKED, "captcha", backend="http"
        )

        data = result.to_dict()

        assert data["url"] == "https://example.com/"
        assert data["success"] is False
        assert data["error_kind"] == "BLOCKED"
        assert data["headings"] == []
        assert data["backend"] == "http"
        assert data["retryable"] is False


class TestExtractionConfig:
    """Test suite for ExtractionConfig dataclass."""

    def test_default_values(self) -> None:
        """Test that default values are set correctly."""
        config = ExtractionConfig()

        assert config.navigation_timeout_seconds == 45.0
        assert config.selector_timeout_seconds == 2.0
        assert config.min_content_length == 100
        assert config.min_meaningful_chars == 50
        assert config.batch_window_size == 3
        assert config.batch_pause_seconds == 1.0
        assert config.playwright_headless is True
        assert "Chrome" in config.user_agent
        assert "--no-sandbox" in config.browser_args

    def test_is_frozen(self) -> None:
        """Test that config is immutable (frozen dataclass)."""
        config = ExtractionConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.batch_window_size = 10  # type: ignore[misc]

    def test_from_settings(self) -> None:
        """Test that settings values are carried into the config."""
        settings = Settings(
            _env_file=None,
            navigation_timeout_seconds=20,
            batch_window_size=5,
            managed_backend_base_url="http://crawler:11235/",
            managed_backend_api_key="secret",
        )

        config = ExtractionConfig.from_settings(settings)

        assert config.navigation_timeout_seconds == 20
        assert config.batch_window_size == 5
        assert config.managed_backend_base_url == "http://crawler:11235"
        assert config.managed_backend_api_key == "secret"
