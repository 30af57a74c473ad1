"""Tests for structured logging configuration."""

import io
import json
import logging
from collections.abc import Generator

import pytest
import structlog

from src.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    get_logger,
    redact_url_fields,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None]:
    """Restore structlog defaults after each test."""
    yield
    clear_run_context()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output(self) -> None:
        """Events are rendered as JSON with level and timestamp."""
        output = io.StringIO()
        configure_logging(output=output, json_format=True)

        get_logger().info("sort_started", tracks_in=3)

        event = json.loads(output.getvalue().strip())
        assert event["event"] == "sort_started"
        assert event["tracks_in"] == 3
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filtering(self) -> None:
        """Events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output)

        get_logger().info("lookup_complete")

        assert output.getvalue() == ""

    def test_console_output(self) -> None:
        """Console format is plain text."""
        output = io.StringIO()
        configure_logging(output=output, json_format=False)

        get_logger().info("sort_complete")

        assert "sort_complete" in output.getvalue()


class TestRunContext:
    """Tests for run context binding."""


    def test_run_context_bound_and_cleared(self) -> None:
        """run_id and extra fields are attached until cleared."""
        output = io.StringIO()
        configure_logging(output=output)
        log = get_logger()

        bind_run_context("run-42", playlist_id="p1")
        log.info("first")
        clear_run_context()
        log.info("second")

        first, second = (json.loads(line) for line in output.getvalue().splitlines())
        assert first["run_id"] == "run-42"
        assert first["playlist_id"] == "p1"
        assert "run_id" not in second


class TestUrlRedaction:
    """Tests for the URL redaction processor."""

    def test_processor_masks_url_fields(self) -> None:
        """URL fields are scrubbed, other fields untouched."""
        event = {
            "event": "fetch_complete",
            "url": "https://ws.audioscrobbler.com/2.0/?api_key=abc",
            "title": "api_key=abc",
        }

        result = redact_url_fields(None, "info", event)

        assert "abc" not in result["url"]
        assert result["title"] == "api_key=abc"

    def test_configured_logger_never_prints_api_key(self) -> None:
        """The configured pipeline redacts URLs logged by any module."""
        output = io.StringIO()
        configure_logging(output=output)

        get_logger().info("track_info_request", url="https://x.test/?api_key=abc")

        assert "abc" not in output.getvalue()
        assert "[REDACTED]" in output.getvalue()
