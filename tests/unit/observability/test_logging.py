"""Unit tests for logging module.

Tests cover:
- Context variable management
- InterceptHandler
- JSON and text sink formats
- setup_logging sink selection
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock, patch

import orjson
import pytest

from app.observability.logging import (
    InterceptHandler,
    _json_sink_format,
    _text_sink_format,
    bind_context,
    clear_context,
    get_context,
    setup_logging,
    unbind_context,
)


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def empty_context() -> None:
    clear_context()


def _record(exception: Any = None, **extra: Any) -> dict[str, Any]:
    level = MagicMock()
    level.name = "INFO"
    return {
        "time": datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
        "level": level,
        "message": "Recipe saved",
        "name": "app.services.recipes",
        "function": "create_recipe",
        "line": 42,
        "extra": dict(extra),
        "exception": exception,
    }


class TestContextManagement:
    """Tests for logging context management."""

    def test_bind_merges_and_overwrites(self) -> None:
        bind_context(request_id="old", user_id=1)
        bind_context(request_id="new")

        assert get_context() == {"request_id": "new", "user_id": 1}

    def test_unbind_specific_keys(self) -> None:
        bind_context(a="1", b="2", c="3")
        unbind_context("a", "c", "missing")

        assert get_context() == {"b": "2"}

    def test_get_context_returns_copy(self) -> None:
        bind_context(request_id="abc")

        get_context()["modified"] = True

        assert "modified" not in get_context()


class TestJsonFormat:
    """Tests for the JSON sink format."""

    def test_payload_includes_context_and_extra(self) -> None:
        bind_context(request_id="req-1")
        record = _record(name="app.services.recipes", recipe_id=7)

        fmt = _json_sink_format(record)  # type: ignore[arg-type]

        assert fmt == "{extra[_json]}\n{exception}"
        payload = orjson.loads(record["extra"]["_json"])
        assert payload["message"] == "Recipe saved"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "app.services.recipes"
        assert payload["request_id"] == "req-1"
        assert payload["recipe_id"] == 7
        assert payload["timestamp"].startswith("2024-05-01T12:00:00")

    def test_exception_summary(self) -> None:
        exception = MagicMock()
        exception.type = ValueError
        exception.value = ValueError("bad input")
        record = _record(exception=exception)

        _json_sink_format(record)  # type: ignore[arg-type]

        payload = orjson.loads(record["extra"]["_json"])
        assert payload["exception"] == {"type": "ValueError", "value": "bad input"}


class TestTextFormat:
    def test_context_braces_are_escaped(self) -> None:
        """Should keep context values from being read as format fields."""
        bind_context(payload="{x}")

        fmt = _text_sink_format(_record())  # type: ignore[arg-type]

        assert "payload={{x}}" in fmt
        assert "{exception}" not in fmt

    def test_exception_placeholder(self) -> None:
        fmt = _text_sink_format(_record(exception=MagicMock()))  # type: ignore[arg-type]

        assert fmt.endswith("{exception}\n")


class TestInterceptHandler:
    def test_forwards_to_loguru(self) -> None:
        record = logging.LogRecord("httpx", logging.WARNING, __file__, 1, "slow", None, None)

        with patch("app.observability.logging.logger") as mock_logger:
            mock_logger.level.return_value.name = "WARNING"
            InterceptHandler().emit(record)

        mock_logger.opt.return_value.log.assert_called_once_with("WARNING", "slow")

    def test_unknown_level_uses_number(self) -> None:
        record = logging.LogRecord("lib", 25, __file__, 1, "custom", None, None)
        record.levelname = "NOTICE"

        with patch("app.observability.logging.logger") as mock_logger:
            mock_logger.level.side_effect = ValueError("unknown level")
            InterceptHandler().emit(record)

        mock_logger.opt.return_value.log.assert_called_once_with(25, "custom")


class TestSetupLogging:
    """Tests for sink selection."""

    def test_json_in_production(self) -> None:
        with (
            patch("app.observability.logging.logger") as mock_logger,
            patch("app.observability.logging.logging.basicConfig"),
        ):
            setup_logging(log_level="warning", log_format="json")

        kwargs = mock_logger.add.call_args.kwargs
        assert kwargs["format"] is _json_sink_format
        assert kwargs["level"] == "WARNING"
        assert kwargs["colorize"] is False

    def test_development_forces_text(self) -> None:
        with (
            patch("app.observability.logging.logger") as mock_logger,
            patch("app.observability.logging.logging.basicConfig"),
        ):
            setup_logging(log_format="json", is_development=True)

        kwargs = mock_logger.add.call_args.kwargs
        assert kwargs["format"] is _text_sink_format
        assert kwargs["diagnose"] is True

    def test_quiets_noisy_loggers(self) -> None:
        with (
            patch("app.observability.logging.logger"),
            patch("app.observability.logging.logging.basicConfig") as basic_config,
        ):
            setup_logging()

        basic_config.assert_called_once()
        assert logging.getLogger("botocore").level == logging.WARNING
        assert logging.getLogger("stripe").level == logging.WARNING
