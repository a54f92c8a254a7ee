"""
Tests for nftmarket.monitoring.logging.

Tests cover:
- Custom processors (timestamp, service info, log level, sanitization)
- Logging configuration and processor order
- Per-operation context (operation_context)
- Performance logging (log_duration)
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog

from nftmarket import __version__
from nftmarket.config import Settings
from nftmarket.monitoring.logging import (
    add_log_level,
    add_service_info,
    add_timestamp,
    configure_from_settings,
    configure_logging,
    drop_color_codes,
    log_duration,
    operation_context,
    sanitize_sensitive_data,
)


@pytest.fixture(autouse=True)
def reset_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Processors
# =============================================================================


class TestAddTimestamp:
    def test_adds_iso_timestamp(self) -> None:
        result = add_timestamp(None, "info", {"event": "test"})  # type: ignore[arg-type]

        assert "T" in result["timestamp"]
        assert result["timestamp"].endswith("+00:00")
        assert result["event"] == "test"


class TestAddServiceInfo:
    def test_adds_service_name_and_version(self) -> None:
        result = add_service_info(None, "info", {"event": "test"})  # type: ignore[arg-type]

        assert result["service"] == "nft-marketplace"
        assert result["version"] == __version__


class TestAddLogLevel:
    @pytest.mark.parametrize(
        "method_name,expected_level",
        [
            ("debug", 10),
            ("info", 20),
            ("warning", 30),
            ("error", 40),
            ("critical", 50),
        ],
    )
    def test_correct_level_numbers(self, method_name: str, expected_level: int) -> None:
        result = add_log_level(None, method_name, {"event": "test"})  # type: ignore[arg-type]

        assert result["level_number"] == expected_level

    def test_unknown_level_defaults_to_info(self) -> None:
        result = add_log_level(None, "trace", {"event": "test"})  # type: ignore[arg-type]

        assert result["level_number"] == 20


class TestSanitizeSensitiveData:
    def test_redacts_wallet_secrets(self) -> None:
        event_dict: dict[str, Any] = {
            "event": "payment_executed",
            "payer": "bob",
            "private_key": "0xdeadbeef",
            "mnemonic": "abandon abandon",
        }
        result = sanitize_sensitive_data(None, "info", event_dict)  # type: ignore[arg-type]

        assert result["private_key"] == "[REDACTED]"
        assert result["mnemonic"] == "[REDACTED]"
        assert result["payer"] == "bob"

    def test_redacts_nested_and_listed_data(self) -> None:
        event_dict: dict[str, Any] = {
            "event": "test",
            "wallet": {"address": "0x1", "signing_key": "k"},
            "accounts": [{"api_key": "x", "name": "fees"}],
        }
        result = sanitize_sensitive_data(None, "info", event_dict)  # type: ignore[arg-type]

        assert result["wallet"] == {"address": "0x1", "signing_key": "[REDACTED]"}
        assert result["accounts"] == [{"api_key": "[REDACTED]", "name": "fees"}]

    def test_case_insensitive_key_matching(self) -> None:
        result = sanitize_sensitive_data(None, "info", {"Auth_TOKEN": "t"})  # type: ignore[arg-type]

        assert result["Auth_TOKEN"] == "[REDACTED]"

    def test_leaves_marketplace_fields_alone(self) -> None:
        event_dict = {"event": "item_purchased", "item_id": 3, "price": 1000, "buyer": "bob"}
        result = sanitize_sensitive_data(None, "info", dict(event_dict))  # type: ignore[arg-type]

        assert result == event_dict


class TestDropColorCodes:
    def test_removes_ansi_codes(self) -> None:
        event_dict = {"event": "\x1b[31mred\x1b[0m", "nested": {"v": "\x1b[1mbold\x1b[0m"}}
        result = drop_color_codes(None, "info", event_dict)  # type: ignore[arg-type]

        assert result["event"] == "red"
        assert result["nested"]["v"] == "bold"

    def test_preserves_non_string_values(self) -> None:
        result = drop_color_codes(None, "info", {"price": 10, "for_sale": True})  # type: ignore[arg-type]

        assert result == {"price": 10, "for_sale": True}


# =============================================================================
# Configuration
# =============================================================================


class TestConfigureLogging:
    @pytest.mark.parametrize("json_output", [False, True])
    def test_configures_renderer(self, json_output: bool) -> None:
        configure_logging(level="DEBUG", json_output=json_output)

        processors = structlog.get_config()["processors"]
        renderer = processors[-1]
        if json_output:
            assert isinstance(renderer, structlog.processors.JSONRenderer)
        else:
            assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    def test_optional_processors(self) -> None:
        configure_logging(
            include_timestamps=False,
            include_service_info=False,
            sanitize_logs=False,
        )

        processors = structlog.get_config()["processors"]
        assert add_timestamp not in processors
        assert add_service_info not in processors
        assert sanitize_sensitive_data not in processors

    @pytest.mark.parametrize(
        "app_env,log_json,expect_json",
        [
            ("development", False, False),
            ("development", True, True),
            ("production", False, True),
        ],
    )
    def test_configure_from_settings(
        self, app_env: str, log_json: bool, expect_json: bool
    ) -> None:
        settings = Settings(_env_file=None, app_env=app_env, log_json=log_json)

        configure_from_settings(settings)

        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer) is expect_json

    def test_service_info_precedes_timestamp(self) -> None:
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert processors.index(add_service_info) < processors.index(add_timestamp)
        assert processors.index(add_timestamp) < processors.index(add_log_level)


# =============================================================================
# Context Management
# =============================================================================


class TestOperationContext:
    def test_operation_context_is_scoped(self) -> None:
        with operation_context("purchase", caller="bob", item_id=7):
            assert structlog.contextvars.get_contextvars() == {
                "operation": "purchase",
                "caller": "bob",
                "item_id": 7,
            }

        assert structlog.contextvars.get_contextvars() == {}

    def test_operation_context_restores_on_error(self) -> None:
        structlog.contextvars.bind_contextvars(request="r-1")

        with pytest.raises(RuntimeError):
            with operation_context("like", caller="carol"):
                raise RuntimeError("boom")

        assert structlog.contextvars.get_contextvars() == {"request": "r-1"}

    def test_nested_operation_context(self) -> None:
        with operation_context("accept_offer", caller="alice"):
            with operation_context("settle", item_id=2):
                assert structlog.contextvars.get_contextvars()["operation"] == "settle"
            assert structlog.contextvars.get_contextvars() == {
                "operation": "accept_offer",
                "caller": "alice",
            }


# =============================================================================
# Performance Logging
# =============================================================================


class TestLogDuration:
    def test_logs_successful_operation(self) -> None:
        logger = MagicMock()

        with log_duration(logger, "search", query="fox"):
            pass

        logger.info.assert_called_once()
        args, kwargs = logger.info.call_args
        assert args[0] == "search_completed"
        assert kwargs["query"] == "fox"
        assert kwargs["duration_ms"] >= 0

    def test_uses_specified_level(self) -> None:
        logger = MagicMock()

        with log_duration(logger, "stats", level="debug"):
            pass

        logger.debug.assert_called_once()
        logger.info.assert_not_called()

    def test_logs_and_reraises_failures(self) -> None:
        logger = MagicMock()

        with pytest.raises(ValueError, match="bad"):
            with log_duration(logger, "search"):
                raise ValueError("bad")

        logger.error.assert_called_once()
        args, kwargs = logger.error.call_args
        assert args[0] == "search_failed"
        assert kwargs["error"] == "bad"
