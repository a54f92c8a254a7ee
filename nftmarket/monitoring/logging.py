"""
NFT Marketplace - Structured Logging

Logging configuration using structlog.

Features:
- JSON output for production
- Pretty console output for development
- Per-operation context (operation, caller, item_id)
- Masking of wallet secrets
"""

from __future__ import annotations

import logging
import re
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

from nftmarket import __version__
from nftmarket.config import Settings, get_settings

_LEVEL_NUMBERS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# =============================================================================
# Custom Processors
# =============================================================================

def add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add ISO8601 timestamp to log entry."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add service identification info."""
    event_dict["service"] = "nft-marketplace"
    event_dict["version"] = __version__
    return event_dict


def add_log_level(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Numeric level, so JSON consumers can filter with a comparison."""
    event_dict["level_number"] = _LEVEL_NUMBERS.get(method_name, logging.INFO)
    return event_dict


SENSITIVE_KEYS = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
    "private_key",
    "privatekey",
    "signing_key",
    "mnemonic",
    "seed_phrase",
    "signature",
})


def sanitize_sensitive_data(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Mask wallet credentials that slip into log context."""

    def _sanitize(obj: Any, depth: int = 0) -> Any:
        if depth > 10:
            return obj

        if isinstance(obj, dict):
            return {
                k: "[REDACTED]"
                if any(s in str(k).lower() for s in SENSITIVE_KEYS)
                else _sanitize(v, depth + 1)
                for k, v in obj.items()
            }
        elif isinstance(obj, list):
            return [_sanitize(item, depth + 1) for item in obj]
        return obj

    result: EventDict = _sanitize(event_dict)
    return result


_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def drop_color_codes(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Remove ANSI color codes for clean log output."""

    def _clean(obj: Any) -> Any:
        if isinstance(obj, str):
            return _ANSI_ESCAPE.sub("", obj)
        elif isinstance(obj, dict):
            return {k: _clean(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [_clean(item) for item in obj]
        return obj

    result: EventDict = _clean(event_dict)
    return result


# =============================================================================
# Logging Configuration
# =============================================================================

def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    include_timestamps: bool = True,
    include_service_info: bool = True,
    sanitize_logs: bool = True,
) -> None:
    """
    Route structlog through stdlib logging with the marketplace processors.

    Args:
        level: Minimum stdlib level name (DEBUG ... CRITICAL)
        json_output: Render one JSON object per line instead of console text
        include_timestamps: Prepend an ISO8601 UTC timestamp
        include_service_info: Prepend service name and package version
        sanitize_logs: Redact wallet secrets before rendering
    """
    processors: list[Any] = []
    if include_service_info:
        processors.append(add_service_info)
    if include_timestamps:
        processors.append(add_timestamp)
    processors += [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_log_level,
    ]
    if sanitize_logs:
        processors.append(sanitize_sensitive_data)

    if json_output:
        processors += [
            drop_color_codes,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def configure_from_settings(settings: Settings | None = None) -> None:
    """Configure logging from application settings; JSON is forced in production."""
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        json_output=settings.log_json or settings.is_production,
        include_timestamps=True,
        include_service_info=True,
        sanitize_logs=True,
    )


# =============================================================================
# Context Management
# =============================================================================

@contextmanager
def operation_context(operation: str, **kwargs: Any) -> Iterator[None]:
    """Bind operation context for the duration of a marketplace call."""
    with structlog.contextvars.bound_contextvars(operation=operation, **kwargs):
        yield


# =============================================================================
# Performance Logging
# =============================================================================

@contextmanager
def log_duration(
    logger: Any,
    operation: str,
    level: str = "info",
    **extra_context: Any,
) -> Iterator[None]:
    """
    Time the wrapped block and log ``<operation>_completed`` at ``level``.

    A block that raises is logged as ``<operation>_failed`` at error level
    and the exception propagates.

        with log_duration(logger, "search_and_sort", level="debug"):
            results = query.search_and_sort(registry, "dragon")
    """
    started = time.perf_counter()

    def elapsed_ms() -> float:
        return round((time.perf_counter() - started) * 1000, 2)

    try:
        yield
    except Exception as e:
        logger.error(
            f"{operation}_failed",
            duration_ms=elapsed_ms(),
            error=str(e),
            **extra_context,
        )
        raise

    getattr(logger, level)(
        f"{operation}_completed",
        duration_ms=elapsed_ms(),
        **extra_context,
    )


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "operation_context",
    "log_duration",
    "add_timestamp",
    "add_service_info",
    "add_log_level",
    "sanitize_sensitive_data",
    "drop_color_codes",
]
