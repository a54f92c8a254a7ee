"""
NFT Marketplace - Monitoring Module

Structured logging for the marketplace engine.
"""

from .logging import (
    configure_from_settings,
    configure_logging,
    log_duration,
    operation_context,
)

__all__ = [
    "configure_logging",
    "configure_from_settings",
    "operation_context",
    "log_duration",
]
