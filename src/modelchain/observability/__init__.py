"""Logging setup for modelchain."""

from modelchain.observability.logging_config import (
    LogFilter,
    LogFormat,
    LoggingConfig,
    configure_logging,
)

__all__ = [
    "LogFilter",
    "LogFormat",
    "LoggingConfig",
    "configure_logging",
]
