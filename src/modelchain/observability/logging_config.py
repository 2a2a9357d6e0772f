"""Structured logging setup for modelchain.

Every module logs through ``structlog.get_logger(__name__)`` with an event
name plus keyword fields (``provider``, ``model``, ``capability``,
``attempt`` ...). ``configure_logging`` installs the processor chain that
timestamps, filters and renders those events as JSON or console lines.
"""

from __future__ import annotations

__all__ = [
    "LogFilter",
    "LogFormat",
    "LoggingConfig",
    "configure_logging",
]

import logging
import sys
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

import structlog
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from modelchain.config.settings import LogSettings


_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class LogFormat(StrEnum):
    """Supported log output formats."""

    JSON = "json"
    CONSOLE = "console"


# ---------------------------------------------------------------------------
# LogFilter
# ---------------------------------------------------------------------------


class LogFilter:
    """Drop log events by provider, capability, or minimum level.

    An event must satisfy every active criterion to pass. Events that carry
    no ``provider`` (or ``capability``) field are dropped while the matching
    filter is active.
    """

    _LEVEL_MAP: ClassVar[dict[str, int]] = _LEVELS

    def __init__(self) -> None:
        self._providers: set[str] | None = None
        self._capabilities: set[str] | None = None
        self._min_level: int | None = None

    def by_provider(self, provider: str) -> LogFilter:
        """Only pass events whose ``provider`` field equals *provider*.

        Can be called repeatedly to allow several providers.
        """
        if self._providers is None:
            self._providers = set()
        self._providers.add(str(provider))
        return self

    def by_capability(self, capability: str) -> LogFilter:
        """Only pass events whose ``capability`` field equals *capability*."""
        if self._capabilities is None:
            self._capabilities = set()
        self._capabilities.add(capability)
        return self

    def by_level(self, min_level: str) -> LogFilter:
        """Only pass events at or above *min_level*.

        Raises:
            ValueError: If *min_level* is not a known level name.
        """
        key = min_level.lower()
        if key not in self._LEVEL_MAP:
            msg = f"Unknown log level: {min_level!r}"
            raise ValueError(msg)
        self._min_level = self._LEVEL_MAP[key]
        return self

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        if self._providers is not None:
            provider = event_dict.get("provider")
            if provider is None or str(provider) not in self._providers:
                raise structlog.DropEvent

        if self._capabilities is not None:
            if event_dict.get("capability") not in self._capabilities:
                raise structlog.DropEvent

        if self._min_level is not None:
            level_number = self._LEVEL_MAP.get(method_name.lower(), logging.DEBUG)
            if level_number < self._min_level:
                raise structlog.DropEvent

        return event_dict

    @property
    def active_providers(self) -> set[str] | None:
        return self._providers

    @property
    def active_capabilities(self) -> set[str] | None:
        return self._capabilities

    @property
    def active_min_level(self) -> int | None:
        return self._min_level


# ---------------------------------------------------------------------------
# LoggingConfig
# ---------------------------------------------------------------------------


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Root log level (e.g. ``"INFO"``).
        format: Output format.
        output: ``"stdout"`` or ``"stderr"``.
        context: Key-value pairs added to every event (e.g. ``service``).
        log_filter: Optional :class:`LogFilter`.
    """

    level: str = "INFO"
    format: LogFormat = LogFormat.JSON
    output: str = "stdout"
    context: dict[str, str] = Field(default_factory=dict)
    log_filter: LogFilter | None = None

    model_config = {"arbitrary_types_allowed": True}

    @classmethod
    def from_settings(cls, settings: LogSettings) -> LoggingConfig:
        """Build a config from the ``log`` section of the settings."""
        return cls(level=settings.level.upper(), format=LogFormat(settings.format.lower()))

    def configure(
        self,
        level: str | None = None,
        fmt: LogFormat | str | None = None,
        output: str | None = None,
    ) -> LoggingConfig:
        """Set top-level parameters in place and return self."""
        if level is not None:
            self.level = level.upper()
        if fmt is not None:
            self.format = LogFormat(fmt)
        if output is not None:
            self.output = output
        return self

    def add_context(self, key: str, value: str) -> LoggingConfig:
        """Add a key-value pair injected into every event."""
        self.context[key] = value
        return self


# ---------------------------------------------------------------------------
# Processors
# ---------------------------------------------------------------------------


def _add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict["timestamp"] = datetime.now(tz=UTC).isoformat()
    return event_dict


def _add_log_level(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict["level"] = method_name
    return event_dict


def _make_context_injector(context: dict[str, str]) -> structlog.types.Processor:
    def _inject_context(
        logger: Any,
        method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return _inject_context


def _stringify_enums(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Render enum field values (ProviderId, Complexity ...) as plain strings."""
    for key, value in event_dict.items():
        if isinstance(value, StrEnum):
            event_dict[key] = str(value)
    return event_dict


def _build_processor_chain(config: LoggingConfig) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_timestamp,
        _add_log_level,
    ]
    if config.context:
        processors.append(_make_context_injector(config.context))
    if config.log_filter is not None:
        processors.append(config.log_filter)
    processors.append(_stringify_enums)

    if config.format is LogFormat.JSON:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(config: LoggingConfig | None = None) -> LoggingConfig:
    """Install the structlog processor chain.

    Args:
        config: Logging configuration, or None for JSON at INFO to stdout.

    Returns:
        The configuration that was applied.
    """
    if config is None:
        config = LoggingConfig()

    root_level = getattr(logging, config.level.upper(), logging.INFO)
    stream = sys.stderr if config.output == "stderr" else sys.stdout

    logging.basicConfig(format="%(message)s", stream=stream, level=root_level, force=True)

    structlog.configure(
        processors=_build_processor_chain(config),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )
    return config
