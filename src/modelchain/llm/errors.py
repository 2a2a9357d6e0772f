"""Exception hierarchy for generation routing.

Parse failures have no exception type: the parsing pipeline reports them as
data in ``ParseMeta``.
"""

from __future__ import annotations

__all__ = [
    "AdapterError",
    "AllModelsFailedError",
    "AttemptTimeoutError",
    "ConfigurationError",
    "ModelChainError",
]


class ModelChainError(Exception):
    """Base class for all modelchain errors."""


class ConfigurationError(ModelChainError):
    """Raised when no provider or model is usable with the current configuration."""


class AdapterError(ModelChainError):
    """Raised by a backend adapter when its call fails.

    Attributes:
        provider_id: The provider whose call failed.
        status_code: HTTP status of the failed call, if there was one.
    """

    def __init__(self, provider_id: str, message: str, *, status_code: int | None = None) -> None:
        self.provider_id = provider_id
        self.status_code = status_code
        super().__init__(message)


class AttemptTimeoutError(ModelChainError, TimeoutError):
    """Raised when a single attempt exceeds its deadline."""

    def __init__(self, provider_id: str, timeout_ms: int) -> None:
        self.provider_id = provider_id
        self.timeout_ms = timeout_ms
        super().__init__(f"Provider {provider_id} timed out after {timeout_ms}ms")


class AllModelsFailedError(ModelChainError):
    """Raised when every entry of a resolved chain has failed.

    Attributes:
        attempts: ``(chain label, error)`` pairs in the order they were tried.
    """

    def __init__(self, attempts: list[tuple[str, Exception]]) -> None:
        self.attempts = attempts
        last = attempts[-1][1] if attempts else None
        super().__init__(f"All {len(attempts)} providers failed. Last error: {last}")

    @property
    def last_error(self) -> Exception | None:
        return self.attempts[-1][1] if self.attempts else None
