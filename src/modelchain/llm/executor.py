"""Sequential fallback execution over a resolved model chain.

Tries chain entries one at a time, each under a per-attempt deadline, and
returns the first success annotated with cost and fallback metadata. Adapter
errors and timeouts are absorbed here; only exhaustion of the whole chain
reaches the caller.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TIMEOUT_MS",
    "FallbackExecutor",
]

import asyncio
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

import structlog

from modelchain.core.types import AdapterRequest, GenerationRequest, GenerationResult, ProviderId
from modelchain.llm.cost import estimate_cost
from modelchain.llm.errors import (
    AdapterError,
    AllModelsFailedError,
    AttemptTimeoutError,
    ConfigurationError,
)

if TYPE_CHECKING:
    from modelchain.llm.adapters.base import Adapter
    from modelchain.llm.resolver import ChainEntry

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_TOKENS = 4096


class FallbackExecutor:
    """Runs a request down a model chain until one entry succeeds.

    Attempts are strictly sequential: at most one adapter call is in flight
    per ``execute`` call. A timed-out attempt is cancelled, which aborts the
    adapter's in-flight HTTP request, before the next entry is tried.
    """

    def __init__(
        self,
        adapters: Mapping[ProviderId, Adapter],
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        """Initialize the executor.

        Args:
            adapters: Dispatch table from provider id to adapter.
            timeout_ms: Default per-attempt deadline in milliseconds.
        """
        self._adapters = dict(adapters)
        self._timeout_ms = timeout_ms

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    async def execute(
        self,
        request: GenerationRequest,
        chain: Sequence[ChainEntry],
    ) -> GenerationResult:
        """Try each chain entry in order and return the first success.

        Args:
            request: The generation request.
            chain: Resolved candidates, in the order to try them.

        Returns:
            The winning GenerationResult with cost, fallback_used,
            fallback_chain and attempt_index filled in.

        Raises:
            ConfigurationError: If the chain is empty.
            AllModelsFailedError: If every entry errored or timed out.
        """
        if not chain:
            raise ConfigurationError(
                "No AI providers available; configure at least one API key "
                "or enable Workers AI"
            )

        timeout_ms = request.timeout_ms or self._timeout_ms
        labels = [entry.label for entry in chain]
        attempts: list[tuple[str, Exception]] = []

        for index, entry in enumerate(chain):
            logger.info(
                "attempt_started",
                provider=entry.provider_id,
                model=entry.model.model_id,
                capability=request.capability or "generic",
                complexity=request.complexity,
                attempt=index,
            )
            try:
                result = await self._attempt(request, entry, timeout_ms)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                attempts.append((entry.label, exc))
                logger.warning(
                    "attempt_failed",
                    provider=entry.provider_id,
                    model=entry.model.model_id,
                    error=str(exc),
                    remaining=len(chain) - index - 1,
                )
                continue

            result = result.model_copy(
                update={
                    "cost": estimate_cost(entry.model, result.tokens_used),
                    "model_key": entry.model_key,
                    "fallback_used": index > 0,
                    "fallback_chain": list(labels),
                    "attempt_index": index,
                }
            )
            logger.info(
                "attempt_succeeded",
                provider=entry.provider_id,
                model=entry.model.model_id,
                attempt=index,
                duration_ms=round(result.duration_ms, 1),
                cost_usd=result.cost.estimated,
            )
            return result

        logger.error("all_attempts_failed", attempts=len(attempts), chain=labels)
        raise AllModelsFailedError(attempts)

    async def _attempt(
        self,
        request: GenerationRequest,
        entry: ChainEntry,
        timeout_ms: int,
    ) -> GenerationResult:
        """Run one adapter call under the deadline.

        Raises:
            AdapterError: If no adapter is registered for the entry's provider.
            AttemptTimeoutError: If the deadline passes first.
            Exception: Whatever the adapter raised.
        """
        adapter = self._adapters.get(entry.provider_id)
        if adapter is None:
            raise AdapterError(entry.provider_id, f"No adapter for provider {entry.provider_id!r}")

        call = AdapterRequest(
            system_prompt=request.system_prompt,
            user_prompt=request.user_prompt,
            model=entry.model,
            max_tokens=request.max_tokens or DEFAULT_MAX_TOKENS,
            json_mode=request.json_mode,
            json_schema=request.json_schema,
        )
        try:
            return await asyncio.wait_for(adapter.run(call), timeout=timeout_ms / 1000)
        except TimeoutError as exc:
            if isinstance(exc, AttemptTimeoutError):
                raise
            raise AttemptTimeoutError(entry.provider_id, timeout_ms) from exc
