"""ModelRouter: the single entry point for generation and embeddings.

Combines settings, the registry, chain resolution and fallback execution.
All per-request state lives in local variables, so one router can serve any
number of concurrent ``generate`` calls.
"""

from __future__ import annotations

__all__ = ["ModelRouter"]

from collections.abc import Mapping
from typing import Any

import structlog

from modelchain.config.settings import ModelChainSettings
from modelchain.core.types import (
    EmbeddingResult,
    GenerationRequest,
    GenerationResult,
    ProviderId,
)
from modelchain.llm.adapters import Adapter, EmbeddingAdapter, build_adapters
from modelchain.llm.embeddings import run_embeddings
from modelchain.llm.executor import FallbackExecutor
from modelchain.llm.registry import DEFAULT_REGISTRY, ModelRegistry
from modelchain.llm.resolver import ChainEntry, resolve_chain

logger = structlog.get_logger(__name__)


class ModelRouter:
    """Routes generation requests across providers with ordered fallback."""

    def __init__(
        self,
        settings: ModelChainSettings | None = None,
        *,
        registry: ModelRegistry = DEFAULT_REGISTRY,
        adapters: Mapping[ProviderId, Adapter] | None = None,
    ) -> None:
        """Initialize the router.

        Args:
            settings: Credentials and routing defaults. Loaded from the
                environment when omitted.
            registry: Model registry to resolve chains against.
            adapters: Dispatch table override. Built from the credentials
                when omitted.
        """
        self._settings = settings or ModelChainSettings()
        self._registry = registry
        self._adapters = (
            dict(adapters) if adapters is not None else build_adapters(self._settings.credentials)
        )
        self._executor = FallbackExecutor(
            self._adapters, timeout_ms=self._settings.routing.timeout_ms
        )
        logger.info(
            "model_router_initialized",
            adapters=sorted(self._adapters),
            preferred_provider=self._settings.routing.preferred_provider,
            timeout_ms=self._settings.routing.timeout_ms,
        )

    @property
    def settings(self) -> ModelChainSettings:
        return self._settings

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    def resolve(self, request: GenerationRequest) -> list[ChainEntry]:
        """Resolve the model chain a request would be tried against."""
        routing = self._settings.routing
        return resolve_chain(
            self._settings.credentials,
            capability=request.capability,
            complexity=request.complexity,
            force_model=request.force_model,
            force_provider=request.force_provider or routing.force_provider,
            preferred_provider=request.preferred_provider or routing.preferred_provider,
            registry=self._registry,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate text, falling back along the resolved chain.

        Raises:
            ConfigurationError: If no provider is available for the request.
            AllModelsFailedError: If every candidate failed.
        """
        if request.max_tokens is None:
            request = request.model_copy(
                update={"max_tokens": self._settings.routing.default_max_tokens}
            )
        chain = self.resolve(request)
        return await self._executor.execute(request, chain)

    async def embed(self, texts: list[str]) -> EmbeddingResult:
        """Embed texts with Workers AI.

        Raises:
            ConfigurationError: If Workers AI is not configured.
        """
        embedder = self._adapters.get(ProviderId.CLOUDFLARE)
        if not isinstance(embedder, EmbeddingAdapter):
            embedder = None
        return await run_embeddings(texts, embedder)

    def provider_status(self) -> dict[str, dict[str, Any]]:
        """Summarize provider availability and catalogs."""
        return self._registry.provider_status(self._settings.credentials)

    async def aclose(self) -> None:
        """Close every adapter's HTTP client."""
        for adapter in self._adapters.values():
            close = getattr(adapter, "close", None)
            if close is not None:
                await close()
