"""Chain resolution: which models to try for a request, and in what order.

Resolution is a pure function of the request fields, the registry and the
credential set. It keeps no state between calls, so identical inputs always
produce identical chains.
"""

from __future__ import annotations

__all__ = [
    "AUTO",
    "AUTO_PROVIDER_ORDER",
    "ChainEntry",
    "resolve_chain",
]

from collections.abc import Mapping
from types import MappingProxyType

import structlog
from pydantic import BaseModel, ConfigDict

from modelchain.config.settings import ProviderCredentials  # noqa: TC001
from modelchain.core.types import Complexity, ModelDescriptor, ProviderId
from modelchain.llm.registry import DEFAULT_REGISTRY, ModelRegistry

logger = structlog.get_logger(__name__)

AUTO = "auto"

_QUALITY_FIRST: tuple[ProviderId, ...] = (
    ProviderId.CLAUDE,
    ProviderId.OPENAI,
    ProviderId.GEMINI,
    ProviderId.DEEPSEEK,
    ProviderId.MISTRAL,
    ProviderId.CLOUDFLARE,
)

# Provider priority per complexity tier for the auto chain
AUTO_PROVIDER_ORDER: Mapping[Complexity, tuple[ProviderId, ...]] = MappingProxyType(
    {
        Complexity.COMPLEX: _QUALITY_FIRST,
        Complexity.STANDARD: _QUALITY_FIRST,
        Complexity.SIMPLE: (
            ProviderId.CLOUDFLARE,
            ProviderId.DEEPSEEK,
            ProviderId.MISTRAL,
            ProviderId.GEMINI,
            ProviderId.OPENAI,
            ProviderId.CLAUDE,
        ),
    }
)


class ChainEntry(BaseModel):
    """One candidate in a resolved model chain."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_key: str
    model: ModelDescriptor
    provider_id: ProviderId

    @property
    def label(self) -> str:
        """Identifier recorded in ``GenerationResult.fallback_chain``."""
        return f"{self.provider_id.value}/{self.model_key}"


def _entry(model: ModelDescriptor) -> ChainEntry:
    return ChainEntry(model_key=model.key, model=model, provider_id=model.provider_id)


def resolve_chain(
    credentials: ProviderCredentials,
    *,
    capability: str | None = None,
    complexity: Complexity = Complexity.STANDARD,
    force_model: str | None = None,
    force_provider: str | None = None,
    preferred_provider: str | None = None,
    registry: ModelRegistry = DEFAULT_REGISTRY,
) -> list[ChainEntry]:
    """Build the ordered list of available models to try.

    Precedence:
    1. A forced model key that resolves to an available model -> that model only
    2. A forced provider (other than "auto") -> all of its models
    3. The capability's configured chain, filtered to available models
    4. The auto chain: the best model of each available provider

    Args:
        credentials: Credential set deciding provider availability.
        capability: Optional capability name selecting a configured chain.
        complexity: Complexity tier.
        force_model: Optional registry key to use exclusively.
        force_provider: Optional provider id to use exclusively.
        preferred_provider: Provider promoted to the head of the auto chain.
        registry: Model registry to resolve against.

    Returns:
        Ordered chain entries; every entry's provider is available.
    """
    # Case 1: forced model
    if force_model and force_model != AUTO:
        model = registry.get_model(force_model)
        if model is not None and registry.is_provider_available(model.provider_id, credentials):
            logger.debug("chain_resolved", source="forced_model", model_key=force_model)
            return [_entry(model)]
        logger.warning("forced_model_unavailable", model_key=force_model)

    # Case 2: forced provider
    if force_provider and force_provider != AUTO:
        chain = _provider_chain(registry, force_provider, complexity, credentials)
        logger.debug(
            "chain_resolved",
            source="forced_provider",
            provider=force_provider,
            length=len(chain),
        )
        return chain

    # Case 3: capability chain
    if capability:
        keys = registry.chain_for(capability, complexity)
        if keys:
            chain = []
            for key in keys:
                model = registry.get_model(key)
                if model is None:
                    continue
                if not registry.is_provider_available(model.provider_id, credentials):
                    continue
                chain.append(_entry(model))
            if chain:
                logger.debug(
                    "chain_resolved",
                    source="capability",
                    capability=capability,
                    complexity=complexity,
                    length=len(chain),
                )
                return chain

    # Case 4: auto
    chain = _auto_chain(registry, complexity, preferred_provider, credentials)
    logger.debug(
        "chain_resolved",
        source="auto",
        complexity=complexity,
        preferred_provider=preferred_provider,
        length=len(chain),
    )
    return chain


def _provider_chain(
    registry: ModelRegistry,
    provider_id: str,
    complexity: Complexity,
    credentials: ProviderCredentials,
) -> list[ChainEntry]:
    """All text models of one provider, or nothing if it is unavailable."""
    if not registry.is_provider_available(provider_id, credentials):
        return []
    return [_entry(m) for m in registry.models_for_provider(provider_id, complexity)]


def _auto_chain(
    registry: ModelRegistry,
    complexity: Complexity,
    preferred_provider: str | None,
    credentials: ProviderCredentials,
) -> list[ChainEntry]:
    """Best-ranked model from each available provider, in priority order."""
    order = list(AUTO_PROVIDER_ORDER.get(complexity, _QUALITY_FIRST))
    if preferred_provider and preferred_provider in order:
        order.remove(ProviderId(preferred_provider))
        order.insert(0, ProviderId(preferred_provider))

    chain: list[ChainEntry] = []
    for provider_id in order:
        models = _provider_chain(registry, provider_id, complexity, credentials)
        if models:
            chain.append(models[0])
    return chain
