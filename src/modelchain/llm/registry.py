"""Model and provider registry.

Static catalog of the supported providers and models, plus the capability
chain map that names the preferred model order for each task type. Everything
here is built once at import time and exposed through read-only mappings, so
concurrent readers need no locking.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from modelchain.config.settings import ProviderCredentials
from modelchain.core.types import (
    Complexity,
    ModelDescriptor,
    ModelKind,
    ProviderId,
    ProviderTier,
    QualityTier,
    SpeedTier,
)

logger = structlog.get_logger(__name__)

__all__ = [
    "CAPABILITY_CHAINS",
    "DEFAULT_REGISTRY",
    "MODELS",
    "PROVIDERS",
    "CapabilityChainMap",
    "ModelRegistry",
    "ProviderDescriptor",
]


# --- Provider descriptors ---


class ProviderDescriptor(BaseModel):
    """Configuration-independent description of an inference provider."""

    model_config = ConfigDict(frozen=True)

    id: ProviderId
    display_name: str
    tier: ProviderTier
    strengths: tuple[str, ...] = ()
    availability: Callable[[ProviderCredentials], bool]

    def is_available(self, credentials: ProviderCredentials) -> bool:
        return bool(self.availability(credentials))


PROVIDERS: Mapping[ProviderId, ProviderDescriptor] = MappingProxyType(
    {
        ProviderId.CLAUDE: ProviderDescriptor(
            id=ProviderId.CLAUDE,
            display_name="Anthropic Claude",
            tier=ProviderTier.PREMIUM,
            strengths=("reasoning", "analysis", "long-context", "structured-output", "safety"),
            availability=lambda c: bool(c.anthropic_api_key),
        ),
        ProviderId.OPENAI: ProviderDescriptor(
            id=ProviderId.OPENAI,
            display_name="OpenAI",
            tier=ProviderTier.PREMIUM,
            strengths=("coding", "creative", "function-calling", "vision"),
            availability=lambda c: bool(c.openai_api_key),
        ),
        ProviderId.GEMINI: ProviderDescriptor(
            id=ProviderId.GEMINI,
            display_name="Google Gemini",
            tier=ProviderTier.PREMIUM,
            strengths=("multimodal", "speed", "long-context", "cost-efficiency"),
            availability=lambda c: bool(c.google_ai_api_key),
        ),
        ProviderId.MISTRAL: ProviderDescriptor(
            id=ProviderId.MISTRAL,
            display_name="Mistral AI",
            tier=ProviderTier.MID,
            strengths=("speed", "coding", "european-compliance", "cost-efficiency"),
            availability=lambda c: bool(c.mistral_api_key),
        ),
        ProviderId.DEEPSEEK: ProviderDescriptor(
            id=ProviderId.DEEPSEEK,
            display_name="DeepSeek",
            tier=ProviderTier.BUDGET,
            strengths=("reasoning", "coding", "cost-efficiency", "math"),
            availability=lambda c: bool(c.deepseek_api_key),
        ),
        ProviderId.CLOUDFLARE: ProviderDescriptor(
            id=ProviderId.CLOUDFLARE,
            display_name="Cloudflare Workers AI",
            tier=ProviderTier.FREE,
            strengths=("zero-cost", "low-latency", "embeddings", "simple-tasks"),
            availability=lambda c: c.cloudflare_configured,
        ),
    }
)


# --- Model catalog ---
# Prices are USD per 1K tokens. Update when providers change pricing.


def _model(key: str, model_id: str, provider_id: ProviderId, **fields: Any) -> ModelDescriptor:
    return ModelDescriptor(key=key, model_id=model_id, provider_id=provider_id, **fields)


_MODEL_LIST: tuple[ModelDescriptor, ...] = (
    # Anthropic
    _model(
        "claude-sonnet-4", "claude-sonnet-4-20250514", ProviderId.CLAUDE,
        display_name="Claude Sonnet 4", context_window=200000, max_output=16384,
        cost_per_1k_input=0.003, cost_per_1k_output=0.015,
        speed=SpeedTier.FAST, quality=QualityTier.EXCELLENT,
        best_for=("analysis", "recommendations", "chat", "rewrites", "forecasting"),
    ),
    _model(
        "claude-opus-4", "claude-opus-4-20250514", ProviderId.CLAUDE,
        display_name="Claude Opus 4", context_window=200000, max_output=32768,
        cost_per_1k_input=0.015, cost_per_1k_output=0.075,
        speed=SpeedTier.SLOW, quality=QualityTier.BEST,
        best_for=("complex-refinement", "deep-analysis", "strategic-planning"),
    ),
    _model(
        "claude-haiku-3.5", "claude-3-5-haiku-20241022", ProviderId.CLAUDE,
        display_name="Claude 3.5 Haiku", context_window=200000, max_output=8192,
        cost_per_1k_input=0.0008, cost_per_1k_output=0.004,
        speed=SpeedTier.FASTEST, quality=QualityTier.GOOD,
        best_for=("classification", "simple-tasks", "high-volume"),
    ),
    # OpenAI
    _model(
        "gpt-4o", "gpt-4o", ProviderId.OPENAI,
        display_name="GPT-4o", context_window=128000, max_output=16384,
        cost_per_1k_input=0.0025, cost_per_1k_output=0.01,
        speed=SpeedTier.FAST, quality=QualityTier.EXCELLENT,
        best_for=("analysis", "creative-writing", "function-calling", "rewrites"),
    ),
    _model(
        "gpt-4o-mini", "gpt-4o-mini", ProviderId.OPENAI,
        display_name="GPT-4o Mini", context_window=128000, max_output=16384,
        cost_per_1k_input=0.00015, cost_per_1k_output=0.0006,
        speed=SpeedTier.FASTEST, quality=QualityTier.GOOD,
        best_for=("classification", "simple-tasks", "high-volume"),
    ),
    _model(
        "o1", "o1", ProviderId.OPENAI,
        display_name="o1 (Reasoning)", context_window=200000, max_output=100000,
        cost_per_1k_input=0.015, cost_per_1k_output=0.06,
        speed=SpeedTier.SLOW, quality=QualityTier.BEST,
        best_for=("complex-reasoning", "strategic-planning", "deep-analysis"),
    ),
    _model(
        "o3-mini", "o3-mini", ProviderId.OPENAI,
        display_name="o3-mini (Reasoning)", context_window=200000, max_output=100000,
        cost_per_1k_input=0.0011, cost_per_1k_output=0.0044,
        speed=SpeedTier.MEDIUM, quality=QualityTier.EXCELLENT,
        best_for=("reasoning", "analysis", "forecasting"),
    ),
    _model(
        "codex-mini", "codex-mini-latest", ProviderId.OPENAI,
        display_name="Codex Mini", context_window=200000, max_output=100000,
        cost_per_1k_input=0.0015, cost_per_1k_output=0.006,
        speed=SpeedTier.FAST, quality=QualityTier.EXCELLENT,
        best_for=("coding", "structured-output", "json-generation", "data-analysis"),
    ),
    # Google
    _model(
        "gemini-2.0-flash", "gemini-2.0-flash", ProviderId.GEMINI,
        display_name="Gemini 2.0 Flash", context_window=1048576, max_output=8192,
        cost_per_1k_input=0.0001, cost_per_1k_output=0.0004,
        speed=SpeedTier.FASTEST, quality=QualityTier.GOOD,
        best_for=("speed", "simple-tasks", "high-volume", "cost-sensitive"),
    ),
    _model(
        "gemini-2.5-pro", "gemini-2.5-pro-preview-06-05", ProviderId.GEMINI,
        display_name="Gemini 2.5 Pro", context_window=1048576, max_output=65536,
        cost_per_1k_input=0.00125, cost_per_1k_output=0.01,
        speed=SpeedTier.MEDIUM, quality=QualityTier.EXCELLENT,
        best_for=("complex-analysis", "long-context", "multimodal"),
    ),
    # Mistral
    _model(
        "mistral-large", "mistral-large-latest", ProviderId.MISTRAL,
        display_name="Mistral Large", context_window=128000, max_output=8192,
        cost_per_1k_input=0.002, cost_per_1k_output=0.006,
        speed=SpeedTier.FAST, quality=QualityTier.EXCELLENT,
        best_for=("analysis", "multilingual", "european-compliance"),
    ),
    _model(
        "codestral", "codestral-latest", ProviderId.MISTRAL,
        display_name="Codestral", context_window=256000, max_output=8192,
        cost_per_1k_input=0.0003, cost_per_1k_output=0.0009,
        speed=SpeedTier.FAST, quality=QualityTier.EXCELLENT,
        best_for=("coding", "structured-output", "json-generation"),
    ),
    _model(
        "mistral-small", "mistral-small-latest", ProviderId.MISTRAL,
        display_name="Mistral Small", context_window=32000, max_output=8192,
        cost_per_1k_input=0.0001, cost_per_1k_output=0.0003,
        speed=SpeedTier.FASTEST, quality=QualityTier.GOOD,
        best_for=("classification", "simple-tasks", "high-volume"),
    ),
    # DeepSeek
    _model(
        "deepseek-chat", "deepseek-chat", ProviderId.DEEPSEEK,
        display_name="DeepSeek-V3", context_window=64000, max_output=8192,
        cost_per_1k_input=0.00027, cost_per_1k_output=0.0011,
        speed=SpeedTier.FAST, quality=QualityTier.EXCELLENT,
        best_for=("analysis", "reasoning", "cost-sensitive"),
    ),
    _model(
        "deepseek-reasoner", "deepseek-reasoner", ProviderId.DEEPSEEK,
        display_name="DeepSeek-R1 (Reasoning)", context_window=64000, max_output=8192,
        cost_per_1k_input=0.00055, cost_per_1k_output=0.00219,
        speed=SpeedTier.MEDIUM, quality=QualityTier.EXCELLENT,
        best_for=("complex-reasoning", "math", "deep-analysis"),
    ),
    # Cloudflare Workers AI (free)
    _model(
        "cf-llama-70b", "@cf/meta/llama-3.3-70b-instruct-fp8-fast", ProviderId.CLOUDFLARE,
        display_name="Llama 3.3 70B", context_window=8192, max_output=4096,
        speed=SpeedTier.MEDIUM, quality=QualityTier.GOOD,
        best_for=("simple-tasks", "fallback", "free-tier"),
    ),
    _model(
        "cf-llama-8b", "@cf/meta/llama-3.1-8b-instruct-fast", ProviderId.CLOUDFLARE,
        display_name="Llama 3.1 8B", context_window=4096, max_output=2048,
        speed=SpeedTier.FASTEST, quality=QualityTier.BASIC,
        best_for=("classification", "simple-extraction", "free-tier"),
    ),
    _model(
        "cf-bge-embedding", "@cf/baai/bge-base-en-v1.5", ProviderId.CLOUDFLARE,
        display_name="BGE Base Embeddings", context_window=512, max_output=768,
        speed=SpeedTier.FASTEST, quality=QualityTier.GOOD, kind=ModelKind.EMBEDDING,
        best_for=("embeddings",), dimensions=768,
    ),
)

MODELS: Mapping[str, ModelDescriptor] = MappingProxyType({m.key: m for m in _MODEL_LIST})


# --- Capability chain map ---
# First available model in a chain wins; every text chain ends on Workers AI.

CapabilityChainMap = Mapping[str, Mapping[Complexity, tuple[str, ...]]]


def _chains(
    simple: Iterable[str], standard: Iterable[str], complex_: Iterable[str]
) -> Mapping[Complexity, tuple[str, ...]]:
    return MappingProxyType(
        {
            Complexity.SIMPLE: tuple(simple),
            Complexity.STANDARD: tuple(standard),
            Complexity.COMPLEX: tuple(complex_),
        }
    )


CAPABILITY_CHAINS: CapabilityChainMap = MappingProxyType(
    {
        "intent-classify": _chains(
            ["claude-haiku-3.5", "gpt-4o-mini", "gemini-2.0-flash", "mistral-small", "cf-llama-8b"],
            ["claude-sonnet-4", "gpt-4o", "gemini-2.0-flash", "mistral-large", "cf-llama-70b"],
            ["claude-sonnet-4", "gpt-4o", "gemini-2.5-pro", "mistral-large", "cf-llama-70b"],
        ),
        "anomaly-diagnose": _chains(
            ["claude-haiku-3.5", "gpt-4o-mini", "deepseek-chat", "cf-llama-70b"],
            ["claude-sonnet-4", "gpt-4o", "deepseek-chat", "mistral-large", "cf-llama-70b"],
            ["claude-sonnet-4", "o3-mini", "deepseek-reasoner", "gemini-2.5-pro", "cf-llama-70b"],
        ),
        "embedding-cluster": _chains(
            ["cf-bge-embedding"],
            ["cf-bge-embedding"],
            ["cf-bge-embedding"],
        ),
        "chat": _chains(
            ["claude-haiku-3.5", "gpt-4o-mini", "gemini-2.0-flash", "cf-llama-8b"],
            ["claude-sonnet-4", "gpt-4o", "gemini-2.0-flash", "deepseek-chat", "cf-llama-70b"],
            ["claude-sonnet-4", "gpt-4o", "gemini-2.5-pro", "deepseek-chat", "cf-llama-70b"],
        ),
        "content-rewrite": _chains(
            ["claude-haiku-3.5", "gpt-4o-mini", "mistral-small", "cf-llama-8b"],
            ["claude-sonnet-4", "gpt-4o", "mistral-large", "deepseek-chat", "cf-llama-70b"],
            ["claude-sonnet-4", "gpt-4o", "gemini-2.5-pro", "mistral-large", "cf-llama-70b"],
        ),
        "refine-recs": _chains(
            ["claude-sonnet-4", "gpt-4o", "deepseek-chat", "cf-llama-70b"],
            ["claude-sonnet-4", "gpt-4o", "gemini-2.5-pro", "deepseek-chat", "cf-llama-70b"],
            ["claude-opus-4", "o1", "claude-sonnet-4", "deepseek-reasoner", "cf-llama-70b"],
        ),
        "smart-forecast": _chains(
            ["claude-haiku-3.5", "gpt-4o-mini", "deepseek-chat", "cf-llama-70b"],
            ["claude-sonnet-4", "o3-mini", "deepseek-chat", "mistral-large", "cf-llama-70b"],
            ["claude-sonnet-4", "o3-mini", "deepseek-reasoner", "gemini-2.5-pro", "cf-llama-70b"],
        ),
    }
)


# --- Model Registry ---


class ModelRegistry:
    """Read-only view over a provider catalog, model catalog and chain map.

    Instances never change after construction; every query is a pure read.
    """

    def __init__(
        self,
        *,
        providers: Mapping[ProviderId, ProviderDescriptor] = PROVIDERS,
        models: Mapping[str, ModelDescriptor] = MODELS,
        chains: CapabilityChainMap = CAPABILITY_CHAINS,
    ) -> None:
        """Initialize the registry.

        Args:
            providers: Provider descriptors keyed by id.
            models: Model descriptors keyed by registry key. Iteration order is
                the tie-break when two models share quality and speed tiers.
            chains: Capability -> complexity -> ordered model keys.
        """
        self._providers = MappingProxyType(dict(providers))
        self._models = MappingProxyType(dict(models))
        self._chains = MappingProxyType(dict(chains))

    @property
    def providers(self) -> Mapping[ProviderId, ProviderDescriptor]:
        return self._providers

    @property
    def models(self) -> Mapping[str, ModelDescriptor]:
        return self._models

    @property
    def chains(self) -> CapabilityChainMap:
        return self._chains

    def get_model(self, key: str) -> ModelDescriptor | None:
        """Get a model descriptor by registry key.

        Args:
            key: The registry key (e.g. ``"gpt-4o"``).

        Returns:
            ModelDescriptor if found, None otherwise.
        """
        return self._models.get(key)

    def get_provider(self, provider_id: str) -> ProviderDescriptor | None:
        try:
            return self._providers.get(ProviderId(provider_id))
        except ValueError:
            return None

    def is_provider_available(self, provider_id: str, credentials: ProviderCredentials) -> bool:
        """Evaluate a provider's availability predicate.

        Unknown provider ids are reported as unavailable.
        """
        provider = self.get_provider(provider_id)
        if provider is None:
            return False
        return provider.is_available(credentials)

    def models_for_provider(
        self,
        provider_id: str,
        complexity: Complexity | None = None,
        *,
        include_embeddings: bool = False,
    ) -> list[ModelDescriptor]:
        """Return a provider's models, best quality first.

        For ``Complexity.SIMPLE`` the list is re-sorted by speed, so quality
        only breaks ties between equally fast models. Both sorts are stable,
        so catalog order breaks any remaining ties.

        Args:
            provider_id: The provider to list.
            complexity: Optional complexity tier controlling the ordering.
            include_embeddings: Whether embedding models are included.

        Returns:
            Ordered list of model descriptors (empty for unknown providers).
        """
        models = [
            m
            for m in self._models.values()
            if m.provider_id == provider_id
            and (include_embeddings or m.kind is not ModelKind.EMBEDDING)
        ]
        models.sort(key=lambda m: m.quality.rank)
        if complexity == Complexity.SIMPLE:
            models.sort(key=lambda m: m.speed.rank)
        return models

    def chain_for(self, capability: str, complexity: Complexity) -> tuple[str, ...] | None:
        """Return the configured model keys for a capability.

        Falls back to the capability's standard chain when the requested
        complexity has none. Returns None for unknown capabilities.
        """
        tiers = self._chains.get(capability)
        if tiers is None:
            return None
        return tiers.get(complexity) or tiers.get(Complexity.STANDARD)

    def provider_status(self, credentials: ProviderCredentials) -> dict[str, dict[str, Any]]:
        """Summarize every provider: availability, tier, strengths and models."""
        status: dict[str, dict[str, Any]] = {}
        for provider_id, provider in self._providers.items():
            status[provider_id.value] = {
                "name": provider.display_name,
                "available": provider.is_available(credentials),
                "tier": provider.tier.value,
                "strengths": list(provider.strengths),
                "models": [
                    {
                        "key": m.key,
                        "name": m.display_name,
                        "quality": m.quality.value,
                        "speed": m.speed.value,
                        "cost_per_1k_input": m.cost_per_1k_input,
                        "cost_per_1k_output": m.cost_per_1k_output,
                    }
                    for m in self._models.values()
                    if m.provider_id == provider_id
                ],
            }
        logger.debug(
            "provider_status_built",
            available=[p for p, s in status.items() if s["available"]],
        )
        return status


DEFAULT_REGISTRY = ModelRegistry()
