"""Generation routing layer.

Model registry, chain resolution, fallback execution, cost estimation,
backend adapters, embeddings and the ModelRouter facade.
"""

from modelchain.llm.adapters import (
    Adapter,
    ClaudeAdapter,
    CloudflareAdapter,
    DeepSeekAdapter,
    EmbeddingAdapter,
    GeminiAdapter,
    MistralAdapter,
    OpenAIAdapter,
    build_adapters,
)
from modelchain.llm.cost import estimate_cost
from modelchain.llm.embeddings import run_embeddings
from modelchain.llm.errors import (
    AdapterError,
    AllModelsFailedError,
    AttemptTimeoutError,
    ConfigurationError,
    ModelChainError,
)
from modelchain.llm.executor import FallbackExecutor
from modelchain.llm.mock import MockAdapter
from modelchain.llm.registry import (
    CAPABILITY_CHAINS,
    DEFAULT_REGISTRY,
    MODELS,
    PROVIDERS,
    ModelRegistry,
    ProviderDescriptor,
)
from modelchain.llm.resolver import AUTO_PROVIDER_ORDER, ChainEntry, resolve_chain
from modelchain.llm.router import ModelRouter

__all__ = [
    "AUTO_PROVIDER_ORDER",
    "CAPABILITY_CHAINS",
    "DEFAULT_REGISTRY",
    "MODELS",
    "PROVIDERS",
    "Adapter",
    "AdapterError",
    "AllModelsFailedError",
    "AttemptTimeoutError",
    "ChainEntry",
    "ClaudeAdapter",
    "CloudflareAdapter",
    "ConfigurationError",
    "DeepSeekAdapter",
    "EmbeddingAdapter",
    "FallbackExecutor",
    "GeminiAdapter",
    "MistralAdapter",
    "MockAdapter",
    "ModelChainError",
    "ModelRegistry",
    "ModelRouter",
    "OpenAIAdapter",
    "ProviderDescriptor",
    "build_adapters",
    "estimate_cost",
    "resolve_chain",
    "run_embeddings",
]
