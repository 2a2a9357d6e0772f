"""modelchain: multi-provider LLM routing with ordered fallback and tolerant output parsing."""

from modelchain.config.settings import ModelChainSettings, get_settings
from modelchain.core.types import (
    Complexity,
    EmbeddingResult,
    GenerationRequest,
    GenerationResult,
    ProviderId,
)
from modelchain.llm import (
    AllModelsFailedError,
    ConfigurationError,
    ModelChainError,
    ModelRouter,
    estimate_cost,
    resolve_chain,
)
from modelchain.parsing import parse_and_validate, parse_array_response, quality_record

__version__ = "0.1.0"

__all__ = [
    "AllModelsFailedError",
    "Complexity",
    "ConfigurationError",
    "EmbeddingResult",
    "GenerationRequest",
    "GenerationResult",
    "ModelChainError",
    "ModelChainSettings",
    "ModelRouter",
    "ProviderId",
    "__version__",
    "estimate_cost",
    "get_settings",
    "parse_and_validate",
    "parse_array_response",
    "quality_record",
    "resolve_chain",
]
