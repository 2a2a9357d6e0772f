"""Core modelchain types."""

from modelchain.core.types import (
    AdapterRequest,
    Complexity,
    Cost,
    EmbeddingResult,
    GenerationRequest,
    GenerationResult,
    ModelDescriptor,
    ModelKind,
    ProviderId,
    ProviderTier,
    QualityTier,
    SpeedTier,
    TokenUsage,
)

__all__ = [
    "AdapterRequest",
    "Complexity",
    "Cost",
    "EmbeddingResult",
    "GenerationRequest",
    "GenerationResult",
    "ModelDescriptor",
    "ModelKind",
    "ProviderId",
    "ProviderTier",
    "QualityTier",
    "SpeedTier",
    "TokenUsage",
]
