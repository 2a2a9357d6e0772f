"""Shared type definitions for modelchain."""

from __future__ import annotations

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

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Tiers ---


class QualityTier(StrEnum):
    """Output quality tier, ordered best first."""

    BEST = "best"
    EXCELLENT = "excellent"
    GOOD = "good"
    BASIC = "basic"

    @property
    def rank(self) -> int:
        """Ordinal position (0 = best)."""
        return list(QualityTier).index(self)


class SpeedTier(StrEnum):
    """Latency tier, ordered fastest first."""

    FASTEST = "fastest"
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"

    @property
    def rank(self) -> int:
        """Ordinal position (0 = fastest)."""
        return list(SpeedTier).index(self)


class ModelKind(StrEnum):
    """What a model produces."""

    TEXT = "text"
    EMBEDDING = "embedding"


class Complexity(StrEnum):
    """Caller hint shifting chains toward cheaper or higher-quality backends."""

    SIMPLE = "simple"
    STANDARD = "standard"
    COMPLEX = "complex"


class ProviderId(StrEnum):
    """The closed set of supported inference providers."""

    CLAUDE = "claude"
    OPENAI = "openai"
    GEMINI = "gemini"
    MISTRAL = "mistral"
    DEEPSEEK = "deepseek"
    CLOUDFLARE = "cloudflare"


class ProviderTier(StrEnum):
    """Commercial tier of a provider."""

    PREMIUM = "premium"
    MID = "mid"
    BUDGET = "budget"
    FREE = "free"


# --- Model catalog entry ---


class ModelDescriptor(BaseModel):
    """Static description of one model offered by a provider."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    key: str  # registry key, e.g. "claude-sonnet-4"
    model_id: str  # id sent to the backend
    provider_id: ProviderId
    display_name: str = ""
    quality: QualityTier
    speed: SpeedTier
    cost_per_1k_input: float = Field(default=0.0, ge=0.0)  # USD
    cost_per_1k_output: float = Field(default=0.0, ge=0.0)  # USD
    kind: ModelKind = ModelKind.TEXT
    context_window: int = Field(default=4096, ge=1)
    max_output: int = Field(default=4096, ge=1)
    best_for: tuple[str, ...] = ()
    dimensions: int | None = None  # embeddings only


# --- Requests ---


class GenerationRequest(BaseModel):
    """A text-generation request as supplied by a caller."""

    system_prompt: str = ""
    user_prompt: str
    complexity: Complexity = Complexity.STANDARD
    capability: str | None = None
    max_tokens: int | None = Field(default=None, ge=1)  # None = routing default
    force_provider: str | None = None
    force_model: str | None = None
    json_mode: bool = False
    json_schema: dict[str, Any] | None = None
    # per-call overrides of the routing settings
    timeout_ms: int | None = Field(default=None, ge=1)
    preferred_provider: str | None = None


class AdapterRequest(BaseModel):
    """The subset of a request that crosses the adapter boundary."""

    system_prompt: str = ""
    user_prompt: str
    model: ModelDescriptor
    max_tokens: int = 4096
    json_mode: bool = False
    json_schema: dict[str, Any] | None = None


# --- Results ---


class TokenUsage(BaseModel):
    """Token counts reported by a backend."""

    input: int = Field(default=0, ge=0)
    output: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.input + self.output


class Cost(BaseModel):
    """Estimated USD cost of one generation."""

    estimated: float = Field(default=0.0, ge=0.0)
    input_cost: float = Field(default=0.0, ge=0.0)
    output_cost: float = Field(default=0.0, ge=0.0)
    currency: str = "USD"


class GenerationResult(BaseModel):
    """Result of a generation, annotated by the executor with routing metadata."""

    model_config = ConfigDict(protected_namespaces=())

    text: str = ""
    tokens_used: TokenUsage = Field(default_factory=TokenUsage)
    duration_ms: float = 0.0
    model_id: str = ""
    provider_id: ProviderId
    stop_reason: str | None = None
    cost: Cost = Field(default_factory=Cost)
    model_key: str = ""
    fallback_used: bool = False
    fallback_chain: list[str] = Field(default_factory=list)
    attempt_index: int = Field(default=0, ge=0)


class EmbeddingResult(BaseModel):
    """Vectors returned by the embeddings backend."""

    model_config = ConfigDict(protected_namespaces=())

    embeddings: list[list[float]] = Field(default_factory=list)
    model_id: str = ""
    provider_id: ProviderId = ProviderId.CLOUDFLARE
    duration_ms: float = 0.0
    dimensions: int = 768
