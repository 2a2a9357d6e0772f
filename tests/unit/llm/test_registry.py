"""Tests for the model and provider registry."""

from __future__ import annotations

import pytest

from modelchain.config.settings import ProviderCredentials
from modelchain.core.types import (
    Complexity,
    ModelDescriptor,
    ModelKind,
    ProviderId,
    QualityTier,
    SpeedTier,
)
from modelchain.llm.registry import (
    CAPABILITY_CHAINS,
    DEFAULT_REGISTRY,
    MODELS,
    PROVIDERS,
    ModelRegistry,
)

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class TestCatalog:
    def test_six_providers(self) -> None:
        assert set(PROVIDERS) == set(ProviderId)

    def test_every_model_belongs_to_known_provider(self) -> None:
        for model in MODELS.values():
            assert model.provider_id in PROVIDERS

    def test_model_keys_match_mapping(self) -> None:
        for key, model in MODELS.items():
            assert model.key == key

    def test_every_chain_key_is_registered(self) -> None:
        for tiers in CAPABILITY_CHAINS.values():
            for keys in tiers.values():
                for key in keys:
                    assert key in MODELS

    def test_text_chains_end_on_workers_ai(self) -> None:
        for capability, tiers in CAPABILITY_CHAINS.items():
            if capability == "embedding-cluster":
                continue
            for keys in tiers.values():
                assert MODELS[keys[-1]].provider_id is ProviderId.CLOUDFLARE

    def test_embedding_model(self) -> None:
        model = MODELS["cf-bge-embedding"]
        assert model.kind is ModelKind.EMBEDDING
        assert model.dimensions == 768

    def test_workers_ai_models_are_free(self) -> None:
        for model in MODELS.values():
            if model.provider_id is ProviderId.CLOUDFLARE:
                assert model.cost_per_1k_input == 0.0
                assert model.cost_per_1k_output == 0.0

    def test_catalog_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            MODELS["new"] = MODELS["gpt-4o"]  # type: ignore[index]

    def test_descriptor_is_frozen(self) -> None:
        with pytest.raises(ValueError):
            MODELS["gpt-4o"].cost_per_1k_input = 1.0  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Tier ordering
# ---------------------------------------------------------------------------


class TestTierRank:
    def test_quality_rank(self) -> None:
        assert QualityTier.BEST.rank < QualityTier.EXCELLENT.rank < QualityTier.GOOD.rank
        assert QualityTier.BASIC.rank == 3

    def test_speed_rank(self) -> None:
        assert SpeedTier.FASTEST.rank == 0
        assert SpeedTier.SLOW.rank == 3


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


class TestAvailability:
    def test_api_key_providers(self, no_credentials: ProviderCredentials) -> None:
        creds = ProviderCredentials(openai_api_key="sk")
        assert DEFAULT_REGISTRY.is_provider_available("openai", creds)
        assert not DEFAULT_REGISTRY.is_provider_available("claude", creds)
        assert not DEFAULT_REGISTRY.is_provider_available("openai", no_credentials)

    def test_workers_ai_needs_account_and_token(self) -> None:
        only_account = ProviderCredentials(cloudflare_account_id="acct")
        only_token = ProviderCredentials(cloudflare_api_token="tok")
        assert not DEFAULT_REGISTRY.is_provider_available("cloudflare", only_account)
        assert not DEFAULT_REGISTRY.is_provider_available("cloudflare", only_token)

    def test_workers_ai_available(self, cloudflare_only: ProviderCredentials) -> None:
        assert DEFAULT_REGISTRY.is_provider_available(ProviderId.CLOUDFLARE, cloudflare_only)

    def test_unknown_provider_unavailable(self, all_credentials: ProviderCredentials) -> None:
        assert not DEFAULT_REGISTRY.is_provider_available("nonexistent", all_credentials)
        assert DEFAULT_REGISTRY.get_provider("nonexistent") is None


# ---------------------------------------------------------------------------
# models_for_provider
# ---------------------------------------------------------------------------


class TestModelsForProvider:
    def test_quality_first(self) -> None:
        keys = [m.key for m in DEFAULT_REGISTRY.models_for_provider("claude")]
        assert keys == ["claude-opus-4", "claude-sonnet-4", "claude-haiku-3.5"]

    def test_simple_sorts_by_speed(self) -> None:
        keys = [m.key for m in DEFAULT_REGISTRY.models_for_provider("claude", Complexity.SIMPLE)]
        assert keys == ["claude-haiku-3.5", "claude-sonnet-4", "claude-opus-4"]

    def test_simple_fastest_first(self) -> None:
        # mistral-large and codestral tie on speed and quality; catalog order decides
        keys = [m.key for m in DEFAULT_REGISTRY.models_for_provider("mistral", Complexity.SIMPLE)]
        assert keys == ["mistral-small", "mistral-large", "codestral"]

    def test_insertion_order_breaks_full_ties(self) -> None:
        keys = [m.key for m in DEFAULT_REGISTRY.models_for_provider("openai")]
        assert keys[0] == "o1"
        # gpt-4o, o3-mini and codex-mini are all excellent
        assert keys[1:4] == ["gpt-4o", "o3-mini", "codex-mini"]

    def test_embeddings_excluded_by_default(self) -> None:
        keys = [m.key for m in DEFAULT_REGISTRY.models_for_provider("cloudflare")]
        assert "cf-bge-embedding" not in keys
        assert keys == ["cf-llama-70b", "cf-llama-8b"]

    def test_embeddings_included_on_request(self) -> None:
        models = DEFAULT_REGISTRY.models_for_provider("cloudflare", include_embeddings=True)
        assert "cf-bge-embedding" in [m.key for m in models]

    def test_unknown_provider_empty(self) -> None:
        assert DEFAULT_REGISTRY.models_for_provider("nonexistent") == []


# ---------------------------------------------------------------------------
# Capability chains
# ---------------------------------------------------------------------------


class TestChainFor:
    def test_known_capability(self) -> None:
        keys = DEFAULT_REGISTRY.chain_for("chat", Complexity.SIMPLE)
        assert keys == ("claude-haiku-3.5", "gpt-4o-mini", "gemini-2.0-flash", "cf-llama-8b")

    def test_unknown_capability(self) -> None:
        assert DEFAULT_REGISTRY.chain_for("poetry", Complexity.STANDARD) is None

    def test_missing_tier_falls_back_to_standard(self) -> None:
        registry = ModelRegistry(
            chains={"partial": {Complexity.STANDARD: ("gpt-4o",)}},
        )
        assert registry.chain_for("partial", Complexity.COMPLEX) == ("gpt-4o",)


# ---------------------------------------------------------------------------
# Custom registries
# ---------------------------------------------------------------------------


class TestCustomRegistry:
    def test_custom_models(self) -> None:
        model = ModelDescriptor(
            key="tiny",
            model_id="tiny-1",
            provider_id=ProviderId.MISTRAL,
            quality=QualityTier.BASIC,
            speed=SpeedTier.FASTEST,
        )
        registry = ModelRegistry(models={"tiny": model})
        assert registry.get_model("tiny") is model
        assert registry.get_model("gpt-4o") is None
        assert registry.models_for_provider("mistral") == [model]


# ---------------------------------------------------------------------------
# provider_status
# ---------------------------------------------------------------------------


class TestProviderStatus:
    def test_shape(self, cloudflare_only: ProviderCredentials) -> None:
        status = DEFAULT_REGISTRY.provider_status(cloudflare_only)
        assert set(status) == {p.value for p in ProviderId}
        assert status["cloudflare"]["available"] is True
        assert status["claude"]["available"] is False
        assert status["cloudflare"]["tier"] == "free"
        assert status["claude"]["name"] == "Anthropic Claude"

    def test_models_listed(self, no_credentials: ProviderCredentials) -> None:
        status = DEFAULT_REGISTRY.provider_status(no_credentials)
        keys = [m["key"] for m in status["claude"]["models"]]
        assert keys == ["claude-sonnet-4", "claude-opus-4", "claude-haiku-3.5"]
        sonnet = status["claude"]["models"][0]
        assert sonnet["quality"] == "excellent"
        assert sonnet["cost_per_1k_input"] == 0.003
