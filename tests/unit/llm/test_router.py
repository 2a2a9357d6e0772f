"""Tests for the ModelRouter facade."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from modelchain.config.settings import ModelChainSettings, ProviderCredentials
from modelchain.core.types import Complexity, EmbeddingResult, GenerationRequest, ProviderId
from modelchain.llm.adapters import CloudflareAdapter
from modelchain.llm.errors import AllModelsFailedError, ConfigurationError
from modelchain.llm.mock import MockAdapter
from modelchain.llm.router import ModelRouter


class TestResolve:
    def test_settings_force_provider(
        self, all_credentials, settings_factory, mock_adapters
    ) -> None:
        router = ModelRouter(
            settings_factory(all_credentials, force_provider="mistral"), adapters=mock_adapters
        )
        chain = router.resolve(GenerationRequest(user_prompt="x", capability="chat"))
        assert {e.provider_id for e in chain} == {ProviderId.MISTRAL}

    def test_request_force_provider_wins(
        self, all_credentials, settings_factory, mock_adapters
    ) -> None:
        router = ModelRouter(
            settings_factory(all_credentials, force_provider="mistral"), adapters=mock_adapters
        )
        chain = router.resolve(GenerationRequest(user_prompt="x", force_provider="gemini"))
        assert {e.provider_id for e in chain} == {ProviderId.GEMINI}

    def test_preferred_provider_from_settings(
        self, all_credentials, settings_factory, mock_adapters
    ) -> None:
        router = ModelRouter(
            settings_factory(all_credentials, preferred_provider="deepseek"),
            adapters=mock_adapters,
        )
        chain = router.resolve(GenerationRequest(user_prompt="x"))
        assert chain[0].provider_id is ProviderId.DEEPSEEK

    def test_request_preferred_provider_wins(
        self, all_credentials, settings_factory, mock_adapters
    ) -> None:
        router = ModelRouter(settings_factory(all_credentials), adapters=mock_adapters)
        chain = router.resolve(
            GenerationRequest(user_prompt="x", preferred_provider="openai", complexity="simple")
        )
        assert chain[0].provider_id is ProviderId.OPENAI


class TestGenerate:
    async def test_capability_chain(
        self, all_credentials, settings_factory, mock_adapters
    ) -> None:
        router = ModelRouter(settings_factory(all_credentials), adapters=mock_adapters)
        result = await router.generate(
            GenerationRequest(user_prompt="hi", capability="chat", complexity=Complexity.COMPLEX)
        )
        assert result.provider_id is ProviderId.CLAUDE
        assert result.model_key == "claude-sonnet-4"
        assert result.text == '{"provider": "claude"}'

    async def test_default_max_tokens_from_settings(
        self, cloudflare_only, settings_factory, mock_adapters
    ) -> None:
        router = ModelRouter(
            settings_factory(cloudflare_only, default_max_tokens=777), adapters=mock_adapters
        )
        await router.generate(GenerationRequest(user_prompt="hi"))
        assert mock_adapters[ProviderId.CLOUDFLARE].call_history[0].max_tokens == 777

    async def test_explicit_max_tokens_kept(
        self, cloudflare_only, settings_factory, mock_adapters
    ) -> None:
        router = ModelRouter(settings_factory(cloudflare_only), adapters=mock_adapters)
        await router.generate(GenerationRequest(user_prompt="hi", max_tokens=64))
        assert mock_adapters[ProviderId.CLOUDFLARE].call_history[0].max_tokens == 64

    async def test_settings_timeout_applies(self, cloudflare_only, settings_factory) -> None:
        slow = MockAdapter(ProviderId.CLOUDFLARE, delay_seconds=5.0)
        router = ModelRouter(
            settings_factory(cloudflare_only, timeout_ms=10),
            adapters={ProviderId.CLOUDFLARE: slow},
        )
        with pytest.raises(AllModelsFailedError):
            await router.generate(GenerationRequest(user_prompt="hi"))
        assert slow.cancelled_calls == 1

    async def test_no_providers(self, no_credentials, settings_factory) -> None:
        router = ModelRouter(settings_factory(no_credentials))
        with pytest.raises(ConfigurationError):
            await router.generate(GenerationRequest(user_prompt="hi"))

    async def test_concurrent_requests_are_independent(
        self, all_credentials, settings_factory, mock_adapters
    ) -> None:
        router = ModelRouter(settings_factory(all_credentials), adapters=mock_adapters)
        results = await asyncio.gather(
            router.generate(GenerationRequest(user_prompt="a", force_provider="gemini")),
            router.generate(GenerationRequest(user_prompt="b", force_provider="mistral")),
        )
        assert [r.provider_id for r in results] == [ProviderId.GEMINI, ProviderId.MISTRAL]


class TestEmbed:
    async def test_requires_workers_ai(
        self, all_credentials, settings_factory, mock_adapters
    ) -> None:
        # MockAdapter has no embed(), so there is no embeddings backend
        router = ModelRouter(settings_factory(all_credentials), adapters=mock_adapters)
        with pytest.raises(ConfigurationError, match="Cloudflare AI credentials required"):
            await router.embed(["hello"])

    async def test_not_configured(self, no_credentials, settings_factory) -> None:
        router = ModelRouter(settings_factory(no_credentials))
        with pytest.raises(ConfigurationError):
            await router.embed(["hello"])

    async def test_uses_cloudflare_adapter(self, cloudflare_only, settings_factory) -> None:
        router = ModelRouter(settings_factory(cloudflare_only))
        adapter = router._adapters[ProviderId.CLOUDFLARE]
        assert isinstance(adapter, CloudflareAdapter)
        expected = EmbeddingResult(embeddings=[[0.5]], dimensions=1)
        with patch.object(adapter, "embed", new_callable=AsyncMock, return_value=expected) as embed:
            result = await router.embed(["hello"])
        assert result is expected
        embed.assert_awaited_once_with(["hello"])
        await router.aclose()


class TestStatusAndLifecycle:
    def test_provider_status(self, cloudflare_only, settings_factory) -> None:
        router = ModelRouter(settings_factory(cloudflare_only))
        status = router.provider_status()
        assert status["cloudflare"]["available"] is True
        assert status["openai"]["available"] is False

    def test_adapters_built_from_credentials(self) -> None:
        creds = ProviderCredentials(openai_api_key="sk", mistral_api_key="m")
        router = ModelRouter(ModelChainSettings(_env_file=None, credentials=creds))
        assert set(router._adapters) == {ProviderId.OPENAI, ProviderId.MISTRAL}

    async def test_aclose(self, cloudflare_only, settings_factory) -> None:
        closable = MockAdapter()
        closable.close = AsyncMock()  # type: ignore[attr-defined]
        router = ModelRouter(
            settings_factory(cloudflare_only), adapters={ProviderId.CLOUDFLARE: closable}
        )
        await router.aclose()
        closable.close.assert_awaited_once()
