"""Shared test fixtures for modelchain tests."""

from __future__ import annotations

import pytest

from modelchain.config.settings import ModelChainSettings, ProviderCredentials, RoutingSettings
from modelchain.core.types import AdapterRequest, ProviderId
from modelchain.llm.mock import MockAdapter
from modelchain.llm.registry import DEFAULT_REGISTRY


@pytest.fixture
def all_credentials() -> ProviderCredentials:
    """Credentials with every provider configured."""
    return ProviderCredentials(
        anthropic_api_key="sk-ant-test",
        openai_api_key="sk-openai-test",
        google_ai_api_key="google-test",
        mistral_api_key="mistral-test",
        deepseek_api_key="deepseek-test",
        cloudflare_account_id="acct-123",
        cloudflare_api_token="cf-token",
    )


@pytest.fixture
def no_credentials() -> ProviderCredentials:
    """Credentials with nothing configured."""
    return ProviderCredentials()


@pytest.fixture
def cloudflare_only() -> ProviderCredentials:
    """Only Workers AI configured."""
    return ProviderCredentials(cloudflare_account_id="acct-123", cloudflare_api_token="cf-token")


@pytest.fixture
def mock_adapters() -> dict[ProviderId, MockAdapter]:
    """One MockAdapter per provider, each answering with its provider name."""
    return {
        pid: MockAdapter(pid, default_response=f'{{"provider": "{pid.value}"}}')
        for pid in ProviderId
    }


@pytest.fixture
def settings_factory():
    """Build settings without touching the environment or .env files."""

    def _make(credentials: ProviderCredentials, **routing: object) -> ModelChainSettings:
        return ModelChainSettings(
            _env_file=None,
            credentials=credentials,
            routing=RoutingSettings(**routing),
        )

    return _make


@pytest.fixture
def adapter_request() -> AdapterRequest:
    """A plain request against gpt-4o."""
    return AdapterRequest(
        system_prompt="You are terse.",
        user_prompt="Say hi",
        model=DEFAULT_REGISTRY.get_model("gpt-4o"),
        max_tokens=256,
    )
