"""Tests for modelchain settings."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING
from unittest.mock import patch

if TYPE_CHECKING:
    from pathlib import Path

import pytest
from pydantic import ValidationError

from modelchain.config.settings import (
    LogSettings,
    ModelChainSettings,
    ProviderCredentials,
    RoutingSettings,
    get_settings,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("MODELCHAIN_"):
            monkeypatch.delenv(key)


class TestDefaultSettings:
    def test_credentials_empty(self) -> None:
        settings = ModelChainSettings(_env_file=None)
        assert settings.credentials == ProviderCredentials()
        assert settings.credentials.anthropic_api_key == ""
        assert settings.credentials.cloudflare_configured is False

    def test_routing_defaults(self) -> None:
        routing = ModelChainSettings(_env_file=None).routing
        assert routing.force_provider is None
        assert routing.preferred_provider == "claude"
        assert routing.timeout_ms == 30000
        assert routing.default_max_tokens == 4096

    def test_log_defaults(self) -> None:
        log = ModelChainSettings(_env_file=None).log
        assert log == LogSettings(level="INFO", format="json")


class TestEnvOverrides:
    def test_credential_from_env(self) -> None:
        with patch.dict(os.environ, {"MODELCHAIN_CREDENTIALS__OPENAI_API_KEY": "sk-env"}):
            settings = ModelChainSettings(_env_file=None)
        assert settings.credentials.openai_api_key == "sk-env"

    def test_cloudflare_from_env(self) -> None:
        env = {
            "MODELCHAIN_CREDENTIALS__CLOUDFLARE_ACCOUNT_ID": "acct",
            "MODELCHAIN_CREDENTIALS__CLOUDFLARE_API_TOKEN": "tok",
        }
        with patch.dict(os.environ, env):
            settings = ModelChainSettings(_env_file=None)
        assert settings.credentials.cloudflare_configured is True

    def test_routing_from_env(self) -> None:
        env = {
            "MODELCHAIN_ROUTING__TIMEOUT_MS": "15000",
            "MODELCHAIN_ROUTING__FORCE_PROVIDER": "mistral",
        }
        with patch.dict(os.environ, env):
            routing = ModelChainSettings(_env_file=None).routing
        assert routing.timeout_ms == 15000
        assert routing.force_provider == "mistral"

    def test_log_level_from_env(self) -> None:
        with patch.dict(os.environ, {"MODELCHAIN_LOG__LEVEL": "DEBUG"}):
            assert ModelChainSettings(_env_file=None).log.level == "DEBUG"

    def test_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("MODELCHAIN_CREDENTIALS__DEEPSEEK_API_KEY=ds-file\n")
        settings = ModelChainSettings(_env_file=env_file)
        assert settings.credentials.deepseek_api_key == "ds-file"


class TestValidation:
    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RoutingSettings(timeout_ms=0)

    def test_max_tokens_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RoutingSettings(default_max_tokens=0)


class TestGetSettings:
    def test_overrides(self) -> None:
        routing = RoutingSettings(preferred_provider="gemini")
        settings = get_settings(_env_file=None, routing=routing)
        assert settings.routing.preferred_provider == "gemini"

    def test_cloudflare_needs_both(self) -> None:
        assert not ProviderCredentials(cloudflare_account_id="a").cloudflare_configured
        assert ProviderCredentials(
            cloudflare_account_id="a", cloudflare_api_token="t"
        ).cloudflare_configured
