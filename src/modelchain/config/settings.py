"""modelchain configuration management using pydantic-settings.

Loads settings from environment variables (with MODELCHAIN_ prefix) and .env files.
Nested settings use '__' as delimiter (e.g., MODELCHAIN_ROUTING__TIMEOUT_MS=15000).
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderCredentials(BaseModel):
    """Credentials for each inference provider.

    An empty string means "not configured"; provider availability is derived
    from which of these are present.
    """

    anthropic_api_key: str = ""
    openai_api_key: str = ""
    google_ai_api_key: str = ""
    mistral_api_key: str = ""
    deepseek_api_key: str = ""
    cloudflare_account_id: str = ""
    cloudflare_api_token: str = ""

    @property
    def cloudflare_configured(self) -> bool:
        """Workers AI needs both the account id and a token."""
        return bool(self.cloudflare_account_id and self.cloudflare_api_token)


class RoutingSettings(BaseModel):
    """Chain resolution and execution defaults."""

    force_provider: str | None = None  # None or "auto" = no forcing
    preferred_provider: str = "claude"
    timeout_ms: int = Field(default=30000, ge=1)
    default_max_tokens: int = Field(default=4096, ge=1)


class LogSettings(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: str = "json"


class ModelChainSettings(BaseSettings):
    """Root settings for modelchain.

    Settings are loaded from environment variables with the MODELCHAIN_ prefix
    and from .env files. Nested settings use '__' as delimiter.

    Examples:
        MODELCHAIN_CREDENTIALS__ANTHROPIC_API_KEY=sk-ant-xxx
        MODELCHAIN_ROUTING__PREFERRED_PROVIDER=openai
        MODELCHAIN_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="MODELCHAIN_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    credentials: ProviderCredentials = Field(default_factory=ProviderCredentials)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
    log: LogSettings = Field(default_factory=LogSettings)


def get_settings(**overrides: object) -> ModelChainSettings:
    """Create a ModelChainSettings instance with optional overrides."""
    return ModelChainSettings(**overrides)
