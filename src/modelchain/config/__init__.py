"""Configuration management for modelchain."""

from modelchain.config.settings import (
    LogSettings,
    ModelChainSettings,
    ProviderCredentials,
    RoutingSettings,
    get_settings,
)

__all__ = [
    "LogSettings",
    "ModelChainSettings",
    "ProviderCredentials",
    "RoutingSettings",
    "get_settings",
]
