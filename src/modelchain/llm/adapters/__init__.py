"""Backend adapters and the startup-time dispatch table."""

from __future__ import annotations

from modelchain.config.settings import ProviderCredentials
from modelchain.core.types import ProviderId
from modelchain.llm.adapters.base import Adapter, EmbeddingAdapter, HttpAdapter, json_instruction
from modelchain.llm.adapters.claude import ClaudeAdapter
from modelchain.llm.adapters.cloudflare import CloudflareAdapter
from modelchain.llm.adapters.gemini import GeminiAdapter
from modelchain.llm.adapters.mistral import MistralAdapter
from modelchain.llm.adapters.openai_compat import DeepSeekAdapter, OpenAIAdapter

__all__ = [
    "Adapter",
    "ClaudeAdapter",
    "CloudflareAdapter",
    "DeepSeekAdapter",
    "EmbeddingAdapter",
    "GeminiAdapter",
    "HttpAdapter",
    "MistralAdapter",
    "OpenAIAdapter",
    "build_adapters",
    "json_instruction",
]


def build_adapters(credentials: ProviderCredentials) -> dict[ProviderId, Adapter]:
    """Build the provider -> adapter dispatch table for configured providers.

    Providers without credentials get no entry.
    """
    adapters: dict[ProviderId, Adapter] = {}
    if credentials.anthropic_api_key:
        adapters[ProviderId.CLAUDE] = ClaudeAdapter(api_key=credentials.anthropic_api_key)
    if credentials.openai_api_key:
        adapters[ProviderId.OPENAI] = OpenAIAdapter(api_key=credentials.openai_api_key)
    if credentials.google_ai_api_key:
        adapters[ProviderId.GEMINI] = GeminiAdapter(api_key=credentials.google_ai_api_key)
    if credentials.mistral_api_key:
        adapters[ProviderId.MISTRAL] = MistralAdapter(api_key=credentials.mistral_api_key)
    if credentials.deepseek_api_key:
        adapters[ProviderId.DEEPSEEK] = DeepSeekAdapter(api_key=credentials.deepseek_api_key)
    if credentials.cloudflare_configured:
        adapters[ProviderId.CLOUDFLARE] = CloudflareAdapter(
            account_id=credentials.cloudflare_account_id,
            api_token=credentials.cloudflare_api_token,
        )
    return adapters
