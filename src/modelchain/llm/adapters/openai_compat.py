"""OpenAI and DeepSeek adapters, both driven through the OpenAI SDK.

DeepSeek exposes an OpenAI-compatible Chat Completions endpoint, so it shares
the request mapping and only differs in base URL and structured-output support.
"""

from __future__ import annotations

__all__ = ["DeepSeekAdapter", "OpenAIAdapter"]

import time
from typing import Any, ClassVar

import openai
import structlog
from openai import AsyncOpenAI

from modelchain.core.types import AdapterRequest, GenerationResult, ProviderId, TokenUsage
from modelchain.llm.errors import AdapterError

logger = structlog.get_logger(__name__)


class OpenAIAdapter:
    """Adapter for the OpenAI Chat Completions API.

    Reasoning models (o-series) take no system message, use
    ``max_completion_tokens`` and ignore ``response_format``.
    """

    provider_id: ClassVar[ProviderId] = ProviderId.OPENAI
    REASONING_MODELS: ClassVar[frozenset[str]] = frozenset(
        {"o1", "o1-mini", "o1-preview", "o3-mini"}
    )
    SUPPORTS_JSON_SCHEMA: ClassVar[bool] = True

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
    ) -> None:
        """Initialise the adapter.

        Args:
            api_key: Provider API key.
            base_url: Optional API base URL override.
            timeout_seconds: SDK-level request timeout.
        """
        # Retries are disabled; moving down the chain is the retry policy.
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )

    def _build_kwargs(self, call: AdapterRequest) -> dict[str, Any]:
        model_id = call.model.model_id
        reasoning = model_id in self.REASONING_MODELS

        if reasoning:
            messages = [
                {"role": "user", "content": f"{call.system_prompt}\n\n{call.user_prompt}"}
            ]
        else:
            messages = [
                {"role": "system", "content": call.system_prompt},
                {"role": "user", "content": call.user_prompt},
            ]

        kwargs: dict[str, Any] = {"model": model_id, "messages": messages}
        if reasoning:
            kwargs["max_completion_tokens"] = call.max_tokens
            return kwargs

        kwargs["max_tokens"] = call.max_tokens
        if call.json_schema is not None and self.SUPPORTS_JSON_SCHEMA:
            kwargs["response_format"] = {"type": "json_schema", "json_schema": call.json_schema}
        elif call.json_mode or call.json_schema is not None:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    async def run(self, call: AdapterRequest) -> GenerationResult:
        kwargs = self._build_kwargs(call)

        start = time.monotonic()
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.APIError as exc:
            status_code = getattr(exc, "status_code", None)
            logger.error(
                "openai_api_error",
                provider=self.provider_id,
                status_code=status_code,
                error=str(exc),
            )
            raise AdapterError(
                self.provider_id,
                f"{self.provider_id} API error: {exc}",
                status_code=status_code,
            ) from exc
        duration_ms = (time.monotonic() - start) * 1000

        if not response.choices:
            raise AdapterError(self.provider_id, f"{self.provider_id} returned no choices")
        choice = response.choices[0]

        tokens = TokenUsage()
        if response.usage:
            tokens = TokenUsage(
                input=response.usage.prompt_tokens or 0,
                output=response.usage.completion_tokens or 0,
            )

        logger.debug(
            "openai_completion_success",
            provider=self.provider_id,
            model=call.model.model_id,
            duration_ms=duration_ms,
        )
        return GenerationResult(
            text=choice.message.content or "",
            tokens_used=tokens,
            duration_ms=duration_ms,
            model_id=call.model.model_id,
            provider_id=self.provider_id,
            stop_reason=choice.finish_reason,
        )

    async def close(self) -> None:
        await self._client.close()


class DeepSeekAdapter(OpenAIAdapter):
    """Adapter for DeepSeek's OpenAI-compatible API (JSON object mode only)."""

    provider_id: ClassVar[ProviderId] = ProviderId.DEEPSEEK
    REASONING_MODELS: ClassVar[frozenset[str]] = frozenset()
    SUPPORTS_JSON_SCHEMA: ClassVar[bool] = False

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.deepseek.com",
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(api_key=api_key, base_url=base_url, timeout_seconds=timeout_seconds)
