"""Mistral AI adapter (chat completions)."""

from __future__ import annotations

import time
from typing import Any

import structlog

from modelchain.core.types import AdapterRequest, GenerationResult, ProviderId, TokenUsage
from modelchain.llm.adapters.base import HttpAdapter

logger = structlog.get_logger(__name__)

MISTRAL_BASE_URL = "https://api.mistral.ai/v1"


class MistralAdapter(HttpAdapter):
    """Adapter for the Mistral chat completions endpoint."""

    provider_id = ProviderId.MISTRAL

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = MISTRAL_BASE_URL,
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def run(self, call: AdapterRequest) -> GenerationResult:
        payload: dict[str, Any] = {
            "model": call.model.model_id,
            "max_tokens": call.max_tokens,
            "messages": [
                {"role": "system", "content": call.system_prompt},
                {"role": "user", "content": call.user_prompt},
            ],
        }
        # Mistral only has JSON object mode; a schema degrades to it
        if call.json_mode or call.json_schema is not None:
            payload["response_format"] = {"type": "json_object"}

        start = time.monotonic()
        data = await self._post_json(
            f"{self.base_url}/chat/completions",
            payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        duration_ms = self._elapsed_ms(start)

        choices = data.get("choices") or [{}]
        choice = choices[0]
        usage = data.get("usage") or {}

        logger.debug(
            "mistral_completion_success", model=call.model.model_id, duration_ms=duration_ms
        )
        return GenerationResult(
            text=(choice.get("message") or {}).get("content", "") or "",
            tokens_used=TokenUsage(
                input=usage.get("prompt_tokens", 0) or 0,
                output=usage.get("completion_tokens", 0) or 0,
            ),
            duration_ms=duration_ms,
            model_id=call.model.model_id,
            provider_id=self.provider_id,
            stop_reason=choice.get("finish_reason"),
        )
