"""Google Gemini adapter (generateContent API)."""

from __future__ import annotations

import time

import structlog

from modelchain.core.types import AdapterRequest, GenerationResult, ProviderId, TokenUsage
from modelchain.llm.adapters.base import HttpAdapter

logger = structlog.get_logger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiAdapter(HttpAdapter):
    """Adapter for Google AI Studio's Gemini API.

    JSON mode maps onto ``responseMimeType``; a schema is passed through as
    ``responseSchema``.
    """

    provider_id = ProviderId.GEMINI

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = GEMINI_BASE_URL,
        temperature: float = 0.7,
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature

    async def run(self, call: AdapterRequest) -> GenerationResult:
        model_id = call.model.model_id
        generation_config: dict[str, object] = {
            "maxOutputTokens": call.max_tokens,
            "temperature": self.temperature,
        }
        if call.json_mode or call.json_schema is not None:
            generation_config["responseMimeType"] = "application/json"
        if call.json_schema is not None:
            generation_config["responseSchema"] = call.json_schema.get("schema", call.json_schema)

        payload = {
            "systemInstruction": {"parts": [{"text": call.system_prompt}]},
            "contents": [{"parts": [{"text": call.user_prompt}]}],
            "generationConfig": generation_config,
        }

        start = time.monotonic()
        data = await self._post_json(
            f"{self.base_url}/models/{model_id}:generateContent",
            payload,
            params={"key": self._api_key},
        )
        duration_ms = self._elapsed_ms(start)

        candidates = data.get("candidates") or [{}]
        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or [{}]
        usage = data.get("usageMetadata") or {}

        logger.debug("gemini_completion_success", model=model_id, duration_ms=duration_ms)
        return GenerationResult(
            text=parts[0].get("text", "") or "",
            tokens_used=TokenUsage(
                input=usage.get("promptTokenCount", 0) or 0,
                output=usage.get("candidatesTokenCount", 0) or 0,
            ),
            duration_ms=duration_ms,
            model_id=model_id,
            provider_id=self.provider_id,
            stop_reason=candidate.get("finishReason"),
        )
