"""Anthropic Claude adapter (Messages API)."""

from __future__ import annotations

import time

import structlog

from modelchain.core.types import AdapterRequest, GenerationResult, ProviderId, TokenUsage
from modelchain.llm.adapters.base import HttpAdapter, json_instruction

logger = structlog.get_logger(__name__)

ANTHROPIC_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"


class ClaudeAdapter(HttpAdapter):
    """Adapter for the Anthropic Messages API.

    In JSON mode the assistant turn is prefilled with ``{`` to anchor the
    output, and the brace is restored on the returned text.
    """

    provider_id = ProviderId.CLAUDE

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = ANTHROPIC_BASE_URL,
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def run(self, call: AdapterRequest) -> GenerationResult:
        wants_json = call.json_mode or call.json_schema is not None

        messages = [{"role": "user", "content": call.user_prompt}]
        if wants_json:
            messages.append({"role": "assistant", "content": "{"})

        payload = {
            "model": call.model.model_id,
            "max_tokens": call.max_tokens,
            "system": call.system_prompt + json_instruction(call),
            "messages": messages,
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

        start = time.monotonic()
        data = await self._post_json(f"{self.base_url}/messages", payload, headers=headers)
        duration_ms = self._elapsed_ms(start)

        content = data.get("content") or [{}]
        text = content[0].get("text", "") or ""
        stripped = text.lstrip()
        if wants_json and text and not stripped.startswith(("{", "[")):
            text = "{" + text

        usage = data.get("usage") or {}
        logger.debug(
            "claude_completion_success", model=call.model.model_id, duration_ms=duration_ms
        )
        return GenerationResult(
            text=text,
            tokens_used=TokenUsage(
                input=usage.get("input_tokens", 0) or 0,
                output=usage.get("output_tokens", 0) or 0,
            ),
            duration_ms=duration_ms,
            model_id=call.model.model_id,
            provider_id=self.provider_id,
            stop_reason=data.get("stop_reason"),
        )
