"""Cloudflare Workers AI adapter (REST ``ai/run`` endpoint).

Workers AI has no native JSON mode and reports no token counts, so JSON
requests are expressed through the system prompt and usage is always zero.
"""

from __future__ import annotations

import time

import structlog

from modelchain.core.types import (
    AdapterRequest,
    EmbeddingResult,
    GenerationResult,
    ProviderId,
    TokenUsage,
)
from modelchain.llm.adapters.base import HttpAdapter, json_instruction
from modelchain.llm.errors import AdapterError

logger = structlog.get_logger(__name__)

CLOUDFLARE_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_EMBEDDING_MODEL = "@cf/baai/bge-base-en-v1.5"
DEFAULT_EMBEDDING_DIMENSIONS = 768


class CloudflareAdapter(HttpAdapter):
    """Adapter for Workers AI text generation and embeddings."""

    provider_id = ProviderId.CLOUDFLARE

    def __init__(
        self,
        *,
        account_id: str,
        api_token: str,
        base_url: str = CLOUDFLARE_BASE_URL,
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self._api_token = api_token
        self.account_id = account_id
        self.base_url = base_url.rstrip("/")
        self.embedding_model = embedding_model

    def _run_url(self, model_id: str) -> str:
        return f"{self.base_url}/accounts/{self.account_id}/ai/run/{model_id}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_token}"}

    def _unwrap(self, data: dict) -> dict:
        """Return the ``result`` object of a Cloudflare API envelope."""
        if data.get("success") is False:
            errors = data.get("errors") or [{}]
            raise AdapterError(
                self.provider_id,
                f"cloudflare API error: {errors[0].get('message', 'unknown error')}",
            )
        result = data.get("result")
        if not isinstance(result, dict):
            raise AdapterError(self.provider_id, "cloudflare returned no result")
        return result

    async def run(self, call: AdapterRequest) -> GenerationResult:
        model_id = call.model.model_id
        system = call.system_prompt + json_instruction(
            call, preamble="IMPORTANT: Respond ONLY with"
        )
        payload = {
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": call.user_prompt},
            ],
            "max_tokens": call.max_tokens,
        }

        start = time.monotonic()
        data = await self._post_json(self._run_url(model_id), payload, headers=self._headers())
        duration_ms = self._elapsed_ms(start)
        result = self._unwrap(data)

        logger.debug("cloudflare_completion_success", model=model_id, duration_ms=duration_ms)
        return GenerationResult(
            text=result.get("response", "") or "",
            tokens_used=TokenUsage(),
            duration_ms=duration_ms,
            model_id=model_id,
            provider_id=self.provider_id,
            stop_reason="complete",
        )

    async def embed(self, texts: list[str]) -> EmbeddingResult:
        """Embed a batch of texts with the configured embedding model."""
        start = time.monotonic()
        data = await self._post_json(
            self._run_url(self.embedding_model), {"text": texts}, headers=self._headers()
        )
        duration_ms = self._elapsed_ms(start)
        vectors = self._unwrap(data).get("data") or []

        logger.debug(
            "cloudflare_embeddings_success",
            model=self.embedding_model,
            count=len(vectors),
            duration_ms=duration_ms,
        )
        return EmbeddingResult(
            embeddings=vectors,
            model_id=self.embedding_model,
            provider_id=self.provider_id,
            duration_ms=duration_ms,
            dimensions=len(vectors[0]) if vectors else DEFAULT_EMBEDDING_DIMENSIONS,
        )
