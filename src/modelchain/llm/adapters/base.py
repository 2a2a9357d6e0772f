"""Adapter protocol and shared HTTP plumbing for backend adapters.

Each adapter translates an ``AdapterRequest`` into one provider's wire format
and its reply into a ``GenerationResult``. Adapters hold their credentials and
HTTP client from construction; the executor only ever calls ``run``.
"""

from __future__ import annotations

__all__ = [
    "Adapter",
    "EmbeddingAdapter",
    "HttpAdapter",
    "json_instruction",
]

import json
import time
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog

from modelchain.core.types import AdapterRequest, EmbeddingResult, GenerationResult, ProviderId
from modelchain.llm.errors import AdapterError

logger = structlog.get_logger(__name__)


@runtime_checkable
class Adapter(Protocol):
    """Protocol for text-generation backends.

    Implementations either return a ``GenerationResult`` or raise; the
    executor treats any exception as a failed attempt.
    """

    provider_id: ProviderId

    async def run(self, call: AdapterRequest) -> GenerationResult:
        """Run one generation against the backend."""
        ...


@runtime_checkable
class EmbeddingAdapter(Protocol):
    """Protocol for embedding backends."""

    async def embed(self, texts: list[str]) -> EmbeddingResult:
        """Embed a batch of texts."""
        ...


def json_instruction(call: AdapterRequest, *, preamble: str = "You MUST respond with") -> str:
    """System-prompt suffix for backends without a native structured-output mode.

    Returns an empty string when the request asks for neither JSON mode nor a
    schema.
    """
    if call.json_schema is not None:
        schema = call.json_schema.get("schema", call.json_schema)
        return (
            f"\n\n{preamble} valid JSON matching this schema:\n"
            f"{json.dumps(schema, indent=2)}"
        )
    if call.json_mode:
        return f"\n\n{preamble} valid JSON only. No markdown, no explanation."
    return ""


class HttpAdapter:
    """Base for adapters that speak plain JSON over httpx."""

    provider_id: ProviderId

    def __init__(self, *, timeout_seconds: float = 60.0) -> None:
        """Initialize the HTTP client.

        Args:
            timeout_seconds: Transport-level timeout. The executor applies its
                own, usually shorter, per-attempt deadline on top of this.
        """
        self._client = httpx.AsyncClient(timeout=timeout_seconds)

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON body.

        Raises:
            AdapterError: On transport failure, non-success status, or a body
                that is not a JSON object.
        """
        try:
            response = await self._client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as exc:
            msg = f"{self.provider_id} request failed: {exc}"
            raise AdapterError(self.provider_id, msg) from exc

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(
                "adapter_http_error",
                provider=self.provider_id,
                status_code=response.status_code,
                error=message,
            )
            raise AdapterError(
                self.provider_id,
                f"{self.provider_id} API error ({response.status_code}): {message}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise AdapterError(
                self.provider_id, f"{self.provider_id} returned a non-JSON body"
            ) from exc
        if not isinstance(data, dict):
            raise AdapterError(self.provider_id, f"{self.provider_id} returned an unexpected body")
        return data

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.monotonic() - start) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of a provider's error message."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "unknown error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            return str(errors[0].get("message", "unknown error"))
    return response.reason_phrase or "unknown error"
