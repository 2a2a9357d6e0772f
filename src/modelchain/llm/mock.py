"""Mock adapter for testing.

Provides a deterministic adapter that returns pre-configured responses based
on prompt pattern matching, can simulate failures and slow backends, and
records every call for assertions.
"""

from __future__ import annotations

import asyncio

from modelchain.core.types import AdapterRequest, GenerationResult, ProviderId, TokenUsage


class MockAdapter:
    """A mock backend adapter for unit and integration tests.

    Supports pattern-based response matching, a default response, an optional
    error to raise on every call, an artificial delay, and call history
    tracking. ``cancelled_calls`` counts calls that were cancelled while
    sleeping, which lets tests observe timeout cancellation.
    """

    def __init__(
        self,
        provider_id: ProviderId = ProviderId.CLOUDFLARE,
        *,
        default_response: str = '{"ok": true}',
        error: Exception | None = None,
        delay_seconds: float = 0.0,
        tokens: TokenUsage | None = None,
    ) -> None:
        self.provider_id = provider_id
        self._responses: list[tuple[str, str]] = []
        self._default_response = default_response
        self._error = error
        self._delay_seconds = delay_seconds
        self._tokens = tokens or TokenUsage()
        self.call_history: list[AdapterRequest] = []
        self.cancelled_calls: int = 0

    def add_response(self, prompt_pattern: str, response: str) -> None:
        """Register a response for prompts containing ``prompt_pattern``.

        Args:
            prompt_pattern: Substring to match against the user prompt.
            response: The text to return when the pattern matches.
        """
        self._responses.append((prompt_pattern, response))

    def set_default_response(self, response: str) -> None:
        """Set the fallback response used when no pattern matches."""
        self._default_response = response

    def fail_with(self, error: Exception | None) -> None:
        """Raise ``error`` on every subsequent call (None to stop failing)."""
        self._error = error

    async def run(self, call: AdapterRequest) -> GenerationResult:
        """Return a matching pre-configured response.

        Patterns are checked in registration order; the first match wins.
        If no pattern matches, the default response is returned.
        """
        self.call_history.append(call)

        if self._delay_seconds > 0:
            try:
                await asyncio.sleep(self._delay_seconds)
            except asyncio.CancelledError:
                self.cancelled_calls += 1
                raise

        if self._error is not None:
            raise self._error

        text = self._default_response
        for pattern, response_text in self._responses:
            if pattern in call.user_prompt:
                text = response_text
                break

        return GenerationResult(
            text=text,
            tokens_used=self._tokens,
            duration_ms=self._delay_seconds * 1000,
            model_id=call.model.model_id,
            provider_id=self.provider_id,
            stop_reason="stop",
        )

    def assert_called_with(self, pattern: str) -> None:
        """Assert that at least one call contained ``pattern`` in its prompt.

        Raises:
            AssertionError: If no matching call was found.
        """
        for call in self.call_history:
            if pattern in call.user_prompt:
                return
        prompts = [c.user_prompt[:80] for c in self.call_history]
        raise AssertionError(
            f"No call with pattern {pattern!r} found. "
            f"Call history ({len(self.call_history)} calls): {prompts}"
        )
