"""Token-based cost estimation."""

from __future__ import annotations

from modelchain.core.types import Cost, ModelDescriptor, TokenUsage

__all__ = ["estimate_cost"]

_PRECISION = 6


def estimate_cost(model: ModelDescriptor | None, tokens_used: TokenUsage | None) -> Cost:
    """Estimate the USD cost of a generation from its token usage.

    Args:
        model: The model that produced the output.
        tokens_used: Input/output token counts reported by the backend.

    Returns:
        A Cost rounded to six decimal places, or a zero cost when either
        argument is missing.
    """
    if model is None or tokens_used is None:
        return Cost()

    input_cost = (tokens_used.input / 1000.0) * model.cost_per_1k_input
    output_cost = (tokens_used.output / 1000.0) * model.cost_per_1k_output
    return Cost(
        estimated=round(input_cost + output_cost, _PRECISION),
        input_cost=round(input_cost, _PRECISION),
        output_cost=round(output_cost, _PRECISION),
    )
