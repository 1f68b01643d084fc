# =============================================================================
# Provider Pricing Registry — Cost Estimation for Report Generation
# =============================================================================
#
# Maps (provider_type, model_name) → per-token costs in USD. The pipeline
# sums token usage over all section-group calls of one report and stores
# the estimate in the report's generation metadata.
#
# Costs are stored per TOKEN (not per 1M tokens).
#
# estimate_cost() returns None for unknown models rather than 0.0:
# unknown cost != zero cost.
#
# Update this dict when prices change.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelPricing:
    """Per-token costs for a model."""

    input_cost_per_token: float    # USD per input token
    output_cost_per_token: float   # USD per output token
    provider_label: str            # Human-readable provider name


# ---------------------------------------------------------------------------
# Pricing Registry
# ---------------------------------------------------------------------------
# provider_type matches LLMProvider.provider_type:
# "anthropic" or "openai_compatible".
# ---------------------------------------------------------------------------

PRICING_REGISTRY: dict[tuple[str, str], ModelPricing] = {
    # --- OpenAI ---
    ("openai_compatible", "gpt-4"): ModelPricing(
        30.00 / 1_000_000, 60.00 / 1_000_000, "OpenAI",
    ),
    ("openai_compatible", "gpt-4o"): ModelPricing(
        2.50 / 1_000_000, 10.00 / 1_000_000, "OpenAI",
    ),
    ("openai_compatible", "gpt-4o-mini"): ModelPricing(
        0.15 / 1_000_000, 0.60 / 1_000_000, "OpenAI",
    ),

    # --- Deepseek ---
    ("openai_compatible", "deepseek-chat"): ModelPricing(
        0.14 / 1_000_000, 0.28 / 1_000_000, "DeepSeek",
    ),
    ("openai_compatible", "deepseek-reasoner"): ModelPricing(
        0.55 / 1_000_000, 2.19 / 1_000_000, "DeepSeek",
    ),

    # --- Anthropic ---
    ("anthropic", "claude-sonnet-4-6"): ModelPricing(
        3.00 / 1_000_000, 15.00 / 1_000_000, "Anthropic",
    ),
    ("anthropic", "claude-haiku-4-5"): ModelPricing(
        0.80 / 1_000_000, 4.00 / 1_000_000, "Anthropic",
    ),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def estimate_cost(
    provider_type: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> float | None:
    """
    Calculate estimated cost in USD for one or more completions.

    Args:
        provider_type: "anthropic" or "openai_compatible".
        model: Model name as returned by the LLM API.
        input_tokens: Tokens consumed by the prompts.
        output_tokens: Tokens generated in the responses.

    Returns:
        Estimated cost in USD, or None if the model is not in the registry.
    """
    pricing = get_pricing(provider_type, model)
    if pricing is None:
        return None
    return (
        pricing.input_cost_per_token * input_tokens
        + pricing.output_cost_per_token * output_tokens
    )


def get_pricing(provider_type: str, model: str) -> ModelPricing | None:
    """
    Look up pricing for a provider+model combination.

    APIs often report dated snapshots ("gpt-4-0613"); when there is no
    exact entry the longest registered model name that prefixes the
    reported one is used.
    """
    exact = PRICING_REGISTRY.get((provider_type, model))
    if exact is not None:
        return exact

    candidates = [
        name for (ptype, name) in PRICING_REGISTRY
        if ptype == provider_type and model.startswith(name + "-")
    ]
    if not candidates:
        return None
    return PRICING_REGISTRY[(provider_type, max(candidates, key=len))]
