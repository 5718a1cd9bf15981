"""
Pricing calculations and rate management.

Per-1K-token rates used to turn token counts into estimated USD cost.
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, Optional, Union

from .errors import UnknownModelError

logger = logging.getLogger(__name__)

Rate = Union[Decimal, float, int, str]


@dataclass(frozen=True)
class ModelPricing:
    """Per-token pricing for a specific model."""
    input_per_1k: Decimal  # Cost per 1K input tokens
    output_per_1k: Decimal  # Cost per 1K output tokens
    provider: str = "custom"

    def __post_init__(self):
        """Validate rates are non-negative."""
        if self.input_per_1k < 0:
            raise ValueError("input_per_1k cannot be negative")
        if self.output_per_1k < 0:
            raise ValueError("output_per_1k cannot be negative")


@dataclass
class PricingTable:
    """Mutable pricing table keyed by model name."""
    prices: Dict[str, ModelPricing]

    def get_pricing(self, model: str) -> ModelPricing:
        """Get pricing for a specific model.

        Args:
            model: Model identifier

        Returns:
            ModelPricing for the model

        Raises:
            UnknownModelError: If model is not in the table
        """
        if model not in self.prices:
            raise UnknownModelError(
                f"Model '{model}' not found in pricing table. "
                f"Use define_model() to add custom pricing."
            )
        return self.prices[model]


def _pricing(input_per_1k: str, output_per_1k: str, provider: str) -> ModelPricing:
    return ModelPricing(Decimal(input_per_1k), Decimal(output_per_1k), provider)


PRICING_TABLE = PricingTable({
    # OpenAI
    "gpt-4o": _pricing("0.0025", "0.01", "openai"),
    "gpt-4o-mini": _pricing("0.00015", "0.0006", "openai"),
    "gpt-4-turbo": _pricing("0.01", "0.03", "openai"),
    "gpt-4": _pricing("0.03", "0.06", "openai"),
    "gpt-3.5-turbo": _pricing("0.0005", "0.0015", "openai"),
    "o1": _pricing("0.015", "0.06", "openai"),
    "o1-mini": _pricing("0.003", "0.012", "openai"),
    "o3-mini": _pricing("0.0011", "0.0044", "openai"),
    # Anthropic
    "claude-opus-4-5": _pricing("0.015", "0.075", "anthropic"),
    "claude-sonnet-4-5": _pricing("0.003", "0.015", "anthropic"),
    "claude-haiku-4-5": _pricing("0.0008", "0.004", "anthropic"),
    "claude-3-5-sonnet-20241022": _pricing("0.003", "0.015", "anthropic"),
    "claude-3-opus-20240229": _pricing("0.015", "0.075", "anthropic"),
    # Google
    "gemini-2.0-flash": _pricing("0", "0", "google"),
    "gemini-1.5-pro": _pricing("0.00125", "0.005", "google"),
    "gemini-1.5-flash": _pricing("0.000075", "0.0003", "google"),
})


def pricing_for(model: str) -> ModelPricing:
    """Return a copy of the pricing entry for ``model``."""
    return replace(PRICING_TABLE.get_pricing(model))


def define_model(
    model: str,
    input_per_1k: Rate,
    output_per_1k: Rate,
    provider: str = "custom",
) -> ModelPricing:
    """Add or override pricing for a model.

    Rates are converted through ``str`` so float literals like 0.1 keep
    their written value.
    """
    if not model or not model.strip():
        raise ValueError("model is required and cannot be empty")
    pricing = ModelPricing(
        input_per_1k=Decimal(str(input_per_1k)),
        output_per_1k=Decimal(str(output_per_1k)),
        provider=provider,
    )
    PRICING_TABLE.prices[model] = pricing
    return pricing


def list_pricing(provider: Optional[str] = None) -> Dict[str, ModelPricing]:
    """List pricing entries, optionally filtered by provider."""
    return {
        model: replace(pricing)
        for model, pricing in PRICING_TABLE.prices.items()
        if provider is None or pricing.provider == provider
    }


def estimate_cost_usd(
    model: str,
    input_tokens: int,
    output_tokens: int,
    allow_unknown: bool = False,
) -> float:
    """Estimate the USD cost of a call.

    Args:
        model: Model identifier
        input_tokens: Prompt/input token count
        output_tokens: Completion/output token count
        allow_unknown: Price unknown models at zero instead of raising

    Returns:
        Estimated cost in USD (unrounded)

    Raises:
        UnknownModelError: If model is unknown and allow_unknown is False
    """
    try:
        pricing = PRICING_TABLE.get_pricing(model)
    except UnknownModelError:
        if not allow_unknown:
            raise
        logger.warning("No pricing for model %r; recording it as free", model)
        return 0.0

    input_cost = (Decimal(input_tokens) / Decimal("1000")) * pricing.input_per_1k
    output_cost = (Decimal(output_tokens) / Decimal("1000")) * pricing.output_per_1k
    return float(input_cost + output_cost)
