"""Token pricing and cost estimation."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict

from docinsight.core.exceptions import UnknownModelError

PER_MILLION = Decimal(1_000_000)


@dataclass(frozen=True)
class ModelPricing:
    """USD price per single input and output token."""
    input: Decimal
    output: Decimal


MODEL_PRICING: Dict[str, ModelPricing] = {
    "gpt-4.1-mini": ModelPricing(
        input=Decimal("0.40") / PER_MILLION,
        output=Decimal("1.60") / PER_MILLION,
    ),
    "gpt-4o": ModelPricing(
        input=Decimal("2.50") / PER_MILLION,
        output=Decimal("10.00") / PER_MILLION,
    ),
}


def calculate_cost(model_id: str, input_tokens: int, output_tokens: int) -> Decimal:
    """Estimate the USD cost of one model call.

    Args:
        model_id: Model identifier with registered pricing
        input_tokens: Prompt token count
        output_tokens: Completion token count

    Returns:
        Estimated cost in USD

    Raises:
        UnknownModelError: If no pricing is registered for the model
    """
    pricing = MODEL_PRICING.get(model_id)
    if pricing is None:
        raise UnknownModelError(f"Unknown model: {model_id}")
    return input_tokens * pricing.input + output_tokens * pricing.output
