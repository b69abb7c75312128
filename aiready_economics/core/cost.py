"""
Cost estimation for wasted tokens.

Converts a token budget into a monthly cost estimate with an uncertainty
range and a calibrated confidence.

Confidence policy:
1. Start from the pricing preset's baseline confidence
2. Step down to a fixed lower tier when per-query waste exceeds a threshold

The policy is a step function, not a continuous adjustment.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from .errors import InvalidInputError
from .pricing import PRICING_PRESETS, ModelPricingPreset, PricingPresetRegistry
from .token_budget import TokenBudget

logger = logging.getLogger(__name__)

# Token-to-dollar conversion is an approximation, not a measured cost
COST_UNCERTAINTY_SPREAD = Decimal("0.15")

# Per-query wasted tokens above which linear extrapolation is trusted less
HIGH_WASTE_THRESHOLD = 50_000
HIGH_WASTE_CONFIDENCE = 0.7


@dataclass(frozen=True)
class UsageAssumptions:
    """How often wasted context is sent to a model."""
    developer_count: int
    queries_per_dev_per_day: int
    days_per_month: int

    def __post_init__(self):
        """Validate all usage values are positive integers."""
        for name in ("developer_count", "queries_per_dev_per_day", "days_per_month"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidInputError(f"{name} must be an integer")
            if value <= 0:
                raise InvalidInputError(f"{name} must be > 0")

    @property
    def queries_per_month(self) -> int:
        """Total queries across all developers in a month."""
        return self.developer_count * self.queries_per_dev_per_day * self.days_per_month

    def to_dict(self) -> dict:
        return {
            "developer_count": self.developer_count,
            "queries_per_dev_per_day": self.queries_per_dev_per_day,
            "days_per_month": self.days_per_month,
        }


DEFAULT_USAGE = UsageAssumptions(
    developer_count=5,
    queries_per_dev_per_day=60,
    days_per_month=22,
)


@dataclass(frozen=True)
class CostEstimatorConfig:
    """Uncertainty band and confidence tiers for cost estimation."""
    uncertainty_spread: Decimal = COST_UNCERTAINTY_SPREAD
    high_waste_threshold: int = HIGH_WASTE_THRESHOLD
    high_waste_confidence: float = HIGH_WASTE_CONFIDENCE
    default_usage: UsageAssumptions = DEFAULT_USAGE

    def __post_init__(self):
        """Validate spread and tier values."""
        if not isinstance(self.uncertainty_spread, Decimal):
            object.__setattr__(
                self, "uncertainty_spread", Decimal(str(self.uncertainty_spread))
            )
        if not 0 <= self.uncertainty_spread < 1:
            raise InvalidInputError("uncertainty_spread must be in [0, 1)")
        if self.high_waste_threshold < 0:
            raise InvalidInputError("high_waste_threshold cannot be negative")
        if not 0 < self.high_waste_confidence <= 1:
            raise InvalidInputError("high_waste_confidence must be in (0, 1]")


DEFAULT_COST_CONFIG = CostEstimatorConfig()


@dataclass(frozen=True)
class CostEstimate:
    """Monthly cost of wasted tokens."""
    total: float
    range: Tuple[float, float]  # (low, high), brackets total
    confidence: float

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "range": list(self.range),
            "confidence": self.confidence,
        }


def _confidence_for(wasted_per_query: int, baseline: float, config: CostEstimatorConfig) -> float:
    if wasted_per_query > config.high_waste_threshold:
        logger.debug(
            "Wasted tokens %d exceed threshold %d, lowering confidence to %.2f",
            wasted_per_query,
            config.high_waste_threshold,
            config.high_waste_confidence,
        )
        return min(baseline, config.high_waste_confidence)
    return baseline


def _estimate(
    wasted_per_query: int,
    preset: ModelPricingPreset,
    usage: UsageAssumptions,
    config: CostEstimatorConfig,
) -> CostEstimate:
    # Exact decimal arithmetic keeps the estimate linear in every usage factor
    monthly_wasted_tokens = Decimal(wasted_per_query) * usage.queries_per_month
    total = (monthly_wasted_tokens / Decimal("1000")) * preset.price_per_1k_tokens

    low = total * (1 - config.uncertainty_spread)
    high = total * (1 + config.uncertainty_spread)

    return CostEstimate(
        total=float(total),
        range=(float(low), float(high)),
        confidence=_confidence_for(wasted_per_query, preset.baseline_confidence, config),
    )


def estimate_cost(
    budget: TokenBudget,
    preset: ModelPricingPreset,
    usage: Optional[UsageAssumptions] = None,
    config: CostEstimatorConfig = DEFAULT_COST_CONFIG,
) -> CostEstimate:
    """Estimate the monthly cost of a budget's wasted tokens.

    monthly_wasted = wasted_per_query * queries/dev/day * developers * days
    total = monthly_wasted / 1000 * price_per_1k_tokens

    Args:
        budget: Token budget whose wasted total is sent with every query
        preset: Pricing preset to convert tokens into currency
        usage: Usage assumptions (defaults to config.default_usage)
        config: Uncertainty and confidence configuration

    Returns:
        CostEstimate with total, (low, high) range and confidence
    """
    if usage is None:
        logger.debug("No usage assumptions supplied, using defaults")
        usage = config.default_usage
    return _estimate(budget.wasted_tokens.total, preset, usage, config)


def calculate_monthly_cost(
    tokens: int,
    usage: Optional[UsageAssumptions] = None,
    preset: Optional[ModelPricingPreset] = None,
    price_per_1k_tokens: Optional[float] = None,
    registry: PricingPresetRegistry = PRICING_PRESETS,
    config: CostEstimatorConfig = DEFAULT_COST_CONFIG,
) -> CostEstimate:
    """Estimate monthly cost from a raw wasted-token count.

    For callers that have not built a TokenBudget. The token count is used
    as the per-query waste figure.

    Args:
        tokens: Wasted tokens per query
        usage: Usage assumptions (defaults to config.default_usage)
        preset: Pricing preset (defaults to the registry default)
        price_per_1k_tokens: Price override; keeps the preset's confidence
        registry: Registry providing the default preset
        config: Uncertainty and confidence configuration

    Raises:
        InvalidInputError: If tokens is negative or the price override is not positive
    """
    if isinstance(tokens, bool) or not isinstance(tokens, int):
        raise InvalidInputError("tokens must be an integer")
    if tokens < 0:
        raise InvalidInputError("tokens cannot be negative")

    if preset is None:
        preset = registry.default
    if price_per_1k_tokens is not None:
        preset = ModelPricingPreset(
            name="custom",
            price_per_1k_tokens=Decimal(str(price_per_1k_tokens)),
            baseline_confidence=preset.baseline_confidence,
        )
    if usage is None:
        logger.debug("No usage assumptions supplied, using defaults")
        usage = config.default_usage

    return _estimate(tokens, preset, usage, config)
