"""
AI suggestion acceptance-rate prediction.

Fuses per-tool quality scores into a predicted acceptance rate with
per-tool attribution.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Sequence, Tuple

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

# Assumed acceptance rate with no quality signal
BASE_ACCEPTANCE_RATE = 0.3
NEUTRAL_SCORE = 50.0

DEFAULT_TOOL_WEIGHTS = {
    "pattern-detect": 0.3,
    "context-analyzer": 0.4,
    "consistency": 0.2,
    "doc-drift": 0.1,
}


@dataclass(frozen=True)
class ToolScoringOutput:
    """Score produced by one upstream analyzer.

    raw_metrics, factors and recommendations are tool-defined payloads
    and are carried through untouched.
    """
    tool_name: str
    score: float  # 0-100
    raw_metrics: Mapping[str, Any] = field(default_factory=dict)
    factors: Sequence[Any] = ()
    recommendations: Sequence[Any] = ()

    def __post_init__(self):
        """Validate score range."""
        if not 0 <= self.score <= 100:
            raise InvalidInputError(
                f"score for {self.tool_name} must be in [0, 100], got {self.score}"
            )


@dataclass(frozen=True)
class AcceptanceFactor:
    """One tool's contribution to the predicted rate."""
    tool_name: str
    weight: float
    contribution: float

    def to_dict(self) -> dict:
        return {
            "tool_name": self.tool_name,
            "weight": self.weight,
            "contribution": self.contribution,
        }


@dataclass(frozen=True)
class AcceptancePrediction:
    """Predicted acceptance rate with per-tool attribution."""
    rate: float
    factors: Tuple[AcceptanceFactor, ...]

    def to_dict(self) -> dict:
        return {
            "rate": self.rate,
            "factors": [factor.to_dict() for factor in self.factors],
        }


@dataclass(frozen=True)
class AcceptanceConfig:
    """Base rate, neutral score and per-tool weight table."""
    tool_weights: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TOOL_WEIGHTS)
    )
    base_rate: float = BASE_ACCEPTANCE_RATE
    neutral_score: float = NEUTRAL_SCORE

    def __post_init__(self):
        """Freeze the weight table and validate ranges."""
        object.__setattr__(self, "tool_weights", MappingProxyType(dict(self.tool_weights)))
        if not 0 <= self.base_rate <= 1:
            raise InvalidInputError("base_rate must be in [0, 1]")
        for tool_name, weight in self.tool_weights.items():
            if weight < 0:
                raise InvalidInputError(f"weight for {tool_name} cannot be negative")


DEFAULT_ACCEPTANCE_CONFIG = AcceptanceConfig()


def predict_acceptance_rate(
    tool_outputs: Mapping[str, ToolScoringOutput],
    config: AcceptanceConfig = DEFAULT_ACCEPTANCE_CONFIG,
) -> AcceptancePrediction:
    """Predict the acceptance rate of AI suggestions from tool scores.

    Each weighted tool contributes weight * (score - neutral) / 100 on top
    of the base rate. Tools missing from the weight table are ignored so
    new analyzers can be added without updating the table.

    Args:
        tool_outputs: Mapping of tool name to its scoring output
        config: Base rate and weight table

    Returns:
        AcceptancePrediction with rate clamped to [0, 1] and one factor per
        weighted tool, in input order
    """
    rate = config.base_rate
    factors: List[AcceptanceFactor] = []

    for tool_name, output in tool_outputs.items():
        weight = config.tool_weights.get(tool_name)
        if weight is None:
            logger.debug("No acceptance weight for tool %r, ignoring", tool_name)
            continue

        contribution = weight * (output.score - config.neutral_score) / 100
        rate += contribution
        factors.append(AcceptanceFactor(
            tool_name=tool_name,
            weight=weight,
            contribution=contribution,
        ))

    return AcceptancePrediction(
        rate=min(1.0, max(0.0, rate)),
        factors=tuple(factors),
    )
