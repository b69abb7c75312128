"""
Token budget calculation.

Reduces wasted-token categories and total context size into a normalized
budget record.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from .errors import InvalidInputError

# Not all wasted tokens are recoverable by refactoring
RECOVERY_FACTOR = Decimal("0.8")


def _require_non_negative(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer")
    if value < 0:
        raise InvalidInputError(f"{name} cannot be negative")


@dataclass(frozen=True)
class WastedTokenBreakdown:
    """Wasted tokens per category, as reported by upstream analyzers."""
    duplication: int = 0
    fragmentation: int = 0
    chattiness: int = 0

    def __post_init__(self):
        """Validate all categories are non-negative integers."""
        _require_non_negative("duplication", self.duplication)
        _require_non_negative("fragmentation", self.fragmentation)
        _require_non_negative("chattiness", self.chattiness)

    @property
    def total(self) -> int:
        """Waste across all categories."""
        return self.duplication + self.fragmentation + self.chattiness


@dataclass(frozen=True)
class WastedTokens:
    """Wasted-token breakdown with its precomputed total."""
    duplication: int
    fragmentation: int
    chattiness: int
    total: int

    def to_dict(self) -> dict:
        return {
            "duplication": self.duplication,
            "fragmentation": self.fragmentation,
            "chattiness": self.chattiness,
            "total": self.total,
        }


@dataclass(frozen=True)
class TokenBudget:
    """Normalized token budget for one analysis run."""
    total_context_tokens: int
    wasted_tokens: WastedTokens
    efficiency_ratio: float  # Share of context carrying non-wasted content
    potential_retrievable_tokens: int

    def to_dict(self) -> dict:
        return {
            "total_context_tokens": self.total_context_tokens,
            "wasted_tokens": self.wasted_tokens.to_dict(),
            "efficiency_ratio": self.efficiency_ratio,
            "potential_retrievable_tokens": self.potential_retrievable_tokens,
        }


def compute_budget(total_context_tokens: int, wasted_tokens: WastedTokenBreakdown) -> TokenBudget:
    """Compute a token budget from total context size and waste breakdown.

    Waste exceeding the total is accepted because upstream analyzers may
    double-count across categories; the efficiency ratio is clamped to [0, 1]
    instead.

    Args:
        total_context_tokens: Total tokens in the analyzed context
        wasted_tokens: Waste per category

    Returns:
        TokenBudget with efficiency ratio and recoverable token estimate

    Raises:
        InvalidInputError: If total_context_tokens is negative or not an integer
    """
    _require_non_negative("total_context_tokens", total_context_tokens)
    if not isinstance(wasted_tokens, WastedTokenBreakdown):
        raise InvalidInputError("wasted_tokens must be a WastedTokenBreakdown")

    wasted_total = wasted_tokens.total

    # No tokens means no waste
    if total_context_tokens == 0:
        efficiency_ratio = 1.0
    else:
        efficiency_ratio = (total_context_tokens - wasted_total) / total_context_tokens
        efficiency_ratio = min(1.0, max(0.0, efficiency_ratio))

    # Round half up to the nearest whole token
    retrievable = (Decimal(wasted_total) * RECOVERY_FACTOR).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )

    return TokenBudget(
        total_context_tokens=total_context_tokens,
        wasted_tokens=WastedTokens(
            duplication=wasted_tokens.duplication,
            fragmentation=wasted_tokens.fragmentation,
            chattiness=wasted_tokens.chattiness,
            total=wasted_total,
        ),
        efficiency_ratio=efficiency_ratio,
        potential_retrievable_tokens=int(retrievable),
    )
