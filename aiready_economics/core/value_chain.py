"""
Value chains from technical issues to business outcomes.

Maps a classified issue to its developer productivity impact and its
organizational risk and opportunity cost.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping

from .errors import InvalidInputError

# Assumed monthly value of one unit of affected developer productivity
BASELINE_MONTHLY_VALUE = Decimal("15000")

DEFAULT_HOURLY_RATE = 75.0


class Severity(Enum):
    """Issue severity as classified by upstream analyzers."""
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


class CountScaling(Enum):
    """How the number of occurrences scales opportunity cost."""
    NONE = "none"      # Severity alone drives cost
    LINEAR = "linear"  # Cost multiplied by occurrence count


DEFAULT_PRODUCTIVITY_LOSS = {
    Severity.MINOR: 0.05,
    Severity.MAJOR: 0.10,
    Severity.CRITICAL: 0.25,
}

# Estimated hours to resolve one occurrence
DEFAULT_HOURS_PER_ISSUE = {
    Severity.MINOR: 0.5,
    Severity.MAJOR: 2.0,
    Severity.CRITICAL: 4.0,
}


def _to_severity(value) -> Severity:
    if isinstance(value, Severity):
        return value
    try:
        return Severity(str(value).lower())
    except ValueError:
        valid = [severity.value for severity in Severity]
        raise InvalidInputError(f"severity must be one of: {valid}")


@dataclass(frozen=True)
class IssueClassification:
    """A classified issue reported by an upstream analyzer."""
    issue_type: str  # e.g. "context-fragmentation", "duplicate-pattern"
    count: int
    severity: Severity

    def __post_init__(self):
        """Normalize severity and validate count."""
        object.__setattr__(self, "severity", _to_severity(self.severity))
        if not self.issue_type:
            raise InvalidInputError("issue_type cannot be empty")
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise InvalidInputError("count must be an integer")
        if self.count <= 0:
            raise InvalidInputError("count must be > 0")


@dataclass(frozen=True)
class DeveloperImpact:
    """Effect of an issue on developer productivity."""
    productivity_loss: float  # Fraction of productivity lost, 0-1


@dataclass(frozen=True)
class BusinessOutcome:
    """Organizational risk and cost of an issue."""
    risk_level: Severity  # Mirrors issue severity
    opportunity_cost: float


@dataclass(frozen=True)
class ValueChain:
    """Developer impact and business outcome of one issue classification."""
    developer_impact: DeveloperImpact
    business_outcome: BusinessOutcome

    def to_dict(self) -> dict:
        return {
            "developer_impact": {
                "productivity_loss": self.developer_impact.productivity_loss,
            },
            "business_outcome": {
                "risk_level": self.business_outcome.risk_level.value,
                "opportunity_cost": self.business_outcome.opportunity_cost,
            },
        }


@dataclass(frozen=True)
class ValueChainConfig:
    """Severity tables and scaling policy for value chains."""
    productivity_loss: Mapping[Severity, float] = field(
        default_factory=lambda: dict(DEFAULT_PRODUCTIVITY_LOSS)
    )
    baseline_monthly_value: Decimal = BASELINE_MONTHLY_VALUE
    count_scaling: CountScaling = CountScaling.NONE
    hours_per_issue: Mapping[Severity, float] = field(
        default_factory=lambda: dict(DEFAULT_HOURS_PER_ISSUE)
    )

    def __post_init__(self):
        """Freeze tables and validate every severity is covered."""
        object.__setattr__(
            self, "productivity_loss", MappingProxyType(dict(self.productivity_loss))
        )
        object.__setattr__(
            self, "hours_per_issue", MappingProxyType(dict(self.hours_per_issue))
        )
        if not isinstance(self.baseline_monthly_value, Decimal):
            object.__setattr__(
                self, "baseline_monthly_value", Decimal(str(self.baseline_monthly_value))
            )
        if self.baseline_monthly_value < 0:
            raise InvalidInputError("baseline_monthly_value cannot be negative")
        for severity in Severity:
            loss = self.productivity_loss.get(severity)
            if loss is None or not 0 <= loss <= 1:
                raise InvalidInputError(
                    f"productivity_loss for {severity.value} must be in [0, 1]"
                )
            hours = self.hours_per_issue.get(severity)
            if hours is None or hours < 0:
                raise InvalidInputError(
                    f"hours_per_issue for {severity.value} must be >= 0"
                )


DEFAULT_VALUE_CHAIN_CONFIG = ValueChainConfig()


def generate_value_chain(
    issue: IssueClassification,
    config: ValueChainConfig = DEFAULT_VALUE_CHAIN_CONFIG,
) -> ValueChain:
    """Link a technical issue to developer impact and business outcome.

    Productivity loss comes from the severity table and risk level mirrors
    severity. Opportunity cost is productivity loss times the baseline
    monthly value, multiplied by issue.count only under CountScaling.LINEAR.

    Args:
        issue: Classified issue
        config: Severity tables and count scaling policy

    Returns:
        ValueChain for the issue
    """
    productivity_loss = config.productivity_loss[issue.severity]

    opportunity_cost = Decimal(str(productivity_loss)) * config.baseline_monthly_value
    if config.count_scaling is CountScaling.LINEAR:
        opportunity_cost *= issue.count

    return ValueChain(
        developer_impact=DeveloperImpact(productivity_loss=productivity_loss),
        business_outcome=BusinessOutcome(
            risk_level=issue.severity,
            opportunity_cost=float(opportunity_cost),
        ),
    )


@dataclass(frozen=True)
class ProductivityImpact:
    """Developer hours and cost spent resolving a set of issues."""
    total_hours: float
    hourly_rate: float
    total_cost: float
    by_severity: Dict[Severity, Dict[str, float]]

    def to_dict(self) -> dict:
        return {
            "total_hours": self.total_hours,
            "hourly_rate": self.hourly_rate,
            "total_cost": self.total_cost,
            "by_severity": {
                severity.value: dict(values)
                for severity, values in self.by_severity.items()
            },
        }


def calculate_productivity_impact(
    issues: Iterable[IssueClassification],
    hourly_rate: float = DEFAULT_HOURLY_RATE,
    config: ValueChainConfig = DEFAULT_VALUE_CHAIN_CONFIG,
) -> ProductivityImpact:
    """Estimate developer time and cost to resolve issues.

    Raises:
        InvalidInputError: If hourly_rate is not positive
    """
    if hourly_rate <= 0:
        raise InvalidInputError("hourly_rate must be > 0")

    by_severity: Dict[Severity, Dict[str, float]] = {}
    total_hours = 0.0
    for issue in issues:
        hours = config.hours_per_issue[issue.severity] * issue.count
        bucket = by_severity.setdefault(issue.severity, {"hours": 0.0, "cost": 0.0})
        bucket["hours"] += hours
        bucket["cost"] += hours * hourly_rate
        total_hours += hours

    return ProductivityImpact(
        total_hours=total_hours,
        hourly_rate=hourly_rate,
        total_cost=total_hours * hourly_rate,
        by_severity=by_severity,
    )
