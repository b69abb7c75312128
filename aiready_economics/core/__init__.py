"""
Core modules for AIReady unit economics.

This package contains the pricing registry, token budgeting, cost estimation,
acceptance-rate prediction and value-chain generation.
"""

from .acceptance import predict_acceptance_rate
from .cost import calculate_monthly_cost, estimate_cost
from .errors import InvalidInputError, UnknownPresetError
from .pricing import lookup_pricing_preset
from .token_budget import compute_budget
from .value_chain import calculate_productivity_impact, generate_value_chain

__all__ = [
    "InvalidInputError",
    "UnknownPresetError",
    "calculate_monthly_cost",
    "calculate_productivity_impact",
    "compute_budget",
    "estimate_cost",
    "generate_value_chain",
    "lookup_pricing_preset",
    "predict_acceptance_rate",
]
