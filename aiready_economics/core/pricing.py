"""
Pricing presets and registry lookup.

Maps model identifiers to a price per 1K tokens and a baseline confidence
used when converting wasted tokens into currency.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import InvalidInputError, UnknownPresetError

logger = logging.getLogger(__name__)

DEFAULT_PRESET_NAME = "gpt-4o"


@dataclass(frozen=True)
class ModelPricingPreset:
    """Per-token pricing profile for a model family."""
    name: str
    price_per_1k_tokens: Decimal  # Cost per 1K tokens
    baseline_confidence: float  # Confidence before any volume adjustment

    def __post_init__(self):
        """Validate price and confidence ranges."""
        if not self.name:
            raise InvalidInputError("preset name cannot be empty")
        # Accept plain numbers from config files
        if not isinstance(self.price_per_1k_tokens, Decimal):
            object.__setattr__(
                self, "price_per_1k_tokens", Decimal(str(self.price_per_1k_tokens))
            )
        if self.price_per_1k_tokens <= 0:
            raise InvalidInputError("price_per_1k_tokens must be > 0")
        if not 0 < self.baseline_confidence <= 1:
            raise InvalidInputError("baseline_confidence must be in (0, 1]")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "price_per_1k_tokens": float(self.price_per_1k_tokens),
            "baseline_confidence": self.baseline_confidence,
        }


@dataclass(frozen=True)
class PricingPresetRegistry:
    """Fixed registry of pricing presets."""
    presets: Mapping[str, ModelPricingPreset]
    default_name: str = DEFAULT_PRESET_NAME

    def __post_init__(self):
        """Freeze the preset table and check the default is registered."""
        object.__setattr__(self, "presets", MappingProxyType(dict(self.presets)))
        if self.default_name not in self.presets:
            raise UnknownPresetError(self.default_name)

    @property
    def default(self) -> ModelPricingPreset:
        """Preset used when the caller supplies none."""
        return self.presets[self.default_name]

    def names(self):
        """Registered preset names in registration order."""
        return list(self.presets)

    def lookup(self, name: str) -> ModelPricingPreset:
        """Get the preset registered under a name.

        Args:
            name: Preset identifier, e.g. "gpt-4o"

        Returns:
            ModelPricingPreset for the name

        Raises:
            UnknownPresetError: If the name is not registered
        """
        if name not in self.presets:
            raise UnknownPresetError(name)
        return self.presets[name]


def _preset(name: str, price: str, confidence: float = 0.85) -> ModelPricingPreset:
    return ModelPricingPreset(
        name=name,
        price_per_1k_tokens=Decimal(price),
        baseline_confidence=confidence,
    )


# Fixed registry - populated once, never mutated
PRICING_PRESETS = PricingPresetRegistry({
    "gpt-4o": _preset("gpt-4o", "0.005"),
    "gpt-4o-mini": _preset("gpt-4o-mini", "0.00015"),
    "gpt-5.3": _preset("gpt-5.3", "0.002"),
    "claude-sonnet-4": _preset("claude-sonnet-4", "0.003"),
    "claude-opus-4": _preset("claude-opus-4", "0.015"),
    "gemini-2.5-pro": _preset("gemini-2.5-pro", "0.00125"),
})


def lookup_pricing_preset(
    name: str,
    registry: PricingPresetRegistry = PRICING_PRESETS,
) -> ModelPricingPreset:
    """Look up a pricing preset by name.

    Raises:
        UnknownPresetError: If the name is not registered
    """
    return registry.lookup(name)


def resolve_pricing_preset(
    name: Optional[str],
    registry: PricingPresetRegistry = PRICING_PRESETS,
) -> ModelPricingPreset:
    """Look up a preset, falling back to the registry default.

    Used by callers that should not surface an unknown preset name as a
    failure. An unknown name is logged and replaced by the default.
    """
    if name is None:
        return registry.default
    try:
        return registry.lookup(name)
    except UnknownPresetError:
        logger.warning(
            "Unknown pricing preset %r, falling back to %r", name, registry.default_name
        )
        return registry.default
