"""
Configuration management and loading.

Builds the engine's static tables from an optional YAML file, with strict
validation so a typo never silently falls back to a default table.
"""

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict

import yaml

from aiready_economics.core.acceptance import (
    DEFAULT_ACCEPTANCE_CONFIG,
    AcceptanceConfig,
)
from aiready_economics.core.cost import (
    DEFAULT_COST_CONFIG,
    CostEstimatorConfig,
    UsageAssumptions,
)
from aiready_economics.core.pricing import (
    PRICING_PRESETS,
    ModelPricingPreset,
    PricingPresetRegistry,
)
from aiready_economics.core.value_chain import (
    DEFAULT_VALUE_CHAIN_CONFIG,
    CountScaling,
    Severity,
    ValueChainConfig,
)


@dataclass(frozen=True)
class EngineConfig:
    """Complete set of static tables used by the engine."""
    pricing: PricingPresetRegistry = PRICING_PRESETS
    cost: CostEstimatorConfig = DEFAULT_COST_CONFIG
    acceptance: AcceptanceConfig = DEFAULT_ACCEPTANCE_CONFIG
    value_chain: ValueChainConfig = DEFAULT_VALUE_CHAIN_CONFIG

    @property
    def default_usage(self) -> UsageAssumptions:
        """Usage assumptions applied when a caller gives none."""
        return self.cost.default_usage


DEFAULT_ENGINE_CONFIG = EngineConfig()

ALLOWED_TOP_KEYS = {
    'default_preset',
    'presets',
    'usage',
    'tool_weights',
    'base_rate',
    'productivity_loss',
    'baseline_monthly_value',
    'count_scaling',
    'high_waste_threshold',
}


def load_engine_config(path: str) -> EngineConfig:
    """Load and validate engine configuration from a YAML file.

    Every key is optional; absent keys keep the shipped defaults.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated EngineConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Engine config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    unknown_keys = set(raw_config.keys()) - ALLOWED_TOP_KEYS
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    pricing = _parse_pricing(raw_config)

    cost_kwargs: Dict[str, Any] = {}
    if 'usage' in raw_config:
        cost_kwargs['default_usage'] = _parse_usage(raw_config['usage'])
    if 'high_waste_threshold' in raw_config:
        threshold = raw_config['high_waste_threshold']
        if not _is_int(threshold) or threshold < 0:
            raise ValueError("'high_waste_threshold' must be a non-negative integer")
        cost_kwargs['high_waste_threshold'] = threshold
    cost = CostEstimatorConfig(**cost_kwargs) if cost_kwargs else DEFAULT_COST_CONFIG

    acceptance_kwargs: Dict[str, Any] = {}
    if 'tool_weights' in raw_config:
        acceptance_kwargs['tool_weights'] = _parse_tool_weights(raw_config['tool_weights'])
    if 'base_rate' in raw_config:
        base_rate = raw_config['base_rate']
        if not _is_number(base_rate) or not 0 <= base_rate <= 1:
            raise ValueError("'base_rate' must be a number in [0, 1]")
        acceptance_kwargs['base_rate'] = float(base_rate)
    acceptance = (
        AcceptanceConfig(**acceptance_kwargs) if acceptance_kwargs else DEFAULT_ACCEPTANCE_CONFIG
    )

    value_chain = _parse_value_chain(raw_config)

    return EngineConfig(
        pricing=pricing,
        cost=cost,
        acceptance=acceptance,
        value_chain=value_chain,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_pricing(raw_config: Dict) -> PricingPresetRegistry:
    """Merge configured presets over the shipped registry."""
    if 'presets' not in raw_config and 'default_preset' not in raw_config:
        return PRICING_PRESETS

    presets = dict(PRICING_PRESETS.presets)

    presets_data = raw_config.get('presets', {})
    if not isinstance(presets_data, dict):
        raise ValueError("'presets' must be a dictionary")
    for name, preset_data in presets_data.items():
        presets[name] = _parse_preset(name, preset_data, f"presets.{name}")

    default_name = raw_config.get('default_preset', PRICING_PRESETS.default_name)
    if not isinstance(default_name, str):
        raise ValueError("'default_preset' must be a string")
    if default_name not in presets:
        raise ValueError(f"'default_preset' must be one of: {sorted(presets)}")

    return PricingPresetRegistry(presets, default_name=default_name)


def _parse_preset(name: str, data: Any, path: str) -> ModelPricingPreset:
    """Parse and validate a single pricing preset.

    Args:
        name: Preset name
        data: Preset configuration data
        path: Path for error messages

    Returns:
        Validated ModelPricingPreset

    Raises:
        ValueError: If configuration is invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"Preset '{name}' must be a dictionary")

    allowed_keys = {'price_per_1k_tokens', 'baseline_confidence'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    if 'price_per_1k_tokens' not in data:
        raise ValueError(f"Missing required 'price_per_1k_tokens' in {path}")
    price = data['price_per_1k_tokens']
    if not _is_number(price) or price <= 0:
        raise ValueError(f"'price_per_1k_tokens' in {path} must be > 0")

    confidence = data.get('baseline_confidence', 0.85)
    if not _is_number(confidence) or not 0 < confidence <= 1:
        raise ValueError(f"'baseline_confidence' in {path} must be in (0, 1]")

    return ModelPricingPreset(
        name=name,
        price_per_1k_tokens=Decimal(str(price)),
        baseline_confidence=float(confidence),
    )


def _parse_usage(data: Any) -> UsageAssumptions:
    """Parse default usage assumptions; missing fields keep shipped defaults."""
    if not isinstance(data, dict):
        raise ValueError("'usage' must be a dictionary")

    allowed_keys = {'developer_count', 'queries_per_dev_per_day', 'days_per_month'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in usage: {unknown_keys}")

    values = DEFAULT_COST_CONFIG.default_usage.to_dict()
    for key, value in data.items():
        if not _is_int(value) or value <= 0:
            raise ValueError(f"'{key}' in usage must be a positive integer")
        values[key] = value
    return UsageAssumptions(**values)


def _parse_tool_weights(data: Any) -> Dict[str, float]:
    if not isinstance(data, dict):
        raise ValueError("'tool_weights' must be a dictionary")

    weights = {}
    for tool_name, weight in data.items():
        if not _is_number(weight) or weight < 0:
            raise ValueError(f"'tool_weights.{tool_name}' must be a non-negative number")
        weights[str(tool_name)] = float(weight)
    return weights


def _parse_value_chain(raw_config: Dict) -> ValueChainConfig:
    kwargs: Dict[str, Any] = {}

    if 'productivity_loss' in raw_config:
        data = raw_config['productivity_loss']
        if not isinstance(data, dict):
            raise ValueError("'productivity_loss' must be a dictionary")
        valid = [severity.value for severity in Severity]
        unknown_keys = set(data.keys()) - set(valid)
        if unknown_keys:
            raise ValueError(f"Unknown keys in productivity_loss: {unknown_keys}")

        table: Dict[Severity, float] = dict(DEFAULT_VALUE_CHAIN_CONFIG.productivity_loss)
        for key, loss in data.items():
            if not _is_number(loss) or not 0 <= loss <= 1:
                raise ValueError(f"'productivity_loss.{key}' must be a number in [0, 1]")
            table[Severity(key)] = float(loss)
        kwargs['productivity_loss'] = table

    if 'baseline_monthly_value' in raw_config:
        value = raw_config['baseline_monthly_value']
        if not _is_number(value) or value < 0:
            raise ValueError("'baseline_monthly_value' must be a non-negative number")
        kwargs['baseline_monthly_value'] = Decimal(str(value))

    if 'count_scaling' in raw_config:
        scaling = raw_config['count_scaling']
        if not isinstance(scaling, str):
            raise ValueError("'count_scaling' must be a string")
        try:
            kwargs['count_scaling'] = CountScaling(scaling.lower())
        except ValueError:
            valid_scaling = [policy.value for policy in CountScaling]
            raise ValueError(f"'count_scaling' must be one of: {valid_scaling}")

    if not kwargs:
        return DEFAULT_VALUE_CHAIN_CONFIG
    return ValueChainConfig(**kwargs)
