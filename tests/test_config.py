"""
Unit tests for configuration loading and validation.

Tests strict validation and default handling for engine configs.
"""

import os
import shutil
import tempfile
from decimal import Decimal

import pytest
import yaml

from aiready_economics.config.loader import (
    DEFAULT_ENGINE_CONFIG,
    load_engine_config,
)
from aiready_economics.core.acceptance import predict_acceptance_rate, ToolScoringOutput
from aiready_economics.core.value_chain import (
    CountScaling,
    IssueClassification,
    Severity,
    generate_value_chain,
)


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data: dict, filename: str = "aiready.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def test_full_config_loads_correctly(self):
        """Test that a config using every key loads correctly."""
        config_data = {
            "default_preset": "in-house",
            "presets": {
                "in-house": {"price_per_1k_tokens": 0.001, "baseline_confidence": 0.9}
            },
            "usage": {
                "developer_count": 12,
                "queries_per_dev_per_day": 40,
                "days_per_month": 20,
            },
            "tool_weights": {"pattern-detect": 0.5},
            "base_rate": 0.25,
            "productivity_loss": {"minor": 0.02},
            "baseline_monthly_value": 10000,
            "count_scaling": "linear",
            "high_waste_threshold": 20000,
        }

        config = load_engine_config(self._write_config(config_data))

        # Pricing merged over shipped presets
        assert config.pricing.default_name == "in-house"
        assert config.pricing.default.price_per_1k_tokens == Decimal("0.001")
        assert config.pricing.default.baseline_confidence == 0.9
        assert config.pricing.lookup("gpt-4o").price_per_1k_tokens == Decimal("0.005")

        # Cost
        assert config.default_usage.developer_count == 12
        assert config.default_usage.queries_per_dev_per_day == 40
        assert config.cost.high_waste_threshold == 20000

        # Acceptance
        assert dict(config.acceptance.tool_weights) == {"pattern-detect": 0.5}
        assert config.acceptance.base_rate == 0.25

        # Value chain
        assert config.value_chain.productivity_loss[Severity.MINOR] == 0.02
        assert config.value_chain.productivity_loss[Severity.CRITICAL] == 0.25
        assert config.value_chain.baseline_monthly_value == Decimal("10000")
        assert config.value_chain.count_scaling is CountScaling.LINEAR

    def test_partial_config_keeps_defaults(self):
        """Test that absent keys keep the shipped tables."""
        config = load_engine_config(self._write_config({"base_rate": 0.4}))

        assert config.pricing is DEFAULT_ENGINE_CONFIG.pricing
        assert config.cost is DEFAULT_ENGINE_CONFIG.cost
        assert config.value_chain is DEFAULT_ENGINE_CONFIG.value_chain
        assert config.acceptance.tool_weights["context-analyzer"] == 0.4

    def test_partial_usage_keeps_other_defaults(self):
        """Test that usage fields not given keep default values."""
        config = load_engine_config(self._write_config({"usage": {"developer_count": 3}}))
        assert config.default_usage.developer_count == 3
        assert config.default_usage.days_per_month == DEFAULT_ENGINE_CONFIG.default_usage.days_per_month

    def test_loaded_tables_drive_engine(self):
        """Test that loaded tables are used when injected into operations."""
        config = load_engine_config(self._write_config({
            "tool_weights": {"pattern-detect": 1.0},
            "count_scaling": "linear",
        }))

        prediction = predict_acceptance_rate(
            {"pattern-detect": ToolScoringOutput("pattern-detect", 60)},
            config=config.acceptance,
        )
        assert prediction.rate == pytest.approx(0.4)

        chain = generate_value_chain(
            IssueClassification("context-fragmentation", 2, "critical"),
            config=config.value_chain,
        )
        assert chain.business_outcome.opportunity_cost == 7500

    def test_missing_file_raises_error(self):
        """Test that missing config file raises error."""
        with pytest.raises(FileNotFoundError, match="Engine config file not found"):
            load_engine_config("nonexistent.yaml")

    def test_empty_config_raises_error(self):
        """Test that empty config file raises error."""
        config_path = self._write_config({})

        with pytest.raises(ValueError, match="Configuration file is empty"):
            load_engine_config(config_path)

    def test_invalid_yaml_raises_error(self):
        """Test that invalid YAML raises error."""
        config_path = os.path.join(self.temp_dir, "invalid.yaml")
        with open(config_path, 'w') as f:
            f.write("invalid: yaml: content: [")

        with pytest.raises(yaml.YAMLError):
            load_engine_config(config_path)

    def test_unknown_top_level_key_raises_error(self):
        """Test that unknown top-level keys are rejected."""
        config_path = self._write_config({"pricing": {}})

        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_engine_config(config_path)

    def test_unknown_default_preset_raises_error(self):
        """Test that the default preset must be registered."""
        config_path = self._write_config({"default_preset": "gpt-99"})

        with pytest.raises(ValueError, match="'default_preset' must be one of"):
            load_engine_config(config_path)

    def test_preset_missing_price_raises_error(self):
        """Test that presets need a price."""
        config_path = self._write_config({"presets": {"x": {"baseline_confidence": 0.5}}})

        with pytest.raises(ValueError, match="Missing required 'price_per_1k_tokens' in presets.x"):
            load_engine_config(config_path)

    def test_preset_unknown_key_raises_error(self):
        """Test that unknown preset keys are rejected."""
        config_path = self._write_config({
            "presets": {"x": {"price_per_1k_tokens": 0.01, "currency": "EUR"}}
        })

        with pytest.raises(ValueError, match="Unknown keys in presets.x"):
            load_engine_config(config_path)

    def test_preset_bad_confidence_raises_error(self):
        """Test that preset confidence must be in (0, 1]."""
        config_path = self._write_config({
            "presets": {"x": {"price_per_1k_tokens": 0.01, "baseline_confidence": 0}}
        })

        with pytest.raises(ValueError, match="'baseline_confidence' in presets.x"):
            load_engine_config(config_path)

    def test_non_positive_usage_raises_error(self):
        """Test that usage values must be positive integers."""
        config_path = self._write_config({"usage": {"days_per_month": 0}})

        with pytest.raises(ValueError, match="'days_per_month' in usage must be a positive integer"):
            load_engine_config(config_path)

    def test_negative_tool_weight_raises_error(self):
        """Test that tool weights cannot be negative."""
        config_path = self._write_config({"tool_weights": {"pattern-detect": -0.1}})

        with pytest.raises(ValueError, match="tool_weights.pattern-detect"):
            load_engine_config(config_path)

    def test_unknown_severity_raises_error(self):
        """Test that productivity loss keys must be severities."""
        config_path = self._write_config({"productivity_loss": {"blocker": 0.5}})

        with pytest.raises(ValueError, match="Unknown keys in productivity_loss"):
            load_engine_config(config_path)

    def test_productivity_loss_out_of_range_raises_error(self):
        """Test that productivity loss must be a fraction."""
        config_path = self._write_config({"productivity_loss": {"critical": 1.5}})

        with pytest.raises(ValueError, match="'productivity_loss.critical'"):
            load_engine_config(config_path)

    def test_invalid_count_scaling_raises_error(self):
        """Test that count scaling must be a known policy."""
        config_path = self._write_config({"count_scaling": "quadratic"})

        with pytest.raises(ValueError, match="'count_scaling' must be one of"):
            load_engine_config(config_path)

    def test_negative_threshold_raises_error(self):
        """Test that the high waste threshold cannot be negative."""
        config_path = self._write_config({"high_waste_threshold": -1})

        with pytest.raises(ValueError, match="'high_waste_threshold'"):
            load_engine_config(config_path)
