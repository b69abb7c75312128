"""
Unit tests for acceptance-rate prediction.

Tests weighted score fusion, clamping and handling of unweighted tools.
"""

import pytest

from aiready_economics.core.acceptance import (
    BASE_ACCEPTANCE_RATE,
    AcceptanceConfig,
    ToolScoringOutput,
    predict_acceptance_rate,
)
from aiready_economics.core.errors import InvalidInputError


def _outputs(**scores):
    """Build a tool output mapping; underscores in names become dashes."""
    outputs = {}
    for name, score in scores.items():
        tool_name = name.replace("_", "-")
        outputs[tool_name] = ToolScoringOutput(tool_name=tool_name, score=score)
    return outputs


class TestToolScoringOutput:
    """Test ToolScoringOutput validation."""

    def test_score_above_range_raises_error(self):
        """Verify scores above 100 are rejected."""
        with pytest.raises(InvalidInputError, match="must be in \\[0, 100\\]"):
            ToolScoringOutput(tool_name="pattern-detect", score=101)

    def test_opaque_payload_kept(self):
        """Verify tool-defined payloads are carried through untouched."""
        output = ToolScoringOutput(
            tool_name="pattern-detect",
            score=70,
            raw_metrics={"duplicates": 4},
            factors=["a"],
            recommendations=[{"text": "extract helper"}],
        )
        assert output.raw_metrics == {"duplicates": 4}
        assert output.recommendations[0]["text"] == "extract helper"


class TestPredictAcceptanceRate:
    """Test predict_acceptance_rate."""

    def test_multiple_tool_signals(self):
        """Verify high and low scores combine on top of the base rate."""
        prediction = predict_acceptance_rate(_outputs(pattern_detect=80, context_analyzer=20))
        assert len(prediction.factors) == 2
        assert prediction.rate == pytest.approx(0.27)  # 0.3 + 0.09 - 0.12

    def test_factor_attribution(self):
        """Verify each factor records its weight and signed contribution."""
        prediction = predict_acceptance_rate(_outputs(pattern_detect=80, context_analyzer=20))
        by_tool = {factor.tool_name: factor for factor in prediction.factors}
        assert by_tool["pattern-detect"].weight == 0.3
        assert by_tool["pattern-detect"].contribution == pytest.approx(0.09)
        assert by_tool["context-analyzer"].weight == 0.4
        assert by_tool["context-analyzer"].contribution == pytest.approx(-0.12)

    def test_factors_follow_input_order(self):
        """Verify factors appear in input order."""
        prediction = predict_acceptance_rate(_outputs(context_analyzer=60, pattern_detect=60))
        assert [f.tool_name for f in prediction.factors] == ["context-analyzer", "pattern-detect"]

    def test_no_signal_gives_base_rate(self):
        """Verify an empty mapping yields the base rate."""
        prediction = predict_acceptance_rate({})
        assert prediction.rate == BASE_ACCEPTANCE_RATE
        assert prediction.factors == ()

    def test_neutral_score_contributes_nothing(self):
        """Verify a score of 50 leaves the rate unchanged."""
        prediction = predict_acceptance_rate(_outputs(context_analyzer=50))
        assert prediction.rate == pytest.approx(BASE_ACCEPTANCE_RATE)
        assert prediction.factors[0].contribution == 0

    def test_unknown_tools_ignored(self):
        """Verify tools without a weight add neither contribution nor factor."""
        prediction = predict_acceptance_rate(_outputs(pattern_detect=80, future_tool=0))
        assert [f.tool_name for f in prediction.factors] == ["pattern-detect"]
        assert prediction.rate == pytest.approx(0.39)

    def test_rate_clamped_to_upper_bound(self):
        """Verify the rate never exceeds 1."""
        config = AcceptanceConfig(tool_weights={"pattern-detect": 5.0})
        prediction = predict_acceptance_rate(_outputs(pattern_detect=100), config=config)
        assert prediction.rate == 1.0

    def test_rate_clamped_to_lower_bound(self):
        """Verify the rate never drops below 0."""
        config = AcceptanceConfig(tool_weights={"pattern-detect": 5.0})
        prediction = predict_acceptance_rate(_outputs(pattern_detect=0), config=config)
        assert prediction.rate == 0.0
        # Attribution keeps the unclamped contribution
        assert prediction.factors[0].contribution == pytest.approx(-2.5)

    def test_injected_weights_replace_defaults(self):
        """Verify an injected weight table is used instead of the default."""
        config = AcceptanceConfig(tool_weights={"custom": 1.0}, base_rate=0.5)
        prediction = predict_acceptance_rate(_outputs(custom=60, pattern_detect=100), config=config)
        assert [f.tool_name for f in prediction.factors] == ["custom"]
        assert prediction.rate == pytest.approx(0.6)

    def test_invalid_base_rate_raises_error(self):
        """Verify base rate must be within [0, 1]."""
        with pytest.raises(InvalidInputError):
            AcceptanceConfig(base_rate=1.5)

    def test_to_dict(self):
        """Verify serialized shape."""
        data = predict_acceptance_rate(_outputs(pattern_detect=80)).to_dict()
        assert data["factors"][0]["tool_name"] == "pattern-detect"
        assert data["rate"] == pytest.approx(0.39)
