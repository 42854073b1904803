"""
Tests for Scoring Configuration

Tests:
- Defaults and named profiles
- Nested dict construction and round trip
- Validation errors
"""

import pytest

from optscore.config.scoring_config import Baseline, ScoringConfig
from optscore.exceptions import ConfigurationError


class TestDefaults:
    def test_default_weights(self, config):
        assert config.profile == "strict"
        assert config.long_weights.lambda_ == 0.40
        assert config.day_trade_weights.gamma_efficiency == 0.50
        assert config.day_trade_weights.pain_multiplier == 0.2
        assert config.short_weights.edge == 0.50
        assert config.long_baselines.lambda_ == Baseline(8.0, 4.0)

    def test_defaults_are_valid(self, config):
        assert config.validate() == []

    def test_instances_do_not_share_state(self):
        a = ScoringConfig()
        b = ScoringConfig()
        a.scan_filters.top_n = 3

        assert b.scan_filters.top_n == 20


class TestProfiles:
    """Test the strict and relaxed profiles."""

    def test_strict_limits(self, config):
        assert config.credit_spread.liquidity_basis == "composite"
        assert config.credit_spread.min_credit == 0.10
        assert config.debit_spread.min_risk_reward == 1.5
        assert config.debit_spread.anchor_delta_min == 0.45

    def test_relaxed_limits(self, relaxed_config):
        assert relaxed_config.profile == "relaxed"
        assert relaxed_config.credit_spread.liquidity_basis == "short_leg"
        assert relaxed_config.credit_spread.min_credit == 0.15
        assert relaxed_config.credit_spread.weight_dte == 0.0
        assert relaxed_config.debit_spread.min_risk_reward == 1.0
        assert relaxed_config.debit_spread.cost_ceiling == 0.50
        assert relaxed_config.validate() == []

    def test_unknown_profile(self):
        with pytest.raises(ConfigurationError, match="Unknown profile"):
            ScoringConfig.for_profile("aggressive")

    def test_profile_name_case_insensitive(self):
        assert ScoringConfig.for_profile(" Relaxed ").profile == "relaxed"


class TestFromDict:
    def test_nested_override(self):
        config = ScoringConfig.from_dict({
            "long_weights": {"lambda": 0.5},
            "scan_filters": {"min_volume": 200},
            "long_baselines": {"lambda": [10.0, 5.0], "theta_burn": {"mean": 0.02, "std": 0.01}},
            "credit_spread": {"widths": [2.5, 5]},
        })

        assert config.long_weights.lambda_ == 0.5
        assert config.long_weights.gamma_efficiency == 0.30
        assert config.scan_filters.min_volume == 200
        assert config.long_baselines.lambda_ == Baseline(10.0, 5.0)
        assert config.long_baselines.theta_burn == Baseline(0.02, 0.01)
        assert config.credit_spread.widths == (2.5, 5.0)

    def test_overrides_apply_on_top_of_profile(self):
        config = ScoringConfig.from_dict({
            "profile": "relaxed",
            "credit_spread": {"min_credit": 0.20},
        })

        assert config.credit_spread.min_credit == 0.20
        assert config.credit_spread.liquidity_basis == "short_leg"

    def test_empty_section_keeps_profile(self):
        config = ScoringConfig.from_dict({"profile": "relaxed", "credit_spread": None, "regime": None})

        assert config == ScoringConfig.for_profile("relaxed")

    def test_unknown_keys_ignored(self):
        config = ScoringConfig.from_dict({"scan_filters": {"min_volume": 10, "colour": "blue"}})
        assert config.scan_filters.min_volume == 10

    def test_round_trip(self, relaxed_config):
        data = relaxed_config.to_dict()

        assert data["long_baselines"]["lambda_"] == {"mean": 8.0, "std": 4.0}
        assert data["credit_spread"]["widths"] == [5.0, 10.0]
        assert ScoringConfig.from_dict(data) == relaxed_config


class TestValidate:
    """Test validation error messages."""

    def test_non_positive_baseline_std(self):
        config = ScoringConfig.from_dict({"long_baselines": {"lambda": [8.0, 0.0]}})
        assert any("std must be positive" in e for e in config.validate())

    def test_dte_range(self):
        config = ScoringConfig.from_dict({"scan_filters": {"dte_min": 60, "dte_max": 20}})
        assert any("dte_min > dte_max" in e for e in config.validate())

    def test_direction(self):
        config = ScoringConfig.from_dict({"scan_filters": {"direction": "both"}})
        assert any("direction" in e for e in config.validate())

    def test_tenors(self):
        config = ScoringConfig.from_dict({"term_structure": {"near_tenor": 90, "far_tenor": 30}})
        assert any("tenors" in e for e in config.validate())

    def test_liquidity_basis(self):
        config = ScoringConfig.from_dict({"credit_spread": {"liquidity_basis": "mid"}})
        assert any("liquidity_basis" in e for e in config.validate())

    def test_unknown_profile_in_dict(self):
        config = ScoringConfig.from_dict({"profile": "yolo"})
        assert "Unknown profile: yolo" in config.validate()

    @pytest.mark.parametrize("tolerance", [0.0, 2.6])
    def test_credit_strike_tolerance(self, tolerance):
        config = ScoringConfig.from_dict({"credit_spread": {"strike_tolerance": tolerance}})
        assert any("credit_spread.strike_tolerance" in e for e in config.validate())

    def test_debit_strike_tolerance(self):
        config = ScoringConfig.from_dict({"debit_spread": {"strike_tolerance": 1.5}})
        assert any("debit_spread.strike_tolerance" in e for e in config.validate())

    def test_loose_tolerance_within_half_width_is_valid(self):
        config = ScoringConfig.from_dict({"credit_spread": {"strike_tolerance": 0.5}})
        assert config.validate() == []
