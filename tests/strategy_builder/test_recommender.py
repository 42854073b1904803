"""
Tests for the Strategy Recommender

Tests:
- DTE buckets and the candidate chain window
- Structure selection per regime mode with fallbacks
- End-to-end BULL / BEAR recommendations
"""

from types import SimpleNamespace

import pytest

from optscore.strategy_builder.recommender import (
    Direction,
    RecommendedStrategy,
    dte_bucket,
    recommend_strategies,
    select_strategy,
    strategy_chain,
)
from optscore.volatility.regime import RegimeMode
from tests.fixtures import atm_pair, make_chain, make_contract


def candidates(*scores):
    return [SimpleNamespace(score=s) for s in scores]


class TestDirection:
    def test_parse(self):
        assert Direction.parse("bull") == Direction.BULL
        assert Direction.parse(" BEAR ") == Direction.BEAR

    def test_invalid(self):
        with pytest.raises(ValueError, match="BULL or BEAR"):
            Direction.parse("sideways")


class TestDteBucket:
    @pytest.mark.parametrize(
        "target, expected",
        [(7, (14, 30)), (29, (14, 30)), (30, (30, 45)), (44, (30, 45)), (45, (45, 90)), (90, (90, None))],
    )
    def test_buckets(self, target, expected):
        assert dte_bucket(target) == expected


class TestStrategyChain:
    def test_window_and_bucket(self):
        chain = make_chain([
            make_contract(100, dte=35),
            make_contract(120, dte=35),   # outside +/-15%
            make_contract(100, dte=20),   # other bucket
            make_contract(100, dte=44),
            make_contract(86, dte=30),
        ])
        result = strategy_chain(chain, 30)

        assert [(c.strike, c.days_to_expiry) for c in result] == [(100, 35), (100, 44), (86, 30)]

    def test_no_target_keeps_live_expirations(self):
        chain = make_chain([
            make_contract(100, dte=0),
            make_contract(100, dte=-2),
            make_contract(100, dte=400),
            make_contract(100, dte=800),
        ])
        result = strategy_chain(chain, None)

        assert [c.days_to_expiry for c in result] == [400]


class TestSelectStrategy:
    """Test structure selection and fallbacks."""

    def test_debit_mode(self):
        assert select_strategy(RegimeMode.DEBIT, candidates(90), candidates(40), []) == RecommendedStrategy.DEBIT_SPREAD

    def test_credit_mode(self):
        assert select_strategy(RegimeMode.CREDIT, candidates(40), candidates(90), []) == RecommendedStrategy.CREDIT_SPREAD

    def test_neutral_picks_higher_score(self):
        assert select_strategy(RegimeMode.NEUTRAL, candidates(60), candidates(70), []) == RecommendedStrategy.DEBIT_SPREAD
        assert select_strategy(RegimeMode.NEUTRAL, candidates(70), candidates(60), []) == RecommendedStrategy.CREDIT_SPREAD

    def test_neutral_tie_prefers_credit(self):
        assert select_strategy(RegimeMode.NEUTRAL, candidates(70), candidates(70), []) == RecommendedStrategy.CREDIT_SPREAD

    def test_empty_credit_falls_back_to_debit(self):
        assert select_strategy(RegimeMode.CREDIT, [], candidates(50), []) == RecommendedStrategy.DEBIT_SPREAD

    def test_empty_spreads_fall_back_to_single_leg(self):
        assert select_strategy(RegimeMode.DEBIT, [], [], candidates(60)) == RecommendedStrategy.SINGLE_LEG

    def test_empty_debit_falls_back_to_credit_when_no_single_legs(self):
        assert select_strategy(RegimeMode.DEBIT, candidates(50), [], []) == RecommendedStrategy.CREDIT_SPREAD

    def test_nothing_available(self):
        assert select_strategy(RegimeMode.NEUTRAL, [], [], []) == RecommendedStrategy.SINGLE_LEG


class TestRecommendStrategies:
    """Test end-to-end recommendations."""

    def test_bull_neutral_regime_picks_higher_score(self, bull_chain):
        rec = recommend_strategies(bull_chain, "BULL", target_dte=30)

        assert rec.direction == Direction.BULL
        assert rec.term.has_data is False
        assert rec.regime.mode == RegimeMode.NEUTRAL
        assert [s.score for s in rec.credit_spreads] == [79, 70]
        assert [s.score for s in rec.debit_spreads] == [77, 73]
        assert rec.recommended == RecommendedStrategy.CREDIT_SPREAD
        assert rec.best() is rec.credit_spreads[0]

    def test_bull_single_legs_are_calls(self, bull_chain):
        rec = recommend_strategies(bull_chain, "bull", target_dte=30)

        assert len(rec.single_legs) == 3
        assert all(s.contract.option_type.value == "Call" for s in rec.single_legs)

    def test_bear_falls_back_to_single_leg(self, bull_chain):
        rec = recommend_strategies(bull_chain, Direction.BEAR, target_dte=30)

        assert rec.credit_spreads == []
        assert rec.debit_spreads == []
        assert rec.recommended == RecommendedStrategy.SINGLE_LEG
        assert rec.best().contract.strike == 95

    def test_earnings_passed_to_credit_builder(self, bull_chain):
        rec = recommend_strategies(bull_chain, "BULL", target_dte=30, days_until_earnings=5)

        assert rec.credit_spreads == []
        assert rec.recommended == RecommendedStrategy.DEBIT_SPREAD

    def test_contango_selects_debit(self, bull_chain):
        """A 30/90 term structure in contango switches the mode to DEBIT."""
        chain = make_chain(
            bull_chain.contracts
            + atm_pair(100, 30, 0.18, 0.18)
            + atm_pair(100, 90, 0.22, 0.22)
        )
        rec = recommend_strategies(chain, "BULL", target_dte=35)

        assert rec.term.has_data is True
        assert rec.regime.mode == RegimeMode.DEBIT
        assert rec.recommended == RecommendedStrategy.DEBIT_SPREAD

    def test_to_dict(self, bull_chain):
        data = recommend_strategies(bull_chain, "BULL").to_dict()

        assert data["recommended_strategy"] == "CREDIT_SPREAD"
        assert data["context"]["direction"] == "BULL"
        assert set(data["strategies"]) == {"CREDIT_SPREAD", "DEBIT_SPREAD", "SINGLE_LEG"}
        assert data["regime"]["mode"] == "NEUTRAL"
