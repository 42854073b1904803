"""
Tests for ATM IV Extraction and Term Structure

Tests:
- ATM IV requires a strike with both legs
- Exact-match and interpolated tenors
- Term ratio, outlier reset and status thresholds
"""

import pytest

from optscore.config.scoring_config import ScoringConfig, TermStructureConfig
from optscore.volatility.atm_iv import extract_atm_iv
from optscore.volatility.term_structure import (
    TermStatus,
    get_term_ratio,
    interpolate_iv,
    term_structure_curve,
)
from tests.fixtures import atm_pair, make_chain, make_contract


class TestExtractAtmIv:
    """Test ATM IV extraction from one expiration."""

    def test_mean_of_call_and_put_at_nearest_paired_strike(self):
        contracts = atm_pair(95, 30, 0.30, 0.30) + atm_pair(100, 30, 0.18, 0.22) + atm_pair(105, 30, 0.25, 0.25)

        assert extract_atm_iv(contracts, 101.0) == pytest.approx(0.20)

    def test_unpaired_strikes_ignored(self):
        """A nearer strike with only a call does not count."""
        contracts = [make_contract(100, "Call", iv=0.50)] + atm_pair(110, 30, 0.24, 0.26)

        assert extract_atm_iv(contracts, 100.0) == pytest.approx(0.25)

    def test_unavailable_without_paired_strike(self):
        contracts = [
            make_contract(100, "Call", iv=0.20),
            make_contract(105, "Put", iv=0.22),
        ]
        assert extract_atm_iv(contracts, 100.0) is None

    def test_unavailable_for_empty_input(self):
        assert extract_atm_iv([], 100.0) is None

    def test_unavailable_when_leg_iv_missing(self):
        contracts = atm_pair(100, 30, 0.20, 0.0)
        assert extract_atm_iv(contracts, 100.0) is None

    def test_tie_goes_to_lower_strike(self):
        contracts = atm_pair(105, 30, 0.30, 0.30) + atm_pair(100, 30, 0.20, 0.20)

        assert extract_atm_iv(contracts, 102.5) == pytest.approx(0.20)
        assert extract_atm_iv(list(reversed(contracts)), 102.5) == pytest.approx(0.20)


class TestInterpolateIv:
    """Test tenor interpolation."""

    def test_linear_interpolation(self):
        chain = make_chain(atm_pair(100, 20, 0.20, 0.20) + atm_pair(100, 40, 0.30, 0.30))

        assert interpolate_iv(chain, 30, 100.0) == pytest.approx(0.25)

    def test_exact_match_equals_extractor(self, two_bucket_chain):
        expected = extract_atm_iv(two_bucket_chain.at_dte(20), 100.0)

        assert interpolate_iv(two_bucket_chain, 20, 100.0) == expected

    def test_end_to_end_iv30(self, two_bucket_chain):
        assert interpolate_iv(two_bucket_chain, 30, 100.0) == pytest.approx(0.20)

    def test_no_extrapolation(self, two_bucket_chain):
        assert interpolate_iv(two_bucket_chain, 90, 100.0) is None
        assert interpolate_iv(two_bucket_chain, 10, 100.0) is None

    def test_unavailable_bracket_propagates(self):
        chain = make_chain(
            [make_contract(100, "Call", dte=20, iv=0.2)] + atm_pair(100, 40, 0.30, 0.30)
        )
        assert interpolate_iv(chain, 30, 100.0) is None


class TestGetTermRatio:
    """Test term ratio and status."""

    def test_contango(self):
        chain = make_chain(atm_pair(100, 30, 0.20, 0.20) + atm_pair(100, 90, 0.25, 0.25))
        result = get_term_ratio(chain, 100.0)

        assert result.iv30 == pytest.approx(0.20)
        assert result.iv90 == pytest.approx(0.25)
        assert result.ratio == pytest.approx(0.80)
        assert result.status == TermStatus.CONTANGO
        assert result.is_outlier is False

    def test_backwardation(self):
        chain = make_chain(atm_pair(100, 30, 0.26, 0.26) + atm_pair(100, 90, 0.20, 0.20))
        result = get_term_ratio(chain, 100.0)

        assert result.ratio == pytest.approx(1.30)
        assert result.status == TermStatus.BACKWARDATION

    def test_neutral_band(self):
        chain = make_chain(atm_pair(100, 30, 0.20, 0.20) + atm_pair(100, 90, 0.20, 0.20))
        result = get_term_ratio(chain, 100.0)

        assert result.ratio == pytest.approx(1.0)
        assert result.status == TermStatus.NEUTRAL

    @pytest.mark.parametrize("near_iv", [0.60, 0.08])
    def test_outlier_reset_to_neutral(self, near_iv):
        chain = make_chain(atm_pair(100, 30, near_iv, near_iv) + atm_pair(100, 90, 0.20, 0.20))
        result = get_term_ratio(chain, 100.0)

        assert result.ratio == 1.0
        assert result.is_outlier is True
        assert result.raw_ratio == pytest.approx(near_iv / 0.20)
        assert result.status == TermStatus.NEUTRAL

    def test_missing_data_is_neutral(self, two_bucket_chain):
        result = get_term_ratio(two_bucket_chain, 100.0)

        assert result.iv30 == pytest.approx(0.20)
        assert result.iv90 is None
        assert result.ratio == 1.0
        assert result.has_data is False
        assert result.is_outlier is False

    def test_custom_tenors(self, two_bucket_chain):
        config = ScoringConfig(term_structure=TermStructureConfig(near_tenor=20, far_tenor=40))
        result = get_term_ratio(two_bucket_chain, 100.0, config)

        assert result.ratio == pytest.approx(0.18 / 0.22)


class TestTermStructureCurve:
    def test_curve_per_expiration(self, two_bucket_chain):
        curve = term_structure_curve(two_bucket_chain, 100.0)

        assert [dte for dte, _ in curve] == [20, 40]
        assert curve[0][1] == pytest.approx(0.18)
        assert curve[1][1] == pytest.approx(0.22)
