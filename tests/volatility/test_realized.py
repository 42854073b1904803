"""
Tests for Realized Volatility
"""

import math
from datetime import datetime, timedelta

import numpy as np
import polars as pl
import pytest

from optscore.volatility.realized import iv_realized_ratio, realized_volatility


class TestRealizedVolatility:
    """Test trailing realized vol from closes."""

    def test_known_value(self):
        closes = [100, 110, 100, 110, 100, 110]
        returns = np.diff(np.log(closes))
        expected = np.std(returns) * math.sqrt(252)

        assert realized_volatility(closes) == pytest.approx(expected)

    def test_constant_growth_has_zero_vol(self):
        closes = [100 * 1.01 ** i for i in range(10)]
        assert realized_volatility(closes) == pytest.approx(0.0, abs=1e-9)

    def test_window_uses_trailing_returns(self):
        calm = [100.0] * 10
        wild = [100, 120, 90, 130, 80]
        closes = wild + calm

        assert realized_volatility(closes, window=5) == pytest.approx(0.0)
        assert realized_volatility(closes, window=20) > 0

    def test_default_window_is_thirty_returns(self):
        wild = [100, 120, 90, 130, 80]

        assert realized_volatility(wild + [100.0] * 31) == pytest.approx(0.0)
        assert realized_volatility(wild + [100.0] * 29) > 0

    def test_too_few_closes(self):
        assert realized_volatility([100, 101, 102, 103]) is None

    def test_invalid_closes_dropped(self):
        closes = [100, None, 101, float("nan"), 0, 102, 103]
        assert realized_volatility(closes) is None

        closes.append(104)
        assert realized_volatility(closes) is not None

    def test_dataframe_sorted_by_timestamp(self):
        start = datetime(2026, 1, 1)
        closes = [100, 110, 100, 110, 100, 110]
        frame = pl.DataFrame({
            "timestamp": [start + timedelta(days=i) for i in range(6)][::-1],
            "close": closes[::-1],
        })

        assert realized_volatility(frame) == pytest.approx(realized_volatility(closes))

    def test_dataframe_requires_close_column(self):
        with pytest.raises(ValueError, match="close"):
            realized_volatility(pl.DataFrame({"price": [1.0, 2.0]}))

    def test_window_must_allow_std(self):
        with pytest.raises(ValueError, match="window"):
            realized_volatility([100, 101, 102, 103, 104], window=1)


class TestIvRealizedRatio:
    def test_ratio(self):
        assert iv_realized_ratio(0.30, 0.20) == pytest.approx(1.5)

    @pytest.mark.parametrize("iv, rv", [(None, 0.2), (0.2, None), (0.2, 0.0), (0.0, 0.2)])
    def test_unavailable(self, iv, rv):
        assert iv_realized_ratio(iv, rv) is None
