"""
Tests for Chain Data Models

Tests:
- OptionType flag parsing
- Contract validation and derived prices
- Chain helpers and polars views
"""

from datetime import date, datetime

import polars as pl
import pytest

from optscore.models.chain import Chain, Contract, OptionType
from optscore.models.quote_models import OccSymbol
from tests.fixtures import make_chain, make_contract


class TestOptionType:
    """Test explicit option type flags."""

    @pytest.mark.parametrize("flag", ["C", "c", "Call", "CALL", " call "])
    def test_call_flags(self, flag):
        assert OptionType.parse(flag) == OptionType.CALL

    @pytest.mark.parametrize("flag", ["P", "p", "Put", "PUT"])
    def test_put_flags(self, flag):
        assert OptionType.parse(flag) == OptionType.PUT

    def test_unknown_flag_rejected(self):
        with pytest.raises(ValueError, match="Unrecognised option type"):
            OptionType.parse("X")


class TestContract:
    """Test Contract validation and derived values."""

    def test_mid_and_spread_pct(self):
        contract = make_contract(100, bid=2.00, ask=2.10)

        assert contract.mid == pytest.approx(2.05)
        assert contract.spread_pct == pytest.approx(0.10 / 2.05)

    def test_spread_pct_without_quotes_is_fully_illiquid(self):
        contract = make_contract(100, bid=0.0, ask=0.0)

        assert contract.mid == 0
        assert contract.spread_pct == 1.0

    def test_rejects_non_positive_strike(self):
        with pytest.raises(ValueError, match="Strike must be positive"):
            make_contract(0)

    def test_rejects_negative_quotes(self):
        with pytest.raises(ValueError, match="Bid/ask"):
            make_contract(100, bid=-0.1)

    def test_rejects_non_finite_greeks(self):
        with pytest.raises(ValueError, match="must be finite"):
            make_contract(100, gamma=float("nan"))

    def test_expired_contract_allowed(self):
        """Negative DTE is representable; callers filter it."""
        contract = make_contract(100, dte=-3)
        assert contract.days_to_expiry == -3

    def test_contract_is_immutable(self):
        contract = make_contract(100)
        with pytest.raises(AttributeError):
            contract.bid = 5.0


class TestChain:
    """Test Chain helpers."""

    def test_rejects_non_positive_spot(self):
        with pytest.raises(ValueError, match="Spot price must be positive"):
            Chain(symbol="SPY", spot_price=0, as_of=datetime(2026, 1, 20))

    def test_symbol_uppercased(self):
        chain = Chain(symbol=" spy ", spot_price=455.0, as_of=datetime(2026, 1, 20))
        assert chain.symbol == "SPY"

    def test_dtes_and_buckets(self):
        chain = make_chain([
            make_contract(100, dte=40),
            make_contract(100, dte=20),
            make_contract(105, dte=20),
        ])

        assert chain.dtes() == [20, 40]
        assert [c.strike for c in chain.at_dte(20)] == [100, 105]
        assert len(chain) == 3

    def test_with_contracts_keeps_context(self):
        chain = make_chain([make_contract(100), make_contract(105)], spot_price=101.0)
        subset = chain.with_contracts(c for c in chain if c.strike > 100)

        assert subset.spot_price == 101.0
        assert subset.symbol == chain.symbol
        assert len(subset) == 1

    def test_to_frame(self):
        chain = make_chain([make_contract(100), make_contract(100, "Put", delta=-0.5)])
        frame = chain.to_frame()

        assert frame.height == 2
        assert frame.schema["strike"] == pl.Float64
        assert frame["option_type"].to_list() == ["Call", "Put"]

    def test_expiry_summary(self):
        chain = make_chain([
            make_contract(100, "Call", dte=40, volume=10),
            make_contract(100, "Put", dte=40, volume=5),
            make_contract(100, "Call", dte=20, volume=7),
        ])
        summary = chain.expiry_summary()

        assert summary["dte"].to_list() == [20, 40]
        assert summary["contracts"].to_list() == [1, 2]
        assert summary["puts"].to_list() == [0, 1]
        assert summary["volume"].to_list() == [7, 15]

    def test_expiry_summary_empty_chain(self):
        chain = make_chain([])
        summary = chain.expiry_summary()

        assert summary.is_empty()
        assert summary.columns == ["dte", "expiration", "contracts", "calls", "puts", "volume", "open_interest"]


class TestOccSymbol:
    """Test positional OCC identifier parsing."""

    def test_parse_compact_symbol(self):
        occ = OccSymbol.from_symbol("SPY260220C00455000")

        assert occ.root == "SPY"
        assert occ.expiration == date(2026, 2, 20)
        assert occ.option_type == OptionType.CALL
        assert occ.strike == 455.0

    def test_parse_padded_symbol_with_fractional_strike(self):
        occ = OccSymbol.from_symbol("AAPL  260117P00152500")

        assert occ.root == "AAPL"
        assert occ.option_type == OptionType.PUT
        assert occ.strike == 152.5

    @pytest.mark.parametrize("symbol", ["", "SPY", "SPY260220X00455000", "SPY261320C00455000"])
    def test_invalid_symbols(self, symbol):
        assert OccSymbol.from_symbol(symbol) is None
