"""
Single-Leg Chain Scanner

Applies the hard filters to a chain, scores the survivors for one strategy
and returns the top results with their scan context.

**Hard filters:**
- DTE within [dte_min, dte_max]
- strike within +/- strike_range_pct of spot
- volume >= min_volume
- bid/ask spread pct <= max_spread_pct and mid > 0
- |delta| within [min_delta, max_delta]
- option type matches direction (all / call / put)

The term ratio is always computed on the full chain, so a scan whose
filters reject everything still reports the regime.

Usage:
    from optscore.scanner import scan_chain

    result = scan_chain(chain, "long")
    for scored in result.results:
        print(scored.score, scored.contract)
"""

from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from optscore.config.scoring_config import ScanFilters, ScoringConfig
from optscore.models.chain import Chain, Contract, OptionType
from optscore.scoring.composite import ScoredContract, score_contracts
from optscore.volatility.regime import Strategy, VolatilityRegime, classify_regime
from optscore.volatility.term_structure import TermStructureResult, get_term_ratio


@dataclass(slots=True)
class ScanResult:
    """
    Result of one scan.

    Attributes:
        symbol: Underlying symbol
        spot_price: Underlying price
        strategy: Strategy scored for
        term: Term structure of the full chain
        regime: Volatility regime for the strategy
        total_contracts: Contracts in the chain
        filtered_count: Contracts that passed the hard filters
        results: Top scored contracts (score descending)
    """

    symbol: str
    spot_price: float
    strategy: Strategy
    term: TermStructureResult
    regime: VolatilityRegime
    total_contracts: int
    filtered_count: int
    results: list[ScoredContract] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.results

    def to_dict(self) -> dict:
        return {
            "context": {
                "symbol": self.symbol,
                "spot_price": self.spot_price,
                "strategy": self.strategy.value,
                "iv_ratio": self.term.ratio,
                "iv_status": self.term.status.value,
                "is_outlier": self.term.is_outlier,
                "regime": self.regime.to_dict(),
                "total_options": self.total_contracts,
                "filtered_count": self.filtered_count,
            },
            "results": [r.to_dict() for r in self.results],
        }


def passes_filters(contract: Contract, spot_price: float, filters: ScanFilters) -> bool:
    """True if a contract passes every hard filter."""
    if filters.direction == "call" and contract.option_type != OptionType.CALL:
        return False
    if filters.direction == "put" and contract.option_type != OptionType.PUT:
        return False

    low_strike = spot_price * (1 - filters.strike_range_pct)
    high_strike = spot_price * (1 + filters.strike_range_pct)
    abs_delta = abs(contract.delta)

    return (
        filters.dte_min <= contract.days_to_expiry <= filters.dte_max
        and low_strike <= contract.strike <= high_strike
        and contract.volume >= filters.min_volume
        and contract.mid > 0
        and contract.spread_pct <= filters.max_spread_pct
        and filters.min_delta <= abs_delta <= filters.max_delta
    )


def scan_chain(
    chain: Chain,
    strategy: "str | Strategy" = Strategy.LONG,
    filters: Optional[ScanFilters] = None,
    config: Optional[ScoringConfig] = None,
    iv_realized_ratio: Optional[float] = None,
    day_trade: bool = False,
) -> ScanResult:
    """
    Filter, score and rank a chain.

    Args:
        chain: Chain snapshot
        strategy: "long" or "short"
        filters: Hard filters (config.scan_filters if None)
        config: Scoring configuration (defaults if None)
        iv_realized_ratio: Implied / realized vol, if known
        day_trade: Use the day-trade long weights

    Returns:
        ScanResult with context and up to ``filters.top_n`` results
    """
    config = config or ScoringConfig()
    filters = filters or config.scan_filters
    strategy = Strategy.parse(strategy)

    term = get_term_ratio(chain, chain.spot_price, config)
    regime = classify_regime(
        term.ratio if term.has_data else None,
        iv_realized_ratio,
        strategy,
        config,
    )

    filtered = [c for c in chain.contracts if passes_filters(c, chain.spot_price, filters)]

    if not filtered:
        logger.info(
            f"Scan {chain.symbol or 'chain'}: no contracts passed filters "
            f"(0/{len(chain)}), regime {regime.mode.value}"
        )
        return ScanResult(
            symbol=chain.symbol,
            spot_price=chain.spot_price,
            strategy=strategy,
            term=term,
            regime=regime,
            total_contracts=len(chain),
            filtered_count=0,
        )

    scored = score_contracts(
        filtered,
        chain.spot_price,
        strategy,
        regime.adjustment,
        config,
        day_trade=day_trade,
    )

    logger.info(
        f"Scan {chain.symbol or 'chain'} ({strategy.value}): {len(filtered)}/{len(chain)} passed filters, "
        f"term={term.ratio:.3f} ({term.status.value}), adj={regime.adjustment:+.2f}"
    )

    return ScanResult(
        symbol=chain.symbol,
        spot_price=chain.spot_price,
        strategy=strategy,
        term=term,
        regime=regime,
        total_contracts=len(chain),
        filtered_count=len(filtered),
        results=scored[: filters.top_n],
    )
