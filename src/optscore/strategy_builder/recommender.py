"""
Strategy Recommender

Given a directional view (BULL or BEAR) and a target tenor, builds credit
spreads, debit spreads and single long legs from one chain and picks the
structure that fits the volatility regime.

**Leg types by direction:**
- BULL: credit put spread, debit call spread, long call
- BEAR: credit call spread, debit put spread, long put

**Selection:**
- DEBIT regime → debit spread
- NEUTRAL regime → whichever top score is higher (debit only if strictly higher)
- CREDIT regime → credit spread
Then fall back credit → debit → single leg → credit when a bucket is empty.

Usage:
    from optscore.strategy_builder.recommender import recommend_strategies

    rec = recommend_strategies(chain, "BULL", target_dte=30, iv_realized_ratio=1.4)
    print(rec.recommended)       # RecommendedStrategy.CREDIT_SPREAD
    print(rec.best())            # SpreadCandidate(...)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from loguru import logger

from optscore.config.scoring_config import ScoringConfig
from optscore.models.chain import Chain, OptionType
from optscore.scoring.composite import ScoredContract, score_contracts
from optscore.strategy_builder.models import SpreadCandidate
from optscore.strategy_builder.spread_builders import CreditSpreadBuilder, DebitSpreadBuilder
from optscore.volatility.regime import RegimeMode, Strategy, VolatilityRegime, classify_regime
from optscore.volatility.term_structure import TermStructureResult, get_term_ratio


class Direction(str, Enum):
    """Directional view of the underlying."""

    BULL = "BULL"
    BEAR = "BEAR"

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        if isinstance(value, Direction):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"direction must be BULL or BEAR, got {value!r}") from None


class RecommendedStrategy(str, Enum):
    CREDIT_SPREAD = "CREDIT_SPREAD"
    DEBIT_SPREAD = "DEBIT_SPREAD"
    SINGLE_LEG = "SINGLE_LEG"


# (credit leg, debit leg, single leg) per direction
LEG_TYPES = {
    Direction.BULL: (OptionType.PUT, OptionType.CALL, OptionType.CALL),
    Direction.BEAR: (OptionType.CALL, OptionType.PUT, OptionType.PUT),
}


@dataclass(slots=True)
class Recommendation:
    """
    Strategy recommendation for one chain.

    Attributes:
        symbol: Underlying symbol
        spot_price: Underlying price
        direction: BULL or BEAR
        target_dte: Requested tenor
        days_until_earnings: Next earnings event, if known
        term: Term structure of the full chain
        regime: Volatility regime (long side adjustment)
        recommended: Selected structure
        credit_spreads: Ranked credit spreads
        debit_spreads: Ranked debit spreads
        single_legs: Ranked single long legs
    """

    symbol: str
    spot_price: float
    direction: Direction
    target_dte: int
    days_until_earnings: Optional[int]
    term: TermStructureResult
    regime: VolatilityRegime
    recommended: RecommendedStrategy
    credit_spreads: list[SpreadCandidate] = field(default_factory=list)
    debit_spreads: list[SpreadCandidate] = field(default_factory=list)
    single_legs: list[ScoredContract] = field(default_factory=list)

    def best(self) -> Optional[Union[SpreadCandidate, ScoredContract]]:
        """Top candidate of the recommended structure (None if empty)."""
        bucket = {
            RecommendedStrategy.CREDIT_SPREAD: self.credit_spreads,
            RecommendedStrategy.DEBIT_SPREAD: self.debit_spreads,
            RecommendedStrategy.SINGLE_LEG: self.single_legs,
        }[self.recommended]
        return bucket[0] if bucket else None

    def to_dict(self) -> dict:
        return {
            "context": {
                "symbol": self.symbol,
                "spot_price": self.spot_price,
                "direction": self.direction.value,
                "target_dte": self.target_dte,
                "days_until_earnings": self.days_until_earnings,
            },
            "term_structure": self.term.to_dict(),
            "regime": self.regime.to_dict(),
            "recommended_strategy": self.recommended.value,
            "strategies": {
                RecommendedStrategy.CREDIT_SPREAD.value: [s.to_dict() for s in self.credit_spreads],
                RecommendedStrategy.DEBIT_SPREAD.value: [s.to_dict() for s in self.debit_spreads],
                RecommendedStrategy.SINGLE_LEG.value: [s.to_dict() for s in self.single_legs],
            },
        }


def dte_bucket(target_dte: int) -> tuple[int, Optional[int]]:
    """
    DTE window [low, high) for a target tenor.

    <30 → [14, 30), <45 → [30, 45), <90 → [45, 90), else [90, ∞)
    """
    if target_dte < 30:
        return 14, 30
    if target_dte < 45:
        return 30, 45
    if target_dte < 90:
        return 45, 90
    return 90, None


def strategy_chain(chain: Chain, target_dte: Optional[int], config: Optional[ScoringConfig] = None) -> Chain:
    """
    Restrict a chain to strikes near spot and the target DTE bucket.

    Without a target, keeps live expirations up to the configured maximum DTE.
    """
    settings = (config or ScoringConfig()).recommender
    low_strike = chain.spot_price * (1 - settings.strike_window_pct)
    high_strike = chain.spot_price * (1 + settings.strike_window_pct)

    if target_dte is None:
        def in_window(dte: int) -> bool:
            return 0 < dte <= settings.max_dte
    else:
        low, high = dte_bucket(target_dte)

        def in_window(dte: int) -> bool:
            return dte >= low and (high is None or dte < high)

    return chain.with_contracts(
        c for c in chain.contracts
        if low_strike <= c.strike <= high_strike and in_window(c.days_to_expiry)
    )


def select_strategy(
    mode: RegimeMode,
    credit_spreads: list[SpreadCandidate],
    debit_spreads: list[SpreadCandidate],
    single_legs: list[ScoredContract],
) -> RecommendedStrategy:
    """Pick a structure from the regime mode and the available candidates."""
    choice = RecommendedStrategy.CREDIT_SPREAD

    if mode == RegimeMode.DEBIT:
        choice = RecommendedStrategy.DEBIT_SPREAD
    elif mode == RegimeMode.NEUTRAL:
        top_credit = credit_spreads[0].score if credit_spreads else 0
        top_debit = debit_spreads[0].score if debit_spreads else 0
        if top_debit > top_credit:
            choice = RecommendedStrategy.DEBIT_SPREAD

    if choice == RecommendedStrategy.CREDIT_SPREAD and not credit_spreads:
        choice = RecommendedStrategy.DEBIT_SPREAD
    if choice == RecommendedStrategy.DEBIT_SPREAD and not debit_spreads:
        choice = RecommendedStrategy.SINGLE_LEG
    if choice == RecommendedStrategy.SINGLE_LEG and not single_legs and credit_spreads:
        choice = RecommendedStrategy.CREDIT_SPREAD

    return choice


def recommend_strategies(
    chain: Chain,
    direction: "str | Direction",
    target_dte: int = 30,
    iv_realized_ratio: Optional[float] = None,
    days_until_earnings: Optional[int] = None,
    config: Optional[ScoringConfig] = None,
) -> Recommendation:
    """
    Build and rank spread and single-leg candidates for a directional view.

    Args:
        chain: Full chain snapshot
        direction: BULL or BEAR
        target_dte: Target tenor in days
        iv_realized_ratio: Implied / realized vol, if known
        days_until_earnings: Days until the next earnings event, if known
        config: Scoring configuration (defaults if None)

    Returns:
        Recommendation with all candidate lists and the selected structure
    """
    config = config or ScoringConfig()
    direction = Direction.parse(direction)
    credit_type, debit_type, leg_type = LEG_TYPES[direction]

    full = strategy_chain(chain, None, config)
    term = get_term_ratio(full, chain.spot_price, config)
    regime = classify_regime(
        term.ratio if term.has_data else None,
        iv_realized_ratio,
        Strategy.LONG,
        config,
    )

    candidates = strategy_chain(chain, target_dte, config)
    contracts = candidates.contracts

    credit_spreads = CreditSpreadBuilder.from_config(config).build(
        contracts, credit_type, chain.spot_price, regime, days_until_earnings
    )
    debit_spreads = DebitSpreadBuilder.from_config(config).build(
        contracts, debit_type, chain.spot_price, regime
    )

    settings = config.recommender
    legs = [
        c for c in contracts
        if c.option_type == leg_type
        and settings.single_leg_delta_min <= abs(c.delta) <= settings.single_leg_delta_max
    ]
    single_legs = score_contracts(
        legs, chain.spot_price, Strategy.LONG, regime.adjustment, config
    )[: settings.single_leg_top_n]

    recommended = select_strategy(regime.mode, credit_spreads, debit_spreads, single_legs)

    logger.info(
        f"{chain.symbol or 'chain'} {direction.value} {target_dte}d: regime {regime.mode.value} "
        f"(term={term.ratio:.3f}) → {recommended.value} "
        f"[credit={len(credit_spreads)}, debit={len(debit_spreads)}, single={len(single_legs)}]"
    )

    return Recommendation(
        symbol=chain.symbol,
        spot_price=chain.spot_price,
        direction=direction,
        target_dte=target_dte,
        days_until_earnings=days_until_earnings,
        term=term,
        regime=regime,
        recommended=recommended,
        credit_spreads=credit_spreads,
        debit_spreads=debit_spreads,
        single_legs=single_legs,
    )
