"""
Vertical Spread Builders

Pairs contracts of one option type into two-leg vertical spreads.

- CreditSpreadBuilder: sell the anchor (|delta| 0.20-0.40), buy protection
  further OTM (puts below, calls above)
- DebitSpreadBuilder: buy the anchor (|delta| 0.40/0.45-0.70), sell further
  OTM to cut cost (calls above, puts below)

Pricing is conservative: sold legs fill at the bid, bought legs at the ask.
Both builders return the top candidates by score (stable on ties).

Usage:
    from optscore.strategy_builder.spread_builders import CreditSpreadBuilder

    builder = CreditSpreadBuilder.from_config(config)
    spreads = builder.build(chain.contracts, OptionType.PUT, chain.spot_price, regime)
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from loguru import logger

from optscore.config.scoring_config import (
    CreditSpreadProfile,
    DebitSpreadProfile,
    LambdaCompression,
    ScoringConfig,
    SpreadScoring,
)
from optscore.models.chain import Contract, OptionType
from optscore.scoring.metrics import compress_lambda, delta_bonus
from optscore.strategy_builder.models import SpreadCandidate, SpreadType
from optscore.volatility.regime import Strategy, VolatilityRegime


def max_contracts(max_risk: float, scoring: Optional[SpreadScoring] = None) -> int:
    """Contracts that fit under the per-trade account risk limit."""
    s = scoring or SpreadScoring()
    if max_risk <= 0:
        return 0
    return math.floor(s.account_risk_limit / (max_risk * s.contract_multiplier))


def dte_sweet_spot_score(dte: int) -> float:
    """Credit spread DTE preference (30-45 days ideal)."""
    if 30 <= dte <= 45:
        return 100.0
    if 21 <= dte < 30:
        return 75.0
    if 45 < dte <= 60:
        return 80.0
    if dte < 21:
        return 20.0
    return 50.0


def regime_points(regime: Optional[VolatilityRegime], strategy: Strategy, scoring: SpreadScoring) -> float:
    """Regime adjustment for ``strategy`` expressed in 0-100 score points."""
    if regime is None:
        return 0.0
    return regime.for_strategy(strategy).adjustment * scoring.regime_points_scale


def find_leg(
    contracts: Sequence[Contract],
    option_type: OptionType,
    expiration,
    strike: float,
    tolerance: float,
) -> Optional[Contract]:
    """First contract of the given type and expiration within tolerance of ``strike``."""
    for contract in contracts:
        if (
            contract.option_type == option_type
            and contract.expiration == expiration
            and abs(contract.strike - strike) < tolerance
        ):
            return contract
    return None


def _validate_widths(widths: Iterable[float], tolerance: float) -> None:
    for width in widths:
        if width <= 0:
            raise ValueError(f"Spread width must be positive, got {width}")
        # A leg search wider than half the width can land on the anchor strike
        if not (0 < tolerance <= width / 2):
            raise ValueError(f"Strike tolerance {tolerance} must be in (0, {width / 2}] for width {width}")


@dataclass(slots=True)
class CreditSpreadBuilder:
    """
    Credit spread builder.

    Filters (in order):
    - protective leg exists at strike -/+ width (same expiration)
    - conservative credit (short bid - long ask) above the minimum
    - liquidity: composite spread bid/ask (or short leg) within the maximum
    - earnings: reject when earnings fall inside the trade and within the
      block window; penalize when inside the trade but further out
    - ROI at or above the floor

    Score = weighted ROI, POP, OTM distance and DTE scores plus regime points
    (short premium side).
    """

    profile: CreditSpreadProfile = field(default_factory=CreditSpreadProfile)
    scoring: SpreadScoring = field(default_factory=SpreadScoring)
    name: str = "CreditSpreadBuilder"

    def __post_init__(self):
        _validate_widths(self.profile.widths, self.profile.strike_tolerance)
        _validate_widths(self.profile.wide_widths, self.profile.strike_tolerance)

    @classmethod
    def from_config(cls, config: Optional[ScoringConfig] = None) -> "CreditSpreadBuilder":
        config = config or ScoringConfig()
        return cls(profile=config.credit_spread, scoring=config.spread_scoring)

    def widths_for(self, spot_price: float) -> tuple[float, ...]:
        if spot_price >= self.profile.wide_width_spot:
            return tuple(self.profile.wide_widths)
        return tuple(self.profile.widths)

    def build(
        self,
        contracts: Iterable[Contract],
        option_type: "OptionType | str",
        spot_price: float,
        regime: Optional[VolatilityRegime] = None,
        days_until_earnings: Optional[int] = None,
    ) -> list[SpreadCandidate]:
        """
        Build and rank credit spreads.

        Args:
            contracts: Candidate contracts (usually one DTE bucket near spot)
            option_type: PUT (bull put spread) or CALL (bear call spread)
            spot_price: Underlying price
            regime: Volatility regime (adjustment flipped to the short side)
            days_until_earnings: Days until the next earnings event, if known

        Returns:
            Top candidates sorted by score descending
        """
        p = self.profile
        option_type = OptionType.parse(option_type)
        contracts = list(contracts)
        points = regime_points(regime, Strategy.SHORT, self.scoring)
        widths = self.widths_for(spot_price)

        anchors = [
            c for c in contracts
            if c.option_type == option_type
            and p.anchor_delta_min <= abs(c.delta) <= p.anchor_delta_max
        ]

        results: list[SpreadCandidate] = []
        for short_leg in anchors:
            for width in widths:
                offset = -width if option_type == OptionType.PUT else width
                long_leg = find_leg(
                    contracts, option_type, short_leg.expiration,
                    short_leg.strike + offset, p.strike_tolerance,
                )
                if long_leg is None:
                    continue

                # Width is the strike gap actually found, not the nominal one
                gap = abs(short_leg.strike - long_leg.strike)
                candidate = self._evaluate(short_leg, long_leg, gap, spot_price, points, days_until_earnings)
                if candidate is not None:
                    results.append(candidate)

        results.sort(key=lambda c: c.score, reverse=True)
        logger.debug(
            f"Credit {option_type.value} spreads: {len(anchors)} anchors → {len(results)} candidates"
        )
        return results[: p.top_n]

    def _evaluate(
        self,
        short_leg: Contract,
        long_leg: Contract,
        width: float,
        spot_price: float,
        points: float,
        days_until_earnings: Optional[int],
    ) -> Optional[SpreadCandidate]:
        p = self.profile

        # Sell at bid, buy at ask (entry); buy back at ask, sell at bid (exit)
        spread_bid = short_leg.bid - long_leg.ask
        spread_ask = short_leg.ask - long_leg.bid
        credit = spread_bid
        if credit <= p.min_credit:
            return None

        max_risk = width - credit
        if max_risk <= 0:
            return None

        if p.liquidity_basis == "composite":
            spread_mid = (spread_bid + spread_ask) / 2
            spread_pct = (spread_ask - spread_bid) / spread_mid if spread_mid > 0 else 1.0
        else:
            spread_pct = short_leg.spread_pct
        if spread_pct > p.max_spread_pct:
            return None

        dte = short_leg.days_to_expiry
        includes_earnings = days_until_earnings is not None and 0 <= days_until_earnings <= dte
        if includes_earnings and days_until_earnings <= p.earnings_block_days:
            return None

        roi = credit / max_risk
        if roi * 100 < p.min_roi_pct:
            return None

        pop = 1 - abs(short_leg.delta)
        distance = abs(spot_price - short_leg.strike) / spot_price
        dte_score = dte_sweet_spot_score(dte)

        raw = (
            p.weight_roi * min(roi * 100 * 4, 100)
            + p.weight_pop * pop * 100
            + p.weight_distance * min(distance * 1000, 100)
            + p.weight_dte * dte_score
            + points
        )
        if includes_earnings:
            raw -= p.earnings_penalty

        size = max_contracts(max_risk, self.scoring)

        reasons = []
        if roi > 0.20:
            reasons.append(f"{roi * 100:.0f}% ROI")
        if points > 0:
            reasons.append("High IV Premium")
        if dte_score >= 75:
            reasons.append("Theta Zone")
        if includes_earnings:
            reasons.append("Earnings inside trade")
        if size > 0:
            reasons.append(f"Max size: {size}")

        option_type = short_leg.option_type
        return SpreadCandidate(
            spread_type=SpreadType.for_legs(option_type, credit=True),
            short_leg=short_leg,
            long_leg=long_leg,
            width=width,
            net_price=credit,
            max_risk=max_risk,
            max_profit=credit,
            score=int(round(max(0.0, min(100.0, raw)))),
            roi=roi,
            pop=pop,
            expected_value=credit * pop - max_risk * (1 - pop),
            breakeven=short_leg.strike - credit if option_type == OptionType.PUT else short_leg.strike + credit,
            risk_reward=credit / max_risk,
            max_contracts=size,
            rationale=", ".join(reasons) or "Balanced Risk/Reward",
        )


@dataclass(slots=True)
class DebitSpreadBuilder:
    """
    Debit spread builder.

    Filters:
    - short leg exists at strike +/- width (same expiration)
    - conservative debit (long ask - short bid) positive and below
      width * cost ceiling
    - risk/reward at or above the floor
    - long leg bid/ask spread within the maximum

    Score = 0.40 * lambda score + 0.35 * risk/reward score
            + 0.25 * delta score + regime points (long premium side)
    """

    profile: DebitSpreadProfile = field(default_factory=DebitSpreadProfile)
    scoring: SpreadScoring = field(default_factory=SpreadScoring)
    compression: LambdaCompression = field(default_factory=LambdaCompression)
    score_center: float = 50.0
    score_multiplier: float = 12.5
    name: str = "DebitSpreadBuilder"

    def __post_init__(self):
        _validate_widths(self.profile.widths, self.profile.strike_tolerance)

    @classmethod
    def from_config(cls, config: Optional[ScoringConfig] = None) -> "DebitSpreadBuilder":
        config = config or ScoringConfig()
        return cls(
            profile=config.debit_spread,
            scoring=config.spread_scoring,
            compression=config.lambda_compression,
            score_center=config.score_scale.center,
            score_multiplier=config.score_scale.multiplier,
        )

    def build(
        self,
        contracts: Iterable[Contract],
        option_type: "OptionType | str",
        spot_price: float,
        regime: Optional[VolatilityRegime] = None,
        days_until_earnings: Optional[int] = None,
    ) -> list[SpreadCandidate]:
        """
        Build and rank debit spreads.

        ``days_until_earnings`` is accepted for interface parity with the
        credit builder; debit spreads are not earnings-guarded.
        """
        p = self.profile
        option_type = OptionType.parse(option_type)
        contracts = list(contracts)
        points = regime_points(regime, Strategy.LONG, self.scoring)

        anchors = [
            c for c in contracts
            if c.option_type == option_type
            and p.anchor_delta_min <= abs(c.delta) <= p.anchor_delta_max
        ]

        results: list[SpreadCandidate] = []
        for long_leg in anchors:
            for width in p.widths:
                offset = width if option_type == OptionType.CALL else -width
                short_leg = find_leg(
                    contracts, option_type, long_leg.expiration,
                    long_leg.strike + offset, p.strike_tolerance,
                )
                if short_leg is None:
                    continue

                gap = abs(long_leg.strike - short_leg.strike)
                candidate = self._evaluate(long_leg, short_leg, gap, spot_price, points)
                if candidate is not None:
                    results.append(candidate)

        results.sort(key=lambda c: c.score, reverse=True)
        logger.debug(
            f"Debit {option_type.value} spreads: {len(anchors)} anchors → {len(results)} candidates"
        )
        return results[: p.top_n]

    def _evaluate(
        self,
        long_leg: Contract,
        short_leg: Contract,
        width: float,
        spot_price: float,
        points: float,
    ) -> Optional[SpreadCandidate]:
        p = self.profile

        debit = long_leg.ask - short_leg.bid
        if debit <= 0:
            return None

        max_profit = width - debit
        risk_reward = max_profit / debit

        mid = long_leg.mid
        if mid <= 0:
            return None

        if debit >= width * p.cost_ceiling:
            return None
        if risk_reward < p.min_risk_reward:
            return None
        if long_leg.spread_pct > p.max_leg_spread_pct:
            return None

        leverage = abs(long_leg.delta) * spot_price / mid
        compressed = compress_lambda(leverage, self.compression)
        bonus = delta_bonus(long_leg.delta)

        lambda_score = min(compressed / self.compression.threshold * 100, 100)
        rr_score = min(risk_reward / p.risk_reward_full_score * 100, 100)
        delta_score = self.score_center + bonus * self.score_multiplier

        raw = (
            p.weight_lambda * lambda_score
            + p.weight_risk_reward * rr_score
            + p.weight_delta * delta_score
            + points
        )

        pop = max(0.0, abs(long_leg.delta) - p.pop_haircut)
        option_type = long_leg.option_type
        rationale = f"R/R {risk_reward:.1f}:1, λ={leverage:.1f}"
        if points > 0:
            rationale += ", Cheap Vol"

        return SpreadCandidate(
            spread_type=SpreadType.for_legs(option_type, credit=False),
            short_leg=short_leg,
            long_leg=long_leg,
            width=width,
            net_price=debit,
            max_risk=debit,
            max_profit=max_profit,
            score=int(round(max(0.0, min(100.0, raw)))),
            roi=max_profit / debit,
            pop=pop,
            expected_value=max_profit * pop - debit * (1 - pop),
            breakeven=long_leg.strike + debit if option_type == OptionType.CALL else long_leg.strike - debit,
            risk_reward=risk_reward,
            max_contracts=max_contracts(debit, self.scoring),
            rationale=rationale,
        )
