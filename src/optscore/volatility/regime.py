"""
Volatility Regime Classification

Combines the IV term ratio (near/far ATM IV) with an optional implied vs
realized volatility ratio into:

1. A score adjustment for single-leg and spread scoring
2. A strategy mode (DEBIT / CREDIT / NEUTRAL) for strategy selection

**Adjustment:**

Without realized vol, a sigmoid phase-transition risk factor is used:
    f(ratio) = 0.9 + 0.4 * logistic(12 * (ratio - 1.10))
    long:  (1 - f) * 5      short: (f - 1) * 5

With realized vol, the four-quadrant table applies:
    Contango + Cheap         → Value     +2.5
    Backwardation + Cheap    → Momentum  +1.0
    Contango + Expensive     → Trap      -2.0
    Backwardation + Expensive → Fear     -3.0
    otherwise                → average of two linear scores
The adjustment is negated for short (premium selling) strategies.

Usage:
    from optscore.volatility.regime import classify_regime

    regime = classify_regime(term_ratio=0.90, iv_realized_ratio=0.80, strategy="long")
    print(regime.adjustment)  # 2.5
    print(regime.zone)        # RegimeZone.VALUE
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from loguru import logger

from optscore.config.scoring_config import RegimeThresholds, ScoringConfig


class Strategy(str, Enum):
    """Premium direction of a scoring request."""

    LONG = "long"    # buy premium
    SHORT = "short"  # sell premium

    @classmethod
    def parse(cls, value: "str | Strategy") -> "Strategy":
        if isinstance(value, Strategy):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown strategy: {value!r} (expected 'long' or 'short')") from None


class RegimeMode(str, Enum):
    """Preferred spread type for the current regime."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    NEUTRAL = "NEUTRAL"


class RegimeZone(str, Enum):
    """Which branch produced the adjustment."""

    VALUE = "value"          # contango + cheap vol
    MOMENTUM = "momentum"    # backwardation + cheap vol
    TRAP = "trap"            # contango + expensive vol
    FEAR = "fear"            # backwardation + expensive vol
    BLENDED = "blended"      # no quadrant matched
    SIGMOID = "sigmoid"      # no realized vol available


ADVICE = {
    "no_data": "Insufficient data for IV ratio. Defaulting to neutral.",
    "backwardation": "Backwardation (expensive near-term IV): sell credit spreads.",
    "risk_premium": "High risk premium (IV > RV): market overestimating the move. Sell credit.",
    "contango": "Contango (cheap near-term IV): buy debit spreads.",
    "momentum": "Momentum (RV > IV): stock moving faster than priced. Buy debit.",
    "neutral": "Neutral IV: either strategy viable, compare scores.",
}


@dataclass(slots=True)
class VolatilityRegime:
    """
    Volatility regime classification.

    Attributes:
        term_ratio: Near/far ATM IV ratio used for classification
        iv_realized_ratio: Implied / realized vol (None if not supplied)
        strategy: Strategy the adjustment was computed for
        mode: Preferred spread type
        adjustment: Additive score adjustment (raw composite units)
        zone: Quadrant or fallback that produced the adjustment
        advice: Human-readable explanation of the mode
    """

    term_ratio: float
    iv_realized_ratio: Optional[float]
    strategy: Strategy
    mode: RegimeMode
    adjustment: float
    zone: RegimeZone
    advice: str

    def for_strategy(self, strategy: "str | Strategy") -> "VolatilityRegime":
        """Same market regime with the adjustment computed for another strategy."""
        strategy = Strategy.parse(strategy)
        if strategy == self.strategy:
            return self
        return VolatilityRegime(
            term_ratio=self.term_ratio,
            iv_realized_ratio=self.iv_realized_ratio,
            strategy=strategy,
            mode=self.mode,
            adjustment=-self.adjustment,
            zone=self.zone,
            advice=self.advice,
        )

    def __str__(self) -> str:
        ivrv = f"{self.iv_realized_ratio:.2f}" if self.iv_realized_ratio is not None else "n/a"
        return (
            f"{self.mode.value} ({self.zone.value}) term={self.term_ratio:.3f} "
            f"iv/rv={ivrv} adj={self.adjustment:+.2f}"
        )

    def to_dict(self) -> dict:
        return {
            "term_ratio": self.term_ratio,
            "iv_realized_ratio": self.iv_realized_ratio,
            "strategy": self.strategy.value,
            "mode": self.mode.value,
            "adjustment": self.adjustment,
            "zone": self.zone.value,
            "advice": self.advice,
        }


def iv_risk_factor(term_ratio: float, thresholds: Optional[RegimeThresholds] = None) -> float:
    """
    Sigmoid phase-transition risk factor.

    Returns ~0.9 in calm contango, ~1.0 around ratio 1.05 and approaches
    1.3 in backwardation above the 1.10 panic point.
    """
    t = thresholds or RegimeThresholds()
    logistic = 1 / (1 + math.exp(-t.sigmoid_k * (term_ratio - t.sigmoid_x0)))
    return t.factor_floor + t.factor_span * logistic


def _quadrant(term_ratio: float, iv_rv: float, t: RegimeThresholds) -> tuple[RegimeZone, float]:
    is_contango = term_ratio < t.contango_below
    is_backwardation = term_ratio > t.backwardation_above
    is_cheap = iv_rv < t.cheap_below
    is_expensive = iv_rv > t.expensive_above

    if is_contango and is_cheap:
        return RegimeZone.VALUE, t.value_zone
    if is_backwardation and is_cheap:
        return RegimeZone.MOMENTUM, t.momentum_zone
    if is_contango and is_expensive:
        return RegimeZone.TRAP, t.trap_zone
    if is_backwardation and is_expensive:
        return RegimeZone.FEAR, t.fear_zone

    scale = t.adjustment_scale
    blended = ((1 - term_ratio) * scale + (1 - iv_rv) * scale) / 2
    return RegimeZone.BLENDED, blended


def regime_mode(
    term_ratio: Optional[float],
    iv_realized_ratio: Optional[float],
    thresholds: Optional[RegimeThresholds] = None,
) -> tuple[RegimeMode, str]:
    """
    Preferred spread type and its advice.

    Term structure takes precedence over the IV/RV ratio; a missing term
    ratio always yields NEUTRAL.
    """
    t = thresholds or RegimeThresholds()

    if term_ratio is None:
        return RegimeMode.NEUTRAL, ADVICE["no_data"]
    if term_ratio > t.credit_term_above:
        return RegimeMode.CREDIT, ADVICE["backwardation"]
    if iv_realized_ratio is not None and iv_realized_ratio > t.credit_iv_rv_above:
        return RegimeMode.CREDIT, ADVICE["risk_premium"]
    if term_ratio < t.debit_term_below:
        return RegimeMode.DEBIT, ADVICE["contango"]
    if iv_realized_ratio is not None and iv_realized_ratio < t.debit_iv_rv_below:
        return RegimeMode.DEBIT, ADVICE["momentum"]
    return RegimeMode.NEUTRAL, ADVICE["neutral"]


def classify_regime(
    term_ratio: Optional[float],
    iv_realized_ratio: Optional[float] = None,
    strategy: "str | Strategy" = Strategy.LONG,
    config: Optional[ScoringConfig] = None,
) -> VolatilityRegime:
    """
    Classify the volatility regime.

    Args:
        term_ratio: Near/far ATM IV ratio (None when the term structure is
            unavailable; scored as a neutral 1.0)
        iv_realized_ratio: Implied / realized volatility, if known
        strategy: "long" or "short"
        config: Scoring configuration (defaults used if None)

    Returns:
        VolatilityRegime with adjustment, zone, mode and advice
    """
    strategy = Strategy.parse(strategy)
    t = (config or ScoringConfig()).regime

    mode, advice = regime_mode(term_ratio, iv_realized_ratio, t)
    ratio = 1.0 if term_ratio is None else term_ratio

    if iv_realized_ratio is None:
        factor = iv_risk_factor(ratio, t)
        zone = RegimeZone.SIGMOID
        long_adjustment = (1 - factor) * t.adjustment_scale
    else:
        zone, long_adjustment = _quadrant(ratio, iv_realized_ratio, t)

    adjustment = long_adjustment if strategy == Strategy.LONG else -long_adjustment

    logger.debug(
        f"Regime: term={ratio:.3f} iv/rv={iv_realized_ratio} strategy={strategy.value} "
        f"→ {zone.value} adj={adjustment:+.3f} mode={mode.value}"
    )

    return VolatilityRegime(
        term_ratio=ratio,
        iv_realized_ratio=iv_realized_ratio,
        strategy=strategy,
        mode=mode,
        adjustment=adjustment,
        zone=zone,
        advice=advice,
    )
