"""
Composite Contract Scoring

Combines normalized metrics into a 0-100 quality score.

Long (buyer):
    raw = 0.40*z(compressed lambda) + 0.30*z(gamma eff) - 0.15*z(theta burn)
          + 0.15*delta_bonus + regime_adjustment - theta_pain * pain_multiplier

Short (seller):
    raw = 0.50*z(edge) + 0.30*z(pop) - 0.20*z(spread pct) + regime_adjustment

score = round(clamp(50 + raw * 12.5, 0, 100)); a contract whose bid/ask
spread exceeds 15% of mid scores 0 regardless of the other factors.

Usage:
    from optscore.scoring.composite import score_contracts

    ranked = score_contracts(chain.contracts, chain.spot_price, "long", regime.adjustment)
    best = ranked[0]
    print(best.score, best.rationale)  # 72 "λ=14.2 leverage, Δ=0.45"
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from loguru import logger

from optscore.config.scoring_config import LongWeights, ScoringConfig
from optscore.models.chain import Contract
from optscore.scoring.metrics import (
    delta_bonus,
    long_metrics,
    short_metrics,
    theta_pain,
)
from optscore.scoring.normalization import NormalizationMode, z_scores
from optscore.volatility.regime import Strategy, classify_regime


@dataclass(slots=True)
class ScoredContract:
    """
    A contract with its metrics and final score.

    Attributes:
        contract: The scored contract
        strategy: Strategy the score applies to
        raw_metrics: Metric values before normalization
        z_scores: Normalized metric values
        raw_score: Composite before scaling to 0-100
        score: Final score 0-100
        rationale: Short explanation of the dominant factors
    """

    contract: Contract
    strategy: Strategy
    raw_metrics: dict[str, float] = field(default_factory=dict)
    z_scores: dict[str, float] = field(default_factory=dict)
    raw_score: float = 0.0
    score: int = 0
    rationale: str = ""

    def to_dict(self) -> dict:
        c = self.contract
        return {
            "symbol": c.symbol,
            "strike": c.strike,
            "type": c.option_type.value,
            "expiration": c.expiration.isoformat(),
            "dte": c.days_to_expiry,
            "price": round(c.mid, 2),
            "score": self.score,
            "strategy": self.strategy.value,
            "metrics": {k: round(v, 4) for k, v in self.raw_metrics.items()},
            "greeks": {
                "delta": c.delta,
                "gamma": c.gamma,
                "theta": c.theta,
                "vega": c.vega,
                "iv": c.implied_vol,
            },
            "liquidity": {
                "volume": c.volume,
                "open_interest": c.open_interest,
                "bid": c.bid,
                "ask": c.ask,
            },
            "rationale": self.rationale,
        }


def to_score(raw: float, config: Optional[ScoringConfig] = None) -> int:
    """Map a raw composite onto 0-100."""
    if not math.isfinite(raw):
        raise ValueError(f"Raw score must be finite, got {raw}")
    scale = (config or ScoringConfig()).score_scale
    scaled = scale.center + raw * scale.multiplier
    return int(round(max(0.0, min(100.0, scaled))))


def long_raw_score(
    z_lambda: float,
    z_gamma: float,
    z_theta: float,
    bonus: float,
    regime_adjustment: float,
    pain: float,
    weights: LongWeights,
) -> float:
    return (
        weights.lambda_ * z_lambda
        + weights.gamma_efficiency * z_gamma
        - weights.theta_burn * z_theta
        + weights.delta_bonus * bonus
        + regime_adjustment
        - pain * weights.pain_multiplier
    )


def _is_deal_breaker(spread_pct: float, config: ScoringConfig) -> bool:
    return spread_pct > config.score_scale.deal_breaker_spread_pct


def score_contracts(
    contracts: Iterable[Contract],
    spot_price: float,
    strategy: "str | Strategy",
    regime_adjustment: float = 0.0,
    config: Optional[ScoringConfig] = None,
    normalization: "str | NormalizationMode" = NormalizationMode.POPULATION,
    day_trade: bool = False,
) -> list[ScoredContract]:
    """
    Score and rank contracts for one strategy.

    Contracts without a positive mid are excluded. Ties keep input order.

    Args:
        contracts: Candidate contracts (already filtered)
        spot_price: Underlying price
        strategy: "long" or "short"
        regime_adjustment: Additive adjustment for this strategy
        config: Scoring configuration (defaults if None)
        normalization: "population" (within this list) or "fixed" (baselines)
        day_trade: Use the day-trade long weights

    Returns:
        ScoredContract list sorted by score descending
    """
    config = config or ScoringConfig()
    strategy = Strategy.parse(strategy)
    mode = NormalizationMode(normalization)

    if strategy == Strategy.LONG:
        scored = _score_long(contracts, spot_price, regime_adjustment, config, mode, day_trade)
    else:
        scored = _score_short(contracts, regime_adjustment, config, mode)

    scored.sort(key=lambda s: s.score, reverse=True)
    logger.debug(
        f"Scored {len(scored)} contracts ({strategy.value}, {mode.value}, adj={regime_adjustment:+.2f})"
    )
    return scored


def _score_long(
    contracts: Iterable[Contract],
    spot_price: float,
    regime_adjustment: float,
    config: ScoringConfig,
    mode: NormalizationMode,
    day_trade: bool,
) -> list[ScoredContract]:
    pairs = []
    for contract in contracts:
        metrics = long_metrics(contract, spot_price, config.lambda_compression)
        if metrics is not None:
            pairs.append((contract, metrics))
    if not pairs:
        return []

    baselines = config.long_baselines
    weights = config.day_trade_weights if day_trade else config.long_weights
    z_lambda = z_scores([m.compressed_lambda for _, m in pairs], mode, baselines.lambda_)
    z_gamma = z_scores([m.gamma_efficiency for _, m in pairs], mode, baselines.gamma_efficiency)
    z_theta = z_scores([m.theta_burn for _, m in pairs], mode, baselines.theta_burn)

    results = []
    for i, (contract, metrics) in enumerate(pairs):
        bonus = delta_bonus(contract.delta)
        pain = theta_pain(metrics.theta_burn, config.theta_pain.scan_cap, config.theta_pain)
        raw = long_raw_score(
            float(z_lambda[i]), float(z_gamma[i]), float(z_theta[i]),
            bonus, regime_adjustment, pain, weights,
        )
        score = 0 if _is_deal_breaker(metrics.spread_pct, config) else to_score(raw, config)

        raw_metrics = metrics.as_dict()
        raw_metrics.update(delta_bonus=bonus, theta_pain=pain)
        results.append(
            ScoredContract(
                contract=contract,
                strategy=Strategy.LONG,
                raw_metrics=raw_metrics,
                z_scores={
                    "lambda": float(z_lambda[i]),
                    "gamma_efficiency": float(z_gamma[i]),
                    "theta_burn": float(z_theta[i]),
                },
                raw_score=raw,
                score=score,
                rationale=_long_rationale(contract, metrics.lambda_, regime_adjustment, metrics.spread_pct, config),
            )
        )
    return results


def _score_short(
    contracts: Iterable[Contract],
    regime_adjustment: float,
    config: ScoringConfig,
    mode: NormalizationMode,
) -> list[ScoredContract]:
    pairs = []
    for contract in contracts:
        metrics = short_metrics(contract)
        if metrics is not None:
            pairs.append((contract, metrics))
    if not pairs:
        return []

    baselines = config.short_baselines
    weights = config.short_weights
    z_edge = z_scores([m.edge for _, m in pairs], mode, baselines.edge)
    z_pop = z_scores([m.pop for _, m in pairs], mode, baselines.pop)
    z_spread = z_scores([m.spread_pct for _, m in pairs], mode, baselines.spread)

    results = []
    for i, (contract, metrics) in enumerate(pairs):
        raw = (
            weights.edge * float(z_edge[i])
            + weights.pop * float(z_pop[i])
            - weights.spread * float(z_spread[i])
            + regime_adjustment
        )
        score = 0 if _is_deal_breaker(metrics.spread_pct, config) else to_score(raw, config)

        rationale = f"POP {metrics.pop:.0%}, edge ${metrics.edge:.2f}"
        if regime_adjustment > 0:
            rationale += ", Rich Vol"
        if _is_deal_breaker(metrics.spread_pct, config):
            rationale += f", illiquid ({metrics.spread_pct:.0%} spread)"

        results.append(
            ScoredContract(
                contract=contract,
                strategy=Strategy.SHORT,
                raw_metrics=metrics.as_dict(),
                z_scores={
                    "edge": float(z_edge[i]),
                    "pop": float(z_pop[i]),
                    "spread_pct": float(z_spread[i]),
                },
                raw_score=raw,
                score=score,
                rationale=rationale,
            )
        )
    return results


def _long_rationale(
    contract: Contract,
    leverage: float,
    regime_adjustment: float,
    spread_pct: float,
    config: ScoringConfig,
) -> str:
    rationale = f"λ={leverage:.1f} leverage, Δ={abs(contract.delta):.2f}"
    if regime_adjustment > 0:
        rationale += ", Cheap Vol"
    if _is_deal_breaker(spread_pct, config):
        rationale += f", illiquid ({spread_pct:.0%} spread)"
    return rationale


def score_single_position(
    contract: Contract,
    spot_price: float,
    term_ratio: float = 1.0,
    config: Optional[ScoringConfig] = None,
    iv_realized_ratio: Optional[float] = None,
) -> int:
    """
    Score one held long position without a comparison pool.

    Uses fixed baselines so scores are comparable across positions and
    tickers, and the single-position theta pain cap. Positions at or below
    the day-trade DTE switch to the day-trade weights.

    Returns:
        Score 0-100 (0 when the contract has no positive mid)
    """
    config = config or ScoringConfig()
    metrics = long_metrics(contract, spot_price, config.lambda_compression)
    if metrics is None:
        return 0
    if _is_deal_breaker(metrics.spread_pct, config):
        return 0

    baselines = config.long_baselines
    z_lambda = (metrics.compressed_lambda - baselines.lambda_.mean) / baselines.lambda_.std
    z_gamma = (metrics.gamma_efficiency - baselines.gamma_efficiency.mean) / baselines.gamma_efficiency.std
    z_theta = (metrics.theta_burn - baselines.theta_burn.mean) / baselines.theta_burn.std

    weights = config.long_weights
    if contract.days_to_expiry <= config.day_trade_max_dte:
        weights = config.day_trade_weights

    regime = classify_regime(term_ratio, iv_realized_ratio, Strategy.LONG, config)
    pain = theta_pain(metrics.theta_burn, config.theta_pain.position_cap, config.theta_pain)

    raw = long_raw_score(
        z_lambda, z_gamma, z_theta, delta_bonus(contract.delta),
        regime.adjustment, pain, weights,
    )
    return to_score(raw, config)
