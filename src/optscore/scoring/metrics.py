"""
Raw Per-Contract Metrics

Long (premium buyer) metrics:
- lambda: |delta| * spot / mid (true leverage)
- gamma_efficiency: gamma / mid (convexity per dollar)
- theta_burn: |theta| / mid (daily decay rate)

Short (premium seller) metrics:
- pop: 1 - |delta| (probability of profit proxy)
- edge: pop * mid (expected seller revenue)
- spread_pct: (ask - bid) / mid

Plus the shaping curves applied on top of them: lambda compression, the
delta bonus and the theta pain penalty.
"""

from dataclasses import asdict, dataclass
from typing import Optional

from optscore.config.scoring_config import LambdaCompression, ThetaPainConfig
from optscore.models.chain import Contract


@dataclass(frozen=True, slots=True)
class LongMetrics:
    lambda_: float
    compressed_lambda: float
    gamma_efficiency: float
    theta_burn: float
    spread_pct: float

    def as_dict(self) -> dict[str, float]:
        data = asdict(self)
        data["lambda"] = data.pop("lambda_")
        return data


@dataclass(frozen=True, slots=True)
class ShortMetrics:
    pop: float
    edge: float
    spread_pct: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def compress_lambda(value: float, settings: Optional[LambdaCompression] = None) -> float:
    """Soft-cap leverage: linear up to the threshold, decayed beyond it."""
    s = settings or LambdaCompression()
    if value <= s.threshold:
        return value
    return s.threshold + (value - s.threshold) * s.decay


def _lerp(x: float, x1: float, x2: float, y1: float, y2: float) -> float:
    return y1 + (y2 - y1) * ((x - x1) / (x2 - x1))


def delta_bonus(delta: float) -> float:
    """
    Reward near-the-money exposure, penalize lottery tickets.

    |delta| < 0.15       → -2.0
    0.15 - 0.30          → -2.0 .. -0.5
    0.30 - 0.50          → -0.5 .. +1.0
    0.50 - 0.70          → +1.0 .. +0.5
    0.70 - 1.00          → +0.5 .. 0
    above 1.00           → 0
    """
    d = abs(delta)
    if d < 0.15:
        return -2.0
    if d < 0.30:
        return _lerp(d, 0.15, 0.30, -2.0, -0.5)
    if d < 0.50:
        return _lerp(d, 0.30, 0.50, -0.5, 1.0)
    if d < 0.70:
        return _lerp(d, 0.50, 0.70, 1.0, 0.5)
    if d <= 1.0:
        return _lerp(d, 0.70, 1.0, 0.5, 0.0)
    return 0.0


def theta_pain(
    theta_burn: float,
    cap: Optional[float] = None,
    settings: Optional[ThetaPainConfig] = None,
) -> float:
    """
    Quadratic penalty for decay above the safe zone (0.5% of premium/day).

    Examples (scan cap 10):
        0.003 → 0
        0.010 → 0.125
        0.030 → 3.125
        0.060 → 10 (capped)

    Args:
        theta_burn: |theta| / mid
        cap: Maximum penalty (defaults to the scan cap)
        settings: Pain curve settings
    """
    s = settings or ThetaPainConfig()
    if theta_burn <= s.safe_zone:
        return 0.0
    limit = s.scan_cap if cap is None else cap
    penalty = ((theta_burn - s.safe_zone) * s.scale) ** 2 * s.coefficient
    return min(penalty, limit)


def long_metrics(
    contract: Contract,
    spot_price: float,
    compression: Optional[LambdaCompression] = None,
) -> Optional[LongMetrics]:
    """Buyer metrics at mid, or None when the contract has no positive mid."""
    mid = contract.mid
    if mid <= 0:
        return None
    leverage = abs(contract.delta) * spot_price / mid
    return LongMetrics(
        lambda_=leverage,
        compressed_lambda=compress_lambda(leverage, compression),
        gamma_efficiency=contract.gamma / mid,
        theta_burn=abs(contract.theta) / mid,
        spread_pct=contract.spread_pct,
    )


def short_metrics(contract: Contract) -> Optional[ShortMetrics]:
    """Seller metrics at mid, or None when the contract has no positive mid."""
    mid = contract.mid
    if mid <= 0:
        return None
    pop = 1 - abs(contract.delta)
    return ShortMetrics(pop=pop, edge=pop * mid, spread_pct=contract.spread_pct)
