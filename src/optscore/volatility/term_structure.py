"""
IV Term Structure

Estimates ATM implied volatility at arbitrary tenors (30 and 90 days by
default) from the expirations present in a chain, and derives the term
ratio used by the regime classifier.

Interpolation is linear between the nearest bracketing expirations. There
is no extrapolation: a tenor outside the listed expirations has no IV.

Usage:
    from optscore.volatility.term_structure import get_term_ratio

    result = get_term_ratio(chain, chain.spot_price)
    print(result.ratio, result.status)  # 0.93 TermStatus.CONTANGO
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from loguru import logger

from optscore.config.scoring_config import ScoringConfig, TermStructureConfig
from optscore.models.chain import Chain
from optscore.volatility.atm_iv import extract_atm_iv


class TermStatus(str, Enum):
    """Shape of the IV term structure."""

    CONTANGO = "contango"            # near IV below far IV (normal)
    NEUTRAL = "neutral"
    BACKWARDATION = "backwardation"  # near IV above far IV (stress)


@dataclass(slots=True)
class TermStructureResult:
    """
    Term ratio between the near and far tenor.

    Attributes:
        iv30: Interpolated ATM IV at the near tenor (None if unavailable)
        iv90: Interpolated ATM IV at the far tenor (None if unavailable)
        ratio: iv30 / iv90, or 1.0 when unavailable or an outlier
        status: Contango / neutral / backwardation
        is_outlier: True when the raw ratio was outside the sanity bounds
        raw_ratio: Ratio before the outlier reset (None if unavailable)
    """

    iv30: Optional[float]
    iv90: Optional[float]
    ratio: float
    status: TermStatus
    is_outlier: bool = False
    raw_ratio: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.raw_ratio is not None

    def to_dict(self) -> dict:
        return {
            "iv30": self.iv30,
            "iv90": self.iv90,
            "ratio": self.ratio,
            "status": self.status.value,
            "is_outlier": self.is_outlier,
            "raw_ratio": self.raw_ratio,
        }


def interpolate_iv(chain: Chain, target_dte: int, spot_price: float) -> Optional[float]:
    """
    ATM IV at ``target_dte`` days.

    An exact expiration match uses that expiration's ATM IV directly.
    Otherwise the largest expiration below and the smallest above the target
    are interpolated linearly.

    Returns:
        IV as a decimal, or None if a bracket is missing or has no ATM IV
    """
    dtes = chain.dtes()

    if target_dte in dtes:
        return extract_atm_iv(chain.at_dte(target_dte), spot_price)

    near = max((d for d in dtes if d < target_dte), default=None)
    far = min((d for d in dtes if d > target_dte), default=None)
    if near is None or far is None:
        logger.debug(f"No DTE bracket for {target_dte}d in {chain.symbol or 'chain'} (dtes={dtes})")
        return None

    near_iv = extract_atm_iv(chain.at_dte(near), spot_price)
    far_iv = extract_atm_iv(chain.at_dte(far), spot_price)
    if near_iv is None or far_iv is None:
        return None

    weight = (target_dte - near) / (far - near)
    return near_iv + weight * (far_iv - near_iv)


def get_term_ratio(
    chain: Chain,
    spot_price: float,
    config: Optional[ScoringConfig] = None,
) -> TermStructureResult:
    """
    Compute the near/far IV term ratio.

    Missing data yields a neutral ratio of 1.0. A ratio outside the
    configured sanity bounds (default [0.5, 2.0]) is treated as bad data:
    it is reset to 1.0 and flagged.
    """
    settings: TermStructureConfig = (config or ScoringConfig()).term_structure

    iv_near = interpolate_iv(chain, settings.near_tenor, spot_price)
    iv_far = interpolate_iv(chain, settings.far_tenor, spot_price)

    raw_ratio = None
    ratio = 1.0
    is_outlier = False

    if iv_near is not None and iv_far is not None and iv_far > 0:
        raw_ratio = iv_near / iv_far
        if raw_ratio < settings.min_ratio or raw_ratio > settings.max_ratio:
            logger.warning(
                f"Term ratio outlier for {chain.symbol or 'chain'}: {raw_ratio:.3f} "
                f"outside [{settings.min_ratio}, {settings.max_ratio}], using 1.0"
            )
            is_outlier = True
        else:
            ratio = raw_ratio

    if ratio < settings.contango_below:
        status = TermStatus.CONTANGO
    elif ratio > settings.backwardation_above:
        status = TermStatus.BACKWARDATION
    else:
        status = TermStatus.NEUTRAL

    return TermStructureResult(
        iv30=iv_near,
        iv90=iv_far,
        ratio=ratio,
        status=status,
        is_outlier=is_outlier,
        raw_ratio=raw_ratio,
    )


def term_structure_curve(chain: Chain, spot_price: float) -> list[tuple[int, Optional[float]]]:
    """ATM IV per listed expiration as (dte, iv) pairs, ascending by dte."""
    return [(dte, extract_atm_iv(chain.at_dte(dte), spot_price)) for dte in chain.dtes()]
