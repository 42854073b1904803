"""
Volatility analytics: ATM IV, term structure, regime and realized vol.
"""

from optscore.volatility.atm_iv import extract_atm_iv
from optscore.volatility.realized import iv_realized_ratio, realized_volatility
from optscore.volatility.regime import (
    RegimeMode,
    RegimeZone,
    Strategy,
    VolatilityRegime,
    classify_regime,
    iv_risk_factor,
    regime_mode,
)
from optscore.volatility.term_structure import (
    TermStatus,
    TermStructureResult,
    get_term_ratio,
    interpolate_iv,
    term_structure_curve,
)

__all__ = [
    "RegimeMode",
    "RegimeZone",
    "Strategy",
    "TermStatus",
    "TermStructureResult",
    "VolatilityRegime",
    "classify_regime",
    "extract_atm_iv",
    "get_term_ratio",
    "interpolate_iv",
    "iv_realized_ratio",
    "iv_risk_factor",
    "realized_volatility",
    "regime_mode",
    "term_structure_curve",
]
