"""
optscore - options chain quality scoring.

Pipeline:
    raw records → normalize_chain → Chain
    Chain → get_term_ratio → classify_regime → VolatilityRegime
    Chain + regime → score_contracts / CreditSpreadBuilder / DebitSpreadBuilder

Usage:
    from optscore import normalize_chain, scan_chain

    chain = normalize_chain(records, spot_price=455.0, today=date(2026, 1, 20), symbol="SPY")
    result = scan_chain(chain, "long")
"""

from optscore.config.scoring_config import ScoringConfig
from optscore.core.normalizer import normalize_chain
from optscore.exceptions import ChainNormalizationError, ConfigurationError
from optscore.models.chain import Chain, Contract, OptionType
from optscore.scanner import ScanResult, scan_chain
from optscore.scoring.composite import ScoredContract, score_contracts, score_single_position
from optscore.strategy_builder.models import SpreadCandidate, SpreadType
from optscore.strategy_builder.recommender import recommend_strategies
from optscore.strategy_builder.spread_builders import CreditSpreadBuilder, DebitSpreadBuilder
from optscore.volatility.atm_iv import extract_atm_iv
from optscore.volatility.regime import RegimeMode, Strategy, VolatilityRegime, classify_regime
from optscore.volatility.term_structure import TermStructureResult, get_term_ratio, interpolate_iv

__version__ = "0.1.0"

__all__ = [
    "Chain",
    "ChainNormalizationError",
    "ConfigurationError",
    "Contract",
    "CreditSpreadBuilder",
    "DebitSpreadBuilder",
    "OptionType",
    "RegimeMode",
    "ScanResult",
    "ScoredContract",
    "ScoringConfig",
    "SpreadCandidate",
    "SpreadType",
    "Strategy",
    "TermStructureResult",
    "VolatilityRegime",
    "classify_regime",
    "extract_atm_iv",
    "get_term_ratio",
    "interpolate_iv",
    "normalize_chain",
    "recommend_strategies",
    "scan_chain",
    "score_contracts",
    "score_single_position",
]
