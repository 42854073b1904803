"""
Scoring configuration.

Usage:
    from optscore.config import ScoringConfig, load_config

    config = load_config("config/optscore.yaml", profile="relaxed")
"""

from optscore.config.loader import load_config, merge_config_with_env, save_config, validate_config
from optscore.config.scoring_config import (
    PROFILES,
    Baseline,
    CreditSpreadProfile,
    DebitSpreadProfile,
    LambdaCompression,
    LongBaselines,
    LongWeights,
    RecommenderConfig,
    RegimeThresholds,
    ScanFilters,
    ScoreScale,
    ScoringConfig,
    ShortBaselines,
    ShortWeights,
    SpreadScoring,
    TermStructureConfig,
    ThetaPainConfig,
)

__all__ = [
    "PROFILES",
    "Baseline",
    "CreditSpreadProfile",
    "DebitSpreadProfile",
    "LambdaCompression",
    "LongBaselines",
    "LongWeights",
    "RecommenderConfig",
    "RegimeThresholds",
    "ScanFilters",
    "ScoreScale",
    "ScoringConfig",
    "ShortBaselines",
    "ShortWeights",
    "SpreadScoring",
    "TermStructureConfig",
    "ThetaPainConfig",
    "load_config",
    "merge_config_with_env",
    "save_config",
    "validate_config",
]
