"""
Contract scoring: raw metrics, normalization and composite scores.
"""

from optscore.scoring.composite import (
    ScoredContract,
    long_raw_score,
    score_contracts,
    score_single_position,
    to_score,
)
from optscore.scoring.metrics import (
    LongMetrics,
    ShortMetrics,
    compress_lambda,
    delta_bonus,
    long_metrics,
    short_metrics,
    theta_pain,
)
from optscore.scoring.normalization import (
    NormalizationMode,
    fixed_z_scores,
    population_z_scores,
    z_scores,
)

__all__ = [
    "LongMetrics",
    "NormalizationMode",
    "ScoredContract",
    "ShortMetrics",
    "compress_lambda",
    "delta_bonus",
    "fixed_z_scores",
    "long_metrics",
    "long_raw_score",
    "population_z_scores",
    "score_contracts",
    "score_single_position",
    "short_metrics",
    "theta_pain",
    "to_score",
    "z_scores",
]
