"""
Z-Score Normalization

Two modes:
- population: relative to the other candidates of the same scan (ranking
  within one list)
- fixed: relative to reference baselines (scores comparable across scans
  and tickers, e.g. portfolio views)
"""

from enum import Enum
from typing import Sequence

import numpy as np

from optscore.config.scoring_config import Baseline


class NormalizationMode(str, Enum):
    POPULATION = "population"
    FIXED = "fixed"


def population_z_scores(values: Sequence[float]) -> np.ndarray:
    """
    Z-scores against the population mean and (population) std.

    A std of 0 (or fewer than two values) is replaced by 1, so identical
    values all score 0.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return arr
    std = float(arr.std()) if arr.size >= 2 else 0.0
    if std == 0:
        std = 1.0
    return (arr - arr.mean()) / std


def fixed_z_scores(values: Sequence[float], baseline: Baseline) -> np.ndarray:
    """Z-scores against a fixed mean/std."""
    arr = np.asarray(values, dtype=float)
    return (arr - baseline.mean) / baseline.std


def z_scores(values: Sequence[float], mode: NormalizationMode, baseline: Baseline) -> np.ndarray:
    if NormalizationMode(mode) == NormalizationMode.FIXED:
        return fixed_z_scores(values, baseline)
    return population_z_scores(values)
