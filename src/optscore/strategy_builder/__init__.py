"""
Spread construction and strategy recommendation.
"""

from optscore.strategy_builder.models import STRIKE_TOLERANCE, SpreadCandidate, SpreadType
from optscore.strategy_builder.recommender import (
    Direction,
    Recommendation,
    RecommendedStrategy,
    recommend_strategies,
    select_strategy,
    strategy_chain,
)
from optscore.strategy_builder.spread_builders import (
    CreditSpreadBuilder,
    DebitSpreadBuilder,
    dte_sweet_spot_score,
    max_contracts,
)

__all__ = [
    "STRIKE_TOLERANCE",
    "CreditSpreadBuilder",
    "DebitSpreadBuilder",
    "Direction",
    "Recommendation",
    "RecommendedStrategy",
    "SpreadCandidate",
    "SpreadType",
    "dte_sweet_spot_score",
    "max_contracts",
    "recommend_strategies",
    "select_strategy",
    "strategy_chain",
]
