"""
Spread Data Models

Uses dataclasses with slots=True (internal data, validated on entry).

Key patterns:
- __post_init__ validation: a candidate with mismatched legs or an
  impossible width cannot be constructed
- Enum types as str subclasses for JSON output
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from optscore.models.chain import Contract, OptionType

# Legs are matched to their target strike within this tolerance
STRIKE_TOLERANCE = 0.1


class SpreadType(str, Enum):
    """Vertical spread types."""

    CREDIT_PUT = "Credit Put Spread"
    CREDIT_CALL = "Credit Call Spread"
    DEBIT_CALL = "Debit Call Spread"
    DEBIT_PUT = "Debit Put Spread"

    @property
    def is_credit(self) -> bool:
        return self in (SpreadType.CREDIT_PUT, SpreadType.CREDIT_CALL)

    @classmethod
    def for_legs(cls, option_type: OptionType, credit: bool) -> "SpreadType":
        if credit:
            return cls.CREDIT_PUT if option_type == OptionType.PUT else cls.CREDIT_CALL
        return cls.DEBIT_CALL if option_type == OptionType.CALL else cls.DEBIT_PUT


@dataclass(slots=True)
class SpreadCandidate:
    """
    Two-leg vertical spread candidate.

    Prices are conservative: the sold leg fills at its bid and the bought
    leg at its ask.

    Attributes:
        spread_type: Credit/debit and put/call
        short_leg: Sold contract
        long_leg: Bought contract
        width: Distance between strikes
        net_price: Credit received (credit spreads) or debit paid (debit spreads)
        max_risk: Maximum loss per share
        max_profit: Maximum gain per share
        score: Quality score 0-100
        roi: Credit / max risk (credit spreads), max profit / debit (debit spreads)
        pop: Probability of profit estimate (0-1)
        expected_value: pop * max_profit - (1 - pop) * max_risk
        breakeven: Underlying price at expiration where P&L is zero
        risk_reward: Max profit / max risk (debit spreads only)
        max_contracts: Position size under the account risk limit
        rationale: Short explanation of the score
    """

    spread_type: SpreadType
    short_leg: Contract
    long_leg: Contract
    width: float
    net_price: float
    max_risk: float
    max_profit: float
    score: int
    roi: float = 0.0
    pop: float = 0.0
    expected_value: float = 0.0
    breakeven: float = 0.0
    risk_reward: Optional[float] = None
    max_contracts: int = 0
    rationale: str = ""

    def __post_init__(self):
        if self.width <= 0:
            raise ValueError(f"Width must be positive, got {self.width}")

        if self.short_leg.option_type != self.long_leg.option_type:
            raise ValueError(
                f"Spread legs must have same option type, got "
                f"{self.short_leg.option_type.value} and {self.long_leg.option_type.value}"
            )

        if self.short_leg.expiration != self.long_leg.expiration:
            raise ValueError(
                f"Spread legs must have same expiration, got "
                f"{self.short_leg.expiration} and {self.long_leg.expiration}"
            )

        strike_gap = abs(self.short_leg.strike - self.long_leg.strike)
        if abs(strike_gap - self.width) >= STRIKE_TOLERANCE:
            raise ValueError(f"Width {self.width} does not match strike distance {strike_gap}")

        if self.max_risk <= 0:
            raise ValueError(f"Max risk must be positive, got {self.max_risk}")

        if not (0 <= self.score <= 100):
            raise ValueError(f"Score must be between 0 and 100, got {self.score}")

    @property
    def option_type(self) -> OptionType:
        return self.short_leg.option_type

    @property
    def expiration(self) -> date:
        return self.short_leg.expiration

    @property
    def days_to_expiry(self) -> int:
        return self.short_leg.days_to_expiry

    @property
    def is_credit(self) -> bool:
        return self.spread_type.is_credit

    def __repr__(self) -> str:
        return (
            f"SpreadCandidate({self.spread_type.value} "
            f"-{self.short_leg.strike}/+{self.long_leg.strike} {self.expiration} "
            f"net={self.net_price:.2f} risk={self.max_risk:.2f} score={self.score})"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary (rounded for display)."""
        return {
            "type": self.spread_type.value,
            "expiration": self.expiration.isoformat(),
            "dte": self.days_to_expiry,
            "short_leg": {"strike": self.short_leg.strike, "price": self.short_leg.bid, "delta": self.short_leg.delta},
            "long_leg": {"strike": self.long_leg.strike, "price": self.long_leg.ask, "delta": self.long_leg.delta},
            "width": self.width,
            "net_price": round(self.net_price, 2),
            "max_risk": round(self.max_risk, 2),
            "max_profit": round(self.max_profit, 2),
            "roi_pct": round(self.roi * 100, 1),
            "pop_pct": round(self.pop * 100, 1),
            "expected_value": round(self.expected_value, 2),
            "breakeven": round(self.breakeven, 2),
            "risk_reward": round(self.risk_reward, 2) if self.risk_reward is not None else None,
            "score": self.score,
            "max_contracts": self.max_contracts,
            "rationale": self.rationale,
        }
