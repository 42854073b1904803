"""
Chain Data Models

Internal representation of one options-chain snapshot.

Key patterns:
- dataclass(slots=True) for internal data (validated on entry by the
  pydantic quote models)
- Contracts are frozen: a snapshot never changes during a scan
- __post_init__ validation for data integrity
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Iterator

import polars as pl


class OptionType(str, Enum):
    """Option type enum (CALL or PUT)."""

    CALL = "Call"
    PUT = "Put"

    @classmethod
    def parse(cls, value: "str | OptionType") -> "OptionType":
        """
        Map an explicit type flag to an OptionType.

        Accepts C/P, Call/Put and CALL/PUT in any case. Anything else is
        rejected rather than guessed.

        Raises:
            ValueError: If the flag is not a recognised option type
        """
        if isinstance(value, OptionType):
            return value

        flag = str(value).strip().upper()
        if flag in ("C", "CALL"):
            return cls.CALL
        if flag in ("P", "PUT"):
            return cls.PUT

        raise ValueError(f"Unrecognised option type flag: {value!r}")


@dataclass(frozen=True, slots=True)
class Contract:
    """
    One option quote with greeks.

    Attributes:
        strike: Strike price
        option_type: CALL or PUT
        expiration: Expiration date
        days_to_expiry: Calendar days until expiration (negative if expired)
        bid: Best bid (>= 0)
        ask: Best ask (>= 0)
        delta: Delta (signed)
        gamma: Gamma
        theta: Theta per day (usually <= 0)
        vega: Vega
        implied_vol: Implied volatility as a decimal (0.25 = 25%)
        volume: Session volume
        open_interest: Open interest
        symbol: Source identifier (informational only)
    """

    strike: float
    option_type: OptionType
    expiration: date
    days_to_expiry: int
    bid: float = 0.0
    ask: float = 0.0
    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0
    implied_vol: float = 0.0
    volume: int = 0
    open_interest: int = 0
    symbol: str = ""

    def __post_init__(self):
        numbers = (self.strike, self.bid, self.ask, self.delta, self.gamma, self.theta, self.vega, self.implied_vol)
        if not all(math.isfinite(n) for n in numbers):
            raise ValueError(f"Contract fields must be finite: {numbers}")
        if self.strike <= 0:
            raise ValueError(f"Strike must be positive, got {self.strike}")
        if self.bid < 0 or self.ask < 0:
            raise ValueError(f"Bid/ask must be non-negative, got {self.bid}/{self.ask}")
        if self.implied_vol < 0:
            raise ValueError(f"Implied vol must be non-negative, got {self.implied_vol}")
        if self.volume < 0 or self.open_interest < 0:
            raise ValueError("Volume and open interest must be non-negative")

    @property
    def mid(self) -> float:
        """Mid price (bid + ask) / 2."""
        return (self.bid + self.ask) / 2

    @property
    def spread_pct(self) -> float:
        """Bid/ask spread as a fraction of mid. 1.0 (fully illiquid) when mid <= 0."""
        mid = self.mid
        if mid <= 0:
            return 1.0
        return (self.ask - self.bid) / mid

    def __repr__(self) -> str:
        return (
            f"Contract({self.option_type.value} ${self.strike} {self.expiration} "
            f"dte={self.days_to_expiry} {self.bid:.2f}/{self.ask:.2f} Δ={self.delta:.2f})"
        )


@dataclass(slots=True)
class Chain:
    """
    Options chain snapshot for one underlying.

    Attributes:
        symbol: Underlying symbol (e.g., "SPY")
        spot_price: Underlying price at snapshot time
        as_of: Snapshot timestamp
        contracts: Contracts in source order
    """

    symbol: str
    spot_price: float
    as_of: datetime
    contracts: list[Contract] = field(default_factory=list)

    def __post_init__(self):
        if self.spot_price <= 0:
            raise ValueError(f"Spot price must be positive, got {self.spot_price}")
        self.symbol = self.symbol.strip().upper()

    def __len__(self) -> int:
        return len(self.contracts)

    def __iter__(self) -> Iterator[Contract]:
        return iter(self.contracts)

    def dtes(self) -> list[int]:
        """Distinct days-to-expiry values, ascending."""
        return sorted({c.days_to_expiry for c in self.contracts})

    def at_dte(self, dte: int) -> list[Contract]:
        """Contracts in one days-to-expiry bucket, in source order."""
        return [c for c in self.contracts if c.days_to_expiry == dte]

    def with_contracts(self, contracts: Iterable[Contract]) -> "Chain":
        """Return a chain sharing this snapshot's context with a subset of contracts."""
        return Chain(
            symbol=self.symbol,
            spot_price=self.spot_price,
            as_of=self.as_of,
            contracts=list(contracts),
        )

    def to_frame(self) -> pl.DataFrame:
        """Columnar view of the chain (one row per contract)."""
        return pl.DataFrame(
            {
                "strike": [c.strike for c in self.contracts],
                "option_type": [c.option_type.value for c in self.contracts],
                "expiration": [c.expiration for c in self.contracts],
                "dte": [c.days_to_expiry for c in self.contracts],
                "bid": [c.bid for c in self.contracts],
                "ask": [c.ask for c in self.contracts],
                "delta": [c.delta for c in self.contracts],
                "iv": [c.implied_vol for c in self.contracts],
                "volume": [c.volume for c in self.contracts],
                "open_interest": [c.open_interest for c in self.contracts],
            },
            schema={
                "strike": pl.Float64,
                "option_type": pl.Utf8,
                "expiration": pl.Date,
                "dte": pl.Int64,
                "bid": pl.Float64,
                "ask": pl.Float64,
                "delta": pl.Float64,
                "iv": pl.Float64,
                "volume": pl.Int64,
                "open_interest": pl.Int64,
            },
        )

    def expiry_summary(self) -> pl.DataFrame:
        """
        Per-expiration contract counts and liquidity totals.

        Returns:
            DataFrame with columns dte, expiration, contracts, calls, puts,
            volume, open_interest sorted by dte
        """
        return (
            self.to_frame()
            .group_by(["dte", "expiration"])
            .agg(
                pl.len().alias("contracts"),
                (pl.col("option_type") == OptionType.CALL.value).sum().alias("calls"),
                (pl.col("option_type") == OptionType.PUT.value).sum().alias("puts"),
                pl.col("volume").sum().alias("volume"),
                pl.col("open_interest").sum().alias("open_interest"),
            )
            .sort("dte")
        )

    def __repr__(self) -> str:
        return (
            f"Chain({self.symbol} spot={self.spot_price} as_of={self.as_of.isoformat()} "
            f"contracts={len(self.contracts)})"
        )
