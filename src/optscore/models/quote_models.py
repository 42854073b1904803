"""
Pydantic Models for Raw Quote Validation

Quote records come from outside the process (delayed-quote feeds, CSV
exports, test fixtures) and can be malformed, so they are validated with
Pydantic before they become internal Contract dataclasses.

Key patterns:
- Field constraints: gt/ge for ranges
- Before-validators: missing numerics coerce to 0, field aliases resolved
- Option type comes from an explicit flag; a packed OCC identifier is only
  parsed positionally, never guessed from substrings

Decision tree:
    Does this data come from outside my process?
    ├─ Yes → Use Pydantic (validation critical) ← WE ARE HERE
    └─ No → Use dataclass (performance matters)
"""

import re
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from optscore.models.chain import OptionType

# ROOT (1-6 chars, optionally space padded) + YYMMDD + C/P + strike x 1000 (8 digits)
OCC_SYMBOL_PATTERN = re.compile(
    r"^(?P<root>[A-Z0-9.]{1,6}?)\s*(?P<date>\d{6})(?P<right>[CP])(?P<strike>\d{8})$"
)

NUMERIC_FIELDS = ("bid", "ask", "delta", "gamma", "theta", "vega", "implied_vol")
COUNT_FIELDS = ("volume", "open_interest")

FIELD_ALIASES = {
    "type": "option_type",
    "right": "option_type",
    "optionType": "option_type",
    "expiry": "expiration",
    "expirationDate": "expiration",
    "iv": "implied_vol",
    "impliedVol": "implied_vol",
    "openInterest": "open_interest",
    "option": "symbol",
}


class OccSymbol(BaseModel):
    """Components of an OCC option identifier."""

    root: str
    expiration: date
    option_type: OptionType
    strike: float = Field(gt=0)

    @classmethod
    def from_symbol(cls, symbol: str) -> Optional["OccSymbol"]:
        """
        Parse an OCC identifier such as ``AAPL  240119C00150000``.

        Returns:
            OccSymbol, or None if the identifier does not match the format
        """
        match = OCC_SYMBOL_PATTERN.match(symbol.strip().upper())
        if match is None:
            return None

        raw_date = match.group("date")
        try:
            expiration = date(
                2000 + int(raw_date[0:2]),
                int(raw_date[2:4]),
                int(raw_date[4:6]),
            )
        except ValueError:
            return None

        strike = int(match.group("strike")) / 1000
        if strike <= 0:
            return None

        return cls(
            root=match.group("root"),
            expiration=expiration,
            option_type=OptionType.parse(match.group("right")),
            strike=strike,
        )


class RawOptionQuote(BaseModel):
    """
    One raw contract record as delivered by a quote source.

    Attributes:
        symbol: Source identifier (OCC symbol where available)
        strike: Strike price (must be positive)
        option_type: CALL or PUT from an explicit flag
        expiration: Expiration date
        bid, ask: Quotes (>= 0, missing → 0)
        delta, gamma, theta, vega: Greeks (missing → 0, NaN/inf rejected)
        implied_vol: Implied volatility (>= 0, missing → 0)
        volume, open_interest: Liquidity counts (>= 0, missing → 0)

    Raises:
        pydantic.ValidationError: If strike/type/expiration cannot be determined
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True, allow_inf_nan=False)

    symbol: str = ""
    strike: float = Field(..., gt=0, description="Strike price")
    option_type: OptionType
    expiration: date
    bid: float = Field(0.0, ge=0)
    ask: float = Field(0.0, ge=0)
    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0
    implied_vol: float = Field(0.0, ge=0)
    volume: int = Field(0, ge=0)
    open_interest: int = Field(0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def resolve_fields(cls, data: Any) -> Any:
        """
        Resolve field aliases and fill structure from a packed OCC identifier.

        Explicit strike/type/expiration fields always win over the values
        encoded in the identifier.
        """
        if not isinstance(data, dict):
            return data

        resolved: dict[str, Any] = {}
        for key, value in data.items():
            resolved.setdefault(FIELD_ALIASES.get(key, key), value)

        missing_structure = any(
            resolved.get(name) in (None, "")
            for name in ("strike", "option_type", "expiration")
        )
        symbol = resolved.get("symbol")
        if missing_structure and isinstance(symbol, str) and symbol:
            occ = OccSymbol.from_symbol(symbol)
            if occ is not None:
                if resolved.get("strike") in (None, ""):
                    resolved["strike"] = occ.strike
                if resolved.get("option_type") in (None, ""):
                    resolved["option_type"] = occ.option_type
                if resolved.get("expiration") in (None, ""):
                    resolved["expiration"] = occ.expiration

        for name in NUMERIC_FIELDS + COUNT_FIELDS:
            if resolved.get(name) in (None, ""):
                resolved[name] = 0

        if resolved.get("symbol") is None:
            resolved["symbol"] = ""

        return resolved

    @field_validator("option_type", mode="before")
    @classmethod
    def validate_option_type(cls, v):
        """Map C/P/Call/Put flags; reject anything else."""
        return OptionType.parse(v)

    @field_validator("expiration", mode="before")
    @classmethod
    def validate_expiration(cls, v):
        """Accept dates, datetimes and ISO (or YYYYMMDD) strings."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            text = v.strip()
            if len(text) == 8 and text.isdigit():
                return datetime.strptime(text, "%Y%m%d").date()
            return date.fromisoformat(text[:10])
        return v

    @field_validator("volume", "open_interest", mode="before")
    @classmethod
    def validate_counts(cls, v):
        """Counts may arrive as floats ("12.0"); truncate to int."""
        if isinstance(v, (str, float)):
            return int(float(v))
        return v
