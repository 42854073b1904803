"""
Chain Normalizer

Turns raw per-contract quote records into a Chain snapshot.

Records are validated one at a time: a malformed record is logged and
skipped so that one bad tick cannot sink the whole chain. The chain only
fails when records were supplied and none of them survive.

Usage:
    from optscore.core.normalizer import normalize_chain

    chain = normalize_chain(records, spot_price=455.0, today=date(2026, 1, 20))
"""

import math
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping, Optional

from loguru import logger
from pydantic import ValidationError

from optscore.exceptions import ChainNormalizationError
from optscore.models.chain import Chain, Contract
from optscore.models.quote_models import RawOptionQuote


def days_to_expiry(expiration: date, today: date) -> int:
    """
    Calendar days from ``today`` to ``expiration``, rounded up.

    Both dates are taken at midnight, so the result is the plain day
    difference; it is negative for expired contracts.
    """
    delta = datetime.combine(expiration, time.min) - datetime.combine(today, time.min)
    return math.ceil(delta.total_seconds() / 86400)


def normalize_record(record: Mapping[str, Any], today: date) -> Contract:
    """
    Validate one raw record and convert it to a Contract.

    Raises:
        pydantic.ValidationError: If the record is malformed
        ValueError: If the record fails Contract validation
    """
    quote = RawOptionQuote.model_validate(dict(record))
    return Contract(
        strike=quote.strike,
        option_type=quote.option_type,
        expiration=quote.expiration,
        days_to_expiry=days_to_expiry(quote.expiration, today),
        bid=quote.bid,
        ask=quote.ask,
        delta=quote.delta,
        gamma=quote.gamma,
        theta=quote.theta,
        vega=quote.vega,
        implied_vol=quote.implied_vol,
        volume=quote.volume,
        open_interest=quote.open_interest,
        symbol=quote.symbol,
    )


def normalize_chain(
    records: Iterable[Mapping[str, Any]],
    spot_price: float,
    today: date | datetime,
    symbol: str = "",
    as_of: Optional[datetime] = None,
) -> Chain:
    """
    Build a Chain from raw quote records.

    Args:
        records: Raw per-contract records (dicts in any supported source shape)
        spot_price: Underlying price (must be positive)
        today: Reference date for days-to-expiry; required, never read from the clock
        symbol: Underlying symbol
        as_of: Snapshot timestamp (defaults to midnight of ``today``)

    Returns:
        Chain with one Contract per valid record, in source order

    Raises:
        ValueError: If spot_price is not positive
        ChainNormalizationError: If records were supplied but none are usable
    """
    if spot_price is None or spot_price <= 0:
        raise ValueError(f"spot_price must be positive, got {spot_price}")

    if isinstance(today, datetime):
        reference = today.date()
        as_of = as_of or today
    else:
        reference = today
        as_of = as_of or datetime.combine(today, time.min)

    contracts: list[Contract] = []
    total = 0
    rejected = 0

    for index, record in enumerate(records):
        total += 1
        try:
            contracts.append(normalize_record(record, reference))
        except (ValidationError, ValueError, TypeError) as e:
            rejected += 1
            logger.warning(f"Skipping malformed quote record #{index}: {_summarize_error(e)}")

    if total > 0 and not contracts:
        raise ChainNormalizationError(
            f"No usable contracts in chain for {symbol or 'unknown symbol'} "
            f"({rejected}/{total} records rejected)",
            total_records=total,
            rejected=rejected,
        )

    logger.debug(
        f"Normalized {len(contracts)}/{total} records for {symbol or 'chain'} "
        f"(spot={spot_price}, today={reference})"
    )

    return Chain(symbol=symbol, spot_price=spot_price, as_of=as_of, contracts=contracts)


def _summarize_error(error: Exception) -> str:
    """One-line description of a validation failure."""
    if isinstance(error, ValidationError):
        parts = [
            f"{'.'.join(str(loc) for loc in err['loc']) or 'record'}: {err['msg']}"
            for err in error.errors()
        ]
        return "; ".join(parts)
    return str(error)
