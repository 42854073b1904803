"""
ATM Implied Volatility Extraction

The at-the-money IV of one expiration is the mean of the call and put IV at
the strike closest to spot that has both legs quoted.
"""

from typing import Iterable, Optional

from loguru import logger

from optscore.models.chain import Contract, OptionType


def extract_atm_iv(contracts: Iterable[Contract], spot_price: float) -> Optional[float]:
    """
    Extract ATM implied volatility from one expiration's contracts.

    Args:
        contracts: Contracts of a single expiration
        spot_price: Underlying price

    Returns:
        Mean of call and put IV at the nearest paired strike, or None when
        there is no paired strike or either IV is missing (0)
    """
    # strike -> {type: contract}
    by_strike: dict[float, dict[OptionType, Contract]] = {}
    for contract in contracts:
        legs = by_strike.setdefault(contract.strike, {})
        legs.setdefault(contract.option_type, contract)

    paired = [
        (strike, legs)
        for strike, legs in by_strike.items()
        if OptionType.CALL in legs and OptionType.PUT in legs
    ]
    if not paired:
        return None

    # Equidistant strikes resolve to the lower one
    strike, legs = min(paired, key=lambda item: (abs(item[0] - spot_price), item[0]))

    call_iv = legs[OptionType.CALL].implied_vol
    put_iv = legs[OptionType.PUT].implied_vol
    if call_iv <= 0 or put_iv <= 0:
        logger.debug(f"ATM strike {strike} has missing IV (call={call_iv}, put={put_iv})")
        return None

    return (call_iv + put_iv) / 2
