"""
optscore Data Models Package

- Pydantic models: for validating raw quote records from external sources
- Dataclasses: for the internal chain snapshot used by the scoring pipeline

Usage:
    from optscore.models import Chain, Contract, OptionType, RawOptionQuote
"""

from optscore.models.chain import Chain, Contract, OptionType
from optscore.models.quote_models import OccSymbol, RawOptionQuote

__all__ = [
    # Dataclasses
    "Chain",
    "Contract",
    "OptionType",
    # Pydantic models
    "OccSymbol",
    "RawOptionQuote",
]
