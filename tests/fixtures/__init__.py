"""Test fixtures for optscore tests.

This package provides reusable test fixtures for:
- Hand-priced option chains (term structure, spreads)
- Raw quote records (explicit type flags, OCC identifiers)

Fixtures are auto-discovered by pytest through conftest.py.
"""

from tests.fixtures.chain_fixtures import (
    TODAY,
    atm_pair,
    make_chain,
    make_contract,
)

__all__ = ["TODAY", "atm_pair", "make_chain", "make_contract"]
