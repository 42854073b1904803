"""Shared pytest fixtures for optscore tests."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent

# Add src (package) and the repo root (tests.fixtures) to path for imports
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

# Import all fixtures for global availability
from tests.fixtures.chain_fixtures import *  # noqa: E402,F401,F403

from optscore.config.scoring_config import ScoringConfig  # noqa: E402


@pytest.fixture
def config():
    """Default (strict) scoring configuration."""
    return ScoringConfig()


@pytest.fixture
def relaxed_config():
    """Relaxed scoring profile."""
    return ScoringConfig.for_profile("relaxed")


@pytest.fixture(autouse=True)
def clear_optscore_env(monkeypatch):
    """Keep OPTSCORE_* overrides from the shell out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("OPTSCORE_"):
            monkeypatch.delenv(key, raising=False)
