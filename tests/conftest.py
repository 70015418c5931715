# tests/conftest.py
"""Shared test fixtures and hypothesis profiles.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from cmdsynth.contracts import CommandGraph
from cmdsynth.core.config import LedgerConfig
from tests.helpers import make_chain, make_graph

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def chain_graph() -> CommandGraph:
    """A→B→C→D, weight 1 each, all pending."""
    return make_chain(["A", "B", "C", "D"])


@pytest.fixture
def empty_graph() -> CommandGraph:
    return make_graph([], [])


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig(tenant="acme", operator="oncall", wave_window_minutes=30, sample_rate_ms=5000)
