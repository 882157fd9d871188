"""Shared fixtures for the bond escrow test suite."""

import os

import pytest
from hypothesis import HealthCheck, settings

from bondescrow.chain import Account
from bondescrow.config import SystemConfig, reset_global_config
from bondescrow.escrow import BondEscrowSystem

# Examples share the autouse configuration fixture
_SUPPRESSED = [HealthCheck.function_scoped_fixture]
settings.register_profile("ci", max_examples=50, deadline=None, suppress_health_check=_SUPPRESSED)
settings.register_profile("dev", max_examples=20, deadline=None, suppress_health_check=_SUPPRESSED)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

TOKEN = 10**18
RESERVE = 10_000 * TOKEN


@pytest.fixture(autouse=True)
def clean_configuration(monkeypatch):
    """Keep BONDESCROW_* overrides and the global config out of every test."""
    for key in list(os.environ):
        if key.startswith("BONDESCROW_"):
            monkeypatch.delenv(key)
    reset_global_config()
    yield
    reset_global_config()


@pytest.fixture
def issuer():
    return Account.from_seed("issuer").address


@pytest.fixture
def poster():
    return Account.from_seed("poster").address


@pytest.fixture
def affiliate():
    return Account.from_seed("affiliate").address


@pytest.fixture
def governors():
    return [Account.from_seed(f"governor-{i}").address for i in range(3)]


@pytest.fixture
def system(poster, governors):
    """Deployed system with a funded reward reserve, a funded poster and adjudicators."""
    deployed = BondEscrowSystem.deploy(config=SystemConfig(initial_reward_reserve=RESERVE))
    deployed.fund(poster, 1_000 * TOKEN)
    for governor in governors:
        deployed.add_adjudicator(governor)
    return deployed
