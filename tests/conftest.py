"""Shared fixtures for the Star Registry test suite."""

import pytest

from star_registry.config import load_settings
from star_registry.signatures.bitcoin_message import KeyPair


START_TIME = 1_700_000_000


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def alice():
    return KeyPair.from_secret(0xA11CE)


@pytest.fixture
def bob():
    return KeyPair.from_secret(0xB0B)
