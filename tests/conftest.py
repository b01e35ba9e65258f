"""Shared fixtures for EEG Monitor tests."""

import pytest

from eeg_monitor.core.config import EngineConfig
from eeg_monitor.session.store import SessionStore


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: float = 1_000_000.0):
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(EngineConfig(), clock=clock)


@pytest.fixture
def active_store(store):
    store.set_active(True)
    return store


POW = [0.2, 0.4, 0.15, 0.1, 0.05]
MET = [0.6, 0.4, 0.3, 0.7, 0.5, 0.8]
DEV = [87, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 1, 0, 93]
