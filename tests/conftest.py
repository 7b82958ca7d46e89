import os
import random
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from shieldflow.core.clock import VirtualClock
from shieldflow.core.connection_simulator import ConnectionSimulator
from shieldflow.core.log_sink import LogSink
from shieldflow.core.server_catalog import ServerCatalog
from shieldflow.core.traffic import TrafficGenerator
from shieldflow.core.types import Preferences


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def catalog():
    return ServerCatalog(rng=random.Random(7))


@pytest.fixture
def simulator(clock, catalog):
    sim = ConnectionSimulator(
        clock=clock,
        server=catalog.default,
        preferences=Preferences(),
        log_sink=LogSink(timestamp_source=lambda: "12:00:00"),
        traffic=TrafficGenerator(rng=random.Random(42)),
    )
    yield sim
    sim.dispose()


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
