"""Pytest configuration and fixtures for EcoSim tests."""

import random
from collections import defaultdict
from typing import Dict, List

import pytest

from ecosim.config import SimConfig
from ecosim.core.simulation import Simulation

EVENT_NAMES = (
    'on_night_start',
    'on_night_end',
    'on_entity_spawned',
    'on_entity_removed',
    'on_capacity_rejected',
)

@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(1234)

@pytest.fixture
def config():
    """Short cycle, empty world: day for the first 30s, night until 60s."""
    return SimConfig(seed=1234, cycle_duration=60.0)

@pytest.fixture
def sim(config, seeded_rng):
    return Simulation(config, seeded_rng)

@pytest.fixture
def events(sim) -> Dict[str, List[tuple]]:
    """Records every event the simulation dispatches, keyed by event name."""
    received: Dict[str, List[tuple]] = defaultdict(list)

    def recorder(name):
        def handler(*args):
            received[name].append(args)
        return handler

    sim.push_handlers(**{name: recorder(name) for name in EVENT_NAMES})
    return received
