import time

import pyglet
import pytest

from ecosim.config import SimConfig
from ecosim.core.engine import Engine

MAX_AVERAGE_TICK_MS = 50.0
FRAME_DT = 1.0 / 60.0

@pytest.mark.performance
def test_average_tick_time() -> None:
    """Average headless simulation tick over a seeded world stays under the limit."""
    config = SimConfig(seed=42, headless_mode=True)
    engine = Engine(config, clock=pyglet.clock.Clock())
    sim = engine.simulation

    num_ticks = 300 # Five simulated seconds at 60 FPS
    total_processing_time = 0.0
    for _ in range(num_ticks):
        start = time.perf_counter()
        sim.tick(FRAME_DT)
        total_processing_time += time.perf_counter() - start
    engine.shutdown()

    average_ms = total_processing_time / num_ticks * 1000.0
    print(f"Average tick time over {num_ticks} ticks: {average_ms:.3f} ms ({len(sim.registry)} entities)")
    assert average_ms <= MAX_AVERAGE_TICK_MS, f"Average tick time {average_ms:.2f} ms exceeded {MAX_AVERAGE_TICK_MS:.0f} ms"
