import pyglet
import pytest

from ecosim.config import SimConfig
from ecosim.core.engine import Engine

@pytest.fixture
def headless_config():
    return SimConfig(seed=21, headless_mode=True, target_fps=120.0)

@pytest.mark.simulation
def test_headless_run_stops_after_max_ticks(headless_config) -> None:
    engine = Engine(headless_config, clock=pyglet.clock.Clock())
    try:
        engine.run(max_ticks=5)
    finally:
        engine.shutdown()
    assert engine.ticks_run == 5
    assert engine.simulation.tick_count == 5
    assert engine.viewer is None

@pytest.mark.simulation
def test_update_clamps_long_frames_and_applies_speed(headless_config) -> None:
    headless_config.game_speed_multiplier = 2.0
    engine = Engine(headless_config, clock=pyglet.clock.Clock(), seed_scenery=False)
    engine.update(10.0)
    expected = headless_config.max_frame_dt * 2.0
    assert engine.simulation.clock.sim_time == pytest.approx(expected)
    engine.shutdown()

@pytest.mark.simulation
def test_engine_seeds_the_world(headless_config) -> None:
    engine = Engine(headless_config, clock=pyglet.clock.Clock())
    assert sum(engine.seeder.kind_counts.values()) == len(engine.simulation.registry)
    assert engine.simulation.registry.agents()
    engine.shutdown()

@pytest.mark.simulation
def test_stopped_engine_ignores_updates(headless_config) -> None:
    engine = Engine(headless_config, clock=pyglet.clock.Clock(), seed_scenery=False)
    engine.shutdown()
    engine.update(0.1)
    assert engine.simulation.tick_count == 0
