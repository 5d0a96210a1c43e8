import pytest

from ecosim.agents.components import AgentState
from ecosim.config import SimConfig
from ecosim.core import vecmath
from ecosim.core.simulation import Simulation
from ecosim.world.kinds import Kind

def night_sim(**overrides) -> Simulation:
    """A simulation half a second before night falls."""
    settings = dict(seed=7, cycle_duration=60.0, start_time=29.5)
    settings.update(overrides)
    return Simulation(SimConfig(**settings))

@pytest.mark.population
def test_night_edge_spawns_predator_cohort_on_the_boundary() -> None:
    sim = night_sim(predators_per_night=3)
    assert sim.registry.count(Kind.WOLF) == 0
    sim.tick(1.0)
    wolves = list(sim.registry.live(Kind.WOLF))
    assert len(wolves) == 3
    radius = sim.config.world_radius
    for wolf in wolves:
        # Spawned on the rim; one tick of movement at most
        assert vecmath.length(wolf.position) == pytest.approx(radius, abs=Kind.WOLF.metadata.max_speed * 1.0 + 1e-6)

@pytest.mark.population
def test_day_edge_clears_night_predators() -> None:
    sim = night_sim(predators_per_night=4)
    removed = []
    sim.push_handlers(on_entity_removed=lambda entity_id, kind: removed.append(kind))

    sim.tick(1.0)   # 30.5s, night
    assert sim.registry.count(Kind.WOLF) == 4
    sim.tick(29.0)  # 59.5s, still night
    assert sim.registry.count(Kind.WOLF) == 4
    sim.tick(1.0)   # 60.5s, day

    assert sim.registry.count(Kind.WOLF) == 0
    assert removed.count(Kind.WOLF) == 4

@pytest.mark.population
def test_night_events_fire_once_per_crossing() -> None:
    sim = night_sim()
    starts, ends = [], []
    sim.push_handlers(on_night_start=starts.append, on_night_end=ends.append)
    for _ in range(130): # 29.5s to 94.5s
        sim.tick(0.5)
    assert len(starts) == 2
    assert len(ends) == 1

@pytest.mark.population
def test_night_cohort_respects_the_cap() -> None:
    sim = night_sim(max_entities=2, predators_per_night=3)
    rejected = []
    sim.push_handlers(on_capacity_rejected=rejected.append)
    sim.place_entity(Kind.SHEEP, (0.0, 0.0))
    sim.tick(1.0)
    assert sim.registry.count(Kind.WOLF) == 1
    assert sim.registry.count_capped() == 2
    assert rejected == [Kind.WOLF]

@pytest.mark.population
def test_day_edge_wakes_sleepers_and_resets_counters() -> None:
    sim = night_sim(start_time=59.5, predators_per_night=0)
    sheep = sim.registry.get(sim.place_entity(Kind.SHEEP, (0.0, 0.0)))
    fox = sim.registry.get(sim.place_entity(Kind.FOX, (20.0, 0.0)))
    fox.daily_interaction_count = 2

    sim.tick(0.25)
    assert sheep.state is AgentState.SLEEPING

    sim.tick(0.5)
    assert sheep.state is not AgentState.SLEEPING
    assert fox.daily_interaction_count == 0

@pytest.mark.population
def test_night_start_resets_kill_tally() -> None:
    sim = night_sim(predators_per_night=0)
    sim.clock.night_kill_count = 5
    sim.tick(1.0)
    assert sim.clock.night_kill_count == 0

@pytest.mark.population
def test_bonfires_follow_the_clock() -> None:
    sim = night_sim(predators_per_night=0)
    fire = sim.registry.get(sim.place_entity(Kind.BONFIRE, (0.0, 0.0)))
    assert not fire.is_lit
    sim.tick(1.0)
    assert fire.is_lit
    late = sim.registry.get(sim.place_entity(Kind.BONFIRE, (10.0, 0.0)))
    assert late.is_lit
    sim.tick(29.0)
    sim.tick(1.0)
    assert not fire.is_lit
    assert not late.is_lit

@pytest.mark.population
def test_plants_regrow_alternating_kinds_up_to_cap(config) -> None:
    config.growth_interval_ticks = 5
    config.growth_cap = 2
    sim = Simulation(config)
    for _ in range(5):
        sim.tick(0.1)
    assert sim.registry.count(Kind.GRASS) == 1
    assert sim.registry.count(Kind.CARROT) == 0
    for _ in range(5):
        sim.tick(0.1)
    assert sim.registry.count(Kind.CARROT) == 1

    for _ in range(60):
        sim.tick(0.1)
    assert sim.registry.count(Kind.GRASS) == 2
    assert sim.registry.count(Kind.CARROT) == 2
    for plant in sim.registry.live([Kind.GRASS, Kind.CARROT]):
        assert vecmath.length(plant.position) <= config.world_radius + 1e-9
