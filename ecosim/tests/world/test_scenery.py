import random

import pytest

from ecosim.config import SimConfig
from ecosim.core import vecmath
from ecosim.core.simulation import Simulation
from ecosim.world.kinds import Category, Kind
from ecosim.world.scenery import ScenerySeeder

def seeded_world(seed: int):
    config = SimConfig(seed=seed)
    sim = Simulation(config, random.Random(seed))
    seeder = ScenerySeeder(config, random.Random(seed))
    counts = seeder.populate(sim)
    return sim, seeder, counts

@pytest.mark.scenery
def test_same_seed_same_world() -> None:
    first, _, _ = seeded_world(42)
    second, _, _ = seeded_world(42)
    other, _, _ = seeded_world(43)
    assert first.export_layout() == second.export_layout()
    assert first.export_layout() != other.export_layout()

@pytest.mark.scenery
def test_kind_counts_match_the_world() -> None:
    sim, seeder, counts = seeded_world(5)
    assert counts == seeder.kind_counts
    assert {kind.metadata.name: n for kind, n in counts.items()} == sim.population_counts()

@pytest.mark.scenery
def test_initial_population_is_placed() -> None:
    sim, _, counts = seeded_world(8)
    for name, expected in sim.config.initial_population.items():
        assert counts[Kind.parse(name)] == expected
    assert counts[Kind.POND] == sim.config.pond_count
    assert counts[Kind.FENCE] > 0

@pytest.mark.scenery
def test_features_do_not_overlap_water_and_fences_are_snapped() -> None:
    sim, _, _ = seeded_world(13)
    ponds = sim.registry.water_sources()
    for entity in sim.registry.live():
        if entity.kind is Kind.FENCE:
            grid = sim.config.snap_grid
            assert entity.position[0] / grid == pytest.approx(round(entity.position[0] / grid))
            assert entity.position[2] / grid == pytest.approx(round(entity.position[2] / grid))
            continue
        if entity.kind.metadata.category is Category.WATER:
            continue
        for pond in ponds:
            assert vecmath.distance(entity.position, pond.position) >= pond.radius + entity.radius
