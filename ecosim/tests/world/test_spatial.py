import pytest

from ecosim.core import vecmath
from ecosim.world.kinds import Category, Kind
from ecosim.world.registry import EntityRegistry
from ecosim.world.spatial import SpatialQuery

@pytest.fixture
def world():
    registry = EntityRegistry(max_entities=20)
    return registry, SpatialQuery(registry)

@pytest.mark.registry
def test_nearest_of_kind(world) -> None:
    registry, spatial = world
    origin = vecmath.vec(0.0, 0.0)
    far = registry.spawn(Kind.SHEEP, (10.0, 0.0))
    near = registry.spawn(Kind.SHEEP, (0.0, 3.0))
    registry.spawn(Kind.RABBIT, (1.0, 0.0))

    assert spatial.nearest_of_kind(origin, Kind.SHEEP) == near
    assert spatial.nearest_of_kind(origin, [Kind.SHEEP, Kind.RABBIT], exclude=None, max_distance=2.0) is not None
    assert spatial.nearest_of_kind(origin, Kind.SHEEP, exclude=near) == far
    assert spatial.nearest_of_kind(origin, Kind.SHEEP, max_distance=2.0) is None
    assert spatial.nearest_of_kind(origin, Kind.WOLF) is None

@pytest.mark.registry
def test_nearest_tie_goes_to_first_registered(world) -> None:
    registry, spatial = world
    first = registry.spawn(Kind.SHEEP, (2.0, 0.0))
    registry.spawn(Kind.SHEEP, (-2.0, 0.0))
    assert spatial.nearest_of_kind(vecmath.zero(), Kind.SHEEP) == first

@pytest.mark.registry
def test_dead_entities_are_invisible_to_queries(world) -> None:
    registry, spatial = world
    near = registry.spawn(Kind.SHEEP, (1.0, 0.0))
    far = registry.spawn(Kind.SHEEP, (5.0, 0.0))
    registry.mark_dead(near)
    assert spatial.nearest_of_kind(vecmath.zero(), Kind.SHEEP) == far
    assert [e.id for e in spatial.neighbors_within(vecmath.zero(), 10.0)] == [far]

@pytest.mark.registry
def test_nearest_water_measures_to_the_edge(world) -> None:
    registry, spatial = world
    big = registry.get(registry.spawn(Kind.POND, (10.0, 0.0)))
    big.radius = 6.0 # Edge 4 units away
    small = registry.get(registry.spawn(Kind.POND, (6.0, 0.0)))
    small.radius = 1.0 # Edge 5 units away
    assert spatial.nearest_water(vecmath.zero()) is big

@pytest.mark.registry
def test_neighbors_within(world) -> None:
    registry, spatial = world
    me = registry.spawn(Kind.SHEEP, (0.0, 0.0))
    close = registry.spawn(Kind.SHEEP, (1.0, 0.0))
    registry.spawn(Kind.SHEEP, (3.0, 0.0))
    registry.spawn(Kind.TREE, (0.5, 0.0))

    found = spatial.neighbors_within(vecmath.zero(), 1.5, exclude=me)
    assert [e.id for e in found] == [close]
    trees = spatial.neighbors_within(vecmath.zero(), 1.5, category=Category.OBSTACLE)
    assert [e.kind for e in trees] == [Kind.TREE]
