import math
import random

import pytest

from ecosim.agents.components import AgentState
from ecosim.config import SimConfig
from ecosim.core import vecmath
from ecosim.core.behavior import Intent, IntentMode
from ecosim.core.steering import SteeringEngine
from ecosim.world.kinds import Kind
from ecosim.world.registry import EntityRegistry

@pytest.fixture
def registry():
    return EntityRegistry(max_entities=50)

@pytest.fixture
def steering(config, seeded_rng):
    return SteeringEngine(config, seeded_rng)

def spawn(registry, kind, x, z=0.0):
    return registry.get(registry.spawn(kind, (x, z)))

def seek(target, speed=5.0):
    return Intent(AgentState.SEEKING, IntentMode.SEEK, None, target.position.copy(), speed)

@pytest.mark.steering
def test_coincident_agents_push_apart(registry, steering) -> None:
    a = spawn(registry, Kind.SHEEP, 1.0, 1.0)
    b = spawn(registry, Kind.SHEEP, 1.0, 1.0)
    push_a = steering.separation(a, [b])
    push_b = steering.separation(b, [a])
    assert vecmath.length(push_a) > 0.0
    assert push_a[0] == pytest.approx(-push_b[0])
    assert push_a[2] == pytest.approx(-push_b[2])
    assert math.isfinite(push_a[0]) and math.isfinite(push_a[2])

@pytest.mark.steering
def test_coincident_dogs_separate_over_ticks(sim) -> None:
    first = sim.registry.get(sim.place_entity(Kind.DOG, (0.0, 0.0)))
    second = sim.registry.get(sim.place_entity(Kind.DOG, (0.0, 0.0)))
    prev = 0.0
    for _ in range(60):
        sim.tick(0.05)
        d = vecmath.distance(first.position, second.position)
        if prev < sim.config.separation_radius:
            assert d > prev
        prev = d
    assert prev > 0.5

@pytest.mark.steering
def test_separation_ignores_distant_neighbors(registry, steering) -> None:
    a = spawn(registry, Kind.SHEEP, 0.0)
    b = spawn(registry, Kind.SHEEP, 5.0)
    assert vecmath.length(steering.separation(a, [b])) == 0.0

@pytest.mark.steering
def test_seek_and_flee_change_distance(registry, steering) -> None:
    hunter = spawn(registry, Kind.DOG, 0.0)
    quarry = spawn(registry, Kind.FOX, 10.0)
    start = vecmath.distance(hunter.position, quarry.position)
    for _ in range(10):
        steering.apply(hunter, seek(quarry), [], [], [], 0.1)
    assert vecmath.distance(hunter.position, quarry.position) < start

    runner = spawn(registry, Kind.SHEEP, -5.0)
    flee = Intent(AgentState.FLEEING, IntentMode.FLEE, hunter.id, hunter.position.copy(), 3.0)
    start = vecmath.distance(runner.position, hunter.position)
    for _ in range(10):
        steering.apply(runner, flee, [], [], [], 0.1)
    assert vecmath.distance(runner.position, hunter.position) > start

@pytest.mark.steering
def test_speed_never_exceeds_the_cap(registry, steering) -> None:
    rabbit = spawn(registry, Kind.RABBIT, 0.0)
    target = spawn(registry, Kind.CARROT, 30.0)
    for _ in range(50):
        steering.apply(rabbit, seek(target, speed=100.0), [], [], [], 0.1)
        assert rabbit.speed <= Kind.RABBIT.metadata.max_speed + 1e-9
    assert rabbit.position[1] == 0.0

@pytest.mark.steering
def test_heading_follows_velocity(registry, steering) -> None:
    dog = spawn(registry, Kind.DOG, 0.0)
    east = spawn(registry, Kind.TREE, 10.0)
    steering.apply(dog, seek(east), [], [], [], 0.1)
    assert dog.heading == pytest.approx(math.pi / 2)

@pytest.mark.steering
def test_sleeping_agents_do_not_move(registry, steering) -> None:
    sheep = spawn(registry, Kind.SHEEP, 2.0)
    sheep.velocity = vecmath.vec(1.0, 1.0)
    crowd = [spawn(registry, Kind.SHEEP, 2.0)]
    sleep = Intent(AgentState.SLEEPING, IntentMode.SLEEP)
    steering.apply(sheep, sleep, crowd, [], [], 0.1)
    assert sheep.position.tolist() == [2.0, 0.0, 0.0]
    assert sheep.speed == 0.0

@pytest.mark.steering
def test_boundary_pulls_agents_back(sim) -> None:
    radius = sim.config.world_radius
    dog = sim.registry.get(sim.place_entity(Kind.DOG, (radius + 5.0, 0.0)))
    prev = vecmath.length(dog.position)
    for _ in range(200):
        sim.tick(0.05)
        now = vecmath.length(dog.position)
        if prev > radius:
            assert now < prev
        prev = now
    assert prev <= radius

@pytest.mark.steering
def test_wanderer_placed_outside_stays_inside_once_back(sim) -> None:
    radius = sim.config.world_radius
    rabbit = sim.registry.get(sim.place_entity(Kind.RABBIT, (0.0, radius + 5.0)))
    back_inside = False
    for _ in range(400):
        sim.tick(0.05)
        inside = vecmath.length(rabbit.position) <= radius + 1.0
        if back_inside:
            assert inside
        back_inside = back_inside or vecmath.length(rabbit.position) <= radius
    assert back_inside

@pytest.mark.steering
def test_wander_goal_outside_the_world_is_replaced() -> None:
    registry = EntityRegistry(max_entities=5)
    config = SimConfig(wander_probability=0.0)
    cat = spawn(registry, Kind.CAT, config.world_radius + 5.0)
    wander = Intent(AgentState.WANDERING, IntentMode.WANDER, desired_speed=1.0)
    steering = SteeringEngine(config, random.Random(3))
    force = steering.pursuit(cat, wander)
    assert vecmath.length(cat.wander_goal) <= config.world_radius + 1e-9
    # The goal lies inward, so wandering pulls toward the origin
    assert force[0] < 0.0

@pytest.mark.steering
def test_wanderers_stay_near_the_world(sim) -> None:
    radius = sim.config.world_radius
    sheep = [sim.registry.get(sim.place_entity(Kind.SHEEP, (radius - 1.0, float(z)))) for z in range(-3, 4)]
    for _ in range(400):
        sim.tick(0.05)
        for s in sheep:
            assert vecmath.length(s.position) <= radius + 2.0

@pytest.mark.steering
def test_wander_goal_rerolls_with_probability() -> None:
    registry = EntityRegistry(max_entities=5)
    cat = spawn(registry, Kind.CAT, 0.0)
    wander = Intent(AgentState.WANDERING, IntentMode.WANDER, desired_speed=1.0)

    never = SteeringEngine(SimConfig(wander_probability=0.0), random.Random(1))
    goal = cat.wander_goal.copy()
    for _ in range(20):
        never.pursuit(cat, wander)
    assert cat.wander_goal.tolist() == goal.tolist()

    always = SteeringEngine(SimConfig(wander_probability=1.0), random.Random(1))
    always.pursuit(cat, wander)
    assert cat.wander_goal.tolist() != goal.tolist()
    assert vecmath.distance(cat.wander_goal, cat.position) <= always.config.wander_radius

@pytest.mark.steering
def test_obstacles_repel_and_lit_fire_repels_further(registry, steering) -> None:
    sheep = spawn(registry, Kind.SHEEP, 0.0)
    rock = spawn(registry, Kind.ROCK, 1.0)
    assert steering.avoidance(sheep, [rock], [])[0] < 0.0

    cfg = steering.config
    gap = Kind.BONFIRE.metadata.radius + sheep.radius + cfg.avoid_margin + cfg.fire_margin / 2
    fire = spawn(registry, Kind.BONFIRE, gap)
    assert vecmath.length(steering.avoidance(sheep, [fire], [])) == 0.0
    fire.is_lit = True
    assert steering.avoidance(sheep, [fire], [])[0] < 0.0

@pytest.mark.steering
def test_water_attracts_ducks_and_repels_land_animals(registry, steering) -> None:
    pond = spawn(registry, Kind.POND, 0.0)
    duck = spawn(registry, Kind.DUCK, 10.0)
    sheep = spawn(registry, Kind.SHEEP, pond.radius + 0.5)
    assert steering.avoidance(duck, [], [pond])[0] < 0.0
    assert steering.avoidance(sheep, [], [pond])[0] > 0.0
