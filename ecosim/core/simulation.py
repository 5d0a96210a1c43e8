"""The simulation facade: owns the world state and orders each tick."""

import logging
import math
import random
from collections import Counter
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

import pyglet

from ecosim.agents.components import AgentState, Pose
from ecosim.config import SimConfig
from ecosim.core import vecmath
from ecosim.core.behavior import BehaviorSelector
from ecosim.core.clock import ClockTick, WorldClock
from ecosim.core.population import PopulationController
from ecosim.core.steering import SteeringEngine
from ecosim.core.systems import AgentSystem, System
from ecosim.world.kinds import Kind
from ecosim.world.registry import EntityRegistry
from ecosim.world.spatial import SpatialQuery

logger = logging.getLogger(__name__)

class EntitySnapshot(NamedTuple):
    """Read-only view of one entity after a tick, for renderers and tests."""
    id: int
    kind: Kind
    position: Tuple[float, float, float] # Ground position plus the kind's vertical offset
    facing: float
    pose: Pose
    state: AgentState
    health: int
    is_lit: bool = False

class PlacementRecord(NamedTuple):
    """One entry of an exported layout."""
    kind: str
    x: float
    z: float
    heading: float

class Simulation(pyglet.event.EventDispatcher):
    """
    Runs the ecosystem one tick at a time.

    Events:
        on_night_start(day_count)
        on_night_end(day_count)
        on_entity_spawned(snapshot)
        on_entity_removed(entity_id, kind)
        on_capacity_rejected(kind)

    Args:
        config: Tuning values; defaults are used when omitted.
        rng: Random source shared by placement, steering and population.
            Defaults to one seeded from config.seed.
    """
    def __init__(self, config: Optional[SimConfig] = None, rng: Optional[random.Random] = None) -> None:
        super().__init__()
        self.config = config or SimConfig()
        self.config.validate()
        self.rng = rng or random.Random(self.config.seed)

        self.clock = WorldClock(self.config.cycle_duration, self.config.start_time)
        self.registry = EntityRegistry(self.config.max_entities)
        self.spatial = SpatialQuery(self.registry)
        self.selector = BehaviorSelector(self.registry, self.spatial, self.clock, self.config)
        self.steering = SteeringEngine(self.config, self.rng)
        self.population = PopulationController(self, self.rng)
        self.agent_system = AgentSystem(self)

        # esper convention: higher priority processes first
        self.systems: List[System] = sorted(
            [self.population, self.agent_system], key=lambda s: s.priority, reverse=True
        )
        self.tick_count: int = 0

    @property
    def is_night(self) -> bool:
        return self.clock.is_night

    def tick(self, dt: float) -> ClockTick:
        """Advances the world by dt seconds.

        Order: clock, population reactions, the agent pass, then deferred
        removals. Listeners are notified after the world is consistent.
        """
        clock_tick = self.clock.advance(dt)
        for system in self.systems:
            system.process(dt, clock_tick)

        for entity in self.registry.reconcile():
            self.dispatch_event('on_entity_removed', entity.id, entity.kind)

        if clock_tick.night_started:
            self.dispatch_event('on_night_start', self.clock.day_count)
        elif clock_tick.day_started:
            self.dispatch_event('on_night_end', self.clock.day_count)
        self.tick_count += 1
        return clock_tick

    def place_entity(
        self,
        kind: Union[Kind, str],
        position: vecmath.VecLike,
        heading: Optional[float] = None,
    ) -> Optional[int]:
        """
        Adds an entity to the world.

        Snapping kinds land on the nearest snap-grid point and keep the given
        heading (0 when none). Other kinds face a random direction when no
        heading is given.

        Args:
            kind: A Kind or its name, case-insensitive.
            position: (x, z) or (x, y, z).
            heading: Facing in radians.

        Returns:
            The new entity id, or None when the population cap rejected it.

        Raises:
            UnknownKindError: If kind names no known kind.
        """
        kind = Kind.parse(kind)
        ground = vecmath.to_ground(position)
        if kind.metadata.snap:
            grid = self.config.snap_grid
            ground = vecmath.vec(round(ground[0] / grid) * grid, round(ground[2] / grid) * grid)
            heading = 0.0 if heading is None else heading
        elif heading is None:
            heading = self.rng.uniform(0.0, 2.0 * math.pi)

        entity_id = self.registry.spawn(kind, ground, heading)
        if entity_id is None:
            self.dispatch_event('on_capacity_rejected', kind)
            return None

        entity = self.registry.get(entity_id)
        if kind is Kind.BONFIRE:
            entity.is_lit = self.clock.is_night
        self.dispatch_event('on_entity_spawned', self._snapshot_of(entity))
        return entity_id

    def remove_entity(self, entity_id: int) -> bool:
        """Removes an entity right away. Returns False if it was already gone."""
        entity = self.registry.remove(entity_id)
        if entity is None:
            return False
        self.dispatch_event('on_entity_removed', entity.id, entity.kind)
        return True

    def query_snapshot(self) -> List[EntitySnapshot]:
        """Current state of every live entity in registry order."""
        return [self._snapshot_of(entity) for entity in self.registry.live()]

    def population_counts(self) -> Dict[str, int]:
        return dict(Counter(entity.kind.metadata.name for entity in self.registry.live()))

    def export_layout(self) -> List[PlacementRecord]:
        """Placement records for every live entity, replayable with restore_layout()."""
        return [
            PlacementRecord(entity.kind.metadata.name, float(entity.position[0]), float(entity.position[2]), entity.heading)
            for entity in self.registry.live()
        ]

    def restore_layout(self, records: Iterable[PlacementRecord]) -> List[Optional[int]]:
        """Places every record through place_entity(). Returns the resulting ids in order."""
        placed = [self.place_entity(r.kind, (r.x, r.z), r.heading) for r in records]
        logger.info("Restored layout: %d of %d placed", sum(1 for p in placed if p is not None), len(placed))
        return placed

    def _snapshot_of(self, entity) -> EntitySnapshot:
        x, _, z = entity.position
        return EntitySnapshot(
            id=entity.id,
            kind=entity.kind,
            position=(float(x), entity.kind.metadata.vertical_offset, float(z)),
            facing=entity.heading,
            pose=entity.pose,
            state=entity.state,
            health=entity.health,
            is_lit=entity.is_lit,
        )

Simulation.register_event_type('on_night_start')
Simulation.register_event_type('on_night_end')
Simulation.register_event_type('on_entity_spawned')
Simulation.register_event_type('on_entity_removed')
Simulation.register_event_type('on_capacity_rejected')
