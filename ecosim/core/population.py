"""Population control driven by the day/night clock.

Night brings a cohort of wolves in from the edge of the world; day sends
them away again and resets the per-cycle counters. In between, plants
regrow slowly up to a small cap.
"""

import logging
import math
import random
from typing import TYPE_CHECKING, List, Optional

from ecosim.agents.components import AgentState
from ecosim.core import vecmath
from ecosim.core.clock import ClockTick
from ecosim.core.systems import System
from ecosim.world.kinds import Kind

if TYPE_CHECKING:
    from ecosim.core.simulation import Simulation

logger = logging.getLogger(__name__)

NIGHT_PREDATOR = Kind.WOLF

class PopulationController(System):
    """
    Reacts to clock transitions and runs background plant growth.

    Runs before the agent pass so that agents see this tick's population.

    Attributes:
        growth_timer: Ticks since the last growth attempt.
    """
    priority = 10

    def __init__(self, sim: 'Simulation', rng: Optional[random.Random] = None) -> None:
        super().__init__(sim)
        self.rng = rng or random.Random()
        self.growth_timer: int = 0
        self._growth_index: int = 0
        self.growth_kinds: List[Kind] = [Kind.parse(name) for name in sim.config.growth_kinds]

    def process(self, dt: float, clock_tick: ClockTick) -> None:
        if clock_tick.night_started:
            self.on_night_start()
        elif clock_tick.day_started:
            self.on_day_start()
        self.grow()

    def on_night_start(self) -> List[int]:
        """Resets the kill tally, lights bonfires and brings in the night predators."""
        sim = self.sim
        sim.clock.reset_night_kills()
        self._set_bonfires(lit=True)

        spawned: List[int] = []
        for _ in range(sim.config.predators_per_night):
            angle = self.rng.uniform(0.0, 2.0 * math.pi)
            position = vecmath.from_heading(angle, sim.config.world_radius)
            entity_id = sim.place_entity(NIGHT_PREDATOR, position, heading=angle + math.pi)
            if entity_id is None:
                logger.info("Population cap reached after %d of %d night predators", len(spawned), sim.config.predators_per_night)
                break
            spawned.append(entity_id)
        logger.info("Night cohort: %d %s spawned", len(spawned), NIGHT_PREDATOR.metadata.name)
        return spawned

    def on_day_start(self) -> List[int]:
        """Sends night-exclusive predators away, wakes sleepers and resets daily counters."""
        sim = self.sim
        night_only = [kind for kind in Kind if kind.metadata.night_exclusive]
        removed = [agent.id for agent in list(sim.registry.live(night_only))]
        for entity_id in removed:
            sim.remove_entity(entity_id)

        for agent in sim.registry.agents():
            agent.daily_interaction_count = 0
            if agent.state is AgentState.SLEEPING:
                agent.state = AgentState.IDLE
        self._set_bonfires(lit=False)
        logger.info("Day break: %d night predators left", len(removed))
        return removed

    def grow(self) -> Optional[int]:
        """Attempts one plant spawn every growth interval while below the growth cap."""
        config = self.sim.config
        self.growth_timer += 1
        if self.growth_timer < config.growth_interval_ticks or not self.growth_kinds:
            return None
        self.growth_timer = 0

        kind = self.growth_kinds[self._growth_index % len(self.growth_kinds)]
        self._growth_index += 1
        if self.sim.registry.count(kind) >= config.growth_cap:
            return None
        # sqrt keeps the points uniform over the disc rather than bunched at the center
        reach = config.world_radius * math.sqrt(self.rng.random())
        position = vecmath.from_heading(self.rng.uniform(0.0, 2.0 * math.pi), reach)
        return self.sim.place_entity(kind, position)

    def _set_bonfires(self, lit: bool) -> None:
        for bonfire in self.sim.registry.live(Kind.BONFIRE):
            bonfire.is_lit = lit
