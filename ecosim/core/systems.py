from typing import TYPE_CHECKING

import esper

from ecosim.core.clock import ClockTick
from ecosim.world.kinds import AGENT_KINDS

if TYPE_CHECKING:
    from ecosim.core.simulation import Simulation

class System(esper.Processor):
    """Base class for the per-tick systems.

    Systems follow esper's Processor contract (`priority`, `process`), but the
    Simulation owns and calls its own ordered list instead of registering them
    in esper's module-level world, so several simulations can coexist.
    Higher priority runs first, as in esper.
    """
    priority: int = 0

    def __init__(self, sim: 'Simulation') -> None:
        super().__init__()
        self.sim = sim

    def process(self, dt: float, clock_tick: ClockTick) -> None:
        raise NotImplementedError

class AgentSystem(System):
    """Runs behavior selection, contact resolution and steering for every live agent."""
    priority = 5

    def process(self, dt: float, clock_tick: ClockTick) -> None:
        sim = self.sim
        registry = sim.registry
        obstacles = registry.obstacles()
        water = registry.water_sources()
        separation_radius = sim.config.separation_radius

        # Fixed enumeration order from a snapshot; entities that die during
        # the pass stay in the registry as pending and are skipped here.
        for agent in list(registry.live(AGENT_KINDS)):
            if not agent.alive:
                continue
            agent.cooldown_remaining = max(0.0, agent.cooldown_remaining - dt)
            agent.hunger = min(1.0, agent.hunger + agent.kind.metadata.hunger_rate * dt)

            intent = sim.selector.decide(agent)
            sim.selector.resolve(agent, intent)
            neighbors = sim.spatial.neighbors_within(agent.position, separation_radius, exclude=agent.id)
            sim.steering.apply(agent, intent, neighbors, obstacles, water, dt)
