from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from ecosim.core import vecmath
from ecosim.world.kinds import Kind

class AgentState(Enum):
    """What an entity is doing this tick."""
    IDLE = "idle"
    WANDERING = "wandering"
    SEEKING = "seeking"
    FLEEING = "fleeing"
    FIGHTING = "fighting"
    SLEEPING = "sleeping"
    DEAD_PENDING_REMOVAL = "dead-pending-removal"

class Pose(Enum):
    """Visual pose the renderer should show."""
    STANDING = "standing"
    LYING = "lying"

@dataclass
class Entity:
    """A mobile agent or a static placed feature.

    `target` is a weak reference: it holds an id, never the entity itself,
    and the registry clears it when the referent is removed.
    """
    id: int
    kind: Kind
    position: np.ndarray
    velocity: np.ndarray = field(default_factory=vecmath.zero)
    heading: float = 0.0
    health: int = 0
    hunger: float = 0.0
    state: AgentState = AgentState.IDLE
    target: Optional[int] = None
    cooldown_remaining: float = 0.0
    wander_goal: Optional[np.ndarray] = None
    daily_interaction_count: int = 0
    radius: float = 0.5
    is_lit: bool = False # Bonfires only

    @property
    def alive(self) -> bool:
        return self.state is not AgentState.DEAD_PENDING_REMOVAL

    @property
    def is_agent(self) -> bool:
        return self.kind.is_agent

    @property
    def max_health(self) -> int:
        return self.kind.metadata.max_health

    @property
    def pose(self) -> Pose:
        return Pose.LYING if self.state is AgentState.SLEEPING else Pose.STANDING

    @property
    def speed(self) -> float:
        return vecmath.length(self.velocity)
