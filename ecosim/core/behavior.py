"""Per-species decision making.

Each agent kind maps to an ordered tuple of rules in BEHAVIOR_TABLE. Every
tick the selector walks that tuple and the first rule that returns an
Intent wins. Adding a species means adding one table entry.
"""

import logging
from enum import Enum, auto
from typing import Callable, Dict, NamedTuple, Optional, Tuple

import numpy as np

from ecosim.agents.components import AgentState, Entity
from ecosim.config import SimConfig
from ecosim.core import vecmath
from ecosim.core.clock import WorldClock
from ecosim.world.kinds import DIET_KINDS, PREDATOR_KINDS, TARGET_KINDS, Kind
from ecosim.world.registry import EntityRegistry
from ecosim.world.spatial import SpatialQuery

logger = logging.getLogger(__name__)

class IntentMode(Enum):
    """How the steering engine should treat an intent's target."""
    HOLD = auto()    # No goal; only environmental forces apply
    WANDER = auto()  # Steer toward the agent's wander goal
    SEEK = auto()
    FLEE = auto()
    SLEEP = auto()   # No movement at all

class Intent(NamedTuple):
    """
    The outcome of behavior selection for one agent on one tick.

    Attributes:
        state: State label the agent takes on.
        mode: How steering treats the target.
        target_id: Entity the intent is about, if any.
        target_position: Where that entity is right now.
        desired_speed: Speed cap for this tick, never above the species max.
        hunt: True when target_id is something to attack on contact.
    """
    state: AgentState
    mode: IntentMode
    target_id: Optional[int] = None
    target_position: Optional[np.ndarray] = None
    desired_speed: float = 0.0
    hunt: bool = False

Rule = Callable[[Entity, 'BehaviorSelector'], Optional[Intent]]

# Kinds whose kills at night count toward waking the protectors
KILL_TRACKING_KINDS = frozenset({Kind.WOLF})

class BehaviorSelector:
    """
    Picks an intent per agent and resolves attacks and meals.

    Args:
        registry: Source of live entities.
        spatial: Query helper over the same registry.
        clock: World clock, read for the night override and kill tally.
        config: Tuning constants.
    """
    def __init__(self, registry: EntityRegistry, spatial: SpatialQuery, clock: WorldClock, config: SimConfig) -> None:
        self.registry = registry
        self.spatial = spatial
        self.clock = clock
        self.config = config
        self.daily_kill_caps: Dict[Kind, int] = {Kind.FOX: config.fox_daily_kill_cap}

    @property
    def protectors_alert(self) -> bool:
        """Protectors turn alert once enough prey has been lost tonight."""
        return self.clock.night_kill_count >= self.config.alert_kill_threshold

    def decide(self, agent: Entity) -> Intent:
        """Evaluates the agent's rule list and records the chosen state and target on it."""
        if self.clock.is_night and agent.kind.sleeps_at_night:
            intent = Intent(state=AgentState.SLEEPING, mode=IntentMode.SLEEP)
        else:
            intent = None
            for rule in BEHAVIOR_TABLE.get(agent.kind, (idle,)):
                intent = rule(agent, self)
                if intent is not None:
                    break
            if intent is None:
                intent = idle(agent, self)

        agent.state = intent.state
        agent.target = intent.target_id
        return intent

    def resolve(self, agent: Entity, intent: Intent) -> None:
        """Applies contact effects for this tick: an attack, then a meal."""
        if intent.mode is IntentMode.SLEEP:
            return
        if intent.hunt:
            self._resolve_attack(agent, intent)
        if DIET_KINDS[agent.kind]:
            self._resolve_consumption(agent)

    def _resolve_attack(self, agent: Entity, intent: Intent) -> None:
        target = self.registry.get_live(intent.target_id)
        if target is None:
            return
        if vecmath.distance(agent.position, target.position) > self.config.attack_range:
            return
        agent.state = AgentState.FIGHTING
        if agent.cooldown_remaining > 0:
            return

        target.health = max(0, target.health - self.config.attack_damage)
        agent.cooldown_remaining = self.config.attack_cooldown
        agent.daily_interaction_count += 1
        if target.health <= 0 and self.registry.mark_dead(target.id):
            logger.debug("%s #%d killed %s #%d", agent.kind.metadata.name, agent.id, target.kind.metadata.name, target.id)
            agent.target = None
            if agent.kind in KILL_TRACKING_KINDS and self.clock.is_night:
                kills = self.clock.record_night_kill()
                if kills == self.config.alert_kill_threshold:
                    logger.info("Night kill count reached %d, protectors are alert", kills)

    def _resolve_consumption(self, agent: Entity) -> None:
        food_id = self.spatial.nearest_of_kind(agent.position, DIET_KINDS[agent.kind], max_distance=self.config.eat_range)
        if food_id is None or not self.registry.mark_dead(food_id):
            return
        meta = agent.kind.metadata
        agent.health = min(meta.max_health, agent.health + meta.food_value)
        agent.hunger = 0.0
        if agent.target == food_id:
            agent.target = None
        logger.debug("%s #%d ate #%d", meta.name, agent.id, food_id)

    def speed_for(self, agent: Entity, fraction: float = 1.0) -> float:
        return agent.kind.metadata.max_speed * fraction

# --- Rules ---
# Each rule returns an Intent when its precondition holds, otherwise None.

def flee_alert_protector(agent: Entity, ctx: BehaviorSelector) -> Optional[Intent]:
    if not ctx.protectors_alert:
        return None
    threat = ctx.registry.get(ctx.spatial.nearest_of_kind(agent.position, Kind.DOG, exclude=agent.id, max_distance=ctx.config.threat_flee_radius))
    if threat is None:
        return None
    return Intent(AgentState.FLEEING, IntentMode.FLEE, threat.id, threat.position.copy(), ctx.speed_for(agent))

def hunt_prey(agent: Entity, ctx: BehaviorSelector) -> Optional[Intent]:
    cap = ctx.daily_kill_caps.get(agent.kind)
    if cap is not None and agent.daily_interaction_count >= cap:
        return None
    return _pursue(agent, ctx, ctx.config.hunt_radius)

def chase_threat(agent: Entity, ctx: BehaviorSelector) -> Optional[Intent]:
    radius = ctx.config.alert_radius if ctx.protectors_alert else ctx.config.guard_radius
    return _pursue(agent, ctx, radius)

def _pursue(agent: Entity, ctx: BehaviorSelector, radius: float) -> Optional[Intent]:
    quarry = ctx.registry.get(ctx.spatial.nearest_of_kind(agent.position, TARGET_KINDS[agent.kind], exclude=agent.id, max_distance=radius))
    if quarry is None:
        return None
    in_range = vecmath.distance(agent.position, quarry.position) <= ctx.config.attack_range
    state = AgentState.FIGHTING if in_range else AgentState.SEEKING
    return Intent(state, IntentMode.SEEK, quarry.id, quarry.position.copy(), ctx.speed_for(agent), hunt=True)

def flee_predator(agent: Entity, ctx: BehaviorSelector) -> Optional[Intent]:
    threat = ctx.registry.get(ctx.spatial.nearest_of_kind(agent.position, PREDATOR_KINDS, exclude=agent.id, max_distance=ctx.config.danger_radius))
    if threat is None:
        return None
    return Intent(AgentState.FLEEING, IntentMode.FLEE, threat.id, threat.position.copy(), ctx.speed_for(agent))

def seek_food(agent: Entity, ctx: BehaviorSelector) -> Optional[Intent]:
    if agent.hunger < ctx.config.hunger_threshold:
        return None
    food = ctx.registry.get(ctx.spatial.nearest_of_kind(agent.position, DIET_KINDS[agent.kind], max_distance=ctx.config.food_search_radius))
    if food is None:
        return None
    return Intent(AgentState.SEEKING, IntentMode.SEEK, food.id, food.position.copy(), ctx.speed_for(agent))

def wander(agent: Entity, ctx: BehaviorSelector) -> Optional[Intent]:
    return Intent(AgentState.WANDERING, IntentMode.WANDER, desired_speed=ctx.speed_for(agent, ctx.config.wander_speed_fraction))

def idle(agent: Entity, ctx: BehaviorSelector) -> Optional[Intent]:
    return Intent(AgentState.IDLE, IntentMode.HOLD, desired_speed=ctx.speed_for(agent, ctx.config.idle_speed_fraction))

PREY_RULES: Tuple[Rule, ...] = (flee_predator, seek_food, wander)
PASSIVE_RULES: Tuple[Rule, ...] = (flee_predator, wander)

BEHAVIOR_TABLE: Dict[Kind, Tuple[Rule, ...]] = {
    Kind.WOLF: (flee_alert_protector, hunt_prey, wander),
    Kind.FOX: (hunt_prey, wander),
    Kind.DOG: (chase_threat, idle),
    Kind.SHEEP: PREY_RULES,
    Kind.RABBIT: PREY_RULES,
    Kind.CHICKEN: PREY_RULES,
    Kind.DUCK: PASSIVE_RULES,
    Kind.CAT: PASSIVE_RULES,
}
