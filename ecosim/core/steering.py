"""Force-based steering.

Each tick an agent's forces are summed (separation, seek/flee, wander,
boundary containment, obstacle and water avoidance) and integrated into
its velocity and position on the ground plane.
"""

import math
import random
from typing import List, Optional

import numpy as np

from ecosim.agents.components import Entity
from ecosim.config import SimConfig
from ecosim.core import vecmath
from ecosim.core.behavior import Intent, IntentMode
from ecosim.world.kinds import Kind

GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))

class SteeringEngine:
    """
    Turns an intent plus the surroundings into movement.

    Args:
        config: Steering constants and world radius.
        rng: Random source for wander goal re-rolls. Seed it for reproducible runs.
    """
    def __init__(self, config: SimConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.rng = rng or random.Random()

    def apply(
        self,
        agent: Entity,
        intent: Intent,
        neighbors: List[Entity],
        obstacles: List[Entity],
        water: List[Entity],
        dt: float,
    ) -> np.ndarray:
        """Computes and integrates this tick's force. Returns the force used."""
        force = self.compute_force(agent, intent, neighbors, obstacles, water)
        self.integrate(agent, force, intent, dt)
        return force

    def compute_force(
        self,
        agent: Entity,
        intent: Intent,
        neighbors: List[Entity],
        obstacles: List[Entity],
        water: List[Entity],
    ) -> np.ndarray:
        if intent.mode is IntentMode.SLEEP:
            return vecmath.zero()

        hunt_target = intent.target_id if intent.hunt else None
        force = self.separation(agent, neighbors, hunt_target)
        force += self.pursuit(agent, intent)
        force += self.boundary(agent)
        force += self.avoidance(agent, obstacles, water)
        force[1] = 0.0
        return force

    def separation(self, agent: Entity, neighbors: List[Entity], ignore_id: Optional[int] = None) -> np.ndarray:
        """Average inverse-distance push away from crowding neighbors."""
        cfg = self.config
        total = vecmath.zero()
        contributors = 0
        for other in neighbors:
            if other.id == agent.id or other.id == ignore_id:
                continue
            offset = agent.position - other.position
            dist = vecmath.length(offset)
            if dist > cfg.separation_radius:
                continue
            if dist == 0.0:
                # Coincident agents cannot normalize their offset; push each
                # pair member along opposite halves of an id-derived direction.
                direction = _escape_direction(agent.id, other.id)
                weight = 1.0 / cfg.min_separation_distance
            else:
                direction = offset / dist
                weight = 1.0 / max(dist, cfg.min_separation_distance)
            total += direction * weight
            contributors += 1
        if contributors == 0:
            return total
        return total / contributors * cfg.separation_force

    def pursuit(self, agent: Entity, intent: Intent) -> np.ndarray:
        """Constant-magnitude seek or flee, or a wander toward the agent's goal."""
        cfg = self.config
        if intent.mode is IntentMode.SEEK and intent.target_position is not None:
            return vecmath.normalize(intent.target_position - agent.position) * cfg.pursuit_force
        if intent.mode is IntentMode.FLEE and intent.target_position is not None:
            return vecmath.normalize(agent.position - intent.target_position) * cfg.pursuit_force
        if intent.mode is IntentMode.WANDER:
            self._maybe_reroll_wander_goal(agent)
            if agent.wander_goal is None:
                return vecmath.zero()
            return vecmath.normalize(agent.wander_goal - agent.position) * cfg.pursuit_force
        return vecmath.zero()

    def _maybe_reroll_wander_goal(self, agent: Entity) -> None:
        cfg = self.config
        goal_inside = agent.wander_goal is not None and vecmath.length(agent.wander_goal) <= cfg.world_radius
        if goal_inside and self.rng.random() >= cfg.wander_probability:
            return
        angle = self.rng.uniform(0.0, 2.0 * math.pi)
        reach = self.rng.uniform(0.0, cfg.wander_radius)
        goal = agent.position + vecmath.from_heading(angle, reach)
        # Keep goals inside the world so wandering never fights containment
        if vecmath.length(goal) > cfg.world_radius:
            goal = vecmath.clamp_length(goal, cfg.world_radius)
        agent.wander_goal = goal

    def boundary(self, agent: Entity) -> np.ndarray:
        if vecmath.length(agent.position) <= self.config.world_radius:
            return vecmath.zero()
        return vecmath.normalize(-agent.position) * self.config.boundary_force

    def avoidance(self, agent: Entity, obstacles: List[Entity], water: List[Entity]) -> np.ndarray:
        """Repulsion from nearby obstacles and water, or attraction to water for water-loving kinds."""
        cfg = self.config
        force = vecmath.zero()
        for obstacle in obstacles:
            reach = obstacle.radius + agent.radius + cfg.avoid_margin
            if obstacle.kind is Kind.BONFIRE and obstacle.is_lit:
                reach += cfg.fire_margin
            force += self._repel(agent, obstacle, reach)

        if agent.kind.metadata.water_affinity:
            force += self._water_attraction(agent, water)
        else:
            for source in water:
                force += self._repel(agent, source, source.radius + agent.radius + cfg.avoid_margin)
        return force

    def _repel(self, agent: Entity, feature: Entity, reach: float) -> np.ndarray:
        offset = agent.position - feature.position
        dist = vecmath.length(offset)
        if dist == 0.0 or dist > reach:
            return vecmath.zero()
        return offset / dist * self.config.avoid_force

    def _water_attraction(self, agent: Entity, water: List[Entity]) -> np.ndarray:
        if not water:
            return vecmath.zero()
        nearest = min(water, key=lambda s: vecmath.distance(agent.position, s.position) - s.radius)
        if vecmath.distance(agent.position, nearest.position) <= nearest.radius:
            return vecmath.zero()
        return vecmath.normalize(nearest.position - agent.position) * self.config.water_attraction_force

    def integrate(self, agent: Entity, force: np.ndarray, intent: Intent, dt: float) -> None:
        """Euler step on the ground plane with a speed clamp."""
        if intent.mode is IntentMode.SLEEP:
            agent.velocity = vecmath.zero()
            return
        max_speed = min(agent.kind.metadata.max_speed, intent.desired_speed)
        velocity = agent.velocity + force * dt
        if intent.mode is IntentMode.HOLD:
            velocity *= max(0.0, 1.0 - self.config.hold_damping * dt)
        velocity[1] = 0.0
        agent.velocity = vecmath.clamp_length(velocity, max_speed)
        agent.position = agent.position + agent.velocity * dt
        agent.position[1] = 0.0
        if agent.speed > self.config.facing_speed_threshold:
            agent.heading = vecmath.heading_of(agent.velocity)

def _escape_direction(own_id: int, other_id: int) -> np.ndarray:
    """Unit vector shared by a pair of ids, signed so the two members get opposite halves."""
    low, high = sorted((own_id, other_id))
    direction = vecmath.from_heading(GOLDEN_ANGLE * (low * 31 + high))
    return direction if own_id < other_id else -direction
