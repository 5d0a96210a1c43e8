import itertools
import logging
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Union

import numpy as np

from ecosim.agents.components import AgentState, Entity
from ecosim.core import vecmath
from ecosim.world.kinds import Category, Kind

logger = logging.getLogger(__name__)

KindFilter = Union[Kind, Iterable[Kind], None]

class EntityRegistry:
    """
    Owns every entity in the world: agents, plants, obstacles and water.

    Other entities refer to each other by id only. Removal is the single
    place that invalidates those references, so no caller ever reads a
    dangling target.

    Args:
        max_entities: Cap on live entities whose kind is cap-limited.
    """
    def __init__(self, max_entities: int) -> None:
        self.max_entities: int = max_entities
        self._entities: Dict[int, Entity] = {} # Insertion order is the tick enumeration order
        self._ids = itertools.count(1)
        self._pending_removal: List[int] = []

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def spawn(self, kind: Kind, position: vecmath.VecLike, heading: float = 0.0) -> Optional[int]:
        """
        Creates an entity with the kind's defaults.

        Args:
            kind: Kind of the new entity.
            position: (x, z) or (x, y, z) world position; y is dropped.
            heading: Initial facing in radians.

        Returns:
            The new id, or None when the kind is cap-limited and the cap is reached.
        """
        meta = kind.metadata
        if meta.cap_limited and self.count_capped() >= self.max_entities:
            logger.debug("Spawn of %s rejected: population cap %d reached", meta.name, self.max_entities)
            return None

        entity_id = next(self._ids)
        entity = Entity(
            id=entity_id,
            kind=kind,
            position=vecmath.to_ground(position),
            heading=heading,
            health=meta.max_health,
            radius=meta.radius,
        )
        if kind.is_agent:
            entity.wander_goal = entity.position.copy()
        self._entities[entity_id] = entity
        logger.debug("Spawned %s #%d at (%.2f, %.2f)", meta.name, entity_id, entity.position[0], entity.position[2])
        return entity_id

    def get(self, entity_id: Optional[int]) -> Optional[Entity]:
        """Returns the entity for an id, including ones pending removal."""
        if entity_id is None:
            return None
        return self._entities.get(entity_id)

    def get_live(self, entity_id: Optional[int]) -> Optional[Entity]:
        """Returns the entity only if it exists and is not pending removal."""
        entity = self.get(entity_id)
        if entity is None or not entity.alive:
            return None
        return entity

    def mark_dead(self, entity_id: int) -> bool:
        """
        Moves an entity to dead-pending-removal and queues it for reconcile().

        Returns:
            True on the first call for a live entity, False otherwise.
        """
        entity = self._entities.get(entity_id)
        if entity is None or not entity.alive:
            return False
        entity.state = AgentState.DEAD_PENDING_REMOVAL
        entity.velocity = vecmath.zero()
        entity.target = None
        self._pending_removal.append(entity_id)
        logger.debug("%s #%d marked for removal", entity.kind.metadata.name, entity_id)
        return True

    def remove(self, entity_id: int) -> Optional[Entity]:
        """
        Deletes an entity now and clears every target that pointed at it.

        Removing an unknown id is a no-op.
        """
        entity = self._entities.pop(entity_id, None)
        if entity is None:
            return None
        if entity_id in self._pending_removal:
            self._pending_removal.remove(entity_id)
        self._clear_targets(entity_id)
        logger.debug("Removed %s #%d", entity.kind.metadata.name, entity_id)
        return entity

    def reconcile(self) -> List[Entity]:
        """Physically removes everything queued by mark_dead(), each entity once."""
        removed: List[Entity] = []
        pending, self._pending_removal = self._pending_removal, []
        for entity_id in pending:
            entity = self._entities.pop(entity_id, None)
            if entity is None:
                continue
            self._clear_targets(entity_id)
            removed.append(entity)
        if removed:
            logger.debug("Reconciled %d removals", len(removed))
        return removed

    def _clear_targets(self, entity_id: int) -> None:
        for other in self._entities.values():
            if other.target == entity_id:
                other.target = None

    def live(self, kinds: KindFilter = None) -> Iterator[Entity]:
        """
        Iterates over live entities in insertion order.

        Each call returns a fresh generator. Entities that die or are removed
        while the generator is suspended are skipped when reached.

        Args:
            kinds: Optional kind or collection of kinds to keep.
        """
        wanted = _as_kind_set(kinds)
        for entity in list(self._entities.values()):
            if not entity.alive or entity.id not in self._entities:
                continue
            if wanted is None or entity.kind in wanted:
                yield entity

    def live_in_category(self, *categories: Category) -> Iterator[Entity]:
        for entity in self.live():
            if entity.kind.metadata.category in categories:
                yield entity

    def obstacles(self) -> List[Entity]:
        return list(self.live_in_category(Category.OBSTACLE))

    def water_sources(self) -> List[Entity]:
        return list(self.live_in_category(Category.WATER))

    def agents(self) -> List[Entity]:
        return list(self.live_in_category(Category.AGENT))

    def count(self, kind: Kind) -> int:
        return sum(1 for _ in self.live(kind))

    def count_capped(self) -> int:
        """Number of live entities whose kind counts toward the population cap."""
        return sum(1 for e in self._entities.values() if e.alive and e.kind.metadata.cap_limited)

    def positions(self, entities: List[Entity]) -> np.ndarray:
        """Stacks entity positions into an (n, 3) array."""
        if not entities:
            return np.empty((0, 3), dtype=np.float64)
        return np.stack([e.position for e in entities])

def _as_kind_set(kinds: KindFilter) -> Optional[FrozenSet[Kind]]:
    if kinds is None:
        return None
    if isinstance(kinds, Kind):
        return frozenset((kinds,))
    return frozenset(kinds)
