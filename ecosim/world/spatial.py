"""Nearest-neighbor queries over the entity registry.

Every query is a linear scan over the matching live entities with the
distances computed in one numpy pass. That is fine at the population caps
this simulation runs with; it is the first thing to replace with a grid
if the caps grow by an order of magnitude.
"""

from typing import Iterable, List, Optional, Union

import numpy as np

from ecosim.agents.components import Entity
from ecosim.core import vecmath
from ecosim.world.kinds import Category, Kind
from ecosim.world.registry import EntityRegistry

class SpatialQuery:
    """Distance-based lookups against a registry."""

    def __init__(self, registry: EntityRegistry) -> None:
        self.registry = registry

    def nearest_of_kind(
        self,
        from_position: np.ndarray,
        kinds: Union[Kind, Iterable[Kind]],
        exclude: Optional[int] = None,
        max_distance: Optional[float] = None,
    ) -> Optional[int]:
        """Finds the closest live entity of the given kind(s).

        Args:
            from_position: Point to measure from.
            kinds: A kind or a collection of kinds to consider.
            exclude: Id to skip, usually the asking entity itself.
            max_distance: Ignore candidates farther than this.

        Returns:
            The id of the nearest match, or None when nothing qualifies.
            On exact distance ties the first entity in registry order wins.
        """
        candidates = [e for e in self.registry.live(kinds) if e.id != exclude]
        return self._nearest(from_position, candidates, max_distance)

    def nearest_in_category(
        self,
        from_position: np.ndarray,
        category: Category,
        max_distance: Optional[float] = None,
    ) -> Optional[int]:
        candidates = list(self.registry.live_in_category(category))
        return self._nearest(from_position, candidates, max_distance)

    def nearest_water(self, from_position: np.ndarray) -> Optional[Entity]:
        """Closest water source measured to its edge rather than its center."""
        sources = self.registry.water_sources()
        if not sources:
            return None
        distances = vecmath.distances_from(from_position, self.registry.positions(sources))
        distances -= np.array([s.radius for s in sources])
        return sources[int(np.argmin(distances))]

    def neighbors_within(
        self,
        position: np.ndarray,
        radius: float,
        exclude: Optional[int] = None,
        category: Category = Category.AGENT,
    ) -> List[Entity]:
        """All live entities of a category whose centers lie within radius."""
        candidates = [e for e in self.registry.live_in_category(category) if e.id != exclude]
        if not candidates:
            return []
        distances = vecmath.distances_from(position, self.registry.positions(candidates))
        return [e for e, d in zip(candidates, distances) if d <= radius]

    def _nearest(
        self,
        from_position: np.ndarray,
        candidates: List[Entity],
        max_distance: Optional[float],
    ) -> Optional[int]:
        if not candidates:
            return None
        distances = vecmath.distances_from(from_position, self.registry.positions(candidates))
        index = int(np.argmin(distances)) # argmin returns the first minimum on ties
        if max_distance is not None and distances[index] > max_distance:
            return None
        return candidates[index].id
