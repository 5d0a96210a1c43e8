import logging
import math
import random
from typing import TYPE_CHECKING, Dict, Optional

import numpy as np

from ecosim.config import SimConfig
from ecosim.core import vecmath
from ecosim.world.kinds import Category, Kind

if TYPE_CHECKING:
    from ecosim.core.simulation import Simulation

logger = logging.getLogger(__name__)

# Placement parameters, as fractions of the world radius unless noted
POND_SPREAD = 0.6
TREE_CLUSTER_SPREAD = 0.85
TREE_CLUSTER_SIZE = (3, 6)
TREE_CLUSTER_SIGMA = 2.5 # World units
ROCK_SPREAD = 0.9
PATCH_SPREAD = 0.8
PATCH_SIZE = (3, 6)
PATCH_SIGMA = 1.5 # World units
ANIMAL_SPREAD = 0.7
PEN_HALF_SIZE = 3 # Snap-grid cells from pen center to each side
FLOWERS_PER_PATCH = 1

MAX_PLACEMENT_ATTEMPTS = 50
CLEARANCE = 0.5 # Extra room kept between a new feature and existing ones

class ScenerySeeder:
    """Lays out the starting world: water, trees, rocks, a pen, plants and animals.

    Layout depends only on the rng, so two seeders built with equally seeded
    generators produce the same world on fresh simulations.
    """

    def __init__(self, config: SimConfig, rng: Optional[random.Random] = None) -> None:
        """Initializes the seeder.

        Args:
            config: Supplies world radius, feature counts and the initial population.
            rng: Random source. Defaults to one seeded from config.seed.
        """
        self.config = config
        self.rng = rng or random.Random(config.seed)
        self.kind_counts: Dict[Kind, int] = {}

    def populate(self, sim: 'Simulation') -> Dict[Kind, int]:
        """Places the full starting layout into sim and returns how many of each kind landed."""
        self.kind_counts.clear()
        radius = self.config.world_radius

        for _ in range(self.config.pond_count):
            self._place_clear(sim, Kind.POND, radius * POND_SPREAD)

        for _ in range(self.config.tree_clusters):
            center = self._random_point(radius * TREE_CLUSTER_SPREAD)
            for _ in range(self.rng.randint(*TREE_CLUSTER_SIZE)):
                self._place_near(sim, Kind.TREE, center, TREE_CLUSTER_SIGMA)

        for _ in range(self.config.rock_count):
            self._place_clear(sim, Kind.ROCK, radius * ROCK_SPREAD)

        self._build_pen(sim)

        for _ in range(self.config.bonfire_count):
            self._place_clear(sim, Kind.BONFIRE, radius * 0.3)

        food_kinds = [Kind.GRASS, Kind.CARROT]
        for i in range(self.config.plant_patches):
            kind = food_kinds[i % len(food_kinds)]
            center = self._random_point(radius * PATCH_SPREAD)
            for _ in range(self.rng.randint(*PATCH_SIZE)):
                self._place_near(sim, kind, center, PATCH_SIGMA)
            for _ in range(FLOWERS_PER_PATCH):
                self._place_near(sim, Kind.FLOWER, center, PATCH_SIGMA * 2)

        for name, count in self.config.initial_population.items():
            kind = Kind.parse(name)
            for _ in range(count):
                self._place_clear(sim, kind, radius * ANIMAL_SPREAD)

        logger.info("Scenery seeded: %s", ", ".join(f"{k.metadata.name}={n}" for k, n in self.kind_counts.items()))
        return dict(self.kind_counts)

    def _build_pen(self, sim: 'Simulation') -> None:
        """A square of fence segments on the snap grid with a one-segment gate on the south side."""
        grid = self.config.snap_grid
        center = self._random_point(self.config.world_radius * 0.5)
        cx = round(center[0] / grid)
        cz = round(center[2] / grid)
        side = range(-PEN_HALF_SIZE, PEN_HALF_SIZE + 1)
        for offset in side:
            if offset != 0: # Gate
                self._place(sim, Kind.FENCE, ((cx + offset) * grid, (cz - PEN_HALF_SIZE) * grid), heading=math.pi / 2)
            self._place(sim, Kind.FENCE, ((cx + offset) * grid, (cz + PEN_HALF_SIZE) * grid), heading=math.pi / 2)
        for offset in side[1:-1]:
            self._place(sim, Kind.FENCE, ((cx - PEN_HALF_SIZE) * grid, (cz + offset) * grid), heading=0.0)
            self._place(sim, Kind.FENCE, ((cx + PEN_HALF_SIZE) * grid, (cz + offset) * grid), heading=0.0)

    def _random_point(self, reach: float) -> np.ndarray:
        distance = reach * math.sqrt(self.rng.random())
        return vecmath.from_heading(self.rng.uniform(0.0, 2.0 * math.pi), distance)

    def _is_clear(self, sim: 'Simulation', kind: Kind, position: np.ndarray) -> bool:
        """True when nothing solid or wet overlaps a new entity of kind at position."""
        own_radius = kind.metadata.radius
        for feature in sim.registry.live_in_category(Category.OBSTACLE, Category.WATER):
            if vecmath.distance(position, feature.position) < feature.radius + own_radius + CLEARANCE:
                return False
        return True

    def _place_clear(self, sim: 'Simulation', kind: Kind, reach: float) -> Optional[int]:
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            position = self._random_point(reach)
            if self._is_clear(sim, kind, position):
                return self._place(sim, kind, position)
        logger.warning("No clear spot for %s after %d attempts, skipping", kind.metadata.name, MAX_PLACEMENT_ATTEMPTS)
        return None

    def _place_near(self, sim: 'Simulation', kind: Kind, center: np.ndarray, sigma: float) -> Optional[int]:
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            position = center + vecmath.vec(self.rng.gauss(0.0, sigma), self.rng.gauss(0.0, sigma))
            position = vecmath.clamp_length(position, self.config.world_radius)
            if self._is_clear(sim, kind, position):
                return self._place(sim, kind, position)
        return None

    def _place(self, sim: 'Simulation', kind: Kind, position: vecmath.VecLike, heading: Optional[float] = None) -> Optional[int]:
        if heading is None:
            heading = self.rng.uniform(0.0, 2.0 * math.pi)
        entity_id = sim.place_entity(kind, position, heading)
        if entity_id is not None:
            self.kind_counts[kind] = self.kind_counts.get(kind, 0) + 1
        return entity_id
