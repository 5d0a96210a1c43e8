from enum import Enum, auto
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Tuple, Union

from ecosim.exceptions import UnknownKindError

class Category(Enum):
    """Broad class of an entity kind; decides which systems touch it."""
    AGENT = auto()
    FOOD = auto()     # Edible plants, consumed instantly
    PLANT = auto()    # Decorative plants, never eaten
    OBSTACLE = auto()
    WATER = auto()

class Role(Enum):
    """Behavioral role of an agent kind."""
    NONE = auto()
    PREY = auto()       # Flees, and seeks food when hungry
    PASSIVE = auto()    # Flees, otherwise wanders
    PREDATOR = auto()
    PROTECTOR = auto()

@dataclass(frozen=True)
class KindMetadata:
    """Static properties shared by every entity of a kind.

    Args:
        name: Lowercase kind name, also the lookup key used by `Kind.parse`.
        category: Which broad class the kind belongs to.
        role: Behavioral role (agents only).
        base_color: RGB tuple used by the debug viewer.
        radius: Collision / interaction radius in world units.
        max_speed: Upper bound on agent speed in world units per second.
        max_health: Starting and maximum health for agents.
        cap_limited: Whether the kind counts toward the global population cap.
        snap: Whether placement locks to the snap grid.
        vertical_offset: Height of the visual's center above the ground.
        water_affinity: Attracted to water instead of repelled by it.
        night_exclusive: Removed at the start of every day.
        targets: Names of the kinds this agent hunts (or chases, for protectors).
        diet: Names of the food kinds this agent eats.
        hunger_rate: Hunger gained per second (0..1 scale).
        food_value: Health restored by one meal.
    """
    name: str
    category: Category
    base_color: Tuple[int, int, int]
    role: Role = Role.NONE
    radius: float = 0.5
    max_speed: float = 0.0
    max_health: int = 0
    cap_limited: bool = False
    snap: bool = False
    vertical_offset: float = 0.0
    water_affinity: bool = False
    night_exclusive: bool = False
    targets: Tuple[str, ...] = ()
    diet: Tuple[str, ...] = ()
    hunger_rate: float = 0.0
    food_value: int = 0

class Kind(Enum):
    """Closed set of entity kinds.

    Each enum member holds KindMetadata.
    """
    # Prey
    SHEEP = KindMetadata(name="sheep", category=Category.AGENT, base_color=(240, 240, 240), role=Role.PREY, radius=0.6, max_speed=3.0, max_health=5, cap_limited=True, diet=("grass",), hunger_rate=0.02, food_value=2)
    RABBIT = KindMetadata(name="rabbit", category=Category.AGENT, base_color=(200, 170, 140), role=Role.PREY, radius=0.3, max_speed=4.5, max_health=3, cap_limited=True, diet=("carrot", "grass"), hunger_rate=0.03, food_value=2)
    CHICKEN = KindMetadata(name="chicken", category=Category.AGENT, base_color=(250, 220, 120), role=Role.PREY, radius=0.3, max_speed=2.5, max_health=2, cap_limited=True, diet=("grass",), hunger_rate=0.025, food_value=1)

    # Passive
    DUCK = KindMetadata(name="duck", category=Category.AGENT, base_color=(255, 255, 255), role=Role.PASSIVE, radius=0.35, max_speed=2.5, max_health=3, cap_limited=True, water_affinity=True)
    CAT = KindMetadata(name="cat", category=Category.AGENT, base_color=(60, 60, 60), role=Role.PASSIVE, radius=0.3, max_speed=4.0, max_health=4, cap_limited=True)

    # Predators and protectors
    FOX = KindMetadata(name="fox", category=Category.AGENT, base_color=(230, 110, 30), role=Role.PREDATOR, radius=0.4, max_speed=5.0, max_health=5, cap_limited=True, targets=("rabbit", "chicken", "duck"))
    WOLF = KindMetadata(name="wolf", category=Category.AGENT, base_color=(110, 110, 120), role=Role.PREDATOR, radius=0.6, max_speed=5.5, max_health=8, cap_limited=True, night_exclusive=True, targets=("sheep", "rabbit", "chicken", "duck", "cat"))
    DOG = KindMetadata(name="dog", category=Category.AGENT, base_color=(150, 90, 40), role=Role.PROTECTOR, radius=0.5, max_speed=6.0, max_health=8, cap_limited=True, targets=("wolf", "fox"))

    # Plants
    CARROT = KindMetadata(name="carrot", category=Category.FOOD, base_color=(255, 140, 0), radius=0.2)
    GRASS = KindMetadata(name="grass", category=Category.FOOD, base_color=(90, 180, 70), radius=0.3)
    FLOWER = KindMetadata(name="flower", category=Category.PLANT, base_color=(230, 80, 180), radius=0.2)

    # Static features
    TREE = KindMetadata(name="tree", category=Category.OBSTACLE, base_color=(34, 139, 34), radius=1.2)
    ROCK = KindMetadata(name="rock", category=Category.OBSTACLE, base_color=(128, 128, 128), radius=0.8)
    FENCE = KindMetadata(name="fence", category=Category.OBSTACLE, base_color=(139, 69, 19), radius=1.0, snap=True, vertical_offset=0.5)
    WALL = KindMetadata(name="wall", category=Category.OBSTACLE, base_color=(120, 90, 60), radius=1.0, snap=True, vertical_offset=1.0)
    BONFIRE = KindMetadata(name="bonfire", category=Category.OBSTACLE, base_color=(255, 69, 0), radius=0.5)
    POND = KindMetadata(name="pond", category=Category.WATER, base_color=(30, 144, 255), radius=2.0, vertical_offset=0.05)

    @property
    def metadata(self) -> KindMetadata:
        return self.value

    @property
    def is_agent(self) -> bool:
        return self.value.category is Category.AGENT

    @property
    def is_food(self) -> bool:
        return self.value.category is Category.FOOD

    @property
    def is_static(self) -> bool:
        """Obstacles and water never move and never act."""
        return self.value.category in (Category.OBSTACLE, Category.WATER)

    @property
    def sleeps_at_night(self) -> bool:
        """Every agent except predators and protectors sleeps through the night."""
        return self.is_agent and self.value.role not in (Role.PREDATOR, Role.PROTECTOR)

    @classmethod
    def parse(cls, value: Union['Kind', str]) -> 'Kind':
        """Resolves a Kind from a member or a case-insensitive kind name.

        Raises:
            UnknownKindError: If the name does not match any kind.
        """
        if isinstance(value, Kind):
            return value
        kind = _BY_NAME.get(str(value).strip().lower())
        if kind is None:
            raise UnknownKindError(f"Unknown entity kind: {value!r}")
        return kind

    @classmethod
    def get_all_kinds(cls) -> List['Kind']:
        return list(cls)

_BY_NAME: Dict[str, Kind] = {kind.value.name: kind for kind in Kind}

# Resolved lookups, so systems never touch kind names at tick time
TARGET_KINDS: Dict[Kind, FrozenSet[Kind]] = {
    kind: frozenset(_BY_NAME[name] for name in kind.value.targets) for kind in Kind
}
DIET_KINDS: Dict[Kind, FrozenSet[Kind]] = {
    kind: frozenset(_BY_NAME[name] for name in kind.value.diet) for kind in Kind
}
PREDATOR_KINDS: FrozenSet[Kind] = frozenset(k for k in Kind if k.value.role is Role.PREDATOR)
AGENT_KINDS: FrozenSet[Kind] = frozenset(k for k in Kind if k.is_agent)
