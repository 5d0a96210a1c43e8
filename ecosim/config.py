from dataclasses import dataclass, field
from typing import Dict, Tuple

from ecosim.exceptions import ConfigurationError

@dataclass
class SimConfig:
    """Configuration settings for the EcoSim simulation and engine."""
    seed: int = 42

    # World
    world_radius: float = 40.0
    snap_grid: float = 2.0 # Fences and walls lock to this grid on x/z

    # Day/night clock
    cycle_duration: float = 120.0 # Seconds for one full day + night
    start_time: float = 0.0

    # Population
    max_entities: int = 60 # Cap on live cap-limited agents
    predators_per_night: int = 3
    growth_interval_ticks: int = 50
    growth_cap: int = 20
    growth_kinds: Tuple[str, ...] = ("grass", "carrot")

    # Combat
    attack_range: float = 1.2
    attack_damage: int = 2
    attack_cooldown: float = 1.5
    alert_kill_threshold: int = 2 # Night kills before dogs turn alert
    fox_daily_kill_cap: int = 2

    # Perception
    danger_radius: float = 8.0 # Prey flee predators inside this
    hunt_radius: float = 18.0
    guard_radius: float = 6.0 # Dog chases predators inside this when calm
    alert_radius: float = 16.0 # ...and inside this once alert
    threat_flee_radius: float = 10.0 # Wolves flee alert dogs inside this
    food_search_radius: float = 15.0
    eat_range: float = 1.0
    hunger_threshold: float = 0.5

    # Steering
    separation_radius: float = 1.5
    separation_force: float = 6.0
    min_separation_distance: float = 0.1
    pursuit_force: float = 10.0
    wander_probability: float = 0.02 # Per-tick chance to re-roll the wander goal
    wander_radius: float = 8.0
    wander_speed_fraction: float = 0.4
    idle_speed_fraction: float = 0.25
    hold_damping: float = 2.0 # Velocity bleed per second while idle
    boundary_force: float = 25.0
    avoid_margin: float = 1.0
    avoid_force: float = 12.0
    fire_margin: float = 3.0 # Extra berth given to a lit bonfire
    water_attraction_force: float = 4.0
    facing_speed_threshold: float = 0.05

    # Initial scenery
    initial_population: Dict[str, int] = field(default_factory=lambda: {
        "sheep": 8,
        "rabbit": 6,
        "chicken": 4,
        "duck": 3,
        "cat": 2,
        "dog": 2,
        "fox": 1,
    })
    pond_count: int = 2
    tree_clusters: int = 4
    rock_count: int = 6
    bonfire_count: int = 1
    plant_patches: int = 5

    # Engine
    target_fps: float = 60.0
    max_frame_dt: float = 0.25 # Longer frames are clamped to this
    game_speed_multiplier: float = 1.0
    headless_mode: bool = False
    window_width: int = 1024
    window_height: int = 768
    pixels_per_unit: float = 8.0
    camera_pan_speed: float = 300.0 # Pixels per second

    def validate(self) -> None:
        """Checks the settings that the simulation cannot run without.

        Raises:
            ConfigurationError: If a duration, radius or cap is out of range.
        """
        if self.cycle_duration <= 0:
            raise ConfigurationError(f"cycle_duration must be positive, got {self.cycle_duration}")
        if self.world_radius <= 0:
            raise ConfigurationError(f"world_radius must be positive, got {self.world_radius}")
        if self.max_entities < 0:
            raise ConfigurationError(f"max_entities must not be negative, got {self.max_entities}")
        if self.growth_interval_ticks <= 0:
            raise ConfigurationError(f"growth_interval_ticks must be positive, got {self.growth_interval_ticks}")
        if not 0.0 <= self.wander_probability <= 1.0:
            raise ConfigurationError(f"wander_probability must be in [0, 1], got {self.wander_probability}")
        if self.target_fps <= 0:
            raise ConfigurationError(f"target_fps must be positive, got {self.target_fps}")
        # Divisors and radii used by steering, combat and placement
        for name in ("snap_grid", "attack_range", "eat_range", "separation_radius",
                     "min_separation_distance", "wander_radius"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
