"""Day/night clock for the simulation.

Simulation time only ever grows; the day/night phase is derived from it by
wrapping it into the current cycle. Transitions are edge-triggered, so a
listener sees exactly one event per crossing no matter how many ticks the
phase is held for.
"""

import logging
from typing import NamedTuple

from ecosim.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

NIGHT_START = 0.5 # Cycle position after which it is night

class ClockTick(NamedTuple):
    """Result of advancing the clock by one step.

    Attributes:
        phase_changed: True only on the tick where is_night flipped.
        is_night: Phase after the advance.
    """
    phase_changed: bool
    is_night: bool

    @property
    def night_started(self) -> bool:
        return self.phase_changed and self.is_night

    @property
    def day_started(self) -> bool:
        return self.phase_changed and not self.is_night

class WorldClock:
    """Tracks simulation time, the derived day/night phase and the nightly kill tally.

    Attributes:
        sim_time: Total elapsed simulation time in seconds.
        cycle_duration: Length of one full day plus night in seconds.
        night_kill_count: Kills by night predators since the last night began.
        day_count: Number of night-to-day transitions seen.
    """

    def __init__(self, cycle_duration: float, start_time: float = 0.0) -> None:
        if cycle_duration <= 0:
            raise ConfigurationError(f"cycle_duration must be positive, got {cycle_duration}")
        if start_time < 0:
            raise ConfigurationError(f"start_time must not be negative, got {start_time}")
        self.cycle_duration: float = float(cycle_duration)
        self.sim_time: float = float(start_time)
        self.night_kill_count: int = 0
        self.day_count: int = 0
        self._was_night: bool = self.is_night

    @property
    def cycle_position(self) -> float:
        """Position within the current cycle, 0.0 (dawn) up to 1.0."""
        return (self.sim_time % self.cycle_duration) / self.cycle_duration

    @property
    def is_night(self) -> bool:
        return self.cycle_position > NIGHT_START

    def advance(self, dt: float) -> ClockTick:
        """Advances simulation time and reports whether the phase flipped.

        Args:
            dt: Seconds to advance. Must not be negative.

        Returns:
            ClockTick with the edge flag and the current phase.
        """
        if dt < 0:
            raise ValueError(f"dt must not be negative, got {dt}")
        self.sim_time += dt
        now_night = self.is_night
        phase_changed = now_night != self._was_night
        self._was_night = now_night
        if phase_changed:
            if now_night:
                logger.info("Night falls at t=%.2fs", self.sim_time)
            else:
                self.day_count += 1
                logger.info("Day %d begins at t=%.2fs", self.day_count, self.sim_time)
        return ClockTick(phase_changed=phase_changed, is_night=now_night)

    def record_night_kill(self) -> int:
        self.night_kill_count += 1
        return self.night_kill_count

    def reset_night_kills(self) -> None:
        self.night_kill_count = 0
