import logging
import random
import time
from typing import TYPE_CHECKING, Optional

import pyglet

from ecosim.config import SimConfig
from ecosim.core.simulation import Simulation
from ecosim.world.scenery import ScenerySeeder

if TYPE_CHECKING:
    from ecosim.ui.viewer import WorldViewer

logger = logging.getLogger(__name__)

class Engine:
    """Drives a Simulation at a fixed rate, with or without a window.

    Args:
        config: Simulation and engine settings.
        clock: pyglet clock to schedule updates on. Defaults to pyglet's global
            clock, which is what pyglet.app.run() ticks in windowed mode.
        seed_scenery: Lay out the starting world with a ScenerySeeder.
    """

    def __init__(self, config: SimConfig, clock: Optional[pyglet.clock.Clock] = None, seed_scenery: bool = True) -> None:
        self.config = config
        self.simulation = Simulation(config, random.Random(config.seed))
        self.seeder = ScenerySeeder(config, random.Random(config.seed + 1))
        self.viewer: Optional['WorldViewer'] = None
        self.clock = clock or pyglet.clock.get_default()
        self.stop_requested = False
        self.max_ticks: Optional[int] = None
        self.ticks_run = 0

        self.frame_count = 0
        self.fps_update_interval = 1.0 # Seconds between FPS recalculations
        self.time_since_last_fps_update = 0.0
        self.current_fps = 0.0

        if seed_scenery:
            self.initialize_world()
        if not config.headless_mode:
            self._initialize_viewer()

        self.clock.schedule_interval(self.update, 1.0 / config.target_fps)

    def _initialize_viewer(self) -> None:
        # Imported here so headless runs never touch the windowing layer
        from ecosim.ui.viewer import WorldViewer
        self.viewer = WorldViewer(self.simulation, self.config)
        logger.info("Viewer window opened (%dx%d)", self.config.window_width, self.config.window_height)

    def initialize_world(self) -> None:
        counts = self.seeder.populate(self.simulation)
        logger.info("World seeded with %d entities (seed %d)", sum(counts.values()), self.config.seed)

    def update(self, dt: float) -> None:
        """One frame: a simulation tick plus FPS bookkeeping and a viewer sync."""
        if self.stop_requested or (self.viewer is not None and self.viewer.closed):
            self.stop_requested = True
            if self.viewer is not None:
                pyglet.app.exit()
            return

        sim_dt = min(dt, self.config.max_frame_dt) * self.config.game_speed_multiplier
        self.simulation.tick(sim_dt)
        self.ticks_run += 1

        self.frame_count += 1
        self.time_since_last_fps_update += dt
        if self.time_since_last_fps_update >= self.fps_update_interval:
            self.current_fps = self.frame_count / self.time_since_last_fps_update
            self.frame_count = 0
            self.time_since_last_fps_update = 0.0
            logger.debug("FPS %.1f, population %s", self.current_fps, self.simulation.population_counts())

        if self.viewer is not None:
            self.viewer.update(dt, self.current_fps)

        if self.max_ticks is not None and self.ticks_run >= self.max_ticks:
            self.stop_requested = True

    def run(self, max_ticks: Optional[int] = None) -> None:
        """Runs until stopped, the window closes, or max_ticks frames have run."""
        self.max_ticks = max_ticks
        logger.info("Engine starting (%s)", "headless" if self.viewer is None else "windowed")
        if self.viewer is not None:
            pyglet.app.run()
        else:
            self._run_headless()
        logger.info("Engine stopped after %d ticks, sim time %.1fs", self.ticks_run, self.simulation.clock.sim_time)

    def _run_headless(self) -> None:
        frame_time = 1.0 / self.config.target_fps
        last_time = time.perf_counter()
        while not self.stop_requested:
            current_time = time.perf_counter()
            dt = current_time - last_time
            last_time = current_time
            self.update(dt)

            time_to_sleep = frame_time - (time.perf_counter() - current_time)
            if time_to_sleep > 0:
                time.sleep(time_to_sleep)

    def shutdown(self) -> None:
        self.stop_requested = True
        self.clock.unschedule(self.update)
        if self.viewer is not None:
            self.viewer.close()
            self.viewer = None
