from typing import Tuple

DEFAULT_ZOOM_LEVELS = (0.5, 1.0, 2.0, 4.0)

class Camera:
    """Top-down view of the ground plane: pan center and zoom.

    World x maps to screen x and world z maps to screen y.
    """

    def __init__(
        self,
        width: int,
        height: int,
        pixels_per_unit: float,
        pan_speed: float,
        zoom_levels: Tuple[float, ...] = DEFAULT_ZOOM_LEVELS,
        default_zoom_index: int = 1,
    ) -> None:
        """Initializes the camera.

        Args:
            width: Viewport width in pixels.
            height: Viewport height in pixels.
            pixels_per_unit: Screen pixels per world unit at zoom 1.0.
            pan_speed: Pan speed in screen pixels per second.
            zoom_levels: Available zoom factors.
            default_zoom_index: The initial index into zoom_levels.
        """
        self.width = width
        self.height = height
        self.pixels_per_unit = pixels_per_unit
        self.pan_speed = pan_speed
        self.x = 0.0 # World x at the view center
        self.z = 0.0 # World z at the view center
        self.zoom_levels = sorted(zoom_levels) or [1.0]
        if not 0 <= default_zoom_index < len(self.zoom_levels):
            default_zoom_index = len(self.zoom_levels) // 2
        self._current_zoom_index = default_zoom_index
        self.zoom = self.zoom_levels[self._current_zoom_index]

    @property
    def scale(self) -> float:
        """Screen pixels per world unit at the current zoom."""
        return self.pixels_per_unit * self.zoom

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def pan(self, dx: float, dy: float, dt: float) -> None:
        """Pans by a direction in screen axes at a constant on-screen speed.

        Args:
            dx: -1 for left, 1 for right.
            dy: -1 for down, 1 for up.
            dt: Frame time in seconds.
        """
        step = self.pan_speed * dt / self.scale
        self.x += dx * step
        self.z += dy * step

    def zoom_in(self) -> None:
        if self._current_zoom_index < len(self.zoom_levels) - 1:
            self._current_zoom_index += 1
            self.zoom = self.zoom_levels[self._current_zoom_index]

    def zoom_out(self) -> None:
        if self._current_zoom_index > 0:
            self._current_zoom_index -= 1
            self.zoom = self.zoom_levels[self._current_zoom_index]

    def world_to_screen(self, world_x: float, world_z: float) -> Tuple[float, float]:
        """Converts ground-plane coordinates to window pixels."""
        screen_x = (world_x - self.x) * self.scale + self.width / 2
        screen_y = (world_z - self.z) * self.scale + self.height / 2
        return screen_x, screen_y

    def screen_to_world(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        """Converts window pixels to ground-plane (x, z)."""
        world_x = (screen_x - self.width / 2) / self.scale + self.x
        world_z = (screen_y - self.height / 2) / self.scale + self.z
        return world_x, world_z
