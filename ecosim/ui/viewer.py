"""Top-down debug viewer for a running Simulation."""

import logging
import math
from typing import Dict, Optional

import pyglet
from pyglet.window import key, mouse

from ecosim.agents.components import Pose
from ecosim.config import SimConfig
from ecosim.core import vecmath
from ecosim.core.simulation import EntitySnapshot, Simulation
from ecosim.ui.camera import Camera
from ecosim.ui.tools import TOOLBAR, tool_for_slot
from ecosim.world.kinds import Category, Kind

logger = logging.getLogger(__name__)

# Number keys select what a left click places
TOOL_KEYS = (key._1, key._2, key._3, key._4, key._5, key._6, key._7, key._8, key._9, key._0)

DAY_BACKGROUND = (0.42, 0.62, 0.32, 1.0)
NIGHT_BACKGROUND = (0.08, 0.10, 0.18, 1.0)
NIGHT_OPACITY = 170
LYING_OPACITY = 120
LIT_FIRE_COLOR = (255, 200, 40)
PICK_RADIUS = 1.5 # World units around the cursor for delete mode

class EntityVisual:
    """Body shape plus a small facing marker for one entity."""

    def __init__(self, snapshot: EntitySnapshot, batch: pyglet.graphics.Batch, groups: Dict[Category, pyglet.graphics.Group]) -> None:
        meta = snapshot.kind.metadata
        group = groups[meta.category]
        self.kind = snapshot.kind
        if meta.snap:
            self.body = pyglet.shapes.Rectangle(0, 0, 1, 1, color=meta.base_color, batch=batch, group=group)
        else:
            self.body = pyglet.shapes.Circle(0, 0, 1, color=meta.base_color, batch=batch, group=group)
        self.nose: Optional[pyglet.shapes.Circle] = None
        if meta.category is Category.AGENT:
            self.nose = pyglet.shapes.Circle(0, 0, 1, color=(20, 20, 20), batch=batch, group=groups[Category.AGENT])

    def sync(self, snapshot: EntitySnapshot, camera: Camera, is_night: bool) -> None:
        meta = snapshot.kind.metadata
        x, _, z = snapshot.position
        sx, sy = camera.world_to_screen(x, z)
        size = meta.radius * camera.scale

        if isinstance(self.body, pyglet.shapes.Rectangle):
            self.body.width = size * 2
            self.body.height = max(2.0, size * 0.4)
            self.body.anchor_x = self.body.width / 2
            self.body.anchor_y = self.body.height / 2
            self.body.rotation = math.degrees(snapshot.facing) - 90.0
        else:
            self.body.radius = max(1.0, size)
        self.body.x, self.body.y = sx, sy

        if snapshot.kind is Kind.BONFIRE:
            self.body.color = LIT_FIRE_COLOR if snapshot.is_lit else meta.base_color
        opacity = 255
        if snapshot.pose is Pose.LYING:
            opacity = LYING_OPACITY
        elif is_night and meta.category is Category.AGENT and snapshot.kind is not Kind.WOLF:
            opacity = NIGHT_OPACITY
        self.body.opacity = opacity

        if self.nose is not None:
            self.nose.radius = max(1.0, size * 0.35)
            self.nose.x = sx + math.sin(snapshot.facing) * size
            self.nose.y = sy + math.cos(snapshot.facing) * size
            self.nose.visible = snapshot.pose is Pose.STANDING

    def delete(self) -> None:
        self.body.delete()
        if self.nose is not None:
            self.nose.delete()

class WorldViewer:
    """
    Window, camera and input for watching and editing a Simulation.

    Visuals are created and destroyed from the simulation's spawn/remove
    events and repositioned from query_snapshot() every frame.

    Controls: arrows/WASD pan, scroll zooms, 1-0 pick an animal, fence,
    tree or carrot, shift+1-6 pick wall, pond, bonfire, rock, flower or
    grass. Left click places the tool, X toggles delete mode and R
    rotates the next placement.
    """

    def __init__(self, sim: Simulation, config: SimConfig, caption: str = "EcoSim") -> None:
        self.sim = sim
        self.config = config
        self.window = pyglet.window.Window(width=config.window_width, height=config.window_height, caption=caption, resizable=True)
        self.camera = Camera(config.window_width, config.window_height, config.pixels_per_unit, config.camera_pan_speed)
        self.keys = key.KeyStateHandler()
        self.window.push_handlers(self.keys)
        self.window.push_handlers(self)

        self.batch = pyglet.graphics.Batch()
        self.groups: Dict[Category, pyglet.graphics.Group] = {
            Category.WATER: pyglet.graphics.Group(order=0),
            Category.PLANT: pyglet.graphics.Group(order=1),
            Category.FOOD: pyglet.graphics.Group(order=1),
            Category.OBSTACLE: pyglet.graphics.Group(order=2),
            Category.AGENT: pyglet.graphics.Group(order=3),
        }
        self.visuals: Dict[int, EntityVisual] = {}
        self.hud_batch = pyglet.graphics.Batch()
        self.status_label = pyglet.text.Label('', font_name='Arial', font_size=12, x=10, y=self.window.height - 10, anchor_x='left', anchor_y='top', batch=self.hud_batch)
        self.tool_label = pyglet.text.Label('', font_name='Arial', font_size=12, x=10, y=self.window.height - 30, anchor_x='left', anchor_y='top', batch=self.hud_batch)

        self.tool: Kind = TOOLBAR[0]
        self.delete_mode = False
        self.placement_heading = 0.0
        self.current_fps = 0.0
        self.closed = False

        sim.push_handlers(on_entity_spawned=self._on_entity_spawned, on_entity_removed=self._on_entity_removed)
        for snapshot in sim.query_snapshot():
            self._on_entity_spawned(snapshot)

    # --- Simulation events ---

    def _on_entity_spawned(self, snapshot: EntitySnapshot) -> None:
        if snapshot.id not in self.visuals:
            self.visuals[snapshot.id] = EntityVisual(snapshot, self.batch, self.groups)

    def _on_entity_removed(self, entity_id: int, kind: Kind) -> None:
        visual = self.visuals.pop(entity_id, None)
        if visual is not None:
            visual.delete()

    # --- Per frame ---

    def update(self, dt: float, fps: float) -> None:
        """Applies held keys to the camera and syncs every visual to the simulation."""
        self.current_fps = fps
        dx = dy = 0.0
        if self.keys[key.LEFT] or self.keys[key.A]:
            dx -= 1.0
        if self.keys[key.RIGHT] or self.keys[key.D]:
            dx += 1.0
        if self.keys[key.UP] or self.keys[key.W]:
            dy += 1.0
        if self.keys[key.DOWN] or self.keys[key.S]:
            dy -= 1.0
        if dx or dy:
            self.camera.pan(dx, dy, dt)

        is_night = self.sim.is_night
        for snapshot in self.sim.query_snapshot():
            visual = self.visuals.get(snapshot.id)
            if visual is not None:
                visual.sync(snapshot, self.camera, is_night)

        counts = self.sim.population_counts()
        agents = sum(counts.get(k.metadata.name, 0) for k in Kind if k.is_agent)
        phase = "night" if is_night else "day"
        self.status_label.text = f"FPS: {fps:.0f}  Day {self.sim.clock.day_count + 1} ({phase})  Agents: {agents}"
        mode = "DELETE" if self.delete_mode else self.tool.metadata.name
        self.tool_label.text = f"Tool: {mode}  Rotation: {math.degrees(self.placement_heading):.0f}"

    # --- Window events ---

    def on_draw(self) -> None:
        pyglet.gl.glClearColor(*(NIGHT_BACKGROUND if self.sim.is_night else DAY_BACKGROUND))
        self.window.clear()
        self.batch.draw()
        self.hud_batch.draw()

    def on_resize(self, width: int, height: int) -> None:
        self.camera.resize(width, height)
        self.status_label.y = height - 10
        self.tool_label.y = height - 30

    def on_mouse_scroll(self, x: int, y: int, scroll_x: float, scroll_y: float) -> None:
        if scroll_y > 0:
            self.camera.zoom_in()
        elif scroll_y < 0:
            self.camera.zoom_out()

    def on_key_press(self, symbol: int, modifiers: int) -> None:
        if symbol in TOOL_KEYS:
            tool = tool_for_slot(TOOL_KEYS.index(symbol), shifted=bool(modifiers & key.MOD_SHIFT))
            if tool is not None:
                self.tool = tool
                self.delete_mode = False
        elif symbol == key.X:
            self.delete_mode = not self.delete_mode
        elif symbol == key.R:
            self.placement_heading = (self.placement_heading + math.pi / 2) % (2 * math.pi)

    def on_mouse_press(self, x: int, y: int, button: int, modifiers: int) -> None:
        if button != mouse.LEFT:
            return
        world_x, world_z = self.camera.screen_to_world(x, y)
        if self.delete_mode:
            self._delete_at(world_x, world_z)
            return
        heading = self.placement_heading if self.tool.metadata.snap else None
        if self.sim.place_entity(self.tool, (world_x, world_z), heading) is None:
            logger.info("Could not place %s: population cap reached", self.tool.metadata.name)

    def on_close(self) -> None:
        self.closed = True

    def _delete_at(self, world_x: float, world_z: float) -> None:
        target = self.sim.spatial.nearest_of_kind(vecmath.vec(world_x, world_z), list(Kind), max_distance=PICK_RADIUS)
        if target is not None:
            self.sim.remove_entity(target)

    def close(self) -> None:
        self.sim.remove_handlers(on_entity_spawned=self._on_entity_spawned, on_entity_removed=self._on_entity_removed)
        for visual in self.visuals.values():
            visual.delete()
        self.visuals.clear()
        if not self.closed:
            self.closed = True
            self.window.close()
