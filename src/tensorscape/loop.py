"""Event routing and the per-frame tick.

Every control command is applied to the state store and followed by a full,
synchronous rebuild (layout, drawables, picking index, highlight baseline).
Camera commands only move the camera. ``tick`` is called once per display
refresh by the host and always renders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tensorscape.camera.controller import Camera, CameraController
from tensorscape.config import VisualizerConfig
from tensorscape.layout.activations import ActivationSource, RandomActivations
from tensorscape.layout.engine import DEFAULT_LAYOUT, CellIndex, LayoutConstants
from tensorscape.render.plotly_figure import Renderer
from tensorscape.scene.builder import Scene, SceneBuilder
from tensorscape.scene.highlight import HighlightController
from tensorscape.scene.picking import PickingService, cast_ray, pointer_to_ndc
from tensorscape.state.store import (
    Command,
    Orbit,
    ResetView,
    Resize,
    StateStore,
    Zoom,
)

logger = logging.getLogger(__name__)

TOOLTIP_OFFSET_PX = 15


@dataclass(frozen=True)
class Tooltip:
    visible: bool = False
    index: CellIndex | None = None
    value: float | None = None
    left: float = 0.0
    top: float = 0.0

    @classmethod
    def hidden(cls) -> Tooltip:
        return cls()

    @property
    def text(self) -> str:
        if not self.visible or self.index is None or self.value is None:
            return ""
        h, b, s, d = self.index
        return f"Head: {h} | Batch: {b}\nSeq: {s} | Dim: {d}\nValue: {self.value:.5f}"


class ReactiveLoop:
    def __init__(
        self,
        store: StateStore | None = None,
        *,
        config: VisualizerConfig | None = None,
        renderer: Renderer | None = None,
        activations: ActivationSource | None = None,
        constants: LayoutConstants = DEFAULT_LAYOUT,
    ) -> None:
        self.store = store or StateStore(config)
        if activations is None:
            activations = RandomActivations(self.store.config.activation_seed)
        self.renderer = renderer
        self.builder = SceneBuilder(constants=constants, activations=activations)
        self.picking = PickingService()
        self.highlight = HighlightController()
        self.camera_controller = CameraController(self.store)
        self.tooltip = Tooltip.hidden()
        self.shape_display = ""
        self.frame = 0
        self.scene = self.rebuild()

    @property
    def camera(self) -> Camera:
        return self.camera_controller.camera

    def rebuild(self) -> Scene:
        scene = self.builder.build(self.store.shape, self.store.view)
        self.picking.refresh(scene)
        self.highlight.attach(scene)
        self.tooltip = Tooltip.hidden()
        self.shape_display = scene.shape_display
        self.scene = scene
        return scene

    def dispatch(self, command: Command) -> None:
        if isinstance(command, (Orbit, Zoom, ResetView)):
            self.camera_controller.handle(command)
            return
        if isinstance(command, Resize):
            self.camera_controller.resize(command.width, command.height)
            return

        change = self.store.apply(command)
        if change.rebuild:
            self.rebuild()
        if change.camera or change.projection:
            self.camera_controller.sync()
        logger.debug("dispatched %r -> %s", command, change)

    def hover(
        self, index: CellIndex | None, *, pointer: tuple[float, float] | None = None
    ) -> tuple[CellIndex, ...]:
        """Apply a resolved hover target; hosts with their own hit testing call this directly."""
        cell = None if index is None else self.scene.cell_at(CellIndex(*index))
        if cell is None:
            self.highlight.on_hover(None)
            self.tooltip = Tooltip.hidden()
            return ()

        matched = self.highlight.on_hover(cell.index)
        left, top = pointer if pointer is not None else (0.0, 0.0)
        self.tooltip = Tooltip(
            visible=True,
            index=cell.index,
            value=cell.value,
            left=left + TOOLTIP_OFFSET_PX,
            top=top + TOOLTIP_OFFSET_PX,
        )
        return matched

    def pointer_move(self, x: float, y: float) -> CellIndex | None:
        ndc_x, ndc_y = pointer_to_ndc(x, y, self.store.viewport)
        index = self.picking.pick(cast_ray(self.camera, ndc_x, ndc_y))
        self.hover(index, pointer=(x, y))
        return index

    def pointer_leave(self) -> None:
        self.hover(None)

    def drag(self, dx: float, dy: float) -> None:
        self.dispatch(Orbit(dx, dy))

    def wheel(self, delta: float) -> None:
        self.dispatch(Zoom(delta))

    def resize(self, width: int, height: int) -> None:
        self.dispatch(Resize(width, height))

    def tick(self) -> int:
        if self.store.view.auto_rotate:
            self.camera_controller.autorotate_step()
        if self.renderer is not None:
            self.renderer.render(self.scene, self.camera)
        self.frame += 1
        return self.frame

    def run(self, frames: int) -> int:
        for _ in range(max(0, frames)):
            self.tick()
        return self.frame


__all__ = ["ReactiveLoop", "TOOLTIP_OFFSET_PX", "Tooltip"]
