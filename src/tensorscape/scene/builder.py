from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from tensorscape.layout.activations import ActivationSource, RandomActivations
from tensorscape.layout.engine import DEFAULT_LAYOUT, Block, CellIndex, LayoutConstants, Vec3, layout
from tensorscape.scene.palette import (
    BACKGROUND_COLOR,
    CELL_OPACITY,
    GHOST_COLOR,
    GHOST_OPACITY,
    baseline_color,
    baseline_emphasis,
)
from tensorscape.state.store import TensorShape, ViewState

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class CellDrawable:
    """Pickable box for one front cell. Only the emphasis fields change after build."""

    id: int
    index: CellIndex
    center: Vec3
    size: Vec3
    value: float
    color: str
    emissive: float
    edge_opacity: float
    opacity: float = CELL_OPACITY

    @property
    def bounds(self) -> tuple[Vec3, Vec3]:
        lower = tuple(c - s / 2.0 for c, s in zip(self.center, self.size, strict=True))
        upper = tuple(c + s / 2.0 for c, s in zip(self.center, self.size, strict=True))
        return lower, upper  # type: ignore[return-value]


@dataclass(frozen=True)
class GhostDrawable:
    id: int
    head: int
    batch: int
    center: Vec3
    size: Vec3
    color: str = GHOST_COLOR
    opacity: float = GHOST_OPACITY


@dataclass(frozen=True)
class Scene:
    generation: int
    shape: TensorShape
    view: ViewState
    blocks: tuple[Block, ...]
    cells: tuple[CellDrawable, ...]
    ghosts: tuple[GhostDrawable, ...]
    registry: Mapping[int, CellIndex]
    background: str = BACKGROUND_COLOR

    @property
    def shape_display(self) -> str:
        return self.shape.display

    def cell_at(self, index: CellIndex) -> CellDrawable | None:
        h, b, s, d = index
        shape = self.shape
        if b != 0 or not (0 <= h < shape.H and 0 <= s < shape.S and 0 <= d < shape.D):
            return None
        # Cells are emitted head-major, row-major, so the index maps straight to a slot.
        return self.cells[(h * shape.S + s) * shape.D + d]

    def cell_for(self, drawable_id: int) -> CellDrawable | None:
        index = self.registry.get(drawable_id)
        return None if index is None else self.cell_at(index)


class SceneBuilder:
    """Turns layout output into drawables and owns the current scene.

    Drawable ids come from a counter that never restarts, so an id from an older
    scene can never resolve in a newer registry.
    """

    def __init__(
        self,
        *,
        constants: LayoutConstants = DEFAULT_LAYOUT,
        activations: ActivationSource | None = None,
    ) -> None:
        self.constants = constants
        self.activations = activations or RandomActivations()
        self._ids = itertools.count(1)
        self._generation = 0
        self.scene: Scene | None = None

    def build(self, shape: TensorShape, view: ViewState) -> Scene:
        values = self.activations(shape)
        blocks = layout(shape, view.explode, values=values, constants=self.constants)
        emphasis = baseline_emphasis(heatmap=view.heatmap)
        cell_size = self.constants.cell_box
        margin = self.constants.ghost_margin

        cells: list[CellDrawable] = []
        ghosts: list[GhostDrawable] = []
        registry: dict[int, CellIndex] = {}
        for block in blocks:
            for cell in block.front.cells:
                drawable = CellDrawable(
                    id=next(self._ids),
                    index=cell.index,
                    center=cell.position,
                    size=cell_size,
                    value=cell.value,
                    color=baseline_color(cell.value, heatmap=view.heatmap),
                    emissive=emphasis.emissive,
                    edge_opacity=emphasis.edge_opacity,
                )
                cells.append(drawable)
                registry[drawable.id] = cell.index
            for ghost in block.ghosts:
                width, height = ghost.footprint
                ghosts.append(
                    GhostDrawable(
                        id=next(self._ids),
                        head=block.head,
                        batch=ghost.batch,
                        center=ghost.position,
                        size=(width + margin, height + margin, self.constants.layer_depth),
                    )
                )

        self._generation += 1
        scene = Scene(
            generation=self._generation,
            shape=shape,
            view=view,
            blocks=tuple(blocks),
            cells=tuple(cells),
            ghosts=tuple(ghosts),
            registry=MappingProxyType(registry),
        )
        self.scene = scene
        logger.debug(
            "rebuilt scene gen=%d shape=%s cells=%d ghosts=%d",
            scene.generation,
            shape.display,
            len(cells),
            len(ghosts),
        )
        return scene


__all__ = ["CellDrawable", "GhostDrawable", "Scene", "SceneBuilder"]
