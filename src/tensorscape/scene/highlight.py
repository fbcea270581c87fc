from __future__ import annotations

from tensorscape.layout.engine import CellIndex
from tensorscape.scene.builder import CellDrawable, Scene
from tensorscape.scene.palette import (
    DIMMED,
    HIGHLIGHT_COLOR,
    HIGHLIGHTED,
    Emphasis,
    baseline_color,
    baseline_emphasis,
)


def _apply(cell: CellDrawable, color: str, emphasis: Emphasis) -> None:
    cell.color = color
    cell.emissive = emphasis.emissive
    cell.edge_opacity = emphasis.edge_opacity


class HighlightController:
    """Emphasizes the cross-section under the pointer.

    The cross-section of ``(h, b, s, d)`` is every front cell, in every head,
    sharing ``(s, d)``. Only batch 0 is interactive so ``h`` and ``b`` play no
    part in matching.
    """

    def __init__(self) -> None:
        self.scene: Scene | None = None
        self.heatmap = False
        self.hovered: CellIndex | None = None

    def attach(self, scene: Scene, *, heatmap: bool | None = None) -> None:
        self.scene = scene
        self.heatmap = scene.view.heatmap if heatmap is None else heatmap
        self.hovered = None
        self.reset()

    def cross_section(self, index: CellIndex) -> list[CellDrawable]:
        if self.scene is None:
            return []
        return [
            cell
            for cell in self.scene.cells
            if cell.index.s == index.s and cell.index.d == index.d
        ]

    def reset(self) -> None:
        if self.scene is None:
            return
        emphasis = baseline_emphasis(heatmap=self.heatmap)
        for cell in self.scene.cells:
            _apply(cell, baseline_color(cell.value, heatmap=self.heatmap), emphasis)

    def on_hover(self, index: CellIndex | None) -> tuple[CellIndex, ...]:
        self.hovered = index
        if self.scene is None:
            return ()
        if index is None:
            self.reset()
            return ()

        matched: list[CellIndex] = []
        for cell in self.scene.cells:
            if cell.index.s == index.s and cell.index.d == index.d:
                _apply(cell, HIGHLIGHT_COLOR, HIGHLIGHTED)
                matched.append(cell.index)
            else:
                _apply(cell, baseline_color(cell.value, heatmap=self.heatmap), DIMMED)
        return tuple(matched)


__all__ = ["HighlightController"]
