from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
import pandas as pd

from tensorscape.state.store import TensorShape

Vec3 = tuple[float, float, float]


class CellIndex(NamedTuple):
    h: int
    b: int
    s: int
    d: int


@dataclass(frozen=True)
class LayoutConstants:
    cell_size: float = 0.8
    cell_gap: float = 0.1
    layer_depth: float = 0.15
    head_spacing_factor: float = 1.8
    lateral_step: float = 0.15
    depth_gap: float = 0.05
    depth_gain: float = 4.0
    ghost_margin: float = 0.3
    cell_face_ratio: float = 0.85
    cell_depth_ratio: float = 0.4

    def __post_init__(self) -> None:
        if self.cell_size <= 0:
            msg = "cell_size must be positive"
            raise ValueError(msg)
        if self.cell_gap < 0:
            msg = "cell_gap must be non-negative"
            raise ValueError(msg)
        if self.layer_depth <= 0:
            msg = "layer_depth must be positive"
            raise ValueError(msg)
        if self.head_spacing_factor < 1:
            msg = "head_spacing_factor must be at least 1 so heads never overlap"
            raise ValueError(msg)
        if self.lateral_step < 0 or self.depth_gap < 0 or self.depth_gain < 0:
            msg = "batch offset constants must be non-negative"
            raise ValueError(msg)
        if not 0 < self.cell_face_ratio <= 1 or not 0 < self.cell_depth_ratio <= 1:
            msg = "cell ratios must be in (0, 1]"
            raise ValueError(msg)

    @property
    def pitch(self) -> float:
        return self.cell_size + self.cell_gap

    @property
    def cell_box(self) -> Vec3:
        face = self.cell_size * self.cell_face_ratio
        return (face, face, self.layer_depth * self.cell_depth_ratio)


DEFAULT_LAYOUT = LayoutConstants()


@dataclass(frozen=True)
class Cell:
    index: CellIndex
    local_position: Vec3
    position: Vec3
    value: float


@dataclass(frozen=True)
class FrontLayer:
    cells: tuple[Cell, ...]
    batch: int = 0


@dataclass(frozen=True)
class GhostLayer:
    batch: int
    local_position: Vec3
    position: Vec3
    footprint: tuple[float, float]


@dataclass(frozen=True)
class Block:
    head: int
    origin: Vec3
    width: float
    height: float
    front: FrontLayer
    ghosts: tuple[GhostLayer, ...]

    @property
    def layers(self) -> tuple[FrontLayer | GhostLayer, ...]:
        return (self.front, *self.ghosts)


def lateral_offset(batch: int, explode: float, constants: LayoutConstants = DEFAULT_LAYOUT) -> float:
    return batch * constants.lateral_step * (1.0 + explode)


def depth_offset(batch: int, explode: float, constants: LayoutConstants = DEFAULT_LAYOUT) -> float:
    # Depth grows depth_gain times faster with explode than the lateral drift.
    return -batch * (constants.layer_depth + constants.depth_gap) * (
        1.0 + explode * constants.depth_gain
    )


def head_offsets(shape: TensorShape, constants: LayoutConstants = DEFAULT_LAYOUT) -> list[float]:
    spacing = shape.D * constants.pitch * constants.head_spacing_factor
    start = -(shape.H - 1) * spacing / 2.0
    return [start + h * spacing for h in range(shape.H)]


def _resolve_values(shape: TensorShape, values: np.ndarray | None) -> np.ndarray:
    expected = (shape.H, shape.S, shape.D)
    if values is None:
        return np.zeros(expected, dtype=float)
    array = np.asarray(values, dtype=float)
    if array.shape != expected:
        msg = f"values must have shape (H, S, D)={expected}, got {array.shape}"
        raise ValueError(msg)
    return array


def layout(
    shape: TensorShape,
    explode: float,
    *,
    values: np.ndarray | None = None,
    constants: LayoutConstants = DEFAULT_LAYOUT,
) -> list[Block]:
    """Place every head block, its interactive front cells and its ghost layers.

    Positions depend only on ``shape``, ``explode`` and ``constants``; ``values``
    rides along for display and never moves anything.
    """
    if not math.isfinite(explode) or explode < 0:
        msg = "explode must be a finite non-negative number"
        raise ValueError(msg)
    activations = _resolve_values(shape, values)

    pitch = constants.pitch
    half_cell = constants.cell_size / 2.0
    block_width = shape.D * pitch
    block_height = shape.S * pitch
    front_xy = lateral_offset(0, explode, constants)
    front_z = depth_offset(0, explode, constants)

    blocks: list[Block] = []
    for h, head_x in enumerate(head_offsets(shape, constants)):
        origin = (head_x, 0.0, 0.0)
        cells: list[Cell] = []
        for s in range(shape.S):
            y = (block_height / 2.0) - s * pitch - half_cell + front_xy
            for d in range(shape.D):
                x = -(block_width / 2.0) + d * pitch + half_cell + front_xy
                local = (x, y, front_z)
                cells.append(
                    Cell(
                        index=CellIndex(h, 0, s, d),
                        local_position=local,
                        position=(head_x + x, y, front_z),
                        value=float(activations[h, s, d]),
                    )
                )

        ghosts: list[GhostLayer] = []
        for b in range(1, shape.B):
            xy = lateral_offset(b, explode, constants)
            z = depth_offset(b, explode, constants)
            ghosts.append(
                GhostLayer(
                    batch=b,
                    local_position=(xy, xy, z),
                    position=(head_x + xy, xy, z),
                    footprint=(block_width, block_height),
                )
            )

        blocks.append(
            Block(
                head=h,
                origin=origin,
                width=block_width,
                height=block_height,
                front=FrontLayer(cells=tuple(cells)),
                ghosts=tuple(ghosts),
            )
        )
    return blocks


def count_cells(blocks: list[Block]) -> int:
    return sum(len(block.front.cells) for block in blocks)


def count_ghosts(blocks: list[Block]) -> int:
    return sum(len(block.ghosts) for block in blocks)


def cells_to_frame(blocks: list[Block]) -> pd.DataFrame:
    rows: list[dict[str, float | int]] = []
    for block in blocks:
        for cell in block.front.cells:
            x, y, z = cell.position
            rows.append(
                {
                    "h": cell.index.h,
                    "b": cell.index.b,
                    "s": cell.index.s,
                    "d": cell.index.d,
                    "x": x,
                    "y": y,
                    "z": z,
                    "value": cell.value,
                }
            )
    return pd.DataFrame(rows, columns=["h", "b", "s", "d", "x", "y", "z", "value"])


__all__ = [
    "DEFAULT_LAYOUT",
    "Block",
    "Cell",
    "CellIndex",
    "FrontLayer",
    "GhostLayer",
    "LayoutConstants",
    "Vec3",
    "cells_to_frame",
    "count_cells",
    "count_ghosts",
    "depth_offset",
    "head_offsets",
    "lateral_offset",
    "layout",
]
