from tensorscape.layout.activations import ActivationSource, RandomActivations, TensorActivations
from tensorscape.layout.engine import (
    DEFAULT_LAYOUT,
    Block,
    Cell,
    CellIndex,
    FrontLayer,
    GhostLayer,
    LayoutConstants,
    cells_to_frame,
    count_cells,
    count_ghosts,
    layout,
)

__all__ = [
    "ActivationSource",
    "RandomActivations",
    "TensorActivations",
    "DEFAULT_LAYOUT",
    "Block",
    "Cell",
    "CellIndex",
    "FrontLayer",
    "GhostLayer",
    "LayoutConstants",
    "cells_to_frame",
    "count_cells",
    "count_ghosts",
    "layout",
]
