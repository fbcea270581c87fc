"""tensorscape public API: 4D tensor layout, picking and cross-section highlighting."""

from tensorscape.camera.controller import Camera, CameraController, orbit_position
from tensorscape.config import VisualizerConfig, configure_logging, load_config
from tensorscape.layout.activations import RandomActivations, TensorActivations
from tensorscape.layout.engine import (
    Block,
    Cell,
    CellIndex,
    GhostLayer,
    LayoutConstants,
    cells_to_frame,
    count_cells,
    count_ghosts,
    layout,
)
from tensorscape.loop import ReactiveLoop, Tooltip
from tensorscape.render.plotly_figure import PlotlyRenderer, build_figure
from tensorscape.scene.builder import Scene, SceneBuilder
from tensorscape.scene.highlight import HighlightController
from tensorscape.scene.picking import PickingService, Ray, cast_ray, pointer_to_ndc
from tensorscape.state.store import StateStore, TensorShape, ViewState, Viewport

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "TensorShape",
    "ViewState",
    "Viewport",
    "StateStore",
    "LayoutConstants",
    "Block",
    "Cell",
    "CellIndex",
    "GhostLayer",
    "layout",
    "count_cells",
    "count_ghosts",
    "cells_to_frame",
    "RandomActivations",
    "TensorActivations",
    "Scene",
    "SceneBuilder",
    "PickingService",
    "Ray",
    "cast_ray",
    "pointer_to_ndc",
    "HighlightController",
    "Camera",
    "CameraController",
    "orbit_position",
    "ReactiveLoop",
    "Tooltip",
    "PlotlyRenderer",
    "build_figure",
    "VisualizerConfig",
    "load_config",
    "configure_logging",
]
