from __future__ import annotations

from collections import defaultdict
from typing import Protocol

import numpy as np
import plotly.graph_objects as go

from tensorscape.camera.controller import Camera
from tensorscape.scene.builder import CellDrawable, Scene
from tensorscape.scene.palette import BASE_COLOR, HIGHLIGHT_COLOR, shade

PLOT_TEMPLATE = "plotly_dark"
HOVER_TEMPLATE = (
    "Head: %{customdata[0]} | Batch: %{customdata[1]}<br>"
    "Seq: %{customdata[2]} | Dim: %{customdata[3]}<br>"
    "Value: %{customdata[4]:.5f}<extra></extra>"
)

_UNIT_CUBE = np.array(
    [
        (-0.5, -0.5, -0.5),
        (0.5, -0.5, -0.5),
        (0.5, 0.5, -0.5),
        (-0.5, 0.5, -0.5),
        (-0.5, -0.5, 0.5),
        (0.5, -0.5, 0.5),
        (0.5, 0.5, 0.5),
        (-0.5, 0.5, 0.5),
    ]
)
_CUBE_TRIANGLES = np.array(
    [
        (0, 1, 2),
        (0, 2, 3),
        (4, 6, 5),
        (4, 7, 6),
        (0, 5, 1),
        (0, 4, 5),
        (3, 2, 6),
        (3, 6, 7),
        (0, 3, 7),
        (0, 7, 4),
        (1, 5, 6),
        (1, 6, 2),
    ]
)
_CUBE_EDGES = (
    (0, 1), (1, 2), (2, 3), (3, 0),
    (4, 5), (5, 6), (6, 7), (7, 4),
    (0, 4), (1, 5), (2, 6), (3, 7),
)  # fmt: skip


class Renderer(Protocol):
    def render(self, scene: Scene, camera: Camera) -> object: ...


def pack_boxes(centers: np.ndarray, sizes: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Pack N axis-aligned boxes into one vertex array (8N, 3) and triangle array (12N, 3)."""
    count = centers.shape[0]
    vertices = centers[:, None, :] + _UNIT_CUBE[None, :, :] * sizes[:, None, :]
    offsets = (np.arange(count) * len(_UNIT_CUBE))[:, None, None]
    triangles = _CUBE_TRIANGLES[None, :, :] + offsets
    return vertices.reshape(-1, 3), triangles.reshape(-1, 3)


def _edge_trace(cells: list[CellDrawable], opacity: float, color: str) -> go.Scatter3d:
    xs: list[float | None] = []
    ys: list[float | None] = []
    zs: list[float | None] = []
    for cell in cells:
        corners = np.asarray(cell.center) + _UNIT_CUBE * np.asarray(cell.size)
        for start, end in _CUBE_EDGES:
            for corner in (corners[start], corners[end]):
                xs.append(float(corner[0]))
                ys.append(float(corner[1]))
                zs.append(float(corner[2]))
            xs.append(None)
            ys.append(None)
            zs.append(None)
    return go.Scatter3d(
        x=xs,
        y=ys,
        z=zs,
        mode="lines",
        line={"color": color, "width": 2},
        opacity=opacity,
        hoverinfo="skip",
        showlegend=False,
        name=f"edges@{opacity:.2f}",
    )


def _scene_extent(scene: Scene) -> float:
    boxes = [(cell.center, cell.size) for cell in scene.cells]
    boxes.extend((ghost.center, ghost.size) for ghost in scene.ghosts)
    centers = np.array([center for center, _ in boxes], dtype=float)
    half = np.array([size for _, size in boxes], dtype=float) / 2.0
    spans = (centers + half).max(axis=0) - (centers - half).min(axis=0)
    return max(float(spans.max()), 1e-9)


def build_figure(scene: Scene, camera: Camera, *, height: int = 640) -> go.Figure:
    fig = go.Figure()

    if scene.ghosts:
        vertices, triangles = pack_boxes(
            np.array([ghost.center for ghost in scene.ghosts], dtype=float),
            np.array([ghost.size for ghost in scene.ghosts], dtype=float),
        )
        fig.add_trace(
            go.Mesh3d(
                x=vertices[:, 0],
                y=vertices[:, 1],
                z=vertices[:, 2],
                i=triangles[:, 0],
                j=triangles[:, 1],
                k=triangles[:, 2],
                color=scene.ghosts[0].color,
                opacity=scene.ghosts[0].opacity,
                hoverinfo="skip",
                showlegend=False,
                name="ghost layers",
                lighting={"ambient": 0.6, "diffuse": 0.5, "specular": 0.1, "roughness": 0.9},
            )
        )

    cells = list(scene.cells)
    vertices, triangles = pack_boxes(
        np.array([cell.center for cell in cells], dtype=float),
        np.array([cell.size for cell in cells], dtype=float),
    )
    face_colors = [
        shade(cell.color, cell.emissive) for cell in cells for _ in range(len(_CUBE_TRIANGLES))
    ]
    fig.add_trace(
        go.Mesh3d(
            x=vertices[:, 0],
            y=vertices[:, 1],
            z=vertices[:, 2],
            i=triangles[:, 0],
            j=triangles[:, 1],
            k=triangles[:, 2],
            facecolor=face_colors,
            opacity=cells[0].opacity,
            hoverinfo="skip",
            showlegend=False,
            name="front cells",
            lighting={"ambient": 0.6, "diffuse": 0.5, "specular": 0.2, "roughness": 0.8},
        )
    )

    by_opacity: dict[float, list[CellDrawable]] = defaultdict(list)
    for cell in cells:
        by_opacity[cell.edge_opacity].append(cell)
    for opacity, group in sorted(by_opacity.items()):
        color = HIGHLIGHT_COLOR if group[0].color == HIGHLIGHT_COLOR else BASE_COLOR
        fig.add_trace(_edge_trace(group, opacity, color))

    # Invisible markers at cell centres carry the hover payload.
    centers = np.array([cell.center for cell in cells], dtype=float)
    fig.add_trace(
        go.Scatter3d(
            x=centers[:, 0],
            y=centers[:, 1],
            z=centers[:, 2],
            mode="markers",
            marker={"size": 6, "opacity": 0.0},
            customdata=[[*cell.index, cell.value] for cell in cells],
            hovertemplate=HOVER_TEMPLATE,
            showlegend=False,
            name="__hover_cells__",
        )
    )

    extent = _scene_extent(scene)
    eye = {axis: value / extent for axis, value in zip("xyz", camera.position, strict=True)}
    fig.update_layout(
        template=PLOT_TEMPLATE,
        height=height,
        paper_bgcolor=scene.background,
        margin={"l": 0, "r": 0, "t": 30, "b": 0},
        title={"text": scene.shape_display, "x": 0.02, "font": {"size": 14}},
        showlegend=False,
        scene={
            "bgcolor": scene.background,
            "aspectmode": "data",
            "xaxis": {"visible": False},
            "yaxis": {"visible": False},
            "zaxis": {"visible": False},
            "camera": {
                "eye": eye,
                "up": dict(zip("xyz", camera.up, strict=True)),
                "center": {"x": 0.0, "y": 0.0, "z": 0.0},
                "projection": {
                    "type": "orthographic" if camera.is_orthographic else "perspective"
                },
            },
        },
    )
    return fig


class PlotlyRenderer:
    def __init__(self, *, height: int = 640) -> None:
        self.height = height
        self.figure: go.Figure | None = None
        self.frames_rendered = 0

    def render(self, scene: Scene, camera: Camera) -> go.Figure:
        self.figure = build_figure(scene, camera, height=self.height)
        self.frames_rendered += 1
        return self.figure


__all__ = ["HOVER_TEMPLATE", "PlotlyRenderer", "Renderer", "build_figure", "pack_boxes"]
