import numpy as np
import plotly.graph_objects as go
import pytest

from tensorscape.layout.engine import CellIndex
from tensorscape.loop import ReactiveLoop
from tensorscape.render.plotly_figure import PlotlyRenderer, build_figure, pack_boxes
from tensorscape.state.store import SetDimension, SetViewMode


def test_pack_boxes_offsets_each_box() -> None:
    centers = np.array([[0.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
    sizes = np.array([[1.0, 2.0, 3.0], [1.0, 1.0, 1.0]])

    vertices, triangles = pack_boxes(centers, sizes)

    assert vertices.shape == (16, 3)
    assert triangles.shape == (24, 3)
    assert vertices[:8].min(axis=0) == pytest.approx([-0.5, -1.0, -1.5])
    assert vertices[8:].max(axis=0) == pytest.approx([10.5, 0.5, 0.5])
    assert triangles[:12].max() == 7
    assert triangles[12:].min() == 8


def test_figure_has_ghost_cell_edge_and_hover_traces() -> None:
    loop = ReactiveLoop()
    fig = build_figure(loop.scene, loop.camera)

    names = [trace.name for trace in fig.data]
    assert names[0] == "ghost layers"
    assert names[1] == "front cells"
    assert names[-1] == "__hover_cells__"
    assert isinstance(fig.data[1], go.Mesh3d)
    assert len(fig.data[1].facecolor) == 192 * 12

    hover = fig.data[-1]
    assert len(hover.customdata) == 192
    assert list(hover.customdata[0][:4]) == [0, 0, 0, 0]
    assert fig.layout.title.text == "[2, 8, 12, 8]"
    assert fig.layout.scene.camera.projection.type == "perspective"


def test_figure_without_ghosts_when_batch_is_one() -> None:
    loop = ReactiveLoop()
    loop.dispatch(SetDimension("B", 1))

    fig = build_figure(loop.scene, loop.camera)

    assert "ghost layers" not in [trace.name for trace in fig.data]


def test_highlight_splits_edge_traces() -> None:
    loop = ReactiveLoop()
    loop.hover(CellIndex(0, 0, 2, 2))

    fig = build_figure(loop.scene, loop.camera)
    edges = [trace for trace in fig.data if (trace.name or "").startswith("edges@")]

    assert sorted(trace.opacity for trace in edges) == [0.15, 1.0]


def test_orthographic_camera_in_2d() -> None:
    loop = ReactiveLoop()
    loop.dispatch(SetViewMode(False))

    fig = build_figure(loop.scene, loop.camera)

    assert fig.layout.scene.camera.projection.type == "orthographic"
    assert fig.layout.scene.camera.eye.x == pytest.approx(0.0)
    assert fig.layout.scene.camera.eye.z > 0


def test_renderer_keeps_latest_figure() -> None:
    renderer = PlotlyRenderer(height=400)
    loop = ReactiveLoop(renderer=renderer)

    loop.run(2)

    assert renderer.frames_rendered == 2
    assert renderer.figure is not None
    assert renderer.figure.layout.height == 400
