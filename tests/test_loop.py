import pytest

from tensorscape.camera.controller import orbit_position
from tensorscape.config import VisualizerConfig
from tensorscape.layout.engine import CellIndex
from tensorscape.loop import ReactiveLoop, Tooltip
from tensorscape.scene.palette import BASE_COLOR, HIGHLIGHT_COLOR, heatmap_color
from tensorscape.state.store import (
    OrbitAngles,
    ResetView,
    SetDimension,
    SetExplode,
    SetHeatmap,
    SetViewMode,
    ToggleAutoRotate,
)


class _RecordingRenderer:
    def __init__(self) -> None:
        self.calls = []

    def render(self, scene, camera):
        self.calls.append((scene.generation, camera.position))
        return None


def _loop_with_shape(h: int, b: int, s: int, d: int, **kwargs) -> ReactiveLoop:
    loop = ReactiveLoop(config=VisualizerConfig(activation_seed=11), **kwargs)
    for axis, value in zip("HBSD", (h, b, s, d), strict=True):
        loop.dispatch(SetDimension(axis, value))
    return loop


def test_initial_state_matches_default_shape() -> None:
    loop = ReactiveLoop()

    assert loop.shape_display == "[2, 8, 12, 8]"
    assert len(loop.scene.cells) == 192
    assert len(loop.scene.ghosts) == 14
    assert loop.tooltip == Tooltip.hidden()
    assert loop.camera.position == pytest.approx(orbit_position(OrbitAngles(0.5, 0.3), 25.0))


def test_changing_batch_rebuilds_ghosts_only() -> None:
    loop = ReactiveLoop()
    before = loop.scene

    loop.dispatch(SetDimension("B", 3))

    assert loop.scene.generation == before.generation + 1
    assert loop.shape_display == "[2, 3, 12, 8]"
    assert len(loop.scene.ghosts) == 4
    assert len(loop.scene.cells) == 192
    assert not set(before.registry) & set(loop.picking.registry)


def test_dimension_values_are_clamped() -> None:
    loop = ReactiveLoop()

    loop.dispatch(SetDimension("S", 0))
    assert loop.store.shape.S == 1
    loop.dispatch(SetDimension("D", 1000))
    assert loop.store.shape.D == 32
    loop.dispatch(SetDimension("H", "3"))
    assert loop.store.shape.H == 3
    assert loop.shape_display == "[3, 8, 1, 32]"


def test_non_numeric_dimension_is_ignored() -> None:
    loop = ReactiveLoop()
    generation = loop.scene.generation

    loop.dispatch(SetDimension("H", "abc"))
    loop.dispatch(SetDimension("Q", 4))

    assert loop.scene.generation == generation
    assert loop.store.shape.H == 2


def test_same_value_still_rebuilds() -> None:
    loop = ReactiveLoop()
    generation = loop.scene.generation

    loop.dispatch(SetDimension("H", 2))

    assert loop.scene.generation == generation + 1


def test_explode_is_clamped_to_zero() -> None:
    loop = ReactiveLoop()

    loop.dispatch(SetExplode(-1))

    assert loop.store.view.explode == 0.0


def test_tick_renders_every_frame_and_autorotates() -> None:
    renderer = _RecordingRenderer()
    loop = ReactiveLoop(renderer=renderer)

    assert loop.tick() == 1
    assert loop.store.view.angles.x == pytest.approx(0.5)

    loop.dispatch(ToggleAutoRotate())
    assert loop.run(3) == 4
    assert loop.store.view.angles.x == pytest.approx(0.5 + 3 * 0.005)
    assert len(renderer.calls) == 4
    assert renderer.calls[-1][1] == pytest.approx(loop.camera.position)


def test_pointer_move_hits_front_cell_in_2d() -> None:
    loop = _loop_with_shape(1, 8, 11, 7)
    loop.dispatch(SetViewMode(False))

    index = loop.pointer_move(640, 360)

    assert index == CellIndex(0, 0, 5, 3)
    cell = loop.scene.cell_at(index)
    assert cell is not None
    assert cell.color == HIGHLIGHT_COLOR
    assert loop.tooltip.visible
    assert loop.tooltip.left == 655
    assert loop.tooltip.top == 375
    assert loop.tooltip.text == (
        f"Head: 0 | Batch: 0\nSeq: 5 | Dim: 3\nValue: {cell.value:.5f}"
    )


def test_pointer_miss_hides_tooltip_and_restores_baseline() -> None:
    loop = _loop_with_shape(1, 8, 11, 7)
    loop.dispatch(SetViewMode(False))
    loop.pointer_move(640, 360)

    assert loop.pointer_move(0, 0) is None
    assert loop.tooltip == Tooltip.hidden()
    assert all(cell.color == BASE_COLOR for cell in loop.scene.cells)

    loop.pointer_move(640, 360)
    loop.pointer_leave()
    assert not loop.tooltip.visible


def test_hover_highlights_cross_section_across_heads() -> None:
    loop = ReactiveLoop()

    matched = loop.hover(CellIndex(1, 0, 3, 5))

    assert matched == (CellIndex(0, 0, 3, 5), CellIndex(1, 0, 3, 5))
    assert loop.tooltip.index == CellIndex(1, 0, 3, 5)
    assert loop.hover(CellIndex(0, 0, 12, 0)) == ()
    assert not loop.tooltip.visible


def test_rebuild_clears_hover_state() -> None:
    loop = ReactiveLoop()
    loop.hover(CellIndex(0, 0, 0, 0))

    loop.dispatch(SetExplode(0.9))

    assert not loop.tooltip.visible
    assert loop.highlight.hovered is None
    assert all(cell.color == BASE_COLOR for cell in loop.scene.cells)


def test_heatmap_toggle_recolours_cells() -> None:
    loop = ReactiveLoop()
    generation = loop.scene.generation

    loop.dispatch(SetHeatmap(True))

    assert loop.scene.generation == generation + 1
    assert all(cell.color == heatmap_color(cell.value) for cell in loop.scene.cells)

    loop.dispatch(SetHeatmap(True))
    assert loop.scene.generation == generation + 1


def test_view_mode_switch_swaps_projection() -> None:
    loop = ReactiveLoop()

    loop.dispatch(SetViewMode(False))
    assert loop.camera.is_orthographic
    assert loop.camera.position == (0.0, 0.0, 30.0)

    loop.dispatch(SetViewMode(True))
    assert not loop.camera.is_orthographic


def test_camera_commands_do_not_rebuild() -> None:
    loop = ReactiveLoop()
    generation = loop.scene.generation

    loop.drag(40.0, -10.0)
    loop.wheel(100.0)
    loop.resize(640, 480)
    loop.dispatch(ResetView())

    assert loop.scene.generation == generation
    assert loop.store.view.camera_dist == 25.0
    assert loop.store.viewport.aspect == pytest.approx(640 / 480)


def test_seeded_loops_show_the_same_values() -> None:
    first = ReactiveLoop(config=VisualizerConfig(activation_seed=7))
    second = ReactiveLoop(config=VisualizerConfig(activation_seed=7))

    assert [c.value for c in first.scene.cells] == [c.value for c in second.scene.cells]
