import pytest

from tensorscape.camera.controller import CameraController
from tensorscape.layout.activations import RandomActivations
from tensorscape.layout.engine import CellIndex
from tensorscape.scene.builder import SceneBuilder
from tensorscape.scene.picking import PickingService, Ray, cast_ray, pointer_to_ndc
from tensorscape.state.store import (
    SetDimension,
    SetViewMode,
    StateStore,
    TensorShape,
    ViewState,
    Viewport,
)


def _build(shape: TensorShape, explode: float = 0.3):
    builder = SceneBuilder(activations=RandomActivations(seed=0))
    scene = builder.build(shape, ViewState(explode=explode))
    picking = PickingService()
    picking.refresh(scene)
    return builder, scene, picking


def test_builder_registers_only_front_cells() -> None:
    _, scene, _ = _build(TensorShape(2, 8, 12, 8))

    assert len(scene.cells) == 192
    assert len(scene.ghosts) == 14
    assert len(scene.registry) == 192
    assert set(scene.registry) == {cell.id for cell in scene.cells}
    assert not {ghost.id for ghost in scene.ghosts} & set(scene.registry)
    assert all(index.b == 0 for index in scene.registry.values())
    assert scene.shape_display == "[2, 8, 12, 8]"


def test_rebuild_replaces_registry_and_drawables() -> None:
    builder, first, picking = _build(TensorShape(1, 2, 2, 2))
    second = builder.build(TensorShape(1, 2, 2, 2), ViewState())
    picking.refresh(second)

    assert second.generation == first.generation + 1
    assert not set(first.registry) & set(second.registry)
    assert all(picking.resolve(cell.id) is None for cell in first.cells)
    assert all(picking.resolve(cell.id) == cell.index for cell in second.cells)
    assert builder.scene is second


def test_cell_lookup_by_index_and_id() -> None:
    _, scene, _ = _build(TensorShape(2, 1, 3, 4))
    cell = scene.cell_at(CellIndex(1, 0, 2, 3))

    assert cell is not None
    assert cell.index == CellIndex(1, 0, 2, 3)
    assert scene.cell_for(cell.id) is cell
    assert scene.cell_at(CellIndex(1, 1, 2, 3)) is None
    assert scene.cell_at(CellIndex(2, 0, 0, 0)) is None


def test_pick_straight_on_returns_cell_under_ray() -> None:
    _, scene, picking = _build(TensorShape(2, 8, 12, 8))
    target = scene.cell_at(CellIndex(1, 0, 3, 5))
    assert target is not None
    x, y, _ = target.center

    assert picking.pick(Ray(origin=(x, y, 10.0), direction=(0.0, 0.0, -1.0))) == target.index


def test_pick_ignores_ghost_layers() -> None:
    _, scene, picking = _build(TensorShape(1, 4, 3, 3))
    left = scene.cell_at(CellIndex(0, 0, 1, 0))
    assert left is not None
    x, y, _ = left.center
    gap_x = x + 0.45

    assert picking.pick(Ray(origin=(gap_x, y, 10.0), direction=(0.0, 0.0, -1.0))) is None


def test_pick_returns_nearest_hit() -> None:
    _, scene, picking = _build(TensorShape(2, 1, 2, 4))
    first = scene.cell_at(CellIndex(0, 0, 1, 0))
    assert first is not None
    _, y, z = first.center

    hit = picking.pick_detail(Ray(origin=(-100.0, y, z), direction=(1.0, 0.0, 0.0)))
    assert hit is not None
    assert hit.index == CellIndex(0, 0, 1, 0)
    assert hit.distance == pytest.approx(100.0 + first.center[0] - first.size[0] / 2.0)


def test_pick_miss_and_empty_index() -> None:
    _, _, picking = _build(TensorShape(1, 1, 2, 2))

    assert picking.pick(Ray(origin=(0.0, 0.0, 10.0), direction=(0.0, 0.0, 1.0))) is None
    assert PickingService().pick(Ray(origin=(0.0, 0.0, 10.0), direction=(0.0, 0.0, -1.0))) is None
    with pytest.raises(ValueError):
        Ray(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, 0.0))


def test_pointer_to_ndc_maps_corners_and_center() -> None:
    viewport = Viewport(100, 50)

    assert pointer_to_ndc(0, 0, viewport) == (-1.0, 1.0)
    assert pointer_to_ndc(50, 25, viewport) == (0.0, 0.0)
    assert pointer_to_ndc(100, 50, viewport) == (1.0, -1.0)


def test_orthographic_center_ray_hits_middle_cell() -> None:
    store = StateStore()
    for axis, value in zip("HBSD", (1, 2, 3, 3), strict=True):
        store.apply(SetDimension(axis, value))
    store.apply(SetViewMode(False))
    camera = CameraController(store).camera
    _, _, picking = _build(store.shape, store.view.explode)

    ray = cast_ray(camera, 0.0, 0.0)
    assert ray.origin == pytest.approx((0.0, 0.0, 30.0))
    assert ray.direction == pytest.approx((0.0, 0.0, -1.0))
    assert picking.pick(ray) == CellIndex(0, 0, 1, 1)


def test_perspective_center_ray_passes_through_origin() -> None:
    store = StateStore()
    for axis, value in zip("HBSD", (1, 2, 3, 3), strict=True):
        store.apply(SetDimension(axis, value))
    camera = CameraController(store).camera
    _, _, picking = _build(store.shape, store.view.explode)

    ray = cast_ray(camera, 0.0, 0.0)
    assert ray.origin == pytest.approx(camera.position)
    assert picking.pick(ray) == CellIndex(0, 0, 1, 1)
