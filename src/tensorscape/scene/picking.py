from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from tensorscape.camera.controller import Camera, OrthographicProjection, PerspectiveProjection
from tensorscape.layout.engine import CellIndex, Vec3
from tensorscape.scene.builder import Scene
from tensorscape.state.store import Viewport


@dataclass(frozen=True)
class Ray:
    origin: Vec3
    direction: Vec3

    def __post_init__(self) -> None:
        if not any(self.direction):
            msg = "ray direction must be non-zero"
            raise ValueError(msg)


@dataclass(frozen=True)
class PickHit:
    index: CellIndex
    drawable_id: int
    distance: float


@dataclass(frozen=True)
class _PickIndex:
    ids: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    registry: dict[int, CellIndex]


_EMPTY = _PickIndex(
    ids=np.empty(0, dtype=np.int64),
    lower=np.empty((0, 3)),
    upper=np.empty((0, 3)),
    registry={},
)


def pointer_to_ndc(x: float, y: float, viewport: Viewport) -> tuple[float, float]:
    """Viewport pixels (origin top-left) to normalized device coordinates (y up)."""
    return (x / viewport.width) * 2.0 - 1.0, -(y / viewport.height) * 2.0 + 1.0


def cast_ray(camera: Camera, ndc_x: float, ndc_y: float) -> Ray:
    forward, right, up = camera.basis()
    projection = camera.projection
    origin = np.asarray(camera.position, dtype=float)
    if isinstance(projection, OrthographicProjection):
        offset_x = projection.left + (ndc_x + 1.0) / 2.0 * projection.width
        offset_y = projection.bottom + (ndc_y + 1.0) / 2.0 * projection.height
        origin = origin + offset_x * right + offset_y * up
        direction = forward
    elif isinstance(projection, PerspectiveProjection):
        tan_half = math.tan(math.radians(projection.fov_deg) / 2.0)
        direction = (
            forward
            + (ndc_x * tan_half * projection.aspect) * right
            + (ndc_y * tan_half) * up
        )
        direction = direction / np.linalg.norm(direction)
    else:
        msg = f"unsupported projection: {projection!r}"
        raise TypeError(msg)
    return Ray(origin=tuple(origin.tolist()), direction=tuple(direction.tolist()))


def _slab_distances(ray: Ray, lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """Entry distance of the ray into each box, ``inf`` where it misses."""
    origin = np.asarray(ray.origin, dtype=float)
    direction = np.asarray(ray.direction, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        inverse = 1.0 / direction
        t1 = (lower - origin) * inverse
        t2 = (upper - origin) * inverse
        t_near = np.minimum(t1, t2)
        t_far = np.maximum(t1, t2)

    parallel = direction == 0.0
    if parallel.any():
        inside = (origin >= lower) & (origin <= upper)
        t_near = np.where(parallel, np.where(inside, -np.inf, np.inf), t_near)
        t_far = np.where(parallel, np.where(inside, np.inf, -np.inf), t_far)

    enter = t_near.max(axis=1)
    leave = t_far.min(axis=1)
    hit = (enter <= leave) & (leave >= 0.0)
    distance = np.where(enter >= 0.0, enter, 0.0)
    return np.where(hit, distance, np.inf)


class PickingService:
    """Resolves rays to front-layer cells.

    Ghost layers are never indexed. ``refresh`` swaps in a brand-new index for
    each scene, so ids from a discarded scene stop resolving immediately.
    """

    def __init__(self) -> None:
        self._index = _EMPTY

    @property
    def registry(self) -> dict[int, CellIndex]:
        return self._index.registry

    def refresh(self, scene: Scene) -> None:
        cells = scene.cells
        if not cells:
            self._index = _EMPTY
            return
        centers = np.array([cell.center for cell in cells], dtype=float)
        half = np.array([cell.size for cell in cells], dtype=float) / 2.0
        self._index = _PickIndex(
            ids=np.array([cell.id for cell in cells], dtype=np.int64),
            lower=centers - half,
            upper=centers + half,
            registry=dict(scene.registry),
        )

    def pick_detail(self, ray: Ray) -> PickHit | None:
        index = self._index
        if index.ids.size == 0:
            return None
        distances = _slab_distances(ray, index.lower, index.upper)
        nearest = int(np.argmin(distances))
        if not np.isfinite(distances[nearest]):
            return None
        drawable_id = int(index.ids[nearest])
        cell_index = index.registry.get(drawable_id)
        if cell_index is None:
            return None
        return PickHit(index=cell_index, drawable_id=drawable_id, distance=float(distances[nearest]))

    def pick(self, ray: Ray) -> CellIndex | None:
        hit = self.pick_detail(ray)
        return None if hit is None else hit.index

    def resolve(self, drawable_id: int) -> CellIndex | None:
        return self._index.registry.get(drawable_id)


__all__ = ["PickHit", "PickingService", "Ray", "cast_ray", "pointer_to_ndc"]
