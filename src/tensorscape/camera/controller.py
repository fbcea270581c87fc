from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

import numpy as np

from tensorscape.layout.engine import Vec3
from tensorscape.state.store import (
    Orbit,
    OrbitAngles,
    ResetView,
    Resize,
    StateStore,
    Viewport,
    Zoom,
)

logger = logging.getLogger(__name__)

WORLD_UP: Vec3 = (0.0, 1.0, 0.0)
ORIGIN: Vec3 = (0.0, 0.0, 0.0)


def _clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(value, max_value))


@dataclass(frozen=True)
class PerspectiveProjection:
    fov_deg: float
    aspect: float
    near: float
    far: float


@dataclass(frozen=True)
class OrthographicProjection:
    left: float
    right: float
    top: float
    bottom: float
    near: float
    far: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom


@dataclass(frozen=True)
class Camera:
    position: Vec3
    projection: PerspectiveProjection | OrthographicProjection
    target: Vec3 = ORIGIN
    up: Vec3 = WORLD_UP

    @property
    def is_orthographic(self) -> bool:
        return isinstance(self.projection, OrthographicProjection)

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return unit (forward, right, up) vectors of the look-at frame."""
        forward = np.subtract(self.target, self.position, dtype=float)
        forward /= np.linalg.norm(forward)
        right = np.cross(forward, np.asarray(self.up, dtype=float))
        right /= np.linalg.norm(right)
        true_up = np.cross(right, forward)
        return forward, right, true_up


def orbit_position(angles: OrbitAngles, distance: float) -> Vec3:
    return (
        distance * math.sin(angles.x) * math.cos(angles.y),
        distance * math.sin(angles.y),
        distance * math.cos(angles.x) * math.cos(angles.y),
    )


class CameraController:
    """Orbit camera driven by the angles and distance held in the state store."""

    def __init__(self, store: StateStore) -> None:
        self.store = store
        self.camera = self.sync()

    def _projection(self, viewport: Viewport) -> PerspectiveProjection | OrthographicProjection:
        cfg = self.store.config
        aspect = viewport.aspect
        if self.store.view.is_3d:
            return PerspectiveProjection(
                fov_deg=cfg.fov_deg, aspect=aspect, near=cfg.near, far=cfg.far
            )
        field = cfg.ortho_field
        return OrthographicProjection(
            left=-field * aspect / 2.0,
            right=field * aspect / 2.0,
            top=field / 2.0,
            bottom=-field / 2.0,
            near=cfg.near,
            far=cfg.far,
        )

    def sync(self) -> Camera:
        """Rebuild projection and position from the current state."""
        view = self.store.view
        if view.is_3d:
            position = orbit_position(view.angles, view.camera_dist)
        else:
            position = (0.0, 0.0, self.store.config.ortho_distance)
        self.camera = Camera(position=position, projection=self._projection(self.store.viewport))
        return self.camera

    def drag(self, dx: float, dy: float) -> Camera:
        cfg = self.store.config
        view = self.store.view
        if not (math.isfinite(dx) and math.isfinite(dy)):
            return self.camera
        angles = OrbitAngles(
            x=view.angles.x - dx * cfg.drag_azimuth_gain,
            y=_clamp(
                view.angles.y + dy * cfg.drag_elevation_gain,
                -cfg.elevation_limit,
                cfg.elevation_limit,
            ),
        )
        self.store.replace_view(replace(view, angles=angles))
        return self.sync()

    def wheel(self, delta: float) -> Camera:
        cfg = self.store.config
        view = self.store.view
        if not math.isfinite(delta):
            return self.camera
        distance = _clamp(
            view.camera_dist + delta * cfg.zoom_gain, cfg.min_distance, cfg.max_distance
        )
        self.store.replace_view(replace(view, camera_dist=distance))
        return self.sync()

    def reset(self) -> Camera:
        cfg = self.store.config
        self.store.replace_view(
            replace(
                self.store.view,
                camera_dist=cfg.default_distance,
                angles=OrbitAngles(x=cfg.default_azimuth, y=cfg.default_elevation),
            )
        )
        return self.sync()

    def resize(self, width: int, height: int) -> Camera:
        change = self.store.apply(Resize(width, height))
        if change.projection:
            self.camera = replace(self.camera, projection=self._projection(self.store.viewport))
        return self.camera

    def autorotate_step(self) -> Camera:
        view = self.store.view
        angles = OrbitAngles(x=view.angles.x + self.store.config.autorotate_step, y=view.angles.y)
        self.store.replace_view(replace(view, angles=angles))
        return self.sync()

    def handle(self, command: Orbit | Zoom | ResetView) -> Camera:
        if isinstance(command, Orbit):
            return self.drag(command.dx, command.dy)
        if isinstance(command, Zoom):
            return self.wheel(command.delta)
        if isinstance(command, ResetView):
            logger.debug("camera reset")
            return self.reset()
        msg = f"unsupported camera command: {command!r}"
        raise TypeError(msg)


__all__ = [
    "Camera",
    "CameraController",
    "OrthographicProjection",
    "PerspectiveProjection",
    "orbit_position",
]
