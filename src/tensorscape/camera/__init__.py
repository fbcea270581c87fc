from tensorscape.camera.controller import (
    Camera,
    CameraController,
    OrthographicProjection,
    PerspectiveProjection,
    orbit_position,
)

__all__ = [
    "Camera",
    "CameraController",
    "OrthographicProjection",
    "PerspectiveProjection",
    "orbit_position",
]
