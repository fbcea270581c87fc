from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from tensorscape.config import VisualizerConfig

logger = logging.getLogger(__name__)

AXES = ("H", "B", "S", "D")


def _clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(value, max_value))


@dataclass(frozen=True)
class TensorShape:
    H: int
    B: int
    S: int
    D: int

    def __post_init__(self) -> None:
        for axis in AXES:
            value = getattr(self, axis)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"{axis} must be an integer"
                raise ValueError(msg)
            if value < 1:
                msg = f"{axis} must be at least 1"
                raise ValueError(msg)

    @property
    def display(self) -> str:
        return f"[{self.H}, {self.B}, {self.S}, {self.D}]"

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.H, self.B, self.S, self.D)


@dataclass(frozen=True)
class OrbitAngles:
    x: float
    y: float


@dataclass(frozen=True)
class ViewState:
    explode: float = 0.3
    is_3d: bool = True
    heatmap: bool = False
    auto_rotate: bool = False
    camera_dist: float = 25.0
    angles: OrbitAngles = OrbitAngles(x=0.5, y=0.3)

    def __post_init__(self) -> None:
        if not math.isfinite(self.explode) or self.explode < 0:
            msg = "explode must be a finite non-negative number"
            raise ValueError(msg)
        if not math.isfinite(self.camera_dist) or self.camera_dist <= 0:
            msg = "camera_dist must be a finite positive number"
            raise ValueError(msg)


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            msg = "viewport dimensions must be positive"
            raise ValueError(msg)

    @property
    def aspect(self) -> float:
        return self.width / self.height


# Commands. Each UI event becomes one of these and is consumed synchronously.


@dataclass(frozen=True)
class SetDimension:
    axis: str
    value: object


@dataclass(frozen=True)
class SetExplode:
    value: object


@dataclass(frozen=True)
class SetViewMode:
    is_3d: bool


@dataclass(frozen=True)
class SetHeatmap:
    enabled: bool


@dataclass(frozen=True)
class ToggleAutoRotate:
    pass


@dataclass(frozen=True)
class ResetView:
    pass


@dataclass(frozen=True)
class Orbit:
    dx: float
    dy: float


@dataclass(frozen=True)
class Zoom:
    delta: float


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


Command = (
    SetDimension
    | SetExplode
    | SetViewMode
    | SetHeatmap
    | ToggleAutoRotate
    | ResetView
    | Orbit
    | Zoom
    | Resize
)


@dataclass(frozen=True)
class StateChange:
    """What a command touched, so the loop knows which pipeline stages to run."""

    rebuild: bool = False
    camera: bool = False
    projection: bool = False


class StateStore:
    """Single owner of the shape, view state and viewport.

    Readers get immutable records; every mutation swaps in a new record.
    """

    def __init__(self, config: VisualizerConfig | None = None) -> None:
        self.config = config or VisualizerConfig()
        cfg = self.config
        self._shape = TensorShape(*cfg.default_shape)
        self._view = ViewState(
            explode=cfg.explode,
            camera_dist=cfg.default_distance,
            angles=OrbitAngles(x=cfg.default_azimuth, y=cfg.default_elevation),
        )
        self._viewport = Viewport(cfg.viewport_width, cfg.viewport_height)

    @property
    def shape(self) -> TensorShape:
        return self._shape

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def replace_view(self, view: ViewState) -> None:
        self._view = view

    def _dimension_limit(self, axis: str) -> int:
        cfg = self.config
        return {
            "H": cfg.max_heads,
            "B": cfg.max_batch,
            "S": cfg.max_sequence,
            "D": cfg.max_dim,
        }[axis]

    def apply(self, command: Command) -> StateChange:
        """Apply a control command. Orbit, zoom and reset belong to the camera controller."""
        if isinstance(command, SetDimension):
            return self._set_dimension(command)
        if isinstance(command, SetExplode):
            return self._set_explode(command)
        if isinstance(command, SetViewMode):
            if bool(command.is_3d) == self._view.is_3d:
                return StateChange()
            self._view = replace(self._view, is_3d=bool(command.is_3d))
            logger.debug("view mode set to %s", "3D" if self._view.is_3d else "2D")
            return StateChange(rebuild=True, camera=True, projection=True)
        if isinstance(command, SetHeatmap):
            if bool(command.enabled) == self._view.heatmap:
                return StateChange()
            self._view = replace(self._view, heatmap=bool(command.enabled))
            return StateChange(rebuild=True)
        if isinstance(command, ToggleAutoRotate):
            self._view = replace(self._view, auto_rotate=not self._view.auto_rotate)
            return StateChange()
        if isinstance(command, Resize):
            try:
                self._viewport = Viewport(int(command.width), int(command.height))
            except (TypeError, ValueError):
                logger.debug("ignoring resize to %sx%s", command.width, command.height)
                return StateChange()
            return StateChange(projection=True)
        msg = f"unsupported command: {command!r}"
        raise TypeError(msg)

    def _set_dimension(self, command: SetDimension) -> StateChange:
        if command.axis not in AXES:
            logger.debug("ignoring unknown axis %r", command.axis)
            return StateChange()
        try:
            raw = float(command.value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.debug("ignoring non-numeric %s=%r", command.axis, command.value)
            return StateChange()
        if not math.isfinite(raw):
            return StateChange()
        value = int(_clamp(round(raw), 1, self._dimension_limit(command.axis)))
        dims = dict(zip(AXES, self._shape.as_tuple(), strict=True))
        dims[command.axis] = value
        self._shape = TensorShape(**dims)
        # Same-value updates still rebuild: control mutations are unconditional.
        return StateChange(rebuild=True)

    def _set_explode(self, command: SetExplode) -> StateChange:
        try:
            raw = float(command.value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.debug("ignoring non-numeric explode=%r", command.value)
            return StateChange()
        if not math.isfinite(raw):
            return StateChange()
        explode = _clamp(raw, 0.0, self.config.max_explode)
        self._view = replace(self._view, explode=explode)
        return StateChange(rebuild=True)


__all__ = [
    "AXES",
    "Command",
    "OrbitAngles",
    "Orbit",
    "ResetView",
    "Resize",
    "SetDimension",
    "SetExplode",
    "SetHeatmap",
    "SetViewMode",
    "StateChange",
    "StateStore",
    "TensorShape",
    "ToggleAutoRotate",
    "ViewState",
    "Viewport",
    "Zoom",
]
