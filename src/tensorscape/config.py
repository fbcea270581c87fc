"""Runtime configuration for the tensor visualizer.

Values come from ``TENSORSCAPE_*`` environment variables when present and fall
back to the defaults below. Malformed values never raise; they are logged and
replaced by the default.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

ENV_PREFIX = "TENSORSCAPE_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class VisualizerConfig:
    heads: int = 2
    batch: int = 8
    sequence: int = 12
    dim: int = 8
    explode: float = 0.3
    max_heads: int = 8
    max_batch: int = 16
    max_sequence: int = 32
    max_dim: int = 32
    max_explode: float = 3.0
    fov_deg: float = 45.0
    near: float = 0.1
    far: float = 1000.0
    ortho_field: float = 20.0
    ortho_distance: float = 30.0
    min_distance: float = 5.0
    max_distance: float = 100.0
    elevation_limit: float = 1.5
    default_azimuth: float = 0.5
    default_elevation: float = 0.3
    default_distance: float = 25.0
    drag_azimuth_gain: float = 0.005
    drag_elevation_gain: float = 0.005
    zoom_gain: float = 0.02
    autorotate_step: float = 0.005
    viewport_width: int = 1280
    viewport_height: int = 720
    activation_seed: int | None = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        for name in ("heads", "batch", "sequence", "dim"):
            value = getattr(self, name)
            limit = getattr(self, f"max_{name}")
            if value < 1:
                msg = f"{name} must be at least 1"
                raise ValueError(msg)
            if value > limit:
                msg = f"{name} must not exceed max_{name}={limit}"
                raise ValueError(msg)
        if not 0 <= self.explode <= self.max_explode:
            msg = "explode must be in [0, max_explode]"
            raise ValueError(msg)
        if not 0 < self.min_distance <= self.max_distance:
            msg = "min_distance must be positive and not exceed max_distance"
            raise ValueError(msg)
        if not self.min_distance <= self.default_distance <= self.max_distance:
            msg = "default_distance must be in [min_distance, max_distance]"
            raise ValueError(msg)
        if not 0 < self.elevation_limit < math.pi / 2:
            msg = "elevation_limit must be in (0, pi/2)"
            raise ValueError(msg)
        if abs(self.default_elevation) > self.elevation_limit:
            msg = "default_elevation must be within +/- elevation_limit"
            raise ValueError(msg)
        if not 0 < self.fov_deg < 180:
            msg = "fov_deg must be in (0, 180)"
            raise ValueError(msg)
        if not 0 < self.near < self.far:
            msg = "near must be positive and below far"
            raise ValueError(msg)
        if self.ortho_field <= 0 or self.ortho_distance <= 0:
            msg = "ortho_field and ortho_distance must be positive"
            raise ValueError(msg)
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            msg = "viewport dimensions must be positive"
            raise ValueError(msg)

    @property
    def default_shape(self) -> tuple[int, int, int, int]:
        return (self.heads, self.batch, self.sequence, self.dim)


def _coerce_int(value: object, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _coerce_float(value: object, default: float) -> float:
    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if not math.isfinite(parsed):
        return default
    return parsed


def _coerce_field(kind: str, raw: str, default: object) -> object:
    if kind == "int":
        return _coerce_int(raw, default)  # type: ignore[arg-type]
    if kind == "float":
        return _coerce_float(raw, default)  # type: ignore[arg-type]
    if kind == "int | None":
        if raw.strip().lower() in {"", "none", "random"}:
            return None
        return _coerce_int(raw, default)  # type: ignore[arg-type]
    return raw.strip() or default


def load_config(env: Mapping[str, str] | None = None) -> VisualizerConfig:
    """Build a config from ``TENSORSCAPE_*`` variables, ignoring unusable values."""
    env = os.environ if env is None else env
    defaults = VisualizerConfig()
    overrides: dict[str, object] = {}
    for field in fields(VisualizerConfig):
        raw = env.get(f"{ENV_PREFIX}{field.name.upper()}")
        if raw is None:
            continue
        default = getattr(defaults, field.name)
        overrides[field.name] = _coerce_field(str(field.type), raw, default)

    try:
        return VisualizerConfig(**overrides)
    except ValueError:
        logger.warning("Invalid %s* configuration; using defaults", ENV_PREFIX, exc_info=True)
        return defaults


def configure_logging(level: str | int | None = None) -> None:
    """Install a root handler once; later calls only adjust the level."""
    resolved = level if level is not None else load_config().log_level
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("tensorscape").setLevel(resolved)


__all__ = ["ENV_PREFIX", "VisualizerConfig", "configure_logging", "load_config"]
