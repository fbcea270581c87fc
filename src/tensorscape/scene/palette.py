from __future__ import annotations

import colorsys
import math
from dataclasses import dataclass

BACKGROUND_COLOR = "#0a0a0a"
BASE_COLOR = "#58c4dd"
HIGHLIGHT_COLOR = "#ffc107"
GHOST_COLOR = "#d0d0d0"
CELL_OPACITY = 0.8
GHOST_OPACITY = 0.4

HEATMAP_SATURATION = 0.85
HEATMAP_LIGHTNESS = 0.5
HEATMAP_COLD_HUE_DEG = 240.0


@dataclass(frozen=True)
class Emphasis:
    emissive: float
    edge_opacity: float


BASELINE = Emphasis(emissive=0.2, edge_opacity=0.6)
HEATMAP_BASELINE = Emphasis(emissive=0.45, edge_opacity=0.6)
HIGHLIGHTED = Emphasis(emissive=1.0, edge_opacity=1.0)
DIMMED = Emphasis(emissive=0.05, edge_opacity=0.15)


def _to_hex(red: float, green: float, blue: float) -> str:
    return "#{:02x}{:02x}{:02x}".format(*(round(channel * 255) for channel in (red, green, blue)))


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    token = color.lstrip("#")
    if len(token) != 6:
        msg = f"expected #rrggbb colour, got {color!r}"
        raise ValueError(msg)
    return (int(token[0:2], 16), int(token[2:4], 16), int(token[4:6], 16))


def heatmap_color(value: float) -> str:
    """Blue at 0, red at 1, clamped outside; NaN renders as the cold end."""
    if math.isnan(value):
        value = 0.0
    clamped = max(0.0, min(1.0, value))
    hue = (HEATMAP_COLD_HUE_DEG * (1.0 - clamped)) / 360.0
    return _to_hex(*colorsys.hls_to_rgb(hue, HEATMAP_LIGHTNESS, HEATMAP_SATURATION))


def baseline_color(value: float, *, heatmap: bool) -> str:
    return heatmap_color(value) if heatmap else BASE_COLOR


def baseline_emphasis(*, heatmap: bool) -> Emphasis:
    return HEATMAP_BASELINE if heatmap else BASELINE


def shade(color: str, emissive: float) -> str:
    """Lift a colour toward white in proportion to its emissive intensity."""
    lift = max(0.0, min(1.0, emissive)) * 0.5
    red, green, blue = hex_to_rgb(color)
    return _to_hex(*((channel + (255 - channel) * lift) / 255 for channel in (red, green, blue)))


__all__ = [
    "BACKGROUND_COLOR",
    "BASELINE",
    "BASE_COLOR",
    "CELL_OPACITY",
    "DIMMED",
    "Emphasis",
    "GHOST_COLOR",
    "GHOST_OPACITY",
    "HEATMAP_BASELINE",
    "HIGHLIGHTED",
    "HIGHLIGHT_COLOR",
    "baseline_color",
    "baseline_emphasis",
    "heatmap_color",
    "hex_to_rgb",
    "shade",
]
