from tensorscape.state.store import (
    AXES,
    Command,
    Orbit,
    OrbitAngles,
    ResetView,
    Resize,
    SetDimension,
    SetExplode,
    SetHeatmap,
    SetViewMode,
    StateChange,
    StateStore,
    TensorShape,
    ToggleAutoRotate,
    ViewState,
    Viewport,
    Zoom,
)

__all__ = [
    "AXES",
    "Command",
    "Orbit",
    "OrbitAngles",
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
