from __future__ import annotations

from typing import Any

import streamlit as st

from tensorscape.config import configure_logging, load_config
from tensorscape.layout.engine import CellIndex, cells_to_frame, count_cells, count_ghosts
from tensorscape.loop import ReactiveLoop
from tensorscape.render.plotly_figure import PlotlyRenderer
from tensorscape.state.store import (
    AXES,
    ResetView,
    SetDimension,
    SetExplode,
    SetHeatmap,
    SetViewMode,
    ToggleAutoRotate,
)

st.set_page_config(page_title="Tensorscape", layout="wide")

st.markdown(
    """
<style>
.stApp {
    background-color: #0a0a0a;
    color: #e5edf7;
    font-family: "JetBrains Mono", "SFMono-Regular", monospace;
}
[data-testid="stSidebar"] {
    background-color: #0e1627;
    border-right: 1px solid #1f2a3f;
}
[data-testid="stMetric"] {
    background-color: #111b2f;
    border: 1px solid #2a3b58;
    border-radius: 8px;
    padding: 10px 12px;
}
</style>
""",
    unsafe_allow_html=True,
)

CONFIG = load_config()
configure_logging(CONFIG.log_level)

AXIS_LABELS = {"H": "Heads (H)", "B": "Batch (B)", "S": "Sequence (S)", "D": "Dim (D)"}
AXIS_LIMITS = {
    "H": CONFIG.max_heads,
    "B": CONFIG.max_batch,
    "S": CONFIG.max_sequence,
    "D": CONFIG.max_dim,
}


def _loop() -> ReactiveLoop:
    if "tensor_loop" not in st.session_state:
        st.session_state["tensor_loop"] = ReactiveLoop(config=CONFIG, renderer=PlotlyRenderer())
    return st.session_state["tensor_loop"]


def _selected_index(event: Any) -> CellIndex | None:
    try:
        points = event.selection.points
    except AttributeError:
        return None
    for point in points:
        customdata = point.get("customdata") if isinstance(point, dict) else None
        if customdata and len(customdata) >= 4:
            return CellIndex(*(int(value) for value in customdata[:4]))
    return None


loop = _loop()
shape = loop.store.shape
view = loop.store.view

with st.sidebar:
    st.header("Tensor Shape")
    dims: dict[str, int] = {}
    for axis in AXES:
        dims[axis] = st.slider(
            AXIS_LABELS[axis],
            min_value=1,
            max_value=AXIS_LIMITS[axis],
            value=getattr(shape, axis),
            step=1,
        )
        st.caption(f"{axis} = {dims[axis]:.0f}")
    explode = st.slider(
        "Explode",
        min_value=0.0,
        max_value=float(CONFIG.max_explode),
        value=float(view.explode),
        step=0.01,
    )
    st.caption(f"explode = {explode:.2f}")

    st.header("View")
    heatmap = st.toggle("Heatmap", value=view.heatmap)
    is_3d = not st.toggle("2D view", value=not view.is_3d)
    auto_rotate = st.toggle("Auto-rotate", value=view.auto_rotate)
    reset_clicked = st.button("Reset view")

    st.header("Inspect")
    inspect_cols = st.columns(3)
    inspect_h = inspect_cols[0].number_input("h", min_value=0, max_value=dims["H"] - 1, value=0)
    inspect_s = inspect_cols[1].number_input("s", min_value=0, max_value=dims["S"] - 1, value=0)
    inspect_d = inspect_cols[2].number_input("d", min_value=0, max_value=dims["D"] - 1, value=0)
    inspect_enabled = st.checkbox("Highlight cross-section", value=False)

for axis in AXES:
    if dims[axis] != getattr(loop.store.shape, axis):
        loop.dispatch(SetDimension(axis, dims[axis]))
if explode != loop.store.view.explode:
    loop.dispatch(SetExplode(explode))
if heatmap != loop.store.view.heatmap:
    loop.dispatch(SetHeatmap(heatmap))
if is_3d != loop.store.view.is_3d:
    loop.dispatch(SetViewMode(is_3d))
if auto_rotate != loop.store.view.auto_rotate:
    loop.dispatch(ToggleAutoRotate())
if reset_clicked:
    loop.dispatch(ResetView())

hover_target = st.session_state.get("tensor_hover")
if inspect_enabled:
    hover_target = CellIndex(int(inspect_h), 0, int(inspect_s), int(inspect_d))
matched = loop.hover(hover_target)
loop.tick()

st.title("Tensorscape")
st.caption("4D tensor layout: one interactive front slice per head, ghost layers for the batch")

blocks = list(loop.scene.blocks)
kpi_cols = st.columns(4)
kpi_cols[0].metric("Shape", loop.shape_display)
kpi_cols[1].metric("Blocks", f"{len(blocks)}")
kpi_cols[2].metric("Interactive cells", f"{count_cells(blocks)}")
kpi_cols[3].metric("Ghost layers", f"{count_ghosts(blocks)}")

figure = loop.renderer.figure if loop.renderer is not None else None
if figure is not None:
    event = st.plotly_chart(
        figure,
        width="stretch",
        on_select="rerun",
        selection_mode="points",
        key="tensor_view",
    )
    selected = _selected_index(event)
    if selected != st.session_state.get("tensor_hover") and not inspect_enabled:
        st.session_state["tensor_hover"] = selected
        st.rerun()

if loop.tooltip.visible:
    st.code(loop.tooltip.text, language=None)
    st.markdown(f"**Cross-section:** {len(matched)} cells share (s, d)")
else:
    st.info("Select a cell in the view, or enable the cross-section inspector.")

with st.expander("Front cells"):
    frame = cells_to_frame(blocks)
    if matched:
        keys = {(index.h, index.s, index.d) for index in matched}
        frame = frame[[key in keys for key in zip(frame["h"], frame["s"], frame["d"], strict=True)]]
    st.dataframe(frame, width="stretch")
