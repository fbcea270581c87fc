from __future__ import annotations

import argparse
from pathlib import Path

from tensorscape.config import configure_logging, load_config
from tensorscape.layout.activations import RandomActivations
from tensorscape.layout.engine import CellIndex, cells_to_frame, count_cells, count_ghosts
from tensorscape.loop import ReactiveLoop
from tensorscape.render.plotly_figure import PlotlyRenderer
from tensorscape.state.store import AXES, SetDimension, SetExplode, SetHeatmap, SetViewMode


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Lay out a 4D (H, B, S, D) tensor shape and export the 3D view."
    )
    parser.add_argument(
        "--shape",
        type=int,
        nargs=4,
        metavar=AXES,
        default=None,
        help="Tensor shape as four positive integers. Defaults to the configured shape.",
    )
    parser.add_argument(
        "--explode",
        type=float,
        default=None,
        help="Batch layer separation factor (>= 0).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the mock activation values.",
    )
    parser.add_argument("--heatmap", action="store_true", help="Colour cells by activation.")
    parser.add_argument("--2d", dest="flat", action="store_true", help="Orthographic 2D view.")
    parser.add_argument(
        "--hover",
        type=int,
        nargs=2,
        metavar=("S", "D"),
        default=None,
        help="Highlight the cross-section at sequence S, dim D.",
    )
    parser.add_argument("--html", type=str, default=None, help="Write the figure as HTML.")
    parser.add_argument("--csv", type=str, default=None, help="Write the front cells as CSV.")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level name.")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    config = load_config()
    configure_logging(args.log_level or config.log_level)

    seed = args.seed if args.seed is not None else config.activation_seed
    renderer = PlotlyRenderer()
    loop = ReactiveLoop(config=config, renderer=renderer, activations=RandomActivations(seed))
    if args.shape is not None:
        limits = (config.max_heads, config.max_batch, config.max_sequence, config.max_dim)
        for axis, value, limit in zip(AXES, args.shape, limits, strict=True):
            if value < 1:
                msg = f"{axis} must be at least 1"
                raise SystemExit(msg)
            if value > limit:
                msg = f"{axis} must not exceed {limit}"
                raise SystemExit(msg)
            loop.dispatch(SetDimension(axis, value))
    if args.explode is not None:
        if not 0 <= args.explode <= config.max_explode:
            msg = f"explode must be in [0, {config.max_explode}]"
            raise SystemExit(msg)
        loop.dispatch(SetExplode(args.explode))
    if args.heatmap:
        loop.dispatch(SetHeatmap(True))
    if args.flat:
        loop.dispatch(SetViewMode(False))

    scene = loop.scene
    blocks = list(scene.blocks)
    print(f"Shape: {loop.shape_display}")
    print(f"Blocks: {len(blocks)}")
    print(f"Interactive cells: {count_cells(blocks)}")
    print(f"Ghost layers: {count_ghosts(blocks)}")

    if args.hover is not None:
        s, d = args.hover
        matched = loop.hover(CellIndex(0, 0, s, d))
        if matched:
            print(f"Cross-section (s={s}, d={d}): {len(matched)} cells")
            print(loop.tooltip.text)
        else:
            print(f"No front cell at (s={s}, d={d})")

    loop.tick()
    if args.html is not None and renderer.figure is not None:
        renderer.figure.write_html(args.html)
        print(f"Saved figure to: {Path(args.html)}")
    if args.csv is not None:
        cells_to_frame(blocks).to_csv(args.csv, index=False)
        print(f"Saved cells to: {Path(args.csv)}")


if __name__ == "__main__":
    main()
