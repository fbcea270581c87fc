from tensorscape.render.plotly_figure import PlotlyRenderer, Renderer, build_figure, pack_boxes

__all__ = ["PlotlyRenderer", "Renderer", "build_figure", "pack_boxes"]
