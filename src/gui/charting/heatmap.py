"""One full render pass: Dataset -> Surface.

Scales are computed to completion first; grid, axes and legend then read
them. The returned surface owns everything drawn in this pass and is
disposed as a unit by the lifecycle manager.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.models import Dataset
from .axes import render_axes
from .grid import CellKey, RenderContext, build_cells, render_grid
from .layout import DEFAULT_LAYOUT, HeatmapLayout
from .legend import build_legend, render_legend
from .scales import ScaleSet, build_scales
from .surface import Surface
from .tooltip import TooltipController

log = logging.getLogger(__name__)

__all__ = ["render_heatmap", "cell_key_at", "plot_origin"]


def plot_origin(layout: HeatmapLayout = DEFAULT_LAYOUT) -> tuple[float, float]:
    return float(layout.margins.left), float(layout.margins.top)


def render_heatmap(
    dataset: Dataset,
    controller: TooltipController,
    *,
    layout: HeatmapLayout = DEFAULT_LAYOUT,
    scales: Optional[ScaleSet] = None,
    strict: bool | None = None,
) -> Surface:
    if scales is None:
        scales = build_scales(
            dataset,
            width=layout.width,
            height=layout.height,
            legend_samples=layout.legend_samples,
            strict=strict,
        )
    surface = Surface(layout.total_width, layout.total_height)
    plot = surface.root.append("g", {"id": "plot", "transform": plot_origin(layout)})
    cells = build_cells(dataset, scales)
    surface.context = RenderContext(
        dataset=dataset,
        scales=scales,
        controller=controller,
        records={c.key: c.record for c in cells},
    )
    render_grid(plot, cells, surface)
    render_axes(plot, scales, height=layout.height)
    swatches = build_legend(scales, strip_width=layout.legend_width, swatch_height=layout.legend_height)
    render_legend(
        plot,
        swatches,
        x=layout.width / 2 - layout.legend_width / 2,
        y=layout.height + layout.legend_gap,
    )
    log.debug("surface #%d rendered with %d cells", surface.id, len(cells))
    return surface


def cell_key_at(surface: Surface, x: float, y: float, layout: HeatmapLayout = DEFAULT_LAYOUT) -> Optional[CellKey]:
    """Hit-test page coordinates against the live surface's scales."""
    ctx: Optional[RenderContext] = surface.context
    if not surface.active or ctx is None or ctx.scales.is_empty:
        return None
    ox, oy = plot_origin(layout)
    year = ctx.scales.year_scale.invert(x - ox)
    month = ctx.scales.month_scale.invert(y - oy)
    if year is None or month is None:
        return None
    key = (year, month)
    return key if key in surface.cells else None
