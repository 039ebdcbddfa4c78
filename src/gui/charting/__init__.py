"""Heatmap charting layer.

Pipeline: ``build_scales`` -> ``render_heatmap`` (grid, axes, legend into a
``Surface``) -> ``MatplotlibChartBackend`` draws the surface. The
``HeatmapLifecycle`` owns the live surface across refreshes and the
``TooltipController`` holds the hover state.

Importing this package does not import Qt; matplotlib is only needed by
``backends`` and ``export``.
"""

from .scales import BandScale, ScaleSet, SequentialColorScale, build_scales  # noqa: F401
from .grid import CellView, build_cells  # noqa: F401
from .heatmap import render_heatmap  # noqa: F401
from .lifecycle import HeatmapLifecycle  # noqa: F401
from .surface import PointerEvent, Surface  # noqa: F401
from .tooltip import TooltipController, TooltipState  # noqa: F401
