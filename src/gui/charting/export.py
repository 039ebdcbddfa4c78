"""Headless export of a heatmap to PNG or SVG."""

from __future__ import annotations

from typing import Any, Dict, Optional

from domain.models import Dataset, HeatmapSummary
from .backends import MatplotlibChartBackend
from .layout import DEFAULT_LAYOUT, HeatmapLayout
from .lifecycle import HeatmapLifecycle
from .tooltip import TooltipController


def export_heatmap(
    dataset: Dataset,
    path: str,
    *,
    format: str = "png",
    dpi: int | None = None,
    layout: HeatmapLayout = DEFAULT_LAYOUT,
    backend: Optional[MatplotlibChartBackend] = None,
    strict: bool | None = None,
) -> Dict[str, Any]:
    """Render ``dataset`` and write it to ``path``.

    Returns a small summary dict (cell count plus the page summary values).
    An empty dataset still produces a file containing a blank canvas.
    """
    backend = backend or MatplotlibChartBackend()
    lifecycle = HeatmapLifecycle(TooltipController(), layout=layout, strict=strict)
    try:
        surface = lifecycle.render(dataset)
        fig = backend.create_figure(layout)
        if surface is not None:
            backend.draw_surface(surface, fig)
        backend.export_figure(fig, path, format=format, dpi=dpi)
        summary: HeatmapSummary = lifecycle.summary
        return {
            "path": path,
            "format": format.lower(),
            "cells": len(surface.cells) if surface is not None else 0,
            "min_year": summary.min_year,
            "max_year": summary.max_year,
            "base_temperature": summary.base_temperature,
        }
    finally:
        lifecycle.unmount()
