"""Heatmap GUI layer.

Keeps imports free of Qt so the charting pipeline and services can be used
(and tested) headless; `gui.heatmap_view` and `gui.workers` pull in PyQt6.
"""

from __future__ import annotations

from .services.event_bus import Event, EventBus, HeatmapEvent  # noqa: F401
