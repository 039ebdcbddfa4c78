"""Year and month axes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from domain.models import month_name
from .scales import BandScale, ScaleSet
from .surface import Element

DECADE = 10
TICK_SIZE = 6


@dataclass(frozen=True)
class Tick:
    value: int
    label: str
    position: float  # band center along the axis


def year_ticks(year_scale: BandScale) -> List[Tick]:
    # A domain without a multiple of ten yields no ticks
    return [
        Tick(year, str(year), year_scale.center(year))
        for year in year_scale.domain
        if year % DECADE == 0  # type: ignore[operator]
    ]


def month_ticks(month_scale: BandScale) -> List[Tick]:
    return [Tick(m, month_name(m), month_scale.center(m)) for m in month_scale.domain]  # type: ignore[arg-type]


def render_axes(parent: Element, scales: ScaleSet, *, height: float) -> Tuple[Element, Element]:
    x_axis = parent.append("g", {"id": "x-axis", "transform": (0, height), "orient": "bottom"})
    y_axis = parent.append("g", {"id": "y-axis", "transform": (0, 0), "orient": "left"})
    if scales.is_empty:
        return x_axis, y_axis
    for tick in year_ticks(scales.year_scale):
        g = x_axis.append("g", {"class": "tick", "data-value": tick.value, "x": tick.position})
        g.append("line", {"x1": tick.position, "x2": tick.position, "y1": 0, "y2": TICK_SIZE})
        g.append("text", {"x": tick.position, "y": TICK_SIZE + 3, "anchor": "middle"}, text=tick.label)
    for tick in month_ticks(scales.month_scale):
        g = y_axis.append("g", {"class": "tick", "data-value": tick.value, "y": tick.position})
        g.append("line", {"x1": -TICK_SIZE, "x2": 0, "y1": tick.position, "y2": tick.position})
        g.append("text", {"x": -TICK_SIZE - 3, "y": tick.position, "anchor": "end"}, text=tick.label)
    return x_axis, y_axis
