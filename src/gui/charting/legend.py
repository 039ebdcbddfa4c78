"""Color legend: a horizontal strip of equal-width swatches.

The strip width is a layout constant; the data only decides the colors
and the value printed under each swatch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .scales import ScaleSet
from .surface import Element


@dataclass(frozen=True)
class LegendSwatch:
    x: float
    width: float
    height: float
    color: str
    value: float

    @property
    def label(self) -> str:
        return f"{self.value:.1f}"


def build_legend(scales: ScaleSet, *, strip_width: float = 300, swatch_height: float = 15) -> List[LegendSwatch]:
    samples = sorted(scales.legend_samples, key=lambda s: s.value)
    if not samples:
        return []
    width = strip_width / len(samples)
    return [LegendSwatch(width * i, width, swatch_height, s.color, s.value) for i, s in enumerate(samples)]


def render_legend(parent: Element, swatches: List[LegendSwatch], *, x: float, y: float) -> Element:
    legend = parent.append("g", {"id": "legend", "transform": (x, y)})
    for sw in swatches:
        legend.append(
            "rect",
            {
                "class": "legendRect",
                "x": sw.x,
                "y": 0,
                "width": sw.width,
                "height": sw.height,
                "fill": sw.color,
                "data-value": sw.value,
            },
        )
        legend.append(
            "text",
            {"class": "legendLabel", "x": sw.x + sw.width / 2, "y": sw.height + 4, "anchor": "middle"},
            text=sw.label,
        )
    return legend
