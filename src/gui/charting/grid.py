"""Heatmap cell grid: one rectangle per (year, month) record.

``build_cells`` is pure: Dataset + ScaleSet -> CellViews. ``render_grid``
materializes them as ``rect.cell`` elements and attaches pointer handlers.

Handlers keep only the cell key and a weak reference to the surface. The
record, base temperature and scales are looked up in the surface's render
context when the event fires, so a handler that outlives its surface finds
nothing to act on and returns without touching the tooltip.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from domain.models import Dataset, VarianceRecord
from .scales import ScaleSet
from .surface import POINTER_ENTER, POINTER_LEAVE, Element, PointerEvent, Surface

if TYPE_CHECKING:  # pragma: no cover
    from .tooltip import TooltipController

__all__ = ["CellKey", "CellView", "RenderContext", "CellPointerHandler", "build_cells", "render_grid"]

CellKey = Tuple[int, int]

HIGHLIGHT_STROKE = "black"
HIGHLIGHT_WIDTH = 1


@dataclass(frozen=True)
class CellView:
    key: CellKey
    x: float
    y: float
    width: float
    height: float
    color: str
    absolute_temperature: float
    record: VarianceRecord


@dataclass(frozen=True)
class RenderContext:
    """What a cell handler needs at event time, owned by the live surface."""

    dataset: Dataset
    scales: ScaleSet
    controller: "TooltipController"
    records: Dict[CellKey, VarianceRecord]

    def anchor_height(self) -> float:
        return self.scales.month_scale.bandwidth if self.scales.month_scale else 0.0


def build_cells(dataset: Dataset, scales: ScaleSet) -> List[CellView]:
    if scales.is_empty or dataset.is_empty:
        return []
    xs, ys, colors = scales.year_scale, scales.month_scale, scales.color_scale
    cells: Dict[CellKey, CellView] = {}
    for record in dataset.records:
        absolute = dataset.base_temperature + record.variance
        # Duplicate keys: last record wins, slot order of first occurrence kept
        cells[record.key] = CellView(
            key=record.key,
            x=xs(record.year),
            y=ys(record.month),
            width=xs.bandwidth,
            height=ys.bandwidth,
            color=colors(absolute),
            absolute_temperature=absolute,
            record=record,
        )
    return list(cells.values())


class CellPointerHandler:
    __slots__ = ("key", "kind", "_surface")

    def __init__(self, key: CellKey, kind: str, surface: Surface) -> None:
        self.key = key
        self.kind = kind
        self._surface = weakref.ref(surface)

    def __call__(self, event: PointerEvent) -> None:
        surface = self._surface()
        if surface is None or not surface.active:
            return
        ctx: Optional[RenderContext] = surface.context
        element = surface.cells.get(self.key)
        if ctx is None or element is None:
            return
        if self.kind == POINTER_ENTER:
            element.set("stroke", HIGHLIGHT_STROKE).set("stroke-width", HIGHLIGHT_WIDTH)
            ctx.controller.pointer_enter(
                ctx.records[self.key],
                event,
                base_temperature=ctx.dataset.base_temperature,
                anchor_height=ctx.anchor_height(),
            )
        else:
            element.set("stroke", "none")
            ctx.controller.pointer_leave(ctx.records[self.key])


def render_grid(parent: Element, cells: Sequence[CellView], surface: Surface) -> Dict[CellKey, Element]:
    elements: Dict[CellKey, Element] = {}
    for cell in cells:
        rect = parent.append(
            "rect",
            {
                "class": "cell",
                "x": cell.x,
                "y": cell.y,
                "width": cell.width,
                "height": cell.height,
                "data-month": cell.record.month,
                "data-year": cell.record.year,
                "data-temp": cell.absolute_temperature,
                "fill": cell.color,
                "stroke": "none",
            },
        )
        rect.on(POINTER_ENTER, CellPointerHandler(cell.key, POINTER_ENTER, surface))
        rect.on(POINTER_LEAVE, CellPointerHandler(cell.key, POINTER_LEAVE, surface))
        elements[cell.key] = rect
    surface.cells.update(elements)
    return elements
