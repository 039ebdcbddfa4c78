"""Matplotlib drawing backend for heatmap surfaces.

The backend turns a ``Surface`` element tree into matplotlib artists on a
``Figure`` whose single axes spans the whole canvas with a top-left origin,
so element coordinates are used unchanged. ``HoverBinding`` converts
matplotlib motion events into pointerenter / pointerleave dispatches on
the cell elements and mirrors the tooltip state into a text artist.

Qt embedding (``FigureCanvasQTAgg``) is done by the view; everything here
works with the headless Agg canvas as well.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from matplotlib.collections import PatchCollection
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from .heatmap import cell_key_at
from .layout import DEFAULT_LAYOUT, HeatmapLayout
from .surface import POINTER_ENTER, POINTER_LEAVE, Element, PointerEvent, Surface
from .tooltip import TooltipController, TooltipState

log = logging.getLogger(__name__)

__all__ = ["MatplotlibChartBackend", "HoverBinding"]

_ANCHORS = {"start": "left", "middle": "center", "end": "right"}


def _offset(el: Element, origin: Tuple[float, float]) -> Tuple[float, float]:
    dx, dy = el.get("transform", (0, 0))
    return origin[0] + dx, origin[1] + dy


class MatplotlibChartBackend:
    def __init__(self, dpi: int = 100) -> None:
        self.dpi = dpi

    def create_figure(self, layout: HeatmapLayout = DEFAULT_LAYOUT) -> Figure:
        return self._figure(layout.total_width, layout.total_height)

    def _figure(self, width: float, height: float) -> Figure:
        return Figure(figsize=(width / self.dpi, height / self.dpi), dpi=self.dpi)

    def draw_surface(self, surface: Surface, figure: Optional[Figure] = None) -> Figure:
        """Draw every element of ``surface`` onto ``figure`` (cleared first).

        Without a figure, one is created at the surface's own pixel size.
        """
        fig = figure if figure is not None else self._figure(surface.width, surface.height)
        fig.clear()
        ax = fig.add_axes((0, 0, 1, 1))
        ax.set_xlim(0, surface.width)
        ax.set_ylim(surface.height, 0)
        ax.set_axis_off()
        rects: List[Rectangle] = []
        colors: List[str] = []
        self._draw(ax, surface.root, (0.0, 0.0), rects, colors)
        if rects:
            ax.add_collection(PatchCollection(rects, facecolors=colors, edgecolors="none", linewidths=0))
        fig._heatmap_surface_id = surface.id  # type: ignore[attr-defined]
        return fig

    def _draw(self, ax, el: Element, origin: Tuple[float, float], rects, colors) -> None:
        if el.tag in ("g", "svg"):
            origin = _offset(el, origin)
            for child in el.children:
                self._draw(ax, child, origin, rects, colors)
        elif el.tag == "rect":
            ox, oy = origin
            rects.append(Rectangle((ox + el.get("x", 0), oy + el.get("y", 0)), el.get("width", 0), el.get("height", 0)))
            colors.append(el.get("fill", "none"))
        elif el.tag == "line":
            ox, oy = origin
            ax.plot(
                [ox + el.get("x1", 0), ox + el.get("x2", 0)],
                [oy + el.get("y1", 0), oy + el.get("y2", 0)],
                color="black",
                linewidth=0.8,
            )
        elif el.tag == "text":
            ox, oy = origin
            ax.text(
                ox + el.get("x", 0),
                oy + el.get("y", 0),
                el.text,
                ha=_ANCHORS.get(el.get("anchor", "start"), "left"),
                va="top" if el.get("anchor") == "middle" else "center",
                fontsize=8,
            )

    # Interactivity -----------------------------------------------------
    def bind_hover(
        self,
        figure: Figure,
        surface: Surface,
        controller: TooltipController,
        *,
        layout: HeatmapLayout = DEFAULT_LAYOUT,
    ) -> "HoverBinding":
        return HoverBinding(figure, surface, controller, layout=layout)

    # Export ------------------------------------------------------------
    def export_figure(self, figure: Figure, path: str, *, format: str = "png", dpi: int | None = None) -> None:
        fmt = format.lower()
        if fmt not in {"png", "svg"}:
            raise ValueError("format must be 'png' or 'svg'")
        figure.savefig(path, format=fmt, dpi=(dpi or self.dpi) if fmt == "png" else None)
        log.info("exported heatmap to %s (%s)", path, fmt)


class HoverBinding:
    """Routes canvas pointer motion to cell handlers for one surface."""

    def __init__(
        self,
        figure: Figure,
        surface: Surface,
        controller: TooltipController,
        *,
        layout: HeatmapLayout = DEFAULT_LAYOUT,
    ) -> None:
        self.figure = figure
        self.surface = surface
        self.layout = layout
        self.current: Optional[Tuple[int, int]] = None
        ax = figure.axes[0]
        self._highlight = Rectangle((0, 0), 0, 0, fill=False, edgecolor="black", linewidth=1, visible=False)
        ax.add_patch(self._highlight)
        self._tooltip = ax.text(
            0,
            0,
            "",
            ha="left",
            va="top",
            color="white",
            fontsize=9,
            visible=False,
            bbox={"boxstyle": "round", "fc": "black", "ec": "white", "lw": 2},
        )
        self._cids: List[int] = [
            figure.canvas.mpl_connect("motion_notify_event", self._on_motion),
            figure.canvas.mpl_connect("figure_leave_event", self._on_leave),
        ]
        self._unsubscribe = controller.subscribe(self._on_tooltip)

    @property
    def connected(self) -> bool:
        return bool(self._cids)

    def move_to(self, x: Optional[float], y: Optional[float]) -> None:
        """Apply a pointer position (surface coordinates, None when outside)."""
        if not self.surface.active:
            return
        key = cell_key_at(self.surface, x, y, self.layout) if x is not None and y is not None else None
        if key == self.current:
            return
        pointer = PointerEvent(x if x is not None else 0.0, y if y is not None else 0.0)
        previous, self.current = self.current, key
        # Enter before leave: a cell-to-cell move stays Shown -> Shown
        if key is not None:
            self._dispatch(key, POINTER_ENTER, pointer)
        if previous is not None:
            self._dispatch(previous, POINTER_LEAVE, pointer)
        self._sync_highlight()
        self.figure.canvas.draw_idle()

    def _dispatch(self, key, kind: str, pointer: PointerEvent) -> None:
        el = self.surface.cells.get(key)
        if el is not None:
            el.dispatch(kind, pointer)

    def _sync_highlight(self) -> None:
        el = self.surface.cells.get(self.current) if self.current is not None else None
        if el is None or el.get("stroke") in (None, "none"):
            self._highlight.set_visible(False)
            return
        ox, oy = self.layout.margins.left, self.layout.margins.top
        self._highlight.set_bounds(ox + el.get("x"), oy + el.get("y"), el.get("width"), el.get("height"))
        self._highlight.set_visible(True)

    def _on_motion(self, event: Any) -> None:
        self.move_to(event.xdata, event.ydata)

    def _on_leave(self, _event: Any) -> None:
        self.move_to(None, None)

    def _on_tooltip(self, state: TooltipState) -> None:
        if state.visible:
            self._tooltip.set_position(state.screen_position)
            self._tooltip.set_text(state.content)
            self._tooltip.set_alpha(state.opacity)
        self._tooltip.set_visible(state.visible)

    def tooltip_artist_state(self) -> Dict[str, Any]:
        return {
            "visible": self._tooltip.get_visible(),
            "text": self._tooltip.get_text(),
            "position": self._tooltip.get_position(),
        }

    def disconnect(self) -> None:
        for cid in self._cids:
            self.figure.canvas.mpl_disconnect(cid)
        self._cids.clear()
        self._unsubscribe()
