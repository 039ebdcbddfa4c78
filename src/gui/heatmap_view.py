"""Qt widget hosting the heatmap canvas.

Title and description labels above a ``FigureCanvasQTAgg``. The view owns
one ``TooltipController`` and one ``HeatmapLifecycle``; closing the view
unmounts the lifecycle so a fetch still in flight is discarded on arrival.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg
from PyQt6.QtWidgets import QLabel, QVBoxLayout, QWidget

from domain.models import Dataset
from gui.charting.backends import HoverBinding, MatplotlibChartBackend
from gui.charting.layout import DEFAULT_LAYOUT, HeatmapLayout
from gui.charting.lifecycle import HeatmapLifecycle
from gui.charting.tooltip import TooltipController
from gui.services.event_bus import Event, EventBus, HeatmapEvent, Subscription
from gui.workers import DatasetLoadWorker
from services.dataset_provider import DatasetProvider, RetrievalFailure

log = logging.getLogger(__name__)

TITLE = "Monthly Global Land-Surface Temperature"


class HeatmapView(QWidget):
    def __init__(
        self,
        provider: DatasetProvider,
        *,
        bus: Optional[EventBus] = None,
        layout: HeatmapLayout = DEFAULT_LAYOUT,
        strict: bool | None = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("HeatmapView")
        self.setWindowTitle(TITLE)
        self.provider = provider
        self.chart_layout = layout
        self.bus = bus if bus is not None else EventBus()
        self.backend = MatplotlibChartBackend()
        self.controller = TooltipController(
            offset_x=layout.tooltip_offset_x,
            offset_y=layout.tooltip_offset_y,
            opacity=layout.tooltip_opacity,
        )
        self.lifecycle = HeatmapLifecycle(self.controller, bus=self.bus, layout=layout, strict=strict)
        self._binding: Optional[HoverBinding] = None
        self._worker: Optional[DatasetLoadWorker] = None
        self._subs: List[Subscription] = [
            self.bus.subscribe(HeatmapEvent.RETRIEVAL_FAILED, self._on_retrieval_failed),
        ]

        self.title_label = QLabel(TITLE)
        self.title_label.setObjectName("title")
        self.description_label = QLabel(self.lifecycle.summary.description())
        self.description_label.setObjectName("description")
        self.canvas = FigureCanvasQTAgg(self.backend.create_figure(layout))
        self.canvas.setFixedSize(layout.total_width, layout.total_height)

        box = QVBoxLayout(self)
        box.addWidget(self.title_label)
        box.addWidget(self.description_label)
        box.addWidget(self.canvas)

    @property
    def binding(self) -> Optional[HoverBinding]:
        return self._binding

    # Data ---------------------------------------------------------------
    def refresh(self) -> None:
        ticket = self.lifecycle.begin_fetch()
        worker = DatasetLoadWorker(self.provider, ticket)
        worker.finished.connect(self._on_loaded)
        self._worker = worker
        worker.start()

    def _on_loaded(self, ticket: int, dataset: Optional[Dataset], error: str) -> None:
        if dataset is None:
            self.lifecycle.fail(ticket, RetrievalFailure(error))
            return
        if not self.lifecycle.is_current(ticket):
            # Superseded or unmounted: the live surface and its hover stay as they are
            self.lifecycle.deliver(ticket, dataset)
            return
        self._unbind()
        surface = self.lifecycle.deliver(ticket, dataset)
        fig = self.canvas.figure
        if surface is None:
            fig.clear()
        else:
            self.backend.draw_surface(surface, fig)
            self._binding = self.backend.bind_hover(fig, surface, self.controller, layout=self.chart_layout)
        self.description_label.setText(self.lifecycle.summary.description())
        self.canvas.draw_idle()

    def show_dataset(self, dataset: Dataset) -> None:
        """Render ``dataset`` synchronously (no fetch)."""
        self._on_loaded(self.lifecycle.begin_fetch(), dataset, "")

    def _on_retrieval_failed(self, event: Event) -> None:
        error = (event.payload or {}).get("error", "")
        self.description_label.setText(f"Could not load dataset: {error}")

    # Teardown -----------------------------------------------------------
    def _unbind(self) -> None:
        if self._binding is not None:
            self._binding.disconnect()
            self._binding = None

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._unbind()
        self.lifecycle.unmount()
        for sub in self._subs:
            self.bus.unsubscribe(sub)
        self._subs.clear()
        if self._worker is not None and self._worker.isRunning():
            self._worker.wait(2000)
        super().closeEvent(event)
