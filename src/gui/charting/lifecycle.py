"""Ownership of the heatmap's rendering surface across refreshes.

At most one surface is live at a time. Every render disposes the previous
surface (and resets the tooltip) before building the next one; unmount
disposes it for good. Datasets arrive asynchronously, so each fetch gets a
ticket: a delivery is applied only while the lifecycle is mounted and the
ticket is the most recent one issued.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.models import Dataset, HeatmapSummary
from gui.services.event_bus import EventBus, HeatmapEvent
from services.dataset_provider import DatasetProvider, RetrievalFailure
from .heatmap import render_heatmap
from .layout import DEFAULT_LAYOUT, HeatmapLayout
from .surface import Surface
from .tooltip import TooltipController

log = logging.getLogger(__name__)

__all__ = ["HeatmapLifecycle"]


class HeatmapLifecycle:
    def __init__(
        self,
        controller: TooltipController,
        *,
        bus: Optional[EventBus] = None,
        layout: HeatmapLayout = DEFAULT_LAYOUT,
        strict: bool | None = None,
    ) -> None:
        self.controller = controller
        self.bus = bus
        self.layout = layout
        self.strict = strict
        self._surface: Optional[Surface] = None
        self._summary = HeatmapSummary()
        self._mounted = True
        self._ticket = 0
        self.last_error: Optional[BaseException] = None

    @property
    def surface(self) -> Optional[Surface]:
        return self._surface

    @property
    def summary(self) -> HeatmapSummary:
        return self._summary

    @property
    def mounted(self) -> bool:
        return self._mounted

    # Rendering ----------------------------------------------------------
    def render(self, dataset: Dataset) -> Optional[Surface]:
        if not self._mounted:
            log.debug("render ignored: lifecycle unmounted")
            return None
        self.teardown()
        self._summary = HeatmapSummary.from_dataset(dataset)
        self._publish(HeatmapEvent.DATASET_LOADED, {"records": len(dataset.records)})
        if dataset.is_empty:
            log.info("dataset has no records; nothing to draw")
            self._publish(HeatmapEvent.EMPTY_DATASET)
            return None
        self._surface = render_heatmap(dataset, self.controller, layout=self.layout, strict=self.strict)
        self._publish(
            HeatmapEvent.HEATMAP_RENDERED,
            {"surface": self._surface.id, "cells": len(self._surface.cells)},
        )
        return self._surface

    def teardown(self) -> None:
        self.controller.reset()
        if self._surface is None:
            return
        surface, self._surface = self._surface, None
        surface.dispose()
        self._publish(HeatmapEvent.HEATMAP_DISPOSED, {"surface": surface.id})

    def unmount(self) -> None:
        self.teardown()
        self._mounted = False

    # Asynchronous delivery ----------------------------------------------
    def begin_fetch(self) -> int:
        self._ticket += 1
        return self._ticket

    def is_current(self, ticket: int) -> bool:
        """True while ``ticket`` is the latest fetch and the lifecycle is mounted."""
        return self._mounted and ticket == self._ticket

    def _accepts(self, ticket: int) -> bool:
        if self.is_current(ticket):
            return True
        log.info("discarding result of fetch #%d (latest #%d, mounted=%s)", ticket, self._ticket, self._mounted)
        self._publish(HeatmapEvent.FETCH_DISCARDED, {"ticket": ticket})
        return False

    def deliver(self, ticket: int, dataset: Dataset) -> Optional[Surface]:
        if not self._accepts(ticket):
            return None
        return self.render(dataset)

    def fail(self, ticket: int, error: BaseException) -> None:
        if not self._accepts(ticket):
            return
        self.last_error = error
        log.error("dataset retrieval failed: %s", error)
        self._publish(HeatmapEvent.RETRIEVAL_FAILED, {"error": str(error)})

    async def refresh(self, provider: DatasetProvider) -> Optional[Surface]:
        ticket = self.begin_fetch()
        try:
            dataset = await provider.fetch_dataset()
        except RetrievalFailure as e:
            self.fail(ticket, e)
            return None
        return self.deliver(ticket, dataset)

    def _publish(self, event: HeatmapEvent, payload: object = None) -> None:
        if self.bus is not None:
            self.bus.publish(event, payload)
