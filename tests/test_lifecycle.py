"""Tests for surface ownership across renders, teardown and async delivery."""

from __future__ import annotations

import asyncio

from domain.models import Dataset, HeatmapSummary
from gui.charting.lifecycle import HeatmapLifecycle
from gui.charting.surface import PointerEvent
from gui.charting.tooltip import TooltipPhase, TooltipState
from services.dataset_provider import RetrievalFailure, StaticDatasetProvider


class _FailingProvider:
    async def fetch_dataset(self):
        raise RetrievalFailure("network down")


class _GatedProvider:
    def __init__(self, dataset):
        self.dataset = dataset
        self.gate = asyncio.Event()

    async def fetch_dataset(self):
        await self.gate.wait()
        return self.dataset


def _cell_snapshot(surface):
    return [
        (el.get("data-year"), el.get("data-month"), el.get("x"), el.get("y"), el.get("fill"))
        for el in surface.select_all("cell")
    ]


def test_render_replaces_previous_surface(sample_dataset, controller, recording_bus):
    bus, seen = recording_bus
    lc = HeatmapLifecycle(controller, bus=bus)
    first = lc.render(sample_dataset)
    second = lc.render(sample_dataset)
    assert first is not second
    assert not first.active and first.listener_count() == 0
    assert second.active and lc.surface is second
    names = [name for name, _ in seen]
    assert names.count("heatmap_rendered") == 2
    assert names.count("heatmap_disposed") == 1


def test_rendering_twice_is_idempotent(sample_dataset, controller):
    lc = HeatmapLifecycle(controller)
    a = _cell_snapshot(lc.render(sample_dataset))
    lc.teardown()
    b = _cell_snapshot(lc.render(sample_dataset))
    assert a == b and len(a) == 36


def test_summary_values(scenario_dataset, controller):
    lc = HeatmapLifecycle(controller)
    assert lc.summary == HeatmapSummary()
    lc.render(scenario_dataset)
    assert (lc.summary.min_year, lc.summary.max_year) == (1753, 2015)
    assert lc.summary.description() == "1753 - 2015: base temperature 8.66℃"


def test_empty_dataset_draws_nothing(controller, recording_bus):
    bus, seen = recording_bus
    lc = HeatmapLifecycle(controller, bus=bus)
    assert lc.render(Dataset.of(8.66, [])) is None
    assert lc.surface is None
    assert lc.summary == HeatmapSummary()
    assert ("empty_dataset", None) in seen


def test_stale_handler_after_teardown_does_not_touch_tooltip(sample_dataset, controller):
    lc = HeatmapLifecycle(controller)
    surface = lc.render(sample_dataset)
    enter = surface.cells[(2000, 5)].listeners["pointerenter"][0]
    lc.teardown()
    enter(PointerEvent(10, 10))
    assert controller.state == TooltipState()
    assert controller.transitions == 0


def test_rerender_resets_visible_tooltip(sample_dataset, controller):
    lc = HeatmapLifecycle(controller)
    surface = lc.render(sample_dataset)
    surface.cells[(2000, 5)].dispatch("pointerenter", PointerEvent(10, 10))
    assert controller.phase is TooltipPhase.SHOWN
    lc.render(sample_dataset)
    assert controller.phase is TooltipPhase.HIDDEN


def test_unmount_discards_later_renders(sample_dataset, controller):
    lc = HeatmapLifecycle(controller)
    lc.render(sample_dataset)
    lc.unmount()
    assert lc.surface is None and not lc.mounted
    assert lc.render(sample_dataset) is None


def test_superseded_ticket_discarded(sample_dataset, controller, recording_bus):
    bus, seen = recording_bus
    lc = HeatmapLifecycle(controller, bus=bus)
    old = lc.begin_fetch()
    new = lc.begin_fetch()
    assert lc.deliver(old, sample_dataset) is None
    assert ("fetch_discarded", {"ticket": old}) in seen
    assert lc.deliver(new, sample_dataset) is not None


def test_refresh_renders_from_provider(scenario_dataset, controller):
    lc = HeatmapLifecycle(controller)
    surface = asyncio.run(lc.refresh(StaticDatasetProvider(scenario_dataset)))
    assert surface is lc.surface
    assert len(surface.cells) == 2


def test_refresh_failure_leaves_defaults(controller, recording_bus):
    bus, seen = recording_bus
    lc = HeatmapLifecycle(controller, bus=bus)
    assert asyncio.run(lc.refresh(_FailingProvider())) is None
    assert lc.surface is None
    assert lc.summary == HeatmapSummary()
    assert isinstance(lc.last_error, RetrievalFailure)
    assert ("retrieval_failed", {"error": "network down"}) in seen


def test_late_dataset_after_unmount_is_discarded(sample_dataset, controller):
    lc = HeatmapLifecycle(controller)
    provider = _GatedProvider(sample_dataset)

    async def scenario():
        task = asyncio.create_task(lc.refresh(provider))
        await asyncio.sleep(0)
        lc.unmount()
        provider.gate.set()
        return await task

    assert asyncio.run(scenario()) is None
    assert lc.surface is None


def test_is_current_tracks_latest_ticket(controller):
    lc = HeatmapLifecycle(controller)
    first = lc.begin_fetch()
    assert lc.is_current(first)
    second = lc.begin_fetch()
    assert not lc.is_current(first) and lc.is_current(second)
    lc.unmount()
    assert not lc.is_current(second)
