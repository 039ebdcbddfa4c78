"""Qt host tests: rendering into the canvas, empty and stale deliveries, close."""

from __future__ import annotations

from domain.models import Dataset
from gui.heatmap_view import TITLE, HeatmapView
from gui.workers import DatasetLoadWorker
from services.dataset_provider import RetrievalFailure, StaticDatasetProvider


class _FailingProvider:
    async def fetch_dataset(self):
        raise RetrievalFailure("network down")


def _view(qtbot, dataset) -> HeatmapView:
    view = HeatmapView(StaticDatasetProvider(dataset))
    qtbot.addWidget(view)
    return view


def _drawn_paths(view) -> int:
    axes = view.canvas.figure.axes
    if not axes or not axes[0].collections:
        return 0
    return len(axes[0].collections[0].get_paths())


def test_show_dataset_draws_cells_and_summary(qtbot, sample_dataset):
    view = _view(qtbot, sample_dataset)
    assert view.title_label.text() == TITLE
    assert view.description_label.text() == "0 - 0: base temperature 0℃"
    view.show_dataset(sample_dataset)
    assert _drawn_paths(view) == 36 + 5
    assert view.binding is not None and view.binding.connected
    assert view.description_label.text() == "2000 - 2002: base temperature 8.66℃"


def test_empty_dataset_clears_canvas_and_summary(qtbot, sample_dataset):
    view = _view(qtbot, sample_dataset)
    view.show_dataset(sample_dataset)
    view.show_dataset(Dataset.of(8.66, []))
    assert view.lifecycle.surface is None
    assert _drawn_paths(view) == 0
    assert view.binding is None
    assert view.description_label.text() == "0 - 0: base temperature 0℃"


def test_superseded_delivery_keeps_live_hover(qtbot, sample_dataset, scenario_dataset):
    view = _view(qtbot, sample_dataset)
    old_ticket = view.lifecycle.begin_fetch()
    view.show_dataset(sample_dataset)
    binding, surface = view.binding, view.lifecycle.surface
    view._on_loaded(old_ticket, scenario_dataset, "")
    assert view.binding is binding and binding.connected
    assert view.lifecycle.surface is surface and surface.active
    assert len(surface.cells) == 36
    assert view.description_label.text().startswith("2000 - 2002")


def test_retrieval_failure_shown_in_description(qtbot, sample_dataset):
    view = _view(qtbot, sample_dataset)
    view._on_loaded(view.lifecycle.begin_fetch(), None, "network down")
    assert view.description_label.text() == "Could not load dataset: network down"
    assert view.lifecycle.surface is None


def test_close_unmounts_lifecycle(qtbot, sample_dataset):
    view = _view(qtbot, sample_dataset)
    view.show()
    view.show_dataset(sample_dataset)
    surface = view.lifecycle.surface
    view.close()
    assert not view.lifecycle.mounted
    assert not surface.active and surface.listener_count() == 0
    assert view.binding is None
    assert view.bus.subscriber_count("retrieval_failed") == 0


def test_refresh_loads_through_worker(qtbot, sample_dataset):
    view = _view(qtbot, sample_dataset)
    view.refresh()
    qtbot.waitUntil(lambda: view.lifecycle.surface is not None, timeout=5000)
    view._worker.wait(2000)
    assert len(view.lifecycle.surface.cells) == 36


def test_worker_reports_dataset_with_ticket(qtbot, scenario_dataset):
    worker = DatasetLoadWorker(StaticDatasetProvider(scenario_dataset), 4)
    with qtbot.waitSignal(worker.finished, timeout=5000) as blocker:
        worker.start()
    worker.wait(2000)
    ticket, dataset, error = blocker.args
    assert (ticket, error) == (4, "")
    assert dataset is scenario_dataset


def test_worker_reports_failure(qtbot):
    worker = DatasetLoadWorker(_FailingProvider(), 3)
    with qtbot.waitSignal(worker.finished, timeout=5000) as blocker:
        worker.start()
    worker.wait(2000)
    assert blocker.args == [3, None, "network down"]
