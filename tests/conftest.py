# Shared fixtures. Everything runs headless: matplotlib on Agg, Qt (if a
# test ever touches it) on the offscreen platform.

import json
import os

os.environ.setdefault("MPLBACKEND", "Agg")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from domain.models import Dataset, VarianceRecord
from gui.charting.tooltip import TooltipController
from gui.services.event_bus import EventBus


@pytest.fixture
def scenario_dataset() -> Dataset:
    return Dataset.of(
        8.66,
        [
            VarianceRecord(1753, 0, -1.366),
            VarianceRecord(2015, 11, 2.322),
        ],
    )


@pytest.fixture
def sample_dataset() -> Dataset:
    """Three full years (2000-2002) with a deterministic variance pattern."""
    records = [
        VarianceRecord(year, month, round((month - 6) * 0.25 + (year - 2000) * 0.5, 3))
        for year in (2000, 2001, 2002)
        for month in range(12)
    ]
    return Dataset.of(8.66, records)


@pytest.fixture
def controller() -> TooltipController:
    return TooltipController()


@pytest.fixture
def recording_bus():
    bus = EventBus()
    seen = []
    for name in (
        "dataset_loaded",
        "empty_dataset",
        "retrieval_failed",
        "fetch_discarded",
        "heatmap_rendered",
        "heatmap_disposed",
    ):
        bus.subscribe(name, lambda evt: seen.append((evt.name, evt.payload)))
    return bus, seen


@pytest.fixture
def payload_file(tmp_path):
    """Write a freeCodeCamp-shaped payload to disk and return its path."""

    def _write(payload) -> str:
        path = tmp_path / "global-temperature.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def sample_payload() -> dict:
    return {
        "baseTemperature": 8.66,
        "monthlyVariance": [
            {"year": 1753, "month": 1, "variance": -1.366},
            {"year": 1753, "month": 2, "variance": -2.223},
            {"year": 2015, "month": 12, "variance": 2.322},
        ],
    }
