"""Tests for the cell grid (positions, colors, metadata, pointer handlers)."""

from __future__ import annotations

import pytest

from domain.models import Dataset, VarianceRecord
from gui.charting.grid import build_cells
from gui.charting.heatmap import cell_key_at, render_heatmap
from gui.charting.layout import DEFAULT_LAYOUT
from gui.charting.scales import ScaleSet, build_scales
from gui.charting.surface import PointerEvent
from gui.charting.tooltip import TooltipPhase


def _scales(ds):
    return build_scales(ds, width=DEFAULT_LAYOUT.width, height=DEFAULT_LAYOUT.height)


def test_one_cell_per_record(sample_dataset):
    scales = _scales(sample_dataset)
    cells = build_cells(sample_dataset, scales)
    assert len(cells) == 36
    for cell in cells:
        r = cell.record
        assert cell.key == (r.year, r.month)
        assert cell.x == scales.year_scale(r.year)
        assert cell.y == scales.month_scale(r.month)
        assert cell.width == pytest.approx(DEFAULT_LAYOUT.width / 3)
        assert cell.height == pytest.approx(DEFAULT_LAYOUT.height / 12)
        assert cell.absolute_temperature == pytest.approx(8.66 + r.variance)
        assert cell.color == scales.color_scale(cell.absolute_temperature)


def test_duplicate_keys_last_record_wins():
    ds = Dataset.of(
        8.0,
        [
            VarianceRecord(2000, 0, 1.0),
            VarianceRecord(2000, 1, 0.5),
            VarianceRecord(2000, 0, 2.0),
        ],
    )
    cells = build_cells(ds, _scales(ds))
    assert [c.key for c in cells] == [(2000, 0), (2000, 1)]
    assert cells[0].record.variance == 2.0


def test_empty_scales_produce_no_cells(sample_dataset):
    assert build_cells(sample_dataset, ScaleSet.EMPTY) == []
    assert build_cells(Dataset.of(8.66, []), ScaleSet.EMPTY) == []


def test_cell_elements_carry_metadata(sample_dataset, controller):
    surface = render_heatmap(sample_dataset, controller)
    rects = surface.select_all("cell")
    assert len(rects) == 36
    first = surface.cells[(2000, 0)]
    assert first.get("data-year") == 2000
    assert first.get("data-month") == 0
    assert first.get("data-temp") == pytest.approx(8.66 - 1.5)
    assert first.get("fill").startswith("#")


def test_pointer_enter_and_leave_drive_tooltip(sample_dataset, controller):
    surface = render_heatmap(sample_dataset, controller)
    el = surface.cells[(2001, 3)]
    el.dispatch("pointerenter", PointerEvent(400, 300))
    assert controller.phase is TooltipPhase.SHOWN
    assert controller.state.active_record == VarianceRecord(2001, 3, -0.25)
    assert el.get("stroke") == "black"
    el.dispatch("pointerleave", PointerEvent(400, 300))
    assert controller.phase is TooltipPhase.HIDDEN
    assert el.get("stroke") == "none"


def test_hit_testing_resolves_cell_keys(sample_dataset, controller):
    surface = render_heatmap(sample_dataset, controller)
    el = surface.cells[(2002, 11)]
    x = DEFAULT_LAYOUT.margins.left + el.get("x") + el.get("width") / 2
    y = DEFAULT_LAYOUT.margins.top + el.get("y") + el.get("height") / 2
    assert cell_key_at(surface, x, y) == (2002, 11)
    assert cell_key_at(surface, 5, 5) is None  # inside the left margin
