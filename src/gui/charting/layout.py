"""Fixed layout constants for the heatmap canvas."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Margins:
    top: int = 10
    right: int = 30
    bottom: int = 60
    left: int = 60


@dataclass(frozen=True)
class HeatmapLayout:
    """Canvas geometry in pixels; ``total_*`` include the margins."""

    total_width: int = 1000
    total_height: int = 500
    margins: Margins = field(default_factory=Margins)
    legend_width: int = 300
    legend_height: int = 15  # swatch height
    legend_gap: int = 20  # distance below the plot area
    legend_samples: int = 5
    tooltip_offset_x: float = 100.0
    tooltip_offset_y: float = 80.0
    tooltip_opacity: float = 0.75

    @property
    def width(self) -> int:
        return self.total_width - self.margins.left - self.margins.right

    @property
    def height(self) -> int:
        return self.total_height - self.margins.top - self.margins.bottom


DEFAULT_LAYOUT = HeatmapLayout()
