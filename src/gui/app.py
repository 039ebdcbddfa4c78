"""GUI application entry point."""

from __future__ import annotations

import os
import sys
from typing import Optional

from gui.services.event_bus import EventBus
from services.dataset_provider import DatasetProvider, HttpDatasetProvider


def main(provider: Optional[DatasetProvider] = None, *, strict: bool | None = None) -> int:  # pragma: no cover - GUI runtime
    from PyQt6.QtWidgets import QApplication

    from gui.heatmap_view import HeatmapView

    app = QApplication.instance() or QApplication(sys.argv)
    view = HeatmapView(provider or HttpDatasetProvider(), bus=EventBus(), strict=strict)
    view.show()
    if not os.environ.get("HEATMAP_NO_FETCH"):
        view.refresh()
    return app.exec()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
