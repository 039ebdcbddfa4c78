"""Background worker thread for dataset retrieval used by the GUI."""

from __future__ import annotations

import asyncio

from PyQt6.QtCore import QThread, pyqtSignal

from services.dataset_provider import DatasetProvider, RetrievalFailure


class DatasetLoadWorker(QThread):
    """Runs ``provider.fetch_dataset()`` on its own event loop.

    Emits ``finished(ticket, dataset, error)``; exactly one of dataset/error
    is set. The ticket is handed back untouched so the GUI thread can decide
    whether the result is still wanted.
    """

    finished = pyqtSignal(int, object, str)

    def __init__(self, provider: DatasetProvider, ticket: int) -> None:
        super().__init__()
        self.provider = provider
        self.ticket = ticket

    def run(self) -> None:  # type: ignore[override]
        try:
            dataset = asyncio.run(self.provider.fetch_dataset())
        except RetrievalFailure as e:
            self.finished.emit(self.ticket, None, str(e))
            return
        self.finished.emit(self.ticket, dataset, "")
