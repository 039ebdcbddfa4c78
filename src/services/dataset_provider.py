"""Dataset providers: where the heatmap's records come from.

The renderer only depends on the ``DatasetProvider`` protocol. Three
implementations are shipped:

 - ``HttpDatasetProvider`` downloads the published JSON (httpx, retries, cache)
 - ``FileDatasetProvider`` reads the same JSON shape from disk
 - ``StaticDatasetProvider`` hands back a prebuilt Dataset (tests, demos)

Every provider reports failure as ``RetrievalFailure`` so callers have a
single exception type to treat as "nothing to render this pass".
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

import httpx

from config import settings
from core import async_http
from domain.mapping import DatasetFormatError, dataset_from_payload
from domain.models import Dataset

log = logging.getLogger(__name__)

__all__ = [
    "RetrievalFailure",
    "DatasetProvider",
    "HttpDatasetProvider",
    "FileDatasetProvider",
    "StaticDatasetProvider",
]


class RetrievalFailure(RuntimeError):
    """Dataset could not be obtained (network, file or payload format)."""


class DatasetProvider(Protocol):  # pragma: no cover - structural only
    async def fetch_dataset(self) -> Dataset: ...


class HttpDatasetProvider:
    def __init__(
        self,
        url: str = settings.DATASET_URL,
        *,
        client: Optional[httpx.AsyncClient] = None,
        use_cache: bool = True,
        retries: int | None = None,
        backoff: float | None = None,
    ) -> None:
        self.url = url
        self._client = client
        self._use_cache = use_cache
        self._retries = retries
        self._backoff = backoff

    async def fetch_dataset(self) -> Dataset:
        try:
            payload = await async_http.fetch_json(
                self.url,
                client=self._client,
                use_cache=self._use_cache,
                retries=self._retries,
                backoff=self._backoff,
            )
            dataset = dataset_from_payload(payload)
        except (async_http.AsyncHttpError, DatasetFormatError) as e:
            log.warning("dataset retrieval failed: %s", e)
            raise RetrievalFailure(str(e)) from e
        log.info("fetched %d records from %s", len(dataset.records), self.url)
        return dataset


class FileDatasetProvider:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def fetch_dataset(self) -> Dataset:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return dataset_from_payload(payload)
        except (OSError, json.JSONDecodeError, DatasetFormatError) as e:
            log.warning("could not load dataset from %s: %s", self.path, e)
            raise RetrievalFailure(f"{self.path}: {e}") from e


class StaticDatasetProvider:
    def __init__(self, dataset: Dataset) -> None:
        self.dataset = dataset

    async def fetch_dataset(self) -> Dataset:
        return self.dataset
