"""Tests for dataset retrieval: payload mapping, HTTP fetch with retries, cache."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from config import settings
from core import cache
from domain.mapping import DatasetFormatError, dataset_from_payload
from domain.models import HeatmapSummary, VarianceRecord, month_name
from services.dataset_provider import (
    FileDatasetProvider,
    HttpDatasetProvider,
    RetrievalFailure,
    StaticDatasetProvider,
)

URL = "https://example.test/global-temperature.json"


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "data"))
    return tmp_path / "data"


def _fetch(handler, **kw):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await HttpDatasetProvider(URL, client=client, **kw).fetch_dataset()

    return asyncio.run(run())


def test_mapping_shifts_months_to_zero_based(sample_payload):
    ds = dataset_from_payload(sample_payload)
    assert ds.base_temperature == 8.66
    assert ds.records[0] == VarianceRecord(1753, 0, -1.366)
    assert ds.records[-1] == VarianceRecord(2015, 11, 2.322)
    assert month_name(ds.records[-1].month) == "December"


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"monthlyVariance": []},
        {"baseTemperature": "warm", "monthlyVariance": []},
        {"baseTemperature": 8.66, "monthlyVariance": [{"year": 1753, "variance": 0.1}]},
        {"baseTemperature": 8.66, "monthlyVariance": None},
        {"baseTemperature": 8.66, "monthlyVariance": 12},
    ],
)
def test_mapping_rejects_malformed_payloads(payload):
    with pytest.raises(DatasetFormatError):
        dataset_from_payload(payload)


def test_summary_description(sample_payload):
    summary = HeatmapSummary.from_dataset(dataset_from_payload(sample_payload))
    assert summary.description() == "1753 - 2015: base temperature 8.66℃"


def test_http_provider_success(sample_payload):
    calls = []

    def handler(request):
        calls.append(str(request.url))
        return httpx.Response(200, json=sample_payload)

    ds = _fetch(handler, use_cache=False)
    assert len(ds.records) == 3
    assert calls == [URL]


def test_http_provider_retries_then_fails():
    attempts = []

    def handler(request):
        attempts.append(1)
        return httpx.Response(500)

    with pytest.raises(RetrievalFailure):
        _fetch(handler, use_cache=False, retries=1, backoff=0)
    assert len(attempts) == 2


def test_http_provider_recovers_after_transient_error(sample_payload):
    responses = iter([httpx.Response(503), httpx.Response(200, json=sample_payload)])
    ds = _fetch(lambda request: next(responses), use_cache=False, retries=2, backoff=0)
    assert len(ds.records) == 3


def test_invalid_json_is_not_cached():
    def handler(request):
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(RetrievalFailure):
        _fetch(handler, retries=0)
    assert cache.get(URL) is None


def test_missing_fields_raise_retrieval_failure():
    with pytest.raises(RetrievalFailure):
        _fetch(lambda request: httpx.Response(200, json={"monthlyVariance": []}), use_cache=False)


def test_cache_serves_second_fetch(sample_payload, isolated_cache):
    hits = []

    def handler(request):
        hits.append(1)
        return httpx.Response(200, json=sample_payload)

    _fetch(handler)
    ds = _fetch(handler)
    assert len(hits) == 1
    assert len(ds.records) == 3
    assert list((isolated_cache / "_cache").glob("*.json"))


def test_cache_invalidate():
    cache.set(URL, "{}")
    assert cache.get(URL) == "{}"
    assert cache.invalidate(URL) is True
    assert cache.invalidate(URL) is False


def test_file_provider(payload_file, sample_payload):
    ds = asyncio.run(FileDatasetProvider(payload_file(sample_payload)).fetch_dataset())
    assert [r.key for r in ds.records] == [(1753, 0), (1753, 1), (2015, 11)]


def test_file_provider_missing_or_bad(tmp_path):
    with pytest.raises(RetrievalFailure):
        asyncio.run(FileDatasetProvider(tmp_path / "nope.json").fetch_dataset())
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    with pytest.raises(RetrievalFailure):
        asyncio.run(FileDatasetProvider(bad).fetch_dataset())


def test_static_provider(scenario_dataset):
    assert asyncio.run(StaticDatasetProvider(scenario_dataset).fetch_dataset()) is scenario_dataset


def test_file_provider_null_records(payload_file):
    path = payload_file({"baseTemperature": 8.66, "monthlyVariance": None})
    with pytest.raises(RetrievalFailure):
        asyncio.run(FileDatasetProvider(path).fetch_dataset())


def test_unwritable_cache_does_not_fail_fetch(sample_payload, monkeypatch):
    def refuse(url, content):
        raise PermissionError("read-only data dir")

    monkeypatch.setattr(cache, "set", refuse)
    ds = _fetch(lambda request: httpx.Response(200, json=sample_payload))
    assert len(ds.records) == 3
