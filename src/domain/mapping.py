"""Mapping of the raw ``global-temperature.json`` payload into domain models."""

from __future__ import annotations

from typing import Any, Mapping

from domain.models import Dataset, VarianceRecord


class DatasetFormatError(ValueError):
    """Raised when the payload lacks fields needed to build a Dataset."""


def dataset_from_payload(payload: Mapping[str, Any]) -> Dataset:
    """Build a Dataset from the freeCodeCamp payload.

    Source months are 1-based; records store them 0-based.
    """
    if not isinstance(payload, Mapping):
        raise DatasetFormatError("payload must be a JSON object")
    try:
        base = float(payload["baseTemperature"])
        raw_records = payload["monthlyVariance"]
    except KeyError as e:
        raise DatasetFormatError(f"missing field {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise DatasetFormatError(f"invalid baseTemperature: {e}") from e
    if not isinstance(raw_records, list):
        raise DatasetFormatError(f"monthlyVariance must be a list, got {type(raw_records).__name__}")
    records = []
    for idx, item in enumerate(raw_records):
        try:
            records.append(
                VarianceRecord(
                    year=int(item["year"]),
                    month=int(item["month"]) - 1,
                    variance=float(item["variance"]),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DatasetFormatError(f"invalid monthlyVariance entry #{idx}: {e}") from e
    return Dataset.of(base, records)
