"""Domain models for the monthly temperature variance dataset."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

MONTH_NAMES: Tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def month_name(month: int) -> str:
    """Return the English name for a zero-based month index."""
    if not 0 <= month <= 11:
        raise ValueError(f"month must be in [0, 11], got {month}")
    return MONTH_NAMES[month]


@dataclass(frozen=True, slots=True)
class VarianceRecord:
    year: int
    month: int  # 0 = January
    variance: float  # °C offset from the dataset base temperature

    @property
    def key(self) -> Tuple[int, int]:
        return (self.year, self.month)


@dataclass(frozen=True, slots=True)
class Dataset:
    base_temperature: float
    records: Tuple[VarianceRecord, ...] = ()

    @classmethod
    def of(cls, base_temperature: float, records: Iterable[VarianceRecord]) -> "Dataset":
        return cls(base_temperature=float(base_temperature), records=tuple(records))

    @property
    def is_empty(self) -> bool:
        return not self.records

    def absolute(self, record: VarianceRecord) -> float:
        return self.base_temperature + record.variance


@dataclass(frozen=True, slots=True)
class HeatmapSummary:
    """Values the surrounding page shows next to the chart."""

    min_year: int = 0
    max_year: int = 0
    base_temperature: float = 0.0

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> "HeatmapSummary":
        if dataset.is_empty:
            return cls()
        years = [r.year for r in dataset.records]
        return cls(min(years), max(years), dataset.base_temperature)

    def description(self) -> str:
        return f"{self.min_year} - {self.max_year}: base temperature {self.base_temperature:g}℃"
