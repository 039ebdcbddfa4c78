"""Scale derivation for the temperature heatmap.

``build_scales`` turns a Dataset into a ``ScaleSet``:

 - year_scale   band scale over every year from min to max (inclusive)
 - month_scale  band scale over months 0..11, inverted so January sits at the bottom
 - color_scale  sequential cubehelix ramp over the absolute temperature extent
 - legend_samples  five (value, color) pairs spanning the color domain

Out-of-domain policy
--------------------
Scales are derived from the same dataset they render, so a lookup outside
the domain is a wiring bug. In strict mode (``settings.STRICT_SCALES`` or
``strict=True``) such a lookup raises ``ScaleDomainError``; otherwise the
value is clamped to the nearest domain edge and a warning is logged.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np

from config import settings
from domain.models import Dataset
from .color import interpolate_cool

log = logging.getLogger(__name__)

__all__ = [
    "ScaleDomainError",
    "BandScale",
    "SequentialColorScale",
    "LegendSample",
    "ScaleSet",
    "nice_ticks",
    "build_scales",
]

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


class ScaleDomainError(ValueError):
    """A value outside the scale's domain was requested in strict mode."""


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _tick_increment(start: float, stop: float, count: float) -> Tuple[int, int, float]:
    step = (stop - start) / max(0.0, count)
    power = math.floor(math.log10(step))
    error = step / 10**power
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power < 0:
        inc = 10 ** (-power) / factor
        i1 = _round_half_up(start * inc)
        i2 = _round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10**power * factor
        i1 = _round_half_up(start / inc)
        i2 = _round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
    if i2 < i1 and 0.5 <= count < 2:
        return _tick_increment(start, stop, count * 2)
    return i1, i2, inc


def nice_ticks(start: float, stop: float, count: int) -> List[float]:
    """Return "nice" round values (1, 2 or 5 times a power of ten) within [start, stop].

    ``count`` is a hint; the result may hold a few more or fewer values.
    A negative increment encodes a fractional step as its reciprocal so the
    values are computed by division and stay free of float drift (0.1 * 3).
    """
    if count <= 0:
        return []
    if start == stop:
        return [float(start)]
    reverse = stop < start
    if reverse:
        start, stop = stop, start
    i1, i2, inc = _tick_increment(start, stop, count)
    if i2 < i1:
        return []
    if inc < 0:
        ticks = [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    else:
        ticks = [float((i1 + i) * inc) for i in range(i2 - i1 + 1)]
    if reverse:
        ticks.reverse()
    return ticks


class BandScale:
    """Discrete domain mapped onto equal-width slots of a continuous range.

    A reversed range (``r0 > r1``) assigns the first domain value to the slot
    nearest ``r0``; positions always denote the slot's low edge.
    """

    def __init__(
        self,
        domain: Sequence[Hashable],
        range_: Tuple[float, float],
        *,
        strict: bool | None = None,
    ) -> None:
        self.domain: Tuple[Hashable, ...] = tuple(domain)
        self.range = (float(range_[0]), float(range_[1]))
        self.strict = settings.STRICT_SCALES if strict is None else strict
        self._index: Dict[Hashable, int] = {v: i for i, v in enumerate(self.domain)}
        r0, r1 = self.range
        self._reverse = r1 < r0
        lo, hi = (r1, r0) if self._reverse else (r0, r1)
        n = len(self.domain)
        self.step = (hi - lo) / n if n else 0.0
        starts = [lo + self.step * i for i in range(n)]
        if self._reverse:
            starts.reverse()
        self._positions = starts

    @property
    def bandwidth(self) -> float:
        return self.step

    def __len__(self) -> int:
        return len(self.domain)

    def __call__(self, value: Hashable) -> float:
        idx = self._index.get(value)
        if idx is None:
            idx = self._out_of_domain(value)
        return self._positions[idx]

    def center(self, value: Hashable) -> float:
        return self(value) + self.step / 2

    def invert(self, position: float) -> Optional[Hashable]:
        """Return the domain value whose band contains ``position`` (None if outside)."""
        if not self.domain or self.step <= 0:
            return None
        lo = min(self.range)
        slot = int(math.floor((position - lo) / self.step))
        if slot < 0 or slot >= len(self.domain):
            return None
        if self._reverse:
            slot = len(self.domain) - 1 - slot
        return self.domain[slot]

    def _out_of_domain(self, value: Hashable) -> int:
        if self.strict or not self.domain:
            raise ScaleDomainError(f"{value!r} is not in band domain")
        log.warning("value %r outside band domain; clamping", value)
        try:
            return len(self.domain) - 1 if value > self.domain[-1] else 0  # type: ignore[operator]
        except TypeError:
            return 0


class SequentialColorScale:
    """Continuous numeric domain mapped through a color interpolator."""

    def __init__(
        self,
        domain: Tuple[float, float],
        interpolator: Callable[[float], str] = interpolate_cool,
        *,
        strict: bool | None = None,
    ) -> None:
        self.domain = (float(domain[0]), float(domain[1]))
        self.interpolator = interpolator
        self.strict = settings.STRICT_SCALES if strict is None else strict

    def normalize(self, value: float) -> float:
        lo, hi = self.domain
        if math.isnan(value):
            raise ScaleDomainError("NaN has no color")
        if value < lo or value > hi:
            if self.strict:
                raise ScaleDomainError(f"{value} outside color domain [{lo}, {hi}]")
            log.warning("value %s outside color domain [%s, %s]; clamping", value, lo, hi)
            value = float(np.clip(value, lo, hi))
        if hi == lo:
            return 0.5
        return (value - lo) / (hi - lo)

    def __call__(self, value: float) -> str:
        return self.interpolator(self.normalize(value))

    def ticks(self, count: int = 10) -> List[float]:
        return nice_ticks(self.domain[0], self.domain[1], count)


@dataclass(frozen=True)
class LegendSample:
    value: float
    color: str


@dataclass(frozen=True)
class ScaleSet:
    year_scale: Optional[BandScale]
    month_scale: Optional[BandScale]
    color_scale: Optional[SequentialColorScale]
    legend_samples: Tuple[LegendSample, ...] = field(default=())

    EMPTY: ClassVar["ScaleSet"]

    @property
    def is_empty(self) -> bool:
        return self.year_scale is None


ScaleSet.EMPTY = ScaleSet(None, None, None, ())


def _legend_values(color_scale: SequentialColorScale, count: int) -> List[float]:
    lo, hi = color_scale.domain
    ticks = color_scale.ticks(count)
    if len(ticks) == count:
        return ticks
    # Nice ticks did not land on exactly ``count`` values; sample evenly instead
    return [float(v) for v in np.linspace(lo, hi, count)]


def build_scales(
    dataset: Dataset,
    *,
    width: float,
    height: float,
    legend_samples: int = 5,
    strict: bool | None = None,
) -> ScaleSet:
    """Derive every scale needed to draw ``dataset`` into a width x height plot."""
    if dataset.is_empty:
        return ScaleSet.EMPTY
    years = np.fromiter((r.year for r in dataset.records), dtype=np.int64)
    variances = np.fromiter((r.variance for r in dataset.records), dtype=float)
    min_year, max_year = int(years.min()), int(years.max())
    year_scale = BandScale(range(min_year, max_year + 1), (0, width), strict=strict)
    month_scale = BandScale(range(12), (height, 0), strict=strict)
    base = dataset.base_temperature
    color_scale = SequentialColorScale(
        (base + float(variances.min()), base + float(variances.max())), strict=strict
    )
    samples = tuple(
        LegendSample(v, color_scale(v)) for v in _legend_values(color_scale, legend_samples)
    )
    log.debug(
        "scales built: years %d-%d, color domain %.3f-%.3f",
        min_year,
        max_year,
        *color_scale.domain,
    )
    return ScaleSet(year_scale, month_scale, color_scale, samples)
