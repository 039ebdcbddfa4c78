"""Color helpers for the sequential heatmap ramp.

Provides hex parsing/formatting and a cubehelix interpolator. The default
ramp ("cool") runs from purple through blue to a yellow-green, with lightness
increasing monotonically so higher temperatures always read lighter.

Cubehelix (Green, 2011) describes a color by hue angle (degrees),
saturation and lightness; converting back to sRGB uses the fixed
coefficients below. Interpolation is done on the raw h/s/l components
("long" hue path, no shortest-arc wrapping).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Tuple

__all__ = [
    "RGB",
    "Cubehelix",
    "parse_hex",
    "to_hex",
    "interpolate_cubehelix_long",
    "interpolate_cool",
    "COOL_START",
    "COOL_END",
]

RGB = Tuple[int, int, int]

_A = -0.14861
_B = +1.78277
_C = -0.29227
_D = -0.90649
_E = +1.97294


def parse_hex(color: str) -> RGB:
    """Parse ``#rgb`` or ``#rrggbb`` into an (r, g, b) tuple."""
    c = color.strip()
    if not c.startswith("#"):
        raise ValueError("hex color must start with '#'")
    c = c[1:]
    if len(c) == 3:
        r, g, b = (int(ch * 2, 16) for ch in c)
        return r, g, b
    if len(c) == 6:
        return int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)
    raise ValueError("invalid hex color length")


def _clamp_byte(v: float) -> int:
    # Half-up, not round-half-even
    v = int(math.floor(v + 0.5))
    return 0 if v < 0 else 255 if v > 255 else v


def to_hex(r: float, g: float, b: float) -> str:
    return f"#{_clamp_byte(r):02x}{_clamp_byte(g):02x}{_clamp_byte(b):02x}"


@dataclass(frozen=True)
class Cubehelix:
    h: float  # degrees
    s: float
    l: float  # noqa: E741

    def to_rgb(self) -> Tuple[float, float, float]:
        h = math.radians(self.h + 120.0)
        l = self.l  # noqa: E741
        a = self.s * l * (1.0 - l)
        cosh = math.cos(h)
        sinh = math.sin(h)
        return (
            255.0 * (l + a * (_A * cosh + _B * sinh)),
            255.0 * (l + a * (_C * cosh + _D * sinh)),
            255.0 * (l + a * (_E * cosh)),
        )

    def to_hex(self) -> str:
        return to_hex(*self.to_rgb())


def interpolate_cubehelix_long(start: Cubehelix, end: Cubehelix) -> Callable[[float], str]:
    def interpolate(t: float) -> str:
        return Cubehelix(
            start.h + (end.h - start.h) * t,
            start.s + (end.s - start.s) * t,
            start.l + (end.l - start.l) * t,
        ).to_hex()

    return interpolate


COOL_START = Cubehelix(-100.0, 0.75, 0.35)
COOL_END = Cubehelix(80.0, 1.50, 0.8)

interpolate_cool = interpolate_cubehelix_long(COOL_START, COOL_END)
