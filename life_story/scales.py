from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .errors import ConfigError

TABLEAU10: Tuple[str, ...] = (
    "#4e79a7", "#f28e2c", "#e15759", "#76b7b2", "#59a14f",
    "#edc949", "#af7aa1", "#ff9da7", "#9c755f", "#bab0ab",
)
UNKNOWN_COLOR = "#999999"


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    s = color.lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) != 6:
        raise ValueError(f"Unsupported color: {color!r}")
    return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)


def rgb_to_hex(rgb: Tuple[int, int, int]) -> str:
    r, g, b = (max(0, min(255, int(round(c)))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def blend(color: str, background: str, opacity: float) -> str:
    """Flatten a translucent color over an opaque background."""
    a = max(0.0, min(1.0, float(opacity)))
    fg = hex_to_rgb(color)
    bg = hex_to_rgb(background)
    return rgb_to_hex(tuple(a * f + (1.0 - a) * b for f, b in zip(fg, bg)))


def _tick_increment(start: float, stop: float, count: int) -> float:
    step = (stop - start) / max(1, count)
    power = math.floor(math.log10(step))
    error = step / (10 ** power)
    if error >= math.sqrt(50):
        factor = 10
    elif error >= math.sqrt(10):
        factor = 5
    elif error >= math.sqrt(2):
        factor = 2
    else:
        factor = 1
    return factor * (10 ** power)


@dataclass(frozen=True)
class LinearScale:
    # value anchors
    v0: float
    v1: float
    # pixel anchors
    p0: float
    p1: float

    def is_valid(self) -> bool:
        return self.p0 != self.p1 and self.v0 != self.v1

    def __call__(self, v: float) -> float:
        t = (float(v) - self.v0) / (self.v1 - self.v0)
        return self.p0 + t * (self.p1 - self.p0)

    def invert(self, p: float) -> float:
        t = (float(p) - self.p0) / (self.p1 - self.p0)
        return self.v0 + t * (self.v1 - self.v0)

    def ticks(self, count: int = 10) -> List[float]:
        """Round-number tick values inside the domain, roughly `count` of them."""
        lo, hi = sorted((self.v0, self.v1))
        if lo == hi:
            return [lo]
        step = _tick_increment(lo, hi, count)
        first = math.ceil(lo / step)
        last = math.floor(hi / step)
        return [round(i * step, 10) for i in range(first, last + 1)]


@dataclass
class OrdinalColorScale:
    """
    Categorical mapping with a domain fixed at construction.

    Colors cycle through the palette in domain order; values outside the
    domain get `unknown` instead of extending it, so assignments stay
    stable for the whole session.
    """

    domain: Tuple[str, ...]
    palette: Tuple[str, ...] = TABLEAU10
    unknown: str = UNKNOWN_COLOR
    _lookup: Dict[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.palette:
            raise ConfigError("Color palette must not be empty.")
        self.domain = tuple(self.domain)
        self._lookup = {}
        for i, name in enumerate(self.domain):
            self._lookup.setdefault(name, self.palette[i % len(self.palette)])

    def __call__(self, value: str) -> str:
        return self._lookup.get(value, self.unknown)

    def __contains__(self, value: str) -> bool:
        return value in self._lookup


@dataclass(frozen=True)
class ScaleRegistry:
    x: LinearScale
    y: LinearScale
    color: OrdinalColorScale
    width: float
    height: float

    def to_px(self, year: float, value: float) -> Tuple[float, float]:
        return self.x(year), self.y(value)

    def to_data(self, xpx: float, ypx: float) -> Tuple[float, float]:
        return self.x.invert(xpx), self.y.invert(ypx)


def build_scales(
    countries: Sequence[str],
    *,
    width: float,
    height: float,
    x_domain: Tuple[float, float] = (1960, 2030),
    y_domain: Tuple[float, float] = (30, 85),
    palette: Sequence[str] = TABLEAU10,
) -> ScaleRegistry:
    x = LinearScale(x_domain[0], x_domain[1], 0.0, float(width))
    # inverted: larger values sit higher on screen
    y = LinearScale(y_domain[0], y_domain[1], float(height), 0.0)
    if not (x.is_valid() and y.is_valid()):
        raise ConfigError(f"Degenerate scale: x={x_domain} y={y_domain} size={width}x{height}")
    color = OrdinalColorScale(tuple(countries), tuple(palette))
    return ScaleRegistry(x=x, y=y, color=color, width=float(width), height=float(height))
