from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from .scales import ScaleRegistry, hex_to_rgb

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
HoverHandler = Callable[[Point], None]
LeaveHandler = Callable[[], None]

AXIS_TAG = "axis"


@dataclass(frozen=True)
class Margin:
    top: int = 40
    right: int = 200
    bottom: int = 50
    left: int = 60


@dataclass
class Item:
    id: int
    kind: str  # circle|path|line|text|rect
    coords: Tuple[float, ...]
    tags: Tuple[str, ...]
    style: Dict[str, object] = field(default_factory=dict)

    def center(self) -> Point:
        xs = self.coords[0::2]
        ys = self.coords[1::2]
        if self.kind == "circle":
            return (self.coords[0], self.coords[1])
        return (sum(xs) / len(xs), sum(ys) / len(ys))

    def contains(self, x: float, y: float, slop: float = 2.0) -> bool:
        if self.kind == "circle":
            cx, cy, r = self.coords
            return (x - cx) ** 2 + (y - cy) ** 2 <= (r + slop) ** 2
        xs = self.coords[0::2]
        ys = self.coords[1::2]
        return min(xs) - slop <= x <= max(xs) + slop and min(ys) - slop <= y <= max(ys) + slop


class Surface(metaclass=ABCMeta):
    """
    Persistent drawing region in plot coordinates.

    Items carry tk-style tag tuples; `remove(tag)` and `find(tag)` work on
    any tag an item carries. Subclasses only translate primitives to their
    backend and translate plot coordinates by the margin.
    """

    def __init__(self, width: float, height: float, margin: Margin = Margin(), background: str = "#ffffff") -> None:
        self.width = float(width)
        self.height = float(height)
        self.margin = margin
        self.background = background
        self._items: Dict[int, Item] = {}
        self._handlers: Dict[int, Tuple[HoverHandler, LeaveHandler]] = {}

    # ---------- backend hooks ----------

    @abstractmethod
    def _create(self, item: Item) -> int:
        """Materialize `item` and return its backend id."""

    @abstractmethod
    def _delete(self, item_id: int) -> None:
        pass

    @abstractmethod
    def _bind(self, item_id: int, on_enter: HoverHandler, on_leave: LeaveHandler) -> None:
        pass

    @abstractmethod
    def bbox(self, item_id: int) -> Optional[Tuple[float, float, float, float]]:
        """Bounds of an item in plot coordinates."""

    @abstractmethod
    def lower(self, item_id: int, below_id: int) -> None:
        pass

    # ---------- primitives ----------

    def _add(self, kind: str, coords: Sequence[float], tags: Iterable[str], **style) -> int:
        item = Item(id=0, kind=kind, coords=tuple(float(c) for c in coords), tags=tuple(tags), style=style)
        item.id = self._create(item)
        self._items[item.id] = item
        return item.id

    def circle(self, cx: float, cy: float, r: float, *, fill: str, opacity: float = 1.0,
               outline: Optional[str] = None, tags: Iterable[str] = ()) -> int:
        return self._add("circle", (cx, cy, r), tags, fill=fill, opacity=opacity, outline=outline)

    def path(self, points: Sequence[Point], *, stroke: str, width: float = 1.0, opacity: float = 1.0,
             dash: Optional[Tuple[int, int]] = None, tags: Iterable[str] = ()) -> Optional[int]:
        if len(points) < 2:
            # a single point has no segment to stroke
            return None
        flat = [v for xy in points for v in xy]
        return self._add("path", flat, tags, stroke=stroke, width=width, opacity=opacity, dash=dash)

    def line(self, x0: float, y0: float, x1: float, y1: float, *, stroke: str, width: float = 1.0,
             tags: Iterable[str] = ()) -> int:
        return self._add("line", (x0, y0, x1, y1), tags, stroke=stroke, width=width, opacity=1.0, dash=None)

    def text(self, x: float, y: float, text: str, *, fill: str = "#222222", anchor: str = "nw",
             bold: bool = False, size: int = 11, tags: Iterable[str] = ()) -> int:
        return self._add("text", (x, y), tags, text=text, fill=fill, anchor=anchor, bold=bold, size=size)

    def rect(self, x0: float, y0: float, x1: float, y1: float, *, fill: str, outline: Optional[str] = None,
             tags: Iterable[str] = ()) -> int:
        return self._add("rect", (x0, y0, x1, y1), tags, fill=fill, outline=outline, opacity=1.0)

    # ---------- tags & interaction ----------

    def find(self, tag: str) -> List[int]:
        return [i for i, it in self._items.items() if tag in it.tags]

    def count(self, tag: str) -> int:
        return len(self.find(tag))

    def item(self, item_id: int) -> Item:
        return self._items[item_id]

    def items(self, tag: Optional[str] = None) -> List[Item]:
        return [it for it in self._items.values() if tag is None or tag in it.tags]

    def remove(self, tag: str) -> int:
        ids = self.find(tag)
        for i in ids:
            self._delete(i)
            self._items.pop(i, None)
            self._handlers.pop(i, None)
        return len(ids)

    def bind_hover(self, item_id: int, on_enter: HoverHandler, on_leave: LeaveHandler) -> None:
        self._handlers[item_id] = (on_enter, on_leave)
        self._bind(item_id, on_enter, on_leave)

    def has_hover(self, item_id: int) -> bool:
        return item_id in self._handlers


# ---------- headless backend ----------

_ANCHOR_OFFSETS = {
    "nw": (0.0, 0.0), "n": (0.5, 0.0), "ne": (1.0, 0.0),
    "w": (0.0, 0.5), "center": (0.5, 0.5), "e": (1.0, 0.5),
    "sw": (0.0, 1.0), "s": (0.5, 1.0), "se": (1.0, 1.0),
}


def _dash_segments(points: Sequence[Point], dash: Tuple[int, int]) -> List[Tuple[Point, Point]]:
    on, off = dash
    period = float(on + off)
    segs: List[Tuple[Point, Point]] = []
    phase = 0.0
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        length = ((x1 - x0) ** 2 + (y1 - y0) ** 2) ** 0.5
        if length == 0:
            continue
        t = 0.0
        while t < length:
            pos = phase % period
            run = (on - pos) if pos < on else (period - pos)
            step = min(run, length - t)
            if pos < on:
                a = t / length
                b = (t + step) / length
                segs.append(((x0 + a * (x1 - x0), y0 + a * (y1 - y0)),
                             (x0 + b * (x1 - x0), y0 + b * (y1 - y0))))
            t += step
            phase += step
    return segs


class ImageSurface(Surface):
    """
    Pillow-backed surface used for PNG export and for running scenes
    without a display. Pointer events are simulated with `pointer_move`.
    """

    def __init__(self, width: float, height: float, margin: Margin = Margin(), background: str = "#ffffff") -> None:
        super().__init__(width, height, margin, background)
        self._next_id = 1
        self._order: List[int] = []
        self._hovered: Optional[int] = None
        self._font = ImageFont.load_default()
        self._scratch = ImageDraw.Draw(Image.new("RGB", (1, 1)))

    def _create(self, item: Item) -> int:
        item_id = self._next_id
        self._next_id += 1
        self._order.append(item_id)
        return item_id

    def _delete(self, item_id: int) -> None:
        self._order.remove(item_id)
        if self._hovered == item_id:
            # like a real canvas, removing the hovered item fires no leave
            self._hovered = None

    def _bind(self, item_id: int, on_enter: HoverHandler, on_leave: LeaveHandler) -> None:
        pass

    def lower(self, item_id: int, below_id: int) -> None:
        self._order.remove(item_id)
        self._order.insert(self._order.index(below_id), item_id)

    def _text_extent(self, text: str) -> Tuple[float, float]:
        x0, y0, x1, y1 = self._scratch.multiline_textbbox((0, 0), text, font=self._font)
        return float(x1 - x0), float(y1 - y0)

    def _text_origin(self, item: Item) -> Point:
        x, y = item.coords
        w, h = self._text_extent(str(item.style["text"]))
        fx, fy = _ANCHOR_OFFSETS.get(str(item.style.get("anchor", "nw")), (0.0, 0.0))
        return x - fx * w, y - fy * h

    def bbox(self, item_id: int) -> Optional[Tuple[float, float, float, float]]:
        item = self._items.get(item_id)
        if item is None:
            return None
        if item.kind == "text":
            ox, oy = self._text_origin(item)
            w, h = self._text_extent(str(item.style["text"]))
            return (ox, oy, ox + w, oy + h)
        if item.kind == "circle":
            cx, cy, r = item.coords
            return (cx - r, cy - r, cx + r, cy + r)
        xs = item.coords[0::2]
        ys = item.coords[1::2]
        return (min(xs), min(ys), max(xs), max(ys))

    # ---------- simulated pointer ----------

    def hit_test(self, x: float, y: float) -> Optional[int]:
        for item_id in reversed(self._order):
            if item_id in self._handlers and self._items[item_id].contains(x, y):
                return item_id
        return None

    def pointer_move(self, x: float, y: float) -> Optional[int]:
        target = self.hit_test(x, y)
        if target == self._hovered:
            return target
        if self._hovered is not None and self._hovered in self._handlers:
            self._handlers[self._hovered][1]()
        self._hovered = target
        if target is not None:
            self._handlers[target][0]((x, y))
        return target

    def pointer_leave(self) -> None:
        if self._hovered is not None and self._hovered in self._handlers:
            self._handlers[self._hovered][1]()
        self._hovered = None

    # ---------- rasterize ----------

    def render(self) -> Image.Image:
        m = self.margin
        size = (int(self.width + m.left + m.right), int(self.height + m.top + m.bottom))
        img = Image.new("RGBA", size, hex_to_rgb(self.background) + (255,))
        for item_id in self._order:
            item = self._items[item_id]
            opacity = item.style.get("opacity")
            opacity = 1.0 if opacity is None else float(opacity)
            layer = Image.new("RGBA", size, (0, 0, 0, 0)) if opacity < 1.0 else img
            self._draw_item(ImageDraw.Draw(layer), item, opacity)
            if layer is not img:
                img = Image.alpha_composite(img, layer)
        return img.convert("RGB")

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        self.render().save(path, format="PNG")
        logger.debug("Wrote %s", path)
        return path

    def _draw_item(self, draw: ImageDraw.ImageDraw, item: Item, opacity: float) -> None:
        ox, oy = self.margin.left, self.margin.top
        alpha = int(round(255 * opacity))

        def rgba(color: object) -> Optional[Tuple[int, int, int, int]]:
            if not color:
                return None
            return hex_to_rgb(str(color)) + (alpha,)

        def shift(pts: Sequence[float]) -> List[Point]:
            return [(pts[i] + ox, pts[i + 1] + oy) for i in range(0, len(pts), 2)]

        if item.kind == "circle":
            cx, cy, r = item.coords
            draw.ellipse((cx + ox - r, cy + oy - r, cx + ox + r, cy + oy + r),
                         fill=rgba(item.style.get("fill")), outline=rgba(item.style.get("outline")))
        elif item.kind in ("path", "line"):
            pts = shift(item.coords)
            width = max(1, int(round(float(item.style.get("width", 1.0)))))
            dash = item.style.get("dash")
            if dash:
                for a, b in _dash_segments(pts, dash):  # type: ignore[arg-type]
                    draw.line([a, b], fill=rgba(item.style["stroke"]), width=width)
            else:
                draw.line(pts, fill=rgba(item.style["stroke"]), width=width, joint="curve")
        elif item.kind == "rect":
            (x0, y0), (x1, y1) = shift(item.coords)
            draw.rectangle((x0, y0, x1, y1), fill=rgba(item.style.get("fill")),
                           outline=rgba(item.style.get("outline")))
        elif item.kind == "text":
            tx, ty = self._text_origin(item)
            text = str(item.style["text"])
            fill = rgba(item.style.get("fill"))
            draw.multiline_text((tx + ox, ty + oy), text, fill=fill, font=self._font)
            if item.style.get("bold"):
                draw.multiline_text((tx + ox + 1, ty + oy), text, fill=fill, font=self._font)


# ---------- axes ----------

def draw_axes(surface: Surface, scales: ScaleRegistry, *, tick_size: int = 6, color: str = "#333333") -> None:
    """Draw both axes once; they carry only the axis tags and survive teardown."""
    h = scales.height
    w = scales.width
    xtags = (AXIS_TAG, "x-axis")
    ytags = (AXIS_TAG, "y-axis")

    surface.line(0, h, w, h, stroke=color, tags=xtags)
    for t in scales.x.ticks():
        x = scales.x(t)
        surface.line(x, h, x, h + tick_size, stroke=color, tags=xtags)
        surface.text(x, h + tick_size + 2, f"{int(round(t))}", fill=color, anchor="n", size=9, tags=xtags)

    surface.line(0, 0, 0, h, stroke=color, tags=ytags)
    for t in scales.y.ticks():
        y = scales.y(t)
        surface.line(-tick_size, y, 0, y, stroke=color, tags=ytags)
        surface.text(-tick_size - 2, y, f"{t:g}", fill=color, anchor="e", size=9, tags=ytags)

    surface.text(w / 2, h + 32, "Year", fill=color, anchor="n", tags=xtags)
    surface.text(-44, -24, "Life expectancy (yrs)", fill=color, anchor="nw", tags=ytags)
