from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .records import Record
from .surface import Point, Surface

TOOLTIP_TAG = "tooltip"

_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_MARKUP_RE = re.compile(r"<[^>]+>")


def plain_text(content: str) -> str:
    """Turn the small HTML subset used in tooltip content into plain lines."""
    return _MARKUP_RE.sub("", _BREAK_RE.sub("\n", content))


def format_record(record: Record) -> str:
    """Tooltip content for one record; the value is shown exactly as loaded."""
    return f"{record.country}<br/>{record.year}: {record.life_expectancy} yrs"


@dataclass(frozen=True)
class Tooltip:
    content: str
    position: Point


@dataclass(frozen=True)
class TooltipCommand:
    """What a hover event asks of the tooltip: show `tooltip`, or hide when None."""

    tooltip: Optional[Tooltip] = None

    @property
    def hides(self) -> bool:
        return self.tooltip is None


class TooltipController:
    """Keeps at most one tooltip alive on the surface."""

    def __init__(self, surface: Surface, *, offset: Tuple[float, float] = (12.0, 12.0),
                 fill: str = "#ffffe0", outline: str = "#555555", pad: float = 4.0) -> None:
        self.surface = surface
        self.offset = offset
        self.fill = fill
        self.outline = outline
        self.pad = pad
        self.current: Optional[Tooltip] = None

    @property
    def live_count(self) -> int:
        return 1 if self.current is not None else 0

    def show(self, content: str, position: Point) -> Tooltip:
        self.hide()
        x, y = position
        dx, dy = self.offset
        text_id = self.surface.text(x + dx, y + dy, plain_text(content), fill="#111111",
                                    anchor="nw", size=10, tags=(TOOLTIP_TAG,))
        box = self.surface.bbox(text_id)
        if box is not None:
            p = self.pad
            rect_id = self.surface.rect(box[0] - p, box[1] - p, box[2] + p, box[3] + p,
                                        fill=self.fill, outline=self.outline, tags=(TOOLTIP_TAG,))
            self.surface.lower(rect_id, text_id)
        self.current = Tooltip(content=content, position=(float(x), float(y)))
        return self.current

    def hide(self) -> None:
        self.surface.remove(TOOLTIP_TAG)
        self.current = None

    # ---------- hover capability ----------

    def on_hover_start(self, record: Record, position: Point, content: Optional[str] = None) -> TooltipCommand:
        if content is None:
            content = format_record(record)
        return TooltipCommand(Tooltip(content=content, position=position))

    def on_hover_end(self) -> TooltipCommand:
        return TooltipCommand(None)

    def apply(self, command: TooltipCommand) -> None:
        if command.hides:
            self.hide()
        else:
            self.show(command.tooltip.content, command.tooltip.position)

    def attach(self, item_id: int, record: Record, content: Optional[str] = None) -> None:
        """Wire hover on a mark so it describes `record` at the pointer."""
        self.surface.bind_hover(
            item_id,
            lambda pos: self.apply(self.on_hover_start(record, pos, content)),
            lambda: self.apply(self.on_hover_end()),
        )
