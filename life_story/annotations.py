from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .layers import ANNOTATION_TAG
from .scales import ScaleRegistry
from .surface import Surface


@dataclass(frozen=True)
class AnnotationSpec:
    title: str
    label: str
    # data space: (year, life expectancy)
    anchor: Tuple[float, float]
    # pixels, applied after the anchor is scaled
    offset: Tuple[float, float] = (0.0, 0.0)


class AnnotationRenderer:
    """
    Draws callouts: a connector from the anchor to the note, an underline,
    then the title and the wrapped label beneath it.
    """

    def __init__(self, surface: Surface, scales: ScaleRegistry, *, color: str = "#444444",
                 wrap: int = 30, note_width: float = 150.0) -> None:
        self.surface = surface
        self.scales = scales
        self.color = color
        self.wrap = wrap
        self.note_width = note_width

    def place(self, specs: Iterable[AnnotationSpec]) -> List[int]:
        ids: List[int] = []
        for spec in specs:
            ids.extend(self._place_one(spec))
        return ids

    def _place_one(self, spec: AnnotationSpec) -> List[int]:
        s = self.surface
        tags = (ANNOTATION_TAG,)
        ax, ay = self.scales.to_px(*spec.anchor)
        nx, ny = ax + spec.offset[0], ay + spec.offset[1]

        # note extends away from the anchor horizontally
        left = nx if spec.offset[0] >= 0 else nx - self.note_width
        ids = [
            s.line(ax, ay, nx, ny, stroke=self.color, tags=tags),
            s.line(left, ny, left + self.note_width, ny, stroke=self.color, tags=tags),
        ]
        # title sits above the underline when the note points upward
        above = spec.offset[1] < 0
        label = "\n".join(textwrap.wrap(spec.label, self.wrap)) if spec.label else ""
        if above:
            if label:
                label_id = s.text(left, ny - 4, label, fill=self.color, anchor="sw", size=10, tags=tags)
                ids.append(label_id)
                top = s.bbox(label_id)
                title_y = (top[1] if top else ny - 4) - 2
            else:
                title_y = ny - 4
            ids.append(s.text(left, title_y, spec.title, fill=self.color, anchor="sw", bold=True, tags=tags))
        else:
            title_id = s.text(left, ny + 4, spec.title, fill=self.color, anchor="nw", bold=True, tags=tags)
            ids.append(title_id)
            if label:
                box = s.bbox(title_id)
                label_y = (box[3] if box else ny + 18) + 2
                ids.append(s.text(left, label_y, label, fill=self.color, anchor="nw", size=10, tags=tags))
        return ids
