from __future__ import annotations

import itertools
import logging
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

from .surface import Point, Surface

if TYPE_CHECKING:
    from .controls import ControlPanel
    from .tooltip import TooltipController

logger = logging.getLogger(__name__)

PLOT_LAYER_TAG = "plot-layer"
ANNOTATION_TAG = "annotation-group"

_group_ids = itertools.count(1)


class Layer:
    """
    A freshly tagged group of marks for one scene render.

    Every item carries the shared plot-layer tag (what teardown removes)
    plus a per-group tag so one render can be told apart from another.
    """

    def __init__(self, surface: Surface, base_tag: str = PLOT_LAYER_TAG) -> None:
        self.surface = surface
        self.base_tag = base_tag
        self.tag = f"{base_tag}-{next(_group_ids)}"

    def _tags(self, extra: Iterable[str]) -> Tuple[str, ...]:
        return (self.base_tag, self.tag) + tuple(extra)

    def circle(self, cx: float, cy: float, r: float, *, fill: str, opacity: float = 1.0,
               outline: Optional[str] = None, tags: Iterable[str] = ()) -> int:
        return self.surface.circle(cx, cy, r, fill=fill, opacity=opacity, outline=outline, tags=self._tags(tags))

    def path(self, points: Sequence[Point], *, stroke: str, width: float = 1.0, opacity: float = 1.0,
             dash: Optional[Tuple[int, int]] = None, tags: Iterable[str] = ()) -> Optional[int]:
        return self.surface.path(points, stroke=stroke, width=width, opacity=opacity, dash=dash,
                                 tags=self._tags(tags))

    def line(self, x0: float, y0: float, x1: float, y1: float, *, stroke: str, width: float = 1.0,
             tags: Iterable[str] = ()) -> int:
        return self.surface.line(x0, y0, x1, y1, stroke=stroke, width=width, tags=self._tags(tags))

    def text(self, x: float, y: float, text: str, *, fill: str = "#222222", anchor: str = "nw",
             bold: bool = False, size: int = 11, tags: Iterable[str] = ()) -> int:
        return self.surface.text(x, y, text, fill=fill, anchor=anchor, bold=bold, size=size, tags=self._tags(tags))


def teardown(surface: Surface, tooltip: "TooltipController", controls: Optional["ControlPanel"] = None) -> None:
    """
    Remove everything the previous scene left behind.

    Safe to call repeatedly and before any scene has drawn.
    """
    n_plot = surface.remove(PLOT_LAYER_TAG)
    n_ann = surface.remove(ANNOTATION_TAG)
    tooltip.hide()
    if controls is not None:
        controls.clear()
    logger.debug("Teardown removed %d plot items, %d annotation items", n_plot, n_ann)
