from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from .annotations import AnnotationRenderer
from .controls import ControlPanel, NavigationControls
from .errors import SceneIndexError
from .layers import teardown
from .records import Dataset
from .scales import ScaleRegistry
from .scenes import Scene, SceneOptions, Stage
from .surface import Surface
from .tooltip import TooltipController

logger = logging.getLogger(__name__)


@dataclass
class SceneState:
    current_slide: int = 0
    options: SceneOptions = field(default_factory=SceneOptions)


class SceneController:
    """
    Owns SceneState and turns navigation into renders.

    States are the scene indices; advance/retreat clamp at both ends and
    every call re-renders, no-ops included, so the nav buttons stay in sync.
    """

    def __init__(
        self,
        scenes: Sequence[Scene],
        dataset: Dataset,
        scales: ScaleRegistry,
        surface: Surface,
        *,
        tooltip: TooltipController,
        annotations: AnnotationRenderer,
        controls: ControlPanel,
        nav: Optional[NavigationControls] = None,
    ) -> None:
        if not scenes:
            raise ValueError("SceneController needs at least one scene.")
        self.scenes = tuple(scenes)
        self.dataset = dataset
        self.scales = scales
        self.surface = surface
        self.tooltip = tooltip
        self.annotations = annotations
        self.controls = controls
        self.nav = nav
        self.state = SceneState()
        self.render_count = 0

    @property
    def max_slide(self) -> int:
        return len(self.scenes) - 1

    @property
    def current_slide(self) -> int:
        return self.state.current_slide

    # ---------- navigation ----------

    def advance(self) -> None:
        self.render(min(self.state.current_slide + 1, self.max_slide))

    def retreat(self) -> None:
        self.render(max(self.state.current_slide - 1, 0))

    def go_to(self, slide: int) -> None:
        self.render(max(0, min(self.max_slide, int(slide))))

    # ---------- scene options ----------

    def select_country(self, name: str) -> None:
        self.state.options = replace(self.state.options, selected_country=name)
        self.render(self.state.current_slide)

    def set_show_projection(self, flag: bool) -> None:
        self.state.options = replace(self.state.options, show_projection=bool(flag))
        self.render(self.state.current_slide)

    # ---------- rendering ----------

    def render(self, slide: int) -> None:
        teardown(self.surface, self.tooltip, self.controls)
        if not 0 <= slide < len(self.scenes):
            raise SceneIndexError(slide, len(self.scenes))

        self.state.current_slide = slide
        scene = self.scenes[slide]
        if self.nav is not None:
            self.nav.set_nav_state(slide == 0, slide == self.max_slide)
            self.nav.set_caption(f"{slide + 1}/{len(self.scenes)}  {scene.caption}")
        stage = Stage(
            surface=self.surface,
            annotations=self.annotations,
            tooltip=self.tooltip,
            controls=self.controls,
            options=self.state.options,
            select_country=self.select_country,
            set_show_projection=self.set_show_projection,
        )
        logger.debug("Rendering slide %d (%s)", slide, scene.name)
        scene.render(self.dataset, self.scales, stage)
        self.render_count += 1
