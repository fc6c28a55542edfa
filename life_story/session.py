from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .annotations import AnnotationRenderer
from .config import StoryConfig
from .controls import ControlPanel, HeadlessControls, NavigationControls
from .controller import SceneController
from .records import Dataset
from .scales import ScaleRegistry, build_scales
from .scenes import default_scenes
from .surface import ImageSurface, Surface, draw_axes
from .tooltip import TooltipController

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Process-wide state, built once the dataset is ready and passed explicitly."""

    config: StoryConfig
    dataset: Dataset
    scales: ScaleRegistry
    surface: Surface
    tooltip: TooltipController
    annotations: AnnotationRenderer
    controls: ControlPanel
    controller: SceneController

    def start(self) -> None:
        self.controller.render(self.controller.current_slide)


def build_session(
    dataset: Dataset,
    config: StoryConfig,
    *,
    surface_factory: Optional[Callable[[StoryConfig], Surface]] = None,
    controls: Optional[ControlPanel] = None,
    nav: Optional[NavigationControls] = None,
) -> Session:
    config.validate()
    if surface_factory is None:
        surface = ImageSurface(config.plot_width, config.plot_height, config.margin, config.background)
    else:
        surface = surface_factory(config)
    scales = build_scales(
        dataset.countries(),
        width=config.plot_width,
        height=config.plot_height,
        x_domain=config.x_domain,
        y_domain=config.y_domain,
        palette=config.palette,
    )
    draw_axes(surface, scales)

    tooltip = TooltipController(surface)
    annotations = AnnotationRenderer(surface, scales)
    controls = controls if controls is not None else HeadlessControls()
    controller = SceneController(
        default_scenes(config), dataset, scales, surface,
        tooltip=tooltip, annotations=annotations, controls=controls, nav=nav,
    )
    logger.debug("Session ready: %d records, %d scenes", len(dataset), len(controller.scenes))
    return Session(config, dataset, scales, surface, tooltip, annotations, controls, controller)
