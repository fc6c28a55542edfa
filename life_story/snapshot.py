from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .config import StoryConfig
from .records import Dataset
from .session import build_session
from .surface import ImageSurface

logger = logging.getLogger(__name__)


def export_scenes(dataset: Dataset, config: StoryConfig, out_dir: str | Path) -> List[Path]:
    """Render every scene headlessly and write scene-<n>.png files."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    config.validate()
    surface = ImageSurface(config.plot_width, config.plot_height, config.margin, config.background)
    session = build_session(dataset, config, surface_factory=lambda _cfg: surface)

    written: List[Path] = []
    for slide in range(len(session.controller.scenes)):
        session.controller.go_to(slide)
        written.append(surface.save(out / f"scene-{slide}.png"))
    logger.info("Exported %d scenes to %s", len(written), out)
    return written
