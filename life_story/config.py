from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import ConfigError
from .scales import TABLEAU10
from .surface import Margin

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".life_story_config.json"

_INT_FIELDS = (
    "canvas_width", "canvas_height", "margin_top", "margin_right", "margin_bottom", "margin_left",
    "baseline_year", "east_asia_until", "plateau_year", "projection_start_year", "projection_end_year",
)
_NAME_LIST_FIELDS = ("palette", "east_asia", "sub_saharan", "projection_countries")


def _is_number(value, integral: bool = False) -> bool:
    # bool is an int subclass but never a valid size or year
    if isinstance(value, bool):
        return False
    return isinstance(value, int) if integral else isinstance(value, (int, float))


@dataclass
class StoryConfig:
    # outer canvas size; the plot area is this minus the margins
    canvas_width: int = 800
    canvas_height: int = 500
    margin_top: int = 40
    margin_right: int = 200
    margin_bottom: int = 50
    margin_left: int = 60

    x_domain: Tuple[float, float] = (1960, 2030)
    y_domain: Tuple[float, float] = (30, 85)
    palette: List[str] = field(default_factory=lambda: list(TABLEAU10))
    background: str = "#ffffff"

    baseline_year: int = 1960
    east_asia: List[str] = field(default_factory=lambda: ["China", "Japan", "South Korea"])
    east_asia_until: int = 1990
    east_asia_anchor: str = "China"
    sub_saharan: List[str] = field(default_factory=lambda: [
        "Nigeria", "Ethiopia", "Kenya", "South Africa", "Zimbabwe", "Botswana",
    ])
    plateau_year: int = 2000
    dip_threshold: float = 2.0
    projection_countries: List[str] = field(default_factory=lambda: [
        "China", "India", "Nigeria", "United States",
    ])
    projection_start_year: int = 2000
    projection_end_year: int = 2030

    def __post_init__(self) -> None:
        self.x_domain = tuple(self.x_domain)  # type: ignore[assignment]
        self.y_domain = tuple(self.y_domain)  # type: ignore[assignment]

    @property
    def margin(self) -> Margin:
        return Margin(top=self.margin_top, right=self.margin_right,
                      bottom=self.margin_bottom, left=self.margin_left)

    @property
    def plot_width(self) -> int:
        return self.canvas_width - self.margin_left - self.margin_right

    @property
    def plot_height(self) -> int:
        return self.canvas_height - self.margin_top - self.margin_bottom

    def validate(self) -> "StoryConfig":
        for name in _INT_FIELDS:
            if not _is_number(getattr(self, name), integral=True):
                raise ConfigError(f"{name} must be an integer, got {getattr(self, name)!r}")
        if not _is_number(self.dip_threshold):
            raise ConfigError(f"dip_threshold must be a number, got {self.dip_threshold!r}")
        for name in _NAME_LIST_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{name} must be a list of strings, got {value!r}")
        for name in ("background", "east_asia_anchor"):
            if not isinstance(getattr(self, name), str):
                raise ConfigError(f"{name} must be a string, got {getattr(self, name)!r}")

        if self.plot_width <= 0 or self.plot_height <= 0:
            raise ConfigError(
                f"Margins leave no plot area in a {self.canvas_width}x{self.canvas_height} canvas."
            )
        for name in ("x_domain", "y_domain"):
            dom = getattr(self, name)
            if len(dom) != 2 or not all(_is_number(v) for v in dom) or dom[0] == dom[1]:
                raise ConfigError(f"{name} must be two distinct numbers, got {dom!r}")
        if not self.palette:
            raise ConfigError("palette must contain at least one color.")
        if self.dip_threshold <= 0:
            raise ConfigError("dip_threshold must be positive.")
        if self.projection_end_year <= self.projection_start_year:
            raise ConfigError("projection_end_year must come after projection_start_year.")
        return self


def load_config(path: Optional[Path] = None) -> StoryConfig:
    """
    Defaults merged with whatever the user saved. A corrupt file is
    logged and ignored so the viewer still starts.
    """
    path = CONFIG_PATH if path is None else Path(path)
    if not path.exists():
        return StoryConfig()

    known = {f.name for f in fields(StoryConfig)}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("top level is not an object")
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
        merged = {**asdict(StoryConfig()), **{k: v for k, v in data.items() if k in known}}
        return StoryConfig(**merged)
    except (OSError, ValueError, TypeError) as e:
        logger.warning("Config %s is unreadable (%s); using defaults", path, e)
        return StoryConfig()


def save_config(cfg: StoryConfig, path: Optional[Path] = None) -> Path:
    path = CONFIG_PATH if path is None else Path(path)
    payload = asdict(cfg)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path
