from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .annotations import AnnotationRenderer, AnnotationSpec
from .config import StoryConfig
from .controls import ControlPanel
from .layers import Layer
from .records import Dataset, Record, group_by_country
from .scales import ScaleRegistry
from .surface import Surface
from .tooltip import TooltipController, format_record

logger = logging.getLogger(__name__)

MARK_TAG = "mark"
SERIES_TAG = "series"


def country_tag(country: str) -> str:
    return f"country:{country}"


@dataclass(frozen=True)
class SceneOptions:
    selected_country: Optional[str] = None
    show_projection: bool = True


@dataclass
class Stage:
    """Everything a scene may draw on or talk to during one render."""

    surface: Surface
    annotations: AnnotationRenderer
    tooltip: TooltipController
    controls: ControlPanel
    options: SceneOptions = field(default_factory=SceneOptions)
    select_country: Callable[[str], None] = lambda _name: None
    set_show_projection: Callable[[bool], None] = lambda _flag: None


class Scene(metaclass=ABCMeta):
    name: str = ""
    caption: str = ""

    def __init__(self, config: StoryConfig) -> None:
        self.config = config

    @abstractmethod
    def render(self, dataset: Dataset, scales: ScaleRegistry, stage: Stage) -> None:
        """Filter, encode into a fresh layer, then annotate and wire hover."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


def _by_year(records: Sequence[Record]) -> List[Record]:
    return sorted(records, key=lambda r: r.year)


def _path_points(records: Sequence[Record], scales: ScaleRegistry) -> List[Tuple[float, float]]:
    return [scales.to_px(r.year, r.life_expectancy) for r in _by_year(records)]


def _hover_points(layer: Layer, records: Sequence[Record], scales: ScaleRegistry, tooltip: TooltipController,
                  *, r: float = 3, fill: str = "#555555") -> None:
    for rec in records:
        cx, cy = scales.to_px(rec.year, rec.life_expectancy)
        item = layer.circle(cx, cy, r, fill=fill, tags=(MARK_TAG, country_tag(rec.country)))
        tooltip.attach(item, rec)


# ---------- scene 0 ----------

class BaselineScene(Scene):
    name = "baseline"
    caption = "1960: a world divided"

    def render(self, dataset: Dataset, scales: ScaleRegistry, stage: Stage) -> None:
        layer = Layer(stage.surface)
        year0 = dataset.where(year=self.config.baseline_year)

        for rec in year0:
            cx, cy = scales.to_px(rec.year, rec.life_expectancy)
            layer.circle(cx, cy, 4, fill=scales.color(rec.country), opacity=0.8,
                         tags=(MARK_TAG, country_tag(rec.country)))

        rep = representative(year0)
        if rep is None:
            return
        stage.annotations.place([
            AnnotationSpec(
                title="Wide income gap",
                label="High-income countries start around 70+ yrs, low-income around 35-45 yrs",
                anchor=(rep.year, rep.life_expectancy),
                offset=(80, -60),
            )
        ])


def representative(records: Sequence[Record]) -> Optional[Record]:
    """The record closest to the median value; ties go to the earliest."""
    if not records:
        return None
    values = np.array([r.life_expectancy for r in records], dtype=np.float64)
    return records[int(np.argmin(np.abs(values - np.median(values))))]


# ---------- scene 1 ----------

class TrajectoryScene(Scene):
    name = "trajectory"
    caption = "East Asia's gains, 1960-1990"

    def render(self, dataset: Dataset, scales: ScaleRegistry, stage: Stage) -> None:
        cfg = self.config
        layer = Layer(stage.surface)
        filtered = dataset.where(countries=cfg.east_asia, max_year=cfg.east_asia_until)
        groups = group_by_country(filtered)

        for country, recs in groups.items():
            layer.path(_path_points(recs, scales), stroke=scales.color(country), width=2,
                       tags=(SERIES_TAG, country_tag(country)))
        _hover_points(layer, filtered, scales, stage.tooltip)

        anchor = dataset.lookup(cfg.east_asia_anchor, cfg.east_asia_until)
        if anchor is None or anchor.country not in groups:
            logger.debug("No %s value for %d; skipping annotation", cfg.east_asia_anchor, cfg.east_asia_until)
            return
        stage.annotations.place([
            AnnotationSpec(
                title="East Asia's Gains",
                label="China, Japan & South Korea rose ~20 yrs in three decades",
                anchor=(anchor.year, anchor.life_expectancy),
                offset=(-120, -30),
            )
        ])


# ---------- scene 2 ----------

class DrillDownScene(Scene):
    name = "drill-down"
    caption = "Sub-Saharan Africa: long plateaus"

    def render(self, dataset: Dataset, scales: ScaleRegistry, stage: Stage) -> None:
        cfg = self.config
        layer = Layer(stage.surface)
        groups = group_by_country(dataset.where(countries=cfg.sub_saharan))
        if not groups:
            return

        selected = stage.options.selected_country
        if selected not in groups:
            selected = next(iter(groups))
        stage.controls.add_choice("Country", list(groups), selected, stage.select_country)

        for country, recs in groups.items():
            if country == selected:
                continue
            layer.path(_path_points(recs, scales), stroke=scales.color(country), width=1.5, opacity=0.25,
                       tags=(SERIES_TAG, country_tag(country)))
        chosen = groups[selected]
        layer.path(_path_points(chosen, scales), stroke=scales.color(selected), width=3,
                   tags=(SERIES_TAG, "selected", country_tag(selected)))
        _hover_points(layer, chosen, scales, stage.tooltip, fill=scales.color(selected))

        at = dataset.lookup(selected, cfg.plateau_year)
        if at is None:
            return
        first = _by_year(chosen)[0]
        stage.annotations.place([
            AnnotationSpec(
                title="Long plateau",
                label=(f"{selected}: {first.life_expectancy:.1f} yrs in {first.year}, "
                       f"{at.life_expectancy:.1f} yrs by {at.year}"),
                anchor=(at.year, at.life_expectancy),
                offset=(60, 60),
            )
        ])


# ---------- scene 3 ----------

@dataclass(frozen=True)
class Dip:
    record: Record
    previous: Record
    drop: float
    recovered_in: Optional[int]


def find_dips(dataset: Dataset, threshold: float) -> List[Dip]:
    """
    Year-over-year falls of at least `threshold` years, per country in
    first-seen order. A dip recovers in the first later year that regains
    the value before the fall.
    """
    dips: List[Dip] = []
    for recs in group_by_country(dataset.records).values():
        ordered = _by_year(recs)
        if len(ordered) < 2:
            continue
        values = np.array([r.life_expectancy for r in ordered], dtype=np.float64)
        diffs = np.diff(values)
        for i in np.flatnonzero(diffs <= -threshold):
            pre = values[i]
            later = np.flatnonzero(values[i + 2:] >= pre)
            recovered = ordered[i + 2 + int(later[0])].year if later.size else None
            dips.append(Dip(record=ordered[i + 1], previous=ordered[i],
                            drop=float(-diffs[i]), recovered_in=recovered))
    return dips


def describe_dip(dip: Dip) -> str:
    rec = dip.record
    tail = f"recovered by {dip.recovered_in}" if dip.recovered_in is not None else "not yet recovered"
    return f"{rec.country}<br/>{rec.year}: {rec.life_expectancy} yrs (-{dip.drop:.1f})<br/>{tail}"


class DipScene(Scene):
    name = "dips"
    caption = "Dips and recoveries"

    def render(self, dataset: Dataset, scales: ScaleRegistry, stage: Stage) -> None:
        layer = Layer(stage.surface)
        dips = find_dips(dataset, self.config.dip_threshold)
        if not dips:
            return

        affected: Dict[str, None] = {d.record.country: None for d in dips}
        for country, recs in group_by_country(dataset.where(countries=affected)).items():
            layer.path(_path_points(recs, scales), stroke=scales.color(country), width=1.5, opacity=0.35,
                       tags=(SERIES_TAG, country_tag(country)))
        for dip in dips:
            rec = dip.record
            cx, cy = scales.to_px(rec.year, rec.life_expectancy)
            item = layer.circle(cx, cy, 5, fill="#d62728", outline="#ffffff",
                                tags=(MARK_TAG, "dip", country_tag(rec.country)))
            stage.tooltip.attach(item, rec, describe_dip(dip))

        worst = max(dips, key=lambda d: d.drop)
        rec = worst.record
        back = (f"back to its earlier level by {worst.recovered_in}" if worst.recovered_in is not None
                else "and has not yet recovered")
        stage.annotations.place([
            AnnotationSpec(
                title="Sudden reversals",
                label=f"{rec.country} lost {worst.drop:.1f} yrs in {rec.year}, {back}",
                anchor=(rec.year, rec.life_expectancy),
                offset=(50, 60),
            )
        ])


# ---------- scene 4 ----------

def linear_projection(records: Sequence[Record], start_year: int, end_year: int) -> Optional[float]:
    """Least-squares trend over years >= start_year, evaluated at end_year."""
    recent = [r for r in records if r.year >= start_year]
    years = np.array([r.year for r in recent], dtype=np.float64)
    if np.unique(years).size < 2:
        return None
    values = np.array([r.life_expectancy for r in recent], dtype=np.float64)
    slope, intercept = np.polyfit(years, values, 1)
    return float(slope * end_year + intercept)


class ProjectionScene(Scene):
    name = "projection"
    caption = "Looking ahead to 2030"

    def render(self, dataset: Dataset, scales: ScaleRegistry, stage: Stage) -> None:
        cfg = self.config
        layer = Layer(stage.surface)
        show = stage.options.show_projection
        stage.controls.add_toggle("Show projection", show, stage.set_show_projection)

        lead: Optional[Tuple[str, Record, Optional[float]]] = None
        groups = group_by_country(dataset.where(countries=cfg.projection_countries))
        # lead country follows the configured order, not dataset order
        for country in dict.fromkeys(cfg.projection_countries):
            if country not in groups:
                continue
            ordered = _by_year(groups[country])
            color = scales.color(country)
            layer.path(_path_points(ordered, scales), stroke=color, width=2,
                       tags=(SERIES_TAG, country_tag(country)))
            last = ordered[-1]
            _hover_points(layer, [last], scales, stage.tooltip, fill=color)

            projected = None
            if show and last.year < cfg.projection_end_year:
                projected = linear_projection(ordered, cfg.projection_start_year, cfg.projection_end_year)
            if projected is not None:
                end = scales.to_px(cfg.projection_end_year, projected)
                layer.path([scales.to_px(last.year, last.life_expectancy), end], stroke=color, width=2,
                           dash=(6, 4), tags=(SERIES_TAG, "projection", country_tag(country)))
                item = layer.circle(end[0], end[1], 4, fill="#ffffff", outline=color,
                                    tags=(MARK_TAG, "projection", country_tag(country)))
                target = Record(country, cfg.projection_end_year, round(projected, 1))
                stage.tooltip.attach(
                    item, target,
                    f"{country}<br/>{target.year} (projected): {target.life_expectancy} yrs",
                )
            if lead is None:
                lead = (country, last, projected)

        if lead is None:
            return
        country, last, projected = lead
        if projected is not None:
            spec = AnnotationSpec(
                title="What comes next?",
                label=(f"If current trends hold, {country} reaches {projected:.1f} yrs by "
                       f"{cfg.projection_end_year}. Keep investing in health to stay on that line."),
                anchor=(cfg.projection_end_year, projected),
                offset=(-160, -50),
            )
        else:
            spec = AnnotationSpec(
                title="What comes next?",
                label=(f"{country} stood at {last.life_expectancy:.1f} yrs in {last.year}. "
                       "Where the line goes depends on choices made today."),
                anchor=(last.year, last.life_expectancy),
                offset=(-160, -50),
            )
        stage.annotations.place([spec])


def default_scenes(config: StoryConfig) -> List[Scene]:
    return [
        BaselineScene(config),
        TrajectoryScene(config),
        DrillDownScene(config),
        DipScene(config),
        ProjectionScene(config),
    ]
