"""Shared fixtures: a small synthetic world and a headless session over it."""

import pytest

from life_story.config import StoryConfig
from life_story.controls import HeadlessNavigation
from life_story.records import Dataset, Record
from life_story.session import build_session

YEARS = list(range(1960, 2021, 5))

ZIMBABWE = {
    1960: 52.0, 1965: 54.0, 1970: 55.0, 1975: 57.0, 1980: 59.0, 1985: 61.0, 1990: 61.0,
    1995: 55.0, 2000: 45.0, 2005: 44.0, 2010: 51.0, 2015: 59.0, 2020: 62.0,
}


def linear(country, base, slope, years=YEARS):
    return [Record(country, y, round(base + slope * (y - 1960), 2)) for y in years]


def make_world():
    rows = []
    rows += linear("China", 43.0, 0.5)
    rows += linear("Japan", 67.0, 0.25)
    rows += linear("South Korea", 55.0, 0.45)
    rows += linear("France", 70.0, 0.2)
    rows += linear("Nigeria", 37.0, 0.3)
    rows += linear("Kenya", 46.0, 0.3)
    rows += [Record("Zimbabwe", y, v) for y, v in ZIMBABWE.items()]
    rows += linear("United States", 69.8, 0.15)
    rows += linear("India", 41.0, 0.45)
    return rows


@pytest.fixture()
def config():
    return StoryConfig()


@pytest.fixture()
def world():
    return Dataset(make_world())


@pytest.fixture()
def session(world, config):
    s = build_session(world, config, nav=HeadlessNavigation())
    s.start()
    return s


@pytest.fixture()
def make_session():
    """Build an unstarted session over arbitrary records."""
    def _make(records, config=None):
        return build_session(Dataset(records), config or StoryConfig(), nav=HeadlessNavigation())
    return _make
