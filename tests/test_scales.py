"""Tests for coordinate and color scales."""

import pytest

from life_story.errors import ConfigError
from life_story.scales import TABLEAU10, UNKNOWN_COLOR, LinearScale, blend, build_scales


def test_year_and_value_mapping():
    scales = build_scales(["China"], width=700, height=550)
    assert scales.x(1960) == 0
    assert scales.x(2030) == 700
    assert scales.y(30) == 550
    assert scales.y(85) == 0
    assert scales.to_data(*scales.to_px(1995, 57.5)) == pytest.approx((1995, 57.5))


def test_ticks_are_round_numbers():
    assert LinearScale(30, 85, 410, 0).ticks() == [30, 35, 40, 45, 50, 55, 60, 65, 70, 75, 80, 85]
    assert LinearScale(1960, 2030, 0, 540).ticks(7) == [1960, 1970, 1980, 1990, 2000, 2010, 2020, 2030]


def test_color_assignment_is_stable_and_cycles():
    countries = [f"c{i}" for i in range(12)]
    scales = build_scales(countries, width=100, height=100)
    assert [scales.color(c) for c in countries[:10]] == list(TABLEAU10)
    assert scales.color("c10") == TABLEAU10[0]
    assert scales.color("c3") == scales.color("c3")
    assert scales.color("elsewhere") == UNKNOWN_COLOR
    assert "elsewhere" not in scales.color


def test_degenerate_domain_rejected():
    with pytest.raises(ConfigError):
        build_scales([], width=100, height=100, x_domain=(1960, 1960))


def test_blend():
    assert blend("#000000", "#ffffff", 0.0) == "#ffffff"
    assert blend("#000000", "#ffffff", 1.0) == "#000000"
    assert blend("#ff0000", "#ffffff", 0.5) == "#ff8080"
