"""Tests for the five scene routines."""

import pytest

from life_story.layers import ANNOTATION_TAG, PLOT_LAYER_TAG
from life_story.records import Record
from life_story.scenes import (
    MARK_TAG,
    SERIES_TAG,
    country_tag,
    find_dips,
    linear_projection,
    representative,
)

from conftest import ZIMBABWE, linear


def _countries(items):
    return {t.split(":", 1)[1] for it in items for t in it.tags if t.startswith("country:")}


# ---------- scene 0 ----------

def test_baseline_draws_only_1960(make_session):
    s = make_session([Record("Chad", 1960, 38.0), Record("Chad", 1965, 40.0)])
    s.controller.render(0)
    marks = s.surface.items(MARK_TAG)
    assert len(marks) == 1
    cx, cy, r = marks[0].coords
    assert cx == pytest.approx(s.scales.x(1960))
    assert cy == pytest.approx(s.scales.y(38.0))
    assert r == 4
    assert marks[0].style["opacity"] == 0.8
    assert s.surface.count(ANNOTATION_TAG) > 0


def test_baseline_with_no_1960_records(make_session):
    s = make_session([Record("Chad", 1965, 40.0), Record("Peru", 1970, 52.0)])
    s.controller.render(0)
    assert s.surface.count(MARK_TAG) == 0
    assert s.surface.count(ANNOTATION_TAG) == 0


def test_baseline_on_empty_dataset(make_session):
    s = make_session([])
    s.controller.render(0)
    assert s.surface.count(PLOT_LAYER_TAG) == 0


def test_representative_is_closest_to_median():
    recs = [Record("A", 1960, 35.0), Record("B", 1960, 58.0), Record("C", 1960, 72.0)]
    assert representative(recs).country == "B"
    assert representative([]) is None


# ---------- scene 1 ----------

def test_trajectory_groups_focus_countries_only(make_session):
    years = list(range(1960, 2001, 10))
    records = linear("France", 70.0, 0.2, years) + linear("Japan", 67.0, 0.25, years)
    # China arrives out of year order
    records += list(reversed(linear("China", 43.0, 0.5, years)))
    s = make_session(records)
    s.controller.render(1)

    paths = s.surface.items(SERIES_TAG)
    assert _countries(paths) == {"China", "Japan"}
    assert len(paths) == 2
    for p in paths:
        xs = p.coords[0::2]
        assert list(xs) == sorted(xs)
        assert max(s.scales.x.invert(x) for x in xs) <= 1990 + 1e-9
        assert len(xs) == 4

    marks = s.surface.items(MARK_TAG)
    assert _countries(marks) == {"China", "Japan"}
    assert all(s.surface.has_hover(m.id) for m in marks)


def test_trajectory_path_colors_follow_country(session):
    session.controller.render(1)
    for p in session.surface.items(SERIES_TAG):
        (country,) = _countries([p])
        assert p.style["stroke"] == session.scales.color(country)


def test_trajectory_annotation_omitted_without_anchor(make_session):
    years = list(range(1960, 1981, 10))
    s = make_session(linear("China", 43.0, 0.5, years) + linear("Japan", 67.0, 0.25, years))
    s.controller.render(1)
    assert s.surface.count(SERIES_TAG) == 2
    assert s.surface.count(ANNOTATION_TAG) == 0


def test_trajectory_annotation_anchored_at_china_1990(session):
    session.controller.render(1)
    lines = [it for it in session.surface.items(ANNOTATION_TAG) if it.kind == "line"]
    china = session.dataset.lookup("China", 1990)
    ax, ay = session.scales.to_px(1990, china.life_expectancy)
    x0, y0, x1, y1 = lines[0].coords
    assert (x0, y0) == pytest.approx((ax, ay))
    assert (x1 - x0, y1 - y0) == pytest.approx((-120, -30))


# ---------- scene 2 ----------

def test_drill_down_defaults_to_first_present_country(session):
    session.controller.render(2)
    widget = session.controls.widgets["Country"]
    assert list(widget.options) == ["Nigeria", "Kenya", "Zimbabwe"]
    assert widget.value == "Nigeria"
    selected = session.surface.items("selected")
    assert _countries(selected) == {"Nigeria"}


def test_drill_down_selection_rerenders(session):
    session.controller.go_to(2)
    session.controls.choose("Country", "Kenya")
    assert session.controller.state.options.selected_country == "Kenya"
    assert _countries(session.surface.items("selected")) == {"Kenya"}
    assert _countries(session.surface.items(MARK_TAG)) == {"Kenya"}
    assert session.surface.count(ANNOTATION_TAG) > 0
    # the old widgets were torn down and rebuilt once
    assert list(session.controls.widgets) == ["Country"]


def test_drill_down_without_focus_countries(make_session):
    s = make_session(linear("France", 70.0, 0.2))
    s.controller.render(2)
    assert s.surface.count(PLOT_LAYER_TAG) == 0
    assert s.controls.widgets == {}


# ---------- scene 3 ----------

def test_find_dips_and_recoveries(world):
    dips = find_dips(world, 2.0)
    assert [(d.record.country, d.record.year) for d in dips] == [("Zimbabwe", 1995), ("Zimbabwe", 2000)]
    first, second = dips
    assert first.drop == pytest.approx(6.0)
    assert first.previous.year == 1990
    assert first.recovered_in == 2020
    assert second.drop == pytest.approx(10.0)
    assert second.recovered_in == 2015


def test_find_dips_never_recovered():
    from life_story.records import Dataset

    ds = Dataset([Record("X", 2000, 60.0), Record("X", 2005, 50.0), Record("X", 2010, 55.0)])
    (dip,) = find_dips(ds, 2.0)
    assert dip.recovered_in is None


def test_dip_scene_marks_and_annotation(session):
    session.controller.render(3)
    dips = session.surface.items("dip")
    assert len(dips) == 2
    assert _countries(session.surface.items(SERIES_TAG)) == {"Zimbabwe"}
    texts = [it.style["text"] for it in session.surface.items(ANNOTATION_TAG) if it.kind == "text"]
    assert any("2000" in t and "10.0" in t.replace("\n", " ") for t in texts)


def test_dip_scene_without_dips(make_session):
    s = make_session(linear("France", 70.0, 0.2))
    s.controller.render(3)
    assert s.surface.count(PLOT_LAYER_TAG) == 0
    assert s.surface.count(ANNOTATION_TAG) == 0


# ---------- scene 4 ----------

def test_linear_projection_extends_trend():
    recs = linear("China", 43.0, 0.5)
    assert linear_projection(recs, 2000, 2030) == pytest.approx(43.0 + 0.5 * 70)
    assert linear_projection(recs[:1], 1960, 2030) is None


def test_projection_scene_reaches_2030(session):
    session.controller.render(4)
    projections = [it for it in session.surface.items("projection") if it.kind == "path"]
    assert _countries(projections) == {"China", "United States", "Nigeria", "India"}
    for p in projections:
        assert session.scales.x.invert(p.coords[-2]) == pytest.approx(2030)
        assert p.style["dash"] == (6, 4)
    assert session.controls.widgets["Show projection"].value is True


def test_projection_toggle_hides_projection(session):
    session.controller.go_to(4)
    session.controls.choose("Show projection", False)
    assert session.surface.count("projection") == 0
    assert session.surface.count(SERIES_TAG) == 4
    assert session.surface.count(ANNOTATION_TAG) > 0
    assert session.controls.widgets["Show projection"].value is False


def test_projection_lead_follows_configured_order(make_session):
    # India precedes China in the data; China is listed first in the config
    s = make_session(linear("India", 41.0, 0.45) + linear("China", 43.0, 0.5))
    s.controller.render(4)
    lines = [it for it in s.surface.items(ANNOTATION_TAG) if it.kind == "line"]
    projected = linear_projection(linear("China", 43.0, 0.5), 2000, 2030)
    assert tuple(lines[0].coords[:2]) == pytest.approx(s.scales.to_px(2030, projected))
    texts = " ".join(it.style["text"] for it in s.surface.items(ANNOTATION_TAG) if it.kind == "text")
    assert "China" in texts and "India" not in texts


# ---------- shared ----------

def test_color_is_stable_across_scenes(session):
    seen = {}
    for slide in range(5):
        session.controller.render(slide)
        for it in session.surface.items(PLOT_LAYER_TAG):
            for country in _countries([it]):
                color = it.style.get("stroke") if it.kind == "path" else None
                if color is None:
                    continue
                assert seen.setdefault(country, color) == color
    assert seen["China"] == session.scales.color("China")


def test_zimbabwe_fixture_has_expected_shape():
    assert ZIMBABWE[2000] - ZIMBABWE[1995] == -10.0


def test_country_tag_is_stable():
    assert country_tag("South Korea") == "country:South Korea"
