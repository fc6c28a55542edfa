"""Tests for callout placement."""

import pytest

from life_story.annotations import AnnotationRenderer, AnnotationSpec
from life_story.layers import ANNOTATION_TAG
from life_story.scales import build_scales
from life_story.surface import ImageSurface


@pytest.fixture()
def renderer():
    scales = build_scales(["A"], width=540, height=410)
    return AnnotationRenderer(ImageSurface(540, 410), scales)


def test_anchor_is_scaled_at_place_time(renderer):
    spec = AnnotationSpec("Title", "Some label", anchor=(1995, 57.5), offset=(80, -60))
    renderer.place([spec])
    connector = renderer.surface.items(ANNOTATION_TAG)[0]
    ax, ay = renderer.scales.to_px(1995, 57.5)
    assert connector.coords == pytest.approx((ax, ay, ax + 80, ay - 60))


def test_specs_render_independently(renderer):
    one = renderer.place([AnnotationSpec("A", "first", anchor=(1970, 50), offset=(40, 40))])
    both = renderer.place([
        AnnotationSpec("A", "first", anchor=(1970, 50), offset=(40, 40)),
        AnnotationSpec("B", "second", anchor=(1970, 50), offset=(40, 40)),
    ])
    assert len(both) == 2 * len(one)
    titles = [it.style["text"] for it in renderer.surface.items(ANNOTATION_TAG)
              if it.kind == "text" and it.style.get("bold")]
    assert titles == ["A", "A", "B"]


def test_long_labels_are_wrapped(renderer):
    label = "High-income countries start around 70+ yrs, low-income around 35-45 yrs"
    renderer.place([AnnotationSpec("Wide income gap", label, anchor=(1960, 60), offset=(80, -60))])
    texts = [it.style["text"] for it in renderer.surface.items(ANNOTATION_TAG) if it.kind == "text"]
    wrapped = next(t for t in texts if t != "Wide income gap")
    assert "\n" in wrapped
    assert all(len(line) <= renderer.wrap for line in wrapped.splitlines())


def test_title_above_label_when_note_points_up(renderer):
    renderer.place([AnnotationSpec("Up", "label text", anchor=(1980, 60), offset=(10, -50))])
    s = renderer.surface
    title = next(it for it in s.items(ANNOTATION_TAG) if it.kind == "text" and it.style.get("bold"))
    label = next(it for it in s.items(ANNOTATION_TAG) if it.kind == "text" and not it.style.get("bold"))
    assert s.bbox(title.id)[3] <= s.bbox(label.id)[1] + 1e-6


def test_empty_spec_list_draws_nothing(renderer):
    assert renderer.place([]) == []
    assert renderer.surface.count(ANNOTATION_TAG) == 0
