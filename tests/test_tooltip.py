"""Tests for the single-tooltip lifecycle."""

from life_story.records import Record
from life_story.scenes import MARK_TAG
from life_story.surface import ImageSurface
from life_story.tooltip import TOOLTIP_TAG, TooltipController, format_record, plain_text


def _controller():
    surface = ImageSurface(400, 300)
    return surface, TooltipController(surface)


def test_show_replaces_previous_tooltip():
    surface, tips = _controller()
    tips.show("first", (10, 10))
    tips.show("second", (50, 50))
    assert tips.live_count == 1
    assert tips.current.content == "second"
    texts = [it for it in surface.items(TOOLTIP_TAG) if it.kind == "text"]
    assert [t.style["text"] for t in texts] == ["second"]


def test_hide_is_a_noop_without_tooltip():
    surface, tips = _controller()
    tips.hide()
    tips.hide()
    assert tips.live_count == 0
    assert surface.count(TOOLTIP_TAG) == 0


def test_background_sits_below_text():
    surface, tips = _controller()
    tips.show("China<br/>1990: 68.9 yrs", (20, 20))
    kinds = [surface.item(i).kind for i in surface._order if TOOLTIP_TAG in surface.item(i).tags]
    assert kinds == ["rect", "text"]


def test_hover_commands():
    _surface, tips = _controller()
    rec = Record("Japan", 1975, 74.5)
    cmd = tips.on_hover_start(rec, (5, 6))
    assert not cmd.hides
    assert cmd.tooltip.content == "Japan<br/>1975: 74.5 yrs"
    assert tips.on_hover_end().hides

    tips.apply(cmd)
    assert tips.current.position == (5, 6)
    tips.apply(tips.on_hover_end())
    assert tips.current is None


def test_content_formatting():
    assert format_record(Record("China", 1990, 68.9)) == "China<br/>1990: 68.9 yrs"
    assert format_record(Record("Chad", 2001, 68.12345)) == "Chad<br/>2001: 68.12345 yrs"
    assert plain_text("<strong>China</strong><br/>1990: 68.9 yrs") == "China\n1990: 68.9 yrs"


def test_pointer_enter_and_leave_on_mark(session):
    session.controller.render(1)
    surface = session.surface
    mark = surface.items(MARK_TAG)[0]

    assert surface.pointer_move(*mark.center()) is not None
    assert session.tooltip.live_count == 1
    assert surface.count(TOOLTIP_TAG) == 2

    surface.pointer_move(-500, -500)
    assert session.tooltip.live_count == 0
    assert surface.count(TOOLTIP_TAG) == 0


def test_navigation_removes_tooltip_without_pointer_leave(session):
    session.controller.render(1)
    surface = session.surface
    mark = surface.items(MARK_TAG)[0]
    surface.pointer_move(*mark.center())
    assert session.tooltip.live_count == 1

    session.controller.advance()
    assert session.tooltip.live_count == 0
    assert surface.count(TOOLTIP_TAG) == 0


def test_at_most_one_tooltip_while_moving_between_marks(session):
    session.controller.render(1)
    surface = session.surface
    for mark in surface.items(MARK_TAG):
        surface.pointer_move(*mark.center())
        assert surface.count(TOOLTIP_TAG) <= 2
        assert session.tooltip.live_count == 1
