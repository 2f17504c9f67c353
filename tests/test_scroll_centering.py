"""Tests for ScrollCentering: offset math, missing geometry, clamping and clock wiring."""

import pytest

from playback_clock import PlaybackClock
from scroll_centering import ScrollCentering


class TestUpdate:

    def test_centers_active_token(self, view):
        view.active_index = 10
        scroller = ScrollCentering(view, view.apply_offset)
        assert scroller.update() == 120
        assert view.applied == [120]
        assert scroller.offset == 120

    def test_unclamped_by_default(self, view):
        scroller = ScrollCentering(view, view.apply_offset)
        assert scroller.update() == -280

    def test_missing_geometry_is_a_noop(self, view):
        view.rendered = False
        scroller = ScrollCentering(view, view.apply_offset)
        scroller.offset = 55
        assert scroller.update() is None
        assert view.applied == []
        assert scroller.offset == 55

    def test_missing_viewport_is_a_noop(self, view):
        view.viewport_height = None
        scroller = ScrollCentering(view, view.apply_offset)
        assert scroller.update() is None
        assert view.applied == []

    def test_same_geometry_same_offset(self, view):
        view.active_index = 7
        scroller = ScrollCentering(view, view.apply_offset)
        assert scroller.update() == scroller.update()


class TestClamp:

    @pytest.mark.parametrize("index, expected", [(0, 0), (10, 120), (49, 1400)])
    def test_clamped_to_scroll_range(self, view, index, expected):
        # 50 rows * 40px = 2000px content, 600px viewport -> max offset 1400
        view.active_index = index
        scroller = ScrollCentering(view, view.apply_offset, clamp=True)
        assert scroller.update() == expected

    def test_clamp_without_content_height_only_floors(self, view):
        view.get_content_height = lambda: None
        view.active_index = 49
        scroller = ScrollCentering(view, view.apply_offset, clamp=True)
        assert scroller.update() == 49 * 40 - 300 + 20


class TestClockWiring:

    def make(self, scheduler, view):
        clock = PlaybackClock(scheduler, view.token_count, speed=2.0)
        view.index_source = lambda: clock.current_index
        scroller = ScrollCentering(view, view.apply_offset)
        scroller.attach(clock)
        return clock, scroller

    def test_recomputes_on_every_tick(self, scheduler, view):
        clock, _ = self.make(scheduler, view)
        clock.toggle_play()
        scheduler.advance(450)
        assert view.applied == [-240, -200, -160]

    def test_recomputes_on_jump(self, scheduler, view):
        clock, scroller = self.make(scheduler, view)
        clock.jump_to(20)
        assert scroller.offset == 20 * 40 - 300 + 20

    def test_reset_scrolls_to_origin(self, scheduler, view):
        clock, scroller = self.make(scheduler, view)
        clock.jump_to(30)
        clock.reset()
        assert scroller.offset == 0
        assert view.applied[-1] == 0

    def test_play_toggle_does_not_scroll(self, scheduler, view):
        clock, _ = self.make(scheduler, view)
        clock.toggle_play()
        assert view.applied == []

    def test_detach_stops_updates(self, scheduler, view):
        clock, scroller = self.make(scheduler, view)
        scroller.detach()
        clock.jump_to(5)
        assert view.applied == []

    def test_token_replacement_recenters(self, scheduler, view):
        clock, scroller = self.make(scheduler, view)
        clock.jump_to(20)
        clock.set_token_count(10)
        assert view.applied[-1] == -280
        assert scroller.offset == -280
