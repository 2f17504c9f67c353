"""Tests for PlaybackClock: ticking, end-of-script pause, reset, jumps, cadence rebuilds."""

from playback_clock import PlaybackClock


def make_clock(scheduler, tokens=3, speed=2.0):
    clock = PlaybackClock(scheduler, tokens, speed=speed)
    events = []
    clock.add_listener(lambda event, state: events.append((event, state.current_index, state.is_playing)))
    return clock, events


class TestInitialState:

    def test_starts_paused_at_zero(self, scheduler):
        clock, _ = make_clock(scheduler)
        assert clock.is_playing is False
        assert clock.current_index == 0
        assert clock.speed == 2.0
        assert scheduler.pending == 0

    def test_speed_is_clamped_on_construction(self, scheduler):
        assert PlaybackClock(scheduler, 3, speed=99).speed == 10.0

    def test_interval_for_speed_two(self, scheduler):
        clock, _ = make_clock(scheduler)
        assert clock.interval_ms == 150.0


class TestTicking:

    def test_advances_one_token_per_interval(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=5)
        clock.toggle_play()
        scheduler.advance(149)
        assert clock.current_index == 0
        scheduler.advance(1)
        assert clock.current_index == 1
        scheduler.advance(300)
        assert clock.current_index == 3

    def test_pauses_at_last_token(self, scheduler):
        clock, events = make_clock(scheduler, tokens=3)
        clock.toggle_play()
        scheduler.advance(300)
        assert clock.current_index == 2
        assert clock.is_playing is True
        scheduler.advance(150)
        assert clock.current_index == 2
        assert clock.is_playing is False
        assert scheduler.pending == 0
        assert events[-1] == ("end", 2, False)

    def test_index_never_exceeds_last_token(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=4)
        clock.toggle_play()
        scheduler.advance(10_000)
        assert clock.current_index == 3
        assert clock.is_playing is False

    def test_tick_at_end_after_jump(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=3)
        clock.jump_to(2)
        clock.toggle_play()
        scheduler.advance(150)
        assert clock.is_playing is False
        assert clock.current_index == 2

    def test_pause_stops_ticks(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        scheduler.advance(150)
        clock.toggle_play()
        assert scheduler.pending == 0
        scheduler.advance(1000)
        assert clock.current_index == 1

    def test_toggle_without_tokens_is_ignored(self, scheduler):
        clock, events = make_clock(scheduler, tokens=0)
        clock.toggle_play()
        assert clock.is_playing is False
        assert scheduler.pending == 0
        assert events == []

    def test_interval_is_rounded_to_whole_ms(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=3, speed=0.7)
        clock.toggle_play()
        job_id = clock.tick_job
        assert scheduler.delay_of(job_id) == 429

    def test_failing_listener_does_not_stop_playback(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=5)

        def broken(event, state):
            raise RuntimeError("boom")

        clock.add_listener(broken)
        clock.toggle_play()
        scheduler.advance(300)
        assert clock.current_index == 2


class TestSpeedChange:

    def test_rebuilds_timer_at_new_cadence(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        scheduler.advance(100)
        clock.set_speed(1.0)
        # the old tick (due at 150) is gone; the next one is a full 300ms away
        scheduler.advance(299)
        assert clock.current_index == 0
        scheduler.advance(1)
        assert clock.current_index == 1
        assert scheduler.pending == 1

    def test_out_of_range_speed_is_clamped(self, scheduler):
        clock, _ = make_clock(scheduler)
        clock.set_speed(0)
        assert clock.speed == 0.1
        clock.set_speed(25)
        assert clock.speed == 10.0

    def test_same_speed_does_not_reschedule(self, scheduler):
        clock, events = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        job_id = clock.tick_job
        clock.set_speed(2.0)
        assert clock.tick_job == job_id
        assert ("speed", 0, True) not in events

    def test_speed_change_while_paused_schedules_nothing(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=10)
        clock.set_speed(5.0)
        assert scheduler.pending == 0

    def test_never_more_than_one_pending_tick(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        for speed in (1.0, 3.0, 0.5, 9.9):
            clock.set_speed(speed)
            assert scheduler.pending == 1
        clock.toggle_play(); clock.toggle_play()
        assert scheduler.pending == 1


class TestResetAndJump:

    def test_reset_from_any_state(self, scheduler):
        clock, events = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        scheduler.advance(600)
        clock.reset()
        assert clock.is_playing is False
        assert clock.current_index == 0
        assert scheduler.pending == 0
        assert events[-1] == ("reset", 0, False)

    def test_reset_when_idle(self, scheduler):
        clock, _ = make_clock(scheduler)
        clock.reset()
        assert (clock.is_playing, clock.current_index) == (False, 0)

    def test_jump_sets_index_without_touching_play_state(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=3)
        clock.jump_to(2)
        assert clock.current_index == 2
        assert clock.is_playing is False
        assert scheduler.pending == 0

    def test_jump_while_playing_keeps_timer(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        job_id = clock.tick_job
        clock.jump_to(5)
        assert clock.tick_job == job_id
        assert clock.is_playing is True
        scheduler.advance(150)
        assert clock.current_index == 6

    def test_jump_is_clamped(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=3)
        clock.jump_to(99)
        assert clock.current_index == 2
        clock.jump_to(-4)
        assert clock.current_index == 0

    def test_jump_without_tokens_is_ignored(self, scheduler):
        clock, events = make_clock(scheduler, tokens=0)
        clock.jump_to(3)
        assert clock.current_index == 0
        assert events == []


class TestTokenCountAndTeardown:

    def test_new_token_count_rewinds_and_keeps_playing(self, scheduler):
        clock, events = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        scheduler.advance(450)
        clock.set_token_count(4)
        assert clock.current_index == 0
        assert clock.is_playing is True
        assert scheduler.pending == 1
        assert events[-1] == ("tokens", 0, True)

    def test_zero_tokens_stops_playback(self, scheduler):
        clock, _ = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        clock.set_token_count(0)
        assert clock.is_playing is False
        assert scheduler.pending == 0

    def test_close_releases_timer_and_listeners(self, scheduler):
        clock, events = make_clock(scheduler, tokens=10)
        clock.toggle_play()
        count = len(events)
        clock.close()
        assert scheduler.pending == 0
        scheduler.advance(1000)
        assert clock.current_index == 0
        assert len(events) == count
        assert clock.listeners == []
