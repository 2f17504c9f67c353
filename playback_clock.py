# -*- coding: utf-8 -*-

import traceback
from dataclasses import dataclass

from utils import BASE_RATE, clamp_speed, calculate_interval_ms


@dataclass
class PlaybackState:
    is_playing: bool = False
    speed: float = 2.0
    current_index: int = 0


class PlaybackClock:
    """
    Advances a token cursor on a fixed cadence derived from the speed.

    The scheduler is anything with Tk's after(ms, callback) / after_cancel(id)
    pair, usually the presentation window itself. Only one tick job exists at
    a time: every change of play state, speed or token count cancels the
    pending job before a new one is installed, so the wait already in flight
    is thrown away rather than stretched or shortened.

    Listeners are called as listener(event, state) with event one of
    "play", "speed", "index", "reset", "tokens", "end".
    """
    def __init__(self, scheduler, token_count=0, speed=2.0, base_rate=BASE_RATE):
        self.scheduler = scheduler
        self.base_rate = base_rate
        self.token_count = max(0, int(token_count))
        self.state = PlaybackState(speed=clamp_speed(speed))
        self.tick_job = None
        self.listeners = []

    # --- Properties ---
    @property
    def is_playing(self): return self.state.is_playing
    @property
    def speed(self): return self.state.speed
    @property
    def current_index(self): return self.state.current_index
    @property
    def interval_ms(self): return calculate_interval_ms(self.state.speed, self.base_rate)

    # --- Observers ---
    def add_listener(self, listener):
        if listener not in self.listeners: self.listeners.append(listener)

    def remove_listener(self, listener):
        if listener in self.listeners: self.listeners.remove(listener)

    def _notify(self, event):
        for listener in list(self.listeners):
            try: listener(event, self.state)
            except Exception as e: print(f"Error in playback listener for '{event}': {e}"); traceback.print_exc()

    # --- Operations ---
    def toggle_play(self):
        """Flips play/pause. Ignored while there is nothing to play."""
        if self.token_count == 0: return
        self.state.is_playing = not self.state.is_playing
        print("Playback started." if self.state.is_playing else "Playback paused.")
        self._reschedule()
        self._notify("play")

    def set_speed(self, speed):
        """Sets a new speed; the next tick is one full new interval away."""
        new_speed = clamp_speed(speed)
        if new_speed == self.state.speed: return
        self.state.speed = new_speed
        self._reschedule()
        self._notify("speed")

    def reset(self):
        """Stops playback and rewinds to the first token."""
        self._cancel_tick()
        self.state.is_playing = False
        self.state.current_index = 0
        self._notify("reset")

    def jump_to(self, index):
        """Moves the cursor directly, clamped to the token range. Play state is untouched."""
        if self.token_count == 0: return
        try: index = int(index)
        except (TypeError, ValueError): return
        self.state.current_index = max(0, min(index, self.token_count - 1))
        self._notify("index")

    def set_token_count(self, token_count):
        """Replaces the sequence length (script edit) and rewinds to the start."""
        self.token_count = max(0, int(token_count))
        self.state.current_index = 0
        if self.token_count == 0: self.state.is_playing = False
        self._reschedule()
        self._notify("tokens")

    def close(self):
        """Releases the tick job and all listeners. The clock is inert afterwards."""
        self._cancel_tick()
        self.state.is_playing = False
        self.listeners = []

    # --- Scheduling ---
    def _cancel_tick(self):
        if self.tick_job is not None:
            try: self.scheduler.after_cancel(self.tick_job)
            except Exception as e: print(f"Could not cancel tick job: {e}")
            self.tick_job = None

    def _schedule_tick(self):
        delay = max(1, int(round(self.interval_ms)))
        self.tick_job = self.scheduler.after(delay, self._on_tick)

    def _reschedule(self):
        self._cancel_tick()
        if self.state.is_playing and self.token_count > 0: self._schedule_tick()

    def _on_tick(self):
        self.tick_job = None
        if not self.state.is_playing or self.token_count == 0: return
        if self.state.current_index < self.token_count - 1:
            self.state.current_index += 1
            self._schedule_tick()
            self._notify("index")
        else:
            print("Reached end of script. Pausing.")
            self.state.is_playing = False
            self._notify("end")
