# -*- coding: utf-8 -*-

import traceback

from config import DEFAULT_SETTINGS
from playback_clock import PlaybackClock
from utils import tokenize


class TeleprompterSession:
    """
    One presentation of one script: tokens, playback clock and edit buffer.

    settings may be a ConfigManager or a plain dict; missing keys fall back to
    DEFAULT_SETTINGS. Callbacks:
        on_exit()              the user left the presentation
        on_redirect()          the script was empty, nothing to present
        on_notify(message)     short user-facing confirmation (edit committed)
    """
    def __init__(self, scheduler, settings=None, on_exit=None, on_redirect=None, on_notify=None):
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self.on_exit = on_exit
        self.on_redirect = on_redirect
        self.on_notify = on_notify
        self.script = ""
        self.tokens = []
        self.edit_buffer = None
        self.closed = False
        self.clock = PlaybackClock(scheduler, 0, speed=self.setting("speed"))

    def setting(self, key):
        value = self.settings.get(key)
        return DEFAULT_SETTINGS.get(key) if value is None else value

    # --- Read-only views ---
    @property
    def state(self): return self.clock.state
    @property
    def token_count(self): return len(self.tokens)
    @property
    def is_playing(self): return self.clock.is_playing
    @property
    def speed(self): return self.clock.speed
    @property
    def current_index(self): return self.clock.current_index
    @property
    def is_editing(self): return self.edit_buffer is not None

    @property
    def active_token(self):
        if not self.tokens: return None
        return self.tokens[self.clock.current_index]

    # --- Lifecycle ---
    def start(self, script):
        """Loads the script. Returns False (and redirects) when it has no tokens."""
        tokens = tokenize(script)
        if not tokens:
            print("Empty script, cannot start presentation.")
            self._call(self.on_redirect)
            return False
        self.script = script; self.tokens = tokens
        self.clock.set_token_count(len(tokens))
        print(f"Presentation loaded: {len(tokens)} tokens at {self.clock.speed:.1f}x.")
        if self.setting("auto_start"): self.clock.toggle_play()
        return True

    def exit(self):
        """Rewinds, releases timers and hands control back to the caller."""
        if self.closed: return
        self.clock.reset()
        self.close()
        self._call(self.on_exit)

    def close(self):
        if self.closed: return
        self.closed = True
        self.edit_buffer = None
        self.clock.close()

    # --- Transport, forwarded to the clock ---
    def toggle_play(self): self.clock.toggle_play()
    def set_speed(self, speed): self.clock.set_speed(speed)
    def reset(self): self.clock.reset()
    def jump_to(self, index): self.clock.jump_to(index)

    # --- Editing ---
    def enter_edit_mode(self):
        self.edit_buffer = self.script
        return self.edit_buffer

    def commit_edit(self, text):
        """Replaces the script. Blank text is ignored and the current tokens stay."""
        self.edit_buffer = None
        tokens = tokenize(text)
        if not tokens: print("Edit ignored: empty text."); return False
        self.script = text; self.tokens = tokens
        self.clock.set_token_count(len(tokens))
        print(f"Script updated: {len(tokens)} tokens.")
        self._call(self.on_notify, "Text aktualisiert")
        return True

    def cancel_edit(self):
        self.edit_buffer = None

    def _call(self, callback, *args):
        if not callback: return
        try: callback(*args)
        except Exception as e: print(f"Error in session callback: {e}"); traceback.print_exc()
