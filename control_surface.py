# -*- coding: utf-8 -*-

import traceback

from utils import NO_ATTRACTION, magnetic_transform, snap_speed

IDLE_HIDE_MS = 2000
HIDE_MARGIN = 200   # px from the bottom edge within which the controls stay up


class ControlSurface:
    """
    State behind the transport bar: visibility, the magnetic play button and
    forwarding of button presses to the session.

    Owns no playback state. It reads session.is_playing and calls
    toggle_play / reset / set_speed / exit. on_change(surface) is called
    whenever visibility or the attraction changes so the view can redraw.
    """
    def __init__(self, session, scheduler, on_change=None, idle_ms=IDLE_HIDE_MS):
        self.session = session
        self.scheduler = scheduler
        self.on_change = on_change
        self.idle_ms = idle_ms
        self.visible = True
        self.attraction = NO_ATTRACTION
        self.idle_job = None
        self.last_pointer = None
        self.viewport_height = None

    # --- Transport ---
    def press_play(self): self.session.toggle_play()
    def press_restart(self): self.session.reset()
    def press_exit(self): self.session.exit()

    def change_speed(self, value):
        """Speed control input: snapped to 0.1 steps within [0.1, 10.0]."""
        speed = snap_speed(value)
        self.session.set_speed(speed)
        return speed

    def speed_label(self):
        return f"{self.session.speed:.1f}x"

    # --- Pointer tracking ---
    def on_pointer_move(self, x, y, viewport_height, play_center=None):
        """
        Handles one pointer-move event. Coordinates are relative to the viewport.

        Shows the surface, re-arms the idle timer and updates the magnetic
        displacement of the play button. Without a center the button is at rest.
        """
        self.last_pointer = (x, y); self.viewport_height = viewport_height
        changed = not self.visible
        self.visible = True

        # Unknown center (bar hidden): drop any displacement so the button reappears at rest
        attraction = magnetic_transform((x, y), play_center) if play_center is not None else NO_ATTRACTION
        if attraction != self.attraction: self.attraction = attraction; changed = True

        self._cancel_idle()
        self.idle_job = self.scheduler.after(self.idle_ms, self._on_idle)
        if changed: self._changed()

    def _on_idle(self):
        self.idle_job = None
        if self.last_pointer is None or self.viewport_height is None: return
        far_from_bottom = self.viewport_height - self.last_pointer[1] > HIDE_MARGIN
        if self.session.is_playing and far_from_bottom and self.visible:
            self.visible = False
            self._changed()

    def show(self):
        """Makes the surface visible without arming the idle timer (e.g. after pause)."""
        if not self.visible: self.visible = True; self._changed()

    def close(self):
        self._cancel_idle()
        self.on_change = None

    def _cancel_idle(self):
        if self.idle_job is not None:
            try: self.scheduler.after_cancel(self.idle_job)
            except Exception as e: print(f"Could not cancel idle job: {e}")
            self.idle_job = None

    def _changed(self):
        if not self.on_change: return
        try: self.on_change(self)
        except Exception as e: print(f"Error redrawing controls: {e}"); traceback.print_exc()
