# -*- coding: utf-8 -*-

from utils import MIN_SPEED, MAX_SPEED, SPEED_STEP


class KeyboardShortcutBinder:
    """
    Up = faster, Down = slower, Space = play/pause.

    The target is a PlaybackClock or anything with the same toggle_play /
    set_speed / speed surface (TeleprompterSession). Nothing is stored here
    apart from that reference and the step size.
    """
    KEY_ACTIONS = {"Up": "faster", "Down": "slower", "space": "toggle"}

    def __init__(self, target, step=SPEED_STEP):
        self.target = target
        self.step = step

    def faster(self, event=None):
        self.target.set_speed(round(min(MAX_SPEED, self.target.speed + self.step), 1))
        return 'break'

    def slower(self, event=None):
        self.target.set_speed(round(max(MIN_SPEED, self.target.speed - self.step), 1))
        return 'break'

    def toggle(self, event=None):
        self.target.toggle_play()
        return 'break'

    def handle_keysym(self, keysym):
        """Dispatches a Tk keysym. Returns True if it was a shortcut."""
        action = self.KEY_ACTIONS.get(keysym)
        if not action: return False
        getattr(self, action)()
        return True

    def bind(self, widget):
        for keysym, action in self.KEY_ACTIONS.items():
            widget.bind(f"<{keysym}>", getattr(self, action))

    def unbind(self, widget):
        for keysym in self.KEY_ACTIONS:
            widget.unbind(f"<{keysym}>")
