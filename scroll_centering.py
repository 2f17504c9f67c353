# -*- coding: utf-8 -*-

from collections import namedtuple

from utils import compute_offset

# Top edge and height of a rendered token, in content coordinates (px)
TokenGeometry = namedtuple("TokenGeometry", ["top", "height"])


class ScrollCentering:
    """
    Keeps the active token vertically centered.

    The provider is the rendering layer and answers three questions:
        get_active_token_geometry() -> TokenGeometry or None
        get_viewport_height() -> number or None
        get_content_height() -> number or None   (only asked when clamping)
    apply_offset(offset) scrolls the view. The offset is not clamped unless
    clamp=True, so the first and last lines can be centered too.
    """
    def __init__(self, provider, apply_offset, clamp=False):
        self.provider = provider
        self.apply_offset = apply_offset
        self.clamp = clamp
        self.offset = 0.0
        self.clock = None

    def attach(self, clock):
        self.detach()
        self.clock = clock
        clock.add_listener(self.on_clock_event)

    def detach(self):
        if self.clock is not None:
            self.clock.remove_listener(self.on_clock_event)
            self.clock = None

    def on_clock_event(self, event, state):
        if event in ("index", "tokens"): self.update()
        elif event == "reset": self.scroll_to_origin()

    def update(self):
        """Recomputes and applies the offset for the active token. No-op without geometry."""
        geometry = self.provider.get_active_token_geometry()
        if geometry is None: return None
        viewport_height = self.provider.get_viewport_height()
        if viewport_height is None: return None

        offset = compute_offset(viewport_height, geometry.top, geometry.height)
        if self.clamp: offset = self._clamp(offset, viewport_height)
        self.offset = offset
        self.apply_offset(offset)
        return offset

    def scroll_to_origin(self):
        self.offset = 0.0
        self.apply_offset(0.0)

    def _clamp(self, offset, viewport_height):
        content_height = self.provider.get_content_height()
        if content_height is None: return max(0.0, offset)
        max_offset = max(0.0, content_height - viewport_height)
        return max(0.0, min(offset, max_offset))
