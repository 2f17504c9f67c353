# -*- coding: utf-8 -*-

import re
import os
import sys
import math
from collections import namedtuple

try:
    from PIL import Image, ImageDraw, ImageFont
    HAS_PILLOW = True
except ImportError:
    HAS_PILLOW = False
    if 'PIL' not in sys.modules:
        print("Warning: 'Pillow' library not found. Default icon creation might fail.")
        print("Install with: pip install Pillow")

DEFAULT_ICON_NAME = "teleprompter_icon.png"

# --- Playback constants ---
BASE_RATE = 200        # Tokens per minute at speed 1.0
MIN_SPEED = 0.1
MAX_SPEED = 10.0
SPEED_STEP = 0.1

# --- Magnetic play button ---
ATTRACTION_RADIUS = 150.0   # px
ATTRACTION_PULL = 0.3
ATTRACTION_GROWTH = 0.1

Attraction = namedtuple("Attraction", ["dx", "dy", "scale"])
NO_ATTRACTION = Attraction(0.0, 0.0, 1.0)

_WHITESPACE_RUN = re.compile(r"\S+")

# --- Hilfsfunktionen ---

def tokenize(script):
    """
    Splits a script into whitespace-delimited tokens.

    Args:
        script (str): The raw script text.

    Returns:
        list: Tokens in source order. Empty for blank or non-string input.
    """
    if not isinstance(script, str): return []
    return _WHITESPACE_RUN.findall(script)

def clamp_speed(speed):
    """Clamps a speed multiplier to the supported range."""
    try: speed = float(speed)
    except (TypeError, ValueError): return MIN_SPEED
    if math.isnan(speed): return MIN_SPEED
    return max(MIN_SPEED, min(MAX_SPEED, speed))

def snap_speed(speed):
    """Clamps and rounds a speed to the 0.1 grid used by the speed control."""
    steps = round(clamp_speed(speed) / SPEED_STEP)
    return round(max(MIN_SPEED, min(MAX_SPEED, steps * SPEED_STEP)), 1)

def calculate_interval_ms(speed, base_rate=BASE_RATE):
    """Milliseconds between two ticks at the given speed multiplier."""
    if speed <= 0 or base_rate <= 0: return float('inf')
    return 60000.0 / (speed * base_rate)

def compute_offset(container_height, token_top, token_height):
    """Scroll offset that puts the middle of a token in the middle of the container. Not clamped."""
    return token_top - container_height / 2 + token_height / 2

def magnetic_transform(pointer, center, radius=ATTRACTION_RADIUS):
    """
    Calculates the pointer-proximity displacement for a control.

    Args:
        pointer (tuple): (x, y) of the pointer.
        center (tuple): (x, y) of the control's center, same coordinate space.
        radius (float): Distance below which the control is attracted.

    Returns:
        Attraction: (dx, dy, scale). Identity when the pointer is out of range.
    """
    delta_x = pointer[0] - center[0]; delta_y = pointer[1] - center[1]
    distance = math.hypot(delta_x, delta_y)
    if distance >= radius: return NO_ATTRACTION
    strength = (radius - distance) / radius
    return Attraction(delta_x * strength * ATTRACTION_PULL, delta_y * strength * ATTRACTION_PULL, 1 + strength * ATTRACTION_GROWTH)

def blend_color(foreground, background, alpha):
    """Mixes two '#RRGGBB' colors; alpha=1.0 gives the foreground."""
    try:
        fg = [int(foreground[i:i + 2], 16) for i in (1, 3, 5)]
        bg = [int(background[i:i + 2], 16) for i in (1, 3, 5)]
    except (TypeError, ValueError, IndexError): return foreground
    alpha = max(0.0, min(1.0, alpha))
    mixed = [round(f * alpha + b * (1 - alpha)) for f, b in zip(fg, bg)]
    return "#{:02x}{:02x}{:02x}".format(*mixed)

def resource_path(relative_path):
    """ Absolute path to a bundled resource, works for dev and for PyInstaller. """
    try:
        # PyInstaller erstellt einen temporären Ordner und speichert den Pfad in _MEIPASS
        base_path = sys._MEIPASS
    except AttributeError:
        base_path = os.path.abspath(".")
    return os.path.join(base_path, relative_path)


def create_default_icon(filename=DEFAULT_ICON_NAME):
    """Creates or loads the default tray icon using Pillow."""
    if not HAS_PILLOW:
        print("Pillow library required for icons. Returning None.")
        return None

    if os.path.exists(filename):
        try:
            img = Image.open(filename)
            if img.size == (64, 64): print(f"Loaded existing icon '{filename}'."); return img
            else: print(f"Existing icon '{filename}' has wrong size. Recreating.")
        except Exception as e: print(f"Error opening icon '{filename}': {e}. Recreating.")

    try:
        img = Image.new('RGB', (64, 64), color='#0F172A'); d = ImageDraw.Draw(img)
        fnt = None
        try: fnt = ImageFont.truetype("arial.ttf", 50)
        except IOError: print("Arial font not found, using default PIL font."); fnt = ImageFont.load_default()
        if fnt: d.text((14, 5), "T", font=fnt, fill='#A855F7')
        else: d.rectangle((10, 10, 54, 54), fill='#A855F7')
        img.save(filename); print(f"Default icon '{filename}' created."); return img
    except OSError as e: print(f"Could not create default icon '{filename}': {e}"); return None
