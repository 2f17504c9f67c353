# -*- coding: utf-8 -*-

import json
import os
import sys # Needed for platform check in get_appdata_path

from utils import MIN_SPEED, MAX_SPEED, clamp_speed

# --- AppData Path Function ---
def get_appdata_path(filename="teleprompter_settings.json"):
    """Gets the path for the settings file in AppData (Win) or .config (Linux/Mac)."""
    app_name = "Teleprompter" # Subdirectory name
    if sys.platform == 'win32':
        base_path = os.getenv('APPDATA')
        if not base_path: base_path = os.path.expanduser('~'); dir_path = os.path.join(base_path, f".{app_name}")
        else: dir_path = os.path.join(base_path, app_name)
    else: # macOS, Linux
         base_path = os.path.expanduser('~')
         dir_path = os.path.join(base_path, ".config", app_name)
    return os.path.join(dir_path, filename)

# --- Standardeinstellungen ---
DEFAULT_SETTINGS = {
    "speed": 2.0,                  # Multiplier, 1.0 = 200 tokens/min
    "font_family": "Segoe UI",
    "font_size": 36,
    "text_color": "#FFFFFF",
    "background_color": "#0F172A",
    "highlight_color": "#A855F7",
    "auto_start": False,
    "clamp_scroll": False,         # Keep the centered offset inside the scrollable range
    "idle_hide_ms": 2000,          # Controls hide after this much pointer inactivity
    "speed_step": 0.1,             # Up/Down arrow increment
    "hotkey": "<ctrl>+<alt>+t",
    "hide_main_window": False,
    "window_always_on_top": False,
}
SETTINGS_FILE = get_appdata_path()

INT_KEYS = ['font_size', 'idle_hide_ms']
FLOAT_KEYS = ['speed', 'speed_step']
BOOL_KEYS = ['auto_start', 'clamp_scroll', 'hide_main_window', 'window_always_on_top']

# --- Konfigurationsmanager ---
class ConfigManager:
    """Manages loading and saving application settings."""
    def __init__(self, filename=SETTINGS_FILE, defaults=DEFAULT_SETTINGS):
        self.filename = filename
        self.defaults = defaults
        self.settings = self.load_settings()

    def load_settings(self):
        """Loads settings from the JSON file or returns defaults."""
        settings = self.defaults.copy()
        try:
            if os.path.exists(self.filename):
                print(f"Loading settings from: {self.filename}")
                with open(self.filename, 'r', encoding='utf-8') as f:
                    loaded_settings = json.load(f)
                    settings.update(loaded_settings)
            else: print(f"Settings file not found: {self.filename}. Using defaults.")

            # Ensure correct types after loading/updating
            for key in INT_KEYS:
                if key in settings: settings[key] = int(settings[key])
            for key in FLOAT_KEYS:
                 if key in settings: settings[key] = float(settings[key])
            for key in BOOL_KEYS:
                 if key in settings: settings[key] = bool(settings[key])

        except (json.JSONDecodeError, IOError, TypeError, ValueError, OverflowError, AttributeError) as e:
            print(f"Error loading settings from {self.filename}: {e}. Using default settings.")
            settings = self.defaults.copy()

        self._validate(settings)
        return settings

    def _validate(self, settings):
        """Clamps values into their valid ranges, in place."""
        settings["speed"] = clamp_speed(settings.get("speed", self.defaults["speed"]))
        if settings.get("font_size", 36) < 8: settings["font_size"] = 8
        if settings.get("idle_hide_ms", 2000) < 0: settings["idle_hide_ms"] = 0
        step = settings.get("speed_step", 0.1)
        if not (MIN_SPEED <= step <= MAX_SPEED): settings["speed_step"] = self.defaults["speed_step"]

    def save_settings(self):
        """Saves the current settings to the JSON file."""
        try:
            self._validate(self.settings)

            dir_path = os.path.dirname(self.filename)
            if dir_path and not os.path.exists(dir_path):
                 try: os.makedirs(dir_path, exist_ok=True); print(f"Created directory for settings: {dir_path}")
                 except OSError as e: print(f"Warning: Could not create settings directory {dir_path} on save: {e}")

            print(f"Saving settings to: {self.filename}")
            with open(self.filename, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=4)
            return True
        except (IOError, TypeError) as e: print(f"Error saving settings to {self.filename}: {e}"); return False

    def get(self, key):
        """Gets a specific setting value."""
        # Return default value from defaults dict if key is missing in settings
        return self.settings.get(key, self.defaults.get(key))

    def set(self, key, value):
        """Sets a specific setting value."""
        self.settings[key] = value
