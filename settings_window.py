# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk, font, colorchooser, messagebox
import traceback

try:
    from pynput import keyboard
    HAS_PYNPUT_SETTINGS = True
except ImportError:
    HAS_PYNPUT_SETTINGS = False

from utils import MIN_SPEED, MAX_SPEED, snap_speed

MODIFIERS = ['cmd', 'ctrl', 'alt', 'shift']
SPECIAL_KEYS_MAP = {
    'space': 'space', 'return': 'enter', 'kp_enter': 'enter', 'escape': 'esc', 'tab': 'tab',
    'backspace': 'backspace', 'delete': 'delete', 'home': 'home', 'end': 'end', 'prior': 'page_up',
    'next': 'page_down', 'up': 'up', 'down': 'down', 'left': 'left', 'right': 'right', 'insert': 'insert',
    'pause': 'pause', 'kp_add': '+', 'kp_subtract': '-', 'kp_multiply': '*', 'kp_divide': '/',
}
COLOR_KEYS = ["text_color", "background_color", "highlight_color"]


class SettingsWindow(tk.Toplevel):
    """
    Settings for the presentation window: speed, font and colors, playback
    behaviour and the global clipboard hotkey.
    """
    def __init__(self, parent, config_manager, on_close_callback):
        super().__init__(parent)
        self.config = config_manager
        self.on_close_callback = on_close_callback
        self.title("Einstellungen")
        self.geometry("560x720"); self.minsize(520, 640)
        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self.settings_vars = {}
        self.color_previews = {}
        self.recording_active = False; self.pressed_keys = set()

        style = ttk.Style(self)
        try: style.theme_use('clam')
        except tk.TclError: print("Hinweis: 'clam' ttk-Theme nicht verfügbar."); style.theme_use('default')
        style.configure("TLabelframe", padding=10)

        self.main_frame = ttk.Frame(self, padding="15"); self.main_frame.pack(expand=True, fill="both")
        self._populate_settings_frame()

        button_frame = ttk.Frame(self, padding="10 10 10 10"); button_frame.pack(fill="x", side="bottom")
        ttk.Button(button_frame, text="Abbrechen", command=self.on_close).pack(side="right", padx=(0, 5))
        ttk.Button(button_frame, text="Speichern & Schließen", command=self.save_and_close).pack(side="right", padx=(0, 5))

        self._update_speed_label(); self._update_font_preview()
        self.wait_visibility(); self.focus_set(); self.grab_set()

    def _populate_settings_frame(self):
        # --- Playback Section ---
        playback_frame = ttk.LabelFrame(self.main_frame, text="Wiedergabe"); playback_frame.pack(fill="x", pady=(0, 15))
        self.settings_vars["speed"] = tk.DoubleVar(value=self.config.get("speed")); self.settings_vars["speed"].trace_add("write", self._update_speed_label)
        ttk.Label(playback_frame, text="Geschwindigkeit:").grid(row=0, column=0, sticky="w", pady=5)
        ttk.Scale(playback_frame, from_=MIN_SPEED, to=MAX_SPEED, orient="horizontal", variable=self.settings_vars["speed"]).grid(row=0, column=1, sticky="ew", padx=5, pady=5)
        self.speed_label = ttk.Label(playback_frame, text="", width=6, anchor="e"); self.speed_label.grid(row=0, column=2, sticky="e", pady=5)
        self.settings_vars["speed_step"] = tk.DoubleVar(value=self.config.get("speed_step"))
        ttk.Label(playback_frame, text="Pfeiltasten-Schritt:").grid(row=1, column=0, sticky="w", pady=5)
        ttk.Spinbox(playback_frame, from_=0.1, to=2.0, increment=0.1, textvariable=self.settings_vars["speed_step"], width=5).grid(row=1, column=1, sticky="w", padx=5, pady=5)
        self.settings_vars["idle_hide_ms"] = tk.IntVar(value=self.config.get("idle_hide_ms"))
        ttk.Label(playback_frame, text="Steuerung ausblenden nach:").grid(row=2, column=0, sticky="w", pady=5)
        ttk.Spinbox(playback_frame, from_=500, to=10000, increment=500, textvariable=self.settings_vars["idle_hide_ms"], width=6).grid(row=2, column=1, sticky="w", padx=5, pady=5)
        ttk.Label(playback_frame, text="ms").grid(row=2, column=2, sticky="w", pady=5)
        self.settings_vars["auto_start"] = tk.BooleanVar(value=self.config.get("auto_start"))
        ttk.Checkbutton(playback_frame, text="Wiedergabe automatisch starten", variable=self.settings_vars["auto_start"]).grid(row=3, column=0, columnspan=3, sticky="w", pady=2)
        self.settings_vars["clamp_scroll"] = tk.BooleanVar(value=self.config.get("clamp_scroll"))
        ttk.Checkbutton(playback_frame, text="Nicht über Textanfang/-ende hinaus scrollen", variable=self.settings_vars["clamp_scroll"]).grid(row=4, column=0, columnspan=3, sticky="w", pady=2)
        playback_frame.columnconfigure(1, weight=1)

        # --- Font & Colors Section ---
        font_frame = ttk.LabelFrame(self.main_frame, text="Schrift & Farben"); font_frame.pack(fill="x", pady=(0, 15))
        self.settings_vars["font_family"] = tk.StringVar(value=self.config.get("font_family")); self.settings_vars["font_size"] = tk.IntVar(value=self.config.get("font_size"))
        ttk.Label(font_frame, text="Schriftart:").grid(row=0, column=0, sticky="w", pady=5)
        font_combo = ttk.Combobox(font_frame, textvariable=self.settings_vars["font_family"], values=sorted(font.families()), width=25, state="readonly"); font_combo.grid(row=0, column=1, columnspan=2, sticky="ew", padx=5, pady=5); font_combo.bind("<<ComboboxSelected>>", self._update_font_preview)
        ttk.Label(font_frame, text="Größe:").grid(row=1, column=0, sticky="w", pady=5)
        ttk.Spinbox(font_frame, from_=8, to=120, textvariable=self.settings_vars["font_size"], width=5, command=self._update_font_preview).grid(row=1, column=1, sticky="w", padx=5, pady=5)
        labels = {"text_color": "Textfarbe:", "background_color": "Hintergrund:", "highlight_color": "Aktives Wort:"}
        for row, key in enumerate(COLOR_KEYS, start=2):
            self.settings_vars[key] = tk.StringVar(value=self.config.get(key))
            ttk.Label(font_frame, text=labels[key]).grid(row=row, column=0, sticky="w", pady=5)
            ttk.Button(font_frame, text="Wählen...", command=lambda k=key: self._choose_color(k)).grid(row=row, column=1, sticky="w", padx=5, pady=5)
            self.color_previews[key] = tk.Label(font_frame, text=" ", relief="sunken", borderwidth=1, bg=self.config.get(key), width=3); self.color_previews[key].grid(row=row, column=2, sticky="w", pady=5, padx=5)
        ttk.Label(font_frame, text="Vorschau:").grid(row=5, column=0, sticky="nw", pady=(10, 5))
        self.font_preview_label = tk.Label(font_frame, text="", relief="groove", borderwidth=1, padx=10, pady=5); self.font_preview_label.grid(row=5, column=1, columnspan=2, sticky="ew", pady=(10, 5), padx=5)
        font_frame.columnconfigure(1, weight=1)

        # --- Window Options Section ---
        window_frame = ttk.LabelFrame(self.main_frame, text="Fenster Optionen"); window_frame.pack(fill="x", pady=(0, 15))
        self.settings_vars["window_always_on_top"] = tk.BooleanVar(value=self.config.get("window_always_on_top"))
        ttk.Checkbutton(window_frame, text="Teleprompter immer im Vordergrund", variable=self.settings_vars["window_always_on_top"]).pack(anchor="w", pady=2)
        self.settings_vars["hide_main_window"] = tk.BooleanVar(value=self.config.get("hide_main_window"))
        ttk.Checkbutton(window_frame, text="Hauptfenster verstecken (nur Tray, nach Neustart)", variable=self.settings_vars["hide_main_window"]).pack(anchor="w", pady=2)

        # --- Hotkey Section ---
        hotkey_frame = ttk.LabelFrame(self.main_frame, text="Tastenkürzel (Start aus Zwischenablage)"); hotkey_frame.pack(fill="x", pady=(0, 15))
        self.settings_vars["hotkey"] = tk.StringVar(value=self.config.get("hotkey"))
        ttk.Label(hotkey_frame, text="Aktuell:").grid(row=0, column=0, sticky="w", pady=5)
        self.hotkey_entry = ttk.Entry(hotkey_frame, textvariable=self.settings_vars["hotkey"], state="readonly", width=25); self.hotkey_entry.grid(row=0, column=1, sticky="ew", padx=5, pady=5)
        record_btn_state = "normal" if HAS_PYNPUT_SETTINGS else "disabled"; record_btn_text = "Neu aufnehmen..." if HAS_PYNPUT_SETTINGS else "Neu (pynput fehlt)"
        self.record_button = ttk.Button(hotkey_frame, text=record_btn_text, command=self._record_hotkey, state=record_btn_state); self.record_button.grid(row=0, column=2, sticky="e", padx=(5, 0), pady=5)
        hotkey_frame.columnconfigure(1, weight=1)

    # --- Callback Methods ---
    def _update_speed_label(self, *args):
        try:
            if self.speed_label.winfo_exists(): self.speed_label.config(text=f"{snap_speed(self.settings_vars['speed'].get()):.1f}x")
        except (ValueError, tk.TclError, AttributeError): pass

    def _choose_color(self, setting_key):
        current_color = self.settings_vars[setting_key].get()
        try: color_code = colorchooser.askcolor(title=f"Farbe wählen für '{setting_key}'", initialcolor=current_color, parent=self)
        except tk.TclError as e: messagebox.showerror("Farbwahlfehler", f"Fehler: {e}", parent=self); return
        if color_code and color_code[1]:
            hex_color = color_code[1]; self.settings_vars[setting_key].set(hex_color)
            try: self.color_previews[setting_key].config(bg=hex_color)
            except tk.TclError: pass
            self._update_font_preview()

    def _update_font_preview(self, *args):
        """Updates the font preview label based on current settings."""
        try:
            if not self.font_preview_label.winfo_exists(): return
            try: size = max(1, int(self.settings_vars["font_size"].get()))
            except (ValueError, TypeError, tk.TclError):
                self.font_preview_label.config(text="Ungültige Größe", font=font.nametofont("TkDefaultFont"), fg="red", bg="white"); return
            try: preview_font = font.Font(family=self.settings_vars["font_family"].get(), size=max(8, int(size * 0.6)))
            except tk.TclError:
                self.font_preview_label.config(text="Ungültige Schriftart", font=font.nametofont("TkDefaultFont"), fg="red", bg="white"); return
            self.font_preview_label.config(text="Hallo Welt", font=preview_font, fg=self.settings_vars["text_color"].get(), bg=self.settings_vars["background_color"].get())
        except tk.TclError: pass

    # --- Hotkey Recording Methods ---
    def _record_hotkey(self):
        if not HAS_PYNPUT_SETTINGS: messagebox.showerror("Fehler", "'pynput' fehlt.", parent=self); return
        if self.recording_active: return
        self.recording_active = True; self.pressed_keys = set()
        self._set_hotkey_entry("Drücke Tastenkombination...")
        self.record_button.config(text="Aufnahme läuft...", state="disabled")
        self.focus_set(); self.bind("<KeyPress>", self._on_key_press, add='+'); self.bind("<KeyRelease>", self._on_key_release, add='+')

    def _on_key_press(self, event):
        if not self.recording_active: return 'break'
        key_name = self._get_pynput_key_name(event)
        if key_name: self.pressed_keys.add(key_name); self._set_hotkey_entry(self._format_hotkey() or "...")
        return 'break'

    def _on_key_release(self, event):
        if not self.recording_active: return 'break'
        key_name = self._get_pynput_key_name(event)
        if key_name and key_name not in MODIFIERS:
            if self.pressed_keys.intersection(MODIFIERS): self._stop_recording()
            else: messagebox.showwarning("Ungültige Eingabe", "Kombination muss Modifikatortaste enthalten.", parent=self); self._stop_recording(revert=True)
        self.pressed_keys.discard(key_name)
        return 'break'

    def _get_pynput_key_name(self, event):
        key = event.keysym.lower()
        if key in ["control_l", "control_r"]: return "ctrl"
        if key in ["alt_l", "alt_r", "alt_gr"]: return "alt"
        if key in ["shift_l", "shift_r"]: return "shift"
        if key in ["super_l", "super_r", "win_l", "win_r"]: return "cmd"
        if key.startswith("f") and key[1:].isdigit() and 1 <= int(key[1:]) <= 24: return key
        if key in SPECIAL_KEYS_MAP: return SPECIAL_KEYS_MAP[key]
        if len(key) == 1 and key.isalnum(): return key
        return None

    def _format_hotkey(self):
        mods = [f"<{m}>" for m in MODIFIERS if m in self.pressed_keys]
        others = sorted(k if len(k) == 1 else f"<{k}>" for k in self.pressed_keys if k not in MODIFIERS)
        return "+".join(mods + others)

    def _set_hotkey_entry(self, text):
        try: self.hotkey_entry.config(state="normal"); self.hotkey_entry.delete(0, tk.END); self.hotkey_entry.insert(0, text); self.hotkey_entry.config(state="readonly")
        except tk.TclError: pass

    def _stop_recording(self, revert=False):
        if not self.recording_active: return
        try: self.unbind("<KeyPress>"); self.unbind("<KeyRelease>")
        except tk.TclError: pass
        self.recording_active = False
        final_hotkey_str = self.config.get("hotkey") if revert else self._format_hotkey()
        if not revert:
            try: keyboard.HotKey.parse(final_hotkey_str)
            except ValueError as e:
                print(f"Rejected hotkey '{final_hotkey_str}': {e}")
                messagebox.showwarning("Ungültige Eingabe", "Kombination wird nicht unterstützt.", parent=self); final_hotkey_str = self.config.get("hotkey")
        self.settings_vars["hotkey"].set(final_hotkey_str); self._set_hotkey_entry(final_hotkey_str)
        try: self.record_button.config(text="Neu aufnehmen...", state="normal")
        except tk.TclError: pass
        self.pressed_keys = set()

    # --- Save and Close Methods ---
    def save_and_close(self):
        """Validates all values, stores them in the config and writes the file."""
        values = {}
        for key, var in self.settings_vars.items():
            try: values[key] = var.get()
            except (tk.TclError, ValueError): messagebox.showerror("Ungültiger Wert", f"Konnte Wert für '{key}' nicht lesen.", parent=self); return

        if not (8 <= values["font_size"] <= 120): messagebox.showerror("Ungültiger Wert", "Schriftgröße: 8-120.", parent=self); return
        if not (0.1 <= values["speed_step"] <= 2.0): messagebox.showerror("Ungültiger Wert", "Pfeiltasten-Schritt: 0.1-2.0.", parent=self); return
        if values["idle_hide_ms"] < 500: messagebox.showerror("Ungültiger Wert", "Ausblenden: >= 500 ms.", parent=self); return
        values["speed"] = snap_speed(values["speed"]); values["speed_step"] = round(values["speed_step"], 1)

        for key, value in values.items(): self.config.set(key, value)
        if not self.config.save_settings():
            messagebox.showerror("Fehler beim Speichern", "Einstellungen konnten nicht gespeichert werden.", parent=self); return
        self.on_close()

    def on_close(self):
        """Handles the closing of the settings window."""
        if self.recording_active: self._stop_recording(revert=True)
        try: self.grab_release()
        except tk.TclError: pass
        self.destroy()
        if self.on_close_callback:
            try: self.on_close_callback()
            except Exception as e: print(f"Error in settings window close callback: {e}"); print(traceback.format_exc())
