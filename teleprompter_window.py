# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk, messagebox, font
import traceback # For detailed error logging

from control_surface import ControlSurface
from keyboard_shortcuts import KeyboardShortcutBinder
from scroll_centering import ScrollCentering, TokenGeometry
from session import TeleprompterSession
from utils import MIN_SPEED, MAX_SPEED, blend_color

# --- Control Bar Colors ---
BAR_BG = "#FFF4E8"; BAR_FG = "#785340"; BAR_BUTTON_BG = "#F3E6DA"; BAR_HINT_FG = "#A88B7A"
NOTIFY_BG = "#1E293B"; NOTIFY_FG = "#E2E8F0"

# --- Constants ---
READ_ALPHA = 0.6          # Already spoken tokens
UPCOMING_ALPHA = 0.4      # Tokens still ahead
PAUSED_DIM = 0.8          # Whole text is a little dimmer while paused
LINE_SPACING = 1.4
TEXT_MARGIN = 60          # px, left/right/top padding of the token layout
PLAY_BUTTON_FONT_SIZE = 22
NOTIFY_MS = 2500

class TeleprompterWindow(tk.Toplevel):
    """
    Presentation window: tokens on a canvas, the active one kept centered,
    transport bar at the bottom and an in-place script editor.

    Acts as the view geometry provider for ScrollCentering and as the Tk
    scheduler for the playback clock and the control surface.
    """
    def __init__(self, parent, config_manager, on_exit=None):
        super().__init__(parent)
        self.parent = parent
        self.config = config_manager
        self.on_exit_callback = on_exit
        self.token_items = []       # Canvas item id per token index
        self.content_height = 0
        self.layout_width = 0
        self.layout_height = 0
        self.painted_index = 0
        self.notify_job = None
        self.closing = False
        self.widget_font = None; self.active_font = None; self.play_font = None
        self.text_color = "#FFFFFF"; self.background_color = "#0F172A"; self.highlight_color = "#A855F7"

        self.title("Teleprompter")

        # --- Window Geometry and Appearance ---
        screen_width = self.winfo_screenwidth(); screen_height = self.winfo_screenheight()
        width = int(screen_width * 0.8); height = max(400, int(screen_height * 0.8))
        x = (screen_width - width) // 2; y = max(0, (screen_height - height) // 2)
        self.geometry(f"{width}x{height}+{x}+{y}")
        self.protocol("WM_DELETE_WINDOW", self.close_window)

        # --- Engine ---
        self.session = TeleprompterSession(
            self, config_manager, on_exit=self._on_session_exit,
            on_redirect=self._on_empty_script, on_notify=self.show_notification
        )
        # Window listener first: token re-layout must happen before the scroller reads geometry
        self.session.clock.add_listener(self._on_playback_event)
        self.scroller = ScrollCentering(self, self.apply_scroll_offset, clamp=self.config.get("clamp_scroll"))
        self.scroller.attach(self.session.clock)
        self.controls = ControlSurface(self.session, self, on_change=self._redraw_controls, idle_ms=self.config.get("idle_hide_ms"))
        self.shortcuts = KeyboardShortcutBinder(self.session, step=self.config.get("speed_step"))

        # --- Token Canvas (confine=False lets the centered offset overscroll) ---
        self.main_frame = tk.Frame(self); self.main_frame.pack(expand=True, fill="both")
        self.canvas = tk.Canvas(self.main_frame, bd=0, highlightthickness=0, confine=False)
        self.canvas.pack(expand=True, fill="both")
        self.canvas.bind("<Configure>", self._on_canvas_configure)

        # --- Editor (hidden until edit mode) ---
        self.editor_frame = tk.Frame(self.main_frame)
        self.editor = tk.Text(self.editor_frame, wrap="word", undo=True, relief="flat", padx=20, pady=20)
        self.editor.pack(side="top", expand=True, fill="both", padx=TEXT_MARGIN, pady=(80, 10))
        editor_buttons = ttk.Frame(self.editor_frame); editor_buttons.pack(side="bottom", fill="x", padx=TEXT_MARGIN, pady=(0, 20))
        ttk.Button(editor_buttons, text="Abbrechen", command=self.cancel_edit).pack(side="right", padx=(5, 0))
        ttk.Button(editor_buttons, text="Übernehmen", command=self.commit_edit).pack(side="right")

        # --- Edit toggle (top right) and notification label (top center) ---
        self.edit_button = tk.Button(self, text="✎", command=self.toggle_edit, relief="flat", bd=0, width=3, font=("TkDefaultFont", 16))
        self.edit_button.place(relx=1.0, x=-20, y=20, anchor="ne")
        self.notify_label = tk.Label(self, text="", bg=NOTIFY_BG, fg=NOTIFY_FG, padx=16, pady=8)

        # --- Control Bar ---
        self._build_control_bar()

        # --- Bindings ---
        self.shortcuts.bind(self)
        self.bind("<Escape>", self.close_window)
        self.bind("<Motion>", self._on_pointer_move)

        self.update_display_settings()
        self.focus_set()

    def _build_control_bar(self):
        self.control_bar = tk.Frame(self, bg=BAR_BG, padx=36, pady=20, highlightthickness=1, highlightbackground="#E8D8CA")
        button_opts = dict(bg=BAR_BUTTON_BG, fg=BAR_FG, activebackground=BAR_BG, activeforeground=BAR_FG, relief="flat", bd=0)

        # Play button sits in a fixed holder so the magnetic offset never shifts the layout
        self.play_holder = tk.Frame(self.control_bar, bg=BAR_BG, width=96, height=96); self.play_holder.pack(side="left", padx=(0, 16))
        self.play_holder.pack_propagate(False)
        self.play_font = font.Font(root=self, size=PLAY_BUTTON_FONT_SIZE)
        self.play_button = tk.Button(self.play_holder, text="▶", width=3, font=self.play_font, command=self.controls.press_play, **button_opts)
        self.play_button.place(relx=0.5, rely=0.5, anchor="center")
        self.restart_button = tk.Button(self.control_bar, text="⟲", width=3, font=("TkDefaultFont", 20), command=self.controls.press_restart, **button_opts)
        self.restart_button.pack(side="left", padx=(0, 36))

        speed_frame = tk.Frame(self.control_bar, bg=BAR_BG); speed_frame.pack(side="left", padx=(0, 36))
        self.speed_var = tk.DoubleVar(value=self.session.speed)
        self.speed_scale = ttk.Scale(speed_frame, from_=MIN_SPEED, to=MAX_SPEED, orient="horizontal", length=280, variable=self.speed_var, command=self._on_speed_scale)
        self.speed_scale.grid(row=0, column=0, sticky="ew")
        self.speed_label = tk.Label(speed_frame, text=self.controls.speed_label(), width=6, bg=BAR_BG, fg=BAR_FG, font=("TkDefaultFont", 14, "bold"))
        self.speed_label.grid(row=0, column=1, padx=(12, 0))
        tk.Label(speed_frame, text="↑ Schneller     ↓ Langsamer", bg=BAR_BG, fg=BAR_HINT_FG).grid(row=1, column=0, columnspan=2, pady=(8, 0))

        self.exit_button = tk.Button(self.control_bar, text="✕", width=3, font=("TkDefaultFont", 20), command=self.controls.press_exit, **button_opts)
        self.exit_button.pack(side="left")
        self._redraw_controls(self.controls)

    def update_display_settings(self):
        """Applies font, color and behavior settings."""
        self.text_color = self.config.get("text_color"); self.background_color = self.config.get("background_color")
        self.highlight_color = self.config.get("highlight_color")
        font_family = self.config.get("font_family"); font_size = self.config.get("font_size")
        try:
            self.widget_font = font.Font(root=self, family=font_family, size=font_size)
            self.active_font = font.Font(root=self, family=font_family, size=font_size, weight="bold")
        except tk.TclError as e:
            print(f"Error setting font: {e}. Using default.")
            self.widget_font = font.nametofont("TkDefaultFont"); self.active_font = self.widget_font

        self.configure(bg=self.background_color); self.main_frame.configure(bg=self.background_color)
        self.canvas.configure(bg=self.background_color); self.editor_frame.configure(bg=self.background_color)
        self.editor.configure(font=self.widget_font, bg=blend_color(self.text_color, self.background_color, 0.08), fg=self.text_color, insertbackground=self.text_color)
        self.edit_button.configure(bg=self.background_color, fg=self.text_color, activebackground=self.background_color, activeforeground=self.highlight_color)
        self.apply_behavior_settings()
        if self.token_items: self._layout_tokens()

    def apply_behavior_settings(self):
        """Pushes the non-visual settings into the running engine objects."""
        self.scroller.clamp = bool(self.config.get("clamp_scroll"))
        self.controls.idle_ms = self.config.get("idle_hide_ms")
        self.shortcuts.step = self.config.get("speed_step")
        try: self.attributes('-topmost', bool(self.config.get("window_always_on_top")))
        except tk.TclError as e: print(f"Could not set topmost: {e}")

    # --- Presentation lifecycle ---
    def start_presentation(self, text):
        """Loads the script and lays it out. Closes the window when there is nothing to show."""
        self.update_idletasks()
        if not self.session.start(text): return False
        self._update_transport()
        return True

    def close_window(self, event=None):
        """Exit path: rewinds, releases every timer/binding, then destroys the window."""
        if self.closing: return
        self.closing = True
        self.controls.close(); self._cancel_notification()
        try: self.shortcuts.unbind(self)
        except tk.TclError: pass
        self.session.exit()
        self.scroller.detach()
        try: self.grab_release()
        except tk.TclError: pass
        self.destroy()

    def _on_session_exit(self):
        print("Presentation closed.")
        if self.on_exit_callback:
            try: self.on_exit_callback()
            except Exception as e: print(f"Error in exit callback: {e}"); traceback.print_exc()
        # Exit button: session already rewound, tear the window down as well
        if not self.closing: self.close_window()

    def _on_empty_script(self):
        messagebox.showinfo("Leeres Skript", "Kein Text zum Anzeigen gefunden.", parent=self)
        self.close_window()

    # --- Token layout ---
    def _layout_tokens(self):
        """Wraps the tokens into lines on the canvas and records their items."""
        canvas = self.canvas; canvas.delete("token"); self.token_items = []
        try: width = canvas.winfo_width()
        except tk.TclError: return
        if width <= 1: width = self.winfo_width()
        self.layout_width = width
        left = TEXT_MARGIN; right = max(left + 1, width - TEXT_MARGIN)
        line_height = int(self.active_font.metrics('linespace') * LINE_SPACING)
        gap = self.active_font.measure("  ")
        x = left; y = TEXT_MARGIN

        for index, token in enumerate(self.session.tokens):
            token_width = self.active_font.measure(token)
            if x + token_width > right and x > left: x = left; y += line_height
            item = canvas.create_text(x, y, text=token, anchor="nw", font=self.widget_font, tags=("token",))
            canvas.tag_bind(item, "<Button-1>", lambda e, i=index: self.session.jump_to(i))
            self.token_items.append(item)
            x += token_width + gap

        self.content_height = y + line_height + TEXT_MARGIN
        canvas.configure(scrollregion=(0, 0, width, self.content_height))
        self._paint_tokens()

    def _token_color(self, index, active_index):
        dim = 1.0 if self.session.is_playing else PAUSED_DIM
        if index == active_index: return blend_color(self.highlight_color, self.background_color, dim)
        alpha = READ_ALPHA if index < active_index else UPCOMING_ALPHA
        return blend_color(self.text_color, self.background_color, alpha * dim)

    def _paint_tokens(self, start=0, end=None):
        """Recolors tokens in [start, end]. The whole sequence when end is None."""
        if not self.token_items: return
        active_index = self.session.current_index
        last = len(self.token_items) - 1 if end is None else min(end, len(self.token_items) - 1)
        for index in range(max(0, start), last + 1):
            is_active = index == active_index
            self.canvas.itemconfigure(self.token_items[index], fill=self._token_color(index, active_index), font=self.active_font if is_active else self.widget_font)
        self.painted_index = active_index

    def _on_canvas_configure(self, event=None):
        if event is not None:
            height_changed = event.height != self.layout_height; self.layout_height = event.height
            # Height-only resize: no re-wrap needed, just re-center
            if event.width == self.layout_width:
                if height_changed: self.scroller.update()
                return
        if self.session.tokens: self._layout_tokens(); self.scroller.update()

    # --- ViewGeometryProvider ---
    def get_active_token_geometry(self):
        index = self.session.current_index
        if not (0 <= index < len(self.token_items)): return None
        try: bbox = self.canvas.bbox(self.token_items[index])
        except tk.TclError: return None
        if not bbox: return None
        return TokenGeometry(bbox[1], bbox[3] - bbox[1])

    def get_viewport_height(self):
        try: height = self.canvas.winfo_height()
        except tk.TclError: return None
        return height if height > 1 else None

    def get_content_height(self):
        return self.content_height or None

    def apply_scroll_offset(self, offset):
        if self.content_height <= 0: return
        try: self.canvas.yview_moveto(offset / self.content_height)
        except tk.TclError: pass

    # --- Playback events ---
    def _on_playback_event(self, event, state):
        if self.closing: return
        if event == "index":
            low, high = sorted((self.painted_index, state.current_index)); self._paint_tokens(low, high)
        elif event == "tokens": self._layout_tokens()
        elif event in ("play", "end", "reset"):
            self._paint_tokens()
            if not state.is_playing: self.controls.show()
        self._update_transport()

    def _update_transport(self):
        try:
            self.play_button.config(text="❚❚" if self.session.is_playing else "▶")
            self.speed_var.set(self.session.speed); self.speed_label.config(text=self.controls.speed_label())
        except tk.TclError: pass

    def _on_speed_scale(self, value):
        try: speed = self.controls.change_speed(float(value))
        except ValueError: return
        self.speed_label.config(text=f"{speed:.1f}x")

    # --- Control surface ---
    def _on_pointer_move(self, event):
        if self.closing or self.session.is_editing: return
        try:
            x = event.x_root - self.winfo_rootx(); y = event.y_root - self.winfo_rooty()
            play_center = None
            if self.play_holder.winfo_ismapped():
                play_center = (self.play_holder.winfo_rootx() - self.winfo_rootx() + self.play_holder.winfo_width() / 2,
                               self.play_holder.winfo_rooty() - self.winfo_rooty() + self.play_holder.winfo_height() / 2)
            self.controls.on_pointer_move(x, y, self.winfo_height(), play_center)
        except tk.TclError: pass

    def _redraw_controls(self, surface):
        try:
            if surface.visible and not self.session.is_editing: self.control_bar.place(relx=0.5, rely=1.0, y=-32, anchor="s"); self.control_bar.lift()
            else: self.control_bar.place_forget()
            dx, dy, scale = surface.attraction
            self.play_button.place(relx=0.5, rely=0.5, x=int(dx), y=int(dy), anchor="center")
            self.play_font.configure(size=int(round(PLAY_BUTTON_FONT_SIZE * scale)))
        except tk.TclError: pass

    # --- Edit mode ---
    def toggle_edit(self):
        if self.session.is_editing: self.commit_edit()
        else: self.enter_edit_mode()

    def enter_edit_mode(self):
        text = self.session.enter_edit_mode()
        self.shortcuts.unbind(self)
        self.bind("<Escape>", lambda e: self.cancel_edit())
        self.canvas.pack_forget(); self.control_bar.place_forget()
        self.editor.delete("1.0", tk.END); self.editor.insert("1.0", text)
        self.editor_frame.pack(expand=True, fill="both")
        self.edit_button.config(text="✓"); self.edit_button.lift()
        self.editor.focus_set()

    def commit_edit(self):
        if not self.session.is_editing: return
        self.session.commit_edit(self.editor.get("1.0", "end-1c"))
        self._leave_edit_mode()

    def cancel_edit(self):
        if not self.session.is_editing: return
        self.session.cancel_edit()
        self._leave_edit_mode()

    def _leave_edit_mode(self):
        self.editor_frame.pack_forget(); self.canvas.pack(expand=True, fill="both")
        self.edit_button.config(text="✎")
        self.shortcuts.bind(self)
        self.bind("<Escape>", self.close_window)
        self.focus_set(); self.update_idletasks()
        self.scroller.update()
        self._redraw_controls(self.controls)

    # --- Notifications ---
    def show_notification(self, message):
        self._cancel_notification()
        try:
            self.notify_label.config(text=message); self.notify_label.place(relx=0.5, y=24, anchor="n"); self.notify_label.lift()
            self.notify_job = self.after(NOTIFY_MS, self._hide_notification)
        except tk.TclError: pass

    def _hide_notification(self):
        self.notify_job = None
        try: self.notify_label.place_forget()
        except tk.TclError: pass

    def _cancel_notification(self):
        if self.notify_job: self.after_cancel(self.notify_job); self.notify_job = None
