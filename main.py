# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk, messagebox, filedialog
import threading
import time
import os
import sys
import traceback # For detailed error messages

# --- Dependency Imports ---
try: from pynput import keyboard; HAS_PYNPUT = True
except ImportError: HAS_PYNPUT = False; print("Warning: 'pynput' not found. Global hotkey disabled.")
try: import pyperclip; HAS_PYPERCLIP = True
except ImportError: HAS_PYPERCLIP = False; print("Warning: 'pyperclip' not found.")
try: import pystray; from PIL import Image; HAS_PYSTRAY = True
except ImportError: HAS_PYSTRAY = False; # Pillow check in utils

# --- Imports für DOCX und PDF ---
try: import docx; HAS_DOCX = True
except ImportError: HAS_DOCX = False; print("Warning: 'python-docx' not found."); print("Install with: pip install python-docx")
try: from PyPDF2 import PdfReader; HAS_PYPDF2 = True
except ImportError: HAS_PYPDF2 = False; print("Warning: 'PyPDF2' not found."); print("Install with: pip install PyPDF2")

from config import ConfigManager
from utils import create_default_icon, resource_path, tokenize, DEFAULT_ICON_NAME, HAS_PILLOW
from settings_window import SettingsWindow
from teleprompter_window import TeleprompterWindow


# --- Helper functions for text extraction ---
def extract_text_from_docx(filepath):
    """Extracts text from a .docx file."""
    if not HAS_DOCX: messagebox.showerror("Fehler", "'python-docx' ist nicht installiert."); return None
    try:
        doc = docx.Document(filepath); full_text = [para.text for para in doc.paragraphs]
        return '\n\n'.join(full_text)
    except Exception as e: messagebox.showerror("DOCX Fehler", f"Fehler beim Lesen der DOCX-Datei:\n{e}"); print(traceback.format_exc()); return None

def extract_text_from_pdf(filepath):
    """Extracts text from a .pdf file."""
    if not HAS_PYPDF2: messagebox.showerror("Fehler", "'PyPDF2' ist nicht installiert."); return None
    try:
        full_text = []; reader = PdfReader(filepath)
        if reader.is_encrypted:
             try: reader.decrypt('')
             except Exception as decrypt_err: print(f"PDF Decryption failed: {decrypt_err}"); messagebox.showerror("PDF Fehler", "PDF ist verschlüsselt."); return None
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text: full_text.append(page_text)
        if not full_text: messagebox.showwarning("PDF Inhalt", "Konnte keinen Text aus PDF extrahieren."); return None
        return '\n\n'.join(full_text)
    except Exception as e: messagebox.showerror("PDF Fehler", f"Fehler beim Lesen der PDF-Datei:\n{e}"); print(traceback.format_exc()); return None

def read_text_file(filepath):
    """Reads a plain text file, UTF-8 first, then the platform default."""
    try:
        with open(filepath, 'r', encoding='utf-8') as f: return f.read()
    except UnicodeDecodeError:
        print("UTF-8 failed, trying default encoding...")
        with open(filepath, 'r', encoding=sys.getdefaultencoding(), errors='replace') as f: return f.read()

# --- Main Application Class ---
class TeleprompterApp:
    def __init__(self, root):
        self.root = root
        self.config = ConfigManager()
        self.hide_main_window_flag = HAS_PYSTRAY and self.config.get("hide_main_window")
        self.hotkey_listener = None; self.listener_thread = None
        self.presentation_window = None; self.settings_window_instance = None
        self.tray_icon = None; self.tray_thread = None
        self.is_shutting_down = False # Flag to prevent double quit
        self.status_label = None; self.script_text = None

        if self.hide_main_window_flag:
            print("Hiding main window."); self.root.withdraw()
        else:
            print("Main window visible."); self.root.title("Teleprompter"); self.root.geometry("520x420"); self.root.protocol("WM_DELETE_WINDOW", self.quit_app)
            self._build_main_window()

        if HAS_PYNPUT: self.start_hotkey_listener()
        else: self.update_status_label("Hotkey deaktiviert: pynput fehlt")

        if HAS_PYSTRAY and HAS_PILLOW:
            self.setup_tray_icon()
            if self.tray_icon: self.tray_thread = threading.Thread(target=self.run_tray_icon, daemon=True); self.tray_thread.start()
            else: print("Tray icon setup failed.")
        else: print("Tray icon disabled: pystray or Pillow missing.")

        self.update_status_label()

    def _build_main_window(self):
        menu_bar = tk.Menu(self.root); self.root.config(menu=menu_bar)
        file_menu = tk.Menu(menu_bar, tearoff=0); menu_bar.add_cascade(label="Datei", menu=file_menu)
        file_menu.add_command(label="Datei lesen...", command=self.read_from_file)
        cb_state = "normal" if HAS_PYPERCLIP else "disabled"; file_menu.add_command(label="Aus Zwischenablage lesen", command=self.read_from_clipboard, state=cb_state)
        file_menu.add_separator(); file_menu.add_command(label="Beenden", command=self.quit_app)
        settings_menu = tk.Menu(menu_bar, tearoff=0); menu_bar.add_cascade(label="Optionen", menu=settings_menu)
        settings_menu.add_command(label="Einstellungen...", command=self.open_settings)

        frame = ttk.Frame(self.root, padding=10); frame.pack(expand=True, fill="both")
        ttk.Label(frame, text="Skript:").pack(anchor="w")
        self.script_text = tk.Text(frame, wrap="word", height=12); self.script_text.pack(expand=True, fill="both", pady=(5, 10))
        button_row = ttk.Frame(frame); button_row.pack(fill="x")
        ttk.Button(button_row, text="Starten", command=self.start_from_text_box).pack(side="right")
        self.status_label = ttk.Label(frame, text="Initialisiere...", anchor="w"); self.status_label.pack(side="bottom", fill="x", pady=(10, 0))

    def update_status_label(self, message=None):
        # Updates status label only if it exists and window is valid
        if not self.status_label: return
        try:
            if not self.status_label.winfo_exists(): return
            if message: display_text = message
            else:
                hotkey = self.config.get("hotkey")
                listener_active = self.listener_thread and self.listener_thread.is_alive()
                status = "Aktiv" if listener_active else "Inaktiv"
                if not HAS_PYNPUT: status = "pynput fehlt"
                display_text = f"Hotkey: {hotkey} ({status})"
            self.status_label.config(text=display_text)
        except tk.TclError: pass

    def setup_tray_icon(self):
        """Creates the pystray Icon object and its menu."""
        try:
            icon_path = resource_path(DEFAULT_ICON_NAME)
            icon_image = Image.open(icon_path) if os.path.exists(icon_path) else create_default_icon()
            if not icon_image: print("Error: Tray icon image not found or created."); self.tray_icon = None; return
            tray_menu = pystray.Menu(
                pystray.MenuItem('Aus Zwischenablage starten', self.on_tray_read_clipboard, enabled=HAS_PYPERCLIP),
                pystray.MenuItem('Datei lesen...', self.on_tray_read_file),
                pystray.MenuItem('Einstellungen...', self.on_tray_open_settings),
                pystray.MenuItem(f'Hotkey: {self.config.get("hotkey")}', None, enabled=False),
                pystray.MenuItem('Beenden', self.on_tray_quit),
            )
            self.tray_icon = pystray.Icon("Teleprompter", icon=icon_image, title="Teleprompter", menu=tray_menu)
            print("System tray icon configured.")
        except Exception as e: print(f"Error setting up tray icon: {e}"); traceback.print_exc(); self.tray_icon = None

    def run_tray_icon(self):
        """Starts the pystray event loop (blocking). Should be run in a thread."""
        print("Starting pystray icon loop...")
        try: self.tray_icon.run()
        except Exception as e: print(f"Error running pystray icon: {e}")
        finally: print("Pystray icon loop finished.")

    # --- Tray Menu Action Wrappers (run on the pystray thread, marshal to Tk) ---
    def on_tray_read_clipboard(self, icon=None, item=None): print("Tray action: Read clipboard"); self.root.after(0, self.read_from_clipboard)
    def on_tray_read_file(self, icon=None, item=None): print("Tray action: Read file"); self.root.after(0, self.read_from_file)
    def on_tray_open_settings(self, icon=None, item=None): print("Tray action: Open settings"); self.root.after(0, self.open_settings)

    def on_tray_quit(self, icon=None, item=None):
        print("Tray action: Quit")
        if self.tray_icon: self.tray_icon.stop()
        self.root.after(0, self.quit_app)

    # --- Hotkey Listener Methods ---
    def start_hotkey_listener(self):
        """Starts the global hotkey listener in a separate thread."""
        self.stop_hotkey_listener(); hotkey_str = self.config.get("hotkey")
        if not hotkey_str: self.update_status_label("Hotkey nicht konfiguriert"); return
        print(f"Attempting to register hotkey: {hotkey_str}")

        def on_activate():
            print(f"Hotkey '{hotkey_str}' activated!")
            if HAS_PYPERCLIP: self.root.after(0, self.read_from_clipboard)
            else: self.root.after(0, lambda: messagebox.showwarning("Fehlende Bibliothek", "'pyperclip' wird benötigt."))

        def listener_thread_func():
            try:
                self.hotkey_listener = keyboard.GlobalHotKeys({hotkey_str: on_activate})
                print(f"Hotkey listener starting with: {hotkey_str}"); self.hotkey_listener.run()
            except Exception as e:
                error_msg = f"Fehler beim Registrieren/Ausführen des Hotkeys '{hotkey_str}':\n{e}"; print(f"Error in listener thread: {error_msg}"); traceback.print_exc()
                self.root.after(0, lambda: messagebox.showerror("Hotkey Fehler", error_msg))
            finally: print("Hotkey listener thread finished."); self.hotkey_listener = None

        self.listener_thread = threading.Thread(target=listener_thread_func, daemon=True); self.listener_thread.start()
        time.sleep(0.2); self.update_status_label()

    def stop_hotkey_listener(self):
        """Stops the global hotkey listener thread if it exists."""
        listener = self.hotkey_listener
        if listener:
            print("Stopping hotkey listener...")
            try: listener.stop()
            except Exception as e: print(f"Error stopping hotkey listener: {e}")
            self.hotkey_listener = None
        thread = self.listener_thread
        if thread and thread.is_alive(): thread.join(timeout=0.5)
        if thread and thread.is_alive(): print("Warning: Listener thread did not stop.")
        self.listener_thread = None

    # --- Core Application Logic Methods ---
    def open_settings(self):
        """Opens the settings window, ensuring visibility even with hidden root."""
        if self.settings_window_instance and self.settings_window_instance.winfo_exists(): self.settings_window_instance.focus_set(); self.settings_window_instance.lift(); return
        print("Opening settings window...")
        def settings_closed_callback():
            print("Settings window closed."); self.settings_window_instance = None
            if HAS_PYNPUT: self.start_hotkey_listener()
            if self.presentation_window and self.presentation_window.winfo_exists(): self.presentation_window.update_display_settings()
            self.update_status_label()
        root_was_hidden = False
        try:
            if self.root.state() == 'withdrawn': root_was_hidden = True; self.root.deiconify(); self.root.update_idletasks()
            self.settings_window_instance = SettingsWindow(self.root, self.config, settings_closed_callback)
            self.settings_window_instance.deiconify(); self.settings_window_instance.lift(); self.settings_window_instance.focus_force()
        except tk.TclError as e: print("!!! Error creating/showing SettingsWindow !!!"); traceback.print_exc(); messagebox.showerror("Fenster Fehler", f"Einstellungen konnten nicht angezeigt werden:\n{e}"); self.settings_window_instance = None
        finally:
            if root_was_hidden: self.root.withdraw()

    def _on_presentation_exit(self):
        """The presentation handed control back; show the launcher again."""
        self.presentation_window = None
        if not self.hide_main_window_flag and not self.is_shutting_down:
            try: self.root.deiconify(); self.root.lift()
            except tk.TclError: pass
        self.update_status_label()

    def _initiate_presentation(self, text):
        """Creates the presentation window and starts the script."""
        if not tokenize(text): messagebox.showwarning("Kein Text", "Kein Text für den Teleprompter bereitgestellt.", parent=self.root); return
        if self.presentation_window and self.presentation_window.winfo_exists(): print("Closing existing presentation."); self.presentation_window.close_window(); self.presentation_window = None
        print("Opening presentation window...")
        try:
            if self.root.state() == 'withdrawn': self.root.deiconify(); self.root.update_idletasks()
            self.presentation_window = TeleprompterWindow(self.root, self.config, on_exit=self._on_presentation_exit)
            self.presentation_window.lift()
            if not self.presentation_window.start_presentation(text): self.presentation_window = None
        except tk.TclError as e: print("!!! Error creating/starting TeleprompterWindow !!!"); traceback.print_exc(); messagebox.showerror("Fenster Fehler", f"Teleprompter konnte nicht gestartet werden:\n{e}"); self.presentation_window = None
        finally:
            if self.hide_main_window_flag or self.presentation_window: self.root.withdraw()

    def start_from_text_box(self):
        self._initiate_presentation(self.script_text.get("1.0", "end-1c"))

    def read_from_clipboard(self):
        """Reads text from the system clipboard and starts the presentation."""
        if not HAS_PYPERCLIP: messagebox.showerror("Fehler", "'pyperclip' fehlt."); return
        print("Reading from clipboard...")
        try: text = pyperclip.paste()
        except pyperclip.PyperclipException as e: print(f"Clipboard error: {e}"); messagebox.showerror("Fehler", f"Fehler beim Clipboard-Zugriff:\n{e}"); return
        if text: self._initiate_presentation(text)
        else: messagebox.showinfo("Zwischenablage leer", "Kein Text in Zwischenablage.")

    def read_from_file(self):
        """Opens file dialog, reads text from txt, docx, pdf and starts the presentation."""
        root_visible = self.root.state() != 'withdrawn'
        supported_filetypes = [("Unterstützte Dateien", "*.txt *.docx *.pdf"), ("Textdateien", "*.txt"), ("Word-Dokumente", "*.docx"), ("PDF-Dateien", "*.pdf"), ("Alle Dateien", "*.*")]
        filepath = filedialog.askopenfilename(title="Datei öffnen", filetypes=supported_filetypes, parent=self.root if root_visible else None)
        if not filepath: print("File selection cancelled."); return

        print(f"Reading from file: {filepath}")
        file_ext = os.path.splitext(filepath)[1].lower()
        try:
            if file_ext == ".docx": text = extract_text_from_docx(filepath)
            elif file_ext == ".pdf": text = extract_text_from_pdf(filepath)
            else: text = read_text_file(filepath)
        except OSError as e: error_msg = f"Datei konnte nicht gelesen werden:\n{filepath}\n\nFehler: {e}"; print(error_msg); messagebox.showerror("Fehler Dateizugriff", error_msg); return
        if text is None: return
        if self.script_text is not None:
            self.script_text.delete("1.0", tk.END); self.script_text.insert("1.0", text)
        self._initiate_presentation(text)

    def quit_app(self):
        """Cleans up resources and closes the application."""
        if self.is_shutting_down: return
        self.is_shutting_down = True
        print("Quit requested. Cleaning up...")

        self.stop_hotkey_listener()
        if self.tray_icon: print("Stopping tray icon..."); self.tray_icon.stop()
        if self.tray_thread and self.tray_thread.is_alive(): self.tray_thread.join(timeout=0.5)

        if self.presentation_window and self.presentation_window.winfo_exists():
             try: self.presentation_window.close_window()
             except tk.TclError: pass
        if self.settings_window_instance and self.settings_window_instance.winfo_exists():
             try: self.settings_window_instance.destroy()
             except tk.TclError: pass

        try:
            if self.root.winfo_exists(): self.root.destroy(); print("Tkinter root destroyed.")
        except tk.TclError as e: print(f"TclError destroying root: {e}")
        print("Application cleanup finished. Exiting.")

# --- Application Entry Point ---
def main():
    lock_file_path = os.path.join(os.getenv('TEMP', '/tmp'), 'teleprompter_instance.lock')
    lock_file = None
    try: lock_file = os.open(lock_file_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY); print("Lock file created.")
    except FileExistsError: print("Another instance might be running (lock file exists). Exiting."); root_check = tk.Tk(); root_check.withdraw(); messagebox.showerror("Teleprompter", "Eine andere Instanz läuft bereits."); root_check.destroy(); sys.exit(1)
    except OSError as e: print(f"Error creating lock file: {e}")

    print("Starting Teleprompter Application...")
    root = tk.Tk(); app = None
    try:
        app = TeleprompterApp(root)
        root.mainloop()
    except KeyboardInterrupt:
        print("\nKeyboardInterrupt. Shutting down...")
    finally:
        if app is not None and not app.is_shutting_down: app.quit_app()
        if lock_file is not None:
              try: os.close(lock_file); os.remove(lock_file_path); print("Lock file removed.")
              except OSError as e_lock: print(f"Error removing lock file: {e_lock}")
    print("Application exited.")

if __name__ == "__main__":
    main()
