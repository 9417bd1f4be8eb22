"""Tkinter desktop front end for the RSVP reader.

WHY: Reading word by word works best in a calm, fixed window with the
focus letter always in the same place, big transport buttons and the
usual keyboard shortcuts. Tk ships with Python, so the window needs no
extra install.

HOW: TkScheduler adapts ``root.after`` to the engine's frame and timer
primitives, so the playback loop runs on the Tk main loop. ReaderApp
builds the window around a ReaderController: a canvas draws the current
word with its ORP letter centred, labels show progress and the live
session clock, and buttons and key bindings call controller actions.

RULES:
- All engine callbacks run on the Tk main thread
- Space toggles playback, Left/Right jump 10 words, Escape resets
- Closing or minimising the window flushes the session and position
- Focus leaving the window flushes too, without pausing
- Text files are read as UTF-8
"""

from __future__ import annotations

import logging
import tkinter as tk
import tkinter.font as tkfont
from pathlib import Path
from tkinter import filedialog, messagebox, ttk
from typing import Any, Optional

from rsvp_reader.config import DEFAULT_STATE_PATH, LOG_LEVEL
from rsvp_reader.core.primitives import (
    FrameCallback,
    FrameScheduler,
    TimerCallback,
    TimerScheduler,
)
from rsvp_reader.core.units import PlaybackState
from rsvp_reader.formatting import format_clock, format_count, highlight_orp
from rsvp_reader.loop import monotonic_ms
from rsvp_reader.reader import ReaderController
from rsvp_reader.storage import JsonFileStore, StateStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "RSVP Reader"
_WINDOW_MIN_WIDTH = 640
_WINDOW_MIN_HEIGHT = 320
_PAD = 8
_FRAME_INTERVAL_MS = 16
_CLOCK_REFRESH_MS = 1000

_BACKGROUND = "#1f2937"
_FOREGROUND = "#f9fafb"
_ORP_COLOR = "#3b82f6"
_WORD_FONT = ("Courier", 36)

_KEY_ACTIONS = {
    "<space>": "play_pause",
    "<Right>": "jump_forward",
    "<Left>": "jump_backward",
    "<Escape>": "reset",
}


class TkScheduler(FrameScheduler, TimerScheduler):
    """Frame and timer primitives on top of ``root.after``."""

    def __init__(self, root: tk.Misc, frame_interval_ms: int = _FRAME_INTERVAL_MS) -> None:
        self._root = root
        self._frame_interval_ms = frame_interval_ms

    def request_frame(self, callback: FrameCallback) -> Any:
        return self._root.after(self._frame_interval_ms, lambda: callback(monotonic_ms()))

    def cancel_frame(self, handle: Any) -> None:
        self._root.after_cancel(handle)

    def call_later(self, delay_ms: float, callback: TimerCallback) -> Any:
        return self._root.after(int(delay_ms), callback)

    def cancel_timer(self, handle: Any) -> None:
        self._root.after_cancel(handle)


class ReaderApp:
    """Main window: word canvas, transport controls, progress and speed."""

    def __init__(self, root: tk.Tk, store: StateStore) -> None:
        self._root = root
        self._root.title(_WINDOW_TITLE)
        self._root.minsize(_WINDOW_MIN_WIDTH, _WINDOW_MIN_HEIGHT)
        self._root.configure(background=_BACKGROUND)

        scheduler = TkScheduler(root)
        self.controller = ReaderController(store, scheduler, scheduler)
        self._word_font = tkfont.Font(root=root, family=_WORD_FONT[0], size=_WORD_FONT[1])

        self._build_ui()
        self._bind_events()

        self.controller.scheduler.add_index_listener(lambda _index: self._refresh())
        self.controller.scheduler.add_listener(lambda _old, _new: self._refresh())
        self._refresh()
        self._root.after(_CLOCK_REFRESH_MS, self._refresh_clock)

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self._canvas = tk.Canvas(
            self._root, height=120, background=_BACKGROUND, highlightthickness=0,
        )
        self._canvas.pack(fill=tk.X, padx=_PAD, pady=(_PAD * 2, _PAD))
        self._canvas.bind("<Configure>", lambda _event: self._draw_word())

        controls = ttk.Frame(self._root, padding=_PAD)
        controls.pack(fill=tk.X)

        ttk.Button(controls, text="Open…", command=self._open_file).pack(side=tk.LEFT)
        ttk.Button(
            controls, text="« 10",
            command=lambda: self.controller.handle_action("jump_backward"),
        ).pack(side=tk.LEFT, padx=(_PAD, 0))
        self._play_button = ttk.Button(
            controls, text="Play",
            command=lambda: self.controller.handle_action("play_pause"),
        )
        self._play_button.pack(side=tk.LEFT, padx=(_PAD, 0))
        ttk.Button(
            controls, text="10 »",
            command=lambda: self.controller.handle_action("jump_forward"),
        ).pack(side=tk.LEFT, padx=(_PAD, 0))
        ttk.Button(
            controls, text="Reset",
            command=lambda: self.controller.handle_action("reset"),
        ).pack(side=tk.LEFT, padx=(_PAD, 0))

        ttk.Label(controls, text="WPM").pack(side=tk.LEFT, padx=(_PAD * 2, 0))
        self._wpm_var = tk.IntVar(value=int(self.controller.scheduler.config.words_per_minute))
        wpm_box = ttk.Spinbox(
            controls, from_=50, to=1500, increment=25, width=6,
            textvariable=self._wpm_var, command=self._apply_wpm,
        )
        wpm_box.pack(side=tk.LEFT, padx=(_PAD // 2, 0))
        wpm_box.bind("<Return>", lambda _event: self._apply_wpm())

        self._progress_var = tk.StringVar()
        ttk.Label(self._root, textvariable=self._progress_var, padding=_PAD).pack(fill=tk.X)

        self._session_var = tk.StringVar()
        ttk.Label(self._root, textvariable=self._session_var, padding=_PAD).pack(fill=tk.X)

    def _bind_events(self) -> None:
        for sequence, action in _KEY_ACTIONS.items():
            self._root.bind(sequence, lambda _event, name=action: self._on_key(name))
        self._root.bind("<Unmap>", self._on_unmap)
        self._root.bind("<FocusOut>", self._on_focus_out)
        self._root.protocol("WM_DELETE_WINDOW", self._on_close)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_key(self, action: str) -> str:
        # Keys typed into the speed box must not drive playback
        if isinstance(self._root.focus_get(), (tk.Entry, ttk.Entry)):
            return ""
        self.controller.handle_action(action)
        return "break"

    def _on_unmap(self, event: tk.Event) -> None:
        if event.widget is self._root:
            self.controller.scheduler.pause()
            self.controller.flush()

    def _on_focus_out(self, event: tk.Event) -> None:
        if event.widget is self._root:
            self.controller.flush()

    def _on_close(self) -> None:
        self.controller.close()
        self._root.destroy()

    def _open_file(self) -> None:
        filename = filedialog.askopenfilename(
            title="Open text",
            filetypes=[("Text files", "*.txt"), ("All files", "*.*")],
        )
        if not filename:
            return
        path = Path(filename)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            messagebox.showerror(_WINDOW_TITLE, "Cannot read {}:\n{}".format(path, exc))
            return
        self.controller.load_text(text, path.stem)
        self._refresh()

    def _apply_wpm(self) -> None:
        try:
            wpm = self._wpm_var.get()
        except tk.TclError:
            return
        self.controller.set_wpm(wpm)
        self._refresh()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _draw_word(self) -> None:
        self._canvas.delete("all")
        unit = self.controller.scheduler.current_unit
        if unit is None:
            return

        before, pivot, after = highlight_orp(unit)
        centre_x = self._canvas.winfo_width() // 2
        centre_y = self._canvas.winfo_height() // 2
        half_pivot = self._word_font.measure(pivot) // 2

        self._canvas.create_text(
            centre_x - half_pivot, centre_y, text=before, anchor=tk.E,
            font=self._word_font, fill=_FOREGROUND,
        )
        self._canvas.create_text(
            centre_x, centre_y, text=pivot, anchor=tk.CENTER,
            font=self._word_font, fill=_ORP_COLOR,
        )
        self._canvas.create_text(
            centre_x + half_pivot, centre_y, text=after, anchor=tk.W,
            font=self._word_font, fill=_FOREGROUND,
        )

    def _refresh(self) -> None:
        scheduler = self.controller.scheduler
        self._draw_word()
        playing = scheduler.state == PlaybackState.PLAYING
        self._play_button.configure(text="Pause" if playing else "Play")

        if scheduler.total_units == 0:
            self._progress_var.set("Open a text file to start reading.")
            return
        self._progress_var.set("{} / {}   {}   {:.1f}%   {}".format(
            scheduler.current_index + 1,
            scheduler.total_units,
            "{} / {}".format(format_clock(scheduler.elapsed_ms), format_clock(scheduler.total_ms)),
            scheduler.progress_percent,
            self.controller.book_name or "",
        ))

    def _refresh_clock(self) -> None:
        session = self.controller.session
        statistics = self.controller.statistics
        self._session_var.set("Session {}   ·   {} words read in total".format(
            format_clock(session.live_elapsed_ms),
            format_count(statistics.total_words_read),
        ))
        self._root.after(_CLOCK_REFRESH_MS, self._refresh_clock)


def main(state_path: Optional[Path] = None) -> None:
    """Open the reader window and block until it is closed.

    Must be called from the main thread.
    """
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.WARNING))
    root = tk.Tk()
    ReaderApp(root, JsonFileStore(state_path or DEFAULT_STATE_PATH))
    root.mainloop()


if __name__ == "__main__":
    main()
