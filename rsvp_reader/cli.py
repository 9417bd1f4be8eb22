"""Command-line interface: read a text file word by word in the terminal.

WHY: The quickest way to use the reader is from a shell: point it at a
text file and read. The same command also reports saved statistics and
previews how long a text will take at a given speed.

HOW: Uses argparse for the file path and timing overrides. A
ReaderController is built on a CooperativeLoop driven by the real
monotonic clock; the loop runs until playback stops. Each index change
redraws one terminal line with the ORP letter at a fixed column. Reading
the same file again resumes where the saved state left off.

RULES:
- Positional argument: the text file (UTF-8)
- --stats prints saved statistics and exits without reading
- --summary prints unit count and reading time and exits
- Ctrl-C pauses, commits the session, saves the position, exits 130
- Status messages go to stderr; the word line goes to stdout
- Unreadable input exits 1 with a message on stderr
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from rsvp_reader.config import DEFAULT_STATE_PATH, LOG_LEVEL
from rsvp_reader.core.scheduler import PlaybackScheduler
from rsvp_reader.core.units import PlaybackState
from rsvp_reader.formatting import format_clock, highlight_orp, summarize_statistics
from rsvp_reader.loop import CooperativeLoop
from rsvp_reader.reader import ReaderController
from rsvp_reader.storage import JsonFileStore, MemoryStore, StateStore

_PIVOT_COLUMN = 20
_HIGHLIGHT = "\x1b[1;31m"
_RESET = "\x1b[0m"
_CLEAR_LINE = "\x1b[K"


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


class TerminalRenderer:
    """Draws the current unit on a single, repeatedly overwritten line."""

    def __init__(self, scheduler: PlaybackScheduler, stream: Optional[TextIO] = None) -> None:
        self._scheduler = scheduler
        self._stream = stream or sys.stdout
        self._color = hasattr(self._stream, "isatty") and self._stream.isatty()

    def render_line(self) -> str:
        unit = self._scheduler.current_unit
        if unit is None:
            return ""
        before, pivot, after = highlight_orp(unit)
        if self._color:
            pivot = "{}{}{}".format(_HIGHLIGHT, pivot, _RESET)
        padding = " " * max(0, _PIVOT_COLUMN - len(before))
        return "{}{}{}{}   [{}/{} {:.1f}% {}/{}]".format(
            padding,
            before,
            pivot,
            after,
            self._scheduler.current_index + 1,
            self._scheduler.total_units,
            self._scheduler.progress_percent,
            format_clock(self._scheduler.elapsed_ms),
            format_clock(self._scheduler.total_ms),
        )

    def draw(self, _index: int = 0) -> None:
        self._stream.write("\r" + self.render_line() + _CLEAR_LINE)
        self._stream.flush()


def _timing_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.wpm is not None:
        overrides["wpm"] = args.wpm
    if args.adaptive is not None:
        overrides["adaptiveTiming"] = args.adaptive
    if args.max_delay is not None:
        overrides["maxWordDelay"] = args.max_delay
    return overrides


def _open_store(args: argparse.Namespace) -> StateStore:
    if args.no_save:
        return MemoryStore()
    return JsonFileStore(args.state or DEFAULT_STATE_PATH)


def _print_statistics(store: StateStore, book_name: str) -> None:
    now_ms = int(time.time() * 1000)
    for line in summarize_statistics(store.load_statistics(), now_ms, book_name):
        print(line)


def run(args: argparse.Namespace) -> int:
    """Run one CLI invocation and return the process exit code."""
    store = _open_store(args)

    if args.stats:
        _print_statistics(store, args.book or "")
        return 0

    if not args.input_file:
        _status("Error: an input file is required unless --stats is given.")
        return 2

    path = Path(args.input_file)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _status("Error: cannot read {}: {}".format(path, exc))
        return 1

    book_name = args.book or path.stem
    loop = CooperativeLoop()
    controller = ReaderController(store, loop, loop)
    scheduler = controller.scheduler

    resume_index = 0
    if not args.restart and scheduler.raw_text == text:
        resume_index = scheduler.current_index

    overrides = _timing_overrides(args)
    if overrides:
        controller.update_configuration(overrides)
    controller.load_text(text, book_name)
    # A text read to the end starts over
    if resume_index >= scheduler.total_units - 1:
        resume_index = 0
    scheduler.seek_to_index(resume_index)

    if scheduler.total_units == 0:
        _status("Nothing to read in {}.".format(path))
        controller.close()
        return 0

    if args.summary:
        print("{} words, {} at {:g} WPM".format(
            scheduler.total_units,
            format_clock(scheduler.total_ms),
            scheduler.config.words_per_minute,
        ))
        return 0

    if resume_index:
        _status("Resuming {} at word {}.".format(book_name, resume_index + 1))

    renderer = TerminalRenderer(scheduler)
    scheduler.add_index_listener(renderer.draw)
    renderer.draw()

    scheduler.play()
    try:
        loop.run_until(lambda: scheduler.state != PlaybackState.PLAYING)
    except KeyboardInterrupt:
        scheduler.pause()
        controller.close()
        print()
        _status("Paused at word {} of {}.".format(
            scheduler.current_index + 1, scheduler.total_units,
        ))
        return 130

    controller.close()
    print()
    _status("Finished {}.".format(book_name))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="rsvp-reader",
        description="Read a text file one word at a time at a controlled pace.",
    )

    parser.add_argument(
        "input_file",
        nargs="?",
        help="UTF-8 text file to read.",
    )

    parser.add_argument(
        "--wpm",
        type=float,
        default=None,
        help="Reading speed in words per minute (default: saved or 250).",
    )

    parser.add_argument(
        "--adaptive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Lengthen long words and words before punctuation (default: saved or on).",
    )

    parser.add_argument(
        "--max-delay",
        type=int,
        default=None,
        help="Cap on a single word's display time in ms; 0 for no cap.",
    )

    parser.add_argument(
        "--book",
        default=None,
        help="Name recorded in statistics (default: the file name).",
    )

    parser.add_argument(
        "--restart",
        action="store_true",
        help="Start from the first word instead of the saved position.",
    )

    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print word count and total reading time, then exit.",
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print saved reading statistics, then exit.",
    )

    parser.add_argument(
        "--state",
        default=None,
        help="Path of the JSON state file (default: {}).".format(DEFAULT_STATE_PATH),
    )

    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Keep position and statistics in memory only.",
    )

    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help="Logging level (default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``rsvp-reader`` and ``python -m rsvp_reader``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
