"""Reader controller: the scheduler, the session accumulator and the store, wired.

WHY: Every front end (terminal, Tk window, anything else) needs the same
startup and shutdown behaviour: restore the last position and settings,
keep them saved while reading, and commit statistics before going away.
Doing that once here keeps the front ends down to rendering and input.

HOW: At construction the controller reads the saved state, builds a
PlaybackScheduler with the saved timing configuration, restores the last
text and index, and attaches a SessionAccumulator. Index, state and
configuration changes schedule a position snapshot through the timer
primitive; snapshots already pending are not rescheduled, so writes are
spaced at most ``save_debounce_ms`` apart even while playing.
``flush()`` is the lifecycle hook for "the host is going inactive".

RULES:
- Startup never fails because of the store; bad data means defaults
- Snapshot writes are best-effort; StorageError is logged and dropped
- flush() commits the session and writes the snapshot synchronously
- Named actions mirror the reader's keyboard shortcuts
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from rsvp_reader.config import DEFAULT_START_WPM, IDLE_COMMIT_MS, SAVE_DEBOUNCE_MS
from rsvp_reader.core.primitives import FrameScheduler, TimerScheduler
from rsvp_reader.core.scheduler import PlaybackScheduler
from rsvp_reader.core.session import SessionAccumulator
from rsvp_reader.core.statistics import ReadingStatistics
from rsvp_reader.core.units import PlaybackState, TimingConfiguration
from rsvp_reader.storage.base import PersistedState, StateStore, StorageError

logger = logging.getLogger(__name__)


class ReaderController:
    """One reading surface: a document, its playback and its statistics.

    Args:
        store: Persistence for position, settings and statistics.
        frames: Display-refresh source driving playback.
        timers: Timer source for debounced saves and session commits.
        wall_clock: Returns epoch seconds, used for session timing.
        idle_commit_ms: Pause length after which a session is committed.
        save_debounce_ms: Delay before a position snapshot is written.
    """

    def __init__(
        self,
        store: StateStore,
        frames: FrameScheduler,
        timers: TimerScheduler,
        wall_clock: Callable[[], float] = time.time,
        idle_commit_ms: int = IDLE_COMMIT_MS,
        save_debounce_ms: int = SAVE_DEBOUNCE_MS,
    ) -> None:
        self._store = store
        self._timers = timers
        self._save_debounce_ms = save_debounce_ms
        self._save_handle: Any = None

        saved = store.load_state()
        default_config = TimingConfiguration().with_wpm(DEFAULT_START_WPM)
        config = TimingConfiguration.from_dict(saved.timing if saved else None, base=default_config)

        self.scheduler = PlaybackScheduler(frames, config)
        self.session = SessionAccumulator(
            self.scheduler,
            timers,
            store,
            wall_clock=wall_clock,
            idle_commit_ms=idle_commit_ms,
        )

        if saved is not None and saved.text:
            self.scheduler.restore_position(saved.text, saved.current_index)
            self.session.set_book_name(saved.book_name)
            logger.info(
                "Restored %r at unit %d of %d",
                saved.book_name, self.scheduler.current_index, self.scheduler.total_units,
            )

        self.scheduler.add_index_listener(lambda _index: self._schedule_save())
        self.scheduler.add_listener(self._on_state_change)

        self._actions: Dict[str, Callable[[], None]] = {
            "play_pause": self.scheduler.toggle,
            "jump_forward": self.scheduler.jump_forward,
            "jump_backward": self.scheduler.jump_backward,
            "reset": self.scheduler.reset,
        }

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def statistics(self) -> ReadingStatistics:
        return self.session.statistics

    @property
    def book_name(self) -> Optional[str]:
        return self.session.book_name

    def snapshot(self) -> PersistedState:
        return PersistedState(
            text=self.scheduler.raw_text,
            current_index=self.scheduler.current_index,
            book_name=self.session.book_name,
            timing=self.scheduler.config.to_dict(),
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def load_text(self, text: str, book_name: Optional[str] = None) -> None:
        """Load a new document and start from its first unit."""
        self.scheduler.set_text(text)
        self.session.set_book_name(book_name)
        self._schedule_save()

    def update_configuration(self, partial: Mapping[str, Any]) -> TimingConfiguration:
        config = self.scheduler.update_configuration(partial)
        self._schedule_save()
        return config

    def set_wpm(self, wpm: float) -> TimingConfiguration:
        config = self.scheduler.set_wpm(wpm)
        self._schedule_save()
        return config

    def handle_action(self, name: str) -> bool:
        """Run a named keyboard action.

        Returns:
            False when the action is unknown or there is nothing loaded.
        """
        action = self._actions.get(name)
        if action is None or self.scheduler.total_units == 0:
            return False
        action()
        return True

    def flush(self) -> None:
        """Commit the session and save the position now."""
        self.session.flush()
        self._cancel_save()
        self._save_state()

    def close(self) -> None:
        """Flush, then cancel every outstanding callback."""
        self.flush()
        self.scheduler.dispose()
        self.session.dispose()

    # ------------------------------------------------------------------
    # Snapshot saving
    # ------------------------------------------------------------------

    def _on_state_change(self, old: PlaybackState, new: PlaybackState) -> None:
        self._schedule_save()

    def _schedule_save(self) -> None:
        if self._save_handle is not None:
            return
        self._save_handle = self._timers.call_later(self._save_debounce_ms, self._on_save_timer)

    def _cancel_save(self) -> None:
        if self._save_handle is not None:
            self._timers.cancel_timer(self._save_handle)
            self._save_handle = None

    def _on_save_timer(self) -> None:
        self._save_handle = None
        self._save_state()

    def _save_state(self) -> None:
        try:
            self._store.save_state(self.snapshot())
        except StorageError as exc:
            logger.warning("Reading position not saved: %s", exc)
