"""Session accumulator: turns play/pause activity into reading statistics.

WHY: A reader often pauses for a few seconds and carries on. Recording
every play/pause cycle as its own session would bury the history in
tiny fragments, while recording nothing until the process exits would
lose data. Sessions are therefore held open across short pauses and
committed after a quiet period or when the front end is going away.

HOW: The accumulator listens to the scheduler's state changes. Entering
``playing`` opens a segment (wall-clock start, start index); leaving it
closes the segment and adds words and time to running totals. A live
counter ticks once per second while playing. When playback stops, an
idle timer is armed; if it fires before playback resumes, the pending
totals are committed as one SessionRecord and persisted.

RULES:
- words for a segment = max(0, end index - start index)
- time for a segment = wall-clock end - wall-clock start, in ms
- A commit with zero words and zero time writes nothing
- Commit closes an open segment first, and reopens one if still playing
- Changing the book name never commits by itself
- Store failures are logged and dropped; accounting continues in memory
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from rsvp_reader.core.primitives import TimerScheduler
from rsvp_reader.core.scheduler import PlaybackScheduler
from rsvp_reader.core.statistics import ReadingStatistics, SessionRecord
from rsvp_reader.core.units import PlaybackState
from rsvp_reader.storage.base import StateStore, StorageError

logger = logging.getLogger(__name__)

IDLE_COMMIT_MS = 60000
LIVE_TICK_MS = 1000


@dataclass
class _PlaySegment:
    started_at_ms: int
    start_index: int


class SessionAccumulator:
    """Accumulates reading activity and commits it as statistics sessions.

    Args:
        scheduler: The playback scheduler to observe.
        timers: Timer primitive for the live counter and the idle commit.
        store: Where committed statistics are written.
        wall_clock: Returns epoch seconds; defaults to ``time.time``.
        idle_commit_ms: Quiet period after which a stopped session commits.
        statistics: Initial statistics; read from ``store`` when omitted.
    """

    def __init__(
        self,
        scheduler: PlaybackScheduler,
        timers: TimerScheduler,
        store: StateStore,
        wall_clock: Callable[[], float] = time.time,
        idle_commit_ms: int = IDLE_COMMIT_MS,
        statistics: Optional[ReadingStatistics] = None,
    ) -> None:
        self._scheduler = scheduler
        self._timers = timers
        self._store = store
        self._wall_clock = wall_clock
        self._idle_commit_ms = idle_commit_ms
        self._statistics = statistics if statistics is not None else store.load_statistics()

        self._book_name: Optional[str] = None
        self._segment: Optional[_PlaySegment] = None
        self._accumulated_words = 0
        self._accumulated_ms = 0
        self._live_elapsed_ms = 0
        self._tick_handle: Any = None
        self._idle_handle: Any = None

        scheduler.add_listener(self._on_state_change)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def accumulated_words(self) -> int:
        return self._accumulated_words

    @property
    def accumulated_ms(self) -> int:
        return self._accumulated_ms

    @property
    def live_elapsed_ms(self) -> int:
        """Time shown by the live session clock."""
        return self._live_elapsed_ms

    @property
    def has_open_segment(self) -> bool:
        return self._segment is not None

    @property
    def idle_commit_pending(self) -> bool:
        return self._idle_handle is not None

    @property
    def book_name(self) -> Optional[str]:
        return self._book_name

    @property
    def statistics(self) -> ReadingStatistics:
        return self._statistics

    def set_book_name(self, name: Optional[str]) -> None:
        self._book_name = name or None

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def flush(self) -> Optional[SessionRecord]:
        """Commit now; called when the host is about to become inactive."""
        self._cancel_idle()
        record = self.commit()
        if self._scheduler.state != PlaybackState.PLAYING:
            self._live_elapsed_ms = 0
        return record

    def commit(self) -> Optional[SessionRecord]:
        """Write the pending totals as one session.

        Returns:
            The new SessionRecord, or None when there was nothing to record.
        """
        still_playing = self._segment is not None
        if still_playing:
            self._close_segment()

        record = None
        if self._accumulated_words or self._accumulated_ms:
            record = self._statistics.record_session(
                self._book_name,
                self._accumulated_words,
                self._accumulated_ms,
                self._now_ms(),
            )
            logger.info(
                "Committed session for %r: %d words in %d ms",
                record.book_name, record.words_read, record.reading_time_ms,
            )
            self._accumulated_words = 0
            self._accumulated_ms = 0
            self._persist()

        if still_playing and self._scheduler.state == PlaybackState.PLAYING:
            self._open_segment()
            self._live_elapsed_ms = 0
        return record

    def dispose(self) -> None:
        """Cancel the live counter and any pending idle commit."""
        self._stop_ticking()
        self._cancel_idle()

    # ------------------------------------------------------------------
    # Scheduler observation
    # ------------------------------------------------------------------

    def _on_state_change(self, old: PlaybackState, new: PlaybackState) -> None:
        if new == PlaybackState.PLAYING:
            self._cancel_idle()
            self._open_segment()
            self._live_elapsed_ms = self._accumulated_ms
            self._start_ticking()
        elif old == PlaybackState.PLAYING:
            self._close_segment()
            self._stop_ticking()
            self._live_elapsed_ms = self._accumulated_ms
            if self._live_elapsed_ms > 0:
                self._arm_idle()

    def _open_segment(self) -> None:
        self._segment = _PlaySegment(
            started_at_ms=self._now_ms(),
            start_index=self._scheduler.current_index,
        )

    def _close_segment(self) -> None:
        segment = self._segment
        if segment is None:
            return
        self._segment = None
        words = max(0, self._scheduler.current_index - segment.start_index)
        elapsed = max(0, self._now_ms() - segment.started_at_ms)
        self._accumulated_words += words
        self._accumulated_ms += elapsed
        logger.debug("Closed play segment: %d words, %d ms", words, elapsed)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _start_ticking(self) -> None:
        self._stop_ticking()
        self._tick_handle = self._timers.call_later(LIVE_TICK_MS, self._tick)

    def _stop_ticking(self) -> None:
        if self._tick_handle is not None:
            self._timers.cancel_timer(self._tick_handle)
            self._tick_handle = None

    def _tick(self) -> None:
        self._tick_handle = None
        if self._scheduler.state != PlaybackState.PLAYING:
            return
        self._live_elapsed_ms += LIVE_TICK_MS
        self._tick_handle = self._timers.call_later(LIVE_TICK_MS, self._tick)

    def _arm_idle(self) -> None:
        self._cancel_idle()
        self._idle_handle = self._timers.call_later(self._idle_commit_ms, self._on_idle)

    def _cancel_idle(self) -> None:
        if self._idle_handle is not None:
            self._timers.cancel_timer(self._idle_handle)
            self._idle_handle = None

    def _on_idle(self) -> None:
        self._idle_handle = None
        self.commit()
        self._live_elapsed_ms = 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _now_ms(self) -> int:
        return int(round(self._wall_clock() * 1000))

    def _persist(self) -> None:
        try:
            self._store.save_statistics(self._statistics)
        except StorageError as exc:
            logger.warning("Statistics not saved: %s", exc)
