"""Playback scheduler: plays a timed unit sequence against a frame clock.

WHY: RSVP reading needs each word on screen for its own duration,
pause/resume, seeking and jumping, and a clean stop at the end of the
text. Timing drift must not build up over thousands of words.

HOW: A four-state machine (idle, playing, paused, finished). While
playing, it requests one frame callback at a time. Each callback
compares the frame timestamp with the moment the current unit was
shown; once the unit's duration has elapsed it advances and re-anchors
the per-unit timer to that frame's timestamp, so lateness in one unit
never carries into the next.

RULES:
- The scheduler owns the unit sequence and the current index
- The sequence is replaced as a whole, never edited unit by unit
- current_index stays within [0, N-1], or 0 when there are no units
- Pausing discards progress inside the current unit; resume restarts it
- Every transition cancels the outstanding frame callback first
- A callback from a superseded request never touches newer state
- Listeners are told about every state change and every index change
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from rsvp_reader.core.primitives import FrameScheduler
from rsvp_reader.core.tokenizer import rejoin, tokenize
from rsvp_reader.core.units import PlaybackState, TimedUnit, TimingConfiguration

logger = logging.getLogger(__name__)

DEFAULT_JUMP = 10

StateListener = Callable[[PlaybackState, PlaybackState], None]
IndexListener = Callable[[int], None]


class PlaybackScheduler:
    """State machine that advances through timed units in real time.

    WHY: Front ends only need "what word is showing now" and a handful
    of transport controls. Everything temporal is kept here so it can be
    driven by a fake clock in tests.

    HOW: ``play()`` requests a frame. ``_on_frame`` does one step of the
    advancement algorithm and requests the next frame while still
    playing. A generation counter is bumped whenever the pending frame is
    cancelled, and callbacks carrying an older generation are ignored.

    RULES:
    - play() on an empty sequence does nothing
    - play() from finished restarts at index 0
    - seek_to_index() clamps and is legal in every state
    - Seeking away from the last unit while finished moves to paused
    - update_configuration() keeps the numeric index, not the word
    """

    def __init__(
        self,
        frames: FrameScheduler,
        config: Optional[TimingConfiguration] = None,
    ) -> None:
        self._frames = frames
        self._config = config or TimingConfiguration()
        self._units: List[TimedUnit] = []
        self._total_ms = 0
        self._raw_text = ""
        self._index = 0
        self._state = PlaybackState.IDLE
        self._frame_handle: Any = None
        self._generation = 0
        self._unit_started_at: Optional[float] = None
        self._state_listeners: List[StateListener] = []
        self._index_listeners: List[IndexListener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_listener(self, listener: StateListener) -> None:
        """Register ``listener(old_state, new_state)`` for state transitions."""
        self._state_listeners.append(listener)

    def add_index_listener(self, listener: IndexListener) -> None:
        """Register ``listener(new_index)`` for index changes."""
        self._index_listeners.append(listener)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_unit(self) -> Optional[TimedUnit]:
        if 0 <= self._index < len(self._units):
            return self._units[self._index]
        return None

    @property
    def units(self) -> List[TimedUnit]:
        return list(self._units)

    @property
    def total_units(self) -> int:
        return len(self._units)

    @property
    def config(self) -> TimingConfiguration:
        return self._config

    @property
    def raw_text(self) -> str:
        return self._raw_text

    @property
    def progress_percent(self) -> float:
        if not self._units:
            return 0.0
        return self._index / len(self._units) * 100.0

    @property
    def elapsed_ms(self) -> int:
        """Sum of the durations of every unit before the current one."""
        return sum(unit.duration_ms for unit in self._units[:self._index])

    @property
    def total_ms(self) -> int:
        return self._total_ms

    # ------------------------------------------------------------------
    # Transport controls
    # ------------------------------------------------------------------

    def play(self) -> None:
        """Start or resume playback from the current index."""
        if not self._units or self._state == PlaybackState.PLAYING:
            return

        self._cancel_frame()
        if self._state == PlaybackState.FINISHED:
            self._set_index(0)
        self._set_state(PlaybackState.PLAYING)
        if self._state == PlaybackState.PLAYING:
            self._request_frame()

    def pause(self) -> None:
        """Freeze at the current index."""
        if self._state != PlaybackState.PLAYING:
            return
        self._cancel_frame()
        self._set_state(PlaybackState.PAUSED)

    def toggle(self) -> None:
        if self._state == PlaybackState.PLAYING:
            self.pause()
        else:
            self.play()

    def reset(self) -> None:
        """Return to the first unit and the idle state."""
        self._cancel_frame()
        self._set_state(PlaybackState.IDLE)
        self._set_index(0)

    def seek_to_index(self, index: int) -> None:
        """Move to ``index``, clamped into the sequence.

        The selected unit always gets its full duration.
        """
        if not self._units:
            return

        last = len(self._units) - 1
        target = max(0, min(int(index), last))
        self._unit_started_at = None
        self._set_index(target)

        if self._state == PlaybackState.FINISHED and target < last:
            self._set_state(PlaybackState.PAUSED)

    def jump_forward(self, count: int = DEFAULT_JUMP) -> None:
        self.seek_to_index(self._index + count)

    def jump_backward(self, count: int = DEFAULT_JUMP) -> None:
        self.seek_to_index(self._index - count)

    # ------------------------------------------------------------------
    # Sequence and configuration
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> None:
        """Replace the sequence with a tokenization of ``text``; back to idle at 0."""
        self._cancel_frame()
        self._set_state(PlaybackState.IDLE)
        self._raw_text = text
        self._replace_units(tokenize(text, self._config))
        self._set_index(0)
        logger.debug("Loaded %d units (%d ms)", len(self._units), self._total_ms)

    def restore_position(self, text: str, index: int) -> None:
        """Load ``text`` and land on ``index`` in the paused state.

        Used when resuming a saved reading position. An empty text leaves
        the scheduler idle.
        """
        self._cancel_frame()
        self._set_state(PlaybackState.IDLE)
        self._raw_text = text
        self._replace_units(tokenize(text, self._config))
        if not self._units:
            self._set_index(0)
            return
        self._set_index(max(0, min(int(index), len(self._units) - 1)))
        self._set_state(PlaybackState.PAUSED)

    def update_configuration(self, partial: Mapping[str, Any]) -> TimingConfiguration:
        """Merge ``partial`` into the configuration and retime every unit.

        The text is rebuilt by joining the current unit words, so
        paragraph breaks do not survive a retiming. The numeric index is
        kept as is.
        """
        self._config = self._config.merged(partial)
        self._retokenize()
        return self._config

    def set_wpm(self, wpm: float) -> TimingConfiguration:
        self._config = self._config.with_wpm(wpm)
        self._retokenize()
        return self._config

    def dispose(self) -> None:
        """Cancel any outstanding frame request."""
        self._cancel_frame()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _retokenize(self) -> None:
        if not self._units:
            return
        self._replace_units(tokenize(rejoin(self._units), self._config))
        if self._units and self._index > len(self._units) - 1:
            self._set_index(len(self._units) - 1)

    def _replace_units(self, units: List[TimedUnit]) -> None:
        self._units = units
        self._total_ms = sum(unit.duration_ms for unit in units)

    def _set_state(self, state: PlaybackState) -> None:
        if state == self._state:
            return
        old = self._state
        self._state = state
        logger.debug("Playback %s -> %s at index %d", old.value, state.value, self._index)
        for listener in list(self._state_listeners):
            listener(old, state)

    def _set_index(self, index: int) -> None:
        if index == self._index:
            return
        self._index = index
        for listener in list(self._index_listeners):
            listener(index)

    def _request_frame(self) -> None:
        generation = self._generation
        self._frame_handle = self._frames.request_frame(
            lambda timestamp: self._on_frame(timestamp, generation)
        )

    def _cancel_frame(self) -> None:
        if self._frame_handle is not None:
            self._frames.cancel_frame(self._frame_handle)
            self._frame_handle = None
        self._generation += 1
        self._unit_started_at = None

    def _on_frame(self, timestamp: float, generation: int) -> None:
        """One step of the advancement loop."""
        if generation != self._generation or self._state != PlaybackState.PLAYING:
            return
        self._frame_handle = None

        if self._unit_started_at is None:
            self._unit_started_at = timestamp
        elapsed = timestamp - self._unit_started_at

        unit = self.current_unit
        if unit is None:
            self._set_state(PlaybackState.FINISHED)
            return

        if elapsed >= unit.duration_ms:
            next_index = self._index + 1
            if next_index >= len(self._units):
                self._set_index(len(self._units) - 1)
                self._set_state(PlaybackState.FINISHED)
                return
            self._unit_started_at = timestamp
            self._set_index(next_index)

        if self._state == PlaybackState.PLAYING and generation == self._generation:
            self._request_frame()
