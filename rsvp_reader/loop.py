"""Single-threaded loop implementing the frame and timer primitives.

WHY: The terminal front end has no display-refresh source of its own,
and tests need playback to advance deterministically without sleeping.
One small loop covers both: driven by the real monotonic clock it paces
the CLI, driven by a ManualClock it steps through time exactly.

HOW: Timers live in a heap ordered by due time. Frame callbacks are
collected between refreshes and dispatched together with one timestamp.
``run_once()`` fires due timers, then the frame batch. Callbacks
requested during a dispatch wait for the next refresh.

RULES:
- Clocks return milliseconds
- Cancelled handles are dropped lazily when they reach the heap top
- A timer never fires before its due time; it may fire up to one step late
- ``advance()`` only works with a ManualClock
"""

from __future__ import annotations

import heapq
import itertools
import time
from typing import Callable, Dict, List, Optional, Tuple

from rsvp_reader.core.primitives import (
    FrameCallback,
    FrameScheduler,
    TimerCallback,
    TimerScheduler,
)

DEFAULT_FRAME_INTERVAL_MS = 16


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ManualClock:
    """A clock that only moves when told to. Reads in milliseconds."""

    def __init__(self, start_ms: float = 0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class CooperativeLoop(FrameScheduler, TimerScheduler):
    """Frame and timer source for a single-threaded host."""

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self.clock = clock or monotonic_ms
        self._ids = itertools.count(1)
        self._frames: Dict[int, FrameCallback] = {}
        self._timer_heap: List[Tuple[float, int]] = []
        self._timers: Dict[int, TimerCallback] = {}

    # FrameScheduler

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._frames[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._frames.pop(handle, None)

    # TimerScheduler

    def call_later(self, delay_ms: float, callback: TimerCallback) -> int:
        handle = next(self._ids)
        self._timers[handle] = callback
        heapq.heappush(self._timer_heap, (self.clock() + max(0.0, delay_ms), handle))
        return handle

    def cancel_timer(self, handle: int) -> None:
        self._timers.pop(handle, None)

    # Driving

    @property
    def has_pending(self) -> bool:
        return bool(self._frames) or bool(self._timers)

    def run_once(self) -> None:
        """Fire every due timer, then one batch of frame callbacks."""
        now = self.clock()
        while self._timer_heap and self._timer_heap[0][0] <= now:
            _, handle = heapq.heappop(self._timer_heap)
            callback = self._timers.pop(handle, None)
            if callback is not None:
                callback()

        if self._frames:
            batch = self._frames
            self._frames = {}
            for callback in batch.values():
                callback(now)

    def advance(self, ms: float, step_ms: float = DEFAULT_FRAME_INTERVAL_MS) -> None:
        """Move a ManualClock forward by ``ms``, refreshing every ``step_ms``."""
        if not isinstance(self.clock, ManualClock):
            raise TypeError("advance() requires a ManualClock")
        remaining = ms
        while remaining > 0:
            step = min(step_ms, remaining)
            self.clock.advance(step)
            self.run_once()
            remaining -= step

    def run_until(
        self,
        predicate: Callable[[], bool],
        frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS,
    ) -> None:
        """Block, refreshing at ``frame_interval_ms``, until ``predicate()`` is true."""
        while not predicate():
            self.run_once()
            time.sleep(frame_interval_ms / 1000.0)
