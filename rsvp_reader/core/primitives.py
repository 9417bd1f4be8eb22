"""Abstract scheduling primitives the reading engine is driven by.

WHY: Playback advances once per display refresh and sessions commit
after an idle period. Neither the scheduler nor the accumulator should
know whether refreshes come from a Tk window, a terminal loop or a test
clock, so both receive these interfaces at construction.

HOW: Two small ABCs. ``FrameScheduler`` is the display-refresh source:
a requested callback runs once, on the next refresh, with a monotonic
timestamp in milliseconds. ``TimerScheduler`` runs a callback once
after a delay. Both return opaque handles that can be cancelled.

RULES:
- Callbacks run on the same thread that requested them
- Cancelling an unknown or already-fired handle is a no-op
- Frame timestamps are monotonic milliseconds (float)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

FrameCallback = Callable[[float], None]
TimerCallback = Callable[[], None]


class FrameScheduler(ABC):
    """Source of once-per-refresh callbacks."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> Any:
        """Run ``callback(timestamp_ms)`` on the next display refresh."""

    @abstractmethod
    def cancel_frame(self, handle: Any) -> None:
        """Drop a pending frame callback."""


class TimerScheduler(ABC):
    """Source of one-shot delayed callbacks."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: TimerCallback) -> Any:
        """Run ``callback()`` once after ``delay_ms`` milliseconds."""

    @abstractmethod
    def cancel_timer(self, handle: Any) -> None:
        """Drop a pending timer."""
