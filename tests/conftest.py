"""Shared test fixtures for the rsvp_reader test suite.

WHY: Scheduler, session and controller tests all need the same
deterministic setup: a manual clock, a cooperative loop driven by it,
a wall clock that moves with it, and an in-memory store.

HOW: ``loop`` wraps a ManualClock (milliseconds). ``wall_clock`` reads
the same clock as epoch seconds so session times line up exactly with
loop time. ``flat_config`` gives every word the same 240 ms duration.

RULES:
- Time only moves through loop.advance() or clock.advance()
- flat_config: 250 WPM, adaptive timing off, no delay cap
"""

from typing import Callable

import pytest

from rsvp_reader.core.units import TimingConfiguration
from rsvp_reader.loop import CooperativeLoop, ManualClock
from rsvp_reader.storage import MemoryStore

_SAMPLE_TEXT = (
    "The quick brown fox jumps over the lazy dog.\n"
    "\n"
    "It was the best of times, it was the worst of times; "
    "it was the age of wisdom: it was the age of foolishness!"
)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def loop(clock) -> CooperativeLoop:
    return CooperativeLoop(clock=clock)


@pytest.fixture
def wall_clock(clock) -> Callable[[], float]:
    """Epoch seconds that advance with the manual clock."""
    return lambda: clock.now_ms / 1000.0


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def flat_config() -> TimingConfiguration:
    return TimingConfiguration.from_dict({
        "wpm": 250,
        "adaptiveTiming": False,
        "maxWordDelay": 0,
    })


@pytest.fixture
def default_config() -> TimingConfiguration:
    return TimingConfiguration()


@pytest.fixture
def sample_text() -> str:
    """Two paragraphs covering every trailing punctuation mark."""
    return _SAMPLE_TEXT
