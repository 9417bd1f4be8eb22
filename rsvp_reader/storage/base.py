"""Abstract store for reading position, timing settings and statistics.

WHY: Position, settings and statistics must survive restarts, but the
reading engine should not care whether they live in a JSON file, a test
dict or something else. The engine receives a StateStore at
construction and only talks to this interface.

HOW: PersistedState bundles the last text, index, book name and timing
configuration. StateStore is an ABC with read-at-startup and
whole-snapshot write methods. Implementations raise StorageError for
any failure so callers have one exception to catch.

RULES:
- Writes always replace a whole snapshot, never patch part of one
- load_* never raises for missing data; it returns None or defaults
- save_* raises StorageError on failure; callers log and carry on
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from rsvp_reader.core.statistics import ReadingStatistics

STATE_VERSION = 1


class StorageError(Exception):
    """A store could not read or write its snapshot."""


@dataclass
class PersistedState:
    """Where the reader left off.

    RULES:
    - text: the raw text last loaded ("" when nothing is loaded)
    - current_index: unit index, clamped again on restore
    - book_name: display name of the text, or None
    - timing: TimingConfiguration.to_dict() output
    """

    text: str = ""
    current_index: int = 0
    book_name: Optional[str] = None
    timing: Dict[str, Any] = field(default_factory=dict)
    version: int = STATE_VERSION

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersistedState":
        index = data.get("currentIndex", 0)
        if isinstance(index, bool) or not isinstance(index, int):
            index = 0
        timing = data.get("timingConfig")
        book_name = data.get("bookName")
        version = data.get("version")
        return cls(
            text=data.get("text") if isinstance(data.get("text"), str) else "",
            current_index=max(0, index),
            book_name=book_name if isinstance(book_name, str) and book_name else None,
            timing=dict(timing) if isinstance(timing, Mapping) else {},
            version=version if isinstance(version, int) else STATE_VERSION,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "currentIndex": self.current_index,
            "bookName": self.book_name,
            "timingConfig": self.timing,
            "version": self.version,
        }


class StateStore(ABC):
    """Persistence collaborator for the reader.

    To add a new backend:
    1. Subclass StateStore
    2. Implement the four methods below
    3. Raise StorageError (never a backend-specific error) on failure
    """

    @abstractmethod
    def load_state(self) -> Optional[PersistedState]:
        """Return the last saved reading position, or None."""

    @abstractmethod
    def save_state(self, state: PersistedState) -> None:
        """Replace the saved reading position."""

    @abstractmethod
    def load_statistics(self) -> ReadingStatistics:
        """Return saved statistics, or empty statistics when none exist."""

    @abstractmethod
    def save_statistics(self, statistics: ReadingStatistics) -> None:
        """Replace the saved statistics."""
