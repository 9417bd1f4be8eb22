"""In-memory StateStore.

WHY: Tests and the HTTP API need a store with no disk footprint. Like
the file store, it keeps plain dict snapshots, so callers cannot mutate
stored data through objects they still hold.

HOW: Snapshots are serialized with to_dict() on save and rebuilt with
from_dict() on load. Setting ``fail_writes`` makes every save raise
StorageError, which exercises the callers' degrade-and-continue path.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from rsvp_reader.core.statistics import ReadingStatistics
from rsvp_reader.storage.base import PersistedState, StateStore, StorageError


class MemoryStore(StateStore):

    def __init__(self, fail_writes: bool = False) -> None:
        self._state: Optional[Dict[str, Any]] = None
        self._statistics: Optional[Dict[str, Any]] = None
        self.fail_writes = fail_writes
        self.state_writes = 0
        self.statistics_writes = 0

    def load_state(self) -> Optional[PersistedState]:
        if self._state is None:
            return None
        return PersistedState.from_dict(copy.deepcopy(self._state))

    def save_state(self, state: PersistedState) -> None:
        if self.fail_writes:
            raise StorageError("Memory store is read-only")
        self._state = copy.deepcopy(state.to_dict())
        self.state_writes += 1

    def load_statistics(self) -> ReadingStatistics:
        return ReadingStatistics.from_dict(copy.deepcopy(self._statistics))

    def save_statistics(self, statistics: ReadingStatistics) -> None:
        if self.fail_writes:
            raise StorageError("Memory store is read-only")
        self._statistics = copy.deepcopy(statistics.to_dict())
        self.statistics_writes += 1
