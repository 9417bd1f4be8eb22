"""Persistence backends for reading position, settings and statistics.

WHY: The engine depends only on the StateStore interface; the concrete
backend is picked by the front end (a JSON file for the CLI and GUI,
memory for the HTTP API and tests).

RULES:
- Every backend raises StorageError, never a backend-specific error
"""

from __future__ import annotations

from rsvp_reader.storage.base import PersistedState, StateStore, StorageError
from rsvp_reader.storage.json_store import JsonFileStore
from rsvp_reader.storage.memory import MemoryStore

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "PersistedState",
    "StateStore",
    "StorageError",
]
