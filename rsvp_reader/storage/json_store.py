"""JSON file StateStore with schema validation.

WHY: A single-user desktop reader needs its position and statistics to
survive restarts without a database. One small JSON document is enough,
and validating it on load keeps a hand-edited or truncated file from
feeding garbage into the engine.

HOW: The document has two top-level keys, ``state`` and ``statistics``.
Every save reads the current document, replaces one key and writes the
whole document back through a temp file and ``os.replace``. Loads
validate each section against its part of store_schema.json with
jsonschema; a section that fails validation is treated as absent.

RULES:
- Missing file → no saved state, empty statistics
- Unreadable file → same as missing, logged at WARNING
- `state` and `statistics` are validated separately; an invalid one
  reads as missing and the other is kept, on load and on write
- Write failures raise StorageError (the caller decides to drop them)
- The parent directory is created on first write
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jsonschema

from rsvp_reader.core.statistics import ReadingStatistics
from rsvp_reader.storage.base import PersistedState, StateStore, StorageError

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).resolve().parent / "store_schema.json"

_CACHED_SCHEMA: Optional[dict] = None


def _get_schema() -> dict:
    """Load and cache the state document schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


class JsonFileStore(StateStore):
    """StateStore backed by one JSON document on disk."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def _read_document(self) -> Dict[str, Any]:
        """Return the valid sections of the document; {} when missing or unreadable."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return {}

        if not isinstance(document, dict):
            logger.warning("Ignoring state file %s: not a JSON object", self.path)
            return {}

        # Sections are validated independently
        sections = _get_schema()["properties"]
        valid: Dict[str, Any] = {}
        for key, schema in sections.items():
            if key not in document:
                continue
            try:
                jsonschema.validate(instance=document[key], schema=schema)
            except jsonschema.ValidationError as exc:
                logger.warning(
                    "Ignoring invalid %r in state file %s: %s", key, self.path, exc.message,
                )
                continue
            valid[key] = document[key]
        return valid

    def _write_key(self, key: str, value: Dict[str, Any]) -> None:
        document = self._read_document()
        document[key] = value
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(
                "Could not write {}: {}".format(self.path, exc)
            ) from exc

    def load_state(self) -> Optional[PersistedState]:
        data = self._read_document().get("state")
        if data is None:
            return None
        return PersistedState.from_dict(data)

    def save_state(self, state: PersistedState) -> None:
        self._write_key("state", state.to_dict())
        logger.debug("Saved reading position %d to %s", state.current_index, self.path)

    def load_statistics(self) -> ReadingStatistics:
        return ReadingStatistics.from_dict(self._read_document().get("statistics"))

    def save_statistics(self, statistics: ReadingStatistics) -> None:
        self._write_key("statistics", statistics.to_dict())
        logger.debug(
            "Saved statistics (%d sessions) to %s",
            statistics.sessions_count, self.path,
        )
