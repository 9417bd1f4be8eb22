"""Reading statistics: the persisted shape of per-book and global totals.

WHY: Statistics outlive the process, so their shape is a contract with
whatever store holds them. The merge step that folds one finished
session into the totals belongs with that shape, not with the timers
that decide when a session ends.

HOW: Three dataclasses mirror the persisted JSON document:
  SessionRecord     — one committed session
  BookStatistics    — running totals for one book
  ReadingStatistics — global totals, per-book totals, recent sessions

RULES:
- Persisted keys are camelCase (totalWordsRead, readingTimeMs, ...)
- sessions is newest-first and capped at MAX_SESSION_HISTORY entries
- record_session() updates the book and global totals together
- from_dict() tolerates missing or malformed fields (they read as 0)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

MAX_SESSION_HISTORY = 50
UNTITLED_BOOK = "Untitled"


def _as_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(0, int(value))


def average_wpm(words: int, reading_time_ms: int) -> int:
    """Average reading speed in words per minute, 0 when no time was spent."""
    if reading_time_ms <= 0:
        return 0
    return int(round(words / (reading_time_ms / 60000.0)))


@dataclass
class SessionRecord:
    book_name: str
    words_read: int
    reading_time_ms: int
    timestamp: int  # epoch milliseconds

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionRecord":
        name = data.get("bookName")
        return cls(
            book_name=name if isinstance(name, str) and name else UNTITLED_BOOK,
            words_read=_as_count(data.get("wordsRead")),
            reading_time_ms=_as_count(data.get("readingTimeMs")),
            timestamp=_as_count(data.get("timestamp")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bookName": self.book_name,
            "wordsRead": self.words_read,
            "readingTimeMs": self.reading_time_ms,
            "timestamp": self.timestamp,
        }


@dataclass
class BookStatistics:
    total_words_read: int = 0
    total_reading_time_ms: int = 0
    sessions_count: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BookStatistics":
        return cls(
            total_words_read=_as_count(data.get("totalWordsRead")),
            total_reading_time_ms=_as_count(data.get("totalReadingTimeMs")),
            sessions_count=_as_count(data.get("sessionsCount")),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalWordsRead": self.total_words_read,
            "totalReadingTimeMs": self.total_reading_time_ms,
            "sessionsCount": self.sessions_count,
        }

    @property
    def average_wpm(self) -> int:
        return average_wpm(self.total_words_read, self.total_reading_time_ms)


@dataclass
class ReadingStatistics:
    """Global and per-book reading totals plus the recent session history.

    RULES:
    - books maps book name -> BookStatistics, created on first session
    - sessions holds at most MAX_SESSION_HISTORY records, newest first
    """

    total_words_read: int = 0
    total_reading_time_ms: int = 0
    sessions_count: int = 0
    books: Dict[str, BookStatistics] = field(default_factory=dict)
    sessions: List[SessionRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ReadingStatistics":
        if not isinstance(data, Mapping):
            return cls()

        books: Dict[str, BookStatistics] = {}
        raw_books = data.get("books")
        if isinstance(raw_books, Mapping):
            for name, entry in raw_books.items():
                if isinstance(entry, Mapping):
                    books[str(name)] = BookStatistics.from_dict(entry)

        sessions: List[SessionRecord] = []
        raw_sessions = data.get("sessions")
        if isinstance(raw_sessions, list):
            sessions = [
                SessionRecord.from_dict(entry)
                for entry in raw_sessions
                if isinstance(entry, Mapping)
            ][:MAX_SESSION_HISTORY]

        return cls(
            total_words_read=_as_count(data.get("totalWordsRead")),
            total_reading_time_ms=_as_count(data.get("totalReadingTimeMs")),
            sessions_count=_as_count(data.get("sessionsCount")),
            books=books,
            sessions=sessions,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalWordsRead": self.total_words_read,
            "totalReadingTimeMs": self.total_reading_time_ms,
            "sessionsCount": self.sessions_count,
            "books": {name: book.to_dict() for name, book in self.books.items()},
            "sessions": [session.to_dict() for session in self.sessions],
        }

    @property
    def average_wpm(self) -> int:
        return average_wpm(self.total_words_read, self.total_reading_time_ms)

    def record_session(
        self,
        book_name: Optional[str],
        words_read: int,
        reading_time_ms: int,
        timestamp: int,
    ) -> SessionRecord:
        """Fold one finished session into the history and the totals.

        Returns:
            The SessionRecord that was added to the front of ``sessions``.
        """
        name = book_name or UNTITLED_BOOK
        record = SessionRecord(
            book_name=name,
            words_read=words_read,
            reading_time_ms=reading_time_ms,
            timestamp=timestamp,
        )
        self.sessions.insert(0, record)
        del self.sessions[MAX_SESSION_HISTORY:]

        book = self.books.setdefault(name, BookStatistics())
        book.total_words_read += words_read
        book.total_reading_time_ms += reading_time_ms
        book.sessions_count += 1

        self.total_words_read += words_read
        self.total_reading_time_ms += reading_time_ms
        self.sessions_count += 1
        return record
