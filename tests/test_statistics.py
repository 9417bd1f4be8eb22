"""Unit tests for ReadingStatistics and its records.

WHY: Statistics are persisted, so their merge rules and tolerant parsing
are a contract: totals must always equal the sum of what was recorded,
and a damaged document must load as something usable.
"""

from rsvp_reader.core.statistics import (
    MAX_SESSION_HISTORY,
    UNTITLED_BOOK,
    BookStatistics,
    ReadingStatistics,
    SessionRecord,
    average_wpm,
)


class TestAverageWpm:

    def test_zero_time_is_zero(self):
        assert average_wpm(100, 0) == 0

    def test_rounds_to_integer(self):
        assert average_wpm(250, 60000) == 250
        assert average_wpm(8, 3000) == 160
        assert average_wpm(1, 7000) == 9


class TestRecordSession:

    def test_updates_book_and_global_totals(self):
        stats = ReadingStatistics()
        stats.record_session("Dune", 300, 60000, 1000)
        stats.record_session("Dune", 200, 30000, 2000)
        stats.record_session("Emma", 50, 10000, 3000)

        assert stats.total_words_read == 550
        assert stats.total_reading_time_ms == 100000
        assert stats.sessions_count == 3
        assert stats.books["Dune"] == BookStatistics(500, 90000, 2)
        assert stats.books["Emma"].sessions_count == 1

    def test_history_is_newest_first(self):
        stats = ReadingStatistics()
        stats.record_session("A", 1, 1000, 1)
        stats.record_session("B", 2, 1000, 2)
        assert [s.book_name for s in stats.sessions] == ["B", "A"]

    def test_history_is_capped(self):
        stats = ReadingStatistics()
        for i in range(MAX_SESSION_HISTORY + 5):
            stats.record_session("Book", 1, 1000, i)
        assert len(stats.sessions) == MAX_SESSION_HISTORY
        assert stats.sessions[0].timestamp == MAX_SESSION_HISTORY + 4
        # Totals still count every session
        assert stats.sessions_count == MAX_SESSION_HISTORY + 5

    def test_missing_book_name_is_untitled(self):
        stats = ReadingStatistics()
        record = stats.record_session(None, 10, 1000, 5)
        assert record.book_name == UNTITLED_BOOK
        assert UNTITLED_BOOK in stats.books

    def test_averages(self):
        stats = ReadingStatistics()
        stats.record_session("Dune", 500, 120000, 1)
        assert stats.average_wpm == 250
        assert stats.books["Dune"].average_wpm == 250


class TestSerialization:

    def test_to_dict_uses_camel_case(self):
        stats = ReadingStatistics()
        stats.record_session("Dune", 8, 3000, 42)
        assert stats.to_dict() == {
            "totalWordsRead": 8,
            "totalReadingTimeMs": 3000,
            "sessionsCount": 1,
            "books": {
                "Dune": {"totalWordsRead": 8, "totalReadingTimeMs": 3000, "sessionsCount": 1},
            },
            "sessions": [
                {"bookName": "Dune", "wordsRead": 8, "readingTimeMs": 3000, "timestamp": 42},
            ],
        }

    def test_from_dict_restores_to_dict_output(self):
        stats = ReadingStatistics()
        stats.record_session("Dune", 8, 3000, 42)
        assert ReadingStatistics.from_dict(stats.to_dict()) == stats

    def test_from_none_is_empty(self):
        assert ReadingStatistics.from_dict(None) == ReadingStatistics()

    def test_malformed_fields_read_as_zero(self):
        stats = ReadingStatistics.from_dict({
            "totalWordsRead": "many",
            "totalReadingTimeMs": -5,
            "sessionsCount": True,
            "books": {"Dune": "oops", "Emma": {"totalWordsRead": 3.7}},
            "sessions": [{"wordsRead": 4}, "junk"],
        })
        assert stats.total_words_read == 0
        assert stats.total_reading_time_ms == 0
        assert stats.sessions_count == 0
        assert list(stats.books) == ["Emma"]
        assert stats.books["Emma"].total_words_read == 3
        assert stats.sessions == [SessionRecord(UNTITLED_BOOK, 4, 0, 0)]

    def test_overlong_history_is_truncated_on_load(self):
        sessions = [
            {"bookName": "B", "wordsRead": 1, "readingTimeMs": 1, "timestamp": i}
            for i in range(MAX_SESSION_HISTORY + 10)
        ]
        stats = ReadingStatistics.from_dict({"sessions": sessions})
        assert len(stats.sessions) == MAX_SESSION_HISTORY
