"""Display helpers shared by the terminal and Tk front ends.

WHY: Progress clocks, statistics summaries and the ORP split of the
current word look the same in every front end. Keeping the string
formatting here keeps it testable without a terminal or a window.

RULES:
- format_clock: "m:ss", or "h:mm:ss" from one hour up
- format_duration: "<1m", "Nm" or "Nh Nm"
- format_count: plain below 1000, otherwise one decimal with "k"
- format_relative_time: "just now", "Nm ago", "Nh ago", "yesterday",
  "Nd ago", then an ISO date
"""

from __future__ import annotations

import datetime
from typing import List, Tuple

from rsvp_reader.core.statistics import ReadingStatistics, average_wpm
from rsvp_reader.core.units import TimedUnit


def format_clock(ms: int) -> str:
    total_seconds = max(0, int(ms) // 1000)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return "{}:{:02d}:{:02d}".format(hours, minutes, seconds)
    return "{}:{:02d}".format(minutes, seconds)


def format_duration(ms: int) -> str:
    total_minutes = max(0, int(ms) // 60000)
    if total_minutes < 1:
        return "<1m"
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return "{}m".format(minutes)
    return "{}h {}m".format(hours, minutes)


def format_count(n: int) -> str:
    if n >= 1000:
        return "{:.1f}k".format(n / 1000.0)
    return str(n)


def format_relative_time(timestamp_ms: int, now_ms: int) -> str:
    """Describe how long ago an epoch-millisecond timestamp was."""
    minutes = (now_ms - timestamp_ms) // 60000
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return "{}m ago".format(minutes)
    hours = minutes // 60
    if hours < 24:
        return "{}h ago".format(hours)
    days = hours // 24
    if days == 1:
        return "yesterday"
    if days < 7:
        return "{}d ago".format(days)
    return datetime.date.fromtimestamp(timestamp_ms / 1000.0).isoformat()


def highlight_orp(unit: TimedUnit) -> Tuple[str, str, str]:
    """Split a unit's text into (before, pivot letter, after)."""
    text = unit.text
    offset = unit.orp_offset
    return text[:offset], text[offset:offset + 1], text[offset + 1:]


def summarize_statistics(
    statistics: ReadingStatistics,
    now_ms: int,
    book_name: str = "",
    history: int = 5,
) -> List[str]:
    """Render statistics as plain text lines (totals, current book, recent sessions)."""
    lines = [
        "Words read:   {}".format(format_count(statistics.total_words_read)),
        "Time spent:   {}".format(format_duration(statistics.total_reading_time_ms)),
        "Average WPM:  {}".format(statistics.average_wpm or "-"),
        "Sessions:     {}".format(statistics.sessions_count),
    ]

    book = statistics.books.get(book_name) if book_name else None
    if book is not None:
        lines.append("")
        lines.append("{}: {} words, {}, {} WPM, {} sessions".format(
            book_name,
            format_count(book.total_words_read),
            format_duration(book.total_reading_time_ms),
            book.average_wpm or "-",
            book.sessions_count,
        ))

    if statistics.sessions:
        lines.append("")
        lines.append("Recent sessions:")
        for session in statistics.sessions[:history]:
            lines.append("  {} - {} words in {} ({} WPM), {}".format(
                session.book_name,
                format_count(session.words_read),
                format_duration(session.reading_time_ms),
                average_wpm(session.words_read, session.reading_time_ms) or "-",
                format_relative_time(session.timestamp, now_ms),
            ))
    return lines
