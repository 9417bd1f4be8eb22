"""Tokenizer: split raw text into an ordered sequence of timed units.

WHY: The scheduler plays a flat list of words, each with its own
duration. Whitespace in the source carries one piece of information the
timing model needs (blank lines mark paragraph ends) and is otherwise
noise.

HOW: Line endings are unified and runs of spaces collapsed while
newlines survive, so blank lines can still be found. The normalized
text is split on whitespace, and each word is located in the
normalized text to check what follows it.

RULES:
- Empty or whitespace-only input yields an empty list
- Units are numbered 0..N-1 in reading order
- Tokenization always rebuilds the whole sequence; nothing is reused
- Rejoining unit texts with single spaces reproduces the word sequence
"""

from __future__ import annotations

import re
from typing import List, Sequence

from rsvp_reader.core.timing import has_paragraph_break, recognition_offset, word_duration
from rsvp_reader.core.units import TimedUnit, TimingConfiguration

_LINE_ENDINGS = re.compile(r"\r\n?")
_SPACE_RUNS = re.compile(r" +")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Unify line endings, turn tabs into spaces and collapse space runs.

    Newlines are kept so paragraph breaks remain detectable.
    """
    normalized = _LINE_ENDINGS.sub("\n", text)
    normalized = normalized.replace("\t", " ")
    return _SPACE_RUNS.sub(" ", normalized)


def tokenize(text: str, config: TimingConfiguration) -> List[TimedUnit]:
    """Turn ``text`` into timed units using ``config``.

    Args:
        text: Raw source text.
        config: Timing configuration applied to every unit.

    Returns:
        Units in reading order; empty for blank input.
    """
    if not text or not text.strip():
        return []

    normalized = normalize_text(text)
    words = [w for w in _WHITESPACE.split(normalized) if w]

    units: List[TimedUnit] = []
    cursor = 0
    for index, word in enumerate(words):
        position = normalized.find(word, cursor)
        end = position + len(word)
        paragraph_after = has_paragraph_break(normalized, end)

        units.append(TimedUnit(
            text=word,
            sequence_index=index,
            duration_ms=word_duration(word, config, paragraph_after),
            orp_offset=recognition_offset(word),
        ))
        cursor = end

    return units


def rejoin(units: Sequence[TimedUnit]) -> str:
    """Join unit texts with single spaces (paragraph breaks are not kept)."""
    return " ".join(unit.text for unit in units)
