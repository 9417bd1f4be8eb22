"""Data model for the reading engine: timed units, timing configuration, playback state.

WHY: The tokenizer, the scheduler and the session accumulator all pass
the same few values around. Keeping them in one module as plain,
well-typed dataclasses makes the contract between those components
explicit and lets each be tested on its own.

HOW: Four types form the model:
  PlaybackState       — the scheduler's four states
  LengthFactors       — duration multipliers keyed by word-length bucket
  PunctuationFactors  — duration multipliers keyed by trailing punctuation
  TimingConfiguration — immutable timing settings used by one tokenization
  TimedUnit           — one displayable word with duration and ORP offset

RULES:
- Configuration and units are frozen; a change means a new object
- Unknown configuration keys are ignored, missing keys take the defaults
- Out-of-range values are clamped or defaulted, never rejected
- NaN and infinity count as invalid and take the default
- Persisted keys are camelCase; snake_case is accepted on input too
"""

from __future__ import annotations

import enum
import math
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

DEFAULT_WPM = 250
DEFAULT_PARAGRAPH_FACTOR = 2.0
DEFAULT_MAX_WORD_DELAY_MS = 3000


class PlaybackState(str, enum.Enum):
    """States of the playback scheduler.

    Inherits from str so values serialize cleanly to JSON.
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


def _as_number(value: Any, default: float) -> float:
    """Coerce a configuration value to float, falling back to ``default``."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def _as_factor(value: Any, default: float) -> float:
    """Factors never shorten a unit, so anything below 1.0 is clamped up."""
    return max(1.0, _as_number(value, default))


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present key among ``keys``, or None."""
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class LengthFactors:
    """Duration multipliers by character length.

    RULES:
    - short: <= 4 chars, medium: <= 7, long: <= 10, very_long: > 10
    """

    short: float = 1.0
    medium: float = 1.1
    long: float = 1.25
    very_long: float = 1.4

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "LengthFactors":
        defaults = cls()
        if not isinstance(data, Mapping):
            return defaults
        return cls(
            short=_as_factor(_pick(data, "short"), defaults.short),
            medium=_as_factor(_pick(data, "medium"), defaults.medium),
            long=_as_factor(_pick(data, "long"), defaults.long),
            very_long=_as_factor(_pick(data, "very_long", "veryLong"), defaults.very_long),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "short": self.short,
            "medium": self.medium,
            "long": self.long,
            "veryLong": self.very_long,
        }


# Trailing character -> PunctuationFactors attribute
PUNCTUATION_KEYS: Dict[str, str] = {
    ",": "comma",
    ".": "period",
    "!": "exclamation",
    "?": "question",
    ";": "semicolon",
    ":": "colon",
}


@dataclass(frozen=True)
class PunctuationFactors:
    """Duration multipliers for a word's trailing punctuation mark."""

    comma: float = 1.3
    period: float = 1.6
    exclamation: float = 1.6
    question: float = 1.6
    semicolon: float = 1.4
    colon: float = 1.4

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PunctuationFactors":
        defaults = cls()
        if not isinstance(data, Mapping):
            return defaults
        values = {
            name: _as_factor(data.get(name), getattr(defaults, name))
            for name in PUNCTUATION_KEYS.values()
        }
        return cls(**values)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class TimingConfiguration:
    """Immutable timing settings applied to a whole tokenization.

    WHY: Every unit's duration depends on the same handful of settings.
    Freezing them guarantees that one tokenization pass sees one
    consistent configuration.

    HOW: ``from_dict`` builds a configuration from a persisted or partial
    mapping; ``merged`` applies a partial mapping on top of an existing
    configuration and returns a new one.

    RULES:
    - words_per_minute > 0; non-positive or non-numeric input → 250
    - max_word_delay_ms of 0 means uncapped; negative input → 0
    - factors are >= 1.0
    """

    words_per_minute: float = DEFAULT_WPM
    adaptive_timing: bool = True
    length_factors: LengthFactors = field(default_factory=LengthFactors)
    punctuation_factors: PunctuationFactors = field(default_factory=PunctuationFactors)
    paragraph_factor: float = DEFAULT_PARAGRAPH_FACTOR
    max_word_delay_ms: int = DEFAULT_MAX_WORD_DELAY_MS

    @classmethod
    def from_dict(
        cls,
        data: Optional[Mapping[str, Any]],
        base: Optional["TimingConfiguration"] = None,
    ) -> "TimingConfiguration":
        """Build a configuration from a mapping of recognized options.

        Args:
            data: Persisted or user-supplied options. May be partial.
            base: Configuration supplying values for missing keys.
                  Defaults to the documented defaults.
        """
        base = base or cls()
        if not isinstance(data, Mapping):
            return base

        wpm = _as_number(
            _pick(data, "wpm", "wordsPerMinute", "words_per_minute"),
            base.words_per_minute,
        )
        if wpm <= 0:
            wpm = DEFAULT_WPM

        adaptive = _pick(data, "adaptiveTiming", "adaptive_timing", "adaptiveTimingEnabled")
        if not isinstance(adaptive, bool):
            adaptive = base.adaptive_timing

        raw_length = _pick(data, "lengthFactors", "length_factors")
        length = base.length_factors
        if isinstance(raw_length, Mapping):
            length = LengthFactors.from_dict({**length.to_dict(), **raw_length})

        raw_punct = _pick(data, "punctuationFactors", "punctuation_factors")
        punct = base.punctuation_factors
        if isinstance(raw_punct, Mapping):
            punct = PunctuationFactors.from_dict({**punct.to_dict(), **raw_punct})

        paragraph = _as_factor(
            _pick(data, "paragraphFactor", "paragraph_factor"),
            base.paragraph_factor,
        )

        max_delay = _as_number(
            _pick(data, "maxWordDelay", "maxWordDelayMs", "max_word_delay_ms"),
            base.max_word_delay_ms,
        )
        max_delay_ms = max(0, int(round(max_delay)))

        return cls(
            words_per_minute=wpm,
            adaptive_timing=adaptive,
            length_factors=length,
            punctuation_factors=punct,
            paragraph_factor=paragraph,
            max_word_delay_ms=max_delay_ms,
        )

    def merged(self, partial: Optional[Mapping[str, Any]]) -> "TimingConfiguration":
        """Return a new configuration with ``partial`` applied on top of this one."""
        return TimingConfiguration.from_dict(partial, base=self)

    def with_wpm(self, wpm: float) -> "TimingConfiguration":
        if isinstance(wpm, bool) or not isinstance(wpm, (int, float)):
            return self
        if not math.isfinite(wpm) or wpm <= 0:
            return self
        return replace(self, words_per_minute=float(wpm))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted camelCase keys."""
        return {
            "wpm": self.words_per_minute,
            "adaptiveTiming": self.adaptive_timing,
            "lengthFactors": self.length_factors.to_dict(),
            "punctuationFactors": self.punctuation_factors.to_dict(),
            "paragraphFactor": self.paragraph_factor,
            "maxWordDelay": self.max_word_delay_ms,
        }


DEFAULT_TIMING_CONFIGURATION = TimingConfiguration()


@dataclass(frozen=True)
class TimedUnit:
    """One displayable word with its on-screen duration and ORP offset.

    RULES:
    - text: the word including trailing punctuation, never empty
    - sequence_index: position in the unit sequence, starting at 0
    - duration_ms: positive integer milliseconds, capped when configured
    - orp_offset: valid index into text (0 <= orp_offset < len(text))
    """

    text: str
    sequence_index: int
    duration_ms: int
    orp_offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "index": self.sequence_index,
            "duration_ms": self.duration_ms,
            "orp_offset": self.orp_offset,
        }
