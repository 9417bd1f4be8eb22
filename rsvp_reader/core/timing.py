"""Timing model: per-word display duration and optimal recognition point.

WHY: How long a word stays on screen, and which letter the eye should
fixate on, are the two numbers every other component depends on. They
are kept as pure functions so they can be tested without a tokenizer
or a scheduler.

HOW: ``word_duration`` starts from the base interval implied by the
words-per-minute rate and multiplies in a length factor, a trailing
punctuation factor and, when the word closes a paragraph, the paragraph
factor. The result is capped by ``max_word_delay_ms`` and rounded
half-up to whole milliseconds.

RULES:
- recognition_offset depends only on the word's length
- With adaptive timing off, length and punctuation factors are 1.0
- Only the final character of a word is inspected for punctuation
- word_duration never returns a value below 1 ms
- words_per_minute > 0 is a precondition, not re-validated here
"""

from __future__ import annotations

import math
import re

from rsvp_reader.core.units import PUNCTUATION_KEYS, TimingConfiguration

# How far past a word the tokenizer looks for a blank line
PARAGRAPH_LOOKAHEAD = 10

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def recognition_offset(word: str) -> int:
    """Return the character index of the optimal recognition point (ORP).

    The ORP sits roughly a third of the way into the word, drifting
    right as words get longer.
    """
    length = len(word)
    if length <= 1:
        return 0
    if length <= 5:
        return int(length * 0.3)
    if length <= 9:
        return int(length * 0.35)
    return int(length * 0.4)


def length_factor(word: str, config: TimingConfiguration) -> float:
    """Return the length-bucket multiplier for ``word``."""
    if not config.adaptive_timing:
        return 1.0

    factors = config.length_factors
    length = len(word)
    if length <= 4:
        return factors.short
    if length <= 7:
        return factors.medium
    if length <= 10:
        return factors.long
    return factors.very_long


def punctuation_factor(word: str, config: TimingConfiguration) -> float:
    """Return the multiplier for the word's trailing punctuation mark, if any."""
    if not config.adaptive_timing or not word:
        return 1.0

    name = PUNCTUATION_KEYS.get(word[-1])
    if name is None:
        return 1.0
    return getattr(config.punctuation_factors, name)


def has_paragraph_break(text: str, start: int) -> bool:
    """Check for a blank line within the few characters after ``start``."""
    window = text[start:start + PARAGRAPH_LOOKAHEAD]
    return _PARAGRAPH_BREAK.search(window) is not None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def word_duration(
    word: str,
    config: TimingConfiguration,
    followed_by_paragraph_break: bool = False,
) -> int:
    """Compute how many milliseconds ``word`` stays on screen.

    Args:
        word: The word including any trailing punctuation.
        config: Timing configuration for this tokenization.
        followed_by_paragraph_break: True when a blank line follows the word.

    Returns:
        Duration in whole milliseconds, at least 1 and at most
        ``config.max_word_delay_ms`` when a cap is set.
    """
    duration = 60000.0 / config.words_per_minute
    duration *= length_factor(word, config)
    duration *= punctuation_factor(word, config)
    if followed_by_paragraph_break:
        duration *= config.paragraph_factor

    if config.max_word_delay_ms > 0:
        duration = min(duration, float(config.max_word_delay_ms))

    return max(1, _round_half_up(duration))
