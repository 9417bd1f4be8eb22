"""Unit tests for TimingConfiguration parsing and merging.

WHY: Configuration comes from saved files, CLI flags and HTTP bodies.
Bad or partial values must never break tokenization; they fall back to
defaults or get clamped.
"""

import pytest

from rsvp_reader.core.tokenizer import tokenize
from rsvp_reader.core.units import (
    DEFAULT_MAX_WORD_DELAY_MS,
    DEFAULT_WPM,
    LengthFactors,
    PunctuationFactors,
    TimedUnit,
    TimingConfiguration,
)


class TestDefaults:

    def test_documented_defaults(self):
        config = TimingConfiguration()
        assert config.words_per_minute == 250
        assert config.adaptive_timing is True
        assert config.length_factors == LengthFactors(1.0, 1.1, 1.25, 1.4)
        assert config.punctuation_factors == PunctuationFactors(1.3, 1.6, 1.6, 1.6, 1.4, 1.4)
        assert config.paragraph_factor == 2.0
        assert config.max_word_delay_ms == 3000

    def test_none_and_non_mapping_give_defaults(self):
        assert TimingConfiguration.from_dict(None) == TimingConfiguration()
        assert TimingConfiguration.from_dict("fast") == TimingConfiguration()


class TestFromDict:

    def test_unknown_keys_are_ignored(self):
        config = TimingConfiguration.from_dict({"wpm": 300, "fontSize": 36})
        assert config.words_per_minute == 300

    def test_snake_case_keys_are_accepted(self):
        config = TimingConfiguration.from_dict({
            "words_per_minute": 400,
            "adaptive_timing": False,
            "max_word_delay_ms": 500,
            "length_factors": {"very_long": 2.0},
        })
        assert config.words_per_minute == 400
        assert config.adaptive_timing is False
        assert config.max_word_delay_ms == 500
        assert config.length_factors.very_long == 2.0

    def test_non_positive_wpm_falls_back(self):
        assert TimingConfiguration.from_dict({"wpm": 0}).words_per_minute == DEFAULT_WPM
        assert TimingConfiguration.from_dict({"wpm": -5}).words_per_minute == DEFAULT_WPM
        assert TimingConfiguration.from_dict({"wpm": "fast"}).words_per_minute == DEFAULT_WPM

    def test_negative_cap_means_uncapped(self):
        assert TimingConfiguration.from_dict({"maxWordDelay": -1}).max_word_delay_ms == 0

    def test_factors_below_one_are_clamped(self):
        config = TimingConfiguration.from_dict({
            "paragraphFactor": 0.5,
            "punctuationFactors": {"comma": 0.2},
        })
        assert config.paragraph_factor == 1.0
        assert config.punctuation_factors.comma == 1.0

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "-inf", "NaN", "Infinity"])
    def test_non_finite_numbers_fall_back(self, value):
        config = TimingConfiguration.from_dict({
            "wpm": value,
            "maxWordDelay": value,
            "paragraphFactor": value,
            "lengthFactors": {"long": value},
            "punctuationFactors": {"period": value},
        })
        assert config == TimingConfiguration()

    def test_non_finite_factors_still_tokenize(self):
        config = TimingConfiguration.from_dict({
            "adaptiveTiming": False,
            "maxWordDelay": 0,
            "paragraphFactor": "inf",
        })
        assert [u.duration_ms for u in tokenize("a\n\nb", config)] == [480, 240]

    def test_non_boolean_adaptive_flag_is_ignored(self):
        assert TimingConfiguration.from_dict({"adaptiveTiming": "no"}).adaptive_timing is True


class TestMerged:

    def test_partial_factor_tables_merge_key_by_key(self):
        base = TimingConfiguration.from_dict({"punctuationFactors": {"period": 2.0}})
        merged = base.merged({"punctuationFactors": {"comma": 1.5}})
        assert merged.punctuation_factors.period == 2.0
        assert merged.punctuation_factors.comma == 1.5

    def test_missing_keys_keep_current_values(self):
        base = TimingConfiguration.from_dict({"wpm": 500, "maxWordDelay": 900})
        merged = base.merged({"adaptiveTiming": False})
        assert merged.words_per_minute == 500
        assert merged.max_word_delay_ms == 900
        assert merged.adaptive_timing is False

    def test_merge_returns_new_object(self):
        base = TimingConfiguration()
        merged = base.merged({"wpm": 400})
        assert base.words_per_minute == 250
        assert merged is not base

    def test_with_wpm_ignores_invalid_values(self):
        base = TimingConfiguration()
        assert base.with_wpm(0) is base
        assert base.with_wpm(True) is base
        assert base.with_wpm(float("nan")) is base
        assert base.with_wpm(float("inf")) is base
        assert base.with_wpm(320).words_per_minute == 320


class TestSerialization:

    def test_to_dict_uses_persisted_keys(self):
        data = TimingConfiguration().to_dict()
        assert data["wpm"] == 250
        assert data["adaptiveTiming"] is True
        assert data["lengthFactors"]["veryLong"] == 1.4
        assert data["maxWordDelay"] == DEFAULT_MAX_WORD_DELAY_MS

    def test_to_dict_round_trips(self):
        config = TimingConfiguration.from_dict({"wpm": 333, "lengthFactors": {"long": 1.5}})
        assert TimingConfiguration.from_dict(config.to_dict()) == config

    def test_unit_to_dict(self):
        unit = TimedUnit(text="hello", sequence_index=3, duration_ms=264, orp_offset=1)
        assert unit.to_dict() == {
            "text": "hello", "index": 3, "duration_ms": 264, "orp_offset": 1,
        }
