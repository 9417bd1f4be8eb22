"""Tests for the command-line interface.

WHY: The CLI is the main way people run the reader; its exit codes and
its resume behaviour are what scripts and users depend on.

HOW: Most tests call ``run()`` with parsed arguments and read stdout and
stderr through capsys. Playback tests use a very high WPM so a short
text finishes in a few real frames. State files live under tmp_path.
"""

import io

import pytest

from rsvp_reader.cli import TerminalRenderer, build_parser, main, run
from rsvp_reader.core.scheduler import PlaybackScheduler
from rsvp_reader.core.statistics import ReadingStatistics
from rsvp_reader.core.units import TimingConfiguration
from rsvp_reader.loop import CooperativeLoop
from rsvp_reader.storage import JsonFileStore, PersistedState


def _run(argv):
    return run(build_parser().parse_args(argv))


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "story.txt"
    path.write_text("Hello world.", encoding="utf-8")
    return path


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "state.json"


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["book.txt"])
        assert args.input_file == "book.txt"
        assert args.wpm is None
        assert args.adaptive is None
        assert args.max_delay is None
        assert not args.restart
        assert not args.no_save

    def test_overrides(self):
        args = build_parser().parse_args([
            "book.txt", "--wpm", "400", "--no-adaptive", "--max-delay", "500",
        ])
        assert args.wpm == 400.0
        assert args.adaptive is False
        assert args.max_delay == 500


class TestExitCodes:

    def test_input_file_required(self, capsys):
        assert _run(["--no-save"]) == 2
        assert "input file is required" in capsys.readouterr().err

    def test_unreadable_file(self, tmp_path, capsys):
        assert _run([str(tmp_path / "missing.txt"), "--no-save"]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.txt"
        path.write_text("  \n\n ", encoding="utf-8")
        assert _run([str(path), "--no-save"]) == 0
        assert "Nothing to read" in capsys.readouterr().err

    def test_main_exits_with_run_code(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["--no-save"])
        assert excinfo.value.code == 2


class TestSummary:

    def test_default_timing(self, text_file, capsys):
        assert _run([str(text_file), "--summary", "--no-save"]) == 0
        assert capsys.readouterr().out.strip() == "2 words, 0:00 at 250 WPM"

    def test_wpm_override(self, tmp_path, capsys):
        path = tmp_path / "long.txt"
        path.write_text(" ".join(["word"] * 120), encoding="utf-8")
        assert _run([str(path), "--summary", "--no-save", "--wpm", "60"]) == 0
        assert capsys.readouterr().out.strip() == "120 words, 2:00 at 60 WPM"

    def test_non_finite_wpm_is_ignored(self, text_file, capsys):
        assert _run([str(text_file), "--summary", "--no-save", "--wpm", "nan"]) == 0
        assert capsys.readouterr().out.strip() == "2 words, 0:00 at 250 WPM"

    def test_summary_does_not_save(self, text_file, state_path):
        _run([str(text_file), "--summary", "--state", str(state_path)])
        assert not state_path.exists()


class TestStats:

    def test_prints_saved_statistics(self, state_path, capsys):
        stats = ReadingStatistics()
        stats.record_session("Dune", 500, 120000, 0)
        JsonFileStore(state_path).save_statistics(stats)

        assert _run(["--stats", "--state", str(state_path), "--book", "Dune"]) == 0
        out = capsys.readouterr().out
        assert "Words read:   500" in out
        assert "Dune: 500 words" in out


class TestPlayback:

    def test_reads_to_the_end_and_saves(self, text_file, state_path, capsys):
        code = _run([str(text_file), "--wpm", "60000", "--state", str(state_path)])
        assert code == 0
        captured = capsys.readouterr()
        assert "world." in captured.out
        assert "Finished story." in captured.err

        store = JsonFileStore(state_path)
        saved = store.load_state()
        assert saved.text == "Hello world."
        assert saved.current_index == 1
        assert saved.book_name == "story"
        assert store.load_statistics().books["story"].total_words_read == 1

    def test_resumes_saved_position(self, tmp_path, state_path, capsys):
        text = "one two three four five"
        path = tmp_path / "five.txt"
        path.write_text(text, encoding="utf-8")
        JsonFileStore(state_path).save_state(PersistedState(text=text, current_index=2))

        _run([str(path), "--wpm", "60000", "--state", str(state_path)])
        assert "Resuming five at word 3." in capsys.readouterr().err

    def test_restart_ignores_saved_position(self, tmp_path, state_path, capsys):
        text = "one two three four five"
        path = tmp_path / "five.txt"
        path.write_text(text, encoding="utf-8")
        JsonFileStore(state_path).save_state(PersistedState(text=text, current_index=2))

        _run([str(path), "--wpm", "60000", "--restart", "--state", str(state_path)])
        assert "Resuming" not in capsys.readouterr().err

    def test_finished_text_starts_over(self, tmp_path, state_path, capsys):
        text = "one two three"
        path = tmp_path / "three.txt"
        path.write_text(text, encoding="utf-8")
        JsonFileStore(state_path).save_state(PersistedState(text=text, current_index=2))

        _run([str(path), "--wpm", "60000", "--state", str(state_path)])
        assert "Resuming" not in capsys.readouterr().err


class TestTerminalRenderer:

    def _scheduler(self, text):
        config = TimingConfiguration.from_dict({"wpm": 250, "adaptiveTiming": False})
        scheduler = PlaybackScheduler(CooperativeLoop(), config)
        scheduler.set_text(text)
        return scheduler

    def test_pivot_sits_at_a_fixed_column(self):
        scheduler = self._scheduler("I reading")
        renderer = TerminalRenderer(scheduler, io.StringIO())
        first = renderer.render_line()
        scheduler.seek_to_index(1)
        second = renderer.render_line()
        assert first.index("I") == 20
        assert second.index("reading") == 18

    def test_progress_suffix(self):
        scheduler = self._scheduler("one two three four")
        scheduler.seek_to_index(2)
        line = TerminalRenderer(scheduler, io.StringIO()).render_line()
        assert line.endswith("[3/4 50.0% 0:00/0:00]")

    def test_empty_scheduler_renders_nothing(self):
        scheduler = self._scheduler("")
        assert TerminalRenderer(scheduler, io.StringIO()).render_line() == ""

    def test_draw_overwrites_the_line(self):
        scheduler = self._scheduler("one")
        stream = io.StringIO()
        TerminalRenderer(scheduler, stream).draw()
        output = stream.getvalue()
        assert output.startswith("\r")
        assert output.endswith("\x1b[K")
