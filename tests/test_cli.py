"""
Tests for CLI Commands
======================
Tests for the gibberkit command-line interface in gibberkit/cli.py.
"""

import subprocess
import sys
from pathlib import Path

import pytest

from gibberkit import __version__
from gibberkit.cli import main, parse_int

ROOT = Path(__file__).resolve().parents[1]


class TestCLIBasic:
    """Basic CLI tests."""

    def test_version_flag(self):
        """Test --version flag."""
        result = subprocess.run(
            [sys.executable, "-m", "gibberkit", "--version"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
        )
        assert result.returncode == 0
        assert f"gibberkit {__version__}" in result.stdout

    def test_help_flag(self):
        """Test -h prints usage to stderr and exits cleanly."""
        result = subprocess.run(
            [sys.executable, "-m", "gibberkit", "-h"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
        )
        assert result.returncode == 0
        assert "usage" in result.stderr.lower()
        assert "-t" in result.stderr
        assert result.stdout == ""

    def test_generate_subprocess(self, corpus_file):
        result = subprocess.run(
            [sys.executable, "-m", "gibberkit", "-t", str(corpus_file), "-c", "5"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
            timeout=60,
        )
        assert result.returncode == 0
        assert len(result.stdout.splitlines()) == 5

    def test_unknown_flag(self, capsys):
        """Test an unknown flag prints usage with status 0."""
        assert main(["-z"]) == 0
        captured = capsys.readouterr()
        assert "usage" in captured.err.lower()
        assert captured.out == ""

    def test_stray_argument(self, capsys):
        assert main(["words.txt"]) == 0
        assert "usage" in capsys.readouterr().err.lower()

    def test_help_stops_processing(self, corpus_file, capsys):
        assert main(["-t", str(corpus_file), "-c", "3", "-h"]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "usage" in captured.err.lower()


class TestCLIGenerate:
    """Tests for generation flags."""

    def test_generate_to_stdout(self, corpus_file, capsys):
        assert main(["-t", str(corpus_file), "-n", "4", "-m", "8", "-c", "10"]) == 0
        words = capsys.readouterr().out.splitlines()
        assert len(words) == 10
        assert len(set(words)) == 10
        assert all(4 <= len(w) <= 8 for w in words)

    def test_default_bounds(self, corpus_file, capsys):
        main(["-t", str(corpus_file), "-c", "6"])
        words = capsys.readouterr().out.splitlines()
        assert len(words) == 6
        assert all(6 <= len(w) <= 8 for w in words)

    def test_output_file(self, corpus_file, tmp_path, capsys):
        """Test -f writes the words and suppresses stdout."""
        out = tmp_path / "out.txt"
        assert main(["-t", str(corpus_file), "-c", "7", "-f", str(out)]) == 0
        assert capsys.readouterr().out == ""
        assert len(out.read_text().splitlines()) == 7

    def test_output_before_count_is_empty(self, corpus_file, tmp_path, capsys):
        """Test flags run in order: -f before -c saves nothing yet."""
        out = tmp_path / "out.txt"
        main(["-t", str(corpus_file), "-f", str(out), "-c", "3"])
        assert out.read_text() == ""
        assert capsys.readouterr().out == ""

    def test_deterministic_runs(self, corpus_file, capsys):
        args = ["-t", str(corpus_file), "-n", "5", "-m", "7", "-c", "12"]
        main(args)
        first = capsys.readouterr().out
        main(args)
        second = capsys.readouterr().out
        assert first == second
        assert first

    def test_uppercase_flags(self, corpus_file, capsys):
        main(["-T", str(corpus_file), "-N", "5", "-M", "7", "-C", "4"])
        assert len(capsys.readouterr().out.splitlines()) == 4

    def test_excluded_words_never_generated(self, corpus_file, tmp_path, capsys):
        main(["-t", str(corpus_file), "-n", "4", "-m", "8", "-c", "10"])
        first = capsys.readouterr().out.splitlines()

        excluded = tmp_path / "excluded.txt"
        excluded.write_text("\n".join(first))
        main(["-t", str(corpus_file), "-x", str(excluded), "-n", "4", "-m", "8", "-c", "10"])
        second = capsys.readouterr().out.splitlines()

        assert len(second) == 10
        assert set(first).isdisjoint(second)

    def test_count_accumulates(self, corpus_file, capsys):
        main(["-t", str(corpus_file), "-c", "3", "-c", "5"])
        assert len(capsys.readouterr().out.splitlines()) == 5

    def test_invalid_min_length_uses_default(self, corpus_file, capsys):
        main(["-t", str(corpus_file), "-n", "0", "-c", "5"])
        captured = capsys.readouterr()
        assert all(6 <= len(w) <= 8 for w in captured.out.splitlines())
        assert "Invalid minimum length" in captured.err

    def test_max_below_min_uses_default(self, corpus_file, capsys):
        main(["-t", str(corpus_file), "-n", "5", "-m", "2", "-c", "5"])
        words = capsys.readouterr().out.splitlines()
        assert len(words) == 5
        assert all(5 <= len(w) <= 8 for w in words)


class TestCLIErrors:
    """Tests for recoverable errors."""

    def test_missing_training_file(self, tmp_path, capsys):
        """Test an unreadable source is reported and the run continues."""
        code = main(["-t", str(tmp_path / "missing.txt"), "-c", "5"])
        captured = capsys.readouterr()
        assert code == 0
        assert "Cannot open file" in captured.err
        assert captured.out == ""

    def test_missing_argument(self, capsys):
        assert main(["-t"]) == 0
        assert "Argument missing for -t flag" in capsys.readouterr().err

    def test_missing_argument_before_next_flag(self, corpus_file, capsys):
        """Test a flag followed by another flag has no value."""
        assert main(["-x", "-t", str(corpus_file), "-c", "2"]) == 0
        captured = capsys.readouterr()
        assert "Argument missing for -x flag" in captured.err
        assert len(captured.out.splitlines()) == 2

    def test_degenerate_bounds(self, corpus_file, capsys):
        """Test min 20 with max falling back to 8 is reported, not looped."""
        code = main(["-t", str(corpus_file), "-n", "20", "-m", "3", "-c", "5"])
        captured = capsys.readouterr()
        assert code == 0
        assert "exceeds maximum length" in captured.err
        assert captured.out == ""

    def test_empty_model(self, tmp_path, capsys):
        short = tmp_path / "short.txt"
        short.write_text("cat")
        assert main(["-t", str(short), "-c", "5"]) == 0
        captured = capsys.readouterr()
        assert "No character usage rules" in captured.err
        assert captured.out == ""

    def test_unwritable_output(self, corpus_file, tmp_path, capsys):
        bad = tmp_path / "missing" / "out.txt"
        assert main(["-t", str(corpus_file), "-c", "2", "-f", str(bad)]) == 0
        captured = capsys.readouterr()
        assert "Cannot open file" in captured.err
        assert captured.out == ""


class TestCLIDictionaries:
    """Tests for -l, -b and rules files."""

    def test_save_training(self, tmp_path, capsys):
        source = tmp_path / "source.txt"
        source.write_text("apple mango apple cherry fig")
        saved = tmp_path / "training.txt"
        main(["-t", str(source), "-l", str(saved)])
        assert saved.read_text() == "apple\nmango\ncherry\n"

    def test_save_exclusions(self, tmp_path, capsys):
        bad = tmp_path / "bad.txt"
        bad.write_text("Plonker, wally; plonker!")
        saved = tmp_path / "excluded.txt"
        main(["-x", str(bad), "-b", str(saved)])
        assert saved.read_text() == "plonker\nwally\n"

    def test_rules_file(self, corpus_file, tmp_path, capsys):
        rules = tmp_path / "rules.json"
        main(["-t", str(corpus_file), "--save-rules", str(rules)])
        assert rules.exists()
        capsys.readouterr()

        main(["--load-rules", str(rules), "-c", "4"])
        assert len(capsys.readouterr().out.splitlines()) == 4

    def test_loaded_rules_match_training_run(self, corpus_file, tmp_path, capsys):
        """Test words from loaded rules equal the trained run and skip corpus words."""
        rules = tmp_path / "rules.json"
        saved = tmp_path / "training.txt"
        main(["-t", str(corpus_file), "-l", str(saved), "--save-rules", str(rules),
              "-n", "5", "-m", "9", "-c", "20"])
        trained = capsys.readouterr().out.splitlines()

        main(["--load-rules", str(rules), "-n", "5", "-m", "9", "-c", "20"])
        loaded = capsys.readouterr().out.splitlines()

        corpus_words = set(saved.read_text().splitlines())
        assert loaded == trained
        assert len(loaded) == 20
        assert corpus_words.isdisjoint(loaded)

    def test_malformed_rules_file(self, corpus_file, tmp_path, capsys):
        """Test a bad rules file is reported and later flags still run."""
        bad = tmp_path / "bad.json"
        bad.write_text("not json")
        code = main(["--load-rules", str(bad), "-t", str(corpus_file), "-c", "3"])
        captured = capsys.readouterr()
        assert code == 0
        assert "Invalid rules file" in captured.err
        assert len(captured.out.splitlines()) == 3

    def test_rules_file_without_buckets(self, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text('{"words_learned": 2}')
        assert main(["--load-rules", str(bad), "-c", "1"]) == 0
        captured = capsys.readouterr()
        assert "Invalid rules file" in captured.err
        assert "No character usage rules" in captured.err


class TestCLIVerbosity:
    """Tests for -v and -w."""

    def test_quiet_by_default(self, corpus_file, capsys):
        main(["-t", str(corpus_file), "-c", "2"])
        assert capsys.readouterr().err == ""

    def test_very_verbose(self, corpus_file, capsys):
        main(["-w", "-t", str(corpus_file), "-c", "2"])
        err = capsys.readouterr().err
        assert "Learned" in err
        assert "Generated 2 words" in err

    def test_verbose(self, corpus_file, capsys):
        main(["-v", "-t", str(corpus_file), "-c", "2"])
        assert "Creating char chain" in capsys.readouterr().err

    def test_verbosity_does_not_change_output(self, corpus_file, capsys):
        main(["-t", str(corpus_file), "-c", "6"])
        quiet = capsys.readouterr().out
        main(["-v", "-t", str(corpus_file), "-c", "6"])
        assert capsys.readouterr().out == quiet


class TestParseInt:
    """Tests for lenient integer parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("12", 12),
        (" 7", 7),
        ("9abc", 9),
        ("-3", -3),
        ("abc", 0),
        ("", 0),
    ])
    def test_parse_int(self, value, expected):
        assert parse_int(value) == expected
