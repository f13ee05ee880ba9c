"""Tests for the CLI main module."""

import json
import re
from unittest.mock import patch

import pytest

from markup_tree.cli.main import create_argument_parser, format_results, main
from markup_tree.api import parse_string


@pytest.fixture
def markup_file(tmp_path):
    """Create a well-formed markup file."""
    path = tmp_path / "ui.markup"
    path.write_text('<column gap="2"><text>Hi</text></column>\n', encoding="utf-8")
    return path


@pytest.fixture
def broken_file(tmp_path):
    """Create a markup file with crossed close tags."""
    path = tmp_path / "broken.markup"
    path.write_text("<a><b></a></b>", encoding="utf-8")
    return path


class TestArgumentParser:
    """Test argument parsing."""

    def test_parse_command_defaults(self, markup_file):
        """Test default options of the parse command."""
        args = create_argument_parser().parse_args(["parse", str(markup_file)])

        assert args.command == "parse"
        assert args.paths == [markup_file]
        assert args.format == "json"
        assert args.strict is False
        assert args.output is None

    def test_version(self, capsys):
        """Test the version flag."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out

    def test_no_command(self, capsys):
        """Test running without a command."""
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()


class TestParseCommand:
    """Test the parse command."""

    def test_json_output(self, markup_file, capsys):
        """Test the default JSON output."""
        assert main(["parse", str(markup_file)]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload[0]["success"] is True
        assert payload[0]["source"] == str(markup_file)
        assert payload[0]["tree"]["attrs"] == {"gap": "2"}

    def test_markup_output(self, markup_file, capsys):
        """Test re-rendered markup output."""
        assert main(["parse", "--format", "markup", str(markup_file)]) == 0

        assert capsys.readouterr().out.strip() == '<column gap="2"><text>Hi</text></column>'

    def test_text_output(self, markup_file, broken_file, capsys):
        """Test the human-readable summary."""
        assert main(["parse", "-f", "text", str(markup_file), str(broken_file)]) == 1

        out = capsys.readouterr().out
        assert "Parsed 2 files, 1 successful" in out
        assert f"✓ {markup_file}" in out
        assert f"✗ {broken_file}" in out
        assert "Mismatched close tag" in out

    def test_failure_exit_code(self, broken_file, capsys):
        """Test that a failed file gives exit code 1."""
        assert main(["parse", str(broken_file)]) == 1

        payload = json.loads(capsys.readouterr().out)
        assert payload[0]["success"] is False
        assert payload[0]["tree"] is None
        assert "Mismatched close tag" in payload[0]["error"]

    def test_missing_file(self, tmp_path, capsys):
        """Test a path that does not exist."""
        assert main(["parse", str(tmp_path / "nope.markup")]) == 1

        payload = json.loads(capsys.readouterr().out)
        assert payload[0]["success"] is False

    def test_strict_flag(self, tmp_path, capsys):
        """Test strict close tag handling."""
        path = tmp_path / "open.markup"
        path.write_text("<a><b>x</b>", encoding="utf-8")

        assert main(["parse", str(path)]) == 0
        assert main(["parse", "--strict", str(path)]) == 1

    def test_output_file(self, markup_file, tmp_path, capsys):
        """Test writing results to a file."""
        output = tmp_path / "out.json"

        assert main(["parse", "-o", str(output), str(markup_file)]) == 0
        assert json.loads(output.read_text(encoding="utf-8"))[0]["success"] is True
        assert "Results written to" in capsys.readouterr().err


class TestIdsCommand:
    """Test the ids command."""

    def test_prints_paths_and_ids(self, markup_file, capsys):
        """Test one line per node with its path and id."""
        assert main(["ids", str(markup_file)]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == f"# {markup_file}"
        assert re.fullmatch(r"/\tcolumn-[0-9a-f]{6}\tcolumn", lines[1])
        assert re.fullmatch(r"/0\ttext-[0-9a-f]{6}\ttext", lines[2])
        assert re.fullmatch(r"/0/0\tplain-[0-9a-f]{6}\tplain", lines[3])

    def test_config_file(self, markup_file, tmp_path, capsys):
        """Test a configured id attribute and digest length."""
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps({"tree": {"id_attribute": "key", "id_digest_length": 8}}),
            encoding="utf-8"
        )

        assert main(["--config", str(config_path), "ids", str(markup_file)]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert re.fullmatch(r"/\tcolumn-[0-9a-f]{8}\tcolumn", lines[1])

    def test_failed_file(self, broken_file, capsys):
        """Test reporting a file that does not parse."""
        assert main(["ids", str(broken_file)]) == 1
        assert "Mismatched close tag" in capsys.readouterr().err


class TestProfileCommand:
    """Test the profile command."""

    def test_profile(self, markup_file, capsys):
        """Test JSON profiling report."""
        assert main(["profile", "-n", "2", str(markup_file)]) == 0

        report = json.loads(capsys.readouterr().out)[str(markup_file)]
        assert report["summary"]["session_count"] == 2
        assert set(report["summary"]["stage_averages_ms"]) == {"parse", "build", "index"}

    def test_invalid_iterations(self, markup_file, capsys):
        """Test a non-positive iteration count."""
        assert main(["profile", "-n", "0", str(markup_file)]) == 1

    def test_broken_file(self, broken_file, capsys):
        """Test profiling markup that does not parse."""
        assert main(["profile", str(broken_file)]) == 1
        assert "Mismatched close tag" in capsys.readouterr().err


class TestMain:
    """Test main entry point behavior."""

    def test_invalid_config_file(self, markup_file, tmp_path, capsys):
        """Test a configuration that does not validate."""
        config_path = tmp_path / "config.json"
        config_path.write_text('{"tree": {"id_attribute": "text"}}', encoding="utf-8")

        assert main(["--config", str(config_path), "parse", str(markup_file)]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_missing_config_file(self, markup_file, tmp_path, capsys):
        """Test a configuration path that does not exist."""
        assert main(["--config", str(tmp_path / "none.json"), "parse", str(markup_file)]) == 1

    def test_keyboard_interrupt(self, markup_file, capsys):
        """Test exit code on interrupt."""
        with patch("markup_tree.cli.main.cmd_parse", side_effect=KeyboardInterrupt):
            assert main(["parse", str(markup_file)]) == 130

        assert "interrupted" in capsys.readouterr().err

    def test_format_results_markup_skips_failures(self):
        """Test markup formatting of mixed results."""
        ok = parse_string("<a>x</a>")

        assert format_results([ok], "markup") == "<a>x</a>"
        assert format_results([], "text") == "No results to display."
