"""Tests for the CLI main module."""

import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from clipboard_cleaner.api.sanitizer import ProfileSet
from clipboard_cleaner.cli.main import (
    EXIT_CONFIG_ERROR,
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    create_argument_parser,
    format_profiles,
    main,
    read_input,
)
from clipboard_cleaner.shared.loader import CONFIG_ENV_VAR

CONFIG = """
filters:
  control:
    ranges:
      - {start: 0x00, end: 0x08}
  nbsp:
    ranges:
      - {single: 0xa0}
profiles:
  - name: strip
    display_name: Strip
    description: Removes control characters.
    transformations:
      - filters: [{ref: control}]
        action: remove
      - filters: [{ref: nbsp}]
        action: {replace: " "}
  - name: reveal
    transformations:
      - filters: [{ref: nbsp}]
        action: {replace: "<{uni-codepoint}>"}
default_profile: strip
"""


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "clipboard-cleaner.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def input_path(tmp_path):
    path = tmp_path / "clipboard.bin"
    path.write_bytes("a\xa0b".encode("utf-8"))
    return path


class TestArgumentParser:
    """Test argument parsing."""

    def test_sanitize_defaults(self):
        """Test default sanitize arguments."""
        args = create_argument_parser().parse_args(["sanitize"])
        assert args.command == "sanitize"
        assert args.path == "-"
        assert args.target is None
        assert args.encoding is None
        assert args.profile is None
        assert args.stats is False

    def test_sanitize_options(self):
        """Test sanitize options."""
        args = create_argument_parser().parse_args([
            "-v", "sanitize", "in.bin", "--target", "STRING", "-e", "utf-8",
            "-p", "reveal", "--config", "c.yaml", "--stats",
        ])
        assert args.verbose is True
        assert args.path == "in.bin"
        assert args.target == "STRING"
        assert args.encoding == "utf-8"
        assert args.profile == "reveal"
        assert args.config == Path("c.yaml")
        assert args.stats is True

    def test_profiles_format_choices(self):
        """Test that only known formats are accepted."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["profiles", "--format", "xml"])

    def test_resolve_requires_target(self):
        """Test that resolve needs at least one target."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["resolve"])


class TestReadInput:
    """Test reading clipboard bytes."""

    def test_read_file(self, input_path):
        """Test reading from a file."""
        assert read_input(str(input_path)) == "a\xa0b".encode("utf-8")

    def test_read_stdin(self):
        """Test reading from stdin for '-'."""
        fake_stdin = io.TextIOWrapper(io.BytesIO(b"raw\x01"))
        with patch("sys.stdin", fake_stdin):
            assert read_input("-") == b"raw\x01"


class TestFormatProfiles:
    """Test profile listing output."""

    def test_text(self, config_path):
        """Test the text listing marks the default profile."""
        from clipboard_cleaner.shared.loader import load_config_file

        output = format_profiles(ProfileSet.load(load_config_file(config_path)), "text")
        lines = output.splitlines()
        assert lines[0].startswith("* strip")
        assert "Strip" in lines[0]
        assert "Removes control characters." in lines[1]
        assert lines[2].startswith("  reveal")

    def test_json(self, config_path):
        """Test the JSON listing."""
        from clipboard_cleaner.shared.loader import load_config_file

        data = json.loads(format_profiles(ProfileSet.load(load_config_file(config_path)), "json"))
        assert [entry["name"] for entry in data] == ["strip", "reveal"]
        assert data[0]["default"] is True
        assert data[0]["steps"] == 2
        assert data[1]["display_name"] == "reveal"


class TestMain:
    """Test the main entry point."""

    def test_no_command(self, capsys):
        """Test that running without a command prints help."""
        assert main([]) == EXIT_FAILURE
        assert "usage" in capsys.readouterr().out

    def test_sanitize_file(self, capsys, config_path, input_path):
        """Test sanitizing a file with the default profile."""
        exit_code = main(["sanitize", str(input_path), "--config", str(config_path)])

        assert exit_code == EXIT_OK
        assert capsys.readouterr().out == "a b"

    def test_sanitize_named_profile(self, capsys, config_path, input_path):
        """Test sanitizing with a named profile."""
        exit_code = main([
            "sanitize", str(input_path), "--config", str(config_path), "--profile", "reveal",
        ])
        assert exit_code == EXIT_OK
        assert capsys.readouterr().out == "a<U+a0>b"

    def test_sanitize_reports_control_characters(self, capsys, config_path, tmp_path):
        """Test that the display-pass warning goes to stderr."""
        path = tmp_path / "ctrl.bin"
        path.write_bytes(b"x\x01y")

        exit_code = main(["sanitize", str(path), "--config", str(config_path)])

        captured = capsys.readouterr()
        assert exit_code == EXIT_OK
        assert captured.out == "x" + chr(0xFFFD) + "y"
        assert "Control characters have been replaced" in captured.err

    def test_sanitize_decode_failure(self, capsys, config_path, tmp_path):
        """Test that undecodable data exits with status 1."""
        path = tmp_path / "bad.bin"
        path.write_bytes(b"\xff\xfe\xfd")

        exit_code = main([
            "sanitize", str(path), "--config", str(config_path), "--target", "UTF8_STRING",
        ])

        captured = capsys.readouterr()
        assert exit_code == EXIT_FAILURE
        assert captured.out == ""
        assert "Could not convert data to 'utf-8'" in captured.err

    def test_sanitize_missing_input(self, capsys, config_path, tmp_path):
        """Test a missing input file."""
        exit_code = main(["sanitize", str(tmp_path / "absent"), "--config", str(config_path)])
        assert exit_code == EXIT_FAILURE
        assert "Error reading input" in capsys.readouterr().err

    def test_sanitize_unknown_profile(self, capsys, config_path, input_path):
        """Test an unknown profile name."""
        exit_code = main([
            "sanitize", str(input_path), "--config", str(config_path), "-p", "nope",
        ])
        assert exit_code == EXIT_FAILURE
        assert "Unknown transformation profile" in capsys.readouterr().err

    def test_sanitize_stats(self, capsys, config_path, input_path):
        """Test that --stats prints a timing report to stderr."""
        exit_code = main([
            "sanitize", str(input_path), "--config", str(config_path), "--stats",
        ])

        captured = capsys.readouterr()
        assert exit_code == EXIT_OK
        assert captured.out == "a b"
        assert "Profiled 1 run(s)" in captured.err
        assert "transform" in captured.err

    def test_sanitize_stdin(self, capsys, config_path):
        """Test reading clipboard data from stdin."""
        fake_stdin = io.TextIOWrapper(io.BytesIO(b"p\xc2\xa0q"))
        with patch("sys.stdin", fake_stdin):
            exit_code = main(["sanitize", "-", "--config", str(config_path)])

        assert exit_code == EXIT_OK
        assert capsys.readouterr().out == "p q"

    def test_missing_config_file(self, capsys, tmp_path, input_path):
        """Test that a missing config file exits with status 2."""
        exit_code = main([
            "sanitize", str(input_path), "--config", str(tmp_path / "absent.yaml"),
        ])
        assert exit_code == EXIT_CONFIG_ERROR
        assert capsys.readouterr().err.startswith("Error: Configuration file not found")

    def test_invalid_config_file(self, capsys, tmp_path):
        """Test that a configuration error exits with status 2."""
        path = tmp_path / "bad.yaml"
        path.write_text(
            "profiles:\n  - name: bad\n    transformations:\n"
            "      - filters: [{ref: missing}]\n        action: remove\n",
            encoding="utf-8",
        )
        exit_code = main(["check-config", "--config", str(path)])

        assert exit_code == EXIT_CONFIG_ERROR
        assert "Unknown filter reference 'missing'" in capsys.readouterr().err

    def test_check_config(self, capsys, config_path):
        """Test validating a good configuration file."""
        exit_code = main(["check-config", "--config", str(config_path)])
        assert exit_code == EXIT_OK
        assert "Configuration OK" in capsys.readouterr().out

    def test_check_config_default(self, capsys, tmp_path, monkeypatch):
        """Test validating the bundled configuration when no file exists."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        with patch("clipboard_cleaner.shared.loader.default_search_paths",
                   return_value=[tmp_path / "none"]):
            exit_code = main(["check-config"])

        assert exit_code == EXIT_OK
        assert "built-in default" in capsys.readouterr().out

    def test_profiles(self, capsys, config_path):
        """Test listing profiles."""
        exit_code = main(["profiles", "--config", str(config_path), "--format", "json"])
        assert exit_code == EXIT_OK
        names = [entry["name"] for entry in json.loads(capsys.readouterr().out)]
        assert names == ["strip", "reveal"]

    def test_resolve(self, capsys):
        """Test resolving target names."""
        exit_code = main(["resolve", "UTF8_STRING", "text/plain;charset=utf-16le"])

        assert exit_code == EXIT_OK
        assert capsys.readouterr().out.splitlines() == [
            "UTF8_STRING\tutf-8",
            "text/plain;charset=utf-16le\tutf-16le",
        ]

    def test_resolve_unknown(self, capsys):
        """Test that unresolvable targets give status 1."""
        exit_code = main(["resolve", "image/png"])
        assert exit_code == EXIT_FAILURE
        assert capsys.readouterr().out.strip() == "image/png\t-"

    def test_keyboard_interrupt(self, capsys):
        """Test the exit status when interrupted."""
        with patch("clipboard_cleaner.cli.main.cmd_resolve", side_effect=KeyboardInterrupt):
            exit_code = main(["resolve", "STRING"])
        assert exit_code == EXIT_INTERRUPTED
        assert "interrupted" in capsys.readouterr().err
