# tests/unit/test_main.py - v1
"""Tests for main.py: CLI entry point."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from cee3.main import _build_parser, _parse_metadata, main


@pytest.fixture(autouse=True)
def _restore_cee3_logger():
    root = logging.getLogger("cee3")
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def cli_env(monkeypatch, tmp_path: Path) -> Path:
    """Point the CLI at a local object store under tmp_path."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    for var in ("AWS_PROFILE", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY",
                "S3_ANONYMOUS", "LOG_FILE", "CACHE_ENABLED"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("OBJECT_STORE_BACKEND", "local")
    monkeypatch.setenv("LOCAL_STORE_ROOT", str(tmp_path / "remote"))
    monkeypatch.setenv("CACHE_BACKEND", "sidecar")
    return tmp_path


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "a.csv").write_bytes(b"a,b\n1,2\n")
    (directory / "b.csv").write_bytes(b"a,b\n3,4\n")
    return directory


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_upload_subcommand(self):
        args = _build_parser().parse_args(
            ["upload", "f.csv", "bucket", "in/f.csv", "--force", "--meta", "a=1"],
        )
        assert args.command == "upload"
        assert args.file == Path("f.csv")
        assert args.key == "in/f.csv"
        assert args.force is True
        assert args.meta == ["a=1"]

    def test_batch_defaults(self):
        args = _build_parser().parse_args(["batch", "/data", "bucket"])
        assert args.directory == Path("/data")
        assert args.prefix == ""
        assert args.pattern is None
        assert args.recursive is None
        assert args.force is False

    def test_batch_options(self):
        args = _build_parser().parse_args(
            ["batch", "/data", "bucket", "-p", "in", "--pattern", "*.csv", "-r"],
        )
        assert args.prefix == "in"
        assert args.pattern == "*.csv"
        assert args.recursive is True

    def test_cache_subcommand(self):
        args = _build_parser().parse_args(["cache", "f.csv", "--clear"])
        assert args.clear is True


class TestParseMetadata:
    def test_pairs(self):
        assert _parse_metadata(["a=1", "b=x=y"]) == {"a": "1", "b": "x=y"}

    def test_empty(self):
        assert _parse_metadata([]) is None

    @pytest.mark.parametrize("pair", ["novalue", "=1"])
    def test_invalid(self, pair):
        with pytest.raises(ValueError):
            _parse_metadata([pair])


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestMainCommands:
    def test_no_command(self, cli_env):
        assert main([]) == 1

    def test_upload_then_skip(self, cli_env, data_dir, capsys):
        file = data_dir / "a.csv"
        assert main(["upload", str(file), "bucket", "in/a.csv"]) == 0
        assert "Uploaded: a.csv" in capsys.readouterr().out
        assert (cli_env / "remote" / "bucket" / "in" / "a.csv").is_file()

        assert main(["upload", str(file), "bucket", "in/a.csv"]) == 0
        assert "Skipped (duplicate)" in capsys.readouterr().out

    def test_upload_missing_file(self, cli_env, tmp_path):
        assert main(["upload", str(tmp_path / "missing.csv"), "bucket", "k"]) == 1

    def test_upload_bad_metadata(self, cli_env, data_dir):
        assert main(["upload", str(data_dir / "a.csv"), "bucket", "k", "--meta", "oops"]) == 1

    def test_batch(self, cli_env, data_dir, capsys):
        assert main(["batch", str(data_dir), "bucket", "-p", "in"]) == 0
        out = capsys.readouterr().out
        assert "[1/2] Uploaded: a.csv" in out
        assert "Uploaded:  2" in out
        assert "Failed:    0" in out

        assert main(["batch", str(data_dir), "bucket", "-p", "in"]) == 0
        assert "Skipped:   2" in capsys.readouterr().out

    def test_batch_pattern_from_settings(self, cli_env, data_dir, monkeypatch, capsys):
        (data_dir / "notes.txt").write_text("x")
        monkeypatch.setenv("BATCH_PATTERN", "*.txt")
        assert main(["batch", str(data_dir), "bucket"]) == 0
        assert "Total:     1" in capsys.readouterr().out

    def test_batch_not_a_directory(self, cli_env, tmp_path):
        assert main(["batch", str(tmp_path / "nope"), "bucket"]) == 1

    def test_cache_show_and_clear(self, cli_env, data_dir, capsys):
        file = data_dir / "a.csv"
        main(["upload", str(file), "bucket", "in/a.csv"])
        capsys.readouterr()

        assert main(["cache", str(file)]) == 0
        out = capsys.readouterr().out
        assert "Key:      in/a.csv" in out

        assert main(["cache", str(file), "--clear"]) == 0
        assert "Cache cleared" in capsys.readouterr().out
        assert not (data_dir / ".cee3cache").exists()

    def test_cache_disabled(self, cli_env, data_dir, monkeypatch):
        monkeypatch.setenv("CACHE_ENABLED", "false")
        assert main(["cache", str(data_dir / "a.csv")]) == 1

    def test_hash(self, cli_env, data_dir, capsys):
        file = data_dir / "a.csv"
        assert main(["hash", str(file)]) == 0
        captured = capsys.readouterr()
        assert hashlib.md5(file.read_bytes()).hexdigest() in captured.out
        assert "Calculating hash" in captured.err

    def test_configuration_error(self, cli_env, monkeypatch, capsys):
        monkeypatch.setenv("S3_ACCESS_KEY_ID", "AKIA")
        assert main(["hash", "whatever"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    @pytest.mark.parametrize("var,value", [
        ("HASH_CHUNK_SIZE", "0"),
        ("CACHE_BACKEND", "bogus"),
        ("LOG_FORMAT", "xml"),
    ])
    def test_invalid_setting_value(self, cli_env, data_dir, monkeypatch, capsys, var, value):
        monkeypatch.setenv(var, value)
        assert main(["hash", str(data_dir / "a.csv")]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_keyboard_interrupt(self, cli_env, data_dir):
        with patch("cee3.main._cmd_hash", side_effect=KeyboardInterrupt):
            assert main(["hash", str(data_dir / "a.csv")]) == 130
