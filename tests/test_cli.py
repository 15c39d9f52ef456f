"""Tests for the hashfiles CLI."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from hashfiles.cli import app

runner = CliRunner()

A_MD5 = "5d41402abc4b2a76b9719d911017c592"
B_MD5 = "7d793037a0760186574b0282f2f435e7"


def _hash(root: Path, *extra: str):
    return runner.invoke(app, ["hash", "--dir", str(root), *extra])


def _verify(root: Path, *extra: str):
    return runner.invoke(app, ["verify", "--dir", str(root), *extra])


# ── hashfiles hash ───────────────────────────────────────────────────


def test_hash_default_algorithm_is_md5(sample_tree: Path):
    result = _hash(sample_tree, "-n", "2")
    assert result.exit_code == 0, result.output
    assert (sample_tree / "md5sum.txt").read_text() == f"{A_MD5} a.txt\n{B_MD5} sub/b.txt\n"
    assert "All files hashed" in result.output


def test_hash_short_flags(sample_tree: Path):
    result = runner.invoke(app, ["hash", "-d", str(sample_tree), "-a", "sha1,md5", "-n", "1"])
    assert result.exit_code == 0, result.output
    assert (sample_tree / "sha1sum.txt").is_file()
    assert (sample_tree / "md5sum.txt").is_file()


def test_hash_chunked_strategy(sample_tree: Path):
    result = _hash(sample_tree, "--strategy", "chunked", "-n", "1")
    assert result.exit_code == 0, result.output
    assert (sample_tree / "md5sum.txt").is_file()


def test_hash_unknown_algorithm_exits_nonzero(sample_tree: Path):
    result = _hash(sample_tree, "-a", "md5,nope")
    assert result.exit_code == 1
    assert "unsupported algorithm" in result.output
    assert not (sample_tree / "md5sum.txt").exists()


def test_hash_missing_directory_exits_nonzero(tmp_path: Path):
    result = _hash(tmp_path / "missing")
    assert result.exit_code == 1
    assert "Error" in result.output


def test_hash_invalid_parallel_exits_nonzero(sample_tree: Path):
    result = _hash(sample_tree, "-n", "0")
    assert result.exit_code == 1
    assert "worker count" in result.output


def test_hash_invalid_strategy_exits_nonzero(sample_tree: Path):
    result = _hash(sample_tree, "--strategy", "random")
    assert result.exit_code == 1


# ── hashfiles verify ─────────────────────────────────────────────────


def test_verify_clean_tree(sample_tree: Path):
    _hash(sample_tree)
    result = _verify(sample_tree, "--verbose")
    assert result.exit_code == 0, result.output
    assert "Not Matched" not in result.output
    assert "All files verified" in result.output


def test_verify_reports_mismatch_but_exits_zero(sample_tree: Path):
    _hash(sample_tree)
    (sample_tree / "a.txt").write_text("tampered")

    result = _verify(sample_tree)
    assert result.exit_code == 0
    assert result.output.count("[Not Matched] md5 [1]: a.txt") == 1


def test_verify_fail_on_mismatch(sample_tree: Path):
    _hash(sample_tree)
    (sample_tree / "a.txt").write_text("tampered")

    result = _verify(sample_tree, "--fail-on-mismatch")
    assert result.exit_code == 1


def test_verify_fail_on_mismatch_clean_tree(sample_tree: Path):
    _hash(sample_tree)
    result = _verify(sample_tree, "--fail-on-mismatch")
    assert result.exit_code == 0


def test_verify_without_sum_file(sample_tree: Path):
    result = _verify(sample_tree)
    assert result.exit_code == 1
    assert "md5sum.txt" in result.output


def test_verify_malformed_sum_file(sample_tree: Path):
    (sample_tree / "md5sum.txt").write_text("no-separator\n")
    result = _verify(sample_tree)
    assert result.exit_code == 1
    assert "missing space" in result.output


def test_verify_missing_file_aborts(sample_tree: Path):
    _hash(sample_tree)
    (sample_tree / "sub" / "b.txt").unlink()
    result = _verify(sample_tree)
    assert result.exit_code == 1
    assert "failed to hash" in result.output


def test_verify_keep_going_summarizes_failures(sample_tree: Path):
    _hash(sample_tree)
    (sample_tree / "sub" / "b.txt").unlink()
    result = _verify(sample_tree, "--keep-going")
    assert result.exit_code == 1
    assert "failed:" in result.output
    assert "All files verified" in result.output


# ── Config ───────────────────────────────────────────────────────────


def test_config_file_sets_algorithms(sample_tree: Path, tmp_path_factory):
    cfg = tmp_path_factory.mktemp("cfg") / "hashfiles.yaml"
    cfg.write_text("hashing:\n  algorithms: sha1\n  parallel: 2\n")

    result = runner.invoke(app, ["--config", str(cfg), "hash", "-d", str(sample_tree)])
    assert result.exit_code == 0, result.output
    assert (sample_tree / "sha1sum.txt").is_file()
    assert not (sample_tree / "md5sum.txt").exists()


def test_config_file_fail_on_mismatch(sample_tree: Path, tmp_path_factory):
    cfg = tmp_path_factory.mktemp("cfg") / "hashfiles.yaml"
    cfg.write_text("verify:\n  fail_on_mismatch: true\n")
    _hash(sample_tree)
    (sample_tree / "a.txt").write_text("tampered")

    result = runner.invoke(app, ["-c", str(cfg), "verify", "-d", str(sample_tree)])
    assert result.exit_code == 1
    result = runner.invoke(
        app, ["-c", str(cfg), "verify", "-d", str(sample_tree), "--no-fail-on-mismatch"]
    )
    assert result.exit_code == 0


def test_missing_config_file_exits_nonzero(sample_tree: Path, tmp_path: Path):
    result = runner.invoke(app, ["--config", str(tmp_path / "none.yaml"), "hash", "-d", str(sample_tree)])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_config_show():
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "algorithms" in result.output


def test_config_init(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 0
    assert (tmp_path / "hashfiles.yaml").is_file()

    again = runner.invoke(app, ["config", "init"])
    assert again.exit_code == 1
    assert "already exists" in again.output

    forced = runner.invoke(app, ["config", "init", "--force"])
    assert forced.exit_code == 0


def test_verbose_overrides_quiet_log_level(sample_tree: Path, tmp_path_factory):
    cfg = tmp_path_factory.mktemp("cfg") / "quiet.yaml"
    cfg.write_text("log_level: error\n")

    result = runner.invoke(app, ["-c", str(cfg), "hash", "-d", str(sample_tree)])
    assert result.exit_code == 0, result.output
    assert logging.getLogger("hashfiles").level == logging.ERROR

    result = runner.invoke(app, ["-c", str(cfg), "hash", "-d", str(sample_tree), "--verbose"])
    assert result.exit_code == 0, result.output
    assert logging.getLogger("hashfiles").level == logging.DEBUG


def test_hash_non_utf8_file_name(tmp_path: Path):
    if sys.getfilesystemencoding().lower() not in ("utf-8", "utf8"):
        pytest.skip("filesystem encoding is not UTF-8")
    try:
        with open(os.path.join(os.fsencode(tmp_path), b"caf\xe9.txt"), "wb") as f:
            f.write(b"hello")
    except OSError:
        pytest.skip("filesystem rejects non-UTF-8 names")

    result = _hash(tmp_path)
    assert result.exit_code == 0, result.output
    assert (tmp_path / "md5sum.txt").read_bytes() == f"{A_MD5} ".encode() + b"caf\xe9.txt\n"

    result = _verify(tmp_path, "--fail-on-mismatch")
    assert result.exit_code == 0, result.output


def test_verify_non_utf8_sum_file_exits_cleanly(tmp_path: Path):
    (tmp_path / "md5sum.txt").write_bytes(b"abc caf\xe9.txt\n")
    result = _verify(tmp_path)
    assert result.exit_code == 1
    assert "Error" in result.output
    assert not isinstance(result.exception, UnicodeError)
