"""Shared test fixtures for hashfiles."""

import logging

import pytest

from hashfiles.config.models import HashfilesConfig, HashingConfig


@pytest.fixture(autouse=True)
def _reset_hashfiles_logger():
    """CLI tests install handlers on the package logger; undo that after each test."""
    logger = logging.getLogger("hashfiles")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def sample_config():
    return HashfilesConfig()


@pytest.fixture
def small_config():
    """Two workers so ordering is exercised even on single-CPU hosts."""
    return HashfilesConfig(hashing=HashingConfig(parallel=2))


@pytest.fixture
def sample_tree(tmp_path):
    """root/a.txt = "hello", root/sub/b.txt = "world"."""
    (tmp_path / "a.txt").write_bytes(b"hello")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_bytes(b"world")
    return tmp_path


@pytest.fixture
def nested_tree(tmp_path):
    """Files at several depths, created deliberately out of order."""
    (tmp_path / "d1" / "d2").mkdir(parents=True)
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    (tmp_path / "d1" / "d2" / "deep.txt").write_text("deep")
    (tmp_path / "b" / "y.txt").write_text("y")
    (tmp_path / "top.txt").write_text("top")
    (tmp_path / "d1" / "mid.txt").write_text("mid")
    (tmp_path / "a" / "z.txt").write_text("z")
    return tmp_path
