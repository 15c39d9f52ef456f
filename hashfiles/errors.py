"""Exception hierarchy for hashfiles."""

from __future__ import annotations

from pathlib import Path


class HashfilesError(Exception):
    """Base class for every fatal hashfiles error."""


class ConfigError(HashfilesError):
    """Invalid configuration: unknown algorithm, bad worker count, broken config file."""


class TraversalError(HashfilesError):
    """The root directory (or an entry beneath it) could not be listed."""

    def __init__(self, path: str | Path, cause: Exception | None = None) -> None:
        self.path = str(path)
        message = f"cannot traverse {self.path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.__cause__ = cause


class FileHashError(HashfilesError):
    """Wraps an OSError raised while opening or reading a file."""

    def __init__(self, path: str | Path, cause: Exception) -> None:
        self.path = str(path)
        super().__init__(f"failed to hash {self.path}: {cause}")
        self.__cause__ = cause


class ParseError(HashfilesError):
    """A sum file line that cannot be split into digest and path."""

    def __init__(self, source: str | Path, line_no: int, reason: str) -> None:
        self.source = str(source)
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"{self.source}:{line_no}: {reason}")
