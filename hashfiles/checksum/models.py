"""Data models for the checksum pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FileEntry:
    """A regular file discovered beneath a traversal root."""

    path: Path
    rel_path: str  # forward-slash, relative to root
    depth: int

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"depth must be >= 0, got {self.depth}")


@dataclass(frozen=True)
class DigestRecord:
    """One line of a sum file."""

    digest: str
    path: str

    def __post_init__(self) -> None:
        if not self.digest or " " in self.digest:
            raise ValueError(f"digest must be a non-empty token, got {self.digest!r}")
        if not self.path:
            raise ValueError("path must not be empty")


@dataclass(frozen=True)
class HashOutcome:
    """What a worker produced for one input: a digest or an error, never both."""

    index: int
    path: Path
    digest: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PoolResult(Generic[T]):
    """Index-addressed results of one pool run.

    ``outcomes[i]`` belongs to input ``i``. Slots are ``None`` only when the
    pool stopped admitting work after a failure.
    """

    outcomes: list[T | None] = field(default_factory=list)
    aborted: bool = False

    @property
    def completed(self) -> list[T]:
        return [o for o in self.outcomes if o is not None]
