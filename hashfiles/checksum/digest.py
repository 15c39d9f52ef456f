"""Algorithm registry and streaming file digests."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import quickxorhash

from hashfiles.checksum.models import HashOutcome
from hashfiles.config.models import DEFAULT_CHUNK_SIZE
from hashfiles.errors import ConfigError


class Hasher(Protocol):
    """Streaming accumulator: feed bytes with update(), read digest() once done."""

    def update(self, data: bytes, /) -> None: ...

    def digest(self) -> bytes: ...


HasherFactory = Callable[[], Hasher]

_REGISTRY: dict[str, HasherFactory] = {
    "md5": hashlib.md5,
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
    "quickxorhash": quickxorhash.quickxorhash,
}

SUPPORTED_ALGORITHMS: tuple[str, ...] = tuple(_REGISTRY)


def get_hasher(name: str) -> HasherFactory:
    """Return the constructor registered for *name* (case-insensitive)."""
    key = name.strip().lower()
    try:
        return _REGISTRY[key]
    except KeyError:
        raise ConfigError(
            f"unsupported algorithm: {name!r} "
            f"(expected one of {', '.join(SUPPORTED_ALGORITHMS)})"
        ) from None


def parse_algorithms(value: str) -> list[str]:
    """Split a comma separated list, normalize names and validate each one.

    All names are checked before returning so a typo fails before any work.
    """
    names = [part.strip().lower() for part in value.split(",")]
    names = [n for n in names if n]
    if not names:
        raise ConfigError("no hash algorithm given")
    for name in names:
        get_hasher(name)
    return list(dict.fromkeys(names))


def hash_file(
    path: str | Path,
    factory: HasherFactory,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """Hex digest of a file, read in *chunk_size* blocks."""
    h = factory()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return h.digest().hex()


def hash_outcome(
    index: int,
    path: Path,
    factory: HasherFactory,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> HashOutcome:
    """Worker entry point: never raises for I/O failures, reports them instead."""
    try:
        digest = hash_file(path, factory, chunk_size)
    except OSError as e:
        return HashOutcome(index=index, path=path, error=e)
    return HashOutcome(index=index, path=path, digest=digest)
