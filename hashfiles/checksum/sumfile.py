"""Reading and writing ``<algo>sum.txt`` files.

Format: one ``"<hex digest> <relative path>"`` record per line, paths with
forward slashes, no header. Blank lines are ignored on read.

Paths are stored as the raw bytes the filesystem reported. Names that are
not valid UTF-8 travel through Python as surrogate escapes and are written
back byte for byte, so a sum file always names files that exist on disk.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from hashfiles.checksum.models import DigestRecord
from hashfiles.errors import ParseError

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"
_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def sum_file_name(algorithm: str) -> str:
    return f"{algorithm.lower()}sum.txt"


def to_posix(path: str, sep: str = os.sep) -> str:
    """Replace the host separator with ``/``.

    On POSIX a backslash is an ordinary filename character and is kept.
    """
    if sep != "/":
        return path.replace(sep, "/")
    return path


def display_path(path: str) -> str:
    """Printable form of a stored path; undecodable bytes become U+FFFD."""
    try:
        raw = path.encode(_ENCODING, _ERRORS)
    except UnicodeEncodeError:
        raw = path.encode(_ENCODING, "backslashreplace")
    return raw.decode(_ENCODING, "replace")


def format_records(records: Iterable[DigestRecord]) -> str:
    return "".join(f"{r.digest} {to_posix(r.path)}\n" for r in records)


def write_sum_file(path: Path, records: Iterable[DigestRecord]) -> None:
    """Truncate *path* and write all records in order.

    The whole file is encoded before *path* is opened, so an unencodable
    name leaves the previous sum file untouched.
    """
    data = format_records(records).encode(_ENCODING, _ERRORS)
    path.write_bytes(data)


def _escapes_root(rel: str, sep: str = os.sep) -> bool:
    posix = to_posix(rel, sep)
    if posix.startswith("/"):
        return True
    if sep == "\\" and _DRIVE_RE.match(posix):
        return True
    return ".." in posix.split("/")


def parse_line(line: str, source: str | Path = "<string>", line_no: int = 0) -> DigestRecord:
    """Split one non-blank line on its first space."""
    digest, sep, rel = line.partition(" ")
    if not sep:
        raise ParseError(source, line_no, "missing space between digest and path")
    if not digest:
        raise ParseError(source, line_no, "empty digest")
    if not rel:
        raise ParseError(source, line_no, "empty path")
    if _escapes_root(rel):
        raise ParseError(
            source, line_no, f"path escapes the root directory: {display_path(rel)!r}"
        )
    return DigestRecord(digest=digest, path=to_posix(rel))


def iter_records(path: Path) -> Iterator[DigestRecord]:
    """Stream records from a sum file, skipping blank lines."""
    with open(path, encoding=_ENCODING, errors=_ERRORS, newline="") as f:
        for line_no, raw in enumerate(f, start=1):
            line = raw.rstrip("\r\n")
            if not line.strip():
                continue
            yield parse_line(line, path, line_no)


def read_sum_file(path: Path) -> list[DigestRecord]:
    return list(iter_records(path))
