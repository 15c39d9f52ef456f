"""Deterministic, shallow-first listing of the files beneath a root."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from hashfiles.checksum.models import FileEntry
from hashfiles.errors import TraversalError

logger = logging.getLogger(__name__)


def _scan(directory: str | Path) -> list[os.DirEntry]:
    """Entries of one directory in lexical name order."""
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise TraversalError(directory, e) from e


def _walk(
    root: Path, ignore: set[str], exclude_names: set[str]
) -> Iterator[os.DirEntry]:
    """Pre-order walk yielding regular files; directory symlinks are not followed."""
    stack = [iter(_scan(root))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        if entry.name in ignore:
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                stack.append(iter(_scan(entry.path)))
                continue
            is_file = entry.is_file()
        except OSError as e:
            raise TraversalError(entry.path, e) from e
        if not is_file:
            logger.debug("Skipping non-regular entry %s", entry.path)
            continue
        if len(stack) == 1 and entry.name in exclude_names:
            continue
        yield entry


def list_files(
    root: str | Path,
    ignore_patterns: Iterable[str] = (),
    exclude_names: Iterable[str] = (),
) -> list[FileEntry]:
    """Return every regular file under *root*, shallower files first.

    Siblings are discovered in lexical order and the result is stable-sorted
    by depth, so files of equal depth keep their discovery order. Entries
    named in *ignore_patterns* are skipped at any level (directories are
    pruned). Files named in *exclude_names* are skipped only directly under
    *root*. Any listing failure aborts the whole walk with TraversalError.
    """
    root = Path(root)
    if not root.exists():
        raise TraversalError(root, FileNotFoundError("no such directory"))
    if not root.is_dir():
        raise TraversalError(root, NotADirectoryError("not a directory"))
    root = root.resolve()

    entries: list[FileEntry] = []
    for dir_entry in _walk(root, set(ignore_patterns), set(exclude_names)):
        path = Path(dir_entry.path)
        rel = path.relative_to(root)
        entries.append(
            FileEntry(path=path, rel_path=rel.as_posix(), depth=len(rel.parts) - 1)
        )

    entries.sort(key=lambda e: e.depth)
    logger.debug("Listed %d files under %s", len(entries), root)
    return entries
