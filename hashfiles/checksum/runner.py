"""Hash and verify passes over a directory tree."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, Field

from hashfiles.checksum.digest import (
    SUPPORTED_ALGORITHMS,
    get_hasher,
    hash_outcome,
    parse_algorithms,
)
from hashfiles.checksum.models import DigestRecord, FileEntry, HashOutcome
from hashfiles.checksum.pool import WorkerPool
from hashfiles.checksum.sumfile import (
    display_path,
    read_sum_file,
    sum_file_name,
    write_sum_file,
)
from hashfiles.checksum.traversal import list_files
from hashfiles.config.models import HashfilesConfig
from hashfiles.errors import FileHashError, TraversalError

logger = logging.getLogger(__name__)


class FileFailure(BaseModel):
    """A file that could not be read during a pass."""

    path: str
    error: str


class Mismatch(BaseModel):
    """A recorded digest that no longer matches the file on disk."""

    index: int  # 1-based position in the sum file
    path: str
    expected: str
    actual: str


class AlgorithmHashResult(BaseModel):
    algorithm: str
    file_count: int = 0
    sum_file: str = ""
    elapsed: float = 0.0
    failures: list[FileFailure] = Field(default_factory=list)


class HashReport(BaseModel):
    """Outcome of one hash run across all requested algorithms."""

    root: str
    results: list[AlgorithmHashResult] = Field(default_factory=list)
    elapsed: float = 0.0

    @property
    def failure_count(self) -> int:
        return sum(len(r.failures) for r in self.results)


class AlgorithmVerifyResult(BaseModel):
    algorithm: str
    total: int = 0
    mismatches: list[Mismatch] = Field(default_factory=list)
    elapsed: float = 0.0
    failures: list[FileFailure] = Field(default_factory=list)

    @property
    def unmatched(self) -> int:
        return len(self.mismatches)


class VerifyReport(BaseModel):
    """Outcome of one verify run across all requested algorithms."""

    root: str
    results: list[AlgorithmVerifyResult] = Field(default_factory=list)
    elapsed: float = 0.0

    @property
    def total(self) -> int:
        return sum(r.total for r in self.results)

    @property
    def unmatched(self) -> int:
        return sum(r.unmatched for r in self.results)

    @property
    def failure_count(self) -> int:
        return sum(len(r.failures) for r in self.results)


class ChecksumRunner:
    """Drives traversal, the worker pool and the sum file codec.

    Algorithms run one after another; each one finishes completely (every
    worker done) before its sum file is written or the next one starts.
    Whether a per-file read failure aborts the run or is collected into the
    report is decided here from ``hashing.error_policy``.
    """

    def __init__(self, config: HashfilesConfig | None = None) -> None:
        self.config = config or HashfilesConfig()
        hashing = self.config.hashing
        self.pool = WorkerPool(hashing.parallel, strategy=hashing.strategy)
        self.fail_fast = hashing.error_policy == "abort"
        self.verbose = self.config.verbose

    def _algorithms(self, algorithms: str | Sequence[str] | None) -> list[str]:
        if algorithms is None:
            algorithms = self.config.hashing.algorithms
        if not isinstance(algorithms, str):
            algorithms = ",".join(algorithms)
        return parse_algorithms(algorithms)

    def _run_pool(self, paths: list[Path], algorithm: str) -> list[HashOutcome | None]:
        factory = get_hasher(algorithm)
        chunk_size = self.config.hashing.chunk_size
        result = self.pool.run(
            paths,
            lambda index, path: hash_outcome(index, path, factory, chunk_size),
            fail_fast=self.fail_fast,
        )
        outcomes = result.outcomes
        if self.fail_fast:
            first = next((o for o in outcomes if o is not None and not o.ok), None)
            if first is not None:
                raise FileHashError(first.path, first.error)
        return outcomes

    # ------------------------------------------------------------------
    # Hash
    # ------------------------------------------------------------------

    def hash_tree(
        self, root: str | Path, algorithms: str | Sequence[str] | None = None
    ) -> HashReport:
        """Hash every file under *root* and write one sum file per algorithm."""
        names = self._algorithms(algorithms)
        started = time.monotonic()

        hashing = self.config.hashing
        exclude = () if hashing.include_sum_files else [
            sum_file_name(a) for a in SUPPORTED_ALGORITHMS
        ]
        files = list_files(root, hashing.ignore_patterns, exclude)
        root = Path(root).resolve()

        report = HashReport(root=str(root))
        for algorithm in names:
            report.results.append(self._hash_one(root, files, algorithm))

        report.elapsed = time.monotonic() - started
        logger.info("All files hashed, %.2f seconds", report.elapsed)
        return report

    def _hash_one(
        self, root: Path, files: list[FileEntry], algorithm: str
    ) -> AlgorithmHashResult:
        started = time.monotonic()
        outcomes = self._run_pool([f.path for f in files], algorithm)

        records: list[DigestRecord] = []
        failures: list[FileFailure] = []
        for entry, outcome in zip(files, outcomes):
            if outcome is None:
                continue
            shown = display_path(entry.rel_path)
            if not outcome.ok:
                logger.error("%s: cannot read %s: %s", algorithm, shown, outcome.error)
                failures.append(FileFailure(path=shown, error=str(outcome.error)))
                continue
            records.append(DigestRecord(digest=outcome.digest, path=entry.rel_path))
            if self.verbose:
                logger.info(
                    "%s [%d,%d]: %s, result: %s",
                    algorithm, outcome.index + 1, len(files), shown, outcome.digest,
                )

        sum_path = root / sum_file_name(algorithm)
        try:
            write_sum_file(sum_path, records)
        except (OSError, UnicodeError) as e:
            raise FileHashError(sum_path, e) from e

        elapsed = time.monotonic() - started
        logger.info("%s: %d files, %.2f seconds", algorithm, len(records), elapsed)
        return AlgorithmHashResult(
            algorithm=algorithm,
            file_count=len(records),
            sum_file=str(sum_path),
            elapsed=elapsed,
            failures=failures,
        )

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    def verify_tree(
        self, root: str | Path, algorithms: str | Sequence[str] | None = None
    ) -> VerifyReport:
        """Recompute digests listed in each sum file and compare them."""
        names = self._algorithms(algorithms)
        started = time.monotonic()

        root = Path(root)
        if not root.is_dir():
            raise TraversalError(root, NotADirectoryError("not a directory"))
        root = root.resolve()

        report = VerifyReport(root=str(root))
        for algorithm in names:
            report.results.append(self._verify_one(root, algorithm))

        report.elapsed = time.monotonic() - started
        logger.info("All files verified, %.2f seconds", report.elapsed)
        return report

    def _verify_one(self, root: Path, algorithm: str) -> AlgorithmVerifyResult:
        started = time.monotonic()
        sum_path = root / sum_file_name(algorithm)
        try:
            records = read_sum_file(sum_path)
        except OSError as e:
            raise FileHashError(sum_path, e) from e

        outcomes = self._run_pool([root / r.path for r in records], algorithm)

        total = 0
        mismatches: list[Mismatch] = []
        failures: list[FileFailure] = []
        for position, (record, outcome) in enumerate(zip(records, outcomes), start=1):
            if outcome is None:
                continue
            shown = display_path(record.path)
            if not outcome.ok:
                logger.error("%s: cannot read %s: %s", algorithm, shown, outcome.error)
                failures.append(FileFailure(path=shown, error=str(outcome.error)))
                continue
            total += 1
            if outcome.digest != record.digest:
                mismatches.append(
                    Mismatch(
                        index=position,
                        path=shown,
                        expected=record.digest,
                        actual=outcome.digest,
                    )
                )
                logger.warning("[Not Matched] %s [%d]: %s", algorithm, position, shown)
            elif self.verbose:
                logger.info("[Matched] %s [%d]: %s", algorithm, position, shown)

        elapsed = time.monotonic() - started
        logger.info(
            "%s: %d files, %.2f seconds, UnMatched count: %d",
            algorithm, total, elapsed, len(mismatches),
        )
        return AlgorithmVerifyResult(
            algorithm=algorithm,
            total=total,
            mismatches=mismatches,
            elapsed=elapsed,
            failures=failures,
        )
