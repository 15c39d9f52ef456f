"""Parallel checksum pipeline: traversal, digests, worker pool, sum files."""

from hashfiles.checksum.digest import (
    SUPPORTED_ALGORITHMS,
    get_hasher,
    hash_file,
    parse_algorithms,
)
from hashfiles.checksum.models import DigestRecord, FileEntry, HashOutcome, PoolResult
from hashfiles.checksum.pool import WorkerPool, default_workers
from hashfiles.checksum.runner import (
    AlgorithmHashResult,
    AlgorithmVerifyResult,
    ChecksumRunner,
    HashReport,
    Mismatch,
    VerifyReport,
)
from hashfiles.checksum.sumfile import read_sum_file, sum_file_name, write_sum_file
from hashfiles.checksum.traversal import list_files

__all__ = [
    "AlgorithmHashResult",
    "AlgorithmVerifyResult",
    "ChecksumRunner",
    "DigestRecord",
    "FileEntry",
    "HashOutcome",
    "HashReport",
    "Mismatch",
    "PoolResult",
    "SUPPORTED_ALGORITHMS",
    "VerifyReport",
    "WorkerPool",
    "default_workers",
    "get_hasher",
    "hash_file",
    "list_files",
    "parse_algorithms",
    "read_sum_file",
    "sum_file_name",
    "write_sum_file",
]
