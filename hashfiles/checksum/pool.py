"""Bounded worker pool with index-preserving results."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Literal, TypeVar

from hashfiles.checksum.models import PoolResult
from hashfiles.errors import ConfigError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Strategy = Literal["gate", "chunked"]


def default_workers() -> int:
    """Number of logical CPUs, at least 1."""
    return os.cpu_count() or 1


def _failed(outcome: object) -> bool:
    return getattr(outcome, "error", None) is not None


class WorkerPool:
    """Runs one function over many inputs with at most ``max_workers`` in flight.

    Two admission strategies:

    - ``gate``: a bounded semaphore is acquired before each submit and
      released when the task finishes, so a new task starts as soon as any
      slot frees up.
    - ``chunked``: inputs are cut into groups of ``max_workers`` and each
      group is awaited in full before the next one starts.

    Either way every result lands in the slot matching its input index, and
    ``run`` returns only after all admitted tasks have finished.
    """

    def __init__(
        self, max_workers: int | None = None, strategy: Strategy = "gate"
    ) -> None:
        if max_workers is None:
            max_workers = default_workers()
        if max_workers < 1:
            raise ConfigError(f"parallel worker count must be >= 1, got {max_workers}")
        if strategy not in ("gate", "chunked"):
            raise ConfigError(f"unknown pool strategy: {strategy!r}")
        self.max_workers = max_workers
        self.strategy = strategy

    def run(
        self,
        items: Sequence[T],
        fn: Callable[[int, T], R],
        fail_fast: bool = True,
        failed: Callable[[R], bool] = _failed,
    ) -> PoolResult[R]:
        """Apply ``fn(index, item)`` to every item.

        With *fail_fast*, no new work is admitted once an outcome satisfies
        *failed*; tasks already running are allowed to finish. Exceptions
        raised by *fn* itself are re-raised after the barrier.
        """
        results: list[R | None] = [None] * len(items)
        if not items:
            return PoolResult(outcomes=results)

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="hashfiles"
        ) as executor:
            if self.strategy == "chunked":
                admitted = self._run_chunked(executor, items, fn, results, fail_fast, failed)
            else:
                admitted = self._run_gated(executor, items, fn, results, fail_fast, failed)

        aborted = admitted < len(items)
        if aborted:
            logger.debug("Pool stopped after admitting %d of %d items", admitted, len(items))
        return PoolResult(outcomes=results, aborted=aborted)

    def _run_gated(self, executor, items, fn, results, fail_fast, failed) -> int:
        gate = threading.BoundedSemaphore(self.max_workers)
        stop = threading.Event()

        def task(index: int, item: T) -> None:
            try:
                outcome = fn(index, item)
                results[index] = outcome
                if fail_fast and failed(outcome):
                    stop.set()
            except BaseException:
                stop.set()
                raise
            finally:
                gate.release()

        futures: list[Future] = []
        for index, item in enumerate(items):
            gate.acquire()
            if stop.is_set():
                gate.release()
                break
            futures.append(executor.submit(task, index, item))

        wait(futures)
        for future in futures:
            future.result()
        return len(futures)

    def _run_chunked(self, executor, items, fn, results, fail_fast, failed) -> int:
        def task(index: int, item: T) -> None:
            results[index] = fn(index, item)

        admitted = 0
        for start in range(0, len(items), self.max_workers):
            chunk = items[start : start + self.max_workers]
            futures = [
                executor.submit(task, start + offset, item)
                for offset, item in enumerate(chunk)
            ]
            admitted += len(futures)
            wait(futures)
            for future in futures:
                future.result()
            if fail_fast and any(
                failed(results[i]) for i in range(start, start + len(chunk))
            ):
                break
        return admitted
