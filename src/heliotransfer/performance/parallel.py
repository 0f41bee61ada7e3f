"""
parallel.py - Row-partitioned parallelism for grid workloads

The porkchop table is an embarrassingly parallel workload: every cell is an
independent Lambert solve and the cells of one arrival row share their
arrival state. RowPool distributes whole rows across worker processes with
:class:`multiprocessing.Pool`; the GIL is irrelevant because each worker is
a separate interpreter.

Determinism
-----------
Each row is computed by the same top-level function whether it runs inline
or in a worker, and results are collected in task order, so the output is
bit-identical for any worker count. Cancellation is only checked between
rows, never inside one.
"""

from __future__ import annotations

import logging
import os
from multiprocessing import Pool
from typing import Any, Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class WorkCancelled(RuntimeError):
    """Raised when a cancellation callback stops a row-partitioned job."""


def _run_task(args: Tuple[Callable, Any]) -> Any:
    """
    Top-level function for pickling by multiprocessing.Pool.
    Unpacks (func, task) and calls func(task).
    """
    func, task = args
    return func(task)


class RowPool:
    """
    Run one function over a sequence of row tasks, inline or across
    processes.

    Parameters
    ----------
    num_workers : int or None
        Number of worker processes. ``None`` means ``os.cpu_count()``;
        values <= 1 run every row on the calling thread.
    """

    def __init__(self, num_workers: Optional[int] = 1):
        if num_workers is None:
            num_workers = os.cpu_count() or 1
        self.num_workers = max(1, int(num_workers))

    def map_rows(
        self,
        func: Callable[[Any], Any],
        tasks: Sequence[Any],
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> List[Any]:
        """
        Evaluate *func* on every task and return the results in task order.

        Parameters
        ----------
        func : callable
            Row kernel. Must be a module-level function (picklable) when
            more than one worker is used.
        tasks : sequence
            One entry per row.
        should_cancel : callable or None
            Polled between rows; returning True aborts the job.

        Raises
        ------
        WorkCancelled
            If *should_cancel* returned True. Workers are terminated.
        """
        tasks = list(tasks)
        total = len(tasks)
        results: List[Any] = []

        if self.num_workers <= 1 or total <= 1:
            for index, task in enumerate(tasks):
                if should_cancel is not None and should_cancel():
                    raise WorkCancelled(f"cancelled after {index} of {total} rows")
                results.append(func(task))
            return results

        processes = min(self.num_workers, total)
        chunksize = max(1, total // (4 * processes))
        logger.debug("Distributing %d rows over %d processes (chunksize %d)",
                     total, processes, chunksize)

        with Pool(processes=processes) as pool:
            for index, result in enumerate(
                pool.imap(_run_task, [(func, task) for task in tasks], chunksize=chunksize)
            ):
                if should_cancel is not None and should_cancel():
                    raise WorkCancelled(f"cancelled after {index} of {total} rows")
                results.append(result)
        return results

    def __repr__(self) -> str:
        return f"RowPool(num_workers={self.num_workers})"
