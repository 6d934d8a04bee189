# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Execution of task graphs, either on a pool of threads or sequentially
"""

import concurrent.futures
import logging
from enum import Enum
from typing import Optional

from aplace.nlp.task_graph import TaskGraph
from aplace.nlp.tasks import Task

logger = logging.getLogger(__name__)


class ExecutionMode(Enum):
    PARALLEL = "parallel"  # Tasks run on a thread pool as soon as their predecessors finish
    SEQUENTIAL = "sequential"  # Tasks run one after the other in a fixed topological order


class Executor:
    """
    Runs task graphs. The pool of threads is created on the first parallel run and
    reused by the following ones. run() returns when all the tasks have finished.
    """

    def __init__(self, mode: ExecutionMode = ExecutionMode.PARALLEL, num_workers: Optional[int] = None):
        """
        Constructor
        :param mode: execution mode
        :param num_workers: number of threads (default of concurrent.futures if None)
        """
        assert num_workers is None or num_workers > 0, "The number of workers must be positive"
        self.mode = mode
        self.num_workers = num_workers
        self._pool: Optional[concurrent.futures.ThreadPoolExecutor] = None

    def __enter__(self) -> 'Executor':
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        """Releases the threads of the pool"""
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def run(self, graph: TaskGraph) -> None:
        """
        Executes all the tasks of the graph respecting the dependencies
        :param graph: the task graph
        """
        if self.mode == ExecutionMode.SEQUENTIAL:
            for task in graph.order:
                task.run()
        else:
            self._run_parallel(graph)

    def _run_parallel(self, graph: TaskGraph) -> None:
        if self._pool is None:
            self._pool = concurrent.futures.ThreadPoolExecutor(max_workers=self.num_workers,
                                                               thread_name_prefix="aplace")
            logger.debug("Thread pool created (workers: %s)", self.num_workers or "default")
        pool = self._pool

        waiting = {t: graph.in_degree(t) for t in graph}
        pending: dict[concurrent.futures.Future, Task] = {}
        for t, n in waiting.items():
            if n == 0:
                pending[pool.submit(t.run)] = t

        error: Optional[BaseException] = None
        while pending:
            done, _ = concurrent.futures.wait(pending, return_when=concurrent.futures.FIRST_COMPLETED)
            for f in done:
                task = pending.pop(f)
                exc = f.exception()
                if exc is not None:
                    # Let the submitted tasks finish, but do not start new ones
                    error = error or exc
                    continue
                if error is not None:
                    continue
                for s in graph.successors(task):
                    waiting[s] -= 1
                    if waiting[s] == 0:
                        pending[pool.submit(s.run)] = s
        if error is not None:
            raise error
