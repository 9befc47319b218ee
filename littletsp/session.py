import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from littletsp.mat_op import CostMatrix
from littletsp.solver.BnB.bnb import LittleBnB
from littletsp.solver.BnB.trace import TraceCursor
from littletsp.utils.const import ArrayLike


class SolverSession:
    """
    One input graph, its batch solver and its trace cursor.
    The input matrix is copied once and never mutated afterwards.

    A session runs one solve at a time: a second call to `solve` waits for the
    running one (foreground or background) to return.
    """

    def __init__(self, costs: ArrayLike, **solver_kwargs):
        self.costs = CostMatrix(costs)
        self._solver_kwargs = solver_kwargs
        self.solver = LittleBnB(**solver_kwargs)
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.setLevel(self.solver.log_level)
        self._cursor = None
        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._executor = None

    @property
    def trace(self) -> TraceCursor:
        """
        Trace cursor of this graph, created on first use with its own engine.
        """
        if self._cursor is None:
            self._cursor = TraceCursor(self.costs, engine=LittleBnB(**self._solver_kwargs))
        return self._cursor

    @property
    def solution(self):
        return self.solver.breadcrumbs

    @property
    def cancelled(self):
        return self._cancel.is_set()

    def solve(self):
        """
        Best tour, or None if there is no Hamiltonian cycle.
        After `cancel()` the best tour found so far is returned.
        A cancel request only covers the run it stops.
        """
        with self._lock:
            try:
                return self.solver.main_loop(self.costs, should_stop=self._cancel.is_set)
            finally:
                self._cancel.clear()

    def solve_in_background(self) -> Future:
        """
        Run `solve` on a single worker thread and return its Future.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='littletsp')
        self._cancel.clear()
        self.logger.debug("Starting background solve on %d vertices", self.costs.size)
        return self._executor.submit(self.solve)

    def cancel(self):
        """
        Ask a running solve to stop after its current branching step.
        """
        self.logger.debug("Cancellation requested")
        self._cancel.set()

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def solve(costs: ArrayLike):
    """
    Minimum cost Hamiltonian cycle of a complete directed graph, None if there is none.
    """
    return SolverSession(costs).solve()


def create_trace_cursor(costs: ArrayLike) -> TraceCursor:
    return SolverSession(costs).trace
