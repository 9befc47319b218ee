import itertools

import numpy as np

from littletsp.solver.solver_base import ExactSolver
from littletsp.solver.solution import Solution


class BruteForceTSPSolver(ExactSolver):
    """
    brute-force solver for the asymmetric TSP, used as a reference
    """
    def __init__(self, max_N=10):
        super().__init__()
        self.max_N = max_N

    def set_N_limit(self, N_limit: int):
        self.max_N = N_limit

    def sanity_check(self, problem):
        if problem.N > self.max_N:
            raise ValueError(f"Number of vertices in problem is greater than the maximum number of vertices allowed: {problem.N} > {self.max_N}")

    def solve(self, problem):

        best_order, best_cost = self._solve(problem)
        breadcrumbs = Solution()
        if best_order is not None:
            breadcrumbs.add_step(
                tour=problem.tour_from_order(best_order),
                cost=best_cost,
                elapsed_time=0,
                n_steps=1
            )

        return breadcrumbs

    def _solve(self, problem):
        self.sanity_check(problem)

        A = problem.adjacency_matrix
        n = A.shape[0]
        if n == 0:
            return None, np.inf
        if n == 1:
            return [0], float(A[0, 0])

        # vertex 0 is fixed as the start, every other order is enumerated
        rest = np.array(list(itertools.permutations(range(1, n))), dtype=int)
        routes = np.hstack([np.zeros((rest.shape[0], 1), dtype=int), rest])  # shape (k, n)
        costs = A[routes, np.roll(routes, -1, axis=1)].sum(axis=1)

        best_idx = int(np.argmin(costs))
        if np.isinf(costs[best_idx]):
            return None, np.inf
        return routes[best_idx].tolist(), float(costs[best_idx])
