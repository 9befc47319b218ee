import logging
import warnings

import networkx as nx
import numpy as np

from littletsp.errors import InvalidCostMatrixError
from littletsp.mat_op import CostMatrix
from littletsp.problems.problem_base import CombProblemBase
from littletsp.tour import Edge, Tour
from littletsp.utils.const import ArrayLike


logger = logging.getLogger(__name__)
logger.setLevel(logging.ERROR)


def validate_cost_matrix(costs: ArrayLike):
    """
    Check the ATSP input contract and return the matrix as a float array:
    square, no NaN, +inf on the diagonal, non-negative elsewhere.
    """
    try:
        M = np.array(costs, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidCostMatrixError(f"Cost matrix is not numeric: {e}") from e
    if M.size == 0:
        return M.reshape(0, 0)
    if M.ndim != 2 or M.shape[0] != M.shape[1]:
        raise InvalidCostMatrixError(f"Cost matrix must be square, got shape {M.shape}")
    if np.isnan(M).any():
        raise InvalidCostMatrixError("Cost matrix contains NaN")
    if not np.all(np.isposinf(np.diag(M))):
        raise InvalidCostMatrixError("Diagonal of the cost matrix must be +inf (no self loops)")
    if (M < 0).any():
        raise InvalidCostMatrixError("Cost matrix contains negative costs")
    return M


def matrix_from_graph(graph: nx.DiGraph, weight='weight'):
    """
    Cost matrix of a weighted digraph. Missing edges and the diagonal are +inf.
    Nodes are taken in sorted order.
    """
    nodelist = sorted(graph.nodes())
    M = nx.to_numpy_array(graph, nodelist=nodelist, weight=weight, nonedge=np.inf)
    np.fill_diagonal(M, np.inf)
    return M


class ATSPProblem(CombProblemBase):

    @property
    def N(self):
        return self._costs.shape[0]

    @property
    def E(self):
        return self.graph.number_of_edges()

    @property
    def cost_matrix(self):
        return CostMatrix(self._costs)

    @property
    def adjacency_matrix(self):
        return self._costs.copy()

    def __init__(self,
                 costs,
                 solve=False,
                 solution_value=None,
                 name=None,
                 exact_solver=None,
                 *args,
                 **kwargs
        ):
        if isinstance(costs, nx.DiGraph):
            costs = matrix_from_graph(costs)
        self._costs = validate_cost_matrix(costs)

        graph = nx.DiGraph(name=name or f"atsp_{self.N}")
        graph.add_nodes_from(range(self.N))
        for i, j in zip(*np.nonzero(np.isfinite(self._costs))):
            graph.add_edge(int(i), int(j), weight=float(self._costs[i, j]))
        super().__init__(graph=graph, problem_type='atsp', name=name)

        self.ref_cost = None
        self.ref_tour = None

        if solve:
            if exact_solver is None:
                from littletsp.solver.classical.brute_force import BruteForceTSPSolver
                exact_solver = BruteForceTSPSolver
            solution = exact_solver().solve(self)
            self.ref_tour = solution.tour
            self.ref_cost = solution.cost
            self.add_solution("exact", solution)
        if solution_value is not None:
            self.ref_cost = solution_value

    @classmethod
    def generate_random_atsp_problem(
        cls,
        n: int,
        low: float = 1,
        high: float = 100,
        p_missing: float = 0.0,
        integer: bool = True,
        seed: int = None,
        solve: bool = False,
        *args,
        **kwargs):
        rng = np.random.default_rng(seed)
        if integer:
            M = rng.integers(low, high, size=(n, n), endpoint=True).astype(float)
        else:
            M = rng.uniform(low, high, size=(n, n))
        if p_missing > 0:
            M[rng.random((n, n)) < p_missing] = np.inf
        np.fill_diagonal(M, np.inf)
        logger.debug("Generated random ATSP instance with %d vertices (seed=%s)", n, seed)
        return cls(M, solve=solve, *args, **kwargs)

    def edge(self, begin, end):
        return Edge(begin, end, float(self._costs[begin, end]))

    def tour_from_order(self, order):
        """
        Closed tour visiting the vertices in `order`.
        """
        n = len(order)
        return Tour(self.edge(order[k], order[(k + 1) % n]) for k in range(n))

    def evaluate_tour(self, tour):
        """
        Cost of a tour given as a Tour or as a vertex order, using this problem's costs.
        """
        if not isinstance(tour, Tour):
            tour = self.tour_from_order(list(tour))
        return float(sum(self._costs[e.begin, e.end] for e in tour))

    def is_feasible_tour(self, tour: Tour):
        return tour.is_hamiltonian(self.N) and np.isfinite(self.evaluate_tour(tour))

    def approx_ratio(self, tour):
        if self.ref_cost is None:
            warnings.warn("Reference solution not available - cannot compute approximation ratio, returning None")
            return None
        return self.evaluate_tour(tour) / self.ref_cost
