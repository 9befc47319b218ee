"""
Little's Branch and Bound implementation for the asymmetric traveling salesman problem.

Author: Haixin Li (Peter Lai)
Email: laihoijan@gmail.com
Organization: Technical University of Munich
License: MIT
Date: 2023-03-29

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

import logging
import time
from dataclasses import KW_ONLY, dataclass, field
from typing import Callable, Optional

import numpy as np

from littletsp.errors import SearchInvariantError
from littletsp.mat_op import CostMatrix, ReducedMatrix
from littletsp.solver.BnB.branching_rules import branch_max_penalty
from littletsp.solver.BnB.tree import Direction, SearchNode, SearchTree
from littletsp.solver.BnB.union_find import DisjointVertexSet
from littletsp.solver.solution import Solution
from littletsp.solver.solver_base import ExactSolver
from littletsp.tour import Edge, Tour
from littletsp.utils.const import ArrayLike, INF


def trivial_tour(costs: CostMatrix):
    """
    The only possible tour for 0, 1 or 2 vertices.
    A single vertex gives the degenerate self loop with the diagonal cost.
    """
    n = costs.size
    if n == 0:
        return Tour()
    if n == 1:
        return Tour([Edge(0, 0, float(costs[0, 0]))])
    return Tour([Edge(0, 1, float(costs[0, 1])), Edge(1, 0, float(costs[1, 0]))])


@dataclass
class LittleBnB(ExactSolver):
    """
    Best-first branch and bound on reduced cost matrices (Little et al., 1963).

    Each node branches on a zero cell (i, j) of its reduced matrix:
      left child:  edge i->j excluded
      right child: edge i->j included, row i and column j removed
    The open node with the lowest bound is expanded next, the search stops
    as soon as no open node can beat the best tour found.

    The engine is driven either by `main_loop` (batch) or one transition at a
    time by `littletsp.solver.BnB.trace.SearchTrace`.
    """
    _: KW_ONLY
    max_iterations: float = field(default=INF, metadata={'help': 'Maximum number of branching steps'})
    log_level: int = field(default=logging.ERROR, metadata={'help': 'Level of the solver logger'})
    logger: logging.Logger = field(default=None, metadata={'help': 'Logger'})

    def __post_init__(self, *args, **kwargs):
        ExactSolver.__init__(self)
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.setLevel(self.log_level)
        self.costs = None
        self.tree = None
        self.current = None
        self.best_tour = None
        self.best_bound = INF
        self.finished = False
        self.breadcrumbs = Solution()

    @property
    def n(self):
        return self.costs.size

    def solve(self, problem, should_stop: Optional[Callable[[], bool]] = None):
        """
        Solve an ATSPProblem and return the breadcrumbs of the search.
        """
        start_time = time.perf_counter()
        tour = self.main_loop(problem.adjacency_matrix, should_stop=should_stop)

        # add the best step (because the last improvement is not necessarily the final answer)
        if tour is not None:
            self.breadcrumbs.add_step(
                tour=tour,
                cost=tour.cost,
                elapsed_time=time.perf_counter() - start_time,
                approx_ratio=problem.approx_ratio(tour) if problem.ref_cost is not None else None,
                n_steps=self.n_op,
                tree_path=tuple(tour),
                n_nodes=len(self.tree),
                n_pruned=self.n_pruned
            )
        return self.breadcrumbs

    def main_loop(self, costs: ArrayLike, should_stop: Optional[Callable[[], bool]] = None):
        """
        Run the search to the end and return the best tour, or None if the
        graph has no Hamiltonian cycle.

        `should_stop` is polled between two branching steps; when it returns
        True (or `max_iterations` is reached) the best tour so far is returned.
        """
        self.start(costs)
        while not self.finished:
            if self.n_op >= self.max_iterations or (should_stop is not None and should_stop()):
                self.stopped = True
                self.logger.info("Search stopped after %d branching steps, best bound %s", self.n_op, self.best_bound)
                break
            self.iterate()
        return self.best_tour

    ###########################
    # 🌳 Search primitives
    ###########################
    def start(self, costs: ArrayLike):
        """
        Reset the search on a new cost matrix and build the root node.
        """
        self.costs = costs if isinstance(costs, CostMatrix) else CostMatrix(costs)
        self.best_tour = None
        self.best_bound = INF
        self.n_op = 0
        self.n_pruned = 0
        self.finished = False
        self.stopped = False
        self.breadcrumbs = Solution()
        ### bound of every node picked for expansion, in order
        self.lower_bounds = []

        root_matrix = ReducedMatrix(self.costs)
        n = self.n

        if n <= 2:
            tour = trivial_tour(self.costs)
            root = SearchNode(bound=tour.cost, matrix=root_matrix, vertex_set=DisjointVertexSet(n),
                              path=tour.edges, terminal=True)
            self.tree = SearchTree(root)
            self.current = root
            self.best_tour = tour
            self.best_bound = tour.cost
            self.logger.debug("Trivial instance with %d vertices, no branching", n)
            self.finish()
            return root

        bound = root_matrix.reduce()
        root = SearchNode(bound=bound, matrix=root_matrix, vertex_set=DisjointVertexSet(n))
        self.tree = SearchTree(root)
        self.current = root
        self.lower_bounds.append(bound)

        if root_matrix.has_dead_line():
            self.logger.info("Some vertex has no finite incoming or outgoing edge: no Hamiltonian tour")
            root.bound = INF
            self.finish()
        else:
            self.logger.debug("Root bound %s", bound)
        return root

    def branching_edge(self, node: SearchNode):
        """
        (i, j, penalty) of the zero cell to branch on, None if there is none.
        """
        if node.matrix.real_size < 3:
            raise SearchInvariantError(
                f"Node {node.index} has a matrix of real size {node.matrix.real_size}, it can't be branched"
            )
        best = branch_max_penalty(node.matrix, top_one=True)
        return best[0] if best else None

    def make_left(self, node: SearchNode, i, j, penalty):
        """
        Child without the edge i->j.
        """
        matrix = node.matrix.clone()
        matrix[i, j] = INF
        # the reduction is exactly the penalty, it keeps a zero in row i and column j
        matrix.reduce()
        left = SearchNode(
            bound=node.bound + penalty,
            matrix=matrix,
            vertex_set=DisjointVertexSet.clone(node.vertex_set),
            edge=Edge(i, j, INF),
            included=False,
            path=node.path,
        )
        self.logger.debug("Left branch on %s->%s, bound %s", i, j, left.bound)
        return self.tree.add(node, Direction.LEFT, left)

    def make_right(self, node: SearchNode, i, j):
        """
        Child with the edge i->j, closing edges of shorter cycles are forbidden.
        """
        matrix = node.matrix.clone()
        vertex_set = DisjointVertexSet.clone(node.vertex_set)

        head, tail = vertex_set.find(i), vertex_set.find(j)
        roots = np.array([vertex_set.find(v) for v in range(self.n)])
        # every edge from the segment of j back to the segment of i
        matrix[np.ix_(roots == tail, roots == head)] = INF
        vertex_set.union(i, j)
        matrix.delete_row_and_column(i, j)

        bound = node.bound + matrix.reduce()
        if matrix.has_dead_line():
            self.logger.debug("Right branch on %s->%s leaves a vertex without edges", i, j)
            bound = INF
            self.n_pruned += 1

        edge = Edge(i, j, float(self.costs[i, j]))
        right = SearchNode(
            bound=bound,
            matrix=matrix,
            vertex_set=vertex_set,
            edge=edge,
            included=True,
            path=node.path + (edge,),
        )
        self.logger.debug("Right branch on %s->%s, bound %s", i, j, right.bound)
        return self.tree.add(node, Direction.RIGHT, right)

    def forced_edges(self, node: SearchNode):
        """
        The two zero cells left in a matrix of real size 2 that close the path
        of `node` into a Hamiltonian cycle (row-major order), None if there are none.
        """
        if node.matrix.real_size != 2:
            raise SearchInvariantError(f"Node {node.index} has real size {node.matrix.real_size}, expected 2")
        if np.isinf(node.bound):
            return None

        zeros = node.matrix.zero_cells()
        for a in range(len(zeros)):
            for b in range(a + 1, len(zeros)):
                (r1, c1), (r2, c2) = zeros[a], zeros[b]
                if r1 == r2 or c1 == c2:
                    continue
                edges = (Edge(r1, c1, float(self.costs[r1, c1])), Edge(r2, c2, float(self.costs[r2, c2])))
                if Tour(node.path + edges).is_hamiltonian(self.n):
                    return edges
        return None

    def prune(self, node: SearchNode):
        """
        Nothing can be derived from this node anymore, it is never selected again.
        A node already at +inf was counted when it got there.
        """
        if np.isinf(node.bound):
            return
        node.bound = INF
        self.n_pruned += 1
        self.logger.debug("Pruning node %d", node.index)

    def extend_path(self, node: SearchNode, edge: Edge):
        node.path = node.path + (edge,)

    def offer(self, node: SearchNode):
        """
        `node` holds a complete tour, keep it if it beats the best one.
        """
        tour = Tour(node.path)
        if not tour.is_hamiltonian(self.n):
            raise SearchInvariantError(f"Node {node.index} closed a path that is not a Hamiltonian cycle: {tour!r}")
        node.terminal = True
        if node.bound < self.best_bound:
            self.best_tour, self.best_bound = tour, node.bound
            self.logger.debug("BETTER TOUR: %s", self.best_bound)
            self.logger.debug("New best tour has path %s", ' '.join(str(e) for e in tour))
            self.breadcrumbs.add_step(
                tour=tour,
                cost=tour.cost,
                elapsed_time=0.0,
                n_steps=self.n_op,
                tree_path=tuple(self.tree.path_to(node)),
                n_nodes=len(self.tree),
                n_pruned=self.n_pruned
            )

    def select_next(self):
        """
        Move to the open node with the lowest bound.
        Returns True when the search is over.
        """
        self.n_op += 1
        self.current = self.tree.best_open_node()
        self.lower_bounds.append(self.current.bound)
        if self.best_bound <= self.current.bound:
            self.finish()
        return self.finished

    def finish(self):
        self.finished = True
        if self.best_tour is None:
            self.logger.info("No Hamiltonian tour exists")
        else:
            self.logger.info("Best tour %s with cost %s after %d branching steps",
                             self.best_tour.order(), self.best_tour.cost, self.n_op)

    def iterate(self):
        """
        One top-level iteration: branch the current node, then select the next one.
        """
        node = self.current
        choice = self.branching_edge(node)
        if choice is None:
            if node.is_root:
                self.logger.info("No zero cell in the root matrix")
                self.finish()
                return
            self.prune(node)
        else:
            i, j, penalty = choice
            self.make_left(node, i, j, penalty)
            right = self.make_right(node, i, j)
            if right.matrix.real_size == 2:
                forced = self.forced_edges(right)
                if forced is None:
                    self.prune(right)
                else:
                    for e in forced:
                        self.extend_path(right, e)
                    self.offer(right)
        self.select_next()
