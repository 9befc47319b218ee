from abc import ABC, abstractmethod

from littletsp.problems.problem_base import CombProblemBase


class SolverBase(ABC):
    """
    Simply designed for collecting breadcrumbs
    """

    def __init__(self):
        self._solution_quality = None

    @abstractmethod
    def solve(
        self,
        problem: CombProblemBase
    ):
        pass

    @property
    def solution_quality(self):
        return self._solution_quality


class ExactSolver(SolverBase):
    def __init__(self):
        super().__init__()
        self._solution_quality = 'exact'
