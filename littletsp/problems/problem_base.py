# Standard library imports
import copy

# Third party imports
import networkx as nx
import pandas as pd

# Local imports
from littletsp.solver.solution import Solution


class CombProblemBase:

    def solution_summary(self):

        data = []
        for solution_type, breadcrumbs in self._solutions.items():
            if breadcrumbs is not None:
                row = {
                    'Solution Type': solution_type,
                    'Tour Cost': breadcrumbs.cost,
                    'Approximation Ratio': breadcrumbs.approx_ratio,
                    'Number of Steps': len(breadcrumbs),
                }
                data.append(row)

        if not data:
            print(f"No solutions found for {self.name}")
            return None

        df = pd.DataFrame(data)
        df = df.sort_values('Tour Cost', ascending=True)
        return df

    def __init__(self, graph, problem_type: str, name: str = None):
        self.problem_type = problem_type

        self._graph = copy.deepcopy(graph)
        self._metadata = {
            'name': name if name is not None else graph.name,
        }

        self._solutions = {
            'exact': None
        }

    @property
    def name(self):
        return self._metadata['name']

    @property
    def graph(self):
        return self._graph

    @property
    def adjacency_matrix(self):
        return nx.to_numpy_array(self.graph)

    def solutions(self, solution_type: str = None):
        if solution_type is not None:
            return self._solutions[solution_type]
        else:
            return self._solutions

    def add_solution(self, solution_type: str, solution: Solution):
        self._solutions[solution_type] = solution
