from littletsp.errors import InvalidCostMatrixError, SearchInvariantError
from littletsp.mat_op import CostMatrix, ReducedMatrix
from littletsp.tour import Edge, Tour
from littletsp.session import SolverSession, solve, create_trace_cursor

__version__ = "0.1.0"
