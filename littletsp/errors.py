class InvalidCostMatrixError(ValueError):
    """
    The cost matrix is not a valid ATSP instance
    (not square, negative costs, or a finite diagonal).
    """


class SearchInvariantError(RuntimeError):
    """
    The branch-and-bound search reached a state it can never legally reach.
    The search is aborted instead of returning a possibly wrong tour.
    """
