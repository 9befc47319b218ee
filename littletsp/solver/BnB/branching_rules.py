import logging

import numpy as np

from littletsp.mat_op import ReducedMatrix


logger = logging.getLogger(__name__)
logger.setLevel(logging.ERROR)


def zero_cell_penalties(matrix: ReducedMatrix):
    """
    For every zero cell (i, j) of the reduced matrix, the penalty of NOT
    using it: the cheapest alternative leaving i plus the cheapest
    alternative entering j.

    Returns a list of (i, j, penalty) in row-major order.
    """
    return [
        (i, j, matrix.min_in_row(i, exclude=j) + matrix.min_in_column(j, exclude=i))
        for i, j in matrix.zero_cells()
    ]


def branch_max_penalty(matrix: ReducedMatrix, top_one=True):
    """
    Pick the zero cell whose exclusion costs the most.
    Ties go to the first cell in row-major order.

    Returns a list of (i, j, penalty): only the best one if `top_one`,
    otherwise all zero cells sorted by penalty (highest first).
    An empty list means no zero cell is left to branch on.
    """
    candidates = zero_cell_penalties(matrix)
    if not candidates:
        logger.debug("No zero cell left in a matrix of real size %d", matrix.real_size)
        return []

    penalties = np.array([p for _, _, p in candidates])
    if top_one:
        # argmax returns the first occurrence of the maximum
        return [candidates[int(np.argmax(penalties))]]
    else:
        order = np.argsort(-penalties, kind='stable')
        return [candidates[k] for k in order]
