import numpy as np
import pytest

from littletsp.errors import InvalidCostMatrixError, SearchInvariantError
from littletsp.mat_op import CostMatrix, ReducedMatrix

inf = np.inf

CLASSIC = [
    [inf, 10, 15, 20],
    [5, inf, 9, 10],
    [6, 13, inf, 12],
    [8, 8, 9, inf],
]


def test_clone_does_not_alias():
    M = CostMatrix(CLASSIC)
    C = M.clone()
    C[0, 1] = 99
    assert M[0, 1] == 10
    assert C[0, 1] == 99


def test_input_is_copied():
    data = np.array(CLASSIC)
    M = CostMatrix(data)
    data[0, 1] = 0
    assert M[0, 1] == 10


def test_non_square_is_rejected():
    with pytest.raises(InvalidCostMatrixError):
        CostMatrix([[inf, 1, 2], [1, inf, 3]])


def test_reduce_classic():
    R = ReducedMatrix(CLASSIC)
    assert R.reduce() == 35
    expected = np.array([
        [inf, 0, 4, 5],
        [0, inf, 3, 0],
        [0, 7, inf, 1],
        [0, 0, 0, inf],
    ])
    np.testing.assert_array_equal(R.to_numpy(), expected)


def test_reduce_is_idempotent():
    R = ReducedMatrix(CLASSIC)
    R.reduce()
    assert R.reduce() == 0


def test_every_active_line_has_a_zero_after_reduce():
    rng = np.random.default_rng(7)
    M = rng.integers(1, 50, size=(6, 6)).astype(float)
    np.fill_diagonal(M, inf)
    R = ReducedMatrix(M)
    R.reduce()
    values = R.to_numpy()
    assert all((values[i, :] == 0).any() for i in range(6))
    assert all((values[:, j] == 0).any() for j in range(6))


def test_min_with_excluded_index():
    R = ReducedMatrix(CLASSIC)
    assert R.min_in_row(0) == 10
    assert R.min_in_row(0, exclude=1) == 15
    assert R.min_in_column(0) == 5
    assert R.min_in_column(0, exclude=1) == 6


def test_delete_row_and_column():
    R = ReducedMatrix(CLASSIC)
    assert R.real_size == 4
    R.delete_row_and_column(0, 1)
    assert R.real_size == 3
    assert np.all(np.isinf(R[0, :]))
    assert np.all(np.isinf(R[:, 1]))
    assert not R.active_rows[0] and not R.active_columns[1]


def test_delete_twice_is_an_invariant_error():
    R = ReducedMatrix(CLASSIC)
    R.delete_row_and_column(0, 1)
    with pytest.raises(SearchInvariantError):
        R.delete_row_and_column(0, 2)


def test_reduced_clone_keeps_active_lines():
    R = ReducedMatrix(CLASSIC)
    R.delete_row_and_column(2, 3)
    C = R.clone()
    assert C.real_size == 3
    C.delete_row_and_column(0, 1)
    assert R.real_size == 3
    assert C.real_size == 2


def test_dead_line():
    R = ReducedMatrix(CLASSIC)
    assert not R.has_dead_line()
    R[2, :] = inf
    assert R.has_dead_line()


def test_zero_cells_row_major():
    R = ReducedMatrix(CLASSIC)
    R.reduce()
    assert R.zero_cells() == [(0, 1), (1, 0), (1, 3), (2, 0), (3, 0), (3, 1), (3, 2)]


def test_values_view_is_read_only():
    M = CostMatrix(CLASSIC)
    with pytest.raises(ValueError):
        M.values[0, 1] = 1
    assert M.values[0, 1] == 10
