import numpy as np

from littletsp.errors import InvalidCostMatrixError, SearchInvariantError
from littletsp.utils.const import ArrayLike, INF


class CostMatrix:
    """
    Dense N x N matrix of edge costs.
    The diagonal is +inf (no self loops), a missing edge is +inf as well.
    The matrix always owns its buffer, so two matrices never alias.
    """

    def __init__(self, data: ArrayLike):
        if isinstance(data, CostMatrix):
            data = data._items
        items = np.array(data, dtype=float, copy=True)
        if items.size == 0:
            items = items.reshape(0, 0)
        if items.ndim != 2 or items.shape[0] != items.shape[1]:
            raise InvalidCostMatrixError(f"Cost matrix must be square, got shape {items.shape}")
        self._items = items

    @property
    def size(self):
        return self._items.shape[0]

    @property
    def values(self):
        """
        read-only view on the underlying buffer
        """
        view = self._items.view()
        view.flags.writeable = False
        return view

    def __len__(self):
        return self.size

    def __getitem__(self, index):
        return self._items[index]

    def __setitem__(self, index, value):
        self._items[index] = value

    def to_numpy(self):
        return self._items.copy()

    def clone(self):
        return CostMatrix(self._items)

    def __repr__(self):
        return f"{self.__class__.__name__}(size={self.size})"


class ReducedMatrix(CostMatrix):
    """
    Cost matrix used inside the search tree.
    Rows and columns are never removed physically, they are filled with +inf
    and flagged inactive; `real_size` counts the active ones.
    """

    def __init__(self, data: ArrayLike):
        super().__init__(data)
        if isinstance(data, ReducedMatrix):
            self.active_rows = data.active_rows.copy()
            self.active_columns = data.active_columns.copy()
        else:
            self.active_rows = np.ones(self.size, dtype=bool)
            self.active_columns = np.ones(self.size, dtype=bool)

    @property
    def real_size(self):
        return int(np.count_nonzero(self.active_rows))

    def clone(self):
        return ReducedMatrix(self)

    def reduce(self):
        """
        Subtract the minimum of every row, then of every column.
        Rows/columns whose minimum is 0 or +inf are left untouched.

        Returns the total amount subtracted, i.e. the increase of the lower bound.
        """
        if self.size == 0:
            return 0.0

        row_min = self._items.min(axis=1)
        rows = self.active_rows & (row_min != 0) & np.isfinite(row_min)
        self._items[rows, :] -= row_min[rows, None]
        total = row_min[rows].sum()

        col_min = self._items.min(axis=0)
        cols = self.active_columns & (col_min != 0) & np.isfinite(col_min)
        self._items[:, cols] -= col_min[None, cols]
        total += col_min[cols].sum()

        return float(total)

    def min_in_row(self, row, exclude=None):
        values = self._items[row, :]
        if exclude is not None:
            values = np.delete(values, exclude)
        return float(values.min()) if values.size else INF

    def min_in_column(self, col, exclude=None):
        values = self._items[:, col]
        if exclude is not None:
            values = np.delete(values, exclude)
        return float(values.min()) if values.size else INF

    def delete_row_and_column(self, row, col):
        if not self.active_rows[row] or not self.active_columns[col]:
            raise SearchInvariantError(f"Row {row} or column {col} was already deleted")
        self._items[row, :] = INF
        self._items[:, col] = INF
        self.active_rows[row] = False
        self.active_columns[col] = False

    def has_dead_line(self):
        """
        True if some active row or column has no finite entry left,
        i.e. a vertex that still needs an edge can no longer get one.
        """
        finite = np.isfinite(self._items)
        dead_rows = self.active_rows & ~finite.any(axis=1)
        dead_cols = self.active_columns & ~finite.any(axis=0)
        return bool(dead_rows.any() or dead_cols.any())

    def zero_cells(self):
        """
        (row, col) of every zero entry, in row-major order
        """
        rows, cols = np.nonzero(self._items == 0)
        return list(zip(rows.tolist(), cols.tolist()))
