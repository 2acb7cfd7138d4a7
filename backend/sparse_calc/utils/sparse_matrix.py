import math
from bisect import bisect_left
from decimal import ROUND_HALF_UP, Context, Decimal


class SizeMismatchError(ValueError):
    """Raised when a binary operation receives matrices of different sizes."""

    def __init__(self, left_size, right_size):
        self.left_size = left_size
        self.right_size = right_size
        super().__init__(
            f"Matrices are not the same size ({left_size}x{left_size} vs {right_size}x{right_size})"
        )


class Entry:
    """A stored (column, value) pair inside one row. The value is never zero."""

    __slots__ = ('column', 'value')

    def __init__(self, column, value):
        self.column = column
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, Entry):
            return NotImplemented
        return self.column == other.column and self.value == other.value

    def __repr__(self):
        return f"Entry({self.column}, {self.value!r})"


def _column(entry):
    return entry.column


# Enough digits for any finite float written out in full
_DISPLAY_CONTEXT = Context(prec=400)


def _format_value(value):
    # One decimal, exact ties rounded away from zero
    if not math.isfinite(value):
        return f"{value:.1f}"
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP, context=_DISPLAY_CONTEXT))


class SparseMatrix:
    """
    Square sparse matrix stored as one sorted list of entries per row.

    Only non-zero values are stored, every row keeps its columns unique and
    increasing, and ``nnz`` always equals the number of stored entries.
    ``set_entry`` is the only way those invariants are touched; every algebra
    operation builds a new matrix through it and leaves its operands alone.
    """

    def __init__(self, size):
        """
        Creates the zero matrix of the given size.

        Args:
            size (int): Dimension n of the n x n matrix
        """
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ValueError(f"Matrix size must be a positive integer, got {size!r}")
        self.size = size
        self.rows = [[] for _ in range(size)]
        self.nnz = 0

    def _check_index(self, row, col):
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise IndexError(
                f"Index ({row}, {col}) out of bounds for a {self.size}x{self.size} matrix"
            )

    @staticmethod
    def _find(entries, col):
        # Position of col in a sorted row, and whether it is actually there
        pos = bisect_left(entries, col, key=_column)
        return pos, pos < len(entries) and entries[pos].column == col

    def set_entry(self, row, col, value):
        """
        Sets the value at (row, col), keeping storage canonical.

        Writing zero removes the stored entry, if any.

        Args:
            row (int): Row index (0-based)
            col (int): Column index (0-based)
            value (float): Value to store

        Raises:
            IndexError: If row or col is outside [0, size)
        """
        self._check_index(row, col)
        entries = self.rows[row]
        pos, found = self._find(entries, col)

        if found:
            if value == 0:
                del entries[pos]
                self.nnz -= 1
            else:
                entries[pos].value = value
        elif value != 0:
            entries.insert(pos, Entry(col, value))
            self.nnz += 1

    def get_entry(self, row, col):
        """
        Gets the value at (row, col).

        Returns:
            float: The stored value, 0 if nothing is stored there
        """
        self._check_index(row, col)
        entries = self.rows[row]
        pos, found = self._find(entries, col)
        return entries[pos].value if found else 0

    def entries(self):
        """Yields (row, col, value) for every stored entry in row-major order."""
        for row, entries in enumerate(self.rows):
            for entry in entries:
                yield row, entry.column, entry.value

    def equals(self, other):
        """
        Structural equality: same size and the same entries row by row.

        No tolerance is applied; canonical storage makes this the same as
        mathematical equality.
        """
        if self.size != other.size:
            return False
        for mine, theirs in zip(self.rows, other.rows):
            if len(mine) != len(theirs):
                return False
            for a, b in zip(mine, theirs):
                if a.column != b.column or a.value != b.value:
                    return False
        return True

    def __eq__(self, other):
        if not isinstance(other, SparseMatrix):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def _check_same_size(self, other):
        if self.size != other.size:
            raise SizeMismatchError(self.size, other.size)

    def copy(self):
        """Returns an independent matrix with the same entries."""
        result = SparseMatrix(self.size)
        for row, col, value in self.entries():
            result.set_entry(row, col, value)
        return result

    def transpose(self):
        """
        Transposes the matrix.

        Returns:
            SparseMatrix: New matrix with every (r, c, v) moved to (c, r, v)
        """
        result = SparseMatrix(self.size)
        for row, col, value in self.entries():
            result.set_entry(col, row, value)
        return result

    def scalar_multiply(self, k):
        """
        Multiplies every entry by k.

        Returns:
            SparseMatrix: New matrix; the zero matrix when k is 0
        """
        result = SparseMatrix(self.size)
        for row, col, value in self.entries():
            result.set_entry(row, col, value * k)
        return result

    def _combine(self, other, sign):
        self._check_same_size(other)
        result = self.copy()
        for row, col, value in other.entries():
            current = result.get_entry(row, col)
            result.set_entry(row, col, current + sign * value)
        return result

    def add(self, other):
        """
        Adds another sparse matrix to this one.

        Args:
            other (SparseMatrix): Matrix to add

        Returns:
            SparseMatrix: New matrix with the sum

        Raises:
            SizeMismatchError: If the sizes differ
        """
        return self._combine(other, 1)

    def diff(self, other):
        """
        Subtracts another sparse matrix from this one (self - other).

        Raises:
            SizeMismatchError: If the sizes differ
        """
        return self._combine(other, -1)

    def multiply(self, other):
        """
        Multiplies this matrix by another (self x other).

        Every cell of the n x n result is computed from a full sum over k
        using zero-defaulting lookups; only non-zero sums are stored.

        Raises:
            SizeMismatchError: If the sizes differ
        """
        self._check_same_size(other)
        n = self.size
        result = SparseMatrix(n)
        for i in range(n):
            for j in range(n):
                total = 0
                for k in range(n):
                    total += self.get_entry(i, k) * other.get_entry(k, j)
                if total != 0:
                    result.set_entry(i, j, total)
        return result

    def get_density(self):
        """
        Percentage of cells holding a non-zero value.

        Returns:
            float: Density as a percentage
        """
        return self.nnz / (self.size * self.size) * 100

    def to_dense(self):
        """Returns the matrix as a list of lists, zeros included."""
        dense = [[0] * self.size for _ in range(self.size)]
        for row, col, value in self.entries():
            dense[row][col] = value
        return dense

    def serialize(self):
        """
        Renders the stored entries, one line per row.

        Rows and columns are 1-indexed and values have one decimal place,
        e.g. ``"2: (1, 1.0) (2, -1.0)"``. Empty rows show only their label.
        """
        lines = []
        for row, entries in enumerate(self.rows):
            parts = [f"{row + 1}:"]
            parts.extend(f"({entry.column + 1}, {_format_value(entry.value)})" for entry in entries)
            lines.append(" ".join(parts))
        return "\n".join(lines)

    def __str__(self):
        return self.serialize()

    def __repr__(self):
        return f"SparseMatrix({self.size}x{self.size}, {self.nnz} non-zero)"


def create_sparse_matrix_from_entries(size, entries):
    """
    Creates a sparse matrix from (row, col, value) triples.

    Args:
        size (int): Matrix dimension
        entries (iterable): 0-indexed (row, col, value) triples, applied in order

    Returns:
        SparseMatrix: New sparse matrix
    """
    matrix = SparseMatrix(size)
    for row, col, value in entries:
        matrix.set_entry(row, col, value)
    return matrix


def create_identity_matrix(size):
    """
    Creates the identity matrix of the given size.

    Args:
        size (int): Matrix dimension

    Returns:
        SparseMatrix: Identity matrix
    """
    matrix = SparseMatrix(size)
    for i in range(size):
        matrix.set_entry(i, i, 1)
    return matrix


def create_zero_matrix(size):
    """Creates the all-zero matrix of the given size."""
    return SparseMatrix(size)
