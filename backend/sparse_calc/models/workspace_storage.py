import logging
import math
import threading

from ..utils.helpers import matrix_stats
from ..utils.matrix_parser import format_matrix_description, parse_matrix_description
from ..utils.sparse_matrix import (
    SparseMatrix,
    create_identity_matrix,
    create_sparse_matrix_from_entries,
    create_zero_matrix,
)

logger = logging.getLogger(__name__)

OPERATORS = {
    '+': SparseMatrix.add,
    '-': SparseMatrix.diff,
    '*': SparseMatrix.multiply,
}

EDITABLE = ('a', 'b')
MATRIX_NAMES = ('a', 'b', 'result')


class NonFiniteResultError(ValueError):
    """Raised when a change would store an infinite or NaN value."""


def _all_finite(matrix):
    return all(math.isfinite(value) for _, _, value in matrix.entries())


class WorkspaceStorage:
    """
    In-memory calculator state: two operand matrices, the pending operator
    and the result of applying it.

    Matrices held here are never edited in place. Each change builds new
    operands from a pure operation, computes their result and swaps all of
    them in together. A change that overflows to infinity or NaN anywhere
    is refused and the previous state stays.
    """

    def __init__(self, max_size=None):
        self.max_size = max_size
        self._lock = threading.Lock()
        self._load_defaults()

    def _load_defaults(self):
        """Sample state: a column of ones, the 3x3 identity, and their sum"""
        self.matrix_a = create_sparse_matrix_from_entries(3, [(0, 0, 1), (1, 0, 1), (2, 0, 1)])
        self.matrix_b = create_identity_matrix(3)
        self.operator = '+'
        self.result = OPERATORS[self.operator](self.matrix_a, self.matrix_b)

    def _commit(self, matrix_a, matrix_b, operator):
        """Computes the result for the candidate state and stores all of it, or nothing"""
        result = OPERATORS[operator](matrix_a, matrix_b)
        for name, matrix in (('a', matrix_a), ('b', matrix_b), ('result', result)):
            if not _all_finite(matrix):
                logger.warning("Refused change: %s would hold a non-finite value", name)
                raise NonFiniteResultError(
                    f"Matrix '{name}' would hold a value that is not finite; nothing was changed"
                )
        self.matrix_a = matrix_a
        self.matrix_b = matrix_b
        self.operator = operator
        self.result = result
        logger.debug("Recomputed A %s B: %r", operator, result)
        return result

    def _check_editable(self, target):
        if target not in EDITABLE:
            raise ValueError(f"Unknown matrix '{target}', expected one of {', '.join(EDITABLE)}")

    def _replace(self, target, matrix):
        if target == 'a':
            return self._commit(matrix, self.matrix_b, self.operator)
        return self._commit(self.matrix_a, matrix, self.operator)

    def _check_size(self, size):
        if self.max_size is not None and size > self.max_size:
            raise ValueError(f"Matrix size {size} exceeds the limit of {self.max_size}")

    def get_matrix(self, name):
        """Gets 'a', 'b' or 'result'; raises KeyError for any other name"""
        if name not in MATRIX_NAMES:
            raise KeyError(name)
        return {'a': self.matrix_a, 'b': self.matrix_b, 'result': self.result}[name]

    def _snapshot(self):
        return {
            'operator': self.operator,
            'a': self.matrix_a,
            'b': self.matrix_b,
            'result': self.result
        }

    def get_state(self):
        """Snapshot of all three matrices and the operator"""
        with self._lock:
            return self._snapshot()

    def change_entry(self, target, row, col, value):
        """
        Sets one entry (0-indexed) of A or B and recomputes the result.

        Returns:
            tuple: (updated matrix, result), both as committed
        """
        self._check_editable(target)
        with self._lock:
            updated = self.get_matrix(target).copy()
            updated.set_entry(row, col, value)
            result = self._replace(target, updated)
            logger.debug("Set %s[%d][%d] = %r", target, row, col, value)
            return updated, result

    def transpose(self, target):
        """Replaces A or B by its transpose"""
        self._check_editable(target)
        with self._lock:
            updated = self.get_matrix(target).transpose()
            return updated, self._replace(target, updated)

    def scalar_multiply(self, target, k):
        """Replaces A or B by k times itself"""
        self._check_editable(target)
        with self._lock:
            updated = self.get_matrix(target).scalar_multiply(k)
            return updated, self._replace(target, updated)

    def set_operator(self, operator):
        """Selects '+', '-' or '*' and recomputes; returns (operator, result)"""
        if operator not in OPERATORS:
            raise ValueError(f"Unknown operator '{operator}', expected one of + - *")
        with self._lock:
            return operator, self._commit(self.matrix_a, self.matrix_b, operator)

    def load_description(self, text):
        """Replaces A and B with the matrices described by text; returns (a, b, result)"""
        matrix_a, matrix_b = parse_matrix_description(text, max_size=self.max_size)
        with self._lock:
            result = self._commit(matrix_a, matrix_b, self.operator)
        logger.info("Loaded %dx%d matrices (%d and %d entries)",
                    matrix_a.size, matrix_a.size, matrix_a.nnz, matrix_b.nnz)
        return matrix_a, matrix_b, result

    def get_description(self):
        """A and B written back in the text description format"""
        with self._lock:
            return format_matrix_description(self.matrix_a, self.matrix_b)

    def reset(self, size=None):
        """Back to the sample state, or to two zero matrices of the given size; returns the new state"""
        if size is not None:
            self._check_size(size)
        with self._lock:
            if size is None:
                self._load_defaults()
            else:
                self._commit(create_zero_matrix(size), create_zero_matrix(size), self.operator)
            state = self._snapshot()
        logger.info("Workspace reset (size=%s)", size if size is not None else 'default')
        return state

    def get_stats(self):
        """Size, stored entries and density of each matrix"""
        with self._lock:
            return {
                'operator': self.operator,
                'a': matrix_stats(self.matrix_a),
                'b': matrix_stats(self.matrix_b),
                'result': matrix_stats(self.result)
            }
