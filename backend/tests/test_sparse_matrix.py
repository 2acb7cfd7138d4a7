import math

import pytest

from sparse_calc.utils.sparse_matrix import (
    Entry,
    SizeMismatchError,
    SparseMatrix,
    create_identity_matrix,
    create_sparse_matrix_from_entries,
    create_zero_matrix,
)


def assert_canonical(matrix):
    """No stored zeros, strictly increasing columns, nnz matches storage"""
    assert len(matrix.rows) == matrix.size
    total = 0
    for entries in matrix.rows:
        columns = [entry.column for entry in entries]
        assert columns == sorted(set(columns))
        assert all(0 <= col < matrix.size for col in columns)
        assert all(entry.value != 0 for entry in entries)
        total += len(entries)
    assert matrix.nnz == total


def row_pairs(matrix, row):
    return [(entry.column, entry.value) for entry in matrix.rows[row]]


@pytest.fixture
def column_of_ones():
    """3x3 matrix with ones down the first column"""
    return create_sparse_matrix_from_entries(3, [(0, 0, 1), (1, 0, 1), (2, 0, 1)])


@pytest.fixture
def identity():
    return create_identity_matrix(3)


@pytest.fixture
def mixed():
    """A 4x4 matrix with a handful of scattered values"""
    return create_sparse_matrix_from_entries(4, [
        (0, 3, 2.5), (0, 1, -1), (1, 2, 4), (3, 0, 7), (3, 3, 0.5)
    ])


def test_new_matrix_is_empty():
    """A new matrix is the zero matrix"""
    matrix = SparseMatrix(5)
    assert matrix.size == 5
    assert matrix.nnz == 0
    assert matrix.rows == [[], [], [], [], []]


@pytest.mark.parametrize('size', [0, -2, 2.5, '3', True])
def test_invalid_size_rejected(size):
    with pytest.raises(ValueError):
        SparseMatrix(size)


def test_set_entry_keeps_columns_sorted():
    """Entries inserted out of order end up sorted by column"""
    matrix = SparseMatrix(4)
    matrix.set_entry(0, 3, 1)
    matrix.set_entry(0, 0, 2)
    matrix.set_entry(0, 2, 3)
    matrix.set_entry(0, 1, 4)

    assert row_pairs(matrix, 0) == [(0, 2), (1, 4), (2, 3), (3, 1)]
    assert matrix.nnz == 4
    assert_canonical(matrix)


def test_set_entry_overwrites_in_place():
    matrix = SparseMatrix(3)
    matrix.set_entry(1, 1, 5)
    matrix.set_entry(1, 1, 7)

    assert row_pairs(matrix, 1) == [(1, 7)]
    assert matrix.nnz == 1


def test_set_entry_zero_removes_entry():
    matrix = SparseMatrix(3)
    matrix.set_entry(2, 0, 5)
    matrix.set_entry(2, 1, 6)
    matrix.set_entry(2, 0, 0)

    assert row_pairs(matrix, 2) == [(1, 6)]
    assert matrix.nnz == 1
    assert_canonical(matrix)


def test_set_entry_zero_on_empty_cell_is_noop(mixed):
    """Writing zero where nothing is stored changes nothing"""
    before = mixed.copy()
    mixed.set_entry(2, 2, 0)

    assert mixed == before
    assert mixed.nnz == before.nnz
    assert mixed.size == before.size


def test_negative_zero_counts_as_zero():
    matrix = SparseMatrix(2)
    matrix.set_entry(0, 0, 3)
    matrix.set_entry(0, 0, -0.0)
    assert matrix.nnz == 0


@pytest.mark.parametrize('row, col', [(3, 0), (0, 3), (-1, 0), (0, -1), (10, 10)])
def test_set_entry_out_of_range(column_of_ones, row, col):
    """Out of range indices raise IndexError without touching the matrix"""
    before = column_of_ones.copy()
    with pytest.raises(IndexError):
        column_of_ones.set_entry(row, col, 9)
    assert column_of_ones == before
    assert column_of_ones.nnz == 3


def test_nan_is_stored_as_non_zero():
    """The core does not validate values; NaN compares unequal to zero"""
    matrix = SparseMatrix(2)
    matrix.set_entry(0, 1, float('nan'))
    assert matrix.nnz == 1
    assert math.isnan(matrix.get_entry(0, 1))


def test_get_entry_defaults_to_zero(mixed):
    assert mixed.get_entry(0, 3) == 2.5
    assert mixed.get_entry(0, 1) == -1
    assert mixed.get_entry(0, 0) == 0
    assert mixed.get_entry(2, 2) == 0
    with pytest.raises(IndexError):
        mixed.get_entry(4, 0)


def test_entries_row_major(mixed):
    assert list(mixed.entries()) == [
        (0, 1, -1), (0, 3, 2.5), (1, 2, 4), (3, 0, 7), (3, 3, 0.5)
    ]


def test_equals():
    a = create_sparse_matrix_from_entries(3, [(0, 0, 1), (1, 2, 2)])
    b = create_sparse_matrix_from_entries(3, [(1, 2, 2), (0, 0, 1)])
    c = create_sparse_matrix_from_entries(3, [(0, 0, 1), (1, 2, 2.5)])

    assert a.equals(b)
    assert a == b
    assert not a.equals(c)
    assert a != c
    assert not create_zero_matrix(2).equals(create_zero_matrix(3))
    assert a != "not a matrix"


def test_matrix_is_unhashable():
    with pytest.raises(TypeError):
        hash(SparseMatrix(2))


def test_copy_does_not_share_rows(mixed):
    clone = mixed.copy()
    assert clone == mixed

    clone.set_entry(0, 3, 100)
    clone.set_entry(2, 2, 1)
    assert mixed.get_entry(0, 3) == 2.5
    assert mixed.get_entry(2, 2) == 0
    assert mixed.nnz == 5


def test_transpose(column_of_ones):
    result = column_of_ones.transpose()

    assert row_pairs(result, 0) == [(0, 1), (1, 1), (2, 1)]
    assert result.rows[1] == []
    assert result.rows[2] == []
    assert result.nnz == 3
    assert_canonical(result)


def test_transpose_twice_is_identity(mixed):
    twice = mixed.transpose().transpose()
    assert twice == mixed
    assert twice is not mixed
    assert_canonical(twice)


def test_transpose_does_not_mutate(mixed):
    before = mixed.copy()
    mixed.transpose()
    assert mixed == before


def test_scalar_multiply(mixed):
    result = mixed.scalar_multiply(2)

    assert list(result.entries()) == [
        (0, 1, -2), (0, 3, 5.0), (1, 2, 8), (3, 0, 14), (3, 3, 1.0)
    ]
    assert mixed.get_entry(0, 3) == 2.5


def test_scalar_multiply_by_one_and_zero(mixed):
    assert mixed.scalar_multiply(1) == mixed

    zero = mixed.scalar_multiply(0)
    assert zero == create_zero_matrix(4)
    assert zero.nnz == 0
    assert mixed.nnz == 5


def test_add_scenario(column_of_ones, identity):
    """Ones in the first column plus the identity"""
    result = column_of_ones.add(identity)

    assert row_pairs(result, 0) == [(0, 2)]
    assert row_pairs(result, 1) == [(0, 1), (1, 1)]
    assert row_pairs(result, 2) == [(0, 1), (2, 1)]
    assert result.nnz == 5
    assert_canonical(result)


def test_add_is_commutative(column_of_ones, identity):
    assert column_of_ones.add(identity) == identity.add(column_of_ones)


def test_add_zero_matrix(mixed):
    assert mixed.add(create_zero_matrix(4)) == mixed
    assert create_zero_matrix(4).add(mixed) == mixed


def test_add_cancellation_drops_entries():
    a = create_sparse_matrix_from_entries(2, [(0, 0, 3), (1, 1, 2)])
    b = create_sparse_matrix_from_entries(2, [(0, 0, -3), (0, 1, 1)])
    result = a.add(b)

    assert row_pairs(result, 0) == [(1, 1)]
    assert row_pairs(result, 1) == [(1, 2)]
    assert result.nnz == 2
    assert_canonical(result)


def test_diff_scenario(column_of_ones, identity):
    """Ones in the first column minus the identity"""
    result = column_of_ones.diff(identity)

    assert result.rows[0] == []
    assert row_pairs(result, 1) == [(0, 1), (1, -1)]
    assert row_pairs(result, 2) == [(0, 1), (2, -1)]
    assert result.nnz == 4
    assert_canonical(result)


def test_diff_is_not_commutative(column_of_ones, identity):
    forward = column_of_ones.diff(identity)
    backward = identity.diff(column_of_ones)
    assert forward != backward
    assert backward == forward.scalar_multiply(-1)


def test_diff_with_itself_is_zero(mixed):
    result = mixed.diff(mixed)
    assert result == create_zero_matrix(4)
    assert result.nnz == 0


def test_multiply_scenario(column_of_ones, identity):
    """Multiplying by the identity on the right leaves the matrix unchanged"""
    result = column_of_ones.multiply(identity)

    assert row_pairs(result, 0) == [(0, 1)]
    assert row_pairs(result, 1) == [(0, 1)]
    assert row_pairs(result, 2) == [(0, 1)]
    assert result.nnz == 3
    assert result == column_of_ones


def test_identity_times_matrix(mixed):
    assert create_identity_matrix(4).multiply(mixed) == mixed


def test_multiply_dense_values():
    a = create_sparse_matrix_from_entries(2, [(0, 0, 1), (0, 1, 2), (1, 0, 3), (1, 1, 4)])
    b = create_sparse_matrix_from_entries(2, [(0, 0, 5), (0, 1, 6), (1, 0, 7), (1, 1, 8)])

    assert a.multiply(b).to_dense() == [[19, 22], [43, 50]]
    assert b.multiply(a).to_dense() == [[23, 34], [31, 46]]


def test_multiply_drops_zero_sums():
    a = create_sparse_matrix_from_entries(2, [(0, 0, 1), (0, 1, -1)])
    b = create_sparse_matrix_from_entries(2, [(0, 0, 1), (1, 0, 1)])
    result = a.multiply(b)

    assert result.nnz == 0
    assert_canonical(result)


def test_operands_are_not_mutated(column_of_ones, identity):
    a_before = column_of_ones.copy()
    b_before = identity.copy()

    column_of_ones.add(identity)
    column_of_ones.diff(identity)
    column_of_ones.multiply(identity)

    assert column_of_ones == a_before
    assert identity == b_before


def test_result_does_not_alias_operands(column_of_ones, identity):
    result = column_of_ones.add(create_zero_matrix(3))
    result.set_entry(0, 0, 42)
    assert column_of_ones.get_entry(0, 0) == 1


@pytest.mark.parametrize('operation', ['add', 'diff', 'multiply'])
def test_size_mismatch(operation, identity):
    other = create_identity_matrix(4)
    with pytest.raises(SizeMismatchError) as excinfo:
        getattr(identity, operation)(other)

    assert excinfo.value.left_size == 3
    assert excinfo.value.right_size == 4
    assert isinstance(excinfo.value, ValueError)
    assert identity == create_identity_matrix(3)


def test_serialize(column_of_ones, identity):
    assert column_of_ones.add(identity).serialize() == (
        "1: (1, 2.0)\n"
        "2: (1, 1.0) (2, 1.0)\n"
        "3: (1, 1.0) (3, 1.0)"
    )


def test_serialize_empty_rows_and_rounding():
    matrix = create_sparse_matrix_from_entries(3, [(0, 2, 3.14), (2, 0, -0.5)])
    assert matrix.serialize() == "1: (3, 3.1)\n2:\n3: (1, -0.5)"
    assert str(matrix) == matrix.serialize()


def test_serialize_rounds_ties_away_from_zero():
    """Exact halves round up in magnitude, negative ones included"""
    matrix = create_sparse_matrix_from_entries(2, [(0, 0, 0.25), (0, 1, -1.25), (1, 0, 0.75)])
    assert matrix.serialize() == "1: (1, 0.3) (2, -1.3)\n2: (1, 0.8)"


def test_serialize_large_values():
    matrix = create_sparse_matrix_from_entries(1, [(0, 0, 1e30)])
    assert matrix.serialize() == f"1: (1, {1e30:.1f})"


def test_density_and_repr(identity):
    assert identity.get_density() == pytest.approx(100 / 3)
    assert create_zero_matrix(3).get_density() == 0
    assert repr(identity) == "SparseMatrix(3x3, 3 non-zero)"


def test_to_dense(mixed):
    assert mixed.to_dense() == [
        [0, -1, 0, 2.5],
        [0, 0, 4, 0],
        [0, 0, 0, 0],
        [7, 0, 0, 0.5],
    ]


def test_entry_equality():
    assert Entry(1, 2.0) == Entry(1, 2)
    assert Entry(1, 2.0) != Entry(2, 2.0)
    assert repr(Entry(0, 1.5)) == "Entry(0, 1.5)"


def test_invariants_after_mixed_edits():
    """A longer sequence of inserts, overwrites and removals stays canonical"""
    matrix = SparseMatrix(5)
    edits = [
        (0, 4, 1), (0, 0, 2), (0, 2, 3), (0, 4, 0), (1, 1, 5),
        (1, 1, -5), (1, 3, 0), (4, 4, 9), (4, 0, 8), (0, 0, 0),
        (2, 2, 0.25), (2, 1, 1e-9),
    ]
    for row, col, value in edits:
        matrix.set_entry(row, col, value)
        assert_canonical(matrix)

    assert list(matrix.entries()) == [
        (0, 2, 3), (1, 1, -5), (2, 1, 1e-9), (2, 2, 0.25), (4, 0, 8), (4, 4, 9)
    ]
