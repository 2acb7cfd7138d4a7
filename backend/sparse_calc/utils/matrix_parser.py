"""
Reader and writer for the two-matrix text description.

Format::

    n e1 e2
    row col value      <- e1 lines for matrix A
    ...
    row col value      <- e2 lines for matrix B

Rows and columns are 1-indexed in the text and 0-indexed in SparseMatrix.
"""
import math

from marshmallow import ValidationError

from .sparse_matrix import SizeMismatchError, SparseMatrix


def _parse_int(token, what, line_no):
    try:
        return int(token)
    except ValueError:
        raise ValidationError(f"Line {line_no}: {what} must be an integer, got '{token}'")


def _parse_value(token, line_no):
    try:
        value = float(token)
    except ValueError:
        raise ValidationError(f"Line {line_no}: value must be a number, got '{token}'")
    if not math.isfinite(value):
        raise ValidationError(f"Line {line_no}: value must be finite, got '{token}'")
    return value


def _parse_header(line, line_no):
    tokens = line.split()
    if len(tokens) < 3:
        raise ValidationError(f"Line {line_no}: header must be 'n e1 e2'")
    size = _parse_int(tokens[0], 'matrix size', line_no)
    count_a = _parse_int(tokens[1], 'entry count for the first matrix', line_no)
    count_b = _parse_int(tokens[2], 'entry count for the second matrix', line_no)
    if size < 1:
        raise ValidationError(f"Line {line_no}: matrix size must be at least 1, got {size}")
    if count_a < 0 or count_b < 0:
        raise ValidationError(f"Line {line_no}: entry counts cannot be negative")
    return size, count_a, count_b


def _read_entries(matrix, lines, start, count):
    for line_no in range(start, start + count):
        if line_no > len(lines):
            raise ValidationError(
                f"Expected {count} entries starting at line {start}, input ends at line {len(lines)}"
            )
        tokens = lines[line_no - 1].split()
        if len(tokens) < 3:
            raise ValidationError(f"Line {line_no}: entry must be 'row col value'")

        row = _parse_int(tokens[0], 'row', line_no)
        col = _parse_int(tokens[1], 'column', line_no)
        value = _parse_value(tokens[2], line_no)
        if not (1 <= row <= matrix.size and 1 <= col <= matrix.size):
            raise ValidationError(
                f"Line {line_no}: ({row}, {col}) is outside a {matrix.size}x{matrix.size} matrix"
            )
        matrix.set_entry(row - 1, col - 1, value)


def parse_matrix_description(text, max_size=None):
    """
    Builds two matrices from a text description.

    Args:
        text (str): The description
        max_size (int): Optional upper bound on n

    Returns:
        tuple: (SparseMatrix, SparseMatrix)

    Raises:
        ValidationError: On a missing or malformed header, short input,
            non-numeric or non-finite tokens, or out-of-range indices
    """
    # Leading blank lines are skipped but still counted in line numbers
    lines = (text or '').rstrip().splitlines()
    header_no = next((i + 1 for i, line in enumerate(lines) if line.strip()), None)
    if header_no is None:
        raise ValidationError("Matrix description is empty")

    size, count_a, count_b = _parse_header(lines[header_no - 1], header_no)
    if max_size is not None and size > max_size:
        raise ValidationError(f"Line {header_no}: matrix size {size} exceeds the limit of {max_size}")

    matrix_a = SparseMatrix(size)
    matrix_b = SparseMatrix(size)
    _read_entries(matrix_a, lines, header_no + 1, count_a)
    _read_entries(matrix_b, lines, header_no + 1 + count_a, count_b)
    return matrix_a, matrix_b


def _format_number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_matrix_description(matrix_a, matrix_b):
    """Writes two matrices of equal size back into the text description."""
    if matrix_a.size != matrix_b.size:
        raise SizeMismatchError(matrix_a.size, matrix_b.size)
    lines = [f"{matrix_a.size} {matrix_a.nnz} {matrix_b.nnz}"]
    for matrix in (matrix_a, matrix_b):
        for row, col, value in matrix.entries():
            lines.append(f"{row + 1} {col + 1} {_format_number(value)}")
    return "\n".join(lines)
