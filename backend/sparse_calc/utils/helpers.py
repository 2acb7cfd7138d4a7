from datetime import datetime, timezone

def matrix_to_dict(matrix):
    """Convert a SparseMatrix to a JSON-friendly dict"""
    return {
        'size': matrix.size,
        'nnz': matrix.nnz,
        'density': matrix.get_density(),
        'rows': [
            [{'col': entry.column, 'value': entry.value} for entry in entries]
            for entries in matrix.rows
        ],
        'display': matrix.serialize()
    }

def matrix_stats(matrix):
    """Size, stored entries and density of a matrix"""
    return {
        'size': matrix.size,
        'nnz': matrix.nnz,
        'density': matrix.get_density()
    }

def generate_response(success=True, data=None, message=None, error=None):
    """Generate standardized API response"""
    response = {
        'success': success,
        'timestamp': datetime.now(timezone.utc).isoformat()
    }

    if data is not None:
        response['data'] = data

    if message:
        response['message'] = message

    if error:
        response['error'] = error

    return response
