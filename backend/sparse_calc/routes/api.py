from flask import Blueprint, request, jsonify, current_app, Response
from marshmallow import ValidationError
from functools import wraps

from sparse_calc.models.workspace_storage import MATRIX_NAMES
from sparse_calc.utils.helpers import generate_response, matrix_to_dict, matrix_stats

api_bp = Blueprint('api', __name__)

def get_matrix_service():
    return current_app.extensions['matrix_service']

def state_to_dict(state):
    return {
        'operator': state['operator'],
        'a': matrix_to_dict(state['a']),
        'b': matrix_to_dict(state['b']),
        'result': matrix_to_dict(state['result'])
    }

def json_endpoint(f):
    """Maps validation errors to 400, unknown matrices to 404 and anything else to 500"""
    @wraps(f)
    def decorated(*args, **kwargs):
        name = kwargs.get('name')
        if name is not None and name not in MATRIX_NAMES:
            return jsonify(generate_response(success=False, error=f"Matrix '{name}' not found")), 404
        try:
            return f(*args, **kwargs)
        except ValidationError as e:
            current_app.logger.warning("Rejected %s %s: %s", request.method, request.path, e.messages)
            return jsonify(generate_response(success=False, error=e.messages)), 400
        except Exception as e:
            current_app.logger.exception("Error handling %s %s", request.method, request.path)
            return jsonify(generate_response(success=False, error=str(e))), 500
    return decorated

# Workspace
@api_bp.route('/workspace', methods=['GET'])
@json_endpoint
def get_workspace():
    """Matrices A, B, the result and the selected operator"""
    state = get_matrix_service().get_state()
    return jsonify(generate_response(data=state_to_dict(state))), 200

@api_bp.route('/workspace/reset', methods=['POST'])
@json_endpoint
def reset_workspace():
    """Reset to the sample matrices, or to zero matrices when a size is given"""
    state = get_matrix_service().reset(request.get_json(silent=True))
    return jsonify(generate_response(data=state_to_dict(state), message='Workspace reset')), 200

@api_bp.route('/workspace/stats', methods=['GET'])
@json_endpoint
def get_workspace_stats():
    """Size, non-zero count and density of each matrix"""
    return jsonify(generate_response(data=get_matrix_service().get_stats())), 200

# Matrices
@api_bp.route('/matrices/<name>', methods=['GET'])
@json_endpoint
def get_matrix(name):
    matrix = get_matrix_service().get_matrix(name)
    return jsonify(generate_response(data=matrix_to_dict(matrix))), 200

@api_bp.route('/matrices/<name>/print', methods=['GET'])
@json_endpoint
def print_matrix(name):
    """Plain text listing of the stored entries"""
    matrix = get_matrix_service().get_matrix(name)
    return Response(matrix.serialize(), mimetype='text/plain')

@api_bp.route('/matrices/<name>/entries', methods=['POST'])
@json_endpoint
def change_entry(name):
    """Change one entry of A or B (row and col are 1-indexed)"""
    matrix, result = get_matrix_service().change_entry(name, request.get_json(silent=True))
    return jsonify(generate_response(
        data={'matrix': matrix_to_dict(matrix), 'result': matrix_to_dict(result)},
        message='Entry updated'
    )), 200

@api_bp.route('/matrices/<name>/transpose', methods=['POST'])
@json_endpoint
def transpose_matrix(name):
    matrix, result = get_matrix_service().transpose(name)
    return jsonify(generate_response(
        data={'matrix': matrix_to_dict(matrix), 'result': matrix_to_dict(result)},
        message='Matrix transposed'
    )), 200

@api_bp.route('/matrices/<name>/scalar', methods=['POST'])
@json_endpoint
def scalar_multiply_matrix(name):
    matrix, result = get_matrix_service().scalar_multiply(name, request.get_json(silent=True))
    return jsonify(generate_response(
        data={'matrix': matrix_to_dict(matrix), 'result': matrix_to_dict(result)},
        message='Matrix multiplied by scalar'
    )), 200

# Operator
@api_bp.route('/operator', methods=['POST'])
@json_endpoint
def set_operator():
    """Select +, - or * and recompute the result"""
    operator, result = get_matrix_service().set_operator(request.get_json(silent=True))
    return jsonify(generate_response(
        data={'operator': operator, 'result': matrix_to_dict(result)}
    )), 200

# Text description
@api_bp.route('/parse', methods=['POST'])
@json_endpoint
def parse_description():
    """Load A and B from the text description (JSON {'text': ...} or a text/plain body)"""
    if request.is_json:
        payload = request.get_json(silent=True)
    else:
        payload = {'text': request.get_data(as_text=True)}

    matrix_a, matrix_b, result = get_matrix_service().load_description(payload)
    current_app.logger.info("Parsed description into two %dx%d matrices", matrix_a.size, matrix_a.size)
    return jsonify(generate_response(
        data={
            'a': matrix_stats(matrix_a),
            'b': matrix_stats(matrix_b),
            'result': matrix_to_dict(result)
        },
        message='Matrices loaded'
    )), 200

@api_bp.route('/description', methods=['GET'])
@json_endpoint
def get_description():
    """A and B in the text description format"""
    return Response(get_matrix_service().get_description(), mimetype='text/plain')
