from flask import Blueprint, jsonify

from sparse_calc.utils.helpers import generate_response

main_bp = Blueprint('main', __name__)

@main_bp.route('/')
def index():
    """Root endpoint"""
    return jsonify({
        'message': 'Sparse Matrix Calculator API',
        'version': '1.0.0',
        'status': 'running'
    })

@main_bp.route('/health')
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'message': 'API is running successfully'
    })

@main_bp.route('/api-info')
def api_info():
    """API information endpoint"""
    return jsonify({
        'name': 'Sparse Matrix Calculator API',
        'version': '1.0.0',
        'description': 'Square sparse matrices: entry edits, transpose, scalar multiplication, A+B, A-B and AxB',
        'endpoints': {
            'main': '/',
            'health': '/health',
            'api_info': '/api-info',
            'workspace': '/api/v1/workspace',
            'matrices': '/api/v1/matrices/<a|b|result>',
            'operator': '/api/v1/operator',
            'parse': '/api/v1/parse',
            'description': '/api/v1/description'
        }
    })

@main_bp.app_errorhandler(404)
def not_found(e):
    return jsonify(generate_response(success=False, error='Resource not found')), 404

@main_bp.app_errorhandler(405)
def method_not_allowed(e):
    return jsonify(generate_response(success=False, error='Method not allowed')), 405
