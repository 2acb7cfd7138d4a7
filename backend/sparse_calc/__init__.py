from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
import logging
import os

# Load environment variables
load_dotenv()

def create_app(config_name=None):
    """Application factory pattern"""
    from sparse_calc.config import config_by_name
    from sparse_calc.services.matrix_service import MatrixService

    config_name = config_name or os.environ.get('FLASK_CONFIG', 'development')
    app = Flask(__name__)

    # Configuration
    app.config.from_object(config_by_name[config_name])

    # Logging
    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    logging.getLogger('sparse_calc').setLevel(app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Enable CORS
    CORS(app)

    # One calculator workspace per application
    app.extensions['matrix_service'] = MatrixService(max_size=app.config['MAX_MATRIX_SIZE'])

    # Register blueprints
    from sparse_calc.routes.main import main_bp
    from sparse_calc.routes.api import api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp, url_prefix='/api/v1')

    app.logger.debug("Application created with %s config", config_name)
    return app
