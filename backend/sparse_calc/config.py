import os


class Config:
    """Base configuration, values come from the environment (.env is loaded by the app factory)"""
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Multiplication is a dense triple loop, keep n small
    MAX_MATRIX_SIZE = int(os.environ.get('MAX_MATRIX_SIZE', 200))
    TESTING = False


class DevelopmentConfig(Config):
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    MAX_MATRIX_SIZE = 20


class ProductionConfig(Config):
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}
