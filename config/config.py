import os
from datetime import timedelta

class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt-secret-key')
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=3)
    BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', 12))

    # MongoDB
    MONGODB_URI = os.getenv('MONGODB_URI', 'mongodb://localhost:27017/Flintt')
    MONGODB_DATABASE = os.getenv('MONGODB_DATABASE', 'Flintt')

    # MinIO (post media)
    MINIO_ENDPOINT = os.getenv('MINIO_ENDPOINT', 'localhost:9000')
    MINIO_ROOT_USER = os.getenv('MINIO_ROOT_USER', 'minioadmin')
    MINIO_ROOT_PASSWORD = os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin')
    MINIO_BUCKET = os.getenv('MINIO_BUCKET', 'flintt-media')
    MINIO_USE_SSL = os.getenv('MINIO_USE_SSL', 'False') == 'True'

    # App
    APP_URL = os.getenv('APP_URL', 'http://localhost:5000')
    MAX_CONTENT_LENGTH = 104857600  # 100MB
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Flask-SocketIO
    SOCKETIO_CORS_ALLOWED_ORIGINS = '*'

    # Flask-Limiter
    DEFAULT_RATE_LIMITS = os.getenv('DEFAULT_RATE_LIMITS', '200 per minute')
    AUTH_RATE_LIMIT = os.getenv('AUTH_RATE_LIMIT', '10 per minute')
    LIMITER_STORAGE_URI = os.getenv('LIMITER_STORAGE_URI', 'memory://')

    # Group statistics
    STATS_LEADERBOARD_SIZE = int(os.getenv('STATS_LEADERBOARD_SIZE', 5))
    STATS_INCLUDE_ZERO_COUNTS = os.getenv('STATS_INCLUDE_ZERO_COUNTS', 'True') == 'True'
    STATS_REPLY_DEPTH = int(os.getenv('STATS_REPLY_DEPTH', 1))

    ALLOWED_MEDIA_TYPES = {
        'image': ('image/jpeg', 'image/png', 'image/gif', 'image/webp'),
        'video': ('video/mp4', 'video/webm', 'video/quicktime')
    }

class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False

class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    MONGODB_DATABASE = 'Flintt_test'
    BCRYPT_ROUNDS = 4
    RATELIMIT_ENABLED = False

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
