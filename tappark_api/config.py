import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'FB27D156173716A31912F1BD6CEDB')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///tappark.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    CORS_HEADERS = 'Content-Type'

    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'c2lrbG9NTkw')
    JWT_ACCESS_TOKEN_HOURS = int(os.getenv('JWT_ACCESS_TOKEN_HOURS', 1))

    # QR image rendering for reservation tokens
    QR_BOX_SIZE = int(os.getenv('QR_BOX_SIZE', 10))
    QR_BORDER = int(os.getenv('QR_BORDER', 2))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Connection pooling for server databases; ignored for SQLite
    POOL_OPTIONS = {
        'pool_size': 20,
        'pool_recycle': 1800,  # Recycle connections after 30 minutes
        'pool_pre_ping': True,
        'pool_timeout': 30,
        'max_overflow': 10,
        'echo': False
    }


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'test-secret-key-with-enough-length-for-hs256'
    LOG_LEVEL = 'WARNING'
