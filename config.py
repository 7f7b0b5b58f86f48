import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name, default):
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


class Config:
    # Record store
    RECORD_STORE = os.getenv('RECORD_STORE', 'firestore')
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')

    # CORS
    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]

    # Participation
    ORPHAN_MEMBERSHIP_POLICY = os.getenv('ORPHAN_MEMBERSHIP_POLICY', 'drop')
    JOIN_CONFLICT_STATUS = _int_env('JOIN_CONFLICT_STATUS', 400)

    # Listing defaults
    DEFAULT_PAGE_SIZE = _int_env('DEFAULT_PAGE_SIZE', 20)
    TIPS_DEFAULT_LIMIT = _int_env('TIPS_DEFAULT_LIMIT', 50)
    EVENTS_DEFAULT_LIMIT = _int_env('EVENTS_DEFAULT_LIMIT', 20)

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    RECORD_STORE = 'memory'
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
