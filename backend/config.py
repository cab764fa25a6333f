import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {'1', 'true', 'yes', 'on'}


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _normalize_database_url(raw_url):
    if not raw_url:
        return raw_url
    if raw_url.startswith('postgres://'):
        return raw_url.replace('postgres://', 'postgresql://', 1)
    return raw_url


class BaseConfig:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-prod')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_EXPIRATION_HOURS = 24
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    ADMIN_EMAILS = os.environ.get('ADMIN_EMAILS', '')
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', '')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', '')
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE', 'threading')
    MATCH_STORE = os.environ.get('MATCH_STORE', 'sql')  # 'sql' or 'memory'
    SEED_MATCHES = _env_bool('SEED_MATCHES', True)
    PUBLIC_APP_URL = os.environ.get('PUBLIC_APP_URL', 'http://localhost:5001')
    PASSWORD_RESET_TOKEN_TTL_MINUTES = _env_int('PASSWORD_RESET_TOKEN_TTL_MINUTES', 30)
    # Notifications
    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY', '')
    FROM_EMAIL = os.environ.get('FROM_EMAIL', 'noreply@chatpadel.com')
    SMS_GATEWAY_URL = os.environ.get('SMS_GATEWAY_URL', '')
    SMS_GATEWAY_TOKEN = os.environ.get('SMS_GATEWAY_TOKEN', '')
    SMS_FROM_NUMBER = os.environ.get('SMS_FROM_NUMBER', '')
    NOTIFICATION_TIMEOUT_SECONDS = _env_int('NOTIFICATION_TIMEOUT_SECONDS', 10)
    NOTIFICATIONS_INLINE = _env_bool('NOTIFICATIONS_INLINE', False)
    # Coach
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY', '')
    OPENAI_BASE_URL = os.environ.get('OPENAI_BASE_URL', '')
    OPENAI_MODEL = os.environ.get('OPENAI_MODEL', 'gpt-4o-mini')


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(
        os.environ.get(
            'DATABASE_URL',
            'sqlite:///' + os.path.join(basedir, '..', 'chatpadel_dev.db')
        )
    )


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    MATCH_STORE = 'sql'
    SEED_MATCHES = False
    NOTIFICATIONS_INLINE = True
    ADMIN_EMAILS = ''
    ADMIN_EMAIL = ''
    ADMIN_PASSWORD = ''
    SENDGRID_API_KEY = ''
    SMS_GATEWAY_URL = ''
    OPENAI_API_KEY = ''


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(os.environ.get('DATABASE_URL'))


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}
