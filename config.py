import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-secret-key'

    # CSRF Protection
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600  # 1 hour

    # Prioritize the production DATABASE_URL, with SQLite as a fallback.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'instance', 'reports.db')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Debug mode - only enable in development environment
    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # Reporting defaults
    SCHOOL_NAME = os.environ.get('SCHOOL_NAME') or 'Lelani School'
    ABSENTEE_ALERT_THRESHOLD = _int_env('ABSENTEE_ALERT_THRESHOLD', 2)
    TERM_LENGTH_DAYS = _int_env('TERM_LENGTH_DAYS', 90)
    HISTORY_PAGE_SIZE = _int_env('HISTORY_PAGE_SIZE', 20)
    DIRECTOR_DEFAULT_RANGE_DAYS = _int_env('DIRECTOR_DEFAULT_RANGE_DAYS', 7)
    TEACHER_RECENT_REPORTS = _int_env('TEACHER_RECENT_REPORTS', 10)

    # Seconds an aggregate stays in the result cache
    REPORT_CACHE_SECONDS = _int_env('REPORT_CACHE_SECONDS', 120)


class ProductionConfig(Config):
    """Production configuration with enhanced security."""
    DEBUG = False  # Always False in production
    TESTING = False

    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour session timeout


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = True
    TESTING = True
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'  # In-memory database for tests
    REPORT_CACHE_SECONDS = 0
