"""
Testing settings.
"""
from .base import *

DEBUG = False

SECRET_KEY = "test-secret-key-not-for-production"
SIMPLE_JWT["SIGNING_KEY"] = SECRET_KEY

# Use in-memory database for testing (set DATABASE_URL to run against PostgreSQL)
DATABASES = {
    "default": env.db("DATABASE_URL", default="sqlite://:memory:"),
}

# Disable password validation for testing
AUTH_PASSWORD_VALIDATORS = []

# Faster password hashing for testing
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Disable caching for testing
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.dummy.DummyCache",
    }
}
SESSION_ENGINE = "django.contrib.sessions.backends.db"

# Capture outgoing mail
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Run notification tasks inline
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

CORS_ALLOW_ALL_ORIGINS = True

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "loggers": {
        "django": {"handlers": ["null"], "propagate": False},
        "backend": {"handlers": ["null"], "level": "DEBUG", "propagate": False},
    },
}

TEST_RUNNER = "django.test.runner.DiscoverRunner"
