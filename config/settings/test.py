"""
Test settings for the Catalog Reconciliation Service.

Uses in-memory SQLite and eager Celery for fast test execution.
"""

from .base import *

# Test mode
DEBUG = False

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# Test database - in-memory SQLite for speed
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Test Cache - use local memory cache
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "unique-snowflake",
    }
}

# Test Celery - run tasks synchronously
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Test logging - minimal output
LOGGING["loggers"]["django"]["level"] = "WARNING"
LOGGING["loggers"]["catalog"]["level"] = "WARNING"

# Password validators disabled for faster tests
AUTH_PASSWORD_VALIDATORS = []

# Use faster password hasher for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Disable Sentry in tests
SENTRY_DSN = ""

# Test catalog settings - deterministic defaults, fail fast
CATALOG_KEYWORD_MATCH_MODE = "word"
CATALOG_PRESERVE_UNMATCHED_LABELS = False
CATALOG_IMAGE_PROVIDERS = ["amazon", "walmart", "iherb", "duckduckgo", "google_images"]
CATALOG_IMAGE_RESOLVER_WORKERS = 2
CATALOG_PROVIDER_TIMEOUT = 2
SERPAPI_API_KEY = "test-serpapi-key"
