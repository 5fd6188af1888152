"""
Django base settings for the Catalog Reconciliation Service.

This module contains settings common to all environments.
For more information on this file, see
https://docs.djangoproject.com/en/4.2/topics/settings/
"""

import os
from decimal import Decimal
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent


# Quick-start development settings - unsuitable for production
# See https://docs.djangoproject.com/en/4.2/howto/deployment/checklist/

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv(
    "SECRET_KEY",
    "django-insecure-catalog-dev-key-change-in-production"
)

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv("DEBUG", "True") == "True"

ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")


# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Local apps
    "catalog",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"


# Database
# https://docs.djangoproject.com/en/4.2/ref/settings/#databases
# Storefront catalog database, configured in environment-specific settings
# (development.py, production.py, test.py)

DATABASES = {
    # Override in environment-specific settings
}


# Password validation
# https://docs.djangoproject.com/en/4.2/ref/settings/#auth-password-validators

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]


# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/

LANGUAGE_CODE = "en-us"

TIME_ZONE = "UTC"

USE_I18N = True

USE_TZ = True


# Static files (CSS, JavaScript, Images)
# https://docs.djangoproject.com/en/4.2/howto/static-files/

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
# https://docs.djangoproject.com/en/4.2/ref/settings/#default-auto-field

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Celery Configuration
# https://docs.celeryproject.org/en/stable/django/first-steps-with-django.html

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = 2 * 60 * 60  # 2 hours max for a full catalog pass

# Task routing - reconciliation jobs never share a worker with request traffic
CELERY_TASK_ROUTES = {
    "catalog.tasks.reconcile_catalog_task": {"queue": "maintenance"},
    "catalog.tasks.resolve_missing_images_task": {"queue": "maintenance"},
}


# Logging Configuration
# https://docs.djangoproject.com/en/4.2/topics/logging/

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.getenv("LOG_LEVEL", "INFO"),
        },
        "catalog": {
            "handlers": ["console"],
            "level": os.getenv("LOG_LEVEL", "INFO"),
        },
    },
}


# External API Configuration

# SerpAPI for the Google Images provider
SERPAPI_API_KEY = os.getenv("SERPAPI_API_KEY", "")


# Sentry Configuration
# https://docs.sentry.io/platforms/python/guides/django/

SENTRY_DSN = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "development")
SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

# Initialize Sentry
import sentry_sdk

if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        environment=SENTRY_ENVIRONMENT,
    )


# Catalog Reconciliation Configuration

# Sentinel labels - always exist, never deleted by compaction
CATALOG_UNKNOWN_BRAND_NAME = os.getenv("CATALOG_UNKNOWN_BRAND_NAME", "Unknown")
CATALOG_GENERAL_CATEGORY_NAME = os.getenv("CATALOG_GENERAL_CATEGORY_NAME", "General")

# Duplicate survivor ranking
# Descriptions longer than this count as "has a description"
CATALOG_DESCRIPTION_MIN_LENGTH = int(os.getenv("CATALOG_DESCRIPTION_MIN_LENGTH", "50"))

# Default price injected by a faulty ingestion run; ranks below any real price
CATALOG_PLACEHOLDER_PRICE = Decimal(os.getenv("CATALOG_PLACEHOLDER_PRICE", "25.00"))

# Keyword matching: "word" (token boundaries) or "substring" (legacy)
CATALOG_KEYWORD_MATCH_MODE = os.getenv("CATALOG_KEYWORD_MATCH_MODE", "word")

# Keep a product's current label when no rule matches it
CATALOG_PRESERVE_UNMATCHED_LABELS = (
    os.getenv("CATALOG_PRESERVE_UNMATCHED_LABELS", "False") == "True"
)

# Label compaction: names longer than this, or containing a marker, are junk
CATALOG_LABEL_MAX_NAME_LENGTH = int(os.getenv("CATALOG_LABEL_MAX_NAME_LENGTH", "30"))
CATALOG_JUNK_LABEL_MARKERS = [
    marker.strip()
    for marker in os.getenv("CATALOG_JUNK_LABEL_MARKERS", "Paging").split(",")
    if marker.strip()
]

# Image resolution
# Provider names in the order they are tried
CATALOG_IMAGE_PROVIDERS = [
    name.strip()
    for name in os.getenv(
        "CATALOG_IMAGE_PROVIDERS", "amazon,walmart,iherb,duckduckgo,google_images"
    ).split(",")
    if name.strip()
]

# URL substrings that mark tracking pixels, placeholders, logos and spinners
CATALOG_IMAGE_URL_DENYLIST = [
    "bat.bing.com",
    "pixel.gif",
    "tracking",
    "analytics",
    "placeholder",
    "data:image",
    "logo",
    "icon",
    "spinner",
    "loading",
    "1x1",
    "banner",
    "searchbann",
]

CATALOG_IMAGE_RESOLVER_WORKERS = int(os.getenv("CATALOG_IMAGE_RESOLVER_WORKERS", "4"))

# Per-request timeout applied by each provider (seconds)
CATALOG_PROVIDER_TIMEOUT = float(os.getenv("CATALOG_PROVIDER_TIMEOUT", "10"))
