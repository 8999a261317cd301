# gangrun_api/settings.py

"""
Django settings for the gangrun_api project.

Deployment values come from the environment:
- DJANGO_SECRET_KEY
- DJANGO_DEBUG ("1"/"true" to enable)
- DJANGO_ALLOWED_HOSTS (comma separated)
- PRICING_LOG_LEVEL (level for the pricing and brokers loggers)
"""

import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-gangrun-development-key")

DEBUG = os.environ.get("DJANGO_DEBUG", "").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]


INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "pricing",
    "brokers",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "gangrun_api.urls"

WSGI_APPLICATION = "gangrun_api.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "UNAUTHENTICATED_USER": None,
}


PRICING_LOG_LEVEL = os.environ.get("PRICING_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "pricing": {
            "handlers": ["console"],
            "level": PRICING_LOG_LEVEL,
            "propagate": False,
        },
        "brokers": {
            "handlers": ["console"],
            "level": PRICING_LOG_LEVEL,
            "propagate": False,
        },
    },
}


# Pricing
# Enforce add-on prerequisites/conflicts (e.g. EDDM requires Banding) at the API.
PRICING_ENFORCE_ADDON_RULES = True

# Quantities shown by POST /api/brokers/preview/ when the request gives none.
PRICING_PREVIEW_QUANTITIES = [1, 25, 50, 100, 250, 500, 1000]

# Tier used for the "what you'd save as a broker" sample in previews.
PRICING_SAMPLE_BROKER_TIER = "silver"
