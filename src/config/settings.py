"""Django settings for the delivery route optimizer project."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-in-production")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = [host for host in os.getenv("DJANGO_ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "delivery_routing",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "config.urls"

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

DATABASES: dict = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REDIS_URL = os.getenv("REDIS_URL", "")

if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "delivery-routing-cache",
        }
    }

GEODATA_CACHE_ALIAS = os.getenv("GEODATA_CACHE_ALIAS", "default")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "delivery_routing": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": True,
        },
    },
}

GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
GOOGLE_MAPS_BASE_URL = os.getenv("GOOGLE_MAPS_BASE_URL", "https://maps.googleapis.com/maps/api")
GOOGLE_TIMEOUT_SECONDS = float(os.getenv("GOOGLE_TIMEOUT_SECONDS", "10"))

GOOGLE_API_MAX_DAILY = int(os.getenv("GOOGLE_API_MAX_DAILY", "2500"))
GOOGLE_API_MAX_DAILY_GLOBAL = int(os.getenv("GOOGLE_API_MAX_DAILY_GLOBAL", "5000"))

DISTANCE_CACHE_TTL_SECONDS = int(os.getenv("DISTANCE_CACHE_TTL_SECONDS", str(60 * 60 * 24)))
GEOCODE_CACHE_TTL_SECONDS = int(os.getenv("GEOCODE_CACHE_TTL_SECONDS", str(60 * 60 * 24 * 7)))
DAILY_COUNTER_TTL_SECONDS = int(os.getenv("DAILY_COUNTER_TTL_SECONDS", str(60 * 60 * 24)))

URBAN_DISTANCE_FACTOR = float(os.getenv("URBAN_DISTANCE_FACTOR", "1.0"))
DISTANCE_RETRY_ATTEMPTS = int(os.getenv("DISTANCE_RETRY_ATTEMPTS", "3"))
DISTANCE_RETRY_BASE_DELAY_SECONDS = float(os.getenv("DISTANCE_RETRY_BASE_DELAY_SECONDS", "1.0"))

AVERAGE_SPEED_KMH = float(os.getenv("AVERAGE_SPEED_KMH", "40"))
REQUEST_DEADLINE_SECONDS = float(os.getenv("REQUEST_DEADLINE_SECONDS", "30"))
