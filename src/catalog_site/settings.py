"""
Django settings for the product catalog service.

Everything deployment-specific comes from the environment:

    DJANGO_SECRET_KEY, DJANGO_DEBUG, DJANGO_ALLOWED_HOSTS,
    DATABASE_URL (postgres://... or unset for SQLite), LOG_LEVEL
"""

import os
from pathlib import Path
from urllib.parse import urlparse

BASE_DIR = Path(os.environ.get("CATALOG_BASE_DIR", Path.cwd()))

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")

DEBUG = os.environ.get("DJANGO_DEBUG", "false").lower() in {"1", "true", "yes"}

ALLOWED_HOSTS = [
    h.strip()
    for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "product_catalog.apps.ProductCatalogConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "catalog_site.urls"

WSGI_APPLICATION = "catalog_site.wsgi.application"


def _database_from_url(database_url: str | None) -> dict:
    """Map DATABASE_URL to a Django DATABASES entry; SQLite when unset."""
    if not database_url:
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "catalog.sqlite3",
        }

    u = urlparse(database_url)
    if u.scheme not in {"postgres", "postgresql"}:
        raise ValueError(f"Unsupported DATABASE_URL scheme: {u.scheme!r}")

    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": (u.path or "").lstrip("/"),
        "USER": u.username or "",
        "PASSWORD": u.password or "",
        "HOST": u.hostname or "localhost",
        "PORT": str(u.port or 5432),
        "CONN_MAX_AGE": 0,
    }


DATABASES = {"default": _database_from_url(os.environ.get("DATABASE_URL"))}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "product-catalog",
    },
    # Id reservations. A per-process memory cache is enough because the
    # primary key catches cross-process races. It must never cull before
    # expiry, so it holds the whole 6-digit id space.
    "product-ids": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "product-ids",
        "TIMEOUT": None,
        "OPTIONS": {"MAX_ENTRIES": 1_000_000},
    },
}

PRODUCT_CATALOG = {
    "ID_CACHE_ALIAS": "product-ids",
    "ID_RESERVATION_TTL": int(os.environ.get("PRODUCT_ID_RESERVATION_TTL", 600)),
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            "datefmt": "%H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "product_catalog": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
