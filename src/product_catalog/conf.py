"""
App settings for product_catalog.

Projects override any of these through a ``PRODUCT_CATALOG`` dict in their
Django settings module:

    PRODUCT_CATALOG = {
        "ID_RESERVATION_TTL": 300,
    }
"""

from __future__ import annotations

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    # Inclusive bounds of the 6-digit id space.
    "ID_MIN": 100_000,
    "ID_MAX": 999_999,
    # Seconds an issued id stays reserved before it must be persisted.
    "ID_RESERVATION_TTL": 600,
    "ID_MAX_ATTEMPTS": 10_000,
    "ID_LOCK_TIMEOUT": 3.0,
    # Cache alias holding id reservations.
    "ID_CACHE_ALIAS": "default",
}


def get_setting(name: str) -> Any:
    if name not in DEFAULTS:
        raise KeyError(
            f"product_catalog: unknown setting '{name}'. "
            f"Available: {sorted(DEFAULTS)}"
        )
    overrides = getattr(settings, "PRODUCT_CATALOG", {})
    return overrides.get(name, DEFAULTS[name])
