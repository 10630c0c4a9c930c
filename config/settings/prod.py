"""
Production settings for the storefront service
Security-first configuration.
"""

import os

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403

# ===============================================================================
# PRODUCTION SECURITY VALIDATION
# ===============================================================================

if not SECRET_KEY:  # noqa: F405
    raise ImproperlyConfigured("🔥 DJANGO_SECRET_KEY must be set in production")
if SECRET_KEY.startswith("django-insecure-"):  # noqa: F405
    raise ImproperlyConfigured("🔥 Cannot use an insecure SECRET_KEY in production")
if not STORE_API_KEY:  # noqa: F405
    raise ImproperlyConfigured("🔥 STORE_API_KEY must be set in production")

# ===============================================================================
# PRODUCTION FLAGS
# ===============================================================================

DEBUG = False

# ===============================================================================
# HTTPS SECURITY HARDENING - PRODUCTION 🔒
# ===============================================================================

SECURE_SSL_REDIRECT = os.environ.get("SECURE_SSL_REDIRECT", "True").lower() == "true"
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "strict-origin-when-cross-origin"

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# ===============================================================================
# CACHE CONFIGURATION (Production)
# ===============================================================================

CACHES["default"].update(  # noqa: F405
    {
        "OPTIONS": {
            "MAX_ENTRIES": 50000,
            "CULL_FREQUENCY": 4,
        },
        "TIMEOUT": 3600,
    }
)

# ===============================================================================
# LOGGING CONFIGURATION (Production)
# ===============================================================================

LOG_DIR = os.environ.get("STOREFRONT_LOG_DIR", "/var/log/storefront")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "apps.common.logging.StorefrontJSONFormatter",
        },
    },
    "filters": LOG_FILTERS,  # noqa: F405
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "filters": ["add_request_id"],
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": os.path.join(LOG_DIR, "storefront.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "json",
            "filters": ["add_request_id"],
        },
        "error_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": os.path.join(LOG_DIR, "storefront_errors.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "json",
            "filters": ["add_request_id"],
            "level": "ERROR",
        },
    },
    "root": {
        "handlers": ["console", "file"],
        "level": "INFO",
    },
    "loggers": {
        "django": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": False,
        },
        "apps": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": False,
        },
        "django.security": {
            "handlers": ["console", "file", "error_file"],
            "level": "INFO",
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console", "error_file"],
            "level": "ERROR",
            "propagate": False,
        },
    },
}
