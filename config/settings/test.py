"""
Test settings for the storefront service
Fast, isolated testing environment. No network: store calls are faked or patched.
"""

from .base import *  # noqa: F403

# ===============================================================================
# TEST FLAGS
# ===============================================================================

DEBUG = False
SECRET_KEY = "django-insecure-test-key-only"  # noqa: S105
ALLOWED_HOSTS = ["testserver", "localhost", "127.0.0.1"]

# ===============================================================================
# HOSTED STORE (never reached from tests)
# ===============================================================================

STORE_API_URL = "http://store.test"
STORE_API_KEY = "test-anon-key"
STORE_API_TIMEOUT = 5

CLOUDINARY_CLOUD_NAME = "test-cloud"
CLOUDINARY_API_KEY = "test-cdn-key"
CLOUDINARY_API_SECRET = "test-cdn-secret"  # noqa: S105

CHECKOUT_LOCK_TIMEOUT = 30

# ===============================================================================
# TEST CACHE
# ===============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-cache",
    }
}

# ===============================================================================
# TEST LOGGING (quiet)
# ===============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": LOG_FILTERS,  # noqa: F405
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "handlers": ["null"],
        "level": "WARNING",
    },
}
