"""
Storefront Service - Base Configuration
🚨 ARCHITECTURE: In-memory DB for Django internals only. NO business data stored.
Apps use NO models or ORM - all data lives in the hosted store.
"""

import os
from pathlib import Path

# ===============================================================================
# CORE DJANGO SETTINGS
# ===============================================================================

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY')
DEBUG = os.environ.get('DJANGO_DEBUG', 'False').lower() == 'true'
ALLOWED_HOSTS = [host for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if host]

# 🚨 CRITICAL: In-memory DATABASES - Django internals only, NO business models
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# ===============================================================================
# APPLICATIONS - NO ADMIN, NO BUSINESS MODELS
# ===============================================================================

DJANGO_APPS: list[str] = [
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS: list[str] = [
    'rest_framework',
]

LOCAL_APPS: list[str] = [
    'apps.common',
    'apps.api_client',  # Hosted store client only
    'apps.users',       # Session provider + profiles
    'apps.media',       # Image CDN uploads
    'apps.catalog',     # Products, categories, hero banners
    'apps.cart',        # Per-user cart rows
    'apps.orders',      # Checkout pipeline + order history
    'apps.reviews',     # Review eligibility
    'apps.wishlist',    # Saved products
    'apps.backoffice',  # Admin CRUD
]

INSTALLED_APPS: list[str] = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE: list[str] = [
    'apps.common.middleware.RequestIDMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'apps.users.middleware.StorefrontSessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'apps.common.middleware.SecurityHeadersMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'
ASGI_APPLICATION = 'config.asgi.application'

# ===============================================================================
# CACHE & SESSIONS
# ===============================================================================

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'storefront-sessions',
        'OPTIONS': {
            'MAX_ENTRIES': 10000,
        },
    }
}

SESSION_ENGINE = 'django.contrib.sessions.backends.cache'
SESSION_CACHE_ALIAS = 'default'
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_AGE = 86400  # 24 hours
SESSION_COOKIE_SAMESITE = 'Lax'
SESSION_SAVE_EVERY_REQUEST = False

# ===============================================================================
# HOSTED STORE & AUTH SERVICE 🌐
# ===============================================================================

STORE_API_URL = os.environ.get('STORE_API_URL', 'http://127.0.0.1:54321')
# 🔒 SECURITY: anonymous project key only; row-level policies do the rest
STORE_API_KEY = os.environ.get('STORE_API_KEY')
STORE_API_TIMEOUT = int(os.environ.get('STORE_API_TIMEOUT', '30'))

# ===============================================================================
# IMAGE CDN 🖼️
# ===============================================================================

CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME')
CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY')
CLOUDINARY_API_SECRET = os.environ.get('CLOUDINARY_API_SECRET')

# ===============================================================================
# CHECKOUT
# ===============================================================================

# Upper bound on how long a checkout submission holds the per-user lock
CHECKOUT_LOCK_TIMEOUT = int(os.environ.get('CHECKOUT_LOCK_TIMEOUT', '60'))

# ===============================================================================
# LOCALIZATION
# ===============================================================================

LANGUAGE_CODE = 'en'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

# ===============================================================================
# STATIC FILES & UPLOADS
# ===============================================================================

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

FILE_UPLOAD_MAX_MEMORY_SIZE = 10485760  # 10MB
DATA_UPLOAD_MAX_MEMORY_SIZE = 10485760  # 10MB

# ===============================================================================
# REST FRAMEWORK CONFIGURATION
# ===============================================================================

# Identity comes from StorefrontSessionMiddleware, not DRF authentication
REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
        'rest_framework.parsers.FormParser',
        'rest_framework.parsers.MultiPartParser',
    ],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'UNAUTHENTICATED_USER': None,
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ===============================================================================
# LOGGING FILTERS & FORMATTERS (shared by environment modules)
# ===============================================================================

LOG_FILTERS = {
    'add_request_id': {
        '()': 'apps.common.logging.RequestIDFilter',
    },
    'add_service_name': {
        '()': 'apps.common.logging.ServiceNameFilter',
        'service_name': 'SHOP',
    },
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': LOG_FILTERS,
    'formatters': {
        'verbose': {
            'format': '[{asctime}] {levelname} [{service_name}] {name} {message} [req:{request_id}]',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'filters': ['add_request_id', 'add_service_name'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
