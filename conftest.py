# ===============================================================================
# STOREFRONT TEST CONFIGURATION - DATABASE ACCESS BLOCKER ⚠️
# ===============================================================================
# The storefront keeps no business data locally; every test must go through
# the hosted store client (faked in tests), never the Django database.

from unittest.mock import patch

import pytest
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.db import DEFAULT_DB_ALIAS, connections

from tests.fakes import InMemoryStore, make_session_state, product_row

# ===============================================================================
# DATABASE ACCESS PREVENTION 🚫
# ===============================================================================

@pytest.fixture(autouse=True)
def block_database_access():
    """Any attempt to touch the database fails the test with a clear error."""

    def blocked_ensure_connection():
        raise ImproperlyConfigured(
            "🚨 Storefront attempted database access! All data must go through the hosted store."
        )

    def blocked_cursor():
        raise ImproperlyConfigured(
            "🚨 Storefront attempted to create a database cursor! All data must go through the hosted store."
        )

    with patch.object(connections[DEFAULT_DB_ALIAS], 'ensure_connection', blocked_ensure_connection), \
         patch.object(connections[DEFAULT_DB_ALIAS], 'cursor', blocked_cursor):
        yield


@pytest.fixture(autouse=True)
def clear_cache():
    """Rate limit counters and checkout locks live in the cache"""
    cache.clear()
    yield
    cache.clear()


# ===============================================================================
# TEST UTILITIES FOR THE STOREFRONT 🧪
# ===============================================================================

@pytest.fixture
def store():
    """Hosted store with a small active catalog"""
    return InMemoryStore({
        'categories': [
            {'id': 'cat-audio', 'name': 'Audio'},
            {'id': 'cat-home', 'name': 'Home'},
        ],
        'products': [
            product_row('prod-a', 'Headphones', '100.00', category_id='cat-audio'),
            product_row('prod-b', 'Speaker', '50.00', category_id='cat-audio', inventory_count=3),
            product_row('prod-c', 'Lamp', '75.00', category_id='cat-home', is_active=False),
        ],
    })


@pytest.fixture
def shopper():
    return make_session_state()


@pytest.fixture
def admin():
    return make_session_state(user_id='admin-1', email='admin@example.com', is_admin=True, full_name='Store Admin')
