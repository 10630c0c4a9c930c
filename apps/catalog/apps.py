"""
Catalog app configuration for the storefront service
"""

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """Product browsing backed by the hosted store"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.catalog'
    verbose_name = 'Catalog'
