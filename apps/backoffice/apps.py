"""
Back-office app configuration for the storefront service
"""

from django.apps import AppConfig


class BackofficeConfig(AppConfig):
    """Admin CRUD over the hosted store"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.backoffice'
    verbose_name = 'Back-office'
