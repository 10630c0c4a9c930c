"""
Django app configuration for the Cart app
"""

from django.apps import AppConfig


class CartConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.cart'
    verbose_name = 'Cart'

    def ready(self) -> None:
        from . import signals  # noqa: F401,PLC0415 # Django app signal registration pattern
