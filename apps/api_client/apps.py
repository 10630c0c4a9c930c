"""
API Client app configuration for the storefront service
"""

from django.apps import AppConfig


class ApiClientConfig(AppConfig):
    """Configuration for the hosted store API client"""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.api_client"
    verbose_name = "Hosted Store API Client"
