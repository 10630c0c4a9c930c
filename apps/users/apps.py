"""
Storefront Users App Configuration
Handles sign-in/sign-out against the hosted auth service and customer profiles.
"""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.users"
    verbose_name = "Storefront Users"
