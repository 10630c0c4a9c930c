"""
Client IP detection for the storefront service

Uses django-ipware for proxy-aware detection; used for access logging.
"""

from django.http import HttpRequest
from ipware import get_client_ip


def get_safe_client_ip(request: HttpRequest) -> str:
    """Get client IP address from request, falling back to loopback."""
    client_ip, _is_routable = get_client_ip(request)
    return client_ip or "127.0.0.1"
