"""
Access Control Decorators for the storefront service
Authentication and admin checks short-circuit before any store call.
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response

from .request_ip import get_safe_client_ip

logger = logging.getLogger(__name__)


def require_storefront_session(handler: Callable) -> Callable:
    """🔒 Require a signed-in storefront session (APIView handler methods)"""
    @wraps(handler)
    def wrapper(view: Any, request: Request, *args: Any, **kwargs: Any) -> Response:
        if getattr(request, 'storefront', None) is None:
            return Response({'error': _('Authentication required')}, status=status.HTTP_401_UNAUTHORIZED)
        return handler(view, request, *args, **kwargs)
    return wrapper


def require_admin(handler: Callable) -> Callable:
    """🔒 Require an admin storefront session - role cached at sign-in"""
    @wraps(handler)
    def wrapper(view: Any, request: Request, *args: Any, **kwargs: Any) -> Response:
        state = getattr(request, 'storefront', None)
        if state is None:
            return Response({'error': _('Authentication required')}, status=status.HTTP_401_UNAUTHORIZED)
        if not state.is_admin:
            logger.warning(
                f"🚨 [Security] Non-admin user {state.user_id} attempted {request.method} {request.path} "
                f"from {get_safe_client_ip(request)}"
            )
            return Response({'error': _('Admin access required')}, status=status.HTTP_403_FORBIDDEN)
        return handler(view, request, *args, **kwargs)
    return wrapper
