"""
Storefront Session Middleware
Attaches the signed-in user's state to every request and keeps tokens fresh.
"""

import logging
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.common.logging import set_request_user

from .services import AuthService, load_session_state

logger = logging.getLogger(__name__)


class StorefrontSessionMiddleware:
    """
    Sets ``request.storefront`` to a StorefrontSession or None.

    Expired access tokens are refreshed through the auth service; when the
    refresh fails the Django session is flushed and the request continues
    anonymously.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        state = load_session_state(request.session)

        if state is not None and state.is_expired():
            logger.debug(f"🕒 [Auth] Access token expired for {state.user_id}, refreshing")
            state = AuthService().refresh_session(request.session, state)

        request.storefront = state
        if state is not None:
            set_request_user(state.user_id)

        return self.get_response(request)
