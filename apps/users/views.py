# ===============================================================================
# STOREFRONT USER VIEWS - SIGN-IN, SIGN-UP, PROFILE 👤
# ===============================================================================

"""
JSON endpoints for the storefront session lifecycle and the customer profile.
"""

import logging
from dataclasses import asdict

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import StoreAPIError
from apps.common.decorators import require_storefront_session
from apps.common.request_ip import get_safe_client_ip

from .forms import ProfileForm, SignInForm, SignUpForm
from .schemas import StorefrontSession
from .services import AuthError, AuthService, ProfileService

logger = logging.getLogger(__name__)


def _session_payload(state: StorefrontSession) -> dict:
    return {
        'user_id': state.user_id,
        'email': state.email,
        'full_name': state.full_name,
        'is_admin': state.is_admin,
    }


class SignInView(APIView):
    def post(self, request: Request) -> Response:
        form = SignInForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        auth = AuthService()
        try:
            state = auth.sign_in(form.cleaned_data['email'], form.cleaned_data['password'])
        except AuthError as e:
            logger.warning(
                f"🔒 [Auth] Failed sign-in for {form.cleaned_data['email']} "
                f"from {get_safe_client_ip(request)}: {e.message}"
            )
            return Response({'error': e.message}, status=status.HTTP_401_UNAUTHORIZED)

        auth.start_session(request.session, state)
        return Response({'user': _session_payload(state)})


class SignUpView(APIView):
    def post(self, request: Request) -> Response:
        form = SignUpForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        auth = AuthService()
        try:
            state = auth.sign_up(
                form.cleaned_data['email'], form.cleaned_data['password'], form.cleaned_data['full_name'],
            )
        except AuthError as e:
            return Response({'error': e.message}, status=status.HTTP_400_BAD_REQUEST)

        if state is None:
            return Response({'confirmation_required': True}, status=status.HTTP_201_CREATED)

        auth.start_session(request.session, state)
        return Response({'user': _session_payload(state)}, status=status.HTTP_201_CREATED)


class SignOutView(APIView):
    def post(self, request: Request) -> Response:
        AuthService().end_session(request.session)
        return Response({'signed_out': True})


class MeView(APIView):
    @require_storefront_session
    def get(self, request: Request) -> Response:
        return Response({'user': _session_payload(request.storefront)})


class ProfileView(APIView):
    """Profile is created on first view"""

    @require_storefront_session
    def get(self, request: Request) -> Response:
        try:
            profile = ProfileService(request.storefront).get_or_create()
        except StoreAPIError as e:
            logger.error(f"🔥 [Profile] Unable to load profile for {request.storefront.user_id}: {e}")
            return Response({'error': 'Unable to load profile'}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({'profile': asdict(profile)})

    @require_storefront_session
    def patch(self, request: Request) -> Response:
        form = ProfileForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        try:
            profile = ProfileService(request.storefront).update(
                form.cleaned_data['full_name'], form.cleaned_data['phone_number'],
            )
        except StoreAPIError as e:
            logger.error(f"🔥 [Profile] Unable to update profile for {request.storefront.user_id}: {e}")
            return Response({'error': 'Unable to update profile'}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({'profile': asdict(profile)})
