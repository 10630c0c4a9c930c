"""
Storefront User Services
Session provider (hosted auth service) and lazily-created customer profiles.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests
from django.conf import settings
from django.contrib.sessions.backends.base import SessionBase

from apps.api_client.services import StoreAPIError, StoreClient, StoreDataError

from .schemas import Profile, StorefrontSession
from .signals import SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED, auth_state_changed

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300

SESSION_KEY = 'storefront_auth_v1'


class AuthError(Exception):
    """Raised when the hosted auth service rejects or fails a request"""
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# ===============================================================================
# SESSION STATE STORAGE
# ===============================================================================

def load_session_state(session: SessionBase) -> StorefrontSession | None:
    data = session.get(SESSION_KEY)
    if not data:
        return None
    try:
        return StorefrontSession.from_dict(data)
    except (KeyError, TypeError, ValueError):
        logger.warning("⚠️ [Auth] Discarding malformed session state")
        session.pop(SESSION_KEY, None)
        return None


def save_session_state(session: SessionBase, state: StorefrontSession) -> None:
    session[SESSION_KEY] = state.to_dict()
    session.modified = True


# ===============================================================================
# SESSION PROVIDER
# ===============================================================================

class AuthService:
    """
    Client for the hosted auth service.

    Issues and refreshes sessions, and resolves the admin role from the
    user_roles table.
    """

    def __init__(self) -> None:
        self.base_url = settings.STORE_API_URL
        self.api_key = settings.STORE_API_KEY
        self.timeout = settings.STORE_API_TIMEOUT

    def _post(self, path: str, payload: dict[str, Any], access_token: str | None = None,
              params: dict[str, str] | None = None) -> dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}/auth/v1/{path}"
        headers = {
            'apikey': self.api_key or '',
            'Authorization': f'Bearer {access_token or self.api_key or ""}',
            'Content-Type': 'application/json',
        }
        try:
            response = requests.post(url, json=payload, headers=headers, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"🔥 [Auth] Auth service unreachable: {e}")
            raise AuthError("Authentication service unavailable") from e

        if HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            try:
                return response.json() if response.content else {}
            except ValueError:
                return {}

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        message = error_data.get('error_description') or error_data.get('msg') or error_data.get('message') or 'Authentication failed'
        raise AuthError(message, status_code=response.status_code)

    def _session_from_token_response(self, data: dict[str, Any]) -> StorefrontSession:
        user = data.get('user') or {}
        if not data.get('access_token') or not user.get('id'):
            raise AuthError("Auth service returned no session")

        expires_at = data.get('expires_at') or int(time.time()) + int(data.get('expires_in', 3600))
        metadata = user.get('user_metadata') or {}
        return StorefrontSession(
            user_id=user['id'],
            email=user.get('email', ''),
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token', ''),
            expires_at=int(expires_at),
            full_name=metadata.get('full_name', ''),
        )

    def is_admin(self, user_id: str, access_token: str) -> bool:
        """Role check against user_roles; a failed lookup means not admin"""
        try:
            row = StoreClient(access_token).select_one(
                'user_roles', columns='role', filters={'user_id': user_id, 'role': 'admin'},
            )
        except StoreAPIError as e:
            logger.warning(f"⚠️ [Auth] Role lookup failed for {user_id}: {e}")
            return False
        return row is not None

    def sign_in(self, email: str, password: str) -> StorefrontSession:
        data = self._post('token', {'email': email, 'password': password}, params={'grant_type': 'password'})
        state = self._session_from_token_response(data)
        state.is_admin = self.is_admin(state.user_id, state.access_token)
        logger.info(f"✅ [Auth] User {state.user_id} signed in (admin={state.is_admin})")
        return state

    def sign_up(self, email: str, password: str, full_name: str) -> StorefrontSession | None:
        """Register a user; returns a session when the service signs them in directly"""
        data = self._post('signup', {'email': email, 'password': password, 'data': {'full_name': full_name}})
        if not data.get('access_token'):
            logger.info(f"📧 [Auth] Sign-up for {email} awaiting email confirmation")
            return None
        state = self._session_from_token_response(data)
        logger.info(f"✅ [Auth] User {state.user_id} signed up")
        return state

    def refresh(self, state: StorefrontSession) -> StorefrontSession:
        data = self._post('token', {'refresh_token': state.refresh_token}, params={'grant_type': 'refresh_token'})
        refreshed = self._session_from_token_response(data)
        refreshed.is_admin = state.is_admin
        logger.debug(f"🔄 [Auth] Token refreshed for {refreshed.user_id}")
        return refreshed

    def sign_out(self, state: StorefrontSession) -> None:
        try:
            self._post('logout', {}, access_token=state.access_token)
        except AuthError as e:
            # The local session is torn down regardless
            logger.warning(f"⚠️ [Auth] Remote sign-out failed for {state.user_id}: {e}")

    # ===============================================================================
    # DJANGO SESSION LIFECYCLE
    # ===============================================================================

    def start_session(self, session: SessionBase, state: StorefrontSession) -> None:
        session.cycle_key()
        save_session_state(session, state)
        auth_state_changed.send(sender=AuthService, event=SIGNED_IN, state=state, session=session)

    def end_session(self, session: SessionBase) -> None:
        state = load_session_state(session)
        if state is not None:
            self.sign_out(state)
        session.flush()
        auth_state_changed.send(sender=AuthService, event=SIGNED_OUT, state=None, session=session)

    def refresh_session(self, session: SessionBase, state: StorefrontSession) -> StorefrontSession | None:
        """Refresh an expired session in place; None (and a flushed session) when refresh fails"""
        try:
            refreshed = self.refresh(state)
        except AuthError as e:
            logger.info(f"🕒 [Auth] Session refresh failed for {state.user_id}, signing out: {e}")
            session.flush()
            auth_state_changed.send(sender=AuthService, event=SIGNED_OUT, state=None, session=session)
            return None

        save_session_state(session, refreshed)
        auth_state_changed.send(sender=AuthService, event=TOKEN_REFRESHED, state=refreshed, session=session)
        return refreshed


# ===============================================================================
# PROFILES
# ===============================================================================

def create_profile_from_api(data: dict[str, Any]) -> Profile:
    """Create Profile dataclass from a store row"""
    try:
        return Profile(
            user_id=data['user_id'],
            email=data.get('email') or '',
            full_name=data.get('full_name'),
            phone_number=data.get('phone_number'),
        )
    except (KeyError, TypeError) as e:
        raise StoreDataError(f"Malformed profile row: {e}") from e


class ProfileService:
    """Profile access for the signed-in user"""

    def __init__(self, state: StorefrontSession, store: StoreClient | None = None) -> None:
        self.state = state
        self.store = store or StoreClient(state.access_token)

    def get_or_create(self) -> Profile:
        """Load the profile, creating it on first view"""
        row = self.store.select_one('profiles', filters={'user_id': self.state.user_id})
        if row:
            return create_profile_from_api(row)

        new_profile = {
            'user_id': self.state.user_id,
            'email': self.state.email,
            'full_name': self.state.full_name,
            'phone_number': '',
        }
        created = self.store.insert('profiles', new_profile)
        logger.info(f"👤 [Profile] Created profile for {self.state.user_id}")
        return create_profile_from_api(created[0] if created else new_profile)

    def update(self, full_name: str, phone_number: str) -> Profile:
        """Save profile fields; blank values are stored as null"""
        self.store.update(
            'profiles',
            {'full_name': full_name or None, 'phone_number': phone_number or None},
            filters={'user_id': self.state.user_id},
        )
        logger.info(f"✅ [Profile] Updated profile for {self.state.user_id}")
        return self.get_or_create()
