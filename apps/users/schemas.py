"""
Storefront Session & Profile Schemas
Explicit per-user application state built from auth service responses.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any

# Refresh slightly before the token actually expires
EXPIRY_LEEWAY_SECONDS = 30


@dataclass
class StorefrontSession:
    """
    Signed-in user state.

    Created at sign-in, kept in the Django session between requests and
    torn down (session flushed) at sign-out.
    """

    user_id: str
    email: str
    access_token: str
    refresh_token: str
    expires_at: int
    is_admin: bool = False
    full_name: str = ""

    def is_expired(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current >= self.expires_at - EXPIRY_LEEWAY_SECONDS

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StorefrontSession:
        return cls(
            user_id=data['user_id'],
            email=data.get('email', ''),
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token', ''),
            expires_at=int(data.get('expires_at', 0)),
            is_admin=bool(data.get('is_admin', False)),
            full_name=data.get('full_name', ''),
        )


@dataclass
class Profile:
    """Profile row, 1:1 with an auth user"""

    user_id: str
    email: str
    full_name: str | None = None
    phone_number: str | None = None
