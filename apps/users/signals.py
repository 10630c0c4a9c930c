"""
Auth state change notifications

Receivers get ``event`` (one of the constants below), ``state`` (the
StorefrontSession or None) and ``session`` (the Django session).
"""

from django.dispatch import Signal

SIGNED_IN = 'SIGNED_IN'
SIGNED_OUT = 'SIGNED_OUT'
TOKEN_REFRESHED = 'TOKEN_REFRESHED'

auth_state_changed = Signal()
