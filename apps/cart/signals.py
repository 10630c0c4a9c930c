"""
Cart reactions to auth state changes
"""

import logging
from typing import Any

from django.dispatch import receiver

from apps.api_client.services import StoreAPIError
from apps.users.signals import SIGNED_IN, auth_state_changed

from .services import CartService

logger = logging.getLogger(__name__)


@receiver(auth_state_changed, dispatch_uid='cart_load_on_sign_in')
def load_cart_on_sign_in(sender: Any, event: str, state: Any, session: Any, **kwargs: Any) -> None:
    """Populate the cart snapshot as soon as a user signs in"""
    if event != SIGNED_IN or state is None:
        return
    try:
        CartService(state, session=session).load()
    except StoreAPIError as e:
        # Sign-in stands; the cart loads on the next cart request
        logger.warning(f"⚠️ [Cart] Unable to load cart at sign-in for {state.user_id}: {e}")
