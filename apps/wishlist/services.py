"""
Wishlist Services for the storefront
Saved products, one row per (user, product).
"""

from __future__ import annotations

import logging

from apps.api_client.services import StoreAPIError, StoreClient
from apps.common.types import Err, Ok, Result
from apps.users.schemas import StorefrontSession

logger = logging.getLogger(__name__)

ADDED = 'added'
ALREADY_IN_WISHLIST = 'already_in_wishlist'
NOT_AUTHENTICATED = 'not_authenticated'


class WishlistService:
    def __init__(self, state: StorefrontSession | None, store: StoreClient | None = None) -> None:
        self.state = state
        self.store = store or StoreClient(state.access_token if state else None)

    def add_item(self, product_id: str) -> Result[str, str]:
        """
        Save a product for the signed-in user.

        Without a user nothing is sent to the store. A uniqueness violation
        means the product is already saved and is reported as
        ``already_in_wishlist``; other store failures propagate.
        """
        if self.state is None:
            return Err(NOT_AUTHENTICATED)

        try:
            self.store.insert('wishlist_items', {'user_id': self.state.user_id, 'product_id': product_id})
        except StoreAPIError as e:
            if e.is_unique_violation:
                logger.info(f"ℹ️ [Wishlist] {product_id} already saved by {self.state.user_id}")
                return Err(ALREADY_IN_WISHLIST)
            raise

        logger.info(f"💾 [Wishlist] {self.state.user_id} saved {product_id}")
        return Ok(ADDED)
