"""
Cart Services for the storefront
Per-user cart rows in the hosted store, with a local snapshot mirrored into the Django session.
"""

from __future__ import annotations

import hashlib
import logging
from decimal import Decimal

from django.contrib.sessions.backends.base import SessionBase
from django.core.cache import cache

from apps.api_client.services import StoreClient
from apps.catalog.services import ProductCatalogService
from apps.users.schemas import StorefrontSession

from .schemas import CartItem

logger = logging.getLogger(__name__)

CART_CONFLICT_KEY = 'user_id,product_id'


class CartItemUnavailable(Exception):
    """The product is inactive, missing or lacks stock for the requested quantity"""


class CartRateLimiter:
    """🔒 Per-user and per-IP limits on cart mutations"""

    OPERATIONS_LIMIT = 30  # operations per minute per user
    IP_OPERATIONS_LIMIT = 60  # operations per minute per IP
    TIME_WINDOW = 60  # seconds

    @staticmethod
    def _keys(user_id: str, client_ip: str | None) -> list[tuple[str, int]]:
        keys = [(f'cart_rate_limit:{user_id}', CartRateLimiter.OPERATIONS_LIMIT)]
        if client_ip:
            ip_hash = hashlib.sha256(client_ip.encode()).hexdigest()[:16]
            keys.append((f'cart_ip_minute:{ip_hash}', CartRateLimiter.IP_OPERATIONS_LIMIT))
        return keys

    @staticmethod
    def check_rate_limit(user_id: str, client_ip: str | None = None) -> bool:
        """True if within limits, False if rate limited"""
        for key, limit in CartRateLimiter._keys(user_id, client_ip):
            if cache.get(key, 0) >= limit:
                logger.warning(f"🚨 [Cart] Rate limit exceeded ({key.split(':')[0]}) for user {user_id}")
                return False
        return True

    @staticmethod
    def record_operation(user_id: str, client_ip: str | None = None) -> None:
        for key, _limit in CartRateLimiter._keys(user_id, client_ip):
            if not cache.add(key, 1, CartRateLimiter.TIME_WINDOW):
                try:
                    cache.incr(key)
                except ValueError:
                    cache.set(key, 1, CartRateLimiter.TIME_WINDOW)


class CartService:
    """
    Cart aggregate for the signed-in user.

    At most one row exists per (user, product) with a positive quantity.
    Every successful mutation reloads the cart from the store; a failed call
    raises StoreAPIError and leaves the local snapshot untouched. Without a
    signed-in user every operation is a no-op.
    """

    SESSION_KEY = 'storefront_cart_v1'

    def __init__(self, state: StorefrontSession | None, store: StoreClient | None = None,
                 session: SessionBase | None = None) -> None:
        self.state = state
        self.store = store or StoreClient(state.access_token if state else None)
        self.session = session
        self.items: list[CartItem] = self._load_snapshot()

    # ---- Session snapshot ----
    def _load_snapshot(self) -> list[CartItem]:
        if self.session is None or self.state is None:
            return []
        snapshot = self.session.get(self.SESSION_KEY) or {}
        if snapshot.get('user_id') != self.state.user_id:
            return []
        try:
            return [CartItem.from_dict(item) for item in snapshot.get('items', [])]
        except (KeyError, TypeError, ValueError):
            logger.warning("⚠️ [Cart] Discarding malformed cart snapshot")
            return []

    def _save_snapshot(self) -> None:
        if self.session is None or self.state is None:
            return
        self.session[self.SESSION_KEY] = {
            'user_id': self.state.user_id,
            'items': [item.to_dict() for item in self.items],
            'total_items': self.total_items(),
            'total_price': str(self.total_price()),
        }
        self.session.modified = True
        logger.debug(f"💾 [Cart] Snapshot saved with {len(self.items)} items")

    # ===============================================================================
    # READ
    # ===============================================================================

    def load(self) -> list[CartItem]:
        """Reload cart rows joined with current product data"""
        if self.state is None:
            self.items = []
            return self.items

        rows = self.store.select(
            'cart_items', columns='id,product_id,quantity', filters={'user_id': self.state.user_id},
        )
        products = ProductCatalogService(self.store).get_products_by_ids(
            (row['product_id'] for row in rows), active_only=False,
        )

        items = []
        for row in rows:
            product = products.get(row['product_id'])
            if product is None:
                logger.warning(f"⚠️ [Cart] Dropping cart row for missing product {row['product_id']}")
                continue
            items.append(CartItem(
                id=row.get('id'),
                product_id=product.id,
                quantity=int(row['quantity']),
                product_name=product.name,
                price=product.price,
                images=list(product.images),
            ))

        self.items = items
        self._save_snapshot()
        return self.items

    def total_price(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal('0'))

    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def get_item(self, product_id: str) -> CartItem | None:
        return next((item for item in self.items if item.product_id == product_id), None)

    # ===============================================================================
    # MUTATIONS
    # ===============================================================================

    def _check_stock(self, product_id: str, quantity: int) -> None:
        product = ProductCatalogService(self.store).get_product(product_id)
        if product is None:
            raise CartItemUnavailable("This product is no longer available")
        if not product.in_stock:
            raise CartItemUnavailable("This product is out of stock")
        if quantity > product.inventory_count:
            raise CartItemUnavailable(f"Only {product.inventory_count} left in stock")

    def add_item(self, product_id: str, quantity: int = 1) -> list[CartItem]:
        """
        Add quantity to the product's row, creating it if absent.

        The existing quantity is read and the sum written back with an
        upsert, so two concurrent adds for the same product can lose one
        increment. Raises CartItemUnavailable when the total would exceed
        the product's stock.
        """
        if self.state is None:
            return self.items
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        existing = self.store.select_one(
            'cart_items', columns='quantity',
            filters={'user_id': self.state.user_id, 'product_id': product_id},
        )
        new_quantity = quantity + (int(existing['quantity']) if existing else 0)
        self._check_stock(product_id, new_quantity)

        self.store.upsert(
            'cart_items',
            {'user_id': self.state.user_id, 'product_id': product_id, 'quantity': new_quantity},
            on_conflict=CART_CONFLICT_KEY,
        )
        logger.info(f"➕ [Cart] {product_id} now x{new_quantity} for user {self.state.user_id}")
        return self.load()

    def update_quantity(self, product_id: str, quantity: int) -> list[CartItem]:
        if quantity <= 0:
            return self.remove_item(product_id)
        if self.state is None:
            return self.items
        self._check_stock(product_id, quantity)

        self.store.update(
            'cart_items', {'quantity': quantity},
            filters={'user_id': self.state.user_id, 'product_id': product_id},
        )
        logger.info(f"🔄 [Cart] Updated quantity for {product_id}: {quantity}")
        return self.load()

    def remove_item(self, product_id: str) -> list[CartItem]:
        if self.state is None:
            return self.items

        self.store.delete('cart_items', filters={'user_id': self.state.user_id, 'product_id': product_id})
        logger.info(f"🗑️ [Cart] Removed {product_id} for user {self.state.user_id}")
        return self.load()

    def clear(self) -> list[CartItem]:
        if self.state is None:
            return self.items

        self.store.delete('cart_items', filters={'user_id': self.state.user_id})
        old_item_count = len(self.items)
        self.items = []
        self._save_snapshot()
        logger.info(f"🧹 [Cart] Cart cleared ({old_item_count} items removed)")
        return self.items
