"""
Order Services for the storefront
Checkout pipeline (cart or buy-now → order + order items) and order history.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.cache import cache
from django.utils.translation import gettext as _

from apps.api_client.services import StoreAPIError, StoreClient, StoreDataError
from apps.cart.services import CartService
from apps.catalog.services import ProductCatalogService
from apps.common.types import Err, Ok, Result
from apps.users.schemas import StorefrontSession

from .forms import CheckoutForm
from .schemas import STATUS_PENDING, CheckoutError, CheckoutResult, LineItem, Order
from .serializers import create_order_from_api, create_order_item_from_api

logger = logging.getLogger(__name__)

DELIVERY_FEES = {
    'standard': Decimal('50'),
    'express': Decimal('100'),
    'overnight': Decimal('200'),
}
DEFAULT_DELIVERY_METHOD = 'standard'

ORDERS_URL = '/orders/'


def delivery_fee_for(method: str) -> Decimal:
    """Fixed delivery fee; unknown methods are charged as standard"""
    return DELIVERY_FEES.get(method, DELIVERY_FEES[DEFAULT_DELIVERY_METHOD])


def build_shipping_snapshot(data: dict[str, Any], delivery_fee: Decimal, subtotal: Decimal) -> dict[str, Any]:
    """Durable record of the checkout form, independent of later profile edits"""
    return {
        'fullName': data['full_name'],
        'address': data['address'],
        'city': data['city'],
        'state': data['state'],
        'zipCode': data['zip_code'],
        'country': data['country'],
        'phone': data['phone'],
        'email': data['email'],
        'paymentMethod': data['payment_method'],
        'deliveryMethod': data['delivery_method'],
        'notes': data.get('notes') or '',
        'deliveryFee': delivery_fee,
        'subtotal': subtotal,
    }


class CheckoutService:
    """
    Turns the cart (or a single buy-now product) plus the checkout form into
    a pending Order with its OrderItems.

    Steps run strictly in order:
      validate → lock → resolve lines → price → order → order items → profile → clear cart

    A failed order insert stops the pipeline. A failed order_items insert
    deletes the just-created order row before reporting. The profile upsert
    and the cart clear are best-effort. The cart is untouched on any failure.
    """

    LOCK_KEY = 'checkout_inflight:{user_id}'

    def __init__(self, state: StorefrontSession | None, store: StoreClient | None = None,
                 cart: CartService | None = None) -> None:
        self.state = state
        self.store = store or StoreClient(state.access_token if state else None)
        self.cart = cart or CartService(state, self.store)

    def place_order(self, form_data: dict[str, Any], product_id: str | None = None,
                    quantity: int = 1) -> Result[CheckoutResult, CheckoutError]:
        if self.state is None:
            return Err(CheckoutError('auth', _('Please sign in to check out')))

        form = CheckoutForm(form_data)
        if not form.is_valid():
            field_errors = {name: [str(message) for message in messages] for name, messages in form.errors.items()}
            logger.info(f"⚠️ [Checkout] Validation failed for {self.state.user_id}: {sorted(field_errors)}")
            return Err(CheckoutError('validation', _('Please correct the highlighted fields'), field_errors=field_errors))

        if product_id and quantity < 1:
            return Err(CheckoutError(
                'validation', _('Please correct the highlighted fields'),
                field_errors={'quantity': [_('Quantity must be at least 1')]},
            ))

        lock_key = self.LOCK_KEY.format(user_id=self.state.user_id)
        if not cache.add(lock_key, True, settings.CHECKOUT_LOCK_TIMEOUT):
            logger.warning(f"🔒 [Checkout] Submission already in flight for {self.state.user_id}")
            return Err(CheckoutError('in_flight', _('Your order is already being placed')))

        try:
            return self._place_order(form.cleaned_data, product_id, quantity)
        finally:
            cache.delete(lock_key)

    # ---- Pipeline stages ----
    def _resolve_line_items(self, product_id: str | None, quantity: int) -> Result[list[LineItem], CheckoutError]:
        if product_id:
            product = ProductCatalogService(self.store).get_product(product_id)
            if product is None:
                return Err(CheckoutError('line_items', _('This product is no longer available')))
            if not product.in_stock:
                return Err(CheckoutError('line_items', _('This product is out of stock')))
            if quantity > product.inventory_count:
                logger.info(f"⚠️ [Checkout] {product_id} x{quantity} exceeds stock of {product.inventory_count}")
                return Err(CheckoutError(
                    'line_items', _('Only %(count)d left in stock') % {'count': product.inventory_count},
                ))
            return Ok([LineItem(product.id, product.name, product.price, quantity)])

        items = self.cart.load()
        if not items:
            return Err(CheckoutError('empty_cart', _('Your cart is empty')))
        return Ok([LineItem(item.product_id, item.product_name, item.price, item.quantity) for item in items])

    def _place_order(self, data: dict[str, Any], product_id: str | None,
                     quantity: int) -> Result[CheckoutResult, CheckoutError]:
        user_id = self.state.user_id
        buy_now = bool(product_id)

        try:
            lines_result = self._resolve_line_items(product_id, quantity)
        except StoreAPIError as e:
            logger.error(f"🔥 [Checkout] Unable to resolve line items for {user_id}: {e}")
            return Err(CheckoutError('line_items', _('Unable to load your items, please try again')))
        if lines_result.is_err():
            return lines_result
        lines = lines_result.unwrap()

        subtotal = sum((line.line_total for line in lines), Decimal('0'))
        delivery_fee = delivery_fee_for(data['delivery_method'])
        total_amount = subtotal + delivery_fee

        # Order row
        try:
            created = self.store.insert('orders', {
                'user_id': user_id,
                'total_amount': total_amount,
                'status': STATUS_PENDING,
                'shipping_address': build_shipping_snapshot(data, delivery_fee, subtotal),
            })
        except StoreAPIError as e:
            logger.error(f"🔥 [Checkout] Order insert failed for {user_id}: {e}")
            return Err(CheckoutError('order', _('Failed to place order, please try again')))
        if not created or not created[0].get('id'):
            logger.error(f"🔥 [Checkout] Order insert for {user_id} returned no row")
            return Err(CheckoutError('order', _('Failed to place order, please try again')))
        order_id = created[0]['id']

        # Order items, priced at submission time
        try:
            self.store.insert('order_items', [
                {'order_id': order_id, 'product_id': line.product_id, 'quantity': line.quantity,
                 'price': line.unit_price}
                for line in lines
            ])
        except StoreAPIError as e:
            logger.error(f"🔥 [Checkout] Order items insert failed for order {order_id}: {e}")
            compensated = self._delete_orphaned_order(order_id)
            return Err(CheckoutError(
                'order_items', _('Failed to place order, please try again'), compensated=compensated,
            ))

        logger.info(
            f"📦 [Checkout] Order {order_id} placed by {user_id}: {len(lines)} lines, "
            f"subtotal {subtotal} + delivery {delivery_fee} = {total_amount}"
        )

        self._save_profile(data)
        if not buy_now:
            try:
                self.cart.clear()
            except StoreAPIError as e:
                logger.error(f"🔥 [Checkout] Order {order_id} placed but cart clear failed for {user_id}: {e}")

        return Ok(CheckoutResult(
            order_id=order_id,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total_amount=total_amount,
            redirect_url=ORDERS_URL,
        ))

    def _delete_orphaned_order(self, order_id: str) -> bool:
        try:
            self.store.delete('orders', filters={'id': order_id})
        except StoreAPIError as e:
            logger.error(f"🔥 [Checkout] Could not remove orphaned order {order_id}: {e}")
            return False
        logger.warning(f"↩️ [Checkout] Removed orphaned order {order_id}")
        return True

    def _save_profile(self, data: dict[str, Any]) -> None:
        try:
            self.store.upsert('profiles', {
                'user_id': self.state.user_id,
                'full_name': data['full_name'],
                'phone_number': data['phone'],
                'email': data['email'],
            }, on_conflict='user_id')
        except StoreAPIError as e:
            logger.warning(f"⚠️ [Checkout] Profile update skipped for {self.state.user_id}: {e}")


class OrderHistoryService:
    """The signed-in user's orders, newest first, with items and product details"""

    def __init__(self, state: StorefrontSession, store: StoreClient | None = None) -> None:
        self.state = state
        self.store = store or StoreClient(state.access_token)

    def list_orders(self) -> list[Order]:
        rows = self.store.select('orders', filters={'user_id': self.state.user_id}, order=[('created_at', 'desc')])
        return attach_order_items(self.store, rows)


def attach_order_items(store: StoreClient, order_rows: list[dict[str, Any]]) -> list[Order]:
    """Build Orders from rows, joining their items and product names client-side"""
    order_ids = [row['id'] for row in order_rows if row.get('id')]
    item_rows = store.select('order_items', filters={'order_id': ('in', order_ids)}) if order_ids else []

    items_by_order: dict[str, list] = {}
    for row in item_rows:
        try:
            item = create_order_item_from_api(row)
        except StoreDataError as e:
            logger.warning(f"⚠️ [Orders] Skipping malformed order item {row.get('id')}: {e}")
            continue
        items_by_order.setdefault(item.order_id, []).append(item)

    products = ProductCatalogService(store).get_products_by_ids(
        (item.product_id for items in items_by_order.values() for item in items), active_only=False,
    )
    for items in items_by_order.values():
        for item in items:
            product = products.get(item.product_id)
            if product is not None:
                item.product_name = product.name
                item.product_images = list(product.images)

    orders = []
    for row in order_rows:
        try:
            orders.append(create_order_from_api(row, items_by_order.get(row.get('id'), [])))
        except StoreDataError as e:
            logger.warning(f"⚠️ [Orders] Skipping malformed order {row.get('id')}: {e}")
    return orders
