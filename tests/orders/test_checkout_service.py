"""
Test suite for the checkout pipeline
Cart and buy-now checkouts, validation, compensation and the in-flight guard.
"""

from decimal import Decimal

from django.core.cache import cache
from django.test import SimpleTestCase

from apps.cart.services import CartService
from apps.orders.schemas import STATUS_PENDING
from apps.orders.services import CheckoutService, delivery_fee_for
from tests.fakes import InMemoryStore, make_session_state, product_row

VALID_FORM = {
    'email': 'asha@example.com',
    'phone': '9876543210',
    'full_name': 'Asha Shopper',
    'address': '221B Residency Road',
    'city': 'Bengaluru',
    'state': 'Karnataka',
    'zip_code': '560025',
    'country': 'India',
    'payment_method': 'cash_on_delivery',
    'delivery_method': 'standard',
    'notes': '',
}


class TestDeliveryFees(SimpleTestCase):
    def test_fixed_fees(self):
        self.assertEqual(delivery_fee_for('standard'), Decimal('50'))
        self.assertEqual(delivery_fee_for('express'), Decimal('100'))
        self.assertEqual(delivery_fee_for('overnight'), Decimal('200'))

    def test_unknown_method_charged_as_standard(self):
        self.assertEqual(delivery_fee_for('drone'), Decimal('50'))


class TestCheckoutService(SimpleTestCase):
    """Checkout against the in-memory store"""

    def setUp(self):
        self.store = InMemoryStore({'products': [
            product_row('prod-a', 'Headphones', '100.00'),
            product_row('prod-b', 'Speaker', '75.00'),
        ]})
        self.state = make_session_state()
        self.cart = CartService(self.state, self.store)

    def _checkout(self, form=None, **kwargs):
        service = CheckoutService(self.state, store=self.store, cart=self.cart)
        return service.place_order(form or dict(VALID_FORM), **kwargs)

    def test_cart_checkout_totals_and_clears_cart(self):
        self.cart.add_item('prod-a', 2)

        result = self._checkout()

        self.assertTrue(result.is_ok())
        placed = result.unwrap()
        self.assertEqual(placed.subtotal, Decimal('200.00'))
        self.assertEqual(placed.delivery_fee, Decimal('50'))
        self.assertEqual(placed.total_amount, Decimal('250.00'))
        self.assertEqual(placed.redirect_url, '/orders/')

        orders = self.store.rows('orders')
        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0]['status'], STATUS_PENDING)
        self.assertEqual(orders[0]['total_amount'], Decimal('250.00'))

        items = self.store.rows('order_items', order_id=placed.order_id)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]['quantity'], 2)
        self.assertEqual(items[0]['price'], Decimal('100.00'))

        self.assertEqual(self.store.rows('cart_items'), [])

    def test_buy_now_leaves_cart_untouched(self):
        self.cart.add_item('prod-a', 1)
        form = {**VALID_FORM, 'delivery_method': 'overnight'}

        result = self._checkout(form, product_id='prod-b', quantity=3)

        placed = result.unwrap()
        self.assertEqual(placed.subtotal, Decimal('225.00'))
        self.assertEqual(placed.delivery_fee, Decimal('200'))
        self.assertEqual(placed.total_amount, Decimal('425.00'))
        self.assertEqual(len(self.store.rows('cart_items', user_id='user-1')), 1)

    def test_shipping_snapshot_recorded(self):
        self.cart.add_item('prod-a', 1)

        placed = self._checkout().unwrap()

        snapshot = self.store.rows('orders', id=placed.order_id)[0]['shipping_address']
        self.assertEqual(snapshot['fullName'], 'Asha Shopper')
        self.assertEqual(snapshot['zipCode'], '560025')
        self.assertEqual(snapshot['paymentMethod'], 'cash_on_delivery')
        self.assertEqual(snapshot['deliveryFee'], Decimal('50'))
        self.assertEqual(snapshot['subtotal'], Decimal('100.00'))

    def test_country_defaults_when_blank(self):
        self.cart.add_item('prod-a', 1)

        placed = self._checkout({**VALID_FORM, 'country': ''}).unwrap()

        snapshot = self.store.rows('orders', id=placed.order_id)[0]['shipping_address']
        self.assertEqual(snapshot['country'], 'India')

    def test_short_phone_fails_validation_without_store_writes(self):
        self.cart.add_item('prod-a', 1)
        calls_before = len(self.store.calls)

        result = self._checkout({**VALID_FORM, 'phone': '12345'})

        self.assertTrue(result.is_err())
        self.assertEqual(result.error.stage, 'validation')
        self.assertIn('phone', result.error.field_errors)
        self.assertEqual(len(self.store.calls), calls_before)
        self.assertEqual(self.store.rows('orders'), [])

    def test_buy_now_requires_positive_quantity(self):
        result = self._checkout(product_id='prod-b', quantity=0)

        self.assertEqual(result.error.stage, 'validation')
        self.assertIn('quantity', result.error.field_errors)

    def test_empty_cart_denied(self):
        result = self._checkout()

        self.assertEqual(result.error.stage, 'empty_cart')
        self.assertEqual(self.store.rows('orders'), [])

    def test_unavailable_buy_now_product(self):
        result = self._checkout(product_id='missing', quantity=1)

        self.assertEqual(result.error.stage, 'line_items')

    def test_out_of_stock_buy_now_product(self):
        self.store.update('products', {'inventory_count': 0}, filters={'id': 'prod-b'})

        result = self._checkout(product_id='prod-b', quantity=1)

        self.assertEqual(result.error.stage, 'line_items')
        self.assertEqual(self.store.rows('orders'), [])

    def test_buy_now_quantity_capped_at_stock(self):
        self.store.update('products', {'inventory_count': 3}, filters={'id': 'prod-b'})

        over = self._checkout(product_id='prod-b', quantity=4)
        exact = self._checkout(product_id='prod-b', quantity=3)

        self.assertEqual(over.error.stage, 'line_items')
        self.assertEqual(exact.unwrap().subtotal, Decimal('225.00'))
        self.assertEqual(len(self.store.rows('orders')), 1)

    def test_order_insert_failure_keeps_cart(self):
        self.cart.add_item('prod-a', 1)
        self.store.fail('orders', 'insert')

        result = self._checkout()

        self.assertEqual(result.error.stage, 'order')
        self.assertEqual(self.store.rows('order_items'), [])
        self.assertEqual(len(self.store.rows('cart_items')), 1)

    def test_order_items_failure_removes_orphaned_order(self):
        self.cart.add_item('prod-a', 1)
        self.store.fail('order_items', 'insert')

        result = self._checkout()

        self.assertEqual(result.error.stage, 'order_items')
        self.assertTrue(result.error.compensated)
        self.assertEqual(self.store.rows('orders'), [])
        self.assertEqual(len(self.store.rows('cart_items')), 1)

    def test_failed_compensation_is_reported(self):
        self.cart.add_item('prod-a', 1)
        self.store.fail('order_items', 'insert')
        self.store.fail('orders', 'delete')

        result = self._checkout()

        self.assertFalse(result.error.compensated)

    def test_price_frozen_at_submission(self):
        self.cart.add_item('prod-a', 1)
        placed = self._checkout().unwrap()

        self.store.update('products', {'price': '999.00'}, filters={'id': 'prod-a'})

        item = self.store.rows('order_items', order_id=placed.order_id)[0]
        self.assertEqual(item['price'], Decimal('100.00'))

    def test_profile_saved_from_checkout(self):
        self.cart.add_item('prod-a', 1)

        self._checkout()

        profile = self.store.rows('profiles', user_id='user-1')[0]
        self.assertEqual(profile['phone_number'], '9876543210')

    def test_profile_failure_does_not_fail_checkout(self):
        self.cart.add_item('prod-a', 1)
        self.store.fail('profiles', 'upsert')

        self.assertTrue(self._checkout().is_ok())

    def test_cart_clear_failure_still_places_order(self):
        self.cart.add_item('prod-a', 1)
        self.store.fail('cart_items', 'delete')

        self.assertTrue(self._checkout().is_ok())
        self.assertEqual(len(self.store.rows('orders')), 1)

    def test_concurrent_submission_rejected(self):
        self.cart.add_item('prod-a', 1)
        cache.add(CheckoutService.LOCK_KEY.format(user_id='user-1'), True, 30)

        result = self._checkout()

        self.assertEqual(result.error.stage, 'in_flight')
        self.assertEqual(self.store.rows('orders'), [])

    def test_lock_released_after_checkout(self):
        self.cart.add_item('prod-a', 1)
        self._checkout()

        self.assertIsNone(cache.get(CheckoutService.LOCK_KEY.format(user_id='user-1')))

    def test_anonymous_checkout_denied(self):
        result = CheckoutService(None, store=self.store).place_order(dict(VALID_FORM))

        self.assertEqual(result.error.stage, 'auth')
