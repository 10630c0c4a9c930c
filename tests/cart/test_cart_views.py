"""
Test suite for cart and checkout endpoints
Requests go through the full middleware stack; the store client is patched.
"""

import json
from unittest.mock import patch

from django.core.cache import cache
from django.test import Client, SimpleTestCase, override_settings

from apps.cart.services import CartRateLimiter
from tests.fakes import InMemoryStore, make_session_state, product_row, sign_in_client

CHECKOUT_FORM = {
    'email': 'asha@example.com',
    'phone': '9876543210',
    'full_name': 'Asha Shopper',
    'address': '221B Residency Road',
    'city': 'Bengaluru',
    'state': 'Karnataka',
    'zip_code': '560025',
    'country': 'India',
    'payment_method': 'upi',
    'delivery_method': 'express',
}


@override_settings(SESSION_ENGINE='django.contrib.sessions.backends.cache')
class TestCartViews(SimpleTestCase):
    def setUp(self):
        self.client = Client()
        self.store = InMemoryStore({'products': [
            product_row('prod-a', 'Headphones', '100.00'),
            product_row('prod-b', 'Speaker', '75.00'),
        ]})
        patcher = patch('apps.cart.services.StoreClient', return_value=self.store)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _post(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_cart_requires_sign_in(self):
        response = self.client.get('/cart/')
        self.assertEqual(response.status_code, 401)

    def test_add_and_view_cart(self):
        sign_in_client(self.client, make_session_state())

        response = self._post('/cart/items/', {'product_id': 'prod-a', 'quantity': 2})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['total_items'], 2)

        response = self.client.get('/cart/')
        self.assertEqual(response.json()['total_price'], '200.00')

    def test_invalid_quantity_rejected(self):
        sign_in_client(self.client, make_session_state())

        response = self._post('/cart/items/', {'product_id': 'prod-a', 'quantity': 0})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.store.rows('cart_items'), [])

    def test_patch_and_delete_item(self):
        sign_in_client(self.client, make_session_state())
        self._post('/cart/items/', {'product_id': 'prod-a', 'quantity': 1})

        response = self.client.patch('/cart/items/prod-a/', data=json.dumps({'quantity': 4}),
                                     content_type='application/json')
        self.assertEqual(response.json()['total_items'], 4)

        response = self.client.delete('/cart/items/prod-a/')
        self.assertEqual(response.json()['items'], [])

    def test_rate_limited_mutation(self):
        sign_in_client(self.client, make_session_state())
        cache.set('cart_rate_limit:user-1', CartRateLimiter.OPERATIONS_LIMIT, 60)

        response = self._post('/cart/items/', {'product_id': 'prod-a', 'quantity': 1})

        self.assertEqual(response.status_code, 429)

    def test_store_failure_is_bad_gateway(self):
        sign_in_client(self.client, make_session_state())
        self.store.fail('cart_items', 'upsert')

        response = self._post('/cart/items/', {'product_id': 'prod-a', 'quantity': 1})

        self.assertEqual(response.status_code, 502)

    def test_checkout_from_cart(self):
        sign_in_client(self.client, make_session_state())
        self._post('/cart/items/', {'product_id': 'prod-a', 'quantity': 1})

        response = self._post('/orders/checkout/', CHECKOUT_FORM)

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['total_amount'], '200.00')
        self.assertEqual(body['redirect_url'], '/orders/')
        self.assertEqual(self.store.rows('cart_items'), [])

    def test_buy_now_checkout(self):
        sign_in_client(self.client, make_session_state())

        response = self._post('/orders/checkout/', {**CHECKOUT_FORM, 'product_id': 'prod-b', 'quantity': 2})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['subtotal'], '150.00')

    def test_buy_now_zero_quantity_rejected(self):
        sign_in_client(self.client, make_session_state())

        response = self._post('/orders/checkout/', {**CHECKOUT_FORM, 'product_id': 'prod-b', 'quantity': 0})

        self.assertEqual(response.status_code, 400)
        self.assertIn('quantity', response.json()['errors'])
        self.assertEqual(self.store.rows('orders'), [])

    def test_buy_now_fractional_quantity_rejected(self):
        sign_in_client(self.client, make_session_state())

        response = self._post('/orders/checkout/', {**CHECKOUT_FORM, 'product_id': 'prod-b', 'quantity': 2.9})

        self.assertEqual(response.status_code, 400)
        self.assertIn('quantity', response.json()['errors'])
        self.assertEqual(self.store.rows('orders'), [])

    def test_buy_now_missing_quantity_defaults_to_one(self):
        sign_in_client(self.client, make_session_state())

        response = self._post('/orders/checkout/', {**CHECKOUT_FORM, 'product_id': 'prod-b', 'quantity': ''})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['subtotal'], '75.00')

    def test_buy_now_beyond_stock_rejected(self):
        sign_in_client(self.client, make_session_state())

        response = self._post('/orders/checkout/', {**CHECKOUT_FORM, 'product_id': 'prod-b', 'quantity': 11})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['stage'], 'line_items')
        self.assertEqual(self.store.rows('orders'), [])

    def test_add_out_of_stock_item_rejected(self):
        sign_in_client(self.client, make_session_state())
        self.store.update('products', {'inventory_count': 0}, filters={'id': 'prod-a'})

        response = self._post('/cart/items/', {'product_id': 'prod-a', 'quantity': 1})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.store.rows('cart_items'), [])

    def test_checkout_validation_errors(self):
        sign_in_client(self.client, make_session_state())
        self._post('/cart/items/', {'product_id': 'prod-a', 'quantity': 1})

        response = self._post('/orders/checkout/', {**CHECKOUT_FORM, 'zip_code': '12'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['stage'], 'validation')
        self.assertIn('zip_code', response.json()['errors'])

    def test_empty_cart_checkout(self):
        sign_in_client(self.client, make_session_state())

        response = self._post('/orders/checkout/', CHECKOUT_FORM)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['stage'], 'empty_cart')

    def test_order_history_lists_placed_order(self):
        sign_in_client(self.client, make_session_state())
        self._post('/orders/checkout/', {**CHECKOUT_FORM, 'product_id': 'prod-a', 'quantity': 1})

        with patch('apps.orders.services.StoreClient', return_value=self.store):
            response = self.client.get('/orders/')

        orders = response.json()['results']
        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0]['status'], 'pending')
        self.assertEqual(orders[0]['items'][0]['product_name'], 'Headphones')
