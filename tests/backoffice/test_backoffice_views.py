"""
Test suite for the admin back-office endpoints
Admin gating, order status updates and store failure handling.
"""

from unittest.mock import patch

from django.test import Client, SimpleTestCase

from tests.fakes import InMemoryStore, make_session_state, product_row, sign_in_client


class TestBackofficeViews(SimpleTestCase):
    def setUp(self):
        self.client = Client()
        self.store = InMemoryStore({
            'products': [product_row('prod-a', 'Headphones', '100.00', inventory_count=2)],
            'orders': [{'id': 'order-1', 'user_id': 'user-1', 'status': 'pending', 'total_amount': '150.00'}],
            'hero_sections': [{'id': 'hero-1', 'title': 'Summer Sale', 'order_index': 0, 'is_active': True}],
        })
        patcher = patch('apps.backoffice.views.StoreClient', return_value=self.store)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _sign_in_admin(self):
        sign_in_client(self.client, make_session_state(user_id='admin-1', is_admin=True))

    def test_anonymous_rejected(self):
        self.assertEqual(self.client.get('/backoffice/dashboard/').status_code, 401)

    def test_non_admin_rejected_before_store_access(self):
        sign_in_client(self.client, make_session_state())

        response = self.client.get('/backoffice/products/')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.store.calls, [])

    def test_dashboard(self):
        self._sign_in_admin()

        body = self.client.get('/backoffice/dashboard/').json()

        self.assertEqual(body['total_products'], 1)
        self.assertEqual(body['total_orders'], 1)
        self.assertEqual(body['total_revenue'], '150.00')

    def test_low_stock_listing(self):
        self._sign_in_admin()

        body = self.client.get('/backoffice/products/low-stock/').json()

        self.assertEqual([p['id'] for p in body['results']], ['prod-a'])

    def test_create_product(self):
        self._sign_in_admin()

        response = self.client.post('/backoffice/products/', {
            'name': 'Desk Lamp', 'price': '45.50', 'inventory_count': 12,
        }, content_type='application/json')

        self.assertEqual(response.status_code, 201)
        created = self.store.rows('products', name='Desk Lamp')[0]
        self.assertTrue(created['is_active'])
        self.assertEqual(created['images'], [])

    def test_invalid_product_rejected(self):
        self._sign_in_admin()

        response = self.client.post('/backoffice/products/', {'name': '', 'price': '-1'},
                                    content_type='application/json')

        self.assertEqual(response.status_code, 400)

    def test_hero_update_without_is_active_keeps_banner_active(self):
        self._sign_in_admin()

        response = self.client.put('/backoffice/hero/hero-1/', {'title': 'Monsoon Sale'},
                                   content_type='application/json')

        self.assertEqual(response.status_code, 200)
        section = self.store.rows('hero_sections', id='hero-1')[0]
        self.assertEqual(section['title'], 'Monsoon Sale')
        self.assertTrue(section['is_active'])

    def test_hero_update_can_deactivate(self):
        self._sign_in_admin()

        self.client.put('/backoffice/hero/hero-1/', {'title': 'Summer Sale', 'is_active': False},
                        content_type='application/json')

        self.assertFalse(self.store.rows('hero_sections', id='hero-1')[0]['is_active'])

    def test_order_status_transition(self):
        self._sign_in_admin()

        ok = self.client.post('/backoffice/orders/order-1/status/', {'status': 'processing'},
                              content_type='application/json')
        rejected = self.client.post('/backoffice/orders/order-1/status/', {'status': 'pending'},
                                    content_type='application/json')

        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.json()['status'], 'processing')
        self.assertEqual(rejected.status_code, 400)

    def test_store_failure_is_bad_gateway(self):
        self._sign_in_admin()
        self.store.fail('products', 'select')

        self.assertEqual(self.client.get('/backoffice/products/').status_code, 502)

    def test_upload_requires_file(self):
        self._sign_in_admin()

        response = self.client.post('/backoffice/uploads/', {})

        self.assertEqual(response.status_code, 400)
