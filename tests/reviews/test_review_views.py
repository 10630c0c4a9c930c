"""
Tests for the review endpoints
"""

from unittest.mock import patch

from django.test import Client, SimpleTestCase

from tests.fakes import InMemoryStore, make_session_state, sign_in_client


class TestReviewViews(SimpleTestCase):
    def setUp(self):
        self.client = Client()
        self.store = InMemoryStore({
            'orders': [{'id': 'order-1', 'user_id': 'user-1', 'status': 'delivered', 'total_amount': '150.00'}],
            'order_items': [{'order_id': 'order-1', 'product_id': 'prod-a', 'quantity': 1, 'price': '100.00'}],
        })
        patcher = patch('apps.reviews.services.StoreClient', return_value=self.store)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_anonymous_eligibility(self):
        response = self.client.get('/reviews/products/prod-a/eligibility/')
        self.assertEqual(response.json()['reason'], 'not_authenticated')

    def test_submit_then_duplicate(self):
        sign_in_client(self.client, make_session_state())
        payload = {'order_id': 'order-1', 'rating': 4, 'comment': 'Solid'}

        first = self.client.post('/reviews/products/prod-a/', payload, content_type='application/json')
        second = self.client.post('/reviews/products/prod-a/', payload, content_type='application/json')

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.json()['reason'], 'already_reviewed')

        listing = self.client.get('/reviews/products/prod-a/').json()
        self.assertEqual(listing['count'], 1)
        self.assertEqual(listing['average_rating'], 4.0)

    def test_unqualified_submission_forbidden(self):
        sign_in_client(self.client, make_session_state(user_id='user-2'))

        response = self.client.post('/reviews/products/prod-a/', {'order_id': 'order-1', 'rating': 5},
                                    content_type='application/json')

        self.assertEqual(response.status_code, 403)
