"""
Review Services for the storefront
Review eligibility is derived from order history and existing reviews.
"""

from __future__ import annotations

import logging

from apps.api_client.services import StoreAPIError, StoreClient, StoreDataError
from apps.common.types import Err, Ok, Result
from apps.orders.schemas import REVIEWABLE_STATUSES
from apps.users.schemas import StorefrontSession

from .schemas import (
    ALREADY_REVIEWED,
    ELIGIBLE,
    NO_QUALIFYING_ORDER,
    NOT_AUTHENTICATED,
    Review,
    ReviewEligibility,
    clamp_rating,
)
from .serializers import create_review_from_api

logger = logging.getLogger(__name__)

INVALID_ORDER = 'invalid_order'


def average_rating(reviews: list[Review]) -> float:
    if not reviews:
        return 0.0
    return sum(review.rating for review in reviews) / len(reviews)


class ReviewService:
    """
    A user may review a product when one of their shipped or delivered
    orders contains it and they have not reviewed it yet.
    """

    def __init__(self, state: StorefrontSession | None, store: StoreClient | None = None) -> None:
        self.state = state
        self.store = store or StoreClient(state.access_token if state else None)

    def _qualifying_order_ids(self, product_id: str) -> list[str]:
        """Ids of shipped/delivered orders containing the product, newest first"""
        orders = self.store.select(
            'orders', columns='id',
            filters={'user_id': self.state.user_id, 'status': ('in', list(REVIEWABLE_STATUSES))},
            order=[('created_at', 'desc')],
        )
        order_ids = [row['id'] for row in orders]
        if not order_ids:
            return []

        items = self.store.select(
            'order_items', columns='order_id',
            filters={'product_id': product_id, 'order_id': ('in', order_ids)},
        )
        containing = {row['order_id'] for row in items}
        return [order_id for order_id in order_ids if order_id in containing]

    def _has_reviewed(self, product_id: str) -> bool:
        existing = self.store.select_one(
            'reviews', columns='id', filters={'user_id': self.state.user_id, 'product_id': product_id},
        )
        return existing is not None

    def check_eligibility(self, product_id: str) -> ReviewEligibility:
        if self.state is None:
            return ReviewEligibility(can_review=False, reason=NOT_AUTHENTICATED)

        order_ids = self._qualifying_order_ids(product_id)
        if not order_ids:
            return ReviewEligibility(can_review=False, reason=NO_QUALIFYING_ORDER)
        if self._has_reviewed(product_id):
            return ReviewEligibility(can_review=False, reason=ALREADY_REVIEWED)
        return ReviewEligibility(can_review=True, reason=ELIGIBLE, order_id=order_ids[0])

    def submit_review(self, product_id: str, order_id: str, rating: int,
                      comment: str | None = None) -> Result[Review, str]:
        """
        Insert a review after re-checking eligibility.

        Returns Err with a reason when the user may not review through the
        given order. A uniqueness violation from the store means the review
        already exists and is reported as ``already_reviewed``.
        """
        if self.state is None:
            return Err(NOT_AUTHENTICATED)

        order_ids = self._qualifying_order_ids(product_id)
        if not order_ids:
            return Err(NO_QUALIFYING_ORDER)
        if order_id not in order_ids:
            logger.warning(f"⚠️ [Reviews] Order {order_id} does not qualify {self.state.user_id} to review {product_id}")
            return Err(INVALID_ORDER)
        if self._has_reviewed(product_id):
            return Err(ALREADY_REVIEWED)

        row = {
            'user_id': self.state.user_id,
            'product_id': product_id,
            'order_id': order_id,
            'rating': clamp_rating(rating),
            'comment': (comment or '').strip() or None,
        }
        try:
            created = self.store.insert('reviews', row)
        except StoreAPIError as e:
            if e.is_unique_violation:
                logger.info(f"ℹ️ [Reviews] {self.state.user_id} already reviewed {product_id}")
                return Err(ALREADY_REVIEWED)
            raise

        logger.info(f"⭐ [Reviews] {self.state.user_id} rated {product_id} {row['rating']}/5")
        return Ok(create_review_from_api(created[0] if created else {**row, 'id': ''}, self.state.full_name))

    def reviewed_product_ids(self) -> set[str]:
        if self.state is None:
            return set()
        rows = self.store.select('reviews', columns='product_id', filters={'user_id': self.state.user_id})
        return {row['product_id'] for row in rows}

    def list_product_reviews(self, product_id: str) -> list[Review]:
        """Reviews for a product, newest first, with reviewer names from profiles"""
        rows = self.store.select('reviews', filters={'product_id': product_id}, order=[('created_at', 'desc')])
        user_ids = list(dict.fromkeys(row.get('user_id') for row in rows if row.get('user_id')))
        names: dict[str, str] = {}
        if user_ids:
            profiles = self.store.select('profiles', columns='user_id,full_name', filters={'user_id': ('in', user_ids)})
            names = {profile['user_id']: profile.get('full_name') for profile in profiles}

        reviews = []
        for row in rows:
            try:
                reviews.append(create_review_from_api(row, names.get(row.get('user_id'))))
            except StoreDataError as e:
                logger.warning(f"⚠️ [Reviews] Skipping malformed review {row.get('id')}: {e}")
        return reviews
