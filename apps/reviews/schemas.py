"""
Review Schemas
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

MIN_RATING = 1
MAX_RATING = 5

# Eligibility reasons
NOT_AUTHENTICATED = 'not_authenticated'
NO_QUALIFYING_ORDER = 'no_qualifying_order'
ALREADY_REVIEWED = 'already_reviewed'
ELIGIBLE = 'eligible'

ANONYMOUS_REVIEWER = 'Anonymous User'


@dataclass
class Review:
    id: str
    user_id: str
    product_id: str
    order_id: str | None
    rating: int
    comment: str | None = None
    created_at: datetime | None = None
    reviewer_name: str = ANONYMOUS_REVIEWER


@dataclass(frozen=True)
class ReviewEligibility:
    """Whether the user may review a product, and through which order"""

    can_review: bool
    reason: str
    order_id: str | None = None


def clamp_rating(rating: int) -> int:
    return max(MIN_RATING, min(MAX_RATING, int(rating)))
