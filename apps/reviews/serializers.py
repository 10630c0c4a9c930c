from typing import Any

from apps.api_client.services import StoreDataError
from apps.catalog.serializers import parse_optional_datetime

from .schemas import ANONYMOUS_REVIEWER, Review


def create_review_from_api(data: dict[str, Any], reviewer_name: str | None = None) -> Review:
    """Create Review dataclass from a store row"""
    try:
        return Review(
            id=data['id'],
            user_id=data['user_id'],
            product_id=data['product_id'],
            order_id=data.get('order_id'),
            rating=int(data['rating']),
            comment=data.get('comment'),
            created_at=parse_optional_datetime(data.get('created_at')),
            reviewer_name=reviewer_name or ANONYMOUS_REVIEWER,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StoreDataError(f"Malformed review row: {e}") from e


def serialize_review(review: Review) -> dict[str, Any]:
    return {
        'id': review.id,
        'product_id': review.product_id,
        'order_id': review.order_id,
        'rating': review.rating,
        'comment': review.comment,
        'created_at': review.created_at.isoformat() if review.created_at else None,
        'reviewer_name': review.reviewer_name,
    }
