# ===============================================================================
# REVIEW VIEWS ⭐
# ===============================================================================

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import StoreAPIError
from apps.common.decorators import require_storefront_session

from .forms import ReviewForm
from .schemas import ALREADY_REVIEWED
from .serializers import serialize_review
from .services import ReviewService, average_rating

logger = logging.getLogger(__name__)


class ProductReviewsView(APIView):
    def get(self, request: Request, product_id: str) -> Response:
        try:
            reviews = ReviewService(getattr(request, 'storefront', None)).list_product_reviews(product_id)
        except StoreAPIError as e:
            logger.error(f"🔥 [Reviews] Unable to load reviews for {product_id}: {e}")
            return Response({'error': 'Unable to load reviews'}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({
            'results': [serialize_review(review) for review in reviews],
            'count': len(reviews),
            'average_rating': round(average_rating(reviews), 1),
        })

    @require_storefront_session
    def post(self, request: Request, product_id: str) -> Response:
        form = ReviewForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = ReviewService(request.storefront).submit_review(
                product_id,
                form.cleaned_data['order_id'],
                form.cleaned_data['rating'],
                form.cleaned_data['comment'],
            )
        except StoreAPIError as e:
            logger.error(f"🔥 [Reviews] Review submission failed for {product_id}: {e}")
            return Response({'error': 'Failed to submit review'}, status=status.HTTP_502_BAD_GATEWAY)

        if result.is_err():
            reason = result.error
            response_status = status.HTTP_409_CONFLICT if reason == ALREADY_REVIEWED else status.HTTP_403_FORBIDDEN
            return Response({'error': reason, 'reason': reason}, status=response_status)

        return Response(serialize_review(result.unwrap()), status=status.HTTP_201_CREATED)


class ReviewEligibilityView(APIView):
    def get(self, request: Request, product_id: str) -> Response:
        try:
            eligibility = ReviewService(getattr(request, 'storefront', None)).check_eligibility(product_id)
        except StoreAPIError as e:
            logger.error(f"🔥 [Reviews] Eligibility check failed for {product_id}: {e}")
            return Response({'error': 'Unable to check review eligibility'}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({
            'can_review': eligibility.can_review,
            'reason': eligibility.reason,
            'order_id': eligibility.order_id,
        })
