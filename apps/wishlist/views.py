# ===============================================================================
# WISHLIST VIEWS 💾
# ===============================================================================

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import StoreAPIError
from apps.common.decorators import require_storefront_session

from .forms import WishlistItemForm
from .services import ALREADY_IN_WISHLIST, WishlistService

logger = logging.getLogger(__name__)


class WishlistItemsView(APIView):
    @require_storefront_session
    def post(self, request: Request) -> Response:
        form = WishlistItemForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        product_id = form.cleaned_data['product_id']
        try:
            result = WishlistService(request.storefront).add_item(product_id)
        except StoreAPIError as e:
            logger.error(f"🔥 [Wishlist] Unable to save {product_id} for {request.storefront.user_id}: {e}")
            return Response({'error': 'Failed to add item to wishlist'}, status=status.HTTP_502_BAD_GATEWAY)

        if result.is_err():
            reason = result.error
            response_status = status.HTTP_200_OK if reason == ALREADY_IN_WISHLIST else status.HTTP_400_BAD_REQUEST
            return Response({'added': False, 'reason': reason}, status=response_status)
        return Response({'added': True, 'product_id': product_id}, status=status.HTTP_201_CREATED)
