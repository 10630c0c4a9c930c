"""
Order Views for the storefront
Checkout submission and order history.
"""

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import StoreAPIError
from apps.cart.services import CartService
from apps.common.decorators import require_storefront_session

from .forms import BuyNowForm
from .serializers import serialize_order
from .services import CheckoutService, OrderHistoryService

logger = logging.getLogger(__name__)

# Checkout failure stage -> HTTP status
CHECKOUT_ERROR_STATUS = {
    'auth': status.HTTP_401_UNAUTHORIZED,
    'validation': status.HTTP_400_BAD_REQUEST,
    'in_flight': status.HTTP_409_CONFLICT,
    'empty_cart': status.HTTP_400_BAD_REQUEST,
    'line_items': status.HTTP_400_BAD_REQUEST,
    'order': status.HTTP_502_BAD_GATEWAY,
    'order_items': status.HTTP_502_BAD_GATEWAY,
}


class OrderListView(APIView):
    @require_storefront_session
    def get(self, request: Request) -> Response:
        try:
            orders = OrderHistoryService(request.storefront).list_orders()
        except StoreAPIError as e:
            logger.error(f"🔥 [Orders] Unable to load orders for {request.storefront.user_id}: {e}")
            return Response({'error': 'Unable to load orders'}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({'results': [serialize_order(order) for order in orders]})


class CheckoutView(APIView):
    """
    Place an order from the cart, or from a single product when
    ``product_id`` is supplied (buy-now).
    """

    @require_storefront_session
    def post(self, request: Request) -> Response:
        buy_now = BuyNowForm(request.data)
        if not buy_now.is_valid():
            return Response({'error': 'Please correct the highlighted fields', 'stage': 'validation',
                             'errors': buy_now.errors}, status=status.HTTP_400_BAD_REQUEST)
        product_id = buy_now.cleaned_data['product_id'] or None
        quantity = buy_now.cleaned_data['quantity']

        state = request.storefront
        cart = CartService(state, session=request.session)
        result = CheckoutService(state, store=cart.store, cart=cart).place_order(
            request.data, product_id=product_id, quantity=quantity,
        )

        if result.is_err():
            error = result.error
            body = {'error': error.message, 'stage': error.stage}
            if error.field_errors:
                body['errors'] = error.field_errors
            return Response(body, status=CHECKOUT_ERROR_STATUS.get(error.stage, status.HTTP_400_BAD_REQUEST))

        placed = result.unwrap()
        return Response({
            'order_id': placed.order_id,
            'subtotal': str(placed.subtotal),
            'delivery_fee': str(placed.delivery_fee),
            'total_amount': str(placed.total_amount),
            'redirect_url': placed.redirect_url,
        }, status=status.HTTP_201_CREATED)
