# ===============================================================================
# CART VIEWS 🛒
# ===============================================================================

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import StoreAPIError
from apps.common.decorators import require_storefront_session
from apps.common.request_ip import get_safe_client_ip

from .forms import AddToCartForm, UpdateQuantityForm
from .services import CartItemUnavailable, CartRateLimiter, CartService

logger = logging.getLogger(__name__)


def cart_payload(cart: CartService) -> dict:
    return {
        'items': [item.to_dict() for item in cart.items],
        'total_items': cart.total_items(),
        'total_price': str(cart.total_price()),
    }


class CartMutationView(APIView):
    """Shared rate limiting and store error handling for cart writes"""

    def _rate_limited(self, request: Request) -> Response | None:
        user_id = request.storefront.user_id
        client_ip = get_safe_client_ip(request)
        if not CartRateLimiter.check_rate_limit(user_id, client_ip):
            return Response({'error': 'Too many cart updates, please slow down'},
                            status=status.HTTP_429_TOO_MANY_REQUESTS)
        CartRateLimiter.record_operation(user_id, client_ip)
        return None

    def _store_error(self, request: Request, e: StoreAPIError) -> Response:
        logger.error(f"🔥 [Cart] Cart update failed for {request.storefront.user_id}: {e}")
        return Response({'error': 'Unable to update cart'}, status=status.HTTP_502_BAD_GATEWAY)

    def _unavailable(self, e: CartItemUnavailable) -> Response:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


class CartView(APIView):
    @require_storefront_session
    def get(self, request: Request) -> Response:
        cart = CartService(request.storefront, session=request.session)
        try:
            cart.load()
        except StoreAPIError as e:
            logger.error(f"🔥 [Cart] Unable to load cart for {request.storefront.user_id}: {e}")
            return Response({'error': 'Unable to load cart'}, status=status.HTTP_502_BAD_GATEWAY)
        return Response(cart_payload(cart))


class CartItemsView(CartMutationView):
    @require_storefront_session
    def post(self, request: Request) -> Response:
        form = AddToCartForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)
        if (limited := self._rate_limited(request)) is not None:
            return limited

        cart = CartService(request.storefront, session=request.session)
        try:
            cart.add_item(form.cleaned_data['product_id'], form.cleaned_data['quantity'])
        except CartItemUnavailable as e:
            return self._unavailable(e)
        except StoreAPIError as e:
            return self._store_error(request, e)
        return Response(cart_payload(cart), status=status.HTTP_201_CREATED)


class CartItemDetailView(CartMutationView):
    @require_storefront_session
    def patch(self, request: Request, product_id: str) -> Response:
        form = UpdateQuantityForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)
        if (limited := self._rate_limited(request)) is not None:
            return limited

        cart = CartService(request.storefront, session=request.session)
        try:
            cart.update_quantity(product_id, form.cleaned_data['quantity'])
        except CartItemUnavailable as e:
            return self._unavailable(e)
        except StoreAPIError as e:
            return self._store_error(request, e)
        return Response(cart_payload(cart))

    @require_storefront_session
    def delete(self, request: Request, product_id: str) -> Response:
        if (limited := self._rate_limited(request)) is not None:
            return limited

        cart = CartService(request.storefront, session=request.session)
        try:
            cart.remove_item(product_id)
        except StoreAPIError as e:
            return self._store_error(request, e)
        return Response(cart_payload(cart))


class CartClearView(CartMutationView):
    @require_storefront_session
    def post(self, request: Request) -> Response:
        cart = CartService(request.storefront, session=request.session)
        try:
            cart.clear()
        except StoreAPIError as e:
            return self._store_error(request, e)
        return Response(cart_payload(cart))
