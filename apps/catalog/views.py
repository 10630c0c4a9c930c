# ===============================================================================
# STOREFRONT CATALOG VIEWS 🛍️
# ===============================================================================

"""
Public catalog endpoints: product listing with client-side filtering,
product detail, categories and landing page banners.
"""

import logging
from dataclasses import asdict
from decimal import Decimal, InvalidOperation

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import StoreAPIError

from .serializers import serialize_product
from .services import CatalogFilters, HeroSectionService, ProductCatalogService, filter_products

logger = logging.getLogger(__name__)


def _parse_price(value: str | None, field: str) -> Decimal | None:
    if value in (None, ''):
        return None
    try:
        price = Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"{field} must be a number") from e
    if not price.is_finite():
        raise ValueError(f"{field} must be a number")
    return price


class ProductListView(APIView):
    def get(self, request: Request) -> Response:
        params = request.query_params
        try:
            filters = CatalogFilters(
                category_id=params.get('category') or None,
                min_price=_parse_price(params.get('min_price'), 'min_price'),
                max_price=_parse_price(params.get('max_price'), 'max_price'),
                search=params.get('search') or None,
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            products = ProductCatalogService().load_products()
        except StoreAPIError as e:
            logger.error(f"🔥 [Catalog] Unable to load products: {e}")
            return Response({'error': 'Unable to load products'}, status=status.HTTP_502_BAD_GATEWAY)

        results = filter_products(
            products, filters,
            sort_by=params.get('sort_by', 'created_at'),
            sort_order=params.get('sort_order', 'desc'),
        )
        return Response({
            'results': [serialize_product(product) for product in results],
            'count': len(results),
        })


class ProductDetailView(APIView):
    def get(self, request: Request, product_id: str) -> Response:
        try:
            product = ProductCatalogService().get_product(product_id)
        except StoreAPIError as e:
            logger.error(f"🔥 [Catalog] Unable to load product {product_id}: {e}")
            return Response({'error': 'Unable to load product'}, status=status.HTTP_502_BAD_GATEWAY)

        if product is None:
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(serialize_product(product))


class CategoryListView(APIView):
    def get(self, request: Request) -> Response:
        try:
            categories = ProductCatalogService().load_categories()
        except StoreAPIError as e:
            logger.error(f"🔥 [Catalog] Unable to load categories: {e}")
            return Response({'error': 'Unable to load categories'}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({'results': [asdict(category) for category in categories]})


class HeroSectionListView(APIView):
    def get(self, request: Request) -> Response:
        try:
            sections = HeroSectionService().load_active()
        except StoreAPIError as e:
            logger.error(f"🔥 [Catalog] Unable to load hero sections: {e}")
            return Response({'error': 'Unable to load hero sections'}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({'results': [asdict(section) for section in sections]})
