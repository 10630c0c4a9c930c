# ===============================================================================
# BACK-OFFICE VIEWS - ADMIN CRUD 🛠️
# ===============================================================================

"""
Admin-only endpoints. Every handler is wrapped in ``require_admin`` so that
non-admin requests are rejected before any store call.
"""

import logging
from dataclasses import asdict
from typing import Any

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import StoreAPIError, StoreClient, StoreDataError
from apps.catalog.serializers import serialize_product
from apps.common.decorators import require_admin
from apps.media.services import DEFAULT_FOLDER, ImageUploadService
from apps.orders.serializers import serialize_order

from .forms import CategoryForm, HeroSectionForm, OrderStatusForm, ProductForm
from .services import (
    CategoryAdminService,
    DashboardService,
    HeroSectionAdminService,
    OrderAdminService,
    ProductAdminService,
)

logger = logging.getLogger(__name__)


def _list_param(data: Any, key: str) -> list[str]:
    if hasattr(data, 'getlist'):
        return data.getlist(key)
    value = data.get(key) or []
    return list(value) if isinstance(value, (list, tuple)) else [value]


class BackofficeAPIView(APIView):
    """Store access with the admin's own token; store failures become 502s"""

    def get_store(self, request: Request) -> StoreClient:
        return StoreClient(request.storefront.access_token)

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, (StoreAPIError, StoreDataError)):
            logger.error(f"🔥 [Backoffice] {self.__class__.__name__} store failure: {exc}")
            return Response({'error': 'The store rejected the request'}, status=status.HTTP_502_BAD_GATEWAY)
        return super().handle_exception(exc)


# ---- Dashboard ----

class DashboardView(BackofficeAPIView):
    @require_admin
    def get(self, request: Request) -> Response:
        stats = DashboardService(self.get_store(request)).get_stats()
        return Response({
            'total_products': stats.total_products,
            'total_users': stats.total_users,
            'total_orders': stats.total_orders,
            'total_revenue': str(stats.total_revenue),
            'recent_orders': [serialize_order(order) for order in stats.recent_orders],
        })


# ---- Products ----

class ProductListView(BackofficeAPIView):
    @require_admin
    def get(self, request: Request) -> Response:
        params = request.query_params
        products = ProductAdminService(self.get_store(request)).list_products(
            search=params.get('search', ''),
            category_id=params.get('category', 'all'),
            status_filter=params.get('status', 'all'),
        )
        return Response({'results': [serialize_product(p) for p in products], 'count': len(products)})

    @require_admin
    def post(self, request: Request) -> Response:
        form = ProductForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        product = ProductAdminService(self.get_store(request)).save_product(
            form.to_row(),
            kept_images=_list_param(request.data, 'images'),
            image_files=request.FILES.getlist('image_files'),
        )
        return Response(serialize_product(product), status=status.HTTP_201_CREATED)


class LowStockProductsView(BackofficeAPIView):
    @require_admin
    def get(self, request: Request) -> Response:
        products = ProductAdminService(self.get_store(request)).low_stock_products()
        return Response({'results': [serialize_product(p) for p in products], 'count': len(products)})


class ProductDetailView(BackofficeAPIView):
    @require_admin
    def get(self, request: Request, product_id: str) -> Response:
        product = ProductAdminService(self.get_store(request)).get_product(product_id)
        if product is None:
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(serialize_product(product))

    @require_admin
    def put(self, request: Request, product_id: str) -> Response:
        form = ProductForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        product = ProductAdminService(self.get_store(request)).save_product(
            form.to_row(),
            kept_images=_list_param(request.data, 'images'),
            image_files=request.FILES.getlist('image_files'),
            product_id=product_id,
        )
        return Response(serialize_product(product))

    @require_admin
    def delete(self, request: Request, product_id: str) -> Response:
        ProductAdminService(self.get_store(request)).delete_product(product_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductToggleView(BackofficeAPIView):
    @require_admin
    def post(self, request: Request, product_id: str) -> Response:
        is_active = ProductAdminService(self.get_store(request)).toggle_active(product_id)
        if is_active is None:
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'id': product_id, 'is_active': is_active})


# ---- Categories ----

class CategoryListView(BackofficeAPIView):
    @require_admin
    def get(self, request: Request) -> Response:
        categories = CategoryAdminService(self.get_store(request)).list_categories(
            search=request.query_params.get('search', ''),
        )
        return Response({'results': [asdict(category) for category in categories]})

    @require_admin
    def post(self, request: Request) -> Response:
        form = CategoryForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)
        category = CategoryAdminService(self.get_store(request)).save_category(
            form.cleaned_data, image_file=request.FILES.get('image'),
        )
        return Response(asdict(category), status=status.HTTP_201_CREATED)


class CategoryDetailView(BackofficeAPIView):
    @require_admin
    def put(self, request: Request, category_id: str) -> Response:
        form = CategoryForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)
        category = CategoryAdminService(self.get_store(request)).save_category(
            form.cleaned_data, image_file=request.FILES.get('image'), category_id=category_id,
        )
        return Response(asdict(category))

    @require_admin
    def delete(self, request: Request, category_id: str) -> Response:
        CategoryAdminService(self.get_store(request)).delete_category(category_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---- Hero sections ----

class HeroSectionListView(BackofficeAPIView):
    @require_admin
    def get(self, request: Request) -> Response:
        sections = HeroSectionAdminService(self.get_store(request)).list_sections()
        return Response({'results': [asdict(section) for section in sections]})

    @require_admin
    def post(self, request: Request) -> Response:
        form = HeroSectionForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)
        section = HeroSectionAdminService(self.get_store(request)).save_section(
            form.to_row(), image_file=request.FILES.get('background_image'),
        )
        return Response(asdict(section), status=status.HTTP_201_CREATED)


class HeroSectionDetailView(BackofficeAPIView):
    @require_admin
    def put(self, request: Request, section_id: str) -> Response:
        form = HeroSectionForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)
        section = HeroSectionAdminService(self.get_store(request)).save_section(
            form.to_row(), image_file=request.FILES.get('background_image'), section_id=section_id,
        )
        return Response(asdict(section))

    @require_admin
    def delete(self, request: Request, section_id: str) -> Response:
        HeroSectionAdminService(self.get_store(request)).delete_section(section_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class HeroSectionToggleView(BackofficeAPIView):
    @require_admin
    def post(self, request: Request, section_id: str) -> Response:
        is_active = HeroSectionAdminService(self.get_store(request)).toggle_active(section_id)
        if is_active is None:
            return Response({'error': 'Hero section not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'id': section_id, 'is_active': is_active})


# ---- Orders ----

class OrderListView(BackofficeAPIView):
    @require_admin
    def get(self, request: Request) -> Response:
        entries = OrderAdminService(self.get_store(request)).list_orders(
            search=request.query_params.get('search', ''),
            status_filter=request.query_params.get('status', 'all'),
        )
        return Response({'results': [
            {**serialize_order(entry.order), 'customer_name': entry.customer_name,
             'customer_email': entry.customer_email}
            for entry in entries
        ]})


class OrderStatusView(BackofficeAPIView):
    @require_admin
    def post(self, request: Request, order_id: str) -> Response:
        form = OrderStatusForm(request.data)
        if not form.is_valid():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        result = OrderAdminService(self.get_store(request)).update_status(order_id, form.cleaned_data['status'])
        if result.is_err():
            return Response({'error': result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(serialize_order(result.unwrap()))


# ---- Image uploads ----

class ImageUploadView(BackofficeAPIView):
    @require_admin
    def post(self, request: Request) -> Response:
        file = request.FILES.get('file')
        if file is None:
            return Response({'error': 'No file provided'}, status=status.HTTP_400_BAD_REQUEST)

        image = ImageUploadService().upload_image(file, folder=request.data.get('folder') or DEFAULT_FOLDER)
        if image is None:
            return Response({'error': 'Upload failed'}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'url': image.url, 'public_id': image.public_id, 'width': image.width, 'height': image.height})
