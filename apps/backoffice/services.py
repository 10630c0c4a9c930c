"""
Back-office Services
Admin CRUD over products, categories, hero banners and orders, plus dashboard figures.
Callers are admin-gated before any of these run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.utils.translation import gettext as _

from apps.api_client.services import StoreClient, StoreDataError
from apps.catalog.schemas import Category, HeroSection, Product
from apps.catalog.serializers import (
    create_category_from_api,
    create_hero_section_from_api,
    create_product_from_api,
    parse_decimal,
)
from apps.common.types import Err, Ok, Result
from apps.media.services import ImageUploadService
from apps.orders.schemas import ORDER_STATUSES, Order, can_transition
from apps.orders.serializers import create_order_from_api
from apps.orders.services import attach_order_items

logger = logging.getLogger(__name__)

PRODUCT_IMAGE_FOLDER = 'ecommerce/products'
CATEGORY_IMAGE_FOLDER = 'ecommerce/categories'
HERO_IMAGE_FOLDER = 'ecommerce/hero'

RECENT_ORDERS_LIMIT = 10


def _build_all(rows: list[dict[str, Any]], converter: Any, label: str) -> list:
    built = []
    for row in rows:
        try:
            built.append(converter(row))
        except StoreDataError as e:
            logger.warning(f"⚠️ [Backoffice] Skipping malformed {label} {row.get('id')}: {e}")
    return built


def _matches_text(needle: str, *values: str | None) -> bool:
    return any(value is not None and needle in value.lower() for value in values)


# ===============================================================================
# PRODUCTS
# ===============================================================================

def filter_admin_products(products: Iterable[Product], search: str = '', category_id: str = 'all',
                          status_filter: str = 'all') -> list[Product]:
    """Search on name/description/sku plus category and status filters"""
    needle = search.strip().lower()
    results = []
    for product in products:
        if needle and not _matches_text(needle, product.name, product.description, product.sku):
            continue
        if category_id not in ('', 'all') and product.category_id != category_id:
            continue
        if status_filter == 'active' and not product.is_active:
            continue
        if status_filter == 'inactive' and product.is_active:
            continue
        if status_filter == 'low-stock' and not product.is_low_stock:
            continue
        results.append(product)
    return results


def merge_product_images(kept: Iterable[str], uploaded: Iterable[str]) -> list[str]:
    """Kept URLs (minus unsent local previews) followed by new uploads"""
    return [url for url in kept if url and not url.startswith('data:')] + list(uploaded)


class ProductAdminService:
    def __init__(self, store: StoreClient, uploader: ImageUploadService | None = None) -> None:
        self.store = store
        self.uploader = uploader or ImageUploadService()

    def list_products(self, search: str = '', category_id: str = 'all', status_filter: str = 'all') -> list[Product]:
        rows = self.store.select('products', order=[('created_at', 'desc')])
        products = _build_all(rows, create_product_from_api, 'product')
        names = {category.id: category.name for category in
                 _build_all(self.store.select('categories'), create_category_from_api, 'category')}
        for product in products:
            product.category_name = names.get(product.category_id) if product.category_id else None
        return filter_admin_products(products, search, category_id, status_filter)

    def low_stock_products(self) -> list[Product]:
        """Active products with five or fewer units left"""
        return [product for product in self.list_products(status_filter='low-stock') if product.is_active]

    def get_product(self, product_id: str) -> Product | None:
        row = self.store.select_one('products', filters={'id': product_id})
        return create_product_from_api(row) if row else None

    def save_product(self, values: dict[str, Any], kept_images: Iterable[str] = (),
                     image_files: Iterable[Any] = (), product_id: str | None = None) -> Product:
        """Create or update a product; failed image uploads are dropped"""
        uploaded = [image.url for image in self.uploader.upload_images(image_files, folder=PRODUCT_IMAGE_FOLDER)]
        row = {**values, 'images': merge_product_images(kept_images, uploaded)}

        if product_id:
            saved = self.store.update('products', row, filters={'id': product_id})
            logger.info(f"✅ [Backoffice] Updated product {product_id}")
        else:
            saved = self.store.insert('products', row)
            logger.info(f"✅ [Backoffice] Created product {row['name']}")
        if not saved:
            raise StoreDataError("Store returned no product row")
        return create_product_from_api(saved[0])

    def delete_product(self, product_id: str) -> None:
        self.store.delete('products', filters={'id': product_id})
        logger.info(f"🗑️ [Backoffice] Deleted product {product_id}")

    def toggle_active(self, product_id: str) -> bool | None:
        """Flip is_active; returns the new value, or None for an unknown product"""
        row = self.store.select_one('products', columns='is_active', filters={'id': product_id})
        if row is None:
            return None
        is_active = not row.get('is_active', False)
        self.store.update('products', {'is_active': is_active}, filters={'id': product_id})
        logger.info(f"🔄 [Backoffice] Product {product_id} {'activated' if is_active else 'deactivated'}")
        return is_active


# ===============================================================================
# CATEGORIES
# ===============================================================================

class CategoryAdminService:
    def __init__(self, store: StoreClient, uploader: ImageUploadService | None = None) -> None:
        self.store = store
        self.uploader = uploader or ImageUploadService()

    def list_categories(self, search: str = '') -> list[Category]:
        rows = self.store.select('categories', order=[('created_at', 'desc')])
        categories = _build_all(rows, create_category_from_api, 'category')
        needle = search.strip().lower()
        if needle:
            categories = [c for c in categories if _matches_text(needle, c.name, c.description)]
        return categories

    def save_category(self, values: dict[str, Any], image_file: Any = None,
                      category_id: str | None = None) -> Category:
        row = {'name': values['name'], 'description': values.get('description') or None}
        if image_file is not None:
            image = self.uploader.upload_image(image_file, folder=CATEGORY_IMAGE_FOLDER)
            if image is not None:
                row['image_url'] = image.url

        if category_id:
            saved = self.store.update('categories', row, filters={'id': category_id})
        else:
            saved = self.store.insert('categories', row)
        if not saved:
            raise StoreDataError("Store returned no category row")
        logger.info(f"✅ [Backoffice] Saved category {row['name']}")
        return create_category_from_api(saved[0])

    def delete_category(self, category_id: str) -> None:
        self.store.delete('categories', filters={'id': category_id})
        logger.info(f"🗑️ [Backoffice] Deleted category {category_id}")


# ===============================================================================
# HERO SECTIONS
# ===============================================================================

class HeroSectionAdminService:
    def __init__(self, store: StoreClient, uploader: ImageUploadService | None = None) -> None:
        self.store = store
        self.uploader = uploader or ImageUploadService()

    def list_sections(self) -> list[HeroSection]:
        rows = self.store.select('hero_sections', order=[('order_index', 'asc')])
        return _build_all(rows, create_hero_section_from_api, 'hero section')

    def save_section(self, values: dict[str, Any], image_file: Any = None,
                     section_id: str | None = None) -> HeroSection:
        row = dict(values)
        if image_file is not None:
            image = self.uploader.upload_image(image_file, folder=HERO_IMAGE_FOLDER)
            if image is not None:
                row['background_image'] = image.url

        if section_id:
            saved = self.store.update('hero_sections', row, filters={'id': section_id})
        else:
            saved = self.store.insert('hero_sections', row)
        if not saved:
            raise StoreDataError("Store returned no hero section row")
        logger.info(f"✅ [Backoffice] Saved hero section {row.get('title')}")
        return create_hero_section_from_api(saved[0])

    def delete_section(self, section_id: str) -> None:
        self.store.delete('hero_sections', filters={'id': section_id})
        logger.info(f"🗑️ [Backoffice] Deleted hero section {section_id}")

    def toggle_active(self, section_id: str) -> bool | None:
        row = self.store.select_one('hero_sections', columns='is_active', filters={'id': section_id})
        if row is None:
            return None
        is_active = not row.get('is_active', False)
        self.store.update('hero_sections', {'is_active': is_active}, filters={'id': section_id})
        return is_active


# ===============================================================================
# ORDERS
# ===============================================================================

@dataclass
class AdminOrder:
    """An order with the customer's profile name and email"""

    order: Order
    customer_name: str = ''
    customer_email: str = ''


class OrderAdminService:
    def __init__(self, store: StoreClient) -> None:
        self.store = store

    def list_orders(self, search: str = '', status_filter: str = 'all') -> list[AdminOrder]:
        rows = self.store.select('orders', order=[('created_at', 'desc')])
        orders = attach_order_items(self.store, rows)

        user_ids = list(dict.fromkeys(order.user_id for order in orders))
        profiles = {}
        if user_ids:
            for profile in self.store.select('profiles', columns='user_id,full_name,email',
                                             filters={'user_id': ('in', user_ids)}):
                profiles[profile['user_id']] = profile

        needle = search.strip().lower()
        results = []
        for order in orders:
            profile = profiles.get(order.user_id, {})
            entry = AdminOrder(
                order=order,
                customer_name=profile.get('full_name') or order.customer_name,
                customer_email=profile.get('email') or order.customer_email,
            )
            if needle and not _matches_text(needle, order.id, entry.customer_name, entry.customer_email):
                continue
            if status_filter not in ('', 'all') and order.status != status_filter:
                continue
            results.append(entry)
        return results

    def update_status(self, order_id: str, new_status: str) -> Result[Order, str]:
        """Move an order along pending → processing → shipped → delivered, or cancel it"""
        if new_status not in ORDER_STATUSES:
            return Err(_('Unknown order status: %(status)s') % {'status': new_status})

        row = self.store.select_one('orders', filters={'id': order_id})
        if row is None:
            return Err(_('Order not found'))
        current = create_order_from_api(row)

        if not can_transition(current.status, new_status):
            logger.warning(f"⚠️ [Backoffice] Rejected order {order_id} transition {current.status} → {new_status}")
            return Err(_('Cannot change order status from %(current)s to %(new)s') % {
                'current': current.status, 'new': new_status,
            })

        updated = self.store.update('orders', {'status': new_status}, filters={'id': order_id})
        logger.info(f"📦 [Backoffice] Order {order_id} {current.status} → {new_status}")
        return Ok(create_order_from_api(updated[0]) if updated else current)


# ===============================================================================
# DASHBOARD
# ===============================================================================

@dataclass
class DashboardStats:
    total_products: int
    total_users: int
    total_orders: int
    total_revenue: Decimal
    recent_orders: list[Order] = field(default_factory=list)


class DashboardService:
    def __init__(self, store: StoreClient) -> None:
        self.store = store

    def get_stats(self) -> DashboardStats:
        revenue = Decimal('0')
        for row in self.store.select('orders', columns='total_amount'):
            try:
                revenue += parse_decimal(row.get('total_amount', 0))
            except StoreDataError as e:
                logger.warning(f"⚠️ [Backoffice] Ignoring order amount in revenue: {e}")

        recent_rows = self.store.select('orders', order=[('created_at', 'desc')], limit=RECENT_ORDERS_LIMIT)
        return DashboardStats(
            total_products=self.store.count('products'),
            total_users=self.store.count('profiles'),
            total_orders=self.store.count('orders'),
            total_revenue=revenue,
            recent_orders=_build_all(recent_rows, create_order_from_api, 'order'),
        )
