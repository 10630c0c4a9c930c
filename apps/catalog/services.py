"""
Storefront Catalog Services
Loads the active catalog from the hosted store and derives filtered, sorted views of it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from apps.api_client.services import StoreClient, StoreDataError

from .schemas import Category, HeroSection, Product
from .serializers import create_category_from_api, create_hero_section_from_api, create_product_from_api

logger = logging.getLogger(__name__)

SORT_KEYS = ('name', 'price', 'created_at')
SORT_ORDERS = ('asc', 'desc')
DEFAULT_SORT_BY = 'created_at'
DEFAULT_SORT_ORDER = 'desc'

_OLDEST = datetime.min


# ===============================================================================
# FILTERING AND SORTING (pure)
# ===============================================================================

@dataclass(frozen=True)
class CatalogFilters:
    """All filters are optional and combined with AND"""

    category_id: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    search: str | None = None

    def matches(self, product: Product) -> bool:
        if self.category_id and product.category_id != self.category_id:
            return False
        if self.min_price is not None and product.price < self.min_price:
            return False
        if self.max_price is not None and product.price > self.max_price:
            return False
        if self.search:
            needle = self.search.strip().lower()
            in_name = needle in product.name.lower()
            in_description = product.description is not None and needle in product.description.lower()
            if not (in_name or in_description):
                return False
        return True


def _sort_key(sort_by: str) -> Any:
    if sort_by == 'name':
        return lambda product: product.name.lower()
    if sort_by == 'price':
        return lambda product: product.price
    # Naive and aware datetimes never mix within one store response
    return lambda product: (product.created_at is not None, product.created_at or _OLDEST)


def filter_products(
    products: Iterable[Product],
    filters: CatalogFilters | None = None,
    sort_by: str = DEFAULT_SORT_BY,
    sort_order: str = DEFAULT_SORT_ORDER,
) -> list[Product]:
    """
    Derive an ordered view of the product list.

    Unknown sort keys or orders fall back to the defaults. The sort is stable,
    so products with equal keys keep their store order.
    """
    if sort_by not in SORT_KEYS:
        sort_by = DEFAULT_SORT_BY
    if sort_order not in SORT_ORDERS:
        sort_order = DEFAULT_SORT_ORDER

    filters = filters or CatalogFilters()
    matching = [product for product in products if filters.matches(product)]
    return sorted(matching, key=_sort_key(sort_by), reverse=sort_order == 'desc')


# ===============================================================================
# STORE-BACKED LOADERS
# ===============================================================================

class ProductCatalogService:
    """Read access to active products and categories"""

    def __init__(self, store: StoreClient | None = None) -> None:
        self.store = store or StoreClient()

    def load_categories(self) -> list[Category]:
        rows = self.store.select('categories', order=[('name', 'asc')])
        categories = []
        for row in rows:
            try:
                categories.append(create_category_from_api(row))
            except StoreDataError as e:
                logger.warning(f"⚠️ [Catalog] Skipping malformed category {row.get('id')}: {e}")
        return categories

    def _category_names(self) -> dict[str, str]:
        return {category.id: category.name for category in self.load_categories()}

    def _build_products(self, rows: list[dict[str, Any]], category_names: dict[str, str]) -> list[Product]:
        products = []
        for row in rows:
            try:
                product = create_product_from_api(row)
            except StoreDataError as e:
                logger.warning(f"⚠️ [Catalog] Skipping malformed product {row.get('id')}: {e}")
                continue
            if product.category_id and not product.category_name:
                product.category_name = category_names.get(product.category_id)
            products.append(product)
        return products

    def load_products(self) -> list[Product]:
        """All active products, newest first"""
        rows = self.store.select('products', filters={'is_active': True}, order=[('created_at', 'desc')])
        products = self._build_products(rows, self._category_names())
        logger.debug(f"🛍️ [Catalog] Loaded {len(products)} active products")
        return products

    def get_product(self, product_id: str) -> Product | None:
        """A single active product; None when missing, inactive or malformed"""
        row = self.store.select_one('products', filters={'id': product_id, 'is_active': True})
        if row is None:
            return None
        try:
            product = create_product_from_api(row)
        except StoreDataError as e:
            logger.warning(f"⚠️ [Catalog] Product {product_id} is malformed: {e}")
            return None

        if product.category_id:
            category = self.store.select_one('categories', columns='name', filters={'id': product.category_id})
            if category:
                product.category_name = category.get('name')
        return product

    def get_products_by_ids(self, product_ids: Iterable[str], active_only: bool = True) -> dict[str, Product]:
        """Products keyed by id, for client-side joins"""
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return {}
        filters: dict[str, Any] = {'id': ('in', ids)}
        if active_only:
            filters['is_active'] = True
        return {product.id: product for product in self._build_products(self.store.select('products', filters=filters), {})}


class HeroSectionService:
    """Landing page banners"""

    def __init__(self, store: StoreClient | None = None) -> None:
        self.store = store or StoreClient()

    def load_active(self) -> list[HeroSection]:
        rows = self.store.select('hero_sections', filters={'is_active': True}, order=[('order_index', 'asc')])
        sections = []
        for row in rows:
            try:
                sections.append(create_hero_section_from_api(row))
            except StoreDataError as e:
                logger.warning(f"⚠️ [Catalog] Skipping malformed hero section {row.get('id')}: {e}")
        return sections
