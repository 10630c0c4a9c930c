"""
Storefront Catalog Serializers - Store Row Conversion Functions
Convert hosted store rows to catalog dataclass instances and back to JSON.
"""

from dataclasses import asdict
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from django.utils.dateparse import parse_datetime

from apps.api_client.services import StoreDataError

from .schemas import Category, HeroSection, Product


def parse_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError) as e:
        raise StoreDataError(f"Invalid decimal value: {value!r}") from e


def parse_optional_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return parse_datetime(value)


def create_category_from_api(data: dict[str, Any]) -> Category:
    """Create Category dataclass from a store row"""
    try:
        return Category(
            id=data['id'],
            name=data['name'],
            description=data.get('description'),
            image_url=data.get('image_url'),
            created_at=parse_optional_datetime(data.get('created_at')),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StoreDataError(f"Malformed category row: {e}") from e


def create_product_from_api(data: dict[str, Any]) -> Product:
    """Create Product dataclass from a store row (with optional embedded category)"""
    try:
        category = data.get('categories') or data.get('category') or {}
        compare_price = data.get('compare_price')
        product = Product(
            id=data['id'],
            name=data['name'],
            price=parse_decimal(data['price']),
            inventory_count=int(data.get('inventory_count') or 0),
            images=list(data.get('images') or []),
            is_active=bool(data.get('is_active', True)),
            description=data.get('description'),
            compare_price=parse_decimal(compare_price) if compare_price is not None else None,
            category_id=data.get('category_id'),
            category_name=category.get('name') if isinstance(category, dict) else None,
            sku=data.get('sku'),
            created_at=parse_optional_datetime(data.get('created_at')),
            updated_at=parse_optional_datetime(data.get('updated_at')),
        )
    except StoreDataError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise StoreDataError(f"Malformed product row: {e}") from e

    if product.price < 0 or product.inventory_count < 0:
        raise StoreDataError(f"Negative price or inventory on product {product.id}")
    return product


def create_hero_section_from_api(data: dict[str, Any]) -> HeroSection:
    """Create HeroSection dataclass from a store row"""
    try:
        return HeroSection(
            id=data['id'],
            title=data['title'],
            subtitle=data.get('subtitle'),
            description=data.get('description'),
            cta_text=data.get('cta_text'),
            cta_link=data.get('cta_link'),
            background_image=data.get('background_image'),
            is_active=bool(data.get('is_active', True)),
            order_index=int(data.get('order_index') or 0),
            created_at=parse_optional_datetime(data.get('created_at')),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StoreDataError(f"Malformed hero section row: {e}") from e


def serialize_product(product: Product) -> dict[str, Any]:
    data = asdict(product)
    data['is_low_stock'] = product.is_low_stock
    data['discount_percent'] = product.discount_percent
    return data
