"""
Storefront Catalog Schemas - Store Row Data Structures
Pure Python dataclasses for products, categories and hero banners.
NO DATABASE MODELS - hosted store only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

LOW_STOCK_THRESHOLD = 5


@dataclass
class Category:
    """Product category"""

    id: str
    name: str
    description: str | None = None
    image_url: str | None = None
    created_at: datetime | None = None


@dataclass
class Product:
    """Product row, optionally with its category name joined in"""

    id: str
    name: str
    price: Decimal
    inventory_count: int = 0
    images: list[str] = field(default_factory=list)
    is_active: bool = True
    description: str | None = None
    compare_price: Decimal | None = None
    category_id: str | None = None
    category_name: str | None = None
    sku: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_low_stock(self) -> bool:
        return self.inventory_count <= LOW_STOCK_THRESHOLD

    @property
    def in_stock(self) -> bool:
        return self.inventory_count > 0

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None

    @property
    def discount_percent(self) -> int:
        """Percentage off compare_price, 0 when there is no discount"""
        if not self.compare_price or self.compare_price <= self.price:
            return 0
        return int((self.compare_price - self.price) * 100 / self.compare_price)


@dataclass
class HeroSection:
    """Landing page banner"""

    id: str
    title: str
    subtitle: str | None = None
    description: str | None = None
    cta_text: str | None = None
    cta_link: str | None = None
    background_image: str | None = None
    is_active: bool = True
    order_index: int = 0
    created_at: datetime | None = None
