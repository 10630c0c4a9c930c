"""
Storefront Cart Schemas
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


@dataclass
class CartItem:
    """One cart row joined with the product's current name, price and images"""

    product_id: str
    quantity: int
    product_name: str
    price: Decimal
    images: list[str] = field(default_factory=list)
    id: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'product_name': self.product_name,
            'price': str(self.price),
            'images': list(self.images),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartItem:
        return cls(
            id=data.get('id'),
            product_id=data['product_id'],
            quantity=int(data['quantity']),
            product_name=data.get('product_name', ''),
            price=Decimal(str(data['price'])),
            images=list(data.get('images') or []),
        )
