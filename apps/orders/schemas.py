"""
Storefront Order Schemas - Store Row Data Structures
Orders, order items and checkout outcomes.
NO DATABASE MODELS - hosted store only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

# ===============================================================================
# ORDER STATUS MACHINE
# ===============================================================================

STATUS_PENDING = 'pending'
STATUS_PROCESSING = 'processing'
STATUS_SHIPPED = 'shipped'
STATUS_DELIVERED = 'delivered'
STATUS_CANCELLED = 'cancelled'

ORDER_STATUSES = (STATUS_PENDING, STATUS_PROCESSING, STATUS_SHIPPED, STATUS_DELIVERED, STATUS_CANCELLED)

# Statuses that make the ordered products reviewable
REVIEWABLE_STATUSES = (STATUS_SHIPPED, STATUS_DELIVERED)

ORDER_TRANSITIONS: dict[str, tuple[str, ...]] = {
    STATUS_PENDING: (STATUS_PROCESSING, STATUS_CANCELLED),
    STATUS_PROCESSING: (STATUS_SHIPPED, STATUS_CANCELLED),
    STATUS_SHIPPED: (STATUS_DELIVERED, STATUS_CANCELLED),
    STATUS_DELIVERED: (),
    STATUS_CANCELLED: (),
}


def can_transition(current: str, new: str) -> bool:
    return new in ORDER_TRANSITIONS.get(current, ())


# ===============================================================================
# ORDER RECORDS
# ===============================================================================

@dataclass
class OrderItem:
    """Order line with the unit price frozen at purchase time"""

    order_id: str
    product_id: str
    quantity: int
    price: Decimal
    id: str | None = None
    product_name: str | None = None
    product_images: list[str] = field(default_factory=list)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Order:
    id: str
    user_id: str
    total_amount: Decimal
    status: str
    shipping_address: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    items: list[OrderItem] = field(default_factory=list)

    @property
    def customer_name(self) -> str:
        return self.shipping_address.get('fullName') or ''

    @property
    def customer_email(self) -> str:
        return self.shipping_address.get('email') or ''

    @property
    def is_terminal(self) -> bool:
        return not ORDER_TRANSITIONS.get(self.status)


# ===============================================================================
# CHECKOUT
# ===============================================================================

@dataclass(frozen=True)
class LineItem:
    """A line resolved at checkout, priced from the product's current price"""

    product_id: str
    product_name: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    subtotal: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    redirect_url: str = '/orders/'


@dataclass(frozen=True)
class CheckoutError:
    """
    Why a checkout did not produce an order.

    ``stage`` is one of auth, validation, in_flight, empty_cart, line_items,
    order or order_items. ``compensated`` reports whether an orphaned order
    row was removed after an order_items failure.
    """

    stage: str
    message: str
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    compensated: bool | None = None
