"""
Storefront Order Serializers - Store Row Conversion Functions
"""

from typing import Any

from apps.api_client.services import StoreDataError
from apps.catalog.serializers import parse_decimal, parse_optional_datetime

from .schemas import ORDER_STATUSES, Order, OrderItem


def create_order_item_from_api(data: dict[str, Any]) -> OrderItem:
    """Create OrderItem dataclass from a store row"""
    try:
        return OrderItem(
            id=data.get('id'),
            order_id=data['order_id'],
            product_id=data['product_id'],
            quantity=int(data['quantity']),
            price=parse_decimal(data['price']),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StoreDataError(f"Malformed order item row: {e}") from e


def create_order_from_api(data: dict[str, Any], items: list[OrderItem] | None = None) -> Order:
    """Create Order dataclass from a store row"""
    try:
        status = data['status']
        if status not in ORDER_STATUSES:
            raise StoreDataError(f"Unknown order status: {status}")
        return Order(
            id=data['id'],
            user_id=data['user_id'],
            total_amount=parse_decimal(data['total_amount']),
            status=status,
            shipping_address=dict(data.get('shipping_address') or {}),
            created_at=parse_optional_datetime(data.get('created_at')),
            items=items or [],
        )
    except StoreDataError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise StoreDataError(f"Malformed order row: {e}") from e


def serialize_order(order: Order) -> dict[str, Any]:
    return {
        'id': order.id,
        'user_id': order.user_id,
        'total_amount': str(order.total_amount),
        'status': order.status,
        'shipping_address': order.shipping_address,
        'created_at': order.created_at.isoformat() if order.created_at else None,
        'items': [
            {
                'id': item.id,
                'product_id': item.product_id,
                'product_name': item.product_name,
                'product_images': item.product_images,
                'quantity': item.quantity,
                'price': str(item.price),
            }
            for item in order.items
        ],
    }
