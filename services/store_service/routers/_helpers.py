"""Shared helpers for store routers: model -> response conversion."""

from typing import Any, Mapping, Optional, Sequence

from services.store_service.catalog import CatalogRegistry, ProductRef
from services.store_service.models import Cart, Order
from services.store_service.schemas import (
    CartItemResponse,
    CartResponse,
    OrderItemResponse,
    OrderResponse,
    PaymentInfoResponse,
    PricingResponse,
    ProductSummary,
)
from services.store_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession


def product_summary(product: Any) -> Optional[ProductSummary]:
    if product is None:
        return None
    return ProductSummary.model_validate(product)


async def cart_response(
    db: AsyncSession,
    registry: CatalogRegistry,
    cart: Optional[Cart],
    message: Optional[str] = None,
) -> CartResponse:
    """Cart view with product summaries; vanished products show as null."""
    if cart is None:
        return CartResponse(message=message)

    products = await registry.find_many(
        db, [(item.product_type, item.product_id) for item in cart.items]
    )
    items = []
    for item in cart.items:
        line = CartItemResponse.model_validate(item)
        line.product = product_summary(
            products.get((item.product_type, item.product_id))
        )
        items.append(line)

    return CartResponse(
        message=message,
        id=cart.id,
        items=items,
        total_amount=cart.total_amount,
    )


def order_response(
    order: Order, products: Optional[Mapping[ProductRef, Any]] = None
) -> OrderResponse:
    products = products or {}
    items = []
    for item in order.items:
        line = OrderItemResponse.model_validate(item)
        line.product = product_summary(
            products.get((item.product_type, item.product_id))
        )
        items.append(line)

    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        items=items,
        shipping_details=order.shipping_details or {},
        payment_info=PaymentInfoResponse(
            method=order.payment_method,
            status=order.payment_status,
            gateway_order_id=order.gateway_order_id,
            gateway_payment_id=order.gateway_payment_id,
            amount_paid=order.amount_paid,
        ),
        pricing=PricingResponse(
            subtotal=order.subtotal,
            delivery_charge=order.delivery_charge,
            tax=order.tax,
            total=order.total,
        ),
        status=order.status,
        notes=order.notes,
        delivery_date=order.delivery_date,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


async def order_responses(
    db: AsyncSession, registry: CatalogRegistry, orders: Sequence[Order]
) -> list[OrderResponse]:
    """Convert orders, joining each line with its live product."""
    products = await order_ops.load_order_products(db, registry, orders)
    return [order_response(order, products) for order in orders]
